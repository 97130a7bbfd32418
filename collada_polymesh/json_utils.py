"""
JSON formatting utilities.

Mesh output is mostly numbers: vertex triples, edge pairs, id lists. These
helpers turn numpy data into plain JSON values and keep every innermost
numeric array on one line while the document structure stays indented.
"""

import json
import re
from typing import Any

import numpy as np

# An innermost array of numbers that json.dumps spread over several lines
_NUMERIC_ARRAY = re.compile(r'\[\s*\n\s*([\d\.\-\+eE,\s]+?)\n\s*\]')


def to_jsonable(data: Any, precision: int = 6) -> Any:
    """
    Convert numpy arrays and scalars (recursively) to JSON-ready values.

    Floats are rounded to `precision` decimal places. float32 values would
    otherwise print with noise digits (0.1 -> 0.10000000149011612).

    Args:
        data: Nested dicts/lists/tuples/numpy values
        precision: Decimal places kept for floats

    Returns:
        The same structure made of dict, list, int, float, str, bool and None
    """
    if isinstance(data, np.ndarray):
        return to_jsonable(data.tolist(), precision)
    if isinstance(data, dict):
        return {str(key): to_jsonable(value, precision) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item, precision) for item in data]
    if isinstance(data, (bool, np.bool_)):
        return bool(data)
    if isinstance(data, (int, np.integer)):
        return int(data)
    if isinstance(data, (float, np.floating)):
        return round(float(data), precision)
    return data


def dumps_compact_arrays(data: Any, indent: int = 2) -> str:
    """
    Format JSON with numeric arrays on single lines.

    Standard json.dumps() with indent spreads every array over lines:
        "vertices": [
          [
            0.0,
            1.0,
            0.0
          ]
        ]

    This keeps the innermost number arrays compact:
        "vertices": [
          [0.0, 1.0, 0.0]
        ]

    Args:
        data: Data structure to serialize (already JSON-ready)
        indent: Number of spaces for indentation (default: 2)

    Returns:
        JSON string with compact numeric arrays and indented structure
    """
    json_str = json.dumps(data, indent=indent, ensure_ascii=False)
    return _NUMERIC_ARRAY.sub(
        lambda m: '[' + re.sub(r'\s+', ' ', m.group(1).strip()) + ']',
        json_str
    )
