"""
Configuration constants for COLLADA geometry to polygon mesh conversion.

All the magic numbers and names live here. Change a default once and every
import picks it up.
"""

import numpy as np

__version__ = "1.0.0"

# ============================================================================
# Node Naming
# ============================================================================

# Name used for a mesh node when the source geometry has no name
DEFAULT_GEOMETRY_NAME = "Geometry"

# Base name for the per-primitive group id nodes
GROUP_ID_NAME = "GroupId"

# Separator between the segments of a node path (e.g. "|pCube1|pCubeShape1")
NODE_PATH_SEPARATOR = "|"

# ============================================================================
# Units
# ============================================================================

# Scale applied to every raw position triple before it is written.
# 1.0 keeps the document's units untouched.
LINEAR_UNIT_SCALE = 1.0

# ============================================================================
# Value Streams
# ============================================================================

# Numeric encodings a value stream may use. Anything else can't be read.
# Maps the descriptor's type name to the numpy dtype.
VALUE_TYPES = {
    "float": np.float32,
    "double": np.float64,
}

# Positions and normals are always x, y, z
POSITION_STRIDE = 3
NORMAL_STRIDE = 3

# Only two UV components are written; other strides produce a warning
UV_STRIDE = 2

# ============================================================================
# Color Representation
# ============================================================================

# Values of the target application's color representation enum
COLOR_REPRESENTATION_A = 1
COLOR_REPRESENTATION_RGBA = 2
COLOR_REPRESENTATION_RGB = 3

# ============================================================================
# Output
# ============================================================================

# Default output filename suffix: {input_name}_polymesh.json
DEFAULT_OUTPUT_SUFFIX = "_polymesh"

# Decimal places kept for float values in the JSON output
JSON_COORDINATE_PRECISION = 6
