"""
Hole winding correction.

A polygon hole has to wind the opposite way of its polygon. We compare the
two boundaries with the normal spanned by their first three vertices; if
both normals point into the same half-space the hole gets reversed.

Only three vertices per boundary are used. Planarity and convexity are not
checked.
"""

from typing import List, Sequence

import numpy as np


def winding_normal(points) -> np.ndarray:
    """
    Normal of the winding through the first three points.

    normal = (p1 - p0) x (p2 - p0)
    """
    p = np.asarray(points, dtype=np.float64)[:3]
    return np.cross(p[1] - p[0], p[2] - p[0])


def needs_flip(parent_points, hole_points) -> bool:
    """
    Tell whether a hole winds the same way as its parent polygon.

    Args:
        parent_points: The parent polygon's first three vertex positions
        hole_points: The hole's first three vertex positions

    Returns:
        True if the hole must be reversed (dot of the normals is positive)
    """
    return float(np.dot(winding_normal(parent_points), winding_normal(hole_points))) > 0


def flip_edge_refs(edge_refs: Sequence[int]) -> List[int]:
    """
    Reverse a boundary given as signed edge references.

    The order is reversed and every reference changes direction:
    i becomes -(i+1) and -(i+1) becomes i.
    """
    return [-(ref + 1) for ref in reversed(edge_refs)]


def flip_corner_ids(ids: Sequence[int]) -> List[int]:
    """
    Reorder per-corner attribute ids to match a flipped boundary.

    A boundary v0, v1, ..., vn-1 walked backwards starts at v0 again and
    visits vn-1, ..., v1, so the first corner stays in place.
    """
    if not ids:
        return []
    return [ids[0]] + list(reversed(ids[1:]))
