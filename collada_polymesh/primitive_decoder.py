"""
Primitive decoders: from index streams to faces.

Every primitive shape is reduced to a sequence of closed loops over slots of
its position stream:

- polygons / polylist: one loop per grouped vertex count, negative counts
  are holes of the polygon right before them
- triangles: one loop per three consecutive slots
- triangle fans: k vertices -> k-2 loops (apex, v[i], v[i+1])
- triangle strips: k vertices -> k-2 loops (v[i], v[i+1], v[i+2])

The same loops drive both passes. populate_edges() feeds every loop edge
into the EdgeTable, then decode_primitive() walks them again, looks up the
signed edge references and slices the UV/color ids for each face.
"""

import logging
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from .attribute_slicer import AttributeSlicer
from .edge_table import EdgeTable
from .errors import MalformedPrimitiveError, UnsupportedPrimitiveError
from .hole_orientation import flip_corner_ids, flip_edge_refs, needs_flip
from .mesh_data import (
    Mesh,
    MeshPrimitive,
    PrimitiveType,
    POLYGON_TYPES,
    TRIANGLE_GROUP_TYPES,
)
from .polymesh import FaceAttribute, FaceHole, PolyFace

logger = logging.getLogger(__name__)


class Loop(NamedTuple):
    """
    A closed boundary found in a primitive.

    Attributes:
        slots: Positions in the primitive's position stream, in walk order
        is_hole: True for an inner boundary of the previous polygon
        group_end: Position cursor once the loop's group is consumed
    """
    slots: Tuple[int, ...]
    is_hole: bool
    group_end: int


# ============================================================================
# Loop walkers (one per primitive shape)
# ============================================================================

def _polygon_loops(primitive: MeshPrimitive) -> Iterator[Loop]:
    cursor = 0
    for count in primitive.group_counts():
        size = abs(count)
        yield Loop(tuple(range(cursor, cursor + size)), count < 0, cursor + size)
        cursor += size


def _fan_loops(primitive: MeshPrimitive) -> Iterator[Loop]:
    cursor = 0
    for count in primitive.group_counts():
        apex = cursor
        for i in range(1, count - 1):
            yield Loop((apex, cursor + i, cursor + i + 1), False, cursor + count)
        cursor += count


def _strip_loops(primitive: MeshPrimitive) -> Iterator[Loop]:
    cursor = 0
    for count in primitive.group_counts():
        for i in range(count - 2):
            yield Loop((cursor + i, cursor + i + 1, cursor + i + 2), False, cursor + count)
        cursor += count


LOOP_WALKERS: Dict[PrimitiveType, Callable[[MeshPrimitive], Iterator[Loop]]] = {
    PrimitiveType.POLYGONS: _polygon_loops,
    PrimitiveType.POLYLIST: _polygon_loops,
    PrimitiveType.TRIANGLES: _polygon_loops,
    PrimitiveType.TRIANGLE_FANS: _fan_loops,
    PrimitiveType.TRIANGLE_STRIPS: _strip_loops,
}


def _unsupported(primitive: MeshPrimitive, primitive_index: int) -> UnsupportedPrimitiveError:
    return UnsupportedPrimitiveError(
        f"Primitive type '{primitive.primitive_type.value}' not implemented "
        f"(primitive {primitive_index})",
        primitive_index,
    )


def walk_loops(primitive: MeshPrimitive, primitive_index: int = -1) -> Iterator[Loop]:
    """
    Loops of a primitive, in decode order.

    Raises:
        UnsupportedPrimitiveError: If the shape has no faces (lines, points)
    """
    walker = LOOP_WALKERS.get(primitive.primitive_type)
    if walker is None:
        raise _unsupported(primitive, primitive_index)
    return walker(primitive)


def loop_edges(vertices: Sequence[int]) -> Iterator[Tuple[int, int]]:
    """Consecutive vertex pairs of a closed loop, last one wrapping to the first."""
    count = len(vertices)
    for i in range(count):
        yield vertices[i], vertices[(i + 1) % count]


def validate_primitive(primitive: MeshPrimitive, primitive_index: int = -1) -> None:
    """
    Make sure a primitive can be decoded before any of its edges are used.

    Raises:
        UnsupportedPrimitiveError: If the shape has no decoder
        MalformedPrimitiveError: If the vertex counts and index streams disagree
    """
    if primitive.primitive_type not in LOOP_WALKERS:
        raise _unsupported(primitive, primitive_index)

    def malformed(reason: str) -> MalformedPrimitiveError:
        return MalformedPrimitiveError(f"Primitive {primitive_index}: {reason}", primitive_index)

    slot_count = len(primitive.position_indices)
    counts = primitive.group_counts()

    if primitive.primitive_type == PrimitiveType.TRIANGLES:
        if slot_count % 3 != 0:
            raise malformed(f"{slot_count} position indices is not a multiple of 3")
    else:
        if any(count == 0 for count in counts):
            raise malformed("vertex count of 0")
        if primitive.primitive_type in TRIANGLE_GROUP_TYPES and any(count < 0 for count in counts):
            raise malformed("negative vertex count in a fan/strip primitive")
        if primitive.primitive_type in POLYGON_TYPES and counts and counts[0] < 0:
            raise malformed("hole without an enclosing polygon")
        needed = sum(abs(count) for count in counts)
        if needed != slot_count:
            raise malformed(f"vertex counts need {needed} position indices, stream has {slot_count}")

    for index_list in list(primitive.uv_indices) + list(primitive.color_indices):
        if len(index_list) and len(index_list) != slot_count:
            raise malformed(
                f"channel '{index_list.name}' has {len(index_list)} indices, "
                f"position stream has {slot_count}"
            )


def populate_edges(primitive: MeshPrimitive, edge_table: EdgeTable, primitive_index: int = -1) -> int:
    """
    Insert every edge of a primitive into the table.

    Returns:
        Number of edges that were new to the table
    """
    before = len(edge_table)
    positions = primitive.position_indices
    for loop in walk_loops(primitive, primitive_index):
        vertices = [positions[slot] for slot in loop.slots]
        for a, b in loop_edges(vertices):
            edge_table.insert_or_get(a, b)
    return len(edge_table) - before


# ============================================================================
# Face decoders
# ============================================================================

class _DecodeContext:
    """Everything one primitive's decoder reads, scoped to that primitive."""

    def __init__(self, primitive: MeshPrimitive, edge_table: EdgeTable,
                 slicer: AttributeSlicer, points: Optional[np.ndarray],
                 correct_hole_orientation: bool):
        self.primitive = primitive
        self.edge_table = edge_table
        self.slicer = slicer
        self.points = points
        self.correct_hole_orientation = correct_hole_orientation

    def vertices(self, loop: Loop) -> List[int]:
        positions = self.primitive.position_indices
        return [positions[slot] for slot in loop.slots]

    def edge_refs(self, loop: Loop) -> List[int]:
        return [self.edge_table.signed_ref(a, b) for a, b in loop_edges(self.vertices(loop))]

    def first_points(self, loop: Loop) -> Optional[np.ndarray]:
        """Positions of the loop's first three vertices (None if it has fewer)."""
        if self.points is None or len(loop.slots) < 3:
            return None
        return self.points[self.vertices(loop)[:3]]


def _flip_attributes(attributes: List[FaceAttribute]) -> List[FaceAttribute]:
    return [FaceAttribute(a.set_index, flip_corner_ids(a.ids)) for a in attributes]


def _decode_polygons(ctx: _DecodeContext) -> List[PolyFace]:
    faces: List[PolyFace] = []
    parent_points = None

    for loop in _polygon_loops(ctx.primitive):
        refs = ctx.edge_refs(loop)
        uvs, colors = ctx.slicer.take_face(len(loop.slots))
        ctx.slicer.check_position(loop.group_end)

        if not loop.is_hole:
            faces.append(PolyFace(refs, uvs=uvs, colors=colors))
            parent_points = ctx.first_points(loop)
            continue

        if not faces:
            raise MalformedPrimitiveError("hole without an enclosing polygon")

        hole = FaceHole(refs, uvs=uvs, colors=colors)
        hole_points = ctx.first_points(loop)
        if (ctx.correct_hole_orientation and parent_points is not None
                and hole_points is not None and needs_flip(parent_points, hole_points)):
            logger.debug(f"Reversing hole of face {len(faces) - 1} to oppose its polygon")
            hole = FaceHole(flip_edge_refs(refs), uvs=_flip_attributes(uvs),
                            colors=_flip_attributes(colors))
        faces[-1].holes.append(hole)

    return faces


def _decode_fans(ctx: _DecodeContext) -> List[PolyFace]:
    faces: List[PolyFace] = []
    for loop in _fan_loops(ctx.primitive):
        uvs, colors = ctx.slicer.gather_face(loop.slots)
        faces.append(PolyFace(ctx.edge_refs(loop), uvs=uvs, colors=colors))
        ctx.slicer.seek(loop.group_end)
    return faces


def _decode_strips(ctx: _DecodeContext) -> List[PolyFace]:
    faces: List[PolyFace] = []
    for loop in _strip_loops(ctx.primitive):
        # Each window restarts one slot after the previous one
        ctx.slicer.seek(loop.slots[0])
        uvs, colors = ctx.slicer.take_face(3)
        faces.append(PolyFace(ctx.edge_refs(loop), uvs=uvs, colors=colors))
    return faces


_DECODERS: Dict[PrimitiveType, Callable[[_DecodeContext], List[PolyFace]]] = {
    PrimitiveType.POLYGONS: _decode_polygons,
    PrimitiveType.POLYLIST: _decode_polygons,
    PrimitiveType.TRIANGLES: _decode_polygons,
    PrimitiveType.TRIANGLE_FANS: _decode_fans,
    PrimitiveType.TRIANGLE_STRIPS: _decode_strips,
}


def decode_primitive(
    mesh: Mesh,
    primitive: MeshPrimitive,
    edge_table: EdgeTable,
    points: Optional[np.ndarray] = None,
    correct_hole_orientation: bool = True,
    primitive_index: int = -1
) -> List[PolyFace]:
    """
    Decode one primitive into faces.

    The edge table must already contain this primitive's edges
    (see populate_edges).

    Args:
        mesh: Mesh owning the primitive (resolves UV/color set names)
        primitive: Primitive to decode
        edge_table: Populated edge table of the mesh
        points: (N, 3) vertex positions, needed to orient holes
        correct_hole_orientation: If False, holes are emitted as found
        primitive_index: Position of the primitive in the mesh, for messages

    Returns:
        Faces in stream order; holes are attached to their polygon

    Raises:
        UnsupportedPrimitiveError: If the shape has no decoder
        InternalConsistencyError: If an edge or attribute lookup fails
    """
    decoder = _DECODERS.get(primitive.primitive_type)
    if decoder is None:
        raise _unsupported(primitive, primitive_index)
    slicer = AttributeSlicer.for_primitive(mesh, primitive)
    ctx = _DecodeContext(primitive, edge_table, slicer, points, correct_hole_orientation)
    return decoder(ctx)
