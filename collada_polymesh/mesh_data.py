"""
Input data model: meshes as the exchange format describes them.

A COLLADA mesh keeps its values (positions, normals, UVs, colors) in flat
arrays and splits its topology into primitives. Every primitive carries
its own index streams into those arrays, one per input. The engine only
reads these objects; nothing here is mutated during a conversion.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from .constants import VALUE_TYPES
from .errors import UnsupportedEncodingError


class GeometryType(Enum):
    """Kinds of geometry a document can define."""
    MESH = "mesh"
    CONVEX_MESH = "convex_mesh"
    SPLINE = "spline"


class PrimitiveType(Enum):
    """Primitive shapes of the exchange format."""
    POLYGONS = "polygons"
    POLYLIST = "polylist"
    TRIANGLES = "triangles"
    TRIANGLE_FANS = "trifans"
    TRIANGLE_STRIPS = "tristrips"
    LINES = "lines"
    LINE_STRIPS = "linestrips"
    POINTS = "points"


# Shapes whose grouped vertex counts describe polygons (and holes)
POLYGON_TYPES = (PrimitiveType.POLYGONS, PrimitiveType.POLYLIST)

# Shapes whose groups are fans or strips of k vertices -> k-2 triangles
TRIANGLE_GROUP_TYPES = (PrimitiveType.TRIANGLE_FANS, PrimitiveType.TRIANGLE_STRIPS)


@dataclass
class InputInfo:
    """A named sub-stream of a VertexData array (one UV set, one color set)."""
    name: str
    stride: int
    length: int


class VertexData:
    """
    A flat value array shared by one or more named inputs.

    Positions and normals use a single implicit input. UV coordinates and
    colors may pack several sets one after the other into the same array;
    `inputs` lists them in order with their stride and value count.
    """

    def __init__(self, values=None, inputs: Optional[List[InputInfo]] = None):
        if values is None:
            values = np.zeros(0, dtype=np.float32)
        self.values = np.asarray(values)
        self.inputs = list(inputs or [])

    @property
    def value_count(self) -> int:
        return int(self.values.size)

    @property
    def num_inputs(self) -> int:
        return len(self.inputs)

    def checked_values(self, what: str) -> np.ndarray:
        """
        Return the value array after making sure we can read its encoding.

        Args:
            what: Stream description for the error message (e.g. "positions")

        Raises:
            UnsupportedEncodingError: If the values aren't float32 or float64
        """
        if self.values.dtype.type not in VALUE_TYPES.values():
            raise UnsupportedEncodingError(f"No valid data type for {what}: {self.values.dtype}")
        return self.values

    def as_rows(self, stride: int, what: str) -> np.ndarray:
        """Values reshaped to (count/stride, stride)."""
        values = self.checked_values(what)
        usable = (values.size // stride) * stride
        return values[:usable].reshape(-1, stride)

    def input_values(self, input_index: int, what: str) -> np.ndarray:
        """The flat values belonging to one named input."""
        values = self.checked_values(what)
        offset = sum(info.length for info in self.inputs[:input_index])
        return values[offset:offset + self.inputs[input_index].length]

    def input_index(self, name: str) -> Optional[int]:
        for i, info in enumerate(self.inputs):
            if info.name == name:
                return i
        return None


@dataclass
class IndexList:
    """
    Per-primitive index stream of one UV or color channel.

    `initial_index` is subtracted from every raw index so the result points
    into the channel's own set rather than into the shared value array.
    """
    name: str
    indices: List[int] = field(default_factory=list)
    initial_index: int = 0

    def __len__(self) -> int:
        return len(self.indices)


@dataclass
class MeshPrimitive:
    """
    One structurally homogeneous chunk of a mesh.

    Attributes:
        primitive_type: Shape tag deciding which decoder reads it
        position_indices: Flat position index stream
        grouped_vertex_counts: Vertices per polygon/fan/strip. For polygons a
            negative count marks a hole of the polygon right before it.
        normal_indices: Flat normal index stream
        uv_indices: One IndexList per UV channel
        color_indices: One IndexList per color channel
        material: Material symbol bound to the primitive
        material_id: Numeric material id used for shading assignment
    """
    primitive_type: PrimitiveType
    position_indices: List[int] = field(default_factory=list)
    grouped_vertex_counts: List[int] = field(default_factory=list)
    normal_indices: List[int] = field(default_factory=list)
    uv_indices: List[IndexList] = field(default_factory=list)
    color_indices: List[IndexList] = field(default_factory=list)
    material: str = ""
    material_id: int = 0

    def group_counts(self) -> List[int]:
        """Vertex count of every group, with flat triangles split into threes."""
        if self.primitive_type == PrimitiveType.TRIANGLES:
            return [3] * (len(self.position_indices) // 3)
        if self.primitive_type in TRIANGLE_GROUP_TYPES and not self.grouped_vertex_counts:
            return [len(self.position_indices)]
        return list(self.grouped_vertex_counts)

    def face_count(self) -> int:
        """Number of faces the decoder emits for this primitive (holes excluded)."""
        if self.primitive_type in POLYGON_TYPES:
            return sum(1 for count in self.grouped_vertex_counts if count > 0)
        if self.primitive_type == PrimitiveType.TRIANGLES:
            return len(self.position_indices) // 3
        if self.primitive_type in TRIANGLE_GROUP_TYPES:
            return sum(max(count - 2, 0) for count in self.group_counts())
        return 0


@dataclass
class Geometry:
    """A geometry definition of the document, identified by its unique id."""
    unique_id: str
    name: str = ""
    geometry_type: GeometryType = GeometryType.MESH


@dataclass
class Mesh(Geometry):
    """
    A mesh geometry: shared value arrays plus an ordered list of primitives.

    Primitives reference the value arrays by index; values are never copied
    per primitive.
    """
    positions: VertexData = field(default_factory=VertexData)
    normals: VertexData = field(default_factory=VertexData)
    uv_coords: VertexData = field(default_factory=VertexData)
    colors: VertexData = field(default_factory=VertexData)
    primitives: List[MeshPrimitive] = field(default_factory=list)

    def uv_set_index(self, name: str) -> Optional[int]:
        return self.uv_coords.input_index(name)

    def color_set_index(self, name: str) -> Optional[int]:
        return self.colors.input_index(name)

    def normals_count(self) -> int:
        return sum(len(primitive.normal_indices) for primitive in self.primitives)

    def __repr__(self) -> str:
        return f"Mesh(id={self.unique_id!r}, primitives={len(self.primitives)})"
