"""
Output data model: the canonical polygon mesh.

This is what the importer hands to a mesh writer. Vertices and normals are
plain float arrays; topology is an edge list plus faces that reference
edges by signed index. Faces carry per-corner UV and color ids for every
channel the source primitive declared.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

import numpy as np

from .constants import (
    COLOR_REPRESENTATION_A,
    COLOR_REPRESENTATION_RGB,
    COLOR_REPRESENTATION_RGBA,
)


def color_representation(stride: int) -> int:
    """Representation tag for a color set: 1 -> A, 3 -> RGB, otherwise RGBA."""
    if stride == 1:
        return COLOR_REPRESENTATION_A
    if stride == 3:
        return COLOR_REPRESENTATION_RGB
    return COLOR_REPRESENTATION_RGBA


class MeshEdge(NamedTuple):
    """An output edge between two vertex indices."""
    start: int
    end: int
    hard: bool = True


class FaceAttribute(NamedTuple):
    """Per-corner ids of one UV or color channel for one face or hole."""
    set_index: int
    ids: List[int]


class FaceRange(NamedTuple):
    """A contiguous run of faces, written as the component f[first:last]."""
    start: int
    count: int

    @property
    def component(self) -> Optional[str]:
        if self.count <= 0:
            return None
        return f"f[{self.start}:{self.start + self.count - 1}]"


@dataclass
class FaceHole:
    """Inner boundary of a face, wound opposite to the face."""
    edges: List[int]
    uvs: List[FaceAttribute] = field(default_factory=list)
    colors: List[FaceAttribute] = field(default_factory=list)


@dataclass
class PolyFace:
    """
    One face of the canonical mesh.

    Attributes:
        edges: Signed edge references (i forward, -(i+1) backwards)
        holes: Inner boundaries attached to this face
        uvs: Per-corner UV ids, one entry per UV channel
        colors: Per-corner color ids, one entry per color channel
    """
    edges: List[int]
    holes: List[FaceHole] = field(default_factory=list)
    uvs: List[FaceAttribute] = field(default_factory=list)
    colors: List[FaceAttribute] = field(default_factory=list)

    @property
    def edge_count(self) -> int:
        return len(self.edges)


@dataclass
class UVSet:
    """A named UV set: 2D points plus the stride the source declared."""
    name: str
    stride: int
    points: np.ndarray


@dataclass
class ColorSet:
    """A named color set with its component stride and representation tag."""
    name: str
    stride: int
    values: np.ndarray

    @property
    def representation(self) -> int:
        return color_representation(self.stride)


@dataclass
class PolyMesh:
    """
    Canonical mesh produced for the primary instance of a geometry.

    object_groups holds, per instance, one FaceRange per primitive. It stays
    empty for single-primitive meshes.
    """
    name: str
    geometry_id: str
    vertices: np.ndarray
    normals: np.ndarray
    uv_sets: List[UVSet] = field(default_factory=list)
    color_sets: List[ColorSet] = field(default_factory=list)
    edges: List[MeshEdge] = field(default_factory=list)
    faces: List[PolyFace] = field(default_factory=list)
    object_groups: List[List[FaceRange]] = field(default_factory=list)

    @property
    def face_count(self) -> int:
        return len(self.faces)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def __repr__(self) -> str:
        return (f"PolyMesh(name={self.name!r}, vertices={len(self.vertices)}, "
                f"edges={len(self.edges)}, faces={len(self.faces)})")
