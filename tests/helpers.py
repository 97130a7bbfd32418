"""
Test helper utilities for creating test meshes and scene descriptors.

This module provides small mesh builders and temp-file helpers used across
multiple test files.
"""

import json
import os
import tempfile
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from collada_polymesh.mesh_data import (
    IndexList,
    InputInfo,
    Mesh,
    MeshPrimitive,
    PrimitiveType,
    VertexData,
)
from collada_polymesh.scene import SceneGraph

# Unit square in the XY plane (counter-clockwise seen from +Z)
SQUARE_POSITIONS = [
    0.0, 0.0, 0.0,
    1.0, 0.0, 0.0,
    1.0, 1.0, 0.0,
    0.0, 1.0, 0.0,
]

# Outer square 0..3 plus an inner triangle 4..6 lying inside it
SQUARE_WITH_HOLE_POSITIONS = [
    0.0, 0.0, 0.0,
    4.0, 0.0, 0.0,
    4.0, 4.0, 0.0,
    0.0, 4.0, 0.0,
    1.0, 1.0, 0.0,
    3.0, 1.0, 0.0,
    2.0, 3.0, 0.0,
]


def vertex_data(values: Sequence[float], dtype=np.float32,
                inputs: Optional[List[InputInfo]] = None) -> VertexData:
    """Flat VertexData from a list of floats."""
    return VertexData(np.asarray(values, dtype=dtype), inputs)


def grid_positions(count: int) -> List[float]:
    """`count` distinct points along a zig-zag, enough for fans and strips."""
    values: List[float] = []
    for i in range(count):
        values.extend([float(i), float(i % 2), 0.0])
    return values


def make_primitive(
    primitive_type: PrimitiveType,
    position_indices: Sequence[int],
    counts: Sequence[int] = (),
    uv_indices: Optional[List[IndexList]] = None,
    color_indices: Optional[List[IndexList]] = None,
    normal_indices: Sequence[int] = (),
    material: str = "",
    material_id: int = 0
) -> MeshPrimitive:
    """Build a MeshPrimitive with list copies of every stream."""
    return MeshPrimitive(
        primitive_type=primitive_type,
        position_indices=list(position_indices),
        grouped_vertex_counts=list(counts),
        normal_indices=list(normal_indices),
        uv_indices=list(uv_indices or []),
        color_indices=list(color_indices or []),
        material=material,
        material_id=material_id,
    )


def make_mesh(
    primitives: List[MeshPrimitive],
    positions: Optional[Sequence[float]] = None,
    unique_id: str = "geom-1",
    name: str = "",
    uv_coords: Optional[VertexData] = None,
    colors: Optional[VertexData] = None,
    normals: Optional[VertexData] = None
) -> Mesh:
    """Build a Mesh; positions default to a 16 point zig-zag."""
    if positions is None:
        positions = grid_positions(16)
    return Mesh(
        unique_id=unique_id,
        name=name,
        positions=vertex_data(positions),
        normals=normals if normals is not None else VertexData(),
        uv_coords=uv_coords if uv_coords is not None else VertexData(),
        colors=colors if colors is not None else VertexData(),
        primitives=primitives,
    )


def make_scene(instances: Dict[str, List[str]]) -> SceneGraph:
    """
    Scene with one root node per instancing node id.

    Args:
        instances: geometry id -> ids of the nodes instancing it
    """
    scene = SceneGraph()
    for geometry_id, node_ids in instances.items():
        for node_id in node_ids:
            if scene.find_transform_node(node_id) is None:
                scene.add_node(node_id, node_id)
            scene.instance_geometry(node_id, geometry_id)
    return scene


def square_descriptor(geometry_id: str = "square-geom", nodes: Sequence[str] = ("square",)) -> Dict[str, Any]:
    """A scene descriptor with one textured quad instanced by `nodes`."""
    return {
        "geometries": [
            {
                "id": geometry_id,
                "name": "square",
                "type": "mesh",
                "positions": {"type": "float", "values": SQUARE_POSITIONS},
                "normals": {"type": "float", "values": [0.0, 0.0, 1.0]},
                "uv_coords": {
                    "type": "float",
                    "values": [0.0, 0.0, 1.0, 0.0, 1.0, 1.0, 0.0, 1.0],
                    "inputs": [{"name": "map1", "stride": 2, "length": 8}],
                },
                "primitives": [
                    {
                        "type": "polylist",
                        "vertex_counts": [4],
                        "position_indices": [0, 1, 2, 3],
                        "normal_indices": [0, 0, 0, 0],
                        "uv_indices": [{"name": "map1", "indices": [0, 1, 2, 3]}],
                        "material": "lambert1SG",
                        "material_id": 1,
                    }
                ],
            }
        ],
        "nodes": [
            {"id": node, "name": node, "parent": None, "geometries": [geometry_id]}
            for node in nodes
        ],
    }


def write_descriptor(data: Dict[str, Any], filepath: Optional[str] = None) -> str:
    """
    Write a scene descriptor to disk.

    Args:
        data: Descriptor content
        filepath: Optional path (defaults to a temp file)

    Returns:
        Path to the written file
    """
    if filepath is None:
        fd, filepath = tempfile.mkstemp(suffix='.json')
        os.close(fd)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return filepath


def cleanup_test_file(filepath: str) -> None:
    """
    Remove a test file if it exists.

    Args:
        filepath: Path to file to remove
    """
    if filepath and os.path.exists(filepath):
        os.remove(filepath)
