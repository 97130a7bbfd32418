"""
Scene descriptor loading.

Reads a JSON description of a COLLADA document's geometry library and
visual scene into the input data model. The layout mirrors the document:

    {
      "geometries": [
        {
          "id": "cube-geom", "name": "cube", "type": "mesh",
          "positions": {"type": "float", "values": [...]},
          "normals": {"type": "float", "values": [...]},
          "uv_coords": {"type": "float", "values": [...],
                        "inputs": [{"name": "map1", "stride": 2, "length": 8}]},
          "colors": {...},
          "primitives": [
            {"type": "polylist", "vertex_counts": [4, -3],
             "position_indices": [...], "normal_indices": [...],
             "uv_indices": [{"name": "map1", "indices": [...], "initial_index": 0}],
             "color_indices": [], "material": "blinn1SG", "material_id": 1}
          ]
        }
      ],
      "nodes": [
        {"id": "node-1", "name": "pCube1", "parent": null, "geometries": ["cube-geom"]}
      ]
    }

Nodes may come in any order; parents are linked once every node is known.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, NamedTuple

import numpy as np

from .constants import VALUE_TYPES
from .mesh_data import (
    Geometry,
    GeometryType,
    IndexList,
    InputInfo,
    Mesh,
    MeshPrimitive,
    PrimitiveType,
    VertexData,
)
from .scene import SceneGraph

logger = logging.getLogger(__name__)


class SceneDescription(NamedTuple):
    """Everything a conversion needs: geometries plus the scene instancing them."""
    geometries: List[Geometry]
    scene: SceneGraph


def _vertex_data(data: Dict[str, Any], default_stride: int = 3) -> VertexData:
    if not data:
        return VertexData()
    type_name = data.get("type", "float")
    values = data.get("values", [])
    dtype = VALUE_TYPES.get(type_name)
    if dtype is None:
        # Keep unknown encodings as they are; the importer rejects them when read
        try:
            dtype = np.dtype(type_name)
        except TypeError:
            raise ValueError(f"Unknown value type: {type_name!r}")
        logger.debug(f"Value stream with unsupported type {type_name!r}")
    inputs = [
        InputInfo(
            name=info.get("name", ""),
            stride=int(info.get("stride", default_stride)),
            length=int(info.get("length", len(values))),
        )
        for info in data.get("inputs", [])
    ]
    return VertexData(np.asarray(values, dtype=dtype), inputs)


def _index_lists(items: List[Dict[str, Any]]) -> List[IndexList]:
    return [
        IndexList(
            name=item.get("name", ""),
            indices=[int(i) for i in item.get("indices", [])],
            initial_index=int(item.get("initial_index", 0)),
        )
        for item in items
    ]


def _primitive(data: Dict[str, Any]) -> MeshPrimitive:
    type_name = data.get("type", "")
    try:
        primitive_type = PrimitiveType(type_name)
    except ValueError:
        raise ValueError(f"Unknown primitive type: {type_name!r}")
    return MeshPrimitive(
        primitive_type=primitive_type,
        position_indices=[int(i) for i in data.get("position_indices", [])],
        grouped_vertex_counts=[int(c) for c in data.get("vertex_counts", [])],
        normal_indices=[int(i) for i in data.get("normal_indices", [])],
        uv_indices=_index_lists(data.get("uv_indices", [])),
        color_indices=_index_lists(data.get("color_indices", [])),
        material=data.get("material", ""),
        material_id=int(data.get("material_id", 0)),
    )


def _object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def _list(data: Dict[str, Any], key: str, what: str) -> List[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"{what} '{key}' must be a list, got {type(value).__name__}")
    return value


def _require(data: Dict[str, Any], key: str, what: str) -> Any:
    if key not in data:
        raise ValueError(f"{what} missing '{key}'")
    return data[key]


def parse_geometry(data: Dict[str, Any]) -> Geometry:
    """Build a Mesh (or a bare Geometry for other geometry types) from JSON data."""
    data = _object(data, "Geometry")
    geometry_id = _require(data, "id", "Geometry")
    name = data.get("name", "")
    try:
        geometry_type = GeometryType(data.get("type", "mesh"))
    except ValueError:
        raise ValueError(f"Unknown geometry type for '{geometry_id}': {data.get('type')!r}")

    if geometry_type != GeometryType.MESH:
        return Geometry(geometry_id, name, geometry_type)

    what = f"Geometry '{geometry_id}'"
    return Mesh(
        unique_id=geometry_id,
        name=name,
        positions=_vertex_data(data.get("positions", {})),
        normals=_vertex_data(data.get("normals", {})),
        uv_coords=_vertex_data(data.get("uv_coords", {}), default_stride=2),
        colors=_vertex_data(data.get("colors", {}), default_stride=4),
        primitives=[_primitive(_object(p, f"{what} primitive"))
                    for p in _list(data, "primitives", what)],
    )


def _parse_nodes(nodes: List[Any]) -> SceneGraph:
    # Nodes first, parents second: a child may be listed before its parent
    scene = SceneGraph()
    for node in nodes:
        node = _object(node, "Node")
        node_id = _require(node, "id", "Node")
        scene.add_node(node_id, node.get("name", node_id))
        for geometry_id in _list(node, "geometries", f"Node '{node_id}'"):
            scene.instance_geometry(node_id, geometry_id)

    for node in nodes:
        parent_id = node.get("parent")
        if parent_id is None:
            continue
        try:
            scene.set_parent(node["id"], parent_id)
        except KeyError as e:
            raise ValueError(f"Invalid node {node['id']!r}: {e}")
    return scene


def parse_scene(data: Any) -> SceneDescription:
    """
    Build the input model from an already decoded JSON document.

    Raises:
        ValueError: If the document isn't shaped like a descriptor, misses
            a required key, or references unknown types or parents
    """
    data = _object(data, "Scene descriptor")
    try:
        geometries = [parse_geometry(g) for g in _list(data, "geometries", "Scene descriptor")]
        scene = _parse_nodes(_list(data, "nodes", "Scene descriptor"))

        # Instances may name nodes the scene doesn't define; the importer skips those
        for instance in _list(data, "instances", "Scene descriptor"):
            instance = _object(instance, "Instance")
            scene.instance_geometry(_require(instance, "node", "Instance"),
                                    _require(instance, "geometry", "Instance"))
    except (TypeError, AttributeError) as e:
        raise ValueError(f"Malformed scene descriptor: {e}") from e

    return SceneDescription(geometries, scene)


def load_scene(input_path: str) -> SceneDescription:
    """
    Load a JSON scene descriptor.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file isn't a valid descriptor
    """
    path = Path(input_path)
    if not path.exists():
        raise FileNotFoundError(f"Scene descriptor not found: {input_path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path.name}: {e}")
    return parse_scene(data)
