"""
JSON scene writer.

Records every writer call like RecordingMeshWriter and serializes them in
emission order, together with the group id assignments and the material
index map, to one JSON document:

    {
      "version": "...",
      "emissions": [
        {"type": "mesh", "node": "|pCube1|cube", "mesh": {...}},
        {"type": "instance", "node": "|pCube1|cube", "parent": "|pCube2"},
        {"type": "group_id", "name": "GroupId", ...}
      ],
      "materials": [{"geometry": "...", "material_id": 1, "primitives": [0, 2]}]
    }
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .constants import JSON_COORDINATE_PRECISION, __version__
from .json_utils import dumps_compact_arrays, to_jsonable
from .material_index import MaterialIndexMap
from .mesh_writer import Emission, RecordingMeshWriter
from .polymesh import FaceAttribute, PolyFace, PolyMesh

logger = logging.getLogger(__name__)


def _attributes_to_dict(attributes: List[FaceAttribute]) -> List[Dict[str, Any]]:
    return [{"set": a.set_index, "ids": list(a.ids)} for a in attributes]


def face_to_dict(face: PolyFace) -> Dict[str, Any]:
    """Face as JSON data; empty hole/uv/color lists are left out."""
    data: Dict[str, Any] = {"edges": list(face.edges)}
    if face.holes:
        data["holes"] = []
        for hole in face.holes:
            hole_data: Dict[str, Any] = {"edges": list(hole.edges)}
            if hole.uvs:
                hole_data["uvs"] = _attributes_to_dict(hole.uvs)
            if hole.colors:
                hole_data["colors"] = _attributes_to_dict(hole.colors)
            data["holes"].append(hole_data)
    if face.uvs:
        data["uvs"] = _attributes_to_dict(face.uvs)
    if face.colors:
        data["colors"] = _attributes_to_dict(face.colors)
    return data


def polymesh_to_dict(polymesh: PolyMesh) -> Dict[str, Any]:
    """PolyMesh as JSON data (numpy arrays are left for to_jsonable)."""
    data: Dict[str, Any] = {
        "name": polymesh.name,
        "geometry": polymesh.geometry_id,
        "vertices": polymesh.vertices,
        "normals": polymesh.normals,
        "uv_sets": [
            {"name": uv.name, "stride": uv.stride, "points": uv.points}
            for uv in polymesh.uv_sets
        ],
        "color_sets": [
            {"name": c.name, "stride": c.stride, "representation": c.representation, "values": c.values}
            for c in polymesh.color_sets
        ],
        "edges": [[edge.start, edge.end, int(edge.hard)] for edge in polymesh.edges],
        "faces": [face_to_dict(face) for face in polymesh.faces],
    }
    if polymesh.object_groups:
        # One component list per primitive; a primitive without faces gets []
        data["object_groups"] = [
            [[group.component] if group.component else [] for group in instance_groups]
            for instance_groups in polymesh.object_groups
        ]
    return data


def emission_to_dict(emission: Emission) -> Dict[str, Any]:
    if emission.kind == "mesh":
        return {"type": "mesh", "node": emission.mesh_node.node_path,
                "mesh": polymesh_to_dict(emission.payload)}
    if emission.kind == "instance":
        return {"type": "instance", "node": emission.payload.mesh_node.node_path,
                "parent": emission.payload.transform.node_path}
    assignment = emission.payload
    return {"type": "group_id", "name": assignment.name, "geometry": assignment.geometry_id,
            "instance": assignment.instance_index, "primitive": assignment.primitive_index}


class JsonSceneWriter(RecordingMeshWriter):
    """Recording writer that can dump what it received as JSON."""

    def __init__(self, precision: int = JSON_COORDINATE_PRECISION):
        super().__init__()
        self.precision = precision

    def to_dict(self, material_index: Optional[MaterialIndexMap] = None) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "version": __version__,
            "emissions": [emission_to_dict(e) for e in self.emissions],
        }
        if material_index is not None:
            data["materials"] = [
                {"geometry": key.geometry_id, "material_id": key.material_id,
                 "material": material_index.material_name(key.geometry_id, key.material_id),
                 "primitives": indices}
                for key, indices in material_index.items()
            ]
        return to_jsonable(data, self.precision)

    def dumps(self, material_index: Optional[MaterialIndexMap] = None) -> str:
        return dumps_compact_arrays(self.to_dict(material_index))

    def save(self, output_path: str, material_index: Optional[MaterialIndexMap] = None) -> str:
        """
        Write the JSON document.

        Returns:
            The path written to
        """
        path = Path(output_path)
        path.write_text(self.dumps(material_index), encoding="utf-8")
        logger.info(f"Wrote {len(self.emissions)} emissions to {path}")
        return str(path)
