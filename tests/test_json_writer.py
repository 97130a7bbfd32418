"""
Tests for JSON serialization of writer emissions.
"""

import json
import os
import tempfile
import unittest
import sys
from pathlib import Path

import numpy as np

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from collada_polymesh.geometry_importer import GeometryImporter
from collada_polymesh.json_utils import dumps_compact_arrays, to_jsonable
from collada_polymesh.json_writer import JsonSceneWriter, face_to_dict
from collada_polymesh.mesh_data import PrimitiveType
from collada_polymesh.polymesh import FaceAttribute, FaceHole, PolyFace
from tests.helpers import (
    SQUARE_POSITIONS,
    cleanup_test_file,
    make_mesh,
    make_primitive,
    make_scene,
)


class TestJsonUtils(unittest.TestCase):

    def test_numpy_converted(self):
        data = to_jsonable({"v": np.array([[0.1, 0.2]], dtype=np.float32), "n": np.int64(3)})
        self.assertEqual(data, {"v": [[0.1, 0.2]], "n": 3})

    def test_precision(self):
        self.assertEqual(to_jsonable(1.23456789, precision=3), 1.235)

    def test_numeric_arrays_on_one_line(self):
        text = dumps_compact_arrays({"edges": [[0, 1, 1], [1, 2, 1]]})
        self.assertIn("[0, 1, 1]", text)
        self.assertEqual(json.loads(text), {"edges": [[0, 1, 1], [1, 2, 1]]})


class TestFaceToDict(unittest.TestCase):

    def test_plain_face(self):
        self.assertEqual(face_to_dict(PolyFace([0, 1, 2])), {"edges": [0, 1, 2]})

    def test_face_with_hole_and_uvs(self):
        face = PolyFace([0, 1, 2, 3],
                        holes=[FaceHole([-7, -6, -5], uvs=[FaceAttribute(0, [4, 6, 5])])],
                        uvs=[FaceAttribute(0, [0, 1, 2, 3])])
        data = face_to_dict(face)
        self.assertEqual(data["holes"], [{"edges": [-7, -6, -5], "uvs": [{"set": 0, "ids": [4, 6, 5]}]}])
        self.assertEqual(data["uvs"], [{"set": 0, "ids": [0, 1, 2, 3]}])
        self.assertNotIn("colors", data)


class TestJsonSceneWriter(unittest.TestCase):

    def setUp(self):
        mesh = make_mesh([
            make_primitive(PrimitiveType.TRIANGLES, [0, 1, 2], material="red", material_id=1),
            make_primitive(PrimitiveType.TRIANGLES, [0, 2, 3], material="blue", material_id=2),
        ], positions=SQUARE_POSITIONS, unique_id="quad", name="quad")
        self.writer = JsonSceneWriter()
        self.importer = GeometryImporter(make_scene({"quad": ["a", "b"]}), self.writer)
        self.importer.import_geometries([mesh])

    def test_emission_order(self):
        data = self.writer.to_dict(self.importer.material_index)
        kinds = [e["type"] for e in data["emissions"]]
        self.assertEqual(kinds, ["mesh", "group_id", "group_id", "instance", "group_id", "group_id"])

    def test_mesh_content(self):
        mesh = self.writer.to_dict()["emissions"][0]
        self.assertEqual(mesh["node"], "|a|quad")
        self.assertEqual(mesh["mesh"]["edges"][0], [0, 1, 1])
        self.assertEqual(mesh["mesh"]["vertices"][2], [1.0, 1.0, 0.0])
        self.assertEqual(mesh["mesh"]["object_groups"],
                         [[["f[0:0]"], ["f[1:1]"]], [["f[0:0]"], ["f[1:1]"]]])

    def test_instance_content(self):
        instance = self.writer.to_dict()["emissions"][3]
        self.assertEqual(instance, {"type": "instance", "node": "|a|quad", "parent": "|b"})

    def test_materials(self):
        data = self.writer.to_dict(self.importer.material_index)
        self.assertEqual(data["materials"][0],
                         {"geometry": "quad", "material_id": 1, "material": "red", "primitives": [0]})

    def test_save(self):
        fd, path = tempfile.mkstemp(suffix=".json")
        os.close(fd)
        try:
            written = self.writer.save(path, self.importer.material_index)
            data = json.loads(Path(written).read_text(encoding="utf-8"))
            self.assertEqual(len(data["emissions"]), 6)
        finally:
            cleanup_test_file(path)


class TestObjectGroupOutput(unittest.TestCase):
    """Per-primitive component lists of a mesh with a skipped primitive."""

    def setUp(self):
        mesh = make_mesh([
            make_primitive(PrimitiveType.TRIANGLES, [0, 1, 2]),
            make_primitive(PrimitiveType.TRIANGLES, [0, 2, 3]),
            make_primitive(PrimitiveType.LINES, [0, 1]),
        ], positions=SQUARE_POSITIONS, unique_id="quad", name="quad")
        self.writer = JsonSceneWriter()
        GeometryImporter(make_scene({"quad": ["a"]}), self.writer).import_geometries([mesh])

    def test_skipped_primitive_gets_empty_list(self):
        groups = self.writer.to_dict()["emissions"][0]["mesh"]["object_groups"]
        self.assertEqual(groups, [[["f[0:0]"], ["f[1:1]"], []]])

    def test_no_null_components(self):
        text = self.writer.dumps()
        self.assertNotIn("null", text)


if __name__ == '__main__':
    unittest.main()
