"""
Tests for loading JSON scene descriptors into the input model.
"""

import unittest
import sys
from pathlib import Path

import numpy as np

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from collada_polymesh.mesh_data import GeometryType, Mesh, PrimitiveType
from collada_polymesh.scene_loader import load_scene, parse_geometry, parse_scene
from tests.helpers import cleanup_test_file, square_descriptor, write_descriptor


class TestParseGeometry(unittest.TestCase):

    def test_mesh(self):
        mesh = parse_geometry(square_descriptor()["geometries"][0])
        self.assertIsInstance(mesh, Mesh)
        self.assertEqual(mesh.positions.values.dtype, np.float32)
        self.assertEqual(mesh.positions.value_count, 12)
        self.assertEqual(mesh.uv_set_index("map1"), 0)
        primitive = mesh.primitives[0]
        self.assertEqual(primitive.primitive_type, PrimitiveType.POLYLIST)
        self.assertEqual(primitive.grouped_vertex_counts, [4])
        self.assertEqual(primitive.uv_indices[0].indices, [0, 1, 2, 3])
        self.assertEqual(primitive.material_id, 1)

    def test_double_values(self):
        data = square_descriptor()["geometries"][0]
        data["positions"]["type"] = "double"
        mesh = parse_geometry(data)
        self.assertEqual(mesh.positions.values.dtype, np.float64)

    def test_int_values_kept_for_importer(self):
        """Unsupported encodings load fine and are rejected during import."""
        data = square_descriptor()["geometries"][0]
        data["positions"] = {"type": "int32", "values": [0, 0, 0, 1, 0, 0, 1, 1, 0]}
        mesh = parse_geometry(data)
        self.assertEqual(mesh.positions.values.dtype, np.int32)

    def test_spline_is_bare_geometry(self):
        geometry = parse_geometry({"id": "curve", "type": "spline"})
        self.assertNotIsInstance(geometry, Mesh)
        self.assertEqual(geometry.geometry_type, GeometryType.SPLINE)

    def test_unknown_geometry_type(self):
        with self.assertRaises(ValueError):
            parse_geometry({"id": "x", "type": "nurbs"})

    def test_unknown_primitive_type(self):
        data = square_descriptor()["geometries"][0]
        data["primitives"][0]["type"] = "quads"
        with self.assertRaises(ValueError):
            parse_geometry(data)


class TestParseScene(unittest.TestCase):

    def test_nodes_and_instances(self):
        description = parse_scene(square_descriptor(nodes=("a", "b")))
        self.assertEqual(len(description.geometries), 1)
        self.assertEqual(description.scene.find_geometry_transform_ids("square-geom"), ["a", "b"])

    def test_parent_path(self):
        data = {"nodes": [
            {"id": "root", "name": "group1"},
            {"id": "child", "name": "pCube1", "parent": "root"},
        ]}
        scene = parse_scene(data).scene
        self.assertEqual(scene.find_transform_node("child").node_path, "|group1|pCube1")

    def test_unknown_parent(self):
        with self.assertRaises(ValueError):
            parse_scene({"nodes": [{"id": "child", "parent": "missing"}]})

    def test_child_listed_before_parent(self):
        data = {"nodes": [
            {"id": "child", "name": "pCube1", "parent": "root"},
            {"id": "root", "name": "group1"},
        ]}
        scene = parse_scene(data).scene
        self.assertEqual(scene.find_transform_node("child").node_path, "|group1|pCube1")

    def test_parent_cycle(self):
        data = {"nodes": [
            {"id": "a", "parent": "b"},
            {"id": "b", "parent": "a"},
        ]}
        with self.assertRaises(ValueError):
            parse_scene(data)

    def test_dangling_instance(self):
        data = square_descriptor()
        data["instances"] = [{"node": "ghost", "geometry": "square-geom"}]
        scene = parse_scene(data).scene
        self.assertEqual(scene.find_geometry_transform_ids("square-geom"), ["square", "ghost"])
        self.assertIsNone(scene.find_transform_node("ghost"))


class TestMalformedDescriptor(unittest.TestCase):
    """Badly shaped documents raise ValueError naming the problem."""

    def test_top_level_list(self):
        with self.assertRaises(ValueError):
            parse_scene([])

    def test_geometry_without_id(self):
        with self.assertRaises(ValueError) as ctx:
            parse_scene({"geometries": [{"name": "x"}]})
        self.assertIn("missing 'id'", str(ctx.exception))

    def test_instance_without_geometry(self):
        with self.assertRaises(ValueError) as ctx:
            parse_scene({"instances": [{"node": "n"}]})
        self.assertIn("missing 'geometry'", str(ctx.exception))

    def test_node_without_id(self):
        with self.assertRaises(ValueError):
            parse_scene({"nodes": [{"name": "n"}]})

    def test_geometry_not_an_object(self):
        with self.assertRaises(ValueError):
            parse_scene({"geometries": ["cube"]})

    def test_geometries_not_a_list(self):
        with self.assertRaises(ValueError):
            parse_scene({"geometries": {"id": "cube"}})

    def test_bad_primitive_value(self):
        data = square_descriptor()
        data["geometries"][0]["primitives"][0]["material_id"] = None
        with self.assertRaises(ValueError):
            parse_scene(data)

    def test_load_top_level_list(self):
        path = write_descriptor([])
        try:
            with self.assertRaises(ValueError):
                load_scene(path)
        finally:
            cleanup_test_file(path)


class TestLoadScene(unittest.TestCase):

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            load_scene("/nonexistent/scene.json")

    def test_invalid_json(self):
        path = write_descriptor({})
        try:
            Path(path).write_text("{not json", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_scene(path)
        finally:
            cleanup_test_file(path)

    def test_round_trip_from_disk(self):
        path = write_descriptor(square_descriptor())
        try:
            description = load_scene(path)
            self.assertEqual(description.geometries[0].unique_id, "square-geom")
        finally:
            cleanup_test_file(path)


if __name__ == '__main__':
    unittest.main()
