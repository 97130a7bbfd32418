"""
Tests for CLI-specific functionality.

This module tests:
- Argument parsing and defaults
- Default output path generation
- Exit codes for missing input, bad parameters and failed meshes
"""

import json
import os
import tempfile
import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from collada_polymesh.cli import build_parser, default_output_path, main
from tests.helpers import cleanup_test_file, square_descriptor, write_descriptor


class TestArgumentParsing(unittest.TestCase):

    def test_defaults(self):
        args = build_parser().parse_args(["scene.json"])
        self.assertEqual(args.input_file, "scene.json")
        self.assertIsNone(args.output)
        self.assertEqual(args.unit_scale, 1.0)
        self.assertFalse(args.no_hole_correction)
        self.assertFalse(args.fail_fast)

    def test_flags(self):
        args = build_parser().parse_args(
            ["scene.json", "-o", "out.json", "--unit-scale", "0.01",
             "--no-hole-correction", "--no-object-groups", "--fail-fast", "-v"]
        )
        self.assertEqual(args.output, "out.json")
        self.assertEqual(args.unit_scale, 0.01)
        self.assertTrue(args.no_hole_correction)
        self.assertTrue(args.no_object_groups)
        self.assertTrue(args.verbose)

    def test_default_output_path(self):
        self.assertEqual(default_output_path(Path("models/cube.json")),
                         Path("models/cube_polymesh.json"))


class TestMain(unittest.TestCase):

    def setUp(self):
        fd, self.output_path = tempfile.mkstemp(suffix='.json')
        os.close(fd)
        self.input_path = None

    def tearDown(self):
        cleanup_test_file(self.input_path)
        cleanup_test_file(self.output_path)

    def test_converts_file(self):
        self.input_path = write_descriptor(square_descriptor())
        main([self.input_path, "-o", self.output_path])
        data = json.loads(Path(self.output_path).read_text(encoding="utf-8"))
        self.assertEqual(data["emissions"][0]["type"], "mesh")

    def test_missing_input_exits(self):
        with self.assertRaises(SystemExit) as ctx:
            main(["/nonexistent/scene.json", "-o", self.output_path])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_unit_scale_exits(self):
        self.input_path = write_descriptor(square_descriptor())
        with self.assertRaises(SystemExit) as ctx:
            main([self.input_path, "-o", self.output_path, "--unit-scale", "0"])
        self.assertEqual(ctx.exception.code, 1)

    def test_invalid_descriptor_exits(self):
        self.input_path = write_descriptor({})
        Path(self.input_path).write_text("{not json", encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            main([self.input_path, "-o", self.output_path])
        self.assertEqual(ctx.exception.code, 1)

    def test_badly_shaped_descriptors_exit(self):
        documents = [
            {"geometries": [{"name": "x"}]},
            {"instances": [{"node": "n"}]},
            [],
        ]
        for document in documents:
            with self.subTest(document=document):
                cleanup_test_file(self.input_path)
                self.input_path = write_descriptor(document)
                with self.assertRaises(SystemExit) as ctx:
                    main([self.input_path, "-o", self.output_path])
                self.assertEqual(ctx.exception.code, 1)

    def test_failed_mesh_exit_code(self):
        data = square_descriptor()
        data["geometries"][0]["positions"]["type"] = "int32"
        self.input_path = write_descriptor(data)
        with self.assertRaises(SystemExit) as ctx:
            main([self.input_path, "-o", self.output_path])
        self.assertEqual(ctx.exception.code, 2)

    def test_fail_fast_exit_code(self):
        data = square_descriptor()
        data["geometries"][0]["positions"]["type"] = "int32"
        self.input_path = write_descriptor(data)
        with self.assertRaises(SystemExit) as ctx:
            main([self.input_path, "-o", self.output_path, "--fail-fast"])
        self.assertEqual(ctx.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
