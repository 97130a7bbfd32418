"""
Tests for the ImportConfig dataclass.
"""

import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from collada_polymesh.config import ImportConfig
from collada_polymesh.constants import DEFAULT_GEOMETRY_NAME, GROUP_ID_NAME, LINEAR_UNIT_SCALE


class TestImportConfig(unittest.TestCase):
    """Test ImportConfig defaults and validation."""

    def test_defaults(self):
        """Test that defaults come from constants."""
        config = ImportConfig()
        self.assertEqual(config.geometry_name, DEFAULT_GEOMETRY_NAME)
        self.assertEqual(config.group_id_name, GROUP_ID_NAME)
        self.assertEqual(config.linear_unit_scale, LINEAR_UNIT_SCALE)
        self.assertTrue(config.correct_hole_orientation)
        self.assertTrue(config.emit_object_groups)
        self.assertFalse(config.fail_fast)

    def test_custom_values(self):
        config = ImportConfig(geometry_name="Shape", linear_unit_scale=0.01, fail_fast=True)
        self.assertEqual(config.geometry_name, "Shape")
        self.assertEqual(config.linear_unit_scale, 0.01)
        self.assertTrue(config.fail_fast)

    def test_empty_geometry_name(self):
        with self.assertRaises(ValueError) as ctx:
            ImportConfig(geometry_name="")
        self.assertIn("geometry_name", str(ctx.exception))

    def test_empty_group_id_name(self):
        with self.assertRaises(ValueError):
            ImportConfig(group_id_name="")

    def test_zero_scale(self):
        with self.assertRaises(ValueError) as ctx:
            ImportConfig(linear_unit_scale=0)
        self.assertIn("linear_unit_scale", str(ctx.exception))

    def test_negative_scale(self):
        with self.assertRaises(ValueError):
            ImportConfig(linear_unit_scale=-1.0)

    def test_negative_precision(self):
        with self.assertRaises(ValueError):
            ImportConfig(coordinate_precision=-1)


if __name__ == '__main__':
    unittest.main()
