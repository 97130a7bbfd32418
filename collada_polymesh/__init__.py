"""
COLLADA Polygon Mesh Importer Package

Convert COLLADA mesh geometry (polygons with holes, triangles, fans and
strips) into canonical polygon meshes: a unique edge list plus faces that
reference edges by signed index, with per-face UV and color ids.
"""

from .constants import __version__

# Make the CLI main function easily accessible
from .cli import main

# Core conversion function and configuration
from .converter import convert_scene
from .config import ImportConfig

# Engine building blocks for callers with their own scene and writer
from .edge_table import EdgeTable
from .geometry_importer import GeometryImporter, ImportReport
from .material_index import MaterialIndexMap
from .mesh_writer import MeshWriter, RecordingMeshWriter
from .primitive_decoder import decode_primitive, populate_edges
from .scene_loader import load_scene

__all__ = [
    "__version__",
    "main",
    "convert_scene",
    "ImportConfig",
    "EdgeTable",
    "GeometryImporter",
    "ImportReport",
    "MaterialIndexMap",
    "MeshWriter",
    "RecordingMeshWriter",
    "decode_primitive",
    "populate_edges",
    "load_scene",
]
