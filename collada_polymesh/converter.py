"""
Core conversion logic: scene descriptor in, polygon mesh JSON out.

This is the programmatic entry point. It's separate from the CLI layer so
it can be used from scripts and tests: no printing, no argparse.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .config import ImportConfig
from .geometry_importer import GeometryImporter
from .json_writer import JsonSceneWriter
from .scene_loader import load_scene

logger = logging.getLogger(__name__)


def convert_scene(
    input_path: str,
    output_path: str,
    config: Optional[ImportConfig] = None,
    progress_callback: Optional[Callable[[str, str], None]] = None
) -> Dict[str, Any]:
    """
    Convert a scene descriptor into a polygon mesh JSON document.

    The process:
    1. Load geometries and the visual scene from the descriptor
    2. Import every geometry (primary meshes, instances, group ids)
    3. Write all emissions plus the material index map as JSON

    Args:
        input_path: Path to the JSON scene descriptor
        output_path: Where the output JSON should be written
        config: ImportConfig (defaults if None)
        progress_callback: Optional function called as callback(stage, message)

    Returns:
        Dictionary with conversion statistics:
        {
            'num_geometries': int,
            'num_meshes': int,
            'num_instances': int,
            'num_faces': int,
            'num_edges': int,
            'num_group_ids': int,
            'num_materials': int,
            'skipped_geometries': list,
            'skipped_primitives': list,
            'skipped_instances': list,
            'failed_meshes': list,
            'warnings': list,
            'errors': list,
            'output_path': str
        }

    Raises:
        FileNotFoundError: If the descriptor doesn't exist
        ValueError: If the descriptor can't be parsed
        ColladaImportError: With config.fail_fast, on the first failed mesh
    """

    def _progress(stage: str, message: str):
        if progress_callback:
            progress_callback(stage, message)

    if config is None:
        config = ImportConfig()

    _progress("load", f"Loading scene: {Path(input_path).name}")
    description = load_scene(input_path)
    _progress("load", f"Found {len(description.geometries)} geometries, "
                      f"{len(description.scene.nodes)} nodes")

    writer = JsonSceneWriter(precision=config.coordinate_precision)
    importer = GeometryImporter(description.scene, writer, config)

    _progress("import", "Importing geometries...")
    for i, geometry in enumerate(description.geometries, start=1):
        _progress("import", f"Geometry {i}/{len(description.geometries)}: {geometry.unique_id}")
        importer.import_geometries([geometry])

    _progress("export", "Writing polygon mesh JSON...")
    writer.save(output_path, importer.material_index)
    _progress("export", "Complete!")

    report = importer.report
    return {
        'num_geometries': len(description.geometries),
        'num_meshes': report.stats.get("meshes", 0),
        'num_instances': report.stats.get("instances", 0),
        'num_faces': report.stats.get("faces", 0),
        'num_edges': report.stats.get("edges", 0),
        'num_group_ids': len(importer.group_id_assignments),
        'num_materials': len(importer.material_index),
        'skipped_geometries': list(report.skipped_geometries),
        'skipped_primitives': list(report.skipped_primitives),
        'skipped_instances': list(report.skipped_instances),
        'failed_meshes': list(report.failed_meshes),
        'warnings': list(report.warnings),
        'errors': list(report.errors),
        'output_path': output_path,
    }
