"""
Configuration dataclass for geometry import.

ImportConfig holds every tunable of an import run so the importer, the
converter and the CLI share one object instead of long argument lists.
"""

from dataclasses import dataclass
from .constants import (
    DEFAULT_GEOMETRY_NAME,
    GROUP_ID_NAME,
    LINEAR_UNIT_SCALE,
    JSON_COORDINATE_PRECISION,
)


@dataclass
class ImportConfig:
    """
    Configuration for converting COLLADA geometry into polygon meshes.

    Attributes:
        geometry_name: Mesh node name used when a geometry has no name
        group_id_name: Base name of the per-primitive group id nodes
        linear_unit_scale: Factor applied to every vertex position
        correct_hole_orientation: If True, holes wound like their parent
            polygon are reversed before they are emitted
        emit_object_groups: If True, meshes with several primitives get
            per-primitive face ranges and group ids
        fail_fast: If True, the first mesh-level failure stops the whole
            conversion instead of skipping that mesh
        coordinate_precision: Decimal places kept in the JSON output
    """

    geometry_name: str = DEFAULT_GEOMETRY_NAME
    group_id_name: str = GROUP_ID_NAME
    linear_unit_scale: float = LINEAR_UNIT_SCALE
    correct_hole_orientation: bool = True
    emit_object_groups: bool = True
    fail_fast: bool = False
    coordinate_precision: int = JSON_COORDINATE_PRECISION

    def __post_init__(self):
        """Validate configuration parameters."""
        if not self.geometry_name:
            raise ValueError("geometry_name must not be empty")
        if not self.group_id_name:
            raise ValueError("group_id_name must not be empty")
        if self.linear_unit_scale <= 0:
            raise ValueError(f"linear_unit_scale must be positive, got {self.linear_unit_scale}")
        if self.coordinate_precision < 0:
            raise ValueError(f"coordinate_precision must be non-negative, got {self.coordinate_precision}")
