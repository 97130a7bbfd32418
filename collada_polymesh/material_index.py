"""
Material index map: which primitives of a geometry use which material.

Filled once per converted mesh and read afterwards by whoever connects
shading engines to geometry. One map is created per import run.
"""

from collections import OrderedDict
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from .mesh_data import Mesh


class MaterialKey(NamedTuple):
    """Composite key: a material used by a specific geometry."""
    geometry_id: str
    material_id: int


class MaterialIndexMap:
    """Ordered mapping MaterialKey -> primitive indices."""

    def __init__(self):
        self._entries: Dict[MaterialKey, List[int]] = OrderedDict()
        self._names: Dict[MaterialKey, str] = {}

    def add(self, geometry_id: str, material_id: int, primitive_index: int, material: str = "") -> None:
        key = MaterialKey(geometry_id, material_id)
        self._entries.setdefault(key, []).append(primitive_index)
        if material and key not in self._names:
            self._names[key] = material

    def add_mesh(self, mesh: Mesh) -> None:
        """Record every primitive of a mesh in primitive order."""
        for primitive_index, primitive in enumerate(mesh.primitives):
            self.add(mesh.unique_id, primitive.material_id, primitive_index, primitive.material)

    def primitive_indices(self, geometry_id: str, material_id: int) -> Optional[List[int]]:
        """Primitive indices using the material, or None if it's never used."""
        indices = self._entries.get(MaterialKey(geometry_id, material_id))
        return list(indices) if indices is not None else None

    def material_name(self, geometry_id: str, material_id: int) -> str:
        return self._names.get(MaterialKey(geometry_id, material_id), "")

    def materials_for(self, geometry_id: str) -> List[int]:
        return [key.material_id for key in self._entries if key.geometry_id == geometry_id]

    def items(self) -> Iterator[Tuple[MaterialKey, List[int]]]:
        for key, indices in self._entries.items():
            yield key, list(indices)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key) -> bool:
        return MaterialKey(*key) in self._entries
