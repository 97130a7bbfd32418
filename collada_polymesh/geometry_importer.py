"""
Geometry importer: assembles canonical meshes and handles instancing.

For every mesh geometry the importer:

1. Finds the transform nodes instancing it (first one = primary instance)
2. For the primary instance, builds the edge table over all primitives,
   decodes every primitive into faces and hands the finished PolyMesh to
   the writer
3. For every further instance, only asks the writer to parent the existing
   mesh node under the new transform
4. Creates a group id per primitive and instance when the mesh has more
   than one primitive, and records which primitives use which material

A mesh is assembled completely before anything is written for it, so a
mesh that fails half way leaves no partial output behind.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from .config import ImportConfig
from .constants import NORMAL_STRIDE, POSITION_STRIDE, UV_STRIDE
from .edge_table import EdgeTable
from .errors import (
    ColladaImportError,
    MalformedPrimitiveError,
    UnsupportedGeometryError,
    UnsupportedInputError,
)
from .material_index import MaterialIndexMap
from .mesh_data import Geometry, GeometryType, Mesh, MeshPrimitive
from .mesh_writer import GroupIdAssignment, MeshNode, MeshWriter
from .polymesh import ColorSet, FaceRange, MeshEdge, PolyFace, PolyMesh, UVSet
from .primitive_decoder import decode_primitive, populate_edges, validate_primitive
from .scene import SceneGraph, TransformNode

logger = logging.getLogger(__name__)


class UniqueNameList:
    """Hands out node names, numbering repeats: Geometry, Geometry1, ..."""

    def __init__(self):
        self._used: Set[str] = set()
        self._counters: Dict[str, int] = {}

    def add_id(self, name: str) -> str:
        if name not in self._used:
            self._used.add(name)
            return name
        counter = self._counters.get(name, 0)
        while True:
            counter += 1
            candidate = f"{name}{counter}"
            if candidate not in self._used:
                break
        self._counters[name] = counter
        self._used.add(candidate)
        return candidate


class ImportReport:
    """
    Diagnostics collected during an import run.

    Errors are mesh-level failures (the mesh wasn't written). Warnings are
    recoverable problems: skipped geometries, primitives and instances.
    """

    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.stats: Dict[str, int] = {}
        self.skipped_geometries: List[str] = []
        self.skipped_primitives: List[Tuple[str, int]] = []
        self.skipped_instances: List[Tuple[str, str]] = []
        self.failed_meshes: List[str] = []

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def count(self, key: str, amount: int = 1) -> None:
        self.stats[key] = self.stats.get(key, 0) + amount

    @property
    def is_clean(self) -> bool:
        return not self.errors and not self.warnings

    def __repr__(self) -> str:
        return f"ImportReport(errors={len(self.errors)}, warnings={len(self.warnings)})"


class GeometryImporter:
    """
    Converts mesh geometries into PolyMesh emissions.

    Example:
        writer = RecordingMeshWriter()
        importer = GeometryImporter(scene, writer)
        importer.import_geometries(geometries)
        writer.meshes[0].faces
    """

    def __init__(self, scene: SceneGraph, writer: MeshWriter, config: Optional[ImportConfig] = None):
        self.scene = scene
        self.writer = writer
        self.config = config if config is not None else ImportConfig()
        self.material_index = MaterialIndexMap()
        self.report = ImportReport()
        self.group_id_assignments: List[GroupIdAssignment] = []
        self._mesh_nodes: Dict[str, MeshNode] = {}
        self._mesh_names = UniqueNameList()
        self._group_names = UniqueNameList()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def import_geometries(self, geometries: Iterable[Geometry]) -> List[MeshNode]:
        """
        Import several geometries, isolating mesh-level failures.

        A geometry whose conversion fails is reported and skipped unless
        config.fail_fast is set, in which case the error propagates.
        """
        mesh_nodes = []
        for geometry in geometries:
            try:
                mesh_node = self.import_geometry(geometry)
            except UnsupportedInputError as e:
                self._skip_geometry(geometry.unique_id, str(e))
                continue
            except ColladaImportError as e:
                message = f"Geometry '{geometry.unique_id}' not converted: {e}"
                logger.error(message)
                self.report.add_error(message)
                self.report.failed_meshes.append(geometry.unique_id)
                if self.config.fail_fast:
                    raise
                continue
            if mesh_node is not None:
                mesh_nodes.append(mesh_node)
        return mesh_nodes

    def import_geometry(self, geometry: Optional[Geometry]) -> Optional[MeshNode]:
        """
        Import one geometry if it's a mesh that hasn't been imported yet.

        Raises:
            UnsupportedGeometryError: For convex meshes and splines
        """
        if geometry is None:
            return None

        existing = self.find_mesh_node(geometry.unique_id)
        if existing is not None:
            return existing

        if geometry.geometry_type != GeometryType.MESH or not isinstance(geometry, Mesh):
            raise UnsupportedGeometryError(
                f"Import of {geometry.geometry_type.value} not supported! (geometry '{geometry.unique_id}')"
            )
        return self.import_mesh(geometry)

    def import_mesh(self, mesh: Mesh) -> Optional[MeshNode]:
        """
        Emit a mesh for its first instance and references for the others.

        Returns:
            The mesh node of the primary instance, or None if no transform
            node instancing the mesh could be resolved
        """
        transforms = self._resolve_transforms(mesh)
        if not transforms:
            self._skip_geometry(mesh.unique_id, "no transform node instances it")
            return None

        mesh_node = None
        for instance_index, transform in enumerate(transforms):
            if instance_index == 0:
                mesh_node = self.create_mesh(mesh, transform, len(transforms))
            else:
                logger.debug(f"Instancing '{mesh_node.node_path}' under '{transform.node_path}'")
                self.writer.write_instance(mesh_node, transform)
                self.report.count("instances")
            self.create_group_ids(mesh, instance_index)
        return mesh_node

    def find_mesh_node(self, geometry_id: str) -> Optional[MeshNode]:
        return self._mesh_nodes.get(geometry_id)

    # ------------------------------------------------------------------
    # Primary instance
    # ------------------------------------------------------------------

    def create_mesh(self, mesh: Mesh, transform: TransformNode, num_instances: int = 1) -> MeshNode:
        """Assemble the mesh, name its node and write it."""
        polymesh = self.assemble(mesh, num_instances)

        name = self._mesh_names.add_id(mesh.name or self.config.geometry_name)
        polymesh.name = name
        mesh_node = MeshNode(mesh.unique_id, name, transform)
        self._mesh_nodes[mesh.unique_id] = mesh_node

        self.writer.write_mesh(mesh_node, polymesh)
        self.material_index.add_mesh(mesh)

        self.report.count("meshes")
        self.report.count("faces", polymesh.face_count)
        self.report.count("edges", polymesh.edge_count)
        logger.info(f"Wrote mesh '{mesh_node.node_path}': {polymesh.face_count} faces, "
                    f"{polymesh.edge_count} edges")
        return mesh_node

    def assemble(self, mesh: Mesh, num_instances: int = 1) -> PolyMesh:
        """
        Build the canonical mesh of a geometry without writing anything.

        Unsupported or malformed primitives are skipped with a warning.
        Decoding is deterministic: the same Mesh always yields the same
        edges, faces and attribute ids.

        Raises:
            UnsupportedEncodingError: If a value stream isn't float/double
            InternalConsistencyError: If decoding loses track of an edge
                or an attribute cursor
        """
        points = mesh.positions.as_rows(POSITION_STRIDE, "positions").astype(np.float64)
        vertices = (points * self.config.linear_unit_scale).astype(np.float32)
        normal_rows = mesh.normals.as_rows(NORMAL_STRIDE, "normals")

        # Pass 1: edges of every usable primitive
        edge_table = EdgeTable()
        usable: Set[int] = set()
        for primitive_index, primitive in enumerate(mesh.primitives):
            try:
                validate_primitive(primitive, primitive_index)
                self._check_index_ranges(primitive, primitive_index, len(points), len(normal_rows))
            except UnsupportedInputError as e:
                self._skip_primitive(mesh, primitive_index, e)
                continue
            populate_edges(primitive, edge_table, primitive_index)
            usable.add(primitive_index)

        # Pass 2: faces
        faces: List[PolyFace] = []
        face_counts: List[int] = []
        normal_indices: List[int] = []
        for primitive_index, primitive in enumerate(mesh.primitives):
            if primitive_index not in usable:
                face_counts.append(0)
                continue
            primitive_faces = decode_primitive(
                mesh, primitive, edge_table, points,
                correct_hole_orientation=self.config.correct_hole_orientation,
                primitive_index=primitive_index,
            )
            faces.extend(primitive_faces)
            face_counts.append(len(primitive_faces))
            normal_indices.extend(primitive.normal_indices)

        return PolyMesh(
            name=mesh.name or self.config.geometry_name,
            geometry_id=mesh.unique_id,
            vertices=vertices,
            normals=normal_rows[normal_indices].astype(np.float32) if normal_indices
            else np.zeros((0, NORMAL_STRIDE), dtype=np.float32),
            uv_sets=self._uv_sets(mesh),
            color_sets=self._color_sets(mesh),
            edges=[MeshEdge(edge.start, edge.end) for edge in edge_table],
            faces=faces,
            object_groups=self._object_groups(mesh, face_counts, num_instances),
        )

    # ------------------------------------------------------------------
    # Group ids and object groups
    # ------------------------------------------------------------------

    def create_group_ids(self, mesh: Mesh, instance_index: int) -> List[GroupIdAssignment]:
        """One group id per primitive of the instance (none for single-primitive meshes)."""
        if not self.config.emit_object_groups or len(mesh.primitives) <= 1:
            return []
        assignments = []
        for primitive_index in range(len(mesh.primitives)):
            name = self._group_names.add_id(self.config.group_id_name)
            assignment = GroupIdAssignment(name, mesh.unique_id, instance_index, primitive_index)
            self.group_id_assignments.append(assignment)
            self.writer.write_group_id(assignment)
            assignments.append(assignment)
        return assignments

    def _object_groups(self, mesh: Mesh, face_counts: List[int], num_instances: int) -> List[List[FaceRange]]:
        if not self.config.emit_object_groups or len(mesh.primitives) <= 1:
            return []
        ranges = []
        start = 0
        for count in face_counts:
            ranges.append(FaceRange(start, count))
            start += count
        return [list(ranges) for _ in range(num_instances)]

    # ------------------------------------------------------------------
    # Value streams
    # ------------------------------------------------------------------

    def _uv_sets(self, mesh: Mesh) -> List[UVSet]:
        uv_sets = []
        for i, info in enumerate(mesh.uv_coords.inputs):
            if info.stride < UV_STRIDE:
                message = f"UV set '{info.name}' of geometry '{mesh.unique_id}' has stride {info.stride}, skipped"
                logger.warning(message)
                self.report.add_warning(message)
                continue
            if info.stride != UV_STRIDE:
                message = f"UV set '{info.name}' of geometry '{mesh.unique_id}': just 2d uv set data will be imported"
                logger.warning(message)
                self.report.add_warning(message)
            values = mesh.uv_coords.input_values(i, "uv coordinates")
            rows = values[:(values.size // info.stride) * info.stride].reshape(-1, info.stride)
            uv_sets.append(UVSet(info.name, info.stride, rows[:, :UV_STRIDE].astype(np.float32)))
        return uv_sets

    def _color_sets(self, mesh: Mesh) -> List[ColorSet]:
        color_sets = []
        for i, info in enumerate(mesh.colors.inputs):
            if info.stride < 1:
                message = f"Color set '{info.name}' of geometry '{mesh.unique_id}' has stride {info.stride}, skipped"
                logger.warning(message)
                self.report.add_warning(message)
                continue
            values = mesh.colors.input_values(i, "colors")
            rows = values[:(values.size // info.stride) * info.stride].reshape(-1, info.stride)
            color_sets.append(ColorSet(info.name, info.stride, rows.astype(np.float32)))
        return color_sets

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _resolve_transforms(self, mesh: Mesh) -> List[TransformNode]:
        transforms = []
        for node_id in self.scene.find_geometry_transform_ids(mesh.unique_id):
            transform = self.scene.find_transform_node(node_id)
            if transform is None:
                message = f"No transform node '{node_id}' for instance of geometry '{mesh.unique_id}', skipped"
                logger.warning(message)
                self.report.add_warning(message)
                self.report.skipped_instances.append((mesh.unique_id, node_id))
                continue
            transforms.append(transform)
        return transforms

    @staticmethod
    def _check_index_ranges(primitive: MeshPrimitive, primitive_index: int,
                            vertex_count: int, normal_count: int) -> None:
        if min(primitive.position_indices, default=0) < 0 or min(primitive.normal_indices, default=0) < 0:
            raise MalformedPrimitiveError(f"Primitive {primitive_index}: negative index", primitive_index)
        if primitive.position_indices and max(primitive.position_indices) >= vertex_count:
            raise MalformedPrimitiveError(
                f"Primitive {primitive_index}: position index {max(primitive.position_indices)} "
                f"out of range ({vertex_count} vertices)", primitive_index)
        if primitive.normal_indices and max(primitive.normal_indices) >= normal_count:
            raise MalformedPrimitiveError(
                f"Primitive {primitive_index}: normal index {max(primitive.normal_indices)} "
                f"out of range ({normal_count} normals)", primitive_index)

    def _skip_primitive(self, mesh: Mesh, primitive_index: int, error: Exception) -> None:
        message = f"Skipping primitive {primitive_index} of geometry '{mesh.unique_id}': {error}"
        logger.warning(message)
        self.report.add_warning(message)
        self.report.skipped_primitives.append((mesh.unique_id, primitive_index))

    def _skip_geometry(self, geometry_id: str, reason: str) -> None:
        message = f"Skipping geometry '{geometry_id}': {reason}"
        logger.warning(message)
        self.report.add_warning(message)
        self.report.skipped_geometries.append(geometry_id)
