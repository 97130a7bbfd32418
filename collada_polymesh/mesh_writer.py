"""
Output boundary: where assembled meshes go.

The importer doesn't know the target file format. It talks to a MeshWriter,
which gets one call per primary mesh, one per secondary instance and one per
group id. RecordingMeshWriter keeps those calls in memory, which is all the
tests and the JSON writer need.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Union

from .constants import NODE_PATH_SEPARATOR
from .polymesh import PolyMesh
from .scene import TransformNode


@dataclass
class MeshNode:
    """A mesh shape node parented under a transform node."""
    geometry_id: str
    name: str
    parent: TransformNode

    @property
    def node_path(self) -> str:
        return f"{self.parent.node_path}{NODE_PATH_SEPARATOR}{self.name}"


class GroupIdAssignment(NamedTuple):
    """Group id node tied to one primitive of one instance of a geometry."""
    name: str
    geometry_id: str
    instance_index: int
    primitive_index: int


class InstanceReference(NamedTuple):
    """Secondary occurrence: the existing mesh node parented under another transform."""
    mesh_node: MeshNode
    transform: TransformNode


class Emission(NamedTuple):
    """One writer call, as recorded by RecordingMeshWriter."""
    kind: str
    payload: Union[PolyMesh, InstanceReference, GroupIdAssignment]
    mesh_node: Optional[MeshNode] = None


class MeshWriter(ABC):
    """Receives everything the importer produces."""

    @abstractmethod
    def write_mesh(self, mesh_node: MeshNode, polymesh: PolyMesh) -> None:
        """Full geometry of a primary instance."""

    @abstractmethod
    def write_instance(self, mesh_node: MeshNode, transform: TransformNode) -> None:
        """Reference to an already written mesh from another transform."""

    @abstractmethod
    def write_group_id(self, assignment: GroupIdAssignment) -> None:
        """A group id node for per-primitive material assignment."""


class RecordingMeshWriter(MeshWriter):
    """Writer that keeps every call in order."""

    def __init__(self):
        self.emissions: List[Emission] = []

    def write_mesh(self, mesh_node: MeshNode, polymesh: PolyMesh) -> None:
        self.emissions.append(Emission("mesh", polymesh, mesh_node))

    def write_instance(self, mesh_node: MeshNode, transform: TransformNode) -> None:
        self.emissions.append(Emission("instance", InstanceReference(mesh_node, transform), mesh_node))

    def write_group_id(self, assignment: GroupIdAssignment) -> None:
        self.emissions.append(Emission("group_id", assignment))

    @property
    def meshes(self) -> List[PolyMesh]:
        return [e.payload for e in self.emissions if e.kind == "mesh"]

    @property
    def instances(self) -> List[InstanceReference]:
        return [e.payload for e in self.emissions if e.kind == "instance"]

    @property
    def group_ids(self) -> List[GroupIdAssignment]:
        return [e.payload for e in self.emissions if e.kind == "group_id"]
