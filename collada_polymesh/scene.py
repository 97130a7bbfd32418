"""
Visual scene collaborator: transform nodes and geometry instances.

The importer only asks two questions of the scene: which transform nodes
instance a geometry (in document order), and what a transform node's name
and path are.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from .constants import NODE_PATH_SEPARATOR


@dataclass
class TransformNode:
    """A transform node of the target scene."""
    unique_id: str
    name: str
    parent: Optional["TransformNode"] = None

    @property
    def node_path(self) -> str:
        prefix = self.parent.node_path if self.parent is not None else ""
        return f"{prefix}{NODE_PATH_SEPARATOR}{self.name}"


class SceneGraph:
    """Transform nodes plus the geometry instances they carry."""

    def __init__(self):
        self._nodes: Dict[str, TransformNode] = {}
        self._instances: Dict[str, List[str]] = {}

    def add_node(self, unique_id: str, name: str, parent_id: Optional[str] = None) -> TransformNode:
        parent = self._nodes.get(parent_id) if parent_id is not None else None
        if parent_id is not None and parent is None:
            raise KeyError(f"Parent node not found: {parent_id}")
        node = TransformNode(unique_id, name, parent)
        self._nodes[unique_id] = node
        return node

    def set_parent(self, node_id: str, parent_id: str) -> None:
        """
        Parent an existing node under another existing node.

        Raises:
            KeyError: If either node is unknown
            ValueError: If the link would make the node its own ancestor
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise KeyError(f"Node not found: {node_id}")
        parent = self._nodes.get(parent_id)
        if parent is None:
            raise KeyError(f"Parent node not found: {parent_id}")
        ancestor = parent
        while ancestor is not None:
            if ancestor is node:
                raise ValueError(f"Parenting '{node_id}' under '{parent_id}' creates a cycle")
            ancestor = ancestor.parent
        node.parent = parent

    def instance_geometry(self, node_id: str, geometry_id: str) -> None:
        """Record that a node instances a geometry. The node may be unknown."""
        self._instances.setdefault(geometry_id, []).append(node_id)

    def find_geometry_transform_ids(self, geometry_id: str) -> List[str]:
        """Ids of the nodes instancing a geometry, in occurrence order."""
        return list(self._instances.get(geometry_id, []))

    def find_transform_node(self, node_id: str) -> Optional[TransformNode]:
        return self._nodes.get(node_id)

    @property
    def nodes(self) -> List[TransformNode]:
        return list(self._nodes.values())

    def __repr__(self) -> str:
        return f"SceneGraph(nodes={len(self._nodes)}, geometries={len(self._instances)})"
