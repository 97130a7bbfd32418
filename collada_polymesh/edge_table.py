"""
Edge table: unique undirected edges of one mesh.

Faces in the target format don't list vertices, they list edges. Every edge
gets a dense index in discovery order, and a face walks it either the way
it was first seen (index i) or backwards (index -(i+1)).

The table is filled in one pass over all primitives before any face is
decoded, so a lookup during decoding can only miss if a decoder walks an
edge the population pass never produced. That's a bug, not bad input.
"""

from typing import Dict, Iterator, List, NamedTuple, Tuple

from .errors import InternalConsistencyError


class Edge(NamedTuple):
    """An edge in its stored direction (the direction it was first seen)."""
    start: int
    end: int

    @property
    def key(self) -> Tuple[int, int]:
        """Direction-free key: (a, b) and (b, a) share it."""
        return (self.start, self.end) if self.start <= self.end else (self.end, self.start)


def signed_edge_ref(index: int, is_reversed: bool) -> int:
    """Encode an edge index and traversal direction as one integer."""
    return -(index + 1) if is_reversed else index


def decode_edge_ref(ref: int) -> Tuple[int, bool]:
    """Inverse of signed_edge_ref: (index, is_reversed)."""
    if ref < 0:
        return -ref - 1, True
    return ref, False


class EdgeTable:
    """
    Insertion-ordered table of undirected edges.

    Example:
        >>> table = EdgeTable()
        >>> table.insert_or_get(3, 7)
        (0, False)
        >>> table.insert_or_get(7, 3)
        (0, True)
        >>> table.edges
        [Edge(start=3, end=7)]
    """

    def __init__(self):
        self._indices: Dict[Tuple[int, int], int] = {}
        self._edges: List[Edge] = []

    def insert_or_get(self, a: int, b: int) -> Tuple[int, bool]:
        """
        Index of edge (a, b), adding it if it's new.

        Returns:
            (index, is_reversed) where is_reversed tells whether (a, b) runs
            against the stored direction. A new edge is stored as (a, b).
        """
        edge = Edge(a, b)
        index = self._indices.get(edge.key)
        if index is None:
            index = len(self._edges)
            self._indices[edge.key] = index
            self._edges.append(edge)
            return index, False
        return index, self._edges[index].start != a

    def lookup(self, a: int, b: int) -> Tuple[int, bool]:
        """
        Same as insert_or_get, but the edge must already be in the table.

        Raises:
            InternalConsistencyError: If the edge was never inserted
        """
        edge = Edge(a, b)
        index = self._indices.get(edge.key)
        if index is None:
            raise InternalConsistencyError(f"Edge not found: {a}, {b}")
        return index, self._edges[index].start != a

    def signed_ref(self, a: int, b: int) -> int:
        """Looked-up edge (a, b) as a signed edge reference."""
        return signed_edge_ref(*self.lookup(a, b))

    @property
    def edges(self) -> List[Edge]:
        """All edges in insertion order; position == index."""
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, pair) -> bool:
        return Edge(*pair).key in self._indices

    def __iter__(self) -> Iterator[Edge]:
        return iter(self._edges)

    def __repr__(self) -> str:
        return f"EdgeTable(edges={len(self._edges)})"
