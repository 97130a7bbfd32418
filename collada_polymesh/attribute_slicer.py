"""
Attribute slicer: per-face UV and color ids.

A primitive stores one index stream per UV channel and per color channel,
parallel to its position stream. While the decoders walk positions, the
slicer walks each channel with its own cursor and hands out the ids that
belong to the corners of the current face.

Polygon decoders consume the streams in order (take). Fan and strip
decoders revisit vertices, so they address slots directly (gather) and
re-synchronize the cursors at every group boundary (seek).
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .errors import InternalConsistencyError
from .mesh_data import IndexList, Mesh, MeshPrimitive
from .polymesh import FaceAttribute

logger = logging.getLogger(__name__)

UV_CHANNEL = "uv"
COLOR_CHANNEL = "color"


class ChannelCursor:
    """Read position into one channel's index stream."""

    def __init__(self, kind: str, set_index: int, index_list: IndexList):
        self.kind = kind
        self.set_index = set_index
        self.index_list = index_list
        self.position = 0

    @property
    def name(self) -> str:
        return self.index_list.name

    def _id(self, slot: int) -> int:
        indices = self.index_list.indices
        if slot < 0 or slot >= len(indices):
            raise InternalConsistencyError(
                f"{self.kind} channel '{self.name}' read at slot {slot}, "
                f"stream has {len(indices)} entries"
            )
        return indices[slot] - self.index_list.initial_index

    def take(self, count: int) -> List[int]:
        """Next `count` ids; the cursor moves past them."""
        ids = [self._id(self.position + i) for i in range(count)]
        self.position += count
        return ids

    def gather(self, slots: Sequence[int]) -> List[int]:
        """Ids at absolute slots; the cursor doesn't move."""
        return [self._id(slot) for slot in slots]

    def seek(self, position: int) -> None:
        self.position = position

    def __repr__(self) -> str:
        return f"ChannelCursor({self.kind}:{self.name}@{self.position})"


def _resolve_set_index(kind: str, name: str, found: Optional[int], ordinal: int) -> int:
    if found is not None:
        return found
    logger.warning(f"No {kind} set named '{name}' in mesh, using channel position {ordinal}")
    return ordinal


class AttributeSlicer:
    """
    All UV and color cursors of one primitive.

    Channels with an empty index stream are left out entirely, so faces
    never get an attribute entry for them.
    """

    def __init__(self, channels: Sequence[ChannelCursor]):
        self.channels: List[ChannelCursor] = list(channels)

    @classmethod
    def for_primitive(cls, mesh: Mesh, primitive: MeshPrimitive) -> "AttributeSlicer":
        channels = []
        for ordinal, index_list in enumerate(primitive.uv_indices):
            if len(index_list) == 0:
                continue
            set_index = _resolve_set_index(UV_CHANNEL, index_list.name,
                                           mesh.uv_set_index(index_list.name), ordinal)
            channels.append(ChannelCursor(UV_CHANNEL, set_index, index_list))
        for ordinal, index_list in enumerate(primitive.color_indices):
            if len(index_list) == 0:
                continue
            set_index = _resolve_set_index(COLOR_CHANNEL, index_list.name,
                                           mesh.color_set_index(index_list.name), ordinal)
            channels.append(ChannelCursor(COLOR_CHANNEL, set_index, index_list))
        return cls(channels)

    def take(self, channel: int, count: int) -> List[int]:
        """Next `count` ids of one channel (by position in `channels`)."""
        return self.channels[channel].take(count)

    def _split(self, per_channel: List[List[int]]) -> Tuple[List[FaceAttribute], List[FaceAttribute]]:
        uvs: List[FaceAttribute] = []
        colors: List[FaceAttribute] = []
        for cursor, ids in zip(self.channels, per_channel):
            target = uvs if cursor.kind == UV_CHANNEL else colors
            target.append(FaceAttribute(cursor.set_index, ids))
        return uvs, colors

    def take_face(self, count: int) -> Tuple[List[FaceAttribute], List[FaceAttribute]]:
        """Take `count` ids from every channel, split into (uvs, colors)."""
        return self._split([cursor.take(count) for cursor in self.channels])

    def gather_face(self, slots: Sequence[int]) -> Tuple[List[FaceAttribute], List[FaceAttribute]]:
        """Ids at the given slots from every channel, split into (uvs, colors)."""
        return self._split([cursor.gather(slots) for cursor in self.channels])

    def seek(self, position: int) -> None:
        for cursor in self.channels:
            cursor.seek(position)

    def check_position(self, expected: int) -> None:
        """
        Verify every cursor sits where the position decoder is.

        Raises:
            InternalConsistencyError: If a cursor drifted from the decoder
        """
        for cursor in self.channels:
            if cursor.position != expected:
                raise InternalConsistencyError(
                    f"{cursor.kind} channel '{cursor.name}' at {cursor.position}, "
                    f"position decoder at {expected}"
                )

    def __len__(self) -> int:
        return len(self.channels)
