import enum
from typing import (Any,
                    Dict,
                    List,
                    Optional,
                    Sequence)

from reprit.base import generate_repr

from .hints import (NodeId,
                    RingId)


class TrackFlag(enum.IntFlag):
    CURRENT = 1
    CHANGES = 2
    CHANGES_ONLY = 4


class ClusterView:
    __slots__ = '_members_ids', '_quorate', '_ring_id'

    def __new__(cls,
                *,
                members_ids: Sequence[NodeId],
                quorate: bool,
                ring_id: RingId) -> 'ClusterView':
        self = super().__new__(cls)
        self._members_ids, self._quorate, self._ring_id = (
            tuple(members_ids), quorate, ring_id
        )
        return self

    __repr__ = generate_repr(__new__)

    def __eq__(self, other: Any) -> Any:
        return ((self.ring_id == other.ring_id
                 and self.quorate is other.quorate
                 and self.members_ids == other.members_ids)
                if isinstance(other, ClusterView)
                else NotImplemented)

    def __hash__(self) -> int:
        return hash((self.members_ids, self.quorate, self.ring_id))

    @property
    def members_ids(self) -> Sequence[NodeId]:
        return self._members_ids

    @property
    def nodes_count(self) -> int:
        return len(self._members_ids)

    @property
    def quorate(self) -> bool:
        return self._quorate

    @property
    def ring_id(self) -> RingId:
        return self._ring_id

    @classmethod
    def from_json(cls,
                  *,
                  quorate: bool,
                  ring_id: RingId,
                  view_list: List[NodeId]) -> 'ClusterView':
        return cls(members_ids=view_list,
                   quorate=bool(quorate),
                   ring_id=ring_id)

    def as_json(self) -> Dict[str, Any]:
        return {'quorate': self.quorate,
                'ring_id': self.ring_id,
                'view_list': list(self.members_ids)}


class Mailbox:
    """Single-slot holder of the latest delivered cluster view."""

    __slots__ = '_view',

    def __init__(self) -> None:
        self._view: Optional[ClusterView] = None

    __repr__ = generate_repr(__init__)

    @property
    def empty(self) -> bool:
        return self._view is None

    def clear(self) -> None:
        self._view = None

    def deliver(self, view: ClusterView) -> None:
        self._view = view

    def take(self) -> Optional[ClusterView]:
        result, self._view = self._view, None
        return result
