import enum
from typing import (AbstractSet,
                    Any,
                    Dict,
                    FrozenSet,
                    Iterator)

from reprit.base import generate_repr

from .hints import NodeId

LOCAL_NODE_ID: NodeId = 0


class VoteFlag(enum.IntEnum):
    HAS_STATE = 1
    DISALLOWED_NODES = 2
    TWO_NODE = 4
    QUORATE = 8

    @property
    def token(self) -> str:
        return _FLAGS_TOKENS[self]


_FLAGS_TOKENS = {VoteFlag.HAS_STATE: 'HasState',
                 VoteFlag.DISALLOWED_NODES: 'DisallowedNodes',
                 VoteFlag.TWO_NODE: '2Node',
                 VoteFlag.QUORATE: 'Quorate'}


def flags_from_mask(mask: int) -> FrozenSet[VoteFlag]:
    return frozenset(flag for flag in VoteFlag if mask & flag)


def flags_to_mask(flags: AbstractSet[VoteFlag]) -> int:
    result = 0
    for flag in flags:
        result |= flag
    return result


def iterate_flags(flags: AbstractSet[VoteFlag]) -> Iterator[VoteFlag]:
    return (flag for flag in VoteFlag if flag in flags)


class NodeVoteInfo:
    __slots__ = ('_expected_votes', '_flags', '_highest_expected',
                 '_node_id', '_quorum', '_total_votes', '_votes')

    def __new__(cls,
                *,
                expected_votes: int,
                flags: AbstractSet[VoteFlag] = frozenset(),
                highest_expected: int,
                node_id: NodeId,
                quorum: int,
                total_votes: int,
                votes: int) -> 'NodeVoteInfo':
        self = super().__new__(cls)
        (
            self._expected_votes, self._flags, self._highest_expected,
            self._node_id, self._quorum, self._total_votes, self._votes
        ) = (expected_votes, frozenset(flags), highest_expected, node_id,
             quorum, total_votes, votes)
        return self

    __repr__ = generate_repr(__new__)

    def __eq__(self, other: Any) -> Any:
        return ((self.node_id == other.node_id
                 and self.votes == other.votes
                 and self.expected_votes == other.expected_votes
                 and self.highest_expected == other.highest_expected
                 and self.total_votes == other.total_votes
                 and self.quorum == other.quorum
                 and self.flags == other.flags)
                if isinstance(other, NodeVoteInfo)
                else NotImplemented)

    @property
    def expected_votes(self) -> int:
        return self._expected_votes

    @property
    def flags(self) -> FrozenSet[VoteFlag]:
        return self._flags

    @property
    def highest_expected(self) -> int:
        return self._highest_expected

    @property
    def node_id(self) -> NodeId:
        return self._node_id

    @property
    def quorate(self) -> bool:
        return VoteFlag.QUORATE in self._flags

    @property
    def quorum(self) -> int:
        return self._quorum

    @property
    def total_votes(self) -> int:
        return self._total_votes

    @property
    def votes(self) -> int:
        return self._votes

    @classmethod
    def from_json(cls,
                  *,
                  flags: int,
                  highest_expected: int,
                  node_expected_votes: int,
                  node_id: NodeId,
                  node_votes: int,
                  quorum: int,
                  total_votes: int,
                  **_: Any) -> 'NodeVoteInfo':
        return cls(expected_votes=node_expected_votes,
                   flags=flags_from_mask(flags),
                   highest_expected=highest_expected,
                   node_id=node_id,
                   quorum=quorum,
                   total_votes=total_votes,
                   votes=node_votes)

    def as_json(self) -> Dict[str, Any]:
        return {'flags': flags_to_mask(self.flags),
                'highest_expected': self.highest_expected,
                'node_expected_votes': self.expected_votes,
                'node_id': self.node_id,
                'node_votes': self.votes,
                'quorum': self.quorum,
                'total_votes': self.total_votes}
