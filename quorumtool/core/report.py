import dataclasses
import enum
from typing import (List,
                    Optional,
                    Sequence)

from .hints import (NodeId,
                    RingId)
from .status import Status
from .vote_info import (NodeVoteInfo,
                        iterate_flags)

LABEL_WIDTH = 18
NOT_CONFIGURED_QUORUM_TYPE = 'Not configured'


class NodeIdFormat(enum.IntEnum):
    DECIMAL = 0
    HEXADECIMAL = 1

    def render(self, node_id: NodeId) -> str:
        return (f'{node_id:4d}'
                if self is NodeIdFormat.DECIMAL
                else f'0x{node_id:04x}')


@dataclasses.dataclass(frozen=True)
class StatusReport:
    nodes_count: int
    quorate: bool
    quorum_type: str
    ring_id: RingId
    version: str
    vote_info: Optional[NodeVoteInfo] = None
    vote_status: Status = Status.OK


@dataclasses.dataclass(frozen=True)
class NodeRow:
    node_id: NodeId
    name: str
    votes: Optional[int] = None


@dataclasses.dataclass(frozen=True)
class NodesReport:
    rows: Sequence[NodeRow]
    with_votes: bool


def render_status(report: StatusReport) -> List[str]:
    result = [_to_line('Version:', report.version),
              _to_line('Nodes:', report.nodes_count),
              _to_line('Ring ID:', report.ring_id),
              _to_line('Quorum type:', report.quorum_type),
              _to_line('Quorate:', 'Yes' if report.quorate else 'No')]
    info = report.vote_info
    if info is not None:
        result += [
            _to_line('Node votes:', info.votes),
            _to_line('Expected votes:', info.expected_votes),
            _to_line('Highest expected:', info.highest_expected),
            _to_line('Total votes:', info.total_votes),
            _to_line('Quorum:',
                     f'{info.quorum} '
                     + (' ' if info.quorate else 'Activity blocked')),
            _to_line('Flags:', ''.join(f'{flag.token} '
                                       for flag in iterate_flags(info.flags)))
        ]
    return result


def render_nodes(report: NodesReport,
                 node_id_format: NodeIdFormat) -> List[str]:
    result = ['Nodeid     Votes  Name'
              if report.with_votes
              else 'Nodeid     Name']
    for row in report.rows:
        prefix = f'{node_id_format.render(row.node_id)}   '
        result.append(f'{prefix}{row.votes:3d}  {row.name}'
                      if report.with_votes
                      else f'{prefix}{row.name}')
    return result


def _to_line(label: str, value: object) -> str:
    return f'{label:<{LABEL_WIDTH}}{value}'
