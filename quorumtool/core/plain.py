from collections import deque as _deque
from typing import (AbstractSet as _AbstractSet,
                    Any as _Any,
                    Deque as _Deque,
                    Dict as _Dict,
                    List as _List,
                    Mapping as _Mapping,
                    MutableMapping as _MutableMapping,
                    Optional as _Optional,
                    Sequence as _Sequence,
                    Tuple as _Tuple)

from reprit import seekers as _seekers
from reprit.base import generate_repr as _generate_repr

from .channels import (AddressChannel as _AddressChannel,
                       ConfigurationStore as _ConfigurationStore,
                       Daemon as _Daemon,
                       MembershipChannel as _MembershipChannel,
                       VoteChannel as _VoteChannel)
from .errors import (ChannelError as _ChannelError,
                     CommandError as _CommandError,
                     ConnectError as _ConnectError,
                     NotConfigured as _NotConfigured,
                     NotVoteProvider as _NotVoteProvider,
                     QueryError as _QueryError)
from .hints import (NodeId as _NodeId,
                    RingId as _RingId)
from .provider import (PROVIDER_KEY as _PROVIDER_KEY,
                       QUORUM_OBJECT_NAME as _QUORUM_OBJECT_NAME,
                       VOTE_PROVIDER_NAME as _VOTE_PROVIDER_NAME)
from .status import Status as _Status
from .view import (ClusterView as _ClusterView,
                   TrackFlag as _TrackFlag)
from .vote_info import (LOCAL_NODE_ID as _LOCAL_NODE_ID,
                        NodeVoteInfo as _NodeVoteInfo)

ADDRESSES_SERVICE = 'cfg'
MEMBERSHIP_SERVICE = 'quorum'
STORE_SERVICE = 'confdb'
VOTES_SERVICE = 'votequorum'


class Daemon(_Daemon):
    """In-memory daemon state served through in-process channels."""

    __slots__ = ('_addresses', '_configuration', '_local_node_id',
                 '_members_ids', '_quorate', '_ring_id', '_tracking',
                 '_unavailable_services', '_votes_infos', 'commands')

    def __init__(self,
                 *,
                 addresses: _Optional[_Mapping[_NodeId, _Sequence[str]]]
                 = None,
                 configuration: _Optional[_Mapping[_Tuple[str, str], str]]
                 = None,
                 local_node_id: _NodeId = 1,
                 members_ids: _Sequence[_NodeId] = (),
                 quorate: bool = False,
                 ring_id: _RingId = 0,
                 unavailable_services: _AbstractSet[str] = frozenset(),
                 votes_infos: _Optional[_Mapping[_NodeId, _NodeVoteInfo]]
                 = None) -> None:
        self._addresses = {} if addresses is None else dict(addresses)
        self._configuration = ({}
                               if configuration is None
                               else dict(configuration))
        self._local_node_id, self._members_ids, self._quorate = (
            local_node_id, list(members_ids), quorate
        )
        self._ring_id = ring_id
        self._unavailable_services = unavailable_services
        self._votes_infos: _MutableMapping[_NodeId, _NodeVoteInfo] = (
            {} if votes_infos is None else dict(votes_infos)
        )
        self._tracking: _List[MembershipChannel] = []
        self.commands: _List[_Tuple[_Any, ...]] = []

    __repr__ = _generate_repr(__init__,
                              field_seeker=_seekers.complex_)

    @property
    def quorate(self) -> bool:
        return self._quorate

    @property
    def view(self) -> _ClusterView:
        return _ClusterView(members_ids=self._members_ids,
                            quorate=self._quorate,
                            ring_id=self._ring_id)

    def change(self,
               *,
               members_ids: _Optional[_Sequence[_NodeId]] = None,
               quorate: _Optional[bool] = None) -> None:
        """Moves to the next ring notifying tracking channels."""
        if members_ids is not None:
            self._members_ids = list(members_ids)
        if quorate is not None:
            self._quorate = quorate
        self._ring_id += 1
        view = self.view
        for channel in self._tracking:
            if channel.flags & (_TrackFlag.CHANGES
                                | _TrackFlag.CHANGES_ONLY):
                channel.push(view)

    def connect_addresses(self) -> 'AddressChannel':
        self._validate_availability(ADDRESSES_SERVICE,
                                    'corosync_cfg_initialize')
        return AddressChannel(self)

    def connect_membership(self) -> 'MembershipChannel':
        self._validate_availability(MEMBERSHIP_SERVICE, 'quorum_initialize')
        return MembershipChannel(self)

    def connect_store(self) -> 'ConfigurationStore':
        self._validate_availability(STORE_SERVICE, 'confdb_initialize')
        return ConfigurationStore(self)

    def connect_votes(self) -> 'VoteChannel':
        operation = 'votequorum_initialize'
        self._validate_availability(VOTES_SERVICE, operation)
        if (self._configuration.get((_QUORUM_OBJECT_NAME, _PROVIDER_KEY))
                != _VOTE_PROVIDER_NAME):
            raise _NotVoteProvider(operation, _Status.ERR_NOT_EXIST)
        return VoteChannel(self)

    def get_addresses(self, node_id: _NodeId) -> _Sequence[str]:
        return self._addresses.get(node_id, ())

    def get_value(self, object_name: str, key: str) -> _Optional[str]:
        return self._configuration.get((object_name, key))

    def get_vote_info(self, node_id: _NodeId) -> _Optional[_NodeVoteInfo]:
        return self._votes_infos.get(self._to_actual_node_id(node_id))

    def set_expected(self, expected_votes: int) -> None:
        self._votes_infos = {
            node_id: _replace_info(info,
                                   expected_votes=expected_votes,
                                   highest_expected=max(info.highest_expected,
                                                        expected_votes))
            for node_id, info in self._votes_infos.items()
        }

    def set_votes(self, node_id: _NodeId, votes: int) -> bool:
        actual_node_id = self._to_actual_node_id(node_id)
        try:
            info = self._votes_infos[actual_node_id]
        except KeyError:
            return False
        self._votes_infos[actual_node_id] = _replace_info(info,
                                                          votes=votes)
        return True

    def start_tracking(self, channel: 'MembershipChannel') -> None:
        if channel not in self._tracking:
            self._tracking.append(channel)

    def stop_tracking(self, channel: 'MembershipChannel') -> None:
        if channel in self._tracking:
            self._tracking.remove(channel)

    def _to_actual_node_id(self, node_id: _NodeId) -> _NodeId:
        return self._local_node_id if node_id == _LOCAL_NODE_ID else node_id

    def _validate_availability(self, service: str, operation: str) -> None:
        if service in self._unavailable_services:
            raise _ConnectError(operation, _Status.ERR_LIBRARY)


class _PlainChannel:
    __slots__ = '_daemon', '_closed'

    def __init__(self, _daemon: Daemon) -> None:
        self._daemon, self._closed = _daemon, False

    __repr__ = _generate_repr(__init__)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def _validate(self,
                  operation: str,
                  error_cls: type = _QueryError) -> None:
        if self._closed:
            raise error_cls(operation, _Status.ERR_BAD_HANDLE)


class AddressChannel(_PlainChannel, _AddressChannel):
    __slots__ = ()

    def get_node_addresses(self,
                           node_id: _NodeId,
                           max_count: int) -> _List[str]:
        self._validate('corosync_cfg_get_node_addrs')
        return list(self._daemon.get_addresses(node_id))[:max_count]


class ConfigurationStore(_PlainChannel, _ConfigurationStore):
    __slots__ = ()

    def get_value(self, object_name: str, key: str) -> str:
        operation = 'confdb_key_get'
        self._validate(operation, _NotConfigured)
        result = self._daemon.get_value(object_name, key)
        if result is None:
            raise _NotConfigured(operation, _Status.ERR_NOT_EXIST)
        return result


class VoteChannel(_PlainChannel, _VoteChannel):
    __slots__ = ()

    def get_info(self, node_id: _NodeId) -> _NodeVoteInfo:
        operation = 'votequorum_getinfo'
        self._validate(operation)
        result = self._daemon.get_vote_info(node_id)
        if result is None:
            raise _QueryError(operation, _Status.ERR_NOT_EXIST)
        return result

    def set_expected(self, expected_votes: int) -> None:
        operation = 'votequorum_setexpected'
        self._validate(operation, _CommandError)
        self._daemon.commands.append((operation, expected_votes))
        if expected_votes <= 0:
            raise _CommandError(operation, _Status.ERR_INVALID_PARAM)
        self._daemon.set_expected(expected_votes)

    def set_votes(self, node_id: _NodeId, votes: int) -> None:
        operation = 'votequorum_setvotes'
        self._validate(operation, _CommandError)
        self._daemon.commands.append((operation, node_id, votes))
        if votes < 0:
            raise _CommandError(operation, _Status.ERR_INVALID_PARAM)
        if not self._daemon.set_votes(node_id, votes):
            raise _CommandError(operation, _Status.ERR_NOT_EXIST)


class MembershipChannel(_MembershipChannel):
    __slots__ = '_daemon', '_flags', '_notifications'

    def __init__(self, _daemon: Daemon) -> None:
        super().__init__()
        self._daemon = _daemon
        self._flags = _TrackFlag(0)
        self._notifications: _Deque[_ClusterView] = _deque()

    __repr__ = _generate_repr(__init__)

    @property
    def flags(self) -> _TrackFlag:
        return self._flags

    @property
    def notifications(self) -> _Sequence[_ClusterView]:
        return tuple(self._notifications)

    def push(self, view: _ClusterView) -> None:
        self._notifications.append(view)

    def _close(self) -> None:
        self._daemon.stop_tracking(self)
        self._notifications.clear()

    def _dispatch_one(self) -> bool:
        if not self._notifications:
            return False
        self.mailbox.deliver(self._notifications.popleft())
        return True

    def _get_quorate(self) -> bool:
        return self._daemon.quorate

    def _track_start(self, flags: _TrackFlag) -> None:
        if not flags:
            raise _ChannelError('quorum_trackstart', _Status.ERR_BAD_FLAGS)
        self._flags = flags
        if flags & _TrackFlag.CURRENT:
            self.push(self._daemon.view)
        self._daemon.start_tracking(self)

    def _track_stop(self) -> None:
        self._flags = _TrackFlag(0)
        self._daemon.stop_tracking(self)


def _replace_info(info: _NodeVoteInfo, **changes: _Any) -> _NodeVoteInfo:
    parameters: _Dict[str, _Any] = {
        'expected_votes': info.expected_votes,
        'flags': info.flags,
        'highest_expected': info.highest_expected,
        'node_id': info.node_id,
        'quorum': info.quorum,
        'total_votes': info.total_votes,
        'votes': info.votes
    }
    parameters.update(changes)
    return _NodeVoteInfo(**parameters)
