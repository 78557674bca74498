import enum
from abc import (ABC,
                 abstractmethod)
from typing import (Any,
                    List)

from .errors import ChannelError
from .hints import NodeId
from .status import Status
from .view import (Mailbox,
                   TrackFlag)
from .vote_info import NodeVoteInfo


class Channel(ABC):
    __slots__ = ()

    def __enter__(self) -> 'Channel':
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    @abstractmethod
    def close(self) -> None:
        """Releases underlying session, does nothing if already released."""


class ConfigurationStore(Channel):
    __slots__ = ()

    @abstractmethod
    def get_value(self, object_name: str, key: str) -> str:
        """
        Returns value of given key of given configuration object
        or raises ``NotConfigured`` exception if there is none.
        """


class ChannelState(enum.IntEnum):
    DISCONNECTED = 0
    CONNECTED = 1
    TRACKING = 2


class MembershipChannel(Channel):
    __slots__ = '_mailbox', '_state'

    def __init__(self) -> None:
        self._mailbox, self._state = Mailbox(), ChannelState.CONNECTED

    @property
    def mailbox(self) -> Mailbox:
        return self._mailbox

    @property
    def state(self) -> ChannelState:
        return self._state

    def close(self) -> None:
        if self._state is ChannelState.DISCONNECTED:
            return
        try:
            self._close()
        finally:
            self._state = ChannelState.DISCONNECTED
            self._mailbox.clear()

    def dispatch_one(self) -> bool:
        """
        Processes at most one pending message,
        delivering cluster views from notifications to the mailbox.
        Returns whether a message has been processed.
        """
        self._validate('quorum_dispatch')
        return self._dispatch_one()

    def get_quorate(self) -> bool:
        self._validate('quorum_getquorate')
        return self._get_quorate()

    def track_start(self, flags: TrackFlag = TrackFlag.CURRENT) -> None:
        self._validate('quorum_trackstart')
        self._track_start(flags)
        self._state = ChannelState.TRACKING

    def track_stop(self) -> None:
        self._validate('quorum_trackstop')
        try:
            self._track_stop()
        finally:
            self._state = ChannelState.CONNECTED

    @abstractmethod
    def _close(self) -> None:
        pass

    @abstractmethod
    def _dispatch_one(self) -> bool:
        pass

    @abstractmethod
    def _get_quorate(self) -> bool:
        pass

    @abstractmethod
    def _track_start(self, flags: TrackFlag) -> None:
        pass

    @abstractmethod
    def _track_stop(self) -> None:
        pass

    def _validate(self, operation: str) -> None:
        if self._state is ChannelState.DISCONNECTED:
            raise ChannelError(operation, Status.ERR_BAD_HANDLE)


class AddressChannel(Channel):
    __slots__ = ()

    @abstractmethod
    def get_node_addresses(self,
                           node_id: NodeId,
                           max_count: int) -> List[str]:
        """
        Returns at most ``max_count`` configured addresses of given node
        or raises ``QueryError`` exception in case of failure.
        """


class VoteChannel(Channel):
    __slots__ = ()

    @abstractmethod
    def get_info(self, node_id: NodeId) -> NodeVoteInfo:
        """Raises ``QueryError`` exception in case of failure."""

    @abstractmethod
    def set_expected(self, expected_votes: int) -> None:
        """Raises ``CommandError`` exception in case of failure."""

    @abstractmethod
    def set_votes(self, node_id: NodeId, votes: int) -> None:
        """Raises ``CommandError`` exception in case of failure."""


class Daemon(ABC):
    """Connects to services of a running quorum daemon."""

    __slots__ = ()

    def __enter__(self) -> 'Daemon':
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def close(self) -> None:
        pass

    @abstractmethod
    def connect_addresses(self) -> AddressChannel:
        """Raises ``ConnectError`` exception in case of failure."""

    @abstractmethod
    def connect_membership(self) -> MembershipChannel:
        """Raises ``ConnectError`` exception in case of failure."""

    @abstractmethod
    def connect_store(self) -> ConfigurationStore:
        """Raises ``ConnectError`` exception in case of failure."""

    @abstractmethod
    def connect_votes(self) -> VoteChannel:
        """
        Raises ``NotVoteProvider`` exception
        if the daemon does not use votes-based quorum provider
        or ``ConnectError`` exception in case of other failure.
        """
