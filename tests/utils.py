import logging
from typing import (Any,
                    List,
                    Optional,
                    Union)

from reprit.base import generate_repr

from quorumtool.cluster import (ClusterView,
                                MembershipChannel,
                                plain)
from quorumtool.core.channels import ChannelState
from quorumtool.core.view import TrackFlag


def to_logger() -> logging.Logger:
    return logging.getLogger('tests')


class Echo:
    def __init__(self) -> None:
        self.lines: List[str] = []

    __repr__ = generate_repr(__init__)

    def __call__(self, line: str) -> None:
        self.lines.extend(line.split('\n'))


class ScriptedMembershipChannel(MembershipChannel):
    """Delivers given view on the given pump and counts pumps."""

    def __init__(self,
                 view: ClusterView,
                 *,
                 delivery_pump: Optional[int] = 1,
                 quorate: bool) -> None:
        super().__init__()
        self.delivery_pump, self.quorate, self.view = (
            delivery_pump, quorate, view
        )
        self.calls: List[str] = []
        self.pumps_count = 0

    __repr__ = generate_repr(__init__)

    def _close(self) -> None:
        self.calls.append('close')

    def _dispatch_one(self) -> bool:
        self.pumps_count += 1
        if self.pumps_count == self.delivery_pump:
            self.mailbox.deliver(self.view)
            return True
        return False

    def _get_quorate(self) -> bool:
        self.calls.append('get_quorate')
        return self.quorate

    def _track_start(self, flags: TrackFlag) -> None:
        self.calls.append('track_start')
        self.pumps_count = 0

    def _track_stop(self) -> None:
        self.calls.append('track_stop')


class RecordingDaemon(plain.Daemon):
    """Keeps every channel it has handed out."""

    __slots__ = 'channels',

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.channels: List[Union[plain.AddressChannel,
                                  plain.ConfigurationStore,
                                  plain.MembershipChannel,
                                  plain.VoteChannel]] = []

    def connect_addresses(self) -> plain.AddressChannel:
        return self._record(super().connect_addresses())

    def connect_membership(self) -> plain.MembershipChannel:
        return self._record(super().connect_membership())

    def connect_store(self) -> plain.ConfigurationStore:
        return self._record(super().connect_store())

    def connect_votes(self) -> plain.VoteChannel:
        return self._record(super().connect_votes())

    def _record(self, channel: Any) -> Any:
        self.channels.append(channel)
        return channel


def is_channel_closed(channel: Any) -> bool:
    return (channel.state is ChannelState.DISCONNECTED
            if isinstance(channel, MembershipChannel)
            else channel.closed)
