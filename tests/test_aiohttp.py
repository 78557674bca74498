import socket
from typing import (Any,
                    List,
                    Tuple)

import pytest
from yarl import URL

from quorumtool.cluster import (ChannelError,
                                NameFormat,
                                NodeIdFormat,
                                NodeVoteInfo,
                                NotVoteProvider,
                                VoteFlag,
                                aiohttp,
                                plain,
                                run)
from quorumtool.core.dispatcher import (EXIT_FAILURE,
                                        EXIT_NO_VOTE_PROVIDER,
                                        EXIT_SUCCESS)
from quorumtool.core.membership import wait_for_one_event
from quorumtool.core.plain import VOTES_SERVICE
from quorumtool.core.provider import (PROVIDER_KEY,
                                      QUORUM_OBJECT_NAME,
                                      VOTE_PROVIDER_NAME)
from quorumtool.core.view import TrackFlag
from . import strategies
from .daemon_stub import DaemonStub
from .utils import (Echo,
                    to_logger)

POLL_INTERVAL = 0.01
USAGE = 'usage'

Outcome = Tuple[int, List[str]]


def to_vote_daemon(quorate: bool = True) -> plain.Daemon:
    members_ids = [1, 2, 255]
    return strategies.to_daemon(
            members_ids, quorate, 7,
            {node_id: NodeVoteInfo(expected_votes=3,
                                   flags=({VoteFlag.QUORATE}
                                          if quorate
                                          else set()),
                                   highest_expected=3,
                                   node_id=node_id,
                                   quorum=2,
                                   total_votes=3,
                                   votes=1)
             for node_id in members_ids}
    )


def run_locally_and_remotely(daemon: plain.Daemon,
                             *,
                             notify_before_reply: bool = False,
                             **options: Any) -> Tuple[Outcome, Outcome]:
    local_echo, remote_echo = Echo(), Echo()
    local_result = run(daemon,
                       echo=local_echo,
                       logger=to_logger(),
                       usage=USAGE,
                       **options)
    with DaemonStub(daemon,
                    notify_before_reply=notify_before_reply) as stub, \
            aiohttp.Daemon(stub.url,
                           poll_interval=POLL_INTERVAL) as remote:
        remote_result = run(remote,
                            echo=remote_echo,
                            logger=to_logger(),
                            usage=USAGE,
                            **options)
    return ((local_result, local_echo.lines),
            (remote_result, remote_echo.lines))


@pytest.mark.parametrize('quorate', [False, True])
@pytest.mark.parametrize('notify_before_reply', [False, True])
def test_status(quorate: bool, notify_before_reply: bool) -> None:
    local, remote = run_locally_and_remotely(
            to_vote_daemon(quorate),
            notify_before_reply=notify_before_reply,
            show_status=True
    )

    assert remote == local
    assert remote[0] == int(quorate)


@pytest.mark.parametrize('node_id_format', list(NodeIdFormat))
def test_list_nodes(node_id_format: NodeIdFormat) -> None:
    local, remote = run_locally_and_remotely(to_vote_daemon(),
                                             list_nodes=True,
                                             name_format=NameFormat.NUMERIC,
                                             node_id_format=node_id_format)

    assert remote == local
    assert remote[0] == EXIT_SUCCESS
    assert remote[1][1:] == [
        f'{node_id_format.render(node_id)}     1  10.0.{node_id}.{index}'
        for index, node_id in enumerate([1, 2, 255])
    ]


def test_set_votes() -> None:
    daemon = to_vote_daemon()

    with DaemonStub(daemon) as stub, \
            aiohttp.Daemon(stub.url,
                           poll_interval=POLL_INTERVAL) as remote:
        result = run(remote,
                     echo=Echo(),
                     logger=to_logger(),
                     node_id='0x2',
                     usage=USAGE,
                     votes='3')

    assert result == EXIT_SUCCESS
    assert daemon.commands == [('votequorum_setvotes', 2, 3)]
    assert daemon.get_vote_info(2).votes == 3


def test_set_expected() -> None:
    daemon = to_vote_daemon()

    with DaemonStub(daemon) as stub, \
            aiohttp.Daemon(stub.url,
                           poll_interval=POLL_INTERVAL) as remote:
        result = run(remote,
                     echo=Echo(),
                     expected_votes='5',
                     logger=to_logger(),
                     usage=USAGE)

    assert result == EXIT_SUCCESS
    assert daemon.commands == [('votequorum_setexpected', 5)]
    assert daemon.get_vote_info(1).highest_expected == 5


def test_without_vote_provider() -> None:
    daemon = plain.Daemon(members_ids=[1],
                          quorate=True)

    with DaemonStub(daemon) as stub, \
            aiohttp.Daemon(stub.url,
                           poll_interval=POLL_INTERVAL) as remote:
        result = run(remote,
                     echo=Echo(),
                     expected_votes='2',
                     logger=to_logger(),
                     usage=USAGE)

        with pytest.raises(NotVoteProvider):
            remote.connect_votes()

    assert result == EXIT_NO_VOTE_PROVIDER
    assert not daemon.commands


def test_vote_service_failure() -> None:
    daemon = plain.Daemon(configuration={(QUORUM_OBJECT_NAME, PROVIDER_KEY):
                                             VOTE_PROVIDER_NAME},
                          unavailable_services={VOTES_SERVICE})

    with DaemonStub(daemon) as stub, \
            aiohttp.Daemon(stub.url,
                           poll_interval=POLL_INTERVAL) as remote:
        result = run(remote,
                     echo=Echo(),
                     logger=to_logger(),
                     show_status=True,
                     usage=USAGE)

    assert result == EXIT_FAILURE


def test_unreachable_daemon() -> None:
    with socket.socket() as free_socket:
        free_socket.bind(('127.0.0.1', 0))
        _, port = free_socket.getsockname()
    url = URL.build(scheme='http',
                    host='127.0.0.1',
                    port=port)
    echo = Echo()

    with aiohttp.Daemon(url,
                        poll_interval=POLL_INTERVAL,
                        request_timeout=1) as remote:
        result = run(remote,
                     echo=echo,
                     logger=to_logger(),
                     show_status=True,
                     usage=USAGE)

    assert result == EXIT_FAILURE
    assert not echo.lines


def test_membership_channel() -> None:
    daemon = to_vote_daemon()

    with DaemonStub(daemon) as stub, \
            aiohttp.Daemon(stub.url,
                           poll_interval=POLL_INTERVAL) as remote:
        channel = remote.connect_membership()
        try:
            assert channel.get_quorate() is daemon.quorate
            assert not channel.dispatch_one()
            channel.track_start(TrackFlag.CURRENT)
            assert wait_for_one_event(channel,
                                      timeout=5) == daemon.view
            with pytest.raises(ChannelError):
                channel.track_start(TrackFlag(0))
            channel.track_stop()
        finally:
            channel.close()

        with pytest.raises(ChannelError):
            channel.dispatch_one()
