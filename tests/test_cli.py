import socket
from typing import List

import pytest
from click.testing import CliRunner

from quorumtool.__main__ import main
from quorumtool.cluster import (NodeVoteInfo,
                                VoteFlag,
                                plain)
from . import strategies
from .daemon_stub import DaemonStub


def to_daemon() -> plain.Daemon:
    return strategies.to_daemon(
            [1, 2], True, 3,
            {node_id: NodeVoteInfo(expected_votes=2,
                                   flags={VoteFlag.QUORATE,
                                          VoteFlag.TWO_NODE},
                                   highest_expected=2,
                                   node_id=node_id,
                                   quorum=1,
                                   total_votes=2,
                                   votes=1)
             for node_id in [1, 2]}
    )


def to_unused_url() -> str:
    with socket.socket() as free_socket:
        free_socket.bind(('127.0.0.1', 0))
        _, port = free_socket.getsockname()
    return f'http://127.0.0.1:{port}'


def test_usage() -> None:
    result = CliRunner().invoke(main, [])

    assert result.exit_code == 0
    assert 'Show quorum status.' in result.output
    assert 'Starred items only work' in result.output


def test_help_selects_no_command() -> None:
    with DaemonStub(to_daemon()) as stub:
        result = CliRunner().invoke(main, ['-h', '--url', str(stub.url)])

    assert result.exit_code == -1
    assert 'Show quorum status.' in result.output


@pytest.mark.parametrize('arguments', [['-h', '-s'], ['-s', '-h']])
def test_help_with_command(arguments: List[str]) -> None:
    with DaemonStub(to_daemon()) as stub:
        result = CliRunner().invoke(main,
                                    arguments + ['--url', str(stub.url)])

    assert result.exit_code == 1
    assert 'Quorate:          Yes' in result.output
    assert 'Show quorum status.' not in result.output


def test_last_command_wins() -> None:
    with DaemonStub(to_daemon()) as stub:
        status_then_nodes = CliRunner().invoke(main, ['-s', '-l', '-i',
                                                      '--url', str(stub.url)])
        nodes_then_status = CliRunner().invoke(main, ['-l', '-s',
                                                      '--url', str(stub.url)])

    assert status_then_nodes.exit_code == 0
    assert 'Nodeid     Votes  Name' in status_then_nodes.output
    assert 'Quorate:' not in status_then_nodes.output
    assert nodes_then_status.exit_code == 1
    assert 'Quorate:          Yes' in nodes_then_status.output
    assert 'Nodeid' not in nodes_then_status.output


def test_set_command_after_status() -> None:
    daemon = to_daemon()

    with DaemonStub(daemon) as stub:
        result = CliRunner().invoke(main, ['-s', '-e', '3',
                                           '--url', str(stub.url)])

    assert result.exit_code == 0
    assert daemon.commands == [('votequorum_setexpected', 3)]


def test_unreachable_daemon() -> None:
    result = CliRunner().invoke(main, ['-s', '--url', to_unused_url()])

    assert result.exit_code == 1
    assert 'Cannot initialize CONFDB service' in result.output


def test_status() -> None:
    with DaemonStub(to_daemon()) as stub:
        result = CliRunner().invoke(main, ['-s', '--url', str(stub.url),
                                           '--timeout', '5'])

    assert result.exit_code == 1
    assert 'Quorate:          Yes' in result.output
    assert 'Flags:            2Node Quorate ' in result.output


def test_list_nodes() -> None:
    with DaemonStub(to_daemon()) as stub:
        result = CliRunner().invoke(main, ['-l', '-H', '-i',
                                           '--url', str(stub.url)])

    assert result.exit_code == 0
    assert result.output.splitlines()[-3:] == [
        'Nodeid     Votes  Name',
        '0x0001     1  10.0.1.0',
        '0x0002     1  10.0.2.1',
    ]


def test_set_votes() -> None:
    daemon = to_daemon()

    with DaemonStub(daemon) as stub:
        result = CliRunner().invoke(main, ['-n', '2', '-v', '0',
                                           '--url', str(stub.url)])

    assert result.exit_code == 0
    assert daemon.commands == [('votequorum_setvotes', 2, 0)]


def test_invalid_expected_votes() -> None:
    daemon = to_daemon()

    with DaemonStub(daemon) as stub:
        result = CliRunner().invoke(main, ['-e', '0', '--url', str(stub.url)])

    assert result.exit_code == -1
    assert ('New expected votes value was not valid, try a positive number'
            in result.output)
    assert 'Show quorum status.' in result.output
    assert not daemon.commands


def test_unknown_options_are_ignored() -> None:
    with DaemonStub(to_daemon()) as stub:
        result = CliRunner().invoke(main, ['--bogus', '-s',
                                           '--url', str(stub.url)])

    assert result.exit_code == 1
    assert 'Quorate:          Yes' in result.output
