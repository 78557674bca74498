from hypothesis import given

from quorumtool.cluster import (NameFormat,
                                plain)
from quorumtool.core.addresses import (INTERFACE_MAX,
                                       address_to_name,
                                       resolve_node)
from . import strategies
from .utils import to_logger


@given(strategies.nodes_ids, strategies.ipv4_addresses)
def test_numeric(node_id: int, address: str) -> None:
    daemon = plain.Daemon(addresses={node_id: [address]})

    with daemon.connect_addresses() as channel:
        result = resolve_node(channel, node_id, NameFormat.NUMERIC,
                              logger=to_logger())

    assert result == address


def test_first_address_is_used() -> None:
    daemon = plain.Daemon(addresses={3: ['192.168.0.3', '10.0.0.3']})

    with daemon.connect_addresses() as channel:
        result = resolve_node(channel, 3, NameFormat.NUMERIC,
                              logger=to_logger())

    assert result == '192.168.0.3'


def test_ipv6() -> None:
    assert address_to_name('::1', NameFormat.NUMERIC) == '::1'


@given(strategies.nodes_ids)
def test_no_addresses(node_id: int) -> None:
    daemon = plain.Daemon()

    with daemon.connect_addresses() as channel:
        assert resolve_node(channel, node_id, NameFormat.NAME,
                            logger=to_logger()) == ''


def test_malformed_address() -> None:
    daemon = plain.Daemon(addresses={1: ['not an address']})

    with daemon.connect_addresses() as channel:
        assert resolve_node(channel, 1, NameFormat.NUMERIC,
                            logger=to_logger()) == ''


def test_query_failure() -> None:
    daemon = plain.Daemon(addresses={1: ['127.0.0.1']})
    channel = daemon.connect_addresses()
    channel.close()

    assert resolve_node(channel, 1, NameFormat.NUMERIC,
                        logger=to_logger()) == ''


def test_addresses_are_bounded() -> None:
    addresses = [f'10.0.0.{index}' for index in range(INTERFACE_MAX + 3)]
    daemon = plain.Daemon(addresses={1: addresses})

    with daemon.connect_addresses() as channel:
        result = channel.get_node_addresses(1, INTERFACE_MAX)

    assert result == addresses[:INTERFACE_MAX]
