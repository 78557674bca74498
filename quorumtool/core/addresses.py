import enum
import ipaddress
import logging
import socket

from .channels import AddressChannel
from .errors import QueryError
from .hints import NodeId

INTERFACE_MAX = 2


class NameFormat(enum.IntEnum):
    NAME = 0
    NUMERIC = 1


def resolve_node(channel: AddressChannel,
                 node_id: NodeId,
                 name_format: NameFormat,
                 *,
                 logger: logging.Logger) -> str:
    """
    Returns resolved name or numeric representation
    of the first address of given node or empty string on failure.
    """
    try:
        addresses = channel.get_node_addresses(node_id, INTERFACE_MAX)
    except QueryError as error:
        logger.error(str(error))
        return ''
    if not addresses:
        logger.debug(f'node {node_id} has no addresses')
        return ''
    try:
        return address_to_name(addresses[0], name_format)
    except (OSError, ValueError) as error:
        logger.debug(f'failed to resolve address {addresses[0]!r} '
                     f'of node {node_id}: {error}')
        return ''


def address_to_name(address: str, name_format: NameFormat) -> str:
    ip_address = ipaddress.ip_address(address)
    socket_address = ((str(ip_address), 0, 0, 0)
                      if ip_address.version == 6
                      else (str(ip_address), 0))
    flags = socket.NI_NUMERICSERV | (socket.NI_NUMERICHOST
                                     if name_format is NameFormat.NUMERIC
                                     else 0)
    host, _ = socket.getnameinfo(socket_address, flags)
    return host
