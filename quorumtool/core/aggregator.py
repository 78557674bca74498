import logging
import threading
from typing import (Callable,
                    Optional)

from quorumtool import __version__
from .addresses import (NameFormat,
                        resolve_node)
from .channels import (AddressChannel,
                       ConfigurationStore,
                       MembershipChannel,
                       VoteChannel)
from .errors import (NotConfigured,
                     QueryError)
from .hints import (Echo,
                    NodeId,
                    Time)
from .membership import capture_view
from .provider import get_quorum_provider_name
from .report import (NOT_CONFIGURED_QUORUM_TYPE,
                     NodeIdFormat,
                     NodeRow,
                     NodesReport,
                     StatusReport,
                     render_nodes,
                     render_status)
from .status import Status
from .vote_info import (LOCAL_NODE_ID,
                        NodeVoteInfo)

UNKNOWN_VOTES = -1


def collect_status(membership: MembershipChannel,
                   store: ConfigurationStore,
                   votes: Optional[VoteChannel],
                   *,
                   cancellation: Optional[threading.Event] = None,
                   logger: logging.Logger,
                   timeout: Optional[Time] = None) -> StatusReport:
    """
    Merges point-in-time quorate flag with the first delivered cluster view
    and, if given vote channel, with vote info of the local node.

    The reported quorate flag comes from the dedicated query
    rather than from the view.
    """
    quorate = membership.get_quorate()
    view = capture_view(membership,
                        cancellation=cancellation,
                        logger=logger,
                        timeout=timeout)
    try:
        quorum_type = get_quorum_provider_name(store)
    except NotConfigured as error:
        logger.warning(str(error))
        quorum_type = NOT_CONFIGURED_QUORUM_TYPE
    vote_info: Optional[NodeVoteInfo] = None
    vote_status = Status.OK
    if votes is not None:
        try:
            vote_info = votes.get_info(LOCAL_NODE_ID)
        except QueryError as error:
            logger.error(str(error))
            vote_status = error.status
    return StatusReport(nodes_count=view.nodes_count,
                        quorate=quorate,
                        quorum_type=quorum_type,
                        ring_id=view.ring_id,
                        version=__version__,
                        vote_info=vote_info,
                        vote_status=vote_status)


def show_status(membership: MembershipChannel,
                store: ConfigurationStore,
                votes: Optional[VoteChannel],
                *,
                cancellation: Optional[threading.Event] = None,
                echo: Echo,
                logger: logging.Logger,
                timeout: Optional[Time] = None) -> int:
    """
    Prints the status report and returns the exit code:
    the quorate flag or the status code of the failed vote info query.
    """
    report = collect_status(membership, store, votes,
                            cancellation=cancellation,
                            logger=logger,
                            timeout=timeout)
    for line in render_status(report):
        echo(line)
    return (int(report.quorate)
            if report.vote_status is Status.OK
            else int(report.vote_status))


def collect_nodes(membership: MembershipChannel,
                  connect_addresses: Callable[[], AddressChannel],
                  votes: Optional[VoteChannel],
                  name_format: NameFormat,
                  *,
                  cancellation: Optional[threading.Event] = None,
                  logger: logging.Logger,
                  timeout: Optional[Time] = None) -> NodesReport:
    try:
        view = capture_view(membership,
                            cancellation=cancellation,
                            logger=logger,
                            timeout=timeout)
    finally:
        membership.close()
    with connect_addresses() as addresses:
        rows = [NodeRow(node_id=node_id,
                        votes=(None
                               if votes is None
                               else get_votes(votes, node_id,
                                              logger=logger)),
                        name=resolve_node(addresses, node_id, name_format,
                                          logger=logger))
                for node_id in view.members_ids]
    return NodesReport(rows=rows,
                       with_votes=votes is not None)


def show_nodes(membership: MembershipChannel,
               connect_addresses: Callable[[], AddressChannel],
               votes: Optional[VoteChannel],
               node_id_format: NodeIdFormat,
               name_format: NameFormat,
               *,
               cancellation: Optional[threading.Event] = None,
               echo: Echo,
               logger: logging.Logger,
               timeout: Optional[Time] = None) -> None:
    report = collect_nodes(membership, connect_addresses, votes, name_format,
                           cancellation=cancellation,
                           logger=logger,
                           timeout=timeout)
    for line in render_nodes(report, node_id_format):
        echo(line)


def get_votes(channel: VoteChannel,
              node_id: NodeId,
              *,
              logger: logging.Logger) -> int:
    try:
        return channel.get_info(node_id).votes
    except QueryError as error:
        logger.error(str(error))
        return UNKNOWN_VOTES
