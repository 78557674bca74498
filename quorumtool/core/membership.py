import logging
import threading
import time
from typing import (Callable,
                    Optional)

from .channels import MembershipChannel
from .errors import (QuorumToolError,
                     WaitCancelled,
                     WaitTimeout)
from .hints import Time
from .view import (ClusterView,
                   TrackFlag)

DISPATCH_OPERATION = 'quorum_dispatch'


def wait_for_one_event(channel: MembershipChannel,
                       *,
                       cancellation: Optional[threading.Event] = None,
                       clock: Callable[[], Time] = time.monotonic,
                       timeout: Optional[Time] = None) -> ClusterView:
    """
    Pumps pending messages of given channel one at a time
    until a cluster view gets delivered to its mailbox.

    Without ``timeout`` and ``cancellation`` waits for as long as it takes,
    otherwise raises ``WaitTimeout``/``WaitCancelled`` exception
    when the deadline passes or cancellation is requested.
    Channel failures propagate as ``ChannelError`` exceptions.
    """
    mailbox = channel.mailbox
    mailbox.clear()
    deadline = None if timeout is None else clock() + timeout
    while mailbox.empty:
        if cancellation is not None and cancellation.is_set():
            raise WaitCancelled(DISPATCH_OPERATION)
        if deadline is not None and clock() >= deadline:
            raise WaitTimeout(DISPATCH_OPERATION)
        channel.dispatch_one()
    return mailbox.take()


def capture_view(channel: MembershipChannel,
                 *,
                 cancellation: Optional[threading.Event] = None,
                 logger: logging.Logger,
                 timeout: Optional[Time] = None) -> ClusterView:
    channel.track_start(TrackFlag.CURRENT)
    try:
        return wait_for_one_event(channel,
                                  cancellation=cancellation,
                                  timeout=timeout)
    finally:
        try:
            channel.track_stop()
        except QuorumToolError as error:
            logger.error(str(error))
