import dataclasses
import enum
import logging
import threading
from contextlib import ExitStack
from typing import (Any,
                    Callable,
                    Optional,
                    Sequence,
                    TypeVar)

from reprit.base import generate_repr

from .addresses import NameFormat
from .aggregator import (show_nodes,
                         show_status)
from .channels import (Channel,
                       ConfigurationStore,
                       Daemon,
                       MembershipChannel,
                       VoteChannel)
from .errors import (CommandError,
                     ConnectError,
                     NotConfigured,
                     QuorumToolError)
from .hints import (Echo,
                    NodeId,
                    Time)
from .provider import using_vote_provider
from .report import NodeIdFormat
from .utils import parse_integer
from .vote_info import LOCAL_NODE_ID

EXIT_FAILURE = 1
EXIT_NO_VOTE_PROVIDER = 2
EXIT_SUCCESS = 0
EXIT_UNKNOWN_COMMAND = -1
EXIT_CHANNEL_FAILURE = -1


class CommandKind(enum.IntEnum):
    UNKNOWN = 0
    SHOW_NODES = 1
    SHOW_STATUS = 2
    SET_VOTES = 3
    SET_EXPECTED = 4


@dataclasses.dataclass(frozen=True)
class Intent:
    command: CommandKind = CommandKind.UNKNOWN
    node_id: NodeId = LOCAL_NODE_ID
    votes: int = 0


class VoteCommandUnavailable(Exception):
    pass


DEFAULT_COMMANDS_ORDER = (CommandKind.SHOW_STATUS, CommandKind.SHOW_NODES,
                          CommandKind.SET_VOTES, CommandKind.SET_EXPECTED)


def to_intent(*,
              commands_order: Sequence[CommandKind] = DEFAULT_COMMANDS_ORDER,
              expected_votes: Optional[str] = None,
              list_nodes: bool = False,
              logger: logging.Logger,
              node_id: Optional[str] = None,
              show_status: bool = False,
              vote_provider: bool,
              votes: Optional[str] = None) -> Intent:
    """
    Selects the command to execute from raw command line values.

    Requested commands are considered in ``commands_order``
    and the last valid one wins.
    Vote commands are refused with ``VoteCommandUnavailable`` exception
    before any of their values gets parsed
    if the vote provider is not active.
    Invalid values are reported and leave their command unselected.
    """
    if not vote_provider:
        if votes is not None:
            raise VoteCommandUnavailable('You cannot change node votes, '
                                         'the daemon is not using '
                                         'votes-based quorum provider')
        if expected_votes is not None:
            raise VoteCommandUnavailable('You cannot change expected votes, '
                                         'the daemon is not using '
                                         'votes-based quorum provider')
    requested = {CommandKind.SHOW_STATUS: show_status,
                 CommandKind.SHOW_NODES: list_nodes,
                 CommandKind.SET_VOTES: votes is not None,
                 CommandKind.SET_EXPECTED: expected_votes is not None}
    target_node_id = LOCAL_NODE_ID
    if node_id is not None:
        candidate = parse_integer(node_id)
        if candidate is None or candidate <= 0:
            logger.error('The nodeid was not valid, try a positive number')
        else:
            target_node_id = candidate
    command, votes_count = CommandKind.UNKNOWN, 0
    for kind in commands_order:
        if not requested.get(kind, False):
            continue
        if kind is CommandKind.SET_VOTES:
            candidate = parse_integer(votes)
            if candidate is None or candidate < 0:
                logger.error('New votes value was not valid, '
                             'try a positive number or zero')
                continue
            votes_count = candidate
        elif kind is CommandKind.SET_EXPECTED:
            candidate = parse_integer(expected_votes)
            if candidate is None or candidate <= 0:
                logger.error('New expected votes value was not valid, '
                             'try a positive number')
                continue
            votes_count = candidate
        command = kind
    return Intent(command=command,
                  node_id=target_node_id,
                  votes=votes_count)


_Channel = TypeVar('_Channel', bound=Channel)


class Session:
    """Services connections opened for the whole invocation."""

    __slots__ = '_daemon', '_membership', '_stack', '_store', '_votes'

    def __init__(self,
                 daemon: Daemon,
                 *,
                 membership: MembershipChannel,
                 stack: ExitStack,
                 store: ConfigurationStore,
                 votes: Optional[VoteChannel]) -> None:
        (
            self._daemon, self._membership, self._stack, self._store,
            self._votes
        ) = daemon, membership, stack, store, votes

    __repr__ = generate_repr(__init__)

    def __enter__(self) -> 'Session':
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    @property
    def daemon(self) -> Daemon:
        return self._daemon

    @property
    def membership(self) -> MembershipChannel:
        return self._membership

    @property
    def store(self) -> ConfigurationStore:
        return self._store

    @property
    def vote_provider(self) -> bool:
        return self._votes is not None

    @property
    def votes(self) -> Optional[VoteChannel]:
        return self._votes

    @classmethod
    def open(cls, daemon: Daemon, *, logger: logging.Logger) -> 'Session':
        """
        Connects to the configuration store, membership and vote services
        and checks that the address service is available.

        Raises ``ConnectError`` exception after releasing
        everything already connected if any of services is unavailable.
        """
        with ExitStack() as stack:
            store = stack.enter_context(_connect(daemon.connect_store,
                                                 'CONFDB',
                                                 logger=logger))
            membership = stack.enter_context(
                    _connect(daemon.connect_membership, 'QUORUM',
                             logger=logger)
            )
            _connect(daemon.connect_addresses, 'CFG',
                     logger=logger).close()
            try:
                vote_provider = using_vote_provider(store)
            except NotConfigured as error:
                logger.debug(str(error))
                vote_provider = False
            votes = (stack.enter_context(_connect(daemon.connect_votes,
                                                  'VOTEQUORUM',
                                                  logger=logger))
                     if vote_provider
                     else None)
            return cls(daemon,
                       membership=membership,
                       stack=stack.pop_all(),
                       store=store,
                       votes=votes)

    def close(self) -> None:
        self._stack.close()


def _connect(connector: Callable[[], _Channel],
             service_name: str,
             *,
             logger: logging.Logger) -> _Channel:
    try:
        return connector()
    except ConnectError as error:
        logger.error(str(error))
        logger.error(f'Cannot initialize {service_name} service')
        raise


def dispatch(intent: Intent,
             session: Session,
             *,
             cancellation: Optional[threading.Event] = None,
             echo: Echo,
             logger: logging.Logger,
             name_format: NameFormat = NameFormat.NAME,
             node_id_format: NodeIdFormat = NodeIdFormat.DECIMAL,
             timeout: Optional[Time] = None) -> int:
    command = intent.command
    if command is CommandKind.SHOW_STATUS:
        try:
            return show_status(session.membership, session.store,
                               session.votes,
                               cancellation=cancellation,
                               echo=echo,
                               logger=logger,
                               timeout=timeout)
        except QuorumToolError as error:
            logger.error(str(error))
            return EXIT_CHANNEL_FAILURE
    elif command is CommandKind.SHOW_NODES:
        try:
            show_nodes(session.membership, session.daemon.connect_addresses,
                       session.votes, node_id_format, name_format,
                       cancellation=cancellation,
                       echo=echo,
                       logger=logger,
                       timeout=timeout)
        except ConnectError as error:
            logger.error(str(error))
            logger.error('Cannot initialize CFG service')
            return EXIT_FAILURE
        except QuorumToolError as error:
            logger.error(str(error))
            return EXIT_FAILURE
        return EXIT_SUCCESS
    elif command is CommandKind.SET_VOTES:
        return set_votes(session.daemon, intent.node_id, intent.votes,
                         logger=logger)
    elif command is CommandKind.SET_EXPECTED:
        return set_expected(session.daemon, intent.votes,
                            logger=logger)
    else:
        assert command is CommandKind.UNKNOWN, command
        return EXIT_UNKNOWN_COMMAND


def set_expected(daemon: Daemon,
                 expected_votes: int,
                 *,
                 logger: logging.Logger) -> int:
    assert expected_votes > 0, expected_votes
    return _run_vote_command(daemon, 'set expected votes',
                             lambda channel: channel.set_expected(
                                     expected_votes
                             ),
                             logger=logger)


def set_votes(daemon: Daemon,
              node_id: NodeId,
              votes: int,
              *,
              logger: logging.Logger) -> int:
    assert votes >= 0, votes
    return _run_vote_command(daemon, 'set votes',
                             lambda channel: channel.set_votes(node_id,
                                                               votes),
                             logger=logger)


def _run_vote_command(daemon: Daemon,
                      description: str,
                      command: Callable[[VoteChannel], None],
                      *,
                      logger: logging.Logger) -> int:
    try:
        channel = daemon.connect_votes()
    except ConnectError as error:
        logger.error(str(error))
        return int(error.status)
    with channel:
        try:
            command(channel)
        except CommandError as error:
            logger.error(f'{description} FAILED: {int(error.status)}')
            return int(error.status)
    return EXIT_SUCCESS


def run(daemon: Daemon,
        *,
        cancellation: Optional[threading.Event] = None,
        commands_order: Sequence[CommandKind] = DEFAULT_COMMANDS_ORDER,
        echo: Echo,
        expected_votes: Optional[str] = None,
        list_nodes: bool = False,
        logger: logging.Logger,
        name_format: NameFormat = NameFormat.NAME,
        node_id: Optional[str] = None,
        node_id_format: NodeIdFormat = NodeIdFormat.DECIMAL,
        show_status: bool = False,
        timeout: Optional[Time] = None,
        usage: str,
        votes: Optional[str] = None) -> int:
    """Executes single command against given daemon returning exit code."""
    try:
        session = Session.open(daemon,
                               logger=logger)
    except ConnectError:
        return EXIT_FAILURE
    with session:
        try:
            intent = to_intent(commands_order=commands_order,
                               expected_votes=expected_votes,
                               list_nodes=list_nodes,
                               logger=logger,
                               node_id=node_id,
                               show_status=show_status,
                               vote_provider=session.vote_provider,
                               votes=votes)
        except VoteCommandUnavailable as error:
            logger.error(str(error))
            return EXIT_NO_VOTE_PROVIDER
        if intent.command is CommandKind.UNKNOWN:
            echo(usage)
            return EXIT_UNKNOWN_COMMAND
        return dispatch(intent, session,
                        cancellation=cancellation,
                        echo=echo,
                        logger=logger,
                        name_format=name_format,
                        node_id_format=node_id_format,
                        timeout=timeout)
