import importlib.util
from logging import Logger
from types import ModuleType
from typing import (Any,
                    Callable,
                    List,
                    Optional,
                    Tuple,
                    Type)

import click
from yarl import URL

from quorumtool import defaults
from quorumtool.cluster import (CommandKind,
                                NameFormat,
                                NodeIdFormat,
                                aiohttp,
                                run)

LoggerFactory = Callable[[URL], Logger]

_COMMANDS_ORDER = 'quorumtool.commands_order'
_NO_ARGUMENTS = 'quorumtool.no_arguments'


def _class_to_full_name(cls: Type) -> str:
    return f'{cls.__module__}.{cls.__qualname__}'


class _Command(click.Command):
    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        ctx.meta[_NO_ARGUMENTS] = not args
        return super().parse_args(ctx, args)


def _to_command_recorder(kind: CommandKind
                         ) -> Callable[[click.Context, click.Parameter, Any],
                                       Any]:
    def record(ctx: click.Context, _: click.Parameter, value: Any) -> Any:
        if value is not None and value is not False:
            ctx.meta.setdefault(_COMMANDS_ORDER, []).append(kind)
        return value

    return record


@click.command(cls=_Command,
               context_settings={'help_option_names': [],
                                 'ignore_unknown_options': True},
               epilog='* Starred items only work '
                      'if votequorum is the quorum provider')
@click.option('-s', 'show_status',
              is_flag=True,
              callback=_to_command_recorder(CommandKind.SHOW_STATUS),
              help='Show quorum status.')
@click.option('-l', 'list_nodes',
              is_flag=True,
              callback=_to_command_recorder(CommandKind.SHOW_NODES),
              help='List nodes.')
@click.option('-v', 'votes',
              metavar='<votes>',
              type=str,
              callback=_to_command_recorder(CommandKind.SET_VOTES),
              help='Change the number of votes for a node. *')
@click.option('-n', 'node_id',
              metavar='<nodeid>',
              type=str,
              help='Optional nodeid of node for -v.')
@click.option('-e', 'expected_votes',
              metavar='<expected>',
              type=str,
              callback=_to_command_recorder(CommandKind.SET_EXPECTED),
              help='Change expected votes for the cluster. *')
@click.option('-H', 'hexadecimal',
              is_flag=True,
              help='Show nodeids in hexadecimal rather than decimal.')
@click.option('-i', 'numeric',
              is_flag=True,
              help='Show node IP addresses instead of the resolved name.')
@click.option('-h', 'show_help',
              is_flag=True,
              expose_value=False,
              help='Show this help text.')
@click.option('--url',
              default=str(defaults.DAEMON_URL),
              envvar=defaults.URL_ENVIRONMENT_VARIABLE,
              show_default=True,
              type=str,
              help='Base URL of the quorum daemon.')
@click.option('--timeout',
              default=None,
              type=click.FloatRange(0, min_open=True),
              help='Seconds to wait for membership notification, '
                   'waits indefinitely if omitted.')
@click.option('--logger-factory-path',
              default=f'{defaults.__file__}:to_logger',
              type=str,
              help='Path to the logger factory '
                   '(function '
                   f'accepting `{_class_to_full_name(URL)}` instance '
                   f'and returning `{_class_to_full_name(Logger)}` instance) '
                   'in a format `path/to/module.py:logger_factory_name`.')
@click.argument('unknown',
                nargs=-1,
                type=click.UNPROCESSED)
@click.pass_context
def main(ctx: click.Context,
         show_status: bool,
         list_nodes: bool,
         votes: Optional[str],
         node_id: Optional[str],
         expected_votes: Optional[str],
         hexadecimal: bool,
         numeric: bool,
         url: str,
         timeout: Optional[float],
         logger_factory_path: str,
         unknown: Tuple[Any, ...]) -> None:
    usage = ctx.get_help()
    if ctx.meta.get(_NO_ARGUMENTS):
        click.echo(usage)
        ctx.exit(0)
    daemon_url = URL(url)
    logger_factory_module_path, logger_factory_name = (
        logger_factory_path.rsplit(':', 1)
    )
    logger_factory_module = _load_module_from_path(
            f'{__package__}._logging', logger_factory_module_path
    )
    logger_factory: LoggerFactory = getattr(logger_factory_module,
                                            logger_factory_name)
    logger = logger_factory(daemon_url)
    if unknown:
        logger.debug(f'ignoring unknown arguments {list(unknown)}')
    with aiohttp.Daemon(daemon_url,
                        poll_interval=defaults.POLL_INTERVAL,
                        request_timeout=defaults.REQUEST_TIMEOUT) as daemon:
        exit_code = run(daemon,
                        commands_order=ctx.meta.get(_COMMANDS_ORDER, []),
                        echo=click.echo,
                        expected_votes=expected_votes,
                        list_nodes=list_nodes,
                        logger=logger,
                        name_format=(NameFormat.NUMERIC
                                     if numeric
                                     else NameFormat.NAME),
                        node_id=node_id,
                        node_id_format=(NodeIdFormat.HEXADECIMAL
                                        if hexadecimal
                                        else NodeIdFormat.DECIMAL),
                        show_status=show_status,
                        timeout=timeout,
                        usage=usage,
                        votes=votes)
    ctx.exit(exit_code)


def _load_module_from_path(name: str, path: str) -> ModuleType:
    spec = importlib.util.spec_from_file_location(name, path)
    result = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(result)
    return result


if __name__ == '__main__':
    main()
