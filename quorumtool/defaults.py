import logging.config
import sys

from yarl import URL

POLL_INTERVAL = 0.1
REQUEST_TIMEOUT = 10
URL_ENVIRONMENT_VARIABLE = 'QUORUMTOOL_URL'
DAEMON_URL = URL.build(scheme='http',
                       host='localhost',
                       port=5405)


def to_logger(url: URL,
              *,
              level: int = logging.INFO,
              version: int = 1) -> logging.Logger:
    name = 'quorumtool'
    console_formatter = {'format': '%(message)s'}
    formatters = {'console': console_formatter}
    console_handler_config = {'class': 'logging.StreamHandler',
                              'level': logging.DEBUG,
                              'formatter': 'console',
                              'stream': sys.stderr}
    handlers = {'console': console_handler_config}
    loggers = {name: {'level': level,
                      'handlers': ('console',),
                      'propagate': False}}
    config = {'disable_existing_loggers': False,
              'formatters': formatters,
              'handlers': handlers,
              'loggers': loggers,
              'version': version}
    logging.config.dictConfig(config)
    result = logging.getLogger(name)
    result.debug(f'logging for daemon at {url} is configured')
    return result
