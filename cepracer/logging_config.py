"""
Logging setup for the command line.

Library modules only create their loggers with ``logging.getLogger(__name__)``; handlers are configured here, once,
by :func:`cepracer.cli.main`.
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level='WARNING', stream=None):
    """
    Send log records at `level` and above to stderr.

    :param level: level name (DEBUG, INFO, WARNING, ERROR, CRITICAL). Unknown names fall back to WARNING.
    :param stream: stream to write to instead of stderr.
    """
    log_level = getattr(logging, str(level).upper(), logging.WARNING)
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    # the HTTP stack logs every request at INFO
    for name in ('httpx', 'httpcore', 'asyncio'):
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
