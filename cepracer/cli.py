import asyncio
import logging
import sys

from . import report
from .backends import BACKENDS
from .config import RaceConfig
from .errors import RaceTimeout
from .logging_config import setup_logging
from .race import Race

__all__ = ('main', 'run')

logger = logging.getLogger(__name__)


def _emit(lines, out):
    for line in lines:
        print(line, file=out)


async def run(cep, config, backends=BACKENDS, *, client=None, out=None):
    """
    **Coroutine**. Race the backends for `cep` and print the outcome.

    :param out: text stream to print to, stdout if `None`.
    :return: the winning :class:`cepracer.models.LookupResult`, or `None` on timeout.
    """
    out = out or sys.stdout
    _emit(report.format_start(cep), out)
    async with Race(cep, backends, config=config, client=client) as race:
        try:
            result = await race.first()
        except RaceTimeout as e:
            _emit(report.format_timeout(e.seconds), out)
            return None
        _emit(report.format_result(result), out)
        if result.ok and config.compare_timings:
            _emit(report.format_comparison(await race.comparison()), out)
        return result


def main(argv=None, environ=None):
    """
    Entry point of the ``cepracer`` command: ``cepracer CEP``.

    Settings come from ``CEPRACER_*`` environment variables, see :meth:`cepracer.config.RaceConfig.from_env`.
    """
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(report.USAGE)
        return

    try:
        config = RaceConfig.from_env(environ)
    except ValueError as e:
        print('Error: %s' % e)
        return

    setup_logging(config.log_level)
    logger.debug('using %r', config)
    asyncio.run(run(argv[0], config))
