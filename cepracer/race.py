import asyncio
import logging

import httpx

from .backends import BACKENDS, lookup
from .channel import Chan, go, select, timeout
from .config import RaceConfig
from .context import Deadline
from .errors import RaceTimeout
from .models import TimingTable

__all__ = ('Race', 'resolve')

logger = logging.getLogger(__name__)


class Race:
    """
    Query every backend for the same postal code at once and act on whichever answers first.

    Use it as an async context manager: entering launches the lookups, leaving cancels the deadline, waits for
    every lookup to wind down and closes the HTTP client if the race opened it::

        async with Race('01153000') as race:
            result = await race.first()
            comparison = await race.comparison()

    :param cep: the postal code, forwarded verbatim to every backend.
    :param backends: the :class:`cepracer.backends.Backend` instances to race.
    :param config: a :class:`cepracer.config.RaceConfig`, defaults if `None`.
    :param client: an `httpx.AsyncClient` to share. If `None`, the race opens and closes its own.
    """

    def __init__(self, cep, backends=BACKENDS, *, config=None, client=None):
        self.cep = cep
        self.backends = tuple(backends)
        self.config = config or RaceConfig()
        self.deadline = None
        self.results = None
        self.timings = None
        self._client = client
        self._owns_client = client is None
        self._tasks = ()
        self._aggregator = None

    def __repr__(self):
        return 'Race<%s %s>' % (self.cep, ','.join(b.name for b in self.backends))

    async def __aenter__(self):
        return self.start()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def start(self):
        """
        Launch one lookup task per backend under a fresh deadline.

        :return: `self`
        :raises RuntimeError: if the race was already started.
        """
        if self.deadline is not None:
            raise RuntimeError('a race can only be started once')
        if self._client is None:
            self._client = httpx.AsyncClient()
        self.deadline = Deadline(self.config.deadline)
        # room for every result, so no lookup ever waits on a reader that stopped listening
        self.results = Chan(len(self.backends), name='results')
        if self.config.compare_timings:
            self.timings = TimingTable()
        self._tasks = [go(lookup(backend, self.cep, self.deadline, self.results, self._client, self.timings))
                       for backend in self.backends]
        logger.debug('%r started with a %gs deadline', self, self.config.deadline)
        return self

    async def first(self):
        """
        **Coroutine**. Wait for the first lookup to finish, or for the deadline.

        The first result is returned whether it succeeded or failed: a failure is not retried on the other backends.
        The lookups still running are left alone.

        :return: the first :class:`cepracer.models.LookupResult` to arrive.
        :raises RaceTimeout: if the deadline closed before any result arrived.
        """
        result, ch = await select(self.results, self.deadline.done, priority=True)
        if ch is self.deadline.done:
            logger.info('%r: no backend answered within %gs', self, self.config.deadline)
            raise RaceTimeout(self.config.deadline)

        if not result.ok:
            logger.debug('%r: %s answered first, with an error: %s', self, result.backend, result.error)
            return result

        logger.debug('%r: %s won in %.3fs', self, result.backend, result.elapsed)
        if self.timings is not None and self._aggregator is None:
            self._aggregator = go(self._aggregate())
        return result

    async def _aggregate(self):
        straggler, ch = await select(self.results, timeout(self.config.grace_period), priority=True)
        if ch is self.results and straggler is not None:
            logger.debug('%r: %s finished second: %s', self, straggler.backend,
                         'ok' if straggler.ok else straggler.error)
        await asyncio.wait(self._tasks)
        return await self.timings.compare()

    async def comparison(self):
        """
        **Coroutine**. The durations of all backends, once the race has been won.

        Waits at most `grace_period + settle_period` for the background comparison.

        :return: a :class:`cepracer.models.TimingComparison`, or `None` if timings are not compared, the race had no
                 successful winner, fewer than two backends succeeded, or the comparison did not finish in time.
        """
        if self._aggregator is None or self._aggregator.cancelled():
            return None
        try:
            return await asyncio.wait_for(self._aggregator,
                                          self.config.grace_period + self.config.settle_period)
        except asyncio.TimeoutError:
            logger.debug('%r: timing comparison did not settle in time', self)
            return None

    async def close(self):
        """
        **Coroutine**. Abort what is still running and release the HTTP client.
        """
        if self._aggregator is not None and not self._aggregator.done():
            self._aggregator.cancel()
            await asyncio.wait((self._aggregator,))
        if self.deadline is not None:
            self.deadline.cancel()
        if self._tasks:
            await asyncio.wait(self._tasks)
        if self._owns_client and self._client is not None:
            await self._client.aclose()


async def resolve(cep, backends=BACKENDS, *, config=None, client=None):
    """
    **Coroutine**. Run a whole race for `cep`.

    :return: `(result, comparison)`, see :meth:`Race.first` and :meth:`Race.comparison`.
    :raises RaceTimeout: if no backend answered before the deadline.
    """
    async with Race(cep, backends, config=config, client=client) as race:
        result = await race.first()
        return result, await race.comparison()
