import asyncio
import collections

__all__ = ('AddressRecord', 'LookupResult', 'TimingComparison', 'TimingTable', 'compare_durations')

AddressRecord = collections.namedtuple('AddressRecord', 'cep state city neighborhood street',
                                       defaults=('', '', '', '', ''))
AddressRecord.__doc__ = 'A resolved postal code, in the same shape whichever backend answered.'


class LookupResult(collections.namedtuple('LookupResult', 'backend address error elapsed')):
    """
    The single outcome of one lookup task: either an :class:`AddressRecord` or a
    :class:`cepracer.errors.CepLookupError`, tagged with the backend name and the seconds it took.
    """
    __slots__ = ()

    @classmethod
    def success(cls, backend, address, elapsed):
        return cls(backend, address, None, elapsed)

    @classmethod
    def failure(cls, backend, error, elapsed=0.0):
        return cls(backend, None, error, elapsed)

    @property
    def ok(self):
        return self.error is None


class TimingComparison(collections.namedtuple('TimingComparison',
                                              'fastest fastest_elapsed slowest slowest_elapsed difference durations')):
    __slots__ = ()


def compare_durations(durations):
    """
    Compare the recorded durations of the backends.

    :param durations: mapping of backend name to seconds, in recording order.
    :return: a :class:`TimingComparison`, or `None` when fewer than two backends were recorded.
    """
    if len(durations) < 2:
        return None
    pairs = tuple(durations.items())
    fastest = min(pairs, key=lambda p: p[1])
    slowest = max(pairs, key=lambda p: p[1])
    return TimingComparison(fastest=fastest[0],
                            fastest_elapsed=fastest[1],
                            slowest=slowest[0],
                            slowest_elapsed=slowest[1],
                            difference=slowest[1] - fastest[1],
                            durations=pairs)


class TimingTable:
    """
    Per-backend durations shared by the lookup tasks of one race.

    Writers call :meth:`record` once each; the table is read after they are done. The lock is only ever held for a
    single insert or a single read.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._durations = {}

    def __len__(self):
        return len(self._durations)

    async def record(self, backend, elapsed):
        async with self._lock:
            self._durations[backend] = elapsed

    async def snapshot(self):
        async with self._lock:
            return dict(self._durations)

    async def compare(self):
        return compare_durations(await self.snapshot())
