import asyncio
import logging

from .channel import Chan
from .errors import ContextCancelled, DeadlineExceeded

__all__ = ('Deadline',)

logger = logging.getLogger(__name__)


class Deadline:
    """
    Shared cancellation signal for one race.

    The deadline closes either when `seconds` have elapsed or when :meth:`cancel` is called, whichever happens
    first. Once closed, :attr:`error` tells why, :attr:`done` is a closed channel (so it can take part in a
    :func:`cepracer.channel.select`), and every awaitable running under :meth:`guard` is aborted.

    :param seconds: time before the deadline expires.
    :param loop: the asyncio loop to schedule the expiry on, or the current loop if `None`.
    """

    def __init__(self, seconds, *, loop=None):
        self.loop = loop or asyncio.get_event_loop()
        self.seconds = seconds
        self.error = None
        self.done = Chan(loop=self.loop, name='deadline')
        self._expires_at = self.loop.time() + seconds
        self._handle = self.loop.call_at(self._expires_at, self._close, DeadlineExceeded())

    def __repr__(self):
        return 'Deadline<%gs %s>' % (self.seconds, 'open' if self.error is None else self.error)

    def _close(self, err):
        if self.error is not None:
            return
        self.error = err
        self._handle.cancel()
        self.done.close()
        logger.debug('%r closed', self)

    @property
    def closed(self):
        return self.error is not None

    def remaining(self):
        """
        :return: seconds left before expiry, `0` once the deadline is closed.
        """
        if self.closed:
            return 0
        return max(0, self._expires_at - self.loop.time())

    def cancel(self):
        """
        Close the deadline now. Cancelling a closed deadline is a no-op.
        """
        self._close(ContextCancelled())

    async def guard(self, aw):
        """
        **Coroutine**. Await `aw` unless the deadline closes first.

        When the deadline wins, `aw` is cancelled and waited for, then a new error of the type of :attr:`error` is
        raised. If both finish together the result of `aw` is kept.

        :param aw: the awaitable to run.
        :return: the result of `aw`.
        """
        if self.closed:
            if asyncio.iscoroutine(aw):
                aw.close()
            raise type(self.error)()

        task = asyncio.ensure_future(aw, loop=self.loop)
        closing = asyncio.ensure_future(self.done.join(), loop=self.loop)
        try:
            done, _ = await asyncio.wait((task, closing), return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            closing.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.wait((task,))
        raise type(self.error)()
