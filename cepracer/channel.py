import asyncio
import collections
import numbers
import random

from . import buffers
from ._util import FnHandler, SelectFlag, SelectHandler

__all__ = ('Chan', 'select', 'timeout', 'go')

MAX_OP_QUEUE_SIZE = 1024
"""
The maximum pending puts or pending takes for a channel.

A race never comes close to this: lookup tasks publish into a buffer sized to their number, and there is a single
reader at a time.
"""


class Chan:
    """
    A channel, the meeting point of the lookup tasks and whoever consumes their results.

    :param buffer: if an integer is given, a :class:`cepracer.buffers.FixedLengthBuffer` of that size is created and
            used. Any other object with the same interface is used as the buffer directly. `None` means unbuffered.
    :param loop: the asyncio loop that should be used when creating futures. If `None`, the current loop is used.
    :param name: used to provide more friendly debugging outputs.
    """

    _count = 0

    def __init__(self, buffer=None, *, loop=None, name=None):
        self._name = name or '_unk_' + str(self.__class__._count)
        self.loop = loop or asyncio.get_event_loop()
        self._close_event = asyncio.Event()
        if isinstance(buffer, numbers.Integral):
            self._buf = buffers.FixedLengthBuffer(buffer)
        else:
            self._buf = buffer
        self._gets = collections.deque()
        self._puts = collections.deque()
        self._closed = False
        self.__class__._count += 1

    def _dispatch(self, f, value=None):
        self._check_exhausted()

        if f is None:
            return
        elif asyncio.isfuture(f):
            if not f.done():
                f.set_result(value)
        else:
            f(value)

    def _check_exhausted(self):
        if self._closed and (not len(self._puts)) and (not self._buf or not self._buf.can_take):
            self._close_event.set()

    def _next_getter(self):
        while self._gets:
            g = self._gets.popleft()
            if g.active:
                return g
        return None

    def _next_putter(self):
        while self._puts:
            p = self._puts.popleft()
            if p[0].active:
                return p
        return None

    # noinspection PyRedundantParentheses
    def _put(self, val, handler):
        if val is None:
            raise TypeError('Cannot put None on a channel')

        if self.closed or not handler.active:
            return (not self.closed,)

        # case 1: buffer available, add to buffer and then drain buffer
        if self._buf is not None and self._buf.can_add:
            handler.commit()
            self._buf.add(val)
            while self._buf.can_take:
                getter = self._next_getter()
                if getter is None:
                    break
                self._dispatch(getter.commit(), self._buf.take())
            return (True,)

        # case 2: pending getter, dispatch immediately
        getter = self._next_getter()
        if getter is not None:
            handler.commit()
            self._dispatch(getter.commit(), val)
            return (True,)

        # case 3: nobody to hand over to, queue the put if it may block
        if handler.blockable:
            assert len(self._puts) < MAX_OP_QUEUE_SIZE, \
                'No more than ' + str(MAX_OP_QUEUE_SIZE) + ' pending puts are allowed on a single channel.'
            self._puts.append((handler, val))
        return None

    # noinspection PyRedundantParentheses
    def _get(self, handler):
        if not handler.active:
            return None

        # case 1: buffer has content, return buffered value and refill from pending puts
        if self._buf is not None and self._buf.can_take:
            handler.commit()
            val = self._buf.take()
            while self._buf.can_add:
                putter = self._next_putter()
                if putter is None:
                    break
                self._buf.add(putter[1])
                self._dispatch(putter[0].commit(), True)
            self._check_exhausted()
            return (val,)

        # case 2: a putter is immediately available
        putter = self._next_putter()
        if putter is not None:
            handler.commit()
            self._dispatch(putter[0].commit(), True)
            return (putter[1],)

        # case 3: closed and drained
        if self.closed:
            handler.commit()
            return (None,)

        # case 4: cannot complete now, queue the get if it may block
        if handler.blockable:
            assert len(self._gets) < MAX_OP_QUEUE_SIZE, \
                'No more than ' + str(MAX_OP_QUEUE_SIZE) + ' pending gets are allowed on a single channel.'
            self._gets.append(handler)
        return None

    def __repr__(self):
        return 'Chan<' + self._name + ' ' + str(id(self)) + '>'

    def put_nowait(self, val, *, immediate_only=True):
        """
        Put `val` into the channel synchronously.

        If `immediate_only` is `True`, the operation is dropped if it cannot complete immediately, otherwise it is
        queued until a getter arrives.

        Returns `True` if the put succeeds immediately, `False` if the channel is already closed, `None` if the
        operation was dropped or queued.
        """
        ret = self._put(val, FnHandler(None, blockable=not immediate_only))
        if ret:
            return ret[0]
        return None

    def get(self):
        """
        **Coroutine**. Get a value out of the channel.

        :return: An awaitable holding the obtained value, or `None` if the channel is closed before succeeding.
        """
        ft = self.loop.create_future()
        ret = self._get(FnHandler(ft, blockable=True))
        if ret is not None:
            ft = self.loop.create_future()
            ft.set_result(ret[0])
        return ft

    def get_nowait(self):
        """
        Try to get a value from the channel without waiting.

        :return: the value if available immediately, `None` otherwise
        """
        ret = self._get(FnHandler(None, blockable=False))
        if ret:
            return ret[0]
        return None

    def close(self):
        """
        Close the channel.

        Further puts complete immediately without doing anything. Further gets yield what is left in the buffer and,
        once it is drained, complete immediately with `None`. Closing an already closed channel is a no-op.

        :return: `self`
        """
        if self._closed:
            return self
        while True:
            getter = self._next_getter()
            if getter is None:
                break
            val = self._buf.take() if self._buf is not None and self._buf.can_take else None
            self._dispatch(getter.commit(), val)
        self._closed = True
        self._check_exhausted()
        return self

    @property
    def closed(self):
        """
        :return: whether this channel is already closed.
        """
        return self._closed

    def join(self):
        """
        **Coroutine**. Wait for the channel to be closed and completely drained.
        """
        return self._close_event.wait()

    async def collect(self, n=None):
        """
        **Coroutine**. Collect the values in the channel into a list.

        :param n: if given, take at most `n` values, otherwise take until the channel is closed.
        :return: the collected values.
        """
        result = []
        while n is None or len(result) < n:
            r = await self.get()
            if r is None:
                break
            result.append(r)
        return result


def timeout(seconds, loop=None):
    """
    Returns a channel that closes itself after `seconds`.

    :param seconds: time before the channel is closed
    :param loop: you can optionally specify the loop on which the returned channel is intended to be used.
    :return: the timeout channel
    """
    c = Chan(loop=loop or asyncio.get_event_loop(), name='timeout')

    c.loop.call_later(seconds, c.close)

    return c


def select(*chans, priority=False, default=None, loop=None):
    """
    Asynchronously completes a get on at most one of `chans`.

    :param chans: channels to get from.
    :param priority: if True, the channels are tried in the order given, else the order is random
    :param default: if not None, do not wait when no channel is ready, instead complete with
           `(default, None)`.
    :param loop: asyncio loop to run on
    :return: an awaitable of `(value, chan)`, where `chan` is the channel that delivered. A closed channel delivers
             `None`.
    """
    chans = list(chans)
    loop = loop or asyncio.get_event_loop()
    ft = loop.create_future()
    flag = SelectFlag(ft)
    if not priority:
        random.shuffle(chans)

    def set_result_wrap(c):
        def set_result(v):
            ft.set_result((v, c))

        return set_result

    for chan in chans:
        # noinspection PyProtectedMember
        r = chan._get(SelectHandler(set_result_wrap(chan), flag))
        if r is not None:
            ft.set_result((r[0], chan))
            return ft

    if default is not None and flag.active:
        flag.commit()
        ft.set_result((default, None))

    return ft


def go(coro, loop=None):
    """
    Spawn a coroutine as a task.

    :param coro: the coroutine to spawn.
    :param loop: the event loop to run the coroutine, or the current loop if `None`.
    :return: the task.
    """
    return asyncio.ensure_future(coro, loop=loop)

