import asyncio


def _pending(f):
    return not (asyncio.isfuture(f) and f.done())


class FnHandler:
    """
    Completion handler for a single put or get. A handler backed by a future stops being active once the
    future is done, so a cancelled waiter never swallows a value.
    """
    __slots__ = ('_f', '_blockable')

    def __init__(self, f, blockable=True):
        self._f = f
        self._blockable = blockable

    @property
    def blockable(self):
        return self._blockable

    @property
    def active(self):
        return _pending(self._f)

    def commit(self):
        return self._f


class SelectFlag:
    """Shared by all handlers of one select: the first handler to commit deactivates the rest."""
    __slots__ = ('_active', '_ft')

    def __init__(self, ft=None):
        self._active = True
        self._ft = ft

    @property
    def active(self):
        return self._active and _pending(self._ft)

    def commit(self):
        self._active = False


class SelectHandler:
    __slots__ = ('_f', '_flag')
    blockable = True

    def __init__(self, f, flag):
        self._f = f
        self._flag = flag

    @property
    def active(self):
        return self._flag.active

    def commit(self):
        self._flag.commit()
        return self._f
