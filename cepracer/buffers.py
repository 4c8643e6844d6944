import collections


class FixedLengthBuffer:
    """
    A fixed length buffer. Takes block while it is empty and puts block while it is full.

    Completion channels are created with one of these, sized to the number of producers, so that every producer
    can hand over its single value without waiting for a consumer.

    :param maxsize: size of the buffer
    """
    __slots__ = ('_maxsize', '_queue')

    def __init__(self, maxsize):
        if maxsize < 1:
            raise ValueError('buffer size must be positive, got %r' % (maxsize,))
        self._maxsize = maxsize
        self._queue = collections.deque()

    def __len__(self):
        return len(self._queue)

    def __repr__(self):
        return 'FixedLengthBuffer<%s/%s>' % (len(self._queue), self._maxsize)

    @property
    def maxsize(self):
        return self._maxsize

    def add(self, el):
        self._queue.append(el)

    def take(self):
        return self._queue.popleft()

    @property
    def can_add(self):
        return len(self._queue) < self._maxsize

    @property
    def can_take(self):
        return bool(len(self._queue))
