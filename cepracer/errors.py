__all__ = ('CepLookupError', 'RequestBuildError', 'TransportError', 'StatusError', 'BodyReadError', 'DecodeError',
           'RaceTimeout', 'ContextError', 'DeadlineExceeded', 'ContextCancelled')


class CepLookupError(Exception):
    """
    Base class for every failure to resolve a postal code.

    Lookup failures are not raised by the lookup tasks: they travel as the `error` of a
    :class:`cepracer.models.LookupResult`. The underlying exception, if any, is kept as `__cause__`.

    :param backend: name of the backend that failed, `None` for failures of the race itself.
    :param message: human readable cause.
    """

    def __init__(self, backend, message):
        super().__init__(message)
        self.backend = backend

    @property
    def message(self):
        return self.args[0]

    def __eq__(self, other):
        return type(self) is type(other) and self.backend == other.backend and self.args == other.args

    def __hash__(self):
        return hash((type(self), self.backend, self.args))


class RequestBuildError(CepLookupError):
    """The request could not be built, e.g. the code made the URL invalid."""


class TransportError(CepLookupError):
    """The request failed on the wire, timed out, or was aborted by the deadline."""


class StatusError(CepLookupError):
    def __init__(self, backend, status):
        super().__init__(backend, 'status code: %d' % status)
        self.status = status


class BodyReadError(CepLookupError):
    """The response body could not be read completely."""


class DecodeError(CepLookupError):
    """The body is not the JSON document the backend is expected to return."""


class RaceTimeout(CepLookupError):
    """No backend answered before the deadline."""

    def __init__(self, seconds):
        super().__init__(None, 'timed out after %gs' % seconds)
        self.seconds = seconds


class ContextError(Exception):
    """Raised by :meth:`cepracer.context.Deadline.guard` when the deadline closes first."""


class DeadlineExceeded(ContextError):
    def __init__(self, message='context deadline exceeded'):
        super().__init__(message)


class ContextCancelled(ContextError):
    def __init__(self, message='context canceled'):
        super().__init__(message)
