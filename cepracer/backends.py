import json
import logging

import httpx

from .errors import BodyReadError, ContextError, DecodeError, RequestBuildError, StatusError, TransportError
from .models import AddressRecord, LookupResult

__all__ = ('Backend', 'BRASILAPI', 'VIACEP', 'BACKENDS', 'fetch', 'lookup')

logger = logging.getLogger(__name__)


class Backend:
    """
    One postal code lookup service.

    :param name: the name results are tagged with.
    :param url_template: endpoint, with a ``{cep}`` placeholder the code is inserted into verbatim.
    :param fields: mapping of :class:`cepracer.models.AddressRecord` field to the key holding it in the
           backend's JSON body. Missing or null keys give empty strings.
    :param not_found_key: key whose presence in an otherwise valid body means the code does not exist.
    """

    def __init__(self, name, url_template, fields, not_found_key=None):
        unknown = set(fields) - set(AddressRecord._fields)
        if unknown:
            raise ValueError('unknown address fields: %s' % ', '.join(sorted(unknown)))
        self.name = name
        self.url_template = url_template
        self.fields = dict(fields)
        self.not_found_key = not_found_key

    def __repr__(self):
        return 'Backend<' + self.name + '>'

    def url(self, cep):
        return self.url_template.format(cep=cep)

    def parse(self, body):
        """
        Map a response body into an :class:`cepracer.models.AddressRecord`.

        :param body: the raw body, `bytes` or `str`.
        :raises DecodeError: if the body is not a JSON object of strings, or reports the code as not found.
        """
        try:
            data = json.loads(body)
        except ValueError as e:
            raise DecodeError(self.name, 'invalid JSON: %s' % e) from e

        if not isinstance(data, dict):
            raise DecodeError(self.name, 'expected a JSON object, got %s' % type(data).__name__)
        if self.not_found_key is not None and data.get(self.not_found_key):
            raise DecodeError(self.name, 'postal code not found')

        values = {}
        for field, key in self.fields.items():
            value = data.get(key)
            if value is None:
                value = ''
            elif not isinstance(value, str):
                raise DecodeError(self.name, 'field %r: expected a string, got %s' % (key, type(value).__name__))
            values[field] = value
        return AddressRecord(**values)


BRASILAPI = Backend('BrasilAPI',
                    'https://brasilapi.com.br/api/cep/v1/{cep}',
                    {'cep': 'cep',
                     'state': 'state',
                     'city': 'city',
                     'neighborhood': 'neighborhood',
                     'street': 'street'})

VIACEP = Backend('ViaCEP',
                 'http://viacep.com.br/ws/{cep}/json/',
                 {'cep': 'cep',
                  'state': 'uf',
                  'city': 'localidade',
                  'neighborhood': 'bairro',
                  'street': 'logradouro'},
                 not_found_key='erro')

BACKENDS = (BRASILAPI, VIACEP)


def _describe(exc):
    return str(exc) or exc.__class__.__name__


async def fetch(backend, cep, deadline, client):
    """
    **Coroutine**. Query one backend for `cep`.

    Every network wait runs under `deadline`, so an expired or cancelled deadline aborts the request instead of
    waiting for the response. Failures are returned, not raised.

    :param backend: the :class:`Backend` to query.
    :param cep: the postal code, forwarded verbatim.
    :param deadline: the race's :class:`cepracer.context.Deadline`.
    :param client: the `httpx.AsyncClient` to send with.
    :return: a :class:`cepracer.models.LookupResult`.
    """
    started = deadline.loop.time()

    def failed(err, cause=None):
        if cause is not None:
            err.__cause__ = cause
        elapsed = deadline.loop.time() - started
        logger.debug('%s failed after %.3fs: %s', backend.name, elapsed, err)
        return LookupResult.failure(backend.name, err, elapsed)

    try:
        request = client.build_request('GET', backend.url(cep))
    except httpx.InvalidURL as e:
        return failed(RequestBuildError(backend.name, _describe(e)), e)

    logger.debug('%s: GET %s', backend.name, request.url)
    try:
        response = await deadline.guard(client.send(request, stream=True))
    except (httpx.HTTPError, ContextError) as e:
        return failed(TransportError(backend.name, _describe(e)), e)

    try:
        if response.status_code != httpx.codes.OK:
            return failed(StatusError(backend.name, response.status_code))
        try:
            body = await deadline.guard(response.aread())
        except (httpx.HTTPError, ContextError) as e:
            return failed(BodyReadError(backend.name, _describe(e)), e)
    finally:
        await response.aclose()

    try:
        address = backend.parse(body)
    except DecodeError as e:
        return failed(e)

    elapsed = deadline.loop.time() - started
    logger.debug('%s answered in %.3fs', backend.name, elapsed)
    return LookupResult.success(backend.name, address, elapsed)


async def lookup(backend, cep, deadline, out, client, timings=None):
    """
    **Coroutine**. The lookup task: query `backend` and publish exactly one result on `out`.

    `out` must have buffer room for this result, so publishing never waits on a reader that may have left.

    :param timings: a :class:`cepracer.models.TimingTable` the duration of a successful lookup is recorded into
           before the result is published, or `None`.
    :return: the published :class:`cepracer.models.LookupResult`.
    """
    result = await fetch(backend, cep, deadline, client)
    if result.ok and timings is not None:
        await timings.record(result.backend, result.elapsed)
    if not out.put_nowait(result):
        logger.debug('%s result not published: %r is closed or full', backend.name, out)
    return result
