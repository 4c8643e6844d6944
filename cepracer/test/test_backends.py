import json

import httpx
import pytest

from cepracer import *
from cepracer.backends import fetch, lookup
from cepracer.test.fakes import BRASILAPI_BODY, VIACEP_BODY, FakeBackends, StalledStream

EXPECTED = AddressRecord(cep='01153000',
                         state='SP',
                         city='São Paulo',
                         neighborhood='Barra Funda',
                         street='Rua Vitorino Carmilo')


def test_urls():
    assert BRASILAPI.url('01153000') == 'https://brasilapi.com.br/api/cep/v1/01153000'
    assert VIACEP.url('01153000') == 'http://viacep.com.br/ws/01153000/json/'
    assert BACKENDS == (BRASILAPI, VIACEP)


def test_brasilapi_mapping():
    body = json.dumps(BRASILAPI_BODY).encode()
    for _ in range(3):
        assert BRASILAPI.parse(body) == EXPECTED


def test_viacep_mapping():
    body = json.dumps(VIACEP_BODY, ensure_ascii=False)
    for _ in range(3):
        assert VIACEP.parse(body) == EXPECTED._replace(cep='01153-000')


def test_missing_and_null_fields_are_empty():
    assert BRASILAPI.parse('{"cep": "01153000", "street": null}') == AddressRecord(cep='01153000')
    assert VIACEP.parse('{}') == AddressRecord()


def test_decode_errors():
    with pytest.raises(DecodeError) as info:
        BRASILAPI.parse(b'<html>')
    assert info.value.backend == 'BrasilAPI'
    assert isinstance(info.value.__cause__, ValueError)

    with pytest.raises(DecodeError):
        BRASILAPI.parse('["01153000"]')

    with pytest.raises(DecodeError):
        VIACEP.parse('{"cep": 1153000}')


def test_viacep_not_found_marker():
    with pytest.raises(DecodeError) as info:
        VIACEP.parse('{"erro": "true"}')
    assert 'not found' in str(info.value)

    # the marker means nothing to the other backend
    assert BRASILAPI.parse('{"erro": true}') == AddressRecord()


def test_backend_rejects_unknown_fields():
    with pytest.raises(ValueError):
        Backend('Other', 'http://example.com/{cep}', {'zip': 'zip'})


@pytest.mark.asyncio
async def test_fetch_success():
    fakes = FakeBackends().route(VIACEP, delay=0.02)
    deadline = Deadline(1)
    async with fakes.client() as client:
        result = await fetch(VIACEP, '01153000', deadline, client)
    deadline.cancel()

    assert result.ok
    assert result.backend == 'ViaCEP'
    assert result.address == EXPECTED._replace(cep='01153-000')
    assert result.elapsed >= 0.01
    assert fakes.calls[FakeBackends.host(VIACEP)] == 1


async def fetch_failure(fakes, backend=BRASILAPI, cep='01153000', seconds=1):
    deadline = Deadline(seconds)
    async with fakes.client() as client:
        result = await fetch(backend, cep, deadline, client)
    deadline.cancel()
    assert not result.ok
    assert result.address is None
    assert result.backend == backend.name
    assert result.error.backend == backend.name
    assert result.elapsed >= 0
    return result.error


@pytest.mark.asyncio
async def test_fetch_request_build_error():
    fakes = FakeBackends()
    error = await fetch_failure(fakes, cep='0115\n3000')
    assert isinstance(error, RequestBuildError)
    assert isinstance(error.__cause__, httpx.InvalidURL)
    assert sum(fakes.calls.values()) == 0


@pytest.mark.asyncio
async def test_fetch_transport_error():
    fakes = FakeBackends().route(BRASILAPI, exc=httpx.ConnectError('connection refused'))
    error = await fetch_failure(fakes)
    assert isinstance(error, TransportError)
    assert 'connection refused' in str(error)


@pytest.mark.asyncio
async def test_fetch_deadline_aborts_request():
    fakes = FakeBackends().route(BRASILAPI, delay=10)
    error = await fetch_failure(fakes, seconds=0.02)
    assert isinstance(error, TransportError)
    assert isinstance(error.__cause__, DeadlineExceeded)


@pytest.mark.asyncio
async def test_fetch_status_error():
    fakes = FakeBackends().route(VIACEP, status=400, content=b'<html>Bad Request</html>')
    error = await fetch_failure(fakes, backend=VIACEP, cep='abc')
    assert error == StatusError('ViaCEP', 400)
    assert error.status == 400


@pytest.mark.asyncio
async def test_fetch_body_read_error():
    fakes = FakeBackends().route(BRASILAPI, content=StalledStream(exc=httpx.ReadError('connection reset')))
    error = await fetch_failure(fakes)
    assert isinstance(error, BodyReadError)
    assert isinstance(error.__cause__, httpx.ReadError)


@pytest.mark.asyncio
async def test_fetch_deadline_aborts_body_read():
    fakes = FakeBackends().route(BRASILAPI, content=StalledStream(delay=10))
    error = await fetch_failure(fakes, seconds=0.05)
    assert isinstance(error, BodyReadError)
    assert isinstance(error.__cause__, DeadlineExceeded)


@pytest.mark.asyncio
async def test_fetch_decode_error():
    fakes = FakeBackends().route(VIACEP, body={'erro': True})
    error = await fetch_failure(fakes, backend=VIACEP)
    assert isinstance(error, DecodeError)

    fakes = FakeBackends().route(BRASILAPI, content=b'not json')
    error = await fetch_failure(fakes)
    assert isinstance(error, DecodeError)


@pytest.mark.asyncio
async def test_lookup_publishes_and_records():
    fakes = FakeBackends().route(VIACEP, status=500)
    deadline = Deadline(1)
    out = Chan(2)
    timings = TimingTable()
    async with fakes.client() as client:
        ok = await lookup(BRASILAPI, '01153000', deadline, out, client, timings)
        failed = await lookup(VIACEP, '01153000', deadline, out, client, timings)
    deadline.cancel()

    assert [ok, failed] == await out.collect(2)
    assert out.get_nowait() is None
    assert await timings.snapshot() == {'BrasilAPI': ok.elapsed}


@pytest.mark.asyncio
async def test_lookup_without_timings():
    deadline = Deadline(1)
    out = Chan(1)
    async with FakeBackends().client() as client:
        result = await lookup(BRASILAPI, '01153000', deadline, out, client)
    deadline.cancel()
    assert result.ok
    assert result == out.get_nowait()
