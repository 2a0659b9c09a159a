"""Backend selection and the startup connection check."""

from asyncio import run
from types import SimpleNamespace
import pytest
import storage
from tests.helpers import FakeBuilder, FakeSupabase
from storage import Backend, ErrorInfo, LocalClient, RemoteClient, Result, Settings, init, selectBackend

URL = 'https://example.supabase.co'
KEY = 'anon-key'


@pytest.fixture
def connects(monkeypatch):
    """Replace the Supabase constructor; the list records every (url, key) it was called with."""
    calls = []

    def connect(url, key):
        calls.append((url, key))
        return RemoteClient(FakeSupabase(FakeBuilder()))
    monkeypatch.setattr(storage, 'connect', connect)
    return calls


def test_remote_when_configured(connects):
    backend = selectBackend(Settings(supabase_url=URL, supabase_key=KEY))
    assert backend.useRemote
    assert isinstance(backend.client, RemoteClient)
    assert backend.name == 'supabase'
    assert connects == [(URL, KEY)]


def test_production_forces_memory(connects):
    backend = selectBackend(Settings(supabase_url=URL, supabase_key=KEY, environment='production'))
    assert not backend.useRemote
    assert isinstance(backend.client, LocalClient)
    assert backend.reason == 'production environment'
    assert connects == []


def test_remote_mode_ignores_production(connects):
    backend = selectBackend(Settings(supabase_url=URL, supabase_key=KEY, environment='production', storage_mode='remote'))
    assert backend.useRemote


def test_in_memory_mode(connects):
    backend = selectBackend(Settings(supabase_url=URL, supabase_key=KEY, storage_mode='in_memory'))
    assert backend.name == 'memory'
    assert connects == []


def test_disabled_flag(connects):
    backend = selectBackend(Settings(supabase_url=URL, supabase_key=KEY, use_supabase=False))
    assert not backend.useRemote
    assert connects == []


@pytest.mark.parametrize('url,key', [('', KEY), (URL, ''), ('', '')])
def test_missing_credentials(connects, url, key):
    backend = selectBackend(Settings(supabase_url=url, supabase_key=key, storage_mode='remote'))
    assert not backend.useRemote
    assert backend.reason == 'missing credentials'
    assert connects == []


def test_insecure_url(connects, caplog):
    backend = selectBackend(Settings(supabase_url='http://example.supabase.co', supabase_key=KEY))
    assert not backend.useRemote
    assert backend.reason == 'insecure url'
    assert 'https://' in caplog.text
    assert connects == []


def test_construction_failure(monkeypatch):
    def connect(url, key):
        raise ValueError('Invalid API key')
    monkeypatch.setattr(storage, 'connect', connect)
    backend = selectBackend(Settings(supabase_url=URL, supabase_key=KEY))
    assert not backend.useRemote
    assert backend.reason == 'client construction failed'


def test_injected_fallback_is_used():
    fallback = LocalClient()
    assert selectBackend(Settings(storage_mode='in_memory'), fallback).client is fallback


def test_connection_check_in_memory():
    assert run(init(Backend(LocalClient()))) is False


def test_connection_check_success():
    builder = FakeBuilder(SimpleNamespace(data=[{'count': 0}], count=None))
    backend = Backend(LocalClient(), RemoteClient(FakeSupabase(builder)))
    assert run(init(backend)) is True
    assert backend.useRemote
    assert builder.calls == [('select', ('count',)), ('limit', (1,)), ('execute', ())]


def test_connection_check_query_error_switches_to_memory():
    fallback = LocalClient()
    builder = FakeBuilder(error={'message': 'relation "users" does not exist', 'code': '42P01'})
    backend = Backend(fallback, RemoteClient(FakeSupabase(builder)))
    assert run(init(backend)) is False
    assert not backend.useRemote
    assert backend.client is fallback
    assert backend.reason.startswith('connection check failed')


def test_connection_check_exception_switches_to_memory():
    class Broken(FakeBuilder):
        def execute(self):
            raise ConnectionError('unreachable')
    backend = Backend(LocalClient(), RemoteClient(FakeSupabase(Broken())))
    assert run(init(backend)) is False
    assert backend.name == 'memory'
    # no retry
    assert run(init(backend)) is False


def test_connection_check_error_without_message_switches_to_memory():
    class Blank:
        """Remote whose read answers with an error carrying no message."""

        def table(self, name):
            return self

        def select(self, *columns):
            return self

        def limit(self, n):
            return self

        def __await__(self):
            async def go():
                return Result(error=ErrorInfo(message='', code='PGRST301'))
            return go().__await__()
    backend = Backend(LocalClient(), Blank())
    assert run(init(backend)) is False
    assert not backend.useRemote
    assert backend.reason == 'connection check failed: PGRST301'
