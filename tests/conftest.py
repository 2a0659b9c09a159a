import pytest
from storage import LocalClient

ENV = ('SUPABASE_URL', 'NEXT_PUBLIC_SUPABASE_URL', 'SUPABASE_KEY', 'NEXT_PUBLIC_SUPABASE_ANON_KEY', 'NODE_ENV', 'APP_ENV', 'STORAGE_MODE', 'USE_SUPABASE')


@pytest.fixture(autouse=True)
def cleanEnv(monkeypatch):
    """Keep the host environment out of settings read during tests."""
    for i in ENV:
        monkeypatch.delenv(i, raising=False)


@pytest.fixture
def store() -> LocalClient:
    return LocalClient()
