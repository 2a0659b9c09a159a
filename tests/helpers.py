from asyncio import run
from types import SimpleNamespace
from postgrest import APIError


def resolve(query):
    """Await a chain from synchronous test code."""
    async def go():
        return await query
    return run(go())


class FakeBuilder:
    """Records the chain called on it and answers `execute()` with `response`."""

    def __init__(self, response=None, error: dict | None = None):
        self.response = response or SimpleNamespace(data=[], count=None)
        self.error = error
        self.calls = []

    def __getattr__(self, name):
        def call(*args, **kwargs):
            self.calls.append((name, args))
            return self
        return call

    def execute(self):
        self.calls.append(('execute', ()))
        if self.error is not None:
            raise APIError(self.error)
        return self.response


class FakeSupabase:
    def __init__(self, builder: FakeBuilder):
        self.builder = builder
        self.tables = []

    def table(self, name):
        self.tables.append(name)
        return self.builder
