"""Supabase storage backend.

Wraps the synchronous `supabase` client so that it speaks the same awaitable
`Result` contract as the in-memory store. Chain calls are forwarded to the
postgrest request builder untouched; `execute()` runs the request in a worker
thread and folds the response (or a postgrest `APIError`) into a `Result`.
"""

from asyncio import to_thread
from typing import Any, Generator
from postgrest import APIError
from supabase import Client, ClientOptions, create_client
from .common import ErrorInfo, Result

WRITES = {'insert', 'upsert', 'update', 'delete'}


class RemoteQuery:
    def __init__(self, builder: Any, write: bool = False, one: bool = False):
        self.builder = builder
        self.write = write
        self.one = one

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self.builder, name)
        if not callable(attr):
            return attr

        def chain(*args, **kwargs) -> RemoteQuery:
            return RemoteQuery(attr(*args, **kwargs), self.write or name in WRITES, self.one)
        return chain

    def select(self, *columns: str, **kwargs) -> 'RemoteQuery':
        # Writes already return the affected rows.
        if self.write:
            return self
        return RemoteQuery(self.builder.select(*columns, **kwargs))

    def single(self) -> 'RemoteQuery':
        if self.write:
            return RemoteQuery(self.builder, True, True)
        return RemoteQuery(self.builder.single(), self.write)

    def __await__(self) -> Generator[Any, None, Result]:
        return self.execute().__await__()

    async def execute(self) -> Result:
        """Run the request; query errors come back in `Result.error`, not raised."""
        try:
            response = await to_thread(self.builder.execute)
        except APIError as e:
            return Result(error=ErrorInfo(message=e.message or str(e), code=e.code, details=e.details, hint=e.hint))
        data = response.data
        if self.one:
            data = data[0] if data else None
        return Result(data=data, count=response.count)


class RemoteClient:
    def __init__(self, client: Client):
        self.client = client

    def table(self, name: str) -> RemoteQuery:
        return RemoteQuery(self.client.table(name))

    from_ = table


def connect(url: str, key: str) -> RemoteClient:
    """Build the Supabase client; raises whatever `create_client` raises."""
    return RemoteClient(create_client(url, key, ClientOptions(schema='public', auto_refresh_token=False, persist_session=False)))
