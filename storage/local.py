"""In-memory storage used as a fallback or for testing.

Mimics the chainable query builder of the remote client closely enough that
code written against one runs against the other:

    result = await client.table('users').select('*').eq('id', 1).single()
    if result.error: ...

Only the `users` table keeps what is written to it. Every other table is a
pass-through: selects come back empty and inserts are not retained.
`update` and `delete` succeed without touching stored rows.
"""

import logging
from datetime import datetime, timezone
from random import randint
from typing import Any, Generator, Iterable
from .common import Record, Result, User

logger = logging.getLogger(__name__)

USERS = 'users'


def _rows(records: Record | Iterable[Record]) -> list[Record]:
    return [records] if isinstance(records, dict) else list(records)


class Query:
    """Awaitable builder; resolved once, on the first `execute()`."""
    _result: Result | None = None

    def __await__(self) -> Generator[Any, None, Result]:
        return self.execute().__await__()

    async def execute(self) -> Result:
        if self._result is None:
            self._result = self.resolve()
        return self._result

    def resolve(self) -> Result:
        raise NotImplementedError


class SelectQuery(Query):
    def __init__(self, client: 'LocalClient'):
        self.client = client
        self.filters = list[tuple[str, Any]]()
        self.cap: int | None = None
        self.one = False

    def eq(self, column: str, value: Any) -> 'SelectQuery':
        """Keep rows whose `column` equals `value` exactly."""
        self.filters.append((column, value))
        return self

    def limit(self, n: int) -> 'SelectQuery':
        """Cap the result at `min(n, 1)` rows; larger limits are not honoured."""
        if n > 1:
            logger.warning('limit(%d) returns at most one row from in-memory storage', n)
        self.cap = min(max(n, 0), 1)
        return self

    def single(self) -> 'SelectQuery':
        """Resolve to the first matching row or `None` instead of a list."""
        self.one = True
        return self

    def resolve(self) -> Result:
        rows = [dict(i) for i in self.client.users if all(i.get(k) == v for k, v in self.filters)]
        if self.cap is not None:
            rows = rows[:self.cap]
        if self.one:
            return Result(data=rows[0] if rows else None)
        return Result(data=rows, count=len(rows))


class InsertQuery(Query):
    def __init__(self, records: Iterable[Record], create):
        self.records = list(records)
        self.create = create
        self.one = False

    def select(self, columns: str = '*') -> 'InsertQuery':
        """Return the written rows. They are always returned, so this only keeps the chain shape."""
        return self

    def single(self) -> 'InsertQuery':
        self.one = True
        return self

    def resolve(self) -> Result:
        rows = self.create(self.records)
        if self.one:
            return Result(data=rows[0] if rows else None)
        return Result(data=rows, count=len(rows))


class NoopQuery(Query):
    """`update`/`delete`: report success, leave the stored rows alone."""

    def __init__(self, table: str, operation: str, data: Any):
        self.table = table
        self.operation = operation
        self.data = data

    def eq(self, column: str, value: Any) -> 'NoopQuery':
        return self

    def resolve(self) -> Result:
        logger.warning('%s on %r is not applied by in-memory storage', self.operation, self.table)
        return Result(data=self.data)


class PassthroughSelect(Query):
    def resolve(self) -> Result:
        return Result(data=[], count=0)


class Table:
    def __init__(self, name: str):
        self.name = name

    def update(self, values: Record | list[Record]) -> NoopQuery:
        return NoopQuery(self.name, 'update', values)

    def delete(self) -> NoopQuery:
        return NoopQuery(self.name, 'delete', [])


class UsersTable(Table):
    def __init__(self, client: 'LocalClient'):
        super().__init__(USERS)
        self.client = client

    def select(self, columns: str = '*', count: str | None = None) -> SelectQuery:
        return SelectQuery(self.client)

    def insert(self, records: Record | Iterable[Record]) -> InsertQuery:
        return InsertQuery(_rows(records), self.client.addUsers)


class PassthroughTable(Table):
    """Any table other than `users`: nothing is stored."""

    def select(self, columns: str = '*', count: str | None = None) -> PassthroughSelect:
        return PassthroughSelect()

    def insert(self, records: Record | Iterable[Record]) -> InsertQuery:
        return InsertQuery(_rows(records), lambda rows: [{**i, 'id': randint(1, 1 << 31)} for i in rows])


class LocalClient:
    """In-memory stand-in for the remote client.

    Holds the `users` rows in insertion order and the id counter. Both live as
    long as the instance does; build a fresh one for a clean store.
    """

    def __init__(self):
        self.users = list[Record]()
        self.nextId = 1

    def table(self, name: str) -> UsersTable | PassthroughTable:
        return UsersTable(self) if name == USERS else PassthroughTable(name)

    from_ = table

    def addUsers(self, candidates: list[Record]) -> list[Record]:
        """Assign ids and join dates to `candidates` and append them in order."""
        now = datetime.now(timezone.utc)
        # Build the whole batch before the counter moves.
        created = [User(**{**v, 'id': self.nextId + k, 'join_date': now}).record() for k, v in enumerate(candidates)]
        self.nextId += len(created)
        self.users.extend(created)
        return [dict(i) for i in created]
