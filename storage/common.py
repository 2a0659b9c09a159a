"""Types shared by the remote and in-memory backends.

Every query on either backend resolves to a `Result`, the `{data, error}`
envelope callers branch on. `User` describes the one table the in-memory
store knows the shape of.
"""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')
Record = dict[str, Any]


class ErrorInfo(BaseModel):
    """Error reported by the remote backend, passed through untouched."""
    message: str
    code: str | int | None = None
    details: str | None = None
    hint: str | None = None


class Result(BaseModel, Generic[T]):
    data: T | None = None
    error: ErrorInfo | None = None
    count: int | None = None


class User(BaseModel):
    model_config = ConfigDict(extra='allow', coerce_numbers_to_str=True)
    id: int
    username: str | None = None
    password: str | None = None
    full_name: str | None = None
    email: str | None = None
    role: str | None = None
    grade: Any = None
    join_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def record(self) -> Record:
        """Dump as the plain dict the remote backend would return."""
        return self.model_dump(mode='json')
