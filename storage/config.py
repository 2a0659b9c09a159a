"""Settings snapshot consumed by backend selection.

`Settings.fromEnv()` is the only place the environment is read. A `.env` file
is loaded first if present, without overriding variables already set.
"""

from os import getenv
from typing import Literal
from dotenv import load_dotenv
from pydantic import BaseModel

StorageMode = Literal['auto', 'remote', 'in_memory']


def _getenv(*names: str) -> str:
    """First non-blank value among `names`, stripped, or ''."""
    for i in names:
        value = (getenv(i) or '').strip()
        if value:
            return value
    return ''


class Settings(BaseModel):
    supabase_url: str = ''
    supabase_key: str = ''
    # Deployment mode, e.g. 'production' on managed hosting.
    environment: str = 'development'
    storage_mode: StorageMode = 'auto'
    # False when remote storage has been switched off for this process.
    use_supabase: bool = True

    @property
    def production(self) -> bool:
        return self.environment.lower() == 'production'

    @classmethod
    def fromEnv(cls) -> 'Settings':
        load_dotenv(override=False)
        return cls(
            supabase_url=_getenv('SUPABASE_URL', 'NEXT_PUBLIC_SUPABASE_URL'),
            supabase_key=_getenv('SUPABASE_KEY', 'NEXT_PUBLIC_SUPABASE_ANON_KEY'),
            environment=_getenv('NODE_ENV', 'APP_ENV') or 'development',
            storage_mode=_getenv('STORAGE_MODE').lower() or 'auto',
            use_supabase=_getenv('USE_SUPABASE').lower() != 'false',
        )
