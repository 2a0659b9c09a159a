"""Storage backend selection.

Chooses between the Supabase backend and the in-memory `local` store once at
startup. Both expose the same chain (`table(name).select().eq().single()` ...)
and resolve to a `Result`, so the rest of the application does not care which
one is active. Selection never raises; any problem degrades to in-memory
storage and is logged.
"""

import logging
from .common import ErrorInfo, Record, Result, User
from .config import Settings, StorageMode
from .local import LocalClient
from .remote import RemoteClient, connect

logger = logging.getLogger(__name__)


class Backend:
    """The selected client plus the process-wide "remote in use" flag.

    Once the flag is cleared it stays cleared; `client` then always returns the
    in-memory store.
    """

    def __init__(self, fallback: LocalClient, remote: RemoteClient | None = None, reason: str = ''):
        self.fallback = fallback
        self.remote = remote
        self.useRemote = remote is not None
        self.reason = reason

    @property
    def client(self) -> RemoteClient | LocalClient:
        return self.remote if self.useRemote and self.remote else self.fallback

    @property
    def name(self) -> str:
        return 'supabase' if self.useRemote else 'memory'

    def disableRemote(self, reason: str) -> None:
        self.useRemote = False
        self.reason = reason


def _local(fallback: LocalClient, reason: str) -> Backend:
    logger.info('Using in-memory storage (%s)', reason)
    return Backend(fallback, reason=reason)


def selectBackend(settings: Settings, fallback: LocalClient | None = None) -> Backend:
    """Pick the backend for `settings`; the first matching rule wins."""
    fallback = fallback or LocalClient()
    if settings.storage_mode == 'in_memory':
        return _local(fallback, 'storage mode is in_memory')
    if settings.storage_mode == 'auto':
        if settings.production:
            return _local(fallback, 'production environment')
        if not settings.use_supabase:
            return _local(fallback, 'remote storage disabled')
    if not settings.supabase_url or not settings.supabase_key:
        logger.error('Missing Supabase credentials, set SUPABASE_URL and SUPABASE_KEY')
        return _local(fallback, 'missing credentials')
    if not settings.supabase_url.startswith('https://'):
        logger.warning('Invalid Supabase URL %r, it must start with https://', settings.supabase_url)
        return _local(fallback, 'insecure url')
    try:
        remote = connect(settings.supabase_url, settings.supabase_key)
    except Exception:
        logger.exception('Error creating Supabase client')
        return _local(fallback, 'client construction failed')
    return Backend(fallback, remote, 'configured')


async def init(backend: Backend) -> bool:
    """Check the remote backend with one read; on any failure switch to in-memory storage for good."""
    if not backend.useRemote or backend.remote is None:
        logger.info('Using in-memory storage instead of Supabase')
        return False
    try:
        result = await backend.remote.table('users').select('count').limit(1)
        error = None if result.error is None else str(result.error.message or result.error.code or 'unknown error')
    except Exception as e:
        logger.debug('Supabase connection check raised', exc_info=True)
        error = f'{type(e).__name__}: {e}'
    if error:
        logger.error('Error connecting to Supabase: %s', error)
        backend.disableRemote(f'connection check failed: {error}')
        logger.info('Using in-memory storage')
        return False
    logger.info('Connected to Supabase')
    return True


__all__ = ['Backend', 'ErrorInfo', 'LocalClient', 'Record', 'RemoteClient', 'Result', 'Settings', 'StorageMode', 'User', 'init', 'selectBackend']
