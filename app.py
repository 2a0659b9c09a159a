"""HTTP API endpoints for the service.

Routes are written once against the storage chain and work the same whether
Supabase or the in-memory store is active. The backend is selected on startup
(unless one is passed to `createApp`) and checked before serving.
"""

from typing import Any
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel
from storage import Backend, LocalClient, Record, RemoteClient, Result, Settings, init, selectBackend

# postgrest: `.single()` matched no rows
NO_ROWS = 'PGRST116'

router = APIRouter()


class NewUser(BaseModel):
    username: str
    password: str
    full_name: str = ''
    email: str = ''
    role: str = 'student'
    grade: Any = None


def getBackend(request: Request) -> Backend:
    return request.app.state.backend


def getClient(backend: Backend = Depends(getBackend)) -> RemoteClient | LocalClient:
    return backend.client


def public(user: Record) -> Record:
    """Drop the password before a user leaves the service."""
    return {k: v for k, v in user.items() if k != 'password'}


def found(result: Result) -> Record:
    """Unwrap a `.single()` result, mapping empty and failed lookups to HTTP errors."""
    if result.error:
        if result.error.code == NO_ROWS:
            raise HTTPException(404, 'User not found')
        raise HTTPException(502, result.error.message)
    if result.data is None:
        raise HTTPException(404, 'User not found')
    return public(result.data)


@router.get('/health')
async def health(backend: Backend = Depends(getBackend)) -> dict[str, str]:
    return {'storage': backend.name}


@router.post('/users', status_code=201)
async def createUser(user: NewUser, client=Depends(getClient)) -> Record:
    result = await client.table('users').insert([user.model_dump()]).select().single()
    if result.error:
        raise HTTPException(502, result.error.message)
    return public(result.data)


@router.get('/users/{id}')
async def getUser(id: int, client=Depends(getClient)) -> Record:
    return found(await client.table('users').select('*').eq('id', id).single())


@router.get('/users')
async def findUser(username: str, client=Depends(getClient)) -> Record:
    return found(await client.table('users').select('*').eq('username', username).single())


def createApp(backend: Backend | None = None) -> FastAPI:
    """Build the app; without `backend` one is selected from the environment at startup."""
    app = FastAPI()
    app.state.backend = backend

    @app.on_event('startup')
    async def startup():
        """Select the storage backend if needed and check it."""
        if app.state.backend is None:
            app.state.backend = selectBackend(Settings.fromEnv())
        await init(app.state.backend)

    app.include_router(router)
    return app


app = createApp()
