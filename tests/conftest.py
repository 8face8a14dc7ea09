from typing import Optional

import pytest
from fastapi import FastAPI, Header, HTTPException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from scribo.api.base import api_router
from scribo.db import get_db
from scribo.db import models  # noqa: F401
from scribo.db.base import Base
from scribo.features.notes.service import NoteService
from scribo.features.users.domain import CurrentUser, User
from scribo.features.users.repository import UserRepository
from scribo.middleware.auth import get_current_user

ALICE = "11111111-1111-4111-8111-111111111111"
BOB = "22222222-2222-4222-8222-222222222222"
CAROL = "33333333-3333-4333-8333-333333333333"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def users(session_factory):
    async with session_factory() as session:
        repo = UserRepository(session)
        return {
            "alice": await repo.create(User(id=ALICE, email="alice@example.com", name="Alice")),
            "bob": await repo.create(User(id=BOB, email="Bob@Example.com", name="Bob")),
            "carol": await repo.create(User(id=CAROL, email="carol@example.com", name="Carol")),
        }


@pytest.fixture
def note_service(db, users):
    return NoteService(db)


def auth(user_id: str) -> dict:
    return {"X-User-Id": user_id}


@pytest.fixture
def app(session_factory, users):
    app = FastAPI()
    app.include_router(api_router)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_current_user(x_user_id: Optional[str] = Header(None)) -> CurrentUser:
        if not x_user_id:
            raise HTTPException(status_code=401, detail="Authorization header missing")
        return CurrentUser(user_id=x_user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
