import os

# Модуль сессии требует DATABASE_URL при импорте
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from database import models  # noqa: F401
from database.base import Base
from database.crud import crud_event, crud_position, crud_user
from tests.helpers import at


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def event_row(session):
    await crud_user.get_or_create_user(session, 1, "organizer")
    return await crud_event.create_event(session, guild_id=100, owner_id=1, title="Harvest festival")


@pytest_asyncio.fixture
async def position(session, event_row):
    """Позиция с окном 09:00-17:00."""
    return await crud_position.create_position(
        session, event_row.id, "Registration desk", at(9), at(17), volunteers_needed=4
    )
