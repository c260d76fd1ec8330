from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from config import Config
from .base import Base

DATABASE_URL = Config.DATABASE_URL

if not DATABASE_URL:
    raise Exception("DATABASE_URL is not set in the .env file")

async_engine = create_async_engine(DATABASE_URL)
async_session_maker = async_sessionmaker(async_engine, expire_on_commit=False)


if async_engine.dialect.name == "sqlite":
    @event.listens_for(async_engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def init_models() -> None:
    """Создает недостающие таблицы."""
    from . import models  # noqa: F401  регистрирует модели в Base.metadata

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
