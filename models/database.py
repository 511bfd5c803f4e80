import asyncio
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from config import Settings, get_settings
from models.models import Base


logger = logging.getLogger("models.database")


def make_engine(settings: Settings) -> AsyncEngine:
    options = {"echo": False, "pool_pre_ping": True}
    if settings.database_url.startswith("postgresql"):
        options["pool_size"] = settings.db_pool_size
    return create_async_engine(settings.database_url, **options)


def make_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


settings = get_settings()
engine = make_engine(settings)
async_session_maker = make_session_maker(engine)


async def init_db(
    db_engine: Optional[AsyncEngine] = None,
    attempts: Optional[int] = None,
    timeout: Optional[float] = None,
):
    """
    Wait for the database to accept connections, then create the schema.
    Retries `attempts` times with a `timeout` pause; the last error is re-raised
    """
    db_engine = db_engine or engine
    attempts = attempts if attempts is not None else settings.db_connect_attempts
    timeout = timeout if timeout is not None else settings.db_connect_timeout

    while True:
        try:
            async with db_engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database schema is ready")
            return
        except (OSError, DBAPIError) as e:
            attempts -= 1
            if attempts <= 0:
                logger.error("Database is unreachable, giving up: %s", e)
                raise
            logger.info("Database is not ready, retrying (attempts left: %d)", attempts)
            await asyncio.sleep(timeout)
