"""
Async database access for DrawHub

One engine per process, created on first use. SQLite (local runs, tests)
gets a fresh connection per session and a lock timeout long enough for
concurrent uploads to queue behind each other; PostgreSQL gets a bounded
pool sized from settings.
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import Any, AsyncGenerator, Dict, Optional

from drawhub.core.config import settings

Base = declarative_base()

_engine: Optional[AsyncEngine] = None
_async_session_local: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url(url: Optional[str] = None) -> str:
    """DATABASE_URL with the async driver filled in for plain postgres URLs"""
    db_url = url or settings.DATABASE_URL
    for prefix in ("postgresql://", "postgres://"):
        if db_url.startswith(prefix):
            return "postgresql+asyncpg://" + db_url[len(prefix):]
    return db_url


def engine_options(db_url: str) -> Dict[str, Any]:
    """Keyword arguments for create_async_engine"""
    if db_url.startswith("sqlite"):
        return {
            "echo": settings.DB_ECHO,
            "connect_args": {"check_same_thread": False, "timeout": settings.DB_SQLITE_TIMEOUT},
            "poolclass": NullPool,
        }
    return {
        "echo": settings.DB_ECHO,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = get_database_url()
        _engine = create_async_engine(db_url, **engine_options(db_url))
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the process engine"""
    global _async_session_local
    if _async_session_local is None:
        _async_session_local = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False
        )
    return _async_session_local


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency: one session per request.

    Services commit their own units of work; anything still pending when
    the endpoint returns is committed here, and any error rolls back.
    """
    async with get_session_local()() as session:
        try:
            yield session
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db():
    """Create missing tables"""
    import drawhub.models  # noqa: F401  (registers models on the metadata)

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    global _engine, _async_session_local
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_local = None
