"""
SQLAlchemy async engine and session management

Provides:
1. Base: declarative base for every ORM model
2. AsyncEngineManager: event-loop-aware engine + session maker for one database URL
3. Database: the object handed out by the DI container and the unit of work

Backends:
- PostgreSQL (asyncpg): production. Row locks taken by conditional UPDATEs
  serialise concurrent reservations on the same ticket type.
- SQLite (aiosqlite): local development and tests. The driver's implicit
  transactions are replaced by explicit ones: unit-of-work sessions open with
  BEGIN IMMEDIATE, taking the database write lock up front so concurrent
  writers queue on busy_timeout; read-only sessions open with a plain BEGIN
  and read the last committed snapshot (WAL) without waiting for writers.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


# Execution option marking connections that will write (SQLite: BEGIN IMMEDIATE)
WRITE_LOCK_OPTION = 'purchasing_write_lock'


def is_sqlite_url(database_url: str) -> bool:
    return database_url.startswith('sqlite')


def _install_sqlite_transaction_hooks(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, 'connect')
    def _sqlite_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
        # Let SQLAlchemy emit BEGIN itself instead of the driver's implicit one
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute(f'PRAGMA busy_timeout={settings.SQLITE_BUSY_TIMEOUT_MS};')
        cursor.execute('PRAGMA journal_mode=WAL;')
        cursor.execute('PRAGMA foreign_keys=ON;')
        cursor.close()

    @event.listens_for(engine.sync_engine, 'begin')
    def _sqlite_begin(conn: Connection) -> None:
        if conn.get_execution_options().get(WRITE_LOCK_OPTION):
            conn.exec_driver_sql('BEGIN IMMEDIATE')
        else:
            conn.exec_driver_sql('BEGIN')


class AsyncEngineManager:
    """
    Manages one SQLAlchemy async engine with event loop awareness.

    Ensures the engine is always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors (pytest-asyncio
    creates a loop per test).
    """

    def __init__(self, database_url: str) -> None:
        self._database_url = database_url
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._write_session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if self._engine is None or (current_loop is not None and self._loop is not current_loop):
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, recreating engine')
            self._engine = self._create_engine()
            self._session_maker = None
            self._write_session_maker = None
            self._loop = current_loop
        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_maker

    def get_write_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._write_session_maker is None:
            self._write_session_maker = async_sessionmaker(
                engine.execution_options(**{WRITE_LOCK_OPTION: True}),
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._write_session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        self._write_session_maker = None
        self._loop = None

    def _create_engine(self) -> AsyncEngine:
        if is_sqlite_url(self._database_url):
            engine = create_async_engine(self._database_url, echo=False)
            _install_sqlite_transaction_hooks(engine)
            return engine

        return create_async_engine(
            self._database_url,
            echo=False,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


class Database:
    """
    Database handle for dependency injection.

    Usage:
        database = Database()
        async with database.session() as session:
            ...
    """

    def __init__(self, *, database_url: str | None = None) -> None:
        self.database_url = database_url or settings.DATABASE_URL_ASYNC
        self._engine_manager = AsyncEngineManager(self.database_url)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @property
    def session_maker(self) -> async_sessionmaker[AsyncSession]:
        return self._engine_manager.get_session_maker()

    @property
    def write_session_maker(self) -> async_sessionmaker[AsyncSession]:
        """Sessions for units of work; on SQLite they take the write lock on BEGIN."""
        return self._engine_manager.get_write_session_maker()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Read session context manager; rolls back on exception"""
        async with self.session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create database tables if they don't exist"""
        # Register every model on Base.metadata
        import src.service.purchasing.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️  [DB] Tables ready')

    async def drop_tables(self) -> None:
        import src.service.purchasing.driven_adapter.model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
