import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from loguru import logger

from ..config import Settings, get_settings
from ..models import Base

class DatabaseManager:

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._initialized = False

    @property
    def is_sqlite(self) -> bool:

        return self.backend == "sqlite"

    @property
    def backend(self) -> str:

        return make_url(self.settings.database_url).get_backend_name()

    async def initialize(self) -> None:

        if self._initialized:
            return

        engine = self._create_engine()
        try:
            await self._wait_for_database(engine)

            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            await engine.dispose()
            logger.error(f"Could not prepare the {self.backend} store: {e}")
            raise

        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=True
        )
        self._initialized = True
        logger.info(f"Store ready ({self.backend}), tables created")

    def _create_engine(self) -> AsyncEngine:

        if not self.is_sqlite:
            return create_async_engine(
                self.settings.database_url,
                echo=self.settings.db_echo,
                pool_size=10,
                max_overflow=20,
                pool_pre_ping=True,
                pool_recycle=3600,
            )

        database = make_url(self.settings.database_url).database
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        engine = create_async_engine(
            self.settings.database_url,
            echo=self.settings.db_echo,
            connect_args={"timeout": self.settings.db_busy_timeout},
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            # The driver would otherwise defer BEGIN until the first write,
            # leaving earlier reads outside the transaction.
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_sqlite_transaction(conn):
            # Deferred: the snapshot is taken at the first read. A write from a
            # stale snapshot fails with "database is locked" (StoreBusyError).
            conn.exec_driver_sql("BEGIN")

        return engine

    async def _wait_for_database(self, engine: AsyncEngine) -> None:

        attempts = max(1, self.settings.db_connect_retries)
        attempt = 1
        while True:
            try:
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                break
            except Exception as e:
                if attempt >= attempts:
                    logger.error(f"Store unreachable after {attempts} attempts: {e}")
                    raise
                logger.warning(f"Store not reachable yet ({attempt}/{attempts}), retrying: {e}")
                attempt += 1
                await asyncio.sleep(self.settings.db_retry_delay)

        logger.debug(f"Connected to the {self.backend} store on attempt {attempt}")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:

        if not self._initialized:
            await self.initialize()

        if self.session_factory is None:
            raise RuntimeError("Database session factory not initialized")

        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:

        if self.engine is None:
            return

        await self.engine.dispose()
        self.engine = None
        self.session_factory = None
        self._initialized = False
        logger.info(f"Closed the {self.backend} store")

    @property
    def is_initialized(self) -> bool:

        return self._initialized
