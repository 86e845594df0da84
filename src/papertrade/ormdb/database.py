"""Ledger store: engine, session factory and unit-of-work management."""

import threading
from contextlib import contextmanager, nullcontext
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config.logging import get_logger
from ..config.settings import Settings, get_settings

logger = get_logger(__name__)

# Base class for all ORM models
Base = declarative_base()

# Execution option read by the SQLite begin hook
SQLITE_BEGIN_OPTION = "sqlite_begin"

# Isolation for read-only snapshots on server databases
SNAPSHOT_ISOLATION_LEVEL = "REPEATABLE READ"


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """Configure a new SQLite connection for WAL concurrency."""
    # pysqlite must not emit its own BEGIN; _begin_sqlite_transaction does it
    dbapi_connection.isolation_level = None

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA temp_store=MEMORY")
    cursor.close()


def _begin_sqlite_transaction(conn):
    """Start the transaction, taking the write lock up front for writers."""
    mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
    conn.exec_driver_sql(f"BEGIN {mode}")


def _is_memory_database(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in database_url


def create_ledger_engine(
    database_url: str,
    echo: bool = False,
    pool_pre_ping: bool = True,
    pool_recycle: int = 3600,
    busy_timeout: int = 30,
) -> Engine:
    """Create a database engine configured for ledger workloads."""
    is_sqlite = database_url.startswith("sqlite")

    logger.info(
        "Creating database engine",
        url_type="sqlite" if is_sqlite else "other",
        echo_sql=echo,
    )

    engine_kwargs: Dict[str, Any] = {
        "echo": echo,
        "pool_pre_ping": pool_pre_ping,
        "pool_recycle": pool_recycle,
    }

    if is_sqlite:
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": busy_timeout,
        }
        if _is_memory_database(database_url):
            # One shared connection, otherwise every checkout sees an empty db
            engine_kwargs["poolclass"] = StaticPool
    else:
        # PostgreSQL/MySQL configuration
        engine_kwargs.update(
            {
                "pool_size": 5,
                "max_overflow": 10,
            }
        )

    engine = create_engine(database_url, **engine_kwargs)

    if is_sqlite:
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin_sqlite_transaction)

    return engine


class LedgerStore:
    """
    Durable store for accounts, holdings and transactions.

    Each instance owns its engine and session factory. Callers open a
    short-lived unit of work per operation; no session outlives it.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            autoflush=False,
            bind=engine,
            expire_on_commit=False,  # Keep objects accessible after commit
        )
        self.logger = logger.bind(component="ledger_store")
        # A StaticPool hands every caller the same connection, so callers take turns
        self._shared_connection_lock = (
            threading.RLock() if isinstance(engine.pool, StaticPool) else None
        )

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs: Any) -> "LedgerStore":
        """Build a store for the given database URL."""
        return cls(create_ledger_engine(database_url, **engine_kwargs))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LedgerStore":
        """Build a store from application settings."""
        settings = settings or get_settings()
        return cls.from_url(
            settings.get_database_url(),
            echo=settings.database_echo_sql,
            pool_pre_ping=settings.database_pool_pre_ping,
            pool_recycle=settings.database_pool_recycle,
            busy_timeout=settings.database_busy_timeout,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.engine.dialect.name == "sqlite"

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """
        Open a write transaction.

        Commits when the block exits normally and rolls back on any
        exception, so the block's mutations persist all together or not at
        all. On SQLite the write lock is taken at BEGIN, which serialises
        concurrent writers instead of letting them race to upgrade.

        Yields:
            Session: SQLAlchemy session bound to the open transaction
        """
        with self._shared_connection_lock or nullcontext():
            session = self.session_factory()
            try:
                session.connection(execution_options={SQLITE_BEGIN_OPTION: "IMMEDIATE"})
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    @contextmanager
    def snapshot(self) -> Iterator[Session]:
        """
        Open a read-only transaction.

        Everything read inside the block comes from one consistent view of
        the store: a WAL read transaction on SQLite, REPEATABLE READ on
        server databases. Nothing is committed; closing the session releases
        the connection and ends the transaction, leaving loaded objects
        readable.
        """
        if self.is_sqlite:
            options = {SQLITE_BEGIN_OPTION: "DEFERRED"}
        else:
            options = {"isolation_level": SNAPSHOT_ISOLATION_LEVEL}

        with self._shared_connection_lock or nullcontext():
            session = self.session_factory()
            try:
                session.connection(execution_options=options)
                yield session
            finally:
                session.close()

    def create_tables(self) -> None:
        """Create all ledger tables."""
        # Models must be registered on Base.metadata first
        from . import models  # noqa: F401

        self.logger.info("Creating database tables")
        Base.metadata.create_all(bind=self.engine)
        self.logger.info("Database tables created successfully")

    def check_health(self) -> dict:
        """
        Check database connectivity and return health information.

        Returns:
            dict: Database health status and metrics
        """
        try:
            with self.snapshot() as session:
                health_check = session.execute(text("SELECT 1 as health_check")).scalar()

            pool = self.engine.pool
            pool_info = {
                "pool_class": type(pool).__name__,
                "checked_out": getattr(pool, "checkedout", lambda: "N/A")(),
            }

            return {
                "status": "healthy",
                "connectivity": health_check == 1,
                "dialect": self.engine.dialect.name,
                "pool_info": pool_info,
            }
        except Exception as e:
            self.logger.error("Database health check failed", error=str(e), exc_info=True)
            return {
                "status": "unhealthy",
                "error": str(e),
                "connectivity": False,
            }

    def dispose(self) -> None:
        """Release all pooled connections."""
        self.engine.dispose()
