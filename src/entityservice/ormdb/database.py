"""Persistence unit configuration and per-operation transaction management."""

import threading
from contextlib import suppress
from enum import Enum
from typing import Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config.logging import get_logger
from ..config.settings import get_settings
from ..exceptions import ConfigurationError
from ..utils.strings import is_null_or_whitespace

logger = get_logger(__name__)

# Base class for all ORM entities
Base = declarative_base()

# Process-wide session factory, set once by configure()
_factory: Optional["SessionFactory"] = None
_factory_lock = threading.Lock()


def _configure_sqlite_connection(dbapi_connection, connection_record):
    """Enable foreign keys and sane journaling on every new SQLite connection."""
    with dbapi_connection:
        dbapi_connection.execute("PRAGMA journal_mode=WAL")
        dbapi_connection.execute("PRAGMA foreign_keys=ON")
        dbapi_connection.execute("PRAGMA synchronous=NORMAL")
        dbapi_connection.execute("PRAGMA temp_store=MEMORY")


def _is_memory_database(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in database_url


class SessionFactory:
    """Creates sessions against the datastore of one persistence unit."""

    def __init__(self, unit_name: str, engine: Engine):
        self.unit_name = unit_name
        self.engine = engine
        self._sessionmaker = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,  # Keep entities readable after the session closes
        )

    def create_session(self) -> Session:
        return self._sessionmaker()

    def dispose(self) -> None:
        """Release every pooled connection held by the engine."""
        self.engine.dispose()
        logger.debug("Session factory disposed", unit=self.unit_name)

    def __repr__(self):
        return f"<SessionFactory(unit='{self.unit_name}', url='{self.engine.url.render_as_string(hide_password=True)}')>"


def create_engine_for_url(database_url: str) -> Engine:
    """Create a database engine for the given URL using application settings."""
    settings = get_settings()

    logger.info(
        "Creating database engine",
        url_type="sqlite" if database_url.startswith("sqlite") else "other",
        echo_sql=settings.database_echo_sql,
    )

    engine_kwargs = {
        "echo": settings.database_echo_sql,
        "pool_pre_ping": settings.database_pool_pre_ping,
        "pool_recycle": settings.database_pool_recycle,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": 30,
        }
        # An in-memory database only lives as long as its single connection
        if _is_memory_database(database_url):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(
            {
                "pool_size": settings.database_pool_size,
                "max_overflow": settings.database_max_overflow,
            }
        )

    engine = create_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _configure_sqlite_connection)

    return engine


def create_session_factory(unit_name: Optional[str]) -> SessionFactory:
    """
    Build a standalone session factory for a persistence unit.

    The factory is not registered process-wide; pass it to services that
    should not depend on ``configure()``.

    Raises:
        ConfigurationError: If the unit name is blank
    """
    if is_null_or_whitespace(unit_name):
        raise ConfigurationError(
            "Persistence unit name must not be blank", unit_name=unit_name
        )

    database_url = get_settings().get_database_url(unit_name)
    return SessionFactory(unit_name, create_engine_for_url(database_url))


def configure(unit_name: Optional[str]) -> SessionFactory:
    """
    Configure the process-wide session factory exactly once.

    Args:
        unit_name: Persistence unit resolved through ``Settings.get_database_url``

    Returns:
        SessionFactory: The newly configured factory

    Raises:
        ConfigurationError: If the name is blank or a factory is already configured
    """
    global _factory

    if is_null_or_whitespace(unit_name):
        raise ConfigurationError(
            "Persistence unit name must not be blank", unit_name=unit_name
        )

    with _factory_lock:
        if _factory is not None:
            raise ConfigurationError(
                f"Session factory is already configured for unit '{_factory.unit_name}'",
                unit_name=unit_name,
            )
        _factory = create_session_factory(unit_name)

    logger.info("Session factory configured", unit=unit_name)
    return _factory


def is_configured() -> bool:
    return _factory is not None


def get_session_factory() -> SessionFactory:
    """
    Get the process-wide session factory.

    Raises:
        ConfigurationError: If ``configure()`` has not been called
    """
    factory = _factory
    if factory is None:
        raise ConfigurationError(
            "Session factory is not configured; call configure() first"
        )
    return factory


def reset_configuration() -> None:
    """Dispose of the process-wide factory so that it can be configured again."""
    global _factory

    with _factory_lock:
        if _factory is not None:
            _factory.dispose()
            logger.info("Session factory reset", unit=_factory.unit_name)
        _factory = None


class TransactionState(str, Enum):
    """Lifecycle of a single transactional operation."""

    IDLE = "idle"
    SESSION_OPEN = "session_open"
    TX_ACTIVE = "tx_active"
    TX_COMMITTED = "tx_committed"
    TX_ROLLED_BACK = "tx_rolled_back"
    SESSION_CLOSED = "session_closed"


class TransactionScope:
    """
    One session and one transaction for the duration of a ``with`` block.

    Entering opens a session and begins a transaction. Leaving normally
    commits; leaving with an exception rolls back, but only if the
    transaction is still active. The session is always closed. Errors from
    rollback and close are suppressed so that the original error is the one
    that propagates.

    Attributes:
        state: The most recent lifecycle state
        outcome: ``TX_COMMITTED`` or ``TX_ROLLED_BACK`` once the block has exited
    """

    def __init__(self, factory: SessionFactory):
        self.factory = factory
        self.session: Optional[Session] = None
        self.state = TransactionState.IDLE
        self.outcome: Optional[TransactionState] = None

    def __enter__(self) -> Session:
        self.session = self.factory.create_session()
        self.state = TransactionState.SESSION_OPEN
        try:
            self.session.begin()
        except Exception:
            self._close()
            raise
        self.state = TransactionState.TX_ACTIVE
        return self.session

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                try:
                    self.session.commit()
                except Exception:
                    self._rollback()
                    raise
                self.state = self.outcome = TransactionState.TX_COMMITTED
            else:
                self._rollback()
        finally:
            self._close()
        return False

    def _rollback(self) -> None:
        transaction = self.session.get_transaction()
        if transaction is not None and transaction.is_active:
            with suppress(SQLAlchemyError):
                self.session.rollback()
        self.state = self.outcome = TransactionState.TX_ROLLED_BACK

    def _close(self) -> None:
        with suppress(SQLAlchemyError):
            self.session.close()
        self.state = TransactionState.SESSION_CLOSED


def transaction_scope(factory: Optional[SessionFactory] = None) -> TransactionScope:
    """Open a transaction scope on the given or the process-wide factory."""
    return TransactionScope(factory or get_session_factory())


def create_tables(factory: Optional[SessionFactory] = None) -> None:
    """Create tables for every entity registered on ``Base``."""
    factory = factory or get_session_factory()

    logger.info("Creating database tables", unit=factory.unit_name)
    Base.metadata.create_all(bind=factory.engine)
    logger.info("Database tables created successfully")


def drop_tables(factory: Optional[SessionFactory] = None) -> None:
    """Drop tables for every entity registered on ``Base``."""
    factory = factory or get_session_factory()

    logger.warning("Dropping all database tables", unit=factory.unit_name)
    Base.metadata.drop_all(bind=factory.engine)
    logger.warning("All database tables dropped")


def reset_database(factory: Optional[SessionFactory] = None) -> None:
    """Reset database by dropping and recreating all tables."""
    logger.warning("Resetting database - dropping and recreating all tables")

    factory = factory or get_session_factory()
    drop_tables(factory)
    create_tables(factory)

    logger.info("Database reset completed")


def check_database_health(factory: Optional[SessionFactory] = None) -> dict:
    """
    Check database connectivity and return health information.

    Returns:
        dict: Database health status and metrics
    """
    try:
        factory = factory or get_session_factory()

        with TransactionScope(factory) as session:
            health_check = session.execute(text("SELECT 1 as health_check")).scalar()

        pool = factory.engine.pool
        pool_info = {
            "pool_size": getattr(pool, "size", lambda: "N/A")(),
            "checked_in": getattr(pool, "checkedin", lambda: "N/A")(),
            "checked_out": getattr(pool, "checkedout", lambda: "N/A")(),
            "overflow": getattr(pool, "overflow", lambda: "N/A")(),
        }

        logger.info("Database health check successful", pool_info=pool_info)

        return {
            "status": "healthy",
            "unit": factory.unit_name,
            "connectivity": health_check == 1,
            "pool_info": pool_info,
            "database_url": factory.engine.url.render_as_string(hide_password=True),
        }

    except Exception as e:
        logger.error("Database health check failed", error=str(e), exc_info=True)
        return {
            "status": "unhealthy",
            "error": str(e),
            "connectivity": False,
        }
