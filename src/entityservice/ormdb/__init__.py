"""Database module for SQLAlchemy ORM integration."""

from .database import (
    Base,
    SessionFactory,
    TransactionScope,
    TransactionState,
    check_database_health,
    configure,
    create_session_factory,
    create_tables,
    drop_tables,
    get_session_factory,
    is_configured,
    reset_configuration,
    reset_database,
    transaction_scope,
)

__all__ = [
    "Base",
    "SessionFactory",
    "TransactionScope",
    "TransactionState",
    "check_database_health",
    "configure",
    "create_session_factory",
    "create_tables",
    "drop_tables",
    "get_session_factory",
    "is_configured",
    "reset_configuration",
    "reset_database",
    "transaction_scope",
]
