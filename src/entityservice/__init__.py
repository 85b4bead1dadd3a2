"""
Entity service - transactional create/read/update/delete for SQLAlchemy entities.

Each operation opens its own session, runs one persistence call inside a
transaction, commits or rolls back, and always releases the session.
"""

from .exceptions import (
    ConfigurationError,
    EntityNotFoundError,
    EntityServiceError,
    TransactionError,
)
from .ormdb import Base, SessionFactory, configure, create_session_factory
from .service import EntityService, ErrorKind, OperationResult

__version__ = "0.1.0"

__all__ = [
    "Base",
    "ConfigurationError",
    "EntityNotFoundError",
    "EntityService",
    "EntityServiceError",
    "ErrorKind",
    "OperationResult",
    "SessionFactory",
    "TransactionError",
    "configure",
    "create_session_factory",
]
