"""Exception classes raised by the entity service."""

from typing import Any, Dict, Optional


class EntityServiceError(Exception):
    """Base exception for the entity service."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(EntityServiceError):
    """Raised when the session factory is missing, invalid or reconfigured."""

    def __init__(self, message: str, unit_name: Optional[str] = None):
        super().__init__(message=message, details={"unit_name": unit_name})
        self.unit_name = unit_name


class EntityNotFoundError(EntityServiceError):
    """Exception for entities that do not exist."""

    def __init__(self, entity: str, identifier: Any):
        message = f"{entity} with identifier '{identifier}' not found"
        super().__init__(
            message=message,
            details={"entity": entity, "identifier": identifier},
        )


class TransactionError(EntityServiceError):
    """Exception for transactions that were rolled back."""

    def __init__(self, operation: str, message: str):
        super().__init__(
            message=f"Transaction for {operation} failed: {message}",
            details={"operation": operation},
        )
        self.operation = operation
