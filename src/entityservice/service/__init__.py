"""Generic entity service and its result type."""

from .entity_service import EntityService
from .result import ErrorKind, OperationResult

__all__ = ["EntityService", "ErrorKind", "OperationResult"]
