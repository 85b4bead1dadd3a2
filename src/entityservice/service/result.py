"""Result type returned by every entity service operation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from ..exceptions import EntityNotFoundError, TransactionError

V = TypeVar("V")


class ErrorKind(str, Enum):
    """Why an operation did not produce a value."""

    NOT_FOUND = "not_found"
    TRANSACTION_FAILURE = "transaction_failure"


@dataclass(frozen=True)
class OperationResult(Generic[V]):
    """
    Outcome of a single transactional operation.

    A result is truthy only when the operation succeeded, so call sites that
    only care about success can keep writing ``if service.delete(key):``.
    Failed results still carry a usable ``value`` where one makes sense
    (an empty list for ``get_all``, ``False`` for ``delete``).
    """

    value: Optional[V] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None
    operation: Optional[str] = None
    entity: Optional[str] = None
    identifier: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_not_found(self) -> bool:
        return self.error is ErrorKind.NOT_FOUND

    @property
    def is_failure(self) -> bool:
        return self.error is ErrorKind.TRANSACTION_FAILURE

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> V:
        """Return the value or raise the exception matching the error kind."""
        if self.error is ErrorKind.NOT_FOUND:
            raise EntityNotFoundError(self.entity or "Entity", self.identifier)
        if self.error is ErrorKind.TRANSACTION_FAILURE:
            raise TransactionError(self.operation or "operation", self.detail or "")
        return self.value

    @classmethod
    def success(cls, value: V, **context: Any) -> "OperationResult[V]":
        return cls(value=value, **context)

    @classmethod
    def not_found(cls, value: Optional[V] = None, **context: Any) -> "OperationResult[V]":
        return cls(value=value, error=ErrorKind.NOT_FOUND, **context)

    @classmethod
    def failure(
        cls, detail: str, value: Optional[V] = None, **context: Any
    ) -> "OperationResult[V]":
        return cls(
            value=value, error=ErrorKind.TRANSACTION_FAILURE, detail=detail, **context
        )
