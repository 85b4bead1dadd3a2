"""Generic create/read/update/delete service for any mapped entity."""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import make_transient

from ..config.logging import LoggerMixin
from ..ormdb.database import SessionFactory, TransactionScope, get_session_factory
from .result import OperationResult

T = TypeVar("T")
K = TypeVar("K")


class EntityService(LoggerMixin, Generic[T, K]):
    """
    Basic CRUD operations for one entity type.

    Every operation runs in its own session and transaction: the session is
    opened on entry, the transaction commits when the single persistence call
    succeeds and rolls back when it fails, and the session is always closed.
    Provider errors never escape; they come back as a failed
    ``OperationResult`` carrying the error kind and message.

    Args:
        entity_type: The mapped class this service manages
        session_factory: Factory to open sessions from. Defaults to the
            process-wide factory set up by ``configure()``, looked up on
            every call.

    Raises:
        ConfigurationError: From any operation when no factory was given and
            ``configure()`` has not been called
    """

    def __init__(
        self,
        entity_type: Type[T],
        session_factory: Optional[SessionFactory] = None,
    ):
        self.entity_type = entity_type
        self._session_factory = session_factory

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @property
    def session_factory(self) -> SessionFactory:
        return self._session_factory or get_session_factory()

    def get_by_id(self, id: K) -> OperationResult[T]:
        """Look up the entity with the given primary key."""
        context = self._context("get_by_id", id)
        try:
            with self._transaction() as session:
                entity = session.get(self.entity_type, id)
        except SQLAlchemyError as e:
            return self._failure(e, context)

        if entity is None:
            self.log_with_context(**context).debug("Entity not found")
            return OperationResult.not_found(**context)

        return OperationResult.success(entity, **context)

    def get_all(self) -> OperationResult[List[T]]:
        """Select every stored instance of the entity; the value is always a list."""
        context = self._context("get_all")
        try:
            with self._transaction() as session:
                entities = session.query(self.entity_type).all()
        except SQLAlchemyError as e:
            return self._failure(e, context, value=[])

        return OperationResult.success(list(entities or []), **context)

    def create(self, entity: T) -> OperationResult[T]:
        """
        Insert the entity.

        If a row with the same primary key exists, nothing is inserted and
        the given entity is returned unchanged as a success.
        """
        context = self._context("create")
        try:
            identity = context["identifier"] = self._identity_of(entity)
            with self._transaction() as session:
                if (
                    identity is not None
                    and session.get(self.entity_type, identity) is not None
                ):
                    self.log_with_context(**context).debug(
                        "Entity already exists, skipping insert"
                    )
                    return OperationResult.success(entity, **context)

                # Adding a detached instance re-attaches it without an INSERT
                if inspect(entity).detached:
                    make_transient(entity)
                session.add(entity)
        except SQLAlchemyError as e:
            return self._failure(e, context)

        context["identifier"] = self._identity_of(entity)
        self.log_with_context(**context).debug("Entity created")
        return OperationResult.success(entity, **context)

    def update(self, entity: T) -> OperationResult[T]:
        """
        Merge the entity's state into the stored record.

        Merging an entity whose key is not stored yet inserts it.
        """
        context = self._context("update")
        try:
            context["identifier"] = self._identity_of(entity)
            with self._transaction() as session:
                merged = session.merge(entity)
        except SQLAlchemyError as e:
            return self._failure(e, context)

        self.log_with_context(**context).debug("Entity updated")
        return OperationResult.success(merged, **context)

    def delete(self, id: K) -> OperationResult[bool]:
        """Look up and remove the entity with the given key in one transaction."""
        context = self._context("delete", id)
        try:
            with self._transaction() as session:
                entity = session.get(self.entity_type, id)
                if entity is None:
                    self.log_with_context(**context).debug("Nothing to delete")
                    return OperationResult.not_found(value=False, **context)

                session.delete(entity)
        except SQLAlchemyError as e:
            return self._failure(e, context, value=False)

        self.log_with_context(**context).debug("Entity deleted")
        return OperationResult.success(True, **context)

    def _transaction(self) -> TransactionScope:
        return TransactionScope(self.session_factory)

    def _identity_of(self, entity: T) -> Any:
        """Primary key of an instance, or ``None`` while any part is unset."""
        values = inspect(self.entity_type).primary_key_from_instance(entity)
        if any(value is None for value in values):
            return None
        return values[0] if len(values) == 1 else tuple(values)

    def _context(self, operation: str, identifier: Any = None) -> Dict[str, Any]:
        return {
            "operation": operation,
            "entity": self.entity_name,
            "identifier": identifier,
        }

    def _failure(
        self, error: SQLAlchemyError, context: Dict[str, Any], value: Any = None
    ) -> OperationResult:
        self.log_with_context(**context).warning(
            "Transaction rolled back",
            error_type=type(error).__name__,
            error=str(error),
        )
        return OperationResult.failure(str(error), value=value, **context)
