"""
Domain exceptions for the fulfillment engine.

Every error carries a human message, a machine code and a details dict.
Line-level errors put the offending ``line`` index and ``product_id`` in
``details`` so callers can point at the row that failed.
"""

from typing import Any


class EngineError(Exception):
    """Base exception for all fulfillment engine errors."""

    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


# Input Exceptions
class ValidationError(EngineError):
    """Input validation failed."""

    def __init__(
        self,
        field: str,
        message: str,
        value: Any = None,
        line: int | None = None,
    ):
        details: dict[str, Any] = {
            "field": field,
            "message": message,
            "value": str(value)[:100] if value is not None else None,
        }
        if line is not None:
            details["line"] = line
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details=details,
        )


# Lookup Exceptions
class NotFoundError(EngineError):
    """A referenced record does not exist."""

    entity = "record"

    def __init__(self, record_id: str, line: int | None = None):
        details: dict[str, Any] = {f"{self.entity}_id": record_id}
        if line is not None:
            details["line"] = line
        super().__init__(
            f"{self.entity.replace('_', ' ').capitalize()} not found: {record_id}",
            code=f"{self.entity.upper()}_NOT_FOUND",
            details=details,
        )
        self.record_id = record_id


class ProductNotFoundError(NotFoundError):
    entity = "product"


class ClientNotFoundError(NotFoundError):
    entity = "client"


class SupplierNotFoundError(NotFoundError):
    entity = "supplier"


class IssuanceNotFoundError(NotFoundError):
    entity = "issuance"


class ReturnNotFoundError(NotFoundError):
    entity = "return"


class PurchaseOrderNotFoundError(NotFoundError):
    entity = "purchase_order"


class JobOrderNotFoundError(NotFoundError):
    entity = "job_order"


class JobOrderItemNotFoundError(NotFoundError):
    entity = "job_order_item"


class InstallationNotFoundError(NotFoundError):
    entity = "installation"


class ToolNotFoundError(NotFoundError):
    entity = "tool"


class ReorderNotFoundError(NotFoundError):
    entity = "reorder"


class SupplierReturnNotFoundError(NotFoundError):
    entity = "supplier_return"


class DisposalSourceNotFoundError(NotFoundError):
    entity = "disposal_source"


# Stock Exceptions
class InsufficientStockError(EngineError):
    """A decrement would drive a product's stock below zero."""

    def __init__(
        self,
        product_id: str,
        requested: int,
        available: int,
        line: int | None = None,
    ):
        details: dict[str, Any] = {
            "product_id": product_id,
            "requested": requested,
            "available": available,
        }
        if line is not None:
            details["line"] = line
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details=details,
        )


class InvalidQuantityError(EngineError):
    """An inspection split exceeds the quantity it accounts for."""

    def __init__(
        self,
        product_id: str,
        message: str,
        line: int | None = None,
        **extra: Any,
    ):
        details: dict[str, Any] = {"product_id": product_id, **extra}
        if line is not None:
            details["line"] = line
        super().__init__(
            f"Invalid quantity for product {product_id}: {message}",
            code="INVALID_QUANTITY",
            details=details,
        )


# Lifecycle Exceptions
class InvalidStateError(EngineError):
    """Operation not allowed in the record's current status."""

    def __init__(
        self,
        entity: str,
        entity_id: str,
        current: str,
        expected: list[str] | None = None,
        message: str | None = None,
    ):
        text = message or (
            f"{entity} {entity_id} is {current}"
            + (f", expected one of: {', '.join(expected)}" if expected else "")
        )
        super().__init__(
            text,
            code="INVALID_STATE",
            details={
                "entity": entity,
                "entity_id": entity_id,
                "current": current,
                "expected": expected or [],
            },
        )


class InvalidTransitionError(InvalidStateError):
    """Requested status is not a legal successor of the current one."""

    def __init__(self, entity: str, entity_id: str, current: str, requested: str):
        super().__init__(
            entity,
            entity_id,
            current,
            message=f"{entity} {entity_id} cannot move from {current} to {requested}",
        )
        self.code = "INVALID_TRANSITION"
        self.details["requested"] = requested


class ConflictingStateError(EngineError):
    """A downstream record depends on the one being changed."""

    def __init__(self, entity: str, entity_id: str, reason: str, **extra: Any):
        super().__init__(
            f"Cannot modify {entity} {entity_id}: {reason}",
            code="CONFLICTING_STATE",
            details={"entity": entity, "entity_id": entity_id, **extra},
        )


class DuplicateError(EngineError):
    """A unique key is already taken."""

    def __init__(self, entity: str, field: str, value: str):
        super().__init__(
            f"{entity} with {field} '{value}' already exists",
            code="DUPLICATE",
            details={"entity": entity, "field": field, "value": value},
        )


class ContentionError(EngineError):
    """Transaction kept conflicting with concurrent writers."""

    retryable = True

    def __init__(self, operation: str, attempts: int):
        super().__init__(
            f"Operation '{operation}' abandoned after {attempts} conflicting attempts",
            code="CONTENTION",
            details={"operation": operation, "attempts": attempts},
        )


# Storage Exceptions
class StorageError(EngineError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class WriteConflictError(StorageError):
    """A concurrent writer got there first; the transaction may be retried."""

    def __init__(self, entity: str, entity_id: str | None = None, reason: str = ""):
        super().__init__(
            f"Write conflict on {entity}"
            + (f" {entity_id}" if entity_id else "")
            + (f": {reason}" if reason else ""),
            code="WRITE_CONFLICT",
            details={"entity": entity, "entity_id": entity_id, "reason": reason},
        )


class ConfigurationError(EngineError):
    """Configuration error."""

    pass
