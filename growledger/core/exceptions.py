"""
Domain exceptions for the GrowLedger application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class GrowLedgerError(Exception):
    """Base exception for all GrowLedger errors."""

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
        }


# Storage Exceptions
class StorageError(GrowLedgerError):
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


class TransactionConflictError(StorageError):
    """A document changed underneath a transaction; the attempt must be retried."""

    def __init__(self, operation: str, reason: str, attempts: int | None = None):
        super().__init__(
            f"Transaction conflict during {operation}: {reason}",
            code="TRANSACTION_CONFLICT",
            details={"operation": operation, "reason": reason, "attempts": attempts},
        )


class SupplyNotFoundError(StorageError):
    """Supply not found in storage."""

    def __init__(self, supply_id: str):
        super().__init__(
            f"Supply not found: {supply_id}",
            code="SUPPLY_NOT_FOUND",
            details={"supply_id": supply_id},
        )


class RecipeNotFoundError(StorageError):
    """Recipe not found in storage."""

    def __init__(self, recipe_id: str):
        super().__init__(
            f"Recipe not found: {recipe_id}",
            code="RECIPE_NOT_FOUND",
            details={"recipe_id": recipe_id},
        )


class RunNotFoundError(StorageError):
    """Cultivation run not found in storage."""

    def __init__(self, run_id: str):
        super().__init__(
            f"Run not found: {run_id}",
            code="RUN_NOT_FOUND",
            details={"run_id": run_id},
        )


# Validation Exceptions
class ValidationError(GrowLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidAmountError(ValidationError):
    """Amount is negative, zero where positive is required, or not finite."""

    def __init__(self, field: str, value: Any, requirement: str = "must be > 0"):
        super().__init__(field=field, message=f"amount {requirement}", value=value)
        self.code = "INVALID_AMOUNT"


class ReturnExceedsPendingError(ValidationError):
    """Operator tried to return more units than are pending cleaning."""

    def __init__(self, supply_id: str, returned: int, pending: int):
        super().__init__(
            field="returned_qty",
            message=f"cannot return {returned} units, only {pending} pending",
            value=returned,
        )
        self.code = "RETURN_EXCEEDS_PENDING"
        self.details.update({"supply_id": supply_id, "pending": pending})


class IncompatibleUnitsError(ValidationError):
    """Units belong to different groups and strict conversion was requested."""

    def __init__(self, from_unit: str, to_unit: str):
        super().__init__(
            field="unit",
            message=f"cannot convert '{from_unit}' to '{to_unit}'",
            value=from_unit,
        )
        self.code = "INCOMPATIBLE_UNITS"
        self.details.update({"from_unit": from_unit, "to_unit": to_unit})


class ConfigurationError(GrowLedgerError):
    """Configuration error."""

    pass
