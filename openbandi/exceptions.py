"""Exception hierarchy for OpenBandi.

Every error carries a ``context`` dict meant for structured logging. Subclasses
declare which keyword fields they accept in ``context_fields``; fields passed
as None are left out of the context.

Usage:
    from openbandi.exceptions import RecordNotFoundError

    try:
        store.get_transaction("tx-1")
    except RecordNotFoundError as e:
        logger.error("transaction_missing", error=str(e), context=e.context)
"""

from __future__ import annotations

from typing import Any, ClassVar


class OpenBandiError(Exception):
    """Base exception for all OpenBandi errors.

    Attributes:
        message: Human-readable error message
        context: Structured details for logs and error output
        original_error: Wrapped third-party exception, if any
    """

    context_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        original_error: Exception | None = None,
        **fields: Any,
    ) -> None:
        unexpected = sorted(set(fields) - set(self.context_fields))
        if unexpected:
            raise TypeError(f"{type(self).__name__} got unexpected fields: {', '.join(unexpected)}")

        super().__init__(message)
        self.message = message
        self.context = dict(context or {})
        for name in self.context_fields:
            value = fields.get(name)
            if value is not None and value != "":
                self.context[name] = self.format_field(name, value)
        self.original_error = original_error

    def format_field(self, name: str, value: Any) -> Any:
        return value

    def __str__(self) -> str:
        text = self.message
        if self.context:
            details = ", ".join(f"{key}={value}" for key, value in self.context.items())
            text += f" ({details})"
        if self.original_error is not None:
            text += f" [caused by: {type(self.original_error).__name__}]"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, context={self.context!r})"


# =============================================================================
# Input & configuration
# =============================================================================


class ValidationError(OpenBandiError):
    """Invalid input: a bad field value or a field that cannot be changed."""

    context_fields = ("field", "value")

    def format_field(self, name: str, value: Any) -> Any:
        # Values can be whole descriptions
        return str(value)[:100] if name == "value" else value


class ConfigurationError(OpenBandiError):
    """Settings are inconsistent or missing."""

    context_fields = ("setting", "expected")


# =============================================================================
# Ledger store
# =============================================================================


class StorageError(OpenBandiError):
    """The ledger store cannot be read or written."""


class RecordNotFoundError(StorageError):
    """A transaction or expense ID is not in the ledger."""

    context_fields = ("entity_type", "entity_id")

    def format_field(self, name: str, value: Any) -> Any:
        return str(value) if name == "entity_id" else value


# =============================================================================
# Reconciliation & import
# =============================================================================


class ReconciliationError(OpenBandiError):
    """A reconciliation cannot be applied, e.g. the transaction is already linked."""

    context_fields = ("transaction_id", "expense_id")


class BankImportError(OpenBandiError):
    """A bank statement, or one of its rows, cannot be imported."""

    context_fields = ("file_format", "line_number")


def wrap_exception(
    error: Exception,
    message: str,
    *,
    exception_class: type[OpenBandiError] = OpenBandiError,
    **context: Any,
) -> OpenBandiError:
    """Wrap a third-party exception, keeping it as ``original_error``.

    Example:
        try:
            db.commit()
        except SQLAlchemyError as e:
            raise wrap_exception(e, "Ledger database error", exception_class=StorageError,
                                 table="bank_transactions") from e
    """
    return exception_class(message, context=context, original_error=error)


__all__ = [
    "OpenBandiError",
    "ValidationError",
    "ConfigurationError",
    "StorageError",
    "RecordNotFoundError",
    "ReconciliationError",
    "BankImportError",
    "wrap_exception",
]
