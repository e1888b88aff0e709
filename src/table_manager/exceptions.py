"""Exceptions for table-manager."""

from typing import Any

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class TableManagerError(Exception):
    """
    Base exception for all table-manager errors.

    All exceptions raised by this package inherit from this class,
    allowing callers to catch all package-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Store Exceptions
# ---------------------------------------------------------------------------


class StoreError(TableManagerError):
    """
    Raised when a call against the table store fails.

    Listing, creating, describing and updating tables all surface their
    failures as this exception. Transient and permanent failures are not
    distinguished: a reconciliation pass is aborted either way and the next
    poll retries.

    Attributes:
        operation: Store operation that failed (e.g., "CreateTable")
        table_name: Table the operation targeted, if any
        cause: The underlying exception raised by the store client
    """

    def __init__(
        self,
        operation: str,
        message: str,
        *,
        table_name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.operation = operation
        self.table_name = table_name
        self.cause = cause
        super().__init__(self._format_message(message))

    def _format_message(self, message: str) -> str:
        parts = [f"{self.operation} failed: {message}"]
        if self.table_name:
            parts.append(f"[table={self.table_name}]")
        return " ".join(parts)


# ---------------------------------------------------------------------------
# Configuration Exceptions
# ---------------------------------------------------------------------------


class ConfigurationError(TableManagerError):
    """
    Raised when a configuration value is invalid.

    Raised at construction time, never during a reconciliation pass.

    Attributes:
        field: Name of the offending configuration field
        value: The rejected value
        reason: Human-readable explanation
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")
