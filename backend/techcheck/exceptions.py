"""
Exception hierarchy for techcheck.

Validation findings are never raised; they are recorded in a
ValidationResult. Exceptions are reserved for operational failures:
a record that cannot be read, or a settings file that cannot be loaded.

Hierarchy:
    TechCheckError (base)
    ├── FieldReadError
    └── ConfigurationError
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class TechCheckError(Exception):
    """Base exception for all techcheck failures."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.details = details or {}
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "cause": str(self.cause) if self.cause else None,
        }


class FieldReadError(TechCheckError):
    """A required variable, dimension or file could not be read."""

    def __init__(
        self,
        field: str,
        path: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        self.field = field
        self.path = path
        where = f" in '{path}'" if path else ""
        message = f"Unable to read '{field}'{where}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(
            message,
            details={"field": field, "path": path},
            cause=cause,
        )


class ConfigurationError(TechCheckError):
    """Settings could not be loaded or failed validation."""
