"""
Validation Result.

Ordered, append-only error and warning messages collected by the checks
during one validate call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from loguru import logger

from ..models import DEFAULT_ESCALATION_MARKER, EscalationPolicy


@dataclass
class TechParamSummary:
    """What the technical parameter check memoized during one call."""

    rows: int = 0
    names_checked: Set[str] = field(default_factory=set)
    unit_validity: Dict[str, bool] = field(default_factory=dict)


@dataclass
class ValidationResult:
    """
    Result of validating one technical record.

    ``performed`` is False when a precondition stopped validation; the
    reason is in ``message`` and no errors or warnings are recorded.
    """

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    performed: bool = False
    message: Optional[str] = None
    tech_params: Optional[TechParamSummary] = None

    @property
    def valid(self) -> bool:
        """Validation ran and found no errors."""
        return self.performed and not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_pending_error(
        self,
        category: str,
        message: str,
        policy: EscalationPolicy,
        marker: str = DEFAULT_ESCALATION_MARKER,
        context: str = "",
    ) -> None:
        """
        Record a finding that is scheduled to become an error.

        Until the policy escalates the category it is a warning with the
        escalation marker appended.
        """
        if policy.is_error(category):
            self.errors.append(message)
            return

        self.warnings.append(message + marker)
        logger.warning(f"TEMP WARNING: {context}: {message}" if context else f"TEMP WARNING: {message}")

    def summary(self) -> str:
        """Generate a short summary of the result."""
        if not self.performed:
            return f"Validation NOT PERFORMED: {self.message or 'unknown reason'}"
        status = "PASSED" if self.valid else "FAILED"
        lines = [
            f"Validation {status}",
            f"  Errors: {len(self.errors)}",
            f"  Warnings: {len(self.warnings)}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        data: Dict[str, Any] = {
            "performed": self.performed,
            "valid": self.valid,
            "message": self.message,
            "total_errors": len(self.errors),
            "total_warnings": len(self.warnings),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }
        if self.tech_params is not None:
            data["tech_params"] = {
                "rows": self.tech_params.rows,
                "names_checked": sorted(self.tech_params.names_checked),
                "unit_validity": dict(sorted(self.tech_params.unit_validity.items())),
            }
        return data
