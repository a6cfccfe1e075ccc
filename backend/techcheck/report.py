"""
Validation Report Generator.

Generates machine-consumable reports of a technical-file validation for
data-distribution pipelines.
"""

from __future__ import annotations

import hashlib
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from . import __version__
from .validator import ValidationResult


REPORT_VERSION = "techcheck-report/1.0"

STATUS_ACCEPTED = "FILE-ACCEPTED"
STATUS_REJECTED = "FILE-REJECTED"
STATUS_NOT_PERFORMED = "CHECK-NOT-PERFORMED"


@dataclass
class AuditMetadata:
    """Metadata for audit trail."""

    report_generated_at: str
    tool_version: str
    duration_ms: int
    file_checksum: Optional[str] = None

    @classmethod
    def generate(
        cls,
        duration_ms: int,
        file_path: Optional[Path] = None,
    ) -> "AuditMetadata":
        """Generate audit metadata."""
        metadata = cls(
            report_generated_at=datetime.now(timezone.utc).isoformat(),
            tool_version=__version__,
            duration_ms=duration_ms,
        )
        if file_path and file_path.exists():
            metadata.file_checksum = _compute_file_checksum(file_path)
        return metadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "report_generated_at": self.report_generated_at,
            "tool_version": self.tool_version,
            "duration_ms": self.duration_ms,
        }
        if self.file_checksum:
            result["file_checksum"] = self.file_checksum
        return result


@dataclass
class ValidationReport:
    """Full validation report for one file."""

    report_version: str
    status: str
    file: Dict[str, str]
    validation: Dict[str, Any]
    audit_metadata: AuditMetadata

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "report_version": self.report_version,
            "status": self.status,
            "file": self.file,
            "validation": self.validation,
            "audit_metadata": self.audit_metadata.to_dict(),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_markdown(self) -> str:
        """Convert to Markdown format report."""
        lines = []
        validation = self.validation

        lines.append(f"# Validation Report: {self.file.get('name', 'Unknown')}")
        lines.append("")
        lines.append(f"**Status:** {self.status}")
        if self.file.get("dac"):
            lines.append(f"**DAC:** {self.file['dac']}")
        lines.append(f"**Errors:** {validation.get('total_errors', 0)}")
        lines.append(f"**Warnings:** {validation.get('total_warnings', 0)}")
        lines.append("")

        if not validation.get("performed"):
            lines.append("## Not Performed")
            lines.append("")
            lines.append("```")
            lines.append(validation.get("message") or "Unknown reason")
            lines.append("```")
            lines.append("")

        errors = validation.get("errors", [])
        if errors:
            lines.append("## Errors")
            lines.append("")
            for message in errors:
                lines.append(f"- {message}")
            lines.append("")

        warnings = validation.get("warnings", [])
        if warnings:
            lines.append("## Warnings")
            lines.append("")
            for message in warnings:
                lines.append(f"- {message.strip()}")
            lines.append("")

        tech = validation.get("tech_params")
        if tech:
            units = tech.get("unit_validity", {})
            lines.append("## Technical Parameters")
            lines.append("")
            lines.append(f"- **Rows:** {tech.get('rows', 0)}")
            lines.append(f"- **Distinct Names:** {len(tech.get('names_checked', []))}")
            lines.append(f"- **Distinct Units:** {len(units)}")
            invalid = [unit for unit, ok in units.items() if not ok]
            if invalid:
                lines.append(f"- **Invalid Units:** {', '.join(invalid)}")
            lines.append("")

        lines.append("## Audit Metadata")
        lines.append("")
        audit = self.audit_metadata.to_dict()
        lines.append(f"- **Generated At:** {audit.get('report_generated_at', '')}")
        lines.append(f"- **Tool Version:** {audit.get('tool_version', '')}")
        lines.append(f"- **Duration:** {audit.get('duration_ms', 0)}ms")
        if audit.get("file_checksum"):
            lines.append(f"- **File Checksum:** {audit['file_checksum']}")
        lines.append("")

        return "\n".join(lines)

    def save(self, output_path: Path, format: str = "json") -> None:
        """
        Save report to file.

        Args:
            output_path: Path to save the report.
            format: Output format, either 'json' or 'markdown'.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if format == "markdown":
            output_path.write_text(self.to_markdown(), encoding="utf-8")
        else:
            output_path.write_text(self.to_json(), encoding="utf-8")


def report_status(result: ValidationResult) -> str:
    """Map a validation result onto the distribution decision."""
    if not result.performed:
        return STATUS_NOT_PERFORMED
    if result.errors:
        return STATUS_REJECTED
    return STATUS_ACCEPTED


def generate_report(
    result: ValidationResult,
    file_path: Path,
    duration_ms: int,
    dac_name: str = "",
) -> ValidationReport:
    """
    Generate a validation report.

    Args:
        result: Result from TechFileValidator.
        file_path: The validated file.
        duration_ms: Validation duration in milliseconds.
        dac_name: Submitting DAC, if one was given.

    Returns:
        ValidationReport ready for serialization.
    """
    file_info = {
        "name": file_path.name,
        "path": str(file_path),
    }
    if dac_name.strip():
        file_info["dac"] = dac_name.strip()

    return ValidationReport(
        report_version=REPORT_VERSION,
        status=report_status(result),
        file=file_info,
        validation=result.to_dict(),
        audit_metadata=AuditMetadata.generate(duration_ms=duration_ms, file_path=file_path),
    )


def _compute_file_checksum(path: Path) -> str:
    """Compute MD5 checksum of a file."""
    hasher = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class ReportTimer:
    """Context manager for timing validation."""

    def __init__(self):
        self.start_time: float = 0
        self.duration_ms: int = 0

    def __enter__(self) -> "ReportTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.duration_ms = int((time.perf_counter() - self.start_time) * 1000)
