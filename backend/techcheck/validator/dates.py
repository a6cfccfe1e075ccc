"""
Date Consistency Validation.

DATE_CREATION must be set, valid, not before the start of the Argo era
and not after the file's modification time. DATE_UPDATE must be set,
valid, not before DATE_CREATION and not after the file's modification
time. A one-day tolerance on the file time absorbs clock and timezone
skew.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from loguru import logger

from ..dates import format_argo_date, parse_argo_date
from ..records import DATE_CREATION, DATE_UPDATE, TechnicalRecord
from ..reference import ReferenceProvider
from .result import ValidationResult


FILE_TIME_TOLERANCE = timedelta(milliseconds=86_400_000)


class DateValidator:
    """Validates DATE_CREATION and DATE_UPDATE. Produces errors only."""

    def __init__(self, reference: ReferenceProvider):
        self.reference = reference

    def validate(self, record: TechnicalRecord, result: ValidationResult) -> None:
        logger.debug(".....validate dates.....")

        creation = record.read_string(DATE_CREATION)
        update = record.read_string(DATE_UPDATE)
        file_time = record.last_modified
        if file_time.tzinfo is None:
            file_time = file_time.replace(tzinfo=timezone.utc)

        logger.debug(f"earliest date: {format_argo_date(self.reference.earliest_date)}")
        logger.debug(f"file time:     {format_argo_date(file_time)}")
        logger.debug(f"{DATE_CREATION}: {creation}")
        logger.debug(f"{DATE_UPDATE}:   {update}")

        date_creation = self._check_creation(creation, file_time, result)
        self._check_update(update, creation, date_creation, file_time, result)

    def _check_creation(
        self,
        text: str,
        file_time: datetime,
        result: ValidationResult,
    ) -> Optional[datetime]:
        """Returns the creation date if it parsed, else None."""
        if not text.strip():
            result.add_error(f"{DATE_CREATION}: Not set")
            return None

        date = parse_argo_date(text)
        if date is None:
            result.add_error(f"{DATE_CREATION}: '{text}': Invalid date")
            return None

        earliest = self.reference.earliest_date
        if date < earliest:
            result.add_error(
                f"{DATE_CREATION}: '{text}': Before allowed date "
                f"('{format_argo_date(earliest)}')"
            )
        elif date - file_time > FILE_TIME_TOLERANCE:
            result.add_error(
                f"{DATE_CREATION}: '{text}': After system file time "
                f"('{format_argo_date(file_time)}')"
            )
        return date

    def _check_update(
        self,
        text: str,
        creation_text: str,
        creation: Optional[datetime],
        file_time: datetime,
        result: ValidationResult,
    ) -> None:
        if not text.strip():
            result.add_error(f"{DATE_UPDATE}: Not set")
            return

        date = parse_argo_date(text)
        if date is None:
            result.add_error(f"{DATE_UPDATE}: '{text}': Invalid date")
            return

        if creation is not None and date < creation:
            result.add_error(
                f"{DATE_UPDATE}: '{text}': Before {DATE_CREATION} ('{creation_text}')"
            )

        if date - file_time > FILE_TIME_TOLERANCE:
            result.add_error(
                f"{DATE_UPDATE}: '{text}': After system file time "
                f"('{format_argo_date(file_time)}')"
            )
