"""
Metadata Identity Validation.

Checks the identifiers that say which float and which centre a file
belongs to:
- PLATFORM_NUMBER: WMO platform number shape
- DATA_CENTRE: originating-centre code allowed for the submitting DAC
"""

from __future__ import annotations

import re
from typing import Optional

from loguru import logger

from ..records import DATA_CENTRE, PLATFORM_NUMBER, TechnicalRecord
from ..reference import ReferenceProvider
from .result import ValidationResult


# 5-digit WMO numbers, or 7-digit numbers with 9 as the second digit
PLATFORM_NUMBER_PATTERN = re.compile(r"[1-9][0-9]{4}|[1-9]9[0-9]{5}")


class MetadataValidator:
    """Validates PLATFORM_NUMBER and DATA_CENTRE. Produces errors only."""

    def __init__(self, reference: ReferenceProvider):
        self.reference = reference

    def validate(
        self,
        record: TechnicalRecord,
        result: ValidationResult,
        dac: Optional[str] = None,
    ) -> None:
        """
        Check the record's identity fields.

        Args:
            record: The record to read.
            result: Receives the findings.
            dac: Canonical DAC name; None checks DATA_CENTRE against all DACs.
        """
        logger.debug(".....validate metadata.....")

        platform = record.read_string(PLATFORM_NUMBER)
        centre = record.read_string(DATA_CENTRE)

        logger.debug(f"PLATFORM_NUMBER: '{platform}'")
        self._check_platform_number(platform.strip(), result)

        logger.debug(f"DATA_CENTRE: '{centre}'")
        self._check_data_centre(centre.strip(), dac, result)

    def _check_platform_number(self, value: str, result: ValidationResult) -> None:
        if not PLATFORM_NUMBER_PATTERN.fullmatch(value):
            result.add_error(f"{PLATFORM_NUMBER}: '{value}': Invalid")

    def _check_data_centre(
        self,
        code: str,
        dac: Optional[str],
        result: ValidationResult,
    ) -> None:
        if dac is not None:
            if code not in self.reference.center_codes(dac):
                result.add_error(f"{DATA_CENTRE}: '{code}': Invalid for DAC {dac}")
        elif code not in self.reference.all_center_codes:
            result.add_error(f"{DATA_CENTRE}: '{code}': Invalid (for all DACs)")
