"""
Validation Engine.

Runs the technical-file checks in a fixed order:
- Null Character Scan (optional)
- Metadata Identity (PLATFORM_NUMBER, DATA_CENTRE)
- Date Consistency (DATE_CREATION, DATE_UPDATE)
- Technical Parameters (names, units; format versions 2.4 and 3.x)
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from loguru import logger

from ..models import CheckerSettings
from ..records import NetCDFRecord, TechnicalRecord
from ..reference import ReferenceProvider, ReferenceTables
from .dates import DateValidator
from .metadata import MetadataValidator
from .nulls import NullCharacterValidator
from .result import ValidationResult
from .tech_params import TechParamValidator
from .templates import ParamMatcher


NOT_VERIFIED_MESSAGE = "File must be verified (verifyFormat) successfully before validation"


class TechFileValidator:
    """
    Validates the content of Argo technical files.

    The validator holds only configuration; every call gets a fresh
    result and fresh memo structures, so one instance can validate any
    number of records.
    """

    def __init__(
        self,
        table: ParamMatcher,
        reference: Optional[ReferenceProvider] = None,
        settings: Optional[CheckerSettings] = None,
    ):
        """
        Initialize the validator.

        Args:
            table: Technical parameter names and units of the rule set.
            reference: Reference tables; defaults to the built-in tables.
            settings: Checker settings; defaults to CheckerSettings().
        """
        self.settings = settings or CheckerSettings()
        self.reference = reference or ReferenceTables()
        self.null_validator = NullCharacterValidator()
        self.metadata_validator = MetadataValidator(self.reference)
        self.date_validator = DateValidator(self.reference)
        self.tech_param_validator = TechParamValidator(table, self.reference, self.settings)

    def validate(
        self,
        record: TechnicalRecord,
        result: ValidationResult,
        dac_name: str = "",
        check_nulls: bool = False,
    ) -> bool:
        """
        Run all checks on a record.

        Args:
            record: A record that has passed format verification.
            result: Receives errors and warnings, in reporting order.
            dac_name: Submitting DAC; blank accepts any DAC's centre codes.
            check_nulls: Also scan char variables for NUL characters.

        Returns:
            True if validation was performed. False if a precondition
            failed; ``result.message`` then holds the reason.

        Raises:
            FieldReadError: A required field could not be read.
        """
        if not record.verified:
            result.message = NOT_VERIFIED_MESSAGE
            return False

        dac: Optional[str] = None
        if dac_name.strip():
            dac = self.reference.resolve_dac(dac_name)
            if dac is None:
                result.message = f"Unknown DAC name = '{dac_name}'"
                return False

        if check_nulls:
            self.null_validator.validate(record, result)

        self.metadata_validator.validate(record, result, dac)
        self.date_validator.validate(record, result)

        format_version = record.format_version
        if self.settings.checks_tech_params(format_version):
            result.tech_params = self.tech_param_validator.validate(record, result, dac)
        else:
            logger.debug(f"technical parameters not checked for FORMAT_VERSION '{format_version.strip()}'")

        result.performed = True
        logger.info(
            f"{record.path}: {len(result.errors)} error(s), "
            f"{len(result.warnings)} warning(s)"
        )
        return True

    def run(
        self,
        record: TechnicalRecord,
        dac_name: str = "",
        check_nulls: bool = False,
    ) -> ValidationResult:
        """Validate a record into a new ValidationResult."""
        result = ValidationResult()
        self.validate(record, result, dac_name=dac_name, check_nulls=check_nulls)
        return result

    def validate_file(
        self,
        path: Union[str, Path],
        dac_name: str = "",
        check_nulls: bool = False,
    ) -> ValidationResult:
        """
        Open, verify and validate a netCDF technical file.

        Format problems are reported through ``result.message``.

        Raises:
            FieldReadError: The file or a required field could not be read.
        """
        with NetCDFRecord(path) as record:
            problems = record.verify_format()
            if problems:
                result = ValidationResult()
                result.message = f"{NOT_VERIFIED_MESSAGE}: {'; '.join(problems)}"
                return result
            return self.run(record, dac_name=dac_name, check_nulls=check_nulls)
