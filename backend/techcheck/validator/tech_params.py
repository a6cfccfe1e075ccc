"""
Technical Parameter Validation.

Each TECHNICAL_PARAMETER_NAME is ``<param>_<unit>``, split at the last
underscore. The bare ``param`` is resolved against the name table
(active, deprecated, template); the ``unit`` against the unit lists.

Names and units repeat across rows (one per sensor or level), so both are
checked once per call: a bare name produces its findings on first sight
only, and a unit's validity is memoized. Malformed identifiers are
likewise reported once per distinct string.

Findings for unknown names and bad template values are pending errors:
warnings marked "will become an error" until the escalation policy
promotes them.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from loguru import logger

from ..exceptions import FieldReadError
from ..models import CheckerSettings
from ..records import (
    N_TECH_PARAM,
    TECHNICAL_PARAMETER_NAME,
    TECHNICAL_PARAMETER_VALUE,
    TechnicalRecord,
)
from ..reference import ReferenceProvider
from .result import TechParamSummary, ValidationResult
from .templates import SHORT_SENSOR_NAME_TEMPLATE, ParamMatch, ParamMatcher


INVALID_NAME = "invalid_name"
INVALID_TEMPLATE_VALUE = "invalid_template_value"
INVALID_SHORT_SENSOR_NAME = "invalid_short_sensor_name"


def split_identifier(full: str) -> Optional[Tuple[str, str]]:
    """
    Split ``<param>_<unit>`` at the last underscore.

    Returns:
        (param, unit), or None when there is no underscore or it is the
        first character.
    """
    index = full.rfind("_")
    if index <= 0:
        return None
    return full[:index], full[index + 1:]


class TechParamValidator:
    """
    Validates technical parameter names and units.

    Value checks are not performed. ``check_value`` is the extension point:
    a subclass that sets ``check_values`` gets TECHNICAL_PARAMETER_VALUE
    read and ``check_value`` called for every well-formed row.
    """

    check_values = False

    def __init__(
        self,
        table: ParamMatcher,
        reference: ReferenceProvider,
        settings: Optional[CheckerSettings] = None,
    ):
        self.table = table
        self.reference = reference
        self.settings = settings or CheckerSettings()

    def validate(
        self,
        record: TechnicalRecord,
        result: ValidationResult,
        dac: Optional[str] = None,
    ) -> TechParamSummary:
        """
        Check every technical parameter row of the record.

        Returns:
            The per-call memo of checked names and unit validity.
        """
        logger.debug(".....validate tech params.....")

        n_param = record.dimension_length(N_TECH_PARAM)
        logger.debug(f"n_technical_parameter: {n_param}")

        names = record.read_string_array(TECHNICAL_PARAMETER_NAME)
        if len(names) < n_param:
            raise FieldReadError(
                TECHNICAL_PARAMETER_NAME,
                record.path,
                ValueError(f"{len(names)} rows for {N_TECH_PARAM} = {n_param}"),
            )
        values: List[str] = []
        if self.check_values:
            values = record.read_string_array(TECHNICAL_PARAMETER_VALUE)

        summary = TechParamSummary(rows=n_param)
        context = f"{dac or ''}: {record.path}"

        for n in range(n_param):
            row = n + 1
            full = names[n].strip()
            parts = split_identifier(full)

            if parts is None:
                if full not in summary.names_checked:
                    result.add_error(
                        f"{TECHNICAL_PARAMETER_NAME}[{row}]: Incorrectly formed name '{full}'"
                    )
                    summary.names_checked.add(full)
                logger.debug(f"badly formed name: {TECHNICAL_PARAMETER_NAME}[{row}] = '{full}'")
                continue

            param, unit = parts
            logger.debug(
                f"check {TECHNICAL_PARAMETER_NAME}[{row}]: full '{full}'; "
                f"param '{param}'; unit '{unit}'"
            )

            if param not in summary.names_checked:
                self._check_param(param, row, result, context)
                summary.names_checked.add(param)

            valid_unit = summary.unit_validity.get(unit)
            if valid_unit is None:
                valid_unit = self._check_unit(unit, full, row, result)
                summary.unit_validity[unit] = valid_unit

            if self.check_values:
                value = values[n].strip() if n < len(values) else ""
                self.check_value(full, unit, value, valid_unit, row, result)

        return summary

    def _check_param(
        self,
        param: str,
        row: int,
        result: ValidationResult,
        context: str,
    ) -> None:
        prefix = f"{TECHNICAL_PARAMETER_NAME}[{row}]"
        match = self.table.find_tech_param(param)

        if match is None:
            self._pending(result, INVALID_NAME, f"{prefix}: Invalid name '{param}'", context)
            logger.debug(f"invalid param (not active or deprecated): '{param}'")
            return

        if match.is_deprecated:
            result.add_warning(f"{prefix}: Deprecated name '{param}'")
            logger.debug(f"parameter is deprecated: '{param}'")

        for template, value in match.failed_templates.items():
            self._pending(
                result,
                INVALID_TEMPLATE_VALUE,
                f"{prefix}: Invalid template/value '{template}'/'{value}' in '{param}'",
                context,
            )

        self._check_generic_templates(match, param, prefix, result, context)

    def _check_generic_templates(
        self,
        match: ParamMatch,
        param: str,
        prefix: str,
        result: ValidationResult,
        context: str,
    ) -> None:
        # Templates without a match list already satisfied their regex;
        # only short_sensor_name has a vocabulary to check against.
        value = match.unmatched_templates.get(SHORT_SENSOR_NAME_TEMPLATE)
        if value is None:
            return

        if self.reference.is_short_sensor_name(value):
            logger.debug(f"generic short_sensor_name lookup: valid = '{value}'")
            return

        self._pending(
            result,
            INVALID_SHORT_SENSOR_NAME,
            f"{prefix}: Invalid short_sensor_name '{value}' in '{param}'",
            context,
        )

    def _check_unit(
        self,
        unit: str,
        full: str,
        row: int,
        result: ValidationResult,
    ) -> bool:
        if self.table.is_active_unit(unit):
            return True

        prefix = f"{TECHNICAL_PARAMETER_NAME}[{row}]"
        if self.table.is_deprecated_unit(unit):
            result.add_warning(f"{prefix}: Deprecated unit '{unit}' in '{full}'")
            logger.warning(f"'{unit}': unit is deprecated")
            return True

        result.add_error(f"{prefix}: Invalid unit '{unit}' in '{full}'")
        logger.debug(f"unit is invalid (new or old): '{unit}'")
        return False

    def check_value(
        self,
        full: str,
        unit: str,
        value: str,
        valid_unit: bool,
        row: int,
        result: ValidationResult,
    ) -> None:
        """Value check for one row. Not implemented; records nothing."""
        return None

    def _pending(
        self,
        result: ValidationResult,
        category: str,
        message: str,
        context: str,
    ) -> None:
        result.add_pending_error(
            category,
            message,
            self.settings.escalation,
            marker=self.settings.escalation_marker,
            context=context,
        )
