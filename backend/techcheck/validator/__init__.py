"""
Technical File Validation Engine.

This package provides the content checks for Argo technical files:
- Metadata Identity (PLATFORM_NUMBER, DATA_CENTRE)
- Date Consistency (DATE_CREATION, DATE_UPDATE)
- Technical Parameters (name templates, units)
- Null Character Scan (optional)
"""

from .result import ValidationResult, TechParamSummary
from .templates import (
    ParamMatch,
    ParamMatcher,
    TechParamTable,
    TemplatePattern,
    compile_template,
    SHORT_SENSOR_NAME_TEMPLATE,
)
from .metadata import MetadataValidator, PLATFORM_NUMBER_PATTERN
from .dates import DateValidator, FILE_TIME_TOLERANCE
from .tech_params import TechParamValidator, split_identifier
from .nulls import NullCharacterValidator
from .engine import TechFileValidator, NOT_VERIFIED_MESSAGE

__all__ = [
    # Result
    "ValidationResult",
    "TechParamSummary",
    # Name table
    "ParamMatch",
    "ParamMatcher",
    "TechParamTable",
    "TemplatePattern",
    "compile_template",
    "SHORT_SENSOR_NAME_TEMPLATE",
    # Checks
    "MetadataValidator",
    "PLATFORM_NUMBER_PATTERN",
    "DateValidator",
    "FILE_TIME_TOLERANCE",
    "TechParamValidator",
    "split_identifier",
    "NullCharacterValidator",
    # Engine
    "TechFileValidator",
    "NOT_VERIFIED_MESSAGE",
]
