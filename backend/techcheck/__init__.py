"""
techcheck: Argo technical-file metadata validation.

This package validates the metadata content of Argo technical files
against a versioned rule set: controlled vocabularies, parameter-name
templates and date-consistency rules.
"""

from .exceptions import ConfigurationError, FieldReadError, TechCheckError
from .logging_config import configure_logging, setup_logging
from .models import CheckerSettings, EscalationPolicy, load_settings
from .records import MemoryRecord, NetCDFRecord, TechnicalRecord
from .reference import ReferenceProvider, ReferenceTables

__version__ = "1.0.0"
__all__ = [
    "CheckerSettings",
    "EscalationPolicy",
    "load_settings",
    "configure_logging",
    "setup_logging",
    "MemoryRecord",
    "NetCDFRecord",
    "TechnicalRecord",
    "ReferenceProvider",
    "ReferenceTables",
    "TechCheckError",
    "FieldReadError",
    "ConfigurationError",
]
