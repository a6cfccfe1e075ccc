"""
Checker settings.

Pydantic models for the checker's own configuration, loaded from YAML.
The rule-set content (parameter names, units) is not configured here;
see validator.templates.TechParamTable.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


DEFAULT_ESCALATION_MARKER = "   *** WILL BECOME AN ERROR ***"

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class EscalationPolicy(BaseModel):
    """
    Severity of the transitional "will become an error" rule categories.

    False records the finding as a warning carrying the escalation marker;
    True records it as an error.
    """

    invalid_name: bool = False
    invalid_template_value: bool = False
    invalid_short_sensor_name: bool = False

    def is_error(self, category: str) -> bool:
        """Whether a pending-error category is currently an error."""
        if category not in type(self).model_fields:
            raise ValueError(f"Unknown escalation category: {category}")
        return bool(getattr(self, category))


class CheckerSettings(BaseModel):
    """Top-level checker configuration."""

    escalation: EscalationPolicy = Field(default_factory=EscalationPolicy)
    escalation_marker: str = DEFAULT_ESCALATION_MARKER
    tech_param_versions: List[str] = Field(default_factory=lambda: ["2.4", "3"])
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @field_validator("escalation_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("escalation_marker must not be blank")
        return v

    @field_validator("tech_param_versions")
    @classmethod
    def validate_versions(cls, v: List[str]) -> List[str]:
        versions = [s.strip() for s in v if s.strip()]
        if not versions:
            raise ValueError("tech_param_versions needs at least one version prefix")
        return versions

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        return level

    def checks_tech_params(self, format_version: str) -> bool:
        """Whether technical parameters are checked for this FORMAT_VERSION."""
        version = format_version.strip()
        return any(version.startswith(prefix) for prefix in self.tech_param_versions)


def load_settings(path: Union[str, Path]) -> CheckerSettings:
    """
    Load checker settings from a YAML file.

    An empty file yields the defaults.

    Raises:
        ConfigurationError: The file is missing, unparseable or invalid.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Settings file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML parse error in {path}", cause=e) from e

    if data is None:
        return CheckerSettings()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")

    try:
        return CheckerSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {path}", cause=e) from e
