"""
Technical Parameter Name Table.

Resolves bare technical-parameter names (the identifier minus its unit)
against the active and deprecated names of a rule set. Names may contain
``<template>`` placeholders, e.g. ``CLOCK_<short_sensor_name>Start``;
these are compiled into regular expressions whose named groups capture
the substituted values so the caller can check them further.

Lookup order:
1. active literal names
2. deprecated literal names
3. active templates
4. deprecated templates
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Pattern, Protocol, Set, Tuple

from loguru import logger


SHORT_SENSOR_NAME_TEMPLATE = "shortsensorname"

# placeholder -> regex with a named group (group names are the template keys
# reported in findings)
TEMPLATE_REPLACEMENTS: Dict[str, str] = {
    # config templates
    "D": r"(?P<D>\d+?)",
    "cycle_phase_name": r"(?P<cyclephasename>[A-Z][a-z]+(?:[A-Z][a-z]+)*?Phase)",
    "I": r"(?P<I>\d+?)",
    "N": r"(?P<N>\d+?)",
    "N+1": r"(?P<N1>\d+?)",
    "param": r"(?P<param>[A-Z][a-z]+(?:[A-Z][a-z]+)??)",
    "PARAM": r"(?P<PARAM>[A-Z]+?)",
    "S": r"(?P<S>\d+?)",
    "SubS": r"(?P<Subs>\d+?)",
    "short_sensor_name": r"(?P<shortsensorname>[A-Z][a-z]+?|CTD)",
    # tech templates
    "digit": r"(?P<digit>\d)",
    "int": r"(?P<int>\d+?)",
    "Z": r"(?P<Z>\d+?)",
}
DEFAULT_REPLACEMENT = r"\w+"

_PLACEHOLDER = re.compile(r"<([^>]+?)>")
_GROUP_NAME = re.compile(r"\(\?P<\w+>")


@dataclass
class ParamMatch:
    """How a bare parameter name matched the table."""

    name: str
    is_deprecated: bool = False
    unmatched_templates: Dict[str, str] = field(default_factory=dict)
    failed_templates: Dict[str, str] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return not self.is_deprecated


class ParamMatcher(Protocol):
    """Name and unit lookups used by the technical parameter check."""

    def find_tech_param(self, name: str) -> Optional[ParamMatch]: ...

    def is_active_unit(self, unit: str) -> bool: ...

    def is_deprecated_unit(self, unit: str) -> bool: ...


@dataclass
class TemplatePattern:
    """A compiled template name and its optional per-group match lists."""

    source: str
    regex: Pattern
    match_lists: Optional[Dict[str, Set[str]]] = None

    def match(self, name: str) -> Optional[ParamMatch]:
        m = self.regex.fullmatch(name)
        if m is None:
            return None

        result = ParamMatch(name=self.source)
        for key, value in m.groupdict().items():
            if value is None:
                continue
            allowed = self.match_lists.get(key) if self.match_lists else None
            if allowed is None:
                result.unmatched_templates[key] = value
            elif value not in allowed:
                result.failed_templates[key] = value
        return result


def compile_template(name: str) -> Pattern:
    """
    Convert a template name into an anchored regular expression.

    Literal text between placeholders is escaped; unknown placeholders
    match ``\\w+`` without capturing. A placeholder repeated in one name
    only captures at its first occurrence.
    """
    parts: List[str] = []
    seen: Set[str] = set()
    end = 0
    for m in _PLACEHOLDER.finditer(name):
        parts.append(re.escape(name[end:m.start()]))
        placeholder = m.group(1)
        replacement = TEMPLATE_REPLACEMENTS.get(placeholder)
        if replacement is None:
            logger.debug(f"default template replacement for <{placeholder}> in '{name}'")
            replacement = DEFAULT_REPLACEMENT
        elif placeholder in seen:
            replacement = _GROUP_NAME.sub("(?:", replacement, count=1)
        seen.add(placeholder)
        parts.append(replacement)
        end = m.end()
    parts.append(re.escape(name[end:]))
    return re.compile("".join(parts))


class TechParamTable:
    """
    Active and deprecated technical parameter names and units.

    Literal names are held in sets; template names in ordered lists of
    TemplatePattern. Every template in a list is tried and the last match
    wins, so overlapping templates resolve to the later definition.
    """

    def __init__(
        self,
        names: Iterable[str] = (),
        deprecated_names: Iterable[str] = (),
        units: Iterable[str] = (),
        deprecated_units: Iterable[str] = (),
        match_lists: Optional[Mapping[str, Mapping[str, Iterable[str]]]] = None,
    ):
        """
        Initialize the table.

        Args:
            names: Active parameter names (literal or template).
            deprecated_names: Deprecated parameter names (literal or template).
            units: Active units.
            deprecated_units: Deprecated units.
            match_lists: Template name -> {group key -> allowed values}.
        """
        match_lists = match_lists or {}
        self.literal_names, self.templates = self._split(names, match_lists)
        self.deprecated_literal_names, self.deprecated_templates = self._split(
            deprecated_names, match_lists
        )
        self.units: Set[str] = {u.strip() for u in units if u.strip()}
        self.deprecated_units: Set[str] = {u.strip() for u in deprecated_units if u.strip()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TechParamTable":
        """
        Build a table from an in-memory mapping.

        Expected keys (all optional): ``names``, ``deprecated_names``,
        ``units``, ``deprecated_units``, ``match_lists``.
        """
        return cls(
            names=data.get("names", []),
            deprecated_names=data.get("deprecated_names", []),
            units=data.get("units", []),
            deprecated_units=data.get("deprecated_units", []),
            match_lists=data.get("match_lists"),
        )

    @staticmethod
    def _split(
        names: Iterable[str],
        match_lists: Mapping[str, Mapping[str, Iterable[str]]],
    ) -> Tuple[Set[str], List[TemplatePattern]]:
        literals: Set[str] = set()
        templates: List[TemplatePattern] = []
        for raw in names:
            name = raw.strip()
            if not name:
                continue
            if not _PLACEHOLDER.search(name):
                literals.add(name)
                continue
            lists = match_lists.get(name)
            templates.append(TemplatePattern(
                source=name,
                regex=compile_template(name),
                match_lists={k: set(v) for k, v in lists.items()} if lists else None,
            ))
        return literals, templates

    def find_tech_param(self, name: str) -> Optional[ParamMatch]:
        """
        Resolve a bare parameter name.

        Returns:
            A ParamMatch, or None if the name is neither active, deprecated
            nor covered by any template.
        """
        if name in self.literal_names:
            return ParamMatch(name=name)
        if name in self.deprecated_literal_names:
            return ParamMatch(name=name, is_deprecated=True)

        match = self._check_templates(name, self.templates)
        if match is not None:
            return match

        match = self._check_templates(name, self.deprecated_templates)
        if match is not None:
            match.is_deprecated = True
        return match

    def _check_templates(
        self, name: str, templates: List[TemplatePattern]
    ) -> Optional[ParamMatch]:
        found: Optional[ParamMatch] = None
        for template in templates:
            match = template.match(name)
            if match is None:
                continue
            if found is not None:
                logger.debug(f"'{name}' matches multiple templates: '{found.name}', '{match.name}'")
            found = match
        return found

    def is_active_unit(self, unit: str) -> bool:
        return unit in self.units

    def is_deprecated_unit(self, unit: str) -> bool:
        return unit in self.deprecated_units
