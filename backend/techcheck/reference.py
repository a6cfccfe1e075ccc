"""
Reference Data.

Controlled vocabularies used by the checks:
- DAC registry and the originating-centre codes each DAC may use
- Generic short_sensor_name vocabulary for parameter-name templates
- Earliest valid date of the Argo programme
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional, Protocol, Set


EARLIEST_DATE = datetime(1997, 1, 1, tzinfo=timezone.utc)

DAC_CENTER_CODES: Dict[str, FrozenSet[str]] = {
    "AOML": frozenset({"AO", "MB", "NA", "PM", "SI", "UW", "WH"}),
    "BODC": frozenset({"BO"}),
    "CORIOLIS": frozenset({"AW", "GE", "IO", "IF", "LV", "RU", "SP", "VL"}),
    "CSIO": frozenset({"HZ"}),
    "CSIRO": frozenset({"CS"}),
    "INCOIS": frozenset({"IN"}),
    "JMA": frozenset({"JA", "JM"}),
    "KMA": frozenset({"KM"}),
    "KORDI": frozenset({"KO"}),
    "MEDS": frozenset({"CI", "ME"}),
    "NMDIS": frozenset({"NM"}),
}

GENERIC_SHORT_SENSOR_NAMES: FrozenSet[str] = frozenset({
    "CTD",
    "Crover",
    "Cyclops",
    "Eco",
    "Flbb",
    "Flntu",
    "Ido",
    "Imu",
    "Isus",
    "Mcoms",
    "Mpe",
    "Ocr",
    "Opus",
    "Optode",
    "Rafos",
    "Ramses",
    "Seapoint",
    "Sfet",
    "Stm",
    "Suna",
    "Uvp",
})


class ReferenceProvider(Protocol):
    """Lookups the checks need from the reference tables."""

    earliest_date: datetime

    def resolve_dac(self, name: str) -> Optional[str]: ...

    def center_codes(self, dac: str) -> FrozenSet[str]: ...

    @property
    def all_center_codes(self) -> FrozenSet[str]: ...

    def is_short_sensor_name(self, value: str) -> bool: ...


@dataclass
class ReferenceTables:
    """
    Default reference data, overridable for other rule-set versions.

    DAC names are matched case-insensitively and reported in their
    canonical (upper-case) form.
    """

    dac_center_codes: Dict[str, FrozenSet[str]] = field(
        default_factory=lambda: dict(DAC_CENTER_CODES)
    )
    short_sensor_names: FrozenSet[str] = GENERIC_SHORT_SENSOR_NAMES
    earliest_date: datetime = EARLIEST_DATE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReferenceTables":
        """
        Build reference tables from a plain mapping.

        Keys are optional; anything missing keeps the default table.

        Args:
            data: Mapping with ``dac_center_codes`` (DAC -> list of codes),
                ``short_sensor_names`` (list) and ``earliest_date`` (datetime).
        """
        tables = cls()
        codes = data.get("dac_center_codes")
        if codes:
            tables.dac_center_codes = {
                str(dac).upper(): frozenset(_clean(values))
                for dac, values in codes.items()
            }
        names = data.get("short_sensor_names")
        if names:
            tables.short_sensor_names = frozenset(_clean(names))
        earliest = data.get("earliest_date")
        if earliest is not None:
            if earliest.tzinfo is None:
                earliest = earliest.replace(tzinfo=timezone.utc)
            tables.earliest_date = earliest
        return tables

    def resolve_dac(self, name: str) -> Optional[str]:
        """Return the canonical DAC name, or None if unknown."""
        wanted = name.strip().upper()
        if wanted in self.dac_center_codes:
            return wanted
        return None

    def center_codes(self, dac: str) -> FrozenSet[str]:
        """Originating-centre codes known for a DAC (empty if unknown)."""
        return self.dac_center_codes.get(dac, frozenset())

    @property
    def all_center_codes(self) -> FrozenSet[str]:
        """Union of every DAC's originating-centre codes."""
        return frozenset().union(*self.dac_center_codes.values())

    def is_short_sensor_name(self, value: str) -> bool:
        return value in self.short_sensor_names


def _clean(values: Iterable[Any]) -> Set[str]:
    return {str(v).strip() for v in values if str(v).strip()}
