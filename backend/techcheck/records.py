"""
Record access.

The checks read an Argo technical file through the TechnicalRecord
protocol: named character fields, dimension lengths and the file's
last-modification time. Two implementations are provided:

- MemoryRecord: field values held in memory (tests, pre-decoded data)
- NetCDFRecord: an open netCDF file read with netCDF4

Any failure to read a field raises FieldReadError; it is never turned
into a validation finding.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Sequence, Tuple, Union

import netCDF4
import numpy as np
from loguru import logger

from .exceptions import FieldReadError


DATE_CREATION = "DATE_CREATION"
DATE_UPDATE = "DATE_UPDATE"
PLATFORM_NUMBER = "PLATFORM_NUMBER"
DATA_CENTRE = "DATA_CENTRE"
FORMAT_VERSION = "FORMAT_VERSION"
TECHNICAL_PARAMETER_NAME = "TECHNICAL_PARAMETER_NAME"
TECHNICAL_PARAMETER_VALUE = "TECHNICAL_PARAMETER_VALUE"
N_TECH_PARAM = "N_TECH_PARAM"

REQUIRED_VARIABLES = (
    FORMAT_VERSION,
    PLATFORM_NUMBER,
    DATA_CENTRE,
    DATE_CREATION,
    DATE_UPDATE,
    TECHNICAL_PARAMETER_NAME,
    TECHNICAL_PARAMETER_VALUE,
)
REQUIRED_DIMENSIONS = (N_TECH_PARAM,)

FieldValue = Union[str, Sequence[str]]


class TechnicalRecord(Protocol):
    """Read access to one technical file."""

    path: str
    verified: bool

    @property
    def format_version(self) -> str: ...

    @property
    def last_modified(self) -> datetime: ...

    def read_string(self, name: str) -> str: ...

    def read_string_array(self, name: str) -> List[str]: ...

    def dimension_length(self, name: str) -> int: ...

    def char_variables(self) -> Iterator[Tuple[str, np.ndarray]]: ...


@dataclass
class MemoryRecord:
    """
    A technical record held in memory.

    ``fields`` maps variable names to a string (scalar char field) or a
    list of strings (one per row).
    """

    fields: Dict[str, FieldValue] = field(default_factory=dict)
    dimensions: Dict[str, int] = field(default_factory=dict)
    modified: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    verified: bool = True
    path: str = "<memory>"

    @property
    def format_version(self) -> str:
        return self.read_string(FORMAT_VERSION) if FORMAT_VERSION in self.fields else "3.1"

    @property
    def last_modified(self) -> datetime:
        return self.modified

    def _get(self, name: str) -> FieldValue:
        try:
            return self.fields[name]
        except KeyError as e:
            raise FieldReadError(name, self.path, e) from e

    def read_string(self, name: str) -> str:
        value = self._get(name)
        if not isinstance(value, str):
            raise FieldReadError(name, self.path, TypeError("not a scalar string field"))
        return _until_null(value)

    def read_string_array(self, name: str) -> List[str]:
        value = self._get(name)
        if isinstance(value, str):
            return [_until_null(value)]
        return [_until_null(row) for row in value]

    def dimension_length(self, name: str) -> int:
        if name in self.dimensions:
            return self.dimensions[name]
        # Fall back to the row count of the matching array field
        if name == N_TECH_PARAM and TECHNICAL_PARAMETER_NAME in self.fields:
            return len(self.read_string_array(TECHNICAL_PARAMETER_NAME))
        raise FieldReadError(name, self.path, KeyError(name))

    def char_variables(self) -> Iterator[Tuple[str, np.ndarray]]:
        for name, value in self.fields.items():
            yield name, _to_char_array(value)


class NetCDFRecord:
    """
    A technical file opened with netCDF4.

    Usable as a context manager; the dataset is closed on exit.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = str(path)
        self.verified = False
        try:
            self._dataset = netCDF4.Dataset(self.path, "r")
        except (OSError, RuntimeError) as e:
            raise FieldReadError("<file>", self.path, e) from e
        self._dataset.set_auto_mask(False)
        self._dataset.set_auto_chartostring(False)
        self._modified: Optional[datetime] = None

    def __enter__(self) -> "NetCDFRecord":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        if self._dataset.isopen():
            self._dataset.close()

    @property
    def format_version(self) -> str:
        return self.read_string(FORMAT_VERSION)

    @property
    def last_modified(self) -> datetime:
        if self._modified is None:
            try:
                mtime = os.path.getmtime(self.path)
            except OSError as e:
                raise FieldReadError("<mtime>", self.path, e) from e
            self._modified = datetime.fromtimestamp(mtime, tz=timezone.utc)
        return self._modified

    def _read(self, name: str) -> np.ndarray:
        try:
            variable = self._dataset.variables[name]
        except KeyError as e:
            raise FieldReadError(name, self.path, e) from e
        try:
            return np.asarray(variable[:])
        except (OSError, RuntimeError, IndexError) as e:
            raise FieldReadError(name, self.path, e) from e

    def read_string(self, name: str) -> str:
        data = self._read(name)
        if data.ndim == 0:
            return _chars_to_string(data.reshape(1))
        return _chars_to_string(data.reshape(-1))

    def read_string_array(self, name: str) -> List[str]:
        data = self._read(name)
        if data.ndim <= 1:
            return [_chars_to_string(data.reshape(-1))]
        rows = data.reshape(-1, data.shape[-1])
        return [_chars_to_string(row) for row in rows]

    def dimension_length(self, name: str) -> int:
        try:
            return len(self._dataset.dimensions[name])
        except KeyError as e:
            raise FieldReadError(name, self.path, e) from e

    def char_variables(self) -> Iterator[Tuple[str, np.ndarray]]:
        for name, variable in self._dataset.variables.items():
            if variable.dtype == np.dtype("S1"):
                yield name, self._read(name)

    def verify_format(
        self,
        required_variables: Sequence[str] = REQUIRED_VARIABLES,
        required_dimensions: Sequence[str] = REQUIRED_DIMENSIONS,
    ) -> List[str]:
        """
        Rudimentary structural check that must pass before validation.

        Returns:
            Problems found; ``verified`` is set when the list is empty.
        """
        problems = []
        for name in required_dimensions:
            if name not in self._dataset.dimensions:
                problems.append(f"Missing dimension '{name}'")
        for name in required_variables:
            variable = self._dataset.variables.get(name)
            if variable is None:
                problems.append(f"Missing variable '{name}'")
            elif variable.dtype != np.dtype("S1"):
                problems.append(f"Variable '{name}' is not a char variable")

        self.verified = not problems
        if problems:
            logger.debug(f"verify_format: {self.path}: {len(problems)} problem(s)")
        return problems


def _chars_to_string(chars: np.ndarray) -> str:
    """Join a 1-D char array; the string ends at the first NUL."""
    out = []
    for c in chars.tolist():
        if isinstance(c, bytes):
            c = c.decode("latin-1")
        # numpy hands back a NUL cell as ""
        if c in ("", "\x00"):
            break
        out.append(c)
    return "".join(out)


def _until_null(text: str) -> str:
    """Text up to the first NUL, as read from a netCDF char variable."""
    return text.split("\x00", 1)[0]


def _to_char_array(value: FieldValue) -> np.ndarray:
    """Lay out a string (or rows of strings) as a blank-padded char array."""
    if isinstance(value, str):
        return np.array(list(value), dtype="U1")
    rows = list(value)
    width = max((len(row) for row in rows), default=0)
    if width == 0:
        return np.empty((len(rows), 0), dtype="U1")
    return np.array([list(row.ljust(width)) for row in rows], dtype="U1")
