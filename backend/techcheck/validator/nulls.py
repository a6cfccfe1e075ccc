"""
Null Character Scan.

Character variables must not contain NUL characters. For every row
(innermost dimension) of every char variable the first NUL found is
reported as a warning with its 1-based position.
"""

from __future__ import annotations

import numpy as np
from loguru import logger

from ..records import TechnicalRecord
from .result import ValidationResult


class NullCharacterValidator:
    """Scans all char variables for NUL characters."""

    def validate(self, record: TechnicalRecord, result: ValidationResult) -> None:
        logger.debug(".....validate string nulls.....")

        for name, chars in record.char_variables():
            self._scan(name, np.asarray(chars), result)

    def _scan(self, name: str, chars: np.ndarray, result: ValidationResult) -> None:
        if chars.ndim == 0 or chars.size == 0:
            return

        null = b"\x00" if chars.dtype.kind == "S" else "\x00"
        rows = chars.reshape(-1, chars.shape[-1])
        leading_shape = chars.shape[:-1]

        for row_number, row in enumerate(rows):
            hits = np.flatnonzero(row == null)
            if hits.size == 0:
                continue
            leading = np.unravel_index(row_number, leading_shape) if leading_shape else ()
            position = ",".join(str(int(i) + 1) for i in (*leading, hits[0]))
            result.add_warning(f"{name}: NULL character at [{position}]")
            logger.warning(f"{name}[{position}]: null character")
