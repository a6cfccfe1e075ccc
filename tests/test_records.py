"""
Tests for record access (in-memory and netCDF).
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import netCDF4
import numpy as np
import pytest

from backend.techcheck import FieldReadError, MemoryRecord, NetCDFRecord
from backend.techcheck.validator import NOT_VERIFIED_MESSAGE, TechFileValidator, TechParamTable


FILE_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

DEFAULT_NAMES = ["CURRENT_Pump_mA", "PRES_GREATER_THAN_dbar"]


def write_tech_file(path, names=None, drop=(), nulls_in_centre=False, **fields):
    """Write a small technical file and set its modification time."""
    names = DEFAULT_NAMES if names is None else names
    values = {
        "FORMAT_VERSION": "3.1 ",
        "PLATFORM_NUMBER": "6901234 ",
        "DATA_CENTRE": "IF",
        "DATE_CREATION": "20230101000000",
        "DATE_UPDATE": "20230601120000",
    }
    values.update(fields)

    ds = netCDF4.Dataset(str(path), "w")
    try:
        ds.createDimension("N_TECH_PARAM", len(names))
        ds.createDimension("STRING128", 128)
        ds.createDimension("STRING32", 32)
        for name, text in values.items():
            if name in drop:
                continue
            dim = f"LEN_{name}"
            ds.createDimension(dim, max(len(text), 1))
            var = ds.createVariable(name, "S1", (dim,))
            if name == "DATA_CENTRE" and nulls_in_centre:
                # Only the first cell written; the rest keeps the NUL fill
                var[0] = np.array(text[0], dtype="S1")
            else:
                var[:] = np.array(list(text), dtype="S1")

        if "TECHNICAL_PARAMETER_NAME" not in drop:
            var = ds.createVariable("TECHNICAL_PARAMETER_NAME", "S1", ("N_TECH_PARAM", "STRING128"))
            var[:] = netCDF4.stringtochar(np.array(names, dtype="S128"))
        if "TECHNICAL_PARAMETER_VALUE" not in drop:
            var = ds.createVariable("TECHNICAL_PARAMETER_VALUE", "S1", ("N_TECH_PARAM", "STRING32"))
            var[:] = netCDF4.stringtochar(np.array(["1"] * len(names), dtype="S32"))

        cycle = ds.createVariable("CYCLE_NUMBER", "i4", ("N_TECH_PARAM",))
        cycle[:] = np.arange(len(names), dtype="i4")
    finally:
        ds.close()

    stamp = FILE_TIME.timestamp()
    os.utime(path, (stamp, stamp))
    return path


def get_table():
    return TechParamTable(
        names=["CURRENT_Pump"],
        deprecated_names=["PRES_GREATER_THAN"],
        units=["mA", "dbar"],
    )


class TestMemoryRecord:
    """Tests for MemoryRecord."""

    def test_default_format_version(self):
        """Test that a record without FORMAT_VERSION reads as 3.1."""
        assert MemoryRecord().format_version == "3.1"

    def test_read_string(self):
        record = MemoryRecord(fields={"DATA_CENTRE": "IF"})
        assert record.read_string("DATA_CENTRE") == "IF"

    def test_missing_field(self):
        """Test that a missing field raises FieldReadError."""
        with pytest.raises(FieldReadError) as exc_info:
            MemoryRecord().read_string("DATE_CREATION")
        assert exc_info.value.field == "DATE_CREATION"
        assert exc_info.value.path == "<memory>"

    def test_read_string_on_array_field(self):
        """Test that reading rows as a scalar fails."""
        record = MemoryRecord(fields={"TECHNICAL_PARAMETER_NAME": ["A_b", "C_d"]})
        with pytest.raises(FieldReadError):
            record.read_string("TECHNICAL_PARAMETER_NAME")

    def test_read_string_array(self):
        record = MemoryRecord(fields={"TECHNICAL_PARAMETER_NAME": ["A_b", "C_d"], "X": "y"})
        assert record.read_string_array("TECHNICAL_PARAMETER_NAME") == ["A_b", "C_d"]
        assert record.read_string_array("X") == ["y"]

    def test_strings_end_at_null(self):
        """Test that fields read up to the first NUL, as netCDF char data does."""
        record = MemoryRecord(fields={
            "DATA_CENTRE": "I\x00F",
            "TECHNICAL_PARAMETER_NAME": ["A_b\x00junk", "C_d"],
        })
        assert record.read_string("DATA_CENTRE") == "I"
        assert record.read_string_array("TECHNICAL_PARAMETER_NAME") == ["A_b", "C_d"]
        _, chars = next(record.char_variables())
        assert chars.shape == (3,)

    def test_dimension_length(self):
        """Test explicit and derived dimension lengths."""
        record = MemoryRecord(fields={"TECHNICAL_PARAMETER_NAME": ["A_b", "C_d"]})
        assert record.dimension_length("N_TECH_PARAM") == 2
        record.dimensions["N_TECH_PARAM"] = 5
        assert record.dimension_length("N_TECH_PARAM") == 5
        with pytest.raises(FieldReadError):
            record.dimension_length("N_CYCLE")

    def test_char_variables_padded(self):
        """Test that rows are blank-padded to a common width."""
        record = MemoryRecord(fields={"TECHNICAL_PARAMETER_NAME": ["AB", "CDEF"]})
        name, chars = next(record.char_variables())
        assert name == "TECHNICAL_PARAMETER_NAME"
        assert chars.shape == (2, 4)
        assert "".join(chars[0]) == "AB  "


class TestNetCDFRecord:
    """Tests for NetCDFRecord."""

    def test_read_fields(self):
        """Test reading scalar and row fields."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "6901234_tech.nc")
            with NetCDFRecord(path) as record:
                assert record.format_version == "3.1 "
                assert record.read_string("PLATFORM_NUMBER") == "6901234 "
                names = record.read_string_array("TECHNICAL_PARAMETER_NAME")
                assert [n.strip() for n in names] == DEFAULT_NAMES
                assert record.dimension_length("N_TECH_PARAM") == 2

    def test_last_modified(self):
        """Test that the file time comes from the filesystem in UTC."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc")
            with NetCDFRecord(path) as record:
                assert record.last_modified == FILE_TIME

    def test_string_ends_at_null(self):
        """Test that a NUL-filled field reads up to the first NUL."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc", DATA_CENTRE="IFXX", nulls_in_centre=True)
            with NetCDFRecord(path) as record:
                assert record.read_string("DATA_CENTRE") == "I"

    def test_missing_variable(self):
        """Test that reading an absent variable raises FieldReadError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc", drop=("DATE_UPDATE",))
            with NetCDFRecord(path) as record:
                with pytest.raises(FieldReadError) as exc_info:
                    record.read_string("DATE_UPDATE")
                assert exc_info.value.field == "DATE_UPDATE"

    def test_missing_file(self):
        """Test that an unopenable file raises FieldReadError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(FieldReadError):
                NetCDFRecord(Path(tmpdir) / "absent.nc")

    def test_char_variables_only(self):
        """Test that numeric variables are not scanned as text."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc")
            with NetCDFRecord(path) as record:
                names = [name for name, _ in record.char_variables()]
                assert "CYCLE_NUMBER" not in names
                assert "TECHNICAL_PARAMETER_NAME" in names

    def test_verify_format(self):
        """Test structural verification."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc")
            with NetCDFRecord(path) as record:
                assert record.verified is False
                assert record.verify_format() == []
                assert record.verified is True

    def test_verify_format_problems(self):
        """Test that missing or mistyped variables are reported."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc", drop=("DATE_CREATION",))
            with NetCDFRecord(path) as record:
                problems = record.verify_format(
                    required_variables=("DATE_CREATION", "CYCLE_NUMBER"),
                )
                assert problems == [
                    "Missing variable 'DATE_CREATION'",
                    "Variable 'CYCLE_NUMBER' is not a char variable",
                ]
                assert record.verified is False


class TestValidateFile:
    """Tests for TechFileValidator.validate_file."""

    def test_clean_file(self):
        """Test validating a well-formed file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc")
            result = TechFileValidator(get_table()).validate_file(path, dac_name="coriolis")
            assert result.performed is True
            assert result.errors == []
            assert result.warnings == ["TECHNICAL_PARAMETER_NAME[2]: Deprecated name 'PRES_GREATER_THAN'"]
            assert result.tech_params.rows == 2

    def test_file_dates_against_mtime(self):
        """Test that dates are compared with the file's modification time."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc", DATE_UPDATE="20250101000000")
            result = TechFileValidator(get_table()).validate_file(path)
            assert result.errors == [
                "DATE_UPDATE: '20250101000000': After system file time ('20240115120000')"
            ]

    def test_null_scan(self):
        """Test the optional NUL scan on a netCDF file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc", DATA_CENTRE="IFXX", nulls_in_centre=True)
            result = TechFileValidator(get_table()).validate_file(path, check_nulls=True)
            assert result.warnings[0] == "DATA_CENTRE: NULL character at [2]"
            assert "DATA_CENTRE: 'I': Invalid (for all DACs)" in result.errors

    def test_unverified_file(self):
        """Test that a structurally incomplete file is not validated."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_tech_file(Path(tmpdir) / "tech.nc", drop=("TECHNICAL_PARAMETER_VALUE",))
            result = TechFileValidator(get_table()).validate_file(path)
            assert result.performed is False
            assert result.message.startswith(NOT_VERIFIED_MESSAGE)
            assert "Missing variable 'TECHNICAL_PARAMETER_VALUE'" in result.message
            assert result.errors == []
