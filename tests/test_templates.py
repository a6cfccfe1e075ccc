"""
Tests for the technical parameter name table.
"""

import pytest

from backend.techcheck.validator import (
    ParamMatch,
    TechParamTable,
    compile_template,
    SHORT_SENSOR_NAME_TEMPLATE,
)


def get_table():
    """Return a small rule set covering literal and template names."""
    return TechParamTable(
        names=[
            "CURRENT_Pump",
            "FLAG_<short_sensor_name>Error",
            "NUMBER_ProfileSamples<PARAM>",
            "TEMP_<short_sensor_name>Internal",
        ],
        deprecated_names=[
            "PRES_GREATER_THAN",
            "VOLTAGE_<short_sensor_name>Old",
        ],
        units=["dbar", "mA", "COUNT", "degC"],
        deprecated_units=["decibar"],
        match_lists={
            "TEMP_<short_sensor_name>Internal": {"shortsensorname": ["Optode", "Suna"]},
        },
    )


class TestCompileTemplate:
    """Tests for compile_template."""

    def test_literal_text_is_escaped(self):
        """Test that regex metacharacters in literal text match literally."""
        regex = compile_template("RATIO_A.B<N>")
        assert regex.fullmatch("RATIO_A.B3")
        assert not regex.fullmatch("RATIO_AxB3")

    def test_named_groups_capture_values(self):
        """Test that known placeholders capture into their group names."""
        regex = compile_template("CLOCK_<short_sensor_name>Zone<N+1>")
        m = regex.fullmatch("CLOCK_OptodeZone12")
        assert m is not None
        assert m.group("shortsensorname") == "Optode"
        assert m.group("N1") == "12"

    def test_ctd_short_sensor_name(self):
        """Test that CTD is accepted by the short_sensor_name placeholder."""
        regex = compile_template("FLAG_<short_sensor_name>Error")
        m = regex.fullmatch("FLAG_CTDError")
        assert m.group("shortsensorname") == "CTD"

    def test_unknown_placeholder_matches_without_capture(self):
        """Test that unknown placeholders match word characters only."""
        regex = compile_template("MODE_<whatever>Setting")
        m = regex.fullmatch("MODE_Abc12Setting")
        assert m is not None
        assert m.groupdict() == {}

    def test_repeated_placeholder_compiles(self):
        """Test that a placeholder used twice does not redefine its group."""
        regex = compile_template("DEPTH_Zone<N>To<N>")
        m = regex.fullmatch("DEPTH_Zone1To2")
        assert m is not None
        assert m.group("N") == "1"

    def test_anchored(self):
        """Test that the whole name must match."""
        regex = compile_template("FLAG_<short_sensor_name>Error")
        assert regex.fullmatch("FLAG_OptodeErrorCount") is None


class TestTechParamTable:
    """Tests for TechParamTable lookups."""

    def test_active_literal(self):
        """Test an active literal name."""
        match = get_table().find_tech_param("CURRENT_Pump")
        assert match == ParamMatch(name="CURRENT_Pump")
        assert match.is_active is True

    def test_deprecated_literal(self):
        """Test a deprecated literal name."""
        match = get_table().find_tech_param("PRES_GREATER_THAN")
        assert match is not None
        assert match.is_deprecated is True
        assert match.is_active is False

    def test_no_match(self):
        """Test that an unknown name returns None."""
        assert get_table().find_tech_param("NOT_A_PARAM") is None

    def test_template_without_match_list_is_unmatched(self):
        """Test that captured values without a match list are unmatched."""
        match = get_table().find_tech_param("FLAG_OptodeError")
        assert match is not None
        assert match.is_deprecated is False
        assert match.unmatched_templates == {SHORT_SENSOR_NAME_TEMPLATE: "Optode"}
        assert match.failed_templates == {}

    def test_template_match_list_pass(self):
        """Test that a listed value is neither failed nor unmatched."""
        match = get_table().find_tech_param("TEMP_SunaInternal")
        assert match.failed_templates == {}
        assert match.unmatched_templates == {}

    def test_template_match_list_fail(self):
        """Test that an unlisted value is recorded as failed."""
        match = get_table().find_tech_param("TEMP_CrazyInternal")
        assert match.failed_templates == {"shortsensorname": "Crazy"}

    def test_deprecated_template(self):
        """Test that deprecated templates mark the match deprecated."""
        match = get_table().find_tech_param("VOLTAGE_OptodeOld")
        assert match is not None
        assert match.is_deprecated is True
        assert match.unmatched_templates == {"shortsensorname": "Optode"}

    def test_active_template_wins_over_deprecated(self):
        """Test that active templates are tried before deprecated ones."""
        table = TechParamTable(
            names=["COUNT_<PARAM>"],
            deprecated_names=["COUNT_<PARAM>"],
        )
        match = table.find_tech_param("COUNT_DOXY")
        assert match.is_deprecated is False

    def test_last_matching_template_wins(self):
        """Test that the last of several matching templates is returned."""
        table = TechParamTable(names=["TIME_<N>", "TIME_<int>"])
        match = table.find_tech_param("TIME_5")
        assert match.name == "TIME_<int>"
        assert match.unmatched_templates == {"int": "5"}

    def test_units(self):
        """Test active and deprecated unit lookups."""
        table = get_table()
        assert table.is_active_unit("dbar") is True
        assert table.is_active_unit("decibar") is False
        assert table.is_deprecated_unit("decibar") is True
        assert table.is_deprecated_unit("furlong") is False

    def test_blank_entries_ignored(self):
        """Test that blank names and units are dropped."""
        table = TechParamTable(names=["", "  "], units=[" ", "dbar "])
        assert table.literal_names == set()
        assert table.units == {"dbar"}

    def test_from_dict(self):
        """Test building a table from a mapping."""
        table = TechParamTable.from_dict({
            "names": ["CURRENT_Pump"],
            "units": ["mA"],
        })
        assert table.find_tech_param("CURRENT_Pump") is not None
        assert table.is_active_unit("mA")
        assert table.deprecated_templates == []

    @pytest.mark.parametrize("name", ["NUMBER_ProfileSamplesDOXY", "NUMBER_ProfileSamplesPRES"])
    def test_param_placeholder(self, name):
        """Test the upper-case PARAM placeholder."""
        match = get_table().find_tech_param(name)
        assert match is not None
        assert "PARAM" in match.unmatched_templates
