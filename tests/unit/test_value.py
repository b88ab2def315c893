"""
Tests for scalar value disambiguation and rendering.
"""

import pytest

from pcbroute.sexpr.value import (
    as_number,
    render_value,
    same_value,
    turn_to_value,
    value_as_string,
)


# =============================================================================
# turn_to_value
# =============================================================================

class TestTurnToValue:
    """Integer first, then float, then string, else None."""

    @pytest.mark.parametrize("token,expected", [
        ("42", 42),
        ("-7", -7),
        ("+3", 3),
        ("0", 0),
    ])
    def test_integers(self, token, expected):
        value = turn_to_value(token)
        assert value == expected
        assert isinstance(value, int)

    @pytest.mark.parametrize("token,expected", [
        ("3.5", 3.5),
        ("-0.825", -0.825),
        ("1.", 1.0),
        (".5", 0.5),
        ("1e3", 1000.0),
    ])
    def test_floats(self, token, expected):
        value = turn_to_value(token)
        assert value == expected
        assert isinstance(value, float)

    def test_strings(self):
        assert turn_to_value("F.Cu") == "F.Cu"
        assert turn_to_value("kicad_pcb") == "kicad_pcb"

    def test_inf_and_nan_stay_strings(self):
        assert turn_to_value("inf") == "inf"
        assert turn_to_value("nan") == "nan"

    def test_digit_groups_stay_strings(self):
        assert turn_to_value("1_000") == "1_000"

    def test_empty_token_is_none(self):
        assert turn_to_value("") is None
        assert turn_to_value("   ") is None

    def test_quoted_empty_token_is_empty_string(self):
        assert turn_to_value("", quoted=True) == ""

    def test_overflowing_float_stays_string(self):
        assert turn_to_value("1e400") == "1e400"
        assert turn_to_value("-1e400") == "-1e400"

    def test_bare_token_is_trimmed(self):
        assert turn_to_value(" 42 ") == 42

    def test_quoted_token_is_verbatim(self):
        assert turn_to_value(" a (b) ", quoted=True) == " a (b) "

    def test_quoted_numbers_are_still_numbers(self):
        assert turn_to_value("1", quoted=True) == 1


# =============================================================================
# Rendering
# =============================================================================

class TestRendering:
    """value_as_string and render_value."""

    def test_value_as_string(self):
        assert value_as_string(None) == ""
        assert value_as_string(1) == "1"
        assert value_as_string(1.0) == "1.0"
        assert value_as_string("GND") == "GND"

    def test_plain_strings_are_not_quoted(self):
        assert render_value("F.Cu") == "F.Cu"

    def test_strings_with_spaces_are_quoted(self):
        assert render_value("B.Silkscreen layer") == '"B.Silkscreen layer"'

    def test_quotes_and_backslashes_are_escaped(self):
        assert render_value('say "hi"') == '"say \\"hi\\""'
        assert render_value("a\\b") == '"a\\\\b"'

    def test_empty_string_is_quoted(self):
        assert render_value("") == '""'
        assert render_value(None) == ""


# =============================================================================
# Comparison helpers
# =============================================================================

class TestComparison:
    def test_same_value_is_type_strict(self):
        assert same_value(1, 1)
        assert not same_value(1, 1.0)
        assert not same_value("1", 1)
        assert same_value(None, None)

    def test_as_number(self):
        assert as_number(2) == 2.0
        assert as_number(2.5) == 2.5
        assert as_number("2") is None
        assert as_number(None) is None
        assert as_number(True) is None
