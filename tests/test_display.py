"""White-box tests for the display formatter.

Each test class targets the formatter branches documented in the
contract (``FMT-*`` ids).  FORMAT_BRANCH_COVERAGE at the bottom records
which test covers which branch.
"""
from __future__ import annotations

import math

import pytest

from display import format_display, parse_display
from errors import CalculatorError, OverflowOrInvalidError


# ===================================================================
# INVALID VALUES  (FMT-INVALID)
# ===================================================================

class TestInvalid:

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_fmt_invalid_raises(self, value):
        """Branch: FMT-INVALID - non-finite values are rejected."""
        with pytest.raises(OverflowOrInvalidError):
            format_display(value)

    def test_invalid_is_a_calculator_error(self):
        with pytest.raises(CalculatorError):
            format_display(math.inf)

    def test_invalid_is_an_overflow_error(self):
        with pytest.raises(OverflowError):
            format_display(math.nan)


# ===================================================================
# SCIENTIFIC NOTATION  (FMT-SCI)
# ===================================================================

class TestScientific:

    def test_fmt_sci_large(self):
        """Branch: FMT-SCI - 1e11 is at or above 1e10."""
        assert format_display(1e11) == "1.0000e+11"

    def test_fmt_sci_small(self):
        """Branch: FMT-SCI - 5e-8 is nonzero and below 1e-7."""
        assert format_display(0.00000005) == "5.0000e-8"

    def test_upper_threshold_is_inclusive(self):
        assert format_display(1e10) == "1.0000e+10"

    def test_negative_large(self):
        assert format_display(-1e10) == "-1.0000e+10"

    def test_mantissa_rounds_to_four_places(self):
        assert format_display(123456789012.0) == "1.2346e+11"

    @pytest.mark.parametrize("value, expected", [
        (10000500000.0, "1.0001e+10"),
        (25000500000.0, "2.5001e+10"),
        (-10000500000.0, "-1.0001e+10"),
    ])
    def test_mantissa_ties_round_away_from_zero(self, value, expected):
        assert format_display(value) == expected

    def test_mantissa_round_up_carries_into_exponent(self):
        assert format_display(99999500000.0) == "1.0000e+11"

    def test_tie_reached_by_calculation(self, calc, press):
        assert press(calc, "10000500000+0=").display == "1.0001e+10"

    def test_three_digit_exponent(self):
        assert format_display(1.5e300) == "1.5000e+300"
        assert format_display(1.23456e-100) == "1.2346e-100"

    def test_scientific_fits_display(self):
        assert len(format_display(-1.7976931348623157e308)) <= 16


# ===================================================================
# FIXED NOTATION  (FMT-FIXED, FMT-INT)
# ===================================================================

class TestFixed:

    def test_fmt_fixed_strips_trailing_zeros(self):
        """Branch: FMT-FIXED - 123.456000 shows as 123.456."""
        assert format_display(123.456000) == "123.456"

    def test_fmt_int_plain_integer(self):
        """Branch: FMT-INT - integral floats show without a point."""
        assert format_display(5.0) == "5"
        assert format_display(9999999999.0) == "9999999999"

    def test_zero(self):
        assert format_display(0.0) == "0"

    def test_negative_zero(self):
        assert format_display(-0.0) == "0"

    def test_lower_threshold_is_fixed(self):
        """1e-7 itself is not below the threshold."""
        assert format_display(1e-7) == "0.0000001"

    def test_small_values_are_positional(self):
        assert format_display(1e-5) == "0.00001"

    def test_fraction_truncated_not_rounded(self):
        assert format_display(2 / 3) == "0.66666666666666"

    def test_fraction_budget_fills_display(self):
        assert format_display(1 / 3) == "0.33333333333333"
        assert len(format_display(1 / 3)) == 16

    def test_sign_counts_against_budget(self):
        assert format_display(-1 / 3) == "-0.3333333333333"

    def test_long_integer_part_shrinks_fraction(self):
        assert format_display(123456789.123456789) == "123456789.123456"

    def test_truncation_to_zero_fraction_drops_point(self):
        assert format_display(0.1 + 0.2) == "0.3"
        assert format_display(-5.000000000000001) == "-5"

    def test_small_fraction_keeps_leading_zeros(self):
        assert format_display(1.23456789e-7) == "0.00000012345678"


# ===================================================================
# PARSING THE DISPLAY BACK
# ===================================================================

class TestParse:

    @pytest.mark.parametrize("text, expected", [
        ("0", 0.0),
        ("42", 42.0),
        ("-0.25", -0.25),
        ("5.", 5.0),
        ("1.0000e+11", 1e11),
        ("5.0000e-8", 5e-8),
        ("1.2e", 1.2),
        ("3.5.", 3.5),
    ])
    def test_numeric_prefix(self, text, expected):
        assert parse_display(text) == expected

    @pytest.mark.parametrize("text", ["-", "Error", "", "."])
    def test_no_numeric_prefix_is_nan(self, text):
        assert math.isnan(parse_display(text))

    def test_parse_inverts_plain_format(self):
        for value in (0.5, -12.75, 3.0, 1e-6):
            assert parse_display(format_display(value)) == value


# ===================================================================
# BRANCH COVERAGE MATRIX
# ===================================================================

FORMAT_BRANCH_COVERAGE = {
    "FMT-INVALID": [
        "TestInvalid::test_fmt_invalid_raises",
    ],
    "FMT-SCI": [
        "TestScientific::test_fmt_sci_large",
        "TestScientific::test_fmt_sci_small",
    ],
    "FMT-FIXED": [
        "TestFixed::test_fmt_fixed_strips_trailing_zeros",
    ],
    "FMT-INT": [
        "TestFixed::test_fmt_int_plain_integer",
    ],
}
