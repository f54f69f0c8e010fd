"""Property-based tests using Hypothesis.

These tests verify properties that must hold for *all* inputs: every
finite number formats into the display, every button sequence keeps the
state consistent, and arithmetic on typed integers is exact.  They
complement the white-box tests by exploring the input space broadly
rather than targeting specific branches.
"""
from __future__ import annotations

from hypothesis import HealthCheck, assume, given, settings
from hypothesis import strategies as st

from contract import DISPLAY_WIDTH, build_contract, in_scientific_range
from display import format_display, parse_display
from engine import Calculator
from validation.counterexample_search import all_actions

CONTRACT = build_contract()

finite = st.floats(allow_nan=False, allow_infinity=False)
magnitude = st.floats(min_value=1e-7, max_value=9_999_999_999)
fixed_range = st.one_of(
    st.just(0.0),
    magnitude,
    magnitude.map(lambda m: -m),
)
operand = st.integers(min_value=0, max_value=99_999)
digit_text = st.text(alphabet="0123456789", min_size=1, max_size=DISPLAY_WIDTH)
actions = st.lists(st.sampled_from(all_actions()), max_size=60)


def _type(calc: Calculator, keys: str) -> None:
    for key in keys:
        if key.isdigit():
            calc.enter_digit(key)
        else:
            calc.select_operator(key)


# ===================================================================
# DISPLAY FORMATTER
# ===================================================================

class TestFormatterProperties:

    @given(x=finite)
    def test_fits_display(self, x):
        assert len(format_display(x)) <= DISPLAY_WIDTH

    @given(x=finite)
    def test_notation_choice(self, x):
        assert ("e" in format_display(x)) == in_scientific_range(x)

    @given(x=fixed_range)
    @settings(max_examples=500)
    def test_fixed_output_is_stable(self, x):
        """Reformatting plain fixed output reproduces it."""
        out = format_display(x)
        assert "e" not in out
        assert format_display(parse_display(out)) == out

    @given(x=fixed_range)
    def test_fixed_output_never_grows(self, x):
        out = format_display(x)
        assert abs(parse_display(out)) <= abs(x)

    @given(x=finite)
    def test_scientific_negation_mirrors_sign(self, x):
        assume(x > 0 and in_scientific_range(x))
        assert format_display(-x) == "-" + format_display(x)


# ===================================================================
# DIGIT ENTRY
# ===================================================================

class TestEntryProperties:

    @given(digits=digit_text)
    def test_digits_reproduced(self, digits):
        calc = Calculator()
        _type(calc, digits)
        assert calc.state.display == (digits.lstrip("0") or "0")

    @given(digits=st.text(alphabet="123456789", min_size=17, max_size=30))
    def test_digits_capped(self, digits):
        calc = Calculator()
        _type(calc, digits)
        assert calc.state.display == digits[:DISPLAY_WIDTH]


# ===================================================================
# ARITHMETIC
# ===================================================================

class TestArithmeticProperties:

    @given(a=operand, b=operand)
    def test_addition(self, a, b):
        calc = Calculator()
        _type(calc, f"{a}+{b}")
        assert calc.calculate().display == str(a + b)

    @given(a=operand, b=operand)
    def test_subtraction(self, a, b):
        calc = Calculator()
        _type(calc, f"{a}-{b}")
        assert calc.calculate().display == str(a - b)

    @given(a=operand, b=operand)
    def test_multiplication(self, a, b):
        calc = Calculator()
        _type(calc, f"{a}×{b}")
        assert calc.calculate().display == format_display(float(a * b))

    @given(a=operand, b=operand, c=operand)
    def test_left_to_right(self, a, b, c):
        calc = Calculator()
        _type(calc, f"{a}-{b}+{c}")
        assert calc.calculate().display == str(a - b + c)

    @given(a=operand)
    def test_division_by_zero(self, a):
        calc = Calculator()
        _type(calc, f"{a}÷0")
        state = calc.calculate()
        assert state.error and state.display == "Error"


# ===================================================================
# STATE INVARIANTS
# ===================================================================

class TestStateProperties:

    @given(sequence=actions)
    @settings(max_examples=300, suppress_health_check=[HealthCheck.too_slow])
    def test_invariants_hold(self, sequence):
        calc = Calculator()
        for action, argument in sequence:
            calc.dispatch(action, argument)
            assert not CONTRACT.violated_invariants(calc.state), (
                f"after {action}({argument}): {calc.state!r}"
            )

    @given(sequence=actions)
    def test_all_clear_keeps_registers(self, sequence):
        calc = Calculator()
        for action, argument in sequence:
            calc.dispatch(action, argument)
        before = calc.state
        after = calc.all_clear()
        assert after.memory == before.memory
        assert after.angle_mode == before.angle_mode
        assert after.modifier == before.modifier
        assert after.display == "0" and not after.error

    @given(sequence=actions)
    def test_backspace_never_empties(self, sequence):
        calc = Calculator()
        for action, argument in sequence:
            calc.dispatch(action, argument)
        for _ in range(DISPLAY_WIDTH + 2):
            assert calc.backspace().display != ""
