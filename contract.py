"""Formal contract for the calculator engine and its display formatter.

The contract is machine-readable.  Tests and the validation tools iterate
over it to check every invariant, formatter property and transition
property, and to cross-check branch coverage.

Layers
------
constants            display geometry and numeric limits
enums                operator, function, memory, modifier and angle vocabularies
StateInvariant       predicate every reachable ``CalculatorState`` satisfies
FormatProperty       predicate relating a number to its rendered display text
TransitionProperty   behavioural property of a sequence of user actions
BranchSpec           every decision point that white-box tests must cover
build_contract()     constructs the full ``CalculatorContract``
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DISPLAY_WIDTH = 16
SCIENTIFIC_UPPER = 1e10
SCIENTIFIC_LOWER = 1e-7
MANTISSA_DIGITS = 4
MAX_FACTORIAL = 170

INITIAL_DISPLAY = "0"
ERROR_DISPLAY = "Error"


# ---------------------------------------------------------------------------
# Vocabulary enums
# ---------------------------------------------------------------------------

class Operator(str, Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "×"
    DIVIDE = "÷"
    POWER = "^"

    @classmethod
    def _missing_(cls, value):
        # Keyboard spellings of the two symbols a keyboard does not have.
        return {"*": cls.MULTIPLY, "/": cls.DIVIDE}.get(value)


class ScientificFunction(str, Enum):
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LN = "ln"
    LOG = "log"
    SQRT = "sqrt"
    SQUARE = "x2"
    CUBE = "x3"
    RECIPROCAL = "1/x"
    EXP = "exp"
    PI = "pi"
    E = "e"
    ABS = "abs"
    FACTORIAL = "fact"
    SIN_SQUARED = "sin2"
    POW10 = "10x"
    TOGGLE_SIGN = "toggleSign"


TRIGONOMETRIC = frozenset(
    {ScientificFunction.SIN, ScientificFunction.COS, ScientificFunction.TAN}
)


class MemoryOp(str, Enum):
    ADD = "M+"
    SUBTRACT = "M-"
    RECALL = "MR"
    CLEAR = "MC"


class Modifier(str, Enum):
    NONE = "none"
    SHIFT = "shift"
    ALPHA = "alpha"


class AngleMode(str, Enum):
    DEGREES = "deg"
    RADIANS = "rad"


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StateInvariant:
    name: str
    description: str
    check: Callable[..., bool]      # (state) -> bool


@dataclass(frozen=True)
class FormatProperty:
    name: str
    description: str
    applies: Callable[[float, str], bool]
    check: Callable[[float, str], bool]


@dataclass(frozen=True)
class TransitionProperty:
    name: str
    description: str
    domain: str         # "digits" | "int" | "none": kind of free inputs
    arity: int          # how many free input values the check needs
    check: Callable[..., bool]      # (calc, *inputs) -> bool


@dataclass(frozen=True)
class BranchSpec:
    """A decision point in the implementation that must be exercised."""

    id: str
    description: str
    condition: str      # human-readable boolean expression
    operation: str      # which operation / helper this belongs to


@dataclass(frozen=True)
class CalculatorContract:
    """Complete contract for the calculator."""

    invariants: list[StateInvariant]
    format_properties: list[FormatProperty]
    transition_properties: list[TransitionProperty]
    branches: list[BranchSpec]

    @property
    def branch_ids(self) -> list[str]:
        return [b.id for b in self.branches]

    def violated_invariants(self, state) -> list[StateInvariant]:
        return [inv for inv in self.invariants if not inv.check(state)]


# ---------------------------------------------------------------------------
# Helpers used inside the contract predicates
# ---------------------------------------------------------------------------

def in_scientific_range(value: float) -> bool:
    """True when *value* must be rendered in scientific notation."""
    magnitude = abs(value)
    return magnitude >= SCIENTIFIC_UPPER or (
        value != 0 and magnitude < SCIENTIFIC_LOWER
    )


def _is_fixed(text: str) -> bool:
    return "e" not in text and text != ERROR_DISPLAY


def _press(calc, digits: str) -> None:
    for d in digits:
        calc.enter_digit(d)


def _press_number(calc, n: int) -> None:
    _press(calc, str(n))


# ---------------------------------------------------------------------------
# Transition property checks
# ---------------------------------------------------------------------------

def _digits_verbatim(calc, digits: str) -> bool:
    _press(calc, digits)
    expected = digits.lstrip("0") or "0"
    return calc.state.display == expected


def _addition(calc, a: int, b: int) -> bool:
    _press_number(calc, a)
    calc.select_operator(Operator.ADD)
    _press_number(calc, b)
    calc.calculate()
    return (
        calc.state.display == str(a + b)
        and calc.state.pending_operator is None
    )


def _left_to_right(calc, a: int, b: int, c: int) -> bool:
    _press_number(calc, a)
    calc.select_operator(Operator.ADD)
    _press_number(calc, b)
    calc.select_operator(Operator.MULTIPLY)
    _press_number(calc, c)
    calc.calculate()
    return calc.state.display == str((a + b) * c)


def _divide_by_zero(calc, a: int) -> bool:
    _press_number(calc, a)
    calc.select_operator(Operator.DIVIDE)
    calc.enter_digit("0")
    calc.calculate()
    return calc.state.error and calc.state.display == ERROR_DISPLAY


def _all_clear_keeps_registers(calc, a: int) -> bool:
    _press_number(calc, a)
    calc.memory_op(MemoryOp.ADD)
    calc.toggle_angle_mode()
    calc.toggle_shift()
    before = calc.state
    calc.all_clear()
    after = calc.state
    return (
        after.memory == before.memory
        and after.angle_mode == before.angle_mode
        and after.modifier == before.modifier
        and after.display == INITIAL_DISPLAY
        and after.pending_operand is None
        and not after.reset_on_next_input
        and not after.error
    )


def _backspace_never_empty(calc, a: int) -> bool:
    _press_number(calc, a)
    for _ in range(len(str(a)) + 2):
        calc.backspace()
        if calc.state.display == "":
            return False
    return calc.state.display == INITIAL_DISPLAY


def _factorial_matches(calc, n: int) -> bool:
    _press_number(calc, n)
    calc.invoke_function(ScientificFunction.FACTORIAL)
    if n > MAX_FACTORIAL:
        return calc.state.error
    return float(calc.state.display) == float(math.factorial(n)) or (
        "e" in calc.state.display
    )


def _memory_recall(calc, a: int) -> bool:
    _press_number(calc, a)
    calc.memory_op(MemoryOp.ADD)
    calc.all_clear()
    calc.memory_op(MemoryOp.RECALL)
    return calc.state.display == str(a) and calc.state.reset_on_next_input


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def build_contract() -> CalculatorContract:
    """Construct the full calculator contract."""

    invariants = [
        StateInvariant(
            "modifier_exclusive",
            "Shift and alpha are never active together",
            lambda s: not (s.shift_active and s.alpha_active),
        ),
        StateInvariant(
            "pending_pair_consistent",
            "Pending operand and operator are both set or both None",
            lambda s: (s.pending_operand is None) == (s.pending_operator is None),
        ),
        StateInvariant(
            "error_iff_sentinel",
            "error flag is set exactly when the display shows the sentinel",
            lambda s: s.error == (s.display == ERROR_DISPLAY),
        ),
        StateInvariant(
            "memory_is_number",
            "Memory register always holds a float, never the sentinel",
            lambda s: isinstance(s.memory, float),
        ),
        StateInvariant(
            "display_not_empty",
            "Display is never the empty string",
            lambda s: s.display != "",
        ),
    ]

    format_properties = [
        FormatProperty(
            "bounded_width",
            "Rendered text fits the display",
            lambda x, out: True,
            lambda x, out: len(out) <= DISPLAY_WIDTH,
        ),
        FormatProperty(
            "notation_choice",
            "Scientific notation exactly outside [1e-7, 1e10)",
            lambda x, out: True,
            lambda x, out: ("e" in out) == in_scientific_range(x),
        ),
        FormatProperty(
            "no_trailing_fraction_zeros",
            "Fixed output never ends in a zero fraction digit or a bare point",
            lambda x, out: _is_fixed(out) and "." in out,
            lambda x, out: not out.endswith("0") and not out.endswith("."),
        ),
        FormatProperty(
            "truncates_toward_zero",
            "Fixed output never exceeds the input in magnitude",
            lambda x, out: _is_fixed(out),
            lambda x, out: abs(float(out)) <= abs(x),
        ),
    ]

    transition_properties = [
        TransitionProperty(
            "digits_verbatim",
            "Typed digits appear verbatim, leading zeros replaced",
            "digits", 1, _digits_verbatim,
        ),
        TransitionProperty(
            "addition",
            "a + b = shows the sum and clears the pending operator",
            "int", 2, _addition,
        ),
        TransitionProperty(
            "left_to_right",
            "a + b × c = evaluates (a + b) × c",
            "int", 3, _left_to_right,
        ),
        TransitionProperty(
            "divide_by_zero",
            "a ÷ 0 = enters the error state",
            "int", 1, _divide_by_zero,
        ),
        TransitionProperty(
            "all_clear_keeps_registers",
            "AC never touches memory, angle mode or modifier",
            "int", 1, _all_clear_keeps_registers,
        ),
        TransitionProperty(
            "backspace_never_empty",
            "Backspace bottoms out at '0'",
            "int", 1, _backspace_never_empty,
        ),
        TransitionProperty(
            "factorial",
            "fact(n) equals n! up to 170 and errors above",
            "int", 1, _factorial_matches,
        ),
        TransitionProperty(
            "memory_recall",
            "MR after M+ and AC shows the stored value",
            "int", 1, _memory_recall,
        ),
    ]

    branches = [
        # Display formatter (format_display)
        BranchSpec("FMT-INVALID", "NaN or infinity rejected",
                   "not isfinite(value)", "format"),
        BranchSpec("FMT-SCI", "Scientific notation",
                   "abs >= 1e10 or 0 < abs < 1e-7", "format"),
        BranchSpec("FMT-FIXED", "Fixed notation with a fraction",
                   "fraction present", "format"),
        BranchSpec("FMT-INT", "Fixed notation, integer only",
                   "no fraction", "format"),
        # Digit entry
        BranchSpec("DIGIT-ERROR", "Digit replaces the error sentinel",
                   "error", "enter_digit"),
        BranchSpec("DIGIT-REPLACE", "Digit replaces '0' or a finished value",
                   "display == '0' or reset_on_next_input", "enter_digit"),
        BranchSpec("DIGIT-CAP", "Digit ignored at the input cap",
                   "digit count >= 16", "enter_digit"),
        BranchSpec("DIGIT-APPEND", "Digit appended",
                   "otherwise", "enter_digit"),
        # Decimal point
        BranchSpec("DEC-ERROR", "Point replaces the error sentinel with '0.'",
                   "error", "enter_decimal_point"),
        BranchSpec("DEC-RESET", "Point starts a fresh '0.'",
                   "reset_on_next_input", "enter_decimal_point"),
        BranchSpec("DEC-APPEND", "Point appended",
                   "'.' not in display", "enter_decimal_point"),
        BranchSpec("DEC-NOOP", "Second point ignored",
                   "'.' in display", "enter_decimal_point"),
        # Operator selection
        BranchSpec("OP-ERROR", "Operator acknowledges an error, not armed",
                   "error", "select_operator"),
        BranchSpec("OP-CHAIN", "Pending operation evaluated first",
                   "pending and not reset_on_next_input", "select_operator"),
        BranchSpec("OP-ARM", "Operand and operator captured",
                   "otherwise", "select_operator"),
        # Equals
        BranchSpec("CALC-ERROR", "Equals acknowledges an error",
                   "error", "calculate"),
        BranchSpec("CALC-IDLE", "Nothing pending",
                   "pending_operator is None", "calculate"),
        BranchSpec("CALC-DIV-ZERO", "Division by exactly zero",
                   "op == ÷ and rhs == 0", "calculate"),
        BranchSpec("CALC-FAIL", "Non-finite result, pending pair kept",
                   "result not finite", "calculate"),
        BranchSpec("CALC-OK", "Result shown, pending pair cleared",
                   "otherwise", "calculate"),
        # Clearing
        BranchSpec("CE", "Clear entry keeps pending operation",
                   "always", "clear_entry"),
        BranchSpec("AC", "All clear keeps memory and modes",
                   "always", "all_clear"),
        BranchSpec("BS-ERROR", "Backspace acknowledges an error",
                   "error", "backspace"),
        BranchSpec("BS-SINGLE", "Backspace on one character shows '0'",
                   "len(display) == 1", "backspace"),
        BranchSpec("BS-DROP", "Backspace drops the last character",
                   "otherwise", "backspace"),
        # Functions
        BranchSpec("FN-ERROR", "Function key acknowledges an error",
                   "error", "invoke_function"),
        BranchSpec("FN-INVERSE", "Shift selects the inverse trig function",
                   "shift and trig", "invoke_function"),
        BranchSpec("FN-DOMAIN", "Argument outside the function's domain",
                   "domain violated", "invoke_function"),
        BranchSpec("FN-OK", "Result shown, shift released",
                   "otherwise", "invoke_function"),
        # Memory
        BranchSpec("MEM-ERROR", "Memory keys ignored in the error state",
                   "error", "memory_op"),
        BranchSpec("MEM-ADD", "M+ accumulates", "kind == M+", "memory_op"),
        BranchSpec("MEM-SUB", "M- accumulates", "kind == M-", "memory_op"),
        BranchSpec("MEM-RECALL", "MR shows memory", "kind == MR", "memory_op"),
        BranchSpec("MEM-CLEAR", "MC zeroes memory", "kind == MC", "memory_op"),
        # Modes
        BranchSpec("MOD-SHIFT", "Shift toggles and releases alpha",
                   "always", "toggle_shift"),
        BranchSpec("MOD-ALPHA", "Alpha toggles and releases shift",
                   "always", "toggle_alpha"),
        BranchSpec("ANGLE", "Angle mode flips", "always", "toggle_angle_mode"),
        BranchSpec("ANS", "Ans resumes editing the shown value",
                   "reset_on_next_input", "recall_ans"),
    ]

    return CalculatorContract(
        invariants=invariants,
        format_properties=format_properties,
        transition_properties=transition_properties,
        branches=branches,
    )
