"""Calculator engine: the input and evaluation state machine.

All state lives in one immutable ``CalculatorState``.  Every user action
is a total function from the current state (plus the action's argument)
to the next state.  Computation failures never escape a transition: they
are caught here and turned into the ``"Error"`` display.  Decision
branches are annotated with their branch-IDs (see contract.py
BranchSpec) so white-box tests can trace coverage back to the contract.

``Calculator`` is the single owner of a state for one widget and exposes
one method per action.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Callable

from contract import (
    DISPLAY_WIDTH,
    ERROR_DISPLAY,
    INITIAL_DISPLAY,
    MAX_FACTORIAL,
    TRIGONOMETRIC,
    AngleMode,
    MemoryOp,
    Modifier,
    Operator,
    ScientificFunction,
)
from display import format_display, parse_display
from errors import (
    CalculatorError,
    DivisionByZeroError,
    DomainError,
    OverflowOrInvalidError,
)

logger = logging.getLogger(__name__)

DIGITS = frozenset("0123456789")


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalculatorState:
    display: str = INITIAL_DISPLAY
    pending_operand: str | None = None
    pending_operator: Operator | None = None
    reset_on_next_input: bool = False
    modifier: Modifier = Modifier.NONE
    angle_mode: AngleMode = AngleMode.DEGREES
    memory: float = 0.0
    error: bool = False

    @property
    def shift_active(self) -> bool:
        return self.modifier is Modifier.SHIFT

    @property
    def alpha_active(self) -> bool:
        return self.modifier is Modifier.ALPHA

    @property
    def memory_indicator_active(self) -> bool:
        return self.memory != 0


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

def _guarded(name: str, fn: Callable[..., float], *args: float) -> float:
    """Call a ``math`` function, translating its errors to ours."""
    try:
        return fn(*args)
    except OverflowError as e:
        raise OverflowOrInvalidError(math.inf) from e
    except ValueError as e:
        raise DomainError(name, args[0]) from e


def to_radians(x: float, angle_mode: AngleMode) -> float:
    return x if angle_mode is AngleMode.RADIANS else x * (math.pi / 180)


def from_radians(x: float, angle_mode: AngleMode) -> float:
    return x if angle_mode is AngleMode.RADIANS else x * (180 / math.pi)


def factorial(n: float) -> float:
    """n! by repeated multiplication, for integral 0 <= n <= 170."""
    if n < 0 or not float(n).is_integer():
        raise DomainError("fact", n)
    if n > MAX_FACTORIAL:
        raise OverflowOrInvalidError(n)
    result = 1.0
    for k in range(2, int(n) + 1):
        result *= k
    return result


def apply_operator(op: Operator, lhs: float, rhs: float) -> float:
    """Binary arithmetic.  Raises ``DivisionByZeroError`` for ``x ÷ 0``."""
    if op is Operator.ADD:
        return lhs + rhs
    if op is Operator.SUBTRACT:
        return lhs - rhs
    if op is Operator.MULTIPLY:
        return lhs * rhs
    if op is Operator.DIVIDE:
        if rhs == 0:                                              # CALC-DIV-ZERO
            raise DivisionByZeroError()
        return lhs / rhs
    return _guarded("^", math.pow, lhs, rhs)


_FORWARD = {
    ScientificFunction.SIN: math.sin,
    ScientificFunction.COS: math.cos,
    ScientificFunction.TAN: math.tan,
}

_INVERSE = {
    ScientificFunction.SIN: math.asin,
    ScientificFunction.COS: math.acos,
    ScientificFunction.TAN: math.atan,
}


def apply_function(
    func: ScientificFunction,
    x: float,
    *,
    inverse: bool = False,
    angle_mode: AngleMode = AngleMode.DEGREES,
) -> float:
    """Evaluate a function key on *x*.

    *inverse* selects asin/acos/atan for the trigonometric keys and is
    ignored for every other key.

    Branches: FN-INVERSE, FN-DOMAIN
    """
    name = func.value

    if func in TRIGONOMETRIC:
        if inverse:                                               # FN-INVERSE
            radians = _guarded(f"a{name}", _INVERSE[func], x)
            return from_radians(radians, angle_mode)
        return _guarded(name, _FORWARD[func], to_radians(x, angle_mode))

    if func in (ScientificFunction.LN, ScientificFunction.LOG):
        if x <= 0:                                                # FN-DOMAIN
            raise DomainError(name, x)
        return math.log(x) if func is ScientificFunction.LN else math.log10(x)
    if func is ScientificFunction.SQRT:
        if x < 0:                                                 # FN-DOMAIN
            raise DomainError(name, x)
        return math.sqrt(x)
    if func is ScientificFunction.SQUARE:
        return _guarded(name, math.pow, x, 2)
    if func is ScientificFunction.CUBE:
        return _guarded(name, math.pow, x, 3)
    if func is ScientificFunction.RECIPROCAL:
        if x == 0:
            raise DivisionByZeroError()
        return 1 / x
    if func is ScientificFunction.EXP:
        return _guarded(name, math.exp, x)
    if func is ScientificFunction.PI:
        return math.pi
    if func is ScientificFunction.E:
        return math.e
    if func is ScientificFunction.ABS:
        return abs(x)
    if func is ScientificFunction.FACTORIAL:
        return factorial(x)
    if func is ScientificFunction.SIN_SQUARED:
        return _guarded(name, math.sin, to_radians(x, angle_mode)) ** 2
    if func is ScientificFunction.POW10:
        return _guarded(name, math.pow, 10, x)
    return -x                                                     # toggleSign


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _acknowledge(state: CalculatorState) -> CalculatorState:
    """Leave the error state with a fresh ``"0"``."""
    return replace(state, display=INITIAL_DISPLAY, error=False)


def _fail(
    state: CalculatorState, action: str, error: CalculatorError
) -> CalculatorState:
    logger.debug("%s failed: %s: %s", action, type(error).__name__, error)
    return replace(state, display=ERROR_DISPLAY, error=True)


def _digit_count(display: str) -> int:
    return len(display.replace("-", "").replace(".", ""))


def enter_digit(state: CalculatorState, digit: str) -> CalculatorState:
    """Branches: DIGIT-ERROR, DIGIT-REPLACE, DIGIT-CAP, DIGIT-APPEND"""
    if len(digit) != 1 or digit not in DIGITS:
        raise ValueError(f"not a digit: {digit!r}")

    if state.error:                                               # DIGIT-ERROR
        return replace(state, display=digit, error=False)
    if state.display == INITIAL_DISPLAY or state.reset_on_next_input:  # DIGIT-REPLACE
        return replace(state, display=digit, reset_on_next_input=False)
    if _digit_count(state.display) >= DISPLAY_WIDTH:              # DIGIT-CAP
        return state
    return replace(state, display=state.display + digit)          # DIGIT-APPEND


def enter_decimal_point(state: CalculatorState) -> CalculatorState:
    """Branches: DEC-ERROR, DEC-RESET, DEC-APPEND, DEC-NOOP"""
    if state.error:                                               # DEC-ERROR
        return replace(state, display="0.", error=False)
    if state.reset_on_next_input:                                 # DEC-RESET
        return replace(state, display="0.", reset_on_next_input=False)
    if "." not in state.display:                                  # DEC-APPEND
        return replace(state, display=state.display + ".")
    return state                                                  # DEC-NOOP


def calculate(state: CalculatorState) -> CalculatorState:
    """Evaluate the pending operation against the display (equals).

    A failure leaves the pending operand and operator in place, so a
    later equals can reuse them.

    Branches: CALC-ERROR, CALC-IDLE, CALC-DIV-ZERO, CALC-FAIL, CALC-OK
    """
    if state.error:                                               # CALC-ERROR
        return _acknowledge(state)
    if state.pending_operator is None or state.pending_operand is None:
        return state                                              # CALC-IDLE

    op = state.pending_operator
    lhs = parse_display(state.pending_operand)
    rhs = parse_display(state.display)
    try:
        text = format_display(apply_operator(op, lhs, rhs))
    except CalculatorError as e:                                  # CALC-FAIL
        return _fail(state, f"{lhs!r} {op.value} {rhs!r}", e)

    return replace(                                               # CALC-OK
        state,
        display=text,
        pending_operand=None,
        pending_operator=None,
        reset_on_next_input=True,
    )


def select_operator(state: CalculatorState, op: Operator | str) -> CalculatorState:
    """Arm a binary operator, evaluating a pending one first.

    Evaluation is strictly left to right: ``2 + 3 × 4 =`` is 20.
    If that evaluation fails the error is shown, the new operator is not
    armed and the old pending pair is kept.

    Branches: OP-ERROR, OP-CHAIN, OP-ARM
    """
    op = Operator(op)
    if state.error:                                               # OP-ERROR
        return _acknowledge(state)

    if state.pending_operator is not None and not state.reset_on_next_input:
        state = calculate(state)                                  # OP-CHAIN
        if state.error:
            return state

    return replace(                                               # OP-ARM
        state,
        pending_operand=state.display,
        pending_operator=op,
        reset_on_next_input=True,
    )


def clear_entry(state: CalculatorState) -> CalculatorState:
    """CE: blank the display only."""
    return _acknowledge(state)


def all_clear(state: CalculatorState) -> CalculatorState:
    """AC: reset the calculation.  Memory and modes survive."""
    return replace(
        state,
        display=INITIAL_DISPLAY,
        pending_operand=None,
        pending_operator=None,
        reset_on_next_input=False,
        error=False,
    )


def backspace(state: CalculatorState) -> CalculatorState:
    """Branches: BS-ERROR, BS-SINGLE, BS-DROP"""
    if state.error:                                               # BS-ERROR
        return _acknowledge(state)
    if len(state.display) == 1:                                   # BS-SINGLE
        return replace(state, display=INITIAL_DISPLAY)
    return replace(state, display=state.display[:-1])             # BS-DROP


def invoke_function(
    state: CalculatorState, func: ScientificFunction | str
) -> CalculatorState:
    """Apply a function key to the displayed value.

    Success releases shift (alpha is left alone) and ends the entry.

    Branches: FN-ERROR, FN-OK
    """
    func = ScientificFunction(func)
    if state.error:                                               # FN-ERROR
        return _acknowledge(state)

    x = parse_display(state.display)
    try:
        result = apply_function(
            func, x, inverse=state.shift_active, angle_mode=state.angle_mode
        )
        text = format_display(result)
    except CalculatorError as e:
        return _fail(state, f"{func.value}({x!r})", e)

    modifier = Modifier.NONE if state.shift_active else state.modifier
    return replace(                                               # FN-OK
        state, display=text, reset_on_next_input=True, modifier=modifier
    )


def memory_op(state: CalculatorState, kind: MemoryOp | str) -> CalculatorState:
    """M+, M-, MR and MC.  Ignored while the error is showing.

    An accumulation that would leave memory non-finite is refused with
    the error display and memory keeps its previous value.

    Branches: MEM-ERROR, MEM-ADD, MEM-SUB, MEM-RECALL, MEM-CLEAR
    """
    kind = MemoryOp(kind)
    if state.error:                                               # MEM-ERROR
        return state

    if kind is MemoryOp.CLEAR:                                    # MEM-CLEAR
        return replace(state, memory=0.0)

    if kind is MemoryOp.RECALL:                                   # MEM-RECALL
        try:
            text = format_display(state.memory)
        except CalculatorError as e:
            return _fail(state, kind.value, e)
        return replace(state, display=text, reset_on_next_input=True)

    value = parse_display(state.display)
    if kind is MemoryOp.ADD:                                      # MEM-ADD
        memory = state.memory + value
    else:                                                         # MEM-SUB
        memory = state.memory - value
    if not math.isfinite(memory):
        return _fail(state, kind.value, OverflowOrInvalidError(memory))
    return replace(state, memory=memory, reset_on_next_input=True)


def toggle_shift(state: CalculatorState) -> CalculatorState:
    """Branch: MOD-SHIFT"""
    modifier = Modifier.NONE if state.shift_active else Modifier.SHIFT
    return replace(state, modifier=modifier)


def toggle_alpha(state: CalculatorState) -> CalculatorState:
    """Branch: MOD-ALPHA"""
    modifier = Modifier.NONE if state.alpha_active else Modifier.ALPHA
    return replace(state, modifier=modifier)


def toggle_angle_mode(state: CalculatorState) -> CalculatorState:
    """Branch: ANGLE"""
    if state.angle_mode is AngleMode.DEGREES:
        return replace(state, angle_mode=AngleMode.RADIANS)
    return replace(state, angle_mode=AngleMode.DEGREES)


def recall_ans(state: CalculatorState) -> CalculatorState:
    """Ans: resume editing the displayed value.

    There is no separate last-answer register; the displayed value *is*
    the answer, so this only stops the next digit from replacing it.
    """
    if state.reset_on_next_input:                                 # ANS
        return replace(state, reset_on_next_input=False)
    return state


# ---------------------------------------------------------------------------
# Owner
# ---------------------------------------------------------------------------

# Action name -> (transition, takes an argument)
TRANSITIONS: dict[str, tuple[Callable[..., CalculatorState], bool]] = {
    "digit": (enter_digit, True),
    "decimal_point": (enter_decimal_point, False),
    "operator": (select_operator, True),
    "equals": (calculate, False),
    "clear_entry": (clear_entry, False),
    "all_clear": (all_clear, False),
    "backspace": (backspace, False),
    "function": (invoke_function, True),
    "memory": (memory_op, True),
    "shift": (toggle_shift, False),
    "alpha": (toggle_alpha, False),
    "angle_mode": (toggle_angle_mode, False),
    "ans": (recall_ans, False),
}


class Calculator:
    """Owns the state of one calculator widget."""

    def __init__(self, state: CalculatorState | None = None) -> None:
        self._state = state if state is not None else CalculatorState()

    @property
    def state(self) -> CalculatorState:
        return self._state

    def dispatch(self, action: str, argument: str | None = None) -> CalculatorState:
        """Apply the named action.  Raises ``ValueError`` for bad input."""
        try:
            transition, takes_argument = TRANSITIONS[action]
        except KeyError:
            raise ValueError(f"unknown action: {action!r}") from None
        if takes_argument:
            if argument is None:
                raise ValueError(f"action {action!r} needs an argument")
            self._state = transition(self._state, argument)
        else:
            self._state = transition(self._state)
        return self._state

    def enter_digit(self, digit: str) -> CalculatorState:
        return self.dispatch("digit", digit)

    def enter_decimal_point(self) -> CalculatorState:
        return self.dispatch("decimal_point")

    def select_operator(self, op: Operator | str) -> CalculatorState:
        return self.dispatch("operator", op)

    def calculate(self) -> CalculatorState:
        return self.dispatch("equals")

    def clear_entry(self) -> CalculatorState:
        return self.dispatch("clear_entry")

    def all_clear(self) -> CalculatorState:
        return self.dispatch("all_clear")

    def backspace(self) -> CalculatorState:
        return self.dispatch("backspace")

    def invoke_function(self, func: ScientificFunction | str) -> CalculatorState:
        return self.dispatch("function", func)

    def memory_op(self, kind: MemoryOp | str) -> CalculatorState:
        return self.dispatch("memory", kind)

    def toggle_shift(self) -> CalculatorState:
        return self.dispatch("shift")

    def toggle_alpha(self) -> CalculatorState:
        return self.dispatch("alpha")

    def toggle_angle_mode(self) -> CalculatorState:
        return self.dispatch("angle_mode")

    def recall_ans(self) -> CalculatorState:
        return self.dispatch("ans")
