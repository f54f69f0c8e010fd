"""Error taxonomy for calculator computations.

Every failure the calculator can hit while computing a value is one of
three kinds.  All of them collapse to the same user-visible state (the
``"Error"`` display), but keeping them distinct lets tests and the
validation tools assert *why* a computation failed.
"""
from __future__ import annotations


class CalculatorError(ArithmeticError):
    """Base class for every error raised while computing a display value."""


class DivisionByZeroError(CalculatorError, ZeroDivisionError):
    """Raised on ``÷`` or ``1/x`` with a zero divisor."""

    def __init__(self, message: str = "division by zero") -> None:
        super().__init__(message)


class DomainError(CalculatorError, ValueError):
    """Raised when a function argument lies outside its domain."""

    def __init__(self, function: str, value: float) -> None:
        self.function = function
        self.value = value
        super().__init__(f"{function}: argument {value!r} outside domain")


class OverflowOrInvalidError(CalculatorError, OverflowError):
    """Raised when a result is NaN, infinite or too large to represent."""

    def __init__(self, value: float | str) -> None:
        self.value = value
        super().__init__(f"result {value!r} is not a finite number")
