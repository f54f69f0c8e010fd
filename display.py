"""Display formatter for the 16-character calculator screen.

Converts numbers to the text the screen shows, choosing between fixed
and scientific notation and trimming precision so the text always fits.
Formatting is a pure function: a value that cannot be shown raises
``OverflowOrInvalidError`` and the caller decides what the screen does.

Branches: FMT-INVALID, FMT-SCI, FMT-FIXED, FMT-INT
"""
from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal

from contract import (
    DISPLAY_WIDTH,
    MANTISSA_DIGITS,
    in_scientific_range,
)
from errors import OverflowOrInvalidError

_NUMERIC_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def format_display(value: float) -> str:
    """Render *value* for the display.

    Raises ``OverflowOrInvalidError`` for NaN and infinities.
    """
    if not math.isfinite(value):                                  # FMT-INVALID
        raise OverflowOrInvalidError(value)
    value = float(value)

    if in_scientific_range(value):                                # FMT-SCI
        return _scientific(value)[:DISPLAY_WIDTH]

    text = _fixed(value)
    if "." in text:                                               # FMT-FIXED
        int_part, frac_part = text.split(".")
        if len(int_part) >= DISPLAY_WIDTH:
            return int_part[:DISPLAY_WIDTH]
        budget = DISPLAY_WIDTH - len(int_part) - 1
        frac_part = frac_part[:budget].rstrip("0")
        return f"{int_part}.{frac_part}" if frac_part else int_part

    return text[:DISPLAY_WIDTH]                                   # FMT-INT


def parse_display(text: str) -> float:
    """Read a display string back as a number.

    Takes the longest numeric prefix, so partially edited text such as
    ``"5."`` or ``"1.2e"`` still yields a value.  Text with no numeric
    prefix (``"-"``, ``"Error"``) reads as NaN.
    """
    match = _NUMERIC_PREFIX.match(text.strip())
    if match is None:
        return math.nan
    return float(match.group())


# -- internal helpers -------------------------------------------------------

def _scientific(value: float) -> str:
    """Mantissa with four fractional digits, exponent without zero padding.

    The mantissa is rounded from the exact binary value with ties away
    from zero, so 10000500000 shows as 1.0001e+10.
    """
    exact = Decimal(value)
    exponent = exact.adjusted()
    rounded = _round_mantissa(exact, exponent)
    if rounded.adjusted() > exponent:
        # 9.99995 rounded up to 10.0000
        exponent += 1
        rounded = _round_mantissa(exact, exponent)
    sign, digits, _ = rounded.as_tuple()
    mantissa = "".join(map(str, digits))
    return (
        f"{'-' if sign else ''}{mantissa[0]}.{mantissa[1:]}"
        f"e{'+' if exponent >= 0 else '-'}{abs(exponent)}"
    )


def _round_mantissa(exact: Decimal, exponent: int) -> Decimal:
    step = Decimal(1).scaleb(exponent - MANTISSA_DIGITS)
    return exact.quantize(step, rounding=ROUND_HALF_UP)


def _fixed(value: float) -> str:
    """Shortest round-trip digits of *value* in positional notation."""
    if value == 0:
        return "0"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")
