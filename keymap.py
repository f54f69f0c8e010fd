"""Keyboard bindings: physical key names to calculator actions.

Key names follow the DOM ``KeyboardEvent.key`` spelling the front end
forwards (``"Enter"``, ``"Backspace"``, ``"Escape"``...).  The mapping is
a pure pass-through; every key triggers exactly one engine action.
"""
from __future__ import annotations

from engine import Calculator

# key -> (action, argument)
KEY_BINDINGS: dict[str, tuple[str, str | None]] = {
    **{d: ("digit", d) for d in "0123456789"},
    ".": ("decimal_point", None),
    "+": ("operator", "+"),
    "-": ("operator", "-"),
    "*": ("operator", "*"),
    "/": ("operator", "/"),
    "Enter": ("equals", None),
    "=": ("equals", None),
    "Backspace": ("backspace", None),
    "Delete": ("clear_entry", None),
    "Escape": ("all_clear", None),
}


def binding_for(key: str) -> tuple[str, str | None] | None:
    """Return the ``(action, argument)`` bound to *key*, or None."""
    return KEY_BINDINGS.get(key)


def dispatch_key(calculator: Calculator, key: str) -> bool:
    """Apply the action bound to *key*.

    Returns False, leaving the calculator untouched, for unbound keys.
    """
    binding = binding_for(key)
    if binding is None:
        return False
    action, argument = binding
    calculator.dispatch(action, argument)
    return True
