"""In-memory registry of mounted calculators.

Each entry is one widget's engine.  Entries live until they are
unmounted; nothing is persisted.  All input goes through the store,
which keeps the timestamp bookkeeping.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from engine import Calculator
from keymap import dispatch_key
from models import Action, CalculatorView, _new_id, _utcnow

logger = logging.getLogger(__name__)


class CalculatorNotFoundError(Exception):
    """Raised when a calculator lookup fails."""

    def __init__(self, calculator_id: str) -> None:
        self.calculator_id = calculator_id
        super().__init__(f"Calculator not found: {calculator_id}")


@dataclass
class MountedCalculator:
    id: str
    calculator: Calculator = field(default_factory=Calculator)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def view(self) -> CalculatorView:
        return CalculatorView.from_state(
            self.id, self.calculator.state, self.created_at, self.updated_at
        )


class CalculatorStore:
    """In-memory store of calculator instances."""

    def __init__(self) -> None:
        self._calculators: dict[str, MountedCalculator] = {}

    def mount(self) -> MountedCalculator:
        """Create a calculator in its initial state."""
        now = _utcnow()
        mounted = MountedCalculator(id=_new_id(), created_at=now, updated_at=now)
        self._calculators[mounted.id] = mounted
        logger.info("mounted calculator %s", mounted.id)
        return mounted

    def get(self, calculator_id: str) -> MountedCalculator:
        """Retrieve a calculator by id."""
        try:
            return self._calculators[calculator_id]
        except KeyError:
            raise CalculatorNotFoundError(calculator_id) from None

    def list(self, *, offset: int = 0, limit: int = 50) -> list[MountedCalculator]:
        """List calculators, most recently mounted first."""
        items = sorted(
            self._calculators.values(), key=lambda m: m.created_at, reverse=True
        )
        return items[offset : offset + limit]

    def apply(self, calculator_id: str, action: Action) -> MountedCalculator:
        """Apply one button action to a calculator."""
        mounted = self.get(calculator_id)
        mounted.calculator.dispatch(action.kind.value, action.argument)
        mounted.updated_at = _utcnow()
        return mounted

    def press_key(self, calculator_id: str, key: str) -> tuple[MountedCalculator, bool]:
        """Apply a key press.  Returns the calculator and whether the key was bound."""
        mounted = self.get(calculator_id)
        handled = dispatch_key(mounted.calculator, key)
        if handled:
            mounted.updated_at = _utcnow()
        return mounted, handled

    def unmount(self, calculator_id: str) -> MountedCalculator:
        """Remove a calculator and return its final record."""
        mounted = self.get(calculator_id)
        del self._calculators[calculator_id]
        logger.info("unmounted calculator %s", calculator_id)
        return mounted

    def count(self) -> int:
        return len(self._calculators)

    def clear(self) -> None:
        """Remove all calculators (useful for testing)."""
        self._calculators.clear()
