"""Request and response models for the calculator HTTP surface.

A calculator here is one mounted widget: an engine instance the front end
drives with actions or key presses and whose view it renders.  This
module defines the data models only -- no calculator logic.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from contract import AngleMode, MemoryOp, Modifier, Operator, ScientificFunction
from engine import DIGITS, TRANSITIONS, CalculatorState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Action: one user input event
# ---------------------------------------------------------------------------

class ActionKind(str, Enum):
    DIGIT = "digit"
    DECIMAL_POINT = "decimal_point"
    OPERATOR = "operator"
    EQUALS = "equals"
    CLEAR_ENTRY = "clear_entry"
    ALL_CLEAR = "all_clear"
    BACKSPACE = "backspace"
    FUNCTION = "function"
    MEMORY = "memory"
    SHIFT = "shift"
    ALPHA = "alpha"
    ANGLE_MODE = "angle_mode"
    ANS = "ans"


_ARGUMENT_VOCABULARY: dict[ActionKind, type[Enum]] = {
    ActionKind.OPERATOR: Operator,
    ActionKind.FUNCTION: ScientificFunction,
    ActionKind.MEMORY: MemoryOp,
}


class Action(BaseModel):
    """A button activation.

    `argument` carries the digit, operator symbol, function name or memory
    key for the kinds that need one, and must be omitted otherwise.
    """

    kind: ActionKind
    argument: str | None = Field(default=None, min_length=1, max_length=16)

    @model_validator(mode="after")
    def argument_matches_kind(self) -> Action:
        _, takes_argument = TRANSITIONS[self.kind.value]
        if not takes_argument:
            if self.argument is not None:
                raise ValueError(f"{self.kind.value!r} takes no argument")
            return self
        if self.argument is None:
            raise ValueError(f"{self.kind.value!r} requires an argument")

        if self.kind == ActionKind.DIGIT:
            if len(self.argument) != 1 or self.argument not in DIGITS:
                raise ValueError(f"Not a digit: {self.argument!r}")
            return self

        vocabulary = _ARGUMENT_VOCABULARY[self.kind]
        try:
            vocabulary(self.argument)
        except ValueError:
            raise ValueError(
                f"Unknown {self.kind.value} argument: {self.argument!r}"
            ) from None
        return self


class KeyPress(BaseModel):
    """A physical key, named as in ``KeyboardEvent.key``."""

    key: str = Field(..., min_length=1, max_length=32)


# ---------------------------------------------------------------------------
# CalculatorView: what the presentation layer renders
# ---------------------------------------------------------------------------

class CalculatorView(BaseModel):
    """Read-only view of one calculator."""

    id: str
    display: str
    memory_indicator_active: bool
    angle_mode: AngleMode
    modifier: Modifier
    shift_active: bool
    alpha_active: bool
    error: bool
    pending_operator: Operator | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_state(
        cls,
        calculator_id: str,
        state: CalculatorState,
        created_at: datetime,
        updated_at: datetime,
    ) -> CalculatorView:
        return cls(
            id=calculator_id,
            display=state.display,
            memory_indicator_active=state.memory_indicator_active,
            angle_mode=state.angle_mode,
            modifier=state.modifier,
            shift_active=state.shift_active,
            alpha_active=state.alpha_active,
            error=state.error,
            pending_operator=state.pending_operator,
            created_at=created_at,
            updated_at=updated_at,
        )


class KeyPressResult(BaseModel):
    handled: bool
    calculator: CalculatorView
