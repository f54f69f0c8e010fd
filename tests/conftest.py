"""Shared fixtures for calculator tests."""

from __future__ import annotations

from typing import Callable

import pytest
from fastapi.testclient import TestClient

from app import create_app
from engine import DIGITS, Calculator, CalculatorState
from store import CalculatorStore


def _press(calc: Calculator, keys: str) -> CalculatorState:
    """Type a button sequence such as ``"2+3×4="``."""
    for key in keys:
        if key in DIGITS:
            calc.enter_digit(key)
        elif key == ".":
            calc.enter_decimal_point()
        elif key == "=":
            calc.calculate()
        else:
            calc.select_operator(key)
    return calc.state


@pytest.fixture
def calc() -> Calculator:
    return Calculator()


@pytest.fixture
def press() -> Callable[[Calculator, str], CalculatorState]:
    return _press


@pytest.fixture
def errored(calc) -> Calculator:
    """A calculator showing the error left by ``1 ÷ 0 =``."""
    _press(calc, "1÷0=")
    assert calc.state.error
    return calc


@pytest.fixture
def store() -> CalculatorStore:
    return CalculatorStore()


@pytest.fixture
def client(store) -> TestClient:
    return TestClient(create_app(store=store))
