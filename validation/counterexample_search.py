"""Counterexample search - discovers gaps in implementation or tests.

This module runs independently of the test suite.  It searches for:

1. Invariant violations: random button sequences that drive a
   calculator into a state breaking a contract invariant.
2. Formatter violations: numbers across many magnitudes whose display
   text breaks a formatter property.
3. Transition property violations: small inputs, checked exhaustively,
   for which a behavioural property fails.

Run directly::

    python -m validation.counterexample_search
"""
from __future__ import annotations

import itertools
import random
import sys
from dataclasses import dataclass, field

from contract import (
    CalculatorContract,
    MemoryOp,
    Operator,
    ScientificFunction,
    build_contract,
)
from display import format_display
from engine import Calculator
from errors import OverflowOrInvalidError


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Counterexample:
    category: str
    subject: str
    inputs: tuple
    expected: str
    actual: str
    description: str


@dataclass
class SearchReport:
    counterexamples: list[Counterexample] = field(default_factory=list)
    checks_run: int = 0

    @property
    def passed(self) -> bool:
        return len(self.counterexamples) == 0

    def summary(self) -> str:
        lines = [
            "Counterexample Search Report",
            "=" * 40,
            f"Total checks: {self.checks_run}",
            f"Counterexamples found: {len(self.counterexamples)}",
        ]
        if self.counterexamples:
            lines.append("")
            for i, cx in enumerate(self.counterexamples, 1):
                lines.append(f"  [{i}] {cx.category} / {cx.subject}")
                lines.append(f"      Inputs:   {cx.inputs}")
                lines.append(f"      Expected: {cx.expected}")
                lines.append(f"      Actual:   {cx.actual}")
                lines.append(f"      {cx.description}")
        else:
            lines.append("\nNo counterexamples found - all checks passed.")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Input generation
# ---------------------------------------------------------------------------

def all_actions() -> list[tuple[str, str | None]]:
    """Every distinct button the calculator has, as (action, argument)."""
    actions: list[tuple[str, str | None]] = [("digit", d) for d in "0123456789"]
    actions += [("operator", op.value) for op in Operator]
    actions += [("function", fn.value) for fn in ScientificFunction]
    actions += [("memory", m.value) for m in MemoryOp]
    actions += [
        (name, None)
        for name in (
            "decimal_point", "equals", "clear_entry", "all_clear",
            "backspace", "shift", "alpha", "angle_mode", "ans",
        )
    ]
    return actions


def sample_values() -> list[float]:
    """Numbers spanning every formatter regime, with both signs."""
    mantissas = (1.0, 1.5, 3.14159265358979, 9.99999999999, 1 / 3)
    values = [0.0, -0.0]
    for m, exp in itertools.product(mantissas, range(-12, 16)):
        v = m * 10.0 ** exp
        values.extend((v, -v))
    return values


# ---------------------------------------------------------------------------
# Search functions
# ---------------------------------------------------------------------------

def search_invariant_violations(
    contract: CalculatorContract,
    sequences: int = 500,
    length: int = 40,
    seed: int = 0,
) -> tuple[list[Counterexample], int]:
    """Drive random button sequences and check every invariant after each step."""
    cxs: list[Counterexample] = []
    checks = 0
    rng = random.Random(seed)
    actions = all_actions()

    for _ in range(sequences):
        calc = Calculator()
        history: list[tuple[str, str | None]] = []
        for _ in range(length):
            action = rng.choice(actions)
            history.append(action)
            try:
                calc.dispatch(*action)
            except Exception as e:
                cxs.append(Counterexample(
                    category="unexpected_error",
                    subject=action[0],
                    inputs=tuple(history),
                    expected="no exception",
                    actual=f"{type(e).__name__}: {e}",
                    description="Transition raised instead of updating state",
                ))
                break
            checks += 1
            broken = contract.violated_invariants(calc.state)
            if broken:
                for inv in broken:
                    cxs.append(Counterexample(
                        category="invariant_violation",
                        subject=inv.name,
                        inputs=tuple(history),
                        expected=inv.description,
                        actual=repr(calc.state),
                        description=f"Invariant '{inv.name}' violated",
                    ))
                break

    return cxs, checks


def search_format_violations(
    contract: CalculatorContract,
) -> tuple[list[Counterexample], int]:
    """Check every formatter property over the sample values."""
    cxs: list[Counterexample] = []
    checks = 0

    for x in sample_values():
        try:
            out = format_display(x)
        except OverflowOrInvalidError as e:
            cxs.append(Counterexample(
                category="unexpected_error",
                subject="format_display",
                inputs=(x,),
                expected="display text",
                actual=f"{type(e).__name__}: {e}",
                description="Finite value rejected by the formatter",
            ))
            checks += 1
            continue

        for prop in contract.format_properties:
            if not prop.applies(x, out):
                continue
            checks += 1
            if not prop.check(x, out):
                cxs.append(Counterexample(
                    category="format_violation",
                    subject=prop.name,
                    inputs=(x,),
                    expected=prop.description,
                    actual=repr(out),
                    description=f"Formatter property '{prop.name}' violated",
                ))

    return cxs, checks


def search_transition_violations(
    contract: CalculatorContract,
    upper: int = 25,
) -> tuple[list[Counterexample], int]:
    """Exhaustively check transition properties over small inputs."""
    cxs: list[Counterexample] = []
    checks = 0

    for prop in contract.transition_properties:
        if prop.domain == "digits":
            inputs = (
                ("".join(p),)
                for n in range(1, 4)
                for p in itertools.product("0123456789", repeat=n)
            )
        else:
            inputs = itertools.product(range(upper), repeat=prop.arity)

        for args in inputs:
            checks += 1
            if not prop.check(Calculator(), *args):
                cxs.append(Counterexample(
                    category="property_violation",
                    subject=prop.name,
                    inputs=args,
                    expected=prop.description,
                    actual="property does not hold",
                    description=f"Property '{prop.name}' violated",
                ))

    return cxs, checks


# ---------------------------------------------------------------------------
# Top-level runner
# ---------------------------------------------------------------------------

def run_search(seed: int = 0) -> SearchReport:
    """Run the complete counterexample search."""
    contract = build_contract()
    report = SearchReport()

    for cxs, checks in (
        search_invariant_violations(contract, seed=seed),
        search_format_violations(contract),
        search_transition_violations(contract),
    ):
        report.counterexamples.extend(cxs)
        report.checks_run += checks

    return report


def main() -> None:
    seeds = [int(a) for a in sys.argv[1:]] or [0, 1, 2]

    all_passed = True
    for seed in seeds:
        print(f"\n--- Seed: {seed} ---")
        report = run_search(seed)
        print(report.summary())
        if not report.passed:
            all_passed = False

    print("\n" + "=" * 40)
    if all_passed:
        print("ALL SEEDS PASSED")
    else:
        print("SOME SEEDS HAD COUNTEREXAMPLES")
        sys.exit(1)


if __name__ == "__main__":
    main()
