"""FastAPI REST endpoints for driving calculators.

Routes
------
POST   /calculators                 Mount a new calculator
GET    /calculators                 List calculators
GET    /calculators/{id}            Read a calculator's view
POST   /calculators/{id}/actions    Apply one button action
POST   /calculators/{id}/keys       Apply one key press
DELETE /calculators/{id}            Unmount a calculator

A computation error is not an HTTP error: it is the calculator's
``"Error"`` display, returned with status 200 like any other view.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from models import Action, CalculatorView, KeyPress, KeyPressResult
from store import CalculatorNotFoundError, CalculatorStore

router = APIRouter(prefix="/calculators", tags=["calculators"])

# The store instance is injected by the app factory (see app.py).
_store: CalculatorStore | None = None


def set_store(store: CalculatorStore) -> None:
    """Inject the store instance. Called once at app startup."""
    global _store
    _store = store


def get_store() -> CalculatorStore:
    assert _store is not None, "Store not initialized"
    return _store


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

class CalculatorListResponse(BaseModel):
    items: list[CalculatorView]
    total: int


def _not_found(calculator_id: str) -> HTTPException:
    return HTTPException(
        status_code=404, detail=f"Calculator not found: {calculator_id}"
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=CalculatorView, status_code=201)
def mount_calculator() -> CalculatorView:
    """Mount a new calculator in its initial state."""
    return get_store().mount().view()


@router.get("", response_model=CalculatorListResponse)
def list_calculators(
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(default=50, ge=1, le=200, description="Pagination limit"),
) -> CalculatorListResponse:
    """List mounted calculators."""
    store = get_store()
    items = [m.view() for m in store.list(offset=offset, limit=limit)]
    return CalculatorListResponse(items=items, total=store.count())


@router.get("/{calculator_id}", response_model=CalculatorView)
def get_calculator(calculator_id: str) -> CalculatorView:
    """Read a single calculator's view."""
    try:
        return get_store().get(calculator_id).view()
    except CalculatorNotFoundError:
        raise _not_found(calculator_id)


@router.post("/{calculator_id}/actions", response_model=CalculatorView)
def apply_action(calculator_id: str, action: Action) -> CalculatorView:
    """Apply one button action and return the new view."""
    try:
        return get_store().apply(calculator_id, action).view()
    except CalculatorNotFoundError:
        raise _not_found(calculator_id)


@router.post("/{calculator_id}/keys", response_model=KeyPressResult)
def press_key(calculator_id: str, payload: KeyPress) -> KeyPressResult:
    """Apply a key press through the keyboard bindings."""
    try:
        mounted, handled = get_store().press_key(calculator_id, payload.key)
    except CalculatorNotFoundError:
        raise _not_found(calculator_id)
    return KeyPressResult(handled=handled, calculator=mounted.view())


@router.delete("/{calculator_id}", response_model=CalculatorView)
def unmount_calculator(calculator_id: str) -> CalculatorView:
    """Unmount a calculator and return its final view."""
    try:
        return get_store().unmount(calculator_id).view()
    except CalculatorNotFoundError:
        raise _not_found(calculator_id)
