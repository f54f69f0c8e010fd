"""FastAPI application for the calculator widgets.

Serve with::

    uvicorn app:app
"""

from __future__ import annotations

from fastapi import FastAPI

from api import router, set_store
from store import CalculatorStore


def create_app(store: CalculatorStore | None = None) -> FastAPI:
    """Wire the calculator router to *store* (a fresh one when omitted)."""
    set_store(store if store is not None else CalculatorStore())

    application = FastAPI(
        title="Scientific Calculator API",
        description=(
            "Drives on-screen scientific calculators. Each mounted calculator "
            "keeps its own display, pending operation, modifier keys, angle "
            "mode and memory register; the front end sends button actions or "
            "key presses and renders the returned view."
        ),
        version="0.1.0",
    )
    application.include_router(router)
    return application


app = create_app()
