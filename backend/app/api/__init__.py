"""API routers for the Drug Interaction Checker."""

from app.api.drugs import router as drugs_router

__all__ = [
    "drugs_router",
]
