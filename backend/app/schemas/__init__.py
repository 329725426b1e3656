"""Pydantic schemas for the Drug Interaction Checker."""

from app.schemas.base import InteractionMode, Severity
from app.schemas.drug import Drug, Interaction, InteractionCheckRequest

__all__ = [
    # Base
    "InteractionMode",
    "Severity",
    # Drug
    "Drug",
    "Interaction",
    "InteractionCheckRequest",
]
