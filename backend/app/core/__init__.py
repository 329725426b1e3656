"""Core application configuration and utilities."""

from app.core.config import Settings, settings
from app.core.exceptions import (
    DrugCheckerError,
    DrugNotFoundError,
    DrugSearchError,
    InteractionLookupError,
    InvalidQueryError,
    RxNormError,
)

__all__ = [
    # Config
    "Settings",
    "settings",
    # Errors
    "DrugCheckerError",
    "DrugNotFoundError",
    "DrugSearchError",
    "InteractionLookupError",
    "InvalidQueryError",
    "RxNormError",
]
