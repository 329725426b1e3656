"""Base schemas and enums for the Drug Interaction Checker."""

from enum import Enum


class Severity(str, Enum):
    """Normalized severity of a drug-drug interaction."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class InteractionMode(str, Enum):
    """How the RxNav interaction API is queried."""

    PER_DRUG = "per_drug"  # One request per drug
    BATCH = "batch"  # One request carrying all rxcuis
