"""Data models shared by the drug resolver and interaction aggregator."""

from dataclasses import dataclass
from typing import Any

from app.schemas.base import Severity

DEFAULT_DESCRIPTION = "No description available."

# Upstream severity vocabulary (lower-cased) -> normalized severity
_SEVERITY_MAP: dict[str, Severity] = {
    "high": Severity.HIGH,
    "major": Severity.HIGH,
    "severe": Severity.HIGH,
    "contraindicated": Severity.HIGH,
    "moderate": Severity.MODERATE,
    "medium": Severity.MODERATE,
    "low": Severity.LOW,
    "minor": Severity.LOW,
}


@dataclass(frozen=True)
class DrugIdentity:
    """A drug resolved against RxNorm."""

    id: str  # RxCUI
    name: str  # Display name


@dataclass(frozen=True)
class InteractionRecord:
    """An interaction between two drugs of one request."""

    source_id: str
    target_id: str
    severity: Severity
    description: str

    @property
    def pair_key(self) -> str:
        return pair_key(self.source_id, self.target_id)


def pair_key(id_a: str, id_b: str) -> str:
    """Order-independent key for a pair of drug ids."""
    first, second = sorted([id_a, id_b])
    return f"{first}-{second}"


def normalize_severity(severity: Any) -> Severity:
    """Lower-case an upstream severity, defaulting to moderate.

    Values outside the known vocabulary (e.g. RxNav's "N/A") are treated
    as missing, as are non-string values.
    """
    if not isinstance(severity, str) or not severity.strip():
        return Severity.MODERATE
    return _SEVERITY_MAP.get(severity.strip().lower(), Severity.MODERATE)


def normalize_description(description: Any) -> str:
    """Strip an upstream description, substituting the placeholder if blank."""
    if isinstance(description, str) and description.strip():
        return description.strip()
    return DEFAULT_DESCRIPTION
