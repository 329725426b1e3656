"""Local Interaction Catalog.

A static table of well-known drug-drug interactions used as an offline
fallback and supplement to the RxNav interaction API. Drug names are matched
by case-insensitive substring containment, so display names carrying
strengths or salts ("Aspirin 81mg", "Warfarin Sodium") still hit the base
entry.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from types import MappingProxyType
from typing import Any

from app.core.config import settings
from app.schemas.base import Severity
from app.services.drug_models import normalize_description, normalize_severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogInteraction:
    """Severity and description of a catalogued interaction."""

    severity: Severity
    description: str


@dataclass(frozen=True)
class CatalogEntry:
    """A catalogued drug with the names it is recognised by."""

    canonical_name: str
    aliases: tuple[str, ...]
    interactions: Mapping[str, CatalogInteraction] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def matches(self, name: str) -> bool:
        """True if any alias is a substring of the (lower-cased) name."""
        lowered = name.lower()
        return any(alias in lowered for alias in self.aliases)


# ============================================================================
# Catalog Data
# ============================================================================

# Canonical drug -> substrings it is recognised by (declaration order matters:
# the first matching pair wins on lookup)
DRUG_ALIASES: dict[str, tuple[str, ...]] = {
    "aspirin": ("aspirin", "acetylsalicylic"),
    "warfarin": ("warfarin", "coumadin", "jantoven"),
    "ibuprofen": ("ibuprofen", "advil", "motrin"),
    "naproxen": ("naproxen", "aleve"),
    "clopidogrel": ("clopidogrel", "plavix"),
    "omeprazole": ("omeprazole", "prilosec"),
    "simvastatin": ("simvastatin", "zocor"),
    "clarithromycin": ("clarithromycin", "biaxin"),
    "amiodarone": ("amiodarone", "cordarone"),
    "digoxin": ("digoxin", "lanoxin"),
    "lisinopril": ("lisinopril", "zestril", "prinivil"),
    "spironolactone": ("spironolactone", "aldactone"),
    "lithium": ("lithium",),
    "methotrexate": ("methotrexate",),
    "trimethoprim": ("trimethoprim", "bactrim"),
    "sertraline": ("sertraline", "zoloft"),
    "fluoxetine": ("fluoxetine", "prozac"),
    "tramadol": ("tramadol", "ultram"),
    "sildenafil": ("sildenafil", "viagra"),
    "nitroglycerin": ("nitroglycerin", "nitrostat"),
    "metformin": ("metformin", "glucophage"),
}

# (drug1, drug2, severity, description)
KNOWN_INTERACTIONS: list[tuple[str, str, Severity, str]] = [
    (
        "aspirin", "warfarin", Severity.HIGH,
        "Additive anticoagulant and antiplatelet effects significantly increase bleeding risk.",
    ),
    (
        "ibuprofen", "warfarin", Severity.HIGH,
        "NSAIDs inhibit platelet function and may raise warfarin levels; risk of GI hemorrhage.",
    ),
    (
        "naproxen", "warfarin", Severity.HIGH,
        "NSAIDs inhibit platelet function and may raise warfarin levels; risk of GI hemorrhage.",
    ),
    (
        "aspirin", "ibuprofen", Severity.MODERATE,
        "Ibuprofen may interfere with the cardioprotective antiplatelet effect of aspirin.",
    ),
    (
        "aspirin", "clopidogrel", Severity.MODERATE,
        "Dual antiplatelet therapy increases bleeding risk.",
    ),
    (
        "clopidogrel", "omeprazole", Severity.MODERATE,
        "Omeprazole inhibits CYP2C19 activation of clopidogrel, reducing its antiplatelet effect.",
    ),
    (
        "clarithromycin", "simvastatin", Severity.HIGH,
        "Clarithromycin strongly inhibits CYP3A4, raising simvastatin levels; rhabdomyolysis risk.",
    ),
    (
        "amiodarone", "simvastatin", Severity.HIGH,
        "Amiodarone increases simvastatin exposure; myopathy risk.",
    ),
    (
        "amiodarone", "warfarin", Severity.HIGH,
        "Amiodarone inhibits warfarin metabolism; INR rises markedly.",
    ),
    (
        "amiodarone", "digoxin", Severity.HIGH,
        "Amiodarone raises digoxin levels; risk of digoxin toxicity.",
    ),
    (
        "lisinopril", "spironolactone", Severity.HIGH,
        "Both drugs increase potassium retention; risk of severe hyperkalemia.",
    ),
    (
        "ibuprofen", "lithium", Severity.MODERATE,
        "NSAIDs reduce renal lithium clearance; risk of lithium toxicity.",
    ),
    (
        "lisinopril", "lithium", Severity.MODERATE,
        "ACE inhibitors reduce renal lithium clearance; risk of lithium toxicity.",
    ),
    (
        "methotrexate", "trimethoprim", Severity.HIGH,
        "Trimethoprim inhibits renal excretion of methotrexate; severe myelosuppression.",
    ),
    (
        "sertraline", "tramadol", Severity.HIGH,
        "Both drugs increase serotonin activity; serotonin syndrome and seizure risk.",
    ),
    (
        "fluoxetine", "tramadol", Severity.HIGH,
        "Both drugs increase serotonin activity; serotonin syndrome and seizure risk.",
    ),
    (
        "nitroglycerin", "sildenafil", Severity.HIGH,
        "Both drugs cause vasodilation via the nitric oxide pathway; severe hypotension.",
    ),
    (
        "metformin", "trimethoprim", Severity.LOW,
        "Trimethoprim may reduce renal metformin clearance; monitor glucose.",
    ),
]


def build_catalog_entries(
    aliases: Mapping[str, tuple[str, ...]],
    interactions: list[tuple[str, str, Severity, str]],
) -> tuple[CatalogEntry, ...]:
    """Build immutable catalog entries, indexing each interaction both ways.

    Args:
        aliases: Canonical drug name -> recognised substrings.
        interactions: (drug1, drug2, severity, description) tuples.

    Returns:
        Entries in alias declaration order.
    """
    by_drug: dict[str, dict[str, CatalogInteraction]] = {name: {} for name in aliases}

    for drug1, drug2, severity, description in interactions:
        if drug1 not in by_drug or drug2 not in by_drug:
            logger.warning(f"Skipping catalog interaction with unknown drug: {drug1} + {drug2}")
            continue
        interaction = CatalogInteraction(severity=severity, description=description)
        by_drug[drug1].setdefault(drug2, interaction)
        by_drug[drug2].setdefault(drug1, interaction)

    return tuple(
        CatalogEntry(
            canonical_name=name,
            aliases=tuple(alias.lower() for alias in names),
            interactions=MappingProxyType(by_drug[name]),
        )
        for name, names in aliases.items()
    )


def _parse_catalog_fixture(
    data: Any,
    aliases: dict[str, tuple[str, ...]],
    interactions: list[tuple[str, str, Severity, str]],
) -> int:
    """Merge a decoded fixture into the given tables, returning pairs added.

    Raises:
        ValueError: The fixture does not have the expected shape.
    """
    if not isinstance(data, dict):
        raise ValueError("fixture must be a JSON object")

    drugs = data.get("drugs", {})
    if not isinstance(drugs, dict):
        raise ValueError("'drugs' must be an object of name -> list of aliases")

    for name, names in drugs.items():
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError(f"aliases for '{name}' must be a list of strings")
        canonical = name.lower().strip()
        if canonical and canonical not in aliases:
            aliases[canonical] = tuple(n.lower().strip() for n in names if n.strip()) or (canonical,)

    items = data.get("interactions", [])
    if not isinstance(items, list):
        raise ValueError("'interactions' must be a list")

    known_pairs = {tuple(sorted([d1, d2])) for d1, d2, _, _ in interactions}
    added = 0
    for item in items:
        if not isinstance(item, dict):
            raise ValueError("each interaction must be an object")
        d1 = item.get("drug1", "")
        d2 = item.get("drug2", "")
        if not isinstance(d1, str) or not isinstance(d2, str):
            raise ValueError("'drug1' and 'drug2' must be strings")

        d1 = d1.lower().strip()
        d2 = d2.lower().strip()
        if not d1 or not d2 or d1 == d2:
            continue

        pair = tuple(sorted([d1, d2]))
        if pair in known_pairs:
            continue

        for drug in (d1, d2):
            aliases.setdefault(drug, (drug,))

        interactions.append((
            d1,
            d2,
            normalize_severity(item.get("severity")),
            normalize_description(item.get("description")),
        ))
        known_pairs.add(pair)
        added += 1

    return added


def load_catalog_fixture(
    fixture_file: Path,
    aliases: dict[str, tuple[str, ...]],
    interactions: list[tuple[str, str, Severity, str]],
) -> None:
    """Extend alias and interaction tables in place from a JSON fixture.

    Expected format::

        {
            "drugs": {"rivaroxaban": ["rivaroxaban", "xarelto"]},
            "interactions": [
                {"drug1": "rivaroxaban", "drug2": "aspirin",
                 "severity": "high", "description": "..."}
            ]
        }

    Built-in aliases and pairs are never overridden. A fixture that cannot
    be read or has the wrong shape is logged and leaves the tables unchanged.
    """
    if not fixture_file.exists():
        logger.warning(f"Interaction catalog fixture not found: {fixture_file}")
        return

    merged_aliases = dict(aliases)
    merged_interactions = list(interactions)
    try:
        with open(fixture_file, "r", encoding="utf-8") as f:
            data = json.load(f)
        added = _parse_catalog_fixture(data, merged_aliases, merged_interactions)
    except Exception as e:
        logger.warning(f"Failed to load interaction catalog fixture {fixture_file}: {e}")
        return

    aliases.clear()
    aliases.update(merged_aliases)
    interactions[:] = merged_interactions
    logger.info(f"Loaded {added} catalog interactions from {fixture_file}")


class InteractionCatalog:
    """Read-only lookup over the local interaction table.

    Usage:
        catalog = InteractionCatalog()
        hit = catalog.lookup("Aspirin 81mg", "Warfarin Sodium")
        if hit:
            print(hit.severity, hit.description)
    """

    def __init__(self, fixture_file: Path | None = None) -> None:
        """Initialize the catalog.

        Args:
            fixture_file: Optional JSON fixture extending the built-in table.
        """
        aliases = dict(DRUG_ALIASES)
        interactions = list(KNOWN_INTERACTIONS)
        if fixture_file is not None:
            load_catalog_fixture(fixture_file, aliases, interactions)

        self._entries = build_catalog_entries(aliases, interactions)
        logger.info(
            f"Interaction catalog initialized with {len(self._entries)} drugs, "
            f"{len(interactions)} interactions"
        )

    @property
    def entries(self) -> tuple[CatalogEntry, ...]:
        return self._entries

    def matching_entries(self, name: str) -> list[CatalogEntry]:
        """Entries whose aliases occur in the given name, in declaration order."""
        return [entry for entry in self._entries if entry.matches(name)]

    def lookup(self, name_a: str, name_b: str) -> CatalogInteraction | None:
        """Find a catalogued interaction between two drug names.

        Args:
            name_a: Display name of the first drug.
            name_b: Display name of the second drug.

        Returns:
            The first interaction found, or None.
        """
        if not name_a or not name_b:
            return None

        candidates_b = self.matching_entries(name_b)
        for entry_a in self.matching_entries(name_a):
            for entry_b in candidates_b:
                if entry_b.canonical_name == entry_a.canonical_name:
                    continue
                interaction = entry_a.interactions.get(entry_b.canonical_name)
                if interaction is not None:
                    return interaction

        return None

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the catalog."""
        by_severity: dict[str, int] = {}
        seen: set[tuple[str, str]] = set()

        for entry in self._entries:
            for other, interaction in entry.interactions.items():
                pair = tuple(sorted([entry.canonical_name, other]))
                if pair in seen:
                    continue
                seen.add(pair)
                sev = interaction.severity.value
                by_severity[sev] = by_severity.get(sev, 0) + 1

        return {
            "total_drugs": len(self._entries),
            "total_interactions": len(seen),
            "aliases_count": sum(len(entry.aliases) for entry in self._entries),
            "by_severity": by_severity,
        }


# Singleton instance and lock
_interaction_catalog: InteractionCatalog | None = None
_interaction_catalog_lock = Lock()


def get_interaction_catalog() -> InteractionCatalog:
    """Get the singleton InteractionCatalog instance."""
    global _interaction_catalog

    if _interaction_catalog is None:
        with _interaction_catalog_lock:
            if _interaction_catalog is None:
                logger.info("Creating singleton InteractionCatalog instance")
                fixture = settings.interaction_catalog_file
                _interaction_catalog = InteractionCatalog(Path(fixture) if fixture else None)

    return _interaction_catalog


def reset_interaction_catalog() -> None:
    """Reset the singleton instance (for testing)."""
    global _interaction_catalog
    with _interaction_catalog_lock:
        _interaction_catalog = None
