"""Services for the Drug Interaction Checker.

Services implement drug resolution and interaction checking:
- RxNormClient: RxNav REST lookups and interaction payload parsing
- DrugResolver: free-text query to RxNorm identity
- InteractionCatalog: local fallback interaction table
- InteractionAggregator: merged, deduplicated interaction check
"""

from app.services.drug_models import DrugIdentity, InteractionRecord, pair_key
from app.services.drug_resolver import DrugResolver
from app.services.interaction_aggregator import InteractionAggregator
from app.services.interaction_catalog import (
    CatalogEntry,
    CatalogInteraction,
    InteractionCatalog,
    get_interaction_catalog,
    reset_interaction_catalog,
)
from app.services.rxnorm_client import (
    BatchInteractions,
    PerDrugInteractions,
    RxNormClient,
    UpstreamPair,
)

__all__ = [
    # Models
    "DrugIdentity",
    "InteractionRecord",
    "pair_key",
    # RxNav
    "RxNormClient",
    "PerDrugInteractions",
    "BatchInteractions",
    "UpstreamPair",
    # Resolution
    "DrugResolver",
    # Catalog
    "CatalogEntry",
    "CatalogInteraction",
    "InteractionCatalog",
    "get_interaction_catalog",
    "reset_interaction_catalog",
    # Aggregation
    "InteractionAggregator",
]
