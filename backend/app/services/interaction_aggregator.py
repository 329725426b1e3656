"""Interaction Aggregator.

Merges interactions for a set of resolved drugs from two sources:

1. The local interaction catalog (matched by drug name)
2. The RxNav interaction API (matched by rxcui), queried either once per
   drug or in a single batch request

Results are deduplicated by unordered drug pair; the first source to report
a pair wins.
"""

import logging
from collections.abc import Iterator, Sequence

from app.core.config import settings
from app.core.exceptions import InteractionLookupError, RxNormError
from app.schemas.base import InteractionMode
from app.services.drug_models import (
    DrugIdentity,
    InteractionRecord,
    normalize_description,
    normalize_severity,
)
from app.services.interaction_catalog import InteractionCatalog, get_interaction_catalog
from app.services.rxnorm_client import (
    BatchInteractions,
    InteractionPayload,
    PerDrugInteractions,
    RxNormClient,
    UpstreamPair,
)

logger = logging.getLogger(__name__)


def unique_drugs(drugs: Sequence[DrugIdentity]) -> list[DrugIdentity]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[DrugIdentity] = []
    for drug in drugs:
        if drug.id in seen:
            continue
        seen.add(drug.id)
        result.append(drug)
    return result


def interaction_candidates(
    payload: InteractionPayload,
    input_ids: set[str],
) -> Iterator[tuple[str, str, UpstreamPair]]:
    """Yield (source_id, target_id, pair) for pairs among the input drugs.

    Per-drug payloads take only the first concept of each pair that refers
    to another input drug. Batch payloads require exactly two concepts, both
    among the input drugs.
    """
    if isinstance(payload, PerDrugInteractions):
        for pair in payload.pairs:
            for target_id in pair.concept_ids:
                if target_id in input_ids and target_id != payload.rxcui:
                    yield payload.rxcui, target_id, pair
                    break
    elif isinstance(payload, BatchInteractions):
        for pair in payload.pairs:
            if len(pair.concept_ids) != 2:
                continue
            source_id, target_id = pair.concept_ids
            if source_id != target_id and source_id in input_ids and target_id in input_ids:
                yield source_id, target_id, pair
    else:
        raise TypeError(f"Unsupported interaction payload: {type(payload).__name__}")


class _InteractionSet:
    """Insertion-ordered interaction records, unique by pair key."""

    def __init__(self) -> None:
        self._records: dict[str, InteractionRecord] = {}

    def add(self, record: InteractionRecord) -> bool:
        key = record.pair_key
        if key in self._records:
            return False
        self._records[key] = record
        return True

    def records(self) -> list[InteractionRecord]:
        return list(self._records.values())


class InteractionAggregator:
    """Finds interactions among a set of drugs.

    Usage:
        async with RxNormClient() as client:
            aggregator = InteractionAggregator(client)
            records = await aggregator.find_interactions([
                DrugIdentity(id="1191", name="aspirin"),
                DrugIdentity(id="11289", name="warfarin"),
            ])
    """

    def __init__(
        self,
        client: RxNormClient,
        catalog: InteractionCatalog | None = None,
        mode: InteractionMode | None = None,
    ):
        """Initialize the aggregator.

        Args:
            client: RxNav client for remote lookups.
            catalog: Local interaction catalog (defaults to the singleton).
            mode: Remote query mode (defaults to settings).
        """
        self.client = client
        self.catalog = catalog if catalog is not None else get_interaction_catalog()
        self.mode = mode if mode is not None else settings.interaction_mode

    async def find_interactions(self, drugs: Sequence[DrugIdentity]) -> list[InteractionRecord]:
        """Check a set of drugs for pairwise interactions.

        Args:
            drugs: Resolved drugs; repeated ids count once.

        Returns:
            Catalog records first, then remote records in input-drug order.

        Raises:
            InteractionLookupError: Batch mode request failed.
        """
        drugs = unique_drugs(drugs)
        if len(drugs) < 2:
            return []

        found = _InteractionSet()
        self._add_catalog_interactions(drugs, found)
        catalog_count = len(found.records())

        if self.mode == InteractionMode.BATCH:
            await self._add_batch_interactions(drugs, found)
        else:
            await self._add_per_drug_interactions(drugs, found)

        records = found.records()
        logger.info(
            f"Found {len(records)} interactions among {len(drugs)} drugs "
            f"({catalog_count} from catalog)"
        )
        return records

    def _add_catalog_interactions(self, drugs: list[DrugIdentity], found: _InteractionSet) -> None:
        for i, drug_a in enumerate(drugs):
            for drug_b in drugs[i + 1:]:
                hit = self.catalog.lookup(drug_a.name, drug_b.name)
                if hit is None:
                    continue
                found.add(InteractionRecord(
                    source_id=drug_a.id,
                    target_id=drug_b.id,
                    severity=hit.severity,
                    description=hit.description,
                ))

    async def _add_per_drug_interactions(self, drugs: list[DrugIdentity], found: _InteractionSet) -> None:
        input_ids = {drug.id for drug in drugs}
        for drug in drugs:
            try:
                payload = await self.client.get_interactions(drug.id)
            except RxNormError as e:
                logger.warning(f"Interaction lookup failed for {drug.id}, continuing: {e}")
                continue
            self._merge_payload(payload, input_ids, found)

    async def _add_batch_interactions(self, drugs: list[DrugIdentity], found: _InteractionSet) -> None:
        input_ids = [drug.id for drug in drugs]
        try:
            payload = await self.client.list_interactions(input_ids)
        except RxNormError as e:
            logger.error(f"Batch interaction lookup failed for {len(input_ids)} drugs: {e}")
            raise InteractionLookupError("Failed to check interactions") from e
        self._merge_payload(payload, set(input_ids), found)

    def _merge_payload(
        self,
        payload: InteractionPayload,
        input_ids: set[str],
        found: _InteractionSet,
    ) -> None:
        for source_id, target_id, pair in interaction_candidates(payload, input_ids):
            found.add(InteractionRecord(
                source_id=source_id,
                target_id=target_id,
                severity=normalize_severity(pair.severity),
                description=normalize_description(pair.description),
            ))
