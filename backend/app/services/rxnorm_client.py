"""RxNav client for drug lookup and interaction retrieval.

Wraps the four RxNav REST endpoints the checker relies on:

    - /drugs.json                      exact drug name lookup
    - /approximateTerm.json            approximate (fuzzy) lookup
    - /interaction/interaction.json    interactions for a single rxcui
    - /interaction/list.json           interactions among a list of rxcuis

The two interaction endpoints answer with differently shaped trees. Both are
parsed into a small tagged union (PerDrugInteractions | BatchInteractions)
of flat UpstreamPair records so the aggregator normalizes them in one place.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from app.core.config import settings
from app.core.exceptions import RxNormError
from app.services.drug_models import DrugIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamPair:
    """One interaction pair as reported by RxNav."""

    concept_ids: tuple[str, ...]  # rxcuis of the interaction concepts, in order
    severity: str | None
    description: str | None


@dataclass(frozen=True)
class PerDrugInteractions:
    """Interactions reported for a single drug."""

    rxcui: str
    pairs: tuple[UpstreamPair, ...]


@dataclass(frozen=True)
class BatchInteractions:
    """Interactions reported among a list of drugs."""

    rxcuis: tuple[str, ...]
    pairs: tuple[UpstreamPair, ...]


InteractionPayload = PerDrugInteractions | BatchInteractions


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_pair(pair: dict[str, Any]) -> UpstreamPair:
    concept_ids = []
    for concept in _as_list(pair.get("interactionConcept")):
        rxcui = _as_dict(_as_dict(concept).get("minConceptItem")).get("rxcui")
        concept_ids.append(str(rxcui) if rxcui else "")
    return UpstreamPair(
        concept_ids=tuple(concept_ids),
        severity=pair.get("severity"),
        description=pair.get("description"),
    )


def parse_per_drug_payload(rxcui: str, data: dict[str, Any]) -> PerDrugInteractions:
    """Flatten interactionTypeGroup -> interactionType -> interactionPair."""
    pairs = [
        _parse_pair(_as_dict(pair))
        for group in _as_list(data.get("interactionTypeGroup"))
        for interaction_type in _as_list(_as_dict(group).get("interactionType"))
        for pair in _as_list(_as_dict(interaction_type).get("interactionPair"))
    ]
    return PerDrugInteractions(rxcui=rxcui, pairs=tuple(pairs))


def parse_batch_payload(rxcuis: list[str], data: dict[str, Any]) -> BatchInteractions:
    """Flatten fullInteractionTypeGroup -> fullInteractionType -> interactionPair."""
    pairs = [
        _parse_pair(_as_dict(pair))
        for group in _as_list(data.get("fullInteractionTypeGroup"))
        for interaction_type in _as_list(_as_dict(group).get("fullInteractionType"))
        for pair in _as_list(_as_dict(interaction_type).get("interactionPair"))
    ]
    return BatchInteractions(rxcuis=tuple(rxcuis), pairs=tuple(pairs))


def _concept_identity(concept: dict[str, Any]) -> DrugIdentity | None:
    rxcui = concept.get("rxcui")
    if not rxcui:
        return None
    return DrugIdentity(id=str(rxcui), name=str(concept.get("name") or ""))


class RxNormClient:
    """Async client for the RxNav REST API.

    Usage:
        async with RxNormClient() as client:
            drugs = await client.find_drugs("aspirin")
            payload = await client.get_interactions(drugs[0].id)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the RxNav client.

        Args:
            base_url: RxNav REST base URL (defaults to settings).
            timeout: Per-request timeout in seconds (defaults to settings).
            transport: Optional httpx transport, e.g. a MockTransport in tests.
        """
        self.base_url = base_url or settings.rxnav_base_url
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.rxnav_timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "RxNormClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET a JSON object, translating every failure into RxNormError."""
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise RxNormError(f"RxNav request {path} failed: {e}") from e
        except ValueError as e:
            raise RxNormError(f"RxNav returned invalid JSON for {path}: {e}") from e

        if not isinstance(data, dict):
            raise RxNormError(f"RxNav returned unexpected payload for {path}")
        return data

    async def find_drugs(self, name: str) -> list[DrugIdentity]:
        """Exact drug lookup by name.

        Returns:
            Concepts in response order: concept groups first to last, each
            group's concepts first to last.
        """
        data = await self._get_json("/drugs.json", {"name": name})
        results: list[DrugIdentity] = []
        for group in _as_list(_as_dict(data.get("drugGroup")).get("conceptGroup")):
            for concept in _as_list(_as_dict(group).get("conceptProperties")):
                identity = _concept_identity(_as_dict(concept))
                if identity is not None:
                    results.append(identity)
        return results

    async def approximate_term(self, term: str) -> list[DrugIdentity]:
        """Approximate (fuzzy) lookup, best-ranked candidate first."""
        data = await self._get_json("/approximateTerm.json", {"term": term})
        results: list[DrugIdentity] = []
        for candidate in _as_list(_as_dict(data.get("approximateGroup")).get("candidate")):
            identity = _concept_identity(_as_dict(candidate))
            if identity is not None:
                results.append(identity)
        return results

    async def get_interactions(self, rxcui: str) -> PerDrugInteractions:
        """Interactions reported for a single rxcui."""
        data = await self._get_json("/interaction/interaction.json", {"rxcui": rxcui})
        payload = parse_per_drug_payload(rxcui, data)
        logger.debug(f"RxNav reported {len(payload.pairs)} interaction pairs for {rxcui}")
        return payload

    async def list_interactions(self, rxcuis: list[str]) -> BatchInteractions:
        """Interactions among a list of rxcuis in a single request."""
        # Space-separated; encoded as "+" on the wire
        data = await self._get_json("/interaction/list.json", {"rxcuis": " ".join(rxcuis)})
        payload = parse_batch_payload(rxcuis, data)
        logger.debug(f"RxNav reported {len(payload.pairs)} interaction pairs for {len(rxcuis)} drugs")
        return payload
