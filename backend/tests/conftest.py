"""Pytest configuration and fixtures for backend tests."""

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from app.api.drugs import get_rxnorm_client
from app.main import app
from app.services.interaction_catalog import reset_interaction_catalog
from app.services.rxnorm_client import RxNormClient

RXNAV_TEST_URL = "https://rxnav.test/REST"


class FakeRxNav:
    """In-memory stand-in for the RxNav REST API.

    Served through httpx.MockTransport so the real RxNormClient code runs
    end to end. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.drugs: dict[str, dict[str, Any]] = {}
        self.approximate: dict[str, dict[str, Any]] = {}
        self.interactions: dict[str, dict[str, Any]] = {}
        self.batch: dict[str, Any] = {}
        self.failing_rxcuis: set[str] = set()
        self.batch_fails = False
        self.unreachable = False
        self.requests: list[httpx.Request] = []

    # ------------------------------------------------------------------
    # Payload setup
    # ------------------------------------------------------------------

    def add_drug(self, query: str, *groups: list[tuple[str, str]]) -> None:
        """Register /drugs.json concept groups of (rxcui, name) for a query."""
        self.drugs[query.lower()] = {
            "drugGroup": {
                "name": query,
                "conceptGroup": [
                    {"tty": "SBD", "conceptProperties": [
                        {"rxcui": rxcui, "name": name} for rxcui, name in group
                    ]}
                    for group in groups
                ],
            }
        }

    def add_approximate(self, term: str, *candidates: tuple[str, str]) -> None:
        """Register /approximateTerm.json candidates of (rxcui, name)."""
        self.approximate[term.lower()] = {
            "approximateGroup": {
                "inputTerm": term,
                "candidate": [
                    {"rxcui": rxcui, "name": name, "score": "10", "rank": str(rank)}
                    for rank, (rxcui, name) in enumerate(candidates, start=1)
                ],
            }
        }

    @staticmethod
    def pair(concept_ids: list[str], severity: str | None = None, description: str | None = None) -> dict[str, Any]:
        """Build an interactionPair entry."""
        entry: dict[str, Any] = {
            "interactionConcept": [
                {"minConceptItem": {"rxcui": rxcui, "name": f"drug {rxcui}"}}
                for rxcui in concept_ids
            ],
        }
        if severity is not None:
            entry["severity"] = severity
        if description is not None:
            entry["description"] = description
        return entry

    def add_interaction(
        self,
        rxcui: str,
        concept_ids: list[str],
        severity: str | None = "high",
        description: str | None = "Interaction reported by RxNav.",
    ) -> None:
        """Append a pair to the per-drug interaction tree of an rxcui."""
        tree = self.interactions.setdefault(rxcui, {
            "interactionTypeGroup": [{"interactionType": [{"interactionPair": []}]}],
        })
        pairs = tree["interactionTypeGroup"][0]["interactionType"][0]["interactionPair"]
        pairs.append(self.pair(concept_ids, severity, description))

    def add_batch_pair(
        self,
        concept_ids: list[str],
        severity: str | None = "high",
        description: str | None = "Interaction reported by RxNav.",
    ) -> None:
        """Append a pair to the batch interaction tree."""
        if not self.batch:
            self.batch = {
                "fullInteractionTypeGroup": [{"fullInteractionType": [{"interactionPair": []}]}],
            }
        pairs = self.batch["fullInteractionTypeGroup"][0]["fullInteractionType"][0]["interactionPair"]
        pairs.append(self.pair(concept_ids, severity, description))

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def paths(self) -> list[str]:
        return [request.url.path.removeprefix("/REST") for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("RxNav unreachable", request=request)

        path = request.url.path.removeprefix("/REST")
        params = request.url.params

        if path == "/drugs.json":
            name = params.get("name", "")
            return httpx.Response(200, json=self.drugs.get(name.lower(), {"drugGroup": {"name": name}}))

        if path == "/approximateTerm.json":
            term = params.get("term", "")
            return httpx.Response(
                200, json=self.approximate.get(term.lower(), {"approximateGroup": {"inputTerm": term}})
            )

        if path == "/interaction/interaction.json":
            rxcui = params.get("rxcui", "")
            if rxcui in self.failing_rxcuis:
                return httpx.Response(500, json={"error": "internal error"})
            return httpx.Response(200, json=self.interactions.get(rxcui, {"nlmDisclaimer": "..."}))

        if path == "/interaction/list.json":
            if self.batch_fails:
                return httpx.Response(503, text="Service Unavailable")
            return httpx.Response(200, json=self.batch or {"nlmDisclaimer": "..."})

        return httpx.Response(404, json={"error": "not found"})

    def client(self) -> RxNormClient:
        return RxNormClient(
            base_url=RXNAV_TEST_URL,
            timeout=5.0,
            transport=httpx.MockTransport(self.handler),
        )


@pytest.fixture(autouse=True)
def fresh_catalog():
    """Rebuild the catalog singleton for every test."""
    reset_interaction_catalog()
    yield
    reset_interaction_catalog()


@pytest.fixture
def rxnav() -> FakeRxNav:
    """Fake RxNav service with no data registered."""
    return FakeRxNav()


@pytest.fixture
async def rxnorm_client(rxnav: FakeRxNav) -> AsyncGenerator[RxNormClient, None]:
    """RxNormClient wired to the fake RxNav service."""
    client = rxnav.client()
    yield client
    await client.close()


@pytest.fixture
async def client(rxnav: FakeRxNav) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client with RxNav replaced by the fake service."""

    async def override_get_rxnorm_client():
        rxnorm = rxnav.client()
        try:
            yield rxnorm
        finally:
            await rxnorm.close()

    app.dependency_overrides[get_rxnorm_client] = override_get_rxnorm_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()
