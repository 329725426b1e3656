"""Drug Resolver - map a free-text query to an RxNorm drug identity."""

import logging

from app.core.config import settings
from app.core.exceptions import DrugNotFoundError, DrugSearchError, InvalidQueryError, RxNormError
from app.services.drug_models import DrugIdentity
from app.services.rxnorm_client import RxNormClient

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


def capitalize_query(query: str) -> str:
    """Upper-case the first character, leaving the rest untouched."""
    return query[:1].upper() + query[1:]


class DrugResolver:
    """Resolves drug names against RxNorm.

    Tries an exact name lookup first and falls back to approximate
    matching, so misspellings like "aspirn" still resolve.
    """

    def __init__(self, client: RxNormClient, display_name_max_length: int | None = None):
        """Initialize the resolver.

        Args:
            client: RxNav client used for lookups.
            display_name_max_length: Official names longer than this are
                displayed as the capitalized query instead.
        """
        self.client = client
        self.display_name_max_length = (
            display_name_max_length
            if display_name_max_length is not None
            else settings.display_name_max_length
        )

    async def resolve(self, query: str) -> DrugIdentity:
        """Resolve a query to a drug identity.

        Args:
            query: Free-text drug name.

        Returns:
            The first identity found by exact, then approximate lookup.

        Raises:
            InvalidQueryError: Query shorter than two characters.
            DrugNotFoundError: RxNav has no match.
            DrugSearchError: RxNav could not be reached or parsed.
        """
        term = (query or "").strip()
        if len(term) < MIN_QUERY_LENGTH:
            raise InvalidQueryError("Query too short")

        try:
            identity = await self._exact_match(term)
            if identity is None:
                identity = await self._approximate_match(term)
        except RxNormError as e:
            logger.error(f"Search error for '{term}': {e}")
            raise DrugSearchError("Search failed") from e

        if identity is None:
            raise DrugNotFoundError(term)

        logger.info(f"Resolved '{term}' to {identity.id} ({identity.name})")
        return identity

    async def _exact_match(self, term: str) -> DrugIdentity | None:
        concepts = await self.client.find_drugs(term)
        if not concepts:
            return None

        match = concepts[0]
        name = match.name
        if not name or len(name) > self.display_name_max_length:
            name = capitalize_query(term)
        return DrugIdentity(id=match.id, name=name)

    async def _approximate_match(self, term: str) -> DrugIdentity | None:
        candidates = await self.client.approximate_term(term)
        if not candidates:
            return None

        match = candidates[0]
        logger.debug(f"No exact match for '{term}', using approximate candidate {match.id}")
        return DrugIdentity(id=match.id, name=match.name or capitalize_query(term))
