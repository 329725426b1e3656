"""Exception hierarchy for drug search and interaction checking.

Services raise these; the API layer maps them onto HTTP status codes.
"""


class DrugCheckerError(Exception):
    """Base class for all drug checker errors."""


class RxNormError(DrugCheckerError):
    """Transport or parse failure talking to the RxNav service."""


class InvalidQueryError(DrugCheckerError):
    """Search query is too short to be looked up."""


class DrugNotFoundError(DrugCheckerError):
    """RxNav returned no exact or approximate match for a query."""

    def __init__(self, query: str):
        super().__init__(f"Drug not found: {query}")
        self.query = query


class DrugSearchError(DrugCheckerError):
    """Drug search failed because RxNav could not be reached or parsed."""


class InteractionLookupError(DrugCheckerError):
    """Batch interaction lookup failed as a whole."""
