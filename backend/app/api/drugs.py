"""Drug search and interaction check API endpoints."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.exceptions import (
    DrugNotFoundError,
    DrugSearchError,
    InteractionLookupError,
    InvalidQueryError,
)
from app.schemas.drug import Drug, Interaction, InteractionCheckRequest
from app.services.drug_models import DrugIdentity
from app.services.drug_resolver import DrugResolver
from app.services.interaction_aggregator import InteractionAggregator
from app.services.rxnorm_client import RxNormClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Drugs"])


async def get_rxnorm_client() -> AsyncGenerator[RxNormClient, None]:
    """Provide an RxNav client for the duration of one request."""
    client = RxNormClient()
    try:
        yield client
    finally:
        await client.close()


RxNorm = Annotated[RxNormClient, Depends(get_rxnorm_client)]


@router.get("/search", response_model=Drug)
async def search_drug(
    client: RxNorm,
    q: str = Query("", description="Drug name, at least two characters"),
) -> Drug:
    """Resolve a drug name to its RxNorm identity.

    Falls back to approximate matching when there is no exact match.
    """
    resolver = DrugResolver(client)
    try:
        identity = await resolver.resolve(q)
    except InvalidQueryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DrugNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Drug not found")
    except DrugSearchError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return Drug(id=identity.id, name=identity.name)


@router.post("/interactions", response_model=list[Interaction])
async def check_interactions(
    request: InteractionCheckRequest,
    client: RxNorm,
) -> list[Interaction]:
    """Check previously resolved drugs for pairwise interactions.

    Combines the local interaction catalog with RxNav results. Fewer than
    two drugs yields an empty list.
    """
    drugs = [DrugIdentity(id=drug.id, name=drug.name) for drug in request.drugs]
    aggregator = InteractionAggregator(client)
    try:
        records = await aggregator.find_interactions(drugs)
    except InteractionLookupError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return [
        Interaction(
            source=record.source_id,
            target=record.target_id,
            severity=record.severity,
            description=record.description,
        )
        for record in records
    ]
