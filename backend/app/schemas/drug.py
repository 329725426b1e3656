"""Drug search and interaction check schemas."""

from pydantic import AliasChoices, BaseModel, Field

from app.schemas.base import Severity


class Drug(BaseModel):
    """A drug resolved against RxNorm."""

    id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("id", "rxcui"),
        description="RxNorm concept identifier (RxCUI)",
    )
    name: str = Field("", description="Display name")


class InteractionCheckRequest(BaseModel):
    """Request body for an interaction check."""

    drugs: list[Drug] = Field(default_factory=list, description="Drugs returned by earlier searches")


class Interaction(BaseModel):
    """An interaction between two of the checked drugs."""

    source: str = Field(..., description="RxCUI of the first drug")
    target: str = Field(..., description="RxCUI of the second drug")
    severity: Severity = Field(..., description="Normalized severity")
    description: str = Field(..., description="Clinical description")
