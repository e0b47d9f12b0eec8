"""
Request/response shapes for the enrichment and expert-rating edge functions.

The functions themselves run on the backend; these only pin the JSON
contract.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema


class ExpertRatingRequest(BaseSchema):
    """Body of fetch-expert-rating. The function expects camelCase keys."""

    vintage_id: str = Field(..., serialization_alias="vintageId")
    wine_name: str = Field(..., serialization_alias="wineName")
    producer_name: str = Field(..., serialization_alias="producerName")
    year: Optional[int] = None

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True)


class ExpertRating(BaseSchema):
    source: Optional[str] = None
    score: Optional[float] = None
    max_score: Optional[float] = None
    review: Optional[str] = None
    reviewer: Optional[str] = None
    url: Optional[str] = None


class EnrichWineOptions(BaseSchema):
    """What the caller already knows about a wine to enrich."""

    vintage_id: Optional[str] = None
    producer: Optional[str] = None
    wine_name: Optional[str] = None
    year: Optional[int] = None
    region: Optional[str] = None
    overwrite: bool = True

    def for_wine(self, wine_id: str) -> "EnrichWineRequest":
        return EnrichWineRequest(wine_id=wine_id, **self.model_dump())


class EnrichWineRequest(EnrichWineOptions):
    """Body of enrich-wines for a single wine."""

    action: str = "enrich-single"
    wine_id: str


class EnrichmentData(BaseSchema):
    wine_type: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None
    food_pairings: Optional[list[str]] = None
    serving_temperature: Optional[str] = None
    tasting_notes: Optional[str] = None
    varietals: Optional[list[str]] = None


class EnrichResponse(BaseSchema):
    success: bool
    enrichment: Optional[EnrichmentData] = None
    enriched: Optional[int] = None
    message: Optional[str] = None
