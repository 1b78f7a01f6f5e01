"""API response schemas shared across routes."""

from pydantic import BaseModel, Field

from history_fact_check.domain.entities import ReferenceContext


class ErrorResponse(BaseModel):
    """Uniform error body returned by every endpoint."""

    status: int
    error: str
    message: str
    path: str
    trace_id: str | None = Field(default=None, serialization_alias="traceId")


class WikipediaResponse(BaseModel):
    """Resolved encyclopedia summary for a subject."""

    language: str
    context: ReferenceContext


class NationalityResponse(BaseModel):
    """Citizenship label of a structured entity."""

    model_config = {"populate_by_name": True}

    entity_id: str = Field(alias="entityId")
    nationality: str


class QuotesResponse(BaseModel):
    """Quotations attributed to a subject."""

    name: str
    quotes: list[str]
