from history_fact_check.api.schemas.responses import (
    ErrorResponse,
    NationalityResponse,
    QuotesResponse,
    WikipediaResponse,
)

__all__ = ["ErrorResponse", "NationalityResponse", "QuotesResponse", "WikipediaResponse"]
