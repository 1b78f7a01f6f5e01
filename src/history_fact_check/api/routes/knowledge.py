"""
Knowledge Lookup Endpoints
==========================

Direct access to the resolved reference material: Wikipedia summaries,
Wikidata nationality and Wikiquote quotes.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from history_fact_check.api.schemas.responses import (
    NationalityResponse,
    QuotesResponse,
    WikipediaResponse,
)
from history_fact_check.domain.entities import ContextFound
from history_fact_check.domain.services.context_resolver import ContextResolver
from history_fact_check.domain.services.quote_resolver import QuoteResolver
from history_fact_check.infrastructure.dependencies import (
    get_context_resolver,
    get_quote_resolver,
)

router = APIRouter()


@router.get(
    "/wikipedia/{name}",
    response_model=WikipediaResponse,
    status_code=status.HTTP_200_OK,
    summary="Resolve a person's Wikipedia summary",
    description=(
        "Looks the name up in the primary and fallback Wikipedia editions and "
        "returns the first summary whose Wikidata entity is a human."
    ),
)
async def get_wikipedia_context(
    name: Annotated[str, Path(min_length=1, max_length=300)],
    resolver: Annotated[ContextResolver, Depends(get_context_resolver)],
) -> WikipediaResponse:
    lookup = await resolver.resolve(name)
    if not isinstance(lookup, ContextFound):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Character not found in Wikipedia: {name} ({lookup.reason})",
        )
    return WikipediaResponse(language=lookup.language, context=lookup.context)


@router.get(
    "/wikidata/{entity_id}/nationality",
    response_model=NationalityResponse,
    status_code=status.HTTP_200_OK,
    summary="Resolve the citizenship of a Wikidata entity",
)
async def get_nationality(
    entity_id: Annotated[str, Path(pattern=r"^Q\d+$")],
    resolver: Annotated[ContextResolver, Depends(get_context_resolver)],
) -> NationalityResponse:
    nationality = await resolver.resolve_nationality(entity_id)
    return NationalityResponse(entity_id=entity_id, nationality=nationality)


@router.get(
    "/quotes",
    response_model=QuotesResponse,
    status_code=status.HTTP_200_OK,
    summary="Get quotes attributed to a person",
)
async def get_quotes(
    name: Annotated[str, Query(min_length=1, max_length=300)],
    resolver: Annotated[QuoteResolver, Depends(get_quote_resolver)],
    lang: Annotated[str | None, Query(pattern=r"^[a-z]{2,3}$")] = None,
) -> QuotesResponse:
    quotes = await resolver.get_quotes(name, lang)
    return QuotesResponse(name=name, quotes=quotes)
