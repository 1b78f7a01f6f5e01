"""
Wikidata Entity Data Adapter
============================

Reads entity JSON documents from Wikidata's Special:EntityData endpoint
for identity checks (instance-of) and attribute lookups (citizenship).
https://www.wikidata.org/wiki/Special:EntityData/Q42.json
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from history_fact_check.adapters.outbound.knowledge_sources.base import (
    DEFAULT_USER_AGENT,
    HTTPKnowledgeSource,
)
from history_fact_check.ports.knowledge_source import EntitySource

if TYPE_CHECKING:
    from history_fact_check.infrastructure.rate_limit import TokenBucketRateLimiter

logger = logging.getLogger(__name__)

INSTANCE_OF_PROPERTY = "P31"

_ENTITY_ID = re.compile(r"^[QPL]\d+$")


def _mapping(value: Any) -> dict[str, Any]:
    # Wikibase serializes empty maps as [].
    return value if isinstance(value, dict) else {}


def claim_target_id(claim: dict[str, Any]) -> str | None:
    """Return the entity id a statement points at, if any."""
    mainsnak = _mapping(claim.get("mainsnak"))
    value = _mapping(mainsnak.get("datavalue")).get("value")
    if not isinstance(value, dict):
        return None
    target = value.get("id")
    if not isinstance(target, str) or not target.strip():
        return None
    return target.strip()


def select_best_claim_entity_id(claims: list[dict[str, Any]]) -> str | None:
    """
    Pick the target of the best-ranked statement.

    A preferred-rank statement wins outright; otherwise the first
    normal-rank statement; otherwise the first statement of any rank.
    Statements without a target entity are skipped.
    """
    normal: str | None = None
    fallback: str | None = None
    for claim in claims:
        target = claim_target_id(claim)
        if target is None:
            continue
        rank = str(claim.get("rank", "normal")).lower()
        if rank == "preferred":
            return target
        if rank == "normal" and normal is None:
            normal = target
        if fallback is None:
            fallback = target
    return normal or fallback


class WikidataEntityAdapter(HTTPKnowledgeSource, EntitySource):
    """
    Adapter for Wikidata entity documents.

    Entity ids that do not look like Wikidata ids, and entities that do
    not exist, are treated as having no claims.
    """

    def __init__(
        self,
        base_url: str = "https://www.wikidata.org/wiki/Special:EntityData",
        timeout: float = 15.0,
        max_connections: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_limiter: TokenBucketRateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url=base_url,
            timeout=timeout,
            max_connections=max_connections,
            user_agent=user_agent,
            rate_limiter=rate_limiter,
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        return "Wikidata"

    async def health_check(self) -> bool:
        """Check Wikidata by fetching a tiny, stable entity."""
        if not self._client:
            return False
        try:
            response = await self._client.get("/Q5.json", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def get_entity(self, entity_id: str) -> dict[str, Any] | None:
        """
        Fetch an entity document.

        Returns:
            The entity object (labels, claims, ...), or None if missing.
        """
        entity_id = entity_id.strip()
        if not _ENTITY_ID.match(entity_id):
            logger.debug(f"Ignoring malformed entity id: {entity_id!r}")
            return None

        data = await self._get_json(f"/{entity_id}.json")
        if data is None:
            return None

        entities = data.get("entities")
        if not isinstance(entities, dict) or not entities:
            return None
        # Redirected ids come back under their new key.
        entity = entities.get(entity_id) or next(iter(entities.values()))
        return entity if isinstance(entity, dict) else None

    async def get_claims(self, entity_id: str, property_id: str) -> list[dict[str, Any]]:
        entity = await self.get_entity(entity_id)
        if entity is None:
            return []
        claims = _mapping(entity.get("claims")).get(property_id)
        if not isinstance(claims, list):
            return []
        return [c for c in claims if isinstance(c, dict)]

    async def is_instance_of(self, entity_id: str, type_id: str) -> bool:
        claims = await self.get_claims(entity_id, INSTANCE_OF_PROPERTY)
        return any(claim_target_id(claim) == type_id for claim in claims)

    async def get_best_claim_value(self, entity_id: str, property_id: str) -> str | None:
        claims = await self.get_claims(entity_id, property_id)
        return select_best_claim_entity_id(claims)

    async def get_label(
        self,
        entity_id: str,
        preferred_language: str,
        fallback_language: str,
    ) -> str | None:
        entity = await self.get_entity(entity_id)
        if entity is None:
            return None

        labels = _mapping(entity.get("labels"))
        for language in (preferred_language, fallback_language):
            label = _mapping(labels.get(language)).get("value")
            if isinstance(label, str) and label.strip():
                return label.strip()
        return None
