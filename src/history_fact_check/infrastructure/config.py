"""
Configuration Management
========================

Pydantic-settings based configuration for all external services.
Reads from environment variables with sensible defaults.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from history_fact_check.domain.services.claim_extractor import DEFAULT_CLAIM_KEYWORDS


class OllamaSettings(BaseSettings):
    """Configuration for the Ollama generation backend."""

    model_config = SettingsConfigDict(env_prefix="OLLAMA_")

    base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL of the Ollama server",
    )
    model: str = Field(
        default="SpeakLeash/bielik-11b-v3.0-instruct:bf16",
        description="Model name used for verification",
    )
    connect_timeout_seconds: float = Field(default=30.0, ge=1.0)
    read_timeout_seconds: float = Field(
        default=120.0,
        ge=1.0,
        description="Maximum wait between two reads from the backend",
    )
    max_connections: int = Field(default=10, ge=1)


class KnowledgeSourceSettings(BaseSettings):
    """Configuration for Wikipedia, Wikidata and Wikiquote access."""

    model_config = SettingsConfigDict(env_prefix="KNOWLEDGE_")

    wikipedia_url_template: str = Field(
        default="https://{lang}.wikipedia.org/api/rest_v1",
        description="Wikipedia REST base URL; {lang} is the edition code",
    )
    wikidata_url: str = Field(default="https://www.wikidata.org/wiki/Special:EntityData")
    wikiquote_url_template: str = Field(
        default="https://{lang}.wikiquote.org/w/api.php",
        description="Wikiquote Action API endpoint; {lang} is the edition code",
    )
    primary_language: str = Field(default="pl")
    fallback_language: str = Field(default="en")
    timeout_seconds: float = Field(default=15.0, ge=1.0)
    max_connections: int = Field(default=10, ge=1)
    user_agent: str = Field(default="HistoryAI/1.0 (contact: info@historyai.app)")
    human_type_id: str = Field(default="Q5", description="Wikidata id of 'human'")
    citizenship_property: str = Field(default="P27")
    max_quotes: int = Field(default=5, ge=1)

    @property
    def languages(self) -> list[str]:
        """Edition codes in lookup order, without duplicates."""
        ordered = [self.primary_language, self.fallback_language]
        return [lang for i, lang in enumerate(ordered) if lang and lang not in ordered[:i]]


class CacheSettings(BaseSettings):
    """Configuration for the knowledge lookup cache."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    enabled: bool = Field(default=True)
    backend: Literal["memory", "redis"] = Field(default="memory")
    ttl_seconds: int = Field(
        default=86400,
        ge=1,
        description="TTL for cached lookups (facts rarely change)",
    )
    max_entries: int = Field(default=10000, ge=1, description="In-memory cache bound")

    redis_host: str = Field(default="localhost")
    redis_port: int = Field(default=6379)
    redis_password: SecretStr | None = Field(default=None)
    redis_db: int = Field(default=0, ge=0)
    redis_max_connections: int = Field(default=10, ge=1)


class RateLimitSettings(BaseSettings):
    """Client-side rate limits for each knowledge source."""

    model_config = SettingsConfigDict(env_prefix="RATE_LIMIT_")

    enabled: bool = Field(default=True)
    requests_per_minute: int = Field(default=10, ge=1)
    burst: int | None = Field(default=None, ge=1)


class FactCheckSettings(BaseSettings):
    """Configuration for claim extraction and streaming behavior."""

    model_config = SettingsConfigDict(env_prefix="FACTCHECK_")

    min_claim_length: int = Field(default=20, ge=0)
    claim_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CLAIM_KEYWORDS),
        description="Keyword stems marking a sentence as a factual claim",
    )
    stream_flush_size: int = Field(default=24, ge=1)
    stream_timeout_seconds: float = Field(default=180.0, ge=1.0)
    fetch_quotes: bool = Field(default=True)


class APISettings(BaseSettings):
    """Configuration for the FastAPI application."""

    model_config = SettingsConfigDict(env_prefix="API_")

    title: str = Field(default="HistoryAI Fact-Check API")
    version: str = Field(default="0.1.0")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    workers: int = Field(default=1, ge=1)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_key: str | None = Field(default=None, description="Require X-API-Key on /api routes when set")


class Settings(BaseSettings):
    """
    Root configuration aggregating all service settings.

    Usage:
        settings = get_settings()
        model = settings.ollama.model
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    knowledge: KnowledgeSourceSettings = Field(default_factory=KnowledgeSourceSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    factcheck: FactCheckSettings = Field(default_factory=FactCheckSettings)
    api: APISettings = Field(default_factory=APISettings)

    # Environment
    environment: Literal["development", "staging", "production", "test"] = Field(
        default="development"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance, reading from environment on first call.
    """
    return Settings()
