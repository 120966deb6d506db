"""Configuration helpers for the TrueBlazer backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

DEFAULT_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"

load_dotenv(override=False)


@dataclass(frozen=True)
class LLMSettings:
    """Credentials and routing for the LLM gateway.

    The OpenAI-compatible AI gateway is the primary provider; when its key is
    missing the configuration falls back to OpenAI directly.
    """

    gateway_api_key: str | None = None
    gateway_url: str = DEFAULT_GATEWAY_URL
    openai_api_key: str | None = None
    model: str | None = None

    @property
    def primary_provider(self) -> str | None:
        """Return the preferred provider based on available credentials."""

        if self.gateway_api_key:
            return "gateway"
        if self.openai_api_key:
            return "openai"
        return None

    def get_api_key(self, provider: str | None = None) -> str | None:
        """Return the API key for *provider*, or for the primary provider when omitted."""

        resolved_provider = provider or self.primary_provider
        if resolved_provider == "gateway":
            return self.gateway_api_key
        if resolved_provider == "openai":
            return self.openai_api_key
        return None

    @property
    def base_url(self) -> str | None:
        """Gateway URL for the primary provider; ``None`` means the SDK default."""

        return self.gateway_url if self.primary_provider == "gateway" else None

    @property
    def resolved_model(self) -> str:
        if self.model:
            return self.model
        return DEFAULT_OPENAI_MODEL if self.primary_provider == "openai" else DEFAULT_MODEL

    @property
    def has_any_keys(self) -> bool:
        return self.primary_provider is not None


@dataclass(frozen=True)
class StoreSettings:
    """Connection details for the hosted row store."""

    supabase_url: str | None = None
    supabase_service_role_key: str | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """Read environment variables and return cached LLM settings."""

    environ = os.environ
    return LLMSettings(
        gateway_api_key=environ.get("TRUEBLAZER_AI_GATEWAY_API_KEY"),
        gateway_url=environ.get("TRUEBLAZER_AI_GATEWAY_URL") or DEFAULT_GATEWAY_URL,
        openai_api_key=environ.get("OPENAI_API_KEY"),
        model=environ.get("TRUEBLAZER_AI_MODEL"),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Read environment variables and return cached store settings."""

    environ = os.environ
    return StoreSettings(
        supabase_url=environ.get("SUPABASE_URL"),
        supabase_service_role_key=environ.get("SUPABASE_SERVICE_ROLE_KEY"),
    )


def get_log_level() -> str:
    return os.getenv("TRUEBLAZER_LOG_LEVEL", "INFO").upper()
