"""OpenAI-compatible gateway client used by the context handlers."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict

from openai import APIError, APIStatusError, OpenAI, RateLimitError

from .config import LLMSettings, get_llm_settings
from .errors import (
    GatewayError,
    GatewayPaymentRequiredError,
    GatewayRateLimitError,
    GatewayResponseError,
)
from .prompts import PromptPair

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_BARE_OBJECT = re.compile(r"\{[\s\S]*\}")


@dataclass(frozen=True)
class CompletionOptions:
    """Sampling parameters for a single gateway call."""

    temperature: float = 0.7
    max_tokens: int = 2000
    json_mode: bool = True


class GatewayClient:
    """Thin wrapper over the chat-completions API of the configured provider."""

    def __init__(self, client: OpenAI, model: str) -> None:
        self._client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: LLMSettings) -> "GatewayClient":
        client = OpenAI(api_key=settings.get_api_key(), base_url=settings.base_url)
        return cls(client, settings.resolved_model)

    def complete(self, prompt: PromptPair, options: CompletionOptions | None = None) -> str:
        """Send *prompt* and return the raw message content.

        Raises a :class:`GatewayError` subclass for rate limits, exhausted
        credits, transport failures and empty replies.
        """

        options = options or CompletionOptions()
        request: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": prompt.system.strip()},
                {"role": "user", "content": prompt.user.strip()},
            ],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }
        if options.json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**request)
        except RateLimitError as exc:
            logger.warning("Gateway rate limited", extra={"extra_data": {"model": self.model}})
            raise GatewayRateLimitError() from exc
        except APIStatusError as exc:
            logger.error(
                "Gateway error",
                extra={"extra_data": {"model": self.model, "status": exc.status_code}},
            )
            if exc.status_code == 402:
                raise GatewayPaymentRequiredError() from exc
            raise GatewayError(f"AI gateway returned status {exc.status_code}") from exc
        except APIError as exc:
            logger.error("Gateway call failed", extra={"extra_data": {"model": self.model}})
            raise GatewayError("AI gateway call failed", retryable=True) from exc

        message = response.choices[0].message.content if response.choices else None
        if not message:
            raise GatewayResponseError("No content generated")
        return message


ClientCache = tuple[LLMSettings, GatewayClient]
_client_cache: ClientCache | None = None


def get_gateway() -> GatewayClient | None:
    """Return a cached gateway client when an API key is configured."""

    global _client_cache
    settings = get_llm_settings()
    if not settings.has_any_keys:
        return None
    if _client_cache and _client_cache[0] == settings:
        return _client_cache[1]
    gateway = GatewayClient.from_settings(settings)
    _client_cache = (settings, gateway)
    return gateway


def parse_structured_response(raw_text: str) -> Dict[str, Any] | None:
    """Coerce model output into a JSON object.

    Code fences are stripped first; failing that the first ``{...}`` span is
    tried. Returns ``None`` when nothing parses into a dict.
    """

    text = (raw_text or "").strip()
    fenced = _FENCED_JSON.search(text)
    candidates = [fenced.group(1) if fenced else text]
    bare = _BARE_OBJECT.search(text)
    if bare:
        candidates.append(bare.group(0))

    for candidate in candidates:
        try:
            parsed = json.loads(candidate.strip())
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None
