"""Cached text generation with local fallbacks."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from task_assistant.services.cache import MEDIUM_TTL_SECONDS, Cache, hash_key

_logger = logging.getLogger(__name__)

Fallback = Callable[[str], str]


class ExternalServiceError(RuntimeError):
    """Raised when the text generation service cannot produce a completion."""


class TextGenerationClient(Protocol):
    """Interface for a remote text generation endpoint."""

    async def generate(
        self, prompt: str, *, temperature: float, max_output_tokens: int
    ) -> str:
        """Return the completion text for a prompt."""


@dataclass
class GenerationService:
    """Calls the text generation client behind a prompt cache."""

    client: TextGenerationClient
    cache: Cache
    default_ttl_seconds: int = MEDIUM_TTL_SECONDS
    temperature: float = 0.7
    max_output_tokens: int = 1024

    async def generate(
        self,
        prompt: str,
        *,
        use_cache: bool = True,
        ttl_seconds: int | None = None,
        fallback: Fallback | None = None,
    ) -> str:
        """Return generated text, falling back to a local answer on failure.

        Responses are cached by a hash of the prompt. Fallback answers are
        never cached, so the remote service is retried on the next call.
        """
        cache_key = hash_key(prompt)
        if use_cache:
            cached = self.cache.get(cache_key)
            if isinstance(cached, str):
                _logger.debug("Using cached generation for key=%s", cache_key[:12])
                return cached

        try:
            text = await self.client.generate(
                prompt,
                temperature=self.temperature,
                max_output_tokens=self.max_output_tokens,
            )
        except Exception as exc:
            _logger.warning("Text generation failed: %s", exc)
            if fallback is None:
                if isinstance(exc, ExternalServiceError):
                    raise
                raise ExternalServiceError("Failed to generate content") from exc
            _logger.info("Using local fallback for text generation")
            return fallback(prompt)

        if use_cache:
            if ttl_seconds is None:
                ttl_seconds = self.default_ttl_seconds
            self.cache.set(cache_key, text, ttl_seconds=ttl_seconds)
        return text
