"""Google Generative Language API client."""

from dataclasses import dataclass

import httpx

from task_assistant.services.generation import (
    ExternalServiceError,
    TextGenerationClient,
)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass
class HttpxGeminiClient(TextGenerationClient):
    """HTTPX-backed client for the Gemini generateContent endpoint."""

    api_key: str | None
    model: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30

    @classmethod
    def create(
        cls,
        api_key: str | None,
        model: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 30,
    ) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def generate(
        self, prompt: str, *, temperature: float, max_output_tokens: int
    ) -> str:
        """Request a completion and return the first candidate's text."""
        if not self.api_key:
            raise ExternalServiceError("Gemini API key is not configured")
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            response = await self.http_client.post(
                url,
                params={"key": self.api_key},
                json={
                    "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                    "generationConfig": {
                        "temperature": temperature,
                        "maxOutputTokens": max_output_tokens,
                    },
                },
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise ExternalServiceError(f"Gemini request failed: {exc}") from exc
        return _extract_text(payload)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _extract_text(payload: object) -> str:
    """Return the text of the first candidate in a generateContent response."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]  # type: ignore[index]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise ExternalServiceError("Malformed Gemini response") from exc
    if not text:
        raise ExternalServiceError("Gemini returned an empty response")
    return text
