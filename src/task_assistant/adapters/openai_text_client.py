"""OpenAI Responses API client for text generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError

from task_assistant.services.generation import (
    ExternalServiceError,
    TextGenerationClient,
)


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text generation client backed by the OpenAI Responses API."""

    client: AsyncOpenAI | None
    model: str
    store: bool = False

    @classmethod
    def create(
        cls, api_key: str | None, model: str, timeout_seconds: float = 30
    ) -> "OpenAITextClient":
        """Create an OpenAI text client; without a key every call fails fast."""
        if not api_key:
            return cls(client=None, model=model)
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout_seconds),
            model=model,
        )

    async def generate(
        self, prompt: str, *, temperature: float, max_output_tokens: int
    ) -> str:
        """Call the Responses API and return its output text."""
        if self.client is None:
            raise ExternalServiceError("OpenAI API key is not configured")
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=prompt,
                temperature=temperature,
                max_output_tokens=max_output_tokens,
                store=self.store,
            )
        except OpenAIError as exc:
            raise ExternalServiceError(f"OpenAI request failed: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise ExternalServiceError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.client is not None:
            await self.client.close()
