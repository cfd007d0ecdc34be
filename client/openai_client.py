"""OpenAI transport for planning calls."""

from typing import Any, Optional

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from .base_client import BaseTransport, Message, ModelResponse, Usage

DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class OpenAITransport(BaseTransport):
    """OpenAI (or OpenAI-compatible) chat completions transport."""

    api_key_env = "OPENAI_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        base_url: Optional[str] = None,
    ):
        """Initialize OpenAI transport.

        Args:
            api_key: OpenAI API key
            default_model: Default model to use (e.g., 'gpt-4o-mini')
            temperature: Sampling temperature for planning calls
            max_tokens: Maximum tokens to generate
            base_url: Override for OpenAI-compatible endpoints
        """
        super().__init__(api_key)
        self.default_model = default_model or DEFAULT_OPENAI_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.base_url = base_url
        self._client: Optional[AsyncOpenAI] = None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    def _convert_messages_to_openai(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert our Message format to OpenAI's format."""
        return [msg.to_dict() for msg in messages]

    def _parse_openai_response(self, response: ChatCompletion, model: str) -> ModelResponse:
        """Parse OpenAI response into our format."""
        choice = response.choices[0]

        usage = None
        if response.usage:
            usage = Usage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return ModelResponse(
            content=choice.message.content or "",
            usage=usage,
            model=model,
            finish_reason=choice.finish_reason,
        )

    async def _generate(self, messages: list[Message]) -> ModelResponse:
        """Generate a planning response from OpenAI."""
        response = await self.client.chat.completions.create(
            model=self.default_model,
            messages=self._convert_messages_to_openai(messages),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return self._parse_openai_response(response, self.default_model)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def name(self) -> str:
        """Transport name."""
        return "OpenAI"
