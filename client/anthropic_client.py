"""Anthropic Claude transport for planning calls."""

import inspect
from functools import lru_cache
from typing import Any, Optional

from anthropic import AsyncAnthropic
from anthropic.resources.messages import AsyncMessages
from anthropic.types import Message as AnthropicMessage

from .base_client import BaseTransport, Message, ModelResponse, Role, Usage

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"


@lru_cache(maxsize=None)
def _messages_create_params() -> frozenset[str]:
    """Keyword arguments accepted by the installed SDK's messages.create."""
    return frozenset(inspect.signature(AsyncMessages.create).parameters)


class AnthropicTransport(BaseTransport):
    """Anthropic Claude transport."""

    api_key_env = "ANTHROPIC_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ):
        """Initialize Anthropic transport.

        Args:
            api_key: Anthropic API key
            default_model: Default model to use (e.g., 'claude-sonnet-4-20250514')
            temperature: Sampling temperature for planning calls
            max_tokens: Maximum tokens to generate
        """
        super().__init__(api_key)
        self.default_model = default_model or DEFAULT_ANTHROPIC_MODEL
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: Optional[AsyncAnthropic] = None

    @property
    def client(self) -> AsyncAnthropic:
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    def _convert_messages_to_anthropic(self, messages: list[Message]) -> list[dict[str, Any]]:
        """Convert our Message format to Anthropic's format."""
        # System messages are handled separately in Anthropic
        return [
            {
                "role": "user" if msg.role == Role.USER else "assistant",
                "content": msg.content,
            }
            for msg in messages
            if msg.role != Role.SYSTEM
        ]

    def _extract_system_message(self, messages: list[Message]) -> Optional[str]:
        """Join all system message contents."""
        system_parts = [msg.content for msg in messages if msg.role == Role.SYSTEM]
        return "\n\n".join(system_parts) if system_parts else None

    def _parse_anthropic_response(self, response: AnthropicMessage, model: str) -> ModelResponse:
        """Parse Anthropic response into our format."""
        usage = None
        if getattr(response, "usage", None):
            usage = Usage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            )

        # Content stays a list of typed blocks; callers extract the text
        return ModelResponse(
            content=list(response.content),
            usage=usage,
            model=model,
            finish_reason=getattr(response, "stop_reason", None),
        )

    async def _generate(self, messages: list[Message]) -> ModelResponse:
        """Generate a planning response from Anthropic Claude."""
        request_params: dict[str, Any] = {
            "model": self.default_model,
            "messages": self._convert_messages_to_anthropic(messages),
            "max_tokens": self.max_tokens,
        }
        # Newer SDK releases dropped sampling temperature from messages.create
        if "temperature" in _messages_create_params():
            request_params["temperature"] = self.temperature

        system_message = self._extract_system_message(messages)
        if system_message:
            request_params["system"] = system_message

        response = await self.client.messages.create(**request_params)
        return self._parse_anthropic_response(response, self.default_model)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    @property
    def name(self) -> str:
        """Transport name."""
        return "Anthropic"
