"""Transport factory for creating planning transports."""

from typing import Optional

from .anthropic_client import AnthropicTransport
from .base_client import BaseTransport
from .openai_client import OpenAITransport


def create_transport(
    provider: str,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    temperature: float = 0.0,
    max_tokens: int = 4096,
) -> BaseTransport:
    """Create a planning transport for the specified provider.

    Args:
        provider: Provider name ('anthropic'/'claude' or 'openai'/'gpt')
        model: Default model to use (optional)
        api_key: API key for the provider (optional)
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate

    Returns:
        BaseTransport instance for the provider

    Raises:
        ValueError: If provider is not supported
    """
    provider_lower = provider.lower()

    # Handle provider aliases
    if provider_lower in ["anthropic", "claude"]:
        return AnthropicTransport(
            api_key=api_key, default_model=model, temperature=temperature, max_tokens=max_tokens
        )
    elif provider_lower in ["openai", "gpt"]:
        return OpenAITransport(
            api_key=api_key, default_model=model, temperature=temperature, max_tokens=max_tokens
        )
    else:
        raise ValueError(f"Unsupported provider: {provider}")
