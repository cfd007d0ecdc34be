"""Client module for planning calls to LLM providers."""

from .anthropic_client import AnthropicTransport
from .base_client import (
    BaseTransport,
    ChatTransport,
    Message,
    ModelResponse,
    Role,
    Usage,
    extract_text_content,
)
from .factory import create_transport
from .openai_client import OpenAITransport

__all__ = [
    # Base classes
    "BaseTransport",
    "ChatTransport",
    "Message",
    "ModelResponse",
    "Role",
    "Usage",
    "extract_text_content",
    # Provider transports
    "AnthropicTransport",
    "OpenAITransport",
    # Factory
    "create_transport",
]
