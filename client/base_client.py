"""Base transport interface for planning calls to an LLM."""

import asyncio
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable

from dotenv import dotenv_values

from common.errors import PlanningCancelledError


class Role(str, Enum):
    """Message roles."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass
class Message:
    """Represents a message in a conversation."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary format for API calls."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class Usage:
    """Token usage information."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


@dataclass
class ModelResponse:
    """Response from a model invocation.

    ``content`` is either plain text or a list of typed content blocks.
    """

    content: Union[str, list[Any]]
    usage: Optional[Usage] = None
    model: Optional[str] = None
    finish_reason: Optional[str] = None


@runtime_checkable
class ChatTransport(Protocol):
    """Anything the planner can send messages to."""

    async def invoke(
        self, messages: list[Message], cancel_event: Optional[asyncio.Event] = None
    ) -> ModelResponse:
        """Send messages to the model and return its response."""
        ...


def extract_text_content(content: Any) -> str:
    """Extract plain text from the different model response content shapes.

    Strings pass through, lists keep only blocks tagged ``text``, and objects
    with ``text`` or nested ``content`` are unwrapped. Anything else is
    stringified.
    """
    if isinstance(content, str):
        return content

    if isinstance(content, (list, tuple)):
        parts = []
        for item in content:
            if _get_field(item, "type") == "text":
                parts.append(_get_field(item, "text") or "")
        return "".join(parts)

    if content is not None:
        text = _get_field(content, "text")
        if text:
            return str(text)
        nested = _get_field(content, "content")
        if nested:
            return extract_text_content(nested)

    if not content:
        return ""
    return str(content)


def _get_field(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


class BaseTransport(ABC):
    """Abstract base class for provider transports.

    Subclasses implement ``_generate``; ``invoke`` adds cancellation.
    """

    def __init__(self, api_key: Optional[str] = None):
        """Initialize the transport.

        Args:
            api_key: API key for the provider. If not provided, will look for
                    environment variables or the project's .env file
        """
        self.api_key = api_key or self._get_api_key()

    @property
    @abstractmethod
    def api_key_env(self) -> str:
        """Environment variable holding this provider's API key."""
        pass

    def _get_api_key(self) -> str:
        """Get API key from environment or secrets file."""
        api_key = os.getenv(self.api_key_env)
        if not api_key:
            api_key = self.load_secrets_from_file().get(self.api_key_env)
        if not api_key:
            raise ValueError(f"{self.api_key_env} not found in environment or .env file")
        return api_key

    @abstractmethod
    async def _generate(self, messages: list[Message]) -> ModelResponse:
        """Call the provider once."""
        pass

    async def invoke(
        self, messages: list[Message], cancel_event: Optional[asyncio.Event] = None
    ) -> ModelResponse:
        """Call the provider, aborting if ``cancel_event`` is set first.

        Raises:
            PlanningCancelledError: If the call was cancelled
        """
        if cancel_event is None:
            return await self._generate(messages)
        if cancel_event.is_set():
            raise PlanningCancelledError("Planning request cancelled before it was sent")

        generate_task = asyncio.ensure_future(self._generate(messages))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({generate_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            generate_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if generate_task.done():
            return generate_task.result()

        generate_task.cancel()
        raise PlanningCancelledError("Planning request cancelled")

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass

    async def __aenter__(self) -> "BaseTransport":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    @staticmethod
    def load_secrets_from_file(file_path: Optional[str] = None) -> dict[str, str]:
        """Load secrets from a .env file.

        Args:
            file_path: Path to the secrets file. Defaults to finding .env in project root.

        Returns:
            Dictionary of environment variables
        """
        if file_path is None:
            # Find project root by looking for pyproject.toml
            current_dir = Path(__file__).resolve()
            for parent in current_dir.parents:
                if (parent / "pyproject.toml").exists():
                    env_path = parent / ".env"
                    if env_path.exists():
                        file_path = str(env_path)
                        break

        if not file_path or not os.path.exists(file_path):
            return {}
        return {key: value for key, value in dotenv_values(file_path).items() if value is not None}
