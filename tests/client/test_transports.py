"""Tests for planning transports, text extraction and the transport factory."""

import asyncio
import inspect
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from anthropic.resources.messages import AsyncMessages

from client import anthropic_client
from client.anthropic_client import DEFAULT_ANTHROPIC_MODEL, AnthropicTransport
from client.base_client import (
    BaseTransport,
    ChatTransport,
    Message,
    ModelResponse,
    Role,
    extract_text_content,
)
from client.factory import create_transport
from client.openai_client import DEFAULT_OPENAI_MODEL, OpenAITransport
from common.errors import PlanningCancelledError


class SlowTransport(BaseTransport):
    """Transport whose provider call takes a while."""

    api_key_env = "SLOW_API_KEY"

    def __init__(self, delay: float):
        super().__init__(api_key="test-key")
        self.delay = delay
        self.generate_cancelled = False

    async def _generate(self, messages: list[Message]) -> ModelResponse:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.generate_cancelled = True
            raise
        return ModelResponse(content="done")

    async def close(self) -> None:
        pass


MESSAGES = [
    Message(role=Role.SYSTEM, content="Plan tools"),
    Message(role=Role.USER, content="Show pods"),
]


@pytest.mark.unit
class TestExtractTextContent:
    """Normalizing the different response content shapes."""

    @pytest.mark.parametrize(
        "content, expected",
        [
            ("plain", "plain"),
            ("", ""),
            (None, ""),
            ([], ""),
            ([{"type": "text", "text": "a"}, {"type": "text", "text": "b"}], "ab"),
            ([{"type": "tool_use", "input": {}}, {"type": "text", "text": "only"}], "only"),
            ([SimpleNamespace(type="text", text="obj")], "obj"),
            ({"text": "mapped"}, "mapped"),
            ({"content": [{"type": "text", "text": "nested"}]}, "nested"),
            (SimpleNamespace(text="attr"), "attr"),
            (SimpleNamespace(content="inner"), "inner"),
            (42, "42"),
        ],
    )
    def test_shapes(self, content: Any, expected: str) -> None:
        assert extract_text_content(content) == expected


@pytest.mark.unit
class TestCancellation:
    """Racing the provider call against the cancel event."""

    @pytest.mark.asyncio
    async def test_completes_without_cancel_event(self) -> None:
        response = await SlowTransport(delay=0).invoke(MESSAGES)

        assert response.content == "done"

    @pytest.mark.asyncio
    async def test_completes_before_cancel(self) -> None:
        response = await SlowTransport(delay=0).invoke(MESSAGES, cancel_event=asyncio.Event())

        assert response.content == "done"

    @pytest.mark.asyncio
    async def test_already_cancelled(self) -> None:
        cancel_event = asyncio.Event()
        cancel_event.set()

        with pytest.raises(PlanningCancelledError):
            await SlowTransport(delay=10).invoke(MESSAGES, cancel_event=cancel_event)

    @pytest.mark.asyncio
    async def test_cancel_during_call(self) -> None:
        transport = SlowTransport(delay=10)
        cancel_event = asyncio.Event()

        call = asyncio.create_task(transport.invoke(MESSAGES, cancel_event=cancel_event))
        await asyncio.sleep(0.01)
        cancel_event.set()

        with pytest.raises(PlanningCancelledError):
            await asyncio.wait_for(call, timeout=1)
        await asyncio.sleep(0)
        assert transport.generate_cancelled

    @pytest.mark.asyncio
    async def test_task_cancellation_propagates(self) -> None:
        transport = SlowTransport(delay=10)

        call = asyncio.create_task(transport.invoke(MESSAGES, cancel_event=asyncio.Event()))
        await asyncio.sleep(0.01)
        call.cancel()

        with pytest.raises(asyncio.CancelledError):
            await call
        await asyncio.sleep(0)
        assert transport.generate_cancelled

    def test_satisfies_protocol(self) -> None:
        assert isinstance(SlowTransport(delay=0), ChatTransport)


@pytest.mark.unit
class TestAnthropicTransport:
    """Anthropic adapter over a mocked SDK client."""

    @staticmethod
    def _mock_sdk(transport: AnthropicTransport) -> AsyncMock:
        sdk_response = SimpleNamespace(
            content=[SimpleNamespace(type="text", text='{"analysis": "x"}')],
            usage=SimpleNamespace(input_tokens=10, output_tokens=5),
            stop_reason="end_turn",
        )
        transport._client = MagicMock()
        transport._client.messages.create = AsyncMock(return_value=sdk_response)
        return transport._client.messages.create  # type: ignore[no-any-return]

    @pytest.mark.asyncio
    async def test_generate(self) -> None:
        transport = AnthropicTransport(api_key="test-key", temperature=0.2, max_tokens=512)
        create = self._mock_sdk(transport)

        response = await transport.invoke(MESSAGES)

        kwargs = create.call_args.kwargs
        # Every argument must be accepted by the installed SDK
        inspect.signature(AsyncMessages.create).bind(None, **kwargs)
        assert kwargs["model"] == DEFAULT_ANTHROPIC_MODEL
        assert kwargs["system"] == "Plan tools"
        assert kwargs["messages"] == [{"role": "user", "content": "Show pods"}]
        assert kwargs["max_tokens"] == 512
        supports_temperature = "temperature" in inspect.signature(AsyncMessages.create).parameters
        assert ("temperature" in kwargs) == supports_temperature
        assert extract_text_content(response.content) == '{"analysis": "x"}'
        assert response.usage.total_tokens == 15
        assert response.finish_reason == "end_turn"

    @pytest.mark.parametrize("supported", [True, False])
    @pytest.mark.asyncio
    async def test_temperature_follows_sdk_signature(self, supported: bool) -> None:
        transport = AnthropicTransport(api_key="test-key", temperature=0.2)
        create = self._mock_sdk(transport)
        params = {"model", "messages", "max_tokens", "system"}
        if supported:
            params.add("temperature")

        with patch.object(
            anthropic_client, "_messages_create_params", return_value=frozenset(params)
        ):
            await transport.invoke(MESSAGES)

        kwargs = create.call_args.kwargs
        if supported:
            assert kwargs["temperature"] == 0.2
        else:
            assert "temperature" not in kwargs

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        transport = AnthropicTransport(api_key="test-key")
        sdk_client = MagicMock()
        sdk_client.close = AsyncMock()
        transport._client = sdk_client

        async with transport:
            pass

        sdk_client.close.assert_awaited_once()
        assert transport._client is None

    def test_missing_api_key(self) -> None:
        with (
            patch.dict("os.environ", {}, clear=True),
            patch.object(BaseTransport, "load_secrets_from_file", return_value={}),
        ):
            with pytest.raises(ValueError) as exc_info:
                AnthropicTransport()

        assert "ANTHROPIC_API_KEY" in str(exc_info.value)


@pytest.mark.integration
class TestAnthropicLive:
    """Real planning call, skipped without an API key."""

    @pytest.mark.asyncio
    async def test_live_planning_call(self, require_anthropic_key: None) -> None:
        async with AnthropicTransport() as transport:
            response = await transport.invoke(
                [Message(role=Role.USER, content="Reply with the single word: ok")]
            )

        assert extract_text_content(response.content).strip()


@pytest.mark.unit
class TestOpenAITransport:
    """OpenAI adapter over a mocked SDK client."""

    @pytest.mark.asyncio
    async def test_generate(self) -> None:
        transport = OpenAITransport(api_key="test-key", default_model="gpt-test")
        completion = SimpleNamespace(
            choices=[
                SimpleNamespace(message=SimpleNamespace(content="plan"), finish_reason="stop")
            ],
            usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4, total_tokens=7),
        )
        transport._client = MagicMock()
        transport._client.chat.completions.create = AsyncMock(return_value=completion)

        response = await transport.invoke(MESSAGES)

        kwargs = transport._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Plan tools"},
            {"role": "user", "content": "Show pods"},
        ]
        assert response.content == "plan"
        assert response.usage.total_tokens == 7


@pytest.mark.unit
class TestCreateTransport:
    """Transport factory."""

    @pytest.mark.parametrize("provider", ["anthropic", "Claude"])
    def test_anthropic(self, provider: str) -> None:
        transport = create_transport(provider, model="claude-test", api_key="test-key")

        assert isinstance(transport, AnthropicTransport)
        assert transport.default_model == "claude-test"

    @pytest.mark.parametrize("provider", ["openai", "gpt"])
    def test_openai(self, provider: str) -> None:
        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            transport = create_transport(provider)

        assert isinstance(transport, OpenAITransport)
        assert transport.default_model == DEFAULT_OPENAI_MODEL

    def test_unsupported_provider(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            create_transport("invalid_provider")

        assert "Unsupported provider" in str(exc_info.value)
