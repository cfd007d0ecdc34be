"""Tests for the approval gate HTTP endpoints.

The app runs in-process on the test's event loop through httpx's ASGI
transport, so approval futures created by the test and decisions posted
over HTTP share one loop.
"""

import asyncio
from collections.abc import AsyncIterator
from typing import Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from agents.tool_approval import ToolApprovalManager
from agents.tool_orchestrator import ToolOrchestrator
from agents.tool_pipeline import ToolPipeline
from api.server import create_app
from common.errors import UserDeniedError
from common.models.enums import ApprovalGateState
from common.types import ToolCall, ToolErrorType
from tools.registry import ToolRegistry

MakeToolCall = Callable[..., ToolCall]


@pytest.fixture
def app(approval_manager: ToolApprovalManager, registry: ToolRegistry) -> FastAPI:
    return create_app(approval_manager=approval_manager, registry=registry)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    """Async HTTP client bound directly to the app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.mark.unit
class TestApprovalEndpoints:
    """Pending request, decisions and remembered settings over HTTP."""

    @pytest.mark.asyncio
    async def test_no_pending_request(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/api/approvals/pending")

        assert response.status_code == 200
        assert response.json() == {"pending": None}

    @pytest.mark.asyncio
    async def test_pending_request_is_visible(
        self,
        client: httpx.AsyncClient,
        approval_manager: ToolApprovalManager,
        make_tool_call: MakeToolCall,
    ) -> None:
        approval_manager.request_approval([make_tool_call("delete_pod", value="web-1")])
        request_id = approval_manager.get_pending_request().request_id

        response = await client.get("/api/approvals/pending")

        pending = response.json()["pending"]
        assert pending["type"] == "approval_request"
        assert pending["request_id"] == request_id
        assert pending["tool_calls"][0]["name"] == "delete_pod"
        assert pending["tool_calls"][0]["arguments"] == {"value": "web-1"}

    @pytest.mark.asyncio
    async def test_approve_with_remember(
        self,
        client: httpx.AsyncClient,
        approval_manager: ToolApprovalManager,
        make_tool_call: MakeToolCall,
    ) -> None:
        future = approval_manager.request_approval([make_tool_call("delete_pod")])
        request_id = approval_manager.get_pending_request().request_id

        response = await client.post(
            f"/api/approvals/{request_id}/approve",
            json={"approved_tool_ids": ["call-1"], "remember_choice": True},
        )

        assert response.status_code == 200
        assert response.json() == {
            "request_id": request_id,
            "decision": "approved",
            "applied": True,
        }
        assert await future == ["call-1"]

        settings = (await client.get("/api/approvals/settings")).json()
        assert settings["session_auto_approval"] is True

    @pytest.mark.asyncio
    async def test_deny(
        self,
        client: httpx.AsyncClient,
        approval_manager: ToolApprovalManager,
        make_tool_call: MakeToolCall,
    ) -> None:
        future = approval_manager.request_approval([make_tool_call("delete_pod")])
        request_id = approval_manager.get_pending_request().request_id

        response = await client.post(f"/api/approvals/{request_id}/deny")

        assert response.status_code == 200
        assert response.json()["decision"] == "denied"
        with pytest.raises(UserDeniedError):
            await future
        assert approval_manager.state == ApprovalGateState.IDLE

    @pytest.mark.asyncio
    async def test_stale_decisions_are_not_found(
        self,
        client: httpx.AsyncClient,
        approval_manager: ToolApprovalManager,
        make_tool_call: MakeToolCall,
    ) -> None:
        future = approval_manager.request_approval([make_tool_call("delete_pod")])

        approve = await client.post(
            "/api/approvals/tool-approval-0-stale/approve", json={"approved_tool_ids": ["call-1"]}
        )
        deny = await client.post("/api/approvals/tool-approval-0-stale/deny")

        assert approve.status_code == 404
        assert deny.status_code == 404
        assert not future.done()

    @pytest.mark.asyncio
    async def test_clear_settings(
        self,
        client: httpx.AsyncClient,
        approval_manager: ToolApprovalManager,
    ) -> None:
        approval_manager.set_session_auto_approval(True)

        response = await client.delete("/api/approvals/settings")

        assert response.status_code == 200
        assert response.json() == {"session_auto_approval": False, "tool_settings": []}
        assert not approval_manager.is_session_auto_approval_enabled()


@pytest.mark.integration
class TestApprovalRoundTrip:
    """A pipeline batch approved by a UI talking HTTP."""

    @pytest.mark.asyncio
    async def test_partial_approval_over_http(
        self,
        client: httpx.AsyncClient,
        approval_manager: ToolApprovalManager,
        registry: ToolRegistry,
        make_tool_call: MakeToolCall,
    ) -> None:
        pipeline = ToolPipeline(
            ToolOrchestrator(),
            approval_manager,
            registry,
            require_approval=True,
            auto_approve_tools=[],
        )
        calls = [make_tool_call("delete_pod"), make_tool_call("apply_manifest", value="a.yaml")]

        batch = asyncio.create_task(pipeline.execute_batch(calls))
        await asyncio.sleep(0)

        pending = (await client.get("/api/approvals/pending")).json()["pending"]
        await client.post(
            f"/api/approvals/{pending['request_id']}/approve",
            json={"approved_tool_ids": ["call-2"], "remember_choice": True},
        )
        executions = await batch

        assert executions[0].result.error_type == ToolErrorType.USER_REJECTED
        assert executions[1].result.content == "apply_manifest: a.yaml"

        settings = (await client.get("/api/approvals/settings")).json()
        assert settings["tool_settings"] == [{"tool_name": "apply_manifest", "auto_approve": True}]
