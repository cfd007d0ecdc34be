"""Main FastAPI server for the Toolgate backend."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

# Logging is configured in main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agents.tool_approval import ToolApprovalManager
from agents.tool_orchestrator import ToolOrchestrator
from client.base_client import BaseTransport, ChatTransport
from client.factory import create_transport
from config import LLM_CONFIG, TOOL_SETTINGS_CONFIG
from tools.registry import ToolExecutor, ToolRegistry, ToolSettings

from .models.common import ErrorResponse
from .routes.approvals import approvals_router
from .routes.tools import tools_router

logger = logging.getLogger(__name__)


def create_default_registry() -> ToolRegistry:
    """Registry with the configured tools disabled."""
    disabled = TOOL_SETTINGS_CONFIG["disabled_tools"]
    settings = ToolSettings(enabled_tools={name: False for name in disabled} or None)
    return ToolRegistry(ToolExecutor(), settings)


def create_default_transport() -> Optional[BaseTransport]:
    """Planning transport from LLM_CONFIG, or None if it cannot be built."""
    try:
        return create_transport(
            LLM_CONFIG["provider"],
            model=LLM_CONFIG["model"],
            temperature=LLM_CONFIG["temperature"],
            max_tokens=LLM_CONFIG["max_tokens"],
        )
    except ValueError as e:
        logger.warning(f"⚠️ Planning transport unavailable, /api/plan disabled: {e}")
        return None


def create_app(
    approval_manager: Optional[ToolApprovalManager] = None,
    registry: Optional[ToolRegistry] = None,
    transport: Optional[ChatTransport] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        approval_manager: Shared approval gate (a new one by default)
        registry: Tool registry (built from TOOL_SETTINGS_CONFIG by default)
        transport: Planning transport (built from LLM_CONFIG at startup by default)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan context manager."""
        logger.info("🚀 Starting Toolgate backend server...")

        owned_transport: Optional[BaseTransport] = None
        if app.state.transport is None:
            owned_transport = create_default_transport()
            app.state.transport = owned_transport

        try:
            yield
        finally:
            if owned_transport is not None:
                logger.info("🧹 Closing planning transport...")
                await owned_transport.close()
                app.state.transport = None

    app = FastAPI(
        title="Toolgate Backend API",
        description="HTTP API for tool planning and human approval of tool execution",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.approval_manager = approval_manager or ToolApprovalManager()
    app.state.registry = registry or create_default_registry()
    app.state.orchestrator = ToolOrchestrator()
    app.state.transport = transport

    # Add CORS middleware for UI communication
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle all unhandled exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        error = ErrorResponse(
            detail="An internal error occurred. Please try again later.",
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=500, content=error.model_dump(mode="json"))

    app.include_router(approvals_router, prefix="/api", tags=["approvals"])
    app.include_router(tools_router, prefix="/api", tags=["tools"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Toolgate Backend API", "version": "0.1.0", "status": "running"}

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check endpoint."""
        approval_manager = app.state.approval_manager
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "components": {
                "approval_gate": {"state": approval_manager.state.value},
                "registry": {"tool_count": len(app.state.registry.get_all_tools())},
                "transport": {"configured": app.state.transport is not None},
            },
        }

    return app


# Create the application instance
app = create_app()
