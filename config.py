"""Project configuration and paths."""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Project root is where this config.py file is located
PROJECT_ROOT = Path(__file__).parent

# Values already in the environment win over the .env file
load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


# Tool approval configuration
TOOL_APPROVAL_CONFIG: dict[str, Any] = {
    # Global switch for tool approval
    "require_approval": _env_flag("REQUIRE_TOOL_APPROVAL", "true"),
    # Tools that never go through the approval gate
    "auto_approve_tools": _env_list("AUTO_APPROVE_TOOLS"),
}

# Planning model configuration
LLM_CONFIG: dict[str, Any] = {
    "provider": os.getenv("TOOLGATE_LLM_PROVIDER", "anthropic"),
    # None means the provider's default model
    "model": os.getenv("TOOLGATE_LLM_MODEL") or None,
    "temperature": float(os.getenv("TOOLGATE_LLM_TEMPERATURE", "0.0")),
    "max_tokens": int(os.getenv("TOOLGATE_LLM_MAX_TOKENS", "4096")),
}

# Initial enabled-tools settings
TOOL_SETTINGS_CONFIG: dict[str, Any] = {
    "disabled_tools": _env_list("DISABLED_TOOLS"),
}

# HTTP server configuration
SERVER_CONFIG: dict[str, Any] = {
    "host": os.getenv("TOOLGATE_HOST", "127.0.0.1"),
    "port": int(os.getenv("TOOLGATE_PORT", "8080")),
    "log_level": os.getenv("TOOLGATE_LOG_LEVEL", "info").lower(),
}
