"""
Buildable MCP - Buildable project API tools for AI coding assistants

Exposes a Buildable project over MCP stdio:
- get_project_context / get_next_task to orient
- start_task, update_progress, complete_task to report work
- create_discussion to ask a human
"""

import logging

__version__ = "1.6.0"

from .client import BuildableClient, create_client  # noqa: E402
from .config import (  # noqa: E402
    DEFAULT_API_URL,
    BuildableConfig,
    ClientOptions,
    ConfigurationError,
    load_config,
)
from .errors import APIError, NotConnectedError  # noqa: E402

logging.getLogger(__name__).addHandler(logging.NullHandler())


def setup_buildable(
    api_key: str,
    project_id: str,
    api_url: str | None = None,
    ai_assistant_id: str | None = None,
) -> BuildableClient:
    """Create a client with production defaults."""
    return create_client(
        BuildableConfig(
            api_url=api_url or DEFAULT_API_URL,
            api_key=api_key,
            project_id=project_id,
            ai_assistant_id=ai_assistant_id or "buildable-client",
        )
    )


def main() -> None:
    """Entry point for the Buildable MCP server."""
    # Deferred: building the FastMCP server configures root logging
    from .server import main as run_server

    run_server()


__all__ = [
    "APIError",
    "BuildableClient",
    "BuildableConfig",
    "ClientOptions",
    "ConfigurationError",
    "NotConnectedError",
    "__version__",
    "create_client",
    "load_config",
    "main",
    "setup_buildable",
]
