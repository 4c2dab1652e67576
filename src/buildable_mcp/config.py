"""
Environment-driven configuration for the Buildable MCP server.

Variables:
- BUILDABLE_API_KEY: API key (required)
- BUILDABLE_PROJECT_ID: Project ID (required)
- BUILDABLE_API_URL: API endpoint (default https://bldbl.dev/api)
- BUILDABLE_AI_ASSISTANT_ID: Assistant identifier (default cursor-ide)
- BUILDABLE_TIMEOUT: Request timeout in seconds (default 30)
- BUILDABLE_LOG_LEVEL: debug, info, warning or error (default info)
- BUILDABLE_REAL_TIME: "true" to enable real-time updates (not implemented)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_API_URL = "https://bldbl.dev/api"
DEFAULT_AI_ASSISTANT_ID = "cursor-ide"
DEFAULT_TIMEOUT = 30.0

VALID_LOG_LEVELS = frozenset({"debug", "info", "warning", "error"})


class ConfigurationError(Exception):
    """Raised when a required startup parameter is missing or invalid."""


@dataclass(frozen=True)
class BuildableConfig:
    """Connection parameters, read once at startup."""

    api_url: str
    api_key: str
    project_id: str
    ai_assistant_id: str | None = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class ClientOptions:
    """Client behaviour options.

    retry_attempts, retry_delay and enable_real_time_updates are accepted
    for compatibility but the client does not act on them.
    """

    retry_attempts: int = 3
    retry_delay: float = 1.0
    enable_real_time_updates: bool = False
    log_level: str = "info"


def _require(env: Mapping[str, str], name: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise ConfigurationError(f"{name} environment variable is required")
    return value


def _parse_log_level(raw: str) -> str:
    level = raw.strip().lower() or "info"
    if level == "warn":
        level = "warning"
    if level not in VALID_LOG_LEVELS:
        raise ConfigurationError(
            f"Invalid BUILDABLE_LOG_LEVEL '{raw}'. "
            f"Must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )
    return level


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid BUILDABLE_TIMEOUT '{raw}'") from e
    if timeout <= 0:
        raise ConfigurationError(f"BUILDABLE_TIMEOUT must be positive, got {raw}")
    return timeout


def load_config(
    environ: Mapping[str, str] | None = None,
) -> tuple[BuildableConfig, ClientOptions]:
    """
    Build configuration from environment variables.

    Args:
        environ: Mapping to read from. Defaults to os.environ, seeded from
            a .env file in the working directory if one exists.

    Returns:
        Tuple of (connection config, client options)

    Raises:
        ConfigurationError: If the API key or project ID is missing, or a
            value cannot be parsed
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    config = BuildableConfig(
        api_url=environ.get("BUILDABLE_API_URL") or DEFAULT_API_URL,
        api_key=_require(environ, "BUILDABLE_API_KEY"),
        project_id=_require(environ, "BUILDABLE_PROJECT_ID"),
        ai_assistant_id=environ.get("BUILDABLE_AI_ASSISTANT_ID")
        or DEFAULT_AI_ASSISTANT_ID,
        timeout=_parse_timeout(environ.get("BUILDABLE_TIMEOUT")),
    )
    options = ClientOptions(
        log_level=_parse_log_level(environ.get("BUILDABLE_LOG_LEVEL", "info")),
        enable_real_time_updates=environ.get("BUILDABLE_REAL_TIME") == "true",
    )
    return config, options
