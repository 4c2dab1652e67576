"""Tests for buildable_mcp.config module."""

import pytest

from buildable_mcp import setup_buildable
from buildable_mcp.config import (
    DEFAULT_AI_ASSISTANT_ID,
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    ConfigurationError,
    load_config,
)

REQUIRED = {"BUILDABLE_API_KEY": "k", "BUILDABLE_PROJECT_ID": "p"}


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self) -> None:
        """Only the required variables should be needed."""
        config, options = load_config(REQUIRED)

        assert config.api_key == "k"
        assert config.project_id == "p"
        assert config.api_url == DEFAULT_API_URL
        assert config.ai_assistant_id == DEFAULT_AI_ASSISTANT_ID
        assert config.timeout == DEFAULT_TIMEOUT
        assert options.log_level == "info"
        assert options.enable_real_time_updates is False
        assert options.retry_attempts == 3

    def test_optional_values(self) -> None:
        """Optional variables should override defaults."""
        config, options = load_config(
            {
                **REQUIRED,
                "BUILDABLE_API_URL": "http://localhost:3000/api",
                "BUILDABLE_AI_ASSISTANT_ID": "claude-code",
                "BUILDABLE_TIMEOUT": "5",
                "BUILDABLE_LOG_LEVEL": "DEBUG",
                "BUILDABLE_REAL_TIME": "true",
            }
        )

        assert config.api_url == "http://localhost:3000/api"
        assert config.ai_assistant_id == "claude-code"
        assert config.timeout == 5.0
        assert options.log_level == "debug"
        assert options.enable_real_time_updates is True

    @pytest.mark.parametrize("missing", ["BUILDABLE_API_KEY", "BUILDABLE_PROJECT_ID"])
    def test_missing_required(self, missing: str) -> None:
        """A missing required variable should name itself in the error."""
        env = {k: v for k, v in REQUIRED.items() if k != missing}

        with pytest.raises(ConfigurationError, match=f"{missing} environment variable is required"):
            load_config(env)

    def test_blank_required_is_missing(self) -> None:
        """Whitespace-only values should count as missing."""
        with pytest.raises(ConfigurationError, match="BUILDABLE_API_KEY"):
            load_config({**REQUIRED, "BUILDABLE_API_KEY": "  "})

    def test_warn_alias(self) -> None:
        """'warn' should be accepted as 'warning'."""
        _, options = load_config({**REQUIRED, "BUILDABLE_LOG_LEVEL": "warn"})

        assert options.log_level == "warning"

    def test_invalid_log_level(self) -> None:
        """Unknown log levels should be rejected."""
        with pytest.raises(ConfigurationError, match="BUILDABLE_LOG_LEVEL"):
            load_config({**REQUIRED, "BUILDABLE_LOG_LEVEL": "verbose"})

    @pytest.mark.parametrize("timeout", ["soon", "0", "-3"])
    def test_invalid_timeout(self, timeout: str) -> None:
        """Non-numeric or non-positive timeouts should be rejected."""
        with pytest.raises(ConfigurationError, match="BUILDABLE_TIMEOUT"):
            load_config({**REQUIRED, "BUILDABLE_TIMEOUT": timeout})

    def test_reads_process_environment(self, monkeypatch, tmp_path) -> None:
        """Without a mapping, os.environ should be used."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("BUILDABLE_API_KEY", "env-key")
        monkeypatch.setenv("BUILDABLE_PROJECT_ID", "env-project")

        config, _ = load_config()

        assert config.api_key == "env-key"
        assert config.project_id == "env-project"


class TestSetupBuildable:
    """Tests for the setup_buildable helper."""

    def test_production_defaults(self) -> None:
        """setup_buildable should fill in the production URL and client id."""
        client = setup_buildable(api_key="k", project_id="p")

        assert client.config.api_url == DEFAULT_API_URL
        assert client.ai_assistant_id == "buildable-client"
        assert client.headers["Authorization"] == "Bearer k"
