"""Tests for buildable_mcp package import behaviour."""

import subprocess
import sys

LIBRARY_USE = """
import logging
import sys

import buildable_mcp
from buildable_mcp import BuildableClient, BuildableConfig, setup_buildable

BuildableClient(BuildableConfig("https://x", "k", "p"))
setup_buildable(api_key="k", project_id="p")

print(len(logging.getLogger().handlers))
print("buildable_mcp.server" in sys.modules)
"""


class TestLibraryIsSilent:
    """Using the client as a library should not touch logging."""

    def test_import_and_construct_write_nothing(self) -> None:
        """Importing the package and building clients should not log or add handlers."""
        result = subprocess.run(
            [sys.executable, "-c", LIBRARY_USE],
            capture_output=True,
            text=True,
            timeout=30,
        )

        assert result.returncode == 0, result.stderr
        assert result.stderr == ""
        root_handlers, server_imported = result.stdout.split()
        assert root_handlers == "0"
        assert server_imported == "False"

    def test_package_has_version(self) -> None:
        """Package should expose a __version__ string."""
        import buildable_mcp

        assert isinstance(buildable_mcp.__version__, str)
        assert buildable_mcp.__version__
