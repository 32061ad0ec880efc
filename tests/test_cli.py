"""Tests for the memdata-mcp command line."""

from unittest.mock import patch

import respx
from httpx import Response
from typer.testing import CliRunner

from memdata_mcp import __version__
from memdata_mcp.cli import app

runner = CliRunner()

TEST_API_URL = "http://test-api"


def _set_env(env):
    env.setenv("MEMDATA_API_KEY", "md_cli_key")
    env.setenv("MEMDATA_API_URL", TEST_API_URL)


class TestServe:
    """Tests for serving the MCP server."""

    def test_missing_key_exits_1(self, clean_env):
        """Without an API key the process exits with status 1 before serving."""
        with patch("memdata_mcp.mcp.server.run") as mock_run:
            result = runner.invoke(app, ["serve"])

        assert result.exit_code == 1
        mock_run.assert_not_called()

    def test_no_command_serves_stdio(self, clean_env):
        """Running without a command serves over stdio."""
        _set_env(clean_env)

        with patch("memdata_mcp.mcp.server.run") as mock_run:
            result = runner.invoke(app, [])

        assert result.exit_code == 0
        config = mock_run.call_args.args[0]
        assert config.api_url == TEST_API_URL
        assert mock_run.call_args.kwargs["transport"] == "stdio"

    def test_transport_option(self, clean_env):
        """--transport selects the FastMCP transport."""
        _set_env(clean_env)

        with patch("memdata_mcp.mcp.server.run") as mock_run:
            result = runner.invoke(app, ["serve", "--transport", "sse"])

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["transport"] == "sse"

    def test_startup_failure_exits_1(self, clean_env):
        """An error while starting the transport exits with status 1."""
        _set_env(clean_env)

        with patch("memdata_mcp.mcp.server.run", side_effect=OSError("address in use")):
            result = runner.invoke(app, ["serve", "--transport", "sse"])

        assert result.exit_code == 1


class TestStatus:
    """Tests for the one-shot status command."""

    def test_status_healthy(self, clean_env):
        """A healthy API exits 0."""
        _set_env(clean_env)

        with respx.mock(base_url=TEST_API_URL) as router:
            router.get("/api/memdata/health").mock(return_value=Response(200, json={"status": "ok"}))
            router.get("/api/memdata/usage").mock(
                return_value=Response(200, json={"success": True, "usage": {"storage_used_mb": 1, "storage_limit_mb": 4}})
            )
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 0

    def test_status_unauthorized(self, clean_env):
        """A rejected key exits 1."""
        _set_env(clean_env)

        with respx.mock(base_url=TEST_API_URL) as router:
            router.route().mock(return_value=Response(401, text="Invalid API key"))
            result = runner.invoke(app, ["status"])

        assert result.exit_code == 1


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output
