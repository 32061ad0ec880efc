"""MemData MCP command line.

Usage:
    memdata-mcp                  # Serve MCP tools over stdio (what MCP hosts run)
    memdata-mcp serve --transport sse
    memdata-mcp status           # One-shot API health and storage check
"""

import asyncio
import json
from enum import Enum

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel

from memdata_mcp import __version__
from memdata_mcp.config import API_KEY_URL, Config
from memdata_mcp.errors import ConfigError
from memdata_mcp.log_config import get_logger

log = get_logger("cli")

app = typer.Typer(
    name="memdata-mcp",
    help="MemData MCP - long-term memory tools for AI agents",
    rich_markup_mode="rich",
)
# stdout is reserved for the MCP stdio transport
err_console = Console(stderr=True)


class Transport(str, Enum):
    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


MCP_CONFIG_EXAMPLE = {
    "mcpServers": {
        "memdata": {
            "command": "memdata-mcp",
            "env": {"MEMDATA_API_KEY": "md_your_key_here"},
        }
    }
}


def _load_config() -> Config:
    """Resolve configuration or exit with status 1 and a usage message."""
    try:
        return Config.from_env()
    except ConfigError as e:
        log.error(f"Configuration error: {e}")
        err_console.print(f"[bold red]Error:[/bold red] {e}")
        err_console.print(f"\nGet your API key at: [cyan]{API_KEY_URL}[/cyan]")
        err_console.print("\nThen add to your MCP config:")
        err_console.print(json.dumps(MCP_CONFIG_EXAMPLE, indent=2), markup=False, highlight=False)
        raise typer.Exit(1) from None


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context):
    """Serve MCP tools over stdio when no command is given."""
    if ctx.invoked_subcommand is None:
        serve(Transport.STDIO)


@app.command()
def serve(
    transport: Transport = typer.Option(
        Transport.STDIO,
        "--transport",
        "-t",
        help="MCP transport to serve on",
    ),
):
    """Run the MemData MCP server."""
    from memdata_mcp.mcp.server import run

    config = _load_config()
    try:
        run(config, transport=transport.value)
    except KeyboardInterrupt:
        log.info("Interrupted, shutting down")
    except Exception as e:
        log.exception(f"Failed to start MCP server: {e}")
        err_console.print(f"[bold red]Failed to start MCP server:[/bold red] {e}")
        raise typer.Exit(1) from e


@app.command()
def status():
    """Check API health and storage usage."""
    from memdata_mcp.mcp.server import configure, memdata_status

    config = _load_config()

    async def _check():
        client = configure(config)
        try:
            return await memdata_status()
        finally:
            await client.close()

    result = asyncio.run(_check())
    text = "\n".join(block.text for block in result.content)
    style = "red" if result.isError else "cyan"
    err_console.print(Panel(text, title=f"MemData v{__version__}", border_style=style, box=box.ROUNDED))
    if result.isError:
        raise typer.Exit(1)


@app.command()
def version():
    """Show the installed version."""
    typer.echo(f"memdata-mcp {__version__}")


def main():
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
