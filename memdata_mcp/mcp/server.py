"""MCP Server for MemData.

Thin server exposing the hosted MemData API as MCP tools. Every tool
validates its arguments (via FastMCP), makes one or two API calls, and
answers with a single text block. Failures never escape a tool: they are
rendered as ``Failed to <action>: <reason>`` with the error flag set.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, TypeVar

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from memdata_mcp import __version__
from memdata_mcp.config import Config
from memdata_mcp.errors import ConfigError, MemDataError
from memdata_mcp.formatting import (
    LIST_MAX_LIMIT,
    QUERY_MAX_LIMIT,
    clamp_limit,
    render_delete,
    render_identity,
    render_ingest,
    render_list,
    render_query,
    render_query_timerange,
    render_relationships,
    render_session_end,
    render_set_identity,
    render_status,
)
from memdata_mcp.log_config import get_logger
from memdata_mcp.mcp.client import MemDataClient

log = get_logger("mcp.server")

T = TypeVar("T")

mcp = FastMCP(
    "memdata",
    instructions="""MemData: Long-term memory that persists across conversations.

## WHEN TO USE MEMORY

**At session START**: Call `memdata_whoami` to recall who you are,
what you were working on, and what was stored recently.

**When information is worth keeping**: `memdata_ingest` notes, decisions,
preferences and context under a descriptive source name.

**Before answering from past context**: `memdata_query` (or
`memdata_query_timerange` for "last week" style questions) returns the most
similar stored chunks with a match-quality marker.

**At session END or before context compression**: `memdata_session_end`
with a summary and what you are working on, so the next session can continue.

## HOUSEKEEPING

- `memdata_list` / `memdata_delete`: see and remove stored artifacts
- `memdata_status`: API health and storage usage
- `memdata_relationships`: entities that appear together with a person, company or concept
""",
)

# Installed once at startup by configure()
_client: MemDataClient | None = None


def configure(config: Config) -> MemDataClient:
    """Install the client used by all tools for the rest of the process."""
    global _client
    _client = MemDataClient(config)
    return _client


def _get_client() -> MemDataClient:
    """Get the shared client installed by configure().

    Raises:
        ConfigError: If configure() has not been called
    """
    if _client is None:
        raise ConfigError("MemData client is not configured; call configure() at startup")
    return _client


def _text_result(text: str, is_error: bool = False) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


async def _invoke(
    action: str,
    operation: Callable[[MemDataClient], Awaitable[T]],
    render: Callable[[T], str],
) -> CallToolResult:
    """Run one API operation and render its outcome.

    Args:
        action: Verb phrase used in the failure message ("ingest", "get status")
        operation: Makes the API call(s) and returns the decoded reply
        render: Turns the decoded reply into the tool's text

    Returns:
        A text result; on any MemDataError the text is
        ``Failed to <action>: <reason>`` and the error flag is set
    """
    try:
        reply = await operation(_get_client())
    except MemDataError as e:
        log.warning(f"Failed to {action}: {e}")
        return _text_result(f"Failed to {action}: {e}", is_error=True)
    return _text_result(render(reply))


# ═══════════════════════════════════════════════════════════════════════════════
# MEMORY TOOLS
# ═══════════════════════════════════════════════════════════════════════════════


@mcp.tool()
async def memdata_ingest(
    content: Annotated[str, Field(min_length=1, description="Text content to store in memory")],
    name: Annotated[
        str,
        Field(
            min_length=1,
            description='Source name/identifier for this memory (e.g., "meeting-notes-2024-01-15", '
            '"project-decision", "user-preference")',
        ),
    ],
) -> CallToolResult:
    """Ingest text content into long-term memory for later retrieval.

    Use this to store important information, notes, decisions, or context
    that should be remembered across conversations.
    """
    log.info(f"Tool: memdata_ingest called (name={name}, chars={len(content)})")
    return await _invoke(
        "ingest",
        lambda client: client.ingest(content, name),
        lambda reply: render_ingest(name, reply),
    )


@mcp.tool()
async def memdata_query(
    query: Annotated[
        str,
        Field(
            min_length=1,
            description='Natural language search query (e.g., "What did we decide about the database?")',
        ),
    ],
    limit: Annotated[
        int, Field(ge=1, description="Maximum number of results to return (default: 5, max: 20)")
    ] = 5,
) -> CallToolResult:
    """Search memory for relevant context based on a natural language query.

    Returns the most semantically similar stored content with similarity scores.
    """
    limit = clamp_limit(limit, QUERY_MAX_LIMIT)
    log.info(f"Tool: memdata_query called (query='{query[:50]}', limit={limit})")
    return await _invoke(
        "query",
        lambda client: client.query(query, limit),
        render_query,
    )


@mcp.tool()
async def memdata_query_timerange(
    query: Annotated[str, Field(min_length=1, description="Natural language search query")],
    since: Annotated[
        str | None,
        Field(description='ISO date string - only return results after this date (e.g., "2026-01-01")'),
    ] = None,
    until: Annotated[
        str | None,
        Field(description='ISO date string - only return results before this date (e.g., "2026-01-31")'),
    ] = None,
    limit: Annotated[int, Field(ge=1, description="Maximum number of results (default: 5, max: 20)")] = 5,
) -> CallToolResult:
    """Search memory within a specific time range.

    Use for queries like "what did I work on last week" or "meetings from January".
    """
    limit = clamp_limit(limit, QUERY_MAX_LIMIT)
    log.info(f"Tool: memdata_query_timerange called (query='{query[:50]}', since={since}, until={until}, limit={limit})")
    return await _invoke(
        "query",
        lambda client: client.query(query, limit, since=since, until=until),
        lambda reply: render_query_timerange(query, reply, since=since, until=until),
    )


@mcp.tool()
async def memdata_list(
    limit: Annotated[
        int, Field(ge=1, description="Maximum number of artifacts to return (default: 20, max: 50)")
    ] = 20,
) -> CallToolResult:
    """List all stored memories/artifacts.

    Shows what content has been ingested with chunk counts and dates. Use this
    to see what is in memory before querying or to find artifact IDs for deletion.
    """
    limit = clamp_limit(limit, LIST_MAX_LIMIT)
    log.info(f"Tool: memdata_list called (limit={limit})")
    return await _invoke(
        "list",
        lambda client: client.list_artifacts(limit),
        lambda reply: render_list(reply, limit),
    )


@mcp.tool()
async def memdata_delete(
    artifact_id: Annotated[
        str, Field(min_length=1, description="The UUID of the artifact to delete (get this from memdata_list)")
    ],
) -> CallToolResult:
    """Delete a memory/artifact from storage.

    This permanently removes the content and all associated chunks.
    Use memdata_list to find artifact IDs.
    """
    log.info(f"Tool: memdata_delete called (artifact_id={artifact_id})")
    return await _invoke(
        "delete",
        lambda client: client.delete_artifact(artifact_id),
        render_delete,
    )


async def _fetch_status(client: MemDataClient):
    health = await client.health()
    usage = await client.usage()
    return health, usage


@mcp.tool()
async def memdata_status() -> CallToolResult:
    """Check the health and storage usage of your MemData account.

    Shows API connectivity and how much storage space is used.
    """
    log.info("Tool: memdata_status called")
    return await _invoke(
        "get status",
        _fetch_status,
        lambda replies: render_status(*replies),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# IDENTITY TOOLS
# ═══════════════════════════════════════════════════════════════════════════════


@mcp.tool()
async def memdata_whoami() -> CallToolResult:
    """Get your agent identity and context at session start.

    Returns your name, identity summary, what you were working on, recent
    activity, and memory stats. Call this at the beginning of each session
    to remember who you are.
    """
    log.info("Tool: memdata_whoami called")
    return await _invoke(
        "get identity",
        lambda client: client.get_identity(),
        render_identity,
    )


@mcp.tool()
async def memdata_set_identity(
    agent_name: Annotated[
        str | None, Field(description='Your agent name (e.g., "MemBrain", "ResearchBot")')
    ] = None,
    identity_summary: Annotated[
        str | None, Field(description="Brief description of who you are and your purpose")
    ] = None,
) -> CallToolResult:
    """Set or update your agent identity.

    Use this to establish who you are and your purpose. Fields left out
    keep their current value.
    """
    log.info(f"Tool: memdata_set_identity called (agent_name={agent_name})")
    return await _invoke(
        "update identity",
        lambda client: client.update_identity(agent_name, identity_summary),
        lambda _reply: render_set_identity(agent_name, identity_summary),
    )


@mcp.tool()
async def memdata_session_end(
    summary: Annotated[str, Field(min_length=1, description="Brief summary of what happened this session")],
    working_on: Annotated[
        str | None,
        Field(description="What you are currently working on (will be shown at next session start)"),
    ] = None,
    context: Annotated[
        dict[str, Any] | None, Field(description="Additional context to preserve (JSON object)")
    ] = None,
) -> CallToolResult:
    """Save a session handoff before ending.

    Stores what you were working on and context for the next session. Call
    this before context compression or when ending a work session.
    """
    log.info(f"Tool: memdata_session_end called (working_on={working_on})")
    return await _invoke(
        "save handoff",
        lambda client: client.end_session(summary, working_on, context),
        lambda _reply: render_session_end(summary, working_on),
    )


@mcp.tool()
async def memdata_relationships(
    entity: Annotated[
        str,
        Field(
            min_length=1,
            description='Name of the entity to find relationships for (e.g., "John Smith", "Acme Corp", "authentication")',
        ),
    ],
    type: Annotated[
        str | None,
        Field(description="Filter to specific entity type (person, company, project, topic, concept)"),
    ] = None,
    limit: Annotated[int, Field(ge=1, description="Maximum relationships to return (default: 10)")] = 10,
) -> CallToolResult:
    """Find entities related to a person, company, or concept in your memory.

    Shows who/what appears together in the same context.
    """
    log.info(f"Tool: memdata_relationships called (entity={entity}, type={type}, limit={limit})")
    return await _invoke(
        "get relationships",
        lambda client: client.relationships(entity, type=type, limit=limit),
        lambda reply: render_relationships(entity, reply),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT
# ═══════════════════════════════════════════════════════════════════════════════


def _cleanup_client() -> None:
    """Close the shared HTTP client after the server loop has stopped."""
    global _client
    if _client is None:
        return
    try:
        asyncio.run(_client.close())
    except Exception as e:
        log.debug(f"Error closing client: {e}")
    _client = None


def run(config: Config, transport: str = "stdio") -> None:
    """Serve the MemData tools until the transport closes.

    Args:
        config: Resolved configuration
        transport: FastMCP transport ("stdio", "sse" or "streamable-http")
    """
    configure(config)
    log.info(f"MemData MCP server v{__version__} running (transport={transport}, API: {config.api_url})")
    try:
        mcp.run(transport=transport)
    finally:
        _cleanup_client()
