"""MemData MCP - long-term memory tools for AI agents.

A thin MCP server in front of the hosted MemData API:
- FastMCP for the tool surface
- httpx for authenticated API calls
- pydantic models for decoding API replies
"""

__version__ = "1.0.0"
