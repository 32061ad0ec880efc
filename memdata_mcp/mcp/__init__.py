"""MCP layer for MemData.

Architecture:
    MCP host --stdio--> memdata_mcp.mcp.server --HTTPS--> MemData API
    - server: tool registry, argument validation, text rendering
    - client: bearer-authenticated requests and reply decoding

Configuration:
    - MEMDATA_API_KEY: API key (required)
    - MEMDATA_API_URL: API URL (default: https://memdata.ai)
"""

from memdata_mcp.mcp.client import MemDataClient

__all__ = ["MemDataClient"]
