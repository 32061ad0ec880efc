"""MemData API client for the MCP layer.

Makes authenticated HTTP requests to the hosted MemData API and decodes
the JSON replies into typed models. Errors are raised, never retried.
"""

from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from memdata_mcp.config import Config
from memdata_mcp.errors import ApiError, DecodeError
from memdata_mcp.log_config import get_logger
from memdata_mcp.models import (
    AckReply,
    DeleteReply,
    HealthReply,
    IdentityReply,
    IngestReply,
    ListReply,
    QueryReply,
    RelationshipsReply,
    UsageReply,
    decode,
    decode_reply,
)

log = get_logger("mcp.client")

API_PREFIX = "/api/memdata"


class MemDataClient:
    """HTTP client for the MemData API.

    Handles:
    - Async HTTP requests with bearer authentication
    - Mapping non-2xx responses and network failures to ApiError
    - Decoding replies into models (RemoteError on ``success: false``)
    """

    def __init__(self, config: Config):
        """Initialize the client.

        Args:
            config: Resolved configuration (API key, base URL, timeout)
        """
        self.config = config
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self.config.api_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                headers={"Authorization": f"Bearer {self.config.api_key}"},
                timeout=httpx.Timeout(self.config.timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MemDataClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        """Make one HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, DELETE)
            path: API path (e.g., "/api/memdata/query")
            json_data: Request body, sent as JSON
            params: Query parameters

        Returns:
            Parsed response JSON

        Raises:
            ApiError: On a non-2xx response or network failure
            DecodeError: If a 2xx response body is not JSON
        """
        client = self._get_client()
        headers = {"Content-Type": "application/json"} if json_data is not None else None

        try:
            response = await client.request(
                method=method,
                url=path,
                json=json_data,
                params=params,
                headers=headers,
            )
        except httpx.RequestError as e:
            log.error(f"{method} {path} failed: {e!r}")
            raise ApiError(None, str(e) or type(e).__name__) from e

        if not response.is_success:
            log.warning(f"{method} {path} -> {response.status_code}")
            raise ApiError(response.status_code, response.text)

        log.debug(f"{method} {path} -> {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"API returned a non-JSON body for {path}") from e

    # ═══════════════════════════════════════════════════════════════════════════════
    # MEMORY API
    # ═══════════════════════════════════════════════════════════════════════════════

    async def ingest(self, content: str, name: str) -> IngestReply:
        """Store text content under a source name."""
        data = {
            "content": content,
            "sourceName": name,
        }
        result = await self._request("POST", f"{API_PREFIX}/ingest", json_data=data)
        return decode_reply(IngestReply, result)

    async def query(
        self,
        query: str,
        limit: int = 5,
        since: str | None = None,
        until: str | None = None,
    ) -> QueryReply:
        """Semantic search, optionally restricted to a date range.

        ``since`` and ``until`` are passed through untouched when given.
        """
        data: dict[str, Any] = {
            "query": query,
            "limit": limit,
        }
        if since:
            data["since"] = since
        if until:
            data["until"] = until

        result = await self._request("POST", f"{API_PREFIX}/query", json_data=data)
        return decode_reply(QueryReply, result)

    async def list_artifacts(self, limit: int = 20) -> ListReply:
        """List stored artifacts, newest first."""
        result = await self._request("GET", f"{API_PREFIX}/artifacts", params={"limit": limit})
        return decode_reply(ListReply, result)

    async def delete_artifact(self, artifact_id: str) -> DeleteReply:
        """Delete an artifact and all of its chunks."""
        path = f"{API_PREFIX}/artifacts/{quote(artifact_id, safe='')}"
        result = await self._request("DELETE", path)
        return decode_reply(DeleteReply, result)

    # ═══════════════════════════════════════════════════════════════════════════════
    # IDENTITY API
    # ═══════════════════════════════════════════════════════════════════════════════

    async def get_identity(self) -> IdentityReply:
        """Fetch agent identity, last handoff, memory stats and recent activity."""
        result = await self._request("GET", f"{API_PREFIX}/identity")
        return decode_reply(IdentityReply, result)

    async def update_identity(
        self,
        agent_name: str | None = None,
        identity_summary: str | None = None,
    ) -> AckReply:
        """Update agent identity. Omitted fields are left unchanged remotely."""
        data: dict[str, Any] = {}
        if agent_name is not None:
            data["agent_name"] = agent_name
        if identity_summary is not None:
            data["identity_summary"] = identity_summary

        result = await self._request("POST", f"{API_PREFIX}/identity", json_data=data)
        return decode_reply(AckReply, result)

    async def end_session(
        self,
        summary: str,
        working_on: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> AckReply:
        """Save a session handoff stamped with the current UTC time."""
        data: dict[str, Any] = {
            "session_handoff": {
                "summary": summary,
                "context": context or {},
                "ended_at": datetime.now(timezone.utc).isoformat(),
            },
        }
        if working_on is not None:
            data["working_on"] = working_on

        result = await self._request("POST", f"{API_PREFIX}/identity", json_data=data)
        return decode_reply(AckReply, result)

    async def relationships(
        self,
        entity: str,
        type: str | None = None,
        limit: int = 10,
    ) -> RelationshipsReply:
        """Find entities that co-occur with ``entity``."""
        data: dict[str, Any] = {
            "entity": entity,
            "limit": limit,
        }
        if type:
            data["type"] = type

        result = await self._request("POST", f"{API_PREFIX}/relationships", json_data=data)
        return decode_reply(RelationshipsReply, result)

    # ═══════════════════════════════════════════════════════════════════════════════
    # HEALTH / USAGE
    # ═══════════════════════════════════════════════════════════════════════════════

    async def health(self) -> HealthReply:
        """Check API health. The health reply carries no success flag."""
        result = await self._request("GET", f"{API_PREFIX}/health")
        return decode(HealthReply, result)

    async def usage(self) -> UsageReply:
        """Get storage usage for the account."""
        result = await self._request("GET", f"{API_PREFIX}/usage")
        return decode_reply(UsageReply, result)
