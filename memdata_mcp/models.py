"""Typed replies from the MemData API.

Each reply is decoded in two steps: the ``Envelope`` is checked for the
``success`` flag first, then the full model is validated. A reply that
reports success but lacks a required field is a DecodeError, so callers
never see a half-populated payload.
"""

from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from memdata_mcp.errors import DecodeError, RemoteError

T = TypeVar("T", bound=BaseModel)

NARRATIVE_GROUPS = ("decisions", "causality", "patterns", "implications", "gaps")


def _calendar_day(value: Any) -> Any:
    """Reduce an ISO timestamp to its date part (``2026-01-15T10:00:00Z`` -> ``2026-01-15``)."""
    if isinstance(value, str):
        return value.split("T")[0]
    return value


def _null_as(empty: Any, value: Any) -> Any:
    return empty if value is None else value


class _Reply(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Envelope(_Reply):
    """Fields every MemData reply carries."""

    success: bool = False
    error: str | None = None
    message: str | None = None

    @property
    def failure_reason(self) -> str:
        return self.error or self.message or "Unknown error"


# ═══════════════════════════════════════════════════════════════════════════════
# INGEST / DELETE / IDENTITY WRITES
# ═══════════════════════════════════════════════════════════════════════════════


class IngestReply(_Reply):
    artifact_id: str
    chunk_count: int


class DeleteReply(_Reply):
    deleted_chunks: int = 0
    message: str | None = None

    @field_validator("deleted_chunks", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)


class AckReply(_Reply):
    """Reply of identity updates and session handoffs."""

    message: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# QUERY
# ═══════════════════════════════════════════════════════════════════════════════


class QueryHit(_Reply):
    """One scored chunk returned by a semantic query."""

    text: str = Field(validation_alias=AliasChoices("chunk_text", "text"))
    source: str = Field(validation_alias=AliasChoices("source_name", "source"))
    score: float = Field(validation_alias=AliasChoices("similarity_score", "score"))
    date: str | None = Field(default=None, validation_alias=AliasChoices("created_at", "date"))

    @field_validator("score")
    @classmethod
    def round_score(cls, v: float) -> float:
        return round(v, 3)

    @field_validator("date", mode="before")
    @classmethod
    def to_day(cls, v: Any) -> Any:
        return _calendar_day(v)


class NarrativeInsight(_Reply):
    content: str
    confidence: float = 0.0
    type: str | None = None
    evidence: str | None = None
    chunk_id: str | None = None

    @field_validator("confidence", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0.0, v)


class NarrativeLayer(_Reply):
    """Insight groups extracted by the API, passed through as-is."""

    decisions: list[NarrativeInsight] = Field(default_factory=list)
    causality: list[NarrativeInsight] = Field(default_factory=list)
    patterns: list[NarrativeInsight] = Field(default_factory=list)
    implications: list[NarrativeInsight] = Field(default_factory=list)
    gaps: list[NarrativeInsight] = Field(default_factory=list)

    @field_validator(*NARRATIVE_GROUPS, mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return _null_as([], v)

    def groups(self) -> list[tuple[str, list[NarrativeInsight]]]:
        """Non-empty groups in display order."""
        return [(name, getattr(self, name)) for name in NARRATIVE_GROUPS if getattr(self, name)]


class QueryReply(_Reply):
    results: list[QueryHit] = Field(default_factory=list)
    narrative: NarrativeLayer | None = None
    narrative_count: int = 0

    @field_validator("results", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return _null_as([], v)

    @field_validator("narrative_count", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)


# ═══════════════════════════════════════════════════════════════════════════════
# LIST
# ═══════════════════════════════════════════════════════════════════════════════


class Artifact(_Reply):
    id: str
    name: str = Field(validation_alias=AliasChoices("source_name", "name"))
    type: str | None = None
    chunks: int = Field(default=0, validation_alias=AliasChoices("chunk_count", "chunks"))
    date: str = Field(validation_alias=AliasChoices("created_at", "date"))

    @field_validator("chunks", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)

    @field_validator("date", mode="before")
    @classmethod
    def to_day(cls, v: Any) -> Any:
        return _calendar_day(v)


class ListReply(_Reply):
    artifacts: list[Artifact] = Field(default_factory=list)

    @field_validator("artifacts", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return _null_as([], v)


# ═══════════════════════════════════════════════════════════════════════════════
# STATUS
# ═══════════════════════════════════════════════════════════════════════════════


class HealthReply(_Reply):
    status: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == "ok"


class Usage(_Reply):
    storage_used_mb: float = 0
    storage_limit_mb: float = 0

    @field_validator("storage_used_mb", "storage_limit_mb", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)


class UsageReply(_Reply):
    usage: Usage = Field(default_factory=Usage)


# ═══════════════════════════════════════════════════════════════════════════════
# IDENTITY
# ═══════════════════════════════════════════════════════════════════════════════


class AgentIdentity(_Reply):
    agent_name: str | None = None
    identity_summary: str | None = None
    session_count: int = 0

    @field_validator("session_count", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)


class MemoryStats(_Reply):
    total_memories: int = 0
    oldest_memory: str | None = None
    newest_memory: str | None = None

    @field_validator("total_memories", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)


class Activity(_Reply):
    source: str
    date: str | None = None


class IdentityReply(_Reply):
    identity: AgentIdentity
    last_session: dict[str, Any] | None = None
    working_on: str | None = None
    memory_stats: MemoryStats = Field(default_factory=MemoryStats)
    recent_activity: list[Activity] = Field(default_factory=list)

    @field_validator("memory_stats", mode="before")
    @classmethod
    def null_as_default(cls, v: Any) -> Any:
        return _null_as({}, v)

    @field_validator("recent_activity", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return _null_as([], v)


# ═══════════════════════════════════════════════════════════════════════════════
# RELATIONSHIPS
# ═══════════════════════════════════════════════════════════════════════════════


class Relationship(_Reply):
    name: str
    type: str | None = None
    strength: int = Field(default=0, validation_alias=AliasChoices("co_occurrence_count", "strength"))

    @field_validator("strength", mode="before")
    @classmethod
    def null_as_zero(cls, v: Any) -> Any:
        return _null_as(0, v)


class RelationshipsReply(_Reply):
    entity: str | None = None
    entity_type: str | None = None
    relationships: list[Relationship] = Field(
        default_factory=list, validation_alias=AliasChoices("results", "relationships")
    )

    @field_validator("relationships", mode="before")
    @classmethod
    def null_as_empty(cls, v: Any) -> Any:
        return _null_as([], v)


# ═══════════════════════════════════════════════════════════════════════════════
# DECODING
# ═══════════════════════════════════════════════════════════════════════════════


def decode(model: type[T], payload: Any) -> T:
    """Validate a raw JSON payload against ``model``.

    Raises:
        DecodeError: If the payload does not match the model
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in e.errors()
        )
        raise DecodeError(f"Unexpected response from API: {errors}") from e


def decode_reply(model: type[T], payload: Any) -> T:
    """Check the success flag, then decode the full reply.

    Raises:
        RemoteError: If the API reported ``success: false``
        DecodeError: If the payload does not match the model
    """
    envelope = decode(Envelope, payload)
    if not envelope.success:
        raise RemoteError(envelope.failure_reason)
    return decode(model, payload)
