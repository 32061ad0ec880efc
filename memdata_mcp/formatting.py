"""Text rendering for MemData tool results.

Every tool answers with a single text block meant for an AI agent to read.
The helpers at the top are pure functions used by the renderers below.
"""

import json
import math
from collections.abc import Iterable
from typing import TypeVar

from memdata_mcp.models import (
    Activity,
    DeleteReply,
    HealthReply,
    IdentityReply,
    IngestReply,
    ListReply,
    QueryHit,
    QueryReply,
    RelationshipsReply,
    UsageReply,
)

QUERY_MAX_LIMIT = 20
LIST_MAX_LIMIT = 50
RECENT_ACTIVITY_LIMIT = 5
HANDOFF_PREVIEW_CHARS = 100

# (lower bound, tier) checked top-down; lower bounds are inclusive
MATCH_TIERS = (
    (0.70, "strong"),
    (0.50, "good"),
    (0.35, "partial"),
)
TIER_MARKERS = {
    "strong": "🟢",
    "good": "🟡",
    "partial": "🟠",
    "weak": "🔴",
}
SCORE_LEGEND = "_Match quality: 🟢 >70% strong | 🟡 >50% good | 🟠 >35% partial | 🔴 weak_"

A = TypeVar("A", bound=Activity)


def clamp_limit(limit: int, maximum: int) -> int:
    """Cap a result limit at ``maximum``."""
    return min(limit, maximum)


def match_quality(score: float) -> str:
    """Map a similarity score to a match-quality tier."""
    for lower_bound, tier in MATCH_TIERS:
        if score >= lower_bound:
            return tier
    return "weak"


def dedupe_by_source(records: Iterable[A]) -> list[A]:
    """Keep the first record seen for each source, preserving order."""
    seen: set[str] = set()
    unique = []
    for record in records:
        if record.source in seen:
            continue
        seen.add(record.source)
        unique.append(record)
    return unique


def storage_percent(used: float, limit: float) -> int:
    """Percentage of storage used, rounded half up; 0 when there is no limit."""
    if limit <= 0:
        return 0
    return math.floor(used / limit * 100 + 0.5)


def _format_mb(value: float) -> str:
    """Full precision, whole numbers without the trailing ``.0``."""
    text = str(value)
    return text[:-2] if text.endswith(".0") else text


# ═══════════════════════════════════════════════════════════════════════════════
# RENDERERS
# ═══════════════════════════════════════════════════════════════════════════════


def render_ingest(name: str, reply: IngestReply) -> str:
    return (
        f"✅ Stored in memory:\n"
        f"- Source: {name}\n"
        f"- Chunks: {reply.chunk_count}\n"
        f"- ID: {reply.artifact_id}\n\n"
        f"🏷️ AI tagging & narrative extraction will run in background (~2 min)."
    )


def _render_hit(index: int, hit: QueryHit, with_date: bool = False) -> str:
    tier = match_quality(hit.score)
    parts = [f"[{index}] {TIER_MARKERS[tier]} {tier} {hit.score * 100:.1f}%"]
    if with_date:
        parts.append(hit.date or "unknown date")
    parts.append(hit.source)
    return " | ".join(parts) + f"\n{hit.text}"


def render_narrative(reply: QueryReply) -> str:
    """Render narrative insight groups, or an empty string when there are none."""
    if reply.narrative is None or reply.narrative_count <= 0:
        return ""

    sections = []
    for group, insights in reply.narrative.groups():
        lines = [f"  • {n.content} ({round(n.confidence * 100)}%)" for n in insights]
        sections.append(f"{group.upper()}:\n" + "\n".join(lines))

    if not sections:
        return ""
    return "═══ NARRATIVE INSIGHTS ═══\n" + "\n\n".join(sections)


def render_query(reply: QueryReply) -> str:
    if not reply.results:
        return "No relevant memories found for this query."

    formatted = "\n\n---\n\n".join(_render_hit(i, hit) for i, hit in enumerate(reply.results, start=1))
    text = f"Found {len(reply.results)} relevant memories:\n\n{formatted}"

    narrative = render_narrative(reply)
    if narrative:
        text += f"\n\n{narrative}"

    return text + f"\n\n---\n{SCORE_LEGEND}"


def render_query_timerange(
    query: str,
    reply: QueryReply,
    since: str | None = None,
    until: str | None = None,
) -> str:
    if not reply.results:
        msg = f'No memories found for "{query}"'
        if since or until:
            msg += f" in date range {since or 'start'} to {until or 'now'}"
        return msg

    formatted = "\n\n---\n\n".join(
        _render_hit(i, hit, with_date=True) for i, hit in enumerate(reply.results, start=1)
    )
    return f"Found {len(reply.results)} memories:\n\n{formatted}"


def render_list(reply: ListReply, limit: int) -> str:
    if not reply.artifacts:
        return "No memories stored yet. Use memdata_ingest to add content."

    formatted = "\n".join(f"- {a.name} ({a.chunks} chunks, {a.date})\n  ID: {a.id}" for a in reply.artifacts)
    text = f"Stored memories ({len(reply.artifacts)}):\n\n{formatted}"
    if len(reply.artifacts) >= limit:
        text += f"\n\n_Showing {len(reply.artifacts)} memories. Use `limit` param for more._"
    return text


def render_delete(reply: DeleteReply) -> str:
    text = f"Successfully deleted artifact and {reply.deleted_chunks} chunks."
    if reply.message:
        text += f"\n{reply.message}"
    return text


def render_status(health: HealthReply, usage: UsageReply) -> str:
    used = usage.usage.storage_used_mb
    limit = usage.usage.storage_limit_mb
    return (
        "MemData Status:\n"
        f"- API: {'Healthy' if health.healthy else 'Unhealthy'}\n"
        f"- Storage: {_format_mb(used)} MB / {_format_mb(limit)} MB ({storage_percent(used, limit)}% used)"
    )


def render_identity(reply: IdentityReply) -> str:
    identity = reply.identity
    stats = reply.memory_stats

    lines = [
        "# Who Am I",
        "",
        f"**Name:** {identity.agent_name or 'Not set'}",
        f"**Identity:** {identity.identity_summary or 'Not set'}",
        f"**Session #:** {identity.session_count}",
    ]
    if not identity.agent_name and not identity.identity_summary:
        lines += [
            "",
            "> 💡 **First time?** Set your identity with `memdata_set_identity` to personalize your memory.",
        ]
    lines.append("")

    # Continuity first: what we were doing matters more than stats
    if reply.working_on:
        lines += ["## 🎯 Continue Working On", reply.working_on, ""]

    if reply.last_session:
        lines += ["## Last Session Handoff", json.dumps(reply.last_session, indent=2, ensure_ascii=False), ""]

    lines += [
        "## Memory Stats",
        f"- Total memories: {stats.total_memories}",
        f"- Oldest: {stats.oldest_memory or 'None'}",
        f"- Newest: {stats.newest_memory or 'None'}",
        "",
    ]

    # Chunks of the same artifact share a source, show it once
    recent = dedupe_by_source(reply.recent_activity)[:RECENT_ACTIVITY_LIMIT]
    if recent:
        lines.append("## Recent Activity")
        lines += [f"- {r.source} ({r.date or 'unknown date'})" for r in recent]

    if identity.session_count > 1 and not reply.working_on:
        lines += [
            "",
            "> 💡 **Tip:** Use `memdata_session_end` before ending to preserve context for next time.",
        ]

    return "\n".join(lines).rstrip() + "\n"


def render_set_identity(agent_name: str | None, identity_summary: str | None) -> str:
    return (
        "Identity updated:\n"
        f"- Name: {agent_name or '(unchanged)'}\n"
        f"- Summary: {identity_summary or '(unchanged)'}"
    )


def render_session_end(summary: str, working_on: str | None) -> str:
    preview = summary[:HANDOFF_PREVIEW_CHARS]
    if len(summary) > HANDOFF_PREVIEW_CHARS:
        preview += "..."
    return (
        "Session handoff saved.\n\n"
        "Next session will see:\n"
        f"- Working on: {working_on or 'Not specified'}\n"
        f"- Summary: {preview}"
    )


def render_relationships(entity: str, reply: RelationshipsReply) -> str:
    if not reply.relationships:
        return f'No relationships found for "{entity}".'

    name = reply.entity or entity
    header = f"# Relationships for {name}"
    if reply.entity_type:
        header += f" ({reply.entity_type})"

    lines = [header, ""]
    for r in reply.relationships:
        kind = f" ({r.type})" if r.type else ""
        lines.append(f"- **{r.name}**{kind} - {r.strength} co-occurrences")
    return "\n".join(lines) + "\n"
