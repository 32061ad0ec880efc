"""Tests for result shaping helpers and renderers."""

import pytest

from memdata_mcp.formatting import (
    LIST_MAX_LIMIT,
    QUERY_MAX_LIMIT,
    clamp_limit,
    dedupe_by_source,
    match_quality,
    render_delete,
    render_identity,
    render_ingest,
    render_narrative,
    render_query_timerange,
    render_status,
    storage_percent,
)
from memdata_mcp.models import (
    Activity,
    DeleteReply,
    HealthReply,
    IdentityReply,
    IngestReply,
    QueryReply,
    Usage,
    UsageReply,
)


class TestClampLimit:
    """Limit clamping."""

    @pytest.mark.parametrize("limit", [21, 50, 1000])
    def test_query_limit_capped(self, limit):
        assert clamp_limit(limit, QUERY_MAX_LIMIT) == 20

    @pytest.mark.parametrize("limit", [51, 99])
    def test_list_limit_capped(self, limit):
        assert clamp_limit(limit, LIST_MAX_LIMIT) == 50

    def test_within_bound_unchanged(self):
        assert clamp_limit(5, QUERY_MAX_LIMIT) == 5

    @pytest.mark.parametrize("limit", [1, 20, 21, 500])
    def test_idempotent(self, limit):
        once = clamp_limit(limit, QUERY_MAX_LIMIT)
        assert clamp_limit(once, QUERY_MAX_LIMIT) == once


class TestMatchQuality:
    """Score to tier mapping."""

    @pytest.mark.parametrize(
        "score,tier",
        [
            (0.75, "strong"),
            (0.55, "good"),
            (0.40, "partial"),
            (0.10, "weak"),
            (0.70, "strong"),
            (0.50, "good"),
            (0.35, "partial"),
            (0.3499, "weak"),
            (1.0, "strong"),
            (0.0, "weak"),
        ],
    )
    def test_tiers(self, score, tier):
        assert match_quality(score) == tier


class TestDedupeBySource:
    """Recent activity deduplication."""

    def test_keeps_first_occurrence_order(self):
        records = [Activity(source=s) for s in ["A", "B", "A", "C"]]
        assert [r.source for r in dedupe_by_source(records)] == ["A", "B", "C"]

    def test_first_record_wins(self):
        records = [
            Activity(source="A", date="2026-10-15"),
            Activity(source="A", date="2026-10-01"),
        ]
        assert dedupe_by_source(records)[0].date == "2026-10-15"

    def test_empty(self):
        assert dedupe_by_source([]) == []


class TestStoragePercent:
    """Storage percent calculation."""

    def test_zero_limit(self):
        assert storage_percent(0, 0) == 0

    def test_used_without_limit(self):
        assert storage_percent(10, 0) == 0

    def test_quarter(self):
        assert storage_percent(25, 100) == 25

    def test_rounds_half_up(self):
        assert storage_percent(1, 8) == 13
        assert storage_percent(5, 8) == 63


class TestRenderers:
    """Text renderers."""

    def test_ingest(self):
        text = render_ingest("Y", IngestReply(artifact_id="abc", chunk_count=3))
        assert "- Chunks: 3" in text
        assert "- ID: abc" in text

    def test_delete_with_message(self):
        text = render_delete(DeleteReply(deleted_chunks=2, message="Artifact removed"))
        assert text == "Successfully deleted artifact and 2 chunks.\nArtifact removed"

    def test_narrative_ignored_when_count_zero(self):
        reply = QueryReply.model_validate({
            "narrative": {"gaps": [{"content": "No tests for retries", "confidence": 0.4}]},
            "narrative_count": 0,
        })
        assert render_narrative(reply) == ""

    def test_narrative_group_order(self):
        reply = QueryReply.model_validate({
            "narrative": {
                "gaps": [{"content": "Unknown owner", "confidence": 0.4}],
                "decisions": [{"content": "Ship Friday", "confidence": 0.8}],
                "patterns": [],
            },
            "narrative_count": 2,
        })
        text = render_narrative(reply)
        assert text.index("DECISIONS:") < text.index("GAPS:")
        assert "PATTERNS:" not in text
        assert "  • Unknown owner (40%)" in text

    def test_timerange_empty_without_dates(self):
        assert render_query_timerange("retro", QueryReply()) == 'No memories found for "retro"'

    def test_timerange_empty_with_until_only(self):
        text = render_query_timerange("retro", QueryReply(), until="2026-03-01")
        assert text == 'No memories found for "retro" in date range start to 2026-03-01'

    def test_status_large_sizes_keep_precision(self):
        text = render_status(
            HealthReply(status="ok"),
            UsageReply(usage=Usage(storage_used_mb=1234567.5, storage_limit_mb=2000000)),
        )
        assert text.endswith("- Storage: 1234567.5 MB / 2000000 MB (62% used)")

    def test_status_fractional_size(self):
        text = render_status(
            HealthReply(status="ok"),
            UsageReply(usage=Usage(storage_used_mb=12.3456789, storage_limit_mb=100)),
        )
        assert "- Storage: 12.3456789 MB / 100 MB (12% used)" in text

    def test_identity_dedupes_before_keeping_five(self):
        sources = ["A", "B", "A", "C", "B", "D", "E", "F", "G"]
        reply = IdentityReply.model_validate({
            "identity": {"agent_name": "Bot", "session_count": 1},
            "recent_activity": [{"source": s, "date": f"2026-10-{15 - i:02d}"} for i, s in enumerate(sources)],
        })

        text = render_identity(reply)

        activity = text.split("## Recent Activity\n", 1)[1].splitlines()
        listed = [line[2:].split(" (")[0] for line in activity if line.startswith("- ")]
        assert listed == ["A", "B", "C", "D", "E"]
        assert "- A (2026-10-15)" in activity
        assert "- B (2026-10-14)" in activity
