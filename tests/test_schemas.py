"""Tests for review schemas and shared helpers."""

import pytest
from pydantic import ValidationError

from diffreview.core.text import truncate
from diffreview.schemas.review import (
    ArchViolation,
    ReviewOutput,
    Severity,
    Verdict,
)


class TestVerdict:
    """Tests for verdict ordering and coercion."""

    def test_total_order(self):
        assert Verdict.APPROVE.rank < Verdict.COMMENT.rank < Verdict.REQUEST_CHANGES.rank

    @pytest.mark.parametrize("value", ["lgtm", "", None, 3])
    def test_unrecognized_verdict_is_comment(self, value):
        assert ReviewOutput(summary="s", verdict=value).verdict is Verdict.COMMENT

    def test_known_verdict_string(self):
        assert ReviewOutput(summary="s", verdict="approve").verdict is Verdict.APPROVE


class TestSeverity:
    """Tests for severity ordering."""

    def test_critical_is_most_severe(self):
        ranked = sorted(Severity, key=lambda s: s.rank, reverse=True)

        assert ranked == [Severity.CRITICAL, Severity.WARNING, Severity.SUGGESTION, Severity.NITPICK]

    def test_arch_violation_rejects_nitpick(self):
        with pytest.raises(ValidationError):
            ArchViolation(
                file="a.py",
                line=1,
                category="design_pattern",
                severity="nitpick",
                rule="r",
                description="d",
            )


class TestTruncate:
    """Tests for truncate function."""

    def test_short_text_unchanged(self):
        assert truncate("hello", 100) == "hello"

    def test_text_at_limit_unchanged(self):
        text = "a" * 100

        assert truncate(text, 100) == text

    def test_long_text_has_marker(self):
        result = truncate("a" * 200, 100)

        assert len(result) < 200
        assert "[truncated 100 chars]" in result

    def test_keeps_start_and_end(self):
        result = truncate("START" + "x" * 200 + "END", 50)

        assert result.startswith("START")
        assert result.endswith("END")
