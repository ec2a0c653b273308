"""Merge per-batch review results into one."""

from typing import Sequence

from diffreview.schemas.review import (
    ArchReviewOutput,
    ArchViolation,
    ReviewFinding,
    ReviewOutput,
    Verdict,
)

UNDETERMINED_SCORE = -1
PERFECT_SCORE = 100


def merge_reviews(results: Sequence[ReviewOutput]) -> ReviewOutput:
    """Merge batch reviews in batch order.

    Findings are concatenated without re-sorting, summaries joined with a
    blank line, and the most severe verdict wins.
    """
    findings: list[ReviewFinding] = []
    summaries: list[str] = []
    worst = Verdict.APPROVE

    for result in results:
        findings.extend(result.findings)
        if result.summary:
            summaries.append(result.summary)
        if result.verdict.rank > worst.rank:
            worst = result.verdict

    return ReviewOutput(summary="\n\n".join(summaries), findings=findings, verdict=worst)


def merge_arch_reviews(results: Sequence[ArchReviewOutput]) -> ArchReviewOutput:
    """Merge batch architecture reviews in batch order.

    The merged score is the lowest determined score. Undetermined (negative)
    scores are ignored unless no batch produced a score at all.
    """
    violations: list[ArchViolation] = []
    summaries: list[str] = []
    scores: list[int] = []
    undetermined = None

    for result in results:
        violations.extend(result.violations)
        if result.summary:
            summaries.append(result.summary)
        if result.conformance_score >= 0:
            scores.append(result.conformance_score)
        elif undetermined is None:
            undetermined = result.conformance_score

    if scores:
        score = min(scores)
    elif undetermined is not None:
        score = undetermined
    else:
        score = PERFECT_SCORE

    return ArchReviewOutput(
        summary="\n\n".join(summaries),
        conformance_score=score,
        violations=violations,
    )


def build_fallback_review() -> ReviewOutput:
    """Result used when every review batch failed."""
    return ReviewOutput(
        summary="AI review could not be completed.",
        findings=[],
        verdict=Verdict.COMMENT,
    )


def build_fallback_arch_review() -> ArchReviewOutput:
    """Result used when every architecture review batch failed."""
    return ArchReviewOutput(
        summary="Architecture conformance review could not be completed.",
        conformance_score=UNDETERMINED_SCORE,
        violations=[],
    )
