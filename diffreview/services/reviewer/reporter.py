"""Build the postable review payload from merged review results."""

from typing import Optional, Sequence, Union

from diffreview.core.logging import get_logger
from diffreview.schemas.review import (
    ArchReviewOutput,
    ArchViolation,
    ArchViolationCategory,
    ReviewComment,
    ReviewEvent,
    ReviewFinding,
    ReviewOutput,
    ReviewPayload,
    Severity,
    Verdict,
)
from diffreview.services.diff.patch_parser import ValidLineSet, filter_comments_by_valid_lines

logger = get_logger("reviewer.reporter")

SEVERITY_ICON = {
    Severity.CRITICAL: "🔴",
    Severity.WARNING: "🟡",
    Severity.SUGGESTION: "🔵",
    Severity.NITPICK: "⚪",
}

SEVERITY_LABEL = {
    Severity.CRITICAL: "Critical",
    Severity.WARNING: "Warning",
    Severity.SUGGESTION: "Suggestion",
    Severity.NITPICK: "Nitpick",
}

ARCH_CATEGORY_LABEL = {
    ArchViolationCategory.LAYER_VIOLATION: "Layer Violation",
    ArchViolationCategory.NAMING_CONVENTION: "Naming Convention",
    ArchViolationCategory.DESIGN_PATTERN: "Design Pattern",
    ArchViolationCategory.CIRCULAR_DEPENDENCY: "Circular Dependency",
}

FOOTER = "_Review generated by diffreview._"


def _suggestion_block(suggestion: str) -> list[str]:
    if not suggestion:
        return []
    return ["", "```suggestion", suggestion, "```"]


def build_comment_body(finding: ReviewFinding) -> str:
    """Render one finding as an inline comment."""
    parts = [
        f"**{SEVERITY_ICON[finding.severity]} {finding.severity.value.upper()}: {finding.title}**",
        "",
        finding.body,
    ]
    parts.extend(_suggestion_block(finding.suggestion))
    return "\n".join(parts)


def build_arch_violation_comment_body(violation: ArchViolation) -> str:
    """Render one architecture violation as an inline comment."""
    icon = SEVERITY_ICON[violation.severity]
    category = ARCH_CATEGORY_LABEL[violation.category]
    parts = [
        f"**{icon} ARCH {violation.severity.value.upper()}: {category}**",
        "",
        f"**Rule:** {violation.rule}",
        "",
        violation.description,
    ]
    parts.extend(_suggestion_block(violation.suggestion))
    return "\n".join(parts)


def _score_icon(score: int) -> str:
    if score >= 80:
        return "✅"
    if score >= 50:
        return "⚠️"
    if score >= 0:
        return "❌"
    return "❓"


def _findings_section(findings: Sequence[ReviewFinding]) -> list[str]:
    if not findings:
        return ["No specific code findings.", ""]

    counts = {severity: 0 for severity in Severity}
    for finding in findings:
        counts[finding.severity] += 1

    parts = ["### Findings", "", "| Severity | Count |", "|----------|-------|"]
    for severity in sorted(Severity, key=lambda s: s.rank, reverse=True):
        if counts[severity]:
            parts.append(
                f"| {SEVERITY_ICON[severity]} {SEVERITY_LABEL[severity]} | {counts[severity]} |"
            )
    parts.append("")
    return parts


def _arch_section(arch_review: ArchReviewOutput) -> list[str]:
    score = arch_review.conformance_score
    score_display = f"{score}/100" if score >= 0 else "N/A"

    parts = [
        f"### Architecture Conformance {_score_icon(score)}",
        "",
        f"**Score:** {score_display}",
        "",
        arch_review.summary,
        "",
    ]

    if not arch_review.violations:
        parts.extend(["No architecture violations found.", ""])
        return parts

    by_category: dict[str, list[ArchViolation]] = {}
    for violation in arch_review.violations:
        by_category.setdefault(ARCH_CATEGORY_LABEL[violation.category], []).append(violation)

    parts.extend(["| Category | Severity | File | Rule |", "|----------|----------|------|------|"])
    for category, violations in by_category.items():
        for v in violations:
            parts.append(
                f"| {category} | {SEVERITY_ICON[v.severity]} {v.severity.value} "
                f"| `{v.file}:{v.line}` | {v.rule} |"
            )
    parts.append("")
    return parts


def _excluded_section(excluded_files: Sequence[str]) -> list[str]:
    parts = [
        "### Excluded Files",
        "",
        f"{len(excluded_files)} file(s) were excluded from AI review "
        "(lock files, generated code, build output, vendor dirs, binaries):",
        "",
        "<details><summary>Excluded files</summary>",
        "",
    ]
    parts.extend(f"- `{path}`" for path in excluded_files)
    parts.extend(["", "</details>", ""])
    return parts


def build_summary_body(
    review: ReviewOutput,
    arch_review: Optional[ArchReviewOutput] = None,
    excluded_files: Sequence[str] = (),
) -> str:
    """Render the top-level review body.

    Severity counts cover every finding, including ones that cannot be
    placed inline.
    """
    parts = ["## PR Review Summary", "", review.summary, ""]
    parts.extend(_findings_section(review.findings))

    if arch_review is not None:
        parts.extend(_arch_section(arch_review))

    if excluded_files:
        parts.extend(_excluded_section(excluded_files))

    parts.extend(["---", FOOTER])
    return "\n".join(parts)


def map_verdict(verdict: Union[Verdict, str]) -> ReviewEvent:
    """Map a review verdict to a review event; unknown verdicts only comment."""
    if verdict == Verdict.APPROVE:
        return ReviewEvent.APPROVE
    if verdict == Verdict.REQUEST_CHANGES:
        return ReviewEvent.REQUEST_CHANGES
    return ReviewEvent.COMMENT


def build_review_payload(
    review: ReviewOutput,
    valid_lines: ValidLineSet,
    arch_review: Optional[ArchReviewOutput] = None,
    excluded_files: Sequence[str] = (),
) -> ReviewPayload:
    """Build the full review payload.

    Inline comments are only kept for files present in ``valid_lines`` and
    for lines inside one of that file's hunks; anything else would be
    rejected by the review API.
    """
    body = build_summary_body(review, arch_review, excluded_files)

    candidates = [
        ReviewComment(path=f.file, line=f.line, body=build_comment_body(f))
        for f in review.findings
    ]
    if arch_review is not None:
        candidates.extend(
            ReviewComment(path=v.file, line=v.line, body=build_arch_violation_comment_body(v))
            for v in arch_review.violations
        )

    comments, dropped = filter_comments_by_valid_lines(candidates, valid_lines)

    if dropped:
        logger.info(f"Dropped {len(dropped)} comments outside the diff hunks")

    return ReviewPayload(event=map_verdict(review.verdict), body=body, comments=comments)
