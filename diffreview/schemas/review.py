"""Review-related schemas."""

from enum import Enum

from pydantic import BaseModel, field_validator

from diffreview.core.logging import get_logger

logger = get_logger("schemas.review")


class Severity(str, Enum):
    """Severity of a single finding, most severe first."""

    CRITICAL = "critical"
    WARNING = "warning"
    SUGGESTION = "suggestion"
    NITPICK = "nitpick"

    @property
    def rank(self) -> int:
        """Higher rank is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.NITPICK: 0,
    Severity.SUGGESTION: 1,
    Severity.WARNING: 2,
    Severity.CRITICAL: 3,
}


class Verdict(str, Enum):
    """Overall verdict of a code review."""

    APPROVE = "approve"
    COMMENT = "comment"
    REQUEST_CHANGES = "request_changes"

    @property
    def rank(self) -> int:
        """approve < comment < request_changes."""
        return _VERDICT_RANK[self]


_VERDICT_RANK = {
    Verdict.APPROVE: 0,
    Verdict.COMMENT: 1,
    Verdict.REQUEST_CHANGES: 2,
}


class ArchViolationCategory(str, Enum):
    """Kind of architecture rule a violation breaks."""

    LAYER_VIOLATION = "layer_violation"
    NAMING_CONVENTION = "naming_convention"
    DESIGN_PATTERN = "design_pattern"
    CIRCULAR_DEPENDENCY = "circular_dependency"


class ReviewEvent(str, Enum):
    """Event attached to a posted review."""

    APPROVE = "APPROVE"
    REQUEST_CHANGES = "REQUEST_CHANGES"
    COMMENT = "COMMENT"


class ReviewFinding(BaseModel):
    """A single code review finding on a new-file line."""

    file: str
    line: int
    severity: Severity
    title: str
    body: str
    suggestion: str = ""


class ArchViolation(BaseModel):
    """A single architecture conformance violation."""

    file: str
    line: int
    category: ArchViolationCategory
    severity: Severity
    rule: str
    description: str
    suggestion: str = ""

    @field_validator("severity")
    @classmethod
    def _no_nitpicks(cls, value: Severity) -> Severity:
        if value is Severity.NITPICK:
            raise ValueError("architecture violations are critical, warning or suggestion")
        return value


class ReviewOutput(BaseModel):
    """Structured result of a code review (one batch or merged)."""

    summary: str
    findings: list[ReviewFinding] = []
    verdict: Verdict = Verdict.COMMENT

    @field_validator("verdict", mode="before")
    @classmethod
    def _coerce_verdict(cls, value):
        if isinstance(value, Verdict):
            return value
        try:
            return Verdict(value)
        except ValueError:
            logger.warning(f"Unrecognized verdict {value!r}, treating as comment")
            return Verdict.COMMENT


class ArchReviewOutput(BaseModel):
    """Structured result of an architecture review (one batch or merged).

    A negative conformance score means the score could not be determined.
    """

    summary: str
    conformance_score: int = 100
    violations: list[ArchViolation] = []


class ReviewComment(BaseModel):
    """Inline comment addressed by path and new-file line."""

    path: str
    line: int
    body: str


class ReviewPayload(BaseModel):
    """Full review ready to be posted."""

    event: ReviewEvent
    body: str
    comments: list[ReviewComment] = []
