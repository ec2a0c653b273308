"""Schemas for the reviewer service."""

from dataclasses import dataclass, field

from pydantic import BaseModel

from diffreview.schemas.review import ReviewOutput
from diffreview.services.diff.schemas import DiffFragment


class ReviewBatch(BaseModel):
    """One unit of work handed to an analyzer."""

    index: int  # 1-based
    total: int
    content: str
    files: list[str] = []


@dataclass
class BatchPlan:
    """Fragments of a diff and how they were packed for review."""

    fragments: list[DiffFragment] = field(default_factory=list)
    included: list[DiffFragment] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    batches: list[str] = field(default_factory=list)


class CodeReviewRun(BaseModel):
    """Result of reviewing every batch of a diff."""

    review: ReviewOutput
    excluded_files: list[str] = []
    batches: int = 0
    failed_batches: int = 0
