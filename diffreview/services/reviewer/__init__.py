"""Reviewer service."""

from diffreview.services.reviewer.merge import (
    build_fallback_arch_review,
    build_fallback_review,
    merge_arch_reviews,
    merge_reviews,
)
from diffreview.services.reviewer.output_parser import parse_arch_review_output, parse_review_output
from diffreview.services.reviewer.reporter import build_review_payload, map_verdict
from diffreview.services.reviewer.service import (
    plan_batches,
    review_batches_parallel,
    review_diff,
    run_arch_review,
    run_code_review,
)

__all__ = [
    "build_fallback_arch_review",
    "build_fallback_review",
    "build_review_payload",
    "map_verdict",
    "merge_arch_reviews",
    "merge_reviews",
    "parse_arch_review_output",
    "parse_review_output",
    "plan_batches",
    "review_batches_parallel",
    "review_diff",
    "run_arch_review",
    "run_code_review",
]
