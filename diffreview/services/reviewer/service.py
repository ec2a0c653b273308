"""Reviewer service - orchestration layer."""

import asyncio
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from diffreview.config import settings
from diffreview.core.exceptions import InvalidConcurrencyError
from diffreview.core.logging import get_logger
from diffreview.schemas.review import ArchReviewOutput, ReviewOutput, ReviewPayload, Verdict
from diffreview.services.diff.batching import batch_diff_chunks
from diffreview.services.diff.filters import filter_diffs
from diffreview.services.diff.patch_parser import parse_diff_valid_lines
from diffreview.services.diff.splitter import list_diff_files, split_diff_by_file
from diffreview.services.reviewer.merge import (
    build_fallback_arch_review,
    build_fallback_review,
    merge_arch_reviews,
    merge_reviews,
)
from diffreview.services.reviewer.reporter import build_review_payload
from diffreview.services.reviewer.schemas import BatchPlan, CodeReviewRun, ReviewBatch

logger = get_logger("reviewer.service")

T = TypeVar("T")

Analyzer = Callable[[ReviewBatch], Awaitable[Optional[T]]]


def plan_batches(
    diff: str,
    include_all: Optional[bool] = None,
    max_chars: Optional[int] = None,
) -> BatchPlan:
    """Split, filter and pack a diff into review batches."""
    include_all = settings.include_all if include_all is None else include_all

    fragments = split_diff_by_file(diff)
    plan = BatchPlan(fragments=fragments, included=fragments)

    if not include_all:
        filtered = filter_diffs(fragments)
        plan.included = filtered.included
        plan.excluded = filtered.excluded

        if plan.excluded:
            shown = ", ".join(plan.excluded[:5])
            more = f" and {len(plan.excluded) - 5} more" if len(plan.excluded) > 5 else ""
            logger.info(f"Filtered {len(plan.excluded)} non-reviewable file(s): {shown}{more}")

    plan.batches = batch_diff_chunks(plan.included, max_chars)
    return plan


async def review_batches_parallel(
    batches: Sequence[str],
    analyze: Analyzer,
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> list:
    """Analyze every batch concurrently and keep the successful results.

    A batch that raises, times out or returns None is left out; the other
    batches are unaffected. Survivors are returned in batch order.
    """
    max_concurrency = settings.review_concurrency if max_concurrency is None else max_concurrency
    timeout = settings.batch_timeout_seconds if timeout is None else timeout
    if max_concurrency < 1:
        raise InvalidConcurrencyError(max_concurrency)

    semaphore = asyncio.Semaphore(max_concurrency)
    total = len(batches)

    async def run_batch(index: int, content: str):
        batch = ReviewBatch(index=index, total=total, content=content, files=list_diff_files(content))
        async with semaphore:
            logger.info(f"Reviewing batch {index}/{total} ({len(batch.files)} files)")
            if timeout and timeout > 0:
                return await asyncio.wait_for(analyze(batch), timeout)
            return await analyze(batch)

    outcomes = await asyncio.gather(
        *(run_batch(i, content) for i, content in enumerate(batches, start=1)),
        return_exceptions=True,
    )

    results = []
    for index, outcome in enumerate(outcomes, start=1):
        if isinstance(outcome, asyncio.TimeoutError):
            logger.error(f"Batch {index}/{total} timed out after {timeout}s")
        elif isinstance(outcome, Exception):
            logger.error(f"Batch {index}/{total} failed: {outcome}")
        elif isinstance(outcome, BaseException):
            raise outcome
        elif outcome is None:
            logger.warning(f"Batch {index}/{total} produced no result")
        else:
            results.append(outcome)

    return results


async def run_code_review(
    diff: str,
    analyze: Analyzer,
    include_all: Optional[bool] = None,
    max_chars: Optional[int] = None,
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> CodeReviewRun:
    """Review a diff batch by batch and merge the results."""
    plan = plan_batches(diff, include_all, max_chars)

    if not plan.batches:
        logger.info("No reviewable changes found")
        return CodeReviewRun(
            review=ReviewOutput(summary="No reviewable changes found.", verdict=Verdict.COMMENT),
            excluded_files=plan.excluded,
        )

    results = await review_batches_parallel(plan.batches, analyze, max_concurrency, timeout)
    failed = len(plan.batches) - len(results)

    if not results:
        logger.warning("All review batches failed, using fallback")
        review = build_fallback_review()
    else:
        review = merge_reviews(results)
        logger.info(
            f"Review complete ({len(plan.batches)} batches, {failed} failed): "
            f"{len(review.findings)} findings, verdict: {review.verdict.value}"
        )

    return CodeReviewRun(
        review=review,
        excluded_files=plan.excluded,
        batches=len(plan.batches),
        failed_batches=failed,
    )


async def run_arch_review(
    diff: str,
    analyze: Analyzer,
    include_all: Optional[bool] = None,
    max_chars: Optional[int] = None,
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> ArchReviewOutput:
    """Run the architecture conformance pass over a diff."""
    plan = plan_batches(diff, include_all, max_chars)

    if not plan.batches:
        return ArchReviewOutput(summary="No reviewable changes found.")

    results = await review_batches_parallel(plan.batches, analyze, max_concurrency, timeout)

    if not results:
        logger.warning("All architecture review batches failed, using fallback")
        return build_fallback_arch_review()

    merged = merge_arch_reviews(results)
    logger.info(
        f"Architecture review complete: score {merged.conformance_score}/100, "
        f"{len(merged.violations)} violations"
    )
    return merged


async def review_diff(
    diff: str,
    analyze: Analyzer,
    arch_analyze: Optional[Analyzer] = None,
    include_all: Optional[bool] = None,
    max_chars: Optional[int] = None,
    max_concurrency: Optional[int] = None,
    timeout: Optional[float] = None,
) -> ReviewPayload:
    """Review a diff end to end and build the payload to post."""
    code_pass = run_code_review(diff, analyze, include_all, max_chars, max_concurrency, timeout)

    arch_review = None
    if arch_analyze is None:
        run = await code_pass
    else:
        # Both passes run side by side, each under its own concurrency limit
        run, arch_review = await asyncio.gather(
            code_pass,
            run_arch_review(diff, arch_analyze, include_all, max_chars, max_concurrency, timeout),
        )

    # Comments are validated against the exact diff that was reviewed
    valid_lines = parse_diff_valid_lines(diff)
    payload = build_review_payload(run.review, valid_lines, arch_review, run.excluded_files)

    logger.info(f"Built review payload: {payload.event.value}, {len(payload.comments)} inline comments")
    return payload
