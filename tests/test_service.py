"""Tests for the review orchestration layer."""

import asyncio
from unittest.mock import patch

import pytest

from diffreview.core.exceptions import ExternalServiceError, InvalidConcurrencyError
from diffreview.schemas.review import (
    ArchReviewOutput,
    ReviewEvent,
    ReviewFinding,
    ReviewOutput,
    Severity,
    Verdict,
)
from diffreview.services.reviewer.service import (
    plan_batches,
    review_batches_parallel,
    review_diff,
    run_arch_review,
    run_code_review,
)


def file_diff(path: str, *body: str) -> str:
    return "\n".join(
        [
            f"diff --git a/{path} b/{path}",
            f"--- a/{path}",
            f"+++ b/{path}",
            "@@ -1,2 +1,3 @@",
            " one",
            *(body or ("+two",)),
            " three",
        ]
    )


DIFF = "\n".join(
    [
        file_diff("src/foo.py"),
        file_diff("src/bar.py"),
        file_diff("yarn.lock"),
    ]
)


class TestPlanBatches:
    """Tests for plan_batches function."""

    def test_filters_and_packs(self):
        plan = plan_batches(DIFF, include_all=False, max_chars=30_000)

        assert [f.file for f in plan.fragments] == ["src/foo.py", "src/bar.py", "yarn.lock"]
        assert [f.file for f in plan.included] == ["src/foo.py", "src/bar.py"]
        assert plan.excluded == ["yarn.lock"]
        assert len(plan.batches) == 1
        assert plan.batches[0].startswith("diff --git a/src/bar.py")

    def test_include_all_skips_filter(self):
        plan = plan_batches(DIFF, include_all=True, max_chars=30_000)

        assert plan.excluded == []
        assert len(plan.included) == 3

    @patch("diffreview.services.reviewer.service.settings")
    def test_include_all_from_settings(self, mock_settings):
        mock_settings.include_all = True

        assert plan_batches(DIFF, max_chars=30_000).excluded == []


class TestReviewBatchesParallel:
    """Tests for review_batches_parallel function."""

    def test_failures_do_not_abort_siblings(self):
        """Raising, timing out and empty batches are dropped; the rest keep order."""

        async def analyze(batch):
            if batch.index == 2:
                raise ExternalServiceError("engine", "boom")
            if batch.index == 3:
                await asyncio.sleep(10)
            if batch.index == 4:
                return None
            return f"result {batch.index}/{batch.total}"

        results = asyncio.run(
            review_batches_parallel(["a", "b", "c", "d", "e"], analyze, max_concurrency=5, timeout=0.05)
        )

        assert results == ["result 1/5", "result 5/5"]

    def test_concurrency_limit(self):
        """No more than max_concurrency analyzers run at once."""
        running = 0
        peak = 0

        async def analyze(batch):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return batch.index

        results = asyncio.run(
            review_batches_parallel([str(i) for i in range(6)], analyze, max_concurrency=2, timeout=0)
        )

        assert results == [1, 2, 3, 4, 5, 6]
        assert peak == 2

    def test_batch_lists_its_files(self):
        seen = []

        async def analyze(batch):
            seen.append(batch.files)
            return batch

        asyncio.run(review_batches_parallel([file_diff("a.py") + "\n" + file_diff("b.py")], analyze, 1, 0))

        assert seen == [["a.py", "b.py"]]

    def test_rejects_zero_concurrency(self):
        async def analyze(batch):
            return batch

        with pytest.raises(InvalidConcurrencyError):
            asyncio.run(review_batches_parallel(["a"], analyze, max_concurrency=0))

    def test_non_exception_errors_propagate(self):
        class Abort(BaseException):
            pass

        async def analyze(batch):
            raise Abort

        with pytest.raises(Abort):
            asyncio.run(review_batches_parallel(["a"], analyze, max_concurrency=1, timeout=0))


class TestRunCodeReview:
    """Tests for run_code_review function."""

    def test_merges_batches_in_order(self):
        async def analyze(batch):
            verdict = Verdict.REQUEST_CHANGES if batch.index == 2 else Verdict.APPROVE
            return ReviewOutput(summary=f"batch {batch.index}", verdict=verdict)

        run = asyncio.run(run_code_review(DIFF, analyze, include_all=True, max_chars=200, timeout=0))

        assert run.batches == 3
        assert run.failed_batches == 0
        assert run.review.summary == "batch 1\n\nbatch 2\n\nbatch 3"
        assert run.review.verdict is Verdict.REQUEST_CHANGES

    def test_all_batches_failed_uses_fallback(self):
        async def analyze(batch):
            raise ExternalServiceError("engine", "down")

        run = asyncio.run(run_code_review(DIFF, analyze, max_chars=30_000, timeout=0))

        assert run.failed_batches == 1
        assert run.review.summary == "AI review could not be completed."
        assert run.review.findings == []
        assert run.excluded_files == ["yarn.lock"]

    def test_nothing_reviewable_skips_analyzer(self):
        calls = []

        async def analyze(batch):
            calls.append(batch)

        run = asyncio.run(run_code_review(file_diff("package-lock.json"), analyze, include_all=False))

        assert calls == []
        assert run.batches == 0
        assert run.review.summary == "No reviewable changes found."
        assert run.excluded_files == ["package-lock.json"]


class TestRunArchReview:
    """Tests for run_arch_review function."""

    def test_all_failed_uses_fallback(self):
        async def analyze(batch):
            return None

        result = asyncio.run(run_arch_review(DIFF, analyze, max_chars=30_000, timeout=0))

        assert result.conformance_score == -1

    def test_merges_scores(self):
        async def analyze(batch):
            return ArchReviewOutput(summary="ok", conformance_score=90 - batch.index * 10)

        result = asyncio.run(run_arch_review(DIFF, analyze, include_all=True, max_chars=200, timeout=0))

        assert result.conformance_score == 60


class TestReviewDiff:
    """Tests for review_diff function."""

    def test_end_to_end(self):
        """Comments are validated against the full input diff."""

        async def analyze(batch):
            findings = [
                ReviewFinding(file=path, line=2, severity=Severity.WARNING, title="t", body="b")
                for path in batch.files
            ]
            findings.append(
                ReviewFinding(file="src/other.py", line=1, severity=Severity.CRITICAL, title="t", body="b")
            )
            return ReviewOutput(summary="done", findings=findings, verdict=Verdict.COMMENT)

        payload = asyncio.run(review_diff(DIFF, analyze, max_chars=30_000, timeout=0))

        assert payload.event is ReviewEvent.COMMENT
        assert [(c.path, c.line) for c in payload.comments] == [("src/bar.py", 2), ("src/foo.py", 2)]
        assert "| 🔴 Critical | 1 |" in payload.body
        assert "- `yarn.lock`" in payload.body

    def test_with_arch_pass(self):
        async def analyze(batch):
            return ReviewOutput(summary="fine", verdict=Verdict.APPROVE)

        async def arch_analyze(batch):
            return ArchReviewOutput(summary="conformant", conformance_score=95)

        payload = asyncio.run(review_diff(DIFF, analyze, arch_analyze, max_chars=30_000, timeout=0))

        assert payload.event is ReviewEvent.APPROVE
        assert "**Score:** 95/100" in payload.body

    def test_passes_run_concurrently(self):
        """The code pass can only finish once the architecture pass has started."""

        async def main():
            arch_started = asyncio.Event()

            async def analyze(batch):
                await arch_started.wait()
                return ReviewOutput(summary="code done", verdict=Verdict.APPROVE)

            async def arch_analyze(batch):
                arch_started.set()
                return ArchReviewOutput(summary="arch done", conformance_score=80)

            return await review_diff(DIFF, analyze, arch_analyze, max_chars=30_000, timeout=2.0)

        payload = asyncio.run(main())

        assert "code done" in payload.body
        assert "**Score:** 80/100" in payload.body
