"""Turn raw analyzer text into structured review results."""

import json
import math
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from diffreview.core.logging import get_logger
from diffreview.core.text import truncate
from diffreview.schemas.review import ArchReviewOutput, ArchViolation, ReviewFinding, ReviewOutput, Verdict
from diffreview.services.reviewer.merge import UNDETERMINED_SCORE

logger = get_logger("reviewer.output_parser")

RAW_SUMMARY_LIMIT = 4000

ItemT = TypeVar("ItemT", bound=BaseModel)


def _extract_json(raw: str) -> Optional[dict]:
    """Find the JSON object in the response."""
    json_start = raw.find("{")
    json_end = raw.rfind("}") + 1
    if json_start == -1 or json_end <= json_start:
        return None
    try:
        data = json.loads(raw[json_start:json_end])
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse review JSON: {e}")
        return None
    return data if isinstance(data, dict) else None


def _validate_items(items: list, model: Type[ItemT], kind: str) -> list[ItemT]:
    """Validate items one by one, dropping the ones that do not fit."""
    valid = []
    for position, item in enumerate(items):
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping malformed {kind} #{position}: {e.error_count()} errors")
    return valid


def parse_review_output(raw: str) -> ReviewOutput:
    """Parse a code review response, falling back to the raw text.

    Only the top-level shape decides between parsed output and the fallback;
    individual findings that fail validation are dropped.
    """
    data = _extract_json(raw)
    if (
        data is not None
        and isinstance(data.get("summary"), str)
        and data["summary"]
        and isinstance(data.get("findings"), list)
    ):
        return ReviewOutput(
            summary=data["summary"],
            findings=_validate_items(data["findings"], ReviewFinding, "finding"),
            verdict=data.get("verdict", Verdict.COMMENT),
        )

    logger.warning("Review output missing expected fields, using raw text")
    return ReviewOutput(
        summary=truncate(raw, RAW_SUMMARY_LIMIT) or "Review produced no structured output.",
        findings=[],
        verdict=Verdict.COMMENT,
    )


def parse_arch_review_output(raw: str) -> ArchReviewOutput:
    """Parse an architecture review response, falling back to the raw text."""
    data = _extract_json(raw)
    score = data.get("conformance_score") if data is not None else None
    if (
        data is not None
        and isinstance(data.get("summary"), str)
        and data["summary"]
        and isinstance(score, (int, float))
        and not isinstance(score, bool)
        and math.isfinite(score)
        and isinstance(data.get("violations"), list)
    ):
        return ArchReviewOutput(
            summary=data["summary"],
            conformance_score=round(score),
            violations=_validate_items(data["violations"], ArchViolation, "violation"),
        )

    logger.warning("Architecture review output missing expected fields, using raw text")
    return ArchReviewOutput(
        summary=truncate(raw, RAW_SUMMARY_LIMIT) or "Architecture review produced no output.",
        conformance_score=UNDETERMINED_SCORE,
        violations=[],
    )
