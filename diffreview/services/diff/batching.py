"""Pack per-file fragments into size-bounded batches."""

from typing import Optional

from diffreview.config import settings
from diffreview.core.exceptions import InvalidBudgetError
from diffreview.core.logging import get_logger
from diffreview.services.diff.schemas import DiffFragment

logger = get_logger("diff.batching")


def batch_diff_chunks(
    fragments: list[DiffFragment],
    max_chars: Optional[int] = None,
) -> list[str]:
    """Greedily pack fragments into batches of at most ``max_chars`` characters.

    Fragments are sorted by path first so that files from the same directory
    (a module and its tests, say) tend to share a batch. Fragments in a batch
    are joined with a newline, which counts against the budget, so two
    fragments that exactly fill it together go to separate batches. A fragment
    larger than the budget on its own is emitted as a solo batch.

    Args:
        fragments: Per-file fragments, usually already filtered
        max_chars: Character budget per batch, defaults to settings

    Returns:
        Ordered list of batch texts
    """
    budget = settings.max_batch_chars if max_chars is None else max_chars
    if budget <= 0:
        raise InvalidBudgetError(budget)

    batches: list[str] = []
    current: list[str] = []
    current_size = 0

    def flush() -> None:
        nonlocal current, current_size
        if current:
            batches.append("\n".join(current))
        current = []
        current_size = 0

    for fragment in sorted(fragments, key=lambda f: f.file):
        # Joining onto a non-empty batch costs one separator newline
        cost = fragment.size + (1 if current else 0)
        if current and current_size + cost > budget:
            flush()
            cost = fragment.size

        current.append(fragment.content)
        current_size += cost

        if fragment.size > budget:
            logger.warning(
                f"{fragment.file} is {fragment.size} chars, over the {budget} char budget; "
                "reviewing it in its own batch"
            )
            flush()

    flush()

    logger.info(f"Packed {len(fragments)} files into {len(batches)} batches")
    return batches
