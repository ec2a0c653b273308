"""Patch parser to extract valid line numbers for PR review comments."""

from dataclasses import dataclass, field, replace
from functools import reduce
from typing import Iterable, Optional

from diffreview.core.logging import get_logger
from diffreview.schemas.review import ReviewComment
from diffreview.services.diff.classifier import DiffLine, DiffLineKind, classify_lines

logger = get_logger("diff.patch_parser")

ValidLineSet = dict[str, set[int]]

# Key used while folding a bare per-file patch that has no file header
_PATCH_KEY = ""


@dataclass(frozen=True)
class _ParseState:
    current_file: Optional[str] = None
    cursor: int = 0
    mapping: ValidLineSet = field(default_factory=dict)


def _advance(state: _ParseState, line: DiffLine) -> _ParseState:
    """Fold one classified line into the parse state."""
    if line.kind is DiffLineKind.FILE_HEADER:
        state.mapping.setdefault(line.path, set())
        return replace(state, current_file=line.path, cursor=0)

    if state.current_file is None:
        return state

    if line.kind is DiffLineKind.HUNK_HEADER:
        return replace(state, cursor=line.new_start)

    if line.kind in (DiffLineKind.ADDITION, DiffLineKind.CONTEXT):
        state.mapping[state.current_file].add(state.cursor)
        return replace(state, cursor=state.cursor + 1)

    # Deletions have no new-file line; no-newline markers and metadata are inert
    return state


def _fold(lines: Iterable[str], initial: _ParseState) -> ValidLineSet:
    return reduce(_advance, classify_lines(lines), initial).mapping


def parse_diff_valid_lines(diff: str) -> ValidLineSet:
    """Map every file in a unified diff to its commentable new-file lines.

    A line is commentable when it is an addition or a context line inside a
    hunk. Files missing from the result have no commentable lines at all.

    Args:
        diff: Full unified diff text with ``diff --git`` headers

    Returns:
        Dict mapping new-file path to the set of valid line numbers
    """
    if not diff:
        return {}

    valid_lines = _fold(diff.split("\n"), _ParseState())
    logger.debug(f"Parsed valid lines for {len(valid_lines)} files")
    return valid_lines


def parse_patch_line_numbers(patch: str) -> set[int]:
    """Extract valid line numbers from a single file's patch.

    The patch is the hunk-only form hosting APIs attach to each changed file,
    without the ``diff --git`` header.

    Args:
        patch: Unified diff patch string

    Returns:
        Set of valid line numbers (in the new file) for review comments
    """
    if not patch:
        return set()

    initial = _ParseState(current_file=_PATCH_KEY, mapping={_PATCH_KEY: set()})
    return _fold(patch.split("\n"), initial).get(_PATCH_KEY, set())


def filter_comments_by_valid_lines(
    comments: list[ReviewComment],
    valid_lines: ValidLineSet,
) -> tuple[list[ReviewComment], list[ReviewComment]]:
    """Filter comments to only those with valid line numbers.

    Args:
        comments: Candidate inline comments
        valid_lines: Valid new-file lines per path

    Returns:
        Tuple of (valid_comments, invalid_comments)
    """
    valid = []
    invalid = []

    for comment in comments:
        # A file missing from the mapping has no valid lines
        file_valid_lines = valid_lines.get(comment.path)

        if file_valid_lines is not None and comment.line in file_valid_lines:
            valid.append(comment)
        else:
            invalid.append(comment)

    return valid, invalid
