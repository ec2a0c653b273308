"""Split a unified diff into per-file fragments."""

from diffreview.core.logging import get_logger
from diffreview.services.diff.classifier import parse_file_header
from diffreview.services.diff.schemas import DiffFragment

logger = get_logger("diff.splitter")


def split_diff_by_file(diff: str) -> list[DiffFragment]:
    """Split a diff at every ``diff --git`` header.

    Each fragment starts with its own header line and keeps every following
    line verbatim up to the next header. Text before the first header belongs
    to no file and is dropped, so a diff without headers yields no fragments.
    """
    fragments: list[DiffFragment] = []
    current_file = None
    current_lines: list[str] = []

    for line in diff.split("\n"):
        path = parse_file_header(line)
        if path is not None:
            if current_file is not None:
                fragments.append(DiffFragment(current_file, "\n".join(current_lines)))
            current_file = path
            current_lines = [line]
        elif current_file is not None:
            current_lines.append(line)

    if current_file is not None:
        fragments.append(DiffFragment(current_file, "\n".join(current_lines)))

    logger.debug(f"Split diff into {len(fragments)} file fragments")
    return fragments


def list_diff_files(diff: str) -> list[str]:
    """Return the new-file path of every file header, in diff order."""
    return [
        path
        for path in (parse_file_header(line) for line in diff.split("\n"))
        if path is not None
    ]
