"""Diff parsing service."""

from diffreview.services.diff.batching import batch_diff_chunks
from diffreview.services.diff.classifier import DiffLine, DiffLineKind, classify_line, classify_lines
from diffreview.services.diff.filters import exclusion_reason, filter_diffs
from diffreview.services.diff.patch_parser import (
    ValidLineSet,
    filter_comments_by_valid_lines,
    parse_diff_valid_lines,
    parse_patch_line_numbers,
)
from diffreview.services.diff.schemas import DiffFragment, FilterResult
from diffreview.services.diff.splitter import list_diff_files, split_diff_by_file

__all__ = [
    "DiffFragment",
    "DiffLine",
    "DiffLineKind",
    "FilterResult",
    "ValidLineSet",
    "batch_diff_chunks",
    "classify_line",
    "classify_lines",
    "exclusion_reason",
    "filter_comments_by_valid_lines",
    "filter_diffs",
    "list_diff_files",
    "parse_diff_valid_lines",
    "parse_patch_line_numbers",
    "split_diff_by_file",
]
