"""Exclude fragments that are not worth reviewing."""

import posixpath
import re
from typing import Optional

from diffreview.core.logging import get_logger
from diffreview.services.diff.classifier import HUNK_HEADER_RE
from diffreview.services.diff.schemas import DiffFragment, FilterResult

logger = get_logger("diff.filters")

LOCK_FILES = frozenset(
    {
        # JavaScript
        "package-lock.json",
        "npm-shrinkwrap.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "bun.lockb",
        # Python
        "poetry.lock",
        "Pipfile.lock",
        "uv.lock",
        "pdm.lock",
        # Other ecosystems
        "Gemfile.lock",
        "Cargo.lock",
        "composer.lock",
        "go.sum",
        "flake.lock",
        "mix.lock",
        "pubspec.lock",
        "Podfile.lock",
        "packages.lock.json",
    }
)

EXCLUDED_DIRS = frozenset(
    {
        "vendor",
        "node_modules",
        "bower_components",
        "dist",
        "build",
        ".next",
        ".nuxt",
        ".svelte-kit",
        ".turbo",
        ".parcel-cache",
        ".angular",
        "__pycache__",
        ".gradle",
    }
)

GENERATED_FILE_RE = re.compile(
    r"(\.min(\.[^./]+)+"
    r"|\.generated(\.[^./]+)+"
    r"|\.bundle\.js"
    r"|\.pb\.go"
    r"|_pb2(_grpc)?\.py"
    r"|\.g\.dart"
    r"|\.freezed\.dart"
    r"|\.(js|css)\.map)$"
)

BINARY_MARKER_RE = re.compile(r"^(Binary files .* differ|GIT binary patch)$", re.MULTILINE)


def _is_binary_only(content: str) -> bool:
    if not BINARY_MARKER_RE.search(content):
        return False
    return not any(HUNK_HEADER_RE.match(line) for line in content.split("\n"))


def exclusion_reason(fragment: DiffFragment) -> Optional[str]:
    """Return why a fragment should be skipped, or None to keep it."""
    directory, basename = posixpath.split(fragment.file)

    if basename in LOCK_FILES:
        return "lock file"

    # Match whole directory components so "vendored-utils/" is kept
    if any(part in EXCLUDED_DIRS for part in directory.split("/")):
        return "vendor or build directory"

    if GENERATED_FILE_RE.search(basename):
        return "generated or minified file"

    if _is_binary_only(fragment.content):
        return "binary file"

    return None


def filter_diffs(fragments: list[DiffFragment]) -> FilterResult:
    """Partition fragments into reviewable ones and excluded paths.

    Both partitions keep the input order.
    """
    result = FilterResult()

    for fragment in fragments:
        reason = exclusion_reason(fragment)
        if reason is None:
            result.included.append(fragment)
        else:
            logger.debug(f"Excluding {fragment.file}: {reason}")
            result.excluded.append(fragment.file)

    return result
