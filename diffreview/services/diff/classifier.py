"""Classify unified diff lines.

The classifier is a two-state machine: outside a hunk only file and hunk
headers are meaningful, inside a hunk every line is dispatched on its first
character. Each result carries the mode for the following line so callers can
thread it through without duplicating the transition rules.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional

FILE_HEADER_RE = re.compile(r"^diff --git (.+)$")
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_QUOTED_NEW_PATH_RE = re.compile(r'"b/((?:[^"\\]|\\.)*)"$')
_UNQUOTED_PATHS_RE = re.compile(r"^(?:a/.+|\"a/(?:[^\"\\]|\\.)*\") b/(.+)$")
_ESCAPE_RE = re.compile(r"\\([0-7]{3}|.)")
_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}


class DiffLineKind(str, Enum):
    FILE_HEADER = "file_header"
    HUNK_HEADER = "hunk_header"
    ADDITION = "addition"
    DELETION = "deletion"
    CONTEXT = "context"
    NO_NEWLINE = "no_newline"
    OTHER = "other"


_HUNK_PREFIXES = {
    "+": DiffLineKind.ADDITION,
    "-": DiffLineKind.DELETION,
    " ": DiffLineKind.CONTEXT,
    "\\": DiffLineKind.NO_NEWLINE,
}


@dataclass(frozen=True)
class DiffLine:
    """A classified diff line.

    ``path`` is only set for file headers; the hunk ranges only for hunk
    headers. ``in_hunk`` is the classifier mode after this line.
    """

    kind: DiffLineKind
    text: str
    in_hunk: bool
    path: Optional[str] = None
    old_start: Optional[int] = None
    old_count: Optional[int] = None
    new_start: Optional[int] = None
    new_count: Optional[int] = None


def _unquote_path(path: str) -> str:
    """Undo git's C-style path quoting (octal escapes are UTF-8 bytes)."""
    raw = bytearray()
    pos = 0
    for match in _ESCAPE_RE.finditer(path):
        raw += path[pos:match.start()].encode("utf-8")
        code = match.group(1)
        if len(code) == 3:
            raw.append(int(code, 8))
        elif code in _ESCAPES:
            raw.append(_ESCAPES[code])
        else:
            raw += code.encode("utf-8")
        pos = match.end()
    raw += path[pos:].encode("utf-8")
    return raw.decode("utf-8", errors="replace")


def parse_file_header(line: str) -> Optional[str]:
    """Return the new-file path of a ``diff --git`` header, or None.

    Handles git's quoted form (``"b/with \\"quotes\\""``) and paths that
    themselves contain `` b/`` when the file was not renamed.
    """
    match = FILE_HEADER_RE.match(line)
    if not match:
        return None
    paths = match.group(1)

    quoted = _QUOTED_NEW_PATH_RE.search(paths)
    if quoted:
        return _unquote_path(quoted.group(1))

    # Unrenamed files repeat the same path: "a/<p> b/<p>"
    length, odd = divmod(len(paths) - 5, 2)
    if not odd and length > 0 and paths.startswith("a/"):
        old, sep, new = paths[2:2 + length], paths[2 + length:5 + length], paths[5 + length:]
        if sep == " b/" and old == new:
            return new

    unquoted = _UNQUOTED_PATHS_RE.match(paths)
    if unquoted:
        return unquoted.group(1)
    return None


def classify_line(line: str, in_hunk: bool) -> DiffLine:
    """Classify one diff line given whether the previous line left us in a hunk."""
    path = parse_file_header(line)
    if path is not None:
        return DiffLine(DiffLineKind.FILE_HEADER, line, in_hunk=False, path=path)

    hunk_match = HUNK_HEADER_RE.match(line)
    if hunk_match:
        old_start, old_count, new_start, new_count = hunk_match.groups()
        return DiffLine(
            DiffLineKind.HUNK_HEADER,
            line,
            in_hunk=True,
            old_start=int(old_start),
            old_count=int(old_count) if old_count is not None else 1,
            new_start=int(new_start),
            new_count=int(new_count) if new_count is not None else 1,
        )

    if not in_hunk:
        # Metadata between headers: index, ---, +++, mode lines, binary markers
        return DiffLine(DiffLineKind.OTHER, line, in_hunk=False)

    kind = _HUNK_PREFIXES.get(line[:1])
    if kind is None:
        # Anything unexpected ends the hunk
        return DiffLine(DiffLineKind.OTHER, line, in_hunk=False)
    return DiffLine(kind, line, in_hunk=True)


def classify_lines(lines: Iterable[str]) -> Iterator[DiffLine]:
    """Classify a sequence of diff lines, threading the hunk mode through."""
    in_hunk = False
    for line in lines:
        classified = classify_line(line, in_hunk)
        in_hunk = classified.in_hunk
        yield classified
