"""Data shapes for the diff stages."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DiffFragment:
    """The full diff text of one file: its ``diff --git`` header and hunks."""

    file: str
    content: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FilterResult:
    """Fragments kept for review and the paths that were excluded."""

    included: list[DiffFragment] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
