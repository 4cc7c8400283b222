from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ChangedFile:
    """Before/after snapshot of one pending file change.

    A missing ``before_text`` marks a new file, a missing ``after_text`` a
    deleted one. At least one side must be present.
    """

    path: str
    before_text: str | None = None
    after_text: str | None = None

    def __post_init__(self) -> None:
        if self.before_text is None and self.after_text is None:
            raise ValueError(f"Changed file has neither before nor after content: {self.path}")

    @property
    def is_new(self) -> bool:
        return self.before_text is None

    @property
    def is_deleted(self) -> bool:
        return self.after_text is None


@dataclass(frozen=True)
class DiffPayload:
    unified_diff: str
    modified_files: Tuple[str, ...]
    summary: str
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def net_change(self) -> int:
        return self.lines_added - self.lines_deleted
