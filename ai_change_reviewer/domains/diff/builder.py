from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from ai_change_reviewer.domains.diff.models import ChangedFile, DiffPayload
from ai_change_reviewer.shared.errors import DiffError


logger = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    """Split file content into lines.

    A final line terminator never produces a trailing empty line, ``\\r\\n``
    endings are treated like ``\\n`` and the empty string has no lines.
    A file whose only change is its line endings therefore splits to the same
    lines as before: it gets no diff section but still counts as modified.
    """
    if not isinstance(text, str):
        raise DiffError(f"Expected text content, got {type(text).__name__}")
    if not text:
        return []

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def build_changes_summary(files_changed: int, lines_added: int, lines_deleted: int) -> str:
    return (
        "Changes Summary:\n"
        f"- Files modified: {files_changed}\n"
        f"- Lines added: {lines_added}\n"
        f"- Lines deleted: {lines_deleted}\n"
        f"- Net change: {lines_added - lines_deleted} lines\n"
    )


@dataclass
class _FileSection:
    lines: List[str] = field(default_factory=list)
    added: int = 0
    deleted: int = 0

    def context(self, line: str) -> None:
        self.lines.append(f" {line}")

    def addition(self, line: str) -> None:
        self.lines.append(f"+{line}")
        self.added += 1

    def deletion(self, line: str) -> None:
        self.lines.append(f"-{line}")
        self.deleted += 1

    def render(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


class ChangeDiffBuilder:
    """Builds one unified diff text out of before/after file snapshots.

    Modified files are aligned with two synchronized cursors instead of a
    minimal edit script, so shifted lines show up as delete/add pairs.
    Failures are contained per file: the file's section becomes an inline
    error line and the rest of the batch is still rendered.
    """

    def build(self, changes: Iterable[ChangedFile]) -> DiffPayload:
        sections: List[str] = []
        modified_files: List[str] = []
        lines_added = 0
        lines_deleted = 0

        for change in changes:
            modified_files.append(change.path)
            try:
                section = self._build_file_section(change)
            except Exception as exc:  # noqa: BLE001 - one broken file must not drop the batch
                logger.exception("Error generating diff for file: %s", change.path)
                sections.append(f"Error generating diff for {change.path}: {exc}\n")
                continue

            if section is None:
                logger.debug("Skipping unchanged file: %s", change.path)
                continue

            sections.append(section.render())
            lines_added += section.added
            lines_deleted += section.deleted

        summary = build_changes_summary(len(modified_files), lines_added, lines_deleted)
        logger.info(
            "Built diff: files=%s, added=%s, deleted=%s",
            len(modified_files),
            lines_added,
            lines_deleted,
        )

        return DiffPayload(
            unified_diff="".join(sections),
            modified_files=tuple(modified_files),
            summary=summary,
            lines_added=lines_added,
            lines_deleted=lines_deleted,
        )

    def _build_file_section(self, change: ChangedFile) -> _FileSection | None:
        section = _FileSection()
        section.lines.append(f"--- a/{change.path}")
        section.lines.append(f"+++ b/{change.path}")

        if change.before_text is None:
            after_lines = split_lines(change.after_text or "")
            section.lines.append(f"@@ -0,0 +1,{len(after_lines)} @@")
            for line in after_lines:
                section.addition(line)
        elif change.after_text is None:
            before_lines = split_lines(change.before_text)
            section.lines.append(f"@@ -1,{len(before_lines)} +0,0 @@")
            for line in before_lines:
                section.deletion(line)
        else:
            before_lines = split_lines(change.before_text)
            after_lines = split_lines(change.after_text)
            if before_lines == after_lines:
                return None
            section.lines.append(f"@@ -1,{len(before_lines)} +1,{len(after_lines)} @@")
            self._align(before_lines, after_lines, section)

        section.lines.append("")
        return section

    @staticmethod
    def _align(before_lines: List[str], after_lines: List[str], section: _FileSection) -> None:
        before_index = 0
        after_index = 0

        while before_index < len(before_lines) or after_index < len(after_lines):
            if before_index >= len(before_lines):
                section.addition(after_lines[after_index])
                after_index += 1
            elif after_index >= len(after_lines):
                section.deletion(before_lines[before_index])
                before_index += 1
            elif before_lines[before_index] == after_lines[after_index]:
                section.context(before_lines[before_index])
                before_index += 1
                after_index += 1
            else:
                section.deletion(before_lines[before_index])
                section.addition(after_lines[after_index])
                before_index += 1
                after_index += 1
