from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List

from ai_change_reviewer.domains.diff.models import ChangedFile
from ai_change_reviewer.shared.errors import GitCommandError


logger = logging.getLogger(__name__)


class GitWorkspaceClient:
    """Collects uncommitted changes of a local git working tree against HEAD."""

    def __init__(self, repository_path: str | Path = ".") -> None:
        self._repository_path = Path(repository_path)

    def _run(self, *args: str) -> str:
        command = ["git", *args]
        try:
            result = subprocess.run(
                command,
                cwd=self._repository_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitCommandError("Git command not found. Is Git installed and in your PATH?") from exc

        if result.returncode != 0:
            raise GitCommandError(
                f"git command failed: {' '.join(command)} status={result.returncode}: {result.stderr.strip()}"
            )
        return result.stdout

    def _git_lines(self, *args: str) -> List[str]:
        output = self._run("-c", "core.quotePath=false", *args)
        return [line for line in output.splitlines() if line.strip()]

    def _read_working_copy(self, path: str) -> str:
        return (self._repository_path / path).read_text(encoding="utf-8", errors="replace")

    def _read_head_copy(self, path: str) -> str:
        return self._run("show", f"HEAD:{path}")

    def get_changed_files(self) -> List[ChangedFile]:
        changes: List[ChangedFile] = []

        for line in self._git_lines("diff", "--name-status", "--no-renames", "HEAD"):
            status, _, path = line.partition("\t")
            status = status.strip()[:1]

            if status == "A":
                changes.append(ChangedFile(path=path, after_text=self._read_working_copy(path)))
            elif status == "D":
                changes.append(ChangedFile(path=path, before_text=self._read_head_copy(path)))
            else:
                changes.append(
                    ChangedFile(
                        path=path,
                        before_text=self._read_head_copy(path),
                        after_text=self._read_working_copy(path),
                    )
                )

        for path in self._git_lines("ls-files", "--others", "--exclude-standard"):
            changes.append(ChangedFile(path=path, after_text=self._read_working_copy(path)))

        logger.info(
            "Collected workspace changes: repository=%s, files=%s",
            self._repository_path,
            len(changes),
        )
        return changes

    def get_repository_info(self) -> str | None:
        try:
            root = self._run("rev-parse", "--show-toplevel").strip()
            branch = self._run("rev-parse", "--abbrev-ref", "HEAD").strip() or "unknown"
        except GitCommandError:
            logger.exception("Error getting repository info")
            return None
        return f"Repository: {Path(root).name}, Branch: {branch}"
