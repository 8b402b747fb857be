"""Local git access for the review pipeline.

Everything goes through the ``git`` executable rather than a library binding:
the only things the reviewer needs are ``git status`` and ``git diff``, and the
porcelain output of both is stable across git versions.
"""

from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Well-known hash of git's empty tree. Diffing against it shows every line of
# a file as added, which is what "changes since the last commit" means in a
# repository that has no commits yet.
EMPTY_TREE_SHA = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class NotARepositoryError(RuntimeError):
    """Raised when the working directory is not inside a git work tree."""


class GitCommandError(RuntimeError):
    """Raised when a git command exits with a non-zero status."""


class ChangeKind(str, enum.Enum):
    MODIFIED = "modified"
    CREATED = "created"
    RENAMED = "renamed"


@dataclass(frozen=True)
class ChangeRecord:
    path: str
    kind: ChangeKind


def _classify(xy: str) -> ChangeKind | None:
    """Map a two-letter porcelain status code to a ChangeKind.

    Renames win over additions, additions over modifications, so "RM" is a
    rename and "AM" (added, then edited again) is a creation. Deletions,
    untracked and unmerged entries have no reviewable diff and return None.
    """
    if "U" in xy or xy in ("??", "!!", "DD", "AA"):
        return None
    if "R" in xy:
        return ChangeKind.RENAMED
    if "A" in xy:
        return ChangeKind.CREATED
    if "M" in xy or "T" in xy:
        return ChangeKind.MODIFIED
    return None


def parse_porcelain_status(output: str) -> list[ChangeRecord]:
    """Parse ``git status --porcelain=v1 -z`` output into change records.

    With ``-z`` each entry is ``XY <path>`` terminated by NUL; renames and
    copies are followed by one extra NUL-terminated field holding the source
    path, which is skipped; only the destination is reviewed.
    """
    records: list[ChangeRecord] = []
    seen: set[str] = set()
    entries = output.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        xy, path = entry[:2], entry[3:]
        if "R" in xy or "C" in xy:
            i += 1  # source path of the rename/copy
        kind = _classify(xy)
        if kind is None or path in seen:
            continue
        seen.add(path)
        records.append(ChangeRecord(path=path, kind=kind))
    return records


class DiffCollector:
    """Enumerates changed files in a work tree and produces per-file diffs."""

    def __init__(self, repo_root: str | Path = "."):
        self.repo_root = Path(repo_root)
        self._has_head: bool | None = None

    def _run(self, args: list[str]) -> subprocess.CompletedProcess:
        cmd = ["git", "-C", str(self.repo_root), *args]
        logger.debug("Running %s", " ".join(cmd))
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )

    def _git(self, args: list[str]) -> str:
        result = self._run(args)
        if result.returncode != 0:
            raise GitCommandError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
        return result.stdout

    def ensure_repository(self) -> None:
        try:
            result = self._run(["rev-parse", "--is-inside-work-tree"])
        except FileNotFoundError:
            raise NotARepositoryError("git is not installed or not on PATH.")
        if result.returncode != 0 or result.stdout.strip() != "true":
            raise NotARepositoryError(f"{self.repo_root.resolve()} is not a git repository.")

    def list_changes(self) -> list[ChangeRecord]:
        """Return modified, added and renamed files in ``git status`` order."""
        self.ensure_repository()
        output = self._git(["status", "--porcelain=v1", "-z", "--untracked-files=no"])
        changes = parse_porcelain_status(output)
        logger.debug("Found %d changed file(s)", len(changes))
        return changes

    def has_head(self) -> bool:
        if self._has_head is None:
            self._has_head = self._run(["rev-parse", "--verify", "--quiet", "HEAD"]).returncode == 0
        return self._has_head

    def get_diff(self, path: str) -> str:
        """Return the unified diff of ``path`` against the last commit.

        Returns an empty string when git has no textual diff to show (binary
        files, mode-only changes); callers should skip such files.
        """
        base = "HEAD" if self.has_head() else EMPTY_TREE_SHA
        diff = self._git(["diff", base, "--", path])
        if diff.startswith("diff --git") and "\n@@" not in diff:
            # Header only ("Binary files differ", mode change): nothing to review.
            return ""
        return diff
