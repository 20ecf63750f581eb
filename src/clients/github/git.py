"""Thin wrapper over the git CLI for the push-and-open-PR workflow.

Every method shells out to `git` in the configured working tree and raises
GitOperationError carrying stdout/stderr when the command fails.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Iterable, List, Sequence

from core.errors import GitOperationError


class GitRepo:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def current_branch(self) -> str:
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def has_staged_changes(self) -> bool:
        # Only the index matters: unstaged edits are what the caller wants to ship
        return bool(self._run(["diff", "--cached", "--name-only"]).strip())

    def local_branches(self) -> List[str]:
        out = self._run(["branch", "--list", "--format=%(refname:short)"])
        return [line.strip() for line in out.splitlines() if line.strip()]

    def untracked_files(self) -> List[str]:
        out = self._run(["ls-files", "--others", "--exclude-standard"])
        return [line.strip() for line in out.splitlines() if line.strip()]

    def checkout_new_branch(self, branch: str) -> None:
        self._run(["checkout", "-b", branch])

    def checkout(self, branch: str) -> None:
        self._run(["checkout", branch])

    def delete_branch(self, branch: str) -> None:
        self._run(["branch", "-D", branch])

    def add(self, paths: Iterable[str]) -> None:
        files = [p for p in paths if p]
        if files:
            self._run(["add", "--", *files])

    def add_tracked(self) -> None:
        self._run(["add", "-u"])

    def commit(self, message: str) -> None:
        self._run(["commit", "-m", message])

    def reset_last_commit(self) -> None:
        # --mixed keeps the committed changes as unstaged edits in the working tree
        self._run(["reset", "--mixed", "HEAD~1"])

    def push(self, branch: str, *, remote: str = "origin") -> None:
        # Plain push (no --force) so an existing remote branch is never overwritten
        self._run(["push", "--set-upstream", remote, branch])

    def _run(self, args: Sequence[str]) -> str:
        cmd = ["git", *args]
        try:
            result = subprocess.run(cmd, cwd=self._root, capture_output=True, text=True)
        except OSError as e:
            raise GitOperationError(f"Failed to run {' '.join(cmd)}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            stdout = result.stdout.strip()
            raise GitOperationError(
                "Command failed: "
                + " ".join(cmd)
                + (f"\nstdout: {stdout}" if stdout else "")
                + (f"\nstderr: {stderr}" if stderr else "")
            )
        return result.stdout
