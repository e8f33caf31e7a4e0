"""Git Repository - the handful of git commands the review flow needs."""

import subprocess
from pathlib import Path

from loguru import logger


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class CommitError(GitError):
    """Raised when `git commit` itself is rejected (hooks, empty message, ...)."""
    pass


class GitRepository:
    """Runs git in the current working directory's repository."""

    def __init__(self):
        self._verify_git_available()
        self._verify_in_repo()
        self.root = Path(self._run_git('rev-parse', '--show-toplevel').strip())

    def _run_git(self, *args: str, input: str | None = None) -> str:
        """Run a git command and return stdout."""
        logger.debug(f"git {' '.join(args)}")
        try:
            result = subprocess.run(
                ['git', *args],
                input=input,
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or e.stdout or '').strip()
            raise GitError(f"Git command failed: git {' '.join(args)}\n{detail}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def list_staged_files(self) -> list[str]:
        """Paths (relative to the repo root) staged for the next commit, in git's order."""
        output = self._run_git('-c', 'core.quotepath=off', 'diff', '--staged', '--name-only')
        return [line for line in output.splitlines() if line.strip()]

    def get_file_diff(self, path: str) -> str:
        """Staged diff for a single path."""
        # `--` separates the path from revisions (deleted files are otherwise ambiguous)
        return self._run_git('-C', str(self.root), 'diff', '--staged', '--', path)

    def has_changes(self) -> bool:
        """True if the working tree has anything at all to stage."""
        return bool(self._run_git('status', '--porcelain').strip())

    def stage_all(self) -> None:
        self._run_git('-C', str(self.root), 'add', '--all')

    def commit(self, message: str) -> str:
        """Commit the index with message taken verbatim from stdin.

        Raises:
            CommitError: if git refuses the commit
        """
        try:
            return self._run_git('commit', '-F', '-', input=message)
        except GitError as e:
            raise CommitError(str(e)) from e
