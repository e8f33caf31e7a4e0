"""Diff Collector - Turn staged files into a bounded, filtered review payload."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable

from loguru import logger

from commitcat.git.repository import GitError


class SkipReason(str, Enum):
    """Why a staged file was left out of the payload."""
    IGNORED = "ignored"
    BINARY = "binary"
    TOO_LARGE = "too large"
    DIFF_TOO_LARGE = "diff too large"
    TOTAL_LIMIT = "total limit"
    ERROR_READING = "error reading"


@dataclass(frozen=True)
class FileChange:
    """One staged file and what happened to it during collection."""
    path: str
    diff: str = ""
    size: int = 0
    skip_reason: SkipReason | None = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


@dataclass(frozen=True)
class ChangeSet:
    """Ordered per-file diffs, as sent for review."""
    files: tuple[FileChange, ...] = ()

    @property
    def included(self) -> list[FileChange]:
        return [f for f in self.files if not f.skipped]

    @property
    def skipped(self) -> list[FileChange]:
        return [f for f in self.files if f.skipped]

    @property
    def total_size(self) -> int:
        return sum(f.size for f in self.included)

    @property
    def has_content(self) -> bool:
        """False when every file was skipped or contributed an empty diff."""
        return any(f.diff.strip() for f in self.included)

    @property
    def diff_text(self) -> str:
        return "".join(f"File: {f.path}\n{f.diff}\n" for f in self.included)


@dataclass
class CollectorConfig:
    """Limits and filters; byte sizes are measured on UTF-8 text."""
    max_file_size: int = 30000
    max_total_size: int = 100000
    ignore_patterns: list[str] = field(default_factory=list)
    binary_extensions: list[str] = field(default_factory=list)


def byte_size(text: str) -> int:
    return len(text.encode('utf-8'))


class DiffCollector:
    """Builds a ChangeSet from staged paths.

    Filters run in a fixed order per file: ignore pattern, binary extension,
    on-disk size, then the staged diff's own size. Files are taken in the
    order given, so earlier files win the total cap; once a file would
    push the total past the cap, every file after it is skipped.
    """

    def __init__(self, diff_source: Callable[[str], str], root: Path | str = ".",
                 config: CollectorConfig | None = None):
        self.diff_source = diff_source
        self.root = Path(root)
        self.config = config or CollectorConfig()
        self._binary_extensions = {ext.lower() for ext in self.config.binary_extensions}

    def collect(self, staged_files: Iterable[str]) -> ChangeSet:
        files = []
        total = 0
        total_reached = False

        for path in staged_files:
            if total_reached:
                files.append(FileChange(path=path, skip_reason=SkipReason.TOTAL_LIMIT))
                continue

            change = self._collect_file(path)
            if not change.skipped and total + change.size > self.config.max_total_size:
                total_reached = True
                change = FileChange(path=path, skip_reason=SkipReason.TOTAL_LIMIT)

            if change.skipped:
                logger.debug(f"Skipping {path}: {change.skip_reason.value}")
            else:
                total += change.size
            files.append(change)

        logger.debug(f"Collected {len(files)} files, {total} bytes of diff")
        return ChangeSet(files=tuple(files))

    def _collect_file(self, path: str) -> FileChange:
        if any(pattern in path for pattern in self.config.ignore_patterns):
            return FileChange(path=path, skip_reason=SkipReason.IGNORED)

        if Path(path).suffix.lower() in self._binary_extensions:
            return FileChange(path=path, skip_reason=SkipReason.BINARY)

        try:
            if (self.root / path).stat().st_size > self.config.max_file_size:
                return FileChange(path=path, skip_reason=SkipReason.TOO_LARGE)
            diff = self.diff_source(path)
        except (OSError, GitError, UnicodeError) as e:
            logger.debug(f"Could not read {path}: {e}")
            return FileChange(path=path, skip_reason=SkipReason.ERROR_READING)

        size = byte_size(diff)
        if size > self.config.max_file_size:
            return FileChange(path=path, size=size, skip_reason=SkipReason.DIFF_TOO_LARGE)

        return FileChange(path=path, diff=diff, size=size)
