"""Git Operations Package"""

from commitcat.git.repository import GitRepository, GitError, CommitError
from commitcat.git.collector import DiffCollector, CollectorConfig, ChangeSet, FileChange, SkipReason

__all__ = [
    "GitRepository",
    "GitError",
    "CommitError",
    "DiffCollector",
    "CollectorConfig",
    "ChangeSet",
    "FileChange",
    "SkipReason",
]
