"""
Domain layer for repomirror.

Contains pure domain objects with no I/O or side effects:
- RepositoryLocator: owner/name parsed from a repository URL
- RepositoryInfo, FileEntry, BlobContent, TreeManifest, BranchRef:
  tagged records for the git-object API payloads
- LogEntry, ProgressEvent: the run's log stream
- MirrorState, MirrorResult: run state machine and summary

These objects are immutable where possible and provide
serialization methods for JSONL output.
"""

from .locator import RepositoryLocator, parse_locator
from .git_objects import (
    RepositoryInfo,
    FileEntry,
    ObjectKind,
    BlobContent,
    TreeManifestEntry,
    TreeManifest,
    BranchRef,
    REGULAR_FILE_MODE,
)
from .event import Severity, LogEntry, ProgressEvent, MirrorLog, LogSink, replay
from .operation import MirrorState, BranchStatus, BranchResult, MirrorResult

__all__ = [
    'RepositoryLocator',
    'parse_locator',
    'RepositoryInfo',
    'FileEntry',
    'ObjectKind',
    'BlobContent',
    'TreeManifestEntry',
    'TreeManifest',
    'BranchRef',
    'REGULAR_FILE_MODE',
    'Severity',
    'LogEntry',
    'ProgressEvent',
    'MirrorLog',
    'LogSink',
    'replay',
    'MirrorState',
    'BranchStatus',
    'BranchResult',
    'MirrorResult',
]
