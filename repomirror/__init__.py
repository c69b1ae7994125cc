"""
repomirror - Mirror a GitHub repository through the git-object API.

repomirror makes a destination repository hold the same files as a
source repository, on every branch, using only the REST API: blobs are
copied one by one and committed as new trees. Nothing is cloned locally.
History, tags and authorship are not preserved.

Quick Start:
    import repomirror

    result = repomirror.mirror(
        "https://github.com/me/source",
        "https://github.com/me/copy",
        source_token="ghp_...",
        dest_token="ghp_...",
        log_sink=print,
    )
    print(result.files_copied, result.branches_copied)

    # Or drive the run yourself
    service = repomirror.create_service(source_token, dest_token)
    for entry in service.mirror(source_url, dest_url):
        if entry.progress:
            print(entry.progress.completed, entry.progress.total)

Domain Objects:
    RepositoryLocator - owner/name parsed from a URL
    LogEntry - one message of the run's log stream
    MirrorResult - per-branch outcomes of a run

Services:
    MirrorService - the mirror run
    BatchCopyEngine - windowed concurrent blob copy
    RepositoryValidator - lookup and visibility policy
"""

__version__ = "0.1.0"

# High-level API
from .api import mirror, create_service

# Domain objects
from .domain import (
    RepositoryLocator,
    parse_locator,
    RepositoryInfo,
    LogEntry,
    ProgressEvent,
    Severity,
    MirrorState,
    MirrorResult,
    BranchResult,
    replay,
)

# Services (for advanced use)
from .services import (
    MirrorService,
    MirrorOptions,
    BatchCopyEngine,
    RepositoryValidator,
    generate_mirror_script,
)

# Errors
from .errors import (
    MirrorError,
    InvalidLocator,
    MissingArgument,
    Unauthorized,
    NotFound,
    VisibilityError,
    RemoteError,
    MalformedResponse,
    ConfigError,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "mirror",
    "create_service",
    # Domain objects
    "RepositoryLocator",
    "parse_locator",
    "RepositoryInfo",
    "LogEntry",
    "ProgressEvent",
    "Severity",
    "MirrorState",
    "MirrorResult",
    "BranchResult",
    "replay",
    # Services
    "MirrorService",
    "MirrorOptions",
    "BatchCopyEngine",
    "RepositoryValidator",
    "generate_mirror_script",
    # Errors
    "MirrorError",
    "InvalidLocator",
    "MissingArgument",
    "Unauthorized",
    "NotFound",
    "VisibilityError",
    "RemoteError",
    "MalformedResponse",
    "ConfigError",
    # Configuration
    "load_config",
    "save_config",
]
