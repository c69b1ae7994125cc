"""
Mirror run state and result domain objects for repomirror.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional

from .event import LogEntry, Severity


class MirrorState(Enum):
    """States of a mirror run, in execution order."""
    IDLE = "idle"
    VALIDATING_SOURCE = "validating_source"
    VALIDATING_DESTINATION = "validating_destination"
    WIPING_DESTINATION = "wiping_destination"
    FETCHING_SOURCE_TREE = "fetching_source_tree"
    COPYING_DEFAULT_BRANCH = "copying_default_branch"
    COMMITTING_DEFAULT_BRANCH = "committing_default_branch"
    REPLICATING_SECONDARY_BRANCHES = "replicating_secondary_branches"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (MirrorState.DONE, MirrorState.FAILED)


class BranchStatus(Enum):
    """Outcome of replicating one branch."""
    CREATED = "created"      # destination ref did not exist
    UPDATED = "updated"      # destination ref existed and was force-updated
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class BranchResult:
    """
    What happened to one branch during a run.

    A FAILED secondary branch is the partial-replication warning: the run
    still completes.
    """
    name: str
    status: BranchStatus
    files: int = 0
    commit_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not BranchStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'type': 'branch',
            'name': self.name,
            'status': self.status.value,
            'files': self.files,
        }
        if self.commit_id:
            result['commit'] = self.commit_id
        if self.error:
            result['error'] = self.error
        return result


@dataclass
class MirrorResult:
    """
    Summary of a mirror run.

    Collects per-branch outcomes and the complete log stream.
    """
    source: str = ""
    destination: str = ""
    default_branch: str = ""
    state: MirrorState = MirrorState.IDLE
    dry_run: bool = False
    branches: List[BranchResult] = field(default_factory=list)
    logs: List[LogEntry] = field(default_factory=list)

    @property
    def files_copied(self) -> int:
        return sum(b.files for b in self.branches if b.ok)

    @property
    def branches_copied(self) -> int:
        return sum(1 for b in self.branches if b.ok)

    @property
    def failed_branches(self) -> List[BranchResult]:
        return [b for b in self.branches if not b.ok]

    @property
    def success(self) -> bool:
        """True if the run completed and every branch replicated."""
        return self.state is MirrorState.DONE and not self.failed_branches

    @property
    def warnings(self) -> List[LogEntry]:
        return [e for e in self.logs if e.severity is Severity.WARN]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': 'summary',
            'source': self.source,
            'destination': self.destination,
            'default_branch': self.default_branch,
            'state': self.state.value,
            'dry_run': self.dry_run,
            'files': self.files_copied,
            'branches': self.branches_copied,
            'failed_branches': [b.name for b in self.failed_branches],
        }
