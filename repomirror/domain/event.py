"""
Log stream domain objects for repomirror.

A mirror run reports what it does as an ordered stream of LogEntry
records. Entries are timestamped, severity-tagged, and optionally carry
a structured ProgressEvent so consumers can track progress without
parsing the message text.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Severity of a log entry."""
    INFO = "info"
    SUCCESS = "success"
    WARN = "warn"
    ERROR = "error"

    @property
    def logging_level(self) -> int:
        return {
            Severity.INFO: logging.INFO,
            Severity.SUCCESS: logging.INFO,
            Severity.WARN: logging.WARNING,
            Severity.ERROR: logging.ERROR,
        }[self]


@dataclass(frozen=True)
class ProgressEvent:
    """Structured progress of a counted step (e.g. files copied)."""
    state: str
    completed: int
    total: int

    @property
    def fraction(self) -> float:
        if self.total == 0:
            return 1.0
        return self.completed / self.total

    def to_dict(self) -> Dict[str, Any]:
        return {'state': self.state, 'completed': self.completed, 'total': self.total}


@dataclass(frozen=True)
class LogEntry:
    """
    One message of a mirror run's log stream.

    Attributes:
        message: Human-readable text
        severity: info, success, warn or error
        timestamp: When the entry was emitted (naive local time)
        state: Orchestrator state that emitted the entry
        progress: Structured progress, for counted steps only
    """
    message: str
    severity: Severity = Severity.INFO
    timestamp: datetime = field(default_factory=datetime.now)
    state: Optional[str] = None
    progress: Optional[ProgressEvent] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            'type': 'log',
            'message': self.message,
            'severity': self.severity.value,
            'timestamp': self.timestamp.isoformat(),
        }
        if self.state:
            result['state'] = self.state
        if self.progress:
            result['progress'] = self.progress.to_dict()
        return result

    def to_jsonl(self) -> str:
        """Convert to single-line JSON for streaming output."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.message}"


LogSink = Callable[[LogEntry], None]


class MirrorLog:
    """
    Append-only, ordered record of a run's log entries.

    Every entry is also written to the standard ``logging`` logger so
    library users get the stream without supplying a sink.
    """

    def __init__(self) -> None:
        self._entries: List[LogEntry] = []
        self.state: Optional[str] = None

    def emit(
        self,
        message: str,
        severity: Severity = Severity.INFO,
        progress: Optional[ProgressEvent] = None,
    ) -> LogEntry:
        entry = LogEntry(message=message, severity=severity, state=self.state, progress=progress)
        self._entries.append(entry)
        logger.log(severity.logging_level, message)
        return entry

    def info(self, message: str) -> LogEntry:
        return self.emit(message, Severity.INFO)

    def success(self, message: str) -> LogEntry:
        return self.emit(message, Severity.SUCCESS)

    def warn(self, message: str) -> LogEntry:
        return self.emit(message, Severity.WARN)

    def error(self, message: str) -> LogEntry:
        return self.emit(message, Severity.ERROR)

    @property
    def entries(self) -> List[LogEntry]:
        """Snapshot of the entries emitted so far."""
        return list(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def replay(entries: Iterable[LogEntry], sink: LogSink) -> None:
    """Feed a completed, ordered list of entries to a sink."""
    for entry in entries:
        sink(entry)
