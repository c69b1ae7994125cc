"""
Error taxonomy for repomirror.

Every failure a mirror run can end with is a MirrorError. Each kind
carries the exit code the CLI should terminate with, and the log
entries produced before the failure so callers can show how far the
run progressed.
"""

from typing import List, Optional, TYPE_CHECKING

from . import exit_codes

if TYPE_CHECKING:
    from .domain.event import LogEntry


class MirrorError(Exception):
    """Base class for all mirror failures."""
    exit_code = exit_codes.GENERAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.logs: List['LogEntry'] = []


class InvalidLocator(MirrorError):
    """Repository URL could not be parsed into owner/name."""
    exit_code = exit_codes.USAGE_ERROR


class MissingArgument(MirrorError):
    """A required input (URL or token) was not supplied."""
    exit_code = exit_codes.USAGE_ERROR


class RemoteError(MirrorError):
    """The REST API answered with a non-2xx status, or could not be reached."""

    def __init__(
        self,
        status_code: Optional[int],
        body: str = "",
        method: str = "",
        path: str = "",
    ):
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path
        if status_code is None:
            message = f"{method} {path} failed: {body}".strip()
        else:
            message = f"GitHub API {status_code} on {method} {path}: {body}".strip()
        super().__init__(message)

    @property
    def exit_code(self) -> int:
        # No status means the request never got an answer
        if self.status_code is None:
            return exit_codes.NETWORK_ERROR
        return exit_codes.API_ERROR

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code in (403, 429) and 'rate limit' in self.body.lower()


class MalformedResponse(MirrorError):
    """The REST API answered 2xx but the payload is missing required fields."""
    exit_code = exit_codes.DATA_ERROR


class Unauthorized(MirrorError):
    """The token was rejected for the repository."""
    exit_code = exit_codes.AUTH_ERROR


class NotFound(MirrorError):
    """The repository does not exist or is not visible to the token."""
    exit_code = exit_codes.NOT_FOUND


class VisibilityError(MirrorError):
    """A repository is not public; the destructive wipe must not run."""
    exit_code = exit_codes.PERMISSION_ERROR


class ConfigError(MirrorError):
    """A configured value (e.g. a commit message template) is unusable."""
    exit_code = exit_codes.CONFIG_ERROR
