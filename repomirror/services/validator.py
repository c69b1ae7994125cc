"""
Repository validation service for repomirror.

Resolves a repository URL to a RepositoryInfo with a single read-only
API call, and enforces the public-visibility policy that gates the
destructive part of a mirror run.
"""

import logging

from ..errors import NotFound, RemoteError, Unauthorized, VisibilityError
from ..domain.git_objects import RepositoryInfo
from ..domain.locator import DEFAULT_HOST, RepositoryLocator, parse_locator
from ..infra.github_client import GitHubClient

logger = logging.getLogger(__name__)


class RepositoryValidator:
    """
    Validates repositories on one side of a mirror.

    Example:
        validator = RepositoryValidator(GitHubClient(token))
        info = validator.validate_url("https://github.com/owner/repo")
        validator.require_public(info)
    """

    def __init__(self, client: GitHubClient, host: str = DEFAULT_HOST):
        self.client = client
        self.host = host

    def validate(self, locator: RepositoryLocator) -> RepositoryInfo:
        """
        Look a repository up and report its visibility and default branch.

        Raises:
            NotFound: The repository is absent or hidden from the token
            Unauthorized: The token was rejected
            RemoteError: Any other API failure (including rate limiting)
            MalformedResponse: The API answer lacks required fields
        """
        try:
            data = self.client.get_repo(locator)
        except RemoteError as e:
            if e.status_code == 404:
                raise NotFound(f"Repository {locator} not found or not accessible") from e
            if e.status_code == 401 or (e.status_code == 403 and not e.is_rate_limited):
                raise Unauthorized(f"Token rejected for {locator} (HTTP {e.status_code})") from e
            raise

        info = RepositoryInfo.from_api_response(locator, data)
        logger.debug(f"Validated {info.full_name}: {info.visibility}, default branch {info.default_branch}")
        return info

    def validate_url(self, url: str) -> RepositoryInfo:
        """Parse ``url`` (no network call if invalid) then validate it."""
        return self.validate(parse_locator(url, host=self.host))

    @staticmethod
    def require_public(info: RepositoryInfo) -> None:
        """Raise VisibilityError unless the repository is public."""
        if not info.is_public:
            raise VisibilityError(
                f"Repository {info.full_name} is private; "
                "both repositories must be public to mirror"
            )
