"""
GitHub git-object API client for repomirror.

Thin authenticated accessor to the REST endpoints a mirror run needs:
repositories, branches, trees, blobs, commits and refs.

- One client per side: the client is bound to a single token, so
  source calls and destination calls can never share credentials
- No retries: every method is exactly one HTTP call; any non-2xx
  answer raises RemoteError
- Payloads are turned into domain records at this boundary
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import requests

from ..errors import MalformedResponse, RemoteError
from ..domain.git_objects import BlobContent, BranchRef, FileEntry, TreeManifestEntry, require
from ..domain.locator import RepositoryLocator

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
BRANCHES_PER_PAGE = 100


@dataclass
class RateLimitStatus:
    """GitHub API rate limit status."""
    remaining: int
    limit: int
    reset_time: int  # Unix timestamp
    used: int

    @property
    def reset_datetime(self) -> datetime:
        """Get reset time as datetime."""
        return datetime.fromtimestamp(self.reset_time)

    @property
    def minutes_until_reset(self) -> int:
        """Minutes until rate limit resets."""
        now = int(time.time())
        return max(0, (self.reset_time - now) // 60)

    @property
    def is_low(self) -> bool:
        """Check if rate limit is getting low (< 100 remaining)."""
        return self.remaining < 100


class GitHubClient:
    """
    Git-object REST client bound to one token.

    Example:
        source = GitHubClient(token=source_token)
        entries = source.get_tree(locator, "main")
        blob = source.get_blob(locator, entries[0].source_object_id)
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize GitHubClient.

        Args:
            token: Token used for every call made by this client
            api_url: REST API root (override for GitHub Enterprise)
            timeout: HTTP request timeout in seconds
            session: Pre-built requests session (tests)
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'Authorization': f'Bearer {token}',
            'X-GitHub-Api-Version': API_VERSION,
            'User-Agent': 'repomirror',
        })
        self._rate_limit_status: Optional[RateLimitStatus] = None

    @property
    def rate_limit_status(self) -> Optional[RateLimitStatus]:
        """Rate limit status seen on the last response, if any."""
        return self._rate_limit_status

    def _update_rate_limit_from_headers(self, headers: Any) -> None:
        """Update rate limit status from response headers."""
        try:
            remaining = int(headers.get('X-RateLimit-Remaining', -1))
            limit = int(headers.get('X-RateLimit-Limit', -1))
            reset_time = int(headers.get('X-RateLimit-Reset', 0))
            used = int(headers.get('X-RateLimit-Used', 0))
        except (ValueError, TypeError, AttributeError):
            return

        if remaining >= 0 and limit >= 0:
            self._rate_limit_status = RateLimitStatus(
                remaining=remaining,
                limit=limit,
                reset_time=reset_time,
                used=used
            )

            if self._rate_limit_status.is_low:
                logger.warning(
                    f"GitHub API rate limit low: {remaining}/{limit} remaining, "
                    f"resets in {self._rate_limit_status.minutes_until_reset} minutes"
                )

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make one API call and return the decoded JSON body.

        Raises:
            RemoteError: Transport failure or non-2xx status
            MalformedResponse: 2xx answer whose body is not JSON
        """
        url = f"{self.api_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteError(None, str(e), method, path) from e

        self._update_rate_limit_from_headers(response.headers)

        if not 200 <= response.status_code < 300:
            raise RemoteError(response.status_code, response.text, method, path)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Invalid JSON from {method} {path}: {e}") from e

    # Repositories and branches

    def get_repo(self, locator: RepositoryLocator) -> Dict[str, Any]:
        """Get repository metadata."""
        data = self._request('GET', locator.api_path)
        require(data, 'full_name', what=f"repository {locator}")
        return data

    def get_branch_head(self, locator: RepositoryLocator, branch: str) -> str:
        """Get the commit id a branch currently points at."""
        data = self._request('GET', f"{locator.api_path}/git/ref/heads/{quote(branch, safe='/')}")
        require(data, 'object', what=f"ref heads/{branch}")
        require(data['object'], 'sha', what=f"ref heads/{branch}")
        return data['object']['sha']

    def list_branches(
        self,
        locator: RepositoryLocator,
        per_page: int = BRANCHES_PER_PAGE,
    ) -> List[BranchRef]:
        """
        List every branch of a repository.

        Follows pagination until a page shorter than ``per_page``.
        """
        branches: List[BranchRef] = []
        page = 1

        while True:
            data = self._request(
                'GET',
                f"{locator.api_path}/branches",
                params={'per_page': per_page, 'page': page},
            )
            if data is None:
                break
            if not isinstance(data, list):
                raise MalformedResponse(f"Expected list of branches for {locator}")

            branches.extend(BranchRef.from_api_response(b) for b in data)

            if len(data) < per_page:
                break
            page += 1

        logger.debug(f"{locator}: {len(branches)} branches over {page} page(s)")
        return branches

    # Trees, blobs, commits

    def get_tree(
        self,
        locator: RepositoryLocator,
        ref: str,
        recursive: bool = True,
    ) -> List[FileEntry]:
        """
        List a tree by branch name or commit id.

        Args:
            locator: Repository to read
            ref: Branch name, commit id or tree id
            recursive: Walk subtrees (flat listing of every path)

        Returns:
            FileEntry for every node, blobs and trees alike

        Raises:
            MalformedResponse: The API truncated the listing
        """
        params = {'recursive': 1} if recursive else None
        data = self._request('GET', f"{locator.api_path}/git/trees/{quote(ref, safe='/')}", params=params)
        require(data, 'tree', what=f"tree {ref}")

        # A partial listing would commit a partial manifest
        if data.get('truncated'):
            raise MalformedResponse(
                f"Tree listing for {locator}@{ref} was truncated by the API; "
                "refusing to mirror a partial file list"
            )

        return [FileEntry.from_api_response(e) for e in data['tree']]

    def get_blob(self, locator: RepositoryLocator, object_id: str) -> BlobContent:
        """Fetch a blob's content without decoding it."""
        data = self._request('GET', f"{locator.api_path}/git/blobs/{object_id}")
        return BlobContent.from_api_response(data)

    def create_blob(self, locator: RepositoryLocator, content: BlobContent) -> str:
        """Upload a blob and return its new object id."""
        data = self._request('POST', f"{locator.api_path}/git/blobs", json_body=content.to_api())
        require(data, 'sha', what="created blob")
        return data['sha']

    def create_tree(
        self,
        locator: RepositoryLocator,
        entries: Sequence[TreeManifestEntry],
    ) -> str:
        """Create a tree from manifest entries (no base tree) and return its id."""
        body = {'tree': [e.to_api() for e in entries]}
        data = self._request('POST', f"{locator.api_path}/git/trees", json_body=body)
        require(data, 'sha', what="created tree")
        return data['sha']

    def create_commit(
        self,
        locator: RepositoryLocator,
        message: str,
        tree_id: str,
        parent_ids: Sequence[str],
    ) -> str:
        """Create a commit object and return its id."""
        body = {'message': message, 'tree': tree_id, 'parents': list(parent_ids)}
        data = self._request('POST', f"{locator.api_path}/git/commits", json_body=body)
        require(data, 'sha', what="created commit")
        return data['sha']

    # Refs

    def update_ref(
        self,
        locator: RepositoryLocator,
        branch: str,
        commit_id: str,
        force: bool = True,
    ) -> None:
        """Move an existing branch ref to a commit."""
        self._request(
            'PATCH',
            f"{locator.api_path}/git/refs/heads/{quote(branch, safe='/')}",
            json_body={'sha': commit_id, 'force': force},
        )

    def create_ref(self, locator: RepositoryLocator, branch: str, commit_id: str) -> None:
        """Create a new branch ref pointing at a commit."""
        self._request(
            'POST',
            f"{locator.api_path}/git/refs",
            json_body={'ref': f"refs/heads/{branch}", 'sha': commit_id},
        )
