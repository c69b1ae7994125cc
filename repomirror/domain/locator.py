"""
Repository locator domain object for repomirror.

A RepositoryLocator is the (owner, name) pair parsed out of a
human-supplied repository URL. Parsing is pure: malformed input is
rejected here, before any network call is made.
"""

import re
from dataclasses import dataclass

from ..errors import InvalidLocator

DEFAULT_HOST = "github.com"

# GitHub owner and repository names
_SEGMENT_RE = re.compile(r'^[A-Za-z0-9._-]+$')


@dataclass(frozen=True)
class RepositoryLocator:
    """Owner/name pair identifying one repository on the hosting provider."""
    owner: str
    name: str
    host: str = DEFAULT_HOST

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        return f"https://{self.host}/{self.owner}/{self.name}"

    @property
    def api_path(self) -> str:
        """Path prefix of this repository on the REST API."""
        return f"/repos/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name


def parse_locator(url: str, host: str = DEFAULT_HOST) -> RepositoryLocator:
    """
    Parse a repository URL into a RepositoryLocator.

    Accepts:
        https://github.com/owner/repo
        https://github.com/owner/repo.git
        https://github.com/owner/repo/tree/main   (extra segments ignored)
        github.com/owner/repo
        git@github.com:owner/repo.git

    Args:
        url: Repository URL as typed by the operator
        host: Hostname the URL must point at

    Returns:
        RepositoryLocator

    Raises:
        InvalidLocator: If the URL is empty, points at another host,
            or has no owner/name segments
    """
    if not url or not url.strip():
        raise InvalidLocator("Repository URL is empty")

    raw = url.strip()
    host_re = re.escape(host.lower())

    # SSH form: git@host:owner/repo(.git)
    ssh = re.match(rf'^[\w.-]+@{host_re}:(?P<path>.+)$', raw, re.IGNORECASE)
    if ssh:
        path = ssh.group('path')
    else:
        web = re.match(
            rf'^(?:[a-z][a-z0-9+.-]*://)?(?:[^@/]+@)?{host_re}(?::\d+)?(?P<path>/.*)?$',
            raw,
            re.IGNORECASE,
        )
        if not web:
            raise InvalidLocator(f"Not a {host} repository URL: {url}")
        path = web.group('path') or ''

    # Drop query strings and fragments, then split into segments
    path = re.split(r'[?#]', path, maxsplit=1)[0]
    segments = [s for s in path.split('/') if s]
    if len(segments) < 2:
        raise InvalidLocator(f"URL has no owner/repository path: {url}")

    owner, name = segments[0], segments[1]
    if name.endswith('.git'):
        name = name[:-4]

    for segment in (owner, name):
        if not segment or not _SEGMENT_RE.match(segment) or segment in ('.', '..'):
            raise InvalidLocator(f"Invalid owner or repository name in URL: {url}")

    return RepositoryLocator(owner=owner, name=name, host=host.lower())
