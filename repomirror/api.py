"""
High-level API for repomirror.

Example:
    import repomirror

    def show(entry):
        print(entry)

    result = repomirror.mirror(
        "https://github.com/me/source",
        "https://github.com/me/copy",
        source_token="ghp_...",
        dest_token="ghp_...",
        log_sink=show,
    )
    print(result.files_copied, result.branches_copied)
"""

import logging
from typing import Any, Dict, List, Optional

from .config import load_config
from .errors import MissingArgument
from .domain.event import LogSink, MirrorLog, replay
from .domain.operation import MirrorResult
from .infra.github_client import GitHubClient, DEFAULT_API_URL
from .services.mirror_service import MirrorOptions, MirrorService

logger = logging.getLogger(__name__)


def create_service(
    source_token: str,
    dest_token: str,
    config: Optional[Dict[str, Any]] = None,
    **option_overrides: Any,
) -> MirrorService:
    """
    Build a MirrorService with one GitHubClient per side.

    Args:
        source_token: Token for every source-side call
        dest_token: Token for every destination-side call
        config: Configuration dict (loads default if None)
        **option_overrides: MirrorOptions fields to override (None ignored)
    """
    config = config if config is not None else load_config()
    github = config.get('github', {})
    api_url = github.get('api_url', DEFAULT_API_URL)
    timeout = github.get('timeout_seconds', 30)

    return MirrorService(
        GitHubClient(source_token, api_url=api_url, timeout=timeout),
        GitHubClient(dest_token, api_url=api_url, timeout=timeout),
        options=MirrorOptions.from_config(config, **option_overrides),
        host=github.get('host', 'github.com'),
    )


def mirror(
    source_url: str,
    dest_url: str,
    source_token: str,
    dest_token: str,
    log_sink: Optional[LogSink] = None,
    config: Optional[Dict[str, Any]] = None,
    concurrency: Optional[int] = None,
    branches: Optional[List[str]] = None,
    dry_run: bool = False,
    service: Optional[MirrorService] = None,
) -> MirrorResult:
    """
    Mirror one repository into another.

    Log entries are handed to ``log_sink`` as they are produced. On
    failure the MirrorError is raised after its error entry reached the
    sink; ``error.logs`` holds every entry of the run.

    Args:
        source_url: Repository to copy from
        dest_url: Repository whose content will be replaced
        source_token: Token for the source repository
        dest_token: Token for the destination repository
        log_sink: Callable receiving each LogEntry in order
        config: Configuration dict (loads default if None)
        concurrency: Files copied in parallel per window
        branches: Secondary branches to copy (None = all)
        dry_run: Validate and list only, write nothing
        service: Pre-built service (tokens and config are then unused)

    Returns:
        MirrorResult

    Raises:
        MirrorError: Any fatal failure
    """
    required = {
        'source URL': source_url,
        'destination URL': dest_url,
        'source token': source_token,
        'destination token': dest_token,
    }
    missing = [name for name, value in required.items() if not value]
    if missing:
        error = MissingArgument(f"Missing required value(s): {', '.join(missing)}")
        log = MirrorLog()
        log.error(f"Mirror failed: {error.message}")
        error.logs = log.entries
        if log_sink is not None:
            replay(error.logs, log_sink)
        raise error

    if service is None:
        service = create_service(
            source_token,
            dest_token,
            config=config,
            concurrency=concurrency,
            branches=branches,
            dry_run=dry_run or None,
        )

    for entry in service.mirror(source_url, dest_url):
        if log_sink is not None:
            log_sink(entry)

    return service.last_result
