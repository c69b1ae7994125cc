"""
Mirror service for repomirror.

Orchestrates a full mirror run between two GitHub repositories through
the git-object API:

    validate source -> validate destination -> wipe destination
    -> fetch source tree -> copy default branch -> commit default branch
    -> replicate secondary branches -> done

Every step before secondary-branch replication is fatal on failure.
Each secondary branch is isolated: its failure becomes a warning and
the run moves on to the next branch.

The destination ref is only ever moved to a commit that already
exists, so an interrupted run leaves the destination at its previous
or wiped state, never at a dangling head.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Generator, List, Optional

from ..errors import ConfigError, MirrorError, RemoteError
from ..domain.event import LogEntry, MirrorLog
from ..domain.git_objects import BranchRef, FileEntry, RepositoryInfo
from ..domain.locator import DEFAULT_HOST, RepositoryLocator
from ..domain.operation import BranchResult, BranchStatus, MirrorResult, MirrorState
from ..infra.github_client import GitHubClient
from .batch_copy import BatchCopyEngine, DEFAULT_CONCURRENCY
from .validator import RepositoryValidator

logger = logging.getLogger(__name__)


@dataclass
class MirrorOptions:
    """Options for a mirror run."""
    concurrency: int = DEFAULT_CONCURRENCY
    dry_run: bool = False
    branches: Optional[List[str]] = None  # Secondary branches to copy (None = all)
    wipe_message: str = "Clear repository for mirror"
    commit_message: str = "Mirror of {source}\n\nCopied with repomirror"
    branch_commit_message: str = "Mirror branch: {branch}"

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides: Any) -> 'MirrorOptions':
        """Build options from the ``mirror`` config section; None overrides are ignored."""
        section = config.get('mirror', {})
        values = {
            'concurrency': section.get('concurrency', DEFAULT_CONCURRENCY),
            'wipe_message': section.get('wipe_message', cls.wipe_message),
            'commit_message': section.get('commit_message', cls.commit_message),
            'branch_commit_message': section.get('branch_commit_message', cls.branch_commit_message),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def check_templates(self) -> None:
        """Raise ConfigError unless every commit message template formats."""
        templates = {
            "wipe_message": self.wipe_message,
            "commit_message": self.commit_message,
            "branch_commit_message": self.branch_commit_message,
        }
        for name, template in templates.items():
            try:
                template.format(source="owner/repo", branch="branch")
            except (KeyError, IndexError, ValueError, AttributeError) as e:
                raise ConfigError(f"Invalid mirror.{name} template {template!r}: {e!r}") from e


class MirrorService:
    """
    Service that mirrors one repository into another.

    Example:
        service = MirrorService(GitHubClient(src_token), GitHubClient(dst_token))

        for entry in service.mirror(source_url, dest_url):
            print(entry)  # "[12:00:01] 10/42 files copied"

        result = service.last_result
        print(f"Copied {result.files_copied} files")
    """

    def __init__(
        self,
        source_client: GitHubClient,
        dest_client: GitHubClient,
        options: Optional[MirrorOptions] = None,
        host: str = DEFAULT_HOST,
    ):
        """
        Initialize MirrorService.

        Args:
            source_client: Client holding the source token
            dest_client: Client holding the destination token
            options: Mirror options (defaults if None)
            host: Hostname repository URLs must point at
        """
        self.options = options or MirrorOptions()
        self.source_client = source_client
        self.dest_client = dest_client
        self.source_validator = RepositoryValidator(source_client, host=host)
        self.dest_validator = RepositoryValidator(dest_client, host=host)
        self.engine = BatchCopyEngine(source_client, dest_client, self.options.concurrency)
        self.state = MirrorState.IDLE
        self.last_result: Optional[MirrorResult] = None
        self._log = MirrorLog()

    def _enter(self, state: MirrorState) -> None:
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state
        self._log.state = state.value

    def mirror(self, source_url: str, dest_url: str) -> Generator[LogEntry, None, MirrorResult]:
        """
        Mirror ``source_url`` into ``dest_url``.

        Yields log entries as the run progresses and returns the
        MirrorResult. On a fatal error an error entry is yielded, the
        state becomes FAILED and the MirrorError is re-raised with its
        ``logs`` attribute holding every entry of the run.

        Args:
            source_url: Repository to copy from
            dest_url: Repository to overwrite

        Yields:
            LogEntry for each step

        Returns:
            MirrorResult with per-branch outcomes and the full log
        """
        self._log = MirrorLog()
        self.state = MirrorState.IDLE
        result = MirrorResult(dry_run=self.options.dry_run)
        self.last_result = result

        try:
            # Templates are checked before any request
            self.options.check_templates()
            yield from self._run(source_url, dest_url, result)
        except MirrorError as e:
            failed_in = self.state
            self._enter(MirrorState.FAILED)
            if failed_in is MirrorState.IDLE:
                yield self._log.error(f"Mirror failed: {e.message}")
            else:
                yield self._log.error(
                    f"Mirror failed during {failed_in.value.replace('_', ' ')}: {e.message}"
                )
            result.state = MirrorState.FAILED
            result.logs = self._log.entries
            e.logs = result.logs
            raise

        result.logs = self._log.entries
        return result

    def _run(self, source_url: str, dest_url: str, result: MirrorResult) -> Generator[LogEntry, None, None]:
        log = self._log

        self._enter(MirrorState.VALIDATING_SOURCE)
        yield log.info("Validating source repository...")
        source_info = self.source_validator.validate_url(source_url)
        result.source = source_info.full_name
        result.default_branch = source_info.default_branch
        yield log.success(
            f"Source: {source_info.full_name} "
            f"(branch: {source_info.default_branch}, {source_info.visibility})"
        )

        yield log.info("Listing source branches...")
        branches = self.source_client.list_branches(source_info.locator)
        yield log.info(f"{len(branches)} branch(es) found")

        self._enter(MirrorState.VALIDATING_DESTINATION)
        yield log.info("Validating destination repository...")
        dest_info = self.dest_validator.validate_url(dest_url)
        result.destination = dest_info.full_name
        yield log.success(
            f"Destination: {dest_info.full_name} "
            f"(branch: {dest_info.default_branch}, {dest_info.visibility})"
        )

        # Nothing destructive may run against a non-public repository
        RepositoryValidator.require_public(source_info)
        RepositoryValidator.require_public(dest_info)

        secondary = yield from self._select_secondary(branches, source_info)

        if self.options.dry_run:
            yield from self._plan(source_info, secondary, result)
            return

        self._enter(MirrorState.WIPING_DESTINATION)
        yield log.info("Clearing destination repository...")
        self._wipe(dest_info)
        yield log.success("Destination cleared")

        self._enter(MirrorState.FETCHING_SOURCE_TREE)
        yield log.info("Fetching source file tree...")
        blobs = self._blobs(source_info.locator, source_info.default_branch)
        yield log.info(f"{len(blobs)} file(s) found")

        self._enter(MirrorState.COPYING_DEFAULT_BRANCH)
        yield log.info("Copying files...")
        manifest = yield from self.engine.copy(source_info.locator, dest_info.locator, blobs, log=log)

        self._enter(MirrorState.COMMITTING_DEFAULT_BRANCH)
        yield log.info("Creating tree in destination...")
        dest = dest_info.locator
        # Re-read the head rather than trusting the one seen during the wipe
        head = self.dest_client.get_branch_head(dest, dest_info.default_branch)
        tree_id = self.dest_client.create_tree(dest, manifest.entries)
        message = self.options.commit_message.format(source=source_info.full_name)
        root_commit = self.dest_client.create_commit(dest, message, tree_id, [head])
        self.dest_client.update_ref(dest, dest_info.default_branch, root_commit, force=True)
        result.branches.append(BranchResult(
            name=source_info.default_branch,
            status=BranchStatus.UPDATED,
            files=len(manifest),
            commit_id=root_commit,
        ))
        yield log.success(
            f"Branch '{source_info.default_branch}' committed to "
            f"'{dest_info.default_branch}' ({len(manifest)} files)"
        )

        if secondary:
            self._enter(MirrorState.REPLICATING_SECONDARY_BRANCHES)
            yield log.info("Copying additional branches...")
            for branch in secondary:
                try:
                    branch_result = yield from self._replicate_branch(
                        source_info, dest_info, branch, root_commit
                    )
                except MirrorError as e:
                    result.branches.append(BranchResult(
                        name=branch.name,
                        status=BranchStatus.FAILED,
                        error=e.message,
                    ))
                    yield log.warn(f"Failed to copy branch '{branch.name}': {e.message}")
                    continue

                result.branches.append(branch_result)
                yield log.success(f"Branch '{branch.name}' copied ({branch_result.files} files)")

        self._enter(MirrorState.DONE)
        result.state = MirrorState.DONE
        yield log.success("Mirror completed successfully")
        summary = f"Summary: {result.files_copied} files, {result.branches_copied} branch(es) copied"
        if result.failed_branches:
            summary += f", {len(result.failed_branches)} branch(es) failed"
        yield log.info(summary)

    def _select_secondary(
        self,
        branches: List[BranchRef],
        source_info: RepositoryInfo,
    ) -> Generator[LogEntry, None, List[BranchRef]]:
        """Pick the secondary branches to replicate, warning about unknown requested names."""
        secondary = [b for b in branches if b.name != source_info.default_branch]

        if self.options.branches is not None:
            wanted = set(self.options.branches)
            known = {b.name for b in secondary}
            for name in sorted(wanted - known):
                yield self._log.warn(f"Branch '{name}' not found in source, skipping")
            secondary = [b for b in secondary if b.name in wanted]

        return secondary

    def _blobs(self, locator: RepositoryLocator, ref: str) -> List[FileEntry]:
        return [e for e in self.source_client.get_tree(locator, ref) if e.is_blob]

    def _wipe(self, dest_info: RepositoryInfo) -> None:
        """Point the destination default branch at an empty commit on top of its head."""
        dest = dest_info.locator
        branch = dest_info.default_branch
        head = self.dest_client.get_branch_head(dest, branch)
        empty_tree = self.dest_client.create_tree(dest, [])
        empty_commit = self.dest_client.create_commit(dest, self.options.wipe_message, empty_tree, [head])
        self.dest_client.update_ref(dest, branch, empty_commit, force=True)
        logger.debug(f"{dest}@{branch}: {head} -> {empty_commit} (empty)")

    def _replicate_branch(
        self,
        source_info: RepositoryInfo,
        dest_info: RepositoryInfo,
        branch: BranchRef,
        root_commit: str,
    ) -> Generator[LogEntry, None, BranchResult]:
        """Copy one secondary branch as a single commit on top of ``root_commit``."""
        dest = dest_info.locator
        blobs = self._blobs(source_info.locator, branch.head_object_id)
        manifest = yield from self.engine.copy(
            source_info.locator, dest, blobs, log=self._log, description=f"branch '{branch.name}'"
        )

        tree_id = self.dest_client.create_tree(dest, manifest.entries)
        message = self.options.branch_commit_message.format(
            branch=branch.name, source=source_info.full_name
        )
        commit_id = self.dest_client.create_commit(dest, message, tree_id, [root_commit])
        status = self._point_branch(dest, branch.name, commit_id)

        return BranchResult(name=branch.name, status=status, files=len(manifest), commit_id=commit_id)

    def _point_branch(self, dest: RepositoryLocator, name: str, commit_id: str) -> BranchStatus:
        """Create the branch ref, or force-update it if it already exists."""
        try:
            self.dest_client.create_ref(dest, name, commit_id)
            return BranchStatus.CREATED
        except RemoteError as e:
            logger.debug(f"Creating ref {name} failed ({e.status_code}), force-updating instead")
            self.dest_client.update_ref(dest, name, commit_id, force=True)
            return BranchStatus.UPDATED

    def _plan(
        self,
        source_info: RepositoryInfo,
        secondary: List[BranchRef],
        result: MirrorResult,
    ) -> Generator[LogEntry, None, None]:
        """Dry run: list what would be copied without writing anything."""
        log = self._log

        self._enter(MirrorState.FETCHING_SOURCE_TREE)
        yield log.info("Fetching source file tree...")
        blobs = self._blobs(source_info.locator, source_info.default_branch)
        result.branches.append(BranchResult(
            name=source_info.default_branch, status=BranchStatus.DRY_RUN, files=len(blobs)
        ))
        yield log.info(f"Would copy {len(blobs)} file(s) from '{source_info.default_branch}'")

        for branch in secondary:
            try:
                branch_blobs = self._blobs(source_info.locator, branch.head_object_id)
            except MirrorError as e:
                result.branches.append(BranchResult(
                    name=branch.name, status=BranchStatus.FAILED, error=e.message
                ))
                yield log.warn(f"Failed to list branch '{branch.name}': {e.message}")
                continue
            result.branches.append(BranchResult(
                name=branch.name, status=BranchStatus.DRY_RUN, files=len(branch_blobs)
            ))
            yield log.info(f"Would copy {len(branch_blobs)} file(s) from branch '{branch.name}'")

        self._enter(MirrorState.DONE)
        result.state = MirrorState.DONE
        yield log.success(
            f"Dry run complete: {result.files_copied} files across "
            f"{result.branches_copied} branch(es), destination untouched"
        )
