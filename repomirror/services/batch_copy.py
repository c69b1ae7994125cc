"""
Batch copy service for repomirror.

Copies blobs from a source repository to a destination repository:
each file is fetched from the source and re-uploaded verbatim as a new
destination blob. Files are processed in consecutive windows of a
fixed size; the files of a window run concurrently on a bounded thread
pool and the whole window is joined before the next one starts, which
keeps request bursts under the API's rate limits.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Generator, List, Optional, Sequence

from ..domain.event import LogEntry, MirrorLog, ProgressEvent, Severity
from ..domain.git_objects import FileEntry, TreeManifest, TreeManifestEntry
from ..domain.locator import RepositoryLocator
from ..infra.github_client import GitHubClient

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10


class BatchCopyEngine:
    """
    Windowed concurrent blob copier.

    Example:
        engine = BatchCopyEngine(source_client, dest_client, concurrency=10)

        for entry in engine.copy(source, dest, entries):
            print(entry.message)  # "10/42 files copied"

        manifest = engine.last_manifest
    """

    def __init__(
        self,
        source_client: GitHubClient,
        dest_client: GitHubClient,
        concurrency: int = DEFAULT_CONCURRENCY,
    ):
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.source_client = source_client
        self.dest_client = dest_client
        self.concurrency = concurrency
        self.last_manifest: TreeManifest = TreeManifest()

    def _copy_one(
        self,
        source: RepositoryLocator,
        dest: RepositoryLocator,
        entry: FileEntry,
    ) -> TreeManifestEntry:
        content = self.source_client.get_blob(source, entry.source_object_id)
        new_id = self.dest_client.create_blob(dest, content)
        return TreeManifestEntry(path=entry.path, destination_object_id=new_id)

    def copy(
        self,
        source: RepositoryLocator,
        dest: RepositoryLocator,
        entries: Sequence[FileEntry],
        log: Optional[MirrorLog] = None,
        description: str = "",
    ) -> Generator[LogEntry, None, TreeManifest]:
        """
        Copy every blob entry from ``source`` to ``dest``.

        Emits one progress entry per completed window and returns the
        TreeManifest. A failed file aborts the copy with its error once
        the rest of its window has finished; no later window starts.

        Args:
            source: Repository to read blobs from
            dest: Repository to create blobs in
            entries: Tree listing; non-blob entries are skipped
            log: Run log to write progress to (a private one if None)
            description: Suffix for progress messages, e.g. "branch 'dev'"

        Yields:
            Progress LogEntry with cumulative files copied out of total

        Returns:
            TreeManifest with one entry per copied file
        """
        log = log if log is not None else MirrorLog()
        blobs: List[FileEntry] = [e for e in entries if e.is_blob]
        total = len(blobs)
        manifest = TreeManifest()
        self.last_manifest = manifest
        suffix = f" ({description})" if description else ""

        if not blobs:
            return manifest

        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="blob-copy") as executor:
            for start in range(0, total, self.concurrency):
                window = blobs[start:start + self.concurrency]
                futures = [executor.submit(self._copy_one, source, dest, e) for e in window]
                wait(futures)

                # Results are joined only after the whole window resolved
                for entry, future in zip(window, futures):
                    error = future.exception()
                    if error is not None:
                        logger.debug(f"Copy of {entry.path} failed: {error}")
                        raise error

                manifest.extend([f.result() for f in futures])
                progress = ProgressEvent(
                    state=log.state or "copying",
                    completed=len(manifest),
                    total=total,
                )
                yield log.emit(
                    f"{progress.completed}/{progress.total} files copied{suffix}",
                    Severity.INFO,
                    progress=progress,
                )

        return manifest
