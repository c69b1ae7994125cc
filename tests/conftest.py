"""
Shared fixtures: an in-memory GitHub git-object store.

FakeGitHub holds repositories (blobs, trees, commits, refs) and hands
out FakeClient objects that implement the GitHubClient methods against
it, recording every call so tests can assert on call counts and order.
"""

import base64
import hashlib
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest

from repomirror.errors import RemoteError
from repomirror.domain.git_objects import BlobContent, BranchRef, FileEntry, ObjectKind


def _sha(*parts: str) -> str:
    return hashlib.sha1("\0".join(parts).encode()).hexdigest()


@dataclass
class FakeRepo:
    full_name: str
    private: bool = False
    default_branch: str = "main"
    blobs: Dict[str, BlobContent] = field(default_factory=dict)
    trees: Dict[str, Dict[str, str]] = field(default_factory=dict)  # tree sha -> {path: blob sha}
    commits: Dict[str, dict] = field(default_factory=dict)
    refs: Dict[str, str] = field(default_factory=dict)  # branch -> commit sha


class FakeGitHub:
    """In-memory object store shared by the source and destination clients."""

    def __init__(self):
        self.repos: Dict[str, FakeRepo] = {}
        self.calls: List[Tuple[str, str, tuple]] = []
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self._lock = threading.Lock()
        self._counter = 0

    # Setup helpers

    def add_repo(
        self,
        full_name: str,
        branches: Dict[str, Dict[str, str]],
        default_branch: str = "main",
        private: bool = False,
    ) -> FakeRepo:
        """Create a repo whose branches each hold one commit with the given files."""
        repo = FakeRepo(full_name=full_name, private=private, default_branch=default_branch)
        self.repos[full_name] = repo
        for branch, files in branches.items():
            blob_ids = {}
            for path, text in files.items():
                content = BlobContent(encoding="base64", data=base64.b64encode(text.encode()).decode())
                blob_ids[path] = self._store_blob(repo, content)
            tree_id = self._store_tree(repo, blob_ids)
            commit_id = self._store_commit(repo, f"seed {branch}", tree_id, [])
            repo.refs[branch] = commit_id
        return repo

    def fail(self, method: str, key: str, error: Optional[Exception] = None) -> None:
        """Make ``method`` raise when called with ``key`` (ref, sha or branch)."""
        self.failures[(method, key)] = error or RemoteError(500, "boom", "GET", key)

    def client(self, token: str = "token") -> 'FakeClient':
        return FakeClient(self, token)

    # Inspection helpers

    def files(self, full_name: str, branch: str) -> Dict[str, str]:
        """Decoded {path: text} at the head of ``branch``."""
        repo = self.repos[full_name]
        tree = repo.trees[repo.commits[repo.refs[branch]]['tree']]
        return {
            path: base64.b64decode(repo.blobs[sha].data).decode()
            for path, sha in tree.items()
        }

    def blob_id(self, full_name: str, branch: str, path: str) -> str:
        """Object id of ``path`` at the head of ``branch``."""
        repo = self.repos[full_name]
        return repo.trees[repo.commits[repo.refs[branch]]['tree']][path]

    def count(self, method: str, full_name: Optional[str] = None) -> int:
        return sum(
            1 for m, name, _ in self.calls
            if m == method and (full_name is None or name == full_name)
        )

    def methods(self, full_name: Optional[str] = None) -> List[str]:
        return [m for m, name, _ in self.calls if full_name is None or name == full_name]

    # Storage

    def _next(self) -> str:
        with self._lock:
            self._counter += 1
            return str(self._counter)

    def _store_blob(self, repo: FakeRepo, content: BlobContent) -> str:
        sha = _sha("blob", content.encoding, content.data)
        repo.blobs[sha] = content
        return sha

    def _store_tree(self, repo: FakeRepo, entries: Dict[str, str]) -> str:
        sha = _sha("tree", *sorted(f"{p}={s}" for p, s in entries.items()))
        repo.trees[sha] = dict(entries)
        return sha

    def _store_commit(self, repo: FakeRepo, message: str, tree_id: str, parents: List[str]) -> str:
        sha = _sha("commit", message, tree_id, *parents, self._next())
        repo.commits[sha] = {'message': message, 'tree': tree_id, 'parents': list(parents)}
        return sha


class FakeClient:
    """Implements the GitHubClient surface on top of a FakeGitHub."""

    def __init__(self, server: FakeGitHub, token: str):
        self.server = server
        self.token = token

    def _call(self, method: str, locator, key: str = "", *args) -> FakeRepo:
        with self.server._lock:
            self.server.calls.append((method, locator.full_name, (key,) + args))
        error = self.server.failures.get((method, key))
        if error is not None:
            raise error
        repo = self.server.repos.get(locator.full_name)
        if repo is None:
            raise RemoteError(404, '{"message": "Not Found"}', method, locator.full_name)
        return repo

    def get_repo(self, locator):
        repo = self._call('get_repo', locator, locator.full_name)
        return {
            'full_name': repo.full_name,
            'private': repo.private,
            'default_branch': repo.default_branch,
        }

    def get_branch_head(self, locator, branch):
        repo = self._call('get_branch_head', locator, branch)
        if branch not in repo.refs:
            raise RemoteError(404, "Not Found", "GET", f"ref heads/{branch}")
        return repo.refs[branch]

    def list_branches(self, locator, per_page=100):
        repo = self._call('list_branches', locator, locator.full_name)
        return [BranchRef(name=name, head_object_id=sha) for name, sha in repo.refs.items()]

    def get_tree(self, locator, ref, recursive=True):
        repo = self._call('get_tree', locator, ref)
        commit_id = repo.refs.get(ref, ref)
        if commit_id not in repo.commits:
            raise RemoteError(404, "Not Found", "GET", f"trees/{ref}")
        tree = repo.trees[repo.commits[commit_id]['tree']]

        entries = []
        dirs = set()
        for path, sha in sorted(tree.items()):
            parts = path.split('/')
            for i in range(1, len(parts)):
                dirs.add('/'.join(parts[:i]))
            entries.append(FileEntry(path=path, source_object_id=sha, kind=ObjectKind.BLOB))
        entries.extend(
            FileEntry(path=d, source_object_id=_sha("dir", d), kind=ObjectKind.TREE)
            for d in sorted(dirs)
        )
        return entries

    def get_blob(self, locator, object_id):
        repo = self._call('get_blob', locator, object_id)
        if object_id not in repo.blobs:
            raise RemoteError(404, "Not Found", "GET", f"blobs/{object_id}")
        return repo.blobs[object_id]

    def create_blob(self, locator, content):
        repo = self._call('create_blob', locator, content.data)
        return self.server._store_blob(repo, content)

    def create_tree(self, locator, entries):
        repo = self._call('create_tree', locator, str(len(entries)))
        mapping = {}
        for entry in entries:
            if entry.destination_object_id not in repo.blobs:
                raise RemoteError(422, "Invalid tree info", "POST", "trees")
            mapping[entry.path] = entry.destination_object_id
        return self.server._store_tree(repo, mapping)

    def create_commit(self, locator, message, tree_id, parent_ids):
        repo = self._call('create_commit', locator, message)
        if tree_id not in repo.trees or any(p not in repo.commits for p in parent_ids):
            raise RemoteError(422, "Invalid commit", "POST", "commits")
        return self.server._store_commit(repo, message, tree_id, list(parent_ids))

    def update_ref(self, locator, branch, commit_id, force=True):
        repo = self._call('update_ref', locator, branch)
        if branch not in repo.refs:
            raise RemoteError(422, "Reference does not exist", "PATCH", f"refs/heads/{branch}")
        if commit_id not in repo.commits:
            raise RemoteError(422, "Object does not exist", "PATCH", f"refs/heads/{branch}")
        repo.refs[branch] = commit_id

    def create_ref(self, locator, branch, commit_id):
        repo = self._call('create_ref', locator, branch)
        if branch in repo.refs:
            raise RemoteError(422, "Reference already exists", "POST", "refs")
        if commit_id not in repo.commits:
            raise RemoteError(422, "Object does not exist", "POST", "refs")
        repo.refs[branch] = commit_id


@pytest.fixture
def github():
    """Empty in-memory GitHub."""
    return FakeGitHub()


@pytest.fixture
def scenario(github):
    """
    Source with main (a.txt, b.txt) and dev (c.txt); destination with
    unrelated content on main.
    """
    github.add_repo("me/source", {
        "main": {"a.txt": "alpha", "b.txt": "bravo"},
        "dev": {"c.txt": "charlie"},
    })
    github.add_repo("me/dest", {
        "main": {"old.txt": "stale", "docs/readme.md": "old docs"},
    })
    return github
