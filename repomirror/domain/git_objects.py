"""
Git object domain types for repomirror.

Tagged records for the JSON payloads of the git-object REST API.
Required fields are validated when a record is built from an API
response, so a bad payload fails with MalformedResponse at the client
boundary instead of a KeyError deep inside the orchestrator.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping

from ..errors import MalformedResponse
from .locator import RepositoryLocator

# Regular, non-executable file. Executable bits and symlinks are flattened.
REGULAR_FILE_MODE = "100644"


def require(data: Any, *keys: str, what: str = "response") -> None:
    """Raise MalformedResponse unless ``data`` is a mapping with all ``keys``."""
    if not isinstance(data, Mapping):
        raise MalformedResponse(f"Expected JSON object in {what}, got {type(data).__name__}")
    missing = [k for k in keys if k not in data]
    if missing:
        raise MalformedResponse(f"Missing {', '.join(missing)} in {what}")


class ObjectKind(Enum):
    """Kind of a node in a recursive tree listing."""
    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"  # submodule


class BlobEncoding(Enum):
    BASE64 = "base64"
    UTF8 = "utf-8"


@dataclass(frozen=True)
class RepositoryInfo:
    """Result of validating one repository. Lives for one mirror run."""
    locator: RepositoryLocator
    full_name: str
    is_public: bool
    default_branch: str

    @classmethod
    def from_api_response(cls, locator: RepositoryLocator, data: Dict[str, Any]) -> 'RepositoryInfo':
        require(data, 'full_name', 'private', 'default_branch', what="repository")
        return cls(
            locator=locator,
            full_name=data['full_name'],
            is_public=not data['private'],
            default_branch=data['default_branch'],
        )

    @property
    def visibility(self) -> str:
        return "public" if self.is_public else "private"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'owner': self.locator.owner,
            'name': self.locator.name,
            'full_name': self.full_name,
            'is_public': self.is_public,
            'default_branch': self.default_branch,
            'url': self.locator.url,
        }


@dataclass(frozen=True)
class FileEntry:
    """One node of a source tree listing."""
    path: str
    source_object_id: str
    kind: ObjectKind

    @property
    def is_blob(self) -> bool:
        return self.kind is ObjectKind.BLOB

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'FileEntry':
        require(data, 'path', 'sha', 'type', what="tree entry")
        try:
            kind = ObjectKind(data['type'])
        except ValueError:
            raise MalformedResponse(f"Unknown tree entry type {data['type']!r} for {data['path']}")
        return cls(path=data['path'], source_object_id=data['sha'], kind=kind)


@dataclass(frozen=True)
class BlobContent:
    """Blob payload, re-uploaded verbatim (never decoded)."""
    encoding: str
    data: str

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'BlobContent':
        require(data, 'content', 'encoding', what="blob")
        encoding = data['encoding']
        if encoding not in (BlobEncoding.BASE64.value, BlobEncoding.UTF8.value, 'utf8'):
            raise MalformedResponse(f"Unsupported blob encoding {encoding!r}")
        return cls(encoding=encoding, data=data['content'])

    def to_api(self) -> Dict[str, str]:
        return {'content': self.data, 'encoding': self.encoding}


@dataclass(frozen=True)
class TreeManifestEntry:
    """Destination-side counterpart of a copied FileEntry."""
    path: str
    destination_object_id: str
    mode: str = REGULAR_FILE_MODE
    kind: str = ObjectKind.BLOB.value

    def to_api(self) -> Dict[str, str]:
        return {
            'path': self.path,
            'mode': self.mode,
            'type': self.kind,
            'sha': self.destination_object_id,
        }


@dataclass
class TreeManifest:
    """
    All manifest entries for one branch.

    Submitted as a single new tree once every constituent blob upload
    has succeeded. Entry order is not significant.
    """
    entries: List[TreeManifestEntry] = field(default_factory=list)

    def extend(self, entries: List[TreeManifestEntry]) -> None:
        self.entries.extend(entries)

    def paths(self) -> List[str]:
        return [e.path for e in self.entries]

    def to_api(self) -> List[Dict[str, str]]:
        return [e.to_api() for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class BranchRef:
    """One source branch and the commit it points at."""
    name: str
    head_object_id: str

    @classmethod
    def from_api_response(cls, data: Dict[str, Any]) -> 'BranchRef':
        require(data, 'name', 'commit', what="branch")
        require(data['commit'], 'sha', what=f"branch {data['name']} commit")
        return cls(name=data['name'], head_object_id=data['commit']['sha'])
