"""Port for the remote content and git object store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

from .errors import DecodeError

if TYPE_CHECKING:
    from collections.abc import Sequence

BlobEncoding = Literal["utf-8", "base64"]


class EntryType(StrEnum):
    FILE = "file"
    DIR = "dir"
    SYMLINK = "symlink"
    SUBMODULE = "submodule"


@dataclass(frozen=True, slots=True)
class FileContent:
    """Decoded contents of one file."""

    path: str
    data: bytes

    def text(self) -> str:
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{self.path} is not valid UTF-8") from exc


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    path: str
    type: EntryType | str

    @property
    def is_file(self) -> bool:
        return self.type == EntryType.FILE


@dataclass(frozen=True, slots=True)
class BranchHead:
    commit_sha: str
    tree_sha: str


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """One path of a tree to create; ``sha=None`` removes the path from the base tree."""

    path: str
    sha: str | None
    mode: str = "100644"
    type: str = "blob"


@dataclass(frozen=True, slots=True)
class CommitAuthor:
    name: str
    email: str


@runtime_checkable
class ContentStore(Protocol):
    """Async access to repository contents and git objects.

    Every method raises a :class:`~registry_manager.domain.errors.RegistryError`
    subclass on failure; nothing is retried.
    """

    async def get_file(self, repository: str, path: str, ref: str) -> FileContent:
        ...

    async def list_directory(
        self, repository: str, path: str, ref: str
    ) -> list[DirectoryEntry]:
        ...

    async def get_branch_head(self, repository: str, branch: str) -> BranchHead:
        ...

    async def create_blob(
        self, repository: str, content: bytes | str, encoding: BlobEncoding
    ) -> str:
        ...

    async def create_tree(
        self, repository: str, base_tree: str, entries: Sequence[TreeEntry]
    ) -> str:
        ...

    async def create_commit(
        self,
        repository: str,
        *,
        message: str,
        tree: str,
        parent: str,
        author: CommitAuthor,
    ) -> str:
        ...

    async def update_reference(self, repository: str, branch: str, commit_sha: str) -> None:
        ...


__all__ = [
    "BlobEncoding",
    "BranchHead",
    "CommitAuthor",
    "ContentStore",
    "DirectoryEntry",
    "EntryType",
    "FileContent",
    "TreeEntry",
]
