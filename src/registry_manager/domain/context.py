"""Explicit run context threaded through reconciliation and materialization."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from .documents import CATALOG_FILENAME, LEDGER_FILENAME

ENTRY_SCRIPT: Final[str] = "index.js"
STATIC_DIR: Final[str] = "static"


@dataclass(frozen=True, slots=True, kw_only=True)
class RunContext:
    """Where a run reads from and writes to.

    ``registry_ref`` pins every registry read to one commit; it starts out as the
    branch name and is replaced by the head commit sha once that has been read.
    """

    source_repository: str
    branch: str
    registry_repository: str
    registry_branch: str = "master"
    publishing_branch: str = "gh-pages"
    registry_ref: str | None = None

    @property
    def source_key(self) -> str:
        return repository_key(self.source_repository)

    @property
    def registry_read_ref(self) -> str:
        return self.registry_ref or self.registry_branch

    @property
    def catalog_path(self) -> str:
        return f"{self.branch}/{CATALOG_FILENAME}"

    @property
    def ledger_path(self) -> str:
        return f"{self.branch}/{LEDGER_FILENAME}"

    def entry_script_path(self, extension_id: str) -> str:
        return f"{self.branch}/{extension_id}/{ENTRY_SCRIPT}"

    def static_dir_path(self, extension_id: str) -> str:
        return f"{self.branch}/{extension_id}/{STATIC_DIR}"

    def pinned_to(self, commit_sha: str) -> RunContext:
        return replace(self, registry_ref=commit_sha)


def repository_key(repository: str) -> str:
    """Strip the owner namespace: ``owner/name`` becomes ``name``."""

    return repository.rsplit("/", 1)[-1]
