"""Turn materialized change records into a tree, a commit and a reference update."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .documents import CATALOG_FILENAME, LEDGER_FILENAME, dump_document
from .errors import StaleReferenceError
from .model import ChangeKind, ChangeRecord
from .ports import TreeEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .context import RunContext
    from .model import ProvenanceLedger, VersionCatalog
    from .ports import BranchHead, CommitAuthor, ContentStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Snapshot:
    parent_sha: str
    tree_sha: str
    commit_sha: str


def build_tree_entries(records: Iterable[ChangeRecord]) -> list[TreeEntry]:
    """Flatten records into tree entries; a later record wins when paths collide."""

    files: dict[str, str | None] = {}
    for record in records:
        files.update(record.files)
    return [TreeEntry(path=path, sha=sha) for path, sha in files.items()]


async def stage_documents(
    store: ContentStore,
    context: RunContext,
    catalog: VersionCatalog,
    ledger: ProvenanceLedger,
) -> list[ChangeRecord]:
    """Upload both documents as blobs and wrap each in a single-path record."""

    staged: list[ChangeRecord] = []
    for name, path, document in (
        (CATALOG_FILENAME, context.catalog_path, catalog),
        (LEDGER_FILENAME, context.ledger_path, ledger),
    ):
        sha = await store.create_blob(context.registry_repository, dump_document(document), "utf-8")
        record = ChangeRecord(extension_id=name, kind=ChangeKind.UPDATE)
        record.record(path, sha)
        staged.append(record)
    return staged


async def assemble_snapshot(
    store: ContentStore,
    context: RunContext,
    *,
    head: BranchHead,
    records: Iterable[ChangeRecord],
    message: str,
    author: CommitAuthor,
) -> Snapshot:
    """Create tree and commit on top of ``head`` and fast-forward the registry branch.

    Raises :class:`StaleReferenceError` when the branch no longer points at ``head``.
    """

    repository = context.registry_repository
    entries = build_tree_entries(records)
    removed = sum(1 for entry in entries if entry.sha is None)
    log.info(f"Creating tree with {len(entries) - removed} blobs and {removed} removals")
    tree_sha = await store.create_tree(repository, head.tree_sha, entries)

    commit_sha = await store.create_commit(
        repository,
        message=message,
        tree=tree_sha,
        parent=head.commit_sha,
        author=author,
    )
    log.info(f"Created commit {commit_sha}")

    current = await store.get_branch_head(repository, context.registry_branch)
    if current.commit_sha != head.commit_sha:
        raise StaleReferenceError(
            f"{repository}@{context.registry_branch} moved from {head.commit_sha} "
            f"to {current.commit_sha} during the run",
            expected=head.commit_sha,
        )
    await store.update_reference(repository, context.registry_branch, commit_sha)
    log.info(f"Updated {repository}@{context.registry_branch} to {commit_sha}")

    return Snapshot(parent_sha=head.commit_sha, tree_sha=tree_sha, commit_sha=commit_sha)
