"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from registry_manager.adapters.github import GitHubClient
from registry_manager.config import get_github_config
from registry_manager.domain import (
    NotFoundError,
    RunContext,
    Snapshot,
    assemble_snapshot,
    materialize_all,
    reconcile,
    stage_documents,
)
from registry_manager.domain.documents import load_catalog, load_ledger
from registry_manager.domain.model import ProvenanceLedger, VersionCatalog
from registry_manager.domain.ports import CommitAuthor

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractAsyncContextManager
    from datetime import datetime

    from registry_manager.config import GitHubConfig, PublishConfig
    from registry_manager.domain.model import ChangeSet
    from registry_manager.domain.ports import ContentStore

log = getLogger(__name__)


@dataclass(slots=True)
class PublishResult:
    """Outcome of one publish run."""

    changes: ChangeSet = field(default_factory=list)
    snapshot: Snapshot | None = None

    @property
    def committed(self) -> bool:
        return self.snapshot is not None


def build_context(config: PublishConfig) -> RunContext:
    return RunContext(
        source_repository=config.repository,
        branch=config.branch,
        registry_repository=config.registry_repository,
        registry_branch=config.registry_branch,
        publishing_branch=config.publishing_branch,
    )


def publish_registry_update(
    config: PublishConfig,
    *,
    github: GitHubConfig | None = None,
    store_factory: Callable[[], AbstractAsyncContextManager[ContentStore]] | None = None,
    now_provider: Callable[[], datetime] | None = None,
) -> PublishResult:
    """Publish the source repository's extensions to the registry in one commit."""

    def default_store() -> GitHubClient:
        return GitHubClient(config=github or get_github_config())

    factory = store_factory or default_store
    return asyncio.run(_publish_with_store(factory, config, now_provider=now_provider))


async def _publish_with_store(
    store_factory: Callable[[], AbstractAsyncContextManager[ContentStore]],
    config: PublishConfig,
    *,
    now_provider: Callable[[], datetime] | None,
) -> PublishResult:
    async with store_factory() as store:
        return await run_publish(store, config, now_provider=now_provider)


async def run_publish(
    store: ContentStore,
    config: PublishConfig,
    *,
    now_provider: Callable[[], datetime] | None = None,
) -> PublishResult:
    context = build_context(config)
    log.info(
        f"Publishing {context.source_repository} ({context.branch}) "
        f"to {context.registry_repository}@{context.registry_branch}"
    )

    log.info("Fetching the latest commit and tree of the registry")
    head = await store.get_branch_head(context.registry_repository, context.registry_branch)
    context = context.pinned_to(head.commit_sha)

    log.info("Requesting the registry versioning and metadata files")
    catalog = await read_catalog(store, context)
    ledger = await read_ledger(store, context)

    log.info("Requesting the repository versioning file")
    source_file = await store.get_file(
        context.source_repository, context.catalog_path, context.publishing_branch
    )
    source_manifest = load_catalog(source_file.data)

    log.info("Reconciling the registry with the repository")
    changes = reconcile(
        catalog, ledger, source_manifest, context.source_key, now_provider=now_provider
    )
    if not changes:
        log.info("There are no extensions to publish")
        return PublishResult()

    log.info(f"Materializing {len(changes)} changed extensions")
    await materialize_all(changes, store, context)

    log.info("Creating blobs for the updated versioning and metadata files")
    staged = await stage_documents(store, context, catalog, ledger)

    snapshot = await assemble_snapshot(
        store,
        context,
        head=head,
        records=[*changes, *staged],
        message=config.effective_commit_message,
        author=CommitAuthor(name=config.author_name, email=config.author_email),
    )
    log.info(f"Successfully published {len(changes)} changes to the registry")
    return PublishResult(changes=changes, snapshot=snapshot)


async def read_catalog(store: ContentStore, context: RunContext) -> VersionCatalog:
    try:
        document = await store.get_file(
            context.registry_repository, context.catalog_path, context.registry_read_ref
        )
    except NotFoundError:
        log.warning(
            "No registry versioning file found for this branch, "
            "assuming it's being created for the first time"
        )
        return VersionCatalog()
    return load_catalog(document.data)


async def read_ledger(store: ContentStore, context: RunContext) -> ProvenanceLedger:
    try:
        document = await store.get_file(
            context.registry_repository, context.ledger_path, context.registry_read_ref
        )
    except NotFoundError:
        log.warning(
            "No registry metadata file found for this branch, "
            "assuming it's being created for the first time"
        )
        return ProvenanceLedger()
    return load_ledger(document.data)
