"""Fill change records with the blobs (or tombstones) their snapshot needs."""

from __future__ import annotations

import base64
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import NotFoundError
from .model import ChangeKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .context import RunContext
    from .model import ChangeRecord
    from .ports import ContentStore, DirectoryEntry

log = getLogger(__name__)


async def materialize(record: ChangeRecord, store: ContentStore, context: RunContext) -> None:
    """Record path -> blob sha for ``record``, or path -> ``None`` for removed files.

    Additions and updates read the source repository's publishing branch. Deletions
    read the registry itself, since the files to remove live there.
    """

    if record.kind is ChangeKind.DELETION:
        await _materialize_deletion(record, store, context)
    else:
        await _materialize_publication(record, store, context)


async def materialize_all(
    records: Iterable[ChangeRecord], store: ContentStore, context: RunContext
) -> None:
    for record in records:
        log.info(f"Materializing {record.kind} of extension {record.extension_id}")
        await materialize(record, store, context)


async def _materialize_publication(
    record: ChangeRecord, store: ContentStore, context: RunContext
) -> None:
    repository = context.source_repository
    ref = context.publishing_branch

    script = await store.get_file(
        repository, context.entry_script_path(record.extension_id), ref
    )
    sha = await store.create_blob(context.registry_repository, script.text(), "utf-8")
    record.record(script.path, sha)

    for entry in await _list_static_files(store, repository, context, record.extension_id, ref):
        asset = await store.get_file(repository, entry.path, ref)
        encoded = base64.b64encode(asset.data).decode("ascii")
        sha = await store.create_blob(context.registry_repository, encoded, "base64")
        record.record(asset.path, sha)


async def _materialize_deletion(
    record: ChangeRecord, store: ContentStore, context: RunContext
) -> None:
    record.record(context.entry_script_path(record.extension_id), None)

    entries = await _list_static_files(
        store,
        context.registry_repository,
        context,
        record.extension_id,
        context.registry_read_ref,
    )
    for entry in entries:
        record.record(entry.path, None)


async def _list_static_files(
    store: ContentStore,
    repository: str,
    context: RunContext,
    extension_id: str,
    ref: str,
) -> list[DirectoryEntry]:
    path = context.static_dir_path(extension_id)
    try:
        entries = await store.list_directory(repository, path, ref)
    except NotFoundError:
        log.debug(f"No static directory at {repository}:{path}@{ref}")
        return []
    return [entry for entry in entries if entry.is_file]
