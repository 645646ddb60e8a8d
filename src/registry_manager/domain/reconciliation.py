"""Reconcile a source repository manifest into the registry catalog and ledger.

The engine mutates the catalog and the ledger in place and returns one
:class:`ChangeRecord` per extension that has to change in the next snapshot. The
records come back with empty file maps; materialization fills them in later.

Ordering is deterministic: additions and updates follow the source manifest,
deletions follow the ledger bucket.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import IncompatibleToolchainError
from .model import ChangeKind, ChangeRecord, ProvenanceEntry
from .versions import REGISTRY_TYPES_BASELINE, UNVERSIONED, parse_version, parse_version_or

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .model import ChangeSet, ProvenanceLedger, VersionCatalog

log = getLogger(__name__)

BOOTSTRAP_REPOSITORY_NAME: Final[str] = "Community Extensions"
BOOTSTRAP_REPOSITORY_DESCRIPTION: Final[str] = (
    "Merged registry of the extensions published by the community repositories"
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def format_build_time(moment: datetime) -> str:
    """Render ``moment`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass(slots=True)
class Classification:
    """Extension ids split by what has to happen to them."""

    additions: list[str] = field(default_factory=list)
    updates: list[str] = field(default_factory=list)
    deletions: list[str] = field(default_factory=list)


def classify(source_ids: Iterable[str], prior_ids: Iterable[str]) -> Classification:
    """Split ids into additions, update candidates and deletions by exact equality."""

    source_list = list(dict.fromkeys(source_ids))
    prior_list = list(dict.fromkeys(prior_ids))
    source_set = set(source_list)
    prior_set = set(prior_list)

    result = Classification()
    for extension_id in source_list:
        if extension_id in prior_set:
            result.updates.append(extension_id)
        else:
            result.additions.append(extension_id)
    result.deletions = [
        extension_id for extension_id in prior_list if extension_id not in source_set
    ]
    return result


def check_toolchain(catalog: VersionCatalog, source_manifest: VersionCatalog) -> None:
    """Raise when the source declares an older ``types`` version than the registry requires."""

    required, fell_back = parse_version_or(catalog.built_with.types, REGISTRY_TYPES_BASELINE)
    if fell_back:
        log.warning(
            f"Registry types version {catalog.built_with.types!r} is unparsable, "
            f"assuming {REGISTRY_TYPES_BASELINE}"
        )
    declared = parse_version(source_manifest.built_with.types, label="source types version")
    if required > declared:
        raise IncompatibleToolchainError(required=str(required), declared=str(declared))


def reconcile(
    catalog: VersionCatalog,
    ledger: ProvenanceLedger,
    source_manifest: VersionCatalog,
    source_key: str,
    *,
    now_provider: Callable[[], datetime] | None = None,
) -> ChangeSet:
    """Fold ``source_manifest`` into ``catalog`` and ``ledger`` and return the changes.

    Nothing is mutated when the toolchain check fails or when no change is found.
    """

    check_toolchain(catalog, source_manifest)

    bucket = ledger.bucket(source_key)
    bucket_existed = bucket is not None
    prior_ids = list(bucket) if bucket is not None else []
    classification = classify(source_manifest.sources, prior_ids)
    log.info(
        f"Classified {source_key}: {len(classification.additions)} new, "
        f"{len(classification.updates)} known, {len(classification.deletions)} removed"
    )
    bucket = ledger.ensure_bucket(source_key)
    provenance = ProvenanceEntry(
        build_time=source_manifest.build_time,
        built_with=source_manifest.built_with.model_copy(),
    )

    changes: ChangeSet = []

    for extension_id in classification.additions:
        extension = source_manifest.sources[extension_id]
        if extension.is_template:
            log.info(f"Skipping template extension {extension_id}")
            continue
        previous_owner = ledger.owner_of(extension_id)
        if previous_owner is not None and previous_owner != source_key:
            log.warning(
                f"Extension {extension_id} moves from {previous_owner} to {source_key}"
            )
            ledger.discard(previous_owner, extension_id)
        catalog.sources[extension_id] = extension.model_copy(deep=True)
        bucket[extension_id] = provenance.model_copy(deep=True)
        changes.append(ChangeRecord(extension_id=extension_id, kind=ChangeKind.ADDITION))

    for extension_id in classification.updates:
        incoming = source_manifest.sources[extension_id]
        if incoming.is_template:
            log.info(f"Skipping template extension {extension_id}")
            continue
        stored = catalog.sources.get(extension_id)
        if stored is None:
            # Ledger and catalog disagree; treat the id as new to the catalog.
            log.warning(f"Extension {extension_id} is in the ledger but not in the catalog")
            catalog.sources[extension_id] = incoming.model_copy(deep=True)
            bucket[extension_id] = provenance.model_copy(deep=True)
            changes.append(ChangeRecord(extension_id=extension_id, kind=ChangeKind.UPDATE))
            continue
        incoming_version, fell_back = parse_version_or(incoming.version, UNVERSIONED)
        if fell_back:
            log.warning(
                f"Extension {extension_id} declares unparsable version {incoming.version!r}"
            )
        stored_version = parse_version(
            stored.version, label=f"registry version of extension {extension_id}"
        )
        if incoming_version <= stored_version:
            continue
        log.info(f"Updating extension {extension_id}: {stored.version} -> {incoming.version}")
        catalog.sources[extension_id] = incoming.model_copy(deep=True)
        bucket[extension_id] = provenance.model_copy(deep=True)
        changes.append(ChangeRecord(extension_id=extension_id, kind=ChangeKind.UPDATE))

    for extension_id in classification.deletions:
        catalog.sources.pop(extension_id, None)
        bucket.pop(extension_id, None)
        changes.append(ChangeRecord(extension_id=extension_id, kind=ChangeKind.DELETION))

    if not changes:
        if not bucket_existed:
            ledger.prune(source_key)
        return changes

    if ledger.prune(source_key):
        log.info(f"{source_key} no longer contributes any extension")

    catalog.build_time = format_build_time((now_provider or _utcnow)())
    catalog.built_with = source_manifest.built_with.model_copy()
    if not catalog.repository.name:
        catalog.repository.name = BOOTSTRAP_REPOSITORY_NAME
        catalog.repository.description = BOOTSTRAP_REPOSITORY_DESCRIPTION

    return changes
