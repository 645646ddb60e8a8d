from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from registry_manager.app import publish_registry_update
from registry_manager.config import PublishConfig
from registry_manager.domain.documents import load_catalog, load_ledger
from registry_manager.domain.errors import (
    IncompatibleToolchainError,
    NotFoundError,
    StaleReferenceError,
)
from registry_manager.domain.model import ChangeKind
from tests.support.fake_store import FakeContentStore
from tests.support.manifests import (
    BRANCH,
    REGISTRY_REPOSITORY,
    SOURCE_KEY,
    SOURCE_REPOSITORY,
    dumps,
    extension_payload,
    manifest_payload,
)

if TYPE_CHECKING:
    from registry_manager.app import PublishResult
    from registry_manager.domain.ports import CommitAuthor

CATALOG_PATH = f"{BRANCH}/versioning.json"
LEDGER_PATH = f"{BRANCH}/metadata.json"
ICON = b"\x89PNG\r\n\x1a\n"


def _now() -> datetime:
    return datetime(2024, 6, 1, 8, 0, tzinfo=UTC)


def _config(**overrides: str) -> PublishConfig:
    return PublishConfig(repository=SOURCE_REPOSITORY, branch=BRANCH, **overrides)


def _publish(store: FakeContentStore, config: PublishConfig | None = None) -> PublishResult:
    return publish_registry_update(
        config or _config(), store_factory=lambda: store, now_provider=_now
    )


def _seed_source(store: FakeContentStore, *extensions: dict[str, object]) -> None:
    files: dict[str, bytes | str] = {CATALOG_PATH: dumps(manifest_payload(*extensions))}
    for extension in extensions:
        extension_id = extension["id"]
        files[f"{BRANCH}/{extension_id}/index.js"] = f"// {extension_id}\n"
        files[f"{BRANCH}/{extension_id}/static/icon.png"] = ICON
    store.seed(SOURCE_REPOSITORY, "gh-pages", files)


def _registry_files(store: FakeContentStore) -> dict[str, bytes]:
    return store.files_at(REGISTRY_REPOSITORY, "master")


def test_first_publish_adds_extension_in_one_commit() -> None:
    store = FakeContentStore()
    parent = store.seed(REGISTRY_REPOSITORY, "master", {"README.md": "registry"})
    _seed_source(store, extension_payload("A"))

    result = _publish(store)

    assert result.committed
    assert [(change.extension_id, change.kind) for change in result.changes] == [
        ("A", ChangeKind.ADDITION)
    ]
    assert result.snapshot is not None
    assert result.snapshot.parent_sha == parent.commit_sha
    assert store.head(REGISTRY_REPOSITORY, "master") == result.snapshot.commit_sha

    files = _registry_files(store)
    assert files[f"{BRANCH}/A/index.js"] == b"// A\n"
    assert files[f"{BRANCH}/A/static/icon.png"] == ICON
    assert files["README.md"] == b"registry"

    registry_catalog = load_catalog(files[CATALOG_PATH])
    assert registry_catalog.ids == ["A"]
    assert registry_catalog.build_time == "2024-06-01T08:00:00.000Z"
    assert list(load_ledger(files[LEDGER_PATH]).root) == [SOURCE_KEY]

    commit = store.commits[result.snapshot.commit_sha]
    assert commit.message == f"Update {BRANCH} extensions from {SOURCE_REPOSITORY}"
    assert commit.author is not None
    assert commit.author.name == "github-actions[bot]"
    assert store.call_names().count("update_reference") == 1


def test_emptied_source_removes_extension_and_its_bucket() -> None:
    store = FakeContentStore()
    store.seed(REGISTRY_REPOSITORY, "master", {})
    _seed_source(store, extension_payload("A"))
    _publish(store)
    _seed_source(store)

    result = _publish(store)

    assert [(change.extension_id, change.kind) for change in result.changes] == [
        ("A", ChangeKind.DELETION)
    ]
    files = _registry_files(store)
    assert f"{BRANCH}/A/index.js" not in files
    assert f"{BRANCH}/A/static/icon.png" not in files
    assert load_catalog(files[CATALOG_PATH]).sources == {}
    assert load_ledger(files[LEDGER_PATH]).root == {}


def test_unchanged_source_makes_no_commit() -> None:
    store = FakeContentStore()
    store.seed(REGISTRY_REPOSITORY, "master", {})
    _seed_source(store, extension_payload("A"), extension_payload("B"))
    first = _publish(store)
    store.calls.clear()

    result = _publish(store)

    assert not result.committed
    assert result.changes == []
    assert first.snapshot is not None
    assert store.head(REGISTRY_REPOSITORY, "master") == first.snapshot.commit_sha
    assert set(store.call_names()) == {"get_branch_head", "get_file"}


def test_updated_version_replaces_script() -> None:
    store = FakeContentStore()
    store.seed(REGISTRY_REPOSITORY, "master", {})
    _seed_source(store, extension_payload("A", version="1.0.0"))
    _publish(store)
    _seed_source(store, extension_payload("A", version="1.1.0"))
    files = store.files_at(SOURCE_REPOSITORY, "gh-pages")
    files[f"{BRANCH}/A/index.js"] = b"// A v1.1\n"
    store.seed(SOURCE_REPOSITORY, "gh-pages", files)

    result = _publish(store, _config(commit_message="Bump A"))

    assert [(change.extension_id, change.kind) for change in result.changes] == [
        ("A", ChangeKind.UPDATE)
    ]
    registry = _registry_files(store)
    assert registry[f"{BRANCH}/A/index.js"] == b"// A v1.1\n"
    assert load_catalog(registry[CATALOG_PATH]).sources["A"].version == "1.1.0"
    assert result.snapshot is not None
    assert store.commits[result.snapshot.commit_sha].message == "Bump A"


def test_missing_source_manifest_is_fatal() -> None:
    store = FakeContentStore()
    head = store.seed(REGISTRY_REPOSITORY, "master", {})
    store.seed(SOURCE_REPOSITORY, "gh-pages", {"README.md": "nothing published"})

    with pytest.raises(NotFoundError):
        _publish(store)

    assert store.head(REGISTRY_REPOSITORY, "master") == head.commit_sha
    assert "create_blob" not in store.call_names()


def test_incompatible_toolchain_is_rejected_before_any_write() -> None:
    store = FakeContentStore()
    store.seed(
        REGISTRY_REPOSITORY,
        "master",
        {CATALOG_PATH: dumps(manifest_payload(extension_payload("A"), types="1.0.0"))},
    )
    store.seed(
        SOURCE_REPOSITORY,
        "gh-pages",
        {CATALOG_PATH: dumps(manifest_payload(extension_payload("B"), types="0.9.0"))},
    )

    with pytest.raises(IncompatibleToolchainError):
        _publish(store)

    assert "create_blob" not in store.call_names()


class _RacingStore(FakeContentStore):
    """Someone else pushes to the registry right after our commit is created."""

    async def create_commit(
        self,
        repository: str,
        *,
        message: str,
        tree: str,
        parent: str,
        author: CommitAuthor,
    ) -> str:
        sha = await super().create_commit(
            repository, message=message, tree=tree, parent=parent, author=author
        )
        self.seed(REGISTRY_REPOSITORY, "master", {"other.txt": "pushed concurrently"})
        return sha


def test_concurrent_registry_update_is_not_overwritten() -> None:
    store = _RacingStore()
    store.seed(REGISTRY_REPOSITORY, "master", {})
    _seed_source(store, extension_payload("A"))

    with pytest.raises(StaleReferenceError):
        _publish(store)

    assert _registry_files(store) == {"other.txt": b"pushed concurrently"}
    assert "update_reference" not in store.call_names()


def test_registry_reads_are_pinned_to_the_head_commit() -> None:
    store = FakeContentStore()
    head = store.seed(REGISTRY_REPOSITORY, "master", {})
    _seed_source(store, extension_payload("A"))

    _publish(store)

    registry_reads = [
        call for call in store.calls if call[0] == "get_file" and call[1] == REGISTRY_REPOSITORY
    ]
    assert [call[3] for call in registry_reads] == [head.commit_sha, head.commit_sha]
