from __future__ import annotations

import pytest

from registry_manager.domain.context import RunContext
from tests.support.fake_store import FakeContentStore
from tests.support.manifests import BRANCH, REGISTRY_REPOSITORY, SOURCE_REPOSITORY


@pytest.fixture
def run_context() -> RunContext:
    return RunContext(
        source_repository=SOURCE_REPOSITORY,
        branch=BRANCH,
        registry_repository=REGISTRY_REPOSITORY,
    )


@pytest.fixture
def fake_store() -> FakeContentStore:
    return FakeContentStore()
