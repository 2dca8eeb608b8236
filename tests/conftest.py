"""Shared fixtures and helpers for tests."""

from collections.abc import AsyncIterator
from pathlib import Path
from typing import cast

import pytest
from faker import Faker
from fastapi.testclient import TestClient

from mockforge.api.app import create_app
from mockforge.api.dependencies import get_registry, get_store
from mockforge.core.ports.store import RecordStore
from mockforge.core.registry import GeneratorRegistry, build_default_registry
from mockforge.db import InMemoryRecordStore

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake() -> Faker:
    """A Faker seeded for reproducible generator output."""
    instance = Faker("en_US")
    instance.seed_instance(1234)
    return instance


@pytest.fixture
def registry(fake: Faker) -> GeneratorRegistry:
    return build_default_registry(fake)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def client(store: InMemoryRecordStore, registry: GeneratorRegistry) -> TestClient:
    app = create_app()

    async def _override() -> AsyncIterator[RecordStore]:
        yield cast(RecordStore, store)

    app.dependency_overrides[get_store] = _override
    app.dependency_overrides[get_registry] = lambda: registry
    return TestClient(app)
