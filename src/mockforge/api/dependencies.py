from __future__ import annotations

import os
from collections.abc import AsyncIterator

from fastapi import Depends

from mockforge.core.endpoint import ResourceEndpoint
from mockforge.core.ports.store import RecordStore
from mockforge.core.registry import GeneratorRegistry, build_default_registry
from mockforge.db.engine import get_engine
from mockforge.db.memory import InMemoryRecordStore
from mockforge.db.postgres import PostgresRecordStore

_store: RecordStore | None = None
_registry: GeneratorRegistry | None = None


def _create_store() -> RecordStore:
    kind = os.getenv("MOCKFORGE_STORE", "postgres").lower()
    if kind == "memory":
        return InMemoryRecordStore()
    if kind == "postgres":
        return PostgresRecordStore(get_engine())
    raise ValueError(f"Unknown MOCKFORGE_STORE: {kind!r} (expected 'postgres' or 'memory')")


async def get_store() -> AsyncIterator[RecordStore]:
    """Yield a ``RecordStore`` instance, creating it lazily on first call."""
    global _store  # noqa: PLW0603
    if _store is None:
        _store = _create_store()
    await _store.ensure_ready()
    yield _store


def get_registry() -> GeneratorRegistry:
    global _registry  # noqa: PLW0603
    if _registry is None:
        _registry = build_default_registry()
    return _registry


def get_endpoint(
    store: RecordStore = Depends(get_store),
    registry: GeneratorRegistry = Depends(get_registry),
) -> ResourceEndpoint:
    return ResourceEndpoint(store, registry)


async def shutdown_store() -> None:
    global _store  # noqa: PLW0603
    if _store is not None:
        await _store.dispose()
        _store = None
