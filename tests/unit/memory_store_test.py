import asyncio
import uuid
from datetime import datetime, timezone

import pytest

from mockforge.core.errors import ResourceConflict
from mockforge.db import InMemoryRecordStore
from mockforge.models import Resource


def _resource(project_id: str, name: str = "users") -> Resource:
    now = datetime.now(timezone.utc)
    return Resource(
        id=str(uuid.uuid4()),
        project_id=project_id,
        name=name,
        version="v1",
        endpoint=f"v1/{name}",
        template={"name": "$person.fullName"},
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def seeded(store: InMemoryRecordStore) -> tuple[InMemoryRecordStore, Resource]:
    async def _seed() -> Resource:
        project = await store.create_project("demo")
        resource = await store.create_resource(_resource(project.id))
        await store.replace_records(resource.id, [{"id": str(i), "name": f"n{i}"} for i in range(1, 4)])
        return resource

    return store, asyncio.run(_seed())


def test_duplicate_resource_name_conflicts(seeded: tuple[InMemoryRecordStore, Resource]) -> None:
    store, resource = seeded
    with pytest.raises(ResourceConflict):
        asyncio.run(store.create_resource(_resource(resource.project_id)))


def test_find_record_by_external_id(seeded: tuple[InMemoryRecordStore, Resource]) -> None:
    store, resource = seeded
    record = asyncio.run(store.find_record(resource.id, "2"))
    assert record is not None
    assert record.data == {"id": "2", "name": "n2"}
    assert asyncio.run(store.find_record(resource.id, "9")) is None


def test_replace_records_drops_old_ones(seeded: tuple[InMemoryRecordStore, Resource]) -> None:
    store, resource = seeded
    asyncio.run(store.replace_records(resource.id, [{"id": "1", "name": "fresh"}]))
    assert asyncio.run(store.count_records(resource.id)) == 1
    assert asyncio.run(store.find_record(resource.id, "3")) is None
    assert len(store.records_by_external_id) == 1


def test_update_record_moves_index(seeded: tuple[InMemoryRecordStore, Resource]) -> None:
    store, resource = seeded
    record = asyncio.run(store.find_record(resource.id, "1"))
    assert record is not None
    asyncio.run(store.update_record(record.storage_id, {"id": "100", "name": "moved"}))
    assert asyncio.run(store.find_record(resource.id, "1")) is None
    moved = asyncio.run(store.find_record(resource.id, "100"))
    assert moved is not None
    assert moved.storage_id == record.storage_id


def test_reassign_record_ids_swaps_without_losing_records(seeded: tuple[InMemoryRecordStore, Resource]) -> None:
    store, resource = seeded
    records = asyncio.run(store.list_records(resource.id))
    reversed_ids = [(r.storage_id, {**r.data, "id": str(4 - i)}) for i, r in enumerate(records, start=1)]
    asyncio.run(store.reassign_record_ids(resource.id, reversed_ids))

    first = asyncio.run(store.find_record(resource.id, "3"))
    assert first is not None
    assert first.data["name"] == "n1"
    assert [r.data["id"] for r in asyncio.run(store.list_records(resource.id))] == ["3", "2", "1"]


def test_delete_project_cascades(seeded: tuple[InMemoryRecordStore, Resource]) -> None:
    store, resource = seeded
    assert asyncio.run(store.delete_project(resource.project_id)) is True
    assert store.resources == {}
    assert store.records == {}
    assert store.records_by_external_id == {}
    assert asyncio.run(store.delete_project(resource.project_id)) is False
