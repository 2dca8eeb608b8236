"""Integration tests for the PostgreSQL record store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

import pytest
from faker import Faker

from mockforge.core import resources as ops
from mockforge.core.endpoint import ResourceEndpoint
from mockforge.core.errors import ResourceConflict
from mockforge.core.registry import build_default_registry
from mockforge.db.postgres import PostgresRecordStore
from mockforge.models import Resource


def _resource(project_id: str, name: str = "users") -> Resource:
    now = datetime.now(timezone.utc)
    return Resource(
        id=str(uuid.uuid4()),
        project_id=project_id,
        name=name,
        version="v1",
        endpoint=f"v1/{name}",
        template={"name": "$person.fullName", "tags": ["$lorem.word"]},
        endpoint_template={"data": "$mockData", "total": "$count"},
        created_at=now,
        updated_at=now,
    )


@pytest.mark.asyncio
async def test_resource_round_trip(pg_store: PostgresRecordStore) -> None:
    project = await pg_store.create_project("demo")
    created = await pg_store.create_resource(_resource(project.id))

    loaded = await pg_store.find_resource(project.id, "users")
    assert loaded is not None
    assert loaded.id == created.id
    assert loaded.template == created.template
    assert loaded.endpoint_template == {"data": "$mockData", "total": "$count"}

    updated = await pg_store.update_resource(created.id, allow_delete=False, endpoint_template=None)
    assert updated is not None
    assert updated.allow_delete is False
    assert updated.endpoint_template is None


@pytest.mark.asyncio
async def test_duplicate_resource_name(pg_store: PostgresRecordStore) -> None:
    project = await pg_store.create_project("demo")
    await pg_store.create_resource(_resource(project.id))
    with pytest.raises(ResourceConflict):
        await pg_store.create_resource(_resource(project.id))


@pytest.mark.asyncio
async def test_replace_records_in_batches_keeps_order(pg_store: PostgresRecordStore) -> None:
    project = await pg_store.create_project("demo")
    resource = await pg_store.create_resource(_resource(project.id))

    blobs = [{"id": str(i), "n": i} for i in range(1, 251)]
    assert await pg_store.replace_records(resource.id, blobs) == 250
    assert await pg_store.count_records(resource.id) == 250

    records = await pg_store.list_records(resource.id)
    assert [r.data["n"] for r in records] == list(range(1, 251))

    found = await pg_store.find_record(resource.id, "42")
    assert found is not None
    assert found.data == {"id": "42", "n": 42}

    await pg_store.replace_records(resource.id, blobs[:2])
    assert await pg_store.count_records(resource.id) == 2


@pytest.mark.asyncio
async def test_reassign_record_ids(pg_store: PostgresRecordStore) -> None:
    project = await pg_store.create_project("demo")
    resource = await pg_store.create_resource(_resource(project.id))
    await pg_store.replace_records(resource.id, [{"id": "a"}, {"id": "b"}])

    records = await pg_store.list_records(resource.id)
    await pg_store.reassign_record_ids(resource.id, [(r.storage_id, {"id": "x" + r.data["id"]}) for r in records])

    assert await pg_store.find_record(resource.id, "a") is None
    assert await pg_store.find_record(resource.id, "xa") is not None


@pytest.mark.asyncio
async def test_delete_project_cascades(pg_store: PostgresRecordStore) -> None:
    project = await pg_store.create_project("demo")
    resource = await pg_store.create_resource(_resource(project.id))
    await pg_store.replace_records(resource.id, [{"id": "1"}])

    assert await pg_store.delete_project(project.id) is True
    assert await pg_store.get_resource(resource.id) is None
    assert await pg_store.count_records(resource.id) == 0


@pytest.mark.asyncio
async def test_endpoint_flow(pg_store: PostgresRecordStore) -> None:
    fake = Faker()
    fake.seed_instance(3)
    registry = build_default_registry(fake)
    project = await ops.create_project(pg_store, "demo")
    await ops.create_resource(
        pg_store,
        registry,
        project.id,
        "users",
        template={"name": "$person.fullName"},
        count=3,
    )
    endpoint = ResourceEndpoint(pg_store, registry)

    created = await endpoint.create_record(project.id, "v1", "users", b'{"name": "Ada"}')
    assert created == {"id": "4", "name": "Ada"}

    updated = await endpoint.update_record(project.id, "v1", "users", "4", b'{"name": "Grace"}')
    assert updated == {"name": "Grace", "id": "4"}

    await endpoint.delete_record(project.id, "v1", "users", "1")
    listed = await endpoint.list_records(project.id, "v1", "users")
    assert [r["id"] for r in listed] == ["2", "3", "4"]
    assert await pg_store.ping() is True
