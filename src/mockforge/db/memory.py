import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from mockforge.core.errors import ResourceConflict
from mockforge.models import Project, Record, Resource


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _index_key(resource_id: str, data: dict[str, Any]) -> tuple[str, str] | None:
    external_id = data.get("id")
    if external_id is None:
        return None
    return (resource_id, str(external_id))


class InMemoryRecordStore:
    """Dict-backed record store.

    Records keep insertion order; ``records_by_external_id`` is the secondary
    index from ``(resource_id, data["id"])`` to the storage id.
    """

    def __init__(self) -> None:
        self.projects: dict[str, Project] = {}
        self.resources: dict[str, Resource] = {}
        self.records: dict[str, Record] = {}
        self.records_by_external_id: dict[tuple[str, str], str] = {}

    async def ensure_ready(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def dispose(self) -> None:
        pass

    # --- projects ---

    async def create_project(self, name: str) -> Project:
        project = Project(id=str(uuid.uuid4()), name=name, created_at=_now())
        self.projects[project.id] = project
        return project

    async def get_project(self, project_id: str) -> Project | None:
        return self.projects.get(project_id)

    async def list_projects(self) -> list[Project]:
        return sorted(self.projects.values(), key=lambda p: p.created_at, reverse=True)

    async def delete_project(self, project_id: str) -> bool:
        if self.projects.pop(project_id, None) is None:
            return False
        for resource in [r for r in self.resources.values() if r.project_id == project_id]:
            await self.delete_resource(resource.id)
        return True

    # --- resources ---

    async def create_resource(self, resource: Resource) -> Resource:
        if await self.find_resource(resource.project_id, resource.name) is not None:
            raise ResourceConflict(resource.name)
        self.resources[resource.id] = resource
        return resource

    async def get_resource(self, resource_id: str) -> Resource | None:
        return self.resources.get(resource_id)

    async def find_resource(self, project_id: str, name: str) -> Resource | None:
        for resource in self.resources.values():
            if resource.project_id == project_id and resource.name == name:
                return resource
        return None

    async def list_resources(self, project_id: str | None = None) -> list[Resource]:
        resources = [r for r in self.resources.values() if project_id is None or r.project_id == project_id]
        return sorted(resources, key=lambda r: r.created_at, reverse=True)

    async def update_resource(self, resource_id: str, **changes: Any) -> Resource | None:
        resource = self.resources.get(resource_id)
        if resource is None:
            return None
        updated = resource.model_copy(update={**changes, "updated_at": _now()})
        self.resources[resource_id] = updated
        return updated

    async def delete_resource(self, resource_id: str) -> Resource | None:
        resource = self.resources.pop(resource_id, None)
        if resource is not None:
            self._drop_records(resource_id)
        return resource

    # --- records ---

    async def list_records(self, resource_id: str) -> list[Record]:
        return [r for r in self.records.values() if r.resource_id == resource_id]

    async def count_records(self, resource_id: str) -> int:
        return sum(1 for r in self.records.values() if r.resource_id == resource_id)

    async def find_record(self, resource_id: str, external_id: str) -> Record | None:
        storage_id = self.records_by_external_id.get((resource_id, external_id))
        return self.records.get(storage_id) if storage_id is not None else None

    async def create_record(self, resource_id: str, data: dict[str, Any]) -> Record:
        record = Record(storage_id=str(uuid.uuid4()), resource_id=resource_id, data=data, created_at=_now())
        self._put(record)
        return record

    async def update_record(self, storage_id: str, data: dict[str, Any]) -> Record:
        existing = self.records[storage_id]
        self._unindex(existing)
        record = existing.model_copy(update={"data": data})
        self._put(record)
        return record

    async def delete_record(self, storage_id: str) -> None:
        record = self.records.pop(storage_id, None)
        if record is not None:
            self._unindex(record)

    async def replace_records(self, resource_id: str, blobs: Sequence[dict[str, Any]]) -> int:
        self._drop_records(resource_id)
        for data in blobs:
            self._put(Record(storage_id=str(uuid.uuid4()), resource_id=resource_id, data=data, created_at=_now()))
        return len(blobs)

    async def reassign_record_ids(self, resource_id: str, updates: Sequence[tuple[str, dict[str, Any]]]) -> None:
        for storage_id, _ in updates:
            self._unindex(self.records[storage_id])
        for storage_id, data in updates:
            self._put(self.records[storage_id].model_copy(update={"data": data}))

    def _put(self, record: Record) -> None:
        self.records[record.storage_id] = record
        key = _index_key(record.resource_id, record.data)
        if key is not None:
            self.records_by_external_id.setdefault(key, record.storage_id)

    def _unindex(self, record: Record) -> None:
        key = _index_key(record.resource_id, record.data)
        if key is not None and self.records_by_external_id.get(key) == record.storage_id:
            del self.records_by_external_id[key]

    def _drop_records(self, resource_id: str) -> None:
        for storage_id in [sid for sid, r in self.records.items() if r.resource_id == resource_id]:
            self._unindex(self.records.pop(storage_id))
