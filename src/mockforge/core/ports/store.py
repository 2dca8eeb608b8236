from collections.abc import Sequence
from typing import Any, Protocol

from mockforge.models import Project, Record, Resource


class RecordStore(Protocol):
    async def ensure_ready(self) -> None: ...

    async def ping(self) -> bool: ...

    async def dispose(self) -> None: ...

    async def create_project(self, name: str) -> Project: ...

    async def get_project(self, project_id: str) -> Project | None: ...

    async def list_projects(self) -> list[Project]: ...

    async def delete_project(self, project_id: str) -> bool: ...

    async def create_resource(self, resource: Resource) -> Resource: ...

    async def get_resource(self, resource_id: str) -> Resource | None: ...

    async def find_resource(self, project_id: str, name: str) -> Resource | None: ...

    async def list_resources(self, project_id: str | None = None) -> list[Resource]: ...

    async def update_resource(self, resource_id: str, **changes: Any) -> Resource | None: ...

    async def delete_resource(self, resource_id: str) -> Resource | None: ...

    async def list_records(self, resource_id: str) -> list[Record]: ...

    async def count_records(self, resource_id: str) -> int: ...

    async def find_record(self, resource_id: str, external_id: str) -> Record | None: ...

    async def create_record(self, resource_id: str, data: dict[str, Any]) -> Record: ...

    async def update_record(self, storage_id: str, data: dict[str, Any]) -> Record: ...

    async def delete_record(self, storage_id: str) -> None: ...

    async def replace_records(self, resource_id: str, blobs: Sequence[dict[str, Any]]) -> int: ...

    async def reassign_record_ids(self, resource_id: str, updates: Sequence[tuple[str, dict[str, Any]]]) -> None: ...
