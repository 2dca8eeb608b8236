"""Request-time logic behind ``/{project_id}/api/{version}/{resource_name}``.

Every operation resolves the resource, checks the method flag for the verb,
and then works on records addressed by the external ``id`` stored inside
each JSON blob.
"""

from __future__ import annotations

import json
from typing import Any

from mockforge.core.errors import InvalidFields, InvalidJSON, MethodNotAllowed, RecordNotFound, ResourceNotFound
from mockforge.core.ids import next_external_id
from mockforge.core.ports.store import RecordStore
from mockforge.core.registry import GeneratorRegistry
from mockforge.core.shaping import order_record, shape_response
from mockforge.core.templates import compile_template
from mockforge.models import Record, Resource


def parse_json_body(raw: bytes) -> dict[str, Any]:
    """Decode a request body that must be a JSON object."""
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InvalidJSON() from exc
    if not isinstance(body, dict):
        raise InvalidJSON("Request body must be a JSON object")
    return body


class ResourceEndpoint:
    def __init__(self, store: RecordStore, registry: GeneratorRegistry) -> None:
        self.store = store
        self.registry = registry

    async def _resolve(self, project_id: str, version: str, resource_name: str, flag: str, method: str) -> Resource:
        resource = await self.store.find_resource(project_id, resource_name)
        if resource is None or resource.version != version:
            raise ResourceNotFound(resource_name)
        if not resource.allows(flag):
            raise MethodNotAllowed(method)
        return resource

    async def _find(self, resource: Resource, record_id: str) -> Record:
        record = await self.store.find_record(resource.id, record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    async def list_records(self, project_id: str, version: str, resource_name: str) -> Any:
        resource = await self._resolve(project_id, version, resource_name, "allow_get", "GET")
        records = await self.store.list_records(resource.id)
        ordered = [order_record(record.data, resource.template.keys()) for record in records]
        return shape_response(resource.endpoint_template, ordered)

    async def get_record(self, project_id: str, version: str, resource_name: str, record_id: str) -> dict[str, Any]:
        resource = await self._resolve(project_id, version, resource_name, "allow_get_by_id", "GET by ID")
        record = await self._find(resource, record_id)
        return record.data

    async def create_record(self, project_id: str, version: str, resource_name: str, raw_body: bytes) -> dict[str, Any]:
        resource = await self._resolve(project_id, version, resource_name, "allow_post", "POST")
        body = parse_json_body(raw_body)

        invalid = [key for key in body if key not in resource.template]
        if invalid:
            raise InvalidFields(invalid, resource.template.keys())

        compiled = compile_template(body, self.registry)
        position = await self.store.count_records(resource.id) + 1
        new_id = next_external_id(resource.use_incremental_ids, position)
        # Deletes can leave the count behind an ID that is still taken.
        while await self.store.find_record(resource.id, new_id) is not None:
            position += 1
            new_id = next_external_id(resource.use_incremental_ids, position)

        record = await self.store.create_record(resource.id, {"id": new_id, **compiled})
        return record.data

    async def update_record(
        self,
        project_id: str,
        version: str,
        resource_name: str,
        record_id: str,
        raw_body: bytes,
    ) -> dict[str, Any]:
        resource = await self._resolve(project_id, version, resource_name, "allow_put", "PUT")
        body = parse_json_body(raw_body)
        existing = await self._find(resource, record_id)

        compiled = compile_template(body, self.registry)
        record = await self.store.update_record(existing.storage_id, {**compiled, "id": record_id})
        return record.data

    async def delete_record(self, project_id: str, version: str, resource_name: str, record_id: str) -> None:
        resource = await self._resolve(project_id, version, resource_name, "allow_delete", "DELETE")
        record = await self._find(resource, record_id)
        await self.store.delete_record(record.storage_id)
