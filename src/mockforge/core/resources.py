"""Project and resource configuration operations used by the management API and the CLI."""

from __future__ import annotations

import logging
import re
import time
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from pydantic.alias_generators import to_camel

from mockforge.core.errors import InvalidFields, InvalidTemplate, ProjectNotFound, ResourceNotFound
from mockforge.core.ids import next_external_id, reassign_ids
from mockforge.core.ports.store import RecordStore
from mockforge.core.registry import GeneratorRegistry
from mockforge.core.templates import build_template, compile_template, to_slug
from mockforge.models import METHOD_FLAGS, MOCK_DATA, Project, Resource, TemplateField

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
VERSION_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

# Method flags are addressed by their camelCase wire names only.
_FLAG_NAMES: dict[str, str] = {to_camel(flag): flag for flag in METHOD_FLAGS}


async def create_project(store: RecordStore, name: str) -> Project:
    if not name.strip():
        raise InvalidTemplate("Project name must not be empty")
    return await store.create_project(name.strip())


async def get_project(store: RecordStore, project_id: str) -> Project:
    project = await store.get_project(project_id)
    if project is None:
        raise ProjectNotFound(project_id)
    return project


async def delete_project(store: RecordStore, project_id: str) -> None:
    if not await store.delete_project(project_id):
        raise ProjectNotFound(project_id)


async def get_resource(store: RecordStore, resource_id: str) -> Resource:
    resource = await store.get_resource(resource_id)
    if resource is None:
        raise ResourceNotFound(resource_id)
    return resource


def _validate_template(template: Any) -> dict[str, Any]:
    if not isinstance(template, dict):
        raise InvalidTemplate("Template must be a JSON object")
    return template


async def create_resource(
    store: RecordStore,
    registry: GeneratorRegistry,
    project_id: str,
    name: str,
    version: str = "v1",
    template: Mapping[str, Any] | None = None,
    fields: Sequence[TemplateField] | None = None,
    count: int = 0,
    flags: Mapping[str, bool] | None = None,
    use_incremental_ids: bool = True,
) -> Resource:
    """Create a resource and optionally generate ``count`` records for it.

    The template comes either from ``template`` (materialized JSON form) or
    from ``fields`` (authoring form); ``fields`` wins when both are given.
    """
    await get_project(store, project_id)

    slug = to_slug(name)
    if not NAME_PATTERN.match(slug):
        raise InvalidTemplate(f"Invalid resource name: {name!r}")
    if not VERSION_PATTERN.match(version):
        raise InvalidTemplate(f"Invalid version: {version!r}")

    if fields is not None:
        resolved_template = build_template(fields)
    else:
        resolved_template = _validate_template(dict(template or {}))

    now = datetime.now(timezone.utc)
    resource = Resource(
        id=str(uuid.uuid4()),
        project_id=project_id,
        name=slug,
        version=version,
        endpoint=f"{version}/{slug}",
        template=resolved_template,
        endpoint_template=MOCK_DATA,
        use_incremental_ids=use_incremental_ids,
        created_at=now,
        updated_at=now,
        **_normalise_flags(flags or {}),
    )
    resource = await store.create_resource(resource)
    logger.info("created resource %s (%s) in project %s", resource.endpoint, resource.id, project_id)

    if count:
        await generate_data(store, registry, resource.id, count)
    return resource


async def list_resources(store: RecordStore, project_id: str | None = None) -> list[Resource]:
    if project_id is not None:
        await get_project(store, project_id)
    return await store.list_resources(project_id)


async def delete_resource(store: RecordStore, resource_id: str) -> Resource:
    resource = await store.delete_resource(resource_id)
    if resource is None:
        raise ResourceNotFound(resource_id)
    logger.info("deleted resource %s (%s)", resource.endpoint, resource.id)
    return resource


def generate_records(resource: Resource, registry: GeneratorRegistry, count: int) -> list[dict[str, Any]]:
    """Compile the resource template ``count`` times, assigning external IDs."""
    blobs: list[dict[str, Any]] = []
    for position in range(1, count + 1):
        external_id = next_external_id(resource.use_incremental_ids, position)
        blobs.append({"id": external_id, **compile_template(resource.template, registry)})
    return blobs


async def generate_data(store: RecordStore, registry: GeneratorRegistry, resource_id: str, count: int) -> int:
    """Replace every record of the resource with ``count`` freshly generated ones."""
    if count < 0:
        raise InvalidTemplate("Record count must not be negative")
    resource = await get_resource(store, resource_id)

    t0 = time.perf_counter()
    blobs = generate_records(resource, registry, count)
    t_compile = time.perf_counter() - t0

    await store.replace_records(resource.id, blobs)
    logger.info(
        "generated %d records for %s in %.2fs (compile=%.2fs)",
        count,
        resource.endpoint,
        time.perf_counter() - t0,
        t_compile,
    )
    return count


async def update_template(
    store: RecordStore,
    registry: GeneratorRegistry,
    resource_id: str,
    template: Any,
    count: int,
) -> Resource:
    """Store a new data template and regenerate ``count`` records from it."""
    await get_resource(store, resource_id)
    resource = await store.update_resource(resource_id, template=_validate_template(template))
    if resource is None:
        raise ResourceNotFound(resource_id)
    await generate_data(store, registry, resource_id, count)
    return resource


async def update_endpoint_template(store: RecordStore, resource_id: str, endpoint_template: Any) -> Resource:
    resource = await store.update_resource(resource_id, endpoint_template=endpoint_template)
    if resource is None:
        raise ResourceNotFound(resource_id)
    return resource


def _normalise_flags(updates: Mapping[str, Any]) -> dict[str, bool]:
    invalid = [key for key in updates if key not in _FLAG_NAMES]
    if invalid:
        raise InvalidFields(invalid, _FLAG_NAMES)
    not_bool = [key for key, value in updates.items() if not isinstance(value, bool)]
    if not_bool:
        raise InvalidTemplate(f"Method flags must be booleans: {', '.join(not_bool)}")
    return {_FLAG_NAMES[key]: value for key, value in updates.items()}


async def update_methods(store: RecordStore, resource_id: str, updates: Mapping[str, Any]) -> Resource:
    """Toggle any subset of the five HTTP method flags."""
    changes = _normalise_flags(updates)
    resource = await store.update_resource(resource_id, **changes)
    if resource is None:
        raise ResourceNotFound(resource_id)
    return resource


async def update_id_strategy(store: RecordStore, resource_id: str, use_incremental_ids: bool) -> Resource:
    """Switch the ID strategy and rewrite the external ID of every existing record."""
    await get_resource(store, resource_id)
    resource = await store.update_resource(resource_id, use_incremental_ids=use_incremental_ids)
    if resource is None:
        raise ResourceNotFound(resource_id)

    records = await store.list_records(resource_id)
    await store.reassign_record_ids(resource_id, reassign_ids(records, use_incremental_ids))
    logger.info(
        "reassigned %d record ids of %s (incremental=%s)",
        len(records),
        resource.endpoint,
        use_incremental_ids,
    )
    return resource
