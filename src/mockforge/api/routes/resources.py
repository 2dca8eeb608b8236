"""Management API for a single resource: configuration toggles and data regeneration."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from mockforge.api.dependencies import get_registry, get_store
from mockforge.api.schemas import (
    EndpointTemplateRequest,
    GenerateRequest,
    GenerateResponse,
    IdTypeRequest,
    ResourceDetail,
    SuccessResponse,
    TemplateUpdateRequest,
)
from mockforge.core import resources as ops
from mockforge.core.curl import resource_curls
from mockforge.core.ports.store import RecordStore
from mockforge.core.registry import GeneratorRegistry
from mockforge.models import Resource

router = APIRouter(prefix="/resources", tags=["resources"])


@router.get("/{resource_id}", response_model=ResourceDetail)
async def get_resource(resource_id: str, store: RecordStore = Depends(get_store)) -> ResourceDetail:
    resource = await ops.get_resource(store, resource_id)
    record_count = await store.count_records(resource_id)
    return ResourceDetail(**resource.model_dump(), record_count=record_count)


@router.delete("/{resource_id}", response_model=Resource)
async def delete_resource(resource_id: str, store: RecordStore = Depends(get_store)) -> Resource:
    return await ops.delete_resource(store, resource_id)


@router.put("/{resource_id}/endpoint-template", response_model=Resource)
async def update_endpoint_template(
    resource_id: str,
    body: EndpointTemplateRequest,
    store: RecordStore = Depends(get_store),
) -> Resource:
    return await ops.update_endpoint_template(store, resource_id, body.template)


@router.put("/{resource_id}/methods", response_model=Resource)
async def update_methods(
    resource_id: str,
    updates: dict[str, Any] = Body(...),
    store: RecordStore = Depends(get_store),
) -> Resource:
    """Toggle any of ``allowGet``, ``allowGetById``, ``allowPost``, ``allowPut``, ``allowDelete``."""
    return await ops.update_methods(store, resource_id, updates)


@router.put("/{resource_id}/id-type", response_model=SuccessResponse)
async def update_id_type(
    resource_id: str,
    body: IdTypeRequest,
    store: RecordStore = Depends(get_store),
) -> SuccessResponse:
    """Switch between sequential and random IDs, rewriting the IDs of existing records."""
    await ops.update_id_strategy(store, resource_id, body.use_incremental_ids)
    return SuccessResponse()


@router.put("/{resource_id}/template", response_model=SuccessResponse)
async def update_template(
    resource_id: str,
    body: TemplateUpdateRequest,
    store: RecordStore = Depends(get_store),
    registry: GeneratorRegistry = Depends(get_registry),
) -> SuccessResponse:
    """Store a new data template and regenerate the resource's records from it."""
    await ops.update_template(store, registry, resource_id, body.template, body.count)
    return SuccessResponse()


@router.post("/{resource_id}/generate", response_model=GenerateResponse)
async def generate(
    resource_id: str,
    body: GenerateRequest,
    store: RecordStore = Depends(get_store),
    registry: GeneratorRegistry = Depends(get_registry),
) -> GenerateResponse:
    count = await ops.generate_data(store, registry, resource_id, body.count)
    return GenerateResponse(count=count)


@router.get("/{resource_id}/curl")
async def curl_examples(
    resource_id: str,
    request: Request,
    store: RecordStore = Depends(get_store),
) -> dict[str, str]:
    resource = await ops.get_resource(store, resource_id)
    return resource_curls(
        str(request.base_url),
        resource.project_id,
        resource.version,
        resource.name,
        resource.template,
    )
