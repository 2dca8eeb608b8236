"""Public mock endpoints: ``/{project_id}/api/{version}/{resource_name}[/{record_id}]``."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from mockforge.api.dependencies import get_endpoint
from mockforge.core.endpoint import ResourceEndpoint

router = APIRouter(tags=["mock"])

_COLLECTION = "/{project_id}/api/{version}/{resource_name}"
_ITEM = _COLLECTION + "/{record_id}"


@router.get(_COLLECTION)
async def list_records(
    project_id: str,
    version: str,
    resource_name: str,
    endpoint: ResourceEndpoint = Depends(get_endpoint),
) -> JSONResponse:
    """All records, shaped by the resource's endpoint template."""
    return JSONResponse(await endpoint.list_records(project_id, version, resource_name))


@router.get(_ITEM)
async def get_record(
    project_id: str,
    version: str,
    resource_name: str,
    record_id: str,
    endpoint: ResourceEndpoint = Depends(get_endpoint),
) -> JSONResponse:
    return JSONResponse(await endpoint.get_record(project_id, version, resource_name, record_id))


@router.post(_COLLECTION)
async def create_record(
    request: Request,
    project_id: str,
    version: str,
    resource_name: str,
    endpoint: ResourceEndpoint = Depends(get_endpoint),
) -> JSONResponse:
    data = await endpoint.create_record(project_id, version, resource_name, await request.body())
    return JSONResponse(data, status_code=status.HTTP_201_CREATED)


@router.put(_ITEM)
async def update_record(
    request: Request,
    project_id: str,
    version: str,
    resource_name: str,
    record_id: str,
    endpoint: ResourceEndpoint = Depends(get_endpoint),
) -> JSONResponse:
    """Replace a record's blob; its ``id`` always stays the one in the path."""
    data = await endpoint.update_record(project_id, version, resource_name, record_id, await request.body())
    return JSONResponse(data)


@router.delete(_ITEM)
async def delete_record(
    project_id: str,
    version: str,
    resource_name: str,
    record_id: str,
    endpoint: ResourceEndpoint = Depends(get_endpoint),
) -> Response:
    await endpoint.delete_record(project_id, version, resource_name, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
