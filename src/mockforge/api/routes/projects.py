from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from mockforge.api.dependencies import get_registry, get_store
from mockforge.api.schemas import ProjectCreateRequest, ProjectDetail, ResourceCreateRequest
from mockforge.core import resources as ops
from mockforge.core.ports.store import RecordStore
from mockforge.core.registry import GeneratorRegistry
from mockforge.models import METHOD_FLAGS, Project, Resource

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreateRequest,
    store: RecordStore = Depends(get_store),
) -> Project:
    return await ops.create_project(store, body.name)


@router.get("", response_model=list[Project])
async def list_projects(store: RecordStore = Depends(get_store)) -> list[Project]:
    return await store.list_projects()


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(project_id: str, store: RecordStore = Depends(get_store)) -> ProjectDetail:
    project = await ops.get_project(store, project_id)
    resources = await store.list_resources(project_id)
    return ProjectDetail(**project.model_dump(), resources=resources)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, store: RecordStore = Depends(get_store)) -> Response:
    """Delete a project together with its resources and their records."""
    await ops.delete_project(store, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{project_id}/resources", response_model=Resource, status_code=status.HTTP_201_CREATED)
async def create_resource(
    project_id: str,
    body: ResourceCreateRequest,
    store: RecordStore = Depends(get_store),
    registry: GeneratorRegistry = Depends(get_registry),
) -> Resource:
    return await ops.create_resource(
        store,
        registry,
        project_id,
        name=body.name,
        version=body.version,
        template=body.template,
        fields=body.fields,
        count=body.count,
        flags=body.model_dump(by_alias=True, include=set(METHOD_FLAGS)),
        use_incremental_ids=body.use_incremental_ids,
    )


@router.get("/{project_id}/resources", response_model=list[Resource])
async def list_resources(project_id: str, store: RecordStore = Depends(get_store)) -> list[Resource]:
    return await ops.list_resources(store, project_id)
