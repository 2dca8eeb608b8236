from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from mockforge.models import CamelModel, Project, Resource, TemplateField

MAX_GENERATE_COUNT = 1000


class ProjectCreateRequest(BaseModel):
    name: str = Field(min_length=1)


class ProjectDetail(Project):
    resources: list[Resource] = []


class ResourceCreateRequest(CamelModel):
    """POST /projects/{project_id}/resources.

    Either ``template`` (materialized JSON) or ``fields`` (authoring form).
    """

    name: str
    version: str = "v1"
    template: dict[str, Any] | None = None
    fields: list[TemplateField] | None = None
    count: int = Field(default=0, ge=0, le=MAX_GENERATE_COUNT)
    use_incremental_ids: bool = True
    allow_get: bool = True
    allow_get_by_id: bool = True
    allow_post: bool = True
    allow_put: bool = True
    allow_delete: bool = True


class ResourceDetail(Resource):
    record_count: int = 0


class EndpointTemplateRequest(BaseModel):
    template: Any = None


class IdTypeRequest(CamelModel):
    use_incremental_ids: bool


class TemplateUpdateRequest(BaseModel):
    template: dict[str, Any]
    count: int = Field(default=10, ge=0, le=MAX_GENERATE_COUNT)


class GenerateRequest(BaseModel):
    count: int = Field(ge=0, le=MAX_GENERATE_COUNT)


class SuccessResponse(BaseModel):
    success: bool = True


class GenerateResponse(SuccessResponse):
    count: int


class HealthResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = "ok"
    database: str = "up"
    store: str
