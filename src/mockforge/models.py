from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

METHOD_FLAGS = ("allow_get", "allow_get_by_id", "allow_post", "allow_put", "allow_delete")

MOCK_DATA = "$mockData"
COUNT = "$count"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TemplateField(CamelModel):
    """One node of the authoring form of a resource template."""

    key: str
    type: Literal["simple", "object", "array"]
    array_type: Literal["simple", "object"] | None = None
    module: str | None = None
    method: str | None = None
    params: list[str] | None = None
    fields: list["TemplateField"] | None = None
    items: "TemplateField | None" = None
    count: int | None = Field(default=None, ge=1, le=10)


TemplateField.model_rebuild()  # necessary for recursive types


class Project(CamelModel):
    id: str
    name: str
    created_at: datetime


class Resource(CamelModel):
    id: str
    project_id: str
    name: str
    version: str
    endpoint: str
    template: dict[str, Any]
    endpoint_template: Any = MOCK_DATA
    allow_get: bool = True
    allow_get_by_id: bool = True
    allow_post: bool = True
    allow_put: bool = True
    allow_delete: bool = True
    use_incremental_ids: bool = True
    created_at: datetime
    updated_at: datetime

    def allows(self, flag: str) -> bool:
        return bool(getattr(self, flag))


class Record(CamelModel):
    storage_id: str
    resource_id: str
    data: dict[str, Any]
    created_at: datetime

    @property
    def external_id(self) -> Any:
        return self.data.get("id")
