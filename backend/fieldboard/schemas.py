import uuid
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Field configs


class FieldConfigSave(CamelModel):
    payload: Any = Field(...)  # canvas elements
    editor_state: Any = None
    background_image: str | None = None
    upload_id: str | None = None
    is_draft: bool = True

    @field_validator("payload")
    @classmethod
    def payload_required(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("payload is required")
        return v

    @field_validator("upload_id")
    @classmethod
    def blank_upload_id_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class SaveResult(CamelModel):
    id: uuid.UUID
    upload_id: uuid.UUID
    content_hash: str
    is_draft: bool
    created_at: datetime
    updated_at: datetime
    deduped: bool = False


class FieldConfigRead(CamelModel):
    id: uuid.UUID
    upload_id: uuid.UUID
    payload: Any
    editor_state: Any = None
    background_image: str | None = None
    content_hash: str
    is_draft: bool
    created_at: datetime
    updated_at: datetime


class FieldConfigEnvelope(CamelModel):
    config: FieldConfigRead | None = None


class PublicFieldConfig(CamelModel):
    upload_id: uuid.UUID
    payload: Any
    background_image: str | None = None
    updated_at: datetime


class PublicFieldConfigEnvelope(CamelModel):
    config: PublicFieldConfig


class PublicBackgroundImage(CamelModel):
    upload_id: uuid.UUID
    background_image: str | None = None
    updated_at: datetime


# Projects


class ProjectCreate(CamelModel):
    name: str | None = None


class ProjectUpdate(CamelModel):
    name: str | None = None
    status: str | None = None


class ProjectRead(CamelModel):
    upload_id: uuid.UUID
    name: str
    status: str
    updated_at: datetime


class ProjectSummary(ProjectRead):
    """Project list item."""

    config_updated_at: datetime | None = None
    stage_count: int = 1
    background_image: str | None = None


class ProjectDetail(ProjectRead):
    content_hash: str
    is_draft: bool


class ProjectEnvelope(CamelModel, Generic[T]):
    project: T


class ProjectList(CamelModel):
    projects: list[ProjectSummary]


class DeleteResult(CamelModel):
    ok: bool = True


# Users


class EmailExists(CamelModel):
    exists: bool
