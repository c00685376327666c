"""Shared lookups over field configs."""

import uuid

from sqlalchemy import Select, exists, select
from sqlalchemy.orm import Session

from .exceptions import ResourceNotFoundError, ValidationError
from .models import FieldConfig, ProjectManagerEntry


def parse_upload_id(raw: str | None, resource: str = "Config") -> uuid.UUID:
    """Parse a path/body upload id.

    Blank ids are a client error; anything that is not a UUID cannot match a
    row, so it is reported as not found.
    """
    value = (raw or "").strip()
    if not value:
        raise ValidationError("Invalid upload id.")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ResourceNotFoundError(resource) from None


def get_owned_config(db: Session, user_id: str, upload_id: uuid.UUID) -> FieldConfig | None:
    stmt = select(FieldConfig).where(
        FieldConfig.upload_id == upload_id,
        FieldConfig.user_id == user_id,
    )
    return db.scalars(stmt).first()


def get_config_by_upload_id(db: Session, upload_id: uuid.UUID) -> FieldConfig | None:
    return db.scalars(select(FieldConfig).where(FieldConfig.upload_id == upload_id)).first()


def has_project_entry():
    return exists().where(ProjectManagerEntry.upload_id == FieldConfig.upload_id)


def draft_slot_query(user_id: str) -> Select:
    """User's drafts that are not tied to a project, newest first."""
    return (
        select(FieldConfig)
        .where(
            FieldConfig.user_id == user_id,
            FieldConfig.is_draft.is_(True),
            ~has_project_entry(),
        )
        .order_by(FieldConfig.updated_at.desc(), FieldConfig.created_at.desc())
    )
