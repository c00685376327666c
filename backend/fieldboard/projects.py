"""Project lifecycle: list, status transitions, rename, delete, create.

Every non-draft field config owned by a user is expected to have a project
entry. Missing entries are backfilled lazily on read.
"""

import uuid
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

from .constants import (
    BACKFILL_NAME_PREFIX,
    DEFAULT_PROJECT_NAME,
    STAGE_ELEMENT_KINDS,
    ProjectStatus,
)
from .exceptions import ResourceNotFoundError, ValidationError
from .models import FieldConfig, ProjectManagerEntry, get_datetime_utc
from .queries import get_owned_config, has_project_entry
from .schemas import ProjectDetail, ProjectRead, ProjectSummary
from .share_codes import allocate_field_config

logger = structlog.get_logger()


def infer_stage_count(payload: Any) -> int:
    """Default stage plus one per distinct ``stageParentTag`` in the canvas."""
    if not isinstance(payload, list):
        return 1

    tags: set[str] = set()
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        element = next(
            (entry[kind] for kind in STAGE_ELEMENT_KINDS if entry.get(kind) is not None),
            None,
        )
        if not isinstance(element, dict):
            continue
        tag = element.get("stageParentTag")
        if isinstance(tag, str) and tag.strip():
            tags.add(tag.strip())

    return max(1, len(tags) + 1)


def default_project_name(content_hash: str) -> str:
    return f"{BACKFILL_NAME_PREFIX}{content_hash[-4:]}"


def normalize_status(value: Any) -> ProjectStatus | None:
    if isinstance(value, str):
        try:
            return ProjectStatus(value.strip().lower())
        except ValueError:
            return None
    return None


def normalize_name(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def backfill_project_entries(db: Session, user_id: str) -> int:
    """Create entries for the user's final configs that lack one."""
    stmt = select(FieldConfig).where(
        FieldConfig.user_id == user_id,
        FieldConfig.is_draft.is_(False),
        ~has_project_entry(),
    )
    configs = list(db.scalars(stmt).all())
    if not configs:
        return 0

    for config in configs:
        db.add(
            ProjectManagerEntry(
                upload_id=config.upload_id,
                user_id=config.user_id,
                name=default_project_name(config.content_hash),
                status=ProjectStatus.ACTIVE.value,
            )
        )
    db.commit()
    logger.info("project_entries_backfilled", user_id=user_id, count=len(configs))
    return len(configs)


def ensure_project_entry(db: Session, config: FieldConfig) -> ProjectManagerEntry:
    """Return the entry for ``config``, inserting a default one if missing."""
    entry = db.get(ProjectManagerEntry, config.upload_id)
    if entry is not None:
        return entry

    entry = ProjectManagerEntry(
        upload_id=config.upload_id,
        user_id=config.user_id,
        name=default_project_name(config.content_hash),
        status=ProjectStatus.ACTIVE.value,
    )
    db.add(entry)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request may have inserted it first
        db.rollback()
        existing = db.get(ProjectManagerEntry, config.upload_id)
        if existing is None:
            raise
        return existing
    db.refresh(entry)
    logger.info("project_entry_created", upload_id=str(config.upload_id), name=entry.name)
    return entry


def _backfill_one(db: Session, user_id: str, upload_id: uuid.UUID) -> None:
    config = get_owned_config(db, user_id, upload_id)
    if config is not None:
        ensure_project_entry(db, config)


def _owned_entry_query(user_id: str, upload_id: uuid.UUID):
    return (
        select(ProjectManagerEntry, FieldConfig)
        .join(FieldConfig, FieldConfig.upload_id == ProjectManagerEntry.upload_id)
        .where(
            ProjectManagerEntry.upload_id == upload_id,
            ProjectManagerEntry.user_id == user_id,
            FieldConfig.user_id == user_id,
        )
    )


def list_projects(db: Session, user_id: str, status: str | None = None) -> list[ProjectSummary]:
    resolved = normalize_status(status) or ProjectStatus.ACTIVE
    backfill_project_entries(db, user_id)

    stmt = (
        select(ProjectManagerEntry, FieldConfig)
        .join(FieldConfig, FieldConfig.upload_id == ProjectManagerEntry.upload_id)
        .where(
            ProjectManagerEntry.user_id == user_id,
            FieldConfig.user_id == user_id,
            FieldConfig.is_draft.is_(False),
            ProjectManagerEntry.status == resolved.value,
        )
        .order_by(ProjectManagerEntry.updated_at.desc())
    )
    return [
        ProjectSummary(
            upload_id=entry.upload_id,
            name=entry.name,
            status=entry.status,
            updated_at=entry.updated_at,
            config_updated_at=config.updated_at,
            stage_count=infer_stage_count(config.payload),
            background_image=config.background_image,
        )
        for entry, config in db.execute(stmt).all()
    ]


def get_project(db: Session, user_id: str, upload_id: uuid.UUID) -> ProjectDetail:
    _backfill_one(db, user_id, upload_id)

    row = db.execute(_owned_entry_query(user_id, upload_id)).first()
    if row is None:
        raise ResourceNotFoundError("Project")

    entry, config = row
    return ProjectDetail(
        upload_id=entry.upload_id,
        name=entry.name,
        status=entry.status,
        updated_at=entry.updated_at,
        content_hash=config.content_hash,
        is_draft=config.is_draft,
    )


def update_project(
    db: Session,
    user_id: str,
    upload_id: uuid.UUID,
    name: Any = None,
    status: Any = None,
) -> ProjectRead:
    """Rename and/or move a project. Unset fields keep their value."""
    next_name = normalize_name(name)
    next_status = normalize_status(status)
    if next_name is None and next_status is None:
        raise ValidationError("No valid updates provided.")

    _backfill_one(db, user_id, upload_id)

    row = db.execute(_owned_entry_query(user_id, upload_id)).first()
    if row is None:
        raise ResourceNotFoundError("Project")

    entry = row[0]
    previous_status = entry.status
    if next_name is not None:
        entry.name = next_name
    if next_status is not None:
        entry.status = next_status.value
    entry.updated_at = get_datetime_utc()
    db.commit()
    db.refresh(entry)

    if entry.status != previous_status:
        logger.info(
            "project_status_changed",
            upload_id=str(upload_id),
            from_status=previous_status,
            to_status=entry.status,
        )
    else:
        logger.info("project_updated", upload_id=str(upload_id))

    return ProjectRead(
        upload_id=entry.upload_id,
        name=entry.name,
        status=entry.status,
        updated_at=entry.updated_at,
    )


def delete_project(db: Session, user_id: str, upload_id: uuid.UUID) -> None:
    """Delete the config; its project entry goes with it (ON DELETE CASCADE)."""
    result = db.execute(
        delete(FieldConfig).where(
            FieldConfig.upload_id == upload_id,
            FieldConfig.user_id == user_id,
        )
    )
    if not result.rowcount:
        db.rollback()
        raise ResourceNotFoundError("Project")
    db.commit()
    logger.info("project_deleted", upload_id=str(upload_id), user_id=user_id)


def create_project(db: Session, user_id: str, name: Any = None) -> ProjectSummary:
    project_name = normalize_name(name) or DEFAULT_PROJECT_NAME

    config = allocate_field_config(
        db,
        lambda code: FieldConfig(
            user_id=user_id,
            payload=[],
            background_image=None,
            content_hash=code,
            is_draft=False,
        ),
    )

    entry = ProjectManagerEntry(
        upload_id=config.upload_id,
        user_id=user_id,
        name=project_name,
        status=ProjectStatus.ACTIVE.value,
    )
    db.add(entry)
    db.commit()

    logger.info("project_created", upload_id=str(config.upload_id), name=project_name)

    return ProjectSummary(
        upload_id=config.upload_id,
        name=project_name,
        status=ProjectStatus.ACTIVE.value,
        updated_at=config.updated_at,
        config_updated_at=config.updated_at,
        stage_count=infer_stage_count(config.payload),
        background_image=config.background_image,
    )
