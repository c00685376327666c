"""Field config saves and draft reconciliation.

Autosave fires often with unchanged content, so a draft save first compares
content fingerprints and skips the write when nothing changed. Drafts that
are not tied to a project share a single per-user slot: every draft save
leaves at most one such row behind. Drafts tied to a project (saved or
opened through their upload id) keep their own rows.
"""

import uuid

from sqlalchemy import delete, select
from sqlalchemy.orm import Session
import structlog

from .exceptions import ResourceNotFoundError
from .fingerprint import content_fingerprint
from .models import FieldConfig, get_datetime_utc
from .projects import ensure_project_entry
from .queries import (
    draft_slot_query,
    get_config_by_upload_id,
    get_owned_config,
    has_project_entry,
    parse_upload_id,
)
from .schemas import (
    FieldConfigRead,
    FieldConfigSave,
    PublicBackgroundImage,
    PublicFieldConfig,
    SaveResult,
)
from .share_codes import allocate_field_config

logger = structlog.get_logger()


def stored_fingerprint(config: FieldConfig, request: FieldConfigSave) -> str:
    """Stored payload and background image, incoming editor state and draft flag."""
    return content_fingerprint(
        config.payload,
        request.editor_state,
        config.background_image,
        request.is_draft,
    )


def to_save_result(config: FieldConfig, *, deduped: bool = False) -> SaveResult:
    return SaveResult(
        id=config.id,
        upload_id=config.upload_id,
        content_hash=config.content_hash,
        is_draft=config.is_draft,
        created_at=config.created_at,
        updated_at=config.updated_at,
        deduped=deduped,
    )


def to_field_config_read(config: FieldConfig) -> FieldConfigRead:
    return FieldConfigRead(
        id=config.id,
        upload_id=config.upload_id,
        payload=config.payload,
        editor_state=config.editor_state,
        background_image=config.background_image,
        content_hash=config.content_hash,
        is_draft=config.is_draft,
        created_at=config.created_at,
        updated_at=config.updated_at,
    )


def _apply(config: FieldConfig, request: FieldConfigSave) -> None:
    config.payload = request.payload
    config.editor_state = request.editor_state
    config.background_image = request.background_image
    config.is_draft = request.is_draft
    config.updated_at = get_datetime_utc()


def _allocate(db: Session, user_id: str, request: FieldConfigSave) -> FieldConfig:
    return allocate_field_config(
        db,
        lambda code: FieldConfig(
            user_id=user_id,
            payload=request.payload,
            editor_state=request.editor_state,
            background_image=request.background_image,
            content_hash=code,
            is_draft=request.is_draft,
        ),
    )


def delete_other_drafts(db: Session, user_id: str, keep_id: uuid.UUID) -> int:
    """Drop the user's draft-slot rows other than ``keep_id``."""
    stmt = delete(FieldConfig).where(
        FieldConfig.user_id == user_id,
        FieldConfig.is_draft.is_(True),
        FieldConfig.id != keep_id,
        ~has_project_entry(),
    )
    result = db.execute(stmt, execution_options={"synchronize_session": False})
    db.commit()
    removed = result.rowcount or 0
    if removed:
        logger.info("stale_drafts_removed", user_id=user_id, count=removed)
    return removed


def save_field_config(db: Session, user_id: str, request: FieldConfigSave) -> tuple[SaveResult, bool]:
    """Persist a save request with the fewest writes.

    Returns the result and whether a new row was created.
    """
    if request.upload_id is not None:
        return _save_targeted(db, user_id, request), False
    if request.is_draft:
        return _save_draft(db, user_id, request)

    config = _allocate(db, user_id, request)
    ensure_project_entry(db, config)
    logger.info("field_config_created", upload_id=str(config.upload_id), is_draft=False)
    return to_save_result(config), True


def _save_targeted(db: Session, user_id: str, request: FieldConfigSave) -> SaveResult:
    upload_id = parse_upload_id(request.upload_id)
    config = get_owned_config(db, user_id, upload_id)
    if config is None:
        raise ResourceNotFoundError("Config")

    _apply(config, request)
    db.commit()
    db.refresh(config)
    ensure_project_entry(db, config)

    logger.info("field_config_updated", upload_id=str(upload_id), is_draft=config.is_draft)
    return to_save_result(config)


def _save_draft(db: Session, user_id: str, request: FieldConfigSave) -> tuple[SaveResult, bool]:
    incoming = content_fingerprint(
        request.payload,
        request.editor_state,
        request.background_image,
        request.is_draft,
    )
    draft = db.scalars(draft_slot_query(user_id).limit(1)).first()

    if draft is not None and stored_fingerprint(draft, request) == incoming:
        delete_other_drafts(db, user_id, draft.id)
        logger.debug("draft_deduplicated", upload_id=str(draft.upload_id))
        return to_save_result(draft, deduped=True), False

    if draft is not None:
        _apply(draft, request)
        db.commit()
        db.refresh(draft)
        delete_other_drafts(db, user_id, draft.id)
        logger.info("draft_updated", upload_id=str(draft.upload_id))
        return to_save_result(draft), False

    config = _allocate(db, user_id, request)
    delete_other_drafts(db, user_id, config.id)
    logger.info("draft_created", upload_id=str(config.upload_id))
    return to_save_result(config), True


def get_latest_field_config(
    db: Session,
    user_id: str,
    upload_id: str | None = None,
) -> FieldConfigRead | None:
    """The user's most recently touched config, or a specific owned one."""
    if upload_id is not None and upload_id.strip():
        config = get_owned_config(db, user_id, parse_upload_id(upload_id))
        if config is None:
            raise ResourceNotFoundError("Config")
        return to_field_config_read(config)

    stmt = (
        select(FieldConfig)
        .where(FieldConfig.user_id == user_id)
        .order_by(FieldConfig.updated_at.desc(), FieldConfig.created_at.desc())
        .limit(1)
    )
    config = db.scalars(stmt).first()
    return to_field_config_read(config) if config is not None else None


def get_public_field_config(db: Session, raw_upload_id: str) -> PublicFieldConfig:
    config = get_config_by_upload_id(db, parse_upload_id(raw_upload_id))
    if config is None:
        raise ResourceNotFoundError("Config")
    return PublicFieldConfig(
        upload_id=config.upload_id,
        payload=config.payload,
        background_image=config.background_image,
        updated_at=config.updated_at,
    )


def get_public_background_image(db: Session, raw_upload_id: str) -> PublicBackgroundImage:
    config = get_config_by_upload_id(db, parse_upload_id(raw_upload_id))
    if config is None:
        raise ResourceNotFoundError("Config")
    return PublicBackgroundImage(
        upload_id=config.upload_id,
        background_image=config.background_image,
        updated_at=config.updated_at,
    )
