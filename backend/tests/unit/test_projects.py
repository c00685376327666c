"""Unit tests for the project lifecycle."""

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from fieldboard import projects
from fieldboard.constants import DEFAULT_PROJECT_NAME
from fieldboard.exceptions import ResourceNotFoundError, ValidationError
from fieldboard.models import FieldConfig, ProjectManagerEntry

USER = "user-alice"


def _final_config(db, code, user_id=USER, payload=None, is_draft=False):
    config = FieldConfig(
        user_id=user_id,
        payload=payload if payload is not None else [],
        content_hash=code,
        is_draft=is_draft,
    )
    db.add(config)
    db.commit()
    return config


def test_list_backfills_missing_entries(db):
    config = _final_config(db, "40001234")
    _final_config(db, "40005678", is_draft=True)

    listed = projects.list_projects(db, USER)

    assert [p.upload_id for p in listed] == [config.upload_id]
    assert listed[0].name == "Project 1234"
    assert listed[0].status == "active"
    assert db.get(ProjectManagerEntry, config.upload_id) is not None


def test_backfill_is_idempotent(db):
    _final_config(db, "40000001")
    assert projects.backfill_project_entries(db, USER) == 1
    assert projects.backfill_project_entries(db, USER) == 0


def test_list_includes_stage_count_and_background(db):
    payload = [
        {"button": {"stageParentTag": "a"}},
        {"icon-button": {"stageParentTag": "b"}},
    ]
    config = _final_config(db, "40000002", payload=payload)
    config.background_image = "field.png"
    db.commit()

    [project] = projects.list_projects(db, USER)

    assert project.stage_count == 3
    assert project.background_image == "field.png"
    assert project.config_updated_at is not None


def test_list_filters_by_status_and_orders_newest_first(db):
    older = projects.create_project(db, USER, "Older")
    newer = projects.create_project(db, USER, "Newer")
    archived = projects.create_project(db, USER, "Archived")
    projects.update_project(db, USER, archived.upload_id, status="archive")
    projects.update_project(db, USER, older.upload_id, name="Older renamed")

    active = projects.list_projects(db, USER, "active")
    assert [p.upload_id for p in active] == [older.upload_id, newer.upload_id]
    assert [p.upload_id for p in projects.list_projects(db, USER, "archive")] == [
        archived.upload_id
    ]
    assert projects.list_projects(db, USER, "trash") == []


def test_unknown_status_lists_active(db):
    created = projects.create_project(db, USER)
    assert [p.upload_id for p in projects.list_projects(db, USER, "bogus")] == [created.upload_id]


def test_list_is_scoped_to_user(db):
    projects.create_project(db, "user-bob", "Bob's")
    assert projects.list_projects(db, USER) == []


def test_create_project_defaults(db):
    project = projects.create_project(db, USER, "   ")

    assert project.name == DEFAULT_PROJECT_NAME
    assert project.status == "active"
    assert project.stage_count == 1
    config = db.scalars(select(FieldConfig).where(FieldConfig.upload_id == project.upload_id)).one()
    assert config.payload == []
    assert config.is_draft is False
    assert len(config.content_hash) == 8


def test_create_project_trims_name(db):
    assert projects.create_project(db, USER, "  Spring field  ").name == "Spring field"


def test_get_project_backfills_and_joins_config(db):
    config = _final_config(db, "40009876")

    project = projects.get_project(db, USER, config.upload_id)

    assert project.name == "Project 9876"
    assert project.content_hash == "40009876"
    assert project.is_draft is False


def test_get_project_not_owned(db):
    config = _final_config(db, "40000003", user_id="user-bob")
    with pytest.raises(ResourceNotFoundError):
        projects.get_project(db, USER, config.upload_id)
    with pytest.raises(ResourceNotFoundError):
        projects.get_project(db, USER, uuid.uuid4())


def test_update_requires_a_valid_change(db):
    created = projects.create_project(db, USER)
    with pytest.raises(ValidationError):
        projects.update_project(db, USER, created.upload_id)
    with pytest.raises(ValidationError):
        projects.update_project(db, USER, created.upload_id, name="  ", status="deleted")


def test_update_coalesces_unset_fields(db):
    created = projects.create_project(db, USER, "Keep me")

    moved = projects.update_project(db, USER, created.upload_id, status="trash")
    assert moved.name == "Keep me"
    assert moved.status == "trash"

    renamed = projects.update_project(db, USER, created.upload_id, name="Renamed")
    assert renamed.name == "Renamed"
    assert renamed.status == "trash"
    assert renamed.updated_at >= moved.updated_at


def test_update_backfills_missing_entry(db):
    config = _final_config(db, "40000004")
    updated = projects.update_project(db, USER, config.upload_id, status="archive")
    assert updated.status == "archive"
    assert updated.name == "Project 0004"


def test_update_not_owned(db):
    created = projects.create_project(db, "user-bob")
    with pytest.raises(ResourceNotFoundError):
        projects.update_project(db, USER, created.upload_id, status="trash")


def test_delete_cascades_to_entry(db):
    created = projects.create_project(db, USER)

    projects.delete_project(db, USER, created.upload_id)

    db.expire_all()
    assert db.scalars(select(FieldConfig).where(FieldConfig.upload_id == created.upload_id)).first() is None
    assert db.scalars(
        select(ProjectManagerEntry).where(ProjectManagerEntry.upload_id == created.upload_id)
    ).first() is None
    with pytest.raises(ResourceNotFoundError):
        projects.get_project(db, USER, created.upload_id)


def test_delete_not_owned(db):
    created = projects.create_project(db, "user-bob")
    with pytest.raises(ResourceNotFoundError):
        projects.delete_project(db, USER, created.upload_id)


def test_ensure_entry_for_deleted_config_raises(db):
    gone = FieldConfig(
        id=uuid.uuid4(),
        upload_id=uuid.uuid4(),
        user_id=USER,
        payload=[],
        content_hash="40009999",
        is_draft=False,
    )

    with pytest.raises(IntegrityError):
        projects.ensure_project_entry(db, gone)
    assert db.get(ProjectManagerEntry, gone.upload_id) is None
