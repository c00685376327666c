import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .constants import PROJECT_STATUSES, ProjectStatus
from .db import Base

# JSONB on PostgreSQL, plain JSON elsewhere (tests run on SQLite)
JSONType = JSON().with_variant(JSONB(), "postgresql")
NullableJSONType = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


class FieldConfig(Base):
    __tablename__ = "field_configs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    upload_id = Column(Uuid, nullable=False, unique=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    payload = Column(JSONType, nullable=False)  # canvas elements
    editor_state = Column(NullableJSONType, nullable=True)
    background_image = Column(Text, nullable=True)
    content_hash = Column(String(8), nullable=False, unique=True)  # share code
    is_draft = Column(Boolean, nullable=False, default=True)
    created_at = Column(
        DateTime(timezone=True),
        default=get_datetime_utc,
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=get_datetime_utc,
        onupdate=get_datetime_utc,
        server_default=func.now(),
        nullable=False,
    )

    project_entry = relationship(
        "ProjectManagerEntry",
        back_populates="field_config",
        uselist=False,
        passive_deletes=True,
    )


class ProjectManagerEntry(Base):
    __tablename__ = "project_manager_entries"

    upload_id = Column(
        Uuid,
        ForeignKey("field_configs.upload_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=ProjectStatus.ACTIVE.value)
    created_at = Column(
        DateTime(timezone=True),
        default=get_datetime_utc,
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=get_datetime_utc,
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint(
            "status in ({})".format(", ".join(f"'{s}'" for s in PROJECT_STATUSES)),
            name="project_manager_entries_status_chk",
        ),
        Index(
            "project_manager_entries_user_status_updated_idx",
            user_id,
            status,
            updated_at.desc(),
        ),
    )

    field_config = relationship("FieldConfig", back_populates="project_entry")


# Tables below belong to the external auth provider. They are mapped for
# reads only and are never created or altered by our migrations.


class AuthUser(Base):
    __tablename__ = "user"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=True)
    email = Column(Text, nullable=False, unique=True)


class AuthSession(Base):
    __tablename__ = "session"

    id = Column(Text, primary_key=True)
    token = Column(Text, nullable=False, unique=True)
    user_id = Column("userId", Text, ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    expires_at = Column("expiresAt", DateTime(timezone=True), nullable=False)


AUTH_PROVIDER_TABLES = frozenset({AuthUser.__tablename__, AuthSession.__tablename__})
