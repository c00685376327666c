"""Projects router."""

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session

from .. import projects
from ..auth import get_current_user_id
from ..db import get_db
from ..queries import parse_upload_id
from ..schemas import (
    DeleteResult,
    ProjectCreate,
    ProjectDetail,
    ProjectEnvelope,
    ProjectList,
    ProjectRead,
    ProjectSummary,
    ProjectUpdate,
)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=ProjectList)
def list_projects(
    project_status: str | None = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """List the caller's projects in one lifecycle state (default active)."""
    return ProjectList(projects=projects.list_projects(db, user_id, project_status))


@router.post(
    "",
    response_model=ProjectEnvelope[ProjectSummary],
    status_code=status.HTTP_201_CREATED,
)
def create_project(
    project_in: ProjectCreate | None = Body(default=None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create an empty project."""
    name = project_in.name if project_in is not None else None
    return ProjectEnvelope[ProjectSummary](project=projects.create_project(db, user_id, name))


@router.get("/{upload_id}", response_model=ProjectEnvelope[ProjectDetail])
def get_project(
    upload_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project = projects.get_project(db, user_id, parse_upload_id(upload_id, "Project"))
    return ProjectEnvelope[ProjectDetail](project=project)


@router.patch("/{upload_id}", response_model=ProjectEnvelope[ProjectRead])
def update_project(
    upload_id: str,
    project_in: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Rename a project and/or move it between active, archive and trash."""
    project = projects.update_project(
        db,
        user_id,
        parse_upload_id(upload_id, "Project"),
        name=project_in.name,
        status=project_in.status,
    )
    return ProjectEnvelope[ProjectRead](project=project)


@router.delete("/{upload_id}", response_model=DeleteResult)
def delete_project(
    upload_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    projects.delete_project(db, user_id, parse_upload_id(upload_id, "Project"))
    return DeleteResult(ok=True)
