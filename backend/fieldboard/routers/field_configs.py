"""Field configs router."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from .. import drafts
from ..auth import get_current_user_id
from ..db import get_db
from ..schemas import (
    FieldConfigEnvelope,
    FieldConfigSave,
    PublicBackgroundImage,
    PublicFieldConfigEnvelope,
    SaveResult,
)

router = APIRouter(prefix="/field-configs", tags=["field-configs"])


@router.get("", response_model=FieldConfigEnvelope)
def get_field_config(
    upload_id: str | None = Query(default=None, alias="uploadId"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Latest draft or final config of the caller, or one of theirs by id."""
    return FieldConfigEnvelope(config=drafts.get_latest_field_config(db, user_id, upload_id))


@router.post(
    "",
    response_model=SaveResult,
    responses={status.HTTP_201_CREATED: {"model": SaveResult}},
)
def save_field_config(
    save_in: FieldConfigSave,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    result, created = drafts.save_field_config(db, user_id, save_in)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return result


@router.get("/public/{upload_id}", response_model=PublicFieldConfigEnvelope)
def get_public_field_config(upload_id: str, db: Session = Depends(get_db)):
    """Read-only projection for share links; no session required."""
    return PublicFieldConfigEnvelope(config=drafts.get_public_field_config(db, upload_id))


@router.get("/public/{upload_id}/background-image", response_model=PublicBackgroundImage)
def get_public_background_image(upload_id: str, db: Session = Depends(get_db)):
    return drafts.get_public_background_image(db, upload_id)
