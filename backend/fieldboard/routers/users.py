"""Users router."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..auth import email_exists
from ..db import get_db
from ..exceptions import ValidationError
from ..schemas import EmailExists

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/exists", response_model=EmailExists)
def user_exists(email: str | None = Query(default=None), db: Session = Depends(get_db)):
    """Whether an account exists for ``email``. Used before sign-in."""
    try:
        return EmailExists(exists=email_exists(db, email))
    except ValidationError:
        return JSONResponse({"exists": False}, status_code=status.HTTP_400_BAD_REQUEST)
