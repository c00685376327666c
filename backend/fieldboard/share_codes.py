"""Share code allocation.

A share code is the 8-digit ``content_hash`` of a field config. Codes are
random, so inserts retry on a uniqueness collision.
"""

import secrets
from collections.abc import Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import structlog

from .constants import SHARE_CODE_MAX, SHARE_CODE_MAX_ATTEMPTS, SHARE_CODE_MIN
from .exceptions import ShareCodeAllocationError
from .models import FieldConfig

logger = structlog.get_logger()

UNIQUE_VIOLATION_SQLSTATE = "23505"


def generate_share_code() -> str:
    """Return a random code in [10000000, 99999999], always 8 digits."""
    return str(SHARE_CODE_MIN + secrets.randbelow(SHARE_CODE_MAX - SHARE_CODE_MIN + 1))


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    # psycopg exposes sqlstate, psycopg2 pgcode
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "UNIQUE constraint failed" in str(orig)


def allocate_field_config(
    db: Session,
    build: Callable[[str], FieldConfig],
    *,
    max_attempts: int = SHARE_CODE_MAX_ATTEMPTS,
) -> FieldConfig:
    """Insert the row returned by ``build(code)`` under a fresh share code.

    ``build`` is called once per attempt and must return a new, unsaved row.
    Only uniqueness violations are retried; other errors propagate.
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_share_code()
        config = build(code)
        db.add(config)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if not is_unique_violation(exc):
                raise
            logger.warning(
                "share_code_collision",
                attempt=attempt,
                max_attempts=max_attempts,
                share_code=code,
            )
            continue
        db.refresh(config)
        return config

    logger.error("share_code_allocation_failed", attempts=max_attempts)
    raise ShareCodeAllocationError(max_attempts)
