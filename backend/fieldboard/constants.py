from enum import StrEnum


class ProjectStatus(StrEnum):
    ACTIVE = "active"
    ARCHIVE = "archive"
    TRASH = "trash"


PROJECT_STATUSES = tuple(s.value for s in ProjectStatus)

DEFAULT_PROJECT_NAME = "Untitled Project"
BACKFILL_NAME_PREFIX = "Project "

# Canvas element kinds that may carry a stageParentTag, in lookup order
STAGE_ELEMENT_KINDS = ("button", "icon-button", "text-input", "toggle-switch")

SHARE_CODE_MIN = 10_000_000
SHARE_CODE_MAX = 99_999_999
SHARE_CODE_MAX_ATTEMPTS = 5
