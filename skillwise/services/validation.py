from typing import Optional
from skillwise.core.errors import ValidationError
from skillwise.models.enums import (
    DifficultyLevel, ChallengeStatus, CHALLENGE_STATUS_ALIASES, SubmissionStatus,
)

MAX_TITLE_LENGTH = 255


def validate_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ValidationError("Title is required")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    return title


def normalize_difficulty(value: Optional[str], default: Optional[str] = None) -> str:
    if value is None or not str(value).strip():
        if default is not None:
            return default
        raise ValidationError("Difficulty level is required")
    try:
        return DifficultyLevel(str(value).strip().lower()).value
    except ValueError:
        allowed = ", ".join(d.value for d in DifficultyLevel)
        raise ValidationError(f"Invalid difficulty level. Must be one of: {allowed}")


def normalize_challenge_status(value: Optional[str]) -> str:
    if value is None:
        raise ValidationError("Status is required")
    key = str(value).strip().lower()
    if key in CHALLENGE_STATUS_ALIASES:
        return CHALLENGE_STATUS_ALIASES[key].value
    try:
        return ChallengeStatus(key).value
    except ValueError:
        allowed = ", ".join(s.value for s in ChallengeStatus)
        raise ValidationError(f"Invalid challenge status. Must be one of: {allowed}")


def normalize_submission_status(value: Optional[str]) -> str:
    if value is None:
        raise ValidationError("Status is required")
    try:
        return SubmissionStatus(str(value).strip().lower()).value
    except ValueError:
        allowed = ", ".join(s.value for s in SubmissionStatus)
        raise ValidationError(f"Invalid submission status. Must be one of: {allowed}")


def validate_progress(value) -> int:
    if value is None or not 0 <= value <= 100:
        raise ValidationError("Progress must be between 0 and 100")
    return int(value)
