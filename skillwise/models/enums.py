from enum import Enum


class DifficultyLevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class ChallengeStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Older clients send the todo/done vocabulary.
CHALLENGE_STATUS_ALIASES = {
    "todo": ChallengeStatus.NOT_STARTED,
    "done": ChallengeStatus.COMPLETED,
}


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"


TERMINAL_SUBMISSION_STATUSES = {SubmissionStatus.COMPLETED, SubmissionStatus.REJECTED}
