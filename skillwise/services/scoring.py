# skillwise/services/scoring.py
import math
from typing import Any

BASE_DIFFICULTY_SCORES = {
    "easy": 1,
    "medium": 2,
    "hard": 3,
    "expert": 4,
}
DEFAULT_DIFFICULTY_SCORE = 2
MIN_DIFFICULTY_SCORE = 1
MAX_DIFFICULTY_SCORE = 5


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _field(challenge: Any, name: str):
    if isinstance(challenge, dict):
        return challenge.get(name)
    return getattr(challenge, name, None)


def calculate_difficulty(challenge: Any) -> int:
    """Score a challenge from 1 to 5.

    The tier gives the base score; long estimated time, many prerequisites
    and many test cases each push it up. Works on ORM rows, schemas and
    plain dicts (e.g. an AI-generated challenge before it is saved).
    """
    if challenge is None:
        return DEFAULT_DIFFICULTY_SCORE

    tier = _field(challenge, "difficulty_level")
    score = BASE_DIFFICULTY_SCORES.get(str(tier).lower(), DEFAULT_DIFFICULTY_SCORE) if tier else DEFAULT_DIFFICULTY_SCORE

    minutes = _field(challenge, "estimated_time_minutes")
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        minutes = 0
    if minutes > 120:
        score += 1
    elif minutes > 60:
        score += 0.5

    if len(_field(challenge, "prerequisites") or []) > 3:
        score += 0.5
    if len(_field(challenge, "test_cases") or []) > 5:
        score += 0.5

    score = max(MIN_DIFFICULTY_SCORE, min(MAX_DIFFICULTY_SCORE, score))
    return round_half_up(score)


def progress_percentage(completed: int, total: int) -> int:
    """Completed-over-total as an integer percentage, rounded half-up."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)
