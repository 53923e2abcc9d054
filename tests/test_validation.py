import pytest
from skillwise.core.errors import ValidationError
from skillwise.services.validation import (
    validate_title, normalize_difficulty, normalize_challenge_status,
    normalize_submission_status, validate_progress,
)


def test_title_is_stripped():
    assert validate_title("  Learn Rust  ") == "Learn Rust"


@pytest.mark.parametrize("title", [None, "", "   ", "x" * 256])
def test_invalid_titles(title):
    with pytest.raises(ValidationError):
        validate_title(title)


def test_title_of_255_characters_is_allowed():
    assert validate_title("x" * 255) == "x" * 255


def test_difficulty_is_normalized():
    assert normalize_difficulty("HARD") == "hard"
    assert normalize_difficulty(None, default="medium") == "medium"
    with pytest.raises(ValidationError):
        normalize_difficulty("impossible")


def test_challenge_status_aliases():
    assert normalize_challenge_status("todo") == "not_started"
    assert normalize_challenge_status("Done") == "completed"
    assert normalize_challenge_status("in_progress") == "in_progress"
    with pytest.raises(ValidationError):
        normalize_challenge_status("archived")


def test_submission_status():
    assert normalize_submission_status("COMPLETED") == "completed"
    with pytest.raises(ValidationError):
        normalize_submission_status("reviewed")


@pytest.mark.parametrize("value", [-1, 101, None])
def test_progress_out_of_range(value):
    with pytest.raises(ValidationError):
        validate_progress(value)
