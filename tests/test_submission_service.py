from unittest.mock import AsyncMock

import pytest
from skillwise.core.errors import AccessDenied, NotFound, ValidationError
from skillwise.schemas.challenge import ChallengeCreate
from skillwise.schemas.goal import GoalCreate
from skillwise.schemas.submission import SubmissionCreate, SubmissionPatch, SubmissionFilter
from skillwise.services.challenge import ChallengeService
from skillwise.services.goal import GoalService
from skillwise.services.submission import SubmissionService
from skillwise.services.unit_of_work import atomic


@pytest.fixture
async def setup(db, make_user):
    owner = await make_user()
    goal = await GoalService(db).create(owner.id, GoalCreate(title="Backend basics"))
    challenge = await ChallengeService(db).create(
        ChallengeCreate(title="REST endpoint", goal_id=goal.id, max_attempts=2), owner.id
    )
    return owner, goal, challenge


async def test_create_submission(db, setup):
    owner, goal, challenge = setup
    submission, goal_id, title = await SubmissionService(db).create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="print('hi')")
    )
    assert submission.status == "pending"
    assert submission.attempt_number == 1
    assert goal_id == goal.id
    assert title == "REST endpoint"


async def test_create_requires_text_or_url(db, setup):
    owner, _, challenge = setup
    with pytest.raises(ValidationError):
        await SubmissionService(db).create(owner.id, SubmissionCreate(challenge_id=challenge.id))


async def test_create_for_missing_challenge(db, setup):
    owner, _, _ = setup
    with pytest.raises(NotFound):
        await SubmissionService(db).create(owner.id, SubmissionCreate(challenge_id=999, submission_text="x"))


async def test_max_attempts_enforced(db, setup):
    owner, _, challenge = setup
    service = SubmissionService(db)
    for expected_attempt in (1, 2):
        submission, _, _ = await service.create(
            owner.id, SubmissionCreate(challenge_id=challenge.id, submission_url="https://example.com")
        )
        assert submission.attempt_number == expected_attempt
    with pytest.raises(ValidationError):
        await service.create(owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="third"))


async def test_non_owner_gets_access_denied(db, setup, make_user):
    owner, _, challenge = setup
    intruder = await make_user()
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="secret answer")
    )
    with pytest.raises(AccessDenied) as exc:
        await service.get(submission.id, intruder.id)
    assert "secret answer" not in exc.value.message
    with pytest.raises(AccessDenied):
        await service.update(submission.id, intruder.id, SubmissionPatch(status="completed"))


async def test_get_missing_submission(db, setup):
    owner, _, _ = setup
    with pytest.raises(NotFound):
        await SubmissionService(db).get(4242, owner.id)


async def test_list_only_own_submissions(db, setup, make_user):
    owner, _, challenge = setup
    other = await make_user()
    service = SubmissionService(db)
    await service.create(owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="mine"))
    await service.create(other.id, SubmissionCreate(challenge_id=challenge.id, submission_text="theirs"))

    mine = await service.list(owner.id)
    theirs = await service.list(other.id, SubmissionFilter(challenge_id=challenge.id))
    assert [s.submission_text for s, _, _ in mine] == ["mine"]
    assert [s.submission_text for s, _, _ in theirs] == ["theirs"]
    assert await service.list(owner.id, SubmissionFilter(status="completed")) == []


async def test_update_validates_status(db, setup):
    owner, _, challenge = setup
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="x")
    )
    with pytest.raises(ValidationError):
        await service.update(submission.id, owner.id, SubmissionPatch(status="reviewed"))


async def test_rejected_stamps_reviewed_at_without_progress(db, setup):
    owner, goal, challenge = setup
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="x")
    )
    submission, _, _ = await service.update(submission.id, owner.id, SubmissionPatch(status="rejected", score=20))
    assert submission.reviewed_at is not None
    assert submission.score == 20
    assert (await GoalService(db).get(owner.id, goal.id)).progress_percentage == 0


async def test_completed_submission_completes_challenge_and_goal(db, setup):
    owner, goal, challenge = setup
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="solution")
    )
    submission, _, _ = await service.update(submission.id, owner.id, SubmissionPatch(status="completed"))

    assert submission.status == "completed"
    assert submission.reviewed_at is not None
    assert (await ChallengeService(db).get(challenge.id)).status == "completed"
    goal = await GoalService(db).get(owner.id, goal.id)
    assert goal.progress_percentage == 100
    assert goal.is_completed is True


async def test_other_users_completion_leaves_goal_alone(db, setup, make_user):
    owner, goal, challenge = setup
    other = await make_user()
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        other.id, SubmissionCreate(challenge_id=challenge.id, submission_text="borrowed")
    )
    await service.update(submission.id, other.id, SubmissionPatch(status="completed"))

    assert (await ChallengeService(db).get(challenge.id)).status == "not_started"
    assert (await GoalService(db).get(owner.id, goal.id)).progress_percentage == 0


async def test_failed_recompute_rolls_back_submission(db, setup):
    owner, goal, challenge = setup
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="solution")
    )
    # the rollback expires every loaded row, so keep plain ids
    owner_id, submission_id, challenge_id = owner.id, submission.id, challenge.id
    service.goals.challenge_counts = AsyncMock(side_effect=RuntimeError("database went away"))

    with pytest.raises(RuntimeError):
        await service.update(submission_id, owner_id, SubmissionPatch(status="completed"))

    fresh = SubmissionService(db)
    row, _, _ = await fresh.get(submission_id, owner_id)
    await db.refresh(row)
    assert row.status == "pending"
    assert row.reviewed_at is None
    reloaded = await ChallengeService(db).get(challenge_id)
    await db.refresh(reloaded)
    assert reloaded.status == "not_started"


async def test_staged_attempt_rolls_back_with_caller(db, setup):
    owner, _, challenge = setup
    owner_id, challenge_id = owner.id, challenge.id
    service = SubmissionService(db)

    with pytest.raises(RuntimeError):
        async with atomic(db):
            submission, _ = await service.add_attempt(
                owner_id, SubmissionCreate(challenge_id=challenge_id, submission_text="x")
            )
            await service.apply_patch(submission, owner_id, SubmissionPatch(feedback='{"ok": true}', score=70))
            raise RuntimeError("provider failed")

    assert await service.count_attempts(owner_id, challenge_id) == 0


async def test_feedback_and_notes_can_be_cleared(db, setup):
    owner, _, challenge = setup
    service = SubmissionService(db)
    submission, _, _ = await service.create(
        owner.id, SubmissionCreate(challenge_id=challenge.id, submission_text="x")
    )
    await service.update(
        submission.id, owner.id, SubmissionPatch(feedback="Needs tests", reviewer_notes="see line 3", score=60)
    )

    submission, _, _ = await service.update(
        submission.id, owner.id, SubmissionPatch(feedback=None, reviewer_notes=None)
    )
    assert submission.feedback is None
    assert submission.reviewer_notes is None
    assert submission.score == 60
    assert submission.status == "pending"

    # a null status is ignored rather than stored
    submission, _, _ = await service.update(submission.id, owner.id, SubmissionPatch(status=None))
    assert submission.status == "pending"
