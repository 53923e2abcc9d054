import pytest
from skillwise.core.errors import AccessDenied, NotFound, ValidationError
from skillwise.schemas.challenge import ChallengeCreate
from skillwise.schemas.peer_review import PeerReviewSubmit, PeerReviewAssign, PeerReviewComplete
from skillwise.schemas.submission import SubmissionCreate
from skillwise.services.challenge import ChallengeService
from skillwise.services.peer_review import PeerReviewService
from skillwise.services.submission import SubmissionService


@pytest.fixture
async def setup(db, make_user):
    author = await make_user()
    reviewer = await make_user()
    challenge = await ChallengeService(db).create(ChallengeCreate(title="Linked list"), author.id)
    submission, _, _ = await SubmissionService(db).create(
        author.id, SubmissionCreate(challenge_id=challenge.id, submission_text="class Node: ...")
    )
    return author, reviewer, submission


async def test_submit_creates_completed_review(db, setup):
    author, reviewer, submission = setup
    review = await PeerReviewService(db).submit(
        reviewer.id,
        PeerReviewSubmit(submission_id=submission.id, reviewee_id=author.id, review_text="Nice", rating=4,
                         criteria_scores={"clarity": 5}),
    )
    assert review.is_completed is True
    assert review.completed_at is not None
    assert review.criteria_scores == {"clarity": 5}


async def test_self_review_is_rejected(db, setup):
    author, _, submission = setup
    with pytest.raises(ValidationError):
        await PeerReviewService(db).submit(
            author.id, PeerReviewSubmit(submission_id=submission.id, reviewee_id=author.id, rating=5)
        )


async def test_reviewee_must_own_submission(db, setup, make_user):
    _, reviewer, submission = setup
    stranger = await make_user()
    with pytest.raises(ValidationError):
        await PeerReviewService(db).submit(
            reviewer.id, PeerReviewSubmit(submission_id=submission.id, reviewee_id=stranger.id)
        )


async def test_review_of_missing_submission(db, setup):
    author, reviewer, _ = setup
    with pytest.raises(NotFound):
        await PeerReviewService(db).submit(reviewer.id, PeerReviewSubmit(submission_id=999, reviewee_id=author.id))


async def test_assign_then_complete(db, setup):
    author, reviewer, submission = setup
    service = PeerReviewService(db)
    review = await service.assign(
        author, PeerReviewAssign(reviewer_id=reviewer.id, reviewee_id=author.id, submission_id=submission.id)
    )
    assert review.is_completed is False

    pending = await service.list_pending(reviewer.id)
    assert [(r.id, text) for r, text in pending] == [(review.id, "class Node: ...")]

    done = await service.complete(review.id, reviewer.id, PeerReviewComplete(review_text="Solid", rating=5))
    assert done.is_completed is True
    assert done.rating == 5
    assert done.completed_at is not None
    assert await service.list_pending(reviewer.id) == []

    with pytest.raises(ValidationError):
        await service.complete(review.id, reviewer.id, PeerReviewComplete(rating=3))


async def test_only_assigned_reviewer_completes(db, setup, make_user):
    author, reviewer, submission = setup
    other = await make_user()
    service = PeerReviewService(db)
    review = await service.assign(
        author, PeerReviewAssign(reviewer_id=reviewer.id, reviewee_id=author.id, submission_id=submission.id)
    )
    with pytest.raises(AccessDenied):
        await service.complete(review.id, other.id, PeerReviewComplete(rating=1))
    with pytest.raises(NotFound):
        await service.complete(999, reviewer.id, PeerReviewComplete(rating=1))


async def test_assign_requires_owner_or_admin(db, setup, make_user):
    author, reviewer, submission = setup
    admin = await make_user(role="admin")
    service = PeerReviewService(db)
    assignment = PeerReviewAssign(reviewer_id=reviewer.id, reviewee_id=author.id, submission_id=submission.id)

    with pytest.raises(AccessDenied):
        await service.assign(reviewer, assignment)
    review = await service.assign(admin, assignment)
    assert review.reviewer_id == reviewer.id


async def test_received_and_history(db, setup):
    author, reviewer, submission = setup
    service = PeerReviewService(db)
    await service.submit(reviewer.id, PeerReviewSubmit(submission_id=submission.id, reviewee_id=author.id, rating=3))

    received = await service.list_received(author.id)
    history = await service.list_by_reviewer(reviewer.id)
    assert len(received) == 1 and received[0][1] == "class Node: ..."
    assert len(history) == 1 and history[0][0].reviewer_id == reviewer.id


async def test_reviews_of_submission_are_owner_only(db, setup):
    author, reviewer, submission = setup
    service = PeerReviewService(db)
    await service.submit(reviewer.id, PeerReviewSubmit(submission_id=submission.id, reviewee_id=author.id, rating=3))

    assert len(await service.list_for_submission(submission.id, author.id)) == 1
    with pytest.raises(AccessDenied):
        await service.list_for_submission(submission.id, reviewer.id)
