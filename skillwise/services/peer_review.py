import logging
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.core.errors import NotFound, AccessDenied, ValidationError
from skillwise.models.peer_review import PeerReview
from skillwise.models.user import User
from skillwise.repositories.peer_review import PeerReviewRepository, ReviewRow
from skillwise.repositories.submission import SubmissionRepository
from skillwise.schemas.peer_review import PeerReviewSubmit, PeerReviewAssign, PeerReviewComplete
from skillwise.services.unit_of_work import atomic

logger = logging.getLogger(__name__)


class PeerReviewService:
    """Peer reviews are created either as finished reviews (submit) or as
    open assignments that the reviewer completes later (assign + complete)."""

    def __init__(
        self,
        db: AsyncSession,
        reviews: Optional[PeerReviewRepository] = None,
        submissions: Optional[SubmissionRepository] = None,
    ):
        self.db = db
        self.reviews = reviews or PeerReviewRepository(db)
        self.submissions = submissions or SubmissionRepository(db)

    async def _check_participants(self, reviewer_id: int, reviewee_id: int, submission_id: int) -> None:
        row = await self.submissions.get(submission_id)
        if row is None:
            raise NotFound("Submission not found")
        if reviewer_id == reviewee_id:
            raise ValidationError("Reviewer and reviewee must be different users")
        if row[0].user_id != reviewee_id:
            raise ValidationError("Reviewee does not own this submission")

    async def submit(self, reviewer_id: int, review_in: PeerReviewSubmit) -> PeerReview:
        await self._check_participants(reviewer_id, review_in.reviewee_id, review_in.submission_id)
        review = PeerReview(
            reviewer_id=reviewer_id,
            reviewee_id=review_in.reviewee_id,
            submission_id=review_in.submission_id,
            review_text=review_in.review_text,
            rating=review_in.rating,
            criteria_scores=review_in.criteria_scores,
            time_spent_minutes=review_in.time_spent_minutes,
            is_anonymous=review_in.is_anonymous,
            is_completed=True,
            completed_at=datetime.now(timezone.utc),
        )
        async with atomic(self.db):
            await self.reviews.add(review)
        await self.db.refresh(review)
        logger.info("Peer review %s submitted for submission %s", review.id, review.submission_id)
        return review

    async def assign(self, requested_by: User, assignment: PeerReviewAssign) -> PeerReview:
        if requested_by.role != "admin" and requested_by.id != assignment.reviewee_id:
            raise AccessDenied("Only the submission owner or an admin can request a review")
        await self._check_participants(assignment.reviewer_id, assignment.reviewee_id, assignment.submission_id)
        review = PeerReview(
            reviewer_id=assignment.reviewer_id,
            reviewee_id=assignment.reviewee_id,
            submission_id=assignment.submission_id,
            is_anonymous=assignment.is_anonymous,
            is_completed=False,
        )
        async with atomic(self.db):
            await self.reviews.add(review)
        await self.db.refresh(review)
        logger.info("Peer review %s assigned to reviewer %s", review.id, review.reviewer_id)
        return review

    async def complete(self, review_id: int, reviewer_id: int, review_in: PeerReviewComplete) -> PeerReview:
        review = await self.reviews.get(review_id)
        if review is None:
            raise NotFound("Review not found")
        if review.reviewer_id != reviewer_id:
            raise AccessDenied("This review is assigned to another reviewer")
        if review.is_completed:
            raise ValidationError("Review is already completed")

        changes = {k: v for k, v in review_in.model_dump(exclude_unset=True).items() if v is not None}
        changes["is_completed"] = True
        changes["completed_at"] = datetime.now(timezone.utc)
        async with atomic(self.db):
            await self.reviews.apply(review, changes)
        await self.db.refresh(review)
        return review

    async def list_pending(self, reviewer_id: int) -> List[ReviewRow]:
        return await self.reviews.list_pending(reviewer_id)

    async def list_received(self, reviewee_id: int) -> List[ReviewRow]:
        return await self.reviews.list_received(reviewee_id)

    async def list_by_reviewer(self, reviewer_id: int) -> List[ReviewRow]:
        return await self.reviews.list_by_reviewer(reviewer_id)

    async def list_for_submission(self, submission_id: int, user_id: int) -> List[PeerReview]:
        row = await self.submissions.get(submission_id)
        if row is None:
            raise NotFound("Submission not found")
        if row[0].user_id != user_id:
            raise AccessDenied("Access denied")
        return await self.reviews.list_for_submission(submission_id)
