from typing import List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.models.peer_review import PeerReview
from skillwise.models.submission import Submission

# (review, submission_text)
ReviewRow = Tuple[PeerReview, Optional[str]]


class PeerReviewRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_submission(self):
        return (
            select(PeerReview, Submission.submission_text)
            .outerjoin(Submission, Submission.id == PeerReview.submission_id)
        )

    async def get(self, review_id: int) -> Optional[PeerReview]:
        result = await self.db.execute(select(PeerReview).where(PeerReview.id == review_id))
        return result.scalar_one_or_none()

    async def list_pending(self, reviewer_id: int) -> List[ReviewRow]:
        result = await self.db.execute(
            self._with_submission()
            .where(PeerReview.reviewer_id == reviewer_id, PeerReview.is_completed.is_(False))
            .order_by(PeerReview.created_at.asc(), PeerReview.id.asc())
        )
        return [tuple(row) for row in result.all()]

    async def list_received(self, reviewee_id: int) -> List[ReviewRow]:
        result = await self.db.execute(
            self._with_submission()
            .where(PeerReview.reviewee_id == reviewee_id)
            .order_by(PeerReview.created_at.desc(), PeerReview.id.desc())
        )
        return [tuple(row) for row in result.all()]

    async def list_by_reviewer(self, reviewer_id: int) -> List[ReviewRow]:
        result = await self.db.execute(
            self._with_submission()
            .where(PeerReview.reviewer_id == reviewer_id)
            .order_by(PeerReview.created_at.desc(), PeerReview.id.desc())
        )
        return [tuple(row) for row in result.all()]

    async def list_for_submission(self, submission_id: int) -> List[PeerReview]:
        result = await self.db.execute(
            select(PeerReview)
            .where(PeerReview.submission_id == submission_id)
            .order_by(PeerReview.created_at.desc(), PeerReview.id.desc())
        )
        return list(result.scalars().all())

    async def add(self, review: PeerReview) -> PeerReview:
        self.db.add(review)
        await self.db.flush()
        return review

    async def apply(self, review: PeerReview, changes: dict) -> PeerReview:
        for column, value in changes.items():
            setattr(review, column, value)
        self.db.add(review)
        await self.db.flush()
        return review
