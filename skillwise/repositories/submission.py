from typing import List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.models.submission import Submission
from skillwise.models.challenge import Challenge

# (submission, goal_id, challenge_title)
SubmissionRow = Tuple[Submission, Optional[int], Optional[str]]
# (submission, challenge_title, challenge_category)
FeedbackRow = Tuple[Submission, Optional[str], Optional[str]]


class SubmissionRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_challenge(self):
        return (
            select(Submission, Challenge.goal_id, Challenge.title)
            .join(Challenge, Challenge.id == Submission.challenge_id)
        )

    async def get(self, submission_id: int) -> Optional[SubmissionRow]:
        result = await self.db.execute(
            self._with_challenge().where(Submission.id == submission_id)
        )
        row = result.one_or_none()
        return tuple(row) if row else None

    async def list_for_user(
        self,
        user_id: int,
        challenge_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[SubmissionRow]:
        query = self._with_challenge().where(Submission.user_id == user_id)
        if challenge_id is not None:
            query = query.where(Submission.challenge_id == challenge_id)
        if status:
            query = query.where(Submission.status == status)
        query = query.order_by(Submission.submitted_at.desc(), Submission.id.desc())
        result = await self.db.execute(query)
        return [tuple(row) for row in result.all()]

    async def count_attempts(self, user_id: int, challenge_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Submission.id))
            .where(Submission.user_id == user_id, Submission.challenge_id == challenge_id)
        )
        return result.scalar_one()

    async def completed_summary(self, user_id: int) -> List[tuple]:
        """(category, difficulty_level, count) of the user's completed work."""
        result = await self.db.execute(
            select(Challenge.category, Challenge.difficulty_level, func.count(Submission.id))
            .join(Challenge, Challenge.id == Submission.challenge_id)
            .where(Submission.user_id == user_id, Submission.status == "completed")
            .group_by(Challenge.category, Challenge.difficulty_level)
        )
        return [tuple(row) for row in result.all()]

    async def list_feedback(self, user_id: int, challenge_id: Optional[int] = None) -> List[FeedbackRow]:
        query = (
            select(Submission, Challenge.title, Challenge.category)
            .join(Challenge, Challenge.id == Submission.challenge_id)
            .where(Submission.user_id == user_id, Submission.feedback.isnot(None))
        )
        if challenge_id is not None:
            query = query.where(Submission.challenge_id == challenge_id)
        query = query.order_by(Submission.submitted_at.desc(), Submission.id.desc())
        result = await self.db.execute(query)
        return [tuple(row) for row in result.all()]

    async def learning_stats(self, user_id: int) -> dict:
        """Distinct challenges completed, their summed points and the mean submission score."""
        completed_ids = select(Submission.challenge_id).where(
            Submission.user_id == user_id, Submission.status == "completed"
        )
        completed = await self.db.execute(
            select(func.count(Challenge.id), func.coalesce(func.sum(Challenge.points_reward), 0))
            .where(Challenge.id.in_(completed_ids))
        )
        challenges_completed, total_points = completed.one()
        average = await self.db.execute(
            select(func.avg(Submission.score))
            .where(Submission.user_id == user_id, Submission.score.isnot(None))
        )
        mean = average.scalar_one()
        return {
            "challenges_completed": challenges_completed,
            "total_points": int(total_points),
            "average_score": float(mean) if mean is not None else None,
        }

    async def add(self, submission: Submission) -> Submission:
        self.db.add(submission)
        await self.db.flush()
        return submission

    async def apply(self, submission: Submission, changes: dict) -> Submission:
        for column, value in changes.items():
            setattr(submission, column, value)
        self.db.add(submission)
        await self.db.flush()
        return submission
