import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.core.errors import NotFound, AccessDenied, ValidationError
from skillwise.models.challenge import Challenge
from skillwise.models.enums import ChallengeStatus, SubmissionStatus, TERMINAL_SUBMISSION_STATUSES
from skillwise.models.submission import Submission
from skillwise.repositories.challenge import ChallengeRepository
from skillwise.repositories.goal import GoalRepository
from skillwise.repositories.submission import SubmissionRepository, SubmissionRow, FeedbackRow
from skillwise.schemas.submission import SubmissionCreate, SubmissionPatch, SubmissionFilter
from skillwise.services.goal import GoalService
from skillwise.services.unit_of_work import atomic
from skillwise.services.validation import normalize_submission_status

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {s.value for s in TERMINAL_SUBMISSION_STATUSES}

# Columns a patch may clear with an explicit null.
NULLABLE_FIELDS = {"score", "feedback", "reviewer_notes"}


class SubmissionService:
    def __init__(
        self,
        db: AsyncSession,
        submissions: Optional[SubmissionRepository] = None,
        challenges: Optional[ChallengeRepository] = None,
        goals: Optional[GoalRepository] = None,
    ):
        self.db = db
        self.submissions = submissions or SubmissionRepository(db)
        self.challenges = challenges or ChallengeRepository(db)
        self.goals = goals or GoalRepository(db)
        self.goal_service = GoalService(db, self.goals)

    async def add_attempt(self, user_id: int, submission_in: SubmissionCreate) -> Tuple[Submission, Challenge]:
        """Validate and insert a pending attempt. Flushes only; the caller commits."""
        challenge = await self.challenges.get(submission_in.challenge_id)
        if challenge is None:
            raise NotFound("Challenge not found")
        if not (submission_in.submission_text or submission_in.submission_url):
            raise ValidationError("Submission text or URL is required")

        attempts = await self.submissions.count_attempts(user_id, challenge.id)
        if challenge.max_attempts and attempts >= challenge.max_attempts:
            raise ValidationError("Maximum attempts reached for this challenge")

        submission = Submission(
            challenge_id=challenge.id,
            user_id=user_id,
            submission_text=submission_in.submission_text,
            submission_url=submission_in.submission_url,
            notes=submission_in.notes,
            status=SubmissionStatus.PENDING.value,
            attempt_number=attempts + 1,
        )
        await self.submissions.add(submission)
        return submission, challenge

    async def create(self, user_id: int, submission_in: SubmissionCreate) -> SubmissionRow:
        async with atomic(self.db):
            submission, challenge = await self.add_attempt(user_id, submission_in)
        await self.db.refresh(submission)
        logger.info(
            "Submission %s created for challenge %s by user %s (attempt %s)",
            submission.id, challenge.id, user_id, submission.attempt_number,
        )
        return submission, challenge.goal_id, challenge.title

    async def get(self, submission_id: int, user_id: int) -> SubmissionRow:
        row = await self.submissions.get(submission_id)
        if row is None:
            raise NotFound("Submission not found")
        if row[0].user_id != user_id:
            raise AccessDenied("Access denied")
        return row

    async def list(self, user_id: int, filters: Optional[SubmissionFilter] = None) -> List[SubmissionRow]:
        filters = filters or SubmissionFilter()
        status = normalize_submission_status(filters.status) if filters.status else None
        return await self.submissions.list_for_user(
            user_id, challenge_id=filters.challenge_id, status=status
        )

    async def apply_patch(self, submission: Submission, user_id: int, patch: SubmissionPatch) -> Submission:
        """Apply a partial update. Flushes only; the caller commits."""
        changes = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if "status" in changes:
            changes["status"] = normalize_submission_status(changes["status"])
            if changes["status"] in TERMINAL_STATUSES and changes["status"] != submission.status:
                changes["reviewed_at"] = datetime.now(timezone.utc)

        await self.submissions.apply(submission, changes)
        if changes.get("status") == SubmissionStatus.COMPLETED.value:
            await self._complete_challenge(submission.challenge_id, user_id)
        return submission

    async def update(self, submission_id: int, user_id: int, patch: SubmissionPatch) -> SubmissionRow:
        submission, goal_id, challenge_title = await self.get(submission_id, user_id)
        async with atomic(self.db):
            await self.apply_patch(submission, user_id, patch)
        await self.db.refresh(submission)
        return submission, goal_id, challenge_title

    async def count_attempts(self, user_id: int, challenge_id: int) -> int:
        return await self.submissions.count_attempts(user_id, challenge_id)

    async def completed_summary(self, user_id: int) -> List[tuple]:
        return await self.submissions.completed_summary(user_id)

    async def feedback_history(self, user_id: int, challenge_id: Optional[int] = None) -> List[FeedbackRow]:
        return await self.submissions.list_feedback(user_id, challenge_id=challenge_id)

    async def learning_stats(self, user_id: int) -> dict:
        return await self.submissions.learning_stats(user_id)

    async def _complete_challenge(self, challenge_id: int, user_id: int) -> None:
        challenge = await self.challenges.get(challenge_id)
        if challenge is None or challenge.goal_id is None:
            return
        # Only the goal owner's work moves the goal forward.
        if await self.goals.get_owned(challenge.goal_id, user_id) is not None:
            if challenge.status != ChallengeStatus.COMPLETED.value:
                await self.challenges.apply(challenge, {"status": ChallengeStatus.COMPLETED.value})
        await self.goal_service.recalculate_progress(challenge.goal_id)
