import logging
from datetime import date, datetime, timezone
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.core.errors import NotFound, ValidationError
from skillwise.models.goal import Goal
from skillwise.repositories.goal import GoalRepository
from skillwise.schemas.goal import GoalCreate, GoalPatch, GoalFilter, GoalProgressResponse
from skillwise.services.scoring import progress_percentage
from skillwise.services.unit_of_work import atomic
from skillwise.services.validation import validate_title, normalize_difficulty, validate_progress

logger = logging.getLogger(__name__)


class GoalService:
    def __init__(self, db: AsyncSession, goals: Optional[GoalRepository] = None):
        self.db = db
        self.goals = goals or GoalRepository(db)

    async def list(self, user_id: int, filters: Optional[GoalFilter] = None) -> Sequence[Goal]:
        filters = filters or GoalFilter()
        difficulty = normalize_difficulty(filters.difficulty) if filters.difficulty else None
        return await self.goals.list_for_user(
            user_id,
            category=filters.category,
            difficulty=difficulty,
            is_completed=filters.is_completed,
        )

    async def get(self, user_id: int, goal_id: int) -> Goal:
        goal = await self.goals.get_owned(goal_id, user_id)
        if goal is None:
            raise NotFound("Goal not found")
        return goal

    async def create(self, user_id: int, goal_in: GoalCreate) -> Goal:
        goal = Goal(
            user_id=user_id,
            title=validate_title(goal_in.title),
            description=goal_in.description,
            category=goal_in.category,
            difficulty_level=normalize_difficulty(goal_in.difficulty_level, default="medium"),
            target_date=goal_in.target_date,
            progress_percentage=0,
            is_completed=False,
        )
        async with atomic(self.db):
            await self.goals.add(goal)
        await self.db.refresh(goal)
        logger.info("Goal %s created for user %s", goal.id, user_id)
        return goal

    async def update(self, user_id: int, goal_id: int, patch: GoalPatch) -> Goal:
        goal = await self.get(user_id, goal_id)
        changes = patch.model_dump(exclude_unset=True)

        if "title" in changes:
            changes["title"] = validate_title(changes["title"])
        if "difficulty_level" in changes:
            changes["difficulty_level"] = normalize_difficulty(changes["difficulty_level"])
        if "progress_percentage" in changes:
            changes["progress_percentage"] = validate_progress(changes["progress_percentage"])

        completed = changes.pop("is_completed", None)
        now = datetime.now(timezone.utc)
        if completed is True:
            changes["progress_percentage"] = 100
            changes["is_completed"] = True
            changes["completed_at"] = goal.completed_at or now
        elif completed is False:
            progress = changes.get("progress_percentage", goal.progress_percentage)
            if progress >= 100:
                raise ValidationError("A goal at 100% progress cannot be marked incomplete")
            changes["is_completed"] = False
            changes["completed_at"] = None
        elif "progress_percentage" in changes:
            reached = changes["progress_percentage"] == 100
            changes["is_completed"] = reached
            changes["completed_at"] = (goal.completed_at or now) if reached else None

        async with atomic(self.db):
            await self.goals.apply(goal, changes)
        await self.db.refresh(goal)
        return goal

    async def update_progress(self, user_id: int, goal_id: int, progress: int) -> Goal:
        return await self.update(user_id, goal_id, GoalPatch(progress_percentage=progress))

    async def delete(self, user_id: int, goal_id: int) -> None:
        await self.get(user_id, goal_id)
        async with atomic(self.db):
            await self.goals.delete(goal_id)
        logger.info("Goal %s deleted by user %s", goal_id, user_id)

    async def progress_details(self, user_id: int, goal_id: int) -> GoalProgressResponse:
        goal = await self.get(user_id, goal_id)
        total, completed = await self.goals.challenge_counts(goal_id)
        return GoalProgressResponse(
            goal_id=goal.id,
            progress_percentage=goal.progress_percentage,
            is_completed=goal.is_completed,
            completed_at=goal.completed_at,
            target_date=goal.target_date,
            is_overdue=bool(goal.target_date and goal.target_date < date.today() and not goal.is_completed),
            total_challenges=total,
            completed_challenges=completed,
        )

    async def recalculate_progress(self, goal_id: int) -> Optional[Goal]:
        """Derive progress from linked challenges.

        Does not commit: callers run it inside their own transaction so the
        triggering write and the new progress land together.
        """
        goal = await self.goals.get(goal_id)
        if goal is None:
            logger.warning("Skipping progress recalculation: goal %s no longer exists", goal_id)
            return None

        try:
            total, completed = await self.goals.challenge_counts(goal_id)
        except Exception:
            logger.exception("Progress recalculation failed for goal %s", goal_id)
            raise

        progress = progress_percentage(completed, total)
        reached = progress == 100
        changes = {
            "progress_percentage": progress,
            "is_completed": reached,
            "completed_at": (goal.completed_at or datetime.now(timezone.utc)) if reached else None,
        }
        await self.goals.apply(goal, changes)
        logger.info("Goal %s progress recalculated: %s/%s -> %s%%", goal_id, completed, total, progress)
        return goal
