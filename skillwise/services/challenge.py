import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.core.errors import NotFound, AccessDenied
from skillwise.models.challenge import Challenge
from skillwise.models.enums import ChallengeStatus
from skillwise.repositories.challenge import ChallengeRepository
from skillwise.repositories.goal import GoalRepository
from skillwise.schemas.challenge import ChallengeCreate, ChallengePatch, ChallengeFilter
from skillwise.services.goal import GoalService
from skillwise.services.unit_of_work import atomic
from skillwise.services.validation import (
    validate_title, normalize_difficulty, normalize_challenge_status,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "Programming",
    "Web Development",
    "Mobile Development",
    "Data Science",
    "DevOps",
    "Design",
    "Database",
]

DEFAULT_POINTS_REWARD = 10
DEFAULT_MAX_ATTEMPTS = 3

# Columns that may be cleared with an explicit null; any other null in a
# patch leaves the stored value alone.
NULLABLE_FIELDS = {"description", "instructions", "category", "goal_id", "estimated_time_minutes"}


class ChallengeService:
    def __init__(
        self,
        db: AsyncSession,
        challenges: Optional[ChallengeRepository] = None,
        goals: Optional[GoalRepository] = None,
    ):
        self.db = db
        self.challenges = challenges or ChallengeRepository(db)
        self.goals = goals or GoalRepository(db)
        self.goal_service = GoalService(db, self.goals)

    async def list(self, filters: Optional[ChallengeFilter] = None) -> List[Challenge]:
        filters = filters or ChallengeFilter()
        return await self.challenges.list(
            goal_id=filters.goal_id,
            category=filters.category,
            difficulty=normalize_difficulty(filters.difficulty) if filters.difficulty else None,
            status=normalize_challenge_status(filters.status) if filters.status else None,
            is_active=filters.is_active,
            search=filters.search,
            tags=filters.tags,
            limit=filters.limit,
            offset=filters.offset,
        )

    async def get(self, challenge_id: int) -> Challenge:
        challenge = await self.challenges.get(challenge_id)
        if challenge is None:
            raise NotFound("Challenge not found")
        return challenge

    async def categories(self) -> List[str]:
        categories = await self.challenges.categories()
        return categories or list(DEFAULT_CATEGORIES)

    async def list_created_by(self, user_id: int) -> List[Challenge]:
        return list(await self.challenges.list_by_creator(user_id))

    async def _ensure_goal_owned(self, goal_id: int, user_id: Optional[int]) -> None:
        if user_id is None:
            if await self.goals.get(goal_id) is None:
                raise NotFound("Goal not found")
            return
        if await self.goals.get_owned(goal_id, user_id) is None:
            raise NotFound("Goal not found")

    def _ensure_can_modify(self, challenge: Challenge, user_id: Optional[int]) -> None:
        if user_id is None or challenge.created_by is None:
            return
        if challenge.created_by != user_id:
            raise AccessDenied("You do not have permission to modify this challenge")

    async def create(self, challenge_in: ChallengeCreate, user_id: Optional[int] = None) -> Challenge:
        if challenge_in.goal_id is not None:
            await self._ensure_goal_owned(challenge_in.goal_id, user_id)

        challenge = Challenge(
            title=validate_title(challenge_in.title),
            description=challenge_in.description,
            instructions=challenge_in.instructions or challenge_in.description,
            category=challenge_in.category,
            difficulty_level=normalize_difficulty(challenge_in.difficulty_level, default="medium"),
            goal_id=challenge_in.goal_id,
            created_by=user_id,
            status=(
                normalize_challenge_status(challenge_in.status)
                if challenge_in.status else ChallengeStatus.NOT_STARTED.value
            ),
            points_reward=challenge_in.points_reward or DEFAULT_POINTS_REWARD,
            estimated_time_minutes=challenge_in.estimated_time_minutes,
            max_attempts=challenge_in.max_attempts or DEFAULT_MAX_ATTEMPTS,
            is_active=True if challenge_in.is_active is None else challenge_in.is_active,
            tags=challenge_in.tags or [],
            prerequisites=challenge_in.prerequisites or [],
            learning_objectives=challenge_in.learning_objectives or [],
            test_cases=challenge_in.test_cases or [],
        )

        async with atomic(self.db):
            await self.challenges.add(challenge)
            if challenge.goal_id is not None:
                await self.goal_service.recalculate_progress(challenge.goal_id)
        await self.db.refresh(challenge)
        logger.info("Challenge %s created (goal=%s)", challenge.id, challenge.goal_id)
        return challenge

    async def update(
        self, challenge_id: int, patch: ChallengePatch, user_id: Optional[int] = None
    ) -> Challenge:
        challenge = await self.get(challenge_id)
        self._ensure_can_modify(challenge, user_id)

        changes = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if "title" in changes:
            changes["title"] = validate_title(changes["title"])
        if "difficulty_level" in changes:
            changes["difficulty_level"] = normalize_difficulty(changes["difficulty_level"])
        if "status" in changes:
            changes["status"] = normalize_challenge_status(changes["status"])
        if changes.get("goal_id") is not None and changes["goal_id"] != challenge.goal_id:
            await self._ensure_goal_owned(changes["goal_id"], user_id)

        previous_goal_id = challenge.goal_id
        previous_status = challenge.status

        async with atomic(self.db):
            await self.challenges.apply(challenge, changes)
            status_changed = challenge.status != previous_status
            relinked = challenge.goal_id != previous_goal_id
            if status_changed or relinked:
                for goal_id in {previous_goal_id, challenge.goal_id} - {None}:
                    await self.goal_service.recalculate_progress(goal_id)
        await self.db.refresh(challenge)
        return challenge

    async def delete(self, challenge_id: int, user_id: Optional[int] = None) -> None:
        challenge = await self.get(challenge_id)
        self._ensure_can_modify(challenge, user_id)
        goal_id = challenge.goal_id

        async with atomic(self.db):
            await self.challenges.delete(challenge_id)
            if goal_id is not None:
                await self.goal_service.recalculate_progress(goal_id)
        logger.info("Challenge %s deleted", challenge_id)
