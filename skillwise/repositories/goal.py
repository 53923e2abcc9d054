from typing import Optional, Sequence
from sqlalchemy import select, delete, func, case
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.models.goal import Goal
from skillwise.models.challenge import Challenge
from skillwise.models.enums import ChallengeStatus


class GoalRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_owned(self, goal_id: int, user_id: int) -> Optional[Goal]:
        result = await self.db.execute(
            select(Goal).where(Goal.id == goal_id, Goal.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get(self, goal_id: int) -> Optional[Goal]:
        result = await self.db.execute(select(Goal).where(Goal.id == goal_id))
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        user_id: int,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        is_completed: Optional[bool] = None,
    ) -> Sequence[Goal]:
        query = select(Goal).where(Goal.user_id == user_id)
        if category:
            query = query.where(func.lower(Goal.category) == category.lower())
        if difficulty:
            query = query.where(Goal.difficulty_level == difficulty.lower())
        if is_completed is not None:
            query = query.where(Goal.is_completed == is_completed)
        result = await self.db.execute(query.order_by(Goal.created_at.desc(), Goal.id.desc()))
        return result.scalars().all()

    async def add(self, goal: Goal) -> Goal:
        self.db.add(goal)
        await self.db.flush()
        return goal

    async def apply(self, goal: Goal, changes: dict) -> Goal:
        for column, value in changes.items():
            setattr(goal, column, value)
        self.db.add(goal)
        await self.db.flush()
        return goal

    async def delete(self, goal_id: int) -> None:
        await self.db.execute(delete(Goal).where(Goal.id == goal_id))

    async def challenge_counts(self, goal_id: int) -> tuple:
        """(total, completed) challenges linked to the goal."""
        result = await self.db.execute(
            select(
                func.count(Challenge.id),
                func.coalesce(
                    func.sum(case((Challenge.status == ChallengeStatus.COMPLETED.value, 1), else_=0)),
                    0,
                ),
            ).where(Challenge.goal_id == goal_id)
        )
        total, completed = result.one()
        return int(total or 0), int(completed or 0)
