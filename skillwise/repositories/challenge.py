from typing import List, Optional, Sequence
from sqlalchemy import select, delete, or_, func
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.models.challenge import Challenge


class ChallengeRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, challenge_id: int) -> Optional[Challenge]:
        result = await self.db.execute(select(Challenge).where(Challenge.id == challenge_id))
        return result.scalar_one_or_none()

    async def list(
        self,
        goal_id: Optional[int] = None,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        status: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Challenge]:
        query = select(Challenge)
        if goal_id is not None:
            query = query.where(Challenge.goal_id == goal_id)
        if category:
            query = query.where(func.lower(Challenge.category) == category.lower())
        if difficulty:
            query = query.where(Challenge.difficulty_level == difficulty.lower())
        if status:
            query = query.where(Challenge.status == status)
        if is_active is not None:
            query = query.where(Challenge.is_active == is_active)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(Challenge.title).like(pattern),
                    func.lower(func.coalesce(Challenge.description, "")).like(pattern),
                )
            )
        query = query.order_by(Challenge.created_at.desc(), Challenge.id.desc())

        if not tags:
            result = await self.db.execute(query.limit(limit).offset(offset))
            return list(result.scalars().all())

        # Tags live in a JSON column; overlap is checked here so the same
        # query works on SQLite and PostgreSQL.
        wanted = {tag.lower() for tag in tags}
        result = await self.db.execute(query)
        matching = [
            c for c in result.scalars().all()
            if wanted.intersection(tag.lower() for tag in (c.tags or []))
        ]
        return matching[offset:offset + limit]

    async def categories(self) -> List[str]:
        result = await self.db.execute(
            select(Challenge.category)
            .where(Challenge.category.isnot(None))
            .distinct()
            .order_by(Challenge.category)
        )
        return list(result.scalars().all())

    async def list_by_creator(self, user_id: int) -> Sequence[Challenge]:
        result = await self.db.execute(
            select(Challenge)
            .where(Challenge.created_by == user_id)
            .order_by(Challenge.created_at.desc(), Challenge.id.desc())
        )
        return result.scalars().all()

    async def add(self, challenge: Challenge) -> Challenge:
        self.db.add(challenge)
        await self.db.flush()
        return challenge

    async def apply(self, challenge: Challenge, changes: dict) -> Challenge:
        for column, value in changes.items():
            setattr(challenge, column, value)
        self.db.add(challenge)
        await self.db.flush()
        return challenge

    async def delete(self, challenge_id: int) -> None:
        await self.db.execute(delete(Challenge).where(Challenge.id == challenge_id))
