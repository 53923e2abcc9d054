from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.models.revoked_token import RevokedToken


class RevokedTokenRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_revoked(self, jti: str) -> bool:
        result = await self.db.execute(
            select(func.count(RevokedToken.id)).where(RevokedToken.jti == jti)
        )
        return result.scalar_one() > 0

    async def add(self, token: RevokedToken) -> RevokedToken:
        self.db.add(token)
        await self.db.flush()
        return token
