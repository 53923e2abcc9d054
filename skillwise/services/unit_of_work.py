from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession


@asynccontextmanager
async def atomic(db: AsyncSession):
    """Commit everything done inside the block, or nothing."""
    try:
        yield
        await db.commit()
    except Exception:
        await db.rollback()
        raise
