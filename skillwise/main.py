# skillwise/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import exc as sa_exc
from skillwise.config import settings
from skillwise.core.errors import register_exception_handlers
from skillwise.database import engine, Base
from skillwise.models.user import User  # noqa: F401
from skillwise.models.goal import Goal  # noqa: F401
from skillwise.models.challenge import Challenge  # noqa: F401
from skillwise.models.submission import Submission  # noqa: F401
from skillwise.models.peer_review import PeerReview  # noqa: F401
from skillwise.models.revoked_token import RevokedToken  # noqa: F401
from skillwise.routers import auth, user, goal, challenge, submission, peer_review, ai

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="SkillWise API", version="1.0")
register_exception_handlers(app)

if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Include Routers
for module in (auth, user, goal, challenge, submission, peer_review, ai):
    app.include_router(module.router, prefix="/api")

# Create DB Tables (for local runs; use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "already exists" in msg:
                logging.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"success": True, "message": "SkillWise API is running"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("skillwise.main:app", host="0.0.0.0", port=8000, reload=True)
