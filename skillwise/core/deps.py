# skillwise/core/deps.py
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.config import settings
from skillwise.database import get_db
from skillwise.services.ai import AIService, CompletionClient, build_default_client
from skillwise.services.auth import AuthService
from skillwise.services.challenge import ChallengeService
from skillwise.services.goal import GoalService
from skillwise.services.peer_review import PeerReviewService
from skillwise.services.submission import SubmissionService


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)

def get_goal_service(db: AsyncSession = Depends(get_db)) -> GoalService:
    return GoalService(db)

def get_challenge_service(db: AsyncSession = Depends(get_db)) -> ChallengeService:
    return ChallengeService(db)

def get_submission_service(db: AsyncSession = Depends(get_db)) -> SubmissionService:
    return SubmissionService(db)

def get_peer_review_service(db: AsyncSession = Depends(get_db)) -> PeerReviewService:
    return PeerReviewService(db)

def get_completion_client() -> CompletionClient:
    return build_default_client()

def get_ai_service(client: CompletionClient = Depends(get_completion_client)) -> AIService:
    return AIService(client, max_tokens=settings.AI_MAX_TOKENS)
