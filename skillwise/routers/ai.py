import json
import logging
from typing import Any, Dict, Optional
import pydantic
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_ai_service, get_challenge_service, get_submission_service
from skillwise.core.errors import NotFound, ValidationError
from skillwise.database import get_db
from skillwise.schemas.ai import (
    GenerateChallengeRequest, GeneratedChallengeResponse, FeedbackRequest, FeedbackResponse, HintsResponse,
    FeedbackHistoryItem, FeedbackHistoryResponse, AnalysisResponse
)
from skillwise.schemas.challenge import ChallengeCreate
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.submission import SubmissionCreate, SubmissionPatch, SubmissionResponse
from skillwise.services.ai import AIService, feedback_score, stored_feedback
from skillwise.services.challenge import ChallengeService
from skillwise.services.submission import SubmissionService
from skillwise.services.unit_of_work import atomic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

SAVED_CHALLENGE_FIELDS = set(ChallengeCreate.model_fields) - {"goal_id", "status", "is_active"}


@router.post("/generateChallenge", response_model=ApiResponse[GeneratedChallengeResponse])
async def generate_challenge(
    body: GenerateChallengeRequest,
    ai: AIService = Depends(get_ai_service),
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    result = await ai.generate_challenge(body.category, body.difficulty, body.topic)
    response = GeneratedChallengeResponse(**result)

    if body.save_to_database:
        fields = {k: v for k, v in result["challenge"].items() if k in SAVED_CHALLENGE_FIELDS}
        try:
            challenge_in = ChallengeCreate(goal_id=body.goal_id, **fields)
            challenge = await challenges.create(challenge_in, current_user.id)
        except (pydantic.ValidationError, ValidationError, NotFound) as e:
            # the generated challenge is still returned to the caller
            logger.warning("Generated challenge could not be saved: %s", e)
        else:
            response.saved = True
            response.challenge_id = challenge.id

    return ApiResponse(data=response, message="Challenge generated successfully")


@router.post("/feedback", response_model=ApiResponse[FeedbackResponse])
async def generate_feedback(
    body: FeedbackRequest,
    ai: AIService = Depends(get_ai_service),
    challenges: ChallengeService = Depends(get_challenge_service),
    current_user = Depends(get_current_user)
):
    challenge = await challenges.get(body.challenge_id)
    result = await ai.generate_feedback(body.submission_text, challenge)
    return ApiResponse(data=FeedbackResponse(**result), message="Feedback generated successfully")


@router.post("/submitForFeedback", response_model=ApiResponse[FeedbackResponse])
async def submit_for_feedback(
    body: FeedbackRequest,
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
    challenges: ChallengeService = Depends(get_challenge_service),
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    ai.ensure_configured()
    await challenges.get(body.challenge_id)

    # The attempt only counts once feedback is stored with it.
    async with atomic(db):
        submission, challenge = await submissions.add_attempt(
            current_user.id,
            SubmissionCreate(challenge_id=body.challenge_id, submission_text=body.submission_text),
        )
        result = await ai.generate_feedback(body.submission_text, challenge)
        await submissions.apply_patch(
            submission,
            current_user.id,
            SubmissionPatch(feedback=json.dumps(result["feedback"]), score=feedback_score(result["feedback"])),
        )
    await db.refresh(submission)
    logger.info("Submission %s stored with AI feedback for user %s", submission.id, current_user.id)

    return ApiResponse(
        data=FeedbackResponse(
            **result, submission=SubmissionResponse.from_row(submission, challenge.goal_id, challenge.title)
        ),
        message="Feedback generated successfully"
    )


@router.get("/hints/{challenge_id}", response_model=ApiResponse[HintsResponse])
async def get_hints(
    challenge_id: int,
    ai: AIService = Depends(get_ai_service),
    challenges: ChallengeService = Depends(get_challenge_service),
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    challenge = await challenges.get(challenge_id)
    attempts = await submissions.count_attempts(current_user.id, challenge.id)
    hints = await ai.generate_hints(challenge, attempts)
    return ApiResponse(data=HintsResponse(hints=hints, attempts=attempts))


@router.get("/suggestions", response_model=ApiResponse[Dict[str, Any]])
async def suggest_challenges(
    ai: AIService = Depends(get_ai_service),
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    completed = await submissions.completed_summary(current_user.id)
    suggestions = await ai.suggest_next_challenges(completed)
    return ApiResponse(data=suggestions)


@router.get("/feedbackHistory", response_model=ApiResponse[FeedbackHistoryResponse])
async def feedback_history(
    challenge_id: Optional[int] = Query(None, alias="challengeId"),
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    rows = await submissions.feedback_history(current_user.id, challenge_id)
    items = [
        FeedbackHistoryItem(
            submission_id=submission.id,
            challenge_id=submission.challenge_id,
            challenge_title=title,
            challenge_category=category,
            feedback=stored_feedback(submission.feedback),
            score=submission.score,
            attempt_number=submission.attempt_number,
            submitted_at=submission.submitted_at,
        )
        for submission, title, category in rows
    ]
    return ApiResponse(data=FeedbackHistoryResponse(feedback=items, count=len(items)))


@router.get("/analysis", response_model=ApiResponse[AnalysisResponse])
async def analyze_progress(
    ai: AIService = Depends(get_ai_service),
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    stats = await submissions.learning_stats(current_user.id)
    result = await ai.analyze_progress(stats)
    return ApiResponse(
        data=AnalysisResponse(analysis=result["analysis"], stats=stats, metadata=result["metadata"]),
        message="Learning analysis generated successfully"
    )
