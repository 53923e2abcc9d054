from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_submission_service
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.submission import SubmissionCreate, SubmissionPatch, SubmissionFilter, SubmissionResponse
from skillwise.services.submission import SubmissionService

router = APIRouter(prefix="/submissions", tags=["submissions"])

@router.post("", response_model=ApiResponse[SubmissionResponse], status_code=status.HTTP_201_CREATED)
async def create_submission(
    submission_in: SubmissionCreate,
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    row = await submissions.create(current_user.id, submission_in)
    return ApiResponse(data=SubmissionResponse.from_row(*row), message="Submission created successfully")

@router.get("", response_model=ApiResponse[List[SubmissionResponse]])
async def list_submissions(
    challenge_id: Optional[int] = Query(None, alias="challengeId"),
    status: Optional[str] = None,
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    rows = await submissions.list(current_user.id, SubmissionFilter(challenge_id=challenge_id, status=status))
    return ApiResponse(data=[SubmissionResponse.from_row(*row) for row in rows])

@router.get("/{submission_id}", response_model=ApiResponse[SubmissionResponse])
async def get_submission(
    submission_id: int,
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    row = await submissions.get(submission_id, current_user.id)
    return ApiResponse(data=SubmissionResponse.from_row(*row))

@router.put("/{submission_id}", response_model=ApiResponse[SubmissionResponse])
async def update_submission(
    submission_id: int,
    patch: SubmissionPatch,
    submissions: SubmissionService = Depends(get_submission_service),
    current_user = Depends(get_current_user)
):
    row = await submissions.update(submission_id, current_user.id, patch)
    return ApiResponse(data=SubmissionResponse.from_row(*row), message="Submission updated successfully")
