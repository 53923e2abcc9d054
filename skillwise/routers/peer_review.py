from typing import List
from fastapi import APIRouter, Depends, status
from skillwise.core.auth import get_current_user
from skillwise.core.deps import get_peer_review_service
from skillwise.schemas.common import ApiResponse
from skillwise.schemas.peer_review import (
    PeerReviewSubmit, PeerReviewAssign, PeerReviewComplete, PeerReviewResponse
)
from skillwise.services.peer_review import PeerReviewService

router = APIRouter(prefix="/peer-reviews", tags=["peer-reviews"])

@router.get("/assignments", response_model=ApiResponse[List[PeerReviewResponse]])
async def get_review_assignments(
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    rows = await reviews.list_pending(current_user.id)
    return ApiResponse(data=[PeerReviewResponse.from_row(*row) for row in rows])

@router.post("", response_model=ApiResponse[PeerReviewResponse], status_code=status.HTTP_201_CREATED)
async def submit_review(
    review_in: PeerReviewSubmit,
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    review = await reviews.submit(current_user.id, review_in)
    return ApiResponse(data=PeerReviewResponse.from_row(review), message="Review submitted successfully")

@router.post("/assign", response_model=ApiResponse[PeerReviewResponse], status_code=status.HTTP_201_CREATED)
async def assign_review(
    assignment: PeerReviewAssign,
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    review = await reviews.assign(current_user, assignment)
    return ApiResponse(data=PeerReviewResponse.from_row(review), message="Review assigned successfully")

@router.put("/{review_id}/complete", response_model=ApiResponse[PeerReviewResponse])
async def complete_review(
    review_id: int,
    review_in: PeerReviewComplete,
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    review = await reviews.complete(review_id, current_user.id, review_in)
    return ApiResponse(data=PeerReviewResponse.from_row(review), message="Review completed successfully")

@router.get("/received", response_model=ApiResponse[List[PeerReviewResponse]])
async def get_received_reviews(
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    rows = await reviews.list_received(current_user.id)
    return ApiResponse(data=[PeerReviewResponse.from_row(*row, hide_reviewer=True) for row in rows])

@router.get("/history", response_model=ApiResponse[List[PeerReviewResponse]])
async def get_review_history(
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    rows = await reviews.list_by_reviewer(current_user.id)
    return ApiResponse(data=[PeerReviewResponse.from_row(*row) for row in rows])

@router.get("/submission/{submission_id}", response_model=ApiResponse[List[PeerReviewResponse]])
async def get_submission_reviews(
    submission_id: int,
    reviews: PeerReviewService = Depends(get_peer_review_service),
    current_user = Depends(get_current_user)
):
    rows = await reviews.list_for_submission(submission_id, current_user.id)
    return ApiResponse(data=[PeerReviewResponse.from_row(r, hide_reviewer=True) for r in rows])
