"""
Portfolio API — Feedback Route Handlers
========================================

    POST   /api/feedback                 submit feedback (JSON)
    GET    /api/feedback                 list all feedback, newest first
    PUT    /api/feedback/{id}/approve    mark as approved (idempotent)
    DELETE /api/feedback/{id}/delete     remove

`{id}` is the native `_id` of the feedback document.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from portfolio_api.database import Database, get_database
from portfolio_api.schemas.common import DeleteAcknowledgment, ErrorResponse
from portfolio_api.schemas.feedback import FeedbackResponse
from portfolio_api.services.feedback_service import feedback_service

router = APIRouter(prefix="/api", tags=["Feedback"])


@router.post(
    "/feedback",
    status_code=201,
    response_model=FeedbackResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Submit feedback",
)
async def create_feedback(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> FeedbackResponse:
    return await feedback_service.create_feedback(db, payload)


@router.get(
    "/feedback",
    response_model=List[FeedbackResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List all feedback, approved or not",
)
async def list_feedback(db: Database = Depends(get_database)) -> List[FeedbackResponse]:
    return await feedback_service.list_feedback(db)


@router.put(
    "/feedback/{feedback_id}/approve",
    response_model=FeedbackResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Approve a feedback entry",
)
async def approve_feedback(feedback_id: str, db: Database = Depends(get_database)) -> FeedbackResponse:
    return await feedback_service.approve_feedback(db, feedback_id)


@router.delete(
    "/feedback/{feedback_id}/delete",
    response_model=DeleteAcknowledgment,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Delete a feedback entry",
)
async def delete_feedback(feedback_id: str, db: Database = Depends(get_database)) -> DeleteAcknowledgment:
    return await feedback_service.delete_feedback(db, feedback_id)
