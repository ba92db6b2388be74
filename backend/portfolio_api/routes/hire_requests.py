"""Portfolio API — Hire-me request routes (POST/GET /api/hire-me)."""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from portfolio_api.database import Database, get_database
from portfolio_api.schemas.common import ErrorResponse
from portfolio_api.schemas.hire_request import HireRequestResponse
from portfolio_api.services.hire_request_service import hire_request_service

router = APIRouter(prefix="/api", tags=["Hire Me"])


@router.post(
    "/hire-me",
    status_code=201,
    response_model=HireRequestResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Submit a hire-me request",
)
async def create_hire_request(
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> HireRequestResponse:
    return await hire_request_service.create_request(db, payload)


@router.get(
    "/hire-me",
    response_model=List[HireRequestResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List hire-me requests, newest first",
)
async def list_hire_requests(db: Database = Depends(get_database)) -> List[HireRequestResponse]:
    return await hire_request_service.list_requests(db)
