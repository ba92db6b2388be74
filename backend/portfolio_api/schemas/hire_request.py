"""Portfolio API — Hire-me request schemas."""

from datetime import datetime
from typing import Optional, Union

from portfolio_api.schemas.common import DocumentResponse


class HireRequestResponse(DocumentResponse):
    name: str
    email: str
    company: Optional[str] = None
    project_type: str
    project_description: str
    budget: Optional[Union[int, float]] = None
    timeframe: Optional[str] = None
    created_at: datetime
