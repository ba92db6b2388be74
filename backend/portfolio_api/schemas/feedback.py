"""
Portfolio API — Feedback Schemas
=================================

`approved` starts false and is only ever flipped to true by the approve
route. Listing returns approved and unapproved entries alike; deciding what
to show publicly is the caller's job.
"""

from datetime import datetime

from pydantic import Field

from portfolio_api.schemas.common import DocumentResponse


class FeedbackResponse(DocumentResponse):
    name: str
    role: str
    company: str
    email: str
    subject: str
    message: str
    approved: bool = Field(default=False)
    created_at: datetime
