"""
Portfolio API — Project Schemas
================================

What:  Response model for the `projects` collection.
Who:   Returned by every /api/projects route.

Fields:
    id            Application-assigned sequential id (distinct from `_id`)
    img           Public path of the uploaded image, e.g. /uploads/projects/...
    client        Free-form value: an object, a name, whatever the owner stored
    createdAt     Set on creation, never changed
    updatedAt     Refreshed on every update
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from portfolio_api.schemas.common import DocumentResponse


class ProjectResponse(DocumentResponse):
    id: int = Field(description="Sequential project id")
    title: str
    category: str
    img: str = Field(description="Public path of the project image")
    client: Optional[Any] = None
    description: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None
