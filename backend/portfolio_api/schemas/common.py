"""
Portfolio API — Shared Response Schemas
========================================

What:  Base model for MongoDB-backed responses plus the error, message,
       acknowledgment and health payloads shared by every route.
Why:   Documents are stored with camelCase keys and an ObjectId `_id`;
       DocumentResponse converts both into JSON-friendly output once, so the
       resource schemas only declare their own fields.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class DocumentResponse(BaseModel):
    """
    Base for every stored record returned by the API.

    - `_id` (native record identity) is exposed as a string
    - snake_case attributes map to the camelCase keys used in storage
    - naive datetimes read back from the driver are marked as UTC
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    mongo_id: str = Field(alias="_id", description="Native record identity")

    @field_validator("mongo_id", mode="before")
    @classmethod
    def stringify_object_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("*", mode="after")
    @classmethod
    def mark_utc(cls, v: Any) -> Any:
        if isinstance(v, datetime) and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class FieldError(BaseModel):
    """One violated field in a validation failure."""
    field: str = Field(description="Name of the offending field")
    message: str = Field(description="What is wrong with it")
    location: str = Field(default="body", description="body, file, path or query")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Validation failed",
            "errors": [{"field": "email", "message": "email is required", "location": "body"}],
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    errors: Optional[List[FieldError]] = Field(default=None, description="Per-field violations")
    detail: Optional[str] = Field(default=None, description="Underlying error text (500 only)")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class DeleteAcknowledgment(BaseModel):
    """Result of a single-document delete, in the driver's terms."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    acknowledged: bool
    deleted_count: int


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
    details: Optional[Dict[str, Any]] = None
