"""
Portfolio API — Feedback Service
=================================

What:  Create, list, approve and delete feedback entries.
Who:   Called by routes/feedback.py.

Feedback is addressed by its native `_id`. A path value that is not a valid
ObjectId cannot match any document, so it is reported as not found rather
than as a server error.

Approval is a one-way switch: approving an already-approved entry is a no-op
that still returns the record.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from portfolio_api.database import Database, database_error, utcnow
from portfolio_api.exceptions import NotFoundError
from portfolio_api.schemas.common import DeleteAcknowledgment
from portfolio_api.schemas.feedback import FeedbackResponse
from portfolio_api.validation import FEEDBACK_RULES, validate_payload

logger = logging.getLogger(__name__)


def _object_id(feedback_id: str) -> ObjectId:
    if not ObjectId.is_valid(feedback_id):
        raise NotFoundError(resource="feedback", resource_id=feedback_id)
    return ObjectId(feedback_id)


class FeedbackService:

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utcnow

    async def create_feedback(self, db: Database, payload: Mapping[str, Any]) -> FeedbackResponse:
        fields = validate_payload(payload, FEEDBACK_RULES)
        document = {**fields, "approved": False, "createdAt": self.clock()}

        try:
            result = await db.feedback.insert_one(document)
        except PyMongoError as e:
            raise database_error("save feedback", e)

        document["_id"] = result.inserted_id
        logger.info("Feedback %s received from %s", result.inserted_id, fields["email"])
        return FeedbackResponse.model_validate(document)

    async def list_feedback(self, db: Database) -> List[FeedbackResponse]:
        """All feedback, newest first, approved or not."""
        try:
            cursor = db.feedback.find({}, sort=[("createdAt", -1), ("_id", -1)])
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise database_error("list feedback", e)
        return [FeedbackResponse.model_validate(doc) for doc in documents]

    async def approve_feedback(self, db: Database, feedback_id: str) -> FeedbackResponse:
        oid = _object_id(feedback_id)
        try:
            document = await db.feedback.find_one_and_update(
                {"_id": oid},
                {"$set": {"approved": True}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise database_error("approve feedback", e)

        if document is None:
            raise NotFoundError(resource="feedback", resource_id=feedback_id)

        logger.info("Feedback %s approved", feedback_id)
        return FeedbackResponse.model_validate(document)

    async def delete_feedback(self, db: Database, feedback_id: str) -> DeleteAcknowledgment:
        oid = _object_id(feedback_id)
        try:
            result = await db.feedback.delete_one({"_id": oid})
        except PyMongoError as e:
            raise database_error("delete feedback", e)

        if result.deleted_count == 0:
            raise NotFoundError(resource="feedback", resource_id=feedback_id)

        logger.info("Feedback %s deleted", feedback_id)
        return DeleteAcknowledgment(acknowledged=result.acknowledged, deleted_count=result.deleted_count)


# ── Singleton Instance ────────────────────────────────────────────────────
feedback_service = FeedbackService()
