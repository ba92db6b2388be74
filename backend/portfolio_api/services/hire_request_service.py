"""
Portfolio API — Hire-Me Request Service
========================================

Hire requests are append-only: they are created and listed, never updated
or deleted through the API.
"""

import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from pymongo.errors import PyMongoError

from portfolio_api.database import Database, database_error, utcnow
from portfolio_api.schemas.hire_request import HireRequestResponse
from portfolio_api.validation import HIRE_REQUEST_RULES, validate_payload

logger = logging.getLogger(__name__)


class HireRequestService:

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utcnow

    async def create_request(self, db: Database, payload: Mapping[str, Any]) -> HireRequestResponse:
        fields = validate_payload(payload, HIRE_REQUEST_RULES)
        document = {**fields, "createdAt": self.clock()}

        try:
            result = await db.hire_requests.insert_one(document)
        except PyMongoError as e:
            raise database_error("save hire request", e)

        document["_id"] = result.inserted_id
        logger.info("Hire request %s received (%s)", result.inserted_id, fields["projectType"])
        return HireRequestResponse.model_validate(document)

    async def list_requests(self, db: Database) -> List[HireRequestResponse]:
        try:
            cursor = db.hire_requests.find({}, sort=[("createdAt", -1), ("_id", -1)])
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise database_error("list hire requests", e)
        return [HireRequestResponse.model_validate(doc) for doc in documents]


# ── Singleton Instance ────────────────────────────────────────────────────
hire_request_service = HireRequestService()
