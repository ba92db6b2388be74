"""
Portfolio API — Project Service
================================

What:  Business logic for the `projects` collection.
Who:   Called by routes/projects.py; uses FileService and the Database handle.

Create workflow (POST /api/projects):
    ┌───────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate  │───▶│ Check image  │───▶│ Store image  │───▶│ Insert   │
    │ fields    │    │ type + size  │    │ (FileServ)   │    │ next id  │
    └───────────┘    └──────────────┘    └──────────────┘    └──────────┘

    On failure:
    - Field or image errors → ValidationError / UploadRejectedError, nothing stored
    - Insert fails          → stored image is removed, error propagates

Sequential ids:
    Projects carry an application id (max existing id + 1, or 1). Reading the
    maximum and inserting are two operations, so concurrent creates can pick
    the same value. The unique index on `id` (Database.ensure_indexes) makes
    the loser's insert fail with DuplicateKeyError; the service then recomputes
    and retries through tenacity, up to settings.project_id_attempts times.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from portfolio_api.config import settings
from portfolio_api.database import Database, database_error, utcnow
from portfolio_api.exceptions import DatabaseError, NotFoundError, ValidationError
from portfolio_api.schemas.common import MessageResponse
from portfolio_api.schemas.project import ProjectResponse
from portfolio_api.services.file_service import UPLOAD_FIELD, ImageUpload, file_service
from portfolio_api.validation import (
    PROJECT_CREATE_RULES,
    PROJECT_UPDATE_RULES,
    check_payload,
    validate_payload,
)

logger = logging.getLogger(__name__)


class ProjectService:
    """
    Responsibilities:
        - list_projects():  every project, newest first
        - get_project():    lookup by sequential id
        - create_project(): validate → store image → insert with next id
        - update_project(): validate → $set mutable fields + updatedAt
        - delete_project(): remove by sequential id
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utcnow

    async def list_projects(self, db: Database) -> List[ProjectResponse]:
        try:
            cursor = db.projects.find({}, sort=[("createdAt", -1), ("_id", -1)])
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise database_error("list projects", e)
        return [ProjectResponse.model_validate(doc) for doc in documents]

    async def get_project(self, db: Database, project_id: int) -> ProjectResponse:
        try:
            document = await db.projects.find_one({"id": project_id})
        except PyMongoError as e:
            raise database_error("fetch project", e)

        if document is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))
        return ProjectResponse.model_validate(document)

    async def next_id(self, db: Database) -> int:
        """Highest existing project id + 1, or 1 for an empty collection."""
        last = await db.projects.find_one({}, sort=[("id", -1)], projection={"id": 1})
        if not last or last.get("id") is None:
            return 1
        return int(last["id"]) + 1

    async def create_project(
        self,
        db: Database,
        payload: Mapping[str, Any],
        image: Optional[ImageUpload],
    ) -> ProjectResponse:
        """
        Create a project from form fields and an uploaded image.

        Raises:
            ValidationError:     Field violations and/or missing image, all listed
            UploadRejectedError: Image of the wrong type or over the size limit
            FileStorageError:    Image could not be written
            DatabaseError:       Insert failed or no free id after retries
        """
        fields, errors = check_payload(payload, PROJECT_CREATE_RULES)
        if image is None:
            errors.append({"field": UPLOAD_FIELD, "message": "An image file is required", "location": "file"})
        if errors:
            raise ValidationError(message="Validation failed", errors=errors)

        absolute_path, public_path = await file_service.validate_and_store(image)

        try:
            document = await self._insert_with_next_id(db, {**fields, "img": public_path})
        except Exception:
            await file_service.cleanup_file(absolute_path)
            raise

        logger.info("Project %d created: %s", document["id"], document["title"])
        return ProjectResponse.model_validate(document)

    async def _insert_with_next_id(self, db: Database, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert under a freshly computed id, retrying on an id conflict.

        Tenacity re-runs the whole attempt, so every retry reads the maximum
        id again. Only DuplicateKeyError is retried; any other driver error
        has already become a DatabaseError and propagates immediately.
        """
        attempts = settings.project_id_attempts
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                retry=retry_if_exception_type(DuplicateKeyError),
                before_sleep=before_sleep_log(logger, logging.WARNING),
            ):
                with attempt:
                    document = await self._insert_once(db, fields)
        except RetryError:
            raise DatabaseError(
                message="Could not assign a project id",
                context={"original_error": f"id conflict persisted after {attempts} attempts"},
            )
        return document

    async def _insert_once(self, db: Database, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            new_id = await self.next_id(db)
            now = self.clock()
            document = {"id": new_id, **fields, "createdAt": now, "updatedAt": now}
            result = await db.projects.insert_one(document)
        except DuplicateKeyError:
            logger.warning("Project id %d was claimed concurrently", new_id)
            raise
        except PyMongoError as e:
            raise database_error("create project", e)

        document["_id"] = result.inserted_id
        return document

    async def update_project(
        self, db: Database, project_id: int, payload: Mapping[str, Any]
    ) -> ProjectResponse:
        """
        Replace the mutable fields of a project and refresh updatedAt.

        `id`, `_id` and `createdAt` are not in the rule table, so a body
        carrying them cannot change them.
        """
        fields = validate_payload(payload, PROJECT_UPDATE_RULES)

        try:
            document = await db.projects.find_one_and_update(
                {"id": project_id},
                {"$set": {**fields, "updatedAt": self.clock()}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise database_error("update project", e)

        if document is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))

        logger.info("Project %d updated", project_id)
        return ProjectResponse.model_validate(document)

    async def delete_project(self, db: Database, project_id: int) -> MessageResponse:
        try:
            document = await db.projects.find_one_and_delete({"id": project_id})
        except PyMongoError as e:
            raise database_error("delete project", e)

        if document is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))

        logger.info("Project %d deleted", project_id)
        return MessageResponse(message="Project deleted successfully")


# ── Singleton Instance ────────────────────────────────────────────────────
project_service = ProjectService()
