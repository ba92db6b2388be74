"""
Portfolio API — Database Handle
================================

What:  Owns the MongoDB client and exposes the three collections.
Why:   One handle with an explicit lifecycle replaces ambient global state:
       opened once at startup, passed to every request, closed on shutdown.
How:   Wraps pymongo's AsyncMongoClient. The application lifespan calls
       connect()/close(); route handlers receive the handle through the
       get_database() dependency.
When:  Created by create_app(); tests inject a handle backed by an
       in-memory client.

Collections (document layout shared with earlier deployments):
    projects   Project documents, unique index on the sequential `id`
    feedbacks  Feedback documents
    hiremes    Hire-me requests
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from portfolio_api.config import settings
from portfolio_api.exceptions import DatabaseError

logger = logging.getLogger(__name__)

PROJECTS = "projects"
FEEDBACK = "feedbacks"
HIRE_REQUESTS = "hiremes"


def utcnow() -> datetime:
    """
    Current UTC time truncated to milliseconds.

    MongoDB keeps millisecond precision; truncating up front means the record a
    write returns is the same one a later read returns.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def database_error(action: str, exc: PyMongoError) -> DatabaseError:
    """Translate a driver failure into the application's DatabaseError."""
    logger.error("Database error while trying to %s: %s", action, str(exc))
    return DatabaseError(
        message=f"Could not {action}",
        context={"original_error": str(exc), "error_type": type(exc).__name__},
    )


class Database:
    """
    Shared MongoDB handle.

    Args:
        client: An async Mongo client. Built from settings when omitted.
        name:   Database name. Defaults to the database named in the URL,
                falling back to settings.database_name.
    """

    def __init__(self, client: Optional[Any] = None, name: Optional[str] = None):
        if client is None:
            client = AsyncMongoClient(
                settings.database_url,
                serverSelectionTimeoutMS=settings.db_server_selection_timeout_ms,
                tz_aware=True,
                connect=False,
            )
            db = client.get_default_database(default=name or settings.database_name)
        else:
            db = client[name or settings.database_name]
        self.client = client
        self.db = db

    @property
    def projects(self):
        return self.db[PROJECTS]

    @property
    def feedback(self):
        return self.db[FEEDBACK]

    @property
    def hire_requests(self):
        return self.db[HIRE_REQUESTS]

    async def ensure_indexes(self) -> None:
        """
        Create the indexes the services rely on.

        The unique index on projects.id turns a racing id assignment into a
        DuplicateKeyError that ProjectService retries.
        """
        await self.projects.create_index("id", unique=True, name="project_sequence_id")
        await self.projects.create_index([("createdAt", -1)], name="projects_created_at")
        await self.feedback.create_index([("createdAt", -1)], name="feedback_created_at")
        await self.hire_requests.create_index([("createdAt", -1)], name="hire_requests_created_at")

    async def ping(self) -> bool:
        """Lightweight connectivity check used by startup and /health."""
        await self.client.admin.command("ping")
        return True

    async def connect(self) -> None:
        """
        Verify connectivity and prepare indexes.

        Called once from the application lifespan. Raises the driver's error
        if the server cannot be reached, so startup fails loudly.
        """
        await self.ping()
        await self.ensure_indexes()
        logger.info("Connected to MongoDB database '%s'", self.db.name)

    async def close(self) -> None:
        """Close every pooled connection. Called on shutdown."""
        await self.client.close()
        logger.info("MongoDB connection closed")


# ── Request Dependency ────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the handle stored on the application.

    Example usage in a route:
        @router.get("/projects")
        async def list_projects(db: Database = Depends(get_database)):
            ...
    """
    return request.app.state.database
