"""
Portfolio API — Project Route Handlers
=======================================

What:  /api/projects list, detail, create (multipart), update, delete.
How:   Extract request data, delegate to ProjectService, return JSON.

Create request (multipart/form-data):
    title, category          required text fields
    description              optional text
    technologies             repeated field, or one field holding a JSON array
    client                   optional; JSON text is decoded, plain text kept
    img                      the image file (JPEG, PNG or GIF, max 5MB)

Update request (application/json):
    title, category, img required; description, technologies, client optional.
    No file upload on this path: `img` is the stored public path.

Projects are addressed by their sequential `id`, not by `_id`. A non-integer
id, or one outside 1..2**63-1, is rejected with 400 by the request-validation
handler.
"""

import json
import logging
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, Path, UploadFile

from portfolio_api.database import Database, get_database
from portfolio_api.schemas.common import ErrorResponse, MessageResponse
from portfolio_api.schemas.project import ProjectResponse
from portfolio_api.services.file_service import ImageUpload, file_service
from portfolio_api.services.project_service import project_service
from portfolio_api.validation import INT64_MAX

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Projects"])

# Ids are positive and must fit the 64-bit integer MongoDB stores
ProjectId = Annotated[int, Path(ge=1, le=INT64_MAX, description="Sequential project id")]


def _decode_structured(value: Optional[str]) -> Any:
    """Form fields are text; decode JSON objects/arrays, keep anything else as sent."""
    if value is None:
        return None
    try:
        decoded = json.loads(value)
    except ValueError:
        return value
    return decoded if isinstance(decoded, (dict, list)) else value


def _form_list(values: Optional[List[str]]) -> Optional[Any]:
    """
    Repeated fields arrive as a list already; a single field may hold a JSON
    array. Text that only looks like one ("[beta] SDK") is a single entry.
    """
    if values and len(values) == 1 and values[0].lstrip().startswith("["):
        decoded = _decode_structured(values[0])
        return decoded if isinstance(decoded, list) else values
    return values


async def _read_upload(img: Optional[UploadFile]) -> Optional[ImageUpload]:
    """
    Read the uploaded part into memory.

    At most max_file_size + 1 bytes are read: enough for FileService to see
    that an oversized file is over the limit without buffering all of it.
    """
    if img is None or not img.filename:
        return None
    try:
        content = await img.read(file_service.max_file_size + 1)
    finally:
        await img.close()

    logger.info(
        "Received project image: filename=%s, type=%s, size=%s",
        img.filename, img.content_type, img.size,
    )
    return ImageUpload(
        filename=img.filename,
        content_type=img.content_type,
        content=content,
        declared_size=img.size,
    )


@router.get(
    "/projects",
    response_model=List[ProjectResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List all projects, newest first",
)
async def list_projects(db: Database = Depends(get_database)) -> List[ProjectResponse]:
    return await project_service.list_projects(db)


@router.get(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Get a project by its sequential id",
)
async def get_project(project_id: ProjectId, db: Database = Depends(get_database)) -> ProjectResponse:
    return await project_service.get_project(db, project_id)


@router.post(
    "/projects",
    status_code=201,
    response_model=ProjectResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Create a project with its image",
)
async def create_project(
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    technologies: Optional[List[str]] = Form(None),
    client: Optional[str] = Form(None),
    img: Optional[UploadFile] = File(None, description="Project image (JPEG, PNG or GIF, max 5MB)"),
    db: Database = Depends(get_database),
) -> ProjectResponse:
    """
    Create a project.

    Error responses (handled by global exception handlers):
        HTTP 400: Missing/invalid fields, missing image, wrong type, too large
        HTTP 500: Storage or database failure
    """
    payload = {
        "title": title,
        "category": category,
        "description": description,
        "technologies": _form_list(technologies),
        "client": _decode_structured(client),
    }
    image = await _read_upload(img)
    return await project_service.create_project(db, payload, image)


@router.put(
    "/projects/{project_id}",
    response_model=ProjectResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Update a project's fields",
)
async def update_project(
    project_id: ProjectId,
    payload: Dict[str, Any] = Body(...),
    db: Database = Depends(get_database),
) -> ProjectResponse:
    return await project_service.update_project(db, project_id, payload)


@router.delete(
    "/projects/{project_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Delete a project",
)
async def delete_project(project_id: ProjectId, db: Database = Depends(get_database)) -> MessageResponse:
    return await project_service.delete_project(db, project_id)
