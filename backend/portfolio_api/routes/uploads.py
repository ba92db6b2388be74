"""
Portfolio API — Uploaded Image Route
=====================================

What:  GET /uploads/{path} serves stored project images.
Who:   <img> tags in the frontend, via the `img` path on each project.

Security:
    The requested path is resolved inside the storage root; anything that
    escapes it (../../etc/passwd) is rejected with 400, anything missing is 404.
"""

import mimetypes

from fastapi import APIRouter
from fastapi.responses import FileResponse

from portfolio_api.exceptions import NotFoundError, ValidationError
from portfolio_api.services.file_service import file_service

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{file_path:path}",
    summary="Serve an uploaded image",
    responses={200: {"description": "Image file"}, 404: {"description": "File not found"}},
)
async def serve_upload(file_path: str) -> FileResponse:
    full_path = file_service.resolve_public_file(file_path)
    if full_path is None:
        raise ValidationError(message="Invalid file path", field="file_path")

    if not full_path.is_file():
        raise NotFoundError(resource="file", resource_id=file_path)

    media_type, _ = mimetypes.guess_type(full_path.name)
    return FileResponse(
        path=str(full_path),
        media_type=media_type or "application/octet-stream",
        headers={"Cache-Control": "public, max-age=86400"},
    )
