"""
CampFinder Backend — Uploaded File Serving
============================================

GET /uploads/{filename} returns a stored bootcamp photo. Paths are resolved
inside the configured upload directory only; anything that escapes it is a 400.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from app.config import UploadConfig
from app.dependencies import get_upload_config
from app.schemas.bootcamp import ErrorResponse
from app.services.file_service import file_service

router = APIRouter(tags=["Uploads"])


@router.get(
    "/uploads/{filename}",
    summary="Serve an uploaded photo",
    response_class=FileResponse,
    responses={404: {"description": "No such file", "model": ErrorResponse}},
)
async def serve_upload(
    filename: str,
    config: UploadConfig = Depends(get_upload_config),
) -> FileResponse:
    full_path = file_service.resolve_stored_file(filename, config)
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
