"""
CampFinder Backend — Bootcamp Route Handlers
==============================================

Route Table (prefix /api/v1/bootcamps):
    GET    /                              list (filter/select/sort/page)   public
    POST   /                              create                          publisher, admin
    GET    /radius/{zipcode}/{distance}   radius search (km)              public
    GET    /{bootcamp_id}                 get one                         public
    PUT    /{bootcamp_id}                 partial update                  publisher, admin
    DELETE /{bootcamp_id}                 delete                          publisher, admin
    PUT    /{bootcamp_id}/photo           photo upload (multipart 'file') publisher, admin

Handlers stay thin: pull values out of the request, call BootcampService, return
its envelope. Errors propagate to the handlers registered in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import UploadConfig
from app.database import get_db_session
from app.dependencies import CurrentUser, authorise, get_upload_config
from app.schemas.bootcamp import (
    BootcampCreate,
    BootcampEnvelope,
    BootcampListResponse,
    BootcampRadiusResponse,
    BootcampUpdate,
    DeleteResponse,
    ErrorResponse,
    PhotoUploadResponse,
)
from app.services.bootcamp_service import bootcamp_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bootcamps", tags=["Bootcamps"])

publisher_or_admin = authorise("publisher", "admin")

_NOT_FOUND = {404: {"description": "Bootcamp not found", "model": ErrorResponse}}
_PROTECTED = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Role not allowed", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=BootcampListResponse,
    summary="List bootcamps",
    description=(
        "Filters are plain query parameters (`housing=true`) or comparisons in "
        "`field[op]=value` form with op one of gt, gte, lt, lte, in "
        "(`average_cost[lte]=10000`, `careers[in]=Business,UI/UX`). "
        "`select=name,city` projects fields, `sort=-average_cost,name` orders "
        "results (default `-created_at`), `page`/`limit` paginate (defaults 1/25)."
    ),
    responses={400: {"description": "Bad filter", "model": ErrorResponse}},
)
async def list_bootcamps(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> BootcampListResponse:
    raw_params = dict(request.query_params)
    return await bootcamp_service.list_bootcamps(db=db, raw_params=raw_params)


@router.post(
    "",
    status_code=201,
    response_model=BootcampEnvelope,
    summary="Create a bootcamp",
    responses={400: {"description": "Invalid body or duplicate name", "model": ErrorResponse}, **_PROTECTED},
)
async def create_bootcamp(
    payload: BootcampCreate,
    user: CurrentUser = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BootcampEnvelope:
    return await bootcamp_service.create_bootcamp(db=db, payload=payload, user=user)


@router.get(
    "/radius/{zipcode}/{distance}",
    response_model=BootcampRadiusResponse,
    summary="Bootcamps within a distance of a zipcode",
    description="`distance` is in kilometres. The zipcode is geocoded and the first match is the centre.",
    responses={
        400: {"description": "Distance is not a number", "model": ErrorResponse},
        404: {"description": "Zipcode could not be located", "model": ErrorResponse},
        503: {"description": "Geocoder unavailable", "model": ErrorResponse},
    },
)
async def bootcamps_in_radius(
    zipcode: str,
    distance: str,
    db: AsyncSession = Depends(get_db_session),
) -> BootcampRadiusResponse:
    return await bootcamp_service.bootcamps_in_radius(db=db, zipcode=zipcode, distance=distance)


@router.get(
    "/{bootcamp_id}",
    response_model=BootcampEnvelope,
    summary="Get a single bootcamp",
    responses=_NOT_FOUND,
)
async def get_bootcamp(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> BootcampEnvelope:
    return await bootcamp_service.get_bootcamp(db=db, bootcamp_id=bootcamp_id)


@router.put(
    "/{bootcamp_id}",
    response_model=BootcampEnvelope,
    summary="Update a bootcamp",
    responses={**_NOT_FOUND, **_PROTECTED},
)
async def update_bootcamp(
    bootcamp_id: str,
    payload: BootcampUpdate,
    user: CurrentUser = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BootcampEnvelope:
    return await bootcamp_service.update_bootcamp(db=db, bootcamp_id=bootcamp_id, payload=payload)


@router.delete(
    "/{bootcamp_id}",
    response_model=DeleteResponse,
    summary="Delete a bootcamp",
    responses={**_NOT_FOUND, **_PROTECTED},
)
async def delete_bootcamp(
    bootcamp_id: str,
    user: CurrentUser = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> DeleteResponse:
    return await bootcamp_service.delete_bootcamp(db=db, bootcamp_id=bootcamp_id)


@router.put(
    "/{bootcamp_id}/photo",
    response_model=PhotoUploadResponse,
    summary="Upload a bootcamp photo",
    responses={
        400: {"description": "No file, not an image, or too large", "model": ErrorResponse},
        500: {"description": "File could not be stored", "model": ErrorResponse},
        **_NOT_FOUND,
        **_PROTECTED,
    },
)
async def upload_bootcamp_photo(
    bootcamp_id: str,
    file: Optional[UploadFile] = File(default=None, description="Image file"),
    user: CurrentUser = Depends(publisher_or_admin),
    config: UploadConfig = Depends(get_upload_config),
    db: AsyncSession = Depends(get_db_session),
) -> PhotoUploadResponse:
    if file is None:
        return await bootcamp_service.upload_photo(
            db=db,
            bootcamp_id=bootcamp_id,
            filename=None,
            content_type=None,
            content=None,
            config=config,
        )

    try:
        content = await file.read()
        logger.info(
            "Received photo for bootcamp %s: filename=%s, size=%d bytes",
            bootcamp_id,
            file.filename or "unknown",
            len(content),
        )
        return await bootcamp_service.upload_photo(
            db=db,
            bootcamp_id=bootcamp_id,
            filename=file.filename,
            content_type=file.content_type,
            content=content,
            config=config,
        )
    finally:
        await file.close()
