"""
CampFinder Backend — Bootcamp Service
=======================================

What:  Business logic behind every /api/v1/bootcamps endpoint.
Why:   Routes only translate HTTP; listing, CRUD, radius search and photo upload
       live here so they can be tested against a mocked session.
How:   Each method receives the request's AsyncSession. Services flush but never
       commit; get_db_session commits once the route returns.

Error Translation:
    missing row / malformed id       → NotFoundError (404)
    duplicate name (unique violation) → ValidationError (400)
    other IntegrityError              → ValidationError (400, generic message)
    any other SQLAlchemyError         → DatabaseError (500, details logged only)
    CampFinderError subclasses        → propagated unchanged

Flows:
    list:    parse query → COUNT(filters) → SELECT page → pagination links
    create:  geocode address → slug → INSERT
    radius:  geocode zipcode → WithinSphere(distance / 6378) → SELECT
    photo:   load bootcamp → validate + store file → UPDATE photo → drop stale file
"""

import logging
import math
import re
import unicodedata
import uuid
from typing import Mapping, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import UploadConfig
from app.dependencies import CurrentUser
from app.exceptions import CampFinderError, DatabaseError, NotFoundError, ValidationError
from app.models.bootcamp import DEFAULT_PHOTO, Bootcamp
from app.schemas.bootcamp import (
    BootcampCreate,
    BootcampEnvelope,
    BootcampListResponse,
    BootcampRadiusResponse,
    BootcampResponse,
    BootcampUpdate,
    DeleteResponse,
    PhotoUploadResponse,
)
from app.services.file_service import file_service
from app.services.filters import (
    order_by_clauses,
    radius_filter,
    selection_columns,
    to_clause,
    to_clauses,
)
from app.services.geocoder_base import GeocodeResult
from app.services.geocoder_service import geocoder
from app.services.query_builder import DEFAULT_SORT, build_pagination, parse_list_query

logger = logging.getLogger(__name__)

# Columns a PUT may change but never clear
_NOT_NULL_FIELDS = frozenset({
    "name", "description", "address", "careers",
    "housing", "job_assistance", "job_guarantee", "accept_gi",
})

_UNIQUE_VIOLATION = "23505"


def slugify(name: str) -> str:
    """'Devworks Bootcamp!' → 'devworks-bootcamp'."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")
    return slug or "bootcamp"


def _sqlstate(error: IntegrityError) -> Optional[str]:
    orig = error.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _apply_location(bootcamp: Bootcamp, location: GeocodeResult) -> None:
    bootcamp.longitude = location.longitude
    bootcamp.latitude = location.latitude
    bootcamp.formatted_address = location.formatted_address
    bootcamp.street = location.street
    bootcamp.city = location.city
    bootcamp.state = location.state
    bootcamp.zipcode = location.zipcode
    bootcamp.country = location.country


class BootcampService:
    """
    Stateless service for the bootcamps resource.

    Collaborators (module singletons, patched in tests):
        geocoder:      address/zipcode → coordinates
        file_service:  photo validation and storage
    """

    async def list_bootcamps(
        self, db: AsyncSession, raw_params: Mapping[str, str]
    ) -> BootcampListResponse:
        """
        Filtered, projected, sorted, paginated listing.

        Raises:
            ValidationError: unknown filter field or badly typed filter value
            DatabaseError:   either query failed
        """
        query = parse_list_query(raw_params)
        conditions = to_clauses(Bootcamp, query.filters)
        where = and_(*conditions) if conditions else None

        count_stmt = select(func.count()).select_from(Bootcamp)
        page_stmt = select(*selection_columns(Bootcamp, query.selection))
        if where is not None:
            count_stmt = count_stmt.where(where)
            page_stmt = page_stmt.where(where)
        ordering = order_by_clauses(Bootcamp, query.sort) or order_by_clauses(Bootcamp, DEFAULT_SORT)
        page_stmt = (
            page_stmt.order_by(*ordering)
            .offset(query.skip)
            .limit(query.limit)
        )

        try:
            total_count = (await db.execute(count_stmt)).scalar_one()
            result = await db.execute(page_stmt)
            records = [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing bootcamps: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve bootcamps. Please try again.",
                context={"error_type": type(e).__name__},
            )

        pagination = build_pagination(query.page, query.limit, total_count)
        logger.debug(
            "Listed %d of %d bootcamps (page=%d, limit=%d)",
            len(records),
            total_count,
            query.page,
            query.limit,
        )
        return BootcampListResponse(
            count=len(records),
            pagination=pagination.to_dict(),
            data=records,
        )

    async def _load(self, db: AsyncSession, bootcamp_id: str) -> Bootcamp:
        try:
            key = uuid.UUID(str(bootcamp_id))
        except ValueError:
            raise NotFoundError(resource="bootcamp", resource_id=str(bootcamp_id))

        try:
            result = await db.execute(select(Bootcamp).where(Bootcamp.id == key))
            bootcamp = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching bootcamp %s: %s", bootcamp_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the bootcamp. Please try again.",
                context={"bootcamp_id": str(bootcamp_id)},
            )

        if bootcamp is None:
            raise NotFoundError(resource="bootcamp", resource_id=str(bootcamp_id))
        return bootcamp

    async def get_bootcamp(self, db: AsyncSession, bootcamp_id: str) -> BootcampEnvelope:
        bootcamp = await self._load(db, bootcamp_id)
        return BootcampEnvelope(data=BootcampResponse.model_validate(bootcamp))

    async def _geocode_address(self, address: str) -> GeocodeResult:
        candidates = await geocoder.geocode(address)
        if not candidates:
            raise ValidationError(
                message=f"Could not find a location for address '{address}'",
                field="address",
            )
        return candidates[0]

    async def _flush(self, db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.info("Integrity error while trying to %s bootcamp: %s", action, str(e.orig))
            if _sqlstate(e) == _UNIQUE_VIOLATION:
                raise ValidationError(
                    message="Duplicate field value entered",
                    field="name",
                )
            raise ValidationError(
                message="Invalid field value entered",
                context={"error_type": type(e.orig).__name__},
            )
        except SQLAlchemyError as e:
            logger.error("Database error while trying to %s bootcamp: %s", action, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Could not {action} the bootcamp. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def create_bootcamp(
        self,
        db: AsyncSession,
        payload: BootcampCreate,
        user: Optional[CurrentUser] = None,
    ) -> BootcampEnvelope:
        """
        Geocode the address, derive the slug and insert.

        Raises:
            ValidationError: duplicate name or an address the geocoder can't place
            GeocodingError:  geocoder unavailable
            DatabaseError:   insert failed
        """
        location = await self._geocode_address(payload.address)

        bootcamp = Bootcamp(**payload.model_dump())
        bootcamp.slug = slugify(payload.name)
        bootcamp.user_id = user.id if user else None
        _apply_location(bootcamp, location)

        db.add(bootcamp)
        await self._flush(db, "create")
        logger.info("Bootcamp created: %s (%s)", bootcamp.id, bootcamp.slug)
        return BootcampEnvelope(data=BootcampResponse.model_validate(bootcamp))

    async def update_bootcamp(
        self, db: AsyncSession, bootcamp_id: str, payload: BootcampUpdate
    ) -> BootcampEnvelope:
        """
        Partial update. A new name regenerates the slug; a new address is
        geocoded again.
        """
        bootcamp = await self._load(db, bootcamp_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("address") and changes["address"] != bootcamp.address:
            _apply_location(bootcamp, await self._geocode_address(changes["address"]))
        if changes.get("name"):
            bootcamp.slug = slugify(changes["name"])

        for field, value in changes.items():
            if value is None and field in _NOT_NULL_FIELDS:
                continue
            setattr(bootcamp, field, value)

        await self._flush(db, "update")
        logger.info("Bootcamp updated: %s (%s)", bootcamp.id, ", ".join(sorted(changes)) or "no changes")
        return BootcampEnvelope(data=BootcampResponse.model_validate(bootcamp))

    async def delete_bootcamp(self, db: AsyncSession, bootcamp_id: str) -> DeleteResponse:
        bootcamp = await self._load(db, bootcamp_id)
        await db.delete(bootcamp)
        await self._flush(db, "delete")
        logger.info("Bootcamp deleted: %s", bootcamp_id)
        return DeleteResponse()

    async def bootcamps_in_radius(
        self, db: AsyncSession, zipcode: str, distance: str
    ) -> BootcampRadiusResponse:
        """
        Bootcamps within `distance` km of the zipcode's first geocoded point.

        Raises:
            ValidationError: distance is not a non-negative number
            NotFoundError:   the geocoder has no location for the zipcode
            GeocodingError:  geocoder unavailable
        """
        try:
            distance_km = float(distance)
        except (TypeError, ValueError):
            raise ValidationError(
                message=f"Distance must be a number of kilometres, got '{distance}'",
                field="distance",
            )
        if not math.isfinite(distance_km) or distance_km < 0:
            raise ValidationError(
                message="Distance must be a non-negative number of kilometres",
                field="distance",
            )

        candidates = await geocoder.geocode(zipcode)
        if not candidates:
            raise NotFoundError(
                resource="location",
                resource_id=zipcode,
                message=f"No location found for zipcode {zipcode}",
            )
        centre = candidates[0]
        within = radius_filter(centre.longitude, centre.latitude, distance_km)

        try:
            result = await db.execute(select(Bootcamp).where(to_clause(Bootcamp, within)))
            bootcamps = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error in radius search: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search bootcamps by radius. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "Radius search %s / %.1fkm (radius=%.6f rad): %d result(s)",
            zipcode,
            distance_km,
            within.radius,
            len(bootcamps),
        )
        return BootcampRadiusResponse(
            count=len(bootcamps),
            data=[BootcampResponse.model_validate(b) for b in bootcamps],
        )

    async def upload_photo(
        self,
        db: AsyncSession,
        bootcamp_id: str,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
        config: UploadConfig,
    ) -> PhotoUploadResponse:
        """
        Store a new photo for the bootcamp and record its filename.

        Raises:
            NotFoundError:    unknown bootcamp (checked before the file)
            ValidationError:  no file, not an image, or too large
            FileStorageError: the file could not be written
        """
        bootcamp = await self._load(db, bootcamp_id)
        previous = bootcamp.photo
        stored_name = await file_service.save_photo(
            bootcamp_id=str(bootcamp.id),
            filename=filename,
            content_type=content_type,
            content=content,
            config=config,
        )

        bootcamp.photo = stored_name
        try:
            await self._flush(db, "update")
        except CampFinderError:
            # previous file was overwritten if the names match
            if stored_name != previous:
                file_service.cleanup_file(stored_name, config)
            raise

        if previous and previous not in (stored_name, DEFAULT_PHOTO):
            file_service.cleanup_file(previous, config)
        logger.info("Photo %s saved for bootcamp %s", stored_name, bootcamp.id)
        return PhotoUploadResponse(data=stored_name)


bootcamp_service = BootcampService()
