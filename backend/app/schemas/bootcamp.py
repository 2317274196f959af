"""
CampFinder Backend — Pydantic Request/Response Schemas
========================================================

What:  The API contract for the bootcamps resource.
Why:   Request bodies are validated here before any service code runs, and the
       response envelopes keep every endpoint's JSON shape identical:
           {"success": true, "data": ...}
           {"success": true, "count": n, "pagination": {...}, "data": [...]}
Note:  List responses carry plain dicts because `select=` may project any subset
       of columns; single-record responses use BootcampResponse.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

CareerName = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
]

URL_PATTERN = r"^https?://[\w.-]+(?:\.[\w.-]+)+[\w\-._~:/?#\[\]@!$&'()*+,;=%]*$"
EMAIL_PATTERN = r"^[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}$"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BootcampCreate(BaseModel):
    """
    Body of POST /api/v1/bootcamps.

    The address is geocoded by the service; clients never send coordinates.
    """
    name: str = Field(min_length=1, max_length=50, description="Unique bootcamp name")
    description: str = Field(min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, pattern=URL_PATTERN, description="HTTP or HTTPS URL")
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    address: str = Field(min_length=1, description="Street address to geocode")
    careers: List[CareerName] = Field(min_length=1)
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    average_cost: Optional[float] = Field(default=None, ge=0)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}


class BootcampUpdate(BaseModel):
    """
    Body of PUT /api/v1/bootcamps/{id}. Only the fields sent are changed.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, pattern=URL_PATTERN)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    address: Optional[str] = Field(default=None, min_length=1)
    careers: Optional[List[CareerName]] = Field(default=None, min_length=1)
    average_rating: Optional[float] = Field(default=None, ge=1, le=10)
    average_cost: Optional[float] = Field(default=None, ge=0)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BootcampResponse(BaseModel):
    """Full representation of one bootcamp."""
    id: uuid.UUID
    name: str
    slug: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: str
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None
    careers: List[str]
    average_rating: Optional[float] = None
    average_cost: Optional[float] = None
    photo: str
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    user_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class BootcampEnvelope(BaseModel):
    success: bool = True
    data: BootcampResponse


class PageLinkSchema(BaseModel):
    page: int
    limit: int


class BootcampListResponse(BaseModel):
    """
    GET /api/v1/bootcamps.

    `pagination` only contains the keys that exist: `{}` on a single page,
    `{"next": ...}` on the first of several, `{"prev": ...}` on the last.
    """
    success: bool = True
    count: int = Field(description="Number of records in this page")
    pagination: Dict[str, PageLinkSchema] = Field(default_factory=dict)
    data: List[Dict[str, Any]]


class BootcampRadiusResponse(BaseModel):
    success: bool = True
    count: int
    data: List[BootcampResponse]


class DeleteResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any] = Field(default_factory=dict)


class PhotoUploadResponse(BaseModel):
    success: bool = True
    data: str = Field(description="Stored photo filename")


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Body of every error response.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "Bootcamp id 5d713995b721c3bb38c1f5d0 not found",
            "request_id": "1f0c9a2e"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    geocoder: str = Field(description="configured or not_configured")
    uptime_seconds: float
