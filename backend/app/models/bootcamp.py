"""
CampFinder Backend — Bootcamp SQLAlchemy Model
================================================

What:  ORM model for the `bootcamps` table in PostgreSQL.
Who:   Used by BootcampService for CRUD/list/radius queries, by the filter
       translator to resolve query-string fields to columns, and by Alembic.

Table Design:
    - UUID primary key, generated in Python and by the server.
    - name is unique; slug is derived from it for friendly URLs.
    - The geocoded location is stored as plain longitude/latitude columns plus
      the address parts the geocoder returns. Radius search evaluates the
      spherical distance in SQL over these two columns.
    - careers is a PostgreSQL text array so `careers=...` and `careers[in]=...`
      map to array containment and overlap.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, Float, Index, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


CAREER_CHOICES = (
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
)

DEFAULT_PHOTO = "no-photo.jpg"


class Bootcamp(Base):
    """
    A bootcamp listing.

    Lifecycle:
        1. Created by a publisher/admin; the address is geocoded into the
           location columns before insert.
        2. Updated in place (partial updates); renaming regenerates the slug.
        3. Photo upload replaces `photo` with `photo_<id><ext>`.
        4. Deleted outright.
    """

    __tablename__ = "bootcamps"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)

    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Location (filled from the geocoder) ───────────────────────────────
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    formatted_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    zipcode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    careers: Mapped[List[str]] = mapped_column(ARRAY(String(50)), nullable=False)
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    average_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    photo: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=DEFAULT_PHOTO,
        server_default=text(f"'{DEFAULT_PHOTO}'"),
    )

    housing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    job_assistance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    job_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))
    accept_gi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=text("false"))

    # sub claim of the token that created the listing
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Default listing order is created_at DESC
    __table_args__ = (
        Index("idx_bootcamps_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Bootcamp(id={self.id}, name='{self.name}')>"
