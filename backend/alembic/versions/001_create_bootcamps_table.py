"""Create bootcamps table

Revision ID: 001
Revises: None
Create Date: 2024-02-01 00:00:00.000000+00:00

Creates `bootcamps` with its geocoded location columns, the careers text array,
a unique name and the created_at DESC index used by the default listing order.

Rollback: downgrade() drops the table and every listing in it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "bootcamps",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("slug", sa.String(80), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("website", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("address", sa.Text(), nullable=False),

        # Filled from the geocoder on create and on address change
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("formatted_address", sa.Text(), nullable=True),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("city", sa.String(120), nullable=True),
        sa.Column("state", sa.String(120), nullable=True),
        sa.Column("zipcode", sa.String(20), nullable=True),
        sa.Column("country", sa.String(120), nullable=True),

        sa.Column("careers", postgresql.ARRAY(sa.String(50)), nullable=False),
        sa.Column("average_rating", sa.Float(), nullable=True),
        sa.Column("average_cost", sa.Float(), nullable=True),
        sa.Column(
            "photo",
            sa.String(255),
            nullable=False,
            server_default=sa.text("'no-photo.jpg'"),
        ),
        sa.Column("housing", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("job_assistance", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("job_guarantee", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("accept_gi", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_bootcamps_name"),
    )

    op.create_index("ix_bootcamps_slug", "bootcamps", ["slug"])
    op.create_index(
        "idx_bootcamps_created_at",
        "bootcamps",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_bootcamps_created_at", table_name="bootcamps")
    op.drop_index("ix_bootcamps_slug", table_name="bootcamps")
    op.drop_table("bootcamps")
