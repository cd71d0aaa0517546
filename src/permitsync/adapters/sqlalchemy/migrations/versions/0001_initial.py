"""Create persons, permits and upload_runs tables.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 00:00:00
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import sqlalchemy as sa
from alembic import op

from permitsync.adapters.sqlalchemy.mappings import StringListType, UTCDateTime

if TYPE_CHECKING:
    from collections.abc import Sequence

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_PERMIT_STATUSES = ("VALID", "EXPIRING_SOON", "EXPIRED", "DONE")
_RUN_STATUSES = ("PROCESSING", "COMPLETED", "FAILED", "CANCELLED")


def upgrade() -> None:
    op.create_table(
        "persons",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("identity_number", sa.String(), nullable=False),
        sa.Column("name_primary", sa.String(), nullable=False),
        sa.Column("name_secondary", sa.String(), nullable=True),
        sa.Column("document_number", sa.String(), nullable=True),
        sa.Column("nationality", sa.String(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_persons"),
        sa.UniqueConstraint("identity_number", name="uq_persons_persons_identity_number"),
    )
    op.create_table(
        "permits",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("identity_number", sa.String(), nullable=False),
        sa.Column("person_id", sa.Uuid(), nullable=False),
        sa.Column("permit_id", sa.String(), nullable=False),
        sa.Column("permit_type", sa.String(), nullable=False),
        sa.Column("issued_for", sa.String(), nullable=False),
        sa.Column("name_primary", sa.String(), nullable=False),
        sa.Column("name_secondary", sa.String(), nullable=True),
        sa.Column("document_number", sa.String(), nullable=True),
        sa.Column("nationality", sa.String(), nullable=True),
        sa.Column("plate_number", sa.String(), nullable=True),
        sa.Column("issuing_location", sa.String(), nullable=False),
        sa.Column("issue_date", sa.String(), nullable=False),
        sa.Column("expiry_date", sa.String(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_PERMIT_STATUSES, name="permitstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=True),
        sa.ForeignKeyConstraint(
            ["person_id"],
            ["persons.id"],
            name="fk_permits_permits_person_id_persons",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_permits"),
        sa.UniqueConstraint("identity_number", name="uq_permits_permits_identity_number"),
    )
    op.create_index("ix_permits_permit_id", "permits", ["permit_id"])
    op.create_index("ix_permits_status", "permits", ["status"])
    op.create_table(
        "upload_runs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("uploader", sa.String(), nullable=False),
        sa.Column("source_file", sa.String(), nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.Column("started_at", UTCDateTime(), nullable=False),
        sa.Column("finished_at", UTCDateTime(), nullable=True),
        sa.Column("inserted", sa.Integer(), nullable=False),
        sa.Column("updated", sa.Integer(), nullable=False),
        sa.Column("skipped", sa.Integer(), nullable=False),
        sa.Column("duplicates", sa.Integer(), nullable=False),
        sa.Column("errors", StringListType(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*_RUN_STATUSES, name="runstatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("fatal_error", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_upload_runs"),
    )
    op.create_index("ix_upload_runs_started_at", "upload_runs", ["started_at"])


def downgrade() -> None:
    op.drop_index("ix_upload_runs_started_at", table_name="upload_runs")
    op.drop_table("upload_runs")
    op.drop_index("ix_permits_status", table_name="permits")
    op.drop_index("ix_permits_permit_id", table_name="permits")
    op.drop_table("permits")
    op.drop_table("persons")
