"""BulkUpload model: tracks one bulk results upload from staging to completion."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from results_api.models.base import Base, JSONType, UUIDMixin


class BulkUpload(Base, UUIDMixin):
    """A bulk upload job: file metadata, options, progress counters and row errors.

    Progress columns are only written by the task processing the upload;
    status endpoints read whatever the last checkpoint stored.
    """

    __tablename__ = "bulk_uploads"

    upload_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    record_type: Mapped[str] = mapped_column(String(20), nullable=False)
    election_year: Mapped[int] = mapped_column(Integer, nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="uploaded", server_default="uploaded")

    # Progress
    processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    successful: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    duplicates: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    # Options
    overwrite_existing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    validate_only: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    validation_errors: Mapped[list[dict]] = mapped_column(JSONType, nullable=False, default=list)
    processing_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_bulk_uploads_user_id", "user_id"),
        Index("ix_bulk_uploads_status", "status"),
    )
