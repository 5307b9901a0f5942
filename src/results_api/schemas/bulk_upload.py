"""Bulk upload Pydantic v2 response schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class BulkUploadAccepted(BaseModel):
    """Returned with 202 once a file is staged and processing has been scheduled."""

    message: str = "File uploaded successfully"
    upload_id: str
    record_type: str
    status: str = "processing"
    estimated_time: str = "2-5 minutes"


class UploadProgressView(BaseModel):
    """Rows processed so far out of the file's total."""

    processed: int
    total: int
    percentage: int = Field(description="round(processed / total * 100), 0 when total is 0")


class UploadSummary(BaseModel):
    """Per-outcome row counts."""

    successful_inserts: int
    updated_records: int
    skipped_duplicates: int
    validation_errors: int


class BulkUploadStatusResponse(BaseModel):
    """Progress snapshot of one upload as of its last checkpoint.

    ``processing_time`` and ``completed_at`` are only set once the upload completed.
    """

    upload_id: str
    status: str
    progress: UploadProgressView
    summary: UploadSummary
    processing_time: int | None = Field(default=None, description="Seconds from start to completion")
    completed_at: datetime | None = None


class ErrorSummary(BaseModel):
    """Counts over an upload's row errors."""

    total_errors: int
    duplicate_errors: int = Field(description="Rows with a message containing 'already exists'")
    validation_errors: int = Field(description="Rows with at least one other message")


class BulkUploadErrorsResponse(BaseModel):
    """Row errors recorded for one upload.

    Each entry carries ``row_number``, the row's identifying fields and an
    ``errors`` list of ``{field, value?, message}``.
    """

    upload_id: str
    validation_errors: list[dict[str, Any]] = Field(default_factory=list)
    error_summary: ErrorSummary
