"""Bulk upload service: job creation, row-by-row processing and status reporting.

An upload is processed by exactly one background task.  The task keeps its
counters in a local ``UploadProgress`` and publishes them to the
``bulk_uploads`` row with an UPDATE after every batch, so status requests
see progress as of the last checkpoint.  Row-level failures are collected
into ``validation_errors``; only a failure outside the row loop (unreadable
file, lost database) marks the whole upload failed.
"""

import time
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from results_api.core.database import open_session
from results_api.lib.bulk_upload import (
    FieldError,
    RawRow,
    ReconcileOutcome,
    RecordType,
    RowError,
    RowVariant,
    UploadProgress,
    UploadStatus,
    detect_file_format,
    get_row_variant,
    read_rows,
)
from results_api.lib.bulk_upload.cells import cell, to_int
from results_api.models.bulk_upload import BulkUpload
from results_api.schemas.bulk_upload import (
    BulkUploadErrorsResponse,
    BulkUploadStatusResponse,
    ErrorSummary,
    UploadProgressView,
    UploadSummary,
)
from results_api.services.reconcile_service import NaturalKey, reconcile_record

UPLOAD_ID_PREFIX = "bulk_upload_"

# Row errors whose message contains this are reported as duplicates
DUPLICATE_MARKER = "already exists"


def new_upload_id() -> str:
    """Generate a public upload identifier."""
    return f"{UPLOAD_ID_PREFIX}{uuid.uuid4()}"


async def create_bulk_upload(
    session: AsyncSession,
    *,
    record_type: RecordType | str,
    election_year: int,
    file_name: str,
    file_size: int,
    user_id: uuid.UUID | None = None,
    overwrite_existing: bool = False,
    validate_only: bool = False,
) -> BulkUpload:
    """Create a bulk upload record in ``uploaded`` state.

    Args:
        session: Database session.
        record_type: Which result schema the file's rows follow.
        election_year: Election year every row must belong to.
        file_name: Original file name; its extension selects the parser.
        file_size: Upload size in bytes.
        user_id: ID of the uploading user.
        overwrite_existing: Update stored results sharing a row's key.
        validate_only: Validate and match rows without writing results.

    Returns:
        The created BulkUpload.
    """
    job = BulkUpload(
        upload_id=new_upload_id(),
        user_id=user_id,
        record_type=RecordType(record_type).value,
        election_year=election_year,
        file_name=file_name,
        file_size=file_size,
        status=UploadStatus.UPLOADED.value,
        overwrite_existing=overwrite_existing,
        validate_only=validate_only,
        validation_errors=[],
    )
    session.add(job)
    await session.commit()
    await session.refresh(job)
    logger.info(f"Created bulk upload {job.upload_id} ({job.record_type}, {file_name}, {file_size} bytes)")
    return job


async def get_bulk_upload(session: AsyncSession, upload_id: str) -> BulkUpload | None:
    """Get a bulk upload by its public upload ID.

    Args:
        session: Database session.
        upload_id: The ``bulk_upload_<uuid>`` identifier.

    Returns:
        The BulkUpload or None if not found.
    """
    result = await session.execute(select(BulkUpload).where(BulkUpload.upload_id == upload_id))
    return result.scalar_one_or_none()


async def _checkpoint(session: AsyncSession, job_id: uuid.UUID, **values: Any) -> None:
    await session.execute(
        update(BulkUpload)
        .where(BulkUpload.id == job_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await session.commit()


def _check_election_year(row: RawRow, election_year: int) -> FieldError | None:
    """Flag a row whose election year differs from the upload's.

    Non-numeric years are left to the row validator.
    """
    text = cell(row, "election_year")
    row_year = to_int(text)
    if row_year is None or row_year == election_year:
        return None
    return FieldError(
        field="election_year",
        message=f"Election year {row_year} does not match upload election year {election_year}",
        value=text,
    )


def _duplicate_message(variant: RowVariant, row: RawRow) -> str:
    key = ", ".join(f"{name}={value}" for name, value in variant.business_key(row).items())
    return f"Record already exists ({key})" if key else "Record already exists"


async def _process_row(
    session: AsyncSession,
    variant: RowVariant,
    row: RawRow,
    row_number: int,
    *,
    election_year: int,
    overwrite_existing: bool,
    dry_run: bool,
    seen_keys: set[NaturalKey] | None = None,
) -> ReconcileOutcome | RowError:
    """Validate, transform and reconcile one row.

    Returns:
        The reconcile outcome, or the RowError describing why the row failed.
    """
    field_errors = variant.validate(row, row_number)
    year_error = _check_election_year(row, election_year)
    if year_error is not None:
        field_errors.append(year_error)
    if field_errors:
        return RowError(row_number=row_number, errors=field_errors, business_key=variant.business_key(row))

    try:
        record = variant.transform(row)
        return await reconcile_record(
            session, record, overwrite_existing=overwrite_existing, dry_run=dry_run, seen_keys=seen_keys
        )
    except IntegrityError:
        await session.rollback()
        message = _duplicate_message(variant, row)
    except Exception as exc:
        await session.rollback()
        message = str(exc) or type(exc).__name__
    logger.debug(f"Row {row_number} failed to store: {message}")
    return RowError(
        row_number=row_number,
        errors=[FieldError(field="general", message=message)],
        business_key=variant.business_key(row),
    )


async def process_bulk_upload(
    session: AsyncSession,
    job: BulkUpload,
    file_path: Path,
    batch_size: int = 50,
) -> BulkUpload:
    """Process a staged upload file row by row.

    Rows are handled strictly in file order.  After every ``batch_size``
    rows the progress counters are checkpointed.  The staged file is
    deleted on every exit path.

    Args:
        session: Database session owned by the processing task.
        job: The BulkUpload to process.
        file_path: Path to the staged file.
        batch_size: Rows per progress checkpoint.

    Returns:
        The BulkUpload reloaded with its final state.
    """
    file_path = Path(file_path)
    # Rollbacks expire the job, so everything needed later is read up front
    job_id = job.id
    upload_id = job.upload_id
    file_name = job.file_name
    election_year = job.election_year
    overwrite_existing = job.overwrite_existing
    dry_run = job.validate_only
    variant = get_row_variant(job.record_type)

    started = time.monotonic()
    progress = UploadProgress()
    row_errors: list[dict[str, Any]] = []
    # A dry run writes nothing, so repeated keys within the file are tracked here
    seen_keys: set[NaturalKey] | None = set() if dry_run else None

    try:
        await _checkpoint(session, job_id, status=UploadStatus.PROCESSING.value)
        logger.info(f"Processing bulk upload {upload_id}: {variant.record_type} rows from {file_name}")

        rows = read_rows(file_path, detect_file_format(file_name))
        await _checkpoint(session, job_id, total_rows=len(rows))

        for batch_start in range(0, len(rows), batch_size):
            batch = rows[batch_start : batch_start + batch_size]
            for offset, row in enumerate(batch):
                row_number = batch_start + offset + 1
                result = await _process_row(
                    session,
                    variant,
                    row,
                    row_number,
                    election_year=election_year,
                    overwrite_existing=overwrite_existing,
                    dry_run=dry_run,
                    seen_keys=seen_keys,
                )
                if isinstance(result, RowError):
                    progress.failed += 1
                    row_errors.append(result.to_dict())
                else:
                    progress.record(result)

            progress.processed += len(batch)
            await _checkpoint(session, job_id, **progress.as_columns())
            logger.info(
                f"Bulk upload {upload_id}: {progress.processed}/{len(rows)} rows "
                f"({progress.successful} inserted, {progress.updated} updated, "
                f"{progress.duplicates} skipped, {progress.failed} failed)"
            )

        processing_time = round(time.monotonic() - started)
        await _checkpoint(
            session,
            job_id,
            status=UploadStatus.COMPLETED.value,
            validation_errors=row_errors,
            processing_time=processing_time,
            completed_at=datetime.now(UTC),
        )
        logger.info(f"Bulk upload {upload_id} completed in {processing_time}s")

    except Exception as exc:
        logger.exception(f"Bulk upload {upload_id} failed")
        await session.rollback()
        fatal = RowError(row_number=0, errors=[FieldError(field="general", message=str(exc) or type(exc).__name__)])
        await _checkpoint(
            session,
            job_id,
            status=UploadStatus.FAILED.value,
            validation_errors=[fatal.to_dict()],
        )

    finally:
        file_path.unlink(missing_ok=True)

    await session.refresh(job)
    return job


async def run_bulk_upload(upload_id: str, file_path: Path, batch_size: int = 50) -> None:
    """Background entry point: process an upload in its own session.

    Args:
        upload_id: The upload to process.
        file_path: Path to the staged file.
        batch_size: Rows per progress checkpoint.
    """
    async with open_session() as session:
        job = await get_bulk_upload(session, upload_id)
        if job is None:
            logger.error(f"Bulk upload {upload_id} not found, discarding {file_path}")
            Path(file_path).unlink(missing_ok=True)
            return
        await process_bulk_upload(session, job, Path(file_path), batch_size)


def build_status_response(job: BulkUpload) -> BulkUploadStatusResponse:
    """Shape an upload's last checkpoint as a status response."""
    total = job.total_rows or 0
    processed = job.processed or 0
    completed = job.status == UploadStatus.COMPLETED
    return BulkUploadStatusResponse(
        upload_id=job.upload_id,
        status=job.status,
        progress=UploadProgressView(
            processed=processed,
            total=total,
            percentage=round(processed / total * 100) if total else 0,
        ),
        summary=UploadSummary(
            successful_inserts=job.successful or 0,
            updated_records=job.updated or 0,
            skipped_duplicates=job.duplicates or 0,
            validation_errors=job.failed or 0,
        ),
        processing_time=job.processing_time if completed else None,
        completed_at=job.completed_at if completed else None,
    )


def _messages(entry: dict[str, Any]) -> list[str]:
    return [str(error.get("message", "")) for error in entry.get("errors", [])]


def summarize_errors(entries: list[dict[str, Any]]) -> ErrorSummary:
    """Count duplicate and validation errors over stored row errors.

    A row with both kinds of message counts toward both totals.
    """
    return ErrorSummary(
        total_errors=len(entries),
        duplicate_errors=sum(1 for e in entries if any(DUPLICATE_MARKER in m for m in _messages(e))),
        validation_errors=sum(1 for e in entries if any(DUPLICATE_MARKER not in m for m in _messages(e))),
    )


def build_error_report(job: BulkUpload) -> BulkUploadErrorsResponse:
    """Shape an upload's recorded row errors as an errors response."""
    entries = list(job.validation_errors or [])
    return BulkUploadErrorsResponse(
        upload_id=job.upload_id,
        validation_errors=entries,
        error_summary=summarize_errors(entries),
    )
