"""Bulk upload API endpoints.

Mounted once per record type:
GET /{prefix}/template/{format} (template download),
POST /{prefix}/bulk-upload (multipart upload, processed in the background),
GET /{prefix}/bulk-upload/{upload_id} (status),
GET /{prefix}/bulk-upload/{upload_id}/errors (row errors).
"""

import uuid
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from results_api.core.background import task_runner
from results_api.core.config import Settings, get_settings
from results_api.core.dependencies import UPLOAD_ROLES, get_async_session, require_role
from results_api.lib.bulk_upload import ALLOWED_EXTENSIONS, FileFormat, RecordType, build_template
from results_api.models.bulk_upload import BulkUpload
from results_api.models.user import User
from results_api.schemas.bulk_upload import BulkUploadAccepted, BulkUploadErrorsResponse, BulkUploadStatusResponse
from results_api.services import bulk_upload_service

MIN_ELECTION_YEAR = 1970
MAX_ELECTION_YEAR = 2030

# Browsers commonly label .csv files as application/vnd.ms-excel
ALLOWED_CONTENT_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/octet-stream",
    }
)

_INVALID_TYPE_DETAIL = "Invalid file type. Only Excel (.xlsx) and CSV files are allowed"


def _parse_election_year(raw: str | None) -> int:
    if raw is None or not raw.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Election year is required")
    try:
        year = int(raw.strip())
    except ValueError:
        year = None
    if year is None or not MIN_ELECTION_YEAR <= year <= MAX_ELECTION_YEAR:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Election year must be between {MIN_ELECTION_YEAR} and {MAX_ELECTION_YEAR}",
        )
    return year


def _check_file(file: UploadFile | None) -> UploadFile:
    if file is None or not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")
    if Path(file.filename).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_INVALID_TYPE_DETAIL)
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type and content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_INVALID_TYPE_DETAIL)
    return file


async def _stage_upload(file: UploadFile, upload_dir: Path, max_bytes: int) -> tuple[Path, int]:
    """Write the upload to ``upload_dir`` as ``<uuid>-<name>``.

    Raises:
        HTTPException: 413 if the file exceeds ``max_bytes``; nothing is left on disk.
    """
    content = await file.read()
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds maximum size of {max_bytes // (1024 * 1024)} MB",
        )
    upload_dir.mkdir(parents=True, exist_ok=True)
    staged = upload_dir / f"{uuid.uuid4()}-{Path(file.filename or 'upload').name}"
    staged.write_bytes(content)
    return staged, len(content)


async def _load_upload(session: AsyncSession, upload_id: str, record_type: RecordType) -> BulkUpload:
    job = await bulk_upload_service.get_bulk_upload(session, upload_id)
    if job is None or job.record_type != record_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload not found")
    return job


def create_bulk_upload_router(record_type: RecordType, prefix: str, tag: str) -> APIRouter:
    """Build the bulk upload routes for one record type.

    Args:
        record_type: Record type every upload on these routes carries.
        prefix: Route prefix, e.g. ``/constituency-results``.
        tag: OpenAPI tag.

    Returns:
        The configured router.
    """
    router = APIRouter(prefix=prefix, tags=[tag])

    @router.get("/template/{file_format}")
    async def download_template(
        file_format: str,
        current_user: Annotated[User, Depends(require_role(*UPLOAD_ROLES))],
    ) -> Response:
        """Download an upload template (``excel`` or ``csv``)."""
        if file_format not in {f.value for f in FileFormat}:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid format. Use 'excel' or 'csv'")
        template = build_template(file_format, record_type)
        return Response(
            content=template.content,
            media_type=template.media_type,
            headers={"Content-Disposition": f'attachment; filename="{template.filename}"'},
        )

    @router.post("/bulk-upload", response_model=BulkUploadAccepted, status_code=202)
    async def upload_bulk_results(
        current_user: Annotated[User, Depends(require_role(*UPLOAD_ROLES))],
        session: Annotated[AsyncSession, Depends(get_async_session)],
        settings: Annotated[Settings, Depends(get_settings)],
        file: Annotated[UploadFile | None, File()] = None,
        election_year: Annotated[str | None, Form()] = None,
        overwrite_existing: Annotated[bool, Form()] = False,
        validate_only: Annotated[bool, Form()] = False,
    ) -> BulkUploadAccepted:
        """Upload a results file and process it in the background."""
        upload = _check_file(file)
        staged, file_size = await _stage_upload(upload, Path(settings.upload_dir), settings.max_upload_size_bytes)
        try:
            year = _parse_election_year(election_year)
            job = await bulk_upload_service.create_bulk_upload(
                session,
                record_type=record_type,
                election_year=year,
                file_name=upload.filename or staged.name,
                file_size=file_size,
                user_id=current_user.id,
                overwrite_existing=overwrite_existing,
                validate_only=validate_only,
            )
        except Exception:
            staged.unlink(missing_ok=True)
            raise

        task_runner.submit_task(
            bulk_upload_service.run_bulk_upload(job.upload_id, staged, settings.bulk_upload_batch_size),
            name=job.upload_id,
        )
        logger.info(f"User {current_user.username} queued {record_type} upload {job.upload_id}")
        return BulkUploadAccepted(upload_id=job.upload_id, record_type=record_type.value)

    @router.get(
        "/bulk-upload/{upload_id}",
        response_model=BulkUploadStatusResponse,
        response_model_exclude_none=True,
    )
    async def get_upload_status(
        upload_id: str,
        current_user: Annotated[User, Depends(require_role(*UPLOAD_ROLES))],
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> BulkUploadStatusResponse:
        """Get upload progress as of the last checkpoint."""
        job = await _load_upload(session, upload_id, record_type)
        return bulk_upload_service.build_status_response(job)

    @router.get("/bulk-upload/{upload_id}/errors", response_model=BulkUploadErrorsResponse)
    async def get_upload_errors(
        upload_id: str,
        current_user: Annotated[User, Depends(require_role(*UPLOAD_ROLES))],
        session: Annotated[AsyncSession, Depends(get_async_session)],
    ) -> BulkUploadErrorsResponse:
        """Get the row errors recorded for an upload."""
        job = await _load_upload(session, upload_id, record_type)
        return bulk_upload_service.build_error_report(job)

    return router


constituency_results_router = create_bulk_upload_router(
    RecordType.CONSTITUENCY, "/constituency-results", "constituency-results"
)
centers_router = create_bulk_upload_router(RecordType.CENTER, "/centers", "centers")
