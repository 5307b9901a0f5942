"""Bulk upload CLI commands: process a local results file, write templates."""

import asyncio
import shutil
import tempfile
from pathlib import Path

import typer

from results_api.lib.bulk_upload import ALLOWED_EXTENSIONS, FileFormat, RecordType


def upload(
    file: Path = typer.Argument(..., help="Path to a .csv or .xlsx results file", exists=True, dir_okay=False),  # noqa: B008
    record_type: RecordType = typer.Option(..., "--type", help="Record type of the file's rows"),  # noqa: B008
    election_year: int = typer.Option(..., "--year", min=1970, max=2030, help="Election year of the rows"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Update results that already exist"),
    validate_only: bool = typer.Option(False, "--validate-only", help="Validate and match rows without writing"),
    batch_size: int | None = typer.Option(None, "--batch-size", min=1, help="Rows per progress checkpoint"),
) -> None:
    """Run a bulk upload synchronously and print its summary."""
    if file.suffix.lower() not in ALLOWED_EXTENSIONS:
        typer.echo(f"Unsupported file type {file.suffix!r}; expected one of {sorted(ALLOWED_EXTENSIONS)}", err=True)
        raise typer.Exit(code=2)
    asyncio.run(_upload(file, record_type, election_year, overwrite, validate_only, batch_size))


async def _upload(
    file_path: Path,
    record_type: RecordType,
    election_year: int,
    overwrite: bool,
    validate_only: bool,
    batch_size: int | None,
) -> None:
    """Async implementation of the upload command."""
    from results_api.core.config import get_settings
    from results_api.core.database import dispose_engine, init_engine, open_session
    from results_api.services.bulk_upload_service import (
        build_error_report,
        build_status_response,
        create_bulk_upload,
        process_bulk_upload,
    )

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema)

    # Processing deletes its input, so work on a copy
    staging_dir = Path(tempfile.mkdtemp(prefix="results-upload-"))
    staged = staging_dir / file_path.name
    shutil.copyfile(file_path, staged)

    try:
        async with open_session() as session:
            job = await create_bulk_upload(
                session,
                record_type=record_type,
                election_year=election_year,
                file_name=file_path.name,
                file_size=file_path.stat().st_size,
                overwrite_existing=overwrite,
                validate_only=validate_only,
            )
            typer.echo(f"Bulk upload created: {job.upload_id}")
            typer.echo(f"Processing {file_path}...")

            job = await process_bulk_upload(session, job, staged, batch_size or settings.bulk_upload_batch_size)

            report = build_status_response(job)
            typer.echo(f"\nUpload {report.status}:")
            typer.echo(f"  Total rows:         {report.progress.total}")
            typer.echo(f"  Processed:          {report.progress.processed}")
            typer.echo(f"  Inserted:           {report.summary.successful_inserts}")
            typer.echo(f"  Updated:            {report.summary.updated_records}")
            typer.echo(f"  Skipped duplicates: {report.summary.skipped_duplicates}")
            typer.echo(f"  Failed:             {report.summary.validation_errors}")
            if report.processing_time is not None:
                typer.echo(f"  Processing time:    {report.processing_time}s")

            errors = build_error_report(job)
            for entry in errors.validation_errors[:20]:
                messages = "; ".join(e.get("message", "") for e in entry.get("errors", []))
                typer.echo(f"  row {entry.get('row_number')}: {messages}")
            if errors.error_summary.total_errors > 20:
                typer.echo(f"  ... and {errors.error_summary.total_errors - 20} more")
    finally:
        shutil.rmtree(staging_dir, ignore_errors=True)
        await dispose_engine()

    if report.status != "completed":
        raise typer.Exit(code=1)


def template(
    record_type: RecordType = typer.Argument(..., help="Record type: constituency or center"),  # noqa: B008
    file_format: FileFormat = typer.Option(FileFormat.CSV, "--format", help="Template format: csv or excel"),  # noqa: B008
    output_dir: Path = typer.Option(Path(), "--output-dir", help="Directory to write the template to"),  # noqa: B008
) -> None:
    """Write an upload template to disk."""
    from results_api.lib.bulk_upload import build_template

    rendered = build_template(file_format, record_type)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / rendered.filename
    output_path.write_bytes(rendered.content)
    typer.echo(f"Wrote {output_path}")
