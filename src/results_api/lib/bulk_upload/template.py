"""Downloadable upload templates.

A template is one header row plus one sample row for a record type, as
CSV text or as an .xlsx workbook with a single "Template" sheet.
"""

import io
from dataclasses import dataclass

import pandas as pd

from results_api.lib.bulk_upload.types import FileFormat, RecordType
from results_api.lib.bulk_upload.variants import get_row_variant

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"


@dataclass(frozen=True)
class TemplateFile:
    """A rendered template ready to send or write to disk."""

    content: bytes
    media_type: str
    filename: str


def template_frame(record_type: RecordType | str) -> pd.DataFrame:
    """Single-row DataFrame holding the sample row for a record type."""
    return pd.DataFrame([get_row_variant(record_type).template_row()])


def build_template(file_format: FileFormat | str, record_type: RecordType | str) -> TemplateFile:
    """Render the upload template for a format and record type.

    Args:
        file_format: ``csv`` or ``excel``.
        record_type: ``constituency`` or ``center``.

    Returns:
        The rendered template.

    Raises:
        ValueError: If the format or record type is unknown.
    """
    try:
        fmt = FileFormat(file_format)
    except ValueError:
        msg = "Invalid format. Use 'excel' or 'csv'"
        raise ValueError(msg) from None

    variant = get_row_variant(record_type)
    frame = template_frame(variant.record_type)

    if fmt is FileFormat.CSV:
        return TemplateFile(
            content=frame.to_csv(index=False).encode("utf-8"),
            media_type=CSV_MEDIA_TYPE,
            filename=f"{variant.template_file_stem}.csv",
        )

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Template", index=False)
    return TemplateFile(
        content=buffer.getvalue(),
        media_type=XLSX_MEDIA_TYPE,
        filename=f"{variant.template_file_stem}.xlsx",
    )
