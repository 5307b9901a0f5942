"""Bulk upload library public API.

Provides tabular file parsing, per-record-type row validation and
transformation, and upload template rendering.
"""

from results_api.lib.bulk_upload.parser import ALLOWED_EXTENSIONS, detect_file_format, read_rows
from results_api.lib.bulk_upload.template import TemplateFile, build_template
from results_api.lib.bulk_upload.types import (
    MAX_PARTICIPANT_SLOTS,
    CenterRecord,
    ConstituencyRecord,
    FieldError,
    FileFormat,
    RawRow,
    ReconcileOutcome,
    RecordType,
    ResultRecord,
    RowError,
    UploadProgress,
    UploadStatus,
)
from results_api.lib.bulk_upload.validator import validate_center_row, validate_constituency_row
from results_api.lib.bulk_upload.variants import RowVariant, get_row_variant

__all__ = [
    "ALLOWED_EXTENSIONS",
    "MAX_PARTICIPANT_SLOTS",
    "CenterRecord",
    "ConstituencyRecord",
    "FieldError",
    "FileFormat",
    "RawRow",
    "ReconcileOutcome",
    "RecordType",
    "ResultRecord",
    "RowError",
    "RowVariant",
    "TemplateFile",
    "UploadProgress",
    "UploadStatus",
    "build_template",
    "detect_file_format",
    "get_row_variant",
    "read_rows",
    "validate_center_row",
    "validate_constituency_row",
]
