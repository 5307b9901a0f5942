"""Tabular file parsing for bulk uploads.

Two backends sit behind ``read_rows``: a chunked CSV reader and a
whole-sheet Excel reader.  Both return rows as ``{header: text}`` dicts in
file order, with header names stripped and empty cells as ``""``.
"""

from collections.abc import Callable, Iterator
from pathlib import Path

import pandas as pd
from loguru import logger

from results_api.lib.bulk_upload.types import FileFormat, RawRow

# Rows pulled from the CSV reader per chunk
CSV_CHUNK_SIZE = 1000

_EXTENSION_FORMATS: dict[str, FileFormat] = {
    ".csv": FileFormat.CSV,
    ".xlsx": FileFormat.EXCEL,
}

ALLOWED_EXTENSIONS = frozenset(_EXTENSION_FORMATS)


def detect_file_format(file_name: str) -> FileFormat:
    """Pick the parser backend from a file name's extension.

    Args:
        file_name: Original or staged file name.

    Returns:
        The matching file format.

    Raises:
        ValueError: If the extension is not supported.
    """
    suffix = Path(file_name).suffix.lower()
    try:
        return _EXTENSION_FORMATS[suffix]
    except KeyError:
        msg = f"Unsupported file type {suffix or '(none)'!r}; expected one of {sorted(ALLOWED_EXTENSIONS)}"
        raise ValueError(msg) from None


def detect_encoding(file_path: Path) -> str:
    """Detect a CSV file's text encoding.

    Tries UTF-8 (stripping a byte-order mark, as written by spreadsheet
    exports) and falls back to Latin-1.

    Raises:
        ValueError: If no candidate encoding can decode the file head.
    """
    for encoding in ("utf-8-sig", "latin-1"):
        try:
            with file_path.open("r", encoding=encoding) as f:
                f.read(8192)
            return encoding
        except UnicodeDecodeError:
            continue
    msg = f"Cannot detect encoding for {file_path}"
    raise ValueError(msg)


def _frame_rows(frame: pd.DataFrame) -> Iterator[RawRow]:
    frame.columns = [str(c).strip() for c in frame.columns]
    for record in frame.to_dict("records"):
        yield {str(k): ("" if v is None else str(v)) for k, v in record.items()}


def iter_csv_rows(file_path: Path, chunk_size: int = CSV_CHUNK_SIZE) -> Iterator[RawRow]:
    """Stream rows from a comma-separated file.

    Args:
        file_path: Path to the CSV file.
        chunk_size: Rows read per pandas chunk.

    Yields:
        One raw row per data line.
    """
    encoding = detect_encoding(file_path)
    logger.debug(f"Reading CSV {file_path} with encoding={encoding}, chunk_size={chunk_size}")
    reader = pd.read_csv(
        file_path,
        encoding=encoding,
        chunksize=chunk_size,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )
    for chunk in reader:
        yield from _frame_rows(chunk)


def iter_excel_rows(file_path: Path) -> Iterator[RawRow]:
    """Read every row from the first worksheet of an .xlsx workbook.

    The whole sheet is loaded into memory at once.
    """
    logger.debug(f"Reading workbook {file_path}")
    frame = pd.read_excel(file_path, sheet_name=0, dtype=str, keep_default_na=False, engine="openpyxl")
    yield from _frame_rows(frame)


_READERS: dict[FileFormat, Callable[[Path], Iterator[RawRow]]] = {
    FileFormat.CSV: iter_csv_rows,
    FileFormat.EXCEL: iter_excel_rows,
}


def read_rows(file_path: Path, file_format: FileFormat) -> list[RawRow]:
    """Parse a staged upload into raw rows.

    Args:
        file_path: Path to the staged file.
        file_format: Which backend to use.

    Returns:
        All data rows in file order (header excluded).

    Raises:
        ValueError: If the file cannot be decoded.
        pandas.errors.ParserError: If the CSV is malformed.
        pandas.errors.EmptyDataError: If the file has no header row.
    """
    rows = list(_READERS[file_format](Path(file_path)))
    logger.info(f"Parsed {len(rows)} rows from {Path(file_path).name} ({file_format})")
    return rows
