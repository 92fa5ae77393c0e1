"""Load schedule / time-clock exports into plain row dicts.

Every cell comes back as a string (empty string for blanks), so the parsers in
``normalize.parsers`` see exactly what the export shows. Duplicate column
headers are kept apart by pandas as "Start Date", "Start Date.1", ...
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

import pandas as pd

from ..core.constants import ACCEPTED_IMPORT_EXTENSIONS, DEFAULT_IMPORT_MAX_ROWS, MAX_IMPORT_FILE_BYTES
from ..core.exceptions import ImportFileError

_logger = logging.getLogger(__name__)

Source = Union[bytes, BinaryIO]


def _excel_engine(ext: str) -> Optional[str]:
    if ext == ".xlsx":
        return "openpyxl"
    if ext == ".xls":
        return "xlrd"
    return None


def _extension(filename: str) -> str:
    ext = Path(filename or "").suffix.lower()
    if ext not in ACCEPTED_IMPORT_EXTENSIONS:
        raise ImportFileError(f"Unsupported file type '{ext or filename}'. Upload .xlsx, .xls or .csv")
    return ext


def _read_bytes(source: Source, max_bytes: int) -> bytes:
    data = source if isinstance(source, (bytes, bytearray)) else source.read()
    if not data:
        raise ImportFileError("The uploaded file is empty")
    if len(data) > max_bytes:
        raise ImportFileError(f"File too large (max {max_bytes // (1024 * 1024)} MB)")
    return bytes(data)


def list_sheets(source: Source, *, filename: str, max_bytes: int = MAX_IMPORT_FILE_BYTES) -> List[str]:
    ext = _extension(filename)
    if ext == ".csv":
        return []
    data = _read_bytes(source, max_bytes)
    try:
        with pd.ExcelFile(io.BytesIO(data), engine=_excel_engine(ext)) as book:
            return [str(name) for name in book.sheet_names]
    except Exception as exc:
        raise ImportFileError(f"Error reading workbook: {exc}") from exc


def read_export(
    source: Source,
    *,
    filename: str,
    sheet_name: Optional[str] = None,
    max_rows: int = DEFAULT_IMPORT_MAX_ROWS,
    max_bytes: int = MAX_IMPORT_FILE_BYTES,
) -> List[Dict[str, str]]:
    ext = _extension(filename)
    data = _read_bytes(source, max_bytes)

    try:
        if ext == ".csv":
            df = pd.read_csv(io.BytesIO(data), dtype=str, keep_default_na=False)
        else:
            df = pd.read_excel(
                io.BytesIO(data),
                sheet_name=sheet_name if sheet_name else 0,
                engine=_excel_engine(ext),
                dtype=str,
                keep_default_na=False,
            )
    except Exception as exc:
        raise ImportFileError(f"Error reading {filename}: {exc}") from exc

    if df.empty:
        raise ImportFileError("The selected sheet has no rows")
    if len(df) > max_rows:
        raise ImportFileError(f"Too many rows ({len(df)}); the limit is {max_rows}")

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")
    _logger.info("read %s rows x %s columns from %s", len(df), len(df.columns), filename)
    return df.to_dict(orient="records")
