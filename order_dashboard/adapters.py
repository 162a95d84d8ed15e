"""
Upload decoding

Turns an uploaded CSV/XLSX file into plain Records (header text -> cell)
in file order. Headers are kept verbatim; resolving them is the engine's
job. Records only hold JSON-friendly Python values so a snapshot can be
persisted as-is.
"""
from __future__ import annotations

import io
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import Any, List

import numpy as np
import pandas as pd

from .exceptions import FileDecodeError, UnsupportedFileTypeError
from .models import Record

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = (".csv",)
EXCEL_EXTENSIONS = (".xlsx", ".xls")
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS + EXCEL_EXTENSIONS


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def is_supported(filename: str) -> bool:
    return file_extension(filename) in SUPPORTED_EXTENSIONS


def read_records(data: bytes, filename: str) -> List[Record]:
    """Decode ``data`` according to the extension of ``filename``."""
    ext = file_extension(filename)
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(f"Unsupported file type: {ext or filename}")

    try:
        if ext in CSV_EXTENSIONS:
            df = _read_csv(data)
        else:
            df = pd.read_excel(io.BytesIO(data), sheet_name=0)
    except pd.errors.EmptyDataError:
        logger.warning("Empty file: %s", filename)
        return []
    except Exception as e:
        raise FileDecodeError(f"Could not read {filename}: {e}") from e

    records = _to_records(df)
    logger.info("Decoded %d rows from %s", len(records), filename)
    return records


def _read_csv(data: bytes) -> pd.DataFrame:
    # Every cell as text; blank cells stay "" instead of NaN
    for encoding in ["utf-8", "latin-1", "cp1252"]:
        try:
            return pd.read_csv(
                io.BytesIO(data),
                encoding=encoding,
                dtype=str,
                keep_default_na=False,
            )
        except UnicodeDecodeError:
            continue
    return pd.read_csv(
        io.BytesIO(data),
        encoding="utf-8",
        encoding_errors="ignore",
        dtype=str,
        keep_default_na=False,
    )


def _native(value: Any) -> Any:
    """Convert numpy/pandas scalars to plain Python values."""
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        f = float(value)
        # Spreadsheet ids come back as 1234.0 once a column holds a blank
        if f.is_integer() and abs(f) < 2 ** 53:
            return int(f)
        return f
    if hasattr(value, "item"):  # any other numpy scalar
        return value.item()
    return value


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return math.isnan(float(value))
    return False


def _to_records(df: pd.DataFrame) -> List[Record]:
    """Row dicts keyed by the original header text.

    Blank spreadsheet cells are left out of the record rather than stored
    as NaN; CSV blanks arrive as "" and are kept.
    """
    headers = [str(c) for c in df.columns]
    records: List[Record] = []
    for values in df.itertuples(index=False, name=None):
        row: Record = {}
        for header, value in zip(headers, values):
            if _is_missing(value):
                continue
            row[header] = _native(value)
        records.append(row)
    return records
