"""
CSV loading for uploaded customer data.

Every cell is kept as text; typing happens later in the analytics core.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from .values import AnalysisError, EmptyDatasetError

logger = logging.getLogger(__name__)

_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


class CsvParseError(AnalysisError):
    """Raised when uploaded text cannot be read as CSV."""


def _detect_encoding(data: bytes) -> str:
    for enc in _ENCODINGS:
        try:
            data.decode(enc)
            return enc
        except UnicodeDecodeError:
            continue
    return "latin-1"


def load_csv_text(text: str) -> List[Dict[str, Any]]:
    """Parse CSV text into rows keyed by the (trimmed) header names.

    Raises:
        EmptyDatasetError: no header row, or a header without any data rows.
        CsvParseError: the text is not valid CSV.
    """
    if not text or not text.strip():
        raise EmptyDatasetError("CSV must have at least a header row and one data row")
    try:
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as e:
        raise EmptyDatasetError("CSV must have at least a header row and one data row") from e
    except pd.errors.ParserError as e:
        raise CsvParseError(f"failed to parse CSV: {e}") from e

    if df.shape[0] == 0:
        raise EmptyDatasetError("CSV must have at least a header row and one data row")

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("")
    for c in df.columns:
        df[c] = df[c].astype(str).str.strip()

    logger.info("loaded CSV: %d rows x %d columns", df.shape[0], df.shape[1])
    return df.to_dict(orient="records")


def load_csv_bytes(data: bytes) -> List[Dict[str, Any]]:
    enc = _detect_encoding(data)
    return load_csv_text(data.decode(enc, errors="replace"))


def load_csv_file(path: Union[str, Path]) -> List[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        raise CsvParseError(f"CSV file not found: {path}")
    return load_csv_bytes(path.read_bytes())
