"""
Typed cell values for uploaded customer rows.

Rows arrive as loosely typed mappings (CSV strings, JSON numbers, blanks).
They are coerced once into a small tagged union so the rest of the analytics
code never has to guess what a cell holds.
"""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Union

import pandas as pd


class AnalysisError(Exception):
    """Base error for the analytics core."""


class EmptyDatasetError(AnalysisError):
    """Raised when an analysis is requested for a dataset without rows."""


# Locale-free decimal literal: optional sign, digits with optional fraction, optional exponent.
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

# A date cell must spell out both year and month: 2024-03-15, 3/15/2024,
# 15.03.2024, "Mar 15, 2024", "15 March 2024", "March 2024".
# Time-only ("14:05") and partial ("May", "10am") text is not a date.
_DATE_HINT_RE = re.compile(
    r"(?<!\d)\d{4}[-/.]\d{1,2}(?!\d)"
    r"|(?<!\d)\d{1,2}[-/.]\d{1,2}[-/.]\d{4}(?!\d)"
    r"|[A-Za-z]{3,}\.?,?\s+(?:\d{1,2}(?:st|nd|rd|th)?,?\s+)?\d{4}(?!\d)"
)


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


class _MissingType:
    _instance: Optional["_MissingType"] = None

    def __new__(cls) -> "_MissingType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _MissingType()

Value = Union[Number, Text, _MissingType]


def parse_decimal(text: str) -> Optional[float]:
    """Parse a plain decimal literal; returns None for anything else (incl. inf/nan)."""
    s = text.strip()
    if not s or not _DECIMAL_RE.match(s):
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    return v if math.isfinite(v) else None


def to_value(raw: Any) -> Value:
    if raw is None or isinstance(raw, _MissingType):
        return MISSING
    if isinstance(raw, (Number, Text)):
        return raw
    # bool is an int subclass; a True/False cell is not a measurement.
    if isinstance(raw, bool):
        return Text(str(raw).lower())
    if isinstance(raw, (int, float)):
        v = float(raw)
        return Number(v) if math.isfinite(v) else MISSING
    s = str(raw)
    if not s.strip():
        return MISSING
    parsed = parse_decimal(s)
    if parsed is not None:
        return Number(parsed)
    return Text(s.strip())


def column_names(rows: Iterable[Mapping[str, Any]]) -> List[str]:
    """Column set of a dataset: the first row's keys in their original order."""
    for row in rows:
        return [str(k) for k in row.keys()]
    return []


def as_float(value: Value, default: float = 0.0) -> float:
    return value.value if isinstance(value, Number) else default


def finite_float(x: float) -> float:
    """Clamp an aggregate into JSON-safe range: NaN -> 0.0, +/-inf -> +/-float max."""
    x = float(x)
    if math.isnan(x):
        return 0.0
    if math.isinf(x):
        return math.copysign(sys.float_info.max, x)
    return x


def parse_date(value: Value) -> Optional[pd.Timestamp]:
    """Parse a date-like text cell; numbers, blanks and text without year and month are not dates."""
    if not isinstance(value, Text):
        return None
    if not _DATE_HINT_RE.search(value.value):
        return None
    try:
        ts = pd.to_datetime(value.value, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts
