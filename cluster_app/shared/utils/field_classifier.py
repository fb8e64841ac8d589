"""
Column role inference for arbitrary customer CSVs.

The heuristic classifier only looks at column names (and a small sample of the
data for numeric detection). A schema-driven classifier is available for
callers that know their columns up front.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from .values import AnalysisError, EmptyDatasetError, Number, column_names, to_value

logger = logging.getLogger(__name__)

IDENTIFIER_KEYWORDS: Tuple[str, ...] = ("email",)
MONETARY_KEYWORDS: Tuple[str, ...] = ("amount", "revenue", "value", "total")
TEMPORAL_KEYWORDS: Tuple[str, ...] = ("date", "time", "created")
DEFAULT_SAMPLE_ROWS = 100


class SchemaError(AnalysisError):
    """Raised when an explicit schema references columns absent from the data."""


@dataclass(frozen=True)
class ColumnClassification:
    columns: Tuple[str, ...]
    identifier_field: str
    monetary_fields: Tuple[str, ...] = ()
    temporal_fields: Tuple[str, ...] = ()
    numeric_fields: Tuple[str, ...] = ()

    @property
    def primary_monetary_field(self) -> Optional[str]:
        return self.monetary_fields[0] if self.monetary_fields else None

    @property
    def primary_temporal_field(self) -> Optional[str]:
        return self.temporal_fields[0] if self.temporal_fields else None

    @property
    def monetary_feature_index(self) -> Optional[int]:
        """Position of the first monetary column among the numeric features, if any."""
        for i, f in enumerate(self.numeric_fields):
            if f in self.monetary_fields:
                return i
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "identifier_field": self.identifier_field,
            "monetary_fields": list(self.monetary_fields),
            "temporal_fields": list(self.temporal_fields),
            "numeric_fields": list(self.numeric_fields),
            "primary_monetary_field": self.primary_monetary_field,
            "primary_temporal_field": self.primary_temporal_field,
        }


class FieldClassifier(Protocol):
    def classify(self, rows: Sequence[Mapping[str, Any]]) -> ColumnClassification:
        ...


def _matches(name: str, keywords: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(k in lowered for k in keywords)


def detect_numeric_fields(
    rows: Sequence[Mapping[str, Any]],
    columns: Sequence[str],
    *,
    sample_rows: int = DEFAULT_SAMPLE_ROWS,
) -> List[str]:
    """Columns where at least one sampled cell parses to a finite number."""
    sample = rows[: max(0, int(sample_rows))]
    out: List[str] = []
    for col in columns:
        if any(isinstance(to_value(r.get(col)), Number) for r in sample):
            out.append(col)
    return out


@dataclass
class HeuristicFieldClassifier:
    """Substring heuristics over column names; intentionally fuzzy."""

    sample_rows: int = DEFAULT_SAMPLE_ROWS

    def classify(self, rows: Sequence[Mapping[str, Any]]) -> ColumnClassification:
        if not rows:
            raise EmptyDatasetError("cannot classify columns of an empty dataset")
        columns = column_names(rows)
        if not columns:
            raise EmptyDatasetError("dataset has no columns")

        identifier = next((c for c in columns if _matches(c, IDENTIFIER_KEYWORDS)), columns[0])
        result = ColumnClassification(
            columns=tuple(columns),
            identifier_field=identifier,
            monetary_fields=tuple(c for c in columns if _matches(c, MONETARY_KEYWORDS)),
            temporal_fields=tuple(c for c in columns if _matches(c, TEMPORAL_KEYWORDS)),
            numeric_fields=tuple(detect_numeric_fields(rows, columns, sample_rows=self.sample_rows)),
        )
        logger.debug("classified columns: %s", result.to_dict())
        return result


@dataclass
class SchemaFieldClassifier:
    """Caller-declared column roles; numeric columns are still detected unless given."""

    identifier_field: Optional[str] = None
    monetary_fields: List[str] = field(default_factory=list)
    temporal_fields: List[str] = field(default_factory=list)
    numeric_fields: Optional[List[str]] = None
    sample_rows: int = DEFAULT_SAMPLE_ROWS

    def classify(self, rows: Sequence[Mapping[str, Any]]) -> ColumnClassification:
        if not rows:
            raise EmptyDatasetError("cannot classify columns of an empty dataset")
        columns = column_names(rows)

        declared = [*self.monetary_fields, *self.temporal_fields, *(self.numeric_fields or [])]
        if self.identifier_field:
            declared.append(self.identifier_field)
        missing = [c for c in declared if c not in columns]
        if missing:
            raise SchemaError(f"schema columns not found in data: {missing}")

        if self.numeric_fields is None:
            numeric = detect_numeric_fields(rows, columns, sample_rows=self.sample_rows)
        else:
            numeric = [c for c in columns if c in self.numeric_fields]

        return ColumnClassification(
            columns=tuple(columns),
            identifier_field=self.identifier_field or columns[0],
            monetary_fields=tuple(self.monetary_fields),
            temporal_fields=tuple(self.temporal_fields),
            numeric_fields=tuple(numeric),
        )


def classify_fields(
    rows: Sequence[Mapping[str, Any]],
    *,
    sample_rows: int = DEFAULT_SAMPLE_ROWS,
) -> ColumnClassification:
    return HeuristicFieldClassifier(sample_rows=sample_rows).classify(rows)


def display_labels(classification: ColumnClassification) -> Dict[str, str]:
    """Dashboard captions derived from the detected identifier and monetary columns."""
    ident = classification.identifier_field.lower()
    if "customer" in ident:
        customers = "Total Customers"
    elif "user" in ident:
        customers = "Total Users"
    elif "contact" in ident:
        customers = "Total Contacts"
    else:
        customers = "Total Records"

    revenue = "Total Value"
    avg_order = "Avg Value"
    primary = classification.primary_monetary_field
    if primary:
        p = primary.lower()
        if "revenue" in p:
            revenue = "Total Revenue"
        elif "sales" in p:
            revenue = "Total Sales"
        elif "value" in p:
            revenue = "Total Value"
        elif "amount" in p:
            revenue = "Total Amount"

        if "revenue" in p:
            avg_order = "Avg Revenue"
        elif "sales" in p:
            avg_order = "Avg Sale Value"
        elif "order" in p:
            avg_order = "Avg Order Value"

    return {"customers": customers, "revenue": revenue, "avg_order": avg_order}
