"""
Top-line metrics over segmented customer records.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .field_classifier import ColumnClassification
from .features import column_mean
from .values import as_float, finite_float, parse_date, to_value

logger = logging.getLogger(__name__)

DEFAULT_TREND_MONTHS = 12
FALLBACK_TOP_SEGMENT = "Champions"
# First month of the filler trend shown when the data carries no usable dates.
SYNTHETIC_TREND_START = pd.Timestamp(year=2024, month=1, day=1)


@dataclass(frozen=True)
class CustomerRecord:
    row: Mapping[str, Any]
    record_id: int
    cluster_id: int
    segment_name: str
    monetary_value: float
    feature_values: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            **dict(self.row),
            "id": self.record_id,
            "cluster": self.cluster_id,
            "segment": self.segment_name,
            "monetary": self.monetary_value,
            "features": dict(self.feature_values),
        }


@dataclass(frozen=True)
class Segment:
    name: str
    member_count: int
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "member_count": self.member_count, "percentage": self.percentage}


@dataclass(frozen=True)
class MonthlyBucket:
    month_key: str
    label: str
    customer_count: int
    revenue_sum: float
    synthetic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month_key": self.month_key,
            "label": self.label,
            "customer_count": self.customer_count,
            "revenue_sum": self.revenue_sum,
            "synthetic": self.synthetic,
        }


@dataclass(frozen=True)
class MetricsSummary:
    total_count: int
    total_monetary_sum: float
    average_monetary_per_record: float
    segment_distribution: List[Segment]
    monthly_trend: List[MonthlyBucket]
    top_segment_name: str
    trend_is_synthetic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "total_monetary_sum": self.total_monetary_sum,
            "average_monetary_per_record": self.average_monetary_per_record,
            "segment_distribution": [s.to_dict() for s in self.segment_distribution],
            "monthly_trend": [b.to_dict() for b in self.monthly_trend],
            "top_segment_name": self.top_segment_name,
            "trend_is_synthetic": self.trend_is_synthetic,
        }


def percent_of(part: int, total: int) -> int:
    """Half-up whole percentage in integer arithmetic (29 of 200 -> 15)."""
    if total <= 0:
        return 0
    return (200 * int(part) + int(total)) // (2 * int(total))


def monetary_value(row: Mapping[str, Any], classification: ColumnClassification) -> float:
    primary = classification.primary_monetary_field
    if primary is None:
        return 0.0
    return as_float(to_value(row.get(primary)))


def segment_distribution(records: Sequence[CustomerRecord]) -> List[Segment]:
    """Group records by segment name, keeping first-seen order."""
    counts: Dict[str, int] = {}
    for r in records:
        counts[r.segment_name] = counts.get(r.segment_name, 0) + 1
    total = len(records)
    return [
        Segment(name=name, member_count=n, percentage=percent_of(n, total))
        for name, n in counts.items()
    ]


def top_segment_name(distribution: Sequence[Segment]) -> str:
    if not distribution:
        return FALLBACK_TOP_SEGMENT
    best = distribution[0]
    for s in distribution[1:]:
        if s.member_count > best.member_count:
            best = s
    return best.name


def _month_label(ts: pd.Timestamp) -> str:
    return ts.strftime("%b %y")


def monthly_trend(
    rows: Sequence[Mapping[str, Any]],
    classification: ColumnClassification,
    *,
    months: int = DEFAULT_TREND_MONTHS,
) -> List[MonthlyBucket]:
    """Bucket rows by the year-month of the first temporal column.

    Rows whose date does not parse are left out. Only the latest `months`
    buckets are returned, oldest first. Empty when nothing parses.
    """
    date_field = classification.primary_temporal_field
    if date_field is None:
        return []

    buckets: Dict[str, Dict[str, float]] = {}
    skipped = 0
    for row in rows:
        ts = parse_date(to_value(row.get(date_field)))
        if ts is None:
            skipped += 1
            continue
        key = f"{ts.year:04d}-{ts.month:02d}"
        b = buckets.setdefault(key, {"count": 0, "revenue": 0.0})
        b["count"] += 1
        b["revenue"] += monetary_value(row, classification)

    if skipped:
        logger.debug("monthly trend: %d rows with unparseable %r excluded", skipped, date_field)

    keys = sorted(buckets.keys())[-int(months):] if months > 0 else []
    out: List[MonthlyBucket] = []
    for key in keys:
        ts = pd.Timestamp(year=int(key[:4]), month=int(key[5:7]), day=1)
        out.append(
            MonthlyBucket(
                month_key=key,
                label=_month_label(ts),
                customer_count=int(buckets[key]["count"]),
                revenue_sum=finite_float(buckets[key]["revenue"]),
            )
        )
    return out


def synthetic_trend(
    total_count: int,
    total_monetary_sum: float,
    *,
    rng: np.random.Generator,
    months: int = DEFAULT_TREND_MONTHS,
) -> List[MonthlyBucket]:
    """Display filler: rows spread evenly over months, revenue jittered by 0.8-1.2x.

    Not derived from the data; every bucket is flagged `synthetic`.
    """
    if months <= 0:
        return []
    per_month = math.ceil(total_count / months) if total_count > 0 else 0
    out: List[MonthlyBucket] = []
    for i in range(months):
        ts = SYNTHETIC_TREND_START + pd.DateOffset(months=i)
        remaining = total_count - i * per_month
        jitter = float(rng.uniform(0.8, 1.2))
        out.append(
            MonthlyBucket(
                month_key=f"{ts.year:04d}-{ts.month:02d}",
                label=_month_label(ts),
                customer_count=max(0, min(per_month, remaining)),
                revenue_sum=finite_float((total_monetary_sum / months) * jitter),
                synthetic=True,
            )
        )
    return out


def aggregate_metrics(
    rows: Sequence[Mapping[str, Any]],
    classification: ColumnClassification,
    records: Sequence[CustomerRecord],
    *,
    rng: np.random.Generator,
    trend_months: int = DEFAULT_TREND_MONTHS,
) -> MetricsSummary:
    total_count = len(records)
    total_monetary = float(sum(r.monetary_value for r in records))
    if math.isfinite(total_monetary):
        average = total_monetary / total_count if total_count else 0.0
    else:
        # Sum overflowed; the mean itself is still representable.
        average = column_mean(np.array([r.monetary_value for r in records]))
        logger.warning("monetary total exceeds float range; reporting it clamped")
        total_monetary = finite_float(total_monetary)

    distribution = segment_distribution(records)

    trend = monthly_trend(rows, classification, months=trend_months)
    synthetic = False
    if not trend:
        logger.warning("no parseable dates; monthly trend is synthetic filler")
        trend = synthetic_trend(total_count, total_monetary, rng=rng, months=trend_months)
        synthetic = True

    return MetricsSummary(
        total_count=total_count,
        total_monetary_sum=total_monetary,
        average_monetary_per_record=average,
        segment_distribution=distribution,
        monthly_trend=trend,
        top_segment_name=top_segment_name(distribution),
        trend_is_synthetic=synthetic,
    )


def cluster_points(records: Sequence[CustomerRecord], numeric_fields: Sequence[str]) -> List[Dict[str, Any]]:
    """Scatter data on the first two numeric features."""
    x_field: Optional[str] = numeric_fields[0] if len(numeric_fields) > 0 else None
    y_field: Optional[str] = numeric_fields[1] if len(numeric_fields) > 1 else None
    return [
        {
            "x": r.feature_values.get(x_field, 0.0) if x_field else 0.0,
            "y": r.feature_values.get(y_field, 0.0) if y_field else 0.0,
            "cluster": r.cluster_id,
            "segment": r.segment_name,
        }
        for r in records
    ]
