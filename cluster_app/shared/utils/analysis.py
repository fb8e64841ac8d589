"""
End-to-end customer analysis: one dataset in, one complete result out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from .customer_segmentation import (
    DEFAULT_MAX_ITER,
    DEFAULT_MAX_SEGMENTS,
    ClusteringResult,
    cluster_customers,
    fallback_segment_name,
    name_clusters,
)
from .features import ScaleParams, extract_features, standardize
from .field_classifier import (
    DEFAULT_SAMPLE_ROWS,
    ColumnClassification,
    FieldClassifier,
    HeuristicFieldClassifier,
    display_labels,
)
from .metrics import (
    DEFAULT_TREND_MONTHS,
    CustomerRecord,
    MetricsSummary,
    aggregate_metrics,
    cluster_points,
    monetary_value,
)
from .values import EmptyDatasetError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOptions:
    max_segments: int = DEFAULT_MAX_SEGMENTS
    max_iter: int = DEFAULT_MAX_ITER
    sample_rows: int = DEFAULT_SAMPLE_ROWS
    trend_months: int = DEFAULT_TREND_MONTHS
    random_seed: Optional[int] = None


@dataclass(frozen=True)
class AnalysisResult:
    classification: ColumnClassification
    clustering: ClusteringResult
    segment_names: Dict[int, str]
    records: List[CustomerRecord]
    metrics: MetricsSummary
    labels: Dict[str, str] = field(default_factory=dict)
    # Per numeric field mean/std used for clustering; maps centroids back to raw units.
    scaling: Optional[ScaleParams] = None

    def to_dict(self, *, include_records: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fields": self.classification.to_dict(),
            "labels": dict(self.labels),
            "clustering": self.clustering.to_dict(),
            "segment_names": {str(k): v for k, v in self.segment_names.items()},
            "metrics": self.metrics.to_dict(),
            "cluster_points": cluster_points(self.records, self.classification.numeric_fields),
            "scaling": self.scaling_by_field(),
        }
        if include_records:
            out["records"] = [r.to_dict() for r in self.records]
        return out

    def scaling_by_field(self) -> Dict[str, Dict[str, float]]:
        if self.scaling is None:
            return {}
        return {
            f: {"mean": float(self.scaling.mean[j]), "std": float(self.scaling.std[j])}
            for j, f in enumerate(self.classification.numeric_fields)
        }

    def centroids_in_raw_units(self) -> np.ndarray:
        """Cluster centroids mapped back from z-scores to the original field units."""
        centroids = np.asarray(self.clustering.centroids, dtype=float)
        if self.scaling is None or self.clustering.skipped:
            return centroids
        return centroids * self.scaling.std + self.scaling.mean


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


def analyze_customers(
    rows: Sequence[Mapping[str, Any]],
    *,
    options: Optional[AnalysisOptions] = None,
    classifier: Optional[FieldClassifier] = None,
    rng: Optional[np.random.Generator] = None,
) -> AnalysisResult:
    """Classify columns, cluster customers, name segments and aggregate metrics.

    Args:
        rows: Customer rows in arrival order; the first row defines the columns.
        options: Clustering/trend knobs; defaults match the dashboard (k<=5, 100 iterations).
        classifier: Column role classifier; the name-based heuristic by default.
        rng: Random source for seeding and trend filler; built from options.random_seed if omitted.

    Raises:
        EmptyDatasetError: `rows` is empty.
    """
    if not rows:
        raise EmptyDatasetError("no customer rows to analyze")

    options = options or AnalysisOptions()
    classifier = classifier or HeuristicFieldClassifier(sample_rows=options.sample_rows)
    rng = rng if rng is not None else make_rng(options.random_seed)

    classification = classifier.classify(rows)
    logger.info(
        "analyzing %d rows: numeric=%s monetary=%s temporal=%s",
        len(rows),
        list(classification.numeric_fields),
        list(classification.monetary_fields),
        list(classification.temporal_fields),
    )

    numeric_fields = list(classification.numeric_fields)
    X_raw = extract_features(rows, numeric_fields)
    X_scaled, scale = standardize(X_raw)

    clustering = cluster_customers(
        X_scaled,
        rng=rng,
        max_segments=options.max_segments,
        max_iter=options.max_iter,
    )

    monetary_index = None if clustering.skipped else classification.monetary_feature_index
    names = name_clusters(clustering.labels, X_raw, clustering.k, monetary_index=monetary_index)

    records: List[CustomerRecord] = []
    for i, row in enumerate(rows):
        cid = int(clustering.labels[i])
        records.append(
            CustomerRecord(
                row=dict(row),
                record_id=i + 1,
                cluster_id=cid,
                segment_name=names.get(cid) or fallback_segment_name(cid),
                monetary_value=monetary_value(row, classification),
                feature_values={f: float(X_raw[i, j]) for j, f in enumerate(numeric_fields)},
            )
        )

    metrics = aggregate_metrics(
        rows,
        classification,
        records,
        rng=rng,
        trend_months=options.trend_months,
    )

    return AnalysisResult(
        classification=classification,
        clustering=clustering,
        segment_names=names,
        records=records,
        metrics=metrics,
        labels=display_labels(classification),
        scaling=scale,
    )
