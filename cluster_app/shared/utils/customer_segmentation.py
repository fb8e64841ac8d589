"""
Customer segmentation (K-Means) utilities.

A small numpy K-Means (k-means++ seeding, Lloyd iterations) over standardized
features, plus the rule-based namer that turns cluster ids into business
segment names. scikit-learn is only used for the silhouette diagnostic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from .features import column_mean
from .values import AnalysisError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SEGMENTS = 5
DEFAULT_MAX_ITER = 100
MAX_SILHOUETTE_SAMPLES = 2000

SIZE_ONLY_SEGMENT_NAMES = ("Majority Segment", "Significant Group", "Niche Segment", "Emerging Group")
VALUE_SEGMENT_NAMES = (
    "High Value",
    "Premium",
    "Core Customers",
    "Regular",
    "Potential Growth",
    "Entry Level",
    "At Risk",
)


@dataclass(frozen=True)
class ClusteringResult:
    labels: np.ndarray
    centroids: np.ndarray
    sizes: np.ndarray
    k: int
    iterations: int = 0
    converged: bool = True
    inertia: float = 0.0
    empty_reseeds: int = 0
    silhouette: Optional[float] = None
    skipped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "k": int(self.k),
            "iterations": int(self.iterations),
            "converged": bool(self.converged),
            "inertia": float(self.inertia),
            "empty_reseeds": int(self.empty_reseeds),
            "silhouette": self.silhouette,
            "skipped": bool(self.skipped),
            "cluster_sizes": [int(s) for s in self.sizes],
        }


def choose_k(n_rows: int, max_segments: int = DEFAULT_MAX_SEGMENTS) -> int:
    return max(0, min(int(max_segments), int(n_rows)))


def _squared_distances(X: np.ndarray, centers: np.ndarray) -> np.ndarray:
    # (n, k); computed from differences so identical centers give identical distances.
    diff = X[:, None, :] - centers[None, :, :]
    return np.sum(diff * diff, axis=2)


def _kmeans_plus_plus_init(X: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    n = int(X.shape[0])
    if k <= 0 or k > n:
        raise AnalysisError("k must be in [1, n_samples]")

    centers = np.empty((k, X.shape[1]), dtype=float)
    first = int(rng.integers(0, n))
    centers[0] = X[first]

    # Track squared distance to closest chosen center.
    closest_d2 = np.sum((X - centers[0]) ** 2, axis=1)
    for i in range(1, k):
        total = float(np.sum(closest_d2))
        if not np.isfinite(total) or total <= 0:
            # Data collapsed onto the chosen centers; pick the rest at random.
            centers[i:] = X[rng.choice(n, size=(k - i), replace=False)]
            break

        probs = closest_d2 / total
        idx = int(rng.choice(n, p=probs))
        centers[i] = X[idx]

        d2_new = np.sum((X - centers[i]) ** 2, axis=1)
        closest_d2 = np.minimum(closest_d2, d2_new)

    return centers


def _silhouette(X: np.ndarray, labels: np.ndarray, rng: np.random.Generator) -> Optional[float]:
    n_labels = int(np.unique(labels).size)
    if n_labels < 2 or n_labels >= X.shape[0]:
        return None
    from sklearn.metrics import silhouette_score

    # Silhouette is O(n^2); keep a bounded sample for large uploads.
    sample_size = None if X.shape[0] <= MAX_SILHOUETTE_SAMPLES else MAX_SILHOUETTE_SAMPLES
    try:
        return float(
            silhouette_score(
                X,
                labels,
                metric="euclidean",
                sample_size=sample_size,
                random_state=int(rng.integers(0, 2**31 - 1)) if sample_size else None,
            )
        )
    except ValueError as e:
        logger.debug("silhouette undefined: %s", e)
        return None


def single_cluster(n_rows: int) -> ClusteringResult:
    """Pseudo-clustering used when there is nothing numeric to cluster on."""
    return ClusteringResult(
        labels=np.zeros(n_rows, dtype=int),
        centroids=np.zeros((1, 0), dtype=float),
        sizes=np.array([n_rows], dtype=int),
        k=1,
        skipped=True,
    )


def kmeans_fit(
    X: np.ndarray,
    k: int,
    *,
    rng: np.random.Generator,
    max_iter: int = DEFAULT_MAX_ITER,
) -> ClusteringResult:
    """Lloyd's K-Means; stops when assignments no longer change or after max_iter rounds.

    Ties in nearest-centroid distance go to the lowest cluster index. A cluster
    left empty after an assignment round is reseeded on a random data point.
    """
    X = np.asarray(X, dtype=float)
    n, p = X.shape
    centers = _kmeans_plus_plus_init(X, k=k, rng=rng)

    # -1 never matches an assignment, so the first round always updates.
    labels = np.full(n, -1, dtype=int)
    converged = False
    empty_reseeds = 0
    it = 0

    for it in range(1, max(1, int(max_iter)) + 1):
        d2 = _squared_distances(X, centers)
        new_labels = np.argmin(d2, axis=1).astype(int)
        if np.array_equal(new_labels, labels):
            converged = True
            break
        labels = new_labels

        counts = np.bincount(labels, minlength=k).astype(int)
        sums = np.zeros((k, p), dtype=float)
        np.add.at(sums, labels, X)

        nonempty = counts > 0
        centers[nonempty] = sums[nonempty] / counts[nonempty][:, None]

        empty = np.where(~nonempty)[0]
        if empty.size:
            empty_reseeds += int(empty.size)
            for j in empty.tolist():
                centers[j] = X[int(rng.integers(0, n))]

    sizes = np.bincount(labels, minlength=k).astype(int)
    d2 = _squared_distances(X, centers)
    inertia = float(np.sum(d2[np.arange(n), labels]))

    if not converged:
        logger.warning("k-means stopped after %d iterations without stable assignments", it)

    return ClusteringResult(
        labels=labels,
        centroids=centers,
        sizes=sizes,
        k=int(k),
        iterations=int(it),
        converged=converged,
        inertia=inertia,
        empty_reseeds=empty_reseeds,
        silhouette=_silhouette(X, labels, rng),
    )


def cluster_customers(
    X_scaled: np.ndarray,
    *,
    rng: np.random.Generator,
    max_segments: int = DEFAULT_MAX_SEGMENTS,
    max_iter: int = DEFAULT_MAX_ITER,
) -> ClusteringResult:
    """Cluster standardized rows into min(max_segments, n) groups.

    Never raises for data-quality reasons: no rows or no feature columns fall
    back to a single pseudo-cluster.
    """
    X_scaled = np.asarray(X_scaled, dtype=float)
    n = int(X_scaled.shape[0]) if X_scaled.ndim >= 1 else 0
    if X_scaled.ndim != 2 or n == 0 or X_scaled.shape[1] == 0:
        logger.warning("no numeric features to cluster on; using a single segment")
        return single_cluster(n)

    k = choose_k(n, max_segments)
    result = kmeans_fit(X_scaled, k, rng=rng, max_iter=max_iter)
    logger.info(
        "k-means finished: k=%d iterations=%d converged=%s sizes=%s",
        result.k,
        result.iterations,
        result.converged,
        result.sizes.tolist(),
    )
    return result


def value_ratio(avg_value: float, overall_avg: float) -> float:
    if overall_avg == 0 or not np.isfinite(overall_avg):
        return 0.0
    return float(avg_value) / float(overall_avg)


def name_segment(relative_size: float, ratio: Optional[float] = None) -> str:
    """Map a cluster's size share and monetary ratio to a segment name.

    `ratio` is the cluster's mean primary monetary value divided by the
    dataset-wide mean; None means the dataset has no monetary feature.
    """
    if ratio is None:
        if relative_size > 0.3:
            return "Majority Segment"
        if relative_size > 0.2:
            return "Significant Group"
        if relative_size > 0.1:
            return "Niche Segment"
        return "Emerging Group"

    if ratio > 1.5:
        return "High Value" if relative_size > 0.15 else "Premium"
    if ratio > 0.8:
        return "Core Customers" if relative_size > 0.25 else "Regular"
    if ratio > 0.3:
        return "Potential Growth"
    return "Entry Level" if relative_size > 0.2 else "At Risk"


def fallback_segment_name(cluster_id: int) -> str:
    return f"Segment {int(cluster_id) + 1}"


def name_clusters(
    labels: np.ndarray,
    raw_features: np.ndarray,
    k: int,
    *,
    monetary_index: Optional[int] = None,
) -> Dict[int, str]:
    """Name every non-empty cluster.

    Monetary comparisons use raw (unscaled) feature values: the cluster mean
    of the primary monetary column against its mean over all rows.
    """
    labels = np.asarray(labels, dtype=int)
    total = int(labels.shape[0])
    if total == 0:
        return {}

    overall_avg: Optional[float] = None
    if monetary_index is not None:
        overall_avg = column_mean(raw_features[:, monetary_index])

    names: Dict[int, str] = {}
    for cid in range(int(k)):
        members = labels == cid
        size = int(members.sum())
        if size == 0:
            continue
        relative_size = size / total
        ratio: Optional[float] = None
        if monetary_index is not None and overall_avg is not None:
            avg_value = column_mean(raw_features[members, monetary_index])
            ratio = value_ratio(avg_value, overall_avg)
        names[cid] = name_segment(relative_size, ratio)
    return names
