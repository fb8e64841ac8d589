"""
Feature matrix construction and z-score standardization.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Tuple

import numpy as np

from .values import as_float, to_value


@dataclass(frozen=True)
class ScaleParams:
    mean: np.ndarray
    std: np.ndarray


def extract_features(rows: Sequence[Mapping[str, Any]], numeric_fields: Sequence[str]) -> np.ndarray:
    """Build an (n_rows, n_fields) float matrix; unparseable cells become 0.0."""
    X = np.zeros((len(rows), len(numeric_fields)), dtype=float)
    for i, row in enumerate(rows):
        for j, f in enumerate(numeric_fields):
            X[i, j] = as_float(to_value(row.get(f)))
    return X


def _column_scale(X: np.ndarray) -> np.ndarray:
    # Largest magnitude per column; statistics are taken on X / scale so sums
    # of values near the float maximum stay finite.
    scale = np.max(np.abs(X), axis=0)
    return np.where(scale == 0, 1.0, scale)


def column_mean(values: np.ndarray) -> float:
    """Mean of a 1-D array that stays finite for any finite input."""
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        return 0.0
    scale = float(np.max(np.abs(values)))
    if scale == 0:
        return 0.0
    return float(np.mean(values / scale) * scale)


def standardize(X: np.ndarray) -> Tuple[np.ndarray, ScaleParams]:
    """Per-column z-score with population std; constant columns are only centered."""
    X = np.asarray(X, dtype=float)
    if X.size == 0:
        width = X.shape[1] if X.ndim == 2 else 0
        return X.copy(), ScaleParams(mean=np.zeros(width), std=np.ones(width))
    scale = _column_scale(X)
    Xs = X / scale
    mean_s = Xs.mean(axis=0)
    std_s = Xs.std(axis=0, ddof=0)
    constant = std_s == 0
    Z = (Xs - mean_s) / np.where(constant, 1.0, std_s)
    Z[:, constant] = 0.0
    return Z, ScaleParams(mean=mean_s * scale, std=np.where(constant, 1.0, std_s * scale))
