"""
Service settings from environment variables (and cluster_app/.env when present).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cluster_app.shared.utils.analysis import AnalysisOptions

logger = logging.getLogger(__name__)

project_root = Path(__file__).parent.parent
env_path = project_root / ".env"


def load_env() -> None:
    if env_path.exists():
        load_dotenv(env_path)
        logger.info("Loaded env file: %s", env_path)
    else:
        logger.debug("Env file not found (optional): %s", env_path)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %d", name, raw, default)
        return default


@dataclass(frozen=True)
class AnalysisSettings:
    max_segments: int = 5
    max_iter: int = 100
    sample_rows: int = 100
    trend_months: int = 12
    random_seed: Optional[int] = None
    sample_size: int = 250

    @classmethod
    def from_env(cls) -> "AnalysisSettings":
        seed_raw = os.getenv("CLUSTER_RANDOM_SEED")
        seed: Optional[int] = None
        if seed_raw and seed_raw.strip():
            try:
                seed = int(seed_raw)
            except ValueError:
                logger.warning("Ignoring invalid CLUSTER_RANDOM_SEED=%r", seed_raw)
        return cls(
            max_segments=max(1, _int_env("CLUSTER_MAX_SEGMENTS", 5)),
            max_iter=max(1, _int_env("CLUSTER_MAX_ITER", 100)),
            sample_rows=max(1, _int_env("CLUSTER_SAMPLE_ROWS", 100)),
            trend_months=max(1, _int_env("CLUSTER_TREND_MONTHS", 12)),
            random_seed=seed,
            sample_size=max(1, _int_env("CLUSTER_SAMPLE_SIZE", 250)),
        )

    def analysis_options(self, random_seed: Optional[int] = None) -> AnalysisOptions:
        return AnalysisOptions(
            max_segments=self.max_segments,
            max_iter=self.max_iter,
            sample_rows=self.sample_rows,
            trend_months=self.trend_months,
            random_seed=self.random_seed if random_seed is None else random_seed,
        )


def get_settings() -> AnalysisSettings:
    load_env()
    return AnalysisSettings.from_env()
