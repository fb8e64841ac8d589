"""
Synthetic customer dataset for demos ("Load Sample Data").
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import numpy as np

DEFAULT_SAMPLE_SIZE = 250

CITIES = [
    "New York",
    "Los Angeles",
    "Chicago",
    "Houston",
    "Phoenix",
    "Philadelphia",
    "San Antonio",
    "San Diego",
]
TIERS = ["Premium", "Regular", "Budget"]


def _random_day(rng: np.random.Generator, year: int) -> str:
    d = date(year, int(rng.integers(1, 13)), int(rng.integers(1, 29)))
    return d.isoformat()


def generate_sample_customers(
    n: int = DEFAULT_SAMPLE_SIZE,
    *,
    rng: Optional[np.random.Generator] = None,
) -> List[Dict[str, Any]]:
    """Generate `n` customer rows with ids, contact info, spend and purchase dates."""
    rng = rng if rng is not None else np.random.default_rng()
    rows: List[Dict[str, Any]] = []
    for i in range(1, int(n) + 1):
        rows.append(
            {
                "customer_id": f"CUST{i:04d}",
                "name": f"Customer {i}",
                "email": f"customer{i}@example.com",
                "age": int(rng.integers(20, 70)),
                "registration_date": _random_day(rng, 2023),
                "total_spent": int(rng.integers(50, 2050)),
                "order_count": int(rng.integers(1, 21)),
                "last_purchase_date": _random_day(rng, 2024),
                "city": CITIES[int(rng.integers(0, len(CITIES)))],
                "segment": TIERS[int(rng.integers(0, len(TIERS)))],
            }
        )
    return rows
