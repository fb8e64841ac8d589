#!/usr/bin/env python3
"""
Analyze a customer CSV (or the generated sample dataset) and print the result as JSON.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from cluster_app.shared.config import get_settings
from cluster_app.shared.utils.analysis import analyze_customers, make_rng
from cluster_app.shared.utils.data_loader import load_csv_file
from cluster_app.shared.utils.insights import generate_insight_markdown
from cluster_app.shared.utils.sample_data import generate_sample_customers
from cluster_app.shared.utils.values import AnalysisError

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Customer segmentation for a CSV file")
    parser.add_argument("csv_path", nargs="?", help="CSV file to analyze (omit with --sample)")
    parser.add_argument("--sample", action="store_true", help="analyze the generated sample dataset")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible clustering")
    parser.add_argument("--records", action="store_true", help="include per-customer records in the output")
    parser.add_argument("--insight", action="store_true", help="print the markdown insight instead of JSON")
    args = parser.parse_args(argv)

    if not args.csv_path and not args.sample:
        parser.error("provide a CSV path or --sample")

    settings = get_settings()
    options = settings.analysis_options(args.seed)

    try:
        if args.sample:
            rows = generate_sample_customers(settings.sample_size, rng=make_rng(options.random_seed))
        else:
            rows = load_csv_file(args.csv_path)
        result = analyze_customers(rows, options=options)
    except AnalysisError as e:
        logger.error("❌ analysis failed: %s", e)
        return 1

    if args.insight:
        print(generate_insight_markdown(result))
    else:
        print(json.dumps(result.to_dict(include_records=args.records), indent=2, ensure_ascii=False, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
