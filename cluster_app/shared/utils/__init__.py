"""
Shared analytics utilities
"""
from .analysis import AnalysisOptions, AnalysisResult, analyze_customers
from .data_loader import load_csv_text, load_csv_file
from .sample_data import generate_sample_customers

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "analyze_customers",
    "load_csv_text",
    "load_csv_file",
    "generate_sample_customers",
]
