"""
Exploratory analysis of Billboard Hot 100 songs and their Spotify audio features.

Stages: load -> clean -> aggregate / correlate / regress -> report.
"""

from .errors import (
    BillboardEDAError,
    LoadError,
    SchemaError,
    InsufficientDataError,
    EmptyGroupWarning,
)
from .loader import load_csv
from .cleaning import project, coerce, filter_complete, dedupe, clean, add_top10_label, export_clean
from .aggregation import aggregate_by_year, compare_groups
from .statistics import (
    RegressionResult,
    correlation,
    correlation_matrix,
    fit_linear_model,
)
from .pipeline import PipelineResult, run_pipeline

__all__ = [
    "BillboardEDAError",
    "LoadError",
    "SchemaError",
    "InsufficientDataError",
    "EmptyGroupWarning",
    "load_csv",
    "project",
    "coerce",
    "filter_complete",
    "dedupe",
    "clean",
    "add_top10_label",
    "export_clean",
    "aggregate_by_year",
    "compare_groups",
    "RegressionResult",
    "correlation",
    "correlation_matrix",
    "fit_linear_model",
    "PipelineResult",
    "run_pipeline",
]

__version__ = "1.0.0"
