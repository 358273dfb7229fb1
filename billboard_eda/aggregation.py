"""
Group-wise means of audio features.

Missing values are excluded from both the sum and the count of each mean.
A group whose values for a metric are all missing gets NaN for that metric
(never zero) and an EmptyGroupWarning is emitted.
"""

import logging
import warnings
from typing import Sequence

import pandas as pd

from .config import YEARLY_METRICS
from .errors import EmptyGroupWarning
from .utils import as_float, check_columns

logger = logging.getLogger(__name__)


def _group_means(df: pd.DataFrame, by: str, metrics: Sequence[str]) -> pd.DataFrame:
    metrics = list(metrics)
    check_columns(df, [by] + metrics)
    if not metrics:
        raise ValueError("At least one metric is required")

    work = df[[by] + metrics].copy()
    for m in metrics:
        work[m] = as_float(work[m])
    if pd.api.types.is_numeric_dtype(work[by]):
        work[by] = as_float(work[by])

    named = {f"mean_{m}": (m, "mean") for m in metrics}
    named["count"] = (metrics[0], "size")
    out = (work
           .groupby(by, sort=True, dropna=False)
           .agg(**named)
           .reset_index())
    out["count"] = out["count"].astype("int64")

    for m in metrics:
        empty = out.loc[out[f"mean_{m}"].isna() & (out["count"] > 0), by]
        for key in empty:
            warnings.warn(
                f"No non-missing {m} values for {by}={key}; mean is NaN",
                EmptyGroupWarning,
                stacklevel=3,
            )
    return out


def aggregate_by_year(df: pd.DataFrame, metrics: Sequence[str] = YEARLY_METRICS) -> pd.DataFrame:
    """
    Mean of each metric per distinct year, one row per year in ascending order.

    Columns: ``year``, ``mean_<metric>`` for each metric, ``count`` (rows in
    the year). Rows whose year is missing are kept as a final NaN-year group so
    the counts always add up to the input row count.
    """
    yearly = _group_means(df, "year", metrics)
    logger.info(f"[aggregate] {len(yearly)} year group(s) from {len(df):,} rows")
    return yearly


def compare_groups(df: pd.DataFrame, by: str = "top10", metrics: Sequence[str] = YEARLY_METRICS) -> pd.DataFrame:
    """Mean of each metric per value of a label column (e.g. Top 10 vs Other), sorted by label."""
    return _group_means(df, by, metrics)
