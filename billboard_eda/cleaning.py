"""
Projection and cleaning of the raw chart table.

Every function returns a new DataFrame and leaves its input untouched, so the
stages compose left to right:

    clean_df = dedupe(filter_complete(coerce(project(raw_df))))

Missing values are explicit: numeric columns use the nullable ``Float64``
dtype, and anything that cannot be parsed as a number becomes ``pd.NA``.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import (
    SELECTED_COLUMNS,
    NUMERIC_COLUMNS,
    REQUIRED_COLUMNS,
    TOP10_CUTOFF,
    TOP10_LABEL,
    OTHER_LABEL,
)
from .utils import check_columns

logger = logging.getLogger(__name__)


def project(df: pd.DataFrame, columns: Sequence[str] = SELECTED_COLUMNS) -> pd.DataFrame:
    """Keep exactly ``columns``, in the order given. Raises SchemaError if any is absent."""
    check_columns(df, columns)
    return df[list(columns)].copy()


def coerce(df: pd.DataFrame, numeric_columns: Sequence[str] = NUMERIC_COLUMNS) -> pd.DataFrame:
    """
    Convert each listed column to nullable ``Float64``.

    Values that do not parse as numbers become missing instead of raising.
    Coercing a column that is already numeric leaves it unchanged.
    """
    check_columns(df, numeric_columns)
    out = df.copy()
    for col in numeric_columns:
        original = out[col]
        converted = pd.to_numeric(original, errors="coerce").astype("Float64")
        demoted = int((original.notna() & converted.isna()).sum())
        if demoted:
            logger.info(f"[coerce] {col}: {demoted} non-numeric value(s) set to missing")
        out[col] = converted
    return out


def filter_complete(df: pd.DataFrame, required: Sequence[str] = REQUIRED_COLUMNS) -> pd.DataFrame:
    """Drop rows with a missing value in any ``required`` column (listwise)."""
    check_columns(df, required)
    out = df.dropna(subset=list(required)).copy()
    dropped = len(df) - len(out)
    logger.info(f"[filter] dropped {dropped:,} incomplete row(s); {len(out):,} remain")
    return out


def dedupe(df: pd.DataFrame) -> pd.DataFrame:
    """Drop rows identical on every column to an earlier row; first occurrence wins."""
    out = df.drop_duplicates(keep="first").reset_index(drop=True)
    dropped = len(df) - len(out)
    if dropped:
        logger.info(f"[dedupe] removed {dropped:,} duplicate row(s)")
    return out


def clean(
    df: pd.DataFrame,
    columns: Sequence[str] = SELECTED_COLUMNS,
    numeric_columns: Sequence[str] = NUMERIC_COLUMNS,
    required: Sequence[str] = REQUIRED_COLUMNS,
) -> pd.DataFrame:
    """Project, coerce, drop incomplete rows and drop duplicates, in that order."""
    cleaned = dedupe(filter_complete(coerce(project(df, columns), numeric_columns), required))
    logger.info(f"Cleaned data: {len(cleaned):,} of {len(df):,} rows kept")
    return cleaned


def add_top10_label(
    df: pd.DataFrame,
    cutoff: int = TOP10_CUTOFF,
    column: str = "top10",
) -> pd.DataFrame:
    """Return a copy with ``column`` set to "Top 10" when ranking <= cutoff, else "Other"."""
    check_columns(df, ["ranking"])
    out = df.copy()
    ranking = out["ranking"]
    is_top = (ranking <= cutoff).fillna(False).astype(bool).to_numpy()
    labels = pd.Series(np.where(is_top, TOP10_LABEL, OTHER_LABEL), index=out.index, dtype="object")
    labels[ranking.isna().to_numpy()] = np.nan
    out[column] = labels
    return out


def _whole_number_columns(df: pd.DataFrame) -> List[str]:
    cols = []
    for col in df.columns:
        if not pd.api.types.is_float_dtype(df[col]):
            continue
        values = df[col].dropna()
        if len(values) and bool((values % 1 == 0).all()):
            cols.append(col)
    return cols


def export_clean(df: pd.DataFrame, path: Union[str, Path], columns: Optional[Sequence[str]] = None) -> Path:
    """
    Write the cleaned table as UTF-8 CSV with a header row, overwriting ``path``.

    Missing values are written as empty fields. Float columns that only hold
    whole numbers (ranking, year, duration_ms) are written without a ``.0``.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    out = df if columns is None else df[list(columns)]
    out = out.copy()
    for col in _whole_number_columns(out):
        out[col] = out[col].round().astype("Int64")
    out.to_csv(path, index=False, encoding="utf-8", na_rep="")
    logger.info(f"[saved] {path} ({len(out):,} rows)")
    return path
