"""Descriptive tables used to inspect the data before and after cleaning."""

from typing import Dict

import numpy as np
import pandas as pd
from scipy import stats

from .utils import as_float


def summarize_variables(df: pd.DataFrame) -> pd.DataFrame:
    """Build a variable summary with type, missingness, basic stats."""
    summary = []
    for col in df.columns:
        s = df[col]
        if pd.api.types.is_numeric_dtype(s):
            vtype = "numeric"
        elif pd.api.types.is_datetime64_any_dtype(s):
            vtype = "datetime"
        else:
            vtype = "categorical"
        entry = {
            "variable": col,
            "type": vtype,
            "missing_pct": round(float(s.isna().mean()) * 100, 2) if len(s) else 0.0,
            "n_unique": int(s.nunique(dropna=True)),
        }
        if vtype == "numeric":
            clean = as_float(s).dropna()
            if len(clean) > 0:
                entry.update({
                    "mean": clean.mean(),
                    "median": clean.median(),
                    "std": clean.std(),
                    "q1": clean.quantile(0.25),
                    "q3": clean.quantile(0.75),
                    "min": clean.min(),
                    "max": clean.max(),
                    "skew": stats.skew(clean) if len(clean) > 2 else np.nan,
                    "kurtosis": stats.kurtosis(clean) if len(clean) > 3 else np.nan,
                })
        summary.append(entry)
    return pd.DataFrame(summary)


def missing_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Missing values per column, most-missing first."""
    n = len(df)
    tbl = pd.DataFrame({
        "variable": df.columns,
        "missing_count": df.isna().sum().to_numpy(),
    })
    tbl["missing_pct"] = (tbl["missing_count"] / n * 100).round(2) if n else 0.0
    return tbl.sort_values("missing_pct", ascending=False, kind="stable").reset_index(drop=True)


def year_coverage(df: pd.DataFrame, year_col: str = "year") -> Dict[str, object]:
    """First and last year present, plus the number of rows per year (ascending)."""
    years = as_float(df[year_col]).dropna()
    if years.empty:
        return {"min_year": np.nan, "max_year": np.nan, "rows_per_year": pd.Series(dtype="int64")}
    per_year = years.value_counts().sort_index()
    per_year.index.name = year_col
    per_year.name = "rows"
    return {
        "min_year": float(years.min()),
        "max_year": float(years.max()),
        "rows_per_year": per_year,
    }


def ranking_summary(df: pd.DataFrame, col: str = "ranking") -> Dict[str, float]:
    """Five-number summary and mean of chart position."""
    r = as_float(df[col]).dropna()
    if r.empty:
        return {k: np.nan for k in ("min", "q1", "median", "mean", "q3", "max")}
    return {
        "min": float(r.min()),
        "q1": float(r.quantile(0.25)),
        "median": float(r.median()),
        "mean": float(r.mean()),
        "q3": float(r.quantile(0.75)),
        "max": float(r.max()),
    }
