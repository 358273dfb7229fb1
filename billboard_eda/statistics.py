"""
Correlation and regression.

The two families deliberately use different missing-value policies:

- correlations use *pairwise* deletion: for each pair of variables only the
  rows missing one of those two variables are dropped, independently per pair;
- the linear model uses *listwise* deletion: a row missing the target or any
  predictor is dropped before fitting.

Only missing values are deleted from correlations. An infinite value is data,
and any pair it takes part in has an undefined (NaN) correlation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy.stats import pearsonr

from .config import (
    CORRELATION_FEATURES,
    MIN_ABS_R,
    REGRESSION_PREDICTORS,
    REGRESSION_TARGET,
    SIGNIFICANCE_ALPHA,
    YEARLY_METRICS,
)
from .errors import InsufficientDataError
from .utils import check_columns

logger = logging.getLogger(__name__)


# ----------------------------- Utilities ----------------------------- #

def _to_float_array(values: Iterable) -> np.ndarray:
    s = pd.to_numeric(pd.Series(values), errors="coerce")
    return s.to_numpy(dtype="float64", na_value=np.nan)


def _complete_pairs(a: Iterable, b: Iterable) -> Tuple[np.ndarray, np.ndarray]:
    x, y = _to_float_array(a), _to_float_array(b)
    if len(x) != len(y):
        raise ValueError(f"Length mismatch: {len(x)} vs {len(y)}")
    ok = pd.notna(x) & pd.notna(y)
    return x[ok], y[ok]


# ---------------------------- Correlation ---------------------------- #

def correlation(a: Iterable, b: Iterable) -> float:
    """
    Pearson r over the positions where neither value is missing.

    Returns NaN when fewer than two complete pairs remain, when either
    variable is constant over those pairs, or when a pair holds ±inf.
    """
    x, y = _complete_pairs(a, b)
    with np.errstate(divide="ignore", invalid="ignore"):
        r = pd.Series(x).corr(pd.Series(y), method="pearson", min_periods=2)
    return float(r)


def correlation_test(a: Iterable, b: Iterable) -> Tuple[float, float]:
    """Pearson r and its two-sided p-value over complete pairs; (NaN, NaN) when undefined."""
    r = correlation(a, b)
    x, y = _complete_pairs(a, b)
    if np.isnan(r) or len(x) < 3:
        return r, np.nan
    _, p = pearsonr(x, y)
    return r, float(p)


def correlation_matrix(df: pd.DataFrame, columns: Sequence[str] = CORRELATION_FEATURES) -> pd.DataFrame:
    """
    Pearson correlation for every pair of ``columns`` with pairwise deletion.

    Each cell uses all rows complete in *that* pair, so different cells may be
    based on different row counts. The result is exactly symmetric and the
    diagonal is 1.0 for every column with non-zero variance (NaN otherwise).
    """
    columns = list(columns)
    check_columns(df, columns)
    frame = pd.DataFrame({c: _to_float_array(df[c]) for c in columns})
    corr = frame.corr(method="pearson", min_periods=2)

    # DataFrame.corr skips ±inf as if missing; recompute those columns
    has_inf = np.isinf(frame.to_numpy()).any(axis=0)
    for c in frame.columns[has_inf]:
        for other in frame.columns:
            r = correlation(frame[c], frame[other])
            corr.loc[c, other] = r
            corr.loc[other, c] = r

    mat = corr.to_numpy(copy=True)
    diag = np.diag(mat).copy()
    diag[~np.isnan(diag)] = 1.0
    np.fill_diagonal(mat, diag)
    out = pd.DataFrame(mat, index=corr.index, columns=corr.columns)
    return out.reindex(index=columns, columns=columns)


def correlation_pvalues(df: pd.DataFrame, columns: Sequence[str] = CORRELATION_FEATURES) -> pd.DataFrame:
    """Two-sided p-values matching ``correlation_matrix`` (same pairwise deletion)."""
    columns = list(columns)
    check_columns(df, columns)
    k = len(columns)
    pval = np.full((k, k), np.nan)
    for i, a in enumerate(columns):
        for j in range(i, k):
            if i == j:
                r = correlation(df[a], df[a])
                p = 0.0 if not np.isnan(r) else np.nan
            else:
                _, p = correlation_test(df[a], df[columns[j]])
            pval[i, j] = p
            pval[j, i] = p
    return pd.DataFrame(pval, index=columns, columns=columns)


def significant_pairs(
    corr: pd.DataFrame,
    pvals: pd.DataFrame,
    alpha: float = SIGNIFICANCE_ALPHA,
    min_abs_r: float = MIN_ABS_R,
) -> pd.DataFrame:
    """Off-diagonal pairs with p < alpha and |r| >= min_abs_r, strongest positive first."""
    sig_mask = (pvals < alpha) & (corr.abs() >= min_abs_r)
    sig_pairs = []
    cols = list(corr.columns)
    for i in range(len(cols)):
        for j in range(i + 1, len(cols)):
            a, b = cols[i], cols[j]
            if sig_mask.loc[a, b]:
                sig_pairs.append((a, b, corr.loc[a, b], pvals.loc[a, b]))
    return (pd.DataFrame(sig_pairs, columns=["var1", "var2", "r", "p_value"])
            .sort_values("r", ascending=False)
            .reset_index(drop=True))


def ranking_correlations(df: pd.DataFrame, features: Sequence[str] = YEARLY_METRICS,
                         target: str = REGRESSION_TARGET) -> pd.Series:
    """r of the chart ranking against each feature (pairwise deletion per feature)."""
    check_columns(df, [target] + list(features))
    return pd.Series(
        {f: correlation(df[target], df[f]) for f in features},
        name=f"r_{target}",
        dtype="float64",
    )


# ---------------------------- Regression ----------------------------- #

@dataclass
class RegressionResult:
    target: str
    predictors: List[str]
    coefficients: pd.DataFrame  # index: "intercept" + predictors; estimate/std_error/t_value/p_value
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_pvalue: float
    residual_std_error: float
    n_obs: int
    df_resid: int
    model: Any = field(repr=False, default=None)  # statsmodels RegressionResultsWrapper

    def summary_text(self) -> str:
        return self.model.summary().as_text() if self.model is not None else ""


def fit_linear_model(
    df: pd.DataFrame,
    target: str = REGRESSION_TARGET,
    predictors: Sequence[str] = REGRESSION_PREDICTORS,
) -> RegressionResult:
    """
    Ordinary least squares of ``target`` on ``predictors`` plus an intercept.

    Only rows complete across the target and every predictor are used; a row
    holding ±inf is dropped with them, since OLS has no use for it.
    Raises InsufficientDataError when the retained rows are not more than
    ``len(predictors) + 1`` or when the predictors are perfectly collinear.
    """
    predictors = list(predictors)
    cols = [target] + predictors
    check_columns(df, cols)

    data = pd.DataFrame({c: _to_float_array(df[c]) for c in cols})
    data = data[np.isfinite(data.to_numpy()).all(axis=1)].reset_index(drop=True)
    n, k = len(data), len(predictors)
    if n <= k + 1:
        raise InsufficientDataError(
            f"{n} complete row(s) for {k} predictor(s); need more than {k + 1}"
        )

    X = sm.add_constant(data[predictors], has_constant="add")
    if np.linalg.matrix_rank(X.to_numpy()) < X.shape[1]:
        raise InsufficientDataError(
            f"Design matrix is rank deficient (collinear predictors among {predictors})"
        )

    fit = sm.OLS(data[target], X).fit()
    coefficients = pd.DataFrame({
        "estimate": fit.params,
        "std_error": fit.bse,
        "t_value": fit.tvalues,
        "p_value": fit.pvalues,
    })
    coefficients.index = ["intercept" if t == "const" else t for t in coefficients.index]

    result = RegressionResult(
        target=target,
        predictors=predictors,
        coefficients=coefficients,
        r_squared=float(fit.rsquared),
        adj_r_squared=float(fit.rsquared_adj),
        f_statistic=float(fit.fvalue),
        f_pvalue=float(fit.f_pvalue),
        residual_std_error=float(np.sqrt(fit.scale)),
        n_obs=int(fit.nobs),
        df_resid=int(fit.df_resid),
        model=fit,
    )
    logger.info(
        f"[ols] {target} ~ {' + '.join(predictors)}: n={result.n_obs}, "
        f"R2={result.r_squared:.4f}, adj R2={result.adj_r_squared:.4f}, "
        f"F={result.f_statistic:.3f} (p={result.f_pvalue:.3g})"
    )
    return result
