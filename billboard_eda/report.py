"""
Figures, tables and the HTML report.

Everything is rendered off-screen (Agg backend) and written under the output
directory; nothing here feeds back into the analysis.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path
from textwrap import dedent
from typing import Dict, List, Optional, Sequence

# Use non-interactive backend to avoid GUI lockups
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import plotly.express as px
import seaborn as sns

from .config import DPI, OTHER_LABEL, TOP10_LABEL
from .statistics import RegressionResult

logger = logging.getLogger(__name__)

TOP10_PALETTE = {TOP10_LABEL: "steelblue", OTHER_LABEL: "lightblue"}


# ----------------------------- Utilities ----------------------------- #

def savefig(fig: plt.Figure, path: Path, dpi: int = DPI) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"[saved] {path}")
    return path


def save_table_csv(df: pd.DataFrame, path: Path, index: bool = False) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=index)
    logger.info(f"[saved] {path}")
    return path


def _float_frame(df: pd.DataFrame, cols: Sequence[str]) -> pd.DataFrame:
    out = df[list(cols)].copy()
    for c in cols:
        if pd.api.types.is_numeric_dtype(out[c]):
            out[c] = out[c].to_numpy(dtype="float64", na_value=np.nan)
    return out


# ----------------------------- Plotting ------------------------------ #

def plot_yearly_trend(yearly: pd.DataFrame, metric: str, path: Path,
                      title: Optional[str] = None, ylabel: Optional[str] = None) -> Path:
    """Line chart of ``mean_<metric>`` against year."""
    col = f"mean_{metric}"
    data = _float_frame(yearly, ["year", col]).dropna(subset=["year"]).sort_values("year")
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(data["year"], data[col], marker="o", linewidth=2)
    ax.set_title(title or f"Average {metric.title()} by Year")
    ax.set_xlabel("Year")
    ax.set_ylabel(ylabel or f"Mean {metric.title()}")
    return savefig(fig, path)


def plot_ranking_scatter(df: pd.DataFrame, feature: str, path: Path,
                         title: Optional[str] = None, subtitle: Optional[str] = None) -> Path:
    """Scatter of chart ranking against ``feature`` with a linear fit and 95% band; rank 1 on top."""
    data = _float_frame(df, [feature, "ranking"]).dropna()
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.regplot(
        data=data, x=feature, y="ranking", ax=ax, ci=95,
        scatter_kws={"alpha": 0.4, "color": "steelblue", "s": 12},
        line_kws={"color": "darkred"},
    )
    ax.invert_yaxis()
    ax.set_xlabel(feature.title())
    ax.set_ylabel("Chart Ranking (1=highest)")
    ax.set_title(title or f"{feature.title()} and Billboard Hot 100 Chart Position")
    if subtitle:
        fig.suptitle(subtitle, fontsize=9, y=0.99)
    return savefig(fig, path)


def plot_top10_box(df: pd.DataFrame, path: Path, metric: str = "danceability", by: str = "top10") -> Path:
    """Box plot of ``metric`` for Top 10 songs vs the rest."""
    data = _float_frame(df, [by, metric]).dropna()
    order = [lbl for lbl in (TOP10_LABEL, OTHER_LABEL) if lbl in set(data[by])]
    fig, ax = plt.subplots(figsize=(7, 5))
    sns.boxplot(data=data, x=by, y=metric, hue=by, order=order, hue_order=order,
                palette=TOP10_PALETTE, legend=False, ax=ax)
    for patch in ax.patches:
        patch.set_alpha(0.7)
    ax.set_title(f"{metric.title()} of Billboard Hot 100 Songs: Top 10 vs Other")
    ax.set_xlabel("Chart Category")
    ax.set_ylabel(metric.title())
    return savefig(fig, path)


def plot_correlation_heatmap(corr: pd.DataFrame, path: Path,
                             title: str = "Correlation Matrix (Pearson, pairwise complete)") -> Path:
    fig, ax = plt.subplots(figsize=(9, 7))
    sns.heatmap(corr, annot=True, cmap="coolwarm", fmt=".2f", linewidths=0.5,
                vmin=-1, vmax=1, ax=ax)
    ax.set_title(title, fontsize=13)
    return savefig(fig, path)


def correlation_heatmap_div(corr: pd.DataFrame) -> str:
    """Interactive plotly heatmap as an embeddable HTML fragment."""
    fig = px.imshow(corr.round(2), text_auto=True, aspect="auto", zmin=-1, zmax=1,
                    color_continuous_scale="RdBu_r", title="Correlation Heatmap (interactive)")
    return fig.to_html(full_html=False, include_plotlyjs="cdn")


# ------------------------- Regression table -------------------------- #

def _stars(p: float) -> str:
    if p < 0.01:
        return "***"
    if p < 0.05:
        return "**"
    if p < 0.1:
        return "*"
    return ""


def format_regression_table(
    result: RegressionResult,
    title: str = "Multiple Linear Regression Results",
    dep_var_label: str = "Chart Ranking",
    covariate_labels: Optional[Sequence[str]] = None,
    digits: int = 3,
) -> str:
    """
    Plain-text coefficient table: estimate with significance stars, standard
    error in parentheses underneath, then model fit statistics.
    """
    labels = list(covariate_labels) if covariate_labels else [p.title() for p in result.predictors]
    if len(labels) != len(result.predictors):
        raise ValueError("covariate_labels must match the number of predictors")

    label_w, value_w = 28, 26
    width = label_w + value_w
    fmt = f"{{:,.{digits}f}}"
    coef = result.coefficients

    lines: List[str] = [title, "=" * width]
    lines.append(" " * label_w + "Dependent variable:".center(value_w))
    lines.append(" " * label_w + "-" * value_w)
    lines.append(" " * label_w + dep_var_label.center(value_w))
    lines.append("-" * width)

    terms = list(zip(labels, result.predictors)) + [("Constant", "intercept")]
    for label, term in terms:
        row = coef.loc[term]
        est = fmt.format(row["estimate"]) + _stars(row["p_value"])
        se = "(" + fmt.format(row["std_error"]) + ")"
        lines.append(label.ljust(label_w) + est.center(value_w))
        lines.append(" " * label_w + se.center(value_w))
        lines.append("")

    df_model = len(result.predictors)
    lines.append("-" * width)
    stats_rows = [
        ("Observations", f"{result.n_obs:,}"),
        ("R2", fmt.format(result.r_squared)),
        ("Adjusted R2", fmt.format(result.adj_r_squared)),
        ("Residual Std. Error", f"{fmt.format(result.residual_std_error)} (df = {result.df_resid})"),
        ("F Statistic", f"{fmt.format(result.f_statistic)}{_stars(result.f_pvalue)} "
                        f"(df = {df_model}; {result.df_resid})"),
    ]
    for label, value in stats_rows:
        lines.append(label.ljust(label_w) + value.center(value_w))
    lines.append("=" * width)
    lines.append("Note:".ljust(label_w) + "*p<0.1; **p<0.05; ***p<0.01".rjust(value_w))
    return "\n".join(lines) + "\n"


# ---------------------------- HTML report ---------------------------- #

def img_tag_from_file(path: Path, alt: str, max_w: str = "900px") -> str:
    b64 = base64.b64encode(Path(path).read_bytes()).decode("utf-8")
    return (f'<img alt="{alt}" src="data:image/png;base64,{b64}" '
            f'style="max-width:{max_w};height:auto;border:1px solid #ddd;border-radius:8px;padding:4px;" />')


def section(title: str, body_html: str) -> str:
    return f"""
    <section style="margin: 24px 0;">
      <h2 style="margin-bottom:8px">{title}</h2>
      {body_html}
    </section>
    """


def build_html_report(
    path: Path,
    dataset: str,
    overview: Dict[str, object],
    figures: Dict[str, Path],
    tables: Dict[str, pd.DataFrame],
    regression_text: Optional[str] = None,
    interactive_divs: Optional[Dict[str, str]] = None,
) -> Path:
    """Write a single self-contained HTML page with the figures, tables and regression output."""
    html_parts = [f"""
<h1>Billboard Hot 100 Exploratory Analysis</h1>
<p><strong>Dataset:</strong> {dataset}</p>
<hr/>
"""]

    items = "".join(f"<li><b>{k}:</b> {v}</li>" for k, v in overview.items())
    html_parts.append(section("1) Overview", f"<ul>{items}</ul>"))

    tbl_html = ""
    for name, tbl in tables.items():
        tbl_html += f"<h4>{name}</h4>" + tbl.to_html(index=False, float_format=lambda v: f"{v:.3f}", na_rep="")
    html_parts.append(section("2) Tables", tbl_html))

    fig_html = ""
    for name, fig_path in figures.items():
        fig_html += f"<h4>{name}</h4>{img_tag_from_file(fig_path, name)}"
    for name, div in (interactive_divs or {}).items():
        fig_html += f"<h4>{name}</h4>{div}"
    html_parts.append(section("3) Figures", fig_html))

    if regression_text:
        html_parts.append(section("4) Regression", f"<pre>{regression_text}</pre>"))

    html = dedent(f"""
    <!DOCTYPE html>
    <html>
    <head>
    <meta charset="utf-8"/>
    <title>Billboard EDA Report</title>
    <style>
     body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; padding: 24px; color: #111; }}
     h1 {{ margin-top: 0; }}
     h2 {{ border-bottom: 1px solid #eee; padding-bottom: 6px; }}
     table {{ border-collapse: collapse; font-size: 13px; }}
     td, th {{ border: 1px solid #ddd; padding: 4px 8px; }}
    </style>
    </head>
    <body>
    """) + "".join(html_parts) + "\n</body>\n</html>\n"

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")
    logger.info(f"[saved] {path}")
    return path
