"""
End-to-end analysis run.

Stages run strictly forward:

    load -> clean -> export music_clean.csv -> explore -> yearly means
         -> ranking correlations -> OLS -> top10 label -> group comparison
         -> correlation matrix -> figures / report

The cleaned table is exported before the ``top10`` label is derived, so the
CSV holds only the 14 selected columns. Load and cleaning errors propagate
before anything is written.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd

from . import config, report
from .aggregation import aggregate_by_year, compare_groups
from .cleaning import add_top10_label, clean, export_clean
from .errors import InsufficientDataError
from .exploration import missing_counts, ranking_summary, summarize_variables, year_coverage
from .loader import load_csv
from .statistics import (
    RegressionResult,
    correlation_matrix,
    correlation_pvalues,
    fit_linear_model,
    ranking_correlations,
    significant_pairs,
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    input_path: Path
    outdir: Path
    clean_path: Path
    rows_loaded: int
    rows_clean: int
    cleaned: pd.DataFrame = field(repr=False)
    yearly: pd.DataFrame = field(repr=False)
    ranking_correlations: pd.Series = field(repr=False)
    regression: Optional[RegressionResult] = field(repr=False)
    top10_comparison: pd.DataFrame = field(repr=False)
    correlation_matrix: pd.DataFrame = field(repr=False)
    significant_correlations: pd.DataFrame = field(repr=False)
    saved_files: Dict[str, Path] = field(default_factory=dict)


def run_pipeline(
    input_path: Union[str, Path],
    outdir: Union[str, Path] = config.DEFAULT_OUTDIR,
    make_plots: bool = True,
) -> PipelineResult:
    """Run every stage on ``input_path`` and write outputs under ``outdir``."""
    input_path = Path(input_path)
    outdir = Path(outdir)
    table_dir = outdir / config.TABLE_SUBDIR
    fig_dir = outdir / config.FIG_SUBDIR
    logger.info(f"Starting analysis of '{input_path}'...")

    raw = load_csv(input_path)
    raw_missing = missing_counts(raw)
    cleaned = clean(raw)

    saved: Dict[str, Path] = {}
    saved["music_clean"] = export_clean(cleaned, outdir / config.CLEAN_FILENAME)

    # Exploration
    coverage = year_coverage(cleaned)
    rank_summary = ranking_summary(cleaned)
    logger.info(f"Years covered: {coverage['min_year']:.0f}-{coverage['max_year']:.0f}"
                if len(coverage["rows_per_year"]) else "Years covered: none")
    logger.info(f"Ranking summary: {rank_summary}")

    yearly = aggregate_by_year(cleaned)
    rank_corr = ranking_correlations(cleaned)
    for feature, r in rank_corr.items():
        logger.info(f"[cor] ranking ~ {feature}: r={r:.4f}")

    regression: Optional[RegressionResult]
    try:
        regression = fit_linear_model(cleaned)
    except InsufficientDataError as e:
        logger.warning(f"OLS skipped: {e}")
        regression = None

    labeled = add_top10_label(cleaned)
    comparison = compare_groups(labeled, by="top10")

    corr = correlation_matrix(labeled, config.CORRELATION_FEATURES)
    pvals = correlation_pvalues(labeled, config.CORRELATION_FEATURES)
    sig = significant_pairs(corr, pvals)

    # Tables
    tables = {
        "missing_raw": raw_missing,
        "variable_summary": summarize_variables(cleaned),
        "rows_per_year": coverage["rows_per_year"].reset_index(),
        "yearly_means": yearly,
        "ranking_correlations": rank_corr.rename_axis("feature").reset_index(),
        "top10_comparison": comparison,
        "correlation_matrix": corr.round(2).rename_axis("variable").reset_index(),
        "significant_correlations": sig,
    }
    if regression is not None:
        tables["regression_coefficients"] = regression.coefficients.rename_axis("term").reset_index()
    for name, tbl in tables.items():
        saved[name] = report.save_table_csv(tbl, table_dir / f"{name}.csv")

    regression_text = None
    if regression is not None:
        regression_text = report.format_regression_table(
            regression,
            covariate_labels=[p.title() for p in regression.predictors],
        )
        path = outdir / config.REGRESSION_TABLE_FILENAME
        path.write_text(regression_text, encoding="utf-8")
        logger.info(f"[saved] {path}")
        saved["regression_table"] = path

    if make_plots and cleaned.empty:
        logger.warning("No rows left after cleaning; skipping figures and report")
    elif make_plots:
        saved.update(_render_report(
            input_path, outdir, fig_dir, cleaned, labeled, yearly, corr,
            tables, regression_text,
        ))

    logger.info(f"Done. {len(saved)} output(s) in {outdir.resolve()}")
    return PipelineResult(
        input_path=input_path,
        outdir=outdir,
        clean_path=saved["music_clean"],
        rows_loaded=len(raw),
        rows_clean=len(cleaned),
        cleaned=cleaned,
        yearly=yearly,
        ranking_correlations=rank_corr,
        regression=regression,
        top10_comparison=comparison,
        correlation_matrix=corr,
        significant_correlations=sig,
        saved_files=saved,
    )


def _render_report(input_path, outdir, fig_dir, cleaned, labeled, yearly, corr,
                   tables, regression_text) -> Dict[str, Path]:
    figures: Dict[str, Path] = {}
    for metric in config.YEARLY_METRICS:
        figures[f"Average {metric.title()} by Year"] = report.plot_yearly_trend(
            yearly, metric, fig_dir / f"yearly_mean_{metric}.png",
            title=f"Average {metric.title()} of Billboard Hot 100 Songs",
        )
    subtitles = {
        "danceability": "Relationship between song danceability and chart ranking",
        "energy": "Relationship between song energy and chart ranking",
        "valence": "Relationship between emotional positivity and chart ranking",
    }
    for feature, subtitle in subtitles.items():
        figures[f"{feature.title()} vs Chart Position"] = report.plot_ranking_scatter(
            cleaned, feature, fig_dir / f"scatter_{feature}_ranking.png", subtitle=subtitle,
        )
    figures["Danceability: Top 10 vs Other"] = report.plot_top10_box(
        labeled, fig_dir / "box_danceability_top10.png",
    )
    figures["Correlation Matrix"] = report.plot_correlation_heatmap(
        corr, fig_dir / "correlation_heatmap.png",
    )

    overview = {
        "Clean rows": f"{len(cleaned):,}",
        "Years": f"{len(yearly)}",
        "Top 10 songs": f"{int((labeled['top10'] == config.TOP10_LABEL).sum()):,}",
    }
    report_tables = {k: tables[k] for k in ("yearly_means", "ranking_correlations",
                                            "top10_comparison", "significant_correlations")}
    report_path = report.build_html_report(
        outdir / config.REPORT_FILENAME,
        dataset=str(input_path),
        overview=overview,
        figures=figures,
        tables=report_tables,
        regression_text=regression_text,
        interactive_divs={"Correlation Heatmap (interactive)": report.correlation_heatmap_div(corr)},
    )
    saved = {f"figure_{p.stem}": p for p in figures.values()}
    saved["report"] = report_path
    return saved
