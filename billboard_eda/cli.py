"""
Command line entry point.

    billboard-eda path/to/billboard.csv --outdir eda_outputs
    python -m billboard_eda path/to/billboard.csv --no-plots
"""

import argparse
import logging
import sys
import warnings
from pathlib import Path
from typing import List, Optional

from . import config
from .errors import BillboardEDAError
from .logging_setup import setup_logging
from .pipeline import run_pipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="billboard-eda",
        description="Clean a Billboard Hot 100 audio-feature CSV and run the exploratory analysis.",
    )
    parser.add_argument("csv_path", type=Path, help="Input CSV with a header row")
    parser.add_argument("--outdir", type=Path, default=config.DEFAULT_OUTDIR,
                        help=f"Output directory (default: {config.DEFAULT_OUTDIR})")
    parser.add_argument("--no-plots", action="store_true",
                        help="Skip figures and the HTML report")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper)
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Also write the log to this file")
    return parser


def _print_summary(result) -> None:
    print("\n" + "=" * 60)
    print("BILLBOARD EDA SUMMARY")
    print("=" * 60)
    print(f"Rows loaded : {result.rows_loaded:,}")
    print(f"Rows cleaned: {result.rows_clean:,}")
    print(f"Clean CSV   : {result.clean_path}")
    print("\nCorrelation of ranking with:")
    for feature, r in result.ranking_correlations.items():
        print(f"  {feature:<14} r = {r: .3f}")
    if result.regression is not None:
        reg = result.regression
        print(f"\nOLS: n={reg.n_obs:,}  R2={reg.r_squared:.3f}  adj R2={reg.adj_r_squared:.3f}  "
              f"F={reg.f_statistic:.2f} (p={reg.f_pvalue:.3g})")
    else:
        print("\nOLS: skipped (not enough complete rows)")
    print(f"\nOutputs in: {result.outdir.resolve()}")
    print("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)
    logging.captureWarnings(True)

    try:
        with warnings.catch_warnings():
            # seaborn/pandas deprecation chatter; EmptyGroupWarning still goes to the log
            warnings.simplefilter("ignore", FutureWarning)
            result = run_pipeline(args.csv_path, args.outdir, make_plots=not args.no_plots)
    except BillboardEDAError as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    _print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
