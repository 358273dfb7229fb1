"""
Analysis configuration.

Column lists and thresholds are fixed for the Billboard Hot 100 dataset;
output location and log level can be overridden from the environment.
"""

import os
from pathlib import Path

# ------------------------------- Columns --------------------------------

SELECTED_COLUMNS = [
    "ranking", "year", "song", "band_singer",
    "danceability", "energy", "valence", "tempo",
    "loudness", "acousticness", "speechiness",
    "instrumentalness", "liveness", "duration_ms",
]

NUMERIC_COLUMNS = [
    "ranking", "year",
    "danceability", "energy", "valence", "tempo",
    "loudness", "acousticness", "speechiness",
    "instrumentalness", "liveness", "duration_ms",
]

# Rows missing any of these are dropped
REQUIRED_COLUMNS = ["ranking", "year", "danceability", "energy", "valence"]

YEARLY_METRICS = ["danceability", "energy", "valence"]

REGRESSION_TARGET = "ranking"
REGRESSION_PREDICTORS = ["danceability", "energy", "valence", "tempo"]

CORRELATION_FEATURES = ["ranking", "danceability", "energy", "valence", "tempo", "loudness"]

TOP10_CUTOFF = 10
TOP10_LABEL = "Top 10"
OTHER_LABEL = "Other"

# Thresholds for listing notable correlations
SIGNIFICANCE_ALPHA = 0.001
MIN_ABS_R = 0.20

# ------------------------------- Outputs --------------------------------

DEFAULT_OUTDIR = Path(os.getenv("BILLBOARD_EDA_OUTDIR", "eda_outputs"))
FIG_SUBDIR = "figures"
TABLE_SUBDIR = "tables"
CLEAN_FILENAME = "music_clean.csv"
REPORT_FILENAME = "eda_report.html"
REGRESSION_TABLE_FILENAME = "regression_table.txt"

DPI = 120

LOG_LEVEL = os.getenv("BILLBOARD_EDA_LOG_LEVEL", "INFO")
