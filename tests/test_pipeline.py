import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

import numpy as np
import pandas as pd

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from billboard_eda.cli import main
from billboard_eda.config import SELECTED_COLUMNS
from billboard_eda.errors import LoadError, SchemaError
from billboard_eda.pipeline import run_pipeline


def write_chart_csv(path, n=150, seed=11):
    rng = np.random.default_rng(seed)
    df = pd.DataFrame({
        "ranking": rng.integers(1, 101, n),
        "year": rng.integers(2000, 2022, n),
        "song": [f"Song {i}" for i in range(n)],
        "band_singer": [f"Artist {i % 17}" for i in range(n)],
        "danceability": rng.uniform(0.3, 0.95, n).round(3),
        "energy": rng.uniform(0.2, 0.95, n).round(3),
        "valence": rng.uniform(0.05, 0.95, n).round(3),
        "tempo": rng.uniform(60, 180, n).round(3),
        "loudness": rng.uniform(-12, -3, n).round(3),
        "acousticness": rng.uniform(0, 1, n).round(3),
        "speechiness": rng.uniform(0, 0.4, n).round(3),
        "instrumentalness": rng.uniform(0, 0.1, n).round(4),
        "liveness": rng.uniform(0, 0.6, n).round(3),
        "duration_ms": rng.integers(150_000, 300_000, n),
        "uri": [f"spotify:track:{i}" for i in range(n)],
    }).astype({"danceability": "object"})
    df.loc[3, "danceability"] = "N/A"       # dropped by the completeness filter
    df.loc[4, "tempo"] = np.nan             # kept, tempo is not required
    df = pd.concat([df, df.iloc[[0, 1]]], ignore_index=True)  # exact duplicates
    df.to_csv(path, index=False)
    return n


class TestRunPipeline(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.input_file = self.test_dir / "charts.csv"
        self.n = write_chart_csv(self.input_file)
        self.outdir = self.test_dir / "out"

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_run_without_plots(self):
        result = run_pipeline(self.input_file, self.outdir, make_plots=False)
        self.assertEqual(result.rows_loaded, self.n + 2)
        self.assertEqual(result.rows_clean, self.n - 1)

        # exported before top10 is derived
        exported = pd.read_csv(result.clean_path)
        self.assertEqual(list(exported.columns), SELECTED_COLUMNS)
        self.assertEqual(len(exported), self.n - 1)
        self.assertNotIn("top10", exported.columns)

        self.assertEqual(int(result.yearly["count"].sum()), result.rows_clean)
        self.assertTrue(result.yearly["year"].is_monotonic_increasing)
        self.assertIsNotNone(result.regression)
        self.assertEqual(result.regression.n_obs, self.n - 2)  # tempo missing in one row
        self.assertEqual(set(result.top10_comparison["top10"]), {"Top 10", "Other"})
        self.assertTrue((self.outdir / "tables" / "yearly_means.csv").exists())
        self.assertTrue((self.outdir / "regression_table.txt").exists())
        self.assertFalse((self.outdir / "eda_report.html").exists())

    def test_run_with_plots(self):
        result = run_pipeline(self.input_file, self.outdir, make_plots=True)
        self.assertTrue(result.saved_files["report"].exists())
        self.assertTrue((self.outdir / "figures" / "box_danceability_top10.png").exists())

    def test_schema_error_writes_nothing(self):
        bad = self.test_dir / "bad.csv"
        pd.read_csv(self.input_file).drop(columns=["valence"]).to_csv(bad, index=False)
        with self.assertRaises(SchemaError):
            run_pipeline(bad, self.outdir, make_plots=False)
        self.assertFalse(self.outdir.exists())

    def test_load_error_writes_nothing(self):
        with self.assertRaises(LoadError):
            run_pipeline(self.test_dir / "missing.csv", self.outdir)
        self.assertFalse(self.outdir.exists())

    def test_too_few_rows_skips_regression(self):
        small = self.test_dir / "small.csv"
        pd.read_csv(self.input_file).head(4).to_csv(small, index=False)
        result = run_pipeline(small, self.outdir, make_plots=False)
        self.assertIsNone(result.regression)
        self.assertFalse((self.outdir / "regression_table.txt").exists())


class TestCli(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_success(self):
        input_file = self.test_dir / "charts.csv"
        write_chart_csv(input_file)
        code = main([str(input_file), "--outdir", str(self.test_dir / "out"), "--no-plots",
                     "--log-level", "warning"])
        self.assertEqual(code, 0)
        self.assertTrue((self.test_dir / "out" / "music_clean.csv").exists())

    def test_missing_input_returns_one(self):
        code = main([str(self.test_dir / "missing.csv"), "--outdir", str(self.test_dir / "out")])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
