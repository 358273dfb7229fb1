import os
import sys
import unittest
import warnings

import numpy as np
import pandas as pd

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from billboard_eda.aggregation import aggregate_by_year, compare_groups
from billboard_eda.errors import EmptyGroupWarning, SchemaError


def frame(rows):
    df = pd.DataFrame(rows)
    for col in ("ranking", "year", "danceability", "energy", "valence"):
        if col in df.columns:
            df[col] = pd.array(df[col], dtype="Float64")
    return df


class TestAggregateByYear(unittest.TestCase):

    def test_two_rows_one_year(self):
        df = frame([
            {"ranking": 1, "year": 2020, "danceability": 0.8, "energy": 0.5, "valence": 0.6},
            {"ranking": 2, "year": 2020, "danceability": 0.6, "energy": 0.7, "valence": 0.4},
        ])
        out = aggregate_by_year(df)
        self.assertEqual(len(out), 1)
        row = out.iloc[0]
        self.assertEqual(row["year"], 2020)
        self.assertAlmostEqual(row["mean_danceability"], 0.7)
        self.assertAlmostEqual(row["mean_energy"], 0.6)
        self.assertAlmostEqual(row["mean_valence"], 0.5)
        self.assertEqual(row["count"], 2)

    def test_one_row_per_year_ascending(self):
        df = frame([
            {"year": 2003, "danceability": 0.1, "energy": 0.1, "valence": 0.1},
            {"year": 2001, "danceability": 0.2, "energy": 0.2, "valence": 0.2},
            {"year": 2003, "danceability": 0.3, "energy": 0.3, "valence": 0.3},
            {"year": 2002, "danceability": 0.4, "energy": 0.4, "valence": 0.4},
            {"year": 2001, "danceability": 0.6, "energy": 0.6, "valence": 0.6},
        ])
        out = aggregate_by_year(df)
        self.assertEqual(list(out["year"]), [2001.0, 2002.0, 2003.0])
        self.assertEqual(len(out), df["year"].nunique())
        self.assertEqual(int(out["count"].sum()), len(df))
        self.assertAlmostEqual(out.loc[out["year"] == 2001, "mean_danceability"].iloc[0], 0.4)

    def test_missing_values_excluded_not_zero(self):
        df = frame([
            {"year": 2000, "danceability": 0.9, "energy": None, "valence": 0.5},
            {"year": 2000, "danceability": None, "energy": 0.4, "valence": 0.5},
            {"year": 2000, "danceability": 0.3, "energy": 0.2, "valence": 0.5},
        ])
        out = aggregate_by_year(df)
        self.assertAlmostEqual(out.loc[0, "mean_danceability"], 0.6)
        self.assertAlmostEqual(out.loc[0, "mean_energy"], 0.3)
        self.assertEqual(out.loc[0, "count"], 3)

    def test_all_missing_metric_is_nan_with_warning(self):
        df = frame([
            {"year": 2000, "danceability": 0.5, "energy": None, "valence": 0.5},
            {"year": 2000, "danceability": 0.7, "energy": None, "valence": 0.5},
            {"year": 2001, "danceability": 0.7, "energy": 0.1, "valence": 0.5},
        ])
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            out = aggregate_by_year(df)
        self.assertTrue(np.isnan(out.loc[0, "mean_energy"]))
        self.assertAlmostEqual(out.loc[1, "mean_energy"], 0.1)
        self.assertTrue(any(issubclass(w.category, EmptyGroupWarning) for w in caught))

    def test_missing_year_forms_trailing_group(self):
        df = frame([
            {"year": 2001, "danceability": 0.5, "energy": 0.5, "valence": 0.5},
            {"year": None, "danceability": 0.1, "energy": 0.1, "valence": 0.1},
            {"year": 2000, "danceability": 0.3, "energy": 0.3, "valence": 0.3},
        ])
        out = aggregate_by_year(df)
        self.assertEqual(len(out), 3)
        self.assertTrue(np.isnan(out["year"].iloc[-1]))
        self.assertEqual(int(out["count"].sum()), 3)

    def test_subset_of_metrics(self):
        df = frame([{"year": 2000, "danceability": 0.5, "energy": 0.2, "valence": 0.1}])
        out = aggregate_by_year(df, ["energy"])
        self.assertEqual(list(out.columns), ["year", "mean_energy", "count"])

    def test_unknown_metric(self):
        df = frame([{"year": 2000, "danceability": 0.5}])
        with self.assertRaises(SchemaError):
            aggregate_by_year(df, ["popularity"])

    def test_input_not_modified(self):
        df = frame([{"year": 2000, "danceability": 0.5, "energy": 0.2, "valence": 0.1}])
        before = df.copy()
        aggregate_by_year(df)
        pd.testing.assert_frame_equal(df, before)


class TestCompareGroups(unittest.TestCase):

    def test_top10_vs_other(self):
        df = frame([
            {"danceability": 0.9, "energy": 0.8, "valence": 0.7},
            {"danceability": 0.7, "energy": 0.6, "valence": 0.5},
            {"danceability": 0.2, "energy": 0.3, "valence": 0.4},
        ])
        df["top10"] = ["Top 10", "Top 10", "Other"]
        out = compare_groups(df, by="top10")
        self.assertEqual(list(out["top10"]), ["Other", "Top 10"])
        top = out[out["top10"] == "Top 10"].iloc[0]
        self.assertAlmostEqual(top["mean_danceability"], 0.8)
        self.assertEqual(top["count"], 2)


if __name__ == "__main__":
    unittest.main()
