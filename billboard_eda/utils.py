"""Small frame helpers shared by the analysis stages."""

from typing import Sequence

import numpy as np
import pandas as pd

from .errors import SchemaError


def check_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    """Raise SchemaError naming every entry of ``columns`` absent from ``df``."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(missing)


def as_float(s: pd.Series) -> pd.Series:
    """Plain float64 copy of a numeric (possibly nullable) Series; pd.NA becomes NaN."""
    return pd.Series(s.to_numpy(dtype="float64", na_value=np.nan), index=s.index, name=s.name)
