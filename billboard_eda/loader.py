"""Read the chart dataset from a delimited text file."""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from .errors import LoadError

logger = logging.getLogger(__name__)


def load_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load a delimited file into a DataFrame, keeping column and row order.

    Column types are whatever pandas infers from the text; no coercion happens
    here. Any failure to open or parse the file is raised as LoadError.

    Two header fixes are applied and nothing else: a leading unnamed row-index
    column (``Unnamed: 0``, as written by R or ``DataFrame.to_csv``) is
    dropped, and surrounding whitespace is stripped from each column name.
    Names are otherwise kept exactly, case included, in file order.
    """
    path = Path(path)
    if not path.exists():
        raise LoadError(f"File not found: {path}")
    if not path.is_file():
        raise LoadError(f"Not a regular file: {path}")

    try:
        df = pd.read_csv(path, low_memory=False)
    except pd.errors.EmptyDataError as e:
        raise LoadError(f"File is empty: {path}") from e
    except pd.errors.ParserError as e:
        raise LoadError(f"Could not parse {path} as delimited data: {e}") from e
    except UnicodeDecodeError as e:
        raise LoadError(f"Could not decode {path}: {e}") from e
    except OSError as e:
        raise LoadError(f"Could not read {path}: {e}") from e

    # R's read_csv and the source exports sometimes carry an unnamed row index
    if len(df.columns) and df.columns[0] == "Unnamed: 0":
        df = df.drop(columns=["Unnamed: 0"])
    df.columns = [str(c).strip() for c in df.columns]

    logger.info(f"Loaded {len(df):,} rows x {len(df.columns)} columns from {path}")
    return df
