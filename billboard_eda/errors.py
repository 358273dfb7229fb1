"""Exception and warning types raised by the analysis stages."""


class BillboardEDAError(Exception):
    """Base class for every fatal pipeline error."""


class LoadError(BillboardEDAError):
    """The input file is missing, unreadable, or not delimited tabular data."""


class SchemaError(BillboardEDAError):
    """One or more expected columns are absent from the input."""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required column(s): {', '.join(self.missing)}")


class InsufficientDataError(BillboardEDAError):
    """Too few complete rows (or a rank-deficient design) to fit a model."""


class EmptyGroupWarning(RuntimeWarning):
    """An aggregate group had no non-missing values for a metric; its mean is NaN."""
