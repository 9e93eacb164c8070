class HistBinningError(Exception):
    """Base class for all binning errors raised by histbin."""


class InvalidDimensionality(HistBinningError, ValueError):
    """Number of coordinates does not match the number of axes."""


class InvalidIndex(HistBinningError, IndexError):
    """A global or local bin index that was never issued."""


class AxisGrowthOverflow(HistBinningError, OverflowError):
    """A growable axis cannot be extended to cover a value."""
