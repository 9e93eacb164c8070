from .errors import (
    HistBinningError,
    InvalidDimensionality,
    InvalidIndex,
    AxisGrowthOverflow,
)
from .axis import (
    UNDERFLOW_BIN,
    OVERFLOW_BIN,
    AxisLayout,
    AxisBase,
    AxisEquidistant,
    AxisGrow,
)
from .indexer import GlobalIndexer, locals_to_global, global_to_locals, translate
from .content import BinContent
from .histimpl import HistImpl
from .config import axis_from_dict, axes_from_config, hist_from_config, hist_from_yaml

__all__ = [name for name in dir() if not name.startswith("_")]
