import logging
import math
from collections import namedtuple

import numpy as np

from .errors import AxisGrowthOverflow, InvalidIndex

logger = logging.getLogger(__name__)

UNDERFLOW_BIN = -1
OVERFLOW_BIN = -2

# Open-ended edges of the boundary bins
_LOWEST = float(np.finfo(np.float64).min)
_HIGHEST = float(np.finfo(np.float64).max)

MAX_NBINS = 2**31 - 1

# Immutable snapshot of the parts of an axis the global indexer depends on.
# offset is the grid position of local bin 1 relative to the seed low edge.
AxisLayout = namedtuple("AxisLayout", ["can_grow", "nbins_no_over", "offset"])


class AxisBase:
    """
    Equidistant binning of one dimension.

    Regular bins sit on a grid anchored at the seed ``low`` edge: grid edge
    ``k`` is ``low + k * width`` (the seed ``high`` edge is kept exactly).
    Local bin ``i`` (1-based) spans grid edges ``offset + i - 1`` and
    ``offset + i``, left-closed and right-open.

    Parameters
    ----------
    nbins : int
        Number of regular bins, at least 1.
    low, high : float
        Finite range of the regular bins, ``low < high``.
    title : str, optional
        Free-form axis label.
    """

    def __init__(self, nbins, low, high, title=""):
        nbins = int(nbins)
        if nbins < 1:
            raise ValueError(f"Need at least 1 bin, got {nbins}.")
        low, high = float(low), float(high)
        if not (math.isfinite(low) and math.isfinite(high)):
            raise ValueError(f"Axis range must be finite, got [{low}, {high}).")
        if not high > low:
            raise ValueError(f"Axis range must be increasing, got [{low}, {high}).")

        if not math.isfinite(high - low) or not (high - low) / nbins > 0:
            raise ValueError(
                f"Bin width of [{low}, {high}) with {nbins} bins is not representable."
            )

        self.title = str(title)
        self._nbins = nbins
        self._seed_nbins = nbins
        self._low = low
        self._high = high
        self._width = (high - low) / nbins
        self._offset = 0

    # ---------- capabilities ----------
    def can_grow(self):
        raise NotImplementedError

    def get_nbins(self):
        raise NotImplementedError

    def get_nbins_no_over(self):
        return self._nbins

    def find_bin(self, x):
        raise NotImplementedError

    def find_bins(self, values):
        raise NotImplementedError

    def plan_layout(self, values):
        """Layout after `find_bins` on ``values``; only growable axes change."""
        return self.get_layout()

    # ---------- grid ----------
    def _edge(self, k):
        if k == self._seed_nbins:
            return self._high
        return self._low + k * self._width

    def _edges_at(self, k):
        return np.where(k == self._seed_nbins, self._high, self._low + k * self._width)

    def _grid_index(self, x):
        q = (x - self._low) / self._width
        if not math.isfinite(q):
            raise AxisGrowthOverflow(
                f"Value {x!r} is too far from the range of axis {self.title!r}."
            )
        k = math.floor(q)
        # round-off can put x one cell away from the edges we report
        if x < self._edge(k):
            k -= 1
        elif x >= self._edge(k + 1):
            k += 1
        return k

    def _grid_indices(self, x):
        k = np.floor((x - self._low) / self._width)
        k = np.where(
            x < self._edges_at(k), k - 1, np.where(x >= self._edges_at(k + 1), k + 1, k)
        )
        return k.astype(np.int64)

    # ---------- extents ----------
    def _bin_range(self, ibin):
        if not self.can_grow():
            if ibin == UNDERFLOW_BIN:
                return _LOWEST, self._low
            if ibin == OVERFLOW_BIN:
                return self._high, _HIGHEST
        if not 1 <= ibin <= self._nbins:
            raise InvalidIndex(f"Local bin {ibin} does not exist on {self!r}.")
        k = self._offset + ibin - 1
        return self._edge(k), self._edge(k + 1)

    def get_bin_from(self, ibin):
        return self._bin_range(ibin)[0]

    def get_bin_to(self, ibin):
        return self._bin_range(ibin)[1]

    def get_bin_center(self, ibin):
        lo, hi = self._bin_range(ibin)
        # halves first so the boundary bins do not overflow
        return 0.5 * lo + 0.5 * hi

    def get_minimum(self):
        return self._edge(self._offset)

    def get_maximum(self):
        return self._edge(self._offset + self._nbins)

    def get_bin_width(self):
        return self._width

    def get_bin_edges(self):
        """Edges of the regular bins as a float64 array of length R+1."""
        k = np.arange(self._offset, self._offset + self._nbins + 1, dtype=np.int64)
        return self._edges_at(k).astype(np.float64)

    def get_title(self):
        return self.title

    def get_layout(self):
        return AxisLayout(self.can_grow(), self._nbins, self._offset)

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return (
            self._nbins == other._nbins
            and self._offset == other._offset
            and self._low == other._low
            and self._high == other._high
            and self._seed_nbins == other._seed_nbins
        )

    __hash__ = None

    def __repr__(self):
        return (
            f"{type(self).__name__}({self._nbins}, {self.get_minimum()!r}, "
            f"{self.get_maximum()!r}, title={self.title!r})"
        )


class AxisEquidistant(AxisBase):
    """Fixed range axis with an underflow (-1) and an overflow (-2) bin."""

    def can_grow(self):
        return False

    def get_nbins(self):
        return self._nbins + 2

    def find_bin(self, x):
        x = float(x)
        if x < self._low:
            return UNDERFLOW_BIN
        # also catches +inf and nan
        if not x < self._high:
            return OVERFLOW_BIN
        return min(max(self._grid_index(x) + 1, 1), self._nbins)

    def find_bins(self, values):
        x = np.asarray(values, dtype=np.float64)
        out = np.full(x.shape, OVERFLOW_BIN, dtype=np.int64)
        out[x < self._low] = UNDERFLOW_BIN
        inside = (x >= self._low) & (x < self._high)
        if inside.any():
            out[inside] = np.clip(self._grid_indices(x[inside]) + 1, 1, self._nbins)
        return out


class AxisGrow(AxisBase):
    """
    Axis without boundary bins whose range grows to admit any finite value.

    Growth keeps the bin width and the grid, adding the minimum number of
    whole bins below or above the current range. Edges of existing bins keep
    their exact values; bins added below shift the existing local indices up.

    Parameters
    ----------
    nbins, low, high, title
        Seed binning, see `AxisBase`.
    max_nbins : int, optional
        Upper limit of regular bins; growing past it raises
        `AxisGrowthOverflow`.
    """

    def __init__(self, nbins, low, high, title="", max_nbins=MAX_NBINS):
        super().__init__(nbins, low, high, title=title)
        self.max_nbins = int(max_nbins)
        if self.max_nbins < self._nbins:
            raise ValueError(
                f"max_nbins={self.max_nbins} is smaller than the seed bin count {self._nbins}."
            )

    def can_grow(self):
        return True

    def get_nbins(self):
        return self._nbins

    def _plan_growth(self, xmin, xmax):
        if not (math.isfinite(xmin) and math.isfinite(xmax)):
            raise AxisGrowthOverflow(
                f"Cannot grow axis {self.title!r} to cover a non-finite value."
            )
        first = min(self._grid_index(xmin), self._offset)
        last = max(self._grid_index(xmax), self._offset + self._nbins - 1)
        nbins = last - first + 1
        if nbins > self.max_nbins:
            raise AxisGrowthOverflow(
                f"Growing axis {self.title!r} to cover [{xmin}, {xmax}] needs "
                f"{nbins} bins, limit is {self.max_nbins}."
            )
        return first, nbins

    def plan_layout(self, values):
        """Layout after growing to cover ``values``, without changing the axis."""
        x = np.asarray(values, dtype=np.float64)
        if x.size == 0:
            return self.get_layout()
        first, nbins = self._plan_growth(float(x.min()), float(x.max()))
        return AxisLayout(True, nbins, first)

    def grow_to_cover(self, xmin, xmax):
        """
        Extend the range so that ``[xmin, xmax]`` is covered.

        Returns the number of bins prepended, i.e. the shift applied to the
        local indices of the existing bins. The axis is left untouched when
        growth fails.
        """
        first, nbins = self._plan_growth(xmin, xmax)
        if nbins == self._nbins:
            return 0

        shift = self._offset - first
        logger.debug(
            "axis %r grows from %d to %d bins (%d prepended)",
            self.title,
            self._nbins,
            nbins,
            shift,
        )
        self._offset = first
        self._nbins = nbins
        return shift

    def find_bin(self, x):
        x = float(x)
        self.grow_to_cover(x, x)
        return self._grid_index(x) - self._offset + 1

    def find_bins(self, values):
        x = np.asarray(values, dtype=np.float64)
        if x.size == 0:
            return np.zeros(x.shape, dtype=np.int64)
        self.grow_to_cover(float(x.min()), float(x.max()))
        return self._grid_indices(x) - self._offset + 1
