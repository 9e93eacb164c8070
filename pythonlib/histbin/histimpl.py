import copy
import functools
import logging

import numpy as np

from .content import BinContent
from .errors import InvalidDimensionality
from .indexer import GlobalIndexer, translate

logger = logging.getLogger(__name__)


class HistImpl:
    """
    N-D histogram binning over fixed and growable axes.

    Parameters
    ----------
    *axes : AxisBase
        One axis per dimension, axis 0 varies fastest in the global bin
        numbering. The axes are copied; the histogram owns its copies.
    content : object, optional
        Content store receiving the global bin index of every fill. It needs
        ``fill(indices)``, ``get(index)`` and ``reindex(mapping)``.
        Defaults to a new `BinContent`.
    """

    def __init__(self, *axes, content=None):
        if len(axes) == 0:
            raise ValueError("Need at least 1 dimension.")
        self._axes = [copy.deepcopy(ax) for ax in axes]
        self.D = len(self._axes)
        self._indexer = GlobalIndexer(self._axes)
        self.content = BinContent() if content is None else content
        # refuse layouts whose cells do not fit a global index
        self._indexer.get_nregular()

    # ---------- filling ----------
    def _resolve(self, coords):
        if len(coords) != self.D:
            raise InvalidDimensionality(f"Expected {self.D} coordinates, got {len(coords)}.")
        before = self._indexer.get_layout()
        local_bins = self._indexer.find_local_bins(coords)
        self._follow_growth(before)
        return self._indexer.locals_to_global(local_bins)

    def _follow_growth(self, before):
        after = self._indexer.get_layout()
        if after == before:
            return
        logger.debug("binning changed from %s to %s, moving filled bins", before, after)
        self.content.reindex(functools.partial(translate, before, after))

    def fill(self, *coords, mask=None):
        """
        Fill with raw coordinates (one array or scalar per axis).

        Growable axes grow to cover the values first; contents already in
        the store are moved along with their bins.
        """
        if mask is not None:
            m = np.asarray(mask)
            arrs = [np.asarray(c) for c in coords]
            coords = [a[m] if a.ndim > 0 else a for a in arrs]
        self.content.fill(self._resolve(coords))

    # ---------- queries ----------
    def get_bin_index(self, coords):
        """Global bin of a coordinate vector (growable axes may grow)."""
        return self._resolve(coords)

    def get_local_bins(self, index):
        return self._indexer.from_global(index)

    def get_bin_from(self, index):
        return tuple(e[0] for e in self._indexer.extent(index))

    def get_bin_center(self, index):
        return tuple(e[1] for e in self._indexer.extent(index))

    def get_bin_to(self, index):
        return tuple(e[2] for e in self._indexer.extent(index))

    def get_bin_content(self, index):
        self._indexer.from_global(index)
        return self.content.get(index)

    def get_nbins(self):
        return tuple(ax.get_nbins() for ax in self._axes)

    def get_nbins_no_over(self):
        return tuple(ax.get_nbins_no_over() for ax in self._axes)

    def get_nregular(self):
        return self._indexer.get_nregular()

    def get_noverflow(self):
        return self._indexer.get_noverflow()

    def get_ndim(self):
        return self.D

    def get_axis(self, i):
        return self._axes[i]

    @property
    def axes(self):
        return tuple(self._axes)

    @property
    def indexer(self):
        return self._indexer

    def __repr__(self):
        return (
            f"HistImpl(nbins={self.get_nbins()}, "
            f"can_grow={tuple(ax.can_grow() for ax in self._axes)})"
        )
