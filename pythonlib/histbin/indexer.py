"""
Global bin numbering of N-dimensional cells.

Cells are visited in row-major order, axis 0 fastest. Per axis the slot
order is ``[underflow, 1..R, overflow]`` for fixed axes and ``[1..R]`` for
growable axes. Cells whose local bins are all regular get the positive
indices 1, 2, 3, ... in visiting order, every other cell gets -1, -2, -3, ...
in the same order. For two fixed 2-bin axes::

                 Axis 0
           UF  Reg1  Reg2  OF
      UF  | -1   -2    -3   -4
    Reg1  | -5    1     2   -6
    Reg2  | -7    3     4   -8
      OF  | -9  -10   -11  -12

Nothing is enumerated: a cell's mixed-radix rank and the number of regular
cells ranked before it give both counters in closed form, and the inverse
walks the axes from the slowest one down.
"""

import operator

import numpy as np

from .axis import OVERFLOW_BIN, UNDERFLOW_BIN
from .errors import AxisGrowthOverflow, InvalidDimensionality, InvalidIndex

# global indices are handled as int64 when vectorized
_MAX_CELLS = 2**62


def _nslots(ax):
    return ax.nbins_no_over if ax.can_grow else ax.nbins_no_over + 2


def _block_sizes(layout):
    """Per axis: (cells, regular cells) in one step of that axis' digit."""
    cells, regular = [1], [1]
    for ax in layout[:-1]:
        cells.append(cells[-1] * _nslots(ax))
        regular.append(regular[-1] * ax.nbins_no_over)
    return cells, regular


def get_sizes(layout):
    """Return ``(nregular, ncells)`` of a layout."""
    nregular, ncells = 1, 1
    for ax in layout:
        nregular *= ax.nbins_no_over
        ncells *= _nslots(ax)
    if ncells > _MAX_CELLS:
        raise AxisGrowthOverflow(
            f"{ncells} cells do not fit a 64 bit global bin index."
        )
    return nregular, ncells


def _slot_to_local(ax, slot):
    if ax.can_grow:
        return slot + 1
    if slot == 0:
        return UNDERFLOW_BIN
    if slot == ax.nbins_no_over + 1:
        return OVERFLOW_BIN
    return slot


def locals_to_global(layout, local_bins):
    """
    Global index of a vector of local bin indices.

    Each entry of ``local_bins`` may be an int or an integer array; arrays are
    broadcast against each other and an int64 array is returned.
    """
    if len(local_bins) != len(layout):
        raise InvalidDimensionality(
            f"Expected {len(layout)} local bins, got {len(local_bins)}."
        )
    get_sizes(layout)
    scalar = all(np.ndim(b) == 0 for b in local_bins)
    bins = np.broadcast_arrays(*[np.asarray(b, dtype=np.int64) for b in local_bins])
    cells, regular = _block_sizes(layout)

    slots, below, is_reg = [], [], []
    for ax, b in zip(layout, bins):
        nreg = ax.nbins_no_over
        reg = (b >= 1) & (b <= nreg)
        if ax.can_grow:
            valid = reg
            slot = b - 1
            n_below = slot
        else:
            valid = reg | (b == UNDERFLOW_BIN) | (b == OVERFLOW_BIN)
            slot = np.where(b == UNDERFLOW_BIN, 0, np.where(b == OVERFLOW_BIN, nreg + 1, b))
            n_below = np.clip(slot - 1, 0, nreg)
        if not np.all(valid):
            bad = np.asarray(b)[~valid].ravel()[0]
            raise InvalidIndex(f"Local bin {bad} does not exist on axis {ax}.")
        slots.append(slot)
        below.append(n_below)
        is_reg.append(reg)

    cell = np.zeros(bins[0].shape, dtype=np.int64)
    for k, slot in enumerate(slots):
        cell += slot * cells[k]

    # regular cells ranked before this one, counted from the slowest axis down
    # until the first non-regular slot
    nregular_before = np.zeros(bins[0].shape, dtype=np.int64)
    alive = np.ones(bins[0].shape, dtype=bool)
    for k in reversed(range(len(layout))):
        nregular_before += np.where(alive, below[k] * regular[k], 0)
        alive &= is_reg[k]

    out = np.where(alive, nregular_before + 1, -(cell - nregular_before + 1))
    if scalar:
        return int(out)
    return out


def global_to_locals(layout, index):
    """Local bin indices of a global index, the inverse of `locals_to_global`."""
    index = operator.index(index)
    nregular, ncells = get_sizes(layout)
    if index == 0 or index > nregular or index < -(ncells - nregular):
        raise InvalidIndex(
            f"Global bin {index} outside the issued range [{nregular - ncells}, {nregular}]."
        )

    if index > 0:
        rem = index - 1
        out = []
        for ax in layout:
            rem, r = divmod(rem, ax.nbins_no_over)
            out.append(r + 1)
        return tuple(out)

    cells, regular = _block_sizes(layout)
    slots = [0] * len(layout)
    rem = -index - 1
    for k in reversed(range(len(layout))):
        ax = layout[k]
        nreg = ax.nbins_no_over
        nonreg = cells[k] - regular[k]
        rest = None
        if not ax.can_grow:
            if rem < cells[k]:
                slots[k], rest = 0, rem
            else:
                rem -= cells[k]
        if rest is None:
            if rem < nreg * nonreg:
                slots[k] = rem // nonreg + (0 if ax.can_grow else 1)
                rem %= nonreg
                continue
            rem -= nreg * nonreg
            slots[k], rest = nreg + 1, rem
        # every cell below a boundary slot is non-regular
        for j in range(k):
            rest, slots[j] = divmod(rest, _nslots(layout[j]))
        break

    return tuple(_slot_to_local(ax, s) for ax, s in zip(layout, slots))


def translate(old_layout, new_layout, index):
    """
    Map a global index issued under ``old_layout`` to the index of the same
    bin after growth produced ``new_layout``.
    """
    local_bins = global_to_locals(old_layout, index)
    shifted = [
        b + old.offset - new.offset if old.can_grow else b
        for b, old, new in zip(local_bins, old_layout, new_layout)
    ]
    return locals_to_global(new_layout, shifted)


class GlobalIndexer:
    """Global bin numbering over a live sequence of axes."""

    def __init__(self, axes):
        self._axes = axes

    def get_ndim(self):
        return len(self._axes)

    def get_layout(self):
        return tuple(ax.get_layout() for ax in self._axes)

    def get_nregular(self):
        return get_sizes(self.get_layout())[0]

    def get_noverflow(self):
        nregular, ncells = get_sizes(self.get_layout())
        return ncells - nregular

    def find_local_bins(self, coords):
        """Per-axis local bins of a coordinate vector; growable axes may grow."""
        if len(coords) != len(self._axes):
            raise InvalidDimensionality(
                f"Expected {len(self._axes)} coordinates, got {len(coords)}."
            )
        scalar = all(np.ndim(c) == 0 for c in coords)
        if not scalar:
            coords = np.broadcast_arrays(*[np.asarray(c, dtype=np.float64) for c in coords])

        # no axis grows unless the grown layout as a whole is valid
        get_sizes(tuple(ax.plan_layout(c) for ax, c in zip(self._axes, coords)))

        if scalar:
            return [ax.find_bin(c) for ax, c in zip(self._axes, coords)]
        return [ax.find_bins(a) for ax, a in zip(self._axes, coords)]

    def to_global(self, coords):
        return self.locals_to_global(self.find_local_bins(coords))

    def locals_to_global(self, local_bins):
        return locals_to_global(self.get_layout(), local_bins)

    def from_global(self, index):
        return global_to_locals(self.get_layout(), index)

    def extent(self, index):
        """Per-axis ``(from, center, to)`` of a global bin."""
        return tuple(
            (ax.get_bin_from(b), ax.get_bin_center(b), ax.get_bin_to(b))
            for ax, b in zip(self._axes, self.from_global(index))
        )
