import numpy as np

from .errors import InvalidIndex


class BinContent:
    """
    Entry counts keyed by global bin index.

    Keys are signed and sparse, so a dict is used instead of an array. This is
    the minimal store a histogram needs; statistics live elsewhere.
    """

    def __init__(self):
        self._counts: dict[int, int] = {}

    def fill(self, indices):
        """Count one entry per index (an int or an integer array)."""
        idx = np.asarray(indices, dtype=np.int64).ravel()
        if idx.size == 0:
            return
        if np.any(idx == 0):
            raise InvalidIndex("Global bin 0 is not a valid key.")
        keys, counts = np.unique(idx, return_counts=True)
        for k, n in zip(keys.tolist(), counts.tolist()):
            self._counts[k] = self._counts.get(k, 0) + n

    def get(self, index):
        if index == 0:
            raise InvalidIndex("Global bin 0 is not a valid key.")
        return self._counts.get(int(index), 0)

    def reindex(self, mapping):
        """Move every entry from key ``k`` to ``mapping(k)``."""
        out = {}
        for k, n in self._counts.items():
            new = mapping(k)
            out[new] = out.get(new, 0) + n
        self._counts = out

    def get_entries(self):
        return sum(self._counts.values())

    def items(self):
        return sorted(self._counts.items())

    def __len__(self):
        return len(self._counts)

    def __repr__(self):
        return f"BinContent(nbins_filled={len(self)}, entries={self.get_entries()})"
