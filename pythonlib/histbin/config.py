"""
Histogram binning from plain dicts or YAML files.

Example file::

    axes:
      - {kind: fixed, nbins: 2, low: 0.0, high: 2.0, title: x}
      - {kind: grow, nbins: 5, low: -1.0, high: 1.0, max_nbins: 1000}
"""

from __future__ import annotations

from typing import Any, Dict, List

import yaml

from .axis import MAX_NBINS, AxisBase, AxisEquidistant, AxisGrow
from .histimpl import HistImpl

_KINDS = {
    "fixed": AxisEquidistant,
    "equidistant": AxisEquidistant,
    "grow": AxisGrow,
    "growable": AxisGrow,
}


def get_by_path(d, dotted, default=None):
    """Resolve a dotted key like ``Hist.Binning`` in nested dicts."""
    cur = d
    for p in dotted.split("."):
        if not isinstance(cur, dict) or p not in cur:
            return default
        cur = cur[p]
    return cur


def axis_from_dict(spec: Dict[str, Any], where: str = "axis") -> AxisBase:
    if not isinstance(spec, dict):
        raise ValueError(f"{where}: expected a mapping, got {type(spec).__name__}")

    kind = str(spec.get("kind", "fixed")).lower()
    cls = _KINDS.get(kind)
    if cls is None:
        raise ValueError(
            f"{where}: unknown axis kind {kind!r} (choose from {', '.join(sorted(_KINDS))})"
        )

    missing = [k for k in ("nbins", "low", "high") if k not in spec]
    if missing:
        raise ValueError(f"{where}: missing key(s) {', '.join(missing)}")

    kwargs = {"title": spec.get("title", "")}
    if cls is AxisGrow:
        kwargs["max_nbins"] = spec.get("max_nbins", MAX_NBINS)
    elif "max_nbins" in spec:
        raise ValueError(f"{where}: max_nbins only applies to growable axes")

    try:
        return cls(spec["nbins"], spec["low"], spec["high"], **kwargs)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{where}: {e}") from e


def axes_from_config(cfg: Dict[str, Any], key: str = "axes") -> List[AxisBase]:
    specs = get_by_path(cfg, key)
    if not isinstance(specs, list) or not specs:
        raise ValueError(f"config needs a non-empty list at {key!r}")
    return [axis_from_dict(s, where=f"{key}[{i}]") for i, s in enumerate(specs)]


def hist_from_config(cfg: Dict[str, Any], key: str = "axes", content=None) -> HistImpl:
    return HistImpl(*axes_from_config(cfg, key=key), content=content)


def load_config(path) -> Dict[str, Any]:
    with open(path, "r") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{path}: top level of a binning config must be a mapping")
    return cfg


def hist_from_yaml(path, key: str = "axes", content=None) -> HistImpl:
    return hist_from_config(load_config(path), key=key, content=content)
