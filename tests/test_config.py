import pytest
import yaml

from histbin import AxisEquidistant, AxisGrow, axis_from_dict, hist_from_config, hist_from_yaml


def write_yaml(path, obj):
    with open(path, "w") as f:
        yaml.safe_dump(obj, f)


def test_hist_from_yaml(tmp_path):
    cfg = tmp_path / "binning.yaml"
    write_yaml(
        cfg,
        {
            "axes": [
                {"kind": "fixed", "nbins": 2, "low": 0.0, "high": 2.0, "title": "x"},
                {"kind": "grow", "nbins": 2, "low": -1.0, "high": 1.0, "max_nbins": 10},
            ]
        },
    )

    hist = hist_from_yaml(cfg)
    assert hist.get_nbins() == (4, 2)
    assert hist.get_axis(0).get_title() == "x"
    assert hist.get_axis(1).max_nbins == 10
    assert hist.get_bin_index((1.5, 0.5)) == 4
    assert hist.get_bin_index((-1.0, 0.5)) == -3


def test_nested_key():
    cfg = {"Hist": {"Binning": [{"kind": "growable", "nbins": 3, "low": 0, "high": 3}]}}
    hist = hist_from_config(cfg, key="Hist.Binning")
    assert isinstance(hist.get_axis(0), AxisGrow)


def test_default_kind_is_fixed():
    assert isinstance(axis_from_dict({"nbins": 1, "low": 0, "high": 1}), AxisEquidistant)


@pytest.mark.parametrize(
    "spec, msg",
    [
        ({"kind": "log", "nbins": 1, "low": 0, "high": 1}, "unknown axis kind"),
        ({"kind": "fixed", "nbins": 1, "low": 0}, "missing key"),
        ({"kind": "fixed", "nbins": 1, "low": 0, "high": 1, "max_nbins": 5}, "max_nbins"),
        ({"kind": "fixed", "nbins": 0, "low": 0, "high": 1}, "at least 1 bin"),
        ({"kind": "grow", "nbins": "many", "low": 0, "high": 1}, "axes\\[0\\]"),
    ],
)
def test_bad_axis(spec, msg):
    with pytest.raises(ValueError, match=msg):
        hist_from_config({"axes": [spec]})


def test_empty_config(tmp_path):
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("")
    with pytest.raises(ValueError):
        hist_from_yaml(cfg)
