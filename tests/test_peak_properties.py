# tests/test_peak_properties.py
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
import scipy.signal

from peakprops import PeakProperties


@pytest.fixture
def simple():
    x = np.array([0.0, 1.0, 0.0, 2.0, 0.0, 1.0, 0.0])
    peaks = np.array([1, 3, 5])
    return PeakProperties(x, peaks, peaks, peaks)


def _random_properties(seed=0, n=500, mode="peak"):
    rng = np.random.default_rng(seed)
    x = np.sin(np.linspace(0, 20 * np.pi, n)) + 0.5 * rng.standard_normal(n)
    return x, PeakProperties.from_signal(x, mode=mode)


def test_simple_scenario(simple):
    assert simple.peaks.tolist() == [1, 3, 5]
    assert simple.heights.tolist() == [1.0, 2.0, 1.0]
    assert simple.plateau_size.tolist() == [1, 1, 1]
    assert simple.distance.tolist() == [2, 2]
    assert np.allclose(simple.prominence, [1.0, 2.0, 1.0])
    assert np.allclose(simple.sharpness, [[1.0, 2.0, 1.0], [1.0, 2.0, 1.0]])
    assert np.allclose(simple.width, [1.0, 1.0, 1.0])
    assert len(simple) == 3


def test_array_lengths_are_aligned():
    _, pp = _random_properties(seed=1)
    m = len(pp)
    assert m > 10
    assert pp.heights.shape == pp.plateau_size.shape == (m,)
    assert pp.distance.shape == (m - 1,)
    assert pp.sharpness.shape == (2, m)
    assert pp.prominence_data.as_array().shape == (3, m)
    assert pp.width_data.as_array().shape == (4, m)


def test_trough_mode_measures_inverted_signal(simple):
    x = -simple.signal
    tp = PeakProperties(x, simple.peaks, simple.peaks, simple.peaks, mode="trough")

    assert tp.heights.tolist() == [1.0, 2.0, 1.0]
    assert np.allclose(tp.prominence, simple.prominence)
    assert np.allclose(tp.width, simple.width)
    assert tp.filter_by_height(lower=1.5).tolist() == [3]


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"mode": "valley"}, "mode"),
        ({"rel_height": 1.5}, "rel_height"),
        ({"rel_height": -0.5}, "rel_height"),
    ],
)
def test_construction_errors(simple, kwargs, message):
    with pytest.raises(ValueError, match=message):
        PeakProperties(simple.signal, simple.peaks, simple.peaks, simple.peaks, **kwargs)


def test_empty_peak_set():
    pp = PeakProperties(np.zeros(5), [], [], [])
    assert len(pp) == 0
    assert pp.distance.shape == (0,)
    assert pp.prominence.shape == (0,)
    assert pp.filter_by_height(lower=0.0).tolist() == []
    assert pp.filter_by_peak_distance(3).tolist() == []


def test_cached_results_are_read_only(simple):
    for arr in (simple.heights, simple.distance, simple.sharpness, simple.prominence, simple.width):
        assert not arr.flags.writeable


def test_subset_queries_are_sorted_and_resolved(simple):
    assert simple.find_peak_heights([5, 1]).tolist() == [1.0, 1.0]
    assert simple.find_plateau_size([3]).tolist() == [1]
    assert simple.find_peak_distance([5, 1]).tolist() == [4]
    assert simple.find_peak_sharpness([3]).tolist() == [[2.0], [2.0]]
    assert simple.find_peak_prominence([5, 3]).prominence.tolist() == [2.0, 1.0]
    assert simple.find_peak_width([3]).left_ip.tolist() == [2.5]


def test_full_set_query_returns_cached_result(simple):
    assert simple.find_peak_distance([5, 3, 1]) is simple.distance
    assert simple.find_peak_prominence() is simple.prominence_data
    assert simple.find_peak_width(rel_height=0.5) is simple.width_data


@pytest.mark.parametrize("query", [[2], [1, 1], [1, 7]])
def test_absent_peaks_are_rejected(simple, query):
    with pytest.raises(ValueError):
        simple.find_peak_heights(query)
    with pytest.raises(ValueError):
        simple.filter_by_height(lower=0.0, peaks=query)


def test_width_at_other_relative_height_is_not_cached(simple):
    wd = simple.find_peak_width(rel_height=1.0)

    assert wd.rel_height == 1.0
    assert np.allclose(wd.width, [2.0, 2.0, 2.0])
    assert simple.width_data.rel_height == 0.5
    assert np.allclose(simple.width, [1.0, 1.0, 1.0])

    assert np.allclose(simple.find_peak_width(rel_height=0.0).width, 0.0)
    with pytest.raises(ValueError, match="rel_height"):
        simple.find_peak_width(rel_height=2.0)


def test_width_subset_at_other_relative_height(simple):
    wd = simple.find_peak_width([3], rel_height=1.0)
    assert wd.left_ip.tolist() == [2.0]
    assert wd.right_ip.tolist() == [4.0]


def test_filter_by_height(simple):
    assert simple.filter_by_height(lower=1.5).tolist() == [3]
    assert simple.filter_by_height(upper=1.0).tolist() == [1, 5]
    assert simple.filter_by_height(lower=1.5, peaks=[5, 1]).tolist() == []
    assert simple.filter_by_height(lower=-np.inf, upper=np.inf).tolist() == [1, 3, 5]


@pytest.mark.parametrize(
    "method",
    [
        "filter_by_height",
        "filter_by_plateau_size",
        "filter_by_prominence",
        "filter_by_width",
        "filter_by_sharpness",
    ],
)
def test_filters_need_a_threshold(simple, method):
    with pytest.raises(ValueError, match="cannot both be None"):
        getattr(simple, method)()
    with pytest.raises(ValueError, match="cannot both be None"):
        getattr(simple, method)(None, None, peaks=[1, 3])


def test_filter_by_plateau_size():
    x = np.array([0.0, 2.0, 2.0, 2.0, 0.0, 1.0, 0.0])
    pp = PeakProperties.from_signal(x)

    assert pp.peaks.tolist() == [2, 5]
    assert pp.plateau_size.tolist() == [3, 1]
    assert pp.filter_by_plateau_size(lower=2).tolist() == [2]
    assert pp.filter_by_plateau_size(upper=1).tolist() == [5]


def test_filter_by_prominence(simple):
    assert simple.filter_by_prominence(lower=1.5).tolist() == [3]
    assert simple.filter_by_prominence(upper=1.0, peaks=[3, 5]).tolist() == [5]


def test_filter_by_width():
    x = np.array([0.0, 1.0, 0.0, 0.0, 1.0, 2.0, 1.0, 0.0, 0.0])
    pp = PeakProperties(x, [1, 5], [1, 5], [1, 5])

    assert np.allclose(pp.width, [1.0, 2.0])
    assert pp.filter_by_width(lower=1.5).tolist() == [5]
    assert pp.filter_by_width(upper=1.5).tolist() == [1]


def test_filter_by_sharpness():
    x = np.array([0.0, 3.0, 2.0, 0.0, 4.0, 0.0, 1.0, 0.5, 0.0])
    pp = PeakProperties(x, [1, 4, 6], [1, 4, 6], [1, 4, 6])

    assert pp.filter_by_sharpness(lower=1.0).tolist() == [1, 4]
    assert pp.filter_by_sharpness(upper=3.5).tolist() == [1, 6]
    assert pp.filter_by_sharpness(lower=1.0, upper=3.5).tolist() == [1]
    assert pp.filter_by_sharpness(lower=1.0, peaks=[6, 4]).tolist() == [4]


def test_filter_by_peak_distance(simple):
    assert simple.filter_by_peak_distance(3).tolist() == [3]
    assert simple.filter_by_peak_distance(2).tolist() == [1, 3, 5]
    assert simple.filter_by_peak_distance(5, peaks=[1, 5]).tolist() == [5]


def test_peak_distance_keeps_tallest_and_never_grows():
    x, pp = _random_properties(seed=5)
    tallest = int(pp.peaks[np.argmax(pp.heights)])
    for distance in (1, 5, 20, 100):
        kept = pp.filter_by_peak_distance(distance)
        assert kept.size <= len(pp)
        assert tallest in kept.tolist()
        assert np.all(np.diff(kept) >= distance)


@pytest.mark.parametrize("mode", ["peak", "trough"])
def test_filters_match_find_peaks(mode):
    x, pp = _random_properties(seed=2, mode=mode)
    y = x if mode == "peak" else -x

    def reference(**kwargs):
        return scipy.signal.find_peaks(y, **kwargs)[0].tolist()

    assert pp.filter_by_peak_distance(10).tolist() == reference(distance=10)
    assert pp.filter_by_height(lower=0.8).tolist() == reference(height=0.8)
    assert pp.filter_by_sharpness(lower=0.2).tolist() == reference(threshold=0.2)
    assert pp.filter_by_sharpness(upper=0.5).tolist() == reference(threshold=(None, 0.5))
    assert pp.filter_by_prominence(lower=1.0).tolist() == reference(prominence=1.0)
    assert pp.filter_by_width(lower=3.0).tolist() == reference(width=3.0)


def test_from_signal_passes_detector_arguments():
    x, pp = _random_properties(seed=4)
    strict = PeakProperties.from_signal(x, height=1.0)
    assert strict.peaks.tolist() == pp.filter_by_height(lower=1.0).tolist()

    with pytest.raises(ValueError, match="mode"):
        PeakProperties.from_signal(x, mode="valley")


def test_to_dataframe(simple):
    df = simple.to_dataframe()

    assert len(df) == 3
    assert df["index"].tolist() == [1, 3, 5]
    assert df["prominence"].tolist() == [1.0, 2.0, 1.0]
    assert df["left_ip"].tolist() == [0.5, 2.5, 4.5]


def test_plot_and_repr(simple):
    fig, ax = simple.plot(show_bases=True, show_widths=True, label="signal")
    assert ax.figure is fig
    assert "PeakProperties(" in repr(simple)
    assert "trough" not in repr(simple)
