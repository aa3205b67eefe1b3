from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np
import scipy.signal

from .filters import (
    select_by_peak_distance,
    select_by_sharpness,
    select_by_threshold,
)
from .measures import peak_distance, peak_sharpness
from .misc import preview, sig, uniform_repr
from .prominence import ProminenceData, peak_prominences
from .store import MODES, PeakStore
from .types import FloatArray, IntArray, PeakMode
from .width import DEFAULT_REL_HEIGHT, WidthData, check_rel_height, peak_widths

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, repr=False, eq=False)
class PeakProperties:
    """
    Properties of a fixed set of peaks (or troughs) in a 1D signal.

    The peak set comes from an upstream detector as three aligned index
    arrays: plateau midpoints and the left/right plateau edges. Heights,
    plateau sizes, distances, sharpness, prominences and widths at
    `rel_height` are all computed on construction; the instance is
    immutable afterwards.

    Notes
    -----
    - With ``mode="trough"`` the signal is negated before measuring, so
      heights, sharpness, prominences and width heights are reported in the
      negated space where every trough points upwards.
    - Methods taking ``peaks`` accept any subset of `peaks` in any order.
      The subset is sorted and looked up in the original set; a value not in
      the original set raises ValueError.
    - All returned per-peak arrays are read-only views of cached results
      when no subset is requested.
    """

    signal: FloatArray
    midpoints: IntArray
    left_edges: IntArray
    right_edges: IntArray
    mode: PeakMode = "peak"
    rel_height: float = DEFAULT_REL_HEIGHT

    store: PeakStore = field(init=False)
    distance: IntArray = field(init=False)
    sharpness: FloatArray = field(init=False)
    prominence_data: ProminenceData = field(init=False)
    width_data: WidthData = field(init=False)

    def __post_init__(self) -> None:
        store = PeakStore(
            signal=self.signal,
            midpoints=self.midpoints,
            left_edges=self.left_edges,
            right_edges=self.right_edges,
            mode=self.mode,
        )
        rel_height = check_rel_height(self.rel_height)

        x = store.oriented
        peaks = store.midpoints

        distance = peak_distance(peaks)
        distance.setflags(write=False)
        sharpness = peak_sharpness(x, peaks)
        sharpness.setflags(write=False)

        prominence_data = peak_prominences(x, peaks)
        width_data = peak_widths(x, peaks, prominence_data, rel_height)

        object.__setattr__(self, "store", store)
        object.__setattr__(self, "signal", store.signal)
        object.__setattr__(self, "midpoints", store.midpoints)
        object.__setattr__(self, "left_edges", store.left_edges)
        object.__setattr__(self, "right_edges", store.right_edges)
        object.__setattr__(self, "rel_height", rel_height)
        object.__setattr__(self, "distance", distance)
        object.__setattr__(self, "sharpness", sharpness)
        object.__setattr__(self, "prominence_data", prominence_data)
        object.__setattr__(self, "width_data", width_data)

        logger.debug(
            "Computed properties for %d %ss over %d samples (rel_height=%s).",
            store.n_peaks,
            self.mode,
            store.n_samples,
            rel_height,
        )

    @classmethod
    def from_signal(
        cls,
        signal: FloatArray,
        *,
        mode: PeakMode = "peak",
        rel_height: float = DEFAULT_REL_HEIGHT,
        **find_peaks_kwargs: Any,
    ) -> PeakProperties:
        """
        Detect peaks with `scipy.signal.find_peaks` and measure them.

        Troughs are detected as peaks of the negated signal. Extra keyword
        arguments are passed to `find_peaks` unchanged.
        """
        if mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}; got {mode!r}.")

        y = np.asarray(signal, dtype=float)
        y_work = y if mode == "peak" else -y

        # plateau_size=1 keeps every peak but makes find_peaks report edges
        kwargs = dict(find_peaks_kwargs)
        kwargs.setdefault("plateau_size", 1)
        idx, props = scipy.signal.find_peaks(y_work, **kwargs)

        return cls(
            y,
            idx,
            props["left_edges"],
            props["right_edges"],
            mode=mode,
            rel_height=rel_height,
        )

    def __len__(self) -> int:
        return self.store.n_peaks

    def __repr__(self) -> str:
        return uniform_repr(
            "PeakProperties",
            mode=self.mode,
            n_samples=self.n_samples,
            peaks=preview(self.peaks),
            prominence=preview(self.prominence),
            rel_height=sig(self.rel_height),
        )

    @property
    def n_samples(self) -> int:
        return self.store.n_samples

    @property
    def peaks(self) -> IntArray:
        return self.store.midpoints

    @property
    def heights(self) -> FloatArray:
        return self.store.heights

    @property
    def plateau_size(self) -> IntArray:
        return self.store.plateau_size

    @property
    def prominence(self) -> FloatArray:
        return self.prominence_data.prominence

    @property
    def width(self) -> FloatArray:
        return self.width_data.width

    def _lookup(self, peaks: Any) -> tuple[IntArray, IntArray | None]:
        """Resolve ``peaks``; the index array is None for the full set."""
        if peaks is None:
            return self.peaks, None
        query, idx = self.store.resolve(peaks)
        if idx.shape[0] == self.store.n_peaks:
            return self.peaks, None
        return query, idx

    def find_peak_heights(self, peaks: Any = None) -> FloatArray:
        _, idx = self._lookup(peaks)
        return self.heights if idx is None else self.heights[idx]

    def find_plateau_size(self, peaks: Any = None) -> IntArray:
        _, idx = self._lookup(peaks)
        return self.plateau_size if idx is None else self.plateau_size[idx]

    def find_peak_distance(self, peaks: Any = None) -> IntArray:
        """Distances between consecutive peaks of the (sorted) subset."""
        query, idx = self._lookup(peaks)
        return self.distance if idx is None else peak_distance(query)

    def find_peak_sharpness(self, peaks: Any = None) -> FloatArray:
        """``(2, M)`` drops to the preceding and following samples."""
        _, idx = self._lookup(peaks)
        return self.sharpness if idx is None else self.sharpness[:, idx]

    def find_peak_prominence(self, peaks: Any = None) -> ProminenceData:
        _, idx = self._lookup(peaks)
        return self.prominence_data if idx is None else self.prominence_data.take(idx)

    def find_peak_width(
        self,
        peaks: Any = None,
        rel_height: float | None = None,
    ) -> WidthData:
        """
        Widths for a subset of peaks, optionally at another relative height.

        A relative height other than the instance's is computed on demand
        from the cached prominences and is not stored.
        """
        query, idx = self._lookup(peaks)
        if rel_height is None or float(rel_height) == self.rel_height:
            return self.width_data if idx is None else self.width_data.take(idx)

        prominence_data = (
            self.prominence_data if idx is None else self.prominence_data.take(idx)
        )
        return peak_widths(self.store.oriented, query, prominence_data, rel_height)

    def _filter(
        self,
        name: str,
        values: np.ndarray,
        lower: float | None,
        upper: float | None,
        peaks: Any,
    ) -> IntArray:
        query, idx = self._lookup(peaks)
        subset = values if idx is None else values[..., idx]
        if name == "sharpness":
            keep = select_by_sharpness(subset, lower, upper)
        else:
            keep = select_by_threshold(subset, lower, upper)

        out = query[keep]
        logger.debug(
            "filter_by_%s(lower=%s, upper=%s) kept %d of %d peaks.",
            name,
            lower,
            upper,
            out.shape[0],
            query.shape[0],
        )
        return out

    def filter_by_height(
        self,
        lower: float | None = None,
        upper: float | None = None,
        peaks: Any = None,
    ) -> IntArray:
        """Keep peaks with ``lower <= height <= upper``; None leaves a side open."""
        return self._filter("height", self.heights, lower, upper, peaks)

    def filter_by_plateau_size(
        self,
        lower: float | None = None,
        upper: float | None = None,
        peaks: Any = None,
    ) -> IntArray:
        return self._filter("plateau_size", self.plateau_size, lower, upper, peaks)

    def filter_by_prominence(
        self,
        lower: float | None = None,
        upper: float | None = None,
        peaks: Any = None,
    ) -> IntArray:
        return self._filter("prominence", self.prominence, lower, upper, peaks)

    def filter_by_width(
        self,
        lower: float | None = None,
        upper: float | None = None,
        peaks: Any = None,
    ) -> IntArray:
        """Filter on the width measured at the instance's `rel_height`."""
        return self._filter("width", self.width, lower, upper, peaks)

    def filter_by_sharpness(
        self,
        lower: float | None = None,
        upper: float | None = None,
        peaks: Any = None,
    ) -> IntArray:
        """
        Keep peaks whose shallower side drops by at least `lower` and whose
        steeper side drops by at most `upper`.
        """
        return self._filter("sharpness", self.sharpness, lower, upper, peaks)

    def filter_by_peak_distance(
        self,
        distance: float,
        peaks: Any = None,
    ) -> IntArray:
        """
        Drop peaks within ``distance`` samples of a higher kept peak.

        Equivalent to the ``distance`` argument of `scipy.signal.find_peaks`.
        """
        query, idx = self._lookup(peaks)
        heights = self.heights if idx is None else self.heights[idx]
        keep = select_by_peak_distance(query, heights, distance)

        out = query[keep]
        logger.debug(
            "filter_by_peak_distance(distance=%s) kept %d of %d peaks.",
            distance,
            out.shape[0],
            query.shape[0],
        )
        return out

    def to_dataframe(self) -> pd.DataFrame:
        """One row per peak with every cached property."""
        import pandas as pd

        return pd.DataFrame(
            {
                "index": self.peaks,
                "value": self.signal[self.peaks],
                "left_edge": self.left_edges,
                "right_edge": self.right_edges,
                "height": self.heights,
                "plateau_size": self.plateau_size,
                "sharpness_left": self.sharpness[0],
                "sharpness_right": self.sharpness[1],
                "prominence": self.prominence,
                "left_base": self.prominence_data.left_base,
                "right_base": self.prominence_data.right_base,
                "width": self.width,
                "width_height": self.width_data.width_height,
                "left_ip": self.width_data.left_ip,
                "right_ip": self.width_data.right_ip,
            }
        )

    def plot(
        self,
        *,
        ax=None,
        show_bases: bool = False,
        show_widths: bool = False,
        label: str | None = None,
    ):
        """
        Quick visualisation: signal + markers at the peaks.

        Width lines are drawn at the width height mapped back to the signal's
        own orientation.
        """
        import matplotlib.pyplot as plt

        if ax is None:
            fig, ax = plt.subplots(dpi=150)
        else:
            fig = ax.figure

        x = np.arange(self.n_samples)
        y = self.signal
        ax.plot(x, y, label=label)

        if len(self):
            ax.scatter(self.peaks, y[self.peaks], label=f"{self.mode}s")

        if show_bases and len(self):
            bases = np.concatenate(
                [self.prominence_data.left_base, self.prominence_data.right_base]
            )
            ax.scatter(bases, y[bases], marker="x", label="bases")

        if show_widths and len(self):
            sign = 1.0 if self.mode == "peak" else -1.0
            ax.hlines(
                sign * self.width_data.width_height,
                self.width_data.left_ip,
                self.width_data.right_ip,
                linestyles="dashed",
                alpha=0.6,
            )

        ax.legend(frameon=False, fontsize=8)
        return fig, ax
