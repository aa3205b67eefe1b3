from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .types import FloatArray, IntArray


@dataclass(frozen=True, slots=True)
class ProminenceData:
    """Prominence of each peak with the valley indices that bound it."""

    prominence: FloatArray
    left_base: IntArray
    right_base: IntArray

    def __post_init__(self) -> None:
        for name in ("prominence", "left_base", "right_base"):
            a = np.array(getattr(self, name))
            a.setflags(write=False)
            object.__setattr__(self, name, a)

    def __len__(self) -> int:
        return int(self.prominence.shape[0])

    def take(self, indices: IntArray) -> ProminenceData:
        return ProminenceData(
            prominence=self.prominence[indices],
            left_base=self.left_base[indices],
            right_base=self.right_base[indices],
        )

    def as_array(self) -> FloatArray:
        """Rows: prominence, left base, right base."""
        return np.vstack(
            [self.prominence, self.left_base, self.right_base]
        ).astype(float)


def _left_valley(x: FloatArray, start: int, peak: int) -> tuple[int, float]:
    """
    Lowest sample of ``x[start:peak]``.

    Ties resolve to the sample nearest the peak. If nothing lies strictly
    below the peak, the peak itself is returned.
    """
    seg = x[start:peak]
    if seg.size == 0 or not seg.min() < x[peak]:
        return peak, float(x[peak])
    i = peak - 1 - int(np.argmin(seg[::-1]))
    return i, float(x[i])


def _right_valley(x: FloatArray, peak: int, stop: int) -> tuple[int, float]:
    """Mirror of `_left_valley` over ``x[peak + 1 : stop + 1]``."""
    seg = x[peak + 1 : stop + 1]
    if seg.size == 0 or not seg.min() < x[peak]:
        return peak, float(x[peak])
    i = peak + 1 + int(np.argmin(seg))
    return i, float(x[i])


def peak_prominences(x: FloatArray, peaks: IntArray) -> ProminenceData:
    """
    Topographic prominence of each peak in ``peaks``.

    Parameters
    ----------
    x:
        1D signal, already oriented so that peaks point upwards.
    peaks:
        Strictly increasing peak indices into ``x``.

    Notes
    -----
    The valley on either side of a peak is searched only up to the
    neighbouring peak (or the signal edge). A peak's base on one side is then
    the lowest of those valleys met while walking outwards over lower peaks;
    the walk ends at the first peak at least as high as the reference. Only
    members of ``peaks`` can end a walk, so the result depends on which peaks
    are passed in.
    """
    x = np.asarray(x, dtype=float)
    peaks = np.asarray(peaks, dtype=np.intp)
    m = peaks.shape[0]
    n = x.shape[0]

    thresholds = x[peaks]
    min_left = np.empty(m, dtype=float)
    min_right = np.empty(m, dtype=float)
    min_left_i = np.empty(m, dtype=np.intp)
    min_right_i = np.empty(m, dtype=np.intp)

    # valleys between neighbouring peaks; every sample is visited once
    start = 0
    for k, p in enumerate(peaks.tolist()):
        stop = int(peaks[k + 1]) if k + 1 < m else n - 1
        min_left_i[k], min_left[k] = _left_valley(x, start, p)
        min_right_i[k], min_right[k] = _right_valley(x, p, stop)
        start = p

    prominence = np.empty(m, dtype=float)
    left_base = np.empty(m, dtype=np.intp)
    right_base = np.empty(m, dtype=np.intp)

    for ref in range(m):
        th = thresholds[ref]

        left = ref
        for k in range(ref - 1, -1, -1):
            if thresholds[k] >= th:
                break
            if min_left[k] < min_left[left]:
                left = k

        right = ref
        for k in range(ref + 1, m):
            if thresholds[k] >= th:
                break
            if min_right[k] < min_right[right]:
                right = k

        left_base[ref] = min_left_i[left]
        right_base[ref] = min_right_i[right]
        prominence[ref] = min(th - min_left[left], th - min_right[right])

    return ProminenceData(
        prominence=prominence, left_base=left_base, right_base=right_base
    )
