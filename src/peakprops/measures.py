from __future__ import annotations

import numpy as np

from .types import FloatArray, IntArray


def peak_distance(peaks: IntArray) -> IntArray:
    """Sample distance between consecutive peaks (length ``M - 1``)."""
    peaks = np.asarray(peaks, dtype=np.intp)
    return np.diff(peaks)


def peak_sharpness(x: FloatArray, peaks: IntArray) -> FloatArray:
    """
    Vertical drop from each peak to its immediate neighbours.

    Returns a ``(2, M)`` array: row 0 is the drop to the preceding sample,
    row 1 the drop to the following sample. This is the quantity
    ``scipy.signal.find_peaks`` thresholds with its ``threshold`` argument.
    """
    x = np.asarray(x, dtype=float)
    peaks = np.asarray(peaks, dtype=np.intp)
    top = x[peaks]
    return np.vstack([top - x[peaks - 1], top - x[peaks + 1]])
