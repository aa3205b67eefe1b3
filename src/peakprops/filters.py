from __future__ import annotations

import numpy as np
import numpy.typing as npt

from .types import FloatArray, IntArray

BoolArray = npt.NDArray[np.bool_]


def _check_bounds(lower: float | None, upper: float | None) -> None:
    if lower is None and upper is None:
        raise ValueError("lower and upper thresholds cannot both be None.")


def select_by_threshold(
    values: FloatArray,
    lower: float | None = None,
    upper: float | None = None,
) -> BoolArray:
    """Mask of ``lower <= values <= upper``; a None bound is left open."""
    _check_bounds(lower, upper)
    values = np.asarray(values)
    keep = np.ones(values.shape, dtype=bool)
    if lower is not None:
        keep &= values >= lower
    if upper is not None:
        keep &= values <= upper
    return keep


def select_by_sharpness(
    sharpness: FloatArray,
    lower: float | None = None,
    upper: float | None = None,
) -> BoolArray:
    """
    Mask for a ``(2, M)`` sharpness table.

    A peak passes `lower` only if both of its sides drop by at least that
    much, and passes `upper` only if neither side drops by more.
    """
    _check_bounds(lower, upper)
    sharpness = np.asarray(sharpness, dtype=float)
    keep = np.ones(sharpness.shape[1], dtype=bool)
    if lower is not None:
        keep &= sharpness.min(axis=0) >= lower
    if upper is not None:
        keep &= sharpness.max(axis=0) <= upper
    return keep


def select_by_peak_distance(
    peaks: IntArray,
    priority: FloatArray,
    distance: float,
) -> BoolArray:
    """
    Greedy suppression of peaks closer than ``distance`` samples.

    Peaks are visited from highest to lowest priority. Each peak that is
    still kept removes its neighbours on the left, then on the right, until
    a neighbour at least ``distance`` away is reached. Priorities are ranked
    with a stable ascending sort and visited from the end, so of two equal
    priorities the one further right is visited first.
    """
    peaks = np.asarray(peaks, dtype=np.intp)
    priority = np.asarray(priority, dtype=float)
    m = peaks.shape[0]
    if priority.shape != (m,):
        raise ValueError(
            f"priority must have shape ({m},); got {priority.shape}."
        )

    keep = np.ones(m, dtype=bool)
    order = np.argsort(priority, kind="stable")

    for j in order[::-1].tolist():
        if not keep[j]:
            continue

        k = j - 1
        while k >= 0 and peaks[j] - peaks[k] < distance:
            keep[k] = False
            k -= 1

        k = j + 1
        while k < m and peaks[k] - peaks[j] < distance:
            keep[k] = False
            k += 1

    return keep
