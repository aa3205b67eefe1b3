from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .prominence import ProminenceData
from .types import FloatArray, IntArray

DEFAULT_REL_HEIGHT = 0.5


def check_rel_height(rel_height: float) -> float:
    rel_height = float(rel_height)
    if not 0.0 <= rel_height <= 1.0:
        raise ValueError(
            f"rel_height must be between 0.0 and 1.0; got {rel_height}."
        )
    return rel_height


@dataclass(frozen=True, slots=True)
class WidthData:
    """
    Peak widths measured at ``rel_height`` of each peak's prominence.

    `left_ip` and `right_ip` are fractional sample positions where the
    horizontal line at `width_height` meets the signal.
    """

    width: FloatArray
    width_height: FloatArray
    left_ip: FloatArray
    right_ip: FloatArray
    rel_height: float = DEFAULT_REL_HEIGHT

    def __post_init__(self) -> None:
        for name in ("width", "width_height", "left_ip", "right_ip"):
            a = np.array(getattr(self, name), dtype=float)
            a.setflags(write=False)
            object.__setattr__(self, name, a)

    def __len__(self) -> int:
        return int(self.width.shape[0])

    def take(self, indices: IntArray) -> WidthData:
        return WidthData(
            width=self.width[indices],
            width_height=self.width_height[indices],
            left_ip=self.left_ip[indices],
            right_ip=self.right_ip[indices],
            rel_height=self.rel_height,
        )

    def as_array(self) -> FloatArray:
        """Rows: width, width height, left intersection, right intersection."""
        return np.vstack(
            [self.width, self.width_height, self.left_ip, self.right_ip]
        )


def peak_widths(
    x: FloatArray,
    peaks: IntArray,
    prominence_data: ProminenceData,
    rel_height: float = DEFAULT_REL_HEIGHT,
) -> WidthData:
    """
    Width of each peak at a fraction of its prominence.

    The line at ``x[peak] - prominence * rel_height`` is followed outwards
    from the peak until it meets the signal or the prominence base on that
    side. Crossings between samples are linearly interpolated.

    Parameters
    ----------
    x:
        1D signal, oriented so that peaks point upwards.
    peaks:
        Peak indices into ``x``, aligned with ``prominence_data``.
    prominence_data:
        Output of `peak_prominences` for the same peaks.
    rel_height:
        0.0 measures at the peak itself (zero width), 1.0 at the lower base.
    """
    rel_height = check_rel_height(rel_height)
    x = np.asarray(x, dtype=float)
    peaks = np.asarray(peaks, dtype=np.intp)
    m = peaks.shape[0]
    if len(prominence_data) != m:
        raise ValueError(
            "prominence_data must have one entry per peak; "
            f"got {len(prominence_data)} for {m} peaks."
        )

    width_height = x[peaks] - prominence_data.prominence * rel_height
    left_ip = np.empty(m, dtype=float)
    right_ip = np.empty(m, dtype=float)

    for k, p in enumerate(peaks.tolist()):
        h = width_height[k]
        lb = int(prominence_data.left_base[k])
        rb = int(prominence_data.right_base[k])

        # walking stops on the first sample at or below h, so x[j + 1] > h
        # whenever x[j] < h and the denominator cannot vanish
        j = p
        while lb < j and h < x[j]:
            j -= 1
        left_ip[k] = j
        if x[j] < h:
            left_ip[k] += (h - x[j]) / (x[j + 1] - x[j])

        j = p
        while j < rb and h < x[j]:
            j += 1
        right_ip[k] = j
        if x[j] < h:
            right_ip[k] -= (h - x[j]) / (x[j - 1] - x[j])

    return WidthData(
        width=right_ip - left_ip,
        width_height=width_height,
        left_ip=left_ip,
        right_ip=right_ip,
        rel_height=rel_height,
    )
