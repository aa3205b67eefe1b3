from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .types import FloatArray, IntArray, PeakMode

MODES: tuple[PeakMode, ...] = ("peak", "trough")


def _read_only(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


def as_index_1d(values: Any, name: str) -> IntArray:
    """Coerce ``values`` to a 1D array of integer sample indices."""
    arr = np.asarray(values)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D; got shape {arr.shape}.")
    if arr.size == 0:
        return np.empty(0, dtype=np.intp)
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(
            f"{name} must contain integer indices; got dtype {arr.dtype}."
        )
    return arr.astype(np.intp)


def resolve_indices(canonical: IntArray, peaks: Any) -> IntArray:
    """
    Map a set of peak positions back onto positions in ``canonical``.

    ``peaks`` is sorted first, so the returned indices are ascending. Every
    queried peak must appear exactly once in ``canonical``.
    """
    query = np.sort(as_index_1d(peaks, "peaks"))
    if query.size > 1 and np.any(np.diff(query) == 0):
        raise ValueError("peaks must not contain repeated indices.")

    idx = np.searchsorted(canonical, query)
    found = idx < canonical.shape[0]
    found[found] = canonical[idx[found]] == query[found]
    if not np.all(found):
        missing = query[~found].tolist()
        raise ValueError(
            f"Peaks {missing} do not exist in the original peak list."
        )
    return idx.astype(np.intp)


@dataclass(frozen=True, slots=True, eq=False)
class PeakStore:
    """
    Immutable signal + peak set with the per-peak lookups (height and
    plateau size) computed up front.

    For ``mode="trough"`` everything is measured on the negated signal
    (`oriented`), so a deeper trough has a larger height.
    """

    signal: FloatArray
    midpoints: IntArray
    left_edges: IntArray
    right_edges: IntArray
    mode: PeakMode = "peak"

    oriented: FloatArray = field(init=False, repr=False)
    heights: FloatArray = field(init=False, repr=False)
    plateau_size: IntArray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.mode not in MODES:
            raise ValueError(
                f"mode must be one of {MODES}; got {self.mode!r}."
            )

        x = np.array(self.signal, dtype=float)
        if x.ndim != 1:
            raise ValueError(f"signal must be 1D; got shape {x.shape}.")

        m = as_index_1d(self.midpoints, "midpoints")
        left = as_index_1d(self.left_edges, "left_edges")
        right = as_index_1d(self.right_edges, "right_edges")

        if not (m.shape == left.shape == right.shape):
            raise ValueError(
                "midpoints, left_edges and right_edges must have equal "
                f"lengths; got {m.size}, {left.size}, {right.size}."
            )
        if m.size > 1 and np.any(np.diff(m) <= 0):
            raise ValueError("midpoints must be strictly increasing.")

        # sharpness needs a sample on both sides of every peak
        n = x.shape[0]
        if m.size and (m[0] < 1 or m[-1] > n - 2):
            raise ValueError(
                f"midpoints must lie in [1, {n - 2}] for a signal of "
                f"length {n}; got range [{m[0]}, {m[-1]}]."
            )

        oriented = x if self.mode == "peak" else -x

        object.__setattr__(self, "signal", _read_only(x))
        object.__setattr__(self, "midpoints", _read_only(m))
        object.__setattr__(self, "left_edges", _read_only(left))
        object.__setattr__(self, "right_edges", _read_only(right))
        object.__setattr__(self, "oriented", _read_only(oriented))
        object.__setattr__(self, "heights", _read_only(oriented[m]))
        object.__setattr__(
            self, "plateau_size", _read_only(np.abs(right - left + 1))
        )

    @property
    def n_samples(self) -> int:
        return int(self.signal.shape[0])

    @property
    def n_peaks(self) -> int:
        return int(self.midpoints.shape[0])

    def resolve(self, peaks: Any) -> tuple[IntArray, IntArray]:
        """Return the sorted query peaks and their canonical indices."""
        idx = resolve_indices(self.midpoints, peaks)
        return self.midpoints[idx], idx
