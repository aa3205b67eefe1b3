from __future__ import annotations

from .filters import select_by_peak_distance, select_by_sharpness, select_by_threshold
from .measures import peak_distance, peak_sharpness
from .peaks import PeakProperties
from .prominence import ProminenceData, peak_prominences
from .store import PeakStore, resolve_indices
from .width import DEFAULT_REL_HEIGHT, WidthData, peak_widths

__all__ = [
    "DEFAULT_REL_HEIGHT",
    "PeakProperties",
    "PeakStore",
    "ProminenceData",
    "WidthData",
    "peak_distance",
    "peak_prominences",
    "peak_sharpness",
    "peak_widths",
    "resolve_indices",
    "select_by_peak_distance",
    "select_by_sharpness",
    "select_by_threshold",
]
