from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import Any

import numpy as np


def uniform_repr(
    thing_name: str,
    *anonymous_things: Any,
    max_width: int = 88,
    stringify: bool = True,
    indent_width: int = 4,
    **named_things: Any,
) -> str:
    def _to_str(thing: Any) -> str:
        if isinstance(thing, str) and stringify:
            return f'"{thing}"'
        return str(thing)

    info = list(map(_to_str, anonymous_things))
    info += [f"{name}={_to_str(thing)}" for name, thing in named_things.items()]

    single_liner = f"{thing_name}({', '.join(info)})"
    if len(single_liner) < max_width and "\n" not in single_liner:
        return single_liner

    _indent = " " * indent_width
    body = ",\n".join(
        "\n".join(f"{_indent}{line}" for line in item.split("\n"))
        for item in info
    )
    return f"{thing_name}(\n{body}\n)"


@dataclass(frozen=True, slots=True)
class ReprText:
    """Small wrapper so uniform_repr won't auto-quote preformatted strings."""

    text: str

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return self.text


def sig(x: float, n: int = 3) -> ReprText:
    """Significant-figures formatting with sane handling of NaN/inf."""
    xf = float(x)
    if not isfinite(xf):
        return ReprText(str(xf))
    return ReprText(format(xf, f".{n}g"))


def preview(values: Any, max_items: int = 6, n: int = 3) -> ReprText:
    """
    Short bracketed preview of a 1D array, e.g. ``[1, 2.5, ...+10]``.

    Integer arrays are printed as-is, floats through `sig`.
    """
    arr = np.asarray(values).ravel()
    if arr.size <= max_items:
        shown, rest = arr, 0
    else:
        shown, rest = arr[: max_items - 1], arr.size - (max_items - 1)

    if np.issubdtype(arr.dtype, np.integer):
        parts = [str(int(v)) for v in shown]
    else:
        parts = [str(sig(v, n)) for v in shown]
    if rest:
        parts.append(f"...+{rest}")
    return ReprText(f"[{', '.join(parts)}]")
