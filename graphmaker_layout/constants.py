"""Numeric constants shared by the parser, solver and placement helpers."""

from __future__ import annotations

import math
import sys

ZERO_TOLERANCE = 2.0 ** -20
MACHINE_EPSILON = sys.float_info.epsilon

DEGREES_TO_RADIANS = math.pi / 180.0

AXES = ("x", "y")

ORIENTATIONS = ("auto", "left", "right", "top", "bottom")


def axis_index(axis: str) -> int:
    """Return the column offset (0 or 1) of ``axis`` within a node's pair."""

    try:
        return AXES.index(axis)
    except ValueError:
        raise ValueError(f"unknown axis {axis!r}; expected 'x' or 'y'") from None


__all__ = [
    "AXES",
    "DEGREES_TO_RADIANS",
    "MACHINE_EPSILON",
    "ORIENTATIONS",
    "ZERO_TOLERANCE",
    "axis_index",
]
