"""Angular placement of self-loops around solved node positions."""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .constants import DEGREES_TO_RADIANS
from .graph import LayoutGraph, NodeName
from .logging_utils import apply_debug_logging

logger = logging.getLogger(__name__)

Run = Tuple[int, int]


def directional_histogram(
    node_index: int,
    positions: Sequence[Sequence[float]],
    y_vertical: int = 1,
    bin_size: float = 10,
) -> List[int]:
    """Count the other nodes seen from ``node_index`` in each angular bin.

    There are ``ceil(360 / bin_size)`` bins; bin ``k`` is centred on
    ``k * width`` degrees (``width = 360 / bins``) and collects directions
    within ``width / 2`` of that centre, so a direction on a bin edge counts
    twice. ``y_vertical=-1`` flips the y axis for screen coordinates.
    Nodes coinciding with the centre node contribute nothing.
    """

    n_bins = int(math.ceil(360.0 / bin_size))
    width = 360.0 / n_bins * DEGREES_TO_RADIANS
    threshold = math.cos(width / 2)
    centres = np.arange(n_bins) * width
    units = np.column_stack([np.cos(centres), np.sin(centres)])

    pts = np.asarray(positions, dtype=float).reshape(-1, 2)
    delta = pts - pts[node_index]
    delta[:, 1] *= y_vertical
    norms = np.hypot(delta[:, 0], delta[:, 1])
    others = (np.arange(len(pts)) != node_index) & (norms > 0)
    directions = delta[others] / norms[others, None]
    hits = directions @ units.T >= threshold
    return [int(count) for count in hits.sum(axis=0)]


def _empty_runs(histogram: Sequence[int]) -> List[Run]:
    """Maximal runs of empty bins as ``(start, length)``, joined across the 0 degree seam."""

    n_bins = len(histogram)
    runs: List[Run] = []
    start: Optional[int] = None
    for idx, count in enumerate(histogram):
        if count == 0 and start is None:
            start = idx
        elif count != 0 and start is not None:
            runs.append((start, idx - start))
            start = None
    if start is not None:
        if runs and runs[0][0] == 0:
            first = runs.pop(0)
            runs.append((start, n_bins - start + first[1]))
        else:
            runs.append((start, n_bins - start))
    return sorted(runs, key=lambda run: -run[1])


def self_loop_directions(histogram: Sequence[int], n_loops: int = 1) -> Optional[List[float]]:
    """Pick directions (degrees in ``[0, 360)``) for ``n_loops`` self-loops.

    Loops go into the widest gaps between neighbours. Returns ``None`` when
    there are fewer empty bins than loops.
    """

    n_bins = len(histogram)
    if n_loops <= 0:
        return []
    if n_bins == 0:
        return None
    angle = 360.0 / n_bins
    runs = _empty_runs(histogram)
    total = sum(length for _, length in runs)
    if total < n_loops:
        logger.debug("Not enough free directions for %d self-loop(s)", n_loops)
        return None

    def direction(start: int, offset: int) -> float:
        return angle * ((start + offset) % n_bins)

    start0, len0 = runs[0]
    if n_loops == 1:
        return [direction(start0, len0 // 2)]
    if n_loops == 2:
        len1 = runs[1][1] if len(runs) > 1 else 0
        if len0 >= 3 * len1:
            return [direction(start0, len0 // 3), direction(start0, 2 * len0 // 3)]
        return [direction(start0, len0 // 2), direction(runs[1][0], len1 // 2)]

    # Hand each run enough loops that the remaining runs can still hold the
    # rest at the overall density.
    density = total / n_loops
    remaining = n_loops
    loops: List[float] = []
    for start, length in runs:
        if remaining <= 0:
            break
        k = 1
        while k < remaining and k <= length // density:
            if (total - length) / (remaining - k) >= density:
                break
            k += 1
        loops.extend(direction(start, (i * length) // (k + 1)) for i in range(1, k + 1))
        remaining -= k
    if remaining > 0:
        return None
    return loops


def self_loop_angles(
    graph: LayoutGraph,
    positions: Union[Sequence[Sequence[float]], Mapping[NodeName, Sequence[float]]],
    bin_size: float = 10,
    y_vertical: int = 1,
) -> Dict[NodeName, Optional[List[float]]]:
    """Loop directions for every node of ``graph`` that has self-loops."""

    if isinstance(positions, Mapping):
        pts = [positions[name] for name in graph.nodes]
    else:
        pts = list(positions)
    index = graph.index
    angles: Dict[NodeName, Optional[List[float]]] = {}
    for node, count in graph.self_loop_counts().items():
        histogram = directional_histogram(index[node], pts, y_vertical=y_vertical, bin_size=bin_size)
        angles[node] = self_loop_directions(histogram, count)
        if angles[node] is None:
            logger.warning("No room for %d self-loop(s) around node %s", count, node)
    return angles


apply_debug_logging(globals(), logger=logger)


__all__ = [
    "directional_histogram",
    "self_loop_angles",
    "self_loop_directions",
]
