import argparse
import json
import logging
from typing import Any, Dict, Optional, Sequence

from graphmaker_layout import (
    LayoutError,
    LayoutGraph,
    get_layout_options,
    node_positions,
    positions_by_name,
    self_loop_angles,
)
from graphmaker_layout.constants import ORIENTATIONS

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _option_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.seed is not None:
        overrides["random_seed"] = args.seed
    if args.ambient is not None:
        overrides["ambient"] = args.ambient
    if args.orientation is not None:
        overrides["orientation"] = args.orientation
    if args.max_iter is not None:
        overrides["max_iter"] = args.max_iter
    return overrides


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lay out a graph under positional constraints")
    parser.add_argument("path", help="Path to a JSON graph description")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the initial positions",
    )
    parser.add_argument(
        "--ambient",
        type=float,
        default=None,
        help=f"Strength of the centripetal field (default: {get_layout_options().ambient})",
    )
    parser.add_argument(
        "--orientation",
        choices=ORIENTATIONS,
        default=None,
        help="Direction in which hierarchical graphs grow",
    )
    parser.add_argument(
        "--max-iter",
        type=int,
        default=None,
        help="Iteration budget for the solver",
    )
    parser.add_argument(
        "--output",
        help="Write the layout response as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path) as fin:
        data = json.load(fin)

    logger.info("Loading graph from %s", args.path)
    try:
        graph = LayoutGraph.from_dict(data)
        result = node_positions(graph, _option_overrides(args))
    except (LayoutError, ValueError) as exc:
        logger.error("Layout failed: %s", exc)
        raise SystemExit(1)

    coords = positions_by_name(graph.nodes, result)
    angles = self_loop_angles(graph, coords)

    print(f"Converged: {result.converged} ({result.termination.value})")
    print(f"Max force: {result.max_force:.3e}")
    print(f"Iterations: {result.iterations}")
    if result.warnings:
        print("Warnings:")
        for warning in result.warnings:
            print(f"  - {warning}")
    print("Coordinates:")
    for name, (x, y) in coords.items():
        print(f"  {name}: ({x:.6f}, {y:.6f})")
    if angles:
        print("Self-loops:")
        for name, directions in angles.items():
            rendered = "no room" if directions is None else ", ".join(f"{a:.0f}" for a in directions)
            print(f"  {name}: {rendered}")

    if args.output:
        response = result.to_dict()
        response["nodes"] = list(graph.nodes)
        response["selfLoops"] = angles
        with open(args.output, "w") as fout:
            json.dump(response, fout, indent=2)
        logger.info("Wrote layout to %s", args.output)


if __name__ == "__main__":
    main()
