from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from pipetherm.config import DEFAULT_GRID_RESOLUTION, default_log_level
from pipetherm.errors import InputValidationError
from pipetherm.iso import extract_isosurfaces
from pipetherm.logging_config import setup_logging
from pipetherm.scenarios import example_scenario
from pipetherm.thermal import GridSampler, scene_bounds, solve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipetherm",
        description="Solve the built-in buried pipe example and extract its isotherm surfaces.",
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=DEFAULT_GRID_RESOLUTION,
        help="Lattice nodes per axis for the 3D field (default: %(default)s).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for grid sampling (default: sequential).",
    )
    parser.add_argument(
        "--isovalue",
        type=float,
        action="append",
        dest="isovalues",
        metavar="TEMP_C",
        help="Isosurface temperature in °C; repeat for several levels.",
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the example scenario end to end and print a summary."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.resolution < 2:
        parser.error("--resolution must be at least 2")
    level = logging.getLevelName(args.log_level.upper()) if args.log_level else default_log_level()
    setup_logging(level if isinstance(level, int) else logging.INFO, args.log_file)

    scenario = example_scenario()
    logger.info(f"Solving scenario {scenario.name!r} with {len(scenario.pipes)} pipes.")
    try:
        result = solve(scenario.pipes, scenario.soil_layers, scenario.soil_temperature_c)
    except InputValidationError as exc:
        for issue in exc.issues:
            print(f"error: {issue}", file=sys.stderr)
        return 2

    print(f"Scenario: {scenario.name} (soil {result.soil_temperature_c:.2f} °C)")
    print("Heat sources:")
    for source in result.sources:
        print(
            f"  {source.pipe.name:<16} R_pipe={source.r_pipe:.5f} R_ins={source.r_insulation:.4f} "
            f"R_bed={source.r_bedding:.4f} R_soil={source.r_soil:.4f} K·m/W  "
            f"Q={source.heat_flux_w_per_m:.2f} W/m"
        )
    print("Affected pipes:")
    for affected in result.affected:
        print(f"  {affected.pipe.name:<16} T={affected.final_temperature_c:.2f} °C")
        for interaction in affected.interactions:
            print(
                f"    from {interaction.source_name:<14} k={interaction.path_conductivity_w_per_m_k:.3f} "
                f"d={interaction.real_distance_m:.3f} d'={interaction.image_distance_m:.3f} "
                f"dT={interaction.temperature_rise_c:.3f}"
            )

    bounds = scene_bounds(scenario.pipes, scenario.soil_layers)
    sampler = GridSampler(
        result.field_evaluator(), resolution=args.resolution, max_workers=args.workers
    )
    field = sampler.sample(bounds)

    isovalues: List[float] = args.isovalues or list(scenario.isovalues_c)
    print("Isosurfaces:")
    for surface in extract_isosurfaces(field, isovalues):
        if surface.ok:
            print(f"  {surface.isovalue:.2f} °C: {len(surface.triangles)} triangles")
        else:
            print(f"  {surface.isovalue} °C: failed ({'; '.join(surface.issues)})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
