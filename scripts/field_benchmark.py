#!/usr/bin/env python3

"""Standalone field benchmark for the buried pipe engine.

Solves the built-in example installation, samples the 3D temperature lattice at
a few resolutions (sequential and threaded), extracts the example isosurfaces
and prints timings so performance can be tracked between changes. A
cross-section preview image is written when matplotlib is available.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
from typing import List, Sequence

import numpy as np

from pipetherm.iso import extract_isosurfaces
from pipetherm.scenarios import example_scenario
from pipetherm.thermal import (
    GridSampler,
    heat_flux_vectors,
    sample_cross_section,
    scene_bounds,
    solve,
)

if __package__:
    from ._benchmark_utils import save_cross_section_preview, timed
else:  # Allow execution via `python field_benchmark.py`
    script_dir = Path(__file__).resolve().parent
    if str(script_dir) not in sys.path:
        sys.path.insert(0, str(script_dir))
    from _benchmark_utils import save_cross_section_preview, timed  # type: ignore  # noqa: E402


def run(resolutions: Sequence[int], workers: int, preview: bool) -> None:
    scenario = example_scenario()
    print(f"=== {scenario.name} ===")

    with timed("solve"):
        result = solve(scenario.pipes, scenario.soil_layers, scenario.soil_temperature_c)
    evaluator = result.field_evaluator()
    bounds = scene_bounds(scenario.pipes, scenario.soil_layers)

    for pipe in result.pipe_temperatures:
        print(f"  {pipe.name:<16} {pipe.temperature_c:8.2f} °C")

    for resolution in resolutions:
        print(f"\n--- lattice {resolution}^3 ---")
        with timed("sample (sequential)"):
            field = GridSampler(evaluator, resolution=resolution).sample(bounds)
        if workers > 1:
            with timed(f"sample ({workers} threads)"):
                threaded = GridSampler(evaluator, resolution=resolution, max_workers=workers).sample(bounds)
            print(f"  threaded matches sequential: {np.allclose(field.values, threaded.values)}")
        with timed("marching cubes"):
            surfaces = extract_isosurfaces(field, scenario.isovalues_c)
        for surface in surfaces:
            print(f"  {surface.isovalue:7.2f} °C -> {len(surface.triangles)} triangles")

    if not preview:
        return

    with timed("cross-section 200x100"):
        section = sample_cross_section(
            evaluator,
            min_x_m=bounds.min_x_m,
            max_x_m=bounds.max_x_m,
            max_depth_m=bounds.max_depth_m,
            columns=200,
            rows=100,
        )
    grid_points: List[tuple[float, float]] = [
        (float(x), float(z))
        for x in np.linspace(bounds.min_x_m, bounds.max_x_m, 30)
        for z in np.linspace(0.25, bounds.max_depth_m, 12)
    ]
    with timed("flux vectors"):
        vectors = heat_flux_vectors(evaluator, grid_points)

    preview_path = save_cross_section_preview(
        section,
        scenario.pipes,
        Path.cwd() / "field_cross_section.png",
        isotherms_c=scenario.isovalues_c,
        flux_vectors=vectors,
        title=f"Cross-section: {scenario.name}",
    )
    if preview_path is None:
        print("matplotlib not installed; skipping preview.")
    else:
        print(f"Cross-section preview saved to {preview_path}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--resolution", type=int, action="append", dest="resolutions")
    parser.add_argument("--workers", type=int, default=4)
    parser.add_argument("--no-preview", action="store_true")
    args = parser.parse_args()
    run(args.resolutions or [20, 40], args.workers, not args.no_preview)


if __name__ == "__main__":
    main()
