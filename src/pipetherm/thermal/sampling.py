from __future__ import annotations

import logging
import math
import numbers
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pipetherm.config import (
    DEFAULT_GRID_RESOLUTION,
    EMPTY_SCENE_HALF_WIDTH_M,
    FLUX_STEP_M,
    ISOTHERM_BAND_FRACTION,
    MIN_FLUX_MAGNITUDE,
    SCENE_PADDING_M,
)
from pipetherm.model.pipe_system import Pipe, Point3D, SoilLayer
from pipetherm.thermal.superposition import FieldEvaluator

logger = logging.getLogger(__name__)

Resolution = Union[int, Tuple[int, int, int]]


@dataclass(frozen=True)
class Bounds3D:
    """Axis-aligned sampling box; depth grows downward from the ground surface."""

    min_x_m: float
    max_x_m: float
    min_y_m: float
    max_y_m: float
    min_depth_m: float
    max_depth_m: float

    @property
    def minimum(self) -> NDArray[np.float64]:
        return np.array([self.min_x_m, self.min_y_m, self.min_depth_m], dtype=float)

    @property
    def maximum(self) -> NDArray[np.float64]:
        return np.array([self.max_x_m, self.max_y_m, self.max_depth_m], dtype=float)

    def axis_nodes(
        self, counts: Tuple[int, int, int]
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        nx, ny, nz = counts
        return (
            np.linspace(self.min_x_m, self.max_x_m, nx),
            np.linspace(self.min_y_m, self.max_y_m, ny),
            np.linspace(self.min_depth_m, self.max_depth_m, nz),
        )


@dataclass(frozen=True)
class ScalarField:
    """Temperatures on a regular lattice, indexed ``values[i, j, k]`` along (x, y, depth)."""

    values: NDArray[np.float64]
    bounds: Bounds3D

    @property
    def shape(self) -> Tuple[int, int, int]:
        nx, ny, nz = self.values.shape
        return nx, ny, nz

    def axis_nodes(self) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        return self.bounds.axis_nodes(self.shape)

    def lattice_to_world(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Map lattice-space coordinates (node indices) to metres."""
        lattice = np.asarray(points, dtype=float)
        steps = np.maximum(np.asarray(self.shape, dtype=float) - 1.0, 1.0)
        spacing = (self.bounds.maximum - self.bounds.minimum) / steps
        return self.bounds.minimum + lattice * spacing


@dataclass(frozen=True)
class CrossSection:
    """Temperatures on a vertical plane, rows by depth and columns by horizontal position."""

    horizontal_m: NDArray[np.float64]
    depth_m: NDArray[np.float64]
    temperatures_c: NDArray[np.float64]
    y_m: float = 0.0

    @property
    def min_temp_c(self) -> float:
        return float(np.min(self.temperatures_c))

    @property
    def max_temp_c(self) -> float:
        return float(np.max(self.temperatures_c))


@dataclass(frozen=True)
class FluxVector:
    """Heat flow direction ``-grad T`` at a point of the y = const section, in K/m."""

    x_m: float
    depth_m: float
    flux_x: float
    flux_z: float

    @property
    def magnitude(self) -> float:
        return math.hypot(self.flux_x, self.flux_z)

    @property
    def angle_rad(self) -> float:
        return math.atan2(self.flux_z, self.flux_x)


def scene_bounds(
    pipes: Sequence[Pipe],
    soil_layers: Sequence[SoilLayer],
    *,
    padding_m: float = SCENE_PADDING_M,
) -> Bounds3D:
    """Box enclosing every pipe footprint and the soil stack, padded on all buried sides."""
    if pipes:
        min_x = min(p.x_m - p.outer_radius_m for p in pipes)
        max_x = max(p.x_m + p.outer_radius_m for p in pipes)
        min_y = min(p.y_m - p.outer_radius_m for p in pipes)
        max_y = max(p.y_m + p.outer_radius_m for p in pipes)
        max_depth = max(p.depth_m + p.outer_radius_m for p in pipes)
    else:
        half = EMPTY_SCENE_HALF_WIDTH_M
        min_x, max_x, min_y, max_y, max_depth = -half, half, -half, half, half
    deepest_layer = soil_layers[-1].depth_bottom_m if soil_layers else 0.0
    return Bounds3D(
        min_x_m=min_x - padding_m,
        max_x_m=max_x + padding_m,
        min_y_m=min_y - padding_m,
        max_y_m=max_y + padding_m,
        min_depth_m=0.0,
        max_depth_m=max(max_depth, deepest_layer) + padding_m,
    )


class GridSampler:
    """Samples a :class:`FieldEvaluator` on a regular 3D lattice."""

    def __init__(
        self,
        evaluator: FieldEvaluator,
        *,
        resolution: Resolution = DEFAULT_GRID_RESOLUTION,
        max_workers: Optional[int] = None,
    ) -> None:
        self._evaluator = evaluator
        self._counts = _lattice_counts(resolution)
        self._max_workers = max_workers

    @property
    def counts(self) -> Tuple[int, int, int]:
        return self._counts

    def sample(self, bounds: Bounds3D) -> ScalarField:
        xs, ys, zs = bounds.axis_nodes(self._counts)
        values = np.empty(self._counts, dtype=float)
        plane_x, plane_y = np.meshgrid(xs, ys, indexing="ij")
        ambient = self._evaluator.soil_temperature_c

        def fill_slab(k: int) -> None:
            depth = zs[k]
            if depth < 0.0:
                values[:, :, k] = ambient
                return
            values[:, :, k] = self._evaluator.temperatures_at(plane_x, plane_y, depth)

        started = time.perf_counter()
        if self._max_workers is not None and self._max_workers > 1:
            # Each task writes a disjoint depth slab of ``values``.
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                list(pool.map(fill_slab, range(zs.size)))
        else:
            for k in range(zs.size):
                fill_slab(k)
        elapsed = time.perf_counter() - started
        logger.info(
            f"Sampled {values.size} lattice nodes {self._counts} in {elapsed:.2f} s."
        )
        return ScalarField(values=values, bounds=bounds)


def sample_scalar_field(
    evaluator: FieldEvaluator,
    bounds: Bounds3D,
    *,
    resolution: Resolution = DEFAULT_GRID_RESOLUTION,
    max_workers: Optional[int] = None,
) -> ScalarField:
    return GridSampler(evaluator, resolution=resolution, max_workers=max_workers).sample(bounds)


def sample_cross_section(
    evaluator: FieldEvaluator,
    *,
    min_x_m: float,
    max_x_m: float,
    max_depth_m: float,
    columns: int,
    rows: int,
    min_depth_m: float = 0.0,
    y_m: float = 0.0,
) -> CrossSection:
    """Sample the vertical plane ``y = y_m`` on a ``rows x columns`` grid."""
    horizontal = np.linspace(min_x_m, max_x_m, max(1, columns))
    depth = np.linspace(min_depth_m, max_depth_m, max(1, rows))
    grid_z, grid_x = np.meshgrid(depth, horizontal, indexing="ij")
    temperatures = evaluator.temperatures_at(grid_x, y_m, grid_z)
    return CrossSection(horizontal_m=horizontal, depth_m=depth, temperatures_c=temperatures, y_m=y_m)


def isotherm_mask(
    section: CrossSection,
    level_c: float,
    *,
    span_c: Optional[float] = None,
    band_fraction: float = ISOTHERM_BAND_FRACTION,
) -> NDArray[np.bool_]:
    """
    Cells lying on the ``level_c`` isotherm of a cross-section.

    Args:
        section: Sampled cross-section.
        level_c: Isotherm temperature.
        span_c: Temperature range the band is relative to. Pass
            :attr:`CalculationResult.temperature_span_c` for a band measured against the
            whole scene (pipe temperatures and soil), so isotherms stay comparable between
            sections. Defaults to the section's own range.
        band_fraction: Half-width of the band as a fraction of ``span_c``.
    """
    if span_c is None:
        span_c = section.max_temp_c - section.min_temp_c
    tolerance = abs(span_c) * band_fraction
    return np.abs(section.temperatures_c - level_c) < tolerance


def heat_flux_vectors(
    evaluator: FieldEvaluator,
    points: Iterable[Tuple[float, float]],
    *,
    y_m: float = 0.0,
    step_m: float = FLUX_STEP_M,
    min_magnitude: float = MIN_FLUX_MAGNITUDE,
) -> List[FluxVector]:
    """Central-difference heat flow directions at ``(x, depth)`` points of the section ``y = y_m``."""
    vectors: List[FluxVector] = []
    for x, z in points:
        point = Point3D(x, y_m, z)
        if z < 0.0 or evaluator.footprint_at(point) is not None:
            continue
        east = evaluator.temperature_at(Point3D(x + step_m, y_m, z))
        west = evaluator.temperature_at(Point3D(x - step_m, y_m, z))
        down = evaluator.temperature_at(Point3D(x, y_m, z + step_m))
        up = evaluator.temperature_at(Point3D(x, y_m, z - step_m))
        vector = FluxVector(
            x_m=x,
            depth_m=z,
            flux_x=-(east - west) / (2.0 * step_m),
            flux_z=-(down - up) / (2.0 * step_m),
        )
        if vector.magnitude < min_magnitude:
            continue
        vectors.append(vector)
    return vectors


def _lattice_counts(resolution: Resolution) -> Tuple[int, int, int]:
    if isinstance(resolution, numbers.Integral):
        counts = (int(resolution),) * 3
    else:
        counts = tuple(int(value) for value in resolution)
        if len(counts) != 3:
            raise ValueError("Resolution must be an integer or a triple of integers.")
    if min(counts) < 2:
        raise ValueError("Lattice resolution must be at least 2 nodes per axis.")
    return counts  # type: ignore[return-value]
