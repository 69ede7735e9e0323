from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pipetherm.config import EVALUATION_CHUNK_SIZE
from pipetherm.model.pipe_system import Pipe, PipeOrientation, PipeRole, Point3D, SoilLayer
from pipetherm.thermal.resistance import SourceResult, solve_sources
from pipetherm.thermal.soil import SoilModel, as_soil_model

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class InteractionResult:
    """Temperature rise one heat source induces at one affected pipe."""

    source_id: str
    source_name: str
    path_conductivity_w_per_m_k: float
    real_distance_m: float
    image_distance_m: float
    temperature_rise_c: float


@dataclass(frozen=True)
class AffectedResult:
    pipe: Pipe
    interactions: Tuple[InteractionResult, ...]
    total_rise_c: float
    final_temperature_c: float


@dataclass(frozen=True)
class PipeTemperature:
    identifier: str
    name: str
    role: PipeRole
    temperature_c: float


@dataclass(frozen=True)
class _Footprint:
    pipe: Pipe
    temperature_c: float
    surface_temperature_c: Optional[float]


class FieldEvaluator:
    """Steady-state temperature field of buried line sources, by method of images."""

    def __init__(
        self,
        sources: Sequence[SourceResult],
        soil: Union[SoilModel, Sequence[SoilLayer]],
        soil_temperature_c: float,
        *,
        affected: Sequence[AffectedResult] = (),
        chunk_size: int = EVALUATION_CHUNK_SIZE,
    ) -> None:
        self._sources: Tuple[SourceResult, ...] = tuple(sources)
        self._soil = as_soil_model(soil)
        self._soil_temp = float(soil_temperature_c)
        self._chunk_size = max(1, chunk_size)

        footprints: List[_Footprint] = []
        for source in self._sources:
            surface: Optional[float] = None
            if source.heat_flux_w_per_m != 0.0:
                surface = source.surface_temperature_c(self._soil_temp)
                if not math.isfinite(surface):
                    surface = self._soil_temp
            footprints.append(_Footprint(source.pipe, float(source.pipe.temperature_c), surface))
        for result in affected:
            footprints.append(_Footprint(result.pipe, result.final_temperature_c, None))
        self._footprints: Tuple[_Footprint, ...] = tuple(footprints)

    @property
    def sources(self) -> Tuple[SourceResult, ...]:
        return self._sources

    @property
    def soil(self) -> SoilModel:
        return self._soil

    @property
    def soil_temperature_c(self) -> float:
        return self._soil_temp

    # ---- pipe to pipe -----------------------------------------------------

    def interaction(self, source: SourceResult, target: Pipe) -> InteractionResult:
        emitter = source.pipe
        z_s = emitter.depth_m
        z_t = target.depth_m
        if emitter.orientation is target.orientation:
            h_s = emitter.horizontal_m
            h_t = target.horizontal_m
            d_real = math.hypot(h_s - h_t, z_s - z_t)
            d_image = math.hypot(h_s - h_t, z_s + z_t)
            k_path = self._soil.effective_conductivity_along_path((h_s, z_s), (h_t, z_t))
        else:
            # Crossing pipes: closest approach is purely vertical in the target's section.
            d_real = abs(z_s - z_t)
            d_image = z_s + z_t
            k_path = self._soil.conductivity_at_depth(z_t)

        d_real = max(d_real, emitter.outer_radius_m)
        rise = _image_rise(source.heat_flux_w_per_m, k_path, d_real, d_image)
        return InteractionResult(
            source_id=emitter.identifier,
            source_name=emitter.name,
            path_conductivity_w_per_m_k=k_path,
            real_distance_m=d_real,
            image_distance_m=d_image,
            temperature_rise_c=rise,
        )

    def interactions_at_pipe(self, pipe: Pipe) -> List[InteractionResult]:
        return [
            self.interaction(source, pipe)
            for source in self._sources
            if source.pipe.identifier != pipe.identifier
        ]

    def affected_result(self, pipe: Pipe) -> AffectedResult:
        interactions = self.interactions_at_pipe(pipe)
        total = sum(item.temperature_rise_c for item in interactions)
        return AffectedResult(
            pipe=pipe,
            interactions=tuple(interactions),
            total_rise_c=total,
            final_temperature_c=self._soil_temp + total,
        )

    def temperature_at_pipe(self, pipe: Pipe) -> float:
        """Soil temperature plus the rise from every other source."""
        return self.affected_result(pipe).final_temperature_c

    # ---- arbitrary points -------------------------------------------------

    def footprint_at(self, point: Point3D) -> Optional[Pipe]:
        """Pipe whose outer envelope contains ``point``, if any."""
        for footprint in self._footprints:
            if footprint.pipe.distance_in_section(*point) <= footprint.pipe.outer_radius_m:
                return footprint.pipe
        return None

    def temperature_at(self, point: Point3D) -> float:
        x, y, z = point
        if z < 0.0:
            return self._soil_temp

        for footprint in self._footprints:
            pipe = footprint.pipe
            distance = pipe.distance_in_section(x, y, z)
            if distance > pipe.outer_radius_m:
                continue
            if distance <= pipe.pipe_radius_m:
                return footprint.temperature_c
            if footprint.surface_temperature_c is not None:
                return footprint.surface_temperature_c

        total = 0.0
        for source in self._sources:
            emitter = source.pipe
            h_s = emitter.horizontal_m
            z_s = emitter.depth_m
            h = emitter.orientation.horizontal_coordinate(x, y)
            d_real = max(math.hypot(h - h_s, z - z_s), emitter.outer_radius_m)
            d_image = math.hypot(h - h_s, z + z_s)
            if d_real <= 0.0:
                continue
            k_path = self._soil.effective_conductivity_along_path((h_s, z_s), (h, z))
            total += _image_rise(source.heat_flux_w_per_m, k_path, d_real, d_image)

        temperature = self._soil_temp + total
        return temperature if math.isfinite(temperature) else self._soil_temp

    def temperatures_at(
        self,
        x: NDArray[np.float64],
        y: NDArray[np.float64],
        z: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Vectorised :meth:`temperature_at` over broadcastable coordinate arrays."""
        xs, ys, zs = np.broadcast_arrays(
            np.asarray(x, dtype=float), np.asarray(y, dtype=float), np.asarray(z, dtype=float)
        )
        shape = xs.shape
        xs = xs.ravel()
        ys = ys.ravel()
        zs = zs.ravel()
        result = np.full(xs.size, self._soil_temp)

        below = np.flatnonzero(zs >= 0.0)
        for start in range(0, below.size, self._chunk_size):
            index = below[start : start + self._chunk_size]
            result[index] = self._evaluate_chunk(xs[index], ys[index], zs[index])
        return result.reshape(shape)

    def _evaluate_chunk(
        self, x: NDArray[np.float64], y: NDArray[np.float64], z: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        total = np.zeros(x.size)
        for source in self._sources:
            emitter = source.pipe
            h_s = emitter.horizontal_m
            z_s = emitter.depth_m
            h = x if emitter.orientation is PipeOrientation.PARALLEL else y
            d_real = np.maximum(np.hypot(h - h_s, z - z_s), emitter.outer_radius_m)
            d_image = np.hypot(h - h_s, z + z_s)
            k_path = self._soil.effective_conductivity_along_paths(h_s, z_s, h, z)
            valid = (k_path > 0.0) & (d_image > d_real) & (d_real > 0.0)
            with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
                rise = source.heat_flux_w_per_m / (_TWO_PI * k_path) * np.log(d_image / d_real)
            total += np.where(valid & np.isfinite(rise), rise, 0.0)

        temperature = self._soil_temp + total
        temperature = np.where(np.isfinite(temperature), temperature, self._soil_temp)

        # Reverse order so the first matching footprint wins, as in the scalar path.
        for footprint in reversed(self._footprints):
            pipe = footprint.pipe
            h = x if pipe.orientation is PipeOrientation.PARALLEL else y
            distance = np.hypot(h - pipe.horizontal_m, z - pipe.depth_m)
            inside = distance <= pipe.outer_radius_m
            if not inside.any():
                continue
            core = inside & (distance <= pipe.pipe_radius_m)
            temperature[core] = footprint.temperature_c
            if footprint.surface_temperature_c is not None:
                temperature[inside & ~core] = footprint.surface_temperature_c
        return temperature


@dataclass(frozen=True)
class CalculationResult:
    """Outcome of a full steady-state solve."""

    soil: SoilModel
    soil_temperature_c: float
    sources: Tuple[SourceResult, ...]
    affected: Tuple[AffectedResult, ...]
    pipe_temperatures: Tuple[PipeTemperature, ...]
    warnings: Tuple[str, ...] = ()

    @property
    def min_temperature_c(self) -> float:
        return min([self.soil_temperature_c, *(item.temperature_c for item in self.pipe_temperatures)])

    @property
    def max_temperature_c(self) -> float:
        return max([self.soil_temperature_c, *(item.temperature_c for item in self.pipe_temperatures)])

    @property
    def temperature_span_c(self) -> float:
        return self.max_temperature_c - self.min_temperature_c

    def field_evaluator(self) -> FieldEvaluator:
        return FieldEvaluator(
            self.sources, self.soil, self.soil_temperature_c, affected=self.affected
        )


def solve(
    pipes: Sequence[Pipe],
    soil_layers: Union[SoilModel, Sequence[SoilLayer]],
    soil_temperature_c: float,
) -> CalculationResult:
    """
    Solve every heat source, then superpose their fields at each affected pipe.

    All sources are solved before any affected pipe is evaluated. Heat sources keep
    their fixed input temperature; they are not heated by their neighbours.
    """
    soil = as_soil_model(soil_layers)
    sources = solve_sources(pipes, soil, soil_temperature_c)
    evaluator = FieldEvaluator(sources, soil, soil_temperature_c)
    affected = tuple(evaluator.affected_result(pipe) for pipe in pipes if not pipe.is_heat_source)

    warnings: List[str] = []
    if soil.is_empty:
        warnings.append(
            "No soil layers defined; default conductivity "
            f"{soil.fallback_conductivity_w_per_m_k:.2f} W/m·K was used."
        )
    for warning in warnings:
        logger.warning(warning)

    temperatures = [
        PipeTemperature(s.pipe.identifier, s.pipe.name, s.pipe.role, float(s.pipe.temperature_c))
        for s in sources
    ]
    temperatures.extend(
        PipeTemperature(a.pipe.identifier, a.pipe.name, a.pipe.role, a.final_temperature_c)
        for a in affected
    )
    logger.info(
        f"Solved {len(sources)} heat source(s) and {len(affected)} affected pipe(s) "
        f"at soil temperature {soil_temperature_c:.2f} °C."
    )
    return CalculationResult(
        soil=soil,
        soil_temperature_c=float(soil_temperature_c),
        sources=tuple(sources),
        affected=affected,
        pipe_temperatures=tuple(temperatures),
        warnings=tuple(warnings),
    )


def evaluate_temperature(
    target: Union[Point3D, Pipe],
    sources: Sequence[SourceResult],
    soil_layers: Union[SoilModel, Sequence[SoilLayer]],
    soil_temperature_c: float,
) -> float:
    """
    Temperature at a query point, or at a pipe's centreline excluding its own contribution.

    Each call builds a fresh evaluator. For many queries pass a prebuilt
    :class:`SoilModel` as ``soil_layers``, or hold on to a :class:`FieldEvaluator`.
    """
    evaluator = FieldEvaluator(sources, soil_layers, soil_temperature_c)
    if isinstance(target, Pipe):
        return evaluator.temperature_at_pipe(target)
    return evaluator.temperature_at(Point3D(*target))


def _image_rise(heat_flux: float, conductivity: float, d_real: float, d_image: float) -> float:
    if conductivity <= 0.0 or d_image <= d_real:
        return 0.0
    rise = heat_flux / (_TWO_PI * conductivity) * math.log(d_image / d_real)
    return rise if math.isfinite(rise) else 0.0
