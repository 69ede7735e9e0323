from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Tuple


class PipeRole(Enum):
    """Whether a pipe injects heat or only receives it."""

    HEAT_SOURCE = "heat_source"
    AFFECTED = "affected_pipe"


class PipeOrientation(Enum):
    """Pipe axis relative to the main (parallel) run."""

    PARALLEL = "parallel"
    PERPENDICULAR = "perpendicular"

    def horizontal_coordinate(self, x: float, y: float) -> float:
        # Parallel pipes run along y and are seen in the x-z plane; perpendicular pipes run along x.
        return x if self is PipeOrientation.PARALLEL else y


class Point3D(NamedTuple):
    """Query location in metres; ``z`` is depth below the ground surface."""

    x: float
    y: float
    z: float


@dataclass(frozen=True)
class SoilLayer:
    """Horizontal soil stratum between two depths below grade."""

    conductivity_w_per_m_k: float
    thickness_m: float
    depth_top_m: float
    depth_bottom_m: float

    def contains(self, depth_m: float) -> bool:
        return self.depth_top_m <= depth_m < self.depth_bottom_m


def stack_soil_layers(entries: Iterable[Tuple[float, float]]) -> List[SoilLayer]:
    """
    Build contiguous soil layers from ``(conductivity, thickness)`` pairs listed top-down.

    Entries with a non-positive thickness are skipped.
    """
    layers: List[SoilLayer] = []
    depth = 0.0
    for conductivity, thickness in entries:
        if thickness <= 0.0:
            continue
        layers.append(
            SoilLayer(
                conductivity_w_per_m_k=float(conductivity),
                thickness_m=float(thickness),
                depth_top_m=depth,
                depth_bottom_m=depth + thickness,
            )
        )
        depth += thickness
    return layers


@dataclass(frozen=True)
class Pipe:
    """Buried pipe with optional insulation and bedding envelopes."""

    name: str
    role: PipeRole
    orientation: PipeOrientation
    depth_m: float
    outer_diameter_m: float
    wall_thickness_m: float
    pipe_conductivity_w_per_m_k: float
    x_m: float = 0.0
    y_m: float = 0.0
    temperature_c: Optional[float] = None
    insulation_thickness_m: float = 0.0
    insulation_conductivity_w_per_m_k: float = 0.0
    bedding_thickness_m: float = 0.0
    bedding_conductivity_w_per_m_k: float = 0.0
    identifier: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_heat_source(self) -> bool:
        return self.role is PipeRole.HEAT_SOURCE

    @property
    def pipe_radius_m(self) -> float:
        return self.outer_diameter_m / 2.0

    @property
    def bore_radius_m(self) -> float:
        return self.pipe_radius_m - self.wall_thickness_m

    @property
    def insulation_radius_m(self) -> float:
        return self.pipe_radius_m + self.insulation_thickness_m

    @property
    def outer_radius_m(self) -> float:
        """Radius of the outermost envelope, bedding included."""
        return self.insulation_radius_m + self.bedding_thickness_m

    @property
    def horizontal_m(self) -> float:
        """Centre position along the horizontal axis of the pipe's cross-section."""
        return self.orientation.horizontal_coordinate(self.x_m, self.y_m)

    def distance_in_section(self, x: float, y: float, z: float) -> float:
        """Distance from the pipe centreline to a point, measured in the pipe's cross-section."""
        horizontal = self.orientation.horizontal_coordinate(x, y)
        return math.hypot(horizontal - self.horizontal_m, z - self.depth_m)

    def configuration_issues(self) -> Iterable[str]:
        label = self.name or self.identifier
        if self.is_heat_source:
            if self.temperature_c is None:
                yield f"{label}: heat source requires a temperature."
            elif not math.isfinite(self.temperature_c):
                yield f"{label}: heat source temperature must be finite."
        if not math.isfinite(self.outer_diameter_m) or self.outer_diameter_m <= 0.0:
            yield f"{label}: outer diameter must be positive."
        dimensions = (
            ("wall thickness", self.wall_thickness_m),
            ("insulation thickness", self.insulation_thickness_m),
            ("bedding thickness", self.bedding_thickness_m),
            ("pipe conductivity", self.pipe_conductivity_w_per_m_k),
            ("insulation conductivity", self.insulation_conductivity_w_per_m_k),
            ("bedding conductivity", self.bedding_conductivity_w_per_m_k),
        )
        for description, value in dimensions:
            if not math.isfinite(value) or value < 0.0:
                yield f"{label}: {description} must be a non-negative number."
        for axis, value in (("X", self.x_m), ("Y", self.y_m), ("Z", self.depth_m)):
            if not math.isfinite(value):
                yield f"{label}: {axis} position must be finite."

    def geometry_issues(self) -> Iterable[str]:
        label = self.name or self.identifier
        if self.depth_m <= self.outer_radius_m:
            yield (
                f"{label}: pipe depth (Z) must be greater than the total radius "
                "(OD/2 + insulation + bedding)."
            )
