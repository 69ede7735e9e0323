from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Union

from pipetherm.errors import ConfigurationError, GeometryError
from pipetherm.model.pipe_system import Pipe, SoilLayer
from pipetherm.thermal.soil import SoilModel, as_soil_model

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class SourceResult:
    """
    Steady-state thermal circuit of one heat source.

    Resistances are per unit length in K·m/W; the heat flux is in W/m.
    """

    pipe: Pipe
    r_pipe: float
    r_insulation: float
    r_bedding: float
    r_soil: float
    soil_conductivity_w_per_m_k: float
    heat_flux_w_per_m: float

    @property
    def r_total(self) -> float:
        return self.r_pipe + self.r_insulation + self.r_bedding + self.r_soil

    def surface_temperature_c(self, soil_temperature_c: float) -> float:
        """Temperature at the outer envelope, where the soil takes over."""
        return soil_temperature_c + self.heat_flux_w_per_m * self.r_soil


def cylindrical_resistance(inner_radius_m: float, outer_radius_m: float, conductivity: float) -> float:
    """Radial conduction resistance of a cylindrical shell, zero for an absent layer."""
    if conductivity <= 0.0 or inner_radius_m <= 0.0:
        return 0.0
    return math.log(outer_radius_m / inner_radius_m) / (_TWO_PI * conductivity)


def soil_resistance(depth_m: float, outer_radius_m: float, conductivity: float) -> float:
    """Image-model resistance of the soil between a buried cylinder and the ground surface."""
    if conductivity <= 0.0:
        return 0.0
    return math.log(2.0 * depth_m / outer_radius_m) / (_TWO_PI * conductivity)


def validate_pipes(pipes: Sequence[Pipe]) -> None:
    """Raise before any computation when a pipe cannot be modelled."""
    configuration: List[str] = []
    seen = set()
    for pipe in pipes:
        configuration.extend(pipe.configuration_issues())
        if pipe.identifier in seen:
            configuration.append(f"Duplicate pipe identifier {pipe.identifier!r}.")
        seen.add(pipe.identifier)
    if configuration:
        raise ConfigurationError(configuration)

    geometry: List[str] = []
    for pipe in pipes:
        geometry.extend(pipe.geometry_issues())
    if geometry:
        raise GeometryError(geometry)


def solve_source(pipe: Pipe, soil: SoilModel, soil_temperature_c: float) -> SourceResult:
    if pipe.temperature_c is None:
        raise ConfigurationError([f"{pipe.name or pipe.identifier}: heat source requires a temperature."])

    r_pipe = cylindrical_resistance(pipe.bore_radius_m, pipe.pipe_radius_m, pipe.pipe_conductivity_w_per_m_k)
    r_insulation = cylindrical_resistance(
        pipe.pipe_radius_m, pipe.insulation_radius_m, pipe.insulation_conductivity_w_per_m_k
    )
    r_bedding = cylindrical_resistance(
        pipe.insulation_radius_m, pipe.outer_radius_m, pipe.bedding_conductivity_w_per_m_k
    )
    k_eff = soil.effective_conductivity_for_pipe(pipe)
    r_soil = soil_resistance(pipe.depth_m, pipe.outer_radius_m, k_eff)

    r_total = r_pipe + r_insulation + r_bedding + r_soil
    heat_flux = (pipe.temperature_c - soil_temperature_c) / r_total if r_total > 0.0 else 0.0

    logger.debug(
        f"{pipe.name}: R_pipe={r_pipe:.5f} R_ins={r_insulation:.5f} R_bed={r_bedding:.5f} "
        f"R_soil={r_soil:.5f} (k_eff={k_eff:.3f}) -> Q={heat_flux:.2f} W/m"
    )
    return SourceResult(
        pipe=pipe,
        r_pipe=r_pipe,
        r_insulation=r_insulation,
        r_bedding=r_bedding,
        r_soil=r_soil,
        soil_conductivity_w_per_m_k=k_eff,
        heat_flux_w_per_m=heat_flux,
    )


def solve_sources(
    pipes: Sequence[Pipe],
    soil_layers: Union[SoilModel, Sequence[SoilLayer]],
    soil_temperature_c: float,
) -> List[SourceResult]:
    """
    Compute the thermal circuit and heat flux of every heat source, in input order.

    Args:
        pipes: All pipes of the installation; affected pipes are validated but skipped.
        soil_layers: Soil stack, or an already constructed :class:`SoilModel`.
        soil_temperature_c: Undisturbed soil temperature.
    """
    if not math.isfinite(soil_temperature_c):
        raise ConfigurationError(["Soil temperature must be finite."])
    validate_pipes(pipes)
    soil = as_soil_model(soil_layers)
    return [solve_source(pipe, soil, soil_temperature_c) for pipe in pipes if pipe.is_heat_source]
