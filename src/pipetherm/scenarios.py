from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from pipetherm.model import (
    Pipe,
    PipeOrientation,
    PipeRole,
    SoilLayer,
    materials as material_catalog,
    stack_soil_layers,
)

_FOOT_M = 0.3048
_INCH_M = 0.0254


def _fahrenheit_to_celsius(value_f: float) -> float:
    return (value_f - 32.0) * 5.0 / 9.0


@dataclass(frozen=True)
class Scenario:
    """A complete installation ready to be solved."""

    name: str
    pipes: Sequence[Pipe]
    soil_layers: Sequence[SoilLayer]
    soil_temperature_c: float
    isovalues_c: Sequence[float] = ()


def make_pipe(
    name: str,
    nominal_size: str,
    *,
    role: PipeRole,
    depth_m: float,
    x_m: float = 0.0,
    y_m: float = 0.0,
    orientation: PipeOrientation = PipeOrientation.PARALLEL,
    temperature_c: Optional[float] = None,
    pipe_material: material_catalog.Material = material_catalog.CARBON_STEEL,
    insulation_thickness_m: float = 0.0,
    insulation: material_catalog.Material = material_catalog.NO_INSULATION,
    bedding_thickness_m: float = 0.0,
    bedding: material_catalog.Material = material_catalog.NO_BEDDING,
) -> Pipe:
    """Return a schedule 40 pipe of the given nominal size."""

    size = material_catalog.find_pipe_size(nominal_size)
    if size is None:
        raise ValueError(f"Unknown nominal pipe size {nominal_size!r}.")
    return Pipe(
        name=name,
        role=role,
        orientation=orientation,
        depth_m=depth_m,
        x_m=x_m,
        y_m=y_m,
        temperature_c=temperature_c,
        outer_diameter_m=size.outer_diameter_m,
        wall_thickness_m=size.wall_thickness_m,
        pipe_conductivity_w_per_m_k=pipe_material.conductivity_w_per_m_k,
        insulation_thickness_m=insulation_thickness_m,
        insulation_conductivity_w_per_m_k=insulation.conductivity_w_per_m_k,
        bedding_thickness_m=bedding_thickness_m,
        bedding_conductivity_w_per_m_k=bedding.conductivity_w_per_m_k,
    )


def make_example_pipes() -> List[Pipe]:
    """Two parallel steam lines and a crossing line around an uninsulated carrier pipe."""

    bedding = dict(bedding_thickness_m=6 * _INCH_M, bedding=material_catalog.GRAVEL_BEDDING)
    return [
        make_pipe(
            "Source A",
            "8",
            role=PipeRole.HEAT_SOURCE,
            x_m=-10 * _FOOT_M,
            depth_m=5 * _FOOT_M,
            temperature_c=_fahrenheit_to_celsius(450.0),
            insulation_thickness_m=2 * _INCH_M,
            insulation=material_catalog.CALCIUM_SILICATE,
            **bedding,
        ),
        make_pipe(
            "Affected Pipe",
            "12",
            role=PipeRole.AFFECTED,
            x_m=0.0,
            depth_m=6 * _FOOT_M,
            **bedding,
        ),
        make_pipe(
            "Source B",
            "6",
            role=PipeRole.HEAT_SOURCE,
            x_m=10 * _FOOT_M,
            depth_m=7 * _FOOT_M,
            temperature_c=_fahrenheit_to_celsius(300.0),
            insulation_thickness_m=1 * _INCH_M,
            insulation=material_catalog.FIBERGLASS,
            **bedding,
        ),
        make_pipe(
            "Perp Source C",
            "4",
            role=PipeRole.HEAT_SOURCE,
            orientation=PipeOrientation.PERPENDICULAR,
            y_m=0.0,
            depth_m=15 * _FOOT_M,
            temperature_c=_fahrenheit_to_celsius(200.0),
        ),
    ]


def make_example_soil() -> List[SoilLayer]:
    return stack_soil_layers(
        [
            (material_catalog.MOIST_SOIL.conductivity_w_per_m_k, 10 * _FOOT_M),
            (2.2, 20 * _FOOT_M),
        ]
    )


def example_scenario() -> Scenario:
    return Scenario(
        name="Example",
        pipes=make_example_pipes(),
        soil_layers=make_example_soil(),
        soil_temperature_c=_fahrenheit_to_celsius(60.0),
        isovalues_c=(_fahrenheit_to_celsius(90.0), _fahrenheit_to_celsius(120.0)),
    )
