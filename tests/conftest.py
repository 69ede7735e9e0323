from __future__ import annotations

import logging
from typing import List

import pytest

from pipetherm.model import Pipe, PipeOrientation, PipeRole, SoilLayer, stack_soil_layers


def make_source(
    name: str = "Source",
    *,
    x_m: float = 0.0,
    y_m: float = 0.0,
    depth_m: float = 1.5,
    temperature_c: float = 200.0,
    orientation: PipeOrientation = PipeOrientation.PARALLEL,
    outer_diameter_m: float = 0.1,
    wall_thickness_m: float = 0.005,
    pipe_conductivity: float = 0.0,
    insulation_thickness_m: float = 0.0,
    insulation_conductivity: float = 0.0,
    bedding_thickness_m: float = 0.0,
    bedding_conductivity: float = 0.0,
) -> Pipe:
    return Pipe(
        name=name,
        role=PipeRole.HEAT_SOURCE,
        orientation=orientation,
        depth_m=depth_m,
        x_m=x_m,
        y_m=y_m,
        temperature_c=temperature_c,
        outer_diameter_m=outer_diameter_m,
        wall_thickness_m=wall_thickness_m,
        pipe_conductivity_w_per_m_k=pipe_conductivity,
        insulation_thickness_m=insulation_thickness_m,
        insulation_conductivity_w_per_m_k=insulation_conductivity,
        bedding_thickness_m=bedding_thickness_m,
        bedding_conductivity_w_per_m_k=bedding_conductivity,
    )


def make_affected(
    name: str = "Affected",
    *,
    x_m: float = 0.0,
    y_m: float = 0.0,
    depth_m: float = 1.5,
    orientation: PipeOrientation = PipeOrientation.PARALLEL,
    outer_diameter_m: float = 0.2,
) -> Pipe:
    return Pipe(
        name=name,
        role=PipeRole.AFFECTED,
        orientation=orientation,
        depth_m=depth_m,
        x_m=x_m,
        y_m=y_m,
        outer_diameter_m=outer_diameter_m,
        wall_thickness_m=0.01,
        pipe_conductivity_w_per_m_k=54.0,
    )


@pytest.fixture
def uniform_soil() -> List[SoilLayer]:
    return stack_soil_layers([(1.5, 10.0)])


@pytest.fixture
def layered_soil() -> List[SoilLayer]:
    return stack_soil_layers([(1.0, 2.0), (2.0, 3.0)])


@pytest.fixture
def package_logger():
    logger = logging.getLogger("pipetherm")
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
