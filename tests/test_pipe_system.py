from __future__ import annotations

import math

import pytest

from conftest import make_affected, make_source
from pipetherm.model import PipeOrientation, PipeRole, SoilLayer
from pipetherm.scenarios import example_scenario, make_pipe


def test_radii_build_outward_from_the_bore() -> None:
    pipe = make_source(
        outer_diameter_m=0.2, wall_thickness_m=0.01, insulation_thickness_m=0.05, bedding_thickness_m=0.1
    )

    assert pipe.bore_radius_m == pytest.approx(0.09)
    assert pipe.pipe_radius_m == pytest.approx(0.1)
    assert pipe.insulation_radius_m == pytest.approx(0.15)
    assert pipe.outer_radius_m == pytest.approx(0.25)


def test_section_distance_depends_on_orientation() -> None:
    parallel = make_source(x_m=1.0, y_m=5.0, depth_m=2.0)
    crossing = make_source(x_m=1.0, y_m=5.0, depth_m=2.0, orientation=PipeOrientation.PERPENDICULAR)

    assert parallel.horizontal_m == 1.0
    assert crossing.horizontal_m == 5.0
    assert parallel.distance_in_section(4.0, 100.0, 6.0) == pytest.approx(5.0)
    assert crossing.distance_in_section(100.0, 8.0, 6.0) == pytest.approx(5.0)


def test_soil_layer_is_half_open() -> None:
    layer = SoilLayer(conductivity_w_per_m_k=1.0, thickness_m=2.0, depth_top_m=1.0, depth_bottom_m=3.0)

    assert layer.contains(1.0)
    assert layer.contains(2.999)
    assert not layer.contains(3.0)
    assert not layer.contains(0.5)


def test_pipes_get_distinct_identifiers() -> None:
    assert make_source().identifier != make_source().identifier


def test_configuration_issues_name_the_pipe() -> None:
    pipe = make_source("Bad", outer_diameter_m=0.0, insulation_conductivity=-1.0, x_m=math.inf)

    issues = list(pipe.configuration_issues())

    assert len(issues) == 3
    assert all(issue.startswith("Bad:") for issue in issues)


def test_affected_pipes_need_no_temperature() -> None:
    assert list(make_affected().configuration_issues()) == []


def test_make_pipe_uses_schedule_dimensions() -> None:
    pipe = make_pipe("Line", "6", role=PipeRole.AFFECTED, depth_m=2.0)

    assert pipe.outer_diameter_m == pytest.approx(6.625 * 0.0254)
    assert pipe.wall_thickness_m == pytest.approx(0.280 * 0.0254)
    assert pipe.pipe_conductivity_w_per_m_k == 54.0


def test_make_pipe_rejects_unknown_sizes() -> None:
    with pytest.raises(ValueError):
        make_pipe("Line", "5", role=PipeRole.AFFECTED, depth_m=2.0)


def test_example_scenario_is_valid() -> None:
    scenario = example_scenario()

    assert [pipe.name for pipe in scenario.pipes] == ["Source A", "Affected Pipe", "Source B", "Perp Source C"]
    for pipe in scenario.pipes:
        assert list(pipe.configuration_issues()) == []
        assert list(pipe.geometry_issues()) == []
    assert scenario.soil_temperature_c == pytest.approx(15.5556, abs=1e-4)
    assert scenario.soil_layers[-1].depth_bottom_m == pytest.approx(30 * 0.3048)


def test_nan_outer_diameter_is_a_configuration_issue() -> None:
    issues = list(make_affected("Odd", outer_diameter_m=float("nan")).configuration_issues())

    assert issues == ["Odd: outer diameter must be positive."]
