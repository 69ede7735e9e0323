from __future__ import annotations

import logging

import numpy as np
import pytest

from conftest import make_source
from pipetherm.errors import ConfigurationError
from pipetherm.model import SoilLayer, stack_soil_layers
from pipetherm.thermal.soil import SoilModel


def test_stack_soil_layers_accumulates_depths_and_skips_empty_entries() -> None:
    layers = stack_soil_layers([(1.0, 2.0), (9.9, 0.0), (2.0, 3.0)])

    assert [layer.conductivity_w_per_m_k for layer in layers] == [1.0, 2.0]
    assert layers[0].depth_top_m == 0.0
    assert layers[0].depth_bottom_m == 2.0
    assert layers[1].depth_top_m == 2.0
    assert layers[1].depth_bottom_m == 5.0


def test_conductivity_at_depth_uses_half_open_layers(layered_soil) -> None:
    soil = SoilModel(layered_soil)

    assert soil.conductivity_at_depth(0.0) == 1.0
    assert soil.conductivity_at_depth(1.999) == 1.0
    assert soil.conductivity_at_depth(2.0) == 2.0
    assert soil.conductivity_at_depth(4.9) == 2.0


def test_conductivity_outside_stack_falls_back_to_last_layer(layered_soil) -> None:
    soil = SoilModel(layered_soil)

    assert soil.conductivity_at_depth(5.0) == 2.0
    assert soil.conductivity_at_depth(50.0) == 2.0
    assert soil.conductivity_at_depth(-1.0) == 2.0


def test_empty_stack_uses_default_conductivity(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="pipetherm"):
        soil = SoilModel([])

    assert soil.is_empty
    assert soil.conductivity_at_depth(3.0) == 1.5
    assert soil.fallback_conductivity_w_per_m_k == 1.5
    assert soil.effective_conductivity_along_path((0.0, 1.0), (2.0, 3.0)) == pytest.approx(1.5)
    assert "No soil layers" in caplog.text
    assert all(record.levelno < logging.WARNING for record in caplog.records)


def test_effective_conductivity_for_pipe_averages_overlapping_layers(layered_soil) -> None:
    soil = SoilModel(layered_soil)

    straddling = make_source(depth_m=2.0, outer_diameter_m=0.2, bedding_thickness_m=0.2)
    shallow = make_source(depth_m=1.0, outer_diameter_m=0.2)
    below_stack = make_source(depth_m=20.0, outer_diameter_m=0.2)

    assert soil.effective_conductivity_for_pipe(straddling) == pytest.approx(1.5)
    assert soil.effective_conductivity_for_pipe(shallow) == pytest.approx(1.0)
    # Nothing overlaps, so the first layer is used.
    assert soil.effective_conductivity_for_pipe(below_stack) == pytest.approx(1.0)


def test_path_conductivity_in_uniform_soil_is_the_layer_value(uniform_soil) -> None:
    soil = SoilModel(uniform_soil)

    assert soil.effective_conductivity_along_path((0.0, 1.0), (3.0, 4.0)) == pytest.approx(1.5)


def test_path_conductivity_is_the_series_average(layered_soil) -> None:
    soil = SoilModel(layered_soil)

    # Half the path in k=1, half in k=2: 2 / (1/1 + 1/2).
    vertical = soil.effective_conductivity_along_path((0.0, 1.0), (0.0, 3.0))
    assert vertical == pytest.approx(4.0 / 3.0)

    horizontal = soil.effective_conductivity_along_path((-2.0, 3.0), (2.0, 3.0))
    assert horizontal == pytest.approx(2.0)


def test_coincident_path_returns_point_conductivity(layered_soil) -> None:
    soil = SoilModel(layered_soil)

    assert soil.effective_conductivity_along_path((1.0, 2.5), (1.0, 2.5)) == 2.0
    assert soil.effective_conductivity_along_path((1.0, 0.5), (1.0 + 1e-8, 0.5)) == 1.0


def test_path_through_zero_conductivity_falls_back_to_first_layer() -> None:
    soil = SoilModel(stack_soil_layers([(0.0, 5.0)]))

    assert soil.effective_conductivity_along_path((0.0, 1.0), (0.0, 3.0)) == 0.0


def test_vectorised_queries_match_scalar_queries(layered_soil) -> None:
    soil = SoilModel(layered_soil)
    rng = np.random.default_rng(7)
    end_h = rng.uniform(-6.0, 6.0, size=200)
    end_z = rng.uniform(-1.0, 8.0, size=200)
    end_z[:3] = [2.0, 5.0, 1.5]
    end_h[2] = 0.5

    depths = soil.conductivity_at_depths(end_z)
    paths = soil.effective_conductivity_along_paths(0.5, 1.5, end_h, end_z)

    expected_depths = [soil.conductivity_at_depth(z) for z in end_z]
    expected_paths = [
        soil.effective_conductivity_along_path((0.5, 1.5), (h, z)) for h, z in zip(end_h, end_z)
    ]
    np.testing.assert_array_equal(depths, expected_depths)
    np.testing.assert_allclose(paths, expected_paths, rtol=1e-12)


def test_vectorised_queries_without_layers_use_default() -> None:
    soil = SoilModel([], default_conductivity_w_per_m_k=0.8)

    values = soil.effective_conductivity_along_paths(0.0, 1.0, np.array([1.0, 0.0]), np.array([2.0, 1.0]))

    np.testing.assert_allclose(values, [0.8, 0.8])


def test_non_contiguous_layers_are_rejected() -> None:
    layers = [
        SoilLayer(conductivity_w_per_m_k=1.0, thickness_m=1.0, depth_top_m=0.0, depth_bottom_m=1.0),
        SoilLayer(conductivity_w_per_m_k=1.0, thickness_m=1.0, depth_top_m=1.5, depth_bottom_m=2.5),
    ]

    with pytest.raises(ConfigurationError) as excinfo:
        SoilModel(layers)

    assert any("Soil layer 2" in issue for issue in excinfo.value.issues)


def test_negative_layer_conductivity_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        SoilModel(stack_soil_layers([(-1.0, 2.0)]))
