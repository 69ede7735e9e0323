from __future__ import annotations

import math

import numpy as np
import pytest

import pipetherm.iso.marching_cubes as marching_cubes
from pipetherm.iso import (
    EDGE_TABLE,
    TRI_TABLE,
    extract_isosurface,
    extract_isosurfaces,
    interpolate_vertex,
)
from pipetherm.iso.tables import EDGE_CORNERS
from pipetherm.thermal import Bounds3D, ScalarField


def _sphere_field(nodes: int, radius: float = 0.6) -> ScalarField:
    axis = np.linspace(-1.0, 1.0, nodes)
    x, y, z = np.meshgrid(axis, axis, axis, indexing="ij")
    distance = np.sqrt(x**2 + y**2 + z**2) - radius
    return ScalarField(values=distance, bounds=Bounds3D(-1.0, 1.0, -1.0, 1.0, -1.0, 1.0))


@pytest.mark.parametrize("index", range(256))
def test_tables_agree_for_every_cube_configuration(index) -> None:
    crossed = {
        edge for edge, (a, b) in enumerate(EDGE_CORNERS) if ((index >> a) & 1) != ((index >> b) & 1)
    }
    flagged = {edge for edge in range(12) if EDGE_TABLE[index] & (1 << edge)}
    row = TRI_TABLE[index]

    assert flagged == crossed
    assert set(row) == crossed
    assert len(row) % 3 == 0
    for start in range(0, len(row), 3):
        assert len(set(row[start : start + 3])) == 3


def test_interpolate_vertex_is_linear() -> None:
    assert interpolate_vertex(1.0, (0.0, 0.0, 0.0), (2.0, 0.0, 4.0), 0.0, 2.0) == (1.0, 0.0, 2.0)
    assert interpolate_vertex(0.5, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0.0, 2.0) == (0.0, 0.25, 0.0)


def test_interpolate_vertex_degenerate_edges_return_the_first_point() -> None:
    p1 = (1.0, 2.0, 3.0)
    p2 = (10.0, 0.0, 0.0)

    assert interpolate_vertex(5.0, p1, p2, 4.0, 4.0) == p1
    assert interpolate_vertex(1e300, p1, p2, 0.0, 1e-8) == p1
    assert interpolate_vertex(0.5, p1, p2, float("nan"), 1.0) == p1


def test_field_without_crossings_has_no_triangles() -> None:
    assert extract_isosurface(np.full((4, 4, 4), 3.0), 5.0) == []
    assert extract_isosurface(np.full((4, 4, 4), 3.0), 1.0) == []


def test_single_low_corner_gives_one_triangle() -> None:
    values = np.ones((2, 2, 2))
    values[0, 0, 0] = -1.0

    triangles = extract_isosurface(values, 0.0)

    assert triangles == [((0.0, 0.5, 0.0), (0.0, 0.0, 0.5), (0.5, 0.0, 0.0))]


def test_single_corner_triangle_faces_away_from_the_low_corner() -> None:
    values = np.ones((2, 2, 2))
    values[0, 0, 0] = -1.0

    ((a, b, c),) = extract_isosurface(values, 0.0)
    normal = np.cross(np.subtract(b, a), np.subtract(c, a))

    assert np.dot(normal, np.subtract((0.0, 0.0, 0.0), a)) < 0.0


def test_linear_field_gives_a_flat_level_set() -> None:
    values = np.broadcast_to(np.arange(6, dtype=float), (4, 4, 6)).copy()

    triangles = extract_isosurface(values, 2.5)

    assert len(triangles) == 18
    assert all(vertex[2] == 2.5 for triangle in triangles for vertex in triangle)


def test_sphere_vertices_lie_on_the_surface() -> None:
    field = _sphere_field(31)

    triangles = extract_isosurface(field, 0.0)

    vertices = field.lattice_to_world(np.array([vertex for triangle in triangles for vertex in triangle]))
    radii = np.linalg.norm(vertices, axis=1)
    assert triangles
    assert np.all(np.abs(radii - 0.6) < 0.02)


def test_sphere_triangle_count_scales_with_surface_resolution() -> None:
    coarse = len(extract_isosurface(_sphere_field(16), 0.0))
    fine = len(extract_isosurface(_sphere_field(31), 0.0))

    assert 3.0 < fine / coarse < 5.2


def test_boundary_padding_does_not_change_an_interior_surface() -> None:
    field = _sphere_field(16)

    assert len(extract_isosurface(field, 0.0, pad_boundary=True)) == len(extract_isosurface(field, 0.0))


def test_boundary_padding_closes_surfaces_at_the_lattice_edge() -> None:
    values = np.full((3, 3, 3), 10.0)

    assert extract_isosurface(values, 5.0) == []
    triangles = extract_isosurface(values, 5.0, pad_boundary=True)

    coordinates = np.array([vertex for triangle in triangles for vertex in triangle])
    assert triangles
    assert coordinates.min() == pytest.approx(-0.5)
    assert coordinates.max() == pytest.approx(2.5)


def test_raw_arrays_and_scalar_fields_give_the_same_surface() -> None:
    field = _sphere_field(12)

    assert extract_isosurface(field, 0.1) == extract_isosurface(field.values, 0.1)


@pytest.mark.parametrize("shape", [(4, 4), (2, 2, 2, 2)])
def test_non_volumetric_input_is_rejected(shape) -> None:
    with pytest.raises(ValueError):
        extract_isosurface(np.zeros(shape), 0.0)


def test_thin_lattice_has_no_cubes() -> None:
    assert extract_isosurface(np.zeros((1, 4, 4)), 0.5) == []


def test_failing_levels_are_reported_without_stopping_the_rest(monkeypatch) -> None:
    original = marching_cubes.extract_isosurface

    def flaky(lattice, isovalue, *, pad_boundary=False):
        if isovalue == 0.2:
            raise RuntimeError("boom")
        return original(lattice, isovalue, pad_boundary=pad_boundary)

    monkeypatch.setattr(marching_cubes, "extract_isosurface", flaky)
    field = _sphere_field(10)

    first, failed, unparsable, last = extract_isosurfaces(field, [0.0, 0.2, "warm", 0.3])

    assert first.ok and first.triangles
    assert not failed.ok
    assert failed.issues == ["boom"]
    assert failed.triangles == []
    assert not unparsable.ok
    assert last.ok and last.isovalue == 0.3
    assert math.isfinite(last.isovalue)


def test_nearly_equal_corners_snap_to_lattice_nodes() -> None:
    values = np.full((2, 2, 2), 1e-10)
    values[0, 0, 0] = -1e-10

    triangles = extract_isosurface(values, 0.0)

    vertices = [vertex for triangle in triangles for vertex in triangle]
    assert len(triangles) == 1
    assert all(math.isfinite(coordinate) for vertex in vertices for coordinate in vertex)
    assert set(vertices) <= {(0.0, 0.0, 0.0), (0.0, 1.0, 0.0)}
