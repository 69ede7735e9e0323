from __future__ import annotations

import pytest

from pipetherm.model import materials


def test_catalog_covers_every_material_kind() -> None:
    kinds = {material.kind for material in materials.all_materials()}

    assert kinds == set(materials.MaterialKind)


def test_lookup_distinguishes_kinds_sharing_a_name() -> None:
    insulation = materials.find_material("None", materials.MaterialKind.INSULATION)
    bedding = materials.find_material("None", materials.MaterialKind.BEDDING)

    assert insulation is materials.NO_INSULATION
    assert bedding is materials.NO_BEDDING
    assert materials.find_material("None", materials.MaterialKind.SOIL) is None


def test_materials_for_kinds_keeps_catalog_order() -> None:
    soils = materials.materials_for_kinds([materials.MaterialKind.SOIL])

    assert soils[0] is materials.SATURATED_SOIL
    assert all(material.kind is materials.MaterialKind.SOIL for material in soils)
    assert [m.conductivity_w_per_m_k for m in soils] == sorted(
        (m.conductivity_w_per_m_k for m in soils), reverse=True
    )


def test_all_materials_returns_a_copy() -> None:
    listing = list(materials.all_materials())
    listing.clear()

    assert materials.all_materials()


@pytest.mark.parametrize("nominal, od_in", [("4", 4.5), ("8", 8.625), ("12", 12.75)])
def test_pipe_sizes_are_stored_in_metres(nominal, od_in) -> None:
    size = materials.find_pipe_size(nominal)

    assert size is not None
    assert size.outer_diameter_m == pytest.approx(od_in * 0.0254)
    assert 0.0 < size.wall_thickness_m < size.outer_diameter_m / 2.0


def test_unknown_pipe_size_is_none() -> None:
    assert materials.find_pipe_size("7") is None
    assert len(materials.all_pipe_sizes()) == len(materials.PIPE_SIZES)
