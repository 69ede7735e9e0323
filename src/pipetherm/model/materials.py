from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence

_INCH_M = 0.0254


class MaterialKind(Enum):
    """Where a material can be used in a pipe installation."""

    SOIL = "soil"
    PIPE = "pipe"
    INSULATION = "insulation"
    BEDDING = "bedding"


@dataclass(frozen=True)
class Material:
    name: str
    kind: MaterialKind
    conductivity_w_per_m_k: float
    notes: str = ""


@dataclass(frozen=True)
class PipeSize:
    """Nominal pipe size with its schedule 40 outside diameter and wall."""

    nominal_size: str
    outer_diameter_m: float
    wall_thickness_m: float


SATURATED_SOIL = Material("Saturated Soil", MaterialKind.SOIL, 2.5)
WET_SOIL = Material("Wet Soil", MaterialKind.SOIL, 2.0)
MOIST_SOIL = Material("Moist Soil", MaterialKind.SOIL, 1.5)
LOAM = Material("Loam", MaterialKind.SOIL, 1.0)
ASPHALT = Material("Asphalt", MaterialKind.SOIL, 0.75)
DRY_SOIL = Material("Dry Soil", MaterialKind.SOIL, 0.5)
DRY_GRAVEL = Material("Dry Gravel", MaterialKind.SOIL, 0.35)
DRY_SAND = Material("Dry Sand", MaterialKind.SOIL, 0.27)

CARBON_STEEL = Material("Carbon Steel", MaterialKind.PIPE, 54.0)
STAINLESS_STEEL = Material("Stainless Steel", MaterialKind.PIPE, 16.0)
HDPE = Material("HDPE", MaterialKind.PIPE, 0.45)

NO_INSULATION = Material("None", MaterialKind.INSULATION, 0.0)
CALCIUM_SILICATE = Material("Calcium Silicate", MaterialKind.INSULATION, 0.05)
FIBERGLASS = Material("Fiberglass", MaterialKind.INSULATION, 0.04)
POLYURETHANE_FOAM = Material("Polyurethane Foam", MaterialKind.INSULATION, 0.025)

NO_BEDDING = Material("None", MaterialKind.BEDDING, 0.0)
GRAVEL_BEDDING = Material("Gravel", MaterialKind.BEDDING, 0.35)
SAND_BEDDING = Material("Sand", MaterialKind.BEDDING, 0.27, notes="Dry sand backfill.")

MATERIALS: List[Material] = [
    SATURATED_SOIL,
    WET_SOIL,
    MOIST_SOIL,
    LOAM,
    ASPHALT,
    DRY_SOIL,
    DRY_GRAVEL,
    DRY_SAND,
    CARBON_STEEL,
    STAINLESS_STEEL,
    HDPE,
    NO_INSULATION,
    CALCIUM_SILICATE,
    FIBERGLASS,
    POLYURETHANE_FOAM,
    NO_BEDDING,
    GRAVEL_BEDDING,
    SAND_BEDDING,
]

PIPE_SIZES: List[PipeSize] = [
    PipeSize(nominal, od_in * _INCH_M, wall_in * _INCH_M)
    for nominal, od_in, wall_in in (
        ("1", 1.315, 0.133),
        ("2", 2.375, 0.154),
        ("3", 3.5, 0.216),
        ("4", 4.5, 0.237),
        ("6", 6.625, 0.280),
        ("8", 8.625, 0.322),
        ("10", 10.75, 0.365),
        ("12", 12.75, 0.406),
    )
]

# "None" exists for both insulation and bedding, so lookups are keyed by kind as well.
_MATERIAL_LOOKUP = {(material.kind, material.name): material for material in MATERIALS}
_PIPE_SIZE_LOOKUP = {size.nominal_size: size for size in PIPE_SIZES}


def all_materials() -> Sequence[Material]:
    return list(MATERIALS)


def find_material(name: str, kind: MaterialKind) -> Material | None:
    return _MATERIAL_LOOKUP.get((kind, name))


def materials_for_kinds(kinds: Iterable[MaterialKind]) -> List[Material]:
    allowed = set(kinds)
    return [material for material in MATERIALS if material.kind in allowed]


def all_pipe_sizes() -> Sequence[PipeSize]:
    return list(PIPE_SIZES)


def find_pipe_size(nominal_size: str) -> PipeSize | None:
    return _PIPE_SIZE_LOOKUP.get(nominal_size)
