from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pipetherm.config import INTERPOLATION_TOLERANCE
from pipetherm.iso.tables import EDGE_CORNERS, EDGE_TABLE, TRI_TABLE
from pipetherm.thermal.sampling import ScalarField

logger = logging.getLogger(__name__)

Vertex = Tuple[float, float, float]
Triangle = Tuple[Vertex, Vertex, Vertex]

_CORNER_OFFSETS = (
    (0, 0, 0),
    (1, 0, 0),
    (1, 1, 0),
    (0, 1, 0),
    (0, 0, 1),
    (1, 0, 1),
    (1, 1, 1),
    (0, 1, 1),
)
_EDGE_MASKS = np.asarray(EDGE_TABLE, dtype=np.int32)


@dataclass(frozen=True)
class IsosurfaceResult:
    """Triangles of one isosurface level, or the issue that prevented extracting it."""

    isovalue: float
    triangles: List[Triangle] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def interpolate_vertex(isovalue: float, p1: Vertex, p2: Vertex, v1: float, v2: float) -> Vertex:
    """Point on the edge ``p1 -> p2`` where the linearly interpolated value equals ``isovalue``."""
    difference = v2 - v1
    if abs(difference) < INTERPOLATION_TOLERANCE:
        return p1
    mu = (isovalue - v1) / difference
    point = (
        p1[0] + mu * (p2[0] - p1[0]),
        p1[1] + mu * (p2[1] - p1[1]),
        p1[2] + mu * (p2[2] - p1[2]),
    )
    if not all(math.isfinite(coordinate) for coordinate in point):
        return p1
    return point


def extract_isosurface(
    lattice: Union[ScalarField, NDArray[np.float64]],
    isovalue: float,
    *,
    pad_boundary: bool = False,
) -> List[Triangle]:
    """
    Triangulate the ``isovalue`` level set of a lattice field.

    Vertices are returned in lattice coordinates (node indices); use
    :meth:`ScalarField.lattice_to_world` to place them in metres.

    Args:
        lattice: Sampled field, or a raw 3D array indexed ``[i, j, k]``.
        isovalue: Level to extract.
        pad_boundary: Also march the cubes that straddle the lattice boundary, reading
            the nodes outside the lattice as 0 so that surfaces close against the bounds.
    """
    values = lattice.values if isinstance(lattice, ScalarField) else np.asarray(lattice, dtype=float)
    if values.ndim != 3:
        raise ValueError("Isosurface extraction needs a three-dimensional lattice.")

    offset = 0
    if pad_boundary:
        values = np.pad(values, 1, mode="constant", constant_values=0.0)
        offset = -1

    nx, ny, nz = values.shape
    if min(nx, ny, nz) < 2:
        return []

    below = values < isovalue
    cube_index = np.zeros((nx - 1, ny - 1, nz - 1), dtype=np.int32)
    for bit, (dx, dy, dz) in enumerate(_CORNER_OFFSETS):
        corner_below = below[dx : nx - 1 + dx, dy : ny - 1 + dy, dz : nz - 1 + dz]
        cube_index |= corner_below.astype(np.int32) << bit

    triangles: List[Triangle] = []
    for i, j, k in np.argwhere(_EDGE_MASKS[cube_index] != 0):
        index = int(cube_index[i, j, k])
        corners = [(int(i) + dx, int(j) + dy, int(k) + dz) for dx, dy, dz in _CORNER_OFFSETS]
        corner_values = [float(values[corner]) for corner in corners]
        points = [
            (float(ci + offset), float(cj + offset), float(ck + offset)) for ci, cj, ck in corners
        ]

        mask = EDGE_TABLE[index]
        vertices: Dict[int, Vertex] = {}
        for edge, (a, b) in enumerate(EDGE_CORNERS):
            if mask & (1 << edge):
                vertices[edge] = interpolate_vertex(
                    isovalue, points[a], points[b], corner_values[a], corner_values[b]
                )

        row = TRI_TABLE[index]
        for start in range(0, len(row), 3):
            triangles.append(
                (vertices[row[start + 2]], vertices[row[start + 1]], vertices[row[start]])
            )
    return triangles


def extract_isosurfaces(
    lattice: Union[ScalarField, NDArray[np.float64]],
    isovalues: Iterable[float],
    *,
    pad_boundary: bool = False,
) -> List[IsosurfaceResult]:
    """Extract several levels independently; a failing level is reported, not raised."""
    results: List[IsosurfaceResult] = []
    for isovalue in isovalues:
        try:
            level = float(isovalue)
            triangles = extract_isosurface(lattice, level, pad_boundary=pad_boundary)
        except Exception as exc:
            logger.exception(f"Failed to generate isosurface for temperature {isovalue!r}.")
            results.append(IsosurfaceResult(isovalue=isovalue, issues=[str(exc) or type(exc).__name__]))
            continue
        logger.info(f"Isosurface {level:.2f}: {len(triangles)} triangles.")
        results.append(IsosurfaceResult(isovalue=level, triangles=triangles))
    return results
