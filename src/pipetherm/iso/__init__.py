"""Isosurface extraction from sampled temperature lattices."""

from .marching_cubes import (
    IsosurfaceResult,
    Triangle,
    Vertex,
    extract_isosurface,
    extract_isosurfaces,
    interpolate_vertex,
)
from .tables import EDGE_TABLE, TRI_TABLE

__all__ = [
    "EDGE_TABLE",
    "IsosurfaceResult",
    "TRI_TABLE",
    "Triangle",
    "Vertex",
    "extract_isosurface",
    "extract_isosurfaces",
    "interpolate_vertex",
]
