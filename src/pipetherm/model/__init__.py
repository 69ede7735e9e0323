"""Value records for buried pipe installations and their soil."""

from .pipe_system import (
    Pipe,
    PipeOrientation,
    PipeRole,
    Point3D,
    SoilLayer,
    stack_soil_layers,
)
from . import materials

__all__ = [
    "Pipe",
    "PipeOrientation",
    "PipeRole",
    "Point3D",
    "SoilLayer",
    "stack_soil_layers",
    "materials",
]
