"""
Steady-state conduction around buried pipes.

Heat sources are reduced to line sources with a series thermal circuit, and the
ground surface is treated as an isotherm by mirroring every source above grade.
Temperatures anywhere in the soil follow from superposing those line sources.
"""

from .resistance import (
    SourceResult,
    cylindrical_resistance,
    soil_resistance,
    solve_sources,
    validate_pipes,
)
from .sampling import (
    Bounds3D,
    CrossSection,
    FluxVector,
    GridSampler,
    ScalarField,
    heat_flux_vectors,
    isotherm_mask,
    sample_cross_section,
    sample_scalar_field,
    scene_bounds,
)
from .soil import SoilModel
from .superposition import (
    AffectedResult,
    CalculationResult,
    FieldEvaluator,
    InteractionResult,
    PipeTemperature,
    evaluate_temperature,
    solve,
)

__all__ = [
    "AffectedResult",
    "Bounds3D",
    "CalculationResult",
    "CrossSection",
    "FieldEvaluator",
    "FluxVector",
    "GridSampler",
    "InteractionResult",
    "PipeTemperature",
    "ScalarField",
    "SoilModel",
    "SourceResult",
    "cylindrical_resistance",
    "evaluate_temperature",
    "heat_flux_vectors",
    "isotherm_mask",
    "sample_cross_section",
    "sample_scalar_field",
    "scene_bounds",
    "soil_resistance",
    "solve",
    "solve_sources",
    "validate_pipes",
]
