"""
Engine Constants
================
Central registry for the numerical constants shared by the soil model, the
field evaluator, the samplers and the isosurface extractor.

Every value here is also accepted as a keyword argument by the class that
uses it, so callers can tune a single run without touching the module.

Exports:
    DEFAULT_SOIL_CONDUCTIVITY_W_PER_M_K (float): Fallback when no soil layer applies.
    PATH_SEGMENTS (int): Sub-segments used for path-averaged conductivity.
    DEFAULT_GRID_RESOLUTION (int): Lattice nodes per axis for 3D sampling.
    LOG_LEVEL_ENV (str): Environment variable read by the CLI for its log level.
"""
import logging
import os

DEFAULT_SOIL_CONDUCTIVITY_W_PER_M_K: float = 1.5
PATH_SEGMENTS: int = 100
COINCIDENT_POINT_TOLERANCE_M: float = 1e-6
INTERPOLATION_TOLERANCE: float = 1e-9

DEFAULT_GRID_RESOLUTION: int = 40
SCENE_PADDING_M: float = 2.0
EMPTY_SCENE_HALF_WIDTH_M: float = 5.0
EVALUATION_CHUNK_SIZE: int = 4096

FLUX_STEP_M: float = 0.01
MIN_FLUX_MAGNITUDE: float = 1e-2
ISOTHERM_BAND_FRACTION: float = 0.01

LOG_LEVEL_ENV: str = "PIPETHERM_LOG_LEVEL"


def default_log_level() -> int:
    """Log level named by ``PIPETHERM_LOG_LEVEL``, INFO when unset or unknown."""
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
