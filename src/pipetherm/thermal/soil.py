from __future__ import annotations

import logging
import math
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from pipetherm.config import (
    COINCIDENT_POINT_TOLERANCE_M,
    DEFAULT_SOIL_CONDUCTIVITY_W_PER_M_K,
    PATH_SEGMENTS,
)
from pipetherm.errors import ConfigurationError
from pipetherm.model.pipe_system import Pipe, SoilLayer

logger = logging.getLogger(__name__)

_CONTIGUITY_TOL_M = 1e-9

SectionPoint = Tuple[float, float]


class SoilModel:
    """Layered, isotropic soil answering conductivity queries by depth and along paths."""

    def __init__(
        self,
        layers: Sequence[SoilLayer],
        *,
        default_conductivity_w_per_m_k: float = DEFAULT_SOIL_CONDUCTIVITY_W_PER_M_K,
        path_segments: int = PATH_SEGMENTS,
    ) -> None:
        self._layers: Tuple[SoilLayer, ...] = tuple(layers)
        self._default_k = float(default_conductivity_w_per_m_k)
        self._segments = max(1, int(path_segments))
        _check_layers(self._layers)

        self._tops = np.asarray([layer.depth_top_m for layer in self._layers], dtype=float)
        self._bottoms = np.asarray([layer.depth_bottom_m for layer in self._layers], dtype=float)
        self._k = np.asarray([layer.conductivity_w_per_m_k for layer in self._layers], dtype=float)
        self._t = (np.arange(self._segments, dtype=float) + 0.5) / self._segments

        if not self._layers:
            logger.debug(
                f"No soil layers defined; using {self._default_k:.2f} W/m·K everywhere."
            )

    @property
    def layers(self) -> Tuple[SoilLayer, ...]:
        return self._layers

    @property
    def is_empty(self) -> bool:
        return not self._layers

    @property
    def fallback_conductivity_w_per_m_k(self) -> float:
        """First layer's conductivity, or the default when there are no layers."""
        if self._layers:
            return self._layers[0].conductivity_w_per_m_k
        return self._default_k

    @property
    def deepest_bottom_m(self) -> float:
        return self._layers[-1].depth_bottom_m if self._layers else 0.0

    def conductivity_at_depth(self, depth_m: float) -> float:
        for layer in self._layers:
            if layer.contains(depth_m):
                return layer.conductivity_w_per_m_k
        if self._layers:
            return self._layers[-1].conductivity_w_per_m_k
        return self._default_k

    def conductivity_at_depths(self, depths_m: NDArray[np.float64]) -> NDArray[np.float64]:
        """Vectorised :meth:`conductivity_at_depth` for an array of depths."""
        depths = np.asarray(depths_m, dtype=float)
        if not self._layers:
            return np.full(depths.shape, self._default_k)
        count = self._k.size
        index = np.searchsorted(self._bottoms, depths, side="right")
        # Depths above the first top or past the last bottom resolve to the last layer.
        index = np.where((index >= count) | (depths < self._tops[0]), count - 1, index)
        return self._k[index]

    def effective_conductivity_for_pipe(self, pipe: Pipe) -> float:
        """Mean conductivity of the layers overlapping the pipe's outer envelope."""
        radius = pipe.outer_radius_m
        centre = pipe.depth_m
        overlapping = [
            layer.conductivity_w_per_m_k
            for layer in self._layers
            if centre + radius > layer.depth_top_m and centre - radius < layer.depth_bottom_m
        ]
        if not overlapping:
            return self.fallback_conductivity_w_per_m_k
        return sum(overlapping) / len(overlapping)

    def effective_conductivity_along_path(self, start: SectionPoint, end: SectionPoint) -> float:
        """
        Series (harmonic) conductivity along the straight segment between two section points.

        Args:
            start: ``(horizontal, depth)`` of the first end point in metres.
            end: ``(horizontal, depth)`` of the second end point in metres.
        """
        h1, z1 = start
        h2, z2 = end
        length = math.hypot(h2 - h1, z2 - z1)
        if length < COINCIDENT_POINT_TOLERANCE_M:
            return self.conductivity_at_depth(z1)

        segment = length / self._segments
        resistance = 0.0
        for t in self._t:
            k = self.conductivity_at_depth(z1 + t * (z2 - z1))
            if k > 0.0:
                resistance += segment / k
        if resistance == 0.0:
            return self.fallback_conductivity_w_per_m_k
        return length / resistance

    def effective_conductivity_along_paths(
        self,
        start_h: NDArray[np.float64] | float,
        start_z: NDArray[np.float64] | float,
        end_h: NDArray[np.float64],
        end_z: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """Vectorised :meth:`effective_conductivity_along_path` over arrays of end points."""
        h1, z1, h2, z2 = np.broadcast_arrays(
            np.asarray(start_h, dtype=float),
            np.asarray(start_z, dtype=float),
            np.asarray(end_h, dtype=float),
            np.asarray(end_z, dtype=float),
        )
        length = np.hypot(h2 - h1, z2 - z1)
        samples = z1[..., None] + self._t * (z2 - z1)[..., None]
        k = self.conductivity_at_depths(samples)
        inverse = np.divide(1.0, k, out=np.zeros_like(k), where=k > 0.0)
        resistance = (length / self._segments) * inverse.sum(axis=-1)

        with np.errstate(divide="ignore", invalid="ignore"):
            averaged = np.where(
                resistance == 0.0, self.fallback_conductivity_w_per_m_k, length / resistance
            )
        coincident = length < COINCIDENT_POINT_TOLERANCE_M
        return np.where(coincident, self.conductivity_at_depths(z1), averaged)


def as_soil_model(soil: Union[SoilModel, Sequence[SoilLayer]]) -> SoilModel:
    if isinstance(soil, SoilModel):
        return soil
    return SoilModel(soil)


def _check_layers(layers: Sequence[SoilLayer]) -> None:
    issues = []
    expected_top = 0.0
    for index, layer in enumerate(layers, start=1):
        if not math.isfinite(layer.conductivity_w_per_m_k) or layer.conductivity_w_per_m_k < 0.0:
            issues.append(f"Soil layer {index}: conductivity must be a non-negative number.")
        if not layer.thickness_m > 0.0:
            issues.append(f"Soil layer {index}: thickness must be positive.")
        if abs(layer.depth_top_m - expected_top) > _CONTIGUITY_TOL_M:
            issues.append(f"Soil layer {index}: top must start at {expected_top:.3f} m.")
        if abs(layer.depth_bottom_m - (layer.depth_top_m + layer.thickness_m)) > _CONTIGUITY_TOL_M:
            issues.append(f"Soil layer {index}: bottom must equal top plus thickness.")
        expected_top = layer.depth_bottom_m
    if issues:
        raise ConfigurationError(issues)
