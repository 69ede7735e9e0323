from __future__ import annotations

from typing import Iterable, Tuple


class PipeThermError(Exception):
    """Base class for errors raised by the thermal engine."""


class InputValidationError(PipeThermError, ValueError):
    """Invalid pipe or soil input, rejected before any computation."""

    default_message = "Invalid input."

    def __init__(self, issues: Iterable[str]) -> None:
        self.issues: Tuple[str, ...] = tuple(issues)
        super().__init__("; ".join(self.issues) or self.default_message)


class ConfigurationError(InputValidationError):
    """Missing or inconsistent input values (temperatures, conductivities, layers)."""

    default_message = "Invalid configuration."


class GeometryError(InputValidationError):
    """Pipe placement that the image model cannot represent."""

    default_message = "Invalid pipe geometry."
