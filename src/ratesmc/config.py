"""
Default settings for simulation and calibration.

All settings are frozen dataclasses; use ``with_overrides`` to derive a
modified copy rather than mutating a shared instance.
"""

import os
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence


def default_number_of_threads() -> int:
    """Worker pool size for per-product valuation within one trial."""
    return 2 * min(2, os.cpu_count() or 1)


@dataclass(frozen=True)
class SimulationSettings:
    """
    Monte Carlo settings used for calibration trials.

    Attributes:
        number_of_paths: Paths of the noise source
        seed: Seed of the noise source, fixed across trials
    """
    number_of_paths: int = 2000
    seed: int = 31415

    def __post_init__(self):
        if self.number_of_paths <= 0:
            raise ValueError(f"number_of_paths must be positive, got {self.number_of_paths}")

    def with_overrides(self, **kwargs) -> "SimulationSettings":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class CalibrationSettings:
    """
    Settings of the covariance model calibrator.

    Attributes:
        max_iterations: Maximum number of objective evaluations of the optimizer
        number_of_threads: Valuation worker pool size (None = from CPU count)
        parameter_tolerance: Termination tolerance on the parameter step
        residual_tolerance: Termination tolerance on the residual reduction
        fallback_parameters: Initial guess for the single retry after a
            numerical failure (None = the model's
            get_default_parameter())
        simulation: Noise source settings
    """
    max_iterations: int = 400
    number_of_threads: Optional[int] = None
    parameter_tolerance: float = 1e-10
    residual_tolerance: float = 1e-10
    fallback_parameters: Optional[Sequence[float]] = None
    simulation: SimulationSettings = field(default_factory=SimulationSettings)

    def __post_init__(self):
        if self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.number_of_threads is not None and self.number_of_threads <= 0:
            raise ValueError(f"number_of_threads must be positive, got {self.number_of_threads}")

    @property
    def resolved_number_of_threads(self) -> int:
        if self.number_of_threads is None:
            return default_number_of_threads()
        return self.number_of_threads

    def with_overrides(self, **kwargs) -> "CalibrationSettings":
        return replace(self, **kwargs)


@dataclass(frozen=True)
class CurveCalibrationSettings:
    """
    Settings of the multi-curve solver.

    Attributes:
        max_iterations: Maximum number of objective evaluations
        tolerance: Termination tolerance (residual and parameter step)
        initial_point_value: Placeholder value of newly added curve points
    """
    max_iterations: int = 100
    tolerance: float = 1e-12
    initial_point_value: float = 0.5

    def with_overrides(self, **kwargs) -> "CurveCalibrationSettings":
        return replace(self, **kwargs)


__all__ = [
    "SimulationSettings",
    "CalibrationSettings",
    "CurveCalibrationSettings",
    "default_number_of_threads",
]
