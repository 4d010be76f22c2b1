"""
Exception taxonomy for curve construction, simulation and calibration.

The classes derive from the builtin exception a caller would naturally
catch (ValueError for bad input data, RuntimeError for numerical failures,
NotImplementedError for unsupported operations) so that generic handlers
keep working.
"""

from typing import Optional


class RatesMCError(Exception):
    """Root of all library errors."""


class DataError(RatesMCError, ValueError):
    """Invalid or inconsistent input data."""


class DuplicatePointError(DataError):
    """A point already exists at this time with a different value."""


class InsufficientDataError(DataError):
    """Not enough points to build the requested interpolation."""


class CalculationError(RatesMCError, RuntimeError):
    """A numerical calculation could not be completed."""


class SolverError(CalculationError):
    """The optimizer reached a degenerate or non-finite state."""


class ValuationError(CalculationError):
    """A product could not be valued against a model or simulation."""


class UnsupportedOperationError(RatesMCError, NotImplementedError):
    """The operation is not available for this model variant."""


class CalibrationError(CalculationError):
    """
    Terminal calibration failure.

    Attributes:
        stage: Which stage failed: "data", "simulation" or "optimizer"
        cause: The underlying exception, if any
    """

    STAGES = ("data", "simulation", "optimizer")

    def __init__(self, message: str, stage: str, cause: Optional[BaseException] = None):
        if stage not in self.STAGES:
            raise ValueError(f"Unknown calibration stage: {stage}")
        super().__init__(f"[{stage}] {message}")
        self.stage = stage
        self.cause = cause


__all__ = [
    "RatesMCError",
    "DataError",
    "DuplicatePointError",
    "InsufficientDataError",
    "CalculationError",
    "SolverError",
    "ValuationError",
    "UnsupportedOperationError",
    "CalibrationError",
]
