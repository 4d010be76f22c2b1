"""
Calibration package.

Provides:
- CovarianceModelCalibrator: covariance model to Monte Carlo prices
- Solver: joint curve calibration to analytic products
- CalibratedCurves: curves built and solved from calibration specs
"""

from .covariance_calibration import (
    CalibrationProduct,
    CalibrationProductSet,
    CalibrationStatus,
    CalibrationResult,
    CovarianceCalibrationObjective,
    CovarianceModelCalibrator,
)
from .solver import Solver
from .calibrated_curves import CalibrationSpec, CalibratedCurves

__all__ = [
    "CalibrationProduct",
    "CalibrationProductSet",
    "CalibrationStatus",
    "CalibrationResult",
    "CovarianceCalibrationObjective",
    "CovarianceModelCalibrator",
    "Solver",
    "CalibrationSpec",
    "CalibratedCurves",
]
