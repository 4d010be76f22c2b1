"""
Multi-curve solver.

Finds the point values of a set of curves such that a list of analytic
products reprices to their target values, by Levenberg-Marquardt on the
joint parameter vector of all curves.
"""

import logging
from typing import List, Optional, Sequence
import numpy as np
from scipy.optimize import least_squares

from ..config import CurveCalibrationSettings
from ..curves.curve import AbstractCurve
from ..exceptions import CalibrationError, DataError
from ..market_state import MarketState
from ..products.analytic import AnalyticProduct

logger = logging.getLogger(__name__)

# Residual assigned to trials whose parameters the curves reject
PENALTY_RESIDUAL = 1e10


class Solver:
    """
    Curve calibration solver.

    Attributes:
        model: MarketState holding all curves (not mutated)
        products: Calibration products
        target_values: Target value per product
        settings: Iteration limit and tolerance
        iterations: Objective evaluations of the last solve
        accuracy: Largest absolute residual of the last solve
    """

    def __init__(
        self,
        model: MarketState,
        products: Sequence[AnalyticProduct],
        target_values: Optional[Sequence[float]] = None,
        settings: Optional[CurveCalibrationSettings] = None,
        evaluation_time: float = 0.0
    ):
        if target_values is None:
            target_values = [0.0] * len(products)
        if len(products) != len(target_values):
            raise DataError("Products and target values must have same length")

        self.model = model
        self.products = list(products)
        self.target_values = np.asarray(target_values, dtype=np.float64)
        self.settings = settings or CurveCalibrationSettings()
        self.evaluation_time = evaluation_time
        self.iterations = 0
        self.accuracy = np.inf

    def _residuals(self, curves: List[AbstractCurve], parameters: np.ndarray) -> np.ndarray:
        try:
            trial_model = self.model.get_clone_for_parameter(curves, parameters)
        except DataError:
            return np.full(len(self.products), PENALTY_RESIDUAL)

        values = np.array([p.get_value(self.evaluation_time, trial_model) for p in self.products])
        return values - self.target_values

    def get_calibrated_model(self, curves_to_calibrate: Sequence[AbstractCurve]) -> MarketState:
        """
        Solve for the parameters of ``curves_to_calibrate``.

        Args:
            curves_to_calibrate: Curves of the model whose points are free

        Returns:
            New MarketState holding calibrated clones of the curves

        Raises:
            CalibrationError: If the optimizer fails
        """
        curves = list(curves_to_calibrate)
        initial_parameters = np.concatenate([c.get_parameter() for c in curves]) if curves else np.zeros(0)
        if len(initial_parameters) == 0:
            raise CalibrationError("No curve parameters to calibrate", stage="data")
        if len(self.products) < len(initial_parameters):
            raise CalibrationError(
                f"{len(self.products)} products cannot determine {len(initial_parameters)} curve points",
                stage="data",
            )

        logger.info("Solving %d curve points across %d curves", len(initial_parameters), len(curves))
        try:
            result = least_squares(
                lambda p: self._residuals(curves, p),
                initial_parameters,
                method="lm",
                xtol=self.settings.tolerance,
                ftol=self.settings.tolerance,
                max_nfev=self.settings.max_iterations,
            )
        except (ValueError, np.linalg.LinAlgError) as e:
            raise CalibrationError(f"Curve solver failed: {e}", stage="optimizer", cause=e) from e

        if result.status == -1:
            raise CalibrationError(f"Curve solver failed: {result.message}", stage="optimizer")

        if result.status == 0:
            logger.warning("Curve solver stopped after reaching %d evaluations", self.settings.max_iterations)
        self.iterations = int(result.nfev)
        self.accuracy = float(np.max(np.abs(result.fun)))
        logger.info("Curve solver finished after %d evaluations, accuracy %.2e",
                    self.iterations, self.accuracy)

        return self.model.get_clone_for_parameter(curves, result.x)


__all__ = ["Solver", "PENALTY_RESIDUAL"]
