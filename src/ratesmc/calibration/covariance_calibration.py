"""
Calibration of a parametric covariance model to Monte Carlo product prices.

Each optimizer trial:
1. Clones the covariance model with the trial parameters
2. Builds a LIBOR market model and an Euler scheme on a noise source whose
   seed is fixed for the whole calibration
3. Values every calibration product on a worker pool created for the trial
4. Returns the weighted residuals sqrt(w) (value - target)

Levenberg-Marquardt (scipy.optimize.least_squares, method="lm") drives the
trials. A numerical failure is retried once from the fallback parameters.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterator, List, Optional, Sequence
import numpy as np
import pandas as pd
from scipy.optimize import least_squares

from ..config import CalibrationSettings
from ..exceptions import CalibrationError, DataError, SolverError, ValuationError
from ..montecarlo.brownian_motion import BrownianMotion, IndependentIncrements
from ..montecarlo.libor_market_model import LIBORMarketModel, LIBORModelMonteCarloSimulation
from ..products.monte_carlo import MonteCarloProduct

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationProduct:
    """A product with its target value and weight."""
    product: MonteCarloProduct
    target_value: float
    weight: float = 1.0


class CalibrationProductSet:
    """Immutable ordered set of calibration products."""

    def __init__(self, items: Sequence[CalibrationProduct]):
        self._items = tuple(items)
        for i, item in enumerate(self._items):
            if not np.isfinite(item.target_value):
                raise DataError(f"Calibration product {i}: target value must be finite")
            if not np.isfinite(item.weight) or item.weight < 0:
                raise DataError(f"Calibration product {i}: weight must be finite and non-negative")

    @classmethod
    def from_lists(
        cls,
        products: Sequence[MonteCarloProduct],
        target_values: Sequence[float],
        weights: Optional[Sequence[float]] = None
    ) -> "CalibrationProductSet":
        if weights is None:
            weights = [1.0] * len(products)
        if not (len(products) == len(target_values) == len(weights)):
            raise DataError(
                f"Products ({len(products)}), target values ({len(target_values)}) and "
                f"weights ({len(weights)}) must have same length"
            )
        return cls([CalibrationProduct(p, float(t), float(w))
                    for p, t, w in zip(products, target_values, weights)])

    @property
    def target_values(self) -> np.ndarray:
        return np.array([item.target_value for item in self._items])

    @property
    def weights(self) -> np.ndarray:
        return np.array([item.weight for item in self._items])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CalibrationProduct]:
        return iter(self._items)

    def __getitem__(self, index: int) -> CalibrationProduct:
        return self._items[index]


class CalibrationStatus(Enum):
    INIT = "init"
    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"
    FAILED = "failed"


@dataclass
class CalibrationResult:
    """Result of a covariance model calibration."""
    model: object
    parameters: np.ndarray
    status: CalibrationStatus
    iterations: int
    residuals: np.ndarray
    model_values: np.ndarray
    target_values: np.ndarray
    used_fallback: bool
    message: str

    @property
    def success(self) -> bool:
        return self.status == CalibrationStatus.CONVERGED

    def to_frame(self) -> pd.DataFrame:
        """Per-product diagnostics."""
        return pd.DataFrame({
            'product': np.arange(len(self.target_values)),
            'target': self.target_values,
            'model': self.model_values,
            'residual': self.residuals,
        })


class CovarianceCalibrationObjective:
    """
    Objective of the calibration: product values for a parameter vector.

    Attributes:
        covariance_model: Model being calibrated (never mutated)
        calibration_model: LIBOR market model providing curve and tenor
        products: Calibration products
        brownian_motion: Noise source shared by all trials
        number_of_threads: Worker pool size per trial
        evaluation_time: Valuation time of the products
    """

    def __init__(
        self,
        covariance_model,
        calibration_model: LIBORMarketModel,
        products: CalibrationProductSet,
        brownian_motion: IndependentIncrements,
        number_of_threads: int,
        evaluation_time: float = 0.0
    ):
        self.covariance_model = covariance_model
        self.calibration_model = calibration_model
        self.products = products
        self.brownian_motion = brownian_motion
        self.number_of_threads = number_of_threads
        self.evaluation_time = evaluation_time
        self.number_of_evaluations = 0

    def build_simulation(self, parameters: Sequence[float]) -> LIBORModelMonteCarloSimulation:
        covariance_model = self.covariance_model.get_clone_with_modified_parameters(parameters)
        model = self.calibration_model.get_clone_with_modified_covariance_model(covariance_model)
        return LIBORModelMonteCarloSimulation.create(model, self.brownian_motion)

    def values(self, parameters: Sequence[float]) -> np.ndarray:
        """Values of all products; ValuationError if any valuation fails."""
        simulation = self.build_simulation(parameters)
        values = np.empty(len(self.products))

        executor = ThreadPoolExecutor(max_workers=self.number_of_threads)
        try:
            futures = [
                executor.submit(item.product.get_value, self.evaluation_time, simulation)
                for item in self.products
            ]
            for i, future in enumerate(futures):
                try:
                    values[i] = future.result()
                except Exception as e:
                    raise ValuationError(f"Valuation of calibration product {i} failed: {e}") from e
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        self.number_of_evaluations += 1
        return values

    def residuals(self, parameters: Sequence[float]) -> np.ndarray:
        values = self.values(parameters)
        residuals = np.sqrt(self.products.weights) * (values - self.products.target_values)
        if not np.all(np.isfinite(residuals)):
            raise SolverError(f"Non-finite residuals for parameters {np.asarray(parameters).tolist()}")
        logger.debug("Trial %d: rms residual %.3e", self.number_of_evaluations,
                     float(np.sqrt(np.mean(residuals ** 2))))
        return residuals


class CovarianceModelCalibrator:
    """
    Levenberg-Marquardt calibration of a covariance model.

    The noise source is created once from the simulation settings so that
    repeated evaluations at the same parameters are bit-identical.
    """

    def __init__(
        self,
        covariance_model,
        calibration_model: LIBORMarketModel,
        calibration_products: CalibrationProductSet,
        settings: Optional[CalibrationSettings] = None
    ):
        self.covariance_model = covariance_model
        self.calibration_model = calibration_model
        self.calibration_products = calibration_products
        self.settings = settings or CalibrationSettings()

        self.initial_parameters = covariance_model.get_parameter()
        self.brownian_motion = BrownianMotion(
            covariance_model.get_time_discretization(),
            covariance_model.get_number_of_factors(),
            self.settings.simulation.number_of_paths,
            self.settings.simulation.seed,
        )
        self.objective = CovarianceCalibrationObjective(
            covariance_model,
            calibration_model,
            calibration_products,
            self.brownian_motion,
            self.settings.resolved_number_of_threads,
        )
        self.status = CalibrationStatus.INIT
        self.last_number_of_iterations = 0

    def get_last_number_of_iterations(self) -> int:
        """
        Objective evaluations of the last calibration.

        Counts every trial valuation, including those spent on the
        finite-difference Jacobian, so it exceeds the number of
        Levenberg-Marquardt steps.
        """
        return self.last_number_of_iterations

    def _validate(self, initial_parameters: np.ndarray) -> None:
        if len(self.calibration_products) == 0:
            raise CalibrationError("No calibration products", stage="data")
        if len(initial_parameters) == 0:
            raise CalibrationError("Covariance model has no calibrateable parameters", stage="data")
        if len(initial_parameters) != len(self.initial_parameters):
            raise CalibrationError(
                f"Expected {len(self.initial_parameters)} initial parameters, got {len(initial_parameters)}",
                stage="data",
            )
        if len(self.calibration_products) < len(initial_parameters):
            raise CalibrationError(
                f"{len(self.calibration_products)} products cannot determine "
                f"{len(initial_parameters)} parameters",
                stage="data",
            )
        if not np.all(np.isfinite(initial_parameters)):
            raise CalibrationError("Initial parameters must be finite", stage="data")

    def _run_optimizer(self, initial_parameters: np.ndarray):
        result = least_squares(
            self.objective.residuals,
            initial_parameters,
            method="lm",
            xtol=self.settings.parameter_tolerance,
            ftol=self.settings.residual_tolerance,
            max_nfev=self.settings.max_iterations,
        )
        if result.status == -1:
            raise SolverError(f"Optimizer failed: {result.message}")
        return result

    def _fallback_parameters(self) -> np.ndarray:
        if self.settings.fallback_parameters is not None:
            return np.asarray(self.settings.fallback_parameters, dtype=np.float64)
        return self.covariance_model.get_default_parameter()

    def calibrate(self, initial_parameters: Optional[Sequence[float]] = None) -> CalibrationResult:
        """
        Calibrate the covariance model.

        Args:
            initial_parameters: Starting point (default: the model's parameters)

        Returns:
            CalibrationResult with the calibrated clone

        Raises:
            CalibrationError: With stage "data", "simulation" or "optimizer"
        """
        if initial_parameters is None:
            initial_parameters = self.initial_parameters
        initial_parameters = np.asarray(initial_parameters, dtype=np.float64)
        self._validate(initial_parameters)

        logger.info("Calibrating %d parameters to %d products",
                    len(initial_parameters), len(self.calibration_products))

        used_fallback = False
        try:
            result = self._attempt(initial_parameters)
        except (SolverError, np.linalg.LinAlgError, ValueError) as e:
            fallback_parameters = self._fallback_parameters()
            if np.array_equal(fallback_parameters, initial_parameters):
                self.status = CalibrationStatus.FAILED
                raise CalibrationError(
                    f"Optimizer failed ({e}) and the fallback parameters {fallback_parameters.tolist()} "
                    f"equal the failed starting point",
                    stage="optimizer", cause=e,
                ) from e
            logger.warning("Calibration attempt failed (%s), retrying from fallback parameters", e)
            used_fallback = True
            try:
                result = self._attempt(fallback_parameters)
            except (SolverError, np.linalg.LinAlgError, ValueError) as e2:
                self.status = CalibrationStatus.FAILED
                raise CalibrationError(f"Optimizer failed after retry: {e2}", stage="optimizer", cause=e2) from e2

        self.last_number_of_iterations = int(result.nfev)
        self.status = CalibrationStatus.CONVERGED if result.status > 0 else CalibrationStatus.MAX_ITERATIONS
        if self.status == CalibrationStatus.MAX_ITERATIONS:
            logger.warning("Calibration stopped after reaching %d evaluations", self.settings.max_iterations)

        parameters = np.asarray(result.x, dtype=np.float64)
        calibrated_model = self.covariance_model.get_clone_with_modified_parameters(parameters)
        weights = np.sqrt(self.calibration_products.weights)
        target_values = self.calibration_products.target_values
        with np.errstate(divide="ignore", invalid="ignore"):
            model_values = np.where(weights > 0, result.fun / weights + target_values, np.nan)

        logger.info("Calibration finished with status %s after %d evaluations",
                    self.status.name, self.last_number_of_iterations)

        return CalibrationResult(
            model=calibrated_model,
            parameters=parameters,
            status=self.status,
            iterations=self.last_number_of_iterations,
            residuals=np.asarray(result.fun, dtype=np.float64),
            model_values=model_values,
            target_values=target_values,
            used_fallback=used_fallback,
            message=result.message,
        )

    def _attempt(self, initial_parameters: np.ndarray):
        """One optimizer run; stage-specific failures are raised as CalibrationError."""
        try:
            return self._run_optimizer(initial_parameters)
        except ValuationError as e:
            self.status = CalibrationStatus.FAILED
            raise CalibrationError(str(e), stage="simulation", cause=e) from e
        except DataError as e:
            self.status = CalibrationStatus.FAILED
            raise CalibrationError(str(e), stage="data", cause=e) from e


__all__ = [
    "CalibrationProduct",
    "CalibrationProductSet",
    "CalibrationStatus",
    "CalibrationResult",
    "CovarianceCalibrationObjective",
    "CovarianceModelCalibrator",
]
