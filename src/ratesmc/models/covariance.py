"""
Parametric covariance models of forward rates.

A covariance model gives the factor loadings lambda_i(t) of each forward
rate i, so that the instantaneous covariance of rates i and j is
lambda_i(t) . lambda_j(t). Calibrateable models expose a flat parameter
vector; calibration works on clones with modified parameters.

Provides:
- CovarianceModelParametric: the common contract
- CovarianceModelFromVolatilityAndCorrelation: sigma_i(t) f_ik from two sub-models
- CovarianceModelExponentialForm5Param: closed five-parameter form
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
import numpy as np

from ..exceptions import DataError, UnsupportedOperationError
from ..time_discretization import TimeDiscretization
from .correlation import CorrelationModel, ExponentialDecayCorrelation
from .parameters import concatenate_parameters, split_parameters
from .volatility import FourParameterExponentialVolatility, VolatilityModel


class CovarianceModelParametric(ABC):
    """
    Covariance model with a calibrateable parameter vector.

    Attributes:
        time_discretization: Simulation times
        libor_period_discretization: Tenor times of the forward rates
        number_of_factors: Number of driving factors
    """

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        libor_period_discretization: TimeDiscretization,
        number_of_factors: int
    ):
        self.time_discretization = time_discretization
        self.libor_period_discretization = libor_period_discretization
        self.number_of_factors = number_of_factors

    def get_time_discretization(self) -> TimeDiscretization:
        return self.time_discretization

    def get_libor_period_discretization(self) -> TimeDiscretization:
        return self.libor_period_discretization

    def get_number_of_factors(self) -> int:
        return self.number_of_factors

    def get_number_of_components(self) -> int:
        return self.libor_period_discretization.get_number_of_time_steps()

    @abstractmethod
    def get_factor_loading(
        self,
        time_index: int,
        component: int,
        realization: Optional[np.ndarray] = None
    ) -> np.ndarray:
        """Loadings of ``component``, shape (factors,) or (factors, paths)."""

    @abstractmethod
    def get_parameter(self) -> np.ndarray:
        pass

    @abstractmethod
    def set_parameter(self, parameter: Sequence[float]) -> None:
        pass

    def get_default_parameter(self) -> np.ndarray:
        """
        Fixed starting point used when a calibration has to be restarted.

        Models without a documented default return their current parameters.
        """
        return self.get_parameter()

    @abstractmethod
    def clone(self) -> "CovarianceModelParametric":
        pass

    def get_factor_loading_pseudo_inverse(
        self,
        time_index: int,
        component: int,
        factor: int,
        realization: Optional[np.ndarray] = None
    ) -> float:
        """Element (factor, component) of the Moore-Penrose inverse of the loading matrix."""
        loadings = np.array([
            np.asarray(self.get_factor_loading(time_index, i, realization))
            for i in range(self.get_number_of_components())
        ])
        if loadings.ndim != 2:
            raise UnsupportedOperationError("Pseudo inverse requires deterministic factor loadings")
        return float(np.linalg.pinv(loadings)[factor, component])

    def get_covariance(
        self,
        time_index: int,
        component1: int,
        component2: int,
        realization: Optional[np.ndarray] = None
    ) -> np.ndarray:
        loading1 = np.asarray(self.get_factor_loading(time_index, component1, realization))
        loading2 = np.asarray(self.get_factor_loading(time_index, component2, realization))
        return (loading1 * loading2).sum(axis=0)

    def get_clone_with_modified_parameters(self, parameters: Sequence[float]) -> "CovarianceModelParametric":
        """Independent copy carrying ``parameters``; this model is unchanged."""
        new_model = self.clone()
        new_model.set_parameter(parameters)
        return new_model

    def is_calibrateable(self) -> bool:
        return len(self.get_parameter()) > 0

    def get_clone_calibrated(
        self,
        calibration_model,
        calibration_products: Sequence,
        calibration_target_values: Sequence[float],
        calibration_weights: Optional[Sequence[float]] = None,
        settings=None
    ) -> "CovarianceModelParametric":
        """
        Calibrated copy of this model.

        Args:
            calibration_model: LIBORMarketModel providing curve and tenor
            calibration_products: Monte Carlo products
            calibration_target_values: Target values of the products
            calibration_weights: Weights (default 1)
            settings: CalibrationSettings

        Returns:
            Calibrated clone; raises CalibrationError on failure
        """
        from ..calibration.covariance_calibration import (
            CalibrationProductSet,
            CovarianceModelCalibrator,
        )

        products = CalibrationProductSet.from_lists(
            calibration_products, calibration_target_values, calibration_weights
        )
        calibrator = CovarianceModelCalibrator(self, calibration_model, products, settings)
        return calibrator.calibrate().model


class CovarianceModelFromVolatilityAndCorrelation(CovarianceModelParametric):
    """
    lambda_ik(t) = sigma_i(t) f_ik.

    Parameter vector is [volatility parameters..., correlation parameters...].
    """

    def __init__(self, volatility_model: VolatilityModel, correlation_model: CorrelationModel):
        if volatility_model.libor_period_discretization != correlation_model.libor_period_discretization:
            raise DataError("Volatility and correlation model must share the LIBOR period discretization")
        super().__init__(volatility_model.time_discretization,
                         volatility_model.libor_period_discretization,
                         correlation_model.number_of_factors)
        self.volatility_model = volatility_model
        self.correlation_model = correlation_model

    def get_factor_loading(
        self,
        time_index: int,
        component: int,
        realization: Optional[np.ndarray] = None
    ) -> np.ndarray:
        volatility = self.volatility_model.get_volatility(time_index, component)
        return volatility * self.correlation_model.get_factor_matrix()[component]

    def get_parameter(self) -> np.ndarray:
        return concatenate_parameters(self.volatility_model.get_parameter(),
                                      self.correlation_model.get_parameter())

    def get_default_parameter(self) -> np.ndarray:
        return concatenate_parameters(self.volatility_model.get_default_parameter(),
                                      self.correlation_model.get_default_parameter())

    def set_parameter(self, parameter: Sequence[float]) -> None:
        volatility_parameter, correlation_parameter = split_parameters(
            parameter,
            [len(self.volatility_model.get_parameter()), len(self.correlation_model.get_parameter())],
        )
        self.volatility_model.set_parameter(volatility_parameter)
        self.correlation_model.set_parameter(correlation_parameter)

    def clone(self) -> "CovarianceModelFromVolatilityAndCorrelation":
        return CovarianceModelFromVolatilityAndCorrelation(self.volatility_model.clone(),
                                                           self.correlation_model.clone())

    def __repr__(self) -> str:
        return (f"CovarianceModelFromVolatilityAndCorrelation({self.volatility_model!r}, "
                f"{self.correlation_model!r})")


class CovarianceModelExponentialForm5Param(CovarianceModelParametric):
    """
    sigma_i(t) = (a + b tau) exp(-c tau) + d,  rho_ij = exp(-e |T_i - T_j|).

    Parameters [a, b, c, d, e]; ``e`` is clamped at zero on a copy.
    """

    DEFAULT_PARAMETERS = (0.20, 0.05, 0.10, 0.20, 0.10)

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        libor_period_discretization: TimeDiscretization,
        number_of_factors: int,
        parameters: Optional[Sequence[float]] = None
    ):
        super().__init__(time_discretization, libor_period_discretization, number_of_factors)
        if parameters is None:
            parameters = self.DEFAULT_PARAMETERS
        self.set_parameter(parameters)

    def set_parameter(self, parameter: Sequence[float]) -> None:
        parameter = np.array(parameter, dtype=np.float64)
        if len(parameter) != 5:
            raise DataError(f"Expected 5 parameters, got {len(parameter)}")
        parameter[4] = max(parameter[4], 0.0)
        self._parameters = parameter

        a, b, c, d, e = parameter
        self._volatility_model = FourParameterExponentialVolatility(
            self.time_discretization, self.libor_period_discretization, a, b, c, d, is_calibrateable=False
        )
        self._correlation_model = ExponentialDecayCorrelation(
            self.libor_period_discretization, self.number_of_factors, e, is_calibrateable=False
        )

    def get_parameter(self) -> np.ndarray:
        return self._parameters.copy()

    def get_default_parameter(self) -> np.ndarray:
        return np.array(self.DEFAULT_PARAMETERS, dtype=np.float64)

    def get_factor_loading(
        self,
        time_index: int,
        component: int,
        realization: Optional[np.ndarray] = None
    ) -> np.ndarray:
        volatility = self._volatility_model.get_volatility(time_index, component)
        return volatility * self._correlation_model.get_factor_matrix()[component]

    def get_factor_loading_pseudo_inverse(self, time_index, component, factor, realization=None):
        raise UnsupportedOperationError(
            "CovarianceModelExponentialForm5Param does not provide a factor loading pseudo inverse"
        )

    def clone(self) -> "CovarianceModelExponentialForm5Param":
        return CovarianceModelExponentialForm5Param(self.time_discretization, self.libor_period_discretization,
                                                    self.number_of_factors, self._parameters)

    def __repr__(self) -> str:
        return f"CovarianceModelExponentialForm5Param(parameters={self._parameters.tolist()})"


__all__ = [
    "CovarianceModelParametric",
    "CovarianceModelFromVolatilityAndCorrelation",
    "CovarianceModelExponentialForm5Param",
]
