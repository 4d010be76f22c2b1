"""
Stochastic volatility decorator of a covariance model.

The loadings of a base model are scaled path by path with

    lambda(t) = exp(-0.5 nu^2 t + nu (rho W_1(t) + sqrt(1 - rho^2) W_2(t)))

simulated by an Euler scheme on the first two factors of a noise source.
With nu = 0 the scaling is exactly one and the base loadings are returned
unchanged.
"""

import logging
from typing import Optional, Sequence
import numpy as np

from ..cache import CachedValue
from ..exceptions import DataError, UnsupportedOperationError
from ..montecarlo.brownian_motion import IndependentIncrements
from ..montecarlo.process import EulerSchemeProcess, ProcessModel
from ..time_discretization import TimeDiscretization
from .covariance import CovarianceModelParametric
from .parameters import concatenate_parameters, split_parameters

logger = logging.getLogger(__name__)


class _VolatilityScalingModel(ProcessModel):
    """Log of the volatility scaling as a one component, two factor process."""

    def __init__(self, time_discretization: TimeDiscretization, nu: float, rho: float):
        self.time_discretization = time_discretization
        self.nu = nu
        self.rho = float(np.clip(rho, -1.0, 1.0))

    def get_time_discretization(self) -> TimeDiscretization:
        return self.time_discretization

    def get_number_of_components(self) -> int:
        return 1

    def get_number_of_factors(self) -> int:
        return 2

    def get_initial_state(self) -> np.ndarray:
        return np.zeros(1)

    def get_drift(self, time_index: int, realization: np.ndarray) -> np.ndarray:
        return np.array([[-0.5 * self.nu * self.nu]])

    def get_factor_loading(self, time_index: int, component: int, realization: np.ndarray) -> np.ndarray:
        return np.array([self.rho * self.nu, np.sqrt(1.0 - self.rho * self.rho) * self.nu])

    def apply_state_space_transform(self, component: int, value: np.ndarray) -> np.ndarray:
        return np.exp(value)


class StochasticVolatilityCovarianceModel(CovarianceModelParametric):
    """
    Base covariance model with path-wise stochastic volatility scaling.

    Attributes:
        base_model: Owned covariance model being scaled
        brownian_motion: Noise source of the scaling process
        nu: Volatility of volatility
        rho: Correlation of the two scaling factors
        calibrate_stochastic_volatility: Whether nu and rho are part of the
            parameter vector; if not, the vector is the base model's
    """

    def __init__(
        self,
        base_model: CovarianceModelParametric,
        brownian_motion: IndependentIncrements,
        nu: float,
        rho: float,
        is_calibrateable: bool = False
    ):
        if brownian_motion.get_time_discretization() != base_model.get_time_discretization():
            raise DataError("Noise source and covariance model must share the time discretization")
        if brownian_motion.get_number_of_factors() < 2:
            raise DataError("Stochastic volatility requires a noise source with at least two factors")
        super().__init__(base_model.get_time_discretization(),
                         base_model.get_libor_period_discretization(),
                         base_model.get_number_of_factors())
        self.base_model = base_model
        self.brownian_motion = brownian_motion
        self.nu = float(nu)
        self.rho = float(rho)
        self.calibrate_stochastic_volatility = is_calibrateable
        self._scaling: CachedValue[EulerSchemeProcess] = CachedValue()

    def _build_scaling(self) -> EulerSchemeProcess:
        logger.debug("Building volatility scaling process with nu=%s, rho=%s", self.nu, self.rho)
        model = _VolatilityScalingModel(self.time_discretization, self.nu, self.rho)
        return EulerSchemeProcess(self.brownian_motion, model)

    def get_volatility_scaling(self, time_index: int) -> np.ndarray:
        """Scaling lambda(t) per path, shape (paths,)."""
        return self._scaling.get_or_build(self._build_scaling).get_process_value(time_index, 0)

    def get_factor_loading(
        self,
        time_index: int,
        component: int,
        realization: Optional[np.ndarray] = None
    ) -> np.ndarray:
        loading = np.asarray(self.base_model.get_factor_loading(time_index, component, realization))
        if loading.ndim == 1:
            loading = loading[:, None]
        return loading * self.get_volatility_scaling(time_index)

    def get_factor_loading_pseudo_inverse(self, time_index, component, factor, realization=None):
        raise UnsupportedOperationError(
            "StochasticVolatilityCovarianceModel does not provide a factor loading pseudo inverse"
        )

    def get_parameter(self) -> np.ndarray:
        if not self.calibrate_stochastic_volatility:
            return self.base_model.get_parameter()
        return concatenate_parameters(self.base_model.get_parameter(), [self.nu, self.rho])

    def get_default_parameter(self) -> np.ndarray:
        if not self.calibrate_stochastic_volatility:
            return self.base_model.get_default_parameter()
        return concatenate_parameters(self.base_model.get_default_parameter(), [0.0, 0.0])

    def set_parameter(self, parameter: Sequence[float]) -> None:
        parameter = np.asarray(parameter, dtype=np.float64)
        if not self.calibrate_stochastic_volatility:
            self.base_model.set_parameter(parameter)
            return

        base_length = len(self.base_model.get_parameter())
        if len(parameter) != base_length + 2:
            raise DataError(f"Expected {base_length + 2} parameters, got {len(parameter)}")
        base_parameter, own_parameter = split_parameters(parameter, [base_length, 2])
        self.base_model.set_parameter(base_parameter)
        nu, rho = float(own_parameter[0]), float(own_parameter[1])
        if nu != self.nu or rho != self.rho:
            self.nu, self.rho = nu, rho
            self._scaling.invalidate()

    def clone(self) -> "StochasticVolatilityCovarianceModel":
        return StochasticVolatilityCovarianceModel(self.base_model.clone(), self.brownian_motion,
                                                   self.nu, self.rho, self.calibrate_stochastic_volatility)

    def __repr__(self) -> str:
        return (f"StochasticVolatilityCovarianceModel(base={self.base_model!r}, "
                f"nu={self.nu}, rho={self.rho})")


__all__ = ["StochasticVolatilityCovarianceModel"]
