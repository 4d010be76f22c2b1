"""
Correlation sub-models of a covariance model.

A correlation model is represented by its factor matrix F (components x
factors) with unit rows, so that F F^T approximates the correlation matrix.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple
import numpy as np

from ..exceptions import DataError
from ..time_discretization import TimeDiscretization


def factor_reduction(correlation: np.ndarray, number_of_factors: int) -> np.ndarray:
    """
    Factor matrix of the leading principal components of a correlation matrix.

    Eigenvectors are scaled by sqrt(eigenvalue), rows renormalised to unit
    length and each column signed so that its sum is non-negative.
    """
    eigenvalues, eigenvectors = np.linalg.eigh(correlation)
    order = np.argsort(eigenvalues)[::-1][:number_of_factors]
    factors = eigenvectors[:, order] * np.sqrt(np.maximum(eigenvalues[order], 0.0))

    signs = np.where(factors.sum(axis=0) < 0, -1.0, 1.0)
    factors = factors * signs

    norms = np.linalg.norm(factors, axis=1)
    norms[norms == 0] = 1.0
    return factors / norms[:, None]


class CorrelationModel(ABC):
    """Instantaneous correlation of the forward rates in factor form."""

    DEFAULT_PARAMETERS: Optional[Tuple[float, ...]] = None

    def __init__(
        self,
        libor_period_discretization: TimeDiscretization,
        number_of_factors: int,
        is_calibrateable: bool = True
    ):
        number_of_components = libor_period_discretization.get_number_of_time_steps()
        if number_of_factors <= 0 or number_of_factors > number_of_components:
            raise DataError(
                f"number_of_factors must be in 1..{number_of_components}, got {number_of_factors}"
            )
        self.libor_period_discretization = libor_period_discretization
        self.number_of_factors = number_of_factors
        self.is_calibrateable = is_calibrateable

    @abstractmethod
    def get_factor_matrix(self) -> np.ndarray:
        """Factor matrix, shape (components, factors)."""

    @abstractmethod
    def _get_raw_parameter(self) -> np.ndarray:
        pass

    @abstractmethod
    def _set_raw_parameter(self, parameter: np.ndarray) -> None:
        pass

    @abstractmethod
    def clone(self) -> "CorrelationModel":
        pass

    def get_factor_loading(self, time_index: int, factor: int, component: int) -> float:
        return float(self.get_factor_matrix()[component, factor])

    def get_correlation(self, time_index: int, i: int, j: int) -> float:
        factors = self.get_factor_matrix()
        return float(factors[i] @ factors[j])

    def get_parameter(self) -> np.ndarray:
        if not self.is_calibrateable:
            return np.zeros(0)
        return self._get_raw_parameter()

    def get_default_parameter(self) -> np.ndarray:
        if not self.is_calibrateable:
            return np.zeros(0)
        if self.DEFAULT_PARAMETERS is None:
            return self._get_raw_parameter()
        return np.array(self.DEFAULT_PARAMETERS, dtype=np.float64)

    def set_parameter(self, parameter: Sequence[float]) -> None:
        parameter = np.asarray(parameter, dtype=np.float64)
        if not self.is_calibrateable:
            if len(parameter) != 0:
                raise DataError("Correlation model is not calibrateable")
            return
        if len(parameter) != len(self._get_raw_parameter()):
            raise DataError(f"Expected {len(self._get_raw_parameter())} parameters, got {len(parameter)}")
        self._set_raw_parameter(parameter)


class ExponentialDecayCorrelation(CorrelationModel):
    """
    rho_ij = exp(-a |T_i - T_j|), reduced to ``number_of_factors`` factors.

    The decay ``a`` is floored at zero when the factor matrix is built.
    """

    DEFAULT_PARAMETERS = (0.10,)

    def __init__(
        self,
        libor_period_discretization: TimeDiscretization,
        number_of_factors: int,
        a: float,
        is_calibrateable: bool = True
    ):
        super().__init__(libor_period_discretization, number_of_factors, is_calibrateable)
        self.a = float(a)
        self._factor_matrix = self._build_factor_matrix()

    def _build_factor_matrix(self) -> np.ndarray:
        starts = self.libor_period_discretization.times[:-1]
        decay = max(self.a, 0.0)
        correlation = np.exp(-decay * np.abs(starts[:, None] - starts[None, :]))
        factors = factor_reduction(correlation, self.number_of_factors)
        factors.setflags(write=False)
        return factors

    def get_factor_matrix(self) -> np.ndarray:
        return self._factor_matrix

    def _get_raw_parameter(self) -> np.ndarray:
        return np.array([self.a])

    def _set_raw_parameter(self, parameter: np.ndarray) -> None:
        self.a = float(parameter[0])
        self._factor_matrix = self._build_factor_matrix()

    def clone(self) -> "ExponentialDecayCorrelation":
        return ExponentialDecayCorrelation(self.libor_period_discretization, self.number_of_factors,
                                           self.a, self.is_calibrateable)

    def __repr__(self) -> str:
        return f"ExponentialDecayCorrelation(a={self.a}, factors={self.number_of_factors})"


__all__ = ["CorrelationModel", "ExponentialDecayCorrelation", "factor_reduction"]
