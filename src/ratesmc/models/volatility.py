"""
Volatility sub-models of a covariance model.

A volatility model gives sigma_i(t), the instantaneous volatility of the
forward rate i at simulation time t.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple
import numpy as np

from ..exceptions import DataError
from ..time_discretization import TimeDiscretization


class VolatilityModel(ABC):
    """Instantaneous volatility per simulation time index and rate index."""

    DEFAULT_PARAMETERS: Optional[Tuple[float, ...]] = None

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        libor_period_discretization: TimeDiscretization,
        is_calibrateable: bool = True
    ):
        self.time_discretization = time_discretization
        self.libor_period_discretization = libor_period_discretization
        self.is_calibrateable = is_calibrateable

    @abstractmethod
    def get_volatility(self, time_index: int, libor_index: int) -> float:
        pass

    @abstractmethod
    def _get_raw_parameter(self) -> np.ndarray:
        pass

    @abstractmethod
    def _set_raw_parameter(self, parameter: np.ndarray) -> None:
        pass

    @abstractmethod
    def clone(self) -> "VolatilityModel":
        pass

    def get_parameter(self) -> np.ndarray:
        """Calibrateable parameters; empty if the model is held fixed."""
        if not self.is_calibrateable:
            return np.zeros(0)
        return self._get_raw_parameter()

    def get_default_parameter(self) -> np.ndarray:
        """Documented starting point of the calibrateable parameters."""
        if not self.is_calibrateable:
            return np.zeros(0)
        if self.DEFAULT_PARAMETERS is None:
            return self._get_raw_parameter()
        return np.array(self.DEFAULT_PARAMETERS, dtype=np.float64)

    def set_parameter(self, parameter: Sequence[float]) -> None:
        parameter = np.asarray(parameter, dtype=np.float64)
        if not self.is_calibrateable:
            if len(parameter) != 0:
                raise DataError("Volatility model is not calibrateable")
            return
        if len(parameter) != len(self._get_raw_parameter()):
            raise DataError(f"Expected {len(self._get_raw_parameter())} parameters, got {len(parameter)}")
        self._set_raw_parameter(parameter)

    def _time_to_maturity(self, time_index: int, libor_index: int) -> float:
        return (self.libor_period_discretization.get_time(libor_index)
                - self.time_discretization.get_time(time_index))


class FourParameterExponentialVolatility(VolatilityModel):
    """
    sigma_i(t) = (a + b tau) exp(-c tau) + d with tau = T_i - t.

    Zero once the rate has fixed (tau <= 0); floored at zero.
    """

    DEFAULT_PARAMETERS = (0.20, 0.05, 0.10, 0.20)

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        libor_period_discretization: TimeDiscretization,
        a: float,
        b: float,
        c: float,
        d: float,
        is_calibrateable: bool = True
    ):
        super().__init__(time_discretization, libor_period_discretization, is_calibrateable)
        self.a, self.b, self.c, self.d = float(a), float(b), float(c), float(d)

    def get_volatility(self, time_index: int, libor_index: int) -> float:
        tau = self._time_to_maturity(time_index, libor_index)
        if tau <= 0:
            return 0.0
        return max((self.a + self.b * tau) * np.exp(-self.c * tau) + self.d, 0.0)

    def _get_raw_parameter(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c, self.d])

    def _set_raw_parameter(self, parameter: np.ndarray) -> None:
        self.a, self.b, self.c, self.d = (float(x) for x in parameter)

    def clone(self) -> "FourParameterExponentialVolatility":
        return FourParameterExponentialVolatility(
            self.time_discretization, self.libor_period_discretization,
            self.a, self.b, self.c, self.d, self.is_calibrateable
        )

    def __repr__(self) -> str:
        return f"FourParameterExponentialVolatility(a={self.a}, b={self.b}, c={self.c}, d={self.d})"


class ConstantVolatility(VolatilityModel):
    """Same volatility for every live rate."""

    DEFAULT_PARAMETERS = (0.20,)

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        libor_period_discretization: TimeDiscretization,
        value: float,
        is_calibrateable: bool = True
    ):
        super().__init__(time_discretization, libor_period_discretization, is_calibrateable)
        self.value = float(value)

    def get_volatility(self, time_index: int, libor_index: int) -> float:
        if self._time_to_maturity(time_index, libor_index) <= 0:
            return 0.0
        return max(self.value, 0.0)

    def _get_raw_parameter(self) -> np.ndarray:
        return np.array([self.value])

    def _set_raw_parameter(self, parameter: np.ndarray) -> None:
        self.value = float(parameter[0])

    def clone(self) -> "ConstantVolatility":
        return ConstantVolatility(self.time_discretization, self.libor_period_discretization,
                                  self.value, self.is_calibrateable)


__all__ = ["VolatilityModel", "FourParameterExponentialVolatility", "ConstantVolatility"]
