"""
LIBOR market model under the spot measure and its Monte Carlo simulation.

The model state is log L_i for the forward rates L_i over the periods
[T_i, T_{i+1}] of the LIBOR period discretization. For a live rate
(T_i > t) the log drift is

    mu_i = lambda_i . sum_{j=m(t)}^{i} delta_j L_j lambda_j / (1 + delta_j L_j)
           - 0.5 |lambda_i|^2

with m(t) the first live rate; fixed rates have zero drift and zero
loading. The numeraire is the rolled spot account
N(T_k) = prod_{j<k} (1 + delta_j L_j(T_j)).
"""

from typing import Optional
import numpy as np

from ..curves.discount import DiscountCurve
from ..exceptions import DataError, ValuationError
from ..time_discretization import TIME_TOLERANCE, TimeDiscretization
from .process import EulerSchemeProcess, ProcessModel


class LIBORMarketModel(ProcessModel):
    """
    Log-normal forward rate model driven by a parametric covariance model.

    Attributes:
        libor_period_discretization: Tenor times T_0 < ... < T_N
        discount_curve: Curve giving the initial forward rates
        covariance_model: Factor loadings of the rates
    """

    def __init__(
        self,
        libor_period_discretization: TimeDiscretization,
        discount_curve: DiscountCurve,
        covariance_model
    ):
        if libor_period_discretization.get_number_of_times() < 2:
            raise DataError("LIBOR period discretization requires at least two times")
        time_discretization = covariance_model.get_time_discretization()
        if abs(time_discretization.get_time(0) - libor_period_discretization.get_time(0)) > TIME_TOLERANCE:
            raise DataError("Simulation and LIBOR period discretization must start at the same time")

        self.libor_period_discretization = libor_period_discretization
        self.discount_curve = discount_curve
        self.covariance_model = covariance_model

        tenor = libor_period_discretization.times
        self._period_lengths = np.diff(tenor)
        discount_factors = np.array([discount_curve.get_discount_factor(float(t)) for t in tenor])
        self._initial_forwards = (discount_factors[:-1] / discount_factors[1:] - 1.0) / self._period_lengths
        if np.any(self._initial_forwards <= 0):
            raise DataError("Log-normal LIBOR market model requires positive initial forward rates")

    def get_time_discretization(self) -> TimeDiscretization:
        return self.covariance_model.get_time_discretization()

    def get_libor_period_discretization(self) -> TimeDiscretization:
        return self.libor_period_discretization

    def get_number_of_components(self) -> int:
        return self.libor_period_discretization.get_number_of_time_steps()

    def get_number_of_factors(self) -> int:
        return self.covariance_model.get_number_of_factors()

    def get_period_length(self, libor_index: int) -> float:
        return float(self._period_lengths[libor_index])

    def get_initial_forwards(self) -> np.ndarray:
        return self._initial_forwards.copy()

    def get_initial_state(self) -> np.ndarray:
        return np.log(self._initial_forwards)

    def apply_state_space_transform(self, component: int, value: np.ndarray) -> np.ndarray:
        return np.exp(value)

    def _first_live_index(self, time_index: int) -> int:
        time = self.get_time_discretization().get_time(time_index)
        return int(np.searchsorted(self.libor_period_discretization.times, time + TIME_TOLERANCE, side="right"))

    def get_factor_loading(
        self,
        time_index: int,
        component: int,
        realization: Optional[np.ndarray] = None
    ) -> np.ndarray:
        if component < self._first_live_index(time_index):
            return np.zeros(self.get_number_of_factors())
        return np.asarray(self.covariance_model.get_factor_loading(time_index, component, realization))

    def get_drift(self, time_index: int, realization: np.ndarray) -> np.ndarray:
        number_of_components = self.get_number_of_components()
        drift = np.zeros((number_of_components, realization.shape[1]))
        accumulated = 0.0

        for i in range(self._first_live_index(time_index), number_of_components):
            loading = self.get_factor_loading(time_index, i, realization)
            if loading.ndim == 1:
                loading = loading[:, None]
            delta_libor = self._period_lengths[i] * realization[i]
            accumulated = accumulated + loading * (delta_libor / (1.0 + delta_libor))
            drift[i] = (loading * accumulated).sum(axis=0) - 0.5 * (loading * loading).sum(axis=0)

        return drift

    def get_clone_with_modified_covariance_model(self, covariance_model) -> "LIBORMarketModel":
        return LIBORMarketModel(self.libor_period_discretization, self.discount_curve, covariance_model)

    def __repr__(self) -> str:
        return (f"LIBORMarketModel(periods={self.get_number_of_components()}, "
                f"factors={self.get_number_of_factors()})")


class LIBORModelMonteCarloSimulation:
    """
    Paths of a LIBOR market model.

    Attributes:
        model: The LIBORMarketModel
        process: The EulerSchemeProcess simulating it
    """

    def __init__(self, model: LIBORMarketModel, process: EulerSchemeProcess):
        if process.model is not model:
            raise DataError("Process must simulate the given model")
        self.model = model
        self.process = process

    @classmethod
    def create(cls, model: LIBORMarketModel, brownian_motion) -> "LIBORModelMonteCarloSimulation":
        return cls(model, EulerSchemeProcess(brownian_motion, model))

    def get_time_discretization(self) -> TimeDiscretization:
        return self.model.get_time_discretization()

    def get_libor_period_discretization(self) -> TimeDiscretization:
        return self.model.get_libor_period_discretization()

    def get_number_of_paths(self) -> int:
        return self.process.get_number_of_paths()

    def get_time_index(self, time: float) -> int:
        """Simulation time index of ``time``; ValuationError if not on the grid."""
        time_index = self.get_time_discretization().get_time_index(time)
        if time_index < 0:
            raise ValuationError(f"Time {time} is not part of the simulation time discretization")
        return time_index

    def get_libor(self, time_index: int, libor_index: int) -> np.ndarray:
        if libor_index < 0 or libor_index >= self.model.get_number_of_components():
            raise ValuationError(f"LIBOR index {libor_index} out of range")
        return self.process.get_process_value(time_index, libor_index)

    def get_libor_at_time(self, time: float, libor_index: int) -> np.ndarray:
        return self.get_libor(self.get_time_index(time), libor_index)

    def get_libor_index(self, period_start: float) -> int:
        """Index of the LIBOR period starting at ``period_start``."""
        libor_index = self.get_libor_period_discretization().get_time_index(period_start)
        if libor_index < 0 or libor_index >= self.model.get_number_of_components():
            raise ValuationError(f"No LIBOR period starts at time {period_start}")
        return libor_index

    def get_numeraire(self, time: float) -> np.ndarray:
        """
        Spot numeraire at ``time``.

        Rolled over the fixed rates of all completed periods; inside a
        period the last factor accrues linearly, 1 + (t - T_k) L_k(T_k).
        """
        tenor = self.get_libor_period_discretization()
        last_index = tenor.get_number_of_times() - 1
        if time < tenor.get_time(0) - TIME_TOLERANCE or time > tenor.get_time(last_index) + TIME_TOLERANCE:
            raise ValuationError(f"Time {time} outside the LIBOR period discretization")

        period = min(tenor.get_time_index_nearest_less_or_equal(time), last_index)
        numeraire = np.ones(self.get_number_of_paths())
        for j in range(period):
            libor = self.get_libor_at_time(tenor.get_time(j), j)
            numeraire = numeraire * (1.0 + self.model.get_period_length(j) * libor)

        accrual = time - tenor.get_time(period)
        if period < last_index and accrual > TIME_TOLERANCE:
            libor = self.get_libor_at_time(tenor.get_time(period), period)
            numeraire = numeraire * (1.0 + accrual * libor)
        return numeraire

    def __repr__(self) -> str:
        return f"LIBORModelMonteCarloSimulation(model={self.model!r}, paths={self.get_number_of_paths()})"


__all__ = ["LIBORMarketModel", "LIBORModelMonteCarloSimulation"]
