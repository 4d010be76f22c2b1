"""
Euler scheme simulation of a multi-factor process model.

A ProcessModel describes the dynamics in its internal coordinates:

    dX_i = mu_i(t, X) dt + sum_k lambda_ik(t, X) dW_k

and a state space transform mapping X to the model's natural quantity
(e.g. exp for log-normal rates). EulerSchemeProcess evolves the state
forward one step at a time, keeping every computed step.
"""

from abc import ABC, abstractmethod
import logging
import threading
from typing import List, Optional
import numpy as np

from ..exceptions import DataError, ValuationError
from ..time_discretization import TimeDiscretization
from .brownian_motion import IndependentIncrements

logger = logging.getLogger(__name__)


class ProcessModel(ABC):
    """Dynamics of a process in internal coordinates."""

    @abstractmethod
    def get_time_discretization(self) -> TimeDiscretization:
        pass

    @abstractmethod
    def get_number_of_components(self) -> int:
        pass

    @abstractmethod
    def get_number_of_factors(self) -> int:
        pass

    @abstractmethod
    def get_initial_state(self) -> np.ndarray:
        """Initial internal state, shape (components,)."""

    @abstractmethod
    def get_drift(self, time_index: int, realization: np.ndarray) -> Optional[np.ndarray]:
        """
        Drift of all components at ``time_index``.

        Args:
            time_index: Simulation time index
            realization: Transformed state, shape (components, paths)

        Returns:
            Array broadcastable to (components, paths), or None for no drift
        """

    @abstractmethod
    def get_factor_loading(
        self,
        time_index: int,
        component: int,
        realization: np.ndarray
    ) -> np.ndarray:
        """Factor loadings of one component, shape (factors,) or (factors, paths)."""

    def apply_state_space_transform(self, component: int, value: np.ndarray) -> np.ndarray:
        """Map internal coordinates to the model's natural domain."""
        return value


class EulerSchemeProcess:
    """
    Euler scheme discretization of a ProcessModel.

    X[t+1] = X[t] + mu(t, X[t]) dt + sum_k lambda_k(t, X[t]) dW_k

    Steps are computed in order, on demand, and kept: a later request for
    an already computed time index returns the stored realization. A lock
    guards the evolution so concurrent readers never see a partial step.
    """

    def __init__(self, brownian_motion: IndependentIncrements, model: ProcessModel):
        if brownian_motion.get_number_of_factors() < model.get_number_of_factors():
            raise DataError(
                f"Noise source has {brownian_motion.get_number_of_factors()} factors, "
                f"model requires {model.get_number_of_factors()}"
            )
        self.model = model
        self.brownian_motion = brownian_motion
        self.time_discretization = model.get_time_discretization()

        self._lock = threading.Lock()
        self._states: List[np.ndarray] = []
        self._values: List[np.ndarray] = []

    def get_number_of_paths(self) -> int:
        return self.brownian_motion.get_number_of_paths()

    def get_number_of_components(self) -> int:
        return self.model.get_number_of_components()

    def get_time_discretization(self) -> TimeDiscretization:
        return self.time_discretization

    def _transform(self, state: np.ndarray) -> np.ndarray:
        values = np.empty_like(state)
        for component in range(state.shape[0]):
            values[component] = self.model.apply_state_space_transform(component, state[component])
        values.setflags(write=False)
        return values

    def _initialize(self) -> None:
        logger.debug("Simulating %d components on %d paths over %d steps",
                     self.model.get_number_of_components(), self.get_number_of_paths(),
                     self.time_discretization.get_number_of_time_steps())
        initial = np.asarray(self.model.get_initial_state(), dtype=np.float64)
        state = np.repeat(initial[:, None], self.get_number_of_paths(), axis=1)
        state.setflags(write=False)
        self._states.append(state)
        self._values.append(self._transform(state))

    def _step(self, time_index: int) -> None:
        state = self._states[time_index]
        realization = self._values[time_index]
        dt = self.time_discretization.get_time_step(time_index)
        increments = self.brownian_motion.get_increments(time_index)[:self.model.get_number_of_factors()]

        drift = self.model.get_drift(time_index, realization)
        new_state = state.copy()
        if drift is not None:
            new_state += np.broadcast_to(drift, state.shape) * dt

        for component in range(state.shape[0]):
            loading = np.asarray(self.model.get_factor_loading(time_index, component, realization))
            if loading.ndim == 1:
                loading = loading[:, None]
            new_state[component] += (loading * increments).sum(axis=0)

        new_state.setflags(write=False)
        self._states.append(new_state)
        self._values.append(self._transform(new_state))

    def _ensure_simulated(self, time_index: int) -> None:
        if time_index < 0 or time_index >= self.time_discretization.get_number_of_times():
            raise ValuationError(
                f"Time index {time_index} outside simulation time discretization "
                f"(0..{self.time_discretization.get_number_of_times() - 1})"
            )
        with self._lock:
            if not self._states:
                self._initialize()
            while len(self._states) <= time_index:
                self._step(len(self._states) - 1)

    def get_process_value(self, time_index: int, component: int) -> np.ndarray:
        """Transformed realization of one component, shape (paths,)."""
        self._ensure_simulated(time_index)
        return self._values[time_index][component]

    def get_process_values(self, time_index: int) -> np.ndarray:
        """Transformed realization of all components, shape (components, paths)."""
        self._ensure_simulated(time_index)
        return self._values[time_index]

    def get_number_of_simulated_steps(self) -> int:
        return max(len(self._states) - 1, 0)


__all__ = ["ProcessModel", "EulerSchemeProcess"]
