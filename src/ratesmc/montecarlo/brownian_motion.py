"""
Multi-factor Brownian motion used as the driving noise of simulations.

The increments are deterministic in (time discretization, number of
factors, number of paths, seed): they are drawn once from a dedicated
``numpy.random.Generator`` the first time they are needed and are then
shared read-only by every simulation built on the same noise source.
"""

from abc import ABC, abstractmethod
from typing import Sequence
import numpy as np

from ..cache import CachedValue
from ..exceptions import DataError
from ..time_discretization import TimeDiscretization


class IndependentIncrements(ABC):
    """Contract of a noise source: increments per time step and factor."""

    time_discretization: TimeDiscretization

    @abstractmethod
    def get_number_of_factors(self) -> int:
        pass

    @abstractmethod
    def get_number_of_paths(self) -> int:
        pass

    @abstractmethod
    def get_increments(self, time_index: int) -> np.ndarray:
        """Increments of all factors over step ``time_index``, shape (factors, paths)."""

    def get_increment(self, time_index: int, factor: int) -> np.ndarray:
        """Increment of one factor over step ``time_index``, shape (paths,)."""
        return self.get_increments(time_index)[factor]

    def get_time_discretization(self) -> TimeDiscretization:
        return self.time_discretization


class BrownianMotion(IndependentIncrements):
    """
    Independent standard Brownian motions sampled on a time grid.

    Attributes:
        time_discretization: Simulation times
        number_of_factors: Number of independent factors
        number_of_paths: Number of Monte Carlo paths
        seed: Seed of the random number generator
    """

    def __init__(
        self,
        time_discretization: TimeDiscretization,
        number_of_factors: int,
        number_of_paths: int,
        seed: int
    ):
        if number_of_factors <= 0:
            raise DataError(f"number_of_factors must be positive, got {number_of_factors}")
        if number_of_paths <= 0:
            raise DataError(f"number_of_paths must be positive, got {number_of_paths}")

        self.time_discretization = time_discretization
        self.number_of_factors = number_of_factors
        self.number_of_paths = number_of_paths
        self.seed = seed
        self._increments: CachedValue[np.ndarray] = CachedValue()

    def _generate(self) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        steps = self.time_discretization.get_number_of_time_steps()
        z = rng.standard_normal((steps, self.number_of_factors, self.number_of_paths))
        sqrt_dt = np.sqrt(np.diff(self.time_discretization.times))
        increments = z * sqrt_dt[:, None, None]
        increments.setflags(write=False)
        return increments

    def get_number_of_factors(self) -> int:
        return self.number_of_factors

    def get_number_of_paths(self) -> int:
        return self.number_of_paths

    def get_increments(self, time_index: int) -> np.ndarray:
        return self._increments.get_or_build(self._generate)[time_index]

    def get_clone_with_modified_seed(self, seed: int) -> "BrownianMotion":
        return BrownianMotion(self.time_discretization, self.number_of_factors,
                              self.number_of_paths, seed)

    def get_clone_with_modified_time_discretization(
        self,
        time_discretization: TimeDiscretization
    ) -> "BrownianMotion":
        return BrownianMotion(time_discretization, self.number_of_factors,
                              self.number_of_paths, self.seed)

    def __repr__(self) -> str:
        return (f"BrownianMotion(steps={self.time_discretization.get_number_of_time_steps()}, "
                f"factors={self.number_of_factors}, paths={self.number_of_paths}, seed={self.seed})")


class BrownianMotionView(IndependentIncrements):
    """
    A selection of factors of another noise source, without copying.

    Factor k of the view is factor ``factor_indices[k]`` of the underlying
    noise source.
    """

    def __init__(self, brownian_motion: IndependentIncrements, factor_indices: Sequence[int]):
        factor_indices = list(factor_indices)
        if not factor_indices:
            raise DataError("A Brownian motion view requires at least one factor")
        if any(i < 0 or i >= brownian_motion.get_number_of_factors() for i in factor_indices):
            raise DataError(f"Factor indices {factor_indices} out of range")

        self.brownian_motion = brownian_motion
        self.factor_indices = factor_indices
        self.time_discretization = brownian_motion.get_time_discretization()

    def get_number_of_factors(self) -> int:
        return len(self.factor_indices)

    def get_number_of_paths(self) -> int:
        return self.brownian_motion.get_number_of_paths()

    def get_increments(self, time_index: int) -> np.ndarray:
        return self.brownian_motion.get_increments(time_index)[self.factor_indices]

    def get_increment(self, time_index: int, factor: int) -> np.ndarray:
        return self.brownian_motion.get_increment(time_index, self.factor_indices[factor])


__all__ = ["IndependentIncrements", "BrownianMotion", "BrownianMotionView"]
