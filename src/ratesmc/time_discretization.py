"""
Time discretizations used by simulations, tenor structures and schedules.

Times are year fractions from the valuation date. Date generation, business
day calendars and day count conventions live outside this library; a time
discretization is simply an ordered array of times.
"""

from typing import Iterable, Union
import numpy as np

from .exceptions import DataError

TIME_TOLERANCE = 1e-12


class TimeDiscretization:
    """
    Ordered set of unique times.

    Attributes:
        times: Sorted array of times
    """

    def __init__(self, times: Union[Iterable[float], np.ndarray]):
        times = np.unique(np.asarray(list(times), dtype=np.float64))
        if len(times) == 0:
            raise DataError("Time discretization requires at least one time")
        self.times = times
        self.times.setflags(write=False)

    @classmethod
    def from_uniform(
        cls,
        initial: float,
        number_of_time_steps: int,
        delta: float
    ) -> "TimeDiscretization":
        """Create ``initial, initial + delta, ..., initial + n * delta``."""
        if number_of_time_steps < 0:
            raise DataError("Number of time steps must be non-negative")
        if delta <= 0:
            raise DataError(f"Time step must be positive, got {delta}")
        return cls(initial + delta * np.arange(number_of_time_steps + 1))

    def get_time(self, time_index: int) -> float:
        return float(self.times[time_index])

    def get_time_step(self, time_index: int) -> float:
        """Length of the step from ``time_index`` to ``time_index + 1``."""
        return float(self.times[time_index + 1] - self.times[time_index])

    def get_time_index(self, time: float) -> int:
        """
        Index of ``time`` in the discretization.

        Returns the index if the time is on the grid (within tolerance),
        otherwise ``-(insertion point) - 1``.
        """
        idx = int(np.searchsorted(self.times, time - TIME_TOLERANCE, side="left"))
        if idx < len(self.times) and abs(self.times[idx] - time) <= TIME_TOLERANCE:
            return idx
        return -idx - 1

    def get_time_index_nearest_less_or_equal(self, time: float) -> int:
        """Index of the largest grid time not after ``time`` (-1 if none)."""
        return int(np.searchsorted(self.times, time + TIME_TOLERANCE, side="right")) - 1

    def get_number_of_times(self) -> int:
        return len(self.times)

    def get_number_of_time_steps(self) -> int:
        return len(self.times) - 1

    def __len__(self) -> int:
        return len(self.times)

    def __iter__(self):
        return iter(self.times.tolist())

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeDiscretization):
            return NotImplemented
        return len(self.times) == len(other.times) and bool(np.all(self.times == other.times))

    def __hash__(self) -> int:
        return hash(self.times.tobytes())

    def __repr__(self) -> str:
        return (f"TimeDiscretization(n={len(self.times)}, "
                f"first={self.times[0]}, last={self.times[-1]})")


__all__ = ["TimeDiscretization", "TIME_TOLERANCE"]
