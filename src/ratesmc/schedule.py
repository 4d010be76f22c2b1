"""
Schedule contract consumed by curve calibration.

A schedule provides ordered fixing and payment times with their period
lengths. Schedules are normally generated from dates and conventions by an
external component; ``RegularSchedule`` covers the case of a regular tenor
given directly in year fractions.
"""

from abc import ABC, abstractmethod
from typing import Sequence, Tuple, Union

from .exceptions import DataError
from .time_discretization import TimeDiscretization


class Schedule(ABC):
    """Ordered periods with fixing and payment times."""

    @abstractmethod
    def get_number_of_periods(self) -> int:
        pass

    @abstractmethod
    def get_fixing(self, period_index: int) -> float:
        pass

    @abstractmethod
    def get_payment(self, period_index: int) -> float:
        pass

    @abstractmethod
    def get_period_start(self, period_index: int) -> float:
        pass

    @abstractmethod
    def get_period_end(self, period_index: int) -> float:
        pass

    @abstractmethod
    def get_period_length(self, period_index: int) -> float:
        pass


class RegularSchedule(Schedule):
    """
    Schedule whose periods are the steps of a time discretization.

    Fixing is at period start, payment at period end and the period
    length is the plain year fraction between the two.
    """

    def __init__(self, time_discretization: TimeDiscretization):
        if time_discretization.get_number_of_time_steps() < 1:
            raise DataError("A schedule requires at least one period")
        self.time_discretization = time_discretization

    @classmethod
    def from_tenor(
        cls,
        initial: float,
        number_of_periods: int,
        period_length: float
    ) -> "RegularSchedule":
        return cls(TimeDiscretization.from_uniform(initial, int(number_of_periods), period_length))

    def get_number_of_periods(self) -> int:
        return self.time_discretization.get_number_of_time_steps()

    def get_fixing(self, period_index: int) -> float:
        return self.get_period_start(period_index)

    def get_payment(self, period_index: int) -> float:
        return self.get_period_end(period_index)

    def get_period_start(self, period_index: int) -> float:
        return self.time_discretization.get_time(period_index)

    def get_period_end(self, period_index: int) -> float:
        return self.time_discretization.get_time(period_index + 1)

    def get_period_length(self, period_index: int) -> float:
        return self.time_discretization.get_time_step(period_index)

    def __repr__(self) -> str:
        return (f"RegularSchedule(periods={self.get_number_of_periods()}, "
                f"start={self.get_period_start(0)}, "
                f"end={self.get_period_end(self.get_number_of_periods() - 1)})")


TenorDefinition = Union[Schedule, Sequence[float], Tuple[float, int, float]]


def as_schedule(tenor_definition) -> Schedule:
    """
    Coerce a tenor definition to a schedule.

    Accepts a ``Schedule`` or an ``(initial, number_of_periods, period_length)``
    triple.
    """
    if tenor_definition is None or isinstance(tenor_definition, Schedule):
        return tenor_definition
    try:
        initial, number_of_periods, period_length = tenor_definition
    except (TypeError, ValueError):
        raise DataError(f"Invalid tenor definition: {tenor_definition!r}")
    return RegularSchedule.from_tenor(float(initial), int(number_of_periods), float(period_length))


__all__ = ["Schedule", "RegularSchedule", "TenorDefinition", "as_schedule"]
