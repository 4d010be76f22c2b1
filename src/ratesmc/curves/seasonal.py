"""
Seasonal curve: a periodic curve evaluated at the season of a date.

The base curve is defined on [0, 1) and is evaluated at
month / 12 + (day - 1) / days_in_month / 12 of the date
``reference_date + floor(365 * time + 1/2)`` (halves round up).
"""

import calendar
from datetime import date, timedelta
from typing import Sequence
import numpy as np

from .curve import AbstractCurve


def season_of(d: date) -> float:
    """Fraction of the year elapsed at the start of day ``d`` (by months)."""
    days_in_month = calendar.monthrange(d.year, d.month)[1]
    return (d.month - 1) / 12.0 + (d.day - 1) / days_in_month / 12.0


class SeasonalCurve(AbstractCurve):
    """
    Curve repeating a base curve every year.

    Attributes:
        name: Curve name
        reference_date: Date corresponding to time 0
        base_curve: Curve on the season variable in [0, 1)
    """

    def __init__(self, name: str, reference_date: date, base_curve: AbstractCurve):
        self.name = name
        self.reference_date = reference_date
        self.base_curve = base_curve

    def get_value(self, time: float, model=None) -> float:
        d = self.reference_date + timedelta(days=int(np.floor(time * 365 + 0.5)))
        return self.base_curve.get_value(season_of(d), model)

    def get_parameter(self) -> np.ndarray:
        return self.base_curve.get_parameter()

    def set_parameter(self, parameter: Sequence[float]) -> None:
        self.base_curve.set_parameter(parameter)

    def clone(self) -> "SeasonalCurve":
        return SeasonalCurve(self.name, self.reference_date, self.base_curve.clone())

    def __repr__(self) -> str:
        return f"SeasonalCurve(name={self.name!r}, reference_date={self.reference_date})"


__all__ = ["SeasonalCurve", "season_of"]
