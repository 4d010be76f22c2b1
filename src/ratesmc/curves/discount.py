"""
Discount curve: a Curve of discount factors P(0,t).

Default interpolation is linear in log(P)/t (i.e. in the continuously
compounded zero rate) with constant extrapolation, so P(0,0) = 1.
"""

from typing import Sequence
import numpy as np

from ..exceptions import DataError
from .curve import Curve, InterpolationEntity
from .interpolation import ExtrapolationMethod, InterpolationMethod


class DiscountCurve(Curve):
    """
    Curve of discount factors.

    Points at time 0 are not stored: with the LOG_OF_VALUE_PER_TIME entity
    the discount factor at time 0 is 1 by construction.
    """

    def __init__(
        self,
        name: str,
        interpolation_method: InterpolationMethod = InterpolationMethod.LINEAR,
        extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        interpolation_entity: InterpolationEntity = InterpolationEntity.LOG_OF_VALUE_PER_TIME,
        reference_date=None
    ):
        super().__init__(name, interpolation_method, extrapolation_method,
                         interpolation_entity, reference_date)

    def get_discount_factor(self, time: float, model=None) -> float:
        """Discount factor P(0, time)."""
        return self.get_value(time, model)

    def get_zero_rate(self, time: float, model=None) -> float:
        """Continuously compounded zero rate."""
        if time <= 0:
            raise DataError("Zero rate requires a positive time")
        return float(-np.log(self.get_discount_factor(time, model)) / time)

    @classmethod
    def create_from_discount_factors(
        cls,
        name: str,
        times: Sequence[float],
        discount_factors: Sequence[float],
        interpolation_method: InterpolationMethod = InterpolationMethod.LINEAR,
        extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        interpolation_entity: InterpolationEntity = InterpolationEntity.LOG_OF_VALUE_PER_TIME
    ) -> "DiscountCurve":
        """
        Create a discount curve from discount factors.

        A point (0, 1.0) is skipped for LOG_OF_VALUE_PER_TIME, any other
        value at time 0 is rejected by the transform.
        """
        if len(times) != len(discount_factors):
            raise DataError("Times and discount factors must have same length")
        curve = cls(name, interpolation_method, extrapolation_method, interpolation_entity)
        for t, df in zip(times, discount_factors):
            if (t == 0 and df == 1.0
                    and interpolation_entity == InterpolationEntity.LOG_OF_VALUE_PER_TIME):
                continue
            curve.add_point(float(t), float(df))
        return curve

    @classmethod
    def create_from_zero_rates(
        cls,
        name: str,
        times: Sequence[float],
        zero_rates: Sequence[float],
        interpolation_method: InterpolationMethod = InterpolationMethod.LINEAR,
        extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT
    ) -> "DiscountCurve":
        """Create a discount curve from continuously compounded zero rates."""
        times = np.asarray(times, dtype=np.float64)
        dfs = np.exp(-np.asarray(zero_rates, dtype=np.float64) * times)
        return cls.create_from_discount_factors(
            name, times, dfs, interpolation_method, extrapolation_method
        )


def create_flat_discount_curve(
    name: str,
    rate: float,
    max_time: float = 30.0
) -> DiscountCurve:
    """
    Create a flat discount curve.

    Args:
        name: Curve name
        rate: Flat continuously compounded rate
        max_time: Last node time

    Returns:
        DiscountCurve with nodes at standard tenors up to max_time
    """
    times = [t for t in (0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0) if t < max_time] + [max_time]
    return DiscountCurve.create_from_zero_rates(name, times, [rate] * len(times))


__all__ = ["DiscountCurve", "create_flat_discount_curve"]
