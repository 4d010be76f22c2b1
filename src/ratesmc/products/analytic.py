"""
Analytic products valued against a MarketState of curves.

Used as calibration instruments of the curve solver: swap legs, swaps and
zero coupon bonds. Values are expressed at ``evaluation_time``, i.e.
divided by the discount factor to that time.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..exceptions import ValuationError
from ..schedule import Schedule


class AnalyticProduct(ABC):
    """Product with a closed form value given the curves of a market state."""

    @abstractmethod
    def get_value(self, evaluation_time: float, model) -> float:
        pass


def _require_discount_curve(model, name: str):
    curve = model.get_discount_curve(name)
    if curve is None:
        raise ValuationError(f"Discount curve {name} not found in model")
    return curve


class SwapLeg(AnalyticProduct):
    """
    Leg paying (forward + spread) * period length at each payment time.

    Attributes:
        schedule: Fixing, payment and accrual periods
        forward_curve_name: Forward curve, or None for a fixed leg
        spread: Fixed rate or spread over the forward
        discount_curve_name: Discount curve
        is_notional_exchanged: Whether notional flows at period start and end
    """

    def __init__(
        self,
        schedule: Schedule,
        forward_curve_name: Optional[str],
        spread: float,
        discount_curve_name: str,
        is_notional_exchanged: bool = False
    ):
        self.schedule = schedule
        self.forward_curve_name = forward_curve_name
        self.spread = spread
        self.discount_curve_name = discount_curve_name
        self.is_notional_exchanged = is_notional_exchanged

    def get_value(self, evaluation_time: float, model) -> float:
        discount_curve = _require_discount_curve(model, self.discount_curve_name)

        forward_curve = None
        if self.forward_curve_name:
            forward_curve = model.get_forward_curve(self.forward_curve_name)
            if forward_curve is None:
                raise ValuationError(f"Forward curve {self.forward_curve_name} not found in model")

        value = 0.0
        for period in range(self.schedule.get_number_of_periods()):
            fixing = self.schedule.get_fixing(period)
            payment = self.schedule.get_payment(period)
            period_length = self.schedule.get_period_length(period)

            # Cash flows at or before the evaluation time are excluded
            if payment <= evaluation_time:
                continue

            forward = self.spread
            if forward_curve is not None:
                forward += forward_curve.get_forward(fixing, model, payment - fixing)

            discount_factor = discount_curve.get_discount_factor(payment, model)
            value += forward * period_length * discount_factor

            if self.is_notional_exchanged:
                period_start = self.schedule.get_period_start(period)
                period_end = self.schedule.get_period_end(period)
                if period_end > evaluation_time:
                    value += discount_curve.get_discount_factor(period_end, model)
                if period_start > evaluation_time:
                    value -= discount_curve.get_discount_factor(period_start, model)

        return value / discount_curve.get_discount_factor(evaluation_time, model)

    def __repr__(self) -> str:
        return (f"SwapLeg(periods={self.schedule.get_number_of_periods()}, "
                f"forward={self.forward_curve_name!r}, spread={self.spread}, "
                f"discount={self.discount_curve_name!r})")


class Swap(AnalyticProduct):
    """Receiver leg minus payer leg."""

    def __init__(self, receiver_leg: SwapLeg, payer_leg: SwapLeg):
        self.receiver_leg = receiver_leg
        self.payer_leg = payer_leg

    def get_value(self, evaluation_time: float, model) -> float:
        return (self.receiver_leg.get_value(evaluation_time, model)
                - self.payer_leg.get_value(evaluation_time, model))

    def __repr__(self) -> str:
        return f"Swap(receiver={self.receiver_leg!r}, payer={self.payer_leg!r})"


class ZeroCouponBond(AnalyticProduct):
    """Unit payment at ``maturity``."""

    def __init__(self, maturity: float, discount_curve_name: str):
        self.maturity = maturity
        self.discount_curve_name = discount_curve_name

    def get_value(self, evaluation_time: float, model) -> float:
        if self.maturity <= evaluation_time:
            return 0.0
        discount_curve = _require_discount_curve(model, self.discount_curve_name)
        return (discount_curve.get_discount_factor(self.maturity, model)
                / discount_curve.get_discount_factor(evaluation_time, model))

    def __repr__(self) -> str:
        return f"ZeroCouponBond(maturity={self.maturity}, discount={self.discount_curve_name!r})"


__all__ = ["AnalyticProduct", "SwapLeg", "Swap", "ZeroCouponBond"]
