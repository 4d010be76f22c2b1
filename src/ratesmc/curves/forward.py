"""
Forward curves.

Provides:
- ForwardCurve: forwards stored at fixing times, with a curve of payment
  offsets (payment time minus fixing time)
- ForwardCurveFromDiscountCurve: forwards implied by a named discount
  curve, (P(t) / P(t + delta) - 1) / delta
"""

from typing import Optional, Sequence
import numpy as np

from ..exceptions import DataError, ValuationError
from .curve import AbstractCurve, Curve, InterpolationEntity
from .interpolation import ExtrapolationMethod, InterpolationMethod

PAYMENT_OFFSET_TOLERANCE = 1e-8


class ForwardCurve(Curve):
    """
    Curve of forward rates indexed by fixing time.

    Attributes:
        payment_offsets: Curve of payment offsets by fixing time
        discount_curve_name: Optional associated discount curve
    """

    def __init__(
        self,
        name: str,
        discount_curve_name: Optional[str] = None,
        interpolation_method: InterpolationMethod = InterpolationMethod.LINEAR,
        extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        interpolation_entity: InterpolationEntity = InterpolationEntity.VALUE,
        reference_date=None
    ):
        super().__init__(name, interpolation_method, extrapolation_method,
                         interpolation_entity, reference_date)
        self.discount_curve_name = discount_curve_name
        self.payment_offsets = Curve(
            f"{name}_payment_offsets",
            InterpolationMethod.LINEAR,
            ExtrapolationMethod.CONSTANT,
            InterpolationEntity.VALUE,
        )

    def _copy_attributes(self, new_curve: "ForwardCurve") -> None:
        new_curve.discount_curve_name = self.discount_curve_name
        new_curve.payment_offsets = self.payment_offsets.clone()

    def get_payment_offset(self, fixing_time: float) -> float:
        return self.payment_offsets.get_value(fixing_time)

    def get_forward(
        self,
        fixing_time: float,
        model=None,
        payment_offset: Optional[float] = None
    ) -> float:
        """
        Forward rate fixing at ``fixing_time``.

        A ``payment_offset`` that differs from the offset stored for the
        fixing raises ValuationError: the forwards of this curve are quoted
        for their own accrual period only.
        """
        if payment_offset is not None and self.payment_offsets.get_number_of_points() > 0:
            stored_offset = self.get_payment_offset(fixing_time)
            if abs(payment_offset - stored_offset) > PAYMENT_OFFSET_TOLERANCE:
                raise ValuationError(
                    f"Forward curve {self.name} quotes forwards with payment offset {stored_offset} "
                    f"at fixing {fixing_time}, requested {payment_offset}"
                )
        return self.get_value(fixing_time, model)

    @classmethod
    def create_from_forwards(
        cls,
        name: str,
        fixing_times: Sequence[float],
        forwards: Sequence[float],
        payment_offset: float,
        discount_curve_name: Optional[str] = None
    ) -> "ForwardCurve":
        """Create a forward curve with a constant payment offset."""
        if len(fixing_times) != len(forwards):
            raise DataError("Fixing times and forwards must have same length")
        curve = cls(name, discount_curve_name)
        for t, f in zip(fixing_times, forwards):
            curve.add_point(float(t), float(f))
            curve.payment_offsets.add_point(float(t), float(payment_offset))
        return curve


class ForwardCurveFromDiscountCurve(AbstractCurve):
    """
    Forward curve implied by a discount curve held in the model.

    Has no points of its own: its parameter vector is empty, calibrating
    it means calibrating the referenced discount curve.
    """

    def __init__(self, name: str, discount_curve_name: str, period_length: float):
        if period_length <= 0:
            raise DataError(f"Period length must be positive, got {period_length}")
        self.name = name
        self.discount_curve_name = discount_curve_name
        self.period_length = period_length

    def get_forward(
        self,
        fixing_time: float,
        model=None,
        payment_offset: Optional[float] = None
    ) -> float:
        if model is None:
            raise DataError(f"Forward curve {self.name} requires a model holding "
                            f"discount curve {self.discount_curve_name}")
        delta = payment_offset if payment_offset is not None else self.period_length
        discount_curve = model.get_discount_curve(self.discount_curve_name)
        df_start = discount_curve.get_discount_factor(fixing_time, model)
        df_end = discount_curve.get_discount_factor(fixing_time + delta, model)
        return (df_start / df_end - 1.0) / delta

    def get_value(self, time: float, model=None) -> float:
        return self.get_forward(time, model)

    def get_parameter(self) -> np.ndarray:
        return np.zeros(0)

    def set_parameter(self, parameter: Sequence[float]) -> None:
        if len(parameter) != 0:
            raise DataError(f"Forward curve {self.name} has no parameters")

    def clone(self) -> "ForwardCurveFromDiscountCurve":
        return ForwardCurveFromDiscountCurve(self.name, self.discount_curve_name, self.period_length)

    def __repr__(self) -> str:
        return (f"ForwardCurveFromDiscountCurve(name={self.name!r}, "
                f"discount_curve={self.discount_curve_name!r}, period_length={self.period_length})")


__all__ = ["ForwardCurve", "ForwardCurveFromDiscountCurve"]
