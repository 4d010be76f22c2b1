"""
Curves package - interpolated curves and their derived forms.

Provides:
- Curve: points with interpolation, extrapolation and value transform
- RationalFunctionInterpolation: the piecewise interpolation engine
- DiscountCurve, ForwardCurve, ForwardCurveFromDiscountCurve, SeasonalCurve
"""

from .interpolation import (
    InterpolationMethod,
    ExtrapolationMethod,
    RationalFunctionInterpolation,
    create_interpolator,
)
from .curve import (
    AbstractCurve,
    Curve,
    InterpolationEntity,
    create_curve_from_points,
)
from .discount import DiscountCurve, create_flat_discount_curve
from .forward import ForwardCurve, ForwardCurveFromDiscountCurve
from .seasonal import SeasonalCurve

__all__ = [
    "InterpolationMethod",
    "ExtrapolationMethod",
    "RationalFunctionInterpolation",
    "create_interpolator",
    "AbstractCurve",
    "Curve",
    "InterpolationEntity",
    "create_curve_from_points",
    "DiscountCurve",
    "create_flat_discount_curve",
    "ForwardCurve",
    "ForwardCurveFromDiscountCurve",
    "SeasonalCurve",
]
