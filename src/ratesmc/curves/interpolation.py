"""
Piecewise interpolation engine for curves.

Provides:
- InterpolationMethod: LINEAR or CUBIC_SPLINE between knots
- ExtrapolationMethod: CONSTANT or LINEAR beyond the boundary knots
- RationalFunctionInterpolation: the engine, built once per point set

Both methods are stored as piecewise polynomials: on segment i the
interpolant is a_i + b_i*(x-x_i) + c_i*(x-x_i)^2 + d_i*(x-x_i)^3, with
c_i = d_i = 0 for linear interpolation. Evaluation is a binary search for
the segment followed by a Horner evaluation.
"""

from enum import Enum
from typing import Sequence, Union
import numpy as np
from scipy.linalg import solve_banded

from ..exceptions import DataError, InsufficientDataError


class InterpolationMethod(Enum):
    """Interpolation between knots."""
    LINEAR = "linear"
    CUBIC_SPLINE = "cubic_spline"

    @classmethod
    def from_string(cls, s: str) -> "InterpolationMethod":
        key = s.lower().replace("-", "_").replace(" ", "_")
        if key in ("linear", "lin"):
            return cls.LINEAR
        if key in ("cubic_spline", "cubic", "spline"):
            return cls.CUBIC_SPLINE
        raise DataError(f"Unknown interpolation method: {s}")


class ExtrapolationMethod(Enum):
    """Extrapolation beyond the first and last knot."""
    CONSTANT = "constant"
    LINEAR = "linear"

    @classmethod
    def from_string(cls, s: str) -> "ExtrapolationMethod":
        key = s.lower().strip()
        if key in ("constant", "flat"):
            return cls.CONSTANT
        if key == "linear":
            return cls.LINEAR
        raise DataError(f"Unknown extrapolation method: {s}")


def _natural_spline_second_derivatives(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """
    Second derivatives M of the natural cubic spline through (x, y).

    Solves the tridiagonal system
        h[i-1] M[i-1] + 2 (h[i-1] + h[i]) M[i] + h[i] M[i+1]
            = 6 ((y[i+1]-y[i])/h[i] - (y[i]-y[i-1])/h[i-1])
    for the interior knots, with M[0] = M[n-1] = 0.
    """
    n = len(x)
    M = np.zeros(n)
    if n < 3:
        return M

    h = np.diff(x)
    slopes = np.diff(y) / h
    rhs = 6.0 * np.diff(slopes)

    # Banded storage: row 0 upper, row 1 main, row 2 lower diagonal
    ab = np.zeros((3, n - 2))
    ab[1, :] = 2.0 * (h[:-1] + h[1:])
    ab[0, 1:] = h[1:-1]
    ab[2, :-1] = h[1:-1]

    M[1:-1] = solve_banded((1, 1), ab, rhs)
    return M


class RationalFunctionInterpolation:
    """
    Interpolation of a sorted point set with selectable extrapolation.

    Attributes:
        points: Knot abscissas (strictly increasing)
        values: Knot values
        interpolation_method: LINEAR or CUBIC_SPLINE (natural spline)
        extrapolation_method: CONSTANT or LINEAR

    Edge cases:
        - No points raises InsufficientDataError
        - A single point gives a constant function
        - Two points with CUBIC_SPLINE give the straight line
        - Evaluation exactly at a knot returns the stored knot value
    """

    def __init__(
        self,
        points: Union[Sequence[float], np.ndarray],
        values: Union[Sequence[float], np.ndarray],
        interpolation_method: InterpolationMethod = InterpolationMethod.LINEAR,
        extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT
    ):
        self.points = np.array(points, dtype=np.float64)
        self.values = np.array(values, dtype=np.float64)
        self.interpolation_method = interpolation_method
        self.extrapolation_method = extrapolation_method

        if len(self.points) != len(self.values):
            raise DataError("Points and values must have same length")
        if len(self.points) == 0:
            raise InsufficientDataError("Interpolation requires at least one point")
        if np.any(np.diff(self.points) <= 0):
            raise DataError("Interpolation points must be strictly increasing")

        self.coefficients = self._build_coefficients()

    def _build_coefficients(self) -> np.ndarray:
        """Polynomial coefficients [a, b, c, d] per segment, shape (n-1, 4)."""
        x, y = self.points, self.values
        n = len(x)
        if n < 2:
            return np.zeros((0, 4))

        h = np.diff(x)
        coefficients = np.zeros((n - 1, 4))
        coefficients[:, 0] = y[:-1]

        if self.interpolation_method == InterpolationMethod.LINEAR or n == 2:
            coefficients[:, 1] = np.diff(y) / h
            return coefficients

        M = _natural_spline_second_derivatives(x, y)
        coefficients[:, 1] = np.diff(y) / h - h * (M[1:] + 2.0 * M[:-1]) / 6.0
        coefficients[:, 2] = M[:-1] / 2.0
        coefficients[:, 3] = np.diff(M) / (6.0 * h)
        return coefficients

    def _boundary_slopes(self):
        """Slopes at the first and last knot of the boundary segments."""
        if len(self.coefficients) == 0:
            return 0.0, 0.0
        _, b0, _, _ = self.coefficients[0]
        _, b, c, d = self.coefficients[-1]
        h = self.points[-1] - self.points[-2]
        return float(b0), float(b + 2.0 * c * h + 3.0 * d * h * h)

    def get_value(self, x: float) -> float:
        """Evaluate the interpolant at x."""
        points = self.points
        n = len(points)

        if n == 1:
            return float(self.values[0])

        if x < points[0] or x > points[-1]:
            if self.extrapolation_method == ExtrapolationMethod.CONSTANT:
                return float(self.values[0] if x < points[0] else self.values[-1])
            left_slope, right_slope = self._boundary_slopes()
            if x < points[0]:
                return float(self.values[0] + left_slope * (x - points[0]))
            return float(self.values[-1] + right_slope * (x - points[-1]))

        idx = int(np.searchsorted(points, x, side="left"))
        if idx < n and points[idx] == x:
            return float(self.values[idx])

        segment = min(max(idx - 1, 0), n - 2)
        dx = x - points[segment]
        a, b, c, d = self.coefficients[segment]
        return float(a + dx * (b + dx * (c + dx * d)))

    def get_values(self, xs: Union[Sequence[float], np.ndarray]) -> np.ndarray:
        """Evaluate the interpolant at each element of xs."""
        return np.array([self.get_value(float(x)) for x in np.atleast_1d(xs)])

    def get_derivative(self, x: float) -> float:
        """First derivative of the interpolant at x."""
        points = self.points
        n = len(points)
        if n == 1:
            return 0.0

        if x < points[0] or x > points[-1]:
            if self.extrapolation_method == ExtrapolationMethod.CONSTANT:
                return 0.0
            left_slope, right_slope = self._boundary_slopes()
            return left_slope if x < points[0] else right_slope

        segment = int(np.searchsorted(points, x, side="right")) - 1
        segment = min(max(segment, 0), n - 2)
        dx = x - points[segment]
        _, b, c, d = self.coefficients[segment]
        return float(b + dx * (2.0 * c + 3.0 * d * dx))

    def __call__(self, x: float) -> float:
        return self.get_value(x)

    def __repr__(self) -> str:
        return (f"RationalFunctionInterpolation(points={len(self.points)}, "
                f"method={self.interpolation_method.name}, "
                f"extrapolation={self.extrapolation_method.name})")


def create_interpolator(
    points: Union[Sequence[float], np.ndarray],
    values: Union[Sequence[float], np.ndarray],
    method: Union[str, InterpolationMethod] = InterpolationMethod.LINEAR,
    extrapolation: Union[str, ExtrapolationMethod] = ExtrapolationMethod.CONSTANT
) -> RationalFunctionInterpolation:
    """
    Factory function to create an interpolation engine by name.

    Args:
        points: Knot abscissas
        values: Knot values
        method: "linear", "cubic_spline" or an InterpolationMethod
        extrapolation: "constant", "linear" or an ExtrapolationMethod

    Returns:
        RationalFunctionInterpolation instance
    """
    if isinstance(method, str):
        method = InterpolationMethod.from_string(method)
    if isinstance(extrapolation, str):
        extrapolation = ExtrapolationMethod.from_string(extrapolation)
    return RationalFunctionInterpolation(points, values, method, extrapolation)


__all__ = [
    "InterpolationMethod",
    "ExtrapolationMethod",
    "RationalFunctionInterpolation",
    "create_interpolator",
]
