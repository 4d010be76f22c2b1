"""
Curve built from a set of points with interpolation and extrapolation.

The Curve class provides:
- Ordered (time, value) points, inserted by binary search
- Interpolation of a transform of the values (value, log of value,
  log of value per time)
- A lazily built, lock-guarded interpolation engine that is rebuilt after
  any change of points or parameters
- A parameter vector (native point values in time order) for calibration

Curves that reference other curves (seasonal, forward-from-discount) look
them up by name in a MarketState passed as ``model``.
"""

from abc import ABC, abstractmethod
from bisect import bisect_left
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union
import numpy as np

from ..cache import CachedValue
from ..exceptions import DataError, DuplicatePointError, InsufficientDataError
from .interpolation import (
    ExtrapolationMethod,
    InterpolationMethod,
    RationalFunctionInterpolation,
)


class InterpolationEntity(Enum):
    """Transform of the point values on which interpolation is performed."""
    VALUE = "value"
    LOG_OF_VALUE = "log_of_value"
    LOG_OF_VALUE_PER_TIME = "log_of_value_per_time"


def interpolation_entity_from_value(
    entity: InterpolationEntity,
    value: float,
    time: float
) -> float:
    """
    Transform a native value to the interpolation entity.

    LOG_OF_VALUE and LOG_OF_VALUE_PER_TIME require value > 0;
    LOG_OF_VALUE_PER_TIME additionally rejects time == 0.
    """
    if entity == InterpolationEntity.VALUE:
        return float(value)
    if value <= 0:
        raise DataError(f"{entity.name} requires a positive value, got {value} at time {time}")
    if entity == InterpolationEntity.LOG_OF_VALUE:
        return float(np.log(value))
    if time == 0:
        raise DataError("LOG_OF_VALUE_PER_TIME does not allow a point at time 0")
    return float(np.log(value) / time)


def value_from_interpolation_entity(
    entity: InterpolationEntity,
    entity_value: float,
    time: float
) -> float:
    """Inverse of ``interpolation_entity_from_value``."""
    if entity == InterpolationEntity.VALUE:
        return float(entity_value)
    if entity == InterpolationEntity.LOG_OF_VALUE:
        return float(np.exp(entity_value))
    return float(np.exp(entity_value * time))


@dataclass
class Point:
    """A single curve point; ``value`` holds the transformed entity value."""
    time: float
    value: float


class AbstractCurve(ABC):
    """Contract shared by all curves: evaluation plus a parameter vector."""

    name: str

    @abstractmethod
    def get_value(self, time: float, model=None) -> float:
        pass

    @abstractmethod
    def get_parameter(self) -> np.ndarray:
        pass

    @abstractmethod
    def set_parameter(self, parameter: Sequence[float]) -> None:
        pass

    @abstractmethod
    def clone(self) -> "AbstractCurve":
        pass

    def clone_with_parameter(self, parameter: Sequence[float]) -> "AbstractCurve":
        """Independent copy of this curve with a new parameter vector."""
        new_curve = self.clone()
        new_curve.set_parameter(parameter)
        return new_curve


class Curve(AbstractCurve):
    """
    Curve defined by points, interpolation method, extrapolation method
    and interpolation entity.

    Attributes:
        name: Curve name (key in a MarketState)
        interpolation_method: LINEAR or CUBIC_SPLINE
        extrapolation_method: CONSTANT or LINEAR
        interpolation_entity: VALUE, LOG_OF_VALUE or LOG_OF_VALUE_PER_TIME
        reference_date: Optional date corresponding to time 0

    The cached interpolation engine is built on first evaluation and is
    invalidated as a whole by ``add_point`` and ``set_parameter``. Reading a
    built curve from several threads is safe; mutation is not meant to run
    concurrently with evaluation.
    """

    def __init__(
        self,
        name: str,
        interpolation_method: InterpolationMethod = InterpolationMethod.CUBIC_SPLINE,
        extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        interpolation_entity: InterpolationEntity = InterpolationEntity.LOG_OF_VALUE,
        reference_date: Optional[date] = None
    ):
        self.name = name
        self.interpolation_method = interpolation_method
        self.extrapolation_method = extrapolation_method
        self.interpolation_entity = interpolation_entity
        self.reference_date = reference_date

        self._points: List[Point] = []
        self._interpolation: CachedValue[RationalFunctionInterpolation] = CachedValue()

    def _times(self) -> List[float]:
        return [p.time for p in self._points]

    def get_time_index(self, time: float) -> int:
        """Index of a point at ``time``, or ``-(insertion point) - 1``."""
        times = self._times()
        idx = bisect_left(times, time)
        if idx < len(times) and times[idx] == time:
            return idx
        return -idx - 1

    def add_point(self, time: float, value: float) -> None:
        """
        Add a point to the curve.

        Adding the same value at an existing time is a no-op; a different
        value at an existing time raises DuplicatePointError.

        Args:
            time: Point time
            value: Native (untransformed) value
        """
        entity_value = interpolation_entity_from_value(self.interpolation_entity, value, time)

        index = self.get_time_index(time)
        if index >= 0:
            if self._points[index].value == entity_value:
                return
            raise DuplicatePointError(
                f"Curve {self.name}: a different value already exists at time {time}"
            )

        self._points.insert(-index - 1, Point(float(time), entity_value))
        self._interpolation.invalidate()

    def _build_interpolation(self) -> RationalFunctionInterpolation:
        if not self._points:
            raise InsufficientDataError(f"Curve {self.name} has no points")
        return RationalFunctionInterpolation(
            [p.time for p in self._points],
            [p.value for p in self._points],
            self.interpolation_method,
            self.extrapolation_method,
        )

    def _get_interpolation_entity_value(self, time: float) -> float:
        interpolation = self._interpolation.get_or_build(self._build_interpolation)
        return interpolation.get_value(time)

    def get_value(self, time: float, model=None) -> float:
        """
        Value of the curve at ``time``.

        Args:
            time: Evaluation time
            model: MarketState, used only by curves referencing other curves

        Returns:
            Native (inverse transformed) interpolated value
        """
        return value_from_interpolation_entity(
            self.interpolation_entity,
            self._get_interpolation_entity_value(time),
            time,
        )

    def get_values(self, times: Union[Sequence[float], np.ndarray], model=None) -> np.ndarray:
        return np.array([self.get_value(float(t), model) for t in np.atleast_1d(times)])

    def get_parameter(self) -> np.ndarray:
        """Native point values in time order."""
        return np.array([
            value_from_interpolation_entity(self.interpolation_entity, p.value, p.time)
            for p in self._points
        ])

    def set_parameter(self, parameter: Sequence[float]) -> None:
        """Replace the native point values (time order); invalidates the cache."""
        parameter = np.asarray(parameter, dtype=np.float64)
        if len(parameter) != len(self._points):
            raise DataError(
                f"Curve {self.name}: expected {len(self._points)} parameters, got {len(parameter)}"
            )
        new_values = [
            interpolation_entity_from_value(self.interpolation_entity, float(v), p.time)
            for v, p in zip(parameter, self._points)
        ]
        for p, v in zip(self._points, new_values):
            p.value = v
        self._interpolation.invalidate()

    def get_points(self) -> List[Tuple[float, float]]:
        """List of (time, native value) tuples."""
        return list(zip(self._times(), self.get_parameter().tolist()))

    def get_number_of_points(self) -> int:
        return len(self._points)

    def _copy_attributes(self, other: "Curve") -> None:
        """Hook for subclasses to copy additional state into a clone."""

    def clone(self) -> "Curve":
        """Deep copy: independent points and an empty cache."""
        new_curve = self.__class__.__new__(self.__class__)
        new_curve.name = self.name
        new_curve.interpolation_method = self.interpolation_method
        new_curve.extrapolation_method = self.extrapolation_method
        new_curve.interpolation_entity = self.interpolation_entity
        new_curve.reference_date = self.reference_date
        new_curve._points = [Point(p.time, p.value) for p in self._points]
        new_curve._interpolation = CachedValue()
        self._copy_attributes(new_curve)
        return new_curve

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(name={self.name!r}, points={len(self._points)}, "
                f"method={self.interpolation_method.name}, "
                f"extrapolation={self.extrapolation_method.name}, "
                f"entity={self.interpolation_entity.name})")


def create_curve_from_points(
    name: str,
    times: Sequence[float],
    values: Sequence[float],
    interpolation_method: InterpolationMethod = InterpolationMethod.CUBIC_SPLINE,
    extrapolation_method: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
    interpolation_entity: InterpolationEntity = InterpolationEntity.LOG_OF_VALUE
) -> Curve:
    """
    Create a curve from parallel arrays of times and native values.

    Args:
        name: Curve name
        times: Point times
        values: Native values
        interpolation_method: Interpolation between points
        extrapolation_method: Extrapolation beyond points
        interpolation_entity: Transform the interpolation works on

    Returns:
        Curve with all points added
    """
    if len(times) != len(values):
        raise DataError("Times and values must have same length")
    curve = Curve(name, interpolation_method, extrapolation_method, interpolation_entity)
    for t, v in zip(times, values):
        curve.add_point(float(t), float(v))
    return curve


__all__ = [
    "AbstractCurve",
    "Curve",
    "Point",
    "InterpolationEntity",
    "interpolation_entity_from_value",
    "value_from_interpolation_entity",
    "create_curve_from_points",
]
