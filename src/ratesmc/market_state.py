"""
Market state: a named collection of curves.

Analytic products and curves that reference other curves look curves up
by name here. Calibration never mutates a shared state: each trial works
on ``get_clone_for_parameter``, which swaps the calibrated curves for
independent clones carrying the trial parameters.
"""

from typing import Dict, Iterable, List, Optional, Sequence
import numpy as np

from .curves.curve import AbstractCurve
from .curves.discount import DiscountCurve
from .curves.forward import ForwardCurve, ForwardCurveFromDiscountCurve
from .exceptions import DataError


class MarketState:
    """
    Named curves used to value analytic products.

    Attributes:
        curves: Mapping of curve name to curve
    """

    def __init__(self, curves: Optional[Iterable[AbstractCurve]] = None):
        self.curves: Dict[str, AbstractCurve] = {}
        for curve in curves or []:
            self.set_curve(curve)

    def set_curve(self, curve: AbstractCurve) -> "MarketState":
        """Add or replace a curve (keyed by its name)."""
        self.curves[curve.name] = curve
        return self

    def get_curve(self, name: Optional[str]) -> Optional[AbstractCurve]:
        if name is None:
            return None
        return self.curves.get(name)

    def get_discount_curve(self, name: Optional[str]) -> Optional[DiscountCurve]:
        """Discount curve by name; None if absent or not a discount curve."""
        curve = self.get_curve(name)
        return curve if isinstance(curve, DiscountCurve) else None

    def get_forward_curve(self, name: Optional[str]):
        """Forward curve by name; None if absent or not a forward curve."""
        curve = self.get_curve(name)
        if isinstance(curve, (ForwardCurve, ForwardCurveFromDiscountCurve)):
            return curve
        return None

    @property
    def curve_names(self) -> List[str]:
        return list(self.curves.keys())

    def clone(self) -> "MarketState":
        """Shallow container copy; curves are shared."""
        return MarketState(self.curves.values())

    def get_clone_for_parameter(
        self,
        curves: Sequence[AbstractCurve],
        parameters: Sequence[float]
    ) -> "MarketState":
        """
        New state where each listed curve is replaced by an independent
        clone carrying its slice of the joint parameter vector.

        Args:
            curves: Curves to replace, in parameter order
            parameters: Concatenated parameter vector of all listed curves

        Returns:
            New MarketState; the original state and curves are untouched
        """
        parameters = np.asarray(parameters, dtype=np.float64)
        expected = sum(len(c.get_parameter()) for c in curves)
        if len(parameters) != expected:
            raise DataError(f"Expected {expected} parameters, got {len(parameters)}")

        new_state = self.clone()
        offset = 0
        for curve in curves:
            n = len(curve.get_parameter())
            new_state.set_curve(curve.clone_with_parameter(parameters[offset:offset + n]))
            offset += n
        return new_state

    def __contains__(self, name: str) -> bool:
        return name in self.curves

    def __repr__(self) -> str:
        return f"MarketState(curves={self.curve_names})"


__all__ = ["MarketState"]
