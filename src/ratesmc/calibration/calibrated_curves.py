"""
Calibrated curves from a list of calibration specifications.

Each CalibrationSpec describes one instrument (swap, swap leg or zero
coupon bond) through its schedules, curve names and spreads, plus the
curve it calibrates and the time of the point it contributes. The
orchestrator:
1. Creates every referenced curve that does not exist yet
2. Builds the instrument
3. Adds a placeholder point to the calibration curve
4. Solves all points jointly so that each instrument prices to its target
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence
import pandas as pd

from ..config import CurveCalibrationSettings
from ..curves.curve import AbstractCurve, Curve
from ..curves.discount import DiscountCurve
from ..curves.forward import ForwardCurve, ForwardCurveFromDiscountCurve
from ..exceptions import DataError
from ..market_state import MarketState
from ..products.analytic import AnalyticProduct, Swap, SwapLeg, ZeroCouponBond
from ..schedule import Schedule, TenorDefinition, as_schedule
from .solver import Solver

logger = logging.getLogger(__name__)


@dataclass
class CalibrationSpec:
    """
    Specification of one calibration instrument.

    Attributes:
        type: "swap", "swapleg" or "zerocouponbond"
        swap_tenor_definition_receiver: Receiver schedule or (initial, periods, length)
        forward_curve_receiver_name: Receiver forward curve (None for a fixed leg)
        spread_receiver: Receiver fixed rate or spread
        discount_curve_receiver_name: Receiver discount curve
        calibration_curve_name: Curve receiving the calibration point
        calibration_time: Point time for curves other than discount/forward curves
        swap_tenor_definition_payer: Payer schedule (swaps only)
        forward_curve_payer_name: Payer forward curve
        spread_payer: Payer fixed rate or spread
        discount_curve_payer_name: Payer discount curve
        target_value: Value the instrument must reprice to
    """
    type: str
    swap_tenor_definition_receiver: TenorDefinition
    forward_curve_receiver_name: Optional[str]
    spread_receiver: float
    discount_curve_receiver_name: str
    calibration_curve_name: str
    calibration_time: float
    swap_tenor_definition_payer: Optional[TenorDefinition] = None
    forward_curve_payer_name: Optional[str] = None
    spread_payer: float = 0.0
    discount_curve_payer_name: Optional[str] = None
    target_value: float = 0.0

    def __post_init__(self):
        self.swap_tenor_definition_receiver = as_schedule(self.swap_tenor_definition_receiver)
        if self.swap_tenor_definition_payer is not None:
            self.swap_tenor_definition_payer = as_schedule(self.swap_tenor_definition_payer)


class CalibratedCurves:
    """
    Curves calibrated to a set of instruments.

    Curves already present in ``model`` are reused and receive the new
    points; missing ones are created. The calibrated curves are held in a
    new MarketState available from ``get_model``.
    """

    def __init__(
        self,
        calibration_specs: Sequence[CalibrationSpec],
        model: Optional[MarketState] = None,
        settings: Optional[CurveCalibrationSettings] = None,
        evaluation_time: float = 0.0
    ):
        self.model = model if model is not None else MarketState()
        self.settings = settings or CurveCalibrationSettings()
        self.evaluation_time = evaluation_time

        self.calibration_specs: List[CalibrationSpec] = list(calibration_specs)
        self.calibration_products: List[AnalyticProduct] = []
        self.target_values: List[float] = []
        self.curves_to_calibrate: List[AbstractCurve] = []

        for spec in self.calibration_specs:
            self._add(spec)

        self.solver = Solver(self.model, self.calibration_products, self.target_values,
                             self.settings, evaluation_time)
        self.model = self.solver.get_calibrated_model(self.curves_to_calibrate)
        self.last_number_of_iterations = self.solver.iterations

    def get_model(self) -> MarketState:
        return self.model

    def get_curve(self, name: str) -> Optional[AbstractCurve]:
        return self.model.get_curve(name)

    def get_last_number_of_iterations(self) -> int:
        return self.last_number_of_iterations

    def get_calibration_product_for_spec(self, spec: CalibrationSpec) -> AnalyticProduct:
        """Create the curves referenced by ``spec`` and build its instrument."""
        self._create_discount_curve(spec.discount_curve_receiver_name)
        self._create_discount_curve(spec.discount_curve_payer_name)

        forward_curve_receiver_name = self._create_forward_curve(
            spec.swap_tenor_definition_receiver, spec.forward_curve_receiver_name
        )
        forward_curve_payer_name = self._create_forward_curve(
            spec.swap_tenor_definition_payer, spec.forward_curve_payer_name
        )

        product_type = spec.type.lower()
        if product_type == "swap":
            if spec.swap_tenor_definition_payer is None or spec.discount_curve_payer_name is None:
                raise DataError("Swap requires a payer schedule and discount curve")
            receiver_leg = SwapLeg(spec.swap_tenor_definition_receiver, forward_curve_receiver_name,
                                   spec.spread_receiver, spec.discount_curve_receiver_name)
            payer_leg = SwapLeg(spec.swap_tenor_definition_payer, forward_curve_payer_name,
                                spec.spread_payer, spec.discount_curve_payer_name)
            return Swap(receiver_leg, payer_leg)
        if product_type == "swapleg":
            return SwapLeg(spec.swap_tenor_definition_receiver, forward_curve_receiver_name,
                           spec.spread_receiver, spec.discount_curve_receiver_name,
                           is_notional_exchanged=True)
        if product_type == "zerocouponbond":
            schedule = spec.swap_tenor_definition_receiver
            maturity = schedule.get_payment(schedule.get_number_of_periods() - 1)
            return ZeroCouponBond(maturity, spec.discount_curve_receiver_name)
        raise DataError(f"Product of type {spec.type} unknown")

    def _add(self, spec: CalibrationSpec) -> None:
        self.calibration_products.append(self.get_calibration_product_for_spec(spec))
        self.target_values.append(spec.target_value)

        curve = self.model.get_curve(spec.calibration_curve_name)
        if curve is None:
            raise DataError(f"Calibration curve {spec.calibration_curve_name} not found")

        schedule = spec.swap_tenor_definition_payer or spec.swap_tenor_definition_receiver
        last_period = schedule.get_number_of_periods() - 1
        initial_value = self.settings.initial_point_value

        if isinstance(curve, DiscountCurve):
            curve.add_point(schedule.get_payment(last_period), initial_value)
        elif isinstance(curve, ForwardCurve):
            fixing = schedule.get_fixing(last_period)
            curve.payment_offsets.add_point(fixing, schedule.get_payment(last_period) - fixing)
            curve.add_point(fixing, initial_value)
        elif isinstance(curve, Curve):
            curve.add_point(spec.calibration_time, initial_value)
        else:
            raise DataError(f"Curve {spec.calibration_curve_name} has no points to calibrate")

        if not any(c is curve for c in self.curves_to_calibrate):
            self.curves_to_calibrate.append(curve)

    def _create_discount_curve(self, name: Optional[str]) -> None:
        if not name or self.model.get_curve(name) is not None:
            return
        logger.debug("Creating discount curve %s", name)
        self.model.set_curve(DiscountCurve(name))

    def _create_forward_curve(self, schedule: Optional[Schedule], name: Optional[str]) -> Optional[str]:
        """
        Create a forward curve named ``name`` if absent.

        If ``name`` refers to a discount curve, a forward curve implied by
        it (with the schedule's first period length) is created instead
        and its name returned.
        """
        if not name:
            return None

        curve = self.model.get_curve(name)
        if curve is None:
            logger.debug("Creating forward curve %s", name)
            self.model.set_curve(ForwardCurve(name))
            return name

        if isinstance(curve, DiscountCurve):
            if schedule is None:
                raise DataError(f"Forward curve from discount curve {name} requires a schedule")
            period_length = schedule.get_period_length(0)
            forward_name = f"ForwardCurveFromDiscountCurve({name},{period_length})"
            if self.model.get_curve(forward_name) is None:
                self.model.set_curve(ForwardCurveFromDiscountCurve(forward_name, name, period_length))
            return forward_name

        return name

    def repricing_report(self) -> pd.DataFrame:
        """Calibration instruments repriced on the calibrated curves."""
        rows = []
        for spec, product, target in zip(self.calibration_specs, self.calibration_products,
                                         self.target_values):
            value = product.get_value(self.evaluation_time, self.model)
            rows.append({
                'type': spec.type,
                'calibration_curve': spec.calibration_curve_name,
                'target': target,
                'value': value,
                'error': value - target,
            })
        return pd.DataFrame(rows)


__all__ = ["CalibrationSpec", "CalibratedCurves"]
