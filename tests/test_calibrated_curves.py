"""
Tests for the curve solver and CalibratedCurves.
"""

import numpy as np
import pytest

from ratesmc.calibration import CalibratedCurves, CalibrationSpec, Solver
from ratesmc.curves import DiscountCurve, create_flat_discount_curve
from ratesmc.exceptions import CalibrationError, DataError
from ratesmc.market_state import MarketState
from ratesmc.products import Swap, SwapLeg, ZeroCouponBond
from ratesmc.schedule import RegularSchedule


def zero_coupon_spec(maturity, price, curve="discount"):
    return CalibrationSpec(
        type="zerocouponbond",
        swap_tenor_definition_receiver=(0.0, 1, maturity),
        forward_curve_receiver_name=None,
        spread_receiver=0.0,
        discount_curve_receiver_name=curve,
        calibration_curve_name=curve,
        calibration_time=maturity,
        target_value=price,
    )


def par_swap_spec(years, fixed_rate):
    return CalibrationSpec(
        type="swap",
        swap_tenor_definition_receiver=(0.0, years, 1.0),
        forward_curve_receiver_name=None,
        spread_receiver=fixed_rate,
        discount_curve_receiver_name="discount",
        swap_tenor_definition_payer=(0.0, years, 1.0),
        forward_curve_payer_name="libor",
        spread_payer=0.0,
        discount_curve_payer_name="discount",
        calibration_curve_name="libor",
        calibration_time=float(years),
    )


class TestProducts:
    """Tests for analytic products."""

    @pytest.fixture
    def model(self):
        return MarketState([create_flat_discount_curve("discount", 0.03)])

    def test_zero_coupon_bond(self, model):
        bond = ZeroCouponBond(5.0, "discount")
        assert bond.get_value(0.0, model) == pytest.approx(np.exp(-0.15))
        assert bond.get_value(5.0, model) == 0.0

    def test_fixed_leg_annuity(self, model):
        leg = SwapLeg(RegularSchedule.from_tenor(0.0, 3, 1.0), None, 0.02, "discount")
        annuity = sum(np.exp(-0.03 * t) for t in (1.0, 2.0, 3.0))
        assert leg.get_value(0.0, model) == pytest.approx(0.02 * annuity)

    def test_swap_is_receiver_minus_payer(self, model):
        schedule = RegularSchedule.from_tenor(0.0, 2, 1.0)
        receiver = SwapLeg(schedule, None, 0.03, "discount")
        payer = SwapLeg(schedule, None, 0.01, "discount")
        swap = Swap(receiver, payer)
        assert swap.get_value(0.0, model) == pytest.approx(
            receiver.get_value(0.0, model) - payer.get_value(0.0, model)
        )


class TestSolver:
    """Tests for the multi-curve solver."""

    def test_solves_zero_coupon_bonds(self):
        curve = DiscountCurve("discount")
        curve.add_point(2.0, 0.5)
        curve.add_point(5.0, 0.5)
        model = MarketState([curve])
        products = [ZeroCouponBond(2.0, "discount"), ZeroCouponBond(5.0, "discount")]
        solver = Solver(model, products, [0.95, 0.85])

        calibrated = solver.get_calibrated_model([curve])

        assert calibrated.get_discount_curve("discount").get_discount_factor(2.0) == pytest.approx(0.95, abs=1e-8)
        assert calibrated.get_discount_curve("discount").get_discount_factor(5.0) == pytest.approx(0.85, abs=1e-8)
        assert solver.iterations > 0
        np.testing.assert_allclose(curve.get_parameter(), [0.5, 0.5])

    def test_underdetermined_raises(self):
        curve = DiscountCurve("discount")
        curve.add_point(2.0, 0.5)
        curve.add_point(5.0, 0.5)
        solver = Solver(MarketState([curve]), [ZeroCouponBond(2.0, "discount")], [0.95])
        with pytest.raises(CalibrationError) as info:
            solver.get_calibrated_model([curve])
        assert info.value.stage == "data"


class TestCalibratedCurves:
    """Tests for the calibration orchestrator."""

    def test_five_year_zero_coupon_bond(self):
        curves = CalibratedCurves([zero_coupon_spec(5.0, 0.90)])

        discount = curves.get_curve("discount")
        assert discount.get_discount_factor(5.0) == pytest.approx(0.90, abs=1e-8)
        assert curves.get_last_number_of_iterations() > 0

    def test_reuses_existing_curve(self):
        discount = DiscountCurve("discount")
        model = MarketState([discount])

        curves = CalibratedCurves([zero_coupon_spec(1.0, 0.97), zero_coupon_spec(3.0, 0.91)], model)

        assert model.get_curve("discount") is discount
        assert discount.get_number_of_points() == 2
        assert curves.get_model().curve_names == ["discount"]
        assert curves.get_curve("discount").get_discount_factor(3.0) == pytest.approx(0.91, abs=1e-8)

    def test_par_swaps_give_flat_forwards(self):
        forward = np.exp(0.03) - 1.0
        model = MarketState([create_flat_discount_curve("discount", 0.03)])
        specs = [par_swap_spec(years, forward) for years in (1, 2, 3)]

        curves = CalibratedCurves(specs, model)

        libor = curves.get_model().get_forward_curve("libor")
        assert libor is not None
        np.testing.assert_allclose(libor.get_parameter(), [forward] * 3, atol=1e-8)
        report = curves.repricing_report()
        assert len(report) == 3
        assert report['error'].abs().max() < 1e-8

    def test_single_curve_swaps_through_implied_forward(self):
        fixed_rate = np.exp(0.03) - 1.0
        specs = []
        for years in (1, 2, 3):
            spec = par_swap_spec(years, fixed_rate)
            spec.forward_curve_payer_name = "discount"
            spec.calibration_curve_name = "discount"
            specs.append(spec)

        curves = CalibratedCurves(specs)

        model = curves.get_model()
        assert "ForwardCurveFromDiscountCurve(discount,1.0)" in model
        assert "libor" not in model
        discount = model.get_discount_curve("discount")
        for t in (1.0, 2.0, 3.0):
            assert discount.get_discount_factor(t) == pytest.approx(np.exp(-0.03 * t), abs=1e-8)

    def test_swap_requires_payer_schedule(self):
        spec = par_swap_spec(2, 0.03)
        spec.swap_tenor_definition_payer = None
        with pytest.raises(DataError):
            CalibratedCurves([spec], MarketState([create_flat_discount_curve("discount", 0.03)]))

    def test_unknown_product_type(self):
        spec = zero_coupon_spec(5.0, 0.9)
        spec.type = "capfloor"
        with pytest.raises(DataError):
            CalibratedCurves([spec])

    def test_tenor_definition_coerced(self):
        spec = zero_coupon_spec(5.0, 0.9)
        assert isinstance(spec.swap_tenor_definition_receiver, RegularSchedule)
        assert spec.swap_tenor_definition_receiver.get_payment(0) == 5.0
