"""
Unit tests for curves module.
"""

from datetime import date
import threading
import numpy as np
import pytest

from ratesmc.curves import (
    Curve,
    DiscountCurve,
    ExtrapolationMethod,
    ForwardCurve,
    ForwardCurveFromDiscountCurve,
    InterpolationEntity,
    InterpolationMethod,
    SeasonalCurve,
    create_curve_from_points,
    create_flat_discount_curve,
)
from ratesmc.curves.seasonal import season_of
from ratesmc.exceptions import DataError, DuplicatePointError, InsufficientDataError, ValuationError
from ratesmc.market_state import MarketState


class TestCurvePoints:
    """Tests for point handling."""

    def test_points_sorted(self):
        curve = Curve("c", InterpolationMethod.LINEAR, interpolation_entity=InterpolationEntity.VALUE)
        curve.add_point(3.0, 0.3)
        curve.add_point(1.0, 0.1)
        curve.add_point(2.0, 0.2)
        assert [t for t, _ in curve.get_points()] == [1.0, 2.0, 3.0]
        np.testing.assert_allclose(curve.get_parameter(), [0.1, 0.2, 0.3])

    def test_same_point_twice_is_noop(self):
        curve = Curve("c")
        curve.add_point(1.0, 0.9)
        curve.add_point(1.0, 0.9)
        assert curve.get_number_of_points() == 1

    def test_conflicting_point_raises(self):
        curve = Curve("c")
        curve.add_point(1.0, 0.9)
        with pytest.raises(DuplicatePointError):
            curve.add_point(1.0, 0.8)

    def test_log_entity_rejects_non_positive(self):
        curve = Curve("c", interpolation_entity=InterpolationEntity.LOG_OF_VALUE)
        with pytest.raises(DataError):
            curve.add_point(1.0, 0.0)

    def test_log_per_time_rejects_time_zero(self):
        curve = DiscountCurve("d")
        with pytest.raises(DataError):
            curve.add_point(0.0, 1.0)

    def test_empty_curve_raises_on_evaluation(self):
        with pytest.raises(InsufficientDataError):
            Curve("c").get_value(1.0)


class TestCurveParameters:
    """Tests for the parameter vector and cache invalidation."""

    def test_set_parameter_changes_values(self):
        curve = create_curve_from_points("c", [1.0, 2.0], [0.9, 0.8],
                                         interpolation_method=InterpolationMethod.LINEAR)
        assert curve.get_value(2.0) == pytest.approx(0.8)
        curve.set_parameter([0.95, 0.85])
        assert curve.get_value(2.0) == pytest.approx(0.85)
        np.testing.assert_allclose(curve.get_parameter(), [0.95, 0.85])

    def test_set_parameter_wrong_length(self):
        curve = create_curve_from_points("c", [1.0, 2.0], [0.9, 0.8])
        with pytest.raises(DataError):
            curve.set_parameter([0.9])

    def test_clone_is_independent(self):
        curve = create_curve_from_points("c", [1.0, 2.0], [0.9, 0.8])
        clone = curve.clone_with_parameter([0.5, 0.4])
        np.testing.assert_allclose(curve.get_parameter(), [0.9, 0.8])
        np.testing.assert_allclose(clone.get_parameter(), [0.5, 0.4])

    def test_concurrent_readers_build_once(self):
        curve = create_curve_from_points("c", np.arange(1.0, 20.0), np.linspace(0.99, 0.6, 19))
        barrier = threading.Barrier(8)

        def read():
            barrier.wait()
            curve.get_value(7.5)

        threads = [threading.Thread(target=read) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert curve._interpolation.build_count == 1

        curve.add_point(25.0, 0.5)
        curve.get_value(7.5)
        assert curve._interpolation.build_count == 2


@pytest.mark.parametrize("method", [InterpolationMethod.LINEAR, InterpolationMethod.CUBIC_SPLINE])
@pytest.mark.parametrize("entity", list(InterpolationEntity))
def test_points_round_trip(method, entity):
    times = [0.5, 1.0, 2.0, 4.0]
    values = [0.99, 0.97, 0.93, 0.86]
    curve = Curve("curve", method, ExtrapolationMethod.CONSTANT, entity)
    for t, v in zip(times, values):
        curve.add_point(t, v)

    np.testing.assert_allclose(curve.get_parameter(), values, rtol=1e-12)
    np.testing.assert_allclose([curve.get_value(t) for t in times], values, rtol=1e-12)

    shifted = [v - 0.01 for v in values]
    curve.set_parameter(shifted)
    np.testing.assert_allclose(curve.get_parameter(), shifted, rtol=1e-12)
    np.testing.assert_allclose([curve.get_value(t) for t in times], shifted, rtol=1e-12)


class TestDiscountCurve:
    """Tests for discount curves."""

    @pytest.fixture
    def sample_curve(self):
        return create_flat_discount_curve("discount", rate=0.05)

    def test_discount_factor_at_zero(self, sample_curve):
        assert sample_curve.get_discount_factor(0.0) == pytest.approx(1.0)

    def test_flat_rate(self, sample_curve):
        for t in (0.3, 1.0, 7.0, 40.0):
            assert sample_curve.get_discount_factor(t) == pytest.approx(np.exp(-0.05 * t))
            assert sample_curve.get_zero_rate(t) == pytest.approx(0.05)

    def test_create_skips_unit_point_at_zero(self):
        curve = DiscountCurve.create_from_discount_factors("d", [0.0, 1.0, 2.0], [1.0, 0.97, 0.94])
        assert curve.get_number_of_points() == 2
        assert curve.get_discount_factor(2.0) == pytest.approx(0.94)


class TestForwardCurves:
    """Tests for forward curves."""

    def test_forward_curve_payment_offset(self):
        curve = ForwardCurve.create_from_forwards("fwd", [0.0, 1.0], [0.02, 0.03], payment_offset=0.5)
        assert curve.get_forward(0.5) == pytest.approx(0.025)
        assert curve.get_payment_offset(0.7) == pytest.approx(0.5)
        clone = curve.clone()
        assert clone.get_payment_offset(0.0) == pytest.approx(0.5)

    def test_forward_curve_rejects_other_payment_offset(self):
        curve = ForwardCurve.create_from_forwards("fwd", [0.0, 1.0], [0.02, 0.03], payment_offset=0.5)
        assert curve.get_forward(1.0, None, 0.5) == pytest.approx(0.03)
        with pytest.raises(ValuationError):
            curve.get_forward(1.0, None, 1.0)

    def test_forward_from_discount_curve(self):
        discount = create_flat_discount_curve("discount", rate=0.04)
        model = MarketState([discount])
        forward = ForwardCurveFromDiscountCurve("fwd", "discount", 0.5)
        expected = (np.exp(0.04 * 0.5) - 1.0) / 0.5
        assert forward.get_forward(2.0, model) == pytest.approx(expected)
        assert len(forward.get_parameter()) == 0

    def test_forward_from_discount_requires_model(self):
        forward = ForwardCurveFromDiscountCurve("fwd", "discount", 0.5)
        with pytest.raises(DataError):
            forward.get_forward(1.0)


class TestSeasonalCurve:
    """Tests for seasonal curves."""

    def test_periodic(self):
        base = create_curve_from_points("season", [0.0, 0.5], [1.0, 2.0],
                                        interpolation_method=InterpolationMethod.LINEAR,
                                        interpolation_entity=InterpolationEntity.VALUE)
        curve = SeasonalCurve("seasonal", date(2021, 1, 1), base)
        assert curve.get_value(0.0) == pytest.approx(1.0)
        assert curve.get_value(1.25) == curve.get_value(0.25)
        assert 1.0 < curve.get_value(0.25) < 2.0
        np.testing.assert_allclose(curve.get_parameter(), [1.0, 2.0])

    def test_half_day_rounds_up(self):
        base = create_curve_from_points("season", [0.0, 1.0], [0.0, 1.0],
                                        interpolation_method=InterpolationMethod.LINEAR,
                                        interpolation_entity=InterpolationEntity.VALUE)
        curve = SeasonalCurve("seasonal", date(2021, 1, 1), base)
        # 0.5 * 365 = 182.5 days lands on 2021-07-03
        assert curve.get_value(0.5) == pytest.approx(season_of(date(2021, 7, 3)))
        assert curve.get_value(0.5) != pytest.approx(season_of(date(2021, 7, 2)))
