"""
Tests for MarketState.
"""

import numpy as np
import pytest

from ratesmc.curves import DiscountCurve, ForwardCurve, create_flat_discount_curve
from ratesmc.exceptions import DataError
from ratesmc.market_state import MarketState


class TestMarketState:
    """Tests for curve lookup and parameter clones."""

    @pytest.fixture
    def state(self):
        discount = DiscountCurve.create_from_discount_factors("discount", [1.0, 2.0], [0.97, 0.94])
        forward = ForwardCurve.create_from_forwards("fwd", [0.0, 1.0], [0.02, 0.03], payment_offset=1.0)
        return MarketState([discount, forward])

    def test_lookup_by_type(self, state):
        assert state.get_discount_curve("discount") is not None
        assert state.get_discount_curve("fwd") is None
        assert state.get_forward_curve("fwd") is not None
        assert state.get_curve(None) is None
        assert "discount" in state
        assert state.curve_names == ["discount", "fwd"]

    def test_clone_for_parameter(self, state):
        discount = state.get_curve("discount")
        forward = state.get_curve("fwd")
        clone = state.get_clone_for_parameter([discount, forward], [0.96, 0.93, 0.025, 0.035])

        np.testing.assert_allclose(clone.get_curve("discount").get_parameter(), [0.96, 0.93])
        np.testing.assert_allclose(clone.get_curve("fwd").get_parameter(), [0.025, 0.035])
        np.testing.assert_allclose(discount.get_parameter(), [0.97, 0.94])
        assert state.get_curve("discount") is discount

    def test_clone_for_parameter_wrong_length(self, state):
        with pytest.raises(DataError):
            state.get_clone_for_parameter([state.get_curve("discount")], [0.9])

    def test_set_curve_replaces(self, state):
        state.set_curve(create_flat_discount_curve("discount", 0.01))
        assert state.get_discount_curve("discount").get_zero_rate(3.0) == pytest.approx(0.01)
