"""
Tests for the noise source, the Euler scheme and the LIBOR market model.
"""

from concurrent.futures import ThreadPoolExecutor
import numpy as np
import pytest
from scipy.stats import norm

from ratesmc.exceptions import DataError, ValuationError
from ratesmc.montecarlo import (
    BrownianMotion,
    BrownianMotionView,
    EulerSchemeProcess,
    LIBORMarketModel,
    LIBORModelMonteCarloSimulation,
)
from ratesmc.products import MonteCarloCaplet, MonteCarloZeroCouponBond
from ratesmc.time_discretization import TimeDiscretization


class TestBrownianMotion:
    """Tests for the noise source."""

    def test_deterministic_in_seed(self, simulation_times):
        first = BrownianMotion(simulation_times, 2, 100, seed=7)
        second = BrownianMotion(simulation_times, 2, 100, seed=7)
        other = BrownianMotion(simulation_times, 2, 100, seed=8)
        np.testing.assert_array_equal(first.get_increment(3, 1), second.get_increment(3, 1))
        assert not np.array_equal(first.get_increment(3, 1), other.get_increment(3, 1))

    def test_increment_variance(self, simulation_times):
        brownian_motion = BrownianMotion(simulation_times, 1, 20000, seed=11)
        increments = brownian_motion.get_increment(0, 0)
        assert np.var(increments) == pytest.approx(0.5, rel=0.05)

    def test_increments_read_only(self, brownian_motion):
        with pytest.raises(ValueError):
            brownian_motion.get_increments(0)[0, 0] = 1.0

    def test_view_selects_factors(self, simulation_times):
        brownian_motion = BrownianMotion(simulation_times, 3, 50, seed=1)
        view = BrownianMotionView(brownian_motion, [2, 0])
        assert view.get_number_of_factors() == 2
        np.testing.assert_array_equal(view.get_increment(4, 0), brownian_motion.get_increment(4, 2))
        np.testing.assert_array_equal(view.get_increments(4)[1], brownian_motion.get_increment(4, 0))

    def test_view_out_of_range(self, brownian_motion):
        with pytest.raises(DataError):
            BrownianMotionView(brownian_motion, [5])


class TestEulerScheme:
    """Tests for memoisation and determinism of the Euler scheme."""

    def test_steps_are_memoised(self, libor_market_model, brownian_motion):
        process = EulerSchemeProcess(brownian_motion, libor_market_model)
        first = process.get_process_values(6)
        assert process.get_number_of_simulated_steps() == 6
        assert process.get_process_values(6) is first
        process.get_process_value(2, 4)
        assert process.get_number_of_simulated_steps() == 6

    def test_same_noise_same_paths(self, libor_market_model, brownian_motion):
        first = EulerSchemeProcess(brownian_motion, libor_market_model)
        second = EulerSchemeProcess(brownian_motion, libor_market_model)
        np.testing.assert_array_equal(first.get_process_values(8), second.get_process_values(8))

    def test_concurrent_readers(self, libor_market_model, brownian_motion):
        reference = EulerSchemeProcess(brownian_motion, libor_market_model).get_process_values(10)
        process = EulerSchemeProcess(brownian_motion, libor_market_model)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda i: process.get_process_values(10 - i % 3), range(24)))
        np.testing.assert_array_equal(process.get_process_values(10), reference)
        assert process.get_number_of_simulated_steps() == 10
        assert len(results) == 24

    def test_time_index_out_of_range(self, libor_market_model, brownian_motion):
        process = EulerSchemeProcess(brownian_motion, libor_market_model)
        with pytest.raises(ValuationError):
            process.get_process_value(11, 0)

    def test_not_enough_factors(self, libor_market_model, simulation_times):
        with pytest.raises(DataError):
            EulerSchemeProcess(BrownianMotion(simulation_times, 1, 10, 1), libor_market_model)


class TestLIBORMarketModel:
    """Tests for the LIBOR market model and its simulation."""

    @pytest.fixture
    def simulation(self, libor_market_model, brownian_motion):
        return LIBORModelMonteCarloSimulation.create(libor_market_model, brownian_motion)

    def test_initial_forwards(self, libor_market_model):
        np.testing.assert_allclose(libor_market_model.get_initial_forwards(), np.exp(0.03) - 1.0)

    def test_initial_libor_on_all_paths(self, simulation):
        np.testing.assert_allclose(simulation.get_libor(0, 3), np.exp(0.03) - 1.0)

    def test_fixed_rates_stop_moving(self, simulation):
        # L_1 fixes at T_1 = 1.0 (time index 2)
        np.testing.assert_array_equal(simulation.get_libor(2, 1), simulation.get_libor(6, 1))

    def test_numeraire(self, simulation):
        np.testing.assert_allclose(simulation.get_numeraire(0.0), 1.0)
        np.testing.assert_allclose(simulation.get_numeraire(1.0), np.exp(0.03))
        np.testing.assert_allclose(simulation.get_numeraire(0.5), 1.0 + 0.5 * (np.exp(0.03) - 1.0))
        assert np.std(simulation.get_numeraire(3.0)) > 0

    def test_zero_coupon_bond_reprices_curve(self, simulation):
        for maturity in (1.0, 3.0, 5.0):
            value = MonteCarloZeroCouponBond(maturity).get_value(0.0, simulation)
            assert value == pytest.approx(np.exp(-0.03 * maturity), abs=5e-3)

    def test_caplet_close_to_black(self, libor_market_model, covariance_model, simulation_times):
        brownian_motion = BrownianMotion(simulation_times, 2, 5000, seed=2718)
        simulation = LIBORModelMonteCarloSimulation.create(libor_market_model, brownian_motion)

        forward = np.exp(0.03) - 1.0
        variance = sum(covariance_model.volatility_model.get_volatility(i, 2) ** 2 * 0.5
                       for i in range(4))
        d1 = 0.5 * np.sqrt(variance)
        black = np.exp(-0.09) * forward * (norm.cdf(d1) - norm.cdf(-d1))

        value = MonteCarloCaplet(2.0, 1.0, forward).get_value(0.0, simulation)
        assert value == pytest.approx(black, rel=0.1)

    def test_caplet_off_tenor_raises(self, simulation):
        with pytest.raises(ValuationError):
            MonteCarloCaplet(2.5, 1.0, 0.03).get_value(0.0, simulation)

    def test_tenor_not_on_simulation_grid(self, flat_discount_curve, libor_periods):
        from ratesmc.models import CovarianceModelExponentialForm5Param
        coarse = TimeDiscretization.from_uniform(0.0, 4, 0.75)
        covariance_model = CovarianceModelExponentialForm5Param(coarse, libor_periods, 2)
        model = LIBORMarketModel(libor_periods, flat_discount_curve, covariance_model)
        simulation = LIBORModelMonteCarloSimulation.create(model, BrownianMotion(coarse, 2, 10, 1))
        with pytest.raises(ValuationError):
            MonteCarloZeroCouponBond(2.0).get_value(0.0, simulation)

    def test_clone_with_modified_covariance_model(self, libor_market_model, covariance_model):
        other = covariance_model.get_clone_with_modified_parameters([0.2, 0.0, 0.1, 0.05, 0.4])
        clone = libor_market_model.get_clone_with_modified_covariance_model(other)
        assert clone.covariance_model is other
        assert libor_market_model.covariance_model is covariance_model
        np.testing.assert_array_equal(clone.get_initial_state(), libor_market_model.get_initial_state())
