"""
Shared fixtures: a small tenor structure, a flat curve and covariance models.
"""

import pytest

from ratesmc.curves import create_flat_discount_curve
from ratesmc.models import (
    CovarianceModelFromVolatilityAndCorrelation,
    ExponentialDecayCorrelation,
    FourParameterExponentialVolatility,
)
from ratesmc.montecarlo import BrownianMotion, LIBORMarketModel
from ratesmc.time_discretization import TimeDiscretization


@pytest.fixture
def libor_periods():
    """Five yearly forward rates, T = 0, 1, ..., 5."""
    return TimeDiscretization.from_uniform(0.0, 5, 1.0)


@pytest.fixture
def simulation_times():
    """Half-yearly simulation grid up to 5y."""
    return TimeDiscretization.from_uniform(0.0, 10, 0.5)


@pytest.fixture
def flat_discount_curve():
    return create_flat_discount_curve("discount", rate=0.03)


@pytest.fixture
def covariance_model(simulation_times, libor_periods):
    volatility = FourParameterExponentialVolatility(simulation_times, libor_periods,
                                                    0.10, 0.02, 0.30, 0.10)
    correlation = ExponentialDecayCorrelation(libor_periods, 2, 0.1)
    return CovarianceModelFromVolatilityAndCorrelation(volatility, correlation)


@pytest.fixture
def libor_market_model(libor_periods, flat_discount_curve, covariance_model):
    return LIBORMarketModel(libor_periods, flat_discount_curve, covariance_model)


@pytest.fixture
def brownian_motion(simulation_times):
    return BrownianMotion(simulation_times, number_of_factors=2, number_of_paths=500, seed=3141)
