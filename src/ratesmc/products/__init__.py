"""
Products package - calibration instruments.

Analytic products are valued against a MarketState, Monte Carlo products
against a LIBORModelMonteCarloSimulation.
"""

from .analytic import AnalyticProduct, SwapLeg, Swap, ZeroCouponBond
from .monte_carlo import MonteCarloProduct, MonteCarloZeroCouponBond, MonteCarloCaplet

__all__ = [
    "AnalyticProduct",
    "SwapLeg",
    "Swap",
    "ZeroCouponBond",
    "MonteCarloProduct",
    "MonteCarloZeroCouponBond",
    "MonteCarloCaplet",
]
