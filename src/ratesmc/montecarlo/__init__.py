"""
Monte Carlo package - noise sources, Euler scheme and the LIBOR market model.
"""

from .brownian_motion import IndependentIncrements, BrownianMotion, BrownianMotionView
from .process import ProcessModel, EulerSchemeProcess
from .libor_market_model import LIBORMarketModel, LIBORModelMonteCarloSimulation

__all__ = [
    "IndependentIncrements",
    "BrownianMotion",
    "BrownianMotionView",
    "ProcessModel",
    "EulerSchemeProcess",
    "LIBORMarketModel",
    "LIBORModelMonteCarloSimulation",
]
