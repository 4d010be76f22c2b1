"""
Products valued by Monte Carlo against a LIBORModelMonteCarloSimulation.

Value at evaluation time t of a payoff X paid at T is the path average of
X N(t) / N(T), N being the simulation's numeraire.
"""

from abc import ABC, abstractmethod
import numpy as np

from ..exceptions import DataError


class MonteCarloProduct(ABC):
    """Product valued on simulated paths."""

    @abstractmethod
    def get_value(self, evaluation_time: float, simulation) -> float:
        """
        Monte Carlo value of the product.

        Raises:
            ValuationError: If the simulation lacks a required time
        """


class MonteCarloZeroCouponBond(MonteCarloProduct):
    """Unit payment at ``maturity``."""

    def __init__(self, maturity: float):
        self.maturity = maturity

    def get_value(self, evaluation_time: float, simulation) -> float:
        if self.maturity <= evaluation_time:
            return 0.0
        values = simulation.get_numeraire(evaluation_time) / simulation.get_numeraire(self.maturity)
        return float(np.mean(values))

    def __repr__(self) -> str:
        return f"MonteCarloZeroCouponBond(maturity={self.maturity})"


class MonteCarloCaplet(MonteCarloProduct):
    """
    Caplet on the forward rate over [fixing_time, fixing_time + period_length].

    Pays period_length * max(L - strike, 0) at the period end.
    """

    def __init__(self, fixing_time: float, period_length: float, strike: float):
        if period_length <= 0:
            raise DataError(f"Period length must be positive, got {period_length}")
        self.fixing_time = fixing_time
        self.period_length = period_length
        self.strike = strike

    def get_value(self, evaluation_time: float, simulation) -> float:
        payment_time = self.fixing_time + self.period_length
        if payment_time <= evaluation_time:
            return 0.0

        libor_index = simulation.get_libor_index(self.fixing_time)
        libor = simulation.get_libor_at_time(self.fixing_time, libor_index)
        payoff = self.period_length * np.maximum(libor - self.strike, 0.0)

        values = payoff * simulation.get_numeraire(evaluation_time) / simulation.get_numeraire(payment_time)
        return float(np.mean(values))

    def __repr__(self) -> str:
        return (f"MonteCarloCaplet(fixing={self.fixing_time}, "
                f"period_length={self.period_length}, strike={self.strike})")


__all__ = ["MonteCarloProduct", "MonteCarloZeroCouponBond", "MonteCarloCaplet"]
