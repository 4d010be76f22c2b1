"""
Models package - parametric covariance models of forward rates.

Provides:
- Volatility and correlation sub-models
- CovarianceModelFromVolatilityAndCorrelation and the five-parameter form
- StochasticVolatilityCovarianceModel decorator
"""

from .parameters import concatenate_parameters, split_parameters
from .volatility import VolatilityModel, FourParameterExponentialVolatility, ConstantVolatility
from .correlation import CorrelationModel, ExponentialDecayCorrelation, factor_reduction
from .covariance import (
    CovarianceModelParametric,
    CovarianceModelFromVolatilityAndCorrelation,
    CovarianceModelExponentialForm5Param,
)
from .stochastic_volatility import StochasticVolatilityCovarianceModel

__all__ = [
    "concatenate_parameters",
    "split_parameters",
    "VolatilityModel",
    "FourParameterExponentialVolatility",
    "ConstantVolatility",
    "CorrelationModel",
    "ExponentialDecayCorrelation",
    "factor_reduction",
    "CovarianceModelParametric",
    "CovarianceModelFromVolatilityAndCorrelation",
    "CovarianceModelExponentialForm5Param",
    "StochasticVolatilityCovarianceModel",
]
