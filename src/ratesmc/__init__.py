"""
RatesMC: Curve and LIBOR Market Model Calibration Library

A modular library for:
- Interpolated discount, forward and seasonal curves
- Joint calibration of curves to swaps, swap legs and zero coupon bonds
- Parametric (and stochastic volatility) covariance models of forward rates
- Monte Carlo simulation of the LIBOR market model
- Calibration of covariance models to Monte Carlo product prices
"""

__version__ = "0.1.0"

# Core modules
from .exceptions import (
    RatesMCError,
    DataError,
    CalculationError,
    SolverError,
    ValuationError,
    UnsupportedOperationError,
    CalibrationError,
)
from .config import SimulationSettings, CalibrationSettings, CurveCalibrationSettings
from .time_discretization import TimeDiscretization
from .schedule import Schedule, RegularSchedule

# Curves
from .curves import (
    Curve,
    DiscountCurve,
    ForwardCurve,
    ForwardCurveFromDiscountCurve,
    SeasonalCurve,
    InterpolationMethod,
    ExtrapolationMethod,
    InterpolationEntity,
    RationalFunctionInterpolation,
)
from .market_state import MarketState

# Monte Carlo
from .montecarlo import (
    BrownianMotion,
    BrownianMotionView,
    EulerSchemeProcess,
    LIBORMarketModel,
    LIBORModelMonteCarloSimulation,
)

# Covariance models
from .models import (
    CovarianceModelParametric,
    CovarianceModelFromVolatilityAndCorrelation,
    CovarianceModelExponentialForm5Param,
    StochasticVolatilityCovarianceModel,
    FourParameterExponentialVolatility,
    ExponentialDecayCorrelation,
)

# Products
from .products import (
    SwapLeg,
    Swap,
    ZeroCouponBond,
    MonteCarloZeroCouponBond,
    MonteCarloCaplet,
)

# Calibration
from .calibration import (
    CalibrationProductSet,
    CalibrationResult,
    CalibrationStatus,
    CovarianceModelCalibrator,
    Solver,
    CalibrationSpec,
    CalibratedCurves,
)

__all__ = [
    "RatesMCError",
    "DataError",
    "CalculationError",
    "SolverError",
    "ValuationError",
    "UnsupportedOperationError",
    "CalibrationError",
    "SimulationSettings",
    "CalibrationSettings",
    "CurveCalibrationSettings",
    "TimeDiscretization",
    "Schedule",
    "RegularSchedule",
    "Curve",
    "DiscountCurve",
    "ForwardCurve",
    "ForwardCurveFromDiscountCurve",
    "SeasonalCurve",
    "InterpolationMethod",
    "ExtrapolationMethod",
    "InterpolationEntity",
    "RationalFunctionInterpolation",
    "MarketState",
    "BrownianMotion",
    "BrownianMotionView",
    "EulerSchemeProcess",
    "LIBORMarketModel",
    "LIBORModelMonteCarloSimulation",
    "CovarianceModelParametric",
    "CovarianceModelFromVolatilityAndCorrelation",
    "CovarianceModelExponentialForm5Param",
    "StochasticVolatilityCovarianceModel",
    "FourParameterExponentialVolatility",
    "ExponentialDecayCorrelation",
    "SwapLeg",
    "Swap",
    "ZeroCouponBond",
    "MonteCarloZeroCouponBond",
    "MonteCarloCaplet",
    "CalibrationProductSet",
    "CalibrationResult",
    "CalibrationStatus",
    "CovarianceModelCalibrator",
    "Solver",
    "CalibrationSpec",
    "CalibratedCurves",
]
