"""FIPlan Core - Financial-independence projection and lever optimization."""

__version__ = "0.1.0"

from .advisory import FallbackAdvisor, calculate_difficulty
from .assumptions import (
    DEFAULT_ASSUMPTIONS,
    DEFAULT_OPTIMIZER_SETTINGS,
    OptimizerSettings,
    PlanningAssumptions,
    get_max_age,
)
from .growth import CorpusGrowthModel
from .models import (
    AdvisoryPreferences,
    FinancialProfile,
    FIProjectionResult,
    HealthStatus,
    OptimizationResult,
    OptimizationSolution,
    Recommendation,
)
from .optimizer import LeverOptimizer
from .projector import FIProjector
from .withdrawal import WithdrawalSustainabilityChecker

__all__ = [
    "CorpusGrowthModel",
    "WithdrawalSustainabilityChecker",
    "FIProjector",
    "LeverOptimizer",
    "FallbackAdvisor",
    "calculate_difficulty",
    "PlanningAssumptions",
    "OptimizerSettings",
    "DEFAULT_ASSUMPTIONS",
    "DEFAULT_OPTIMIZER_SETTINGS",
    "get_max_age",
    "HealthStatus",
    "FinancialProfile",
    "FIProjectionResult",
    "OptimizationSolution",
    "OptimizationResult",
    "AdvisoryPreferences",
    "Recommendation",
]
