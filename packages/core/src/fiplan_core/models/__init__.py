"""Data models for fiplan-core.

This package provides the value objects passed between the engine stages:
- Profile inputs (profile.py)
- Growth, sustainability and projection results (projection.py)
- Optimizer solutions and advisory recommendations (optimization.py)
"""

from fiplan_core.models.profile import (
    MAX_AGE_INPUT,
    MAX_MONTHLY_EXPENDITURE,
    MAX_MONTHLY_INVESTMENT,
    HealthStatus,
    FinancialProfile,
)

from fiplan_core.models.projection import (
    SustainabilityCheck,
    YearlyBreakdown,
    FIProjectionResult,
    MinimumInvestmentResult,
)

from fiplan_core.models.optimization import (
    DifficultyLevel,
    OptimizationSolution,
    AdvisoryPreferences,
    Recommendation,
    OptimizationResult,
)

__all__ = [
    # Input limits
    "MAX_AGE_INPUT",
    "MAX_MONTHLY_EXPENDITURE",
    "MAX_MONTHLY_INVESTMENT",
    # Profile
    "HealthStatus",
    "FinancialProfile",
    # Projection
    "SustainabilityCheck",
    "YearlyBreakdown",
    "FIProjectionResult",
    "MinimumInvestmentResult",
    # Optimization
    "DifficultyLevel",
    "OptimizationSolution",
    "AdvisoryPreferences",
    "Recommendation",
    "OptimizationResult",
]
