"""Planning assumptions for financial-independence projections.

This module holds the market, inflation and tax assumptions the engine
projects with, plus the optimizer's search grid. Every value has a module
level default and can be overridden by constructing PlanningAssumptions or
OptimizerSettings with different values (see fiplan_agents.config for the
environment-driven loader).

Rates are annual percentages (12.0 means 12%). Buffers are fractions
(0.25 means 25%).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import HealthStatus


# =============================================================================
# VERSION TRACKING
# =============================================================================

ASSUMPTIONS_VERSION = "2025-01"


def get_assumptions_version() -> str:
    """Return current assumptions version."""
    return ASSUMPTIONS_VERSION


# =============================================================================
# LIFE EXPECTANCY
# =============================================================================

MAX_AGE_BY_HEALTH = {
    HealthStatus.NEEDS_IMPROVEMENT: 70,
    HealthStatus.GENERALLY_HEALTHY: 80,
    HealthStatus.VERY_HEALTHY: 90,
}

DEFAULT_MAX_AGE = 80

# FI only counts when reached at or before this age.
FI_AGE_CEILING = 60


# =============================================================================
# ACCUMULATION PHASE
# =============================================================================

INFLATION_RATE = 7.0
SIP_RETURN_RATE_SHORT_TERM = 12.0
SIP_RETURN_RATE_LONG_TERM = 14.0
SIP_SHORT_TERM_THRESHOLD_YEARS = 7
FIXED_INCOME_GROWTH_RATE = 7.0
MARKET_GROWTH_RATE = 12.0


# =============================================================================
# WITHDRAWAL PHASE
# =============================================================================

SWP_RETURN_RATE = 10.0
SWP_STEP_UP_PERCENTAGE = 8.0
CAPITAL_GAINS_TAX_RATE = 12.5
LIFESTYLE_BUFFER = 0.25
SUSTAINABILITY_BUFFER = 0.10


# =============================================================================
# OPTIMIZATION GRID
# =============================================================================

STEP_UP_TEST_VALUES = (0.0, 2.0, 5.0, 7.0, 10.0)
SIP_INCREASE_TEST_VALUES = (0.0, 5.0, 10.0, 15.0, 20.0)
OPTIMIZATION_TARGET_FI_AGE = 40
UNREACHABLE_BASELINE_AGE = 100
MAX_SOLUTIONS = 5


class PlanningAssumptions(BaseModel):
    """Every constant the growth, withdrawal and projection steps consume."""

    model_config = ConfigDict(frozen=True)

    max_age_by_health: dict[HealthStatus, int] = Field(
        default_factory=lambda: dict(MAX_AGE_BY_HEALTH),
        description="Life-expectancy bound per health bucket",
    )
    default_max_age: int = Field(default=DEFAULT_MAX_AGE, gt=0)
    fi_age_ceiling: int = Field(
        default=FI_AGE_CEILING,
        gt=0,
        description="Latest age at which FI is still counted as achieved",
    )
    inflation_rate: float = Field(default=INFLATION_RATE, ge=0)
    sip_return_rate_short_term: float = Field(default=SIP_RETURN_RATE_SHORT_TERM, ge=0)
    sip_return_rate_long_term: float = Field(default=SIP_RETURN_RATE_LONG_TERM, ge=0)
    sip_short_term_threshold_years: int = Field(default=SIP_SHORT_TERM_THRESHOLD_YEARS, ge=0)
    fixed_income_growth_rate: float = Field(default=FIXED_INCOME_GROWTH_RATE, ge=0)
    market_growth_rate: float = Field(default=MARKET_GROWTH_RATE, ge=0)
    swp_return_rate: float = Field(default=SWP_RETURN_RATE, ge=0)
    withdrawal_step_up_percent: float = Field(default=SWP_STEP_UP_PERCENTAGE, ge=0)
    capital_gains_tax_rate: float = Field(default=CAPITAL_GAINS_TAX_RATE, ge=0, lt=100)
    lifestyle_buffer: float = Field(default=LIFESTYLE_BUFFER, ge=0)
    sustainability_buffer: float = Field(default=SUSTAINABILITY_BUFFER, ge=0, le=1)

    @field_validator("max_age_by_health")
    @classmethod
    def validate_max_ages(cls, v: dict[HealthStatus, int]) -> dict[HealthStatus, int]:
        """Ages in the life-expectancy table must be positive."""
        for status, age in v.items():
            if age <= 0:
                raise ValueError(f"Max age for {status.value} must be positive, got {age}")
        return v

    def max_age_for(self, health_status: HealthStatus) -> int:
        """Look up the life-expectancy bound for a health bucket."""
        return self.max_age_by_health.get(health_status, self.default_max_age)


class OptimizerSettings(BaseModel):
    """Search grid and result-shaping knobs for LeverOptimizer."""

    model_config = ConfigDict(frozen=True)

    step_up_values: tuple[float, ...] = Field(default=STEP_UP_TEST_VALUES)
    sip_increase_values: tuple[float, ...] = Field(default=SIP_INCREASE_TEST_VALUES)
    default_target_fi_age: int = Field(
        default=OPTIMIZATION_TARGET_FI_AGE,
        gt=0,
        description="Baseline at or under this age needs no optimization",
    )
    unreachable_baseline_age: int = Field(
        default=UNREACHABLE_BASELINE_AGE,
        gt=0,
        description="Stand-in baseline when the profile never reaches FI",
    )
    max_solutions: int = Field(default=MAX_SOLUTIONS, ge=1, le=50)

    @field_validator("step_up_values", "sip_increase_values")
    @classmethod
    def validate_grid(cls, v: tuple[float, ...]) -> tuple[float, ...]:
        """Grid values are non-negative, de-duplicated and ascending."""
        if any(value < 0 for value in v):
            raise ValueError("Lever values cannot be negative")
        return tuple(sorted(set(v)))

    @model_validator(mode="after")
    def validate_grid_not_empty(self) -> "OptimizerSettings":
        """At least one non-trivial lever pair must exist."""
        if not any(value > 0 for value in self.step_up_values + self.sip_increase_values):
            raise ValueError("Optimizer grid needs at least one non-zero lever value")
        return self

    def candidate_pairs(self) -> list[tuple[float, float]]:
        """All (step-up, SIP increase) pairs to test, excluding the baseline (0, 0)."""
        return [
            (step_up, sip_increase)
            for step_up in self.step_up_values
            for sip_increase in self.sip_increase_values
            if step_up > 0 or sip_increase > 0
        ]


DEFAULT_ASSUMPTIONS = PlanningAssumptions()
DEFAULT_OPTIMIZER_SETTINGS = OptimizerSettings()


def get_max_age(
    health_status: HealthStatus,
    assumptions: Optional[PlanningAssumptions] = None,
) -> int:
    """Get the life-expectancy bound for a health bucket.

    Args:
        health_status: The profile's health bucket
        assumptions: Assumption set to read from (default: module defaults)

    Returns:
        Maximum age the plan must fund
    """
    return (assumptions or DEFAULT_ASSUMPTIONS).max_age_for(health_status)
