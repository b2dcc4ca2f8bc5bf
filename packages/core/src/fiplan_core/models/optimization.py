"""Models exchanged between the optimizer, the advisor and callers."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class DifficultyLevel(str, Enum):
    """How hard a lever combination is to sustain."""

    EASY = "Easy"
    MODERATE = "Moderate"
    AGGRESSIVE = "Aggressive"


class OptimizationSolution(BaseModel):
    """One (step-up, SIP increase) pair and the FI age it reaches."""

    model_config = ConfigDict(frozen=True)

    step_up_percent: float = Field(ge=0, description="Annual increase applied to the SIP")
    sip_increase_percent: float = Field(ge=0, description="One-time increase applied to the SIP")
    new_monthly_investment: float = Field(ge=0, description="SIP after the one-time increase")
    resulting_fi_age: int
    improvement_years: int = Field(description="Baseline FI age minus resulting FI age")

    @computed_field
    @property
    def lever_effort(self) -> float:
        """Combined lever size, used to find the lowest-cost option."""
        return self.step_up_percent + self.sip_increase_percent

    @property
    def levers(self) -> tuple[float, float]:
        """The (step-up, SIP increase) pair identifying this solution."""
        return (self.step_up_percent, self.sip_increase_percent)


class AdvisoryPreferences(BaseModel):
    """What the caller wants the advisor to favour."""

    model_config = ConfigDict(frozen=True)

    target_age: int
    prefer_lower_step_up: bool = True
    prefer_lower_sip_increase: bool = True


class Recommendation(BaseModel):
    """The advisor's pick among the optimizer's solutions."""

    recommended_index: int = Field(description="Index into the solution list, -1 when empty")
    explanation: str
    alternatives: list[str] = Field(default_factory=list)
    difficulty: DifficultyLevel = DifficultyLevel.EASY


class OptimizationResult(BaseModel):
    """Ordered, capped set of lever combinations that improve on the baseline."""

    baseline_fi_age: Optional[int] = None
    target_age: Optional[int] = None
    solutions: list[OptimizationSolution] = Field(default_factory=list)
    recommended_solution: Optional[OptimizationSolution] = None
    recommendation: Optional[Recommendation] = None
    skip_optimization: bool = Field(
        default=False,
        description="True when the baseline already meets the target",
    )
    skip_reason: Optional[str] = None
    error: Optional[str] = Field(
        default=None,
        description="Explanation when no candidate improved on the baseline",
    )

    @computed_field
    @property
    def no_improvement_found(self) -> bool:
        """True when the search ran and nothing beat the baseline."""
        return not self.skip_optimization and not self.solutions

    @property
    def fastest(self) -> Optional[OptimizationSolution]:
        """Solution with the earliest FI age (first in rank order)."""
        return self.solutions[0] if self.solutions else None
