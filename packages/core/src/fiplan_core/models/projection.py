"""Result models produced by the growth, withdrawal and projection steps."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class SustainabilityCheck(BaseModel):
    """Outcome of depleting one corpus over a withdrawal horizon."""

    model_config = ConfigDict(frozen=True)

    sustainable: bool
    final_corpus: float = Field(description="Balance left at the end of the horizon (may be negative)")
    final_corpus_percent_of_start: float = Field(
        description="final_corpus as a percentage of the starting corpus"
    )


class YearlyBreakdown(BaseModel):
    """Projection for one age between today and the maximum age."""

    model_config = ConfigDict(frozen=True)

    age: int
    years_from_now: int = Field(ge=0)
    projected_corpus: float = Field(description="Recurring plus existing corpus at this age")
    applicable_return_rate: float = Field(description="Annual SIP return rate (%) in force this year")
    inflation_adjusted_expense: float
    target_withdrawal: float = Field(description="Monthly expense plus lifestyle buffer")
    gross_withdrawal: float = Field(description="Target withdrawal grossed up for capital gains tax")
    years_remaining_in_retirement: int = Field(ge=0)
    is_withdrawal_sustainable: bool
    final_corpus_after_depletion: float
    final_corpus_as_percent_of_start: float


class FIProjectionResult(BaseModel):
    """Full projection for one profile.

    ``earliest_fi_age`` is the first sustainable age at or under the soft
    ceiling. When the only sustainable ages lie above the ceiling it stays
    None and ``sustainable_after_ceiling`` is set instead.
    """

    max_age: int
    current_age: int
    can_achieve_fi: bool
    earliest_fi_age: Optional[int] = None
    sustainable_after_ceiling: bool = False
    yearly_breakdown: list[YearlyBreakdown] = Field(default_factory=list)
    message: str = ""

    @computed_field
    @property
    def years_to_fi(self) -> Optional[int]:
        """Years from today until the earliest FI age."""
        if self.earliest_fi_age is None:
            return None
        return self.earliest_fi_age - self.current_age

    def breakdown_for_age(self, age: int) -> Optional[YearlyBreakdown]:
        """Return the breakdown row for a given age, if it was simulated."""
        index = age - self.current_age
        if 0 <= index < len(self.yearly_breakdown):
            return self.yearly_breakdown[index]
        return None


class MinimumInvestmentResult(BaseModel):
    """Smallest flat monthly investment that reaches FI by a target age."""

    model_config = ConfigDict(frozen=True)

    target_fi_age: int
    minimum_monthly_investment: float = Field(ge=0)
    required_corpus: float = Field(ge=0)
