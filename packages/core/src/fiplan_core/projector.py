"""Financial-independence projection.

Walks every age from today to the life-expectancy bound, projecting the
corpus, the inflation-adjusted withdrawal the person would need, and whether
that corpus could fund the withdrawal for the rest of their life.
"""

import math
from collections.abc import Iterator
from typing import Optional

import structlog

from .assumptions import DEFAULT_ASSUMPTIONS, PlanningAssumptions
from .growth import CorpusGrowthModel
from .models import (
    FinancialProfile,
    FIProjectionResult,
    MinimumInvestmentResult,
    YearlyBreakdown,
)
from .withdrawal import WithdrawalSustainabilityChecker

logger = structlog.get_logger()

# Bisection tolerances for the minimum-investment search.
CORPUS_PRECISION = 1000.0
INVESTMENT_PRECISION = 100.0
MIN_CORPUS_MULTIPLE = 10
MAX_CORPUS_MULTIPLE = 50


class FIProjector:
    """
    Compute the earliest sustainable FI age and a year-by-year breakdown.

    The baseline projection never applies a step-up to the recurring
    investment; step-up is a lever only the optimizer varies. Output is a
    pure function of the profile and the assumptions.
    """

    def __init__(self, assumptions: Optional[PlanningAssumptions] = None):
        """
        Initialize the projector.

        Args:
            assumptions: Planning assumptions (default: module defaults)
        """
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS
        self.growth = CorpusGrowthModel(self.assumptions)
        self.checker = WithdrawalSustainabilityChecker(self.assumptions)

    def gross_withdrawal(self, monthly_expense: float, years_from_now: int) -> tuple[float, float, float]:
        """Inflation-adjusted expense, target withdrawal and tax-grossed withdrawal.

        Returns:
            Tuple of (inflation_adjusted_expense, target_withdrawal, gross_withdrawal)
        """
        expense = self.growth.inflate_expense(monthly_expense, years_from_now)
        target = expense * (1 + self.assumptions.lifestyle_buffer)
        gross = target / (1 - self.assumptions.capital_gains_tax_rate / 100)
        return expense, target, gross

    def _walk(
        self,
        profile: FinancialProfile,
        max_age: int,
        monthly_investment: float,
        step_up_percent: float,
        last_age: Optional[int] = None,
    ) -> Iterator[YearlyBreakdown]:
        """Yield one breakdown row per age, current age through max age (or last_age)."""
        stop = max_age if last_age is None else min(last_age, max_age)
        for age in range(profile.current_age, stop + 1):
            years_from_now = age - profile.current_age
            years_remaining = max_age - age

            corpus = self.growth.grow_recurring_contribution(
                monthly_investment, years_from_now, step_up_percent
            ) + self.growth.grow_lump_sums(
                profile.existing_fixed_income_corpus,
                profile.existing_market_corpus,
                years_from_now,
            )

            expense, target, gross = self.gross_withdrawal(profile.monthly_expense, years_from_now)

            sustainable = False
            final_corpus = 0.0
            final_percent = 0.0
            if years_remaining > 0 and corpus > 0:
                check = self.checker.check(corpus, gross, years_remaining)
                sustainable = check.sustainable
                final_corpus = check.final_corpus
                final_percent = check.final_corpus_percent_of_start

            yield YearlyBreakdown(
                age=age,
                years_from_now=years_from_now,
                projected_corpus=corpus,
                applicable_return_rate=self.growth.rate_for_year(years_from_now),
                inflation_adjusted_expense=expense,
                target_withdrawal=target,
                gross_withdrawal=gross,
                years_remaining_in_retirement=years_remaining,
                is_withdrawal_sustainable=sustainable,
                final_corpus_after_depletion=final_corpus,
                final_corpus_as_percent_of_start=final_percent,
            )

    def project(self, profile: FinancialProfile) -> FIProjectionResult:
        """
        Project a profile from today to its life-expectancy bound.

        Args:
            profile: The person being planned for

        Returns:
            FIProjectionResult with the full yearly breakdown
        """
        max_age = self.assumptions.max_age_for(profile.health_status)
        ceiling = self.assumptions.fi_age_ceiling

        if profile.current_age >= max_age:
            logger.info(
                "projection_skipped",
                current_age=profile.current_age,
                max_age=max_age,
                reason="current_age_at_or_past_max_age",
            )
            return FIProjectionResult(
                max_age=max_age,
                current_age=profile.current_age,
                can_achieve_fi=False,
                earliest_fi_age=None,
                yearly_breakdown=[],
                message=(
                    f"Your current age ({profile.current_age}) is at or exceeds the "
                    f"estimated max age ({max_age}). Unable to plan for financial independence."
                ),
            )

        breakdown: list[YearlyBreakdown] = []
        earliest: Optional[int] = None
        sustainable_after_ceiling = False

        for row in self._walk(profile, max_age, profile.monthly_investment, 0.0):
            breakdown.append(row)
            logger.debug(
                "projection_step",
                age=row.age,
                corpus=row.projected_corpus,
                gross_withdrawal=row.gross_withdrawal,
                sustainable=row.is_withdrawal_sustainable,
            )
            if not row.is_withdrawal_sustainable or earliest is not None:
                continue
            if row.age <= ceiling:
                earliest = row.age
            else:
                sustainable_after_ceiling = True

        result = FIProjectionResult(
            max_age=max_age,
            current_age=profile.current_age,
            can_achieve_fi=earliest is not None,
            earliest_fi_age=earliest,
            sustainable_after_ceiling=sustainable_after_ceiling,
            yearly_breakdown=breakdown,
            message=self._summarize(profile, max_age, earliest, sustainable_after_ceiling),
        )

        logger.info(
            "projection_complete",
            current_age=profile.current_age,
            max_age=max_age,
            earliest_fi_age=earliest,
            sustainable_after_ceiling=sustainable_after_ceiling,
        )
        return result

    def earliest_fi_age(
        self,
        profile: FinancialProfile,
        monthly_investment: Optional[float] = None,
        step_up_percent: float = 0.0,
    ) -> Optional[int]:
        """
        Earliest FI age for a profile under alternative investment levers.

        Same walk as project(), but stops as soon as the answer is known and
        keeps no breakdown.

        Args:
            profile: The person being planned for
            monthly_investment: Recurring investment to use (default: the profile's)
            step_up_percent: Annual step-up applied to the recurring investment

        Returns:
            Earliest sustainable age at or under the ceiling, or None
        """
        max_age = self.assumptions.max_age_for(profile.health_status)
        if profile.current_age >= max_age:
            return None

        last_age = min(max_age, self.assumptions.fi_age_ceiling)
        if monthly_investment is None:
            monthly_investment = profile.monthly_investment

        for row in self._walk(
            profile, max_age, monthly_investment, step_up_percent, last_age=last_age
        ):
            if row.is_withdrawal_sustainable:
                return row.age
        return None

    def minimum_investment_for_target(
        self,
        profile: FinancialProfile,
        target_fi_age: Optional[int] = None,
    ) -> Optional[MinimumInvestmentResult]:
        """
        Smallest flat monthly investment that makes the target age sustainable.

        First finds the smallest corpus that survives the withdrawal horizon
        from the target age, then the smallest SIP whose growth covers what the
        existing corpus will not.

        Args:
            profile: The person being planned for
            target_fi_age: Desired FI age (default: the soft ceiling)

        Returns:
            MinimumInvestmentResult, or None when the target cannot be planned for
        """
        target = target_fi_age if target_fi_age is not None else self.assumptions.fi_age_ceiling
        max_age = self.assumptions.max_age_for(profile.health_status)
        years_to_fi = target - profile.current_age
        years_in_retirement = max_age - target

        if years_to_fi <= 0 or years_in_retirement <= 0:
            return None

        _, _, gross = self.gross_withdrawal(profile.monthly_expense, years_to_fi)
        annual_gross = gross * 12

        low = annual_gross * MIN_CORPUS_MULTIPLE
        high = annual_gross * MAX_CORPUS_MULTIPLE
        if not self.checker.check(high, gross, years_in_retirement).sustainable:
            logger.warning(
                "minimum_investment_unreachable",
                target_fi_age=target,
                upper_bound_corpus=high,
            )
            return None

        while high - low > CORPUS_PRECISION:
            mid = (low + high) / 2
            if self.checker.check(mid, gross, years_in_retirement).sustainable:
                high = mid
            else:
                low = mid
        required_corpus = high

        grown_existing = self.growth.grow_lump_sums(
            profile.existing_fixed_income_corpus,
            profile.existing_market_corpus,
            years_to_fi,
        )
        needed_from_sip = max(0.0, required_corpus - grown_existing)

        if needed_from_sip <= 0:
            return MinimumInvestmentResult(
                target_fi_age=target,
                minimum_monthly_investment=0.0,
                required_corpus=required_corpus,
            )

        # Saving the shortfall linearly is always enough, so it bounds the search.
        low_sip = 0.0
        high_sip = needed_from_sip / (years_to_fi * 12)
        while high_sip - low_sip > INVESTMENT_PRECISION:
            mid_sip = (low_sip + high_sip) / 2
            if self.growth.grow_recurring_contribution(mid_sip, years_to_fi) >= needed_from_sip:
                high_sip = mid_sip
            else:
                low_sip = mid_sip

        minimum = float(math.ceil(high_sip))
        logger.info(
            "minimum_investment_computed",
            target_fi_age=target,
            required_corpus=required_corpus,
            minimum_monthly_investment=minimum,
        )
        return MinimumInvestmentResult(
            target_fi_age=target,
            minimum_monthly_investment=minimum,
            required_corpus=required_corpus,
        )

    def _summarize(
        self,
        profile: FinancialProfile,
        max_age: int,
        earliest: Optional[int],
        sustainable_after_ceiling: bool,
    ) -> str:
        """Plain-English summary of a projection."""
        if earliest is not None and earliest == profile.current_age:
            return (
                f"You can be financially independent immediately at age {earliest}. "
                f"Your current corpus and investments can sustain your lifestyle until age {max_age}."
            )
        if earliest is not None:
            return (
                f"You can be financially independent at age {earliest} "
                f"(in {earliest - profile.current_age} years). "
                "Keep investing at your current rate to achieve this goal."
            )
        if sustainable_after_ceiling:
            return (
                "Your current plan doesn't reach financial independence before "
                f"age {self.assumptions.fi_age_ceiling}."
            )
        return (
            "With your current investment and expenses you cannot achieve financial "
            f"independence before age {max_age}. Consider increasing your monthly "
            "investment or reducing your expenses."
        )
