"""Compound-growth model for the accumulation phase.

Recurring contributions (SIPs) are invested at the start of every month and
compounded monthly at the monthly equivalent of an annual rate. The annual
rate depends on how long the money has been invested: years before the
short-term threshold earn the short-term rate, later years the long-term
rate. Already-elapsed years are never repriced.
"""

from typing import Optional

from .assumptions import DEFAULT_ASSUMPTIONS, PlanningAssumptions

MONTHS_PER_YEAR = 12


def monthly_rate(annual_rate_percent: float) -> float:
    """Monthly rate that compounds to the given annual percentage."""
    return (1 + annual_rate_percent / 100) ** (1 / MONTHS_PER_YEAR) - 1


def compound(principal: float, annual_rate_percent: float, years: int) -> float:
    """Grow a lump sum at a constant annual rate."""
    if years <= 0:
        return principal
    return principal * (1 + annual_rate_percent / 100) ** years


class CorpusGrowthModel:
    """
    Future value of recurring contributions and existing balances.

    Stateless apart from the assumptions it was built with; every method is
    a pure function of its arguments.
    """

    def __init__(self, assumptions: Optional[PlanningAssumptions] = None):
        """
        Initialize the growth model.

        Args:
            assumptions: Rates and thresholds to use (default: module defaults)
        """
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def rate_for_year(self, year_index: int) -> float:
        """Annual SIP return rate (%) earned during the given investment year."""
        if year_index < self.assumptions.sip_short_term_threshold_years:
            return self.assumptions.sip_return_rate_short_term
        return self.assumptions.sip_return_rate_long_term

    def grow_recurring_contribution(
        self,
        monthly_amount: float,
        years: int,
        step_up_percent: float = 0.0,
    ) -> float:
        """
        Value of a monthly SIP after ``years`` years.

        The contribution grows by ``step_up_percent`` at every year boundary.
        Zero elapsed years returns ``monthly_amount`` unchanged.

        Args:
            monthly_amount: Contribution made each month in the first year
            years: Whole years of investing
            step_up_percent: Annual increase applied to the contribution

        Returns:
            Corpus value at the end of the period
        """
        if years <= 0:
            return monthly_amount

        step_up = step_up_percent / 100
        corpus = 0.0
        contribution = monthly_amount

        for year_index in range(years):
            growth = 1 + monthly_rate(self.rate_for_year(year_index))
            for _ in range(MONTHS_PER_YEAR):
                corpus = (corpus + contribution) * growth
            contribution *= 1 + step_up

        return corpus

    def grow_lump_sums(
        self,
        fixed_income_corpus: float,
        market_corpus: float,
        years: int,
    ) -> float:
        """
        Combined value of the two existing balances after ``years`` years.

        Each balance compounds annually at its own rate; the investment
        levers never touch them.
        """
        fixed_income = compound(
            fixed_income_corpus, self.assumptions.fixed_income_growth_rate, years
        )
        market = compound(market_corpus, self.assumptions.market_growth_rate, years)
        return fixed_income + market

    def inflate_expense(self, monthly_expense: float, years: int) -> float:
        """Monthly expense ``years`` years from now at the assumed inflation rate."""
        return compound(monthly_expense, self.assumptions.inflation_rate, years)
