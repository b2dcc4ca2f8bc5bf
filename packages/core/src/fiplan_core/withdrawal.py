"""Withdrawal-phase simulation (systematic withdrawal plan)."""

from typing import Optional

from .assumptions import DEFAULT_ASSUMPTIONS, PlanningAssumptions
from .growth import MONTHS_PER_YEAR, monthly_rate
from .models import SustainabilityCheck


class WithdrawalSustainabilityChecker:
    """
    Decide whether a corpus can fund a rising withdrawal for a whole horizon.

    Each month the corpus first earns the withdrawal-phase return, then the
    month's withdrawal is taken out. The withdrawal rises by the configured
    step-up at every year boundary to track the retiree's own expenses.

    A plan is sustainable only if the corpus never goes negative and at least
    ``sustainability_buffer`` of the starting corpus is still there at the
    end. Surviving to exactly zero does not count.
    """

    def __init__(self, assumptions: Optional[PlanningAssumptions] = None):
        self.assumptions = assumptions or DEFAULT_ASSUMPTIONS

    def check(
        self,
        starting_corpus: float,
        first_year_gross_withdrawal: float,
        horizon_years: int,
    ) -> SustainabilityCheck:
        """
        Simulate the withdrawal horizon.

        Args:
            starting_corpus: Balance on the first day of withdrawals
            first_year_gross_withdrawal: Monthly withdrawal during year one
            horizon_years: Years the corpus has to last

        Returns:
            SustainabilityCheck with the final balance and verdict
        """
        if horizon_years <= 0:
            return SustainabilityCheck(
                sustainable=True,
                final_corpus=starting_corpus,
                final_corpus_percent_of_start=100.0 if starting_corpus > 0 else 0.0,
            )

        if starting_corpus <= 0:
            return SustainabilityCheck(
                sustainable=False,
                final_corpus=0.0,
                final_corpus_percent_of_start=0.0,
            )

        growth = 1 + monthly_rate(self.assumptions.swp_return_rate)
        step_up = self.assumptions.withdrawal_step_up_percent / 100

        balance = starting_corpus
        withdrawal = first_year_gross_withdrawal
        depleted = False

        for _ in range(horizon_years):
            for _ in range(MONTHS_PER_YEAR):
                balance = balance * growth - withdrawal
                if balance < 0:
                    depleted = True
            withdrawal *= 1 + step_up

        minimum_residual = starting_corpus * self.assumptions.sustainability_buffer
        sustainable = not depleted and balance > 0 and balance >= minimum_residual

        return SustainabilityCheck(
            sustainable=sustainable,
            final_corpus=balance,
            final_corpus_percent_of_start=balance / starting_corpus * 100,
        )
