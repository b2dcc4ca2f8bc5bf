"""Search for investment levers that bring the FI age forward.

Two levers are available: an annual step-up of the recurring investment and
a one-time increase of it. The optimizer evaluates a bounded grid of lever
pairs with the projector's own machinery, keeps the pairs that beat the
baseline, and returns a small ranked set that always contains both the
fastest and the lowest-effort option.
"""

from typing import Optional

import structlog

from .assumptions import (
    DEFAULT_OPTIMIZER_SETTINGS,
    OptimizerSettings,
    PlanningAssumptions,
)
from .models import FinancialProfile, OptimizationResult, OptimizationSolution
from .projector import FIProjector

logger = structlog.get_logger()


def rank_key(solution: OptimizationSolution) -> tuple[int, float, float]:
    """Earlier FI age first, then the smaller step-up, then the smaller SIP increase."""
    return (solution.resulting_fi_age, solution.step_up_percent, solution.sip_increase_percent)


def effort_key(solution: OptimizationSolution) -> tuple[float, float, float, int]:
    """Smallest combined lever first."""
    return (
        solution.lever_effort,
        solution.step_up_percent,
        solution.sip_increase_percent,
        solution.resulting_fi_age,
    )


def dominates(a: OptimizationSolution, b: OptimizationSolution) -> bool:
    """True when ``a`` is at least as good as ``b`` on every axis and is a different pair."""
    return (
        a.levers != b.levers
        and a.step_up_percent <= b.step_up_percent
        and a.sip_increase_percent <= b.sip_increase_percent
        and a.resulting_fi_age <= b.resulting_fi_age
    )


def pareto_front(solutions: list[OptimizationSolution]) -> list[OptimizationSolution]:
    """Drop every solution another one dominates. Input order is preserved."""
    return [s for s in solutions if not any(dominates(other, s) for other in solutions)]


class LeverOptimizer:
    """
    Find minimal-effort (step-up, SIP increase) pairs that reach FI earlier.

    Never raises for valid input: a baseline that already meets the target
    yields ``skip_optimization=True`` and a search that finds nothing yields
    an empty solution list.
    """

    def __init__(
        self,
        assumptions: Optional[PlanningAssumptions] = None,
        settings: Optional[OptimizerSettings] = None,
    ):
        """
        Initialize the optimizer.

        Args:
            assumptions: Planning assumptions shared with the projector
            settings: Search grid and result cap (default: module defaults)
        """
        self.projector = FIProjector(assumptions)
        self.settings = settings or DEFAULT_OPTIMIZER_SETTINGS

    @property
    def assumptions(self) -> PlanningAssumptions:
        return self.projector.assumptions

    def optimize(
        self,
        profile: FinancialProfile,
        baseline_fi_age: Optional[int],
        target_age: Optional[int] = None,
    ) -> OptimizationResult:
        """
        Search the lever grid for a profile.

        Args:
            profile: The person being planned for
            baseline_fi_age: FI age with no levers applied (None if never reached)
            target_age: When given, solutions must reach FI at or before this age

        Returns:
            OptimizationResult with at most ``max_solutions`` ranked solutions
        """
        skip_age = target_age if target_age is not None else self.settings.default_target_fi_age

        if baseline_fi_age is not None and baseline_fi_age <= skip_age:
            logger.info(
                "optimization_skipped",
                baseline_fi_age=baseline_fi_age,
                target_age=skip_age,
            )
            return OptimizationResult(
                baseline_fi_age=baseline_fi_age,
                target_age=target_age,
                skip_optimization=True,
                skip_reason=(
                    f"Already optimal! Your financial independence age is {baseline_fi_age}, "
                    f"which already meets the target of {skip_age}. Keep investing!"
                ),
            )

        effective_baseline = (
            baseline_fi_age if baseline_fi_age is not None else self.settings.unreachable_baseline_age
        )

        candidates: list[OptimizationSolution] = []
        for step_up, sip_increase in self.settings.candidate_pairs():
            solution = self._evaluate(profile, step_up, sip_increase, effective_baseline)
            if solution is None:
                continue
            if solution.resulting_fi_age >= effective_baseline:
                continue
            if target_age is not None and solution.resulting_fi_age > target_age:
                continue
            candidates.append(solution)

        candidates.sort(key=rank_key)
        survivors = pareto_front(candidates)
        solutions = self._cap(survivors)

        logger.info(
            "optimization_complete",
            baseline_fi_age=baseline_fi_age,
            target_age=target_age,
            candidates_tested=len(self.settings.candidate_pairs()),
            improving=len(candidates),
            pareto_efficient=len(survivors),
            returned=len(solutions),
        )

        if not solutions:
            return OptimizationResult(
                baseline_fi_age=baseline_fi_age,
                target_age=target_age,
                error=(
                    "No improvement options found within the allowed constraints. "
                    "Consider increasing your investment significantly or reducing expenses."
                ),
            )

        return OptimizationResult(
            baseline_fi_age=baseline_fi_age,
            target_age=target_age,
            solutions=solutions,
        )

    def _evaluate(
        self,
        profile: FinancialProfile,
        step_up: float,
        sip_increase: float,
        effective_baseline: int,
    ) -> Optional[OptimizationSolution]:
        """Earliest FI age for one lever pair, as a solution (None if never reached)."""
        new_investment = float(round(profile.monthly_investment * (1 + sip_increase / 100)))
        fi_age = self.projector.earliest_fi_age(
            profile,
            monthly_investment=new_investment,
            step_up_percent=step_up,
        )
        logger.debug(
            "lever_pair_evaluated",
            step_up_percent=step_up,
            sip_increase_percent=sip_increase,
            fi_age=fi_age,
        )
        if fi_age is None:
            return None
        return OptimizationSolution(
            step_up_percent=step_up,
            sip_increase_percent=sip_increase,
            new_monthly_investment=new_investment,
            resulting_fi_age=fi_age,
            improvement_years=effective_baseline - fi_age,
        )

    def _cap(self, ranked: list[OptimizationSolution]) -> list[OptimizationSolution]:
        """Trim to the result cap, keeping the fastest and the lowest-effort option."""
        limit = self.settings.max_solutions
        if len(ranked) <= limit:
            return ranked

        cheapest = min(ranked, key=effort_key)
        if cheapest in ranked[:limit]:
            return ranked[:limit]
        if limit == 1:
            return ranked[:1]

        kept = ranked[: limit - 1] + [cheapest]
        return sorted(kept, key=rank_key)
