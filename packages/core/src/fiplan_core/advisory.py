"""Deterministic recommendation among optimizer solutions.

Used whenever no external advisory service is available. The scoring favours
the years gained and penalises the size of each lever, with a bonus for
reaching the caller's target age.
"""

from dataclasses import dataclass

import structlog

from .models import (
    AdvisoryPreferences,
    DifficultyLevel,
    OptimizationSolution,
    Recommendation,
)

logger = structlog.get_logger()

YEAR_GAINED_WEIGHT = 5
STEP_UP_PENALTY = 3
SIP_INCREASE_PENALTY = 2
TARGET_REACHED_BONUS = 20


def calculate_difficulty(step_up_percent: float, sip_increase_percent: float) -> DifficultyLevel:
    """Rate how hard a lever combination is to keep up."""
    if (step_up_percent <= 5 and sip_increase_percent == 0) or (
        step_up_percent == 0 and sip_increase_percent <= 10
    ):
        return DifficultyLevel.EASY

    if (
        (step_up_percent >= 10 and sip_increase_percent >= 10)
        or step_up_percent > 10
        or sip_increase_percent > 15
    ):
        return DifficultyLevel.AGGRESSIVE

    return DifficultyLevel.MODERATE


def describe_levers(solution: OptimizationSolution) -> str:
    """One-line description of a solution, naming only the levers it pulls."""
    step_up = f"{solution.step_up_percent:g}% step-up"
    sip_increase = f"{solution.sip_increase_percent:g}% SIP increase"
    if solution.step_up_percent == 0 and solution.sip_increase_percent > 0:
        return f"{sip_increase} alone reaches FI at {solution.resulting_fi_age}"
    if solution.sip_increase_percent == 0 and solution.step_up_percent > 0:
        return f"{step_up} alone reaches FI at {solution.resulting_fi_age}"
    return f"{step_up} + {sip_increase} reaches FI at {solution.resulting_fi_age}"


@dataclass
class ScoredSolution:
    """A solution with its position in the input list and its score."""

    index: int
    solution: OptimizationSolution
    score: float


class FallbackAdvisor:
    """
    Pick one solution and explain it.

    Satisfies the advisory collaborator contract
    (``recommend(baseline_fi_age, solutions, preferences)``), so it can stand
    in for any remote advisor.
    """

    def score(
        self,
        baseline_fi_age: int,
        solution: OptimizationSolution,
        preferences: AdvisoryPreferences,
    ) -> float:
        score = float((baseline_fi_age - solution.resulting_fi_age) * YEAR_GAINED_WEIGHT)
        if preferences.prefer_lower_step_up:
            score -= solution.step_up_percent * STEP_UP_PENALTY
        if preferences.prefer_lower_sip_increase:
            score -= solution.sip_increase_percent * SIP_INCREASE_PENALTY
        if solution.resulting_fi_age <= preferences.target_age:
            score += TARGET_REACHED_BONUS
        return score

    def recommend(
        self,
        baseline_fi_age: int,
        solutions: list[OptimizationSolution],
        preferences: AdvisoryPreferences,
    ) -> Recommendation:
        """
        Recommend one of the solutions.

        Args:
            baseline_fi_age: FI age without levers (the unreachable stand-in if none)
            solutions: Candidate solutions in optimizer rank order
            preferences: Target age and which levers to penalise

        Returns:
            Recommendation whose index points into ``solutions`` (-1 when empty)
        """
        if not solutions:
            return Recommendation(
                recommended_index=-1,
                explanation="No optimization solutions available.",
                alternatives=[],
                difficulty=DifficultyLevel.EASY,
            )

        scored = [
            ScoredSolution(index=i, solution=s, score=self.score(baseline_fi_age, s, preferences))
            for i, s in enumerate(solutions)
        ]
        # Stable sort keeps optimizer rank order among equal scores.
        scored.sort(key=lambda item: item.score, reverse=True)

        best = scored[0].solution
        alternatives = [describe_levers(item.solution) for item in scored[1:2]]

        if best.resulting_fi_age <= preferences.target_age:
            explanation = (
                f"This plan reaches your target FI age of {preferences.target_age} with a "
                f"{best.step_up_percent:g}% annual step-up and "
                f"{best.sip_increase_percent:g}% SIP increase."
            )
        else:
            explanation = (
                f"This plan reduces your FI age from {baseline_fi_age} to "
                f"{best.resulting_fi_age} ({best.improvement_years} years earlier)."
            )

        recommendation = Recommendation(
            recommended_index=scored[0].index,
            explanation=explanation,
            alternatives=alternatives,
            difficulty=calculate_difficulty(best.step_up_percent, best.sip_increase_percent),
        )
        logger.debug(
            "fallback_recommendation",
            recommended_index=recommendation.recommended_index,
            score=scored[0].score,
            difficulty=recommendation.difficulty.value,
        )
        return recommendation
