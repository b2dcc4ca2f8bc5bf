#!/usr/bin/env python3
"""
Financial-Independence Plan Demo

Projects a profile to its earliest sustainable FI age, prints the yearly
breakdown around that age, then searches for investment levers that bring
FI forward. The search can run inline or through the background compute
channel.

Usage:
    python examples/fi_plan_demo.py
    python examples/fi_plan_demo.py --age 35 --expense 60000 --investment 40000
    python examples/fi_plan_demo.py --target-age 55 --background
    python examples/fi_plan_demo.py --json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add package sources to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "agents" / "src"))

from fiplan_core import (
    FallbackAdvisor,
    FinancialProfile,
    FIProjector,
    HealthStatus,
    LeverOptimizer,
)
from fiplan_core.exceptions import FIPlanError
from fiplan_core.models import AdvisoryPreferences, OptimizationResult


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Project and optimize a financial-independence plan")
    parser.add_argument("--age", type=int, default=30, help="Current age")
    parser.add_argument("--expense", type=float, default=50000, help="Monthly expense today")
    parser.add_argument("--investment", type=float, default=30000, help="Monthly SIP")
    parser.add_argument(
        "--health",
        choices=[status.value for status in HealthStatus],
        default=HealthStatus.GENERALLY_HEALTHY.value,
    )
    parser.add_argument("--fixed-income", type=float, default=0, help="Existing fixed-income corpus")
    parser.add_argument("--market", type=float, default=0, help="Existing market corpus")
    parser.add_argument("--target-age", type=int, default=None, help="Required FI age")
    parser.add_argument(
        "--background",
        action="store_true",
        help="Run the optimizer through the background compute channel",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    return parser.parse_args()


async def optimize_in_background(profile, baseline, target_age) -> OptimizationResult:
    from fiplan_agents import BackgroundComputeChannel, load_config

    config = load_config()
    config.configure_logging()
    async with BackgroundComputeChannel.from_config(config) as channel:
        return await channel.submit(profile, baseline, target_age)


def optimize_inline(profile, baseline, target_age) -> OptimizationResult:
    optimizer = LeverOptimizer()
    result = optimizer.optimize(profile, baseline, target_age=target_age)
    if not result.solutions:
        return result

    effective = baseline if baseline is not None else optimizer.settings.unreachable_baseline_age
    preferences = AdvisoryPreferences(
        target_age=target_age if target_age is not None else optimizer.settings.default_target_fi_age
    )
    recommendation = FallbackAdvisor().recommend(effective, result.solutions, preferences)
    return result.model_copy(
        update={
            "recommendation": recommendation,
            "recommended_solution": result.solutions[max(recommendation.recommended_index, 0)],
        }
    )


def main():
    args = parse_args()

    try:
        profile = FinancialProfile.parse(
            {
                "current_age": args.age,
                "monthly_expense": args.expense,
                "monthly_investment": args.investment,
                "health_status": args.health,
                "existing_fixed_income_corpus": args.fixed_income,
                "existing_market_corpus": args.market,
            }
        )
    except FIPlanError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    projection = FIProjector().project(profile)

    if args.background:
        result = asyncio.run(
            optimize_in_background(profile, projection.earliest_fi_age, args.target_age)
        )
    else:
        result = optimize_inline(profile, projection.earliest_fi_age, args.target_age)

    if args.json:
        print(
            json.dumps(
                {
                    "projection": projection.model_dump(mode="json", exclude={"yearly_breakdown"}),
                    "optimization": result.model_dump(mode="json"),
                },
                indent=2,
            )
        )
        return

    print("=" * 70)
    print("FIPLAN - Financial Independence Plan")
    print("=" * 70)
    print()

    print("Step 1: Baseline projection")
    print(f"  - Current Age: {profile.current_age}")
    print(f"  - Planning Horizon: age {projection.max_age}")
    print(f"  - Earliest FI Age: {projection.earliest_fi_age or 'not reached'}")
    print(f"  - {projection.message}")
    print()

    if projection.earliest_fi_age is not None:
        print("Step 2: Breakdown around the FI age")
        print(f"  {'Age':>4} {'Corpus':>16} {'Gross/month':>14} {'Left at end':>12}")
        for age in range(projection.earliest_fi_age - 2, projection.earliest_fi_age + 3):
            row = projection.breakdown_for_age(age)
            if row is None:
                continue
            marker = "*" if row.is_withdrawal_sustainable else " "
            print(
                f"  {row.age:>4} {row.projected_corpus:>16,.0f} "
                f"{row.gross_withdrawal:>14,.0f} "
                f"{row.final_corpus_as_percent_of_start:>11.1f}%{marker}"
            )
        print()

    minimum = FIProjector().minimum_investment_for_target(profile, args.target_age)
    print("Step 3: Minimum flat SIP for the target age")
    if minimum is None:
        print("  - Target age cannot be planned for")
    else:
        print(f"  - Target FI Age: {minimum.target_fi_age}")
        print(f"  - Required Corpus: {minimum.required_corpus:,.0f}")
        print(f"  - Minimum Monthly Investment: {minimum.minimum_monthly_investment:,.0f}")
    print()

    print("Step 4: Lever optimization")
    if result.skip_optimization:
        print(f"  - {result.skip_reason}")
    elif not result.solutions:
        print(f"  - {result.error}")
    else:
        for solution in result.solutions:
            print(
                f"  - step-up {solution.step_up_percent:>4g}%  "
                f"SIP +{solution.sip_increase_percent:>3g}% "
                f"(new SIP {solution.new_monthly_investment:,.0f})  "
                f"-> FI at {solution.resulting_fi_age} "
                f"({solution.improvement_years} years earlier)"
            )
        if result.recommendation is not None:
            print()
            print(f"  Recommended ({result.recommendation.difficulty.value}): "
                  f"{result.recommendation.explanation}")
            for alternative in result.recommendation.alternatives:
                print(f"  Alternative: {alternative}")
    print()


if __name__ == "__main__":
    main()
