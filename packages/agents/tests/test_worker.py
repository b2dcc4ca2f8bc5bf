"""Tests for the optimization worker."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from fiplan_agents.interfaces import RunOptimizationRequest, parse_response
from fiplan_agents.interfaces.types import OptimizationErrorMessage, OptimizationResultMessage
from fiplan_agents.worker import OptimizationWorker
from fiplan_core.assumptions import OptimizerSettings
from fiplan_core.models import DifficultyLevel, FinancialProfile, Recommendation
from fiplan_core.optimizer import LeverOptimizer


@pytest.fixture
def profile() -> FinancialProfile:
    return FinancialProfile(current_age=30, monthly_expense=50000, monthly_investment=30000)


@pytest.fixture
def small_grid_worker() -> OptimizationWorker:
    """Worker searching a two-point grid to keep tests quick."""
    settings = OptimizerSettings(step_up_values=(0, 10), sip_increase_values=(0, 15))
    return OptimizationWorker(optimizer=LeverOptimizer(settings=settings))


def request(profile, correlation_id=1, baseline=58, target=None) -> dict:
    return RunOptimizationRequest(
        correlation_id=correlation_id,
        profile=profile,
        baseline_fi_age=baseline,
        target_age=target,
    ).model_dump(mode="json")


class TestOptimizationWorker:
    """Test suite for OptimizationWorker.handle_message."""

    def test_answers_with_result(self, small_grid_worker, profile):
        raw = small_grid_worker.handle_message(request(profile, correlation_id=9))
        message = parse_response(raw)

        assert isinstance(message, OptimizationResultMessage)
        assert message.correlation_id == 9
        assert [s.levers for s in message.result.solutions] == [(10, 15), (10, 0), (0, 15)]

    def test_response_is_plain_dict(self, small_grid_worker, profile):
        raw = small_grid_worker.handle_message(request(profile))

        assert isinstance(raw, dict)
        assert raw["kind"] == "OPTIMIZATION_RESULT"

    def test_attaches_fallback_recommendation(self, small_grid_worker, profile):
        message = parse_response(small_grid_worker.handle_message(request(profile)))
        result = message.result

        # Scores: (10,15) -> -20, (10,0) -> 5, (0,15) -> -25
        assert result.recommendation.recommended_index == 1
        assert result.recommended_solution == result.solutions[1]
        assert result.recommendation.difficulty == DifficultyLevel.MODERATE

    def test_no_recommendation_when_skipped(self, small_grid_worker, profile):
        message = parse_response(small_grid_worker.handle_message(request(profile, baseline=38)))

        assert message.result.skip_optimization is True
        assert message.result.recommendation is None
        assert message.result.recommended_solution is None

    def test_target_passed_to_advisor(self, profile):
        advisor = MagicMock()
        advisor.recommend.return_value = Recommendation(
            recommended_index=0, explanation="pick the first"
        )
        settings = OptimizerSettings(step_up_values=(0, 10), sip_increase_values=(0, 15))
        worker = OptimizationWorker(optimizer=LeverOptimizer(settings=settings), advisor=advisor)

        message = parse_response(worker.handle_message(request(profile, target=55)))

        baseline, solutions, preferences = advisor.recommend.call_args.args
        assert baseline == 58
        assert len(solutions) == 2
        assert preferences.target_age == 55
        assert message.result.recommended_solution == message.result.solutions[0]

    def test_out_of_range_index_falls_back_to_first(self, profile):
        advisor = MagicMock()
        advisor.recommend.return_value = Recommendation(recommended_index=42, explanation="?")
        settings = OptimizerSettings(step_up_values=(0, 10), sip_increase_values=(0, 15))
        worker = OptimizationWorker(optimizer=LeverOptimizer(settings=settings), advisor=advisor)

        message = parse_response(worker.handle_message(request(profile)))

        assert message.result.recommended_solution == message.result.solutions[0]

    def test_optimizer_failure_becomes_error_message(self, profile):
        optimizer = MagicMock()
        optimizer.optimize.side_effect = RuntimeError("grid exploded")
        worker = OptimizationWorker(optimizer=optimizer)

        message = parse_response(worker.handle_message(request(profile, correlation_id=5)))

        assert isinstance(message, OptimizationErrorMessage)
        assert message.correlation_id == 5
        assert message.message == "grid exploded"

    def test_invalid_request_raises(self, small_grid_worker):
        """An undecodable request is fatal for the execution context."""
        with pytest.raises(ValidationError):
            small_grid_worker.handle_message({"kind": "RUN_OPTIMIZATION"})
