"""Tests for channel message types.

Verifies that every message kind:
- Carries its discriminator and correlation id
- Survives the plain-dict form used across the thread boundary
- Is rejected when malformed
"""

import pytest
from pydantic import ValidationError

from fiplan_agents.interfaces import (
    AdvisorProtocol,
    ChannelState,
    ExecutionContext,
    MessageKind,
    OptimizationErrorMessage,
    OptimizationResultMessage,
    RunOptimizationRequest,
    parse_request,
    parse_response,
)
from fiplan_core.advisory import FallbackAdvisor
from fiplan_core.models import FinancialProfile, OptimizationResult, OptimizationSolution


@pytest.fixture
def profile() -> FinancialProfile:
    return FinancialProfile(current_age=30, monthly_expense=50000, monthly_investment=30000)


@pytest.fixture
def result() -> OptimizationResult:
    return OptimizationResult(
        baseline_fi_age=58,
        solutions=[
            OptimizationSolution(
                step_up_percent=10,
                sip_increase_percent=0,
                new_monthly_investment=30000,
                resulting_fi_age=51,
                improvement_years=7,
            )
        ],
    )


class TestRunOptimizationRequest:
    """Tests for the request message."""

    def test_defaults(self, profile):
        request = RunOptimizationRequest(correlation_id=1, profile=profile)

        assert request.kind == MessageKind.RUN_OPTIMIZATION
        assert request.baseline_fi_age is None
        assert request.target_age is None

    def test_dict_round_trip(self, profile):
        request = RunOptimizationRequest(
            correlation_id=4, profile=profile, baseline_fi_age=58, target_age=55
        )
        raw = request.model_dump(mode="json")

        assert raw["kind"] == "RUN_OPTIMIZATION"
        assert raw["profile"]["health_status"] == "generally_healthy"
        assert parse_request(raw) == request

    def test_correlation_id_must_be_positive(self, profile):
        with pytest.raises(ValidationError):
            RunOptimizationRequest(correlation_id=0, profile=profile)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValidationError):
            parse_request({"kind": "RUN_OPTIMIZATION", "correlation_id": 1})

        with pytest.raises(ValidationError):
            parse_request("not a dict")


class TestParseResponse:
    """Tests for response decoding."""

    def test_result_message(self, result):
        raw = OptimizationResultMessage(correlation_id=2, result=result).model_dump(mode="json")
        message = parse_response(raw)

        assert isinstance(message, OptimizationResultMessage)
        assert message.correlation_id == 2
        assert message.result == result

    def test_error_message(self):
        raw = OptimizationErrorMessage(correlation_id=3, message="boom").model_dump(mode="json")
        message = parse_response(raw)

        assert isinstance(message, OptimizationErrorMessage)
        assert message.kind == MessageKind.OPTIMIZATION_ERROR
        assert message.message == "boom"

    @pytest.mark.parametrize(
        "raw",
        [
            {"kind": "SOMETHING_ELSE", "correlation_id": 1},
            {"kind": "OPTIMIZATION_RESULT", "correlation_id": 1},
            {"kind": "OPTIMIZATION_ERROR", "message": "no id"},
            {"correlation_id": 1, "message": "no kind"},
            "OPTIMIZATION_RESULT",
            None,
        ],
    )
    def test_malformed_rejected(self, raw):
        with pytest.raises(ValidationError):
            parse_response(raw)


class TestProtocols:
    """Tests for the structural interfaces."""

    def test_fallback_advisor_satisfies_protocol(self):
        assert isinstance(FallbackAdvisor(), AdvisorProtocol)

    def test_plain_class_satisfies_execution_context(self):
        class InlineContext:
            on_message = None
            on_error = None
            on_message_error = None

            def post_message(self, message):
                pass

            def terminate(self):
                pass

        assert isinstance(InlineContext(), ExecutionContext)

    def test_channel_state_values(self):
        assert ChannelState.READY.value == "ready"
        assert ChannelState.TERMINATED == "terminated"
