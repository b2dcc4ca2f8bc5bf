"""Request handler that runs inside the execution context.

Turns one RUN_OPTIMIZATION request into one response dict. The handler is
synchronous and stateless between requests, so any execution context can
call it: a thread, a subprocess, or the caller itself in tests.
"""

from typing import Any, Optional

import structlog

from fiplan_core.advisory import FallbackAdvisor
from fiplan_core.models import AdvisoryPreferences, OptimizationResult
from fiplan_core.optimizer import LeverOptimizer

from fiplan_agents.interfaces.base import AdvisorProtocol
from fiplan_agents.interfaces.types import (
    OptimizationErrorMessage,
    OptimizationResultMessage,
    parse_request,
)

logger = structlog.get_logger()


class OptimizationWorker:
    """
    Validate a request, optimize, recommend, answer.

    A request that cannot be decoded raises pydantic.ValidationError out of
    handle_message; that is fatal for the execution context. Anything that
    goes wrong while optimizing a valid request is reported back as an
    OPTIMIZATION_ERROR message for that request only.
    """

    def __init__(
        self,
        optimizer: Optional[LeverOptimizer] = None,
        advisor: Optional[AdvisorProtocol] = None,
    ):
        """
        Initialize the worker.

        Args:
            optimizer: Optimizer to run (default: default assumptions and grid)
            advisor: Recommendation provider (default: FallbackAdvisor)
        """
        self.optimizer = optimizer or LeverOptimizer()
        self.advisor = advisor or FallbackAdvisor()

    def handle_message(self, raw: Any) -> dict[str, Any]:
        """
        Answer one raw request.

        Args:
            raw: Request dict as produced by RunOptimizationRequest.model_dump

        Returns:
            OPTIMIZATION_RESULT or OPTIMIZATION_ERROR message as a plain dict

        Raises:
            pydantic.ValidationError: If ``raw`` is not a valid request
        """
        request = parse_request(raw)
        log = logger.bind(correlation_id=request.correlation_id)
        log.debug("optimization_request_received", baseline_fi_age=request.baseline_fi_age)

        try:
            result = self.optimizer.optimize(
                request.profile,
                request.baseline_fi_age,
                target_age=request.target_age,
            )
            result = self._attach_recommendation(result, request.target_age)
        except Exception as e:
            log.exception("optimization_failed", error=str(e))
            return OptimizationErrorMessage(
                correlation_id=request.correlation_id,
                message=str(e) or e.__class__.__name__,
            ).model_dump(mode="json")

        log.debug("optimization_request_answered", solutions=len(result.solutions))
        return OptimizationResultMessage(
            correlation_id=request.correlation_id,
            result=result,
        ).model_dump(mode="json")

    def _attach_recommendation(
        self,
        result: OptimizationResult,
        target_age: Optional[int],
    ) -> OptimizationResult:
        """Add the advisor's pick to a result that has solutions."""
        if not result.solutions:
            return result

        settings = self.optimizer.settings
        baseline = (
            result.baseline_fi_age
            if result.baseline_fi_age is not None
            else settings.unreachable_baseline_age
        )
        preferences = AdvisoryPreferences(
            target_age=target_age if target_age is not None else settings.default_target_fi_age,
        )
        recommendation = self.advisor.recommend(baseline, result.solutions, preferences)

        index = recommendation.recommended_index
        if not 0 <= index < len(result.solutions):
            index = 0

        return result.model_copy(
            update={
                "recommendation": recommendation,
                "recommended_solution": result.solutions[index],
            }
        )
