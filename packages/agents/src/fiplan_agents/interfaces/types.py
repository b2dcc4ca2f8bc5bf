"""Message types crossing the background compute channel.

Three message kinds exist:
1. RUN_OPTIMIZATION (channel -> execution context)
2. OPTIMIZATION_RESULT (execution context -> channel)
3. OPTIMIZATION_ERROR (execution context -> channel)

On the wire every message is a plain dict produced by
``model_dump(mode="json")``, so nothing but builtin types crosses the
boundary. Each message carries the correlation id of the request it belongs
to; responses may arrive in any order.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from fiplan_core.models import FinancialProfile, OptimizationResult


# =============================================================================
# ENUMERATIONS
# =============================================================================


class MessageKind(str, Enum):
    """Discriminator values for channel messages."""

    RUN_OPTIMIZATION = "RUN_OPTIMIZATION"
    OPTIMIZATION_RESULT = "OPTIMIZATION_RESULT"
    OPTIMIZATION_ERROR = "OPTIMIZATION_ERROR"


# =============================================================================
# REQUEST
# =============================================================================


class RunOptimizationRequest(BaseModel):
    """Ask the execution context to optimize one profile."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["RUN_OPTIMIZATION"] = "RUN_OPTIMIZATION"
    correlation_id: int = Field(ge=1, description="Channel-assigned request id")
    profile: FinancialProfile
    baseline_fi_age: Optional[int] = Field(
        default=None, description="FI age without levers, None if never reached"
    )
    target_age: Optional[int] = Field(
        default=None, description="Solutions must reach FI at or before this age"
    )


# =============================================================================
# RESPONSES
# =============================================================================


class OptimizationResultMessage(BaseModel):
    """Successful answer to one request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["OPTIMIZATION_RESULT"] = "OPTIMIZATION_RESULT"
    correlation_id: int
    result: OptimizationResult


class OptimizationErrorMessage(BaseModel):
    """The worker failed while optimizing one request."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["OPTIMIZATION_ERROR"] = "OPTIMIZATION_ERROR"
    correlation_id: int
    message: str = Field(description="Human-readable failure reason")


ResponseMessage = Annotated[
    Union[OptimizationResultMessage, OptimizationErrorMessage],
    Field(discriminator="kind"),
]

_response_adapter: TypeAdapter[Union[OptimizationResultMessage, OptimizationErrorMessage]] = (
    TypeAdapter(ResponseMessage)
)


def parse_response(raw: Any) -> Union[OptimizationResultMessage, OptimizationErrorMessage]:
    """Decode one response dict from the execution context.

    Raises:
        pydantic.ValidationError: If the message has an unknown kind or
            does not match that kind's shape.
    """
    return _response_adapter.validate_python(raw)


def parse_request(raw: Any) -> RunOptimizationRequest:
    """Decode one request dict on the execution-context side.

    Raises:
        pydantic.ValidationError: If the message is not a valid request.
    """
    return RunOptimizationRequest.model_validate(raw)


__all__ = [
    "MessageKind",
    "RunOptimizationRequest",
    "OptimizationResultMessage",
    "OptimizationErrorMessage",
    "ResponseMessage",
    "parse_response",
    "parse_request",
]
