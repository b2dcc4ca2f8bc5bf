"""Transport-agnostic channel interfaces.

This package defines the protocols and message types shared by the
background compute channel and whatever execution context runs the
optimizer. Nothing here depends on threads or asyncio.

Available Interfaces:
    ExecutionContext: Protocol for the isolated context running requests
    AdvisorProtocol: Protocol for recommendation providers
    ChannelState: Enum for channel lifecycle states

Message Types:
    RunOptimizationRequest: channel -> context
    OptimizationResultMessage: context -> channel (success)
    OptimizationErrorMessage: context -> channel (worker failure)
"""

from fiplan_agents.interfaces.base import (
    # Callables
    MessageHandler,
    ErrorHandler,
    ExecutionContextFactory,
    # Enumerations
    ChannelState,
    # Protocols
    ExecutionContext,
    AdvisorProtocol,
)

from fiplan_agents.interfaces.types import (
    MessageKind,
    RunOptimizationRequest,
    OptimizationResultMessage,
    OptimizationErrorMessage,
    ResponseMessage,
    parse_response,
    parse_request,
)

__all__ = [
    # Callables
    "MessageHandler",
    "ErrorHandler",
    "ExecutionContextFactory",
    # Enumerations
    "ChannelState",
    # Protocols
    "ExecutionContext",
    "AdvisorProtocol",
    # Messages
    "MessageKind",
    "RunOptimizationRequest",
    "OptimizationResultMessage",
    "OptimizationErrorMessage",
    "ResponseMessage",
    "parse_response",
    "parse_request",
]
