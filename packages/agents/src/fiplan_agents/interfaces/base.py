"""Execution-context and advisor interfaces for FIPlan.

This module defines the contracts the background compute channel relies on.
They use Python's structural subtyping via typing.Protocol, so any class
that implements the required methods is compatible without inheriting from
anything here.

Design Goals:
- Transport independence: the channel never knows whether requests run on a
  thread, a subprocess or a remote service
- Duck typing: test doubles are plain classes with matching methods
- Callback-driven: the context pushes responses, crashes and decode failures
  to handlers the channel installs

Example Usage:
    ```python
    class InlineContext:
        '''Runs every request synchronously on the caller's thread.'''

        def __init__(self, handler):
            self.handler = handler
            self.on_message = None
            self.on_error = None
            self.on_message_error = None

        def post_message(self, message: dict) -> None:
            self.on_message(self.handler(message))

        def terminate(self) -> None:
            pass

    # InlineContext is compatible with ExecutionContext
    ```
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from fiplan_core.models import AdvisoryPreferences, OptimizationSolution, Recommendation


MessageHandler = Callable[[Any], None]
"""Receives one raw (undecoded) message from the execution context."""

ErrorHandler = Callable[[BaseException], None]
"""Receives the exception that killed, or could not be decoded by, the context."""


# =============================================================================
# ENUMERATIONS
# =============================================================================

class ChannelState(str, Enum):
    """Lifecycle states of a BackgroundComputeChannel."""

    UNINITIALIZED = "uninitialized"
    """Created but not started; no execution context exists yet."""

    READY = "ready"
    """Execution context alive, no requests in flight."""

    BUSY = "busy"
    """At least one request is pending."""

    CRASHED = "crashed"
    """The execution context died; recreation is in progress."""

    TERMINATED = "terminated"
    """Closed, or recreation failed. Every submit is rejected."""


# =============================================================================
# EXECUTION CONTEXT PROTOCOL
# =============================================================================

@runtime_checkable
class ExecutionContext(Protocol):
    """Protocol for the isolated context that runs optimization requests.

    The channel assigns the three handler attributes right after creating
    the context and before posting anything. Implementations must invoke
    them on the channel's event loop thread.

    Attributes:
        on_message: Called with each response the context produces
        on_error: Called once when the context dies; the context is unusable after
        on_message_error: Called when a response cannot be decoded
    """

    on_message: Optional[MessageHandler]
    on_error: Optional[ErrorHandler]
    on_message_error: Optional[ErrorHandler]

    def post_message(self, message: dict[str, Any]) -> None:
        """Send one request to the context without waiting for its answer.

        Raises:
            Any exception if the message cannot be delivered; the channel
            treats that as a crash of this context and replaces it.
        """
        ...

    def terminate(self) -> None:
        """Stop the context. Responses still in flight are dropped."""
        ...


ExecutionContextFactory = Callable[[asyncio.AbstractEventLoop], ExecutionContext]
"""Builds a fresh execution context bound to the given event loop."""


# =============================================================================
# ADVISOR PROTOCOL
# =============================================================================

@runtime_checkable
class AdvisorProtocol(Protocol):
    """Protocol for anything that picks one optimizer solution.

    A remote advisory service and fiplan_core.advisory.FallbackAdvisor both
    satisfy it. Implementations must not raise for a non-empty solution
    list, and must return ``recommended_index == -1`` for an empty one.
    """

    def recommend(
        self,
        baseline_fi_age: int,
        solutions: list[OptimizationSolution],
        preferences: AdvisoryPreferences,
    ) -> Recommendation:
        """Recommend one solution by its index in ``solutions``."""
        ...


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "MessageHandler",
    "ErrorHandler",
    "ChannelState",
    "ExecutionContext",
    "ExecutionContextFactory",
    "AdvisorProtocol",
]
