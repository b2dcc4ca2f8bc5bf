"""Background compute channel.

Offloads lever optimization to an isolated execution context and hands the
caller an asyncio.Future per request. Each request gets a monotonically
increasing correlation id and its own timeout; responses are matched by id,
not by arrival order.

Usage:
    async with BackgroundComputeChannel() as channel:
        result = await channel.submit(profile, baseline_fi_age=58)
"""

import asyncio
import functools
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog
from pydantic import ValidationError

from fiplan_core.exceptions import (
    ChannelError,
    ChannelUnavailableError,
    ComputationTimeoutError,
    ExecutionContextCrashedError,
    MalformedMessageError,
    OptimizationFailedError,
)
from fiplan_core.models import FinancialProfile, OptimizationResult
from fiplan_core.optimizer import LeverOptimizer

from fiplan_agents.config import ChannelConfig, FIPlanConfig
from fiplan_agents.execution import ThreadExecutionContext
from fiplan_agents.interfaces.base import (
    ChannelState,
    ExecutionContext,
    ExecutionContextFactory,
)
from fiplan_agents.interfaces.types import (
    OptimizationErrorMessage,
    RunOptimizationRequest,
    parse_response,
)
from fiplan_agents.worker import OptimizationWorker

logger = structlog.get_logger()


@dataclass
class PendingRequest:
    """Bookkeeping for one in-flight request."""

    correlation_id: int
    future: "asyncio.Future[OptimizationResult]"
    timer: asyncio.TimerHandle
    submitted_at: float


class BackgroundComputeChannel:
    """
    Request/response channel to a single execution context.

    State machine: UNINITIALIZED -> READY <-> BUSY -> TERMINATED, with
    CRASHED -> READY when the context dies and is recreated. All handler
    callbacks and ``submit`` run on the event loop thread, so the pending
    map needs no locking.
    """

    def __init__(
        self,
        context_factory: Optional[ExecutionContextFactory] = None,
        *,
        config: Optional[ChannelConfig] = None,
        worker: Optional[OptimizationWorker] = None,
    ):
        """
        Initialize the channel. No context exists until start().

        Args:
            context_factory: Builds an execution context for an event loop
                (default: ThreadExecutionContext running ``worker``)
            config: Timeout and thread settings (default: from environment)
            worker: Worker for the default thread context
        """
        self.config = config or ChannelConfig()
        self._worker = worker
        self._context_factory = context_factory or self._default_context_factory

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._context: Optional[ExecutionContext] = None
        self._pending: dict[int, PendingRequest] = {}
        self._last_correlation_id = 0
        self._state = ChannelState.UNINITIALIZED

    @classmethod
    def from_config(
        cls,
        config: FIPlanConfig,
        context_factory: Optional[ExecutionContextFactory] = None,
    ) -> "BackgroundComputeChannel":
        """Build a channel whose worker uses the configured assumptions and grid."""
        worker = OptimizationWorker(
            optimizer=LeverOptimizer(config.assumptions, config.optimizer),
        )
        return cls(context_factory, config=config.channel, worker=worker)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def pending_count(self) -> int:
        """Number of requests awaiting a response."""
        return len(self._pending)

    def start(self) -> None:
        """
        Create the execution context. Must be called with a running event loop.

        Raises:
            ChannelUnavailableError: If the channel is terminated or the
                context cannot be created
        """
        if self._state == ChannelState.TERMINATED:
            raise ChannelUnavailableError("Channel has been terminated")
        if self._context is not None:
            return

        self._loop = asyncio.get_running_loop()
        try:
            self._context = self._create_context()
        except Exception as e:
            self._state = ChannelState.TERMINATED
            logger.error("execution_context_start_failed", error=str(e))
            raise ChannelUnavailableError(
                "Could not start execution context", details={"error": str(e)}
            ) from e

        self._state = ChannelState.READY
        logger.info("channel_started", timeout_ms=self.config.request_timeout_ms)

    def close(self) -> None:
        """
        Terminate the channel.

        Timers are cancelled and pending requests are abandoned: their
        futures are never resolved.
        """
        if self._state == ChannelState.TERMINATED and self._context is None:
            return

        abandoned = len(self._pending)
        for entry in self._pending.values():
            entry.timer.cancel()
        self._pending.clear()

        if self._context is not None:
            self._context.terminate()
            self._context = None

        self._state = ChannelState.TERMINATED
        logger.info("channel_closed", abandoned_requests=abandoned)

    async def __aenter__(self) -> "BackgroundComputeChannel":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Requests
    # =========================================================================

    def submit(
        self,
        profile: FinancialProfile,
        baseline_fi_age: Optional[int],
        target_age: Optional[int] = None,
    ) -> "asyncio.Future[OptimizationResult]":
        """
        Dispatch one optimization request without waiting for it.

        An unstarted channel is started first. Failures are delivered through
        the returned future, never raised.

        Args:
            profile: The person being planned for
            baseline_fi_age: FI age without levers (None if never reached)
            target_age: Optional FI age the solutions must reach

        Returns:
            Future resolving to the OptimizationResult, or failing with a
            ChannelError subclass
        """
        if self._state == ChannelState.UNINITIALIZED:
            try:
                self.start()
            except ChannelUnavailableError:
                logger.warning("channel_autostart_failed")

        loop = self._loop or asyncio.get_running_loop()
        future: "asyncio.Future[OptimizationResult]" = loop.create_future()

        if self._state == ChannelState.TERMINATED or self._context is None:
            future.set_exception(ChannelUnavailableError())
            return future

        self._last_correlation_id += 1
        correlation_id = self._last_correlation_id
        request = RunOptimizationRequest(
            correlation_id=correlation_id,
            profile=profile,
            baseline_fi_age=baseline_fi_age,
            target_age=target_age,
        )

        timer = loop.call_later(
            self.config.request_timeout_seconds, self._on_timeout, correlation_id
        )
        self._pending[correlation_id] = PendingRequest(
            correlation_id=correlation_id,
            future=future,
            timer=timer,
            submitted_at=loop.time(),
        )
        self._refresh_state()

        context = self._context
        try:
            context.post_message(request.model_dump(mode="json"))
        except Exception as e:
            # A context that refuses requests has died.
            logger.warning(
                "request_dispatch_failed", correlation_id=correlation_id, error=str(e)
            )
            self._on_crash(context, e)
            return future

        logger.debug("request_submitted", correlation_id=correlation_id)
        return future

    async def optimize(
        self,
        profile: FinancialProfile,
        baseline_fi_age: Optional[int],
        target_age: Optional[int] = None,
    ) -> OptimizationResult:
        """Submit a request and wait for its result."""
        return await self.submit(profile, baseline_fi_age, target_age)

    # =========================================================================
    # Context callbacks (event loop thread)
    # =========================================================================

    def _on_message(self, raw: Any) -> None:
        try:
            message = parse_response(raw)
        except ValidationError as e:
            self._on_message_error(e)
            return

        entry = self._settle(message.correlation_id)
        if entry is None:
            logger.debug("late_response_discarded", correlation_id=message.correlation_id)
            return

        elapsed_ms = (self._loop.time() - entry.submitted_at) * 1000
        if isinstance(message, OptimizationErrorMessage):
            logger.warning(
                "optimization_failed",
                correlation_id=message.correlation_id,
                error=message.message,
            )
            self._reject(
                entry,
                OptimizationFailedError(message.message, correlation_id=message.correlation_id),
            )
            return

        logger.info(
            "optimization_response_received",
            correlation_id=message.correlation_id,
            solutions=len(message.result.solutions),
            elapsed_ms=round(elapsed_ms, 1),
        )
        if not entry.future.done():
            entry.future.set_result(message.result)

    def _on_timeout(self, correlation_id: int) -> None:
        entry = self._settle(correlation_id)
        if entry is None:
            return
        logger.warning(
            "request_timed_out",
            correlation_id=correlation_id,
            timeout_ms=self.config.request_timeout_ms,
        )
        self._reject(
            entry,
            ComputationTimeoutError(
                correlation_id=correlation_id,
                timeout_ms=self.config.request_timeout_ms,
            ),
        )

    def _on_message_error(self, error: BaseException) -> None:
        logger.error(
            "malformed_message",
            error=str(error),
            pending_requests=len(self._pending),
        )
        self._reject_all(
            lambda cid: MalformedMessageError(
                correlation_id=cid, details={"error": str(error)}
            )
        )

    def _on_crash(self, context: ExecutionContext, error: BaseException) -> None:
        if context is not self._context or self._state == ChannelState.TERMINATED:
            return

        self._state = ChannelState.CRASHED
        logger.error(
            "execution_context_crashed",
            error=str(error),
            pending_requests=len(self._pending),
        )
        self._reject_all(
            lambda cid: ExecutionContextCrashedError(
                correlation_id=cid, details={"error": str(error)}
            )
        )

        context.terminate()
        self._context = None
        try:
            self._context = self._create_context()
        except Exception as e:
            self._state = ChannelState.TERMINATED
            logger.error("execution_context_recreate_failed", error=str(e))
            return

        logger.info("execution_context_recreated")
        self._state = ChannelState.READY

    # =========================================================================
    # Internals
    # =========================================================================

    def _default_context_factory(self, loop: asyncio.AbstractEventLoop) -> ExecutionContext:
        worker = self._worker or OptimizationWorker()
        return ThreadExecutionContext(
            loop, worker.handle_message, name=self.config.worker_thread_name
        )

    def _create_context(self) -> ExecutionContext:
        context = self._context_factory(self._loop)
        context.on_message = self._on_message
        context.on_error = functools.partial(self._on_crash, context)
        context.on_message_error = self._on_message_error
        return context

    def _settle(self, correlation_id: int) -> Optional[PendingRequest]:
        """Remove a pending entry and cancel its timer. None if already settled."""
        entry = self._pending.pop(correlation_id, None)
        if entry is not None:
            entry.timer.cancel()
            self._refresh_state()
        return entry

    def _reject(self, entry: PendingRequest, error: ChannelError) -> None:
        if not entry.future.done():
            entry.future.set_exception(error)

    def _reject_all(self, make_error: Callable[[int], ChannelError]) -> None:
        entries = list(self._pending.values())
        self._pending.clear()
        for entry in entries:
            entry.timer.cancel()
            self._reject(entry, make_error(entry.correlation_id))
        self._refresh_state()

    def _refresh_state(self) -> None:
        if self._state in (ChannelState.READY, ChannelState.BUSY):
            self._state = ChannelState.BUSY if self._pending else ChannelState.READY
