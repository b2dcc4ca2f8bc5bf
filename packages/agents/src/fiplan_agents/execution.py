"""Thread-backed execution context.

Runs the optimization worker on one daemon thread so the event loop never
blocks on a grid search. Requests go in through a queue; responses and
crash notifications come back through ``loop.call_soon_threadsafe`` so that
every handler runs on the event loop thread.
"""

import asyncio
import queue
import threading
from typing import Any, Callable, Optional

import structlog

from fiplan_core.exceptions import ChannelUnavailableError

from fiplan_agents.interfaces.base import ErrorHandler, MessageHandler
from fiplan_agents.worker import OptimizationWorker

logger = structlog.get_logger()

_STOP = object()


class ThreadExecutionContext:
    """
    ExecutionContext implementation backed by a single worker thread.

    The thread processes requests strictly one at a time. If the handler
    raises, the thread reports the exception through ``on_error`` and exits;
    the context is dead from then on. A dead context keeps accepting requests
    until it is terminated, so they are still pending when ``on_error``
    reaches the loop. A handler result that is not a dict is reported
    through ``on_message_error`` and the thread keeps going.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        handler: Optional[Callable[[Any], Any]] = None,
        *,
        name: str = "fiplan-optimizer",
    ):
        """
        Start the worker thread.

        Args:
            loop: Event loop that handlers are invoked on
            handler: Request handler (default: OptimizationWorker().handle_message)
            name: Thread name
        """
        self.on_message: Optional[MessageHandler] = None
        self.on_error: Optional[ErrorHandler] = None
        self.on_message_error: Optional[ErrorHandler] = None

        self._loop = loop
        self._handler = handler or OptimizationWorker().handle_message
        self._inbox: "queue.Queue[Any]" = queue.Queue()
        self._terminated = False
        self._dead = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    @property
    def is_alive(self) -> bool:
        """True while the worker thread is processing requests."""
        return not self._terminated and not self._dead and self._thread.is_alive()

    def post_message(self, message: dict[str, Any]) -> None:
        """Queue one request for the worker thread.

        Raises:
            ChannelUnavailableError: If the context has been terminated
        """
        if self._terminated:
            raise ChannelUnavailableError("Execution context is not running")
        self._inbox.put(message)

    def terminate(self) -> None:
        """Stop accepting requests; responses not yet delivered are dropped."""
        if self._terminated:
            return
        self._terminated = True
        self._inbox.put(_STOP)

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the worker thread to exit."""
        self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            message = self._inbox.get()
            if message is _STOP:
                return

            try:
                response = self._handler(message)
            except Exception as e:
                self._dead = True
                logger.error(
                    "execution_context_crashed",
                    thread=self._thread.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._dispatch("on_error", e)
                return

            if not isinstance(response, dict):
                self._dispatch(
                    "on_message_error",
                    TypeError(f"Response must be a dict, got {type(response).__name__}"),
                )
                continue

            self._dispatch("on_message", response)

    def _dispatch(self, handler_name: str, payload: Any) -> None:
        """Hand a payload to the named handler on the event loop thread."""
        try:
            self._loop.call_soon_threadsafe(self._deliver, handler_name, payload)
        except RuntimeError:
            # Loop already closed; nobody is left to receive it.
            logger.debug("execution_context_dispatch_dropped", handler=handler_name)

    def _deliver(self, handler_name: str, payload: Any) -> None:
        if self._terminated:
            return
        handler = getattr(self, handler_name)
        if handler is not None:
            handler(payload)
