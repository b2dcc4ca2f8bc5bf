"""FIPlan Agents - Background compute channel for lever optimization."""

from fiplan_agents.config import (
    ChannelConfig,
    FIPlanConfig,
    load_config,
)
from fiplan_agents.channel import BackgroundComputeChannel
from fiplan_agents.execution import ThreadExecutionContext
from fiplan_agents.interfaces import ChannelState
from fiplan_agents.worker import OptimizationWorker

__version__ = "0.1.0"

__all__ = [
    "ChannelConfig",
    "FIPlanConfig",
    "load_config",
    "BackgroundComputeChannel",
    "ChannelState",
    "ThreadExecutionContext",
    "OptimizationWorker",
]
