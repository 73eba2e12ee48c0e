"""
Sink adapters for chronomerge.

These implement the LogSinkPort protocol.
"""

from chronomerge.infrastructure.sinks.base import BaseSink
from chronomerge.infrastructure.sinks.memory_sink import CollectingSink, OrderCheckingSink
from chronomerge.infrastructure.sinks.console_sink import ConsoleSink, JsonLinesSink

__all__ = [
    "BaseSink",
    "CollectingSink",
    "OrderCheckingSink",
    "ConsoleSink",
    "JsonLinesSink",
]
