"""
Synchronous change notification for the graph store.
"""

from turtlegraph.events.event_bus import (
    EdgeUpdate,
    EventBus,
    GraphEvent,
    NodeUpdate,
    Subscription,
)

__all__ = [
    "EventBus",
    "GraphEvent",
    "NodeUpdate",
    "EdgeUpdate",
    "Subscription",
]
