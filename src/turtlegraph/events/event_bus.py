from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Tuple

if TYPE_CHECKING:
    from turtlegraph.graph.graph_schema import Edge, Node

logger = logging.getLogger(__name__)


class GraphEvent(str, Enum):
    """
    Kinds of change notifications emitted by the graph store.
    """

    NODE_ADDED = "node:add"
    NODE_UPDATED = "node:update"
    NODE_DELETED = "node:delete"
    EDGE_ADDED = "edge:add"
    EDGE_UPDATED = "edge:update"
    EDGE_DELETED = "edge:delete"
    GRAPH_CLEARED = "graph:clear"


@dataclass(frozen=True)
class NodeUpdate:
    """Payload of ``node:update``: the updated node and the raw partial."""

    node: Node
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class EdgeUpdate:
    """Payload of ``edge:update``: the updated edge and the raw partial."""

    edge: Edge
    changes: Mapping[str, Any]


@dataclass(frozen=True)
class Subscription:
    """
    Opaque token returned by ``subscribe``; pass it back to unsubscribe.
    """

    event: GraphEvent
    token: int


Listener = Callable[..., None]


class EventBus:
    """
    Synchronous publish/subscribe channel.

    ``emit`` calls every listener registered for the event, in registration
    order, before returning. The listener list is snapshotted when ``emit``
    starts: listeners added or removed during dispatch take effect from
    the next ``emit``. Listener exceptions propagate to the emitter.
    """

    def __init__(self) -> None:
        self._listeners: Dict[GraphEvent, List[Tuple[int, Listener]]] = {}
        self._tokens = itertools.count(1)

    def subscribe(self, event: GraphEvent | str, listener: Listener) -> Subscription:
        kind = GraphEvent(event)
        token = next(self._tokens)
        self._listeners.setdefault(kind, []).append((token, listener))
        return Subscription(event=kind, token=token)

    def unsubscribe(self, subscription: Subscription) -> bool:
        """
        Remove a listener. Returns False if the token was not registered.
        """
        entries = self._listeners.get(subscription.event, [])
        for index, (token, _) in enumerate(entries):
            if token == subscription.token:
                del entries[index]
                return True
        return False

    def emit(self, event: GraphEvent | str, *args: Any) -> None:
        kind = GraphEvent(event)
        snapshot = list(self._listeners.get(kind, []))
        logger.debug("emit %s to %d listener(s)", kind.value, len(snapshot))
        for _, listener in snapshot:
            listener(*args)

    def listener_count(self, event: GraphEvent | str) -> int:
        return len(self._listeners.get(GraphEvent(event), []))

    def clear(self) -> None:
        self._listeners.clear()
