"""
Connection Resolver - turns a drag gesture into a directed edge.

The renderer reports where a connection drag started (node + handle) and,
if the pointer was released on a handle, both ends of the connection in its
own source/target terms. Those terms follow the drag order, not the ontology
direction, so we re-derive the direction from handle roles:

    'bottom' handle -> outgoing -> edge source
    'top' handle    -> incoming -> edge target

Anything other than one bottom and one top handle is rejected.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

from ontomaker.canvas.constants import SOURCE_HANDLE, TARGET_HANDLE, DEFAULT_EDGE_LABEL
from ontomaker.graph import make_edge

logger = logging.getLogger(__name__)


class ConnectionRejected(Exception):
    """A drag gesture that does not produce an edge."""


class MalformedGesture(ConnectionRejected):
    """The drop does not match the recorded drag start."""


class InvalidHandlePairing(ConnectionRejected):
    """The two handles are not one outgoing and one incoming handle."""


@dataclass(frozen=True)
class GestureStart:
    node_id: str
    handle_id: Optional[str]


def _other_end(start: GestureStart, end: Dict[str, Any]):
    if end.get('source') == start.node_id and end.get('sourceHandle') == start.handle_id:
        return end.get('target'), end.get('targetHandle')
    if end.get('target') == start.node_id and end.get('targetHandle') == start.handle_id:
        return end.get('source'), end.get('sourceHandle')
    raise MalformedGesture(
        f"Drop {end.get('source')}:{end.get('sourceHandle')} -> "
        f"{end.get('target')}:{end.get('targetHandle')} does not match drag start "
        f"{start.node_id}:{start.handle_id}"
    )


def resolve_connection(start: GestureStart, end: Dict[str, Any],
                       edge_id: Optional[str] = None,
                       label: str = DEFAULT_EDGE_LABEL) -> Dict[str, Any]:
    """
    Resolve a completed drag into a canonical edge dict.

    Args:
        start: Where the drag began
        end: Renderer drop payload with source/sourceHandle/target/targetHandle
        edge_id: Optional id for the new edge (fresh one otherwise)

    Raises:
        MalformedGesture: `start` matches neither side of `end`, or the other side is missing
        InvalidHandlePairing: handles are not (bottom, top) or (top, bottom)
    """
    other_node, other_handle = _other_end(start, end)
    if not other_node or not other_handle:
        raise MalformedGesture(f"Could not determine the other end of the connection from {start.node_id}")

    if start.handle_id == SOURCE_HANDLE and other_handle == TARGET_HANDLE:
        source_id, target_id = start.node_id, other_node
    elif start.handle_id == TARGET_HANDLE and other_handle == SOURCE_HANDLE:
        source_id, target_id = other_node, start.node_id
    else:
        raise InvalidHandlePairing(
            f"Invalid connection between handles: {start.handle_id} on {start.node_id} "
            f"and {other_handle} on {other_node}"
        )

    is_inverted = start.node_id != source_id
    return make_edge(source_id, target_id, is_inverted=is_inverted, label=label, edge_id=edge_id)


class ConnectionResolver:
    """
    Owns the single pending-gesture slot.

    The slot is filled by begin() and emptied on every way out of a gesture:
    a resolved edge, a rejected drop, or a cancel (release over empty canvas).
    A stale start must never leak into the next gesture.
    """

    def __init__(self):
        self._pending: Optional[GestureStart] = None

    @property
    def pending(self) -> Optional[GestureStart]:
        return self._pending

    def begin(self, node_id: str, handle_id: Optional[str]) -> GestureStart:
        self._pending = GestureStart(node_id=node_id, handle_id=handle_id)
        return self._pending

    def cancel(self) -> bool:
        """Drop the pending gesture. Returns True if one was pending."""
        had_pending = self._pending is not None
        if had_pending:
            logger.debug(f"Connection from {self._pending.node_id} cancelled")
        self._pending = None
        return had_pending

    def resolve(self, end: Dict[str, Any], edge_id: Optional[str] = None) -> Dict[str, Any]:
        start = self._pending
        self._pending = None
        if start is None:
            raise MalformedGesture("Connection completed without a recorded drag start")
        return resolve_connection(start, end, edge_id=edge_id)
