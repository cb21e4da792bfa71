"""
Minimal callback registry used by the graph store and the canvas controller.
"""

import logging
from typing import Any, Callable, Dict, List, Iterable

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Named-event callback registry.

    Subclasses declare the events they emit; registering for an unknown
    event is ignored. A failing callback is logged and does not prevent the
    remaining callbacks from running.
    """

    def __init__(self, events: Iterable[str]):
        self._callbacks: Dict[str, List[Callable]] = {event: [] for event in events}

    def on(self, event: str, callback: Callable) -> None:
        """Register a callback for an event type."""
        if event in self._callbacks:
            self._callbacks[event].append(callback)
        else:
            logger.warning(f"Ignoring callback for unknown event '{event}'")

    def off(self, event: str, callback: Callable) -> None:
        """Remove a callback for an event type."""
        if event in self._callbacks and callback in self._callbacks[event]:
            self._callbacks[event].remove(callback)

    def _emit(self, event: str, data: Any = None) -> None:
        """Emit an event to all registered callbacks."""
        for callback in list(self._callbacks.get(event, [])):
            try:
                callback(data)
            except Exception as e:
                logger.error(f"Error in callback for {event}: {e}")
