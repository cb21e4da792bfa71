"""
Canvas Handlers - event wiring between the NiceGUI page and the controller.

The page shows the canvas as an interactive SVG image; this module turns its
raw mouse and keyboard events into controller calls:

- mousedown on a handle starts a connection, on a node starts a move
- mouseup on a handle completes the connection; anywhere else cancels it
- mouseup after a short press is a click (node, edge or empty canvas)
- Shift+Delete / Shift+Backspace deletes the selection
- Enter / Escape clears the selection
"""

import logging
import math
from typing import Dict, Any, List, Optional, Tuple, Callable

from ontomaker.canvas.constants import (
    HANDLE_HIT_RADIUS,
    NODE_WIDTH,
    SOURCE_HANDLE,
    TARGET_HANDLE,
)
from ontomaker.canvas.controller import GraphSyncController
from ontomaker.canvas.geometry import handle_anchor
from ontomaker.canvas.layout import node_center
from ontomaker.graph import index_by_id

logger = logging.getLogger(__name__)

# Pointer travel below this is a click, not a drag
CLICK_TOLERANCE = 3

# Distance to an edge's chord that still selects it
EDGE_HIT_TOLERANCE = 8


def _distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2)


def point_to_segment_distance(point: Tuple[float, float], start: Tuple[float, float],
                              end: Tuple[float, float]) -> float:
    px, py = point
    x1, y1 = start
    x2, y2 = end
    dx, dy = x2 - x1, y2 - y1

    if dx == 0 and dy == 0:
        return _distance(point, start)

    t = max(0.0, min(1.0, ((px - x1) * dx + (py - y1) * dy) / (dx * dx + dy * dy)))
    return _distance(point, (x1 + t * dx, y1 + t * dy))


def find_handle_at(nodes: List[Dict[str, Any]], x: float, y: float) -> Optional[Tuple[str, str]]:
    """(node_id, handle_id) of the closest handle within HANDLE_HIT_RADIUS, or None."""
    closest = None
    closest_dist = float('inf')
    for node in nodes:
        for handle in (TARGET_HANDLE, SOURCE_HANDLE):
            dist = _distance((x, y), handle_anchor(node, handle))
            if dist <= HANDLE_HIT_RADIUS and dist < closest_dist:
                closest_dist = dist
                closest = (node['id'], handle)
    return closest


def find_node_at(nodes: List[Dict[str, Any]], x: float, y: float) -> Optional[str]:
    """Id of the topmost node whose circle contains the point."""
    for node in reversed(nodes):
        if _distance((x, y), node_center(node)) <= NODE_WIDTH / 2:
            return node['id']
    return None


def find_edge_at(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]],
                 x: float, y: float) -> Optional[str]:
    """Id of the edge whose handle-to-handle chord passes closest to the point."""
    by_id = index_by_id(nodes)
    closest = None
    closest_dist = float('inf')
    for edge in edges:
        source = by_id.get(edge.get('source'))
        target = by_id.get(edge.get('target'))
        if source is None or target is None:
            continue
        dist = point_to_segment_distance(
            (x, y),
            handle_anchor(source, edge.get('sourceHandle')),
            handle_anchor(target, edge.get('targetHandle')),
        )
        if dist < EDGE_HIT_TOLERANCE and dist < closest_dist:
            closest_dist = dist
            closest = edge['id']
    return closest


def _key_name(key) -> str:
    return getattr(key, 'name', key)


def setup_canvas_handlers(controller: GraphSyncController, refresh: Callable[[], None]) -> Dict[str, Callable]:
    """
    Build the canvas event handlers.

    Args:
        controller: GraphSyncController driving the canvas
        refresh: Called after any handled event to redraw the canvas

    Returns:
        Dict with 'handle_mouse' and 'handle_keyboard'
    """
    press: Dict[str, Any] = {'kind': None}

    def handle_mouse_down(x: float, y: float):
        hit = find_handle_at(controller.nodes, x, y)
        if hit:
            controller.connect_start(*hit)
            press.update(kind='connect', x=x, y=y)
            return

        node_id = find_node_at(controller.nodes, x, y)
        if node_id:
            press.update(kind='node', node_id=node_id, x=x, y=y)
        else:
            press.update(kind='pane', x=x, y=y)

    def handle_mouse_up(x: float, y: float):
        kind = press.get('kind')
        press.update(kind=None)

        if kind == 'connect':
            start = controller.pending_gesture
            hit = find_handle_at(controller.nodes, x, y)
            if start is None:
                return
            if hit is None or hit == (start.node_id, start.handle_id):
                controller.connect_end(on_pane=True)
                return
            controller.connect({
                'source': start.node_id,
                'sourceHandle': start.handle_id,
                'target': hit[0],
                'targetHandle': hit[1],
            })
        elif kind == 'node':
            dx, dy = x - press['x'], y - press['y']
            if abs(dx) <= CLICK_TOLERANCE and abs(dy) <= CLICK_TOLERANCE:
                controller.click_node(press['node_id'])
            else:
                controller.move_node(press['node_id'], dx, dy)
        elif kind == 'pane':
            edge_id = find_edge_at(controller.nodes, controller.edges, x, y)
            if edge_id:
                controller.click_edge(edge_id)
            else:
                controller.click_pane()
        else:
            return
        refresh()

    def handle_mouse(e):
        """NiceGUI interactive_image mouse event (type, image_x, image_y)."""
        if e.type == 'mousedown':
            handle_mouse_down(e.image_x, e.image_y)
        elif e.type == 'mouseup':
            handle_mouse_up(e.image_x, e.image_y)

    def handle_keyboard(e):
        """Shift+Delete/Backspace deletes the selection, Enter/Escape clears it."""
        if not e.action.keydown:
            return
        key = _key_name(e.key)
        if e.modifiers.shift and key in ('Delete', 'Backspace'):
            if controller.delete_selected():
                refresh()
        elif key in ('Enter', 'Escape') and controller.store.selected_element() is not None:
            controller.click_pane()
            refresh()

    return {
        'handle_mouse': handle_mouse,
        'handle_keyboard': handle_keyboard,
    }
