"""
Node overlap detection and resolution.

Nodes are treated as circles inscribed in a fixed NODE_WIDTH x NODE_HEIGHT
box. A node that lands on top of a peer is pushed straight down in fixed
steps until it is clear, or until the iteration ceiling is hit. In that case
the node stays at its last position; dense clusters may still overlap.
"""

import copy
import logging
import math
from typing import Dict, Any, Iterable, Optional

from ontomaker.canvas.constants import (
    NODE_WIDTH,
    NODE_HEIGHT,
    OVERLAP_SHIFT,
    OVERLAP_MAX_ITERATIONS,
)

logger = logging.getLogger(__name__)


def node_center(node: Dict[str, Any], node_width: float = NODE_WIDTH,
                node_height: float = NODE_HEIGHT) -> tuple:
    position = node.get('position') or {}
    return (position.get('x', 0) + node_width / 2,
            position.get('y', 0) + node_height / 2)


def nodes_overlap(node1: Dict[str, Any], node2: Dict[str, Any],
                  node_width: float = NODE_WIDTH, node_height: float = NODE_HEIGHT) -> bool:
    """True if the two node circles intersect. A node never overlaps itself."""
    if node1.get('id') == node2.get('id'):
        return False

    x1, y1 = node_center(node1, node_width, node_height)
    x2, y2 = node_center(node2, node_width, node_height)
    distance = math.sqrt((x1 - x2) ** 2 + (y1 - y2) ** 2)

    radius = node_width / 2
    return distance < radius * 2


def resolve_overlap(peers: Iterable[Dict[str, Any]], node: Optional[Dict[str, Any]],
                    shift_amount: float = OVERLAP_SHIFT,
                    max_iterations: int = OVERLAP_MAX_ITERATIONS) -> Optional[Dict[str, Any]]:
    """
    Return a copy of `node` moved down until it overlaps none of `peers`.

    Every iteration re-tests against all peers from the start and shifts by
    `shift_amount` on the first hit. Horizontal position is never touched.
    """
    peers = list(peers)
    if not node or not peers:
        return node

    adjusted = copy.deepcopy(node)
    position = adjusted.setdefault('position', {'x': 0, 'y': 0})

    iterations = 0
    has_overlap = True
    while has_overlap and iterations < max_iterations:
        has_overlap = False
        for peer in peers:
            if nodes_overlap(adjusted, peer):
                has_overlap = True
                position['y'] = position.get('y', 0) + shift_amount
                break
        iterations += 1

    if has_overlap and any(nodes_overlap(adjusted, peer) for peer in peers):
        logger.debug(f"Overlap resolution exhausted for node {adjusted.get('id')} "
                     f"after {iterations} iterations at y={position.get('y')}")

    return adjusted


def was_shifted(before: Dict[str, Any], after: Dict[str, Any]) -> bool:
    return (before.get('position') or {}).get('y') != (after.get('position') or {}).get('y')
