"""
Edge geometry for the diagram canvas.

Pure functions that turn edge endpoints and handle roles into an S-shaped
cubic path plus arrowhead marker placement. Every function here is
referentially transparent: no state, no error handling. Malformed numeric
input is the caller's problem.

The path always leaves the source and enters the target perpendicular to the
node boundary. When the connection is vertical a short stub is cut away at
the arrowhead end so the curve does not run underneath the marker.
"""

from dataclasses import dataclass
from typing import Dict, Any, Tuple

from ontomaker.canvas.constants import (
    ARROW_SIZE,
    ARROW_STUB,
    ARROWHEAD_PATH,
    CURVATURE,
    LABEL_LIFT,
    NODE_HEIGHT,
    NODE_WIDTH,
    SOURCE_HANDLE,
    STRAIGHT_RUN,
    VERTICAL_HANDLES,
)


@dataclass(frozen=True)
class MarkerConfig:
    """Arrowhead marker placement."""
    orientation_degrees: int = 0
    ref_x: int = 0
    ref_y: int = ARROW_SIZE // 2
    is_vertical: bool = False


@dataclass(frozen=True)
class EndpointOffsets:
    """Y coordinates where the drawn path starts/ends and where the curve begins."""
    edge_source_y: float
    edge_target_y: float
    straight_source_y: float
    straight_target_y: float


@dataclass(frozen=True)
class EdgeGeometry:
    """Everything a renderer needs to draw one edge."""
    edge_id: str
    path: str
    marker: MarkerConfig
    marker_at_start: bool
    label_position: Tuple[float, float]


def compute_marker_config(source_handle: str, target_handle: str,
                          is_inverted: bool, direction: str) -> MarkerConfig:
    """
    Compute arrowhead orientation and reference point.

    Vertical connections point the marker down (90) when it sits on the path
    end and up (270) when it sits on the path start. The reference X is pinned
    to the tail (0) for inverted edges and to the tip (12) otherwise, so the
    arrowhead touches the node boundary exactly.

    Everything else falls back to auto-tangent orientation.
    """
    is_vertical = source_handle in VERTICAL_HANDLES
    if not is_vertical:
        return MarkerConfig(orientation_degrees=0, ref_x=0, is_vertical=False)

    orientation = 270 if direction == 'start' else 90
    ref_x = 0 if is_inverted else ARROW_SIZE
    return MarkerConfig(orientation_degrees=orientation, ref_x=ref_x, is_vertical=True)


def compute_endpoint_offsets(source_y: float, target_y: float,
                             is_inverted: bool, is_vertical: bool) -> EndpointOffsets:
    """Trim the arrowhead end of a vertical connection and add its straight run."""
    edge_source_y = source_y
    edge_target_y = target_y
    straight_source_y = source_y
    straight_target_y = target_y

    if is_vertical:
        if is_inverted:
            # Arrowhead sits on the source end
            edge_source_y = source_y + ARROW_STUB
            straight_source_y = source_y + STRAIGHT_RUN
        else:
            edge_target_y = target_y - ARROW_STUB
            straight_target_y = target_y - STRAIGHT_RUN

    return EndpointOffsets(
        edge_source_y=edge_source_y,
        edge_target_y=edge_target_y,
        straight_source_y=straight_source_y,
        straight_target_y=straight_target_y,
    )


def _fmt(value: float) -> str:
    # 60.00000000000001 -> "60", 12.5 -> "12.5"
    value = round(float(value), 3)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build_path(source_x: float, source_y: float, target_x: float, target_y: float,
               offsets: EndpointOffsets) -> str:
    """
    Build the SVG path string for an edge.

    Vertical stub at the source, cubic curve with control points offset
    horizontally by CURVATURE * dx from each endpoint, vertical stub into the
    target.
    """
    dx = target_x - source_x
    control_x1 = source_x + dx * CURVATURE
    control_x2 = target_x - dx * CURVATURE

    return (
        f"M {_fmt(source_x)},{_fmt(offsets.edge_source_y)} "
        f"L {_fmt(source_x)},{_fmt(offsets.straight_source_y)} "
        f"C {_fmt(control_x1)},{_fmt(target_y)} "
        f"{_fmt(control_x2)},{_fmt(offsets.straight_source_y)} "
        f"{_fmt(target_x)},{_fmt(offsets.straight_target_y)} "
        f"L {_fmt(target_x)},{_fmt(target_y)}"
    )


def build_arrowhead_shape() -> str:
    """Triangle pointing right inside the 12x12 marker box."""
    return ARROWHEAD_PATH


def handle_anchor(node: Dict[str, Any], handle: str) -> Tuple[float, float]:
    """Canvas point of a node's handle ('top' or 'bottom' edge centre)."""
    position = node.get('position') or {}
    x = position.get('x', 0) + NODE_WIDTH / 2
    y = position.get('y', 0)
    if handle == SOURCE_HANDLE:
        y += NODE_HEIGHT
    return x, y


def label_anchor(source_x: float, source_y: float,
                 target_x: float, target_y: float) -> Tuple[float, float]:
    return (source_x + target_x) / 2, (source_y + target_y) / 2 - LABEL_LIFT


def edge_geometry(edge: Dict[str, Any], source_node: Dict[str, Any],
                  target_node: Dict[str, Any]) -> EdgeGeometry:
    """Full geometry for an edge given its two endpoint nodes."""
    data = edge.get('data') or {}
    source_handle = edge.get('sourceHandle') or data.get('sourceHandle')
    target_handle = edge.get('targetHandle') or data.get('targetHandle')
    is_inverted = bool(data.get('isInverted'))
    direction = data.get('direction', 'end')

    source_x, source_y = handle_anchor(source_node, source_handle)
    target_x, target_y = handle_anchor(target_node, target_handle)

    marker = compute_marker_config(source_handle, target_handle, is_inverted, direction)
    offsets = compute_endpoint_offsets(source_y, target_y, is_inverted, marker.is_vertical)
    path = build_path(source_x, source_y, target_x, target_y, offsets)

    return EdgeGeometry(
        edge_id=edge.get('id'),
        path=path,
        marker=marker,
        marker_at_start=direction == 'start',
        label_position=label_anchor(source_x, source_y, target_x, target_y),
    )
