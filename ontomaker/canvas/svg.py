"""
SVG rendering of the canvas.

Produces the markup shown by the NiceGUI interactive image: one circle per
node with its two handles, one path per edge with its own arrowhead marker.
Coordinates are canvas units; pan/zoom belongs to the browser.
"""

from html import escape
from typing import Dict, Any, List

from ontomaker.canvas.constants import (
    ARROW_SIZE,
    DEFAULT_NODE_LABEL,
    NODE_HEIGHT,
    NODE_WIDTH,
    SOURCE_HANDLE,
    TARGET_HANDLE,
)
from ontomaker.canvas.geometry import EdgeGeometry, build_arrowhead_shape, handle_anchor
from ontomaker.graph import index_by_id
from ontomaker.canvas.styles import palette

HANDLE_RADIUS = 5


def _marker(geometry: EdgeGeometry, color: str) -> str:
    marker = geometry.marker
    orient = marker.orientation_degrees if marker.is_vertical else 'auto'
    return (
        f'<marker id="arrow-{escape(geometry.edge_id)}" markerWidth="{ARROW_SIZE}" '
        f'markerHeight="{ARROW_SIZE}" refX="{marker.ref_x}" refY="{marker.ref_y}" '
        f'orient="{orient}" markerUnits="userSpaceOnUse">'
        f'<path d="{build_arrowhead_shape()}" fill="{color}" /></marker>'
    )


def render_edge(edge: Dict[str, Any], geometry: EdgeGeometry, theme: str) -> str:
    colors = palette(theme)
    stroke = (edge.get('style') or {}).get('stroke', colors['edge_stroke'])
    marker_attr = 'marker-start' if geometry.marker_at_start else 'marker-end'
    edge_id = escape(geometry.edge_id)
    parts = [
        f'<defs>{_marker(geometry, stroke)}</defs>',
        f'<path id="{edge_id}" d="{geometry.path}" fill="none" stroke="{stroke}" '
        f'stroke-width="2" {marker_attr}="url(#arrow-{edge_id})" />',
    ]
    label = (edge.get('data') or {}).get('label')
    if label:
        x, y = geometry.label_position
        parts.append(
            f'<text x="{x}" y="{y}" text-anchor="middle" font-size="12" '
            f'fill="{colors["label_fill"]}">{escape(label)}</text>'
        )
    return ''.join(parts)


def render_node(node: Dict[str, Any], theme: str) -> str:
    colors = palette(theme)
    data = node.get('data') or {}
    position = node.get('position') or {}
    cx = position.get('x', 0) + NODE_WIDTH / 2
    cy = position.get('y', 0) + NODE_HEIGHT / 2
    selected = bool(data.get('isSelected'))
    border = colors['selected_border'] if selected else colors['node_border']
    weight = 'bold' if selected else '600'

    parts = [
        f'<g id="{escape(node["id"])}">',
        f'<circle cx="{cx}" cy="{cy}" r="{NODE_WIDTH / 2}" fill="{colors["node_fill"]}" '
        f'stroke="{border}" stroke-width="{2 if selected else 1}" />',
        f'<text x="{cx}" y="{cy}" text-anchor="middle" dominant-baseline="middle" '
        f'font-weight="{weight}" fill="{colors["node_text"]}">'
        f'{escape(data.get("label") or DEFAULT_NODE_LABEL)}</text>',
    ]
    for handle in (TARGET_HANDLE, SOURCE_HANDLE):
        hx, hy = handle_anchor(node, handle)
        parts.append(f'<circle cx="{hx}" cy="{hy}" r="{HANDLE_RADIUS}" fill="{colors["node_border"]}" />')
    parts.append('</g>')
    return ''.join(parts)


def render_svg(nodes: List[Dict[str, Any]], edges: List[Dict[str, Any]],
               geometries: List[EdgeGeometry], theme: str = 'light') -> str:
    """SVG fragment for the whole canvas: edges first so nodes draw on top."""
    edges_by_id = index_by_id(edges)
    colors = palette(theme)
    parts = [f'<rect x="0" y="0" width="100%" height="100%" fill="{colors["background"]}" />']
    for geometry in geometries:
        edge = edges_by_id.get(geometry.edge_id)
        if edge is not None:
            parts.append(render_edge(edge, geometry, theme))
    for node in nodes:
        parts.append(render_node(node, theme))
    return ''.join(parts)
