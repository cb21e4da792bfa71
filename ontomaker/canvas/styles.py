"""
Theme palettes for the canvas.

Restyling is a pure pass over edges: it never changes topology and never
needs to reach the authoritative store.
"""

from typing import Dict, Any, List

EDGE_STROKE_WIDTH = 2

# Edge keys written by the theme pass
STYLE_KEYS = ('style', 'labelStyle', 'labelBgStyle')

PALETTES = {
    'light': {
        'edge_stroke': '#4b5563',
        'label_fill': '#1a202c',
        'label_bg': 'rgba(255, 255, 255, 0.7)',
        'background': '#f3f4f6',
        'node_fill': '#ffffff',
        'node_text': '#000000',
        'node_border': '#9ca3af',
        'selected_border': '#eab308',
    },
    'dark': {
        'edge_stroke': '#6272a4',
        'label_fill': '#ffffff',
        'label_bg': 'transparent',
        'background': '#1f2937',
        'node_fill': '#2563eb',
        'node_text': '#ffffff',
        'node_border': '#4b5563',
        'selected_border': '#facc15',
    },
}


def palette(theme: str) -> Dict[str, str]:
    """Palette for a theme; anything that isn't 'dark' is light."""
    return PALETTES['dark'] if theme == 'dark' else PALETTES['light']


def edge_style(theme: str) -> Dict[str, Any]:
    colors = palette(theme)
    return {
        'style': {'stroke': colors['edge_stroke'], 'strokeWidth': EDGE_STROKE_WIDTH},
        'labelStyle': {'fill': colors['label_fill']},
        'labelBgStyle': {'fill': colors['label_bg']},
    }


def style_edge(edge: Dict[str, Any], theme: str) -> Dict[str, Any]:
    """Copy of `edge` with the theme's stroke and label styles merged in."""
    styles = edge_style(theme)
    styled = dict(edge)
    for key, values in styles.items():
        styled[key] = {**(edge.get(key) or {}), **values}
    return styled


def style_edges(edges: List[Dict[str, Any]], theme: str) -> List[Dict[str, Any]]:
    return [style_edge(edge, theme) for edge in edges]


def unstyled(edge: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of `edge` without the keys the theme pass owns."""
    return {key: value for key, value in edge.items() if key not in STYLE_KEYS}
