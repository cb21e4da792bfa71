"""
Shared constants for the diagram canvas.

These values are used by both the geometry engine and the SVG renderer,
and must match the handle layout drawn for each node. Keep them in sync!
"""

# Handle roles: 'bottom' is always outgoing, 'top' is always incoming
SOURCE_HANDLE = 'bottom'
TARGET_HANDLE = 'top'
VERTICAL_HANDLES = (SOURCE_HANDLE, TARGET_HANDLE)

# Node box (nodes are drawn as circles inscribed in this box)
NODE_WIDTH = 100
NODE_HEIGHT = 100

# Overlap resolution: downward step and iteration ceiling
OVERLAP_SHIFT = 15
OVERLAP_MAX_ITERATIONS = 10

# Edge curve
CURVATURE = 0.3
ARROW_STUB = 12
STRAIGHT_RUN = 15
LABEL_LIFT = 10

# Arrowhead marker reference box (12x12, independent of zoom)
ARROW_SIZE = 12
ARROWHEAD_PATH = "M0,0 L12,6 L0,12 Z"

# New elements
DEFAULT_NODE_LABEL = 'New Node'
DEFAULT_NODE_POSITION = (250, 100)
DEFAULT_EDGE_LABEL = 'has_property'
LANGUAGES = ('pt-br', 'en')

# Hit testing radius around a handle, in canvas units
HANDLE_HIT_RADIUS = 10

THEMES = ('light', 'dark')
