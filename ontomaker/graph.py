"""
Graph element factories for OntoMaker.

Nodes, edges and properties are plain dicts in the shape shared by the canvas,
the editing forms and the exporter. IDs are UUID4 based and prefixed by kind.
"""

from typing import Dict, List, Any, Optional, Iterable
import uuid

from ontomaker.canvas.constants import (
    DEFAULT_EDGE_LABEL,
    DEFAULT_NODE_LABEL,
    DEFAULT_NODE_POSITION,
    LANGUAGES,
    SOURCE_HANDLE,
    TARGET_HANDLE,
)

PROPERTY_TYPES = ('string', 'number', 'boolean', 'date', 'object', 'array')


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex}"


def _lang_map(values: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    mapping = {lang: '' for lang in LANGUAGES}
    mapping.update(values or {})
    return mapping


def make_node(label: str = DEFAULT_NODE_LABEL, position: Optional[tuple] = None,
              uri: str = "", description: Optional[Dict[str, str]] = None,
              properties: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """
    Create an entity node dictionary.
    The position defaults to the spot where the add-node button drops new nodes.
    """
    x, y = position if position is not None else DEFAULT_NODE_POSITION
    return {
        "id": new_id("entity"),
        "type": "entityNode",
        "position": {"x": x, "y": y},
        "data": {
            "label": label,
            "uri": uri,
            "description": _lang_map(description),
            "properties": list(properties or []),
            "isSelected": False,
        },
    }


def make_property(name: str, type: str = "string",
                  label: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Create a datatype property. Raises ValueError for an unknown type."""
    if type not in PROPERTY_TYPES:
        raise ValueError(f"Unknown property type '{type}', expected one of {', '.join(PROPERTY_TYPES)}")
    return {
        "id": new_id("property"),
        "name": name,
        "type": type,
        "label": _lang_map(label),
    }


def make_edge(source: str, target: str, is_inverted: bool = False,
              label: str = DEFAULT_EDGE_LABEL, edge_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Create a relation edge from the node holding the outgoing handle (source)
    to the node holding the incoming handle (target).

    `is_inverted` records that the user dragged target -> source; the arrowhead
    is then drawn at the path start.
    """
    return {
        "id": edge_id or new_id("edge"),
        "source": source,
        "target": target,
        "sourceHandle": SOURCE_HANDLE,
        "targetHandle": TARGET_HANDLE,
        "label": label,
        "type": "custom",
        "data": {
            "label": label,
            "direction": "start" if is_inverted else "end",
            "isInverted": is_inverted,
            "sourceHandle": SOURCE_HANDLE,
            "targetHandle": TARGET_HANDLE,
        },
    }


def index_by_id(elements: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Key elements by id. Later duplicates win, order of first appearance kept."""
    indexed = {}
    for element in elements:
        indexed[element["id"]] = element
    return indexed


def has_connection(edges: Iterable[Dict[str, Any]], edge: Dict[str, Any]) -> bool:
    """True if an edge with the same id, or the same endpoints and handles, exists."""
    for existing in edges:
        if existing.get("id") == edge.get("id"):
            return True
        if (existing.get("source") == edge.get("source")
                and existing.get("target") == edge.get("target")
                and existing.get("sourceHandle") == edge.get("sourceHandle")
                and existing.get("targetHandle") == edge.get("targetHandle")):
            return True
    return False


def find_by_id(elements: Iterable[Dict[str, Any]], element_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if element_id is None:
        return None
    for element in elements:
        if element.get("id") == element_id:
            return element
    return None
