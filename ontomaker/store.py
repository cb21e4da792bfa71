"""
Authoritative graph state for OntoMaker.

GraphStore holds the node/edge lists that the editing forms and the exporter
read and write, plus the current selection. The canvas keeps its own working
copy and reconciles against this one through the events emitted here:

- 'nodes_changed': the node list was replaced
- 'edges_changed': the edge list was replaced
- 'selection_changed': selected node/edge id changed
"""

import copy
import logging
from typing import Dict, Any, List, Optional, Callable, Union

from ontomaker.events import EventEmitter
from ontomaker.graph import find_by_id, has_connection

logger = logging.getLogger(__name__)

ListOrUpdater = Union[List[Dict[str, Any]], Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]]


class GraphStore(EventEmitter):
    """In-memory owner of the finalized {nodes, edges} lists."""

    def __init__(self, nodes: Optional[List[Dict[str, Any]]] = None,
                 edges: Optional[List[Dict[str, Any]]] = None):
        super().__init__(['nodes_changed', 'edges_changed', 'selection_changed'])
        self._nodes: List[Dict[str, Any]] = copy.deepcopy(list(nodes or []))
        self._edges: List[Dict[str, Any]] = copy.deepcopy(list(edges or []))
        self.selected_node_id: Optional[str] = None
        self.selected_edge_id: Optional[str] = None

    @property
    def nodes(self) -> List[Dict[str, Any]]:
        return self._nodes

    @property
    def edges(self) -> List[Dict[str, Any]]:
        return self._edges

    # --- Lists ---

    def set_nodes(self, nodes: ListOrUpdater) -> None:
        """Replace the node list, either with a new list or via updater(current) -> list."""
        if callable(nodes):
            nodes = nodes(list(self._nodes))
        self._nodes = list(nodes)
        self._emit('nodes_changed', self._nodes)

    def set_edges(self, edges: ListOrUpdater) -> None:
        if callable(edges):
            edges = edges(list(self._edges))
        self._edges = list(edges)
        self._emit('edges_changed', self._edges)

    def add_node(self, node: Dict[str, Any]) -> None:
        self.set_nodes(self._nodes + [node])

    def add_edge(self, edge: Dict[str, Any]) -> None:
        """Append an edge unless one with the same id or the same endpoints/handles exists."""
        if has_connection(self._edges, edge):
            logger.debug(f"Edge {edge.get('id')} already present, not added")
            return
        self.set_edges(self._edges + [edge])

    def update_element(self, element: Dict[str, Any]) -> bool:
        """
        Replace a node or edge with an edited copy (from the editing forms).

        Returns False if no element has that id.
        """
        element_id = element.get('id')
        if find_by_id(self._nodes, element_id) is not None:
            self.set_nodes([element if n['id'] == element_id else n for n in self._nodes])
            return True
        if find_by_id(self._edges, element_id) is not None:
            self.set_edges([element if e['id'] == element_id else e for e in self._edges])
            return True
        logger.warning(f"update_element: no node or edge with id {element_id}")
        return False

    # --- Selection ---

    def select_node(self, node_id: Optional[str]) -> None:
        self._set_selection(node_id, None)

    def select_edge(self, edge_id: Optional[str]) -> None:
        self._set_selection(None, edge_id)

    def clear_selection(self) -> None:
        self._set_selection(None, None)

    def _set_selection(self, node_id: Optional[str], edge_id: Optional[str]) -> None:
        if node_id == self.selected_node_id and edge_id == self.selected_edge_id:
            return
        self.selected_node_id = node_id
        self.selected_edge_id = edge_id
        self._emit('selection_changed', {'node_id': node_id, 'edge_id': edge_id})

    def selected_element(self) -> Optional[Dict[str, Any]]:
        """The selected node or edge, used to decide which editor panel to show."""
        if self.selected_node_id:
            return find_by_id(self._nodes, self.selected_node_id)
        if self.selected_edge_id:
            return find_by_id(self._edges, self.selected_edge_id)
        return None
