"""
Graph Sync Controller - the canvas' working copy of the graph.

The canvas needs a node/edge list it can mutate immediately while the user
drags things around. The editing forms and the exporter work on the
authoritative lists in GraphStore. This controller keeps the two convergent:

    inbound  (store -> local): id-keyed merge, local positions win,
                               store data wins, selection re-derived
    outbound (local -> store): push after direct manipulation

Each direction holds a guard flag while it runs. A store notification that
arrives while the outbound guard is set is our own push echoing back and is
dropped; renderer changes arriving while the inbound guard is set are
dropped too. Nothing is queued: the next real change re-converges.
"""

import copy
import logging
from contextlib import contextmanager
from typing import Dict, Any, List, Optional

from ontomaker.events import EventEmitter
from ontomaker.graph import make_node, find_by_id, index_by_id, has_connection
from ontomaker.store import GraphStore
from ontomaker.canvas.connection import ConnectionResolver, ConnectionRejected, GestureStart
from ontomaker.canvas.geometry import EdgeGeometry, edge_geometry
from ontomaker.canvas.layout import resolve_overlap, was_shifted
from ontomaker.canvas.styles import style_edge, style_edges, unstyled
from ontomaker.canvas.constants import DEFAULT_NODE_LABEL, THEMES

logger = logging.getLogger(__name__)


def _comparable(node: Dict[str, Any]) -> tuple:
    data = {k: v for k, v in (node.get('data') or {}).items() if k != 'isSelected'}
    position = node.get('position') or {}
    return node.get('id'), data, position.get('x'), position.get('y')


def nodes_equal(a: List[Dict[str, Any]], b: List[Dict[str, Any]]) -> bool:
    """Compare node lists by id, position and data, ignoring order and isSelected."""
    if len(a) != len(b):
        return False
    sorted_a = sorted(a, key=lambda n: n.get('id'))
    sorted_b = sorted(b, key=lambda n: n.get('id'))
    return all(_comparable(x) == _comparable(y) for x, y in zip(sorted_a, sorted_b))


def edges_equal(a: List[Dict[str, Any]], b: List[Dict[str, Any]]) -> bool:
    """Compare edge lists in order, ignoring theme styling."""
    return [unstyled(e) for e in a] == [unstyled(e) for e in b]


def with_selection(node: Dict[str, Any], selected_id: Optional[str]) -> Dict[str, Any]:
    return {**node, 'data': {**(node.get('data') or {}), 'isSelected': node.get('id') == selected_id}}


def apply_node_changes(changes: List[Dict[str, Any]], nodes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Apply renderer change records to a node list, returning a new list.

    Supported change types:
      {'type': 'position', 'id', 'position': {'x', 'y'}, 'dragging'}
      {'type': 'select', 'id', 'selected'}
      {'type': 'dimensions', 'id', 'dimensions': {'width', 'height'}}
      {'type': 'remove', 'id'}
    """
    by_id = {n['id']: n for n in nodes}
    removed = set()

    for change in changes:
        node_id = change.get('id')
        node = by_id.get(node_id)
        if node is None:
            continue
        kind = change.get('type')
        if kind == 'position':
            if change.get('position'):
                node = {**node, 'position': dict(change['position'])}
            if 'dragging' in change:
                node = {**node, 'dragging': bool(change['dragging'])}
        elif kind == 'select':
            node = {**node, 'selected': bool(change.get('selected'))}
        elif kind == 'dimensions':
            if change.get('dimensions'):
                node = {**node, 'measured': dict(change['dimensions'])}
        elif kind == 'remove':
            removed.add(node_id)
            continue
        else:
            logger.debug(f"Ignoring unknown node change type '{kind}'")
            continue
        by_id[node_id] = node

    return [by_id[n['id']] for n in nodes if n['id'] not in removed]


def apply_edge_changes(changes: List[Dict[str, Any]], edges: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Apply 'select' and 'remove' change records to an edge list."""
    by_id = {e['id']: e for e in edges}
    removed = set()

    for change in changes:
        edge_id = change.get('id')
        if edge_id not in by_id:
            continue
        kind = change.get('type')
        if kind == 'select':
            by_id[edge_id] = {**by_id[edge_id], 'selected': bool(change.get('selected'))}
        elif kind == 'remove':
            removed.add(edge_id)
        else:
            logger.debug(f"Ignoring unknown edge change type '{kind}'")

    return [by_id[e['id']] for e in edges if e['id'] not in removed]


class GraphSyncController(EventEmitter):
    """
    Owns the canvas-side node/edge lists and reconciles them with a GraphStore.

    Emits:
    - 'nodes_changed': local node list committed
    - 'edges_changed': local edge list committed
    """

    def __init__(self, store: GraphStore, theme: str = 'light',
                 resolver: Optional[ConnectionResolver] = None):
        super().__init__(['nodes_changed', 'edges_changed'])
        self._store = store
        self._nodes: List[Dict[str, Any]] = []
        self._edges: List[Dict[str, Any]] = []
        self._applying_inbound_sync = False
        self._applying_outbound_sync = False
        self._pending_overlap_id: Optional[str] = None
        self._connections = resolver or ConnectionResolver()
        self._theme = theme if theme in THEMES else 'light'

        store.on('nodes_changed', self._on_store_nodes)
        store.on('edges_changed', self._on_store_edges)
        store.on('selection_changed', self._on_store_selection)

        self.sync_nodes_from_store()
        self.sync_edges_from_store()

    # --- State ---

    @property
    def store(self) -> GraphStore:
        return self._store

    @property
    def nodes(self) -> List[Dict[str, Any]]:
        return self._nodes

    @property
    def edges(self) -> List[Dict[str, Any]]:
        return self._edges

    @property
    def theme(self) -> str:
        return self._theme

    @property
    def pending_gesture(self) -> Optional[GestureStart]:
        return self._connections.pending

    @property
    def applying_inbound_sync(self) -> bool:
        return self._applying_inbound_sync

    @property
    def applying_outbound_sync(self) -> bool:
        return self._applying_outbound_sync

    @contextmanager
    def _guard(self, attr: str):
        previous = getattr(self, attr)
        setattr(self, attr, True)
        try:
            yield
        finally:
            setattr(self, attr, previous)

    # --- Store notifications ---

    def _on_store_nodes(self, _nodes=None):
        self.sync_nodes_from_store()

    def _on_store_edges(self, _edges=None):
        self.sync_edges_from_store()

    def _on_store_selection(self, _selection=None):
        self.apply_selection()

    # --- Inbound sync ---

    def sync_nodes_from_store(self) -> bool:
        """
        Merge the store's nodes into the local list.

        Returns True if the local list was committed.
        """
        if self._applying_outbound_sync:
            logger.debug("Inbound node sync dropped: outbound sync in progress")
            return False

        selected_id = self._store.selected_node_id
        local_by_id = index_by_id(self._nodes)
        external_ids = set()
        merged = []

        for external in self._store.nodes:
            external_ids.add(external['id'])
            node = copy.deepcopy(external)
            current = local_by_id.get(external['id'])
            if current is not None and current.get('position') is not None:
                # The renderer may have moved it since the store last saw it
                node['position'] = dict(current['position'])
            if node.get('position') is None:
                node['position'] = {'x': 0, 'y': 0}
            merged.append(with_selection(node, selected_id))

        # Local-only nodes have not round-tripped through the store yet
        for local in self._nodes:
            if local['id'] not in external_ids:
                merged.append(with_selection(local, selected_id))

        merged = list(index_by_id(merged).values())

        if nodes_equal(self._nodes, merged):
            return False

        new_ids = [n['id'] for n in merged if n['id'] not in local_by_id]
        with self._guard('_applying_inbound_sync'):
            if new_ids:
                self._pending_overlap_id = new_ids[0]
            self._nodes = merged
            self._emit('nodes_changed', self._nodes)

        self._settle()
        return True

    def sync_edges_from_store(self) -> bool:
        if self._applying_outbound_sync:
            logger.debug("Inbound edge sync dropped: outbound sync in progress")
            return False

        if edges_equal(self._store.edges, self._edges):
            return False

        with self._guard('_applying_inbound_sync'):
            # Styling is local to the canvas and follows the current theme
            self._edges = style_edges(copy.deepcopy(self._store.edges), self._theme)
            self._emit('edges_changed', self._edges)
        return True

    def apply_selection(self) -> bool:
        """Re-derive isSelected flags from the store selection, committing only on change."""
        if self._applying_outbound_sync:
            return False

        selected_id = self._store.selected_node_id
        needs_update = any(
            bool((n.get('data') or {}).get('isSelected')) != (n['id'] == selected_id)
            for n in self._nodes
        )
        if not needs_update:
            return False

        with self._guard('_applying_inbound_sync'):
            self._nodes = [with_selection(n, selected_id) for n in self._nodes]
            self._emit('nodes_changed', self._nodes)
        return True

    def _settle(self) -> None:
        """Run the one-shot overlap check for a freshly inserted node."""
        node_id = self._pending_overlap_id
        self._pending_overlap_id = None
        if not node_id:
            return

        node = find_by_id(self._nodes, node_id)
        if node is None:
            return

        others = [n for n in self._nodes if n['id'] != node_id]
        adjusted = resolve_overlap(others, node)
        if not was_shifted(node, adjusted):
            return

        logger.info(f"Inserted node {node_id} moved to y={adjusted['position']['y']} to avoid overlap")
        self._nodes = [adjusted if n['id'] == node_id else n for n in self._nodes]
        self._emit('nodes_changed', self._nodes)
        self._push_nodes()

    # --- Outbound sync ---

    def _push_nodes(self) -> None:
        with self._guard('_applying_outbound_sync'):
            self._store.set_nodes(copy.deepcopy(self._nodes))

    def _push_edges(self) -> None:
        with self._guard('_applying_outbound_sync'):
            self._store.set_edges(copy.deepcopy(self._edges))

    # --- Renderer changes ---

    def apply_node_changes(self, changes: List[Dict[str, Any]]) -> bool:
        """
        Apply a renderer change list. Moved nodes are pushed clear of their
        peers and the result is synced back to the store.
        """
        if self._applying_inbound_sync:
            logger.debug("Node changes dropped: inbound sync in progress")
            return False

        updated = apply_node_changes(changes, self._nodes)
        moved_ids = [c['id'] for c in changes if c.get('type') == 'position' and c.get('position')]

        if not moved_ids:
            self._nodes = updated
            self._emit('nodes_changed', self._nodes)
            return True

        final = updated
        for node_id in moved_ids:
            moved = find_by_id(final, node_id)
            if moved is None:
                continue
            others = [n for n in final if n['id'] != node_id]
            adjusted = resolve_overlap(others, moved)
            if was_shifted(moved, adjusted):
                final = [adjusted if n['id'] == node_id else n for n in final]

        self._nodes = final
        self._emit('nodes_changed', self._nodes)
        self._push_nodes()
        return True

    def move_node(self, node_id: str, dx: float, dy: float) -> bool:
        """Apply a raw drag delta to a node."""
        node = find_by_id(self._nodes, node_id)
        if node is None:
            logger.warning(f"move_node: unknown node {node_id}")
            return False
        position = node.get('position') or {'x': 0, 'y': 0}
        return self.apply_node_changes([{
            'type': 'position',
            'id': node_id,
            'position': {'x': position['x'] + dx, 'y': position['y'] + dy},
        }])

    def apply_edge_changes(self, changes: List[Dict[str, Any]]) -> bool:
        if self._applying_inbound_sync:
            logger.debug("Edge changes dropped: inbound sync in progress")
            return False
        self._edges = apply_edge_changes(changes, self._edges)
        self._emit('edges_changed', self._edges)
        return True

    # --- User actions ---

    def add_node(self, label: str = DEFAULT_NODE_LABEL, position: Optional[tuple] = None) -> Dict[str, Any]:
        """
        Insert a new node through the store. The inbound sync picks it up and
        the overlap check runs once it has settled locally.
        """
        node = make_node(label=label, position=position)
        self._store.add_node(node)
        return find_by_id(self._nodes, node['id']) or node

    def connect_start(self, node_id: str, handle_id: Optional[str]) -> GestureStart:
        return self._connections.begin(node_id, handle_id)

    def connect(self, end: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Complete a connection gesture.

        Returns the new edge, or None when the gesture was rejected. Rejections
        are routine (accidental drags) and only logged.
        """
        try:
            edge = self._connections.resolve(end)
        except ConnectionRejected as e:
            logger.warning(f"Connection rejected: {e}")
            return None

        if find_by_id(self._nodes, edge['source']) is None or find_by_id(self._nodes, edge['target']) is None:
            logger.warning(f"Connection rejected: {edge['source']} -> {edge['target']} references an unknown node")
            return None

        if has_connection(self._edges, edge):
            logger.debug(f"Connection {edge['source']} -> {edge['target']} already exists")
            return None

        edge = style_edge(edge, self._theme)
        self._edges = self._edges + [edge]
        self._emit('edges_changed', self._edges)
        with self._guard('_applying_outbound_sync'):
            self._store.add_edge(copy.deepcopy(edge))
        return edge

    def connect_end(self, on_pane: bool) -> bool:
        """Pointer released. Over empty canvas the pending gesture is cancelled."""
        if on_pane:
            return self._connections.cancel()
        return False

    def click_node(self, node_id: str) -> None:
        self._store.select_node(node_id)

    def click_edge(self, edge_id: str) -> None:
        self._store.select_edge(edge_id)

    def click_pane(self) -> None:
        self._store.clear_selection()

    def delete_selected(self) -> bool:
        """
        Delete the selected node (with the edges attached to it) or the
        selected edge from both lists, then clear the selection.
        """
        node_id = self._store.selected_node_id
        edge_id = self._store.selected_edge_id

        if node_id:
            self._nodes = [n for n in self._nodes if n['id'] != node_id]
            remaining = [e for e in self._edges if node_id not in (e.get('source'), e.get('target'))]
            edges_changed = len(remaining) != len(self._edges)
            self._edges = remaining
            self._emit('nodes_changed', self._nodes)
            self._push_nodes()
            if edges_changed:
                self._emit('edges_changed', self._edges)
                self._push_edges()
            logger.info(f"Deleted node {node_id}")
        elif edge_id:
            self._edges = [e for e in self._edges if e['id'] != edge_id]
            self._emit('edges_changed', self._edges)
            self._push_edges()
            logger.info(f"Deleted edge {edge_id}")
        else:
            return False

        self._store.clear_selection()
        return True

    def set_theme(self, theme: str) -> None:
        """Restyle edges for a theme. Styling only, the store is not touched."""
        if theme not in THEMES:
            logger.warning(f"Unknown theme '{theme}', using light")
            theme = 'light'
        self._theme = theme
        if self._edges:
            self._edges = style_edges(self._edges, theme)
            self._emit('edges_changed', self._edges)

    # --- Geometry ---

    def edge_geometries(self) -> List[EdgeGeometry]:
        """Path and marker geometry for every edge whose endpoints are present."""
        nodes = index_by_id(self._nodes)
        geometries = []
        for edge in self._edges:
            source = nodes.get(edge.get('source'))
            target = nodes.get(edge.get('target'))
            if source is None or target is None:
                continue
            geometries.append(edge_geometry(edge, source, target))
        return geometries
