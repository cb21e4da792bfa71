"""
Tests for GraphStore and the callback registry it is built on.
"""

import pytest

from ontomaker.events import EventEmitter
from ontomaker.store import GraphStore
from ontomaker.graph import make_edge, make_node


@pytest.fixture
def store():
    return GraphStore()


@pytest.fixture
def events(store):
    """Record every event the store emits, in order."""
    seen = []
    for name in ('nodes_changed', 'edges_changed', 'selection_changed'):
        store.on(name, lambda data, name=name: seen.append((name, data)))
    return seen


class TestEventEmitter:

    def test_callbacks_receive_data(self):
        emitter = EventEmitter(['ping'])
        received = []
        emitter.on('ping', received.append)
        emitter._emit('ping', 42)
        assert received == [42]

    def test_off_removes_callback(self):
        emitter = EventEmitter(['ping'])
        received = []
        emitter.on('ping', received.append)
        emitter.off('ping', received.append)
        emitter._emit('ping', 1)
        assert received == []

    def test_unknown_event_is_ignored(self):
        emitter = EventEmitter(['ping'])
        emitter.on('pong', lambda _: None)
        emitter._emit('pong', 1)

    def test_failing_callback_does_not_stop_others(self, caplog):
        emitter = EventEmitter(['ping'])
        received = []

        def broken(_):
            raise RuntimeError("boom")

        emitter.on('ping', broken)
        emitter.on('ping', received.append)
        emitter._emit('ping', 'x')

        assert received == ['x']
        assert "Error in callback for ping: boom" in caplog.text


class TestGraphStoreLists:

    def test_constructor_copies_input(self):
        nodes = [make_node('A')]
        store = GraphStore(nodes=nodes)
        nodes[0]['data']['label'] = 'changed'
        assert store.nodes[0]['data']['label'] == 'A'

    def test_set_nodes_with_list(self, store, events):
        node = make_node('A')
        store.set_nodes([node])
        assert store.nodes == [node]
        assert events == [('nodes_changed', [node])]

    def test_set_nodes_with_updater(self, store):
        store.set_nodes([make_node('A')])
        store.set_nodes(lambda current: current + [make_node('B')])
        assert [n['data']['label'] for n in store.nodes] == ['A', 'B']

    def test_set_edges_with_updater(self, store):
        store.set_edges(lambda current: current + [make_edge('a', 'b', edge_id='e1')])
        assert [e['id'] for e in store.edges] == ['e1']

    def test_add_edge_skips_duplicates(self, store, events):
        store.add_edge(make_edge('a', 'b', edge_id='e1'))
        store.add_edge(make_edge('a', 'b', edge_id='e2'))
        store.add_edge(make_edge('a', 'b', edge_id='e1'))

        assert [e['id'] for e in store.edges] == ['e1']
        assert [name for name, _ in events] == ['edges_changed']

    def test_update_element_replaces_node(self, store):
        node = make_node('A')
        store.add_node(node)
        store.update_element({**node, 'data': {**node['data'], 'label': 'B'}})
        assert store.nodes[0]['data']['label'] == 'B'

    def test_update_element_replaces_edge(self, store):
        edge = make_edge('a', 'b', edge_id='e1')
        store.add_edge(edge)
        assert store.update_element({**edge, 'data': {**edge['data'], 'label': 'knows'}}) is True
        assert store.edges[0]['data']['label'] == 'knows'

    def test_update_unknown_element(self, store):
        assert store.update_element({'id': 'missing'}) is False


class TestGraphStoreSelection:

    def test_select_node(self, store, events):
        store.select_node('n1')
        assert store.selected_node_id == 'n1'
        assert store.selected_edge_id is None
        assert events == [('selection_changed', {'node_id': 'n1', 'edge_id': None})]

    def test_node_and_edge_selection_are_exclusive(self, store):
        store.select_node('n1')
        store.select_edge('e1')
        assert store.selected_node_id is None
        assert store.selected_edge_id == 'e1'

    def test_unchanged_selection_does_not_emit(self, store, events):
        store.select_node('n1')
        store.select_node('n1')
        store.clear_selection()
        store.clear_selection()
        assert len(events) == 2

    def test_selected_element(self, store):
        node = make_node('A')
        edge = make_edge(node['id'], 'other', edge_id='e1')
        store.add_node(node)
        store.add_edge(edge)

        assert store.selected_element() is None
        store.select_node(node['id'])
        assert store.selected_element() == node
        store.select_edge('e1')
        assert store.selected_element() == edge
