"""
Tests for turning connection drags into canonical edges.
"""

import pytest

from ontomaker.canvas.connection import (
    ConnectionRejected,
    ConnectionResolver,
    GestureStart,
    InvalidHandlePairing,
    MalformedGesture,
    resolve_connection,
)


def drop(source, source_handle, target, target_handle):
    return {'source': source, 'sourceHandle': source_handle,
            'target': target, 'targetHandle': target_handle}


class TestResolveConnection:

    def test_bottom_to_top_keeps_drag_direction(self):
        """Drag from N1 bottom to N2 top: N1 -> N2, not inverted."""
        edge = resolve_connection(GestureStart('N1', 'bottom'), drop('N1', 'bottom', 'N2', 'top'))

        assert edge['source'] == 'N1'
        assert edge['target'] == 'N2'
        assert edge['sourceHandle'] == 'bottom'
        assert edge['targetHandle'] == 'top'
        assert edge['data']['isInverted'] is False
        assert edge['data']['direction'] == 'end'
        assert edge['data']['label'] == 'has_property'

    def test_top_to_bottom_is_canonicalized_and_inverted(self):
        """Drag from N1 top to N2 bottom: N2 -> N1, inverted."""
        edge = resolve_connection(GestureStart('N1', 'top'), drop('N1', 'top', 'N2', 'bottom'))

        assert edge['source'] == 'N2'
        assert edge['target'] == 'N1'
        assert edge['sourceHandle'] == 'bottom'
        assert edge['targetHandle'] == 'top'
        assert edge['data']['isInverted'] is True
        assert edge['data']['direction'] == 'start'

    def test_start_may_be_reported_on_target_side(self):
        """Some drops report the drag start as the target side; result is the same."""
        edge = resolve_connection(GestureStart('N1', 'bottom'), drop('N2', 'top', 'N1', 'bottom'))

        assert (edge['source'], edge['target']) == ('N1', 'N2')
        assert edge['data']['isInverted'] is False

    @pytest.mark.parametrize("start_handle,end_handle", [
        ('bottom', 'top'),
        ('top', 'bottom'),
    ])
    @pytest.mark.parametrize("start_on_source_side", [True, False])
    def test_source_is_always_the_bottom_handle(self, start_handle, end_handle, start_on_source_side):
        start = GestureStart('A', start_handle)
        if start_on_source_side:
            end = drop('A', start_handle, 'B', end_handle)
        else:
            end = drop('B', end_handle, 'A', start_handle)

        edge = resolve_connection(start, end)

        bottom_node = 'A' if start_handle == 'bottom' else 'B'
        top_node = 'B' if bottom_node == 'A' else 'A'
        assert edge['source'] == bottom_node
        assert edge['target'] == top_node
        assert edge['data']['isInverted'] == (start.node_id != bottom_node)

    @pytest.mark.parametrize("start_handle,end_handle", [
        ('bottom', 'bottom'),
        ('top', 'top'),
        ('left', 'top'),
        ('bottom', 'right'),
        ('bottom', 'unknown'),
    ])
    def test_invalid_pairings_are_rejected(self, start_handle, end_handle):
        with pytest.raises(InvalidHandlePairing):
            resolve_connection(GestureStart('N1', start_handle), drop('N1', start_handle, 'N2', end_handle))

    def test_drop_not_matching_start_is_malformed(self):
        with pytest.raises(MalformedGesture):
            resolve_connection(GestureStart('N1', 'bottom'), drop('N3', 'bottom', 'N2', 'top'))

    def test_missing_other_end_is_malformed(self):
        with pytest.raises(MalformedGesture):
            resolve_connection(GestureStart('N1', 'bottom'), drop('N1', 'bottom', None, None))

    def test_rejections_share_a_base_class(self):
        assert issubclass(MalformedGesture, ConnectionRejected)
        assert issubclass(InvalidHandlePairing, ConnectionRejected)

    def test_fresh_ids(self):
        start = GestureStart('N1', 'bottom')
        end = drop('N1', 'bottom', 'N2', 'top')
        assert resolve_connection(start, end)['id'] != resolve_connection(start, end)['id']

    def test_explicit_id(self):
        edge = resolve_connection(GestureStart('N1', 'bottom'), drop('N1', 'bottom', 'N2', 'top'), edge_id='e1')
        assert edge['id'] == 'e1'


class TestConnectionResolver:

    @pytest.fixture
    def resolver(self):
        return ConnectionResolver()

    def test_resolve_clears_pending(self, resolver):
        resolver.begin('N1', 'bottom')
        edge = resolver.resolve(drop('N1', 'bottom', 'N2', 'top'))

        assert edge['target'] == 'N2'
        assert resolver.pending is None

    def test_rejection_clears_pending(self, resolver):
        resolver.begin('N1', 'bottom')
        with pytest.raises(InvalidHandlePairing):
            resolver.resolve(drop('N1', 'bottom', 'N2', 'bottom'))
        assert resolver.pending is None

    def test_cancel_clears_pending(self, resolver):
        resolver.begin('N1', 'bottom')
        assert resolver.cancel() is True
        assert resolver.pending is None
        assert resolver.cancel() is False

    def test_stale_start_is_not_reused(self, resolver):
        """A cancelled gesture must not be merged with a later drop."""
        resolver.begin('N1', 'bottom')
        resolver.cancel()
        with pytest.raises(MalformedGesture):
            resolver.resolve(drop('N1', 'bottom', 'N2', 'top'))

    def test_begin_replaces_previous_start(self, resolver):
        resolver.begin('N1', 'bottom')
        resolver.begin('N3', 'top')
        edge = resolver.resolve(drop('N3', 'top', 'N4', 'bottom'))
        assert (edge['source'], edge['target']) == ('N4', 'N3')
