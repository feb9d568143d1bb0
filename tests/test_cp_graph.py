#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from cp_graph import DependencyGraph, GraphCycleError


def _graph(nodes, edges):
    g = DependencyGraph()
    for n in nodes:
        g.add_node(n)
    for a, b in edges:
        g.add_edge(a, b)
    return g


def test_sort_respects_edges():
    g = _graph([0, 1, 2, 3], [(2, 0), (1, 2), (3, 1), (3, 2)])

    order = g.topological_sort()

    assert sorted(order) == [0, 1, 2, 3]
    for a, b in [(2, 0), (1, 2), (3, 1), (3, 2)]:
        assert order.index(a) < order.index(b)


def test_independent_nodes_keep_insertion_order():
    g = _graph([5, 3, 9], [])

    assert g.topological_sort() == [5, 3, 9]


def test_sort_is_deterministic():
    edges = [(0, 3), (1, 3), (2, 4), (3, 4)]
    orders = {tuple(_graph(range(5), edges).topological_sort()) for _ in range(20)}

    assert orders == {(0, 1, 2, 3, 4)}


def test_duplicate_edges_collapse():
    g = _graph([0, 1], [(0, 1), (0, 1)])

    assert g.successors(0) == [1]
    assert g.predecessors(1) == [0]
    assert g.topological_sort() == [0, 1]


def test_add_edge_adds_missing_nodes():
    g = DependencyGraph()
    g.add_edge(1, 2)

    assert 1 in g and 2 in g
    assert len(g) == 2
    assert g.nodes == [1, 2]


def test_two_node_cycle():
    g = _graph([0, 1], [(0, 1), (1, 0)])

    with pytest.raises(GraphCycleError) as excinfo:
        g.topological_sort()

    cycle = excinfo.value.nodes
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {0, 1}


def test_self_loop_is_a_cycle():
    g = _graph([0, 1], [(1, 1)])

    with pytest.raises(GraphCycleError) as excinfo:
        g.topological_sort()

    assert excinfo.value.nodes == [1, 1]


def test_cycle_reported_even_behind_acyclic_prefix():
    # 0 -> 1 -> 2 -> 3 -> 1, and 3 -> 4
    g = _graph(range(5), [(0, 1), (1, 2), (2, 3), (3, 1), (3, 4)])

    with pytest.raises(GraphCycleError) as excinfo:
        g.topological_sort()

    cycle = excinfo.value.nodes
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {1, 2, 3}
    # consecutive entries follow edges backwards
    for later, earlier in zip(cycle, cycle[1:]):
        assert later in g.successors(earlier)
