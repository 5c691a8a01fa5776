"""Layered layout for ownership hierarchies (Deployment -> ReplicaSet -> Pod).

Sugiyama-style: break cycles, rank nodes by longest path from the roots,
reorder each rank with barycenter sweeps to reduce crossings, then place
ranks along the configured axis.
"""

from __future__ import annotations

from collections.abc import Sequence

import networkx as nx

from kubetopo.layout.options import LayoutOptions
from kubetopo.models.topology import TopologyEdge, TopologyNode


def build_dag(nodes: Sequence[TopologyNode], edges: Sequence[TopologyEdge]) -> nx.DiGraph:
    """Directed graph over node ids with self loops and cycles removed.

    Cycles are broken by dropping the closing edge of each cycle found,
    which is deterministic for a given node and edge order.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    for edge in edges:
        if edge.source != edge.target and edge.source in graph and edge.target in graph:
            graph.add_edge(edge.source, edge.target)

    while True:
        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            break
        source, target = cycle[-1][:2]
        graph.remove_edge(source, target)
    return graph


def assign_ranks(graph: nx.DiGraph, order: dict[str, int]) -> dict[str, int]:
    """Longest-path ranking: roots are rank 0, every edge goes to a higher rank."""
    ranks: dict[str, int] = {}
    for node_id in nx.lexicographical_topological_sort(graph, key=order.__getitem__):
        preds = [ranks[p] for p in graph.predecessors(node_id)]
        ranks[node_id] = max(preds) + 1 if preds else 0
    return ranks


def _barycenter_pass(
    layers: list[list[str]],
    neighbours: dict[str, list[str]],
    rank_sequence: range,
) -> None:
    position = {node_id: i for layer in layers for i, node_id in enumerate(layer)}
    for rank in rank_sequence:
        keys: dict[str, tuple[float, int]] = {}
        for current, node_id in enumerate(layers[rank]):
            linked = [position[n] for n in neighbours[node_id]]
            # nodes with no neighbours in the fixed layers keep their slot
            keys[node_id] = (sum(linked) / len(linked) if linked else float(current), current)
        layers[rank].sort(key=keys.__getitem__)
        for i, node_id in enumerate(layers[rank]):
            position[node_id] = i


def order_layers(graph: nx.DiGraph, ranks: dict[str, int], order: dict[str, int], sweeps: int) -> list[list[str]]:
    """Group nodes by rank and reduce crossings with alternating barycenter sweeps."""
    layer_count = max(ranks.values(), default=-1) + 1
    layers: list[list[str]] = [[] for _ in range(layer_count)]
    for node_id in sorted(ranks, key=order.__getitem__):
        layers[ranks[node_id]].append(node_id)

    preds = {n: list(graph.predecessors(n)) for n in graph}
    succs = {n: list(graph.successors(n)) for n in graph}
    for _ in range(sweeps):
        _barycenter_pass(layers, preds, range(1, layer_count))
        _barycenter_pass(layers, succs, range(layer_count - 2, -1, -1))
    return layers


def hierarchical_layout(
    nodes: Sequence[TopologyNode],
    edges: Sequence[TopologyEdge],
    options: LayoutOptions,
) -> list[TopologyNode]:
    """Position nodes in ranks; returns nodes in input order."""
    if not nodes:
        return []

    order: dict[str, int] = {}
    for i, node in enumerate(nodes):
        order.setdefault(node.id, i)

    graph = build_dag(nodes, edges)
    ranks = assign_ranks(graph, order)
    layers = order_layers(graph, ranks, order, options.crossing_sweeps)

    vertical = options.rankdir in ("TB", "BT")
    # (cross = along a rank, main = across ranks)
    cross_size = options.node_width if vertical else options.node_height
    main_size = options.node_height if vertical else options.node_width
    widest = max(len(layer) for layer in layers)
    total_cross = widest * cross_size + (widest - 1) * options.nodesep

    centers: dict[str, tuple[float, float]] = {}
    for rank, layer in enumerate(layers):
        placed_rank = len(layers) - 1 - rank if options.rankdir in ("BT", "RL") else rank
        main = options.margin + placed_rank * (main_size + options.ranksep) + main_size / 2
        layer_cross = len(layer) * cross_size + (len(layer) - 1) * options.nodesep
        offset = options.margin + (total_cross - layer_cross) / 2
        for i, node_id in enumerate(layer):
            cross = offset + i * (cross_size + options.nodesep) + cross_size / 2
            centers[node_id] = (cross, main) if vertical else (main, cross)

    return [node.with_position(*centers[node.id]) for node in nodes]
