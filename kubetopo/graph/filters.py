"""View filtering over a built topology graph."""

from __future__ import annotations

from dataclasses import replace

from kubetopo.models.topology import TopologyFilters, TopologyGraph, TopologyNode


def node_matches(node: TopologyNode, filters: TopologyFilters) -> bool:
    """True when ``node`` passes every active filter."""
    if filters.node_types and node.type not in filters.node_types:
        return False
    if filters.namespaces and node.data.namespace not in filters.namespaces:
        return False
    if filters.statuses and node.data.status not in filters.statuses:
        return False
    term = filters.search.strip().lower()
    if term:
        haystack = (node.data.label, node.data.namespace, node.data.resource.kind)
        return any(term in value.lower() for value in haystack)
    return True


def apply_filters(graph: TopologyGraph, filters: TopologyFilters) -> TopologyGraph:
    """Return a new graph holding only matching nodes and the edges between them.

    ``resource_count`` is set to the number of surviving nodes.
    """
    nodes = [node for node in graph.nodes if node_matches(node, filters)]
    kept = {node.id for node in nodes}
    edges = [edge for edge in graph.edges if edge.source in kept and edge.target in kept]
    return TopologyGraph(
        nodes=nodes,
        edges=edges,
        metadata=replace(graph.metadata, resource_count=len(nodes)),
    )
