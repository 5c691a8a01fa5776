"""Prometheus metrics exported by KubeTopo."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

graph_builds_total = Counter(
    "kubetopo_graph_builds_total",
    "Topology graphs built",
    ["view"],
)

edges_inferred_total = Counter(
    "kubetopo_edges_inferred_total",
    "Relationship edges inferred, by edge type",
    ["edge_type"],
)

layout_duration_seconds = Histogram(
    "kubetopo_layout_duration_seconds",
    "Wall-clock time spent computing a layout",
    ["strategy"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
