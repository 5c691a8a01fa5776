"""Circular and grid layouts. Both ignore edges and keep input order."""

from __future__ import annotations

import math
from collections.abc import Sequence

from kubetopo.layout.options import LayoutOptions
from kubetopo.models.topology import TopologyNode


def circle_radius(count: int, options: LayoutOptions) -> float:
    return max(options.circle_min_radius, options.circle_radius_per_node * count)


def circular_layout(nodes: Sequence[TopologyNode], options: LayoutOptions) -> list[TopologyNode]:
    """Nodes evenly spaced on a circle around ``options.center``, node i at angle 2*pi*i/n."""
    count = len(nodes)
    if count == 0:
        return []
    radius = circle_radius(count, options)
    center_x, center_y = options.center
    return [
        node.with_position(
            center_x + radius * math.cos(2 * math.pi * i / count),
            center_y + radius * math.sin(2 * math.pi * i / count),
        )
        for i, node in enumerate(nodes)
    ]


def grid_columns(count: int) -> int:
    return math.ceil(math.sqrt(count))


def grid_layout(nodes: Sequence[TopologyNode], options: LayoutOptions) -> list[TopologyNode]:
    """Row-major grid with ceil(sqrt(n)) columns."""
    if not nodes:
        return []
    columns = grid_columns(len(nodes))
    return [
        node.with_position(
            (i % columns) * options.grid_spacing + options.grid_offset,
            (i // columns) * options.grid_spacing + options.grid_offset,
        )
        for i, node in enumerate(nodes)
    ]
