"""Layout dispatch.

``apply_layout`` returns new nodes that differ from the input only in
``position``; node ids, types, data and the edges are never modified.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence

import numpy as np

from kubetopo.layout.force import force_directed_layout
from kubetopo.layout.geometric import circular_layout, grid_layout
from kubetopo.layout.hierarchical import hierarchical_layout
from kubetopo.layout.options import LayoutOptions
from kubetopo.models.topology import LayoutType, TopologyEdge, TopologyNode
from kubetopo.observability.logging import get_logger
from kubetopo.observability.metrics import layout_duration_seconds

_logger = get_logger("layout.engine")

_Strategy = Callable[
    [Sequence[TopologyNode], Sequence[TopologyEdge], LayoutOptions, np.random.Generator | None, threading.Event | None],
    list[TopologyNode],
]

_STRATEGIES: dict[LayoutType, _Strategy] = {
    LayoutType.HIERARCHICAL: lambda nodes, edges, opts, _rng, _cancel: hierarchical_layout(nodes, edges, opts),
    LayoutType.FORCE_DIRECTED: force_directed_layout,
    LayoutType.CIRCULAR: lambda nodes, _edges, opts, _rng, _cancel: circular_layout(nodes, opts),
    LayoutType.GRID: lambda nodes, _edges, opts, _rng, _cancel: grid_layout(nodes, opts),
}


def apply_layout(
    nodes: Sequence[TopologyNode],
    edges: Sequence[TopologyEdge],
    strategy: LayoutType | str,
    options: LayoutOptions | None = None,
    *,
    rng: np.random.Generator | None = None,
    cancel: threading.Event | None = None,
) -> list[TopologyNode]:
    """Assign positions to ``nodes`` with the selected strategy.

    Args:
        nodes:    Nodes to position. Not modified.
        edges:    Edges between them; used by hierarchical and force-directed.
        strategy: A LayoutType or its string value. Anything else raises ValueError.
        options:  Layout parameters; defaults when omitted.
        rng:      Random source for the force-directed initial placement.
        cancel:   Set from another thread to stop a running force-directed
                  simulation, which then raises LayoutCancelledError.

    Returns:
        A new list of nodes, in input order, with positions set.
    """
    layout_type = LayoutType(strategy)
    opts = options or LayoutOptions()

    t_start = time.monotonic()
    positioned = _STRATEGIES[layout_type](nodes, edges, opts, rng, cancel)
    duration = time.monotonic() - t_start

    layout_duration_seconds.labels(strategy=layout_type.value).observe(duration)
    _logger.info(
        "layout_applied",
        strategy=layout_type.value,
        nodes=len(positioned),
        edges=len(edges),
        duration_ms=round(duration * 1000.0, 2),
    )
    return positioned
