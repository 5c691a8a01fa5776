"""Force-directed layout for densely interconnected graphs.

Nodes are mutually repulsive particles, edges are springs with a rest
length, and a weak pull draws everything toward a fixed center. Each
iteration costs O(n^2) for the all-pairs repulsion, so callers wanting
bounded latency should cap ``iterations`` or the node count.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

import numpy as np

from kubetopo.layout.options import LayoutOptions
from kubetopo.models.topology import TopologyEdge, TopologyNode


class LayoutCancelledError(RuntimeError):
    """Raised when a running simulation is stopped through its cancel event."""


def link_indices(nodes: Sequence[TopologyNode], edges: Sequence[TopologyEdge]) -> np.ndarray:
    """(m, 2) array of (source, target) node indices; dangling edges and self loops are skipped."""
    index: dict[str, int] = {}
    for i, node in enumerate(nodes):
        index.setdefault(node.id, i)
    pairs = [
        (index[edge.source], index[edge.target])
        for edge in edges
        if edge.source in index and edge.target in index and edge.source != edge.target
    ]
    return np.array(pairs, dtype=np.intp).reshape(-1, 2)


def initial_positions(count: int, options: LayoutOptions, rng: np.random.Generator) -> np.ndarray:
    """Uniform random positions inside the [0, initial_extent) square."""
    return rng.random((count, 2)) * options.initial_extent


def simulate(
    positions: np.ndarray,
    links: np.ndarray,
    options: LayoutOptions,
    cancel: threading.Event | None = None,
) -> np.ndarray:
    """Run the simulation from ``positions`` and return the final positions.

    Deterministic for a given starting array. The input is not modified.
    ``cancel`` is checked before every iteration; once it is set the run
    stops with LayoutCancelledError.
    """
    positions = np.array(positions, dtype=float, copy=True)
    center = np.asarray(options.center, dtype=float)
    sources, targets = links[:, 0], links[:, 1]

    for iteration in range(options.iterations):
        if cancel is not None and cancel.is_set():
            raise LayoutCancelledError(f"simulation cancelled after {iteration} of {options.iterations} iterations")
        # delta[i, j] points from node i to node j
        delta = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
        distance = np.maximum(np.linalg.norm(delta, axis=2), 1.0)
        magnitude = options.charge / distance**2
        np.fill_diagonal(magnitude, 0.0)
        displacement = (delta * (magnitude / distance)[:, :, np.newaxis]).sum(axis=1)

        if len(links):
            span = positions[targets] - positions[sources]
            length = np.maximum(np.linalg.norm(span, axis=1), 1.0)
            pull = span * ((length - options.link_distance) * options.spring_strength / length)[:, np.newaxis]
            np.add.at(displacement, sources, pull)
            np.add.at(displacement, targets, -pull)

        positions += displacement
        positions += (center - positions) * options.center_strength

    return positions


def force_directed_layout(
    nodes: Sequence[TopologyNode],
    edges: Sequence[TopologyEdge],
    options: LayoutOptions,
    rng: np.random.Generator | None = None,
    cancel: threading.Event | None = None,
) -> list[TopologyNode]:
    """Position nodes by simulation from a random start.

    ``rng`` (or ``options.seed`` when no generator is given) makes the
    result reproducible; with neither, each run starts from fresh entropy.
    """
    if not nodes:
        return []
    rng = rng if rng is not None else np.random.default_rng(options.seed)
    start = initial_positions(len(nodes), options, rng)
    final = simulate(start, link_indices(nodes, edges), options, cancel)
    return [node.with_position(x, y) for node, (x, y) in zip(nodes, final.tolist(), strict=True)]
