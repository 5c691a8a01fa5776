"""Layout tuning parameters."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from kubetopo.models.config import LayoutConfig

RANK_DIRECTIONS = ("TB", "BT", "LR", "RL")


@dataclass(frozen=True)
class LayoutOptions:
    """Per-strategy layout parameters. Each strategy reads only its own group."""

    # hierarchical
    node_width: float = 180
    node_height: float = 100
    nodesep: float = 100
    ranksep: float = 150
    rankdir: str = "TB"
    margin: float = 50
    crossing_sweeps: int = 4

    # force-directed
    iterations: int = 300
    link_distance: float = 150
    charge: float = -300
    spring_strength: float = 0.01
    center_strength: float = 0.01
    center: tuple[float, float] = (500.0, 500.0)
    initial_extent: float = 1000
    seed: int | None = None

    # circular
    circle_min_radius: float = 300
    circle_radius_per_node: float = 30

    # grid
    grid_spacing: float = 200
    grid_offset: float = 100

    def __post_init__(self) -> None:
        if self.rankdir not in RANK_DIRECTIONS:
            raise ValueError(f"Invalid rank direction: {self.rankdir}. Must be one of {RANK_DIRECTIONS}")
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")

    def with_overrides(self, **overrides: Any) -> LayoutOptions:
        """Return a copy with the given fields replaced. Unknown names raise TypeError."""
        return replace(self, **overrides)

    @classmethod
    def from_config(cls, config: LayoutConfig) -> LayoutOptions:
        return cls(
            node_width=config.node_width,
            node_height=config.node_height,
            nodesep=config.nodesep,
            ranksep=config.ranksep,
            rankdir=config.rankdir,
            iterations=config.force_iterations,
        )
