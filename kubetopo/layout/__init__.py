"""Layout strategies that assign 2D positions to topology nodes."""

from kubetopo.layout.engine import apply_layout
from kubetopo.layout.force import LayoutCancelledError, force_directed_layout, simulate
from kubetopo.layout.geometric import circular_layout, grid_layout
from kubetopo.layout.hierarchical import hierarchical_layout
from kubetopo.layout.options import LayoutOptions

__all__ = [
    "LayoutCancelledError",
    "LayoutOptions",
    "apply_layout",
    "circular_layout",
    "force_directed_layout",
    "grid_layout",
    "hierarchical_layout",
    "simulate",
]
