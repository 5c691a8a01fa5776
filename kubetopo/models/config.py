"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from kubetopo.models.topology import LayoutType


@dataclass
class LayoutConfig:
    """Defaults applied to layout requests that do not override them."""

    default_layout: LayoutType = LayoutType.HIERARCHICAL
    node_width: float = 180
    node_height: float = 100
    nodesep: float = 100
    ranksep: float = 150
    rankdir: str = "TB"
    force_iterations: int = 300
    force_max_nodes: int = 1000
    timeout_seconds: float = 30.0


@dataclass
class APIConfig:
    """REST API configuration."""

    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeTopoConfig:
    """Top-level KubeTopo configuration."""

    cluster_name: str = ""
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
