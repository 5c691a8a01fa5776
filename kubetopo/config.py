"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubetopo.layout.options import RANK_DIRECTIONS
from kubetopo.models.config import APIConfig, KubeTopoConfig, LayoutConfig, LogConfig
from kubetopo.models.topology import LayoutType


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBETOPO_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_layout(value: str) -> LayoutType:
    try:
        return LayoutType(value.lower())
    except ValueError:
        raise ValueError(f"Invalid layout: {value}. Must be one of {[t.value for t in LayoutType]}") from None


def _validate_rankdir(value: str) -> str:
    if value.upper() not in RANK_DIRECTIONS:
        raise ValueError(f"Invalid rank direction: {value}. Must be one of {RANK_DIRECTIONS}")
    return value.upper()


def load_config() -> KubeTopoConfig:
    """Load configuration from KUBETOPO_* environment variables."""
    return KubeTopoConfig(
        cluster_name=_env("CLUSTER_NAME", ""),
        layout=LayoutConfig(
            default_layout=_validate_layout(_env("DEFAULT_LAYOUT", "hierarchical")),
            node_width=_env_float("NODE_WIDTH", 180, min_val=1),
            node_height=_env_float("NODE_HEIGHT", 100, min_val=1),
            nodesep=_env_float("NODESEP", 100, min_val=0),
            ranksep=_env_float("RANKSEP", 150, min_val=0),
            rankdir=_validate_rankdir(_env("RANKDIR", "TB")),
            force_iterations=_env_int("FORCE_ITERATIONS", 300, min_val=1, max_val=5000),
            force_max_nodes=_env_int("FORCE_MAX_NODES", 1000, min_val=1, max_val=5000),
            timeout_seconds=_env_float("LAYOUT_TIMEOUT", 30.0, min_val=1.0),
        ),
        api=APIConfig(
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
