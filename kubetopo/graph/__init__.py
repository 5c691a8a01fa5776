"""Resource topology graph construction.

Builds nodes and typed relationship edges (ownerReferences, Service
selectors, Ingress backends, Pod volume mounts, NetworkPolicy selection)
from a snapshot of Kubernetes resource records.
"""

from kubetopo.graph.builder import TopologyGraphBuilder, build_graph
from kubetopo.graph.filters import apply_filters
from kubetopo.graph.network import NetworkTopologyBuilder
from kubetopo.graph.relationships import (
    DEFAULT_RULES,
    ExposureRule,
    MountRule,
    NetworkPolicyRule,
    OwnershipRule,
    RelationshipRule,
    ResourceIndex,
    RoutingRule,
)
from kubetopo.graph.status import classify_status

__all__ = [
    "DEFAULT_RULES",
    "ExposureRule",
    "MountRule",
    "NetworkPolicyRule",
    "NetworkTopologyBuilder",
    "OwnershipRule",
    "RelationshipRule",
    "ResourceIndex",
    "RoutingRule",
    "TopologyGraphBuilder",
    "apply_filters",
    "build_graph",
    "classify_status",
]
