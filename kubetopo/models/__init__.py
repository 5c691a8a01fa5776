"""Core data structures for KubeTopo."""

from kubetopo.models.config import KubeTopoConfig
from kubetopo.models.resources import (
    ConfigMap,
    Deployment,
    GenericResource,
    Ingress,
    NetworkPolicy,
    ObjectMeta,
    OwnerReference,
    PersistentVolumeClaim,
    Pod,
    Resource,
    Secret,
    Service,
    parse_resource,
    parse_resources,
)
from kubetopo.models.topology import (
    EdgeType,
    GraphMetadata,
    LayoutType,
    NetworkConnection,
    NetworkNode,
    NetworkTopology,
    NodeData,
    NodeMetadata,
    NodeType,
    Position,
    ResourceStatus,
    TopologyEdge,
    TopologyFilters,
    TopologyGraph,
    TopologyNode,
)

__all__ = [
    "ConfigMap",
    "Deployment",
    "EdgeType",
    "GenericResource",
    "GraphMetadata",
    "Ingress",
    "KubeTopoConfig",
    "LayoutType",
    "NetworkConnection",
    "NetworkNode",
    "NetworkPolicy",
    "NetworkTopology",
    "NodeData",
    "NodeMetadata",
    "NodeType",
    "ObjectMeta",
    "OwnerReference",
    "PersistentVolumeClaim",
    "Pod",
    "Position",
    "Resource",
    "ResourceStatus",
    "Secret",
    "Service",
    "TopologyEdge",
    "TopologyFilters",
    "TopologyGraph",
    "TopologyNode",
    "parse_resource",
    "parse_resources",
]
