"""Topology graph data structures and enumerations."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubetopo.models.resources import Resource


class NodeType(StrEnum):
    """Kind of resource a topology node represents."""

    POD = "pod"
    SERVICE = "service"
    DEPLOYMENT = "deployment"
    STATEFULSET = "statefulset"
    DAEMONSET = "daemonset"
    REPLICASET = "replicaset"
    CONFIGMAP = "configmap"
    SECRET = "secret"
    PVC = "pvc"
    INGRESS = "ingress"
    NETWORK_POLICY = "networkpolicy"
    NODE = "node"
    NAMESPACE = "namespace"
    OTHER = "other"


class EdgeType(StrEnum):
    """Relationship between two topology nodes."""

    OWNS = "owns"  # Deployment owns ReplicaSet
    MANAGES = "manages"  # ReplicaSet manages Pod
    EXPOSES = "exposes"  # Service exposes Pods
    MOUNTS = "mounts"  # Pod mounts ConfigMap/Secret/PVC
    ROUTES = "routes"  # Ingress routes to Service
    ALLOWS = "allows"  # NetworkPolicy allows traffic
    DENIES = "denies"  # NetworkPolicy denies traffic


class ResourceStatus(StrEnum):
    """Coarse health label shown on a node."""

    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"
    UNKNOWN = "unknown"


class LayoutType(StrEnum):
    """Layout strategy selector."""

    HIERARCHICAL = "hierarchical"
    FORCE_DIRECTED = "force-directed"
    CIRCULAR = "circular"
    GRID = "grid"


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class NodeMetadata:
    """Display metadata copied from the resource's ObjectMeta."""

    created: datetime
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NodeData:
    """Semantic payload of a node. Never touched by the layout engine."""

    label: str
    namespace: str
    status: ResourceStatus
    metadata: NodeMetadata
    resource: Resource


@dataclass(frozen=True)
class TopologyNode:
    """A positioned resource in the topology graph.

    Immutable: layout strategies produce copies via ``with_position``.
    """

    id: str
    type: NodeType
    data: NodeData
    position: Position = field(default_factory=Position)

    def with_position(self, x: float, y: float) -> TopologyNode:
        """Return a copy of this node that differs only in position."""
        return replace(self, position=Position(x=float(x), y=float(y)))


@dataclass(frozen=True)
class TopologyEdge:
    """A typed, directed relationship between two node ids."""

    id: str
    source: str
    target: str
    type: EdgeType
    label: str | None = None
    animated: bool = False

    @property
    def key(self) -> tuple[str, str, EdgeType, str | None]:
        """Identity used for de-duplication."""
        return (self.source, self.target, self.type, self.label)


@dataclass(frozen=True)
class GraphMetadata:
    """Metadata describing when and from what a graph was built."""

    cluster_name: str
    generated_at: datetime
    resource_count: int
    namespace: str | None = None


@dataclass(frozen=True)
class TopologyGraph:
    """Nodes, edges and metadata for one snapshot.

    A derived, disposable view: rebuilt in full on every build call.
    """

    nodes: list[TopologyNode]
    edges: list[TopologyEdge]
    metadata: GraphMetadata


@dataclass
class TopologyFilters:
    """Client-side view filters. An empty list means "no constraint"."""

    node_types: list[NodeType] = field(default_factory=list)
    namespaces: list[str] = field(default_factory=list)
    statuses: list[ResourceStatus] = field(default_factory=list)
    search: str = ""


# ---------------------------------------------------------------------------
# Network policy view
# ---------------------------------------------------------------------------


class NetworkNodeType(StrEnum):
    POD = "pod"
    SERVICE = "service"
    EXTERNAL = "external"


@dataclass(frozen=True)
class NetworkNode:
    id: str
    type: NetworkNodeType
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NetworkConnection:
    """An allowed connection between two network nodes."""

    source: str
    target: str
    allowed: bool
    ports: list[int] = field(default_factory=list)
    protocol: str = "TCP"


@dataclass
class NetworkTopology:
    """Reachability between pods and services under the given policies."""

    nodes: list[NetworkNode] = field(default_factory=list)
    connections: list[NetworkConnection] = field(default_factory=list)
    policies: list[Resource] = field(default_factory=list)
