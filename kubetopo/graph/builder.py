"""Topology graph construction.

``TopologyGraphBuilder`` turns one snapshot of resource records into a
``TopologyGraph``: one node per record, in input order, plus the edges the
relationship rules infer. The builder holds no state between calls; every
call recomputes the whole graph.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from kubetopo.graph.relationships import DEFAULT_RULES, RelationshipRule, ResourceIndex, extract_relationships
from kubetopo.graph.status import classify_status
from kubetopo.models.resources import Resource, parse_resources
from kubetopo.models.topology import (
    GraphMetadata,
    NodeData,
    NodeMetadata,
    NodeType,
    TopologyGraph,
    TopologyNode,
)
from kubetopo.observability.logging import get_logger
from kubetopo.observability.metrics import edges_inferred_total, graph_builds_total

_logger = get_logger("graph.builder")

_UNNAMED = "Unnamed"

_KIND_NODE_TYPES: dict[str, NodeType] = {
    "Pod": NodeType.POD,
    "Service": NodeType.SERVICE,
    "Deployment": NodeType.DEPLOYMENT,
    "StatefulSet": NodeType.STATEFULSET,
    "DaemonSet": NodeType.DAEMONSET,
    "ReplicaSet": NodeType.REPLICASET,
    "ConfigMap": NodeType.CONFIGMAP,
    "Secret": NodeType.SECRET,
    "PersistentVolumeClaim": NodeType.PVC,
    "Ingress": NodeType.INGRESS,
    "NetworkPolicy": NodeType.NETWORK_POLICY,
    "Node": NodeType.NODE,
    "Namespace": NodeType.NAMESPACE,
}


def utcnow() -> datetime:
    return datetime.now(tz=UTC)


def node_type_for(kind: str) -> NodeType:
    return _KIND_NODE_TYPES.get(kind, NodeType.OTHER)


def assign_node_ids(resources: Sequence[Resource]) -> list[str]:
    """Assign a unique, deterministic node id to each resource.

    The id is the resource UID. Without one it falls back to
    ``"{namespace}-{name}"``; if that is already taken in the snapshot the
    lowercased kind and then a counter are appended.
    """
    ids: list[str] = []
    taken: set[str] = set()
    for resource in resources:
        meta = resource.metadata
        node_id = meta.uid or f"{meta.effective_namespace}-{meta.name or ''}"
        if node_id in taken:
            base = f"{node_id}-{resource.kind.lower() or 'resource'}"
            node_id, counter = base, 1
            while node_id in taken:
                counter += 1
                node_id = f"{base}-{counter}"
        taken.add(node_id)
        ids.append(node_id)
    return ids


def resource_to_node(resource: Resource, node_id: str, now: datetime) -> TopologyNode:
    """Map one resource to an unpositioned node."""
    meta = resource.metadata
    return TopologyNode(
        id=node_id,
        type=node_type_for(resource.kind),
        data=NodeData(
            label=meta.name or _UNNAMED,
            namespace=meta.effective_namespace,
            status=classify_status(resource),
            metadata=NodeMetadata(
                created=meta.creation_timestamp or now,
                labels=dict(meta.labels),
                annotations=dict(meta.annotations),
            ),
            resource=resource,
        ),
    )


@dataclass(frozen=True)
class TopologyGraphBuilder:
    """Builds topology graphs from resource snapshots.

    Stateless: configuration (rules, clock) is fixed at construction and
    nothing is carried between ``build_graph`` calls.
    """

    rules: tuple[RelationshipRule, ...] = DEFAULT_RULES
    clock: Callable[[], datetime] = field(default=utcnow)

    def build_graph(
        self,
        resources: Sequence[object],
        cluster_name: str,
        namespace: str | None = None,
    ) -> TopologyGraph:
        """Build the topology graph for one snapshot.

        Args:
            resources:    Resource records (mappings or parsed ``Resource``
                          objects), or a kubectl ``List`` document.
            cluster_name: Name of the cluster the snapshot came from.
            namespace:    Namespace filter the snapshot was fetched with.
                          Recorded in metadata only.

        Returns:
            A new TopologyGraph with one node per input record.
        """
        parsed = parse_resources(resources)
        now = self.clock()

        ids = assign_node_ids(parsed)
        nodes = [resource_to_node(resource, node_id, now) for resource, node_id in zip(parsed, ids, strict=True)]
        edges = extract_relationships(parsed, ResourceIndex(parsed, ids), self.rules)

        graph_builds_total.labels(view="resource").inc()
        for edge in edges:
            edges_inferred_total.labels(edge_type=edge.type.value).inc()
        _logger.info(
            "graph_built",
            cluster=cluster_name,
            namespace=namespace,
            nodes=len(nodes),
            edges=len(edges),
        )

        return TopologyGraph(
            nodes=nodes,
            edges=edges,
            metadata=GraphMetadata(
                cluster_name=cluster_name,
                namespace=namespace,
                generated_at=now,
                resource_count=len(parsed),
            ),
        )


def build_graph(resources: Sequence[object], cluster_name: str, namespace: str | None = None) -> TopologyGraph:
    """Build a topology graph with the default rule set."""
    return TopologyGraphBuilder().build_graph(resources, cluster_name, namespace)
