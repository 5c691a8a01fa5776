"""Network policy topology.

Computes which pods and services can reach each other under a set of
NetworkPolicies, and builds a topology graph with policy edges for the
network view.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from kubetopo.graph.builder import assign_node_ids, resource_to_node, utcnow
from kubetopo.graph.relationships import NetworkPolicyRule, ResourceIndex, labels_match, merge_edges
from kubetopo.models.resources import NetworkPolicy, Pod, Resource, Service, parse_resources
from kubetopo.models.topology import (
    GraphMetadata,
    NetworkConnection,
    NetworkNode,
    NetworkNodeType,
    NetworkTopology,
    TopologyGraph,
)
from kubetopo.observability.logging import get_logger
from kubetopo.observability.metrics import graph_builds_total

_logger = get_logger("graph.network")

_DEFAULT_PROTOCOL = "TCP"


@dataclass(frozen=True)
class _Verdict:
    ports: list[int] = field(default_factory=list)
    protocol: str = _DEFAULT_PROTOCOL


def _network_node(resource: Resource, node_id: str, node_type: NetworkNodeType) -> NetworkNode:
    return NetworkNode(
        id=node_id,
        type=node_type,
        namespace=resource.metadata.effective_namespace,
        labels=dict(resource.metadata.labels),
    )


def _selector_labels(rule: dict[str, Any], key: str) -> dict[str, str] | None:
    selector = rule.get(key)
    if not isinstance(selector, dict):
        return None
    match_labels = selector.get("matchLabels")
    return {str(k): str(v) for k, v in match_labels.items()} if isinstance(match_labels, dict) else {}


def _policy_applies(policy: NetworkPolicy, target: NetworkNode) -> bool:
    # a policy only selects pods in its own namespace
    if policy.pod_selector is None or policy.metadata.effective_namespace != target.namespace:
        return False
    return labels_match(target.labels, policy.pod_selector)


def _ingress_from_matches(source: NetworkNode, peers: list[Any], policy_namespace: str) -> bool:
    if not peers:
        return True
    for peer in peers:
        if not isinstance(peer, dict):
            continue
        pod_labels = _selector_labels(peer, "podSelector")
        if pod_labels is not None and labels_match(source.labels, pod_labels):
            return True
        # namespace labels are not part of the snapshot; same-namespace stands in for a match
        if _selector_labels(peer, "namespaceSelector") is not None and source.namespace == policy_namespace:
            return True
        # ipBlock peers never match pod or service nodes
    return False


def _extract_ports(ports: list[Any]) -> list[int]:
    return [
        p["port"]
        for p in ports
        if isinstance(p, dict) and isinstance(p.get("port"), int) and not isinstance(p.get("port"), bool)
    ]


class NetworkTopologyBuilder:
    """Builds the network-policy view of a snapshot."""

    def build_network_topology(
        self,
        pods: Sequence[object],
        services: Sequence[object],
        policies: Sequence[object],
    ) -> NetworkTopology:
        """Compute allowed connections between pods and services."""
        pod_resources = parse_resources(pods)
        service_resources = parse_resources(services)
        policy_resources = [p for p in parse_resources(policies) if isinstance(p, NetworkPolicy)]

        ids = assign_node_ids([*pod_resources, *service_resources])
        nodes = [
            _network_node(resource, node_id, NetworkNodeType.POD)
            for resource, node_id in zip(pod_resources, ids[: len(pod_resources)], strict=True)
        ] + [
            _network_node(resource, node_id, NetworkNodeType.SERVICE)
            for resource, node_id in zip(service_resources, ids[len(pod_resources) :], strict=True)
        ]

        connections = self._calculate_connections(nodes, policy_resources)
        _logger.info("network_topology_built", nodes=len(nodes), connections=len(connections))
        return NetworkTopology(nodes=nodes, connections=connections, policies=list(policy_resources))

    def build_network_graph(
        self,
        resources: Sequence[object],
        policies: Sequence[object],
        cluster_name: str,
        namespace: str | None = None,
        now: datetime | None = None,
    ) -> TopologyGraph:
        """Build a graph of pods, services and policies joined by policy edges."""
        parsed = parse_resources(resources)
        selected: list[Resource] = [r for r in parsed if isinstance(r, Pod)]
        selected += [r for r in parsed if isinstance(r, Service)]
        selected += [p for p in parse_resources(policies) if isinstance(p, NetworkPolicy)]
        now = now or utcnow()

        ids = assign_node_ids(selected)
        nodes = [resource_to_node(resource, node_id, now) for resource, node_id in zip(selected, ids, strict=True)]
        edges = merge_edges(NetworkPolicyRule().extract(selected, ResourceIndex(selected, ids)))

        graph_builds_total.labels(view="network").inc()
        _logger.info("graph_built", view="network", cluster=cluster_name, nodes=len(nodes), edges=len(edges))

        return TopologyGraph(
            nodes=nodes,
            edges=edges,
            metadata=GraphMetadata(
                cluster_name=cluster_name,
                namespace=namespace,
                generated_at=now,
                resource_count=len(nodes),
            ),
        )

    # ------------------------------------------------------------------
    # Connection evaluation
    # ------------------------------------------------------------------

    def _calculate_connections(
        self,
        nodes: list[NetworkNode],
        policies: list[NetworkPolicy],
    ) -> list[NetworkConnection]:
        connections = []
        for source in nodes:
            for target in nodes:
                if source.id == target.id:
                    continue
                if not policies:
                    # No policies: default allow-all between pods
                    if source.type is NetworkNodeType.POD and target.type is NetworkNodeType.POD:
                        connections.append(NetworkConnection(source=source.id, target=target.id, allowed=True))
                    continue
                if source.type is not NetworkNodeType.POD and target.type is not NetworkNodeType.POD:
                    continue
                verdict = self._is_connection_allowed(source, target, policies)
                if verdict is not None:
                    connections.append(
                        NetworkConnection(
                            source=source.id,
                            target=target.id,
                            allowed=True,
                            ports=verdict.ports,
                            protocol=verdict.protocol,
                        )
                    )
        return connections

    def _is_connection_allowed(
        self,
        source: NetworkNode,
        target: NetworkNode,
        policies: list[NetworkPolicy],
    ) -> _Verdict | None:
        applicable = [p for p in policies if _policy_applies(p, target)]
        if not applicable:
            return _Verdict()

        for policy in applicable:
            for rule in policy.ingress:
                peers = rule.get("from")
                peers = peers if isinstance(peers, list) else []
                if _ingress_from_matches(source, peers, policy.metadata.effective_namespace):
                    ports = rule.get("ports") if isinstance(rule.get("ports"), list) else []
                    protocol = ports[0].get("protocol") if ports and isinstance(ports[0], dict) else None
                    return _Verdict(ports=_extract_ports(ports), protocol=protocol or _DEFAULT_PROTOCOL)

        # Selected by a policy but no ingress rule admits the source
        return None
