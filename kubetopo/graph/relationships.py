"""Relationship inference rules.

Each rule scans the full resource collection for one relationship type
and emits edges between known node ids. Rules are independent of each
other and of input order. References that cannot be resolved inside the
same snapshot (and, for name lookups, the same namespace) are dropped
without an edge, placeholder node or error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import replace

from kubetopo.models.resources import (
    ConfigMap,
    Ingress,
    NetworkPolicy,
    PersistentVolumeClaim,
    Pod,
    Resource,
    Secret,
    Service,
    VolumeSource,
)
from kubetopo.models.topology import EdgeType, TopologyEdge
from kubetopo.observability.logging import get_logger

_logger = get_logger("graph.relationships")

_VOLUME_TARGET_TYPES: dict[str, type[Resource]] = {
    VolumeSource.CONFIG_MAP: ConfigMap,
    VolumeSource.SECRET: Secret,
    VolumeSource.PERSISTENT_VOLUME_CLAIM: PersistentVolumeClaim,
}


def labels_match(labels: dict[str, str], selector: dict[str, str]) -> bool:
    """True when every selector key has the same value in ``labels``."""
    return all(labels.get(key) == value for key, value in selector.items())


class ResourceIndex:
    """Node-id lookups over one snapshot.

    ``ids[i]`` is the node id assigned to ``resources[i]``. Name lookups
    return the first resource of the given type, namespace and name, in
    input order.
    """

    def __init__(self, resources: Sequence[Resource], ids: Sequence[str]) -> None:
        if len(resources) != len(ids):
            raise ValueError("resources and ids must be the same length")
        self.ids = list(ids)
        self.node_ids = frozenset(ids)
        self._by_name: dict[tuple[type[Resource], str, str], str] = {}
        for resource, node_id in zip(resources, ids, strict=True):
            name = resource.metadata.name
            if name is None:
                continue
            key = (type(resource), resource.metadata.effective_namespace, name)
            self._by_name.setdefault(key, node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.node_ids

    def find(self, resource_type: type[Resource], namespace: str, name: str | None) -> str | None:
        if not name:
            return None
        return self._by_name.get((resource_type, namespace, name))


def _edge(source: str, target: str, edge_type: EdgeType, label: str | None = None) -> TopologyEdge:
    return TopologyEdge(id=f"{source}-{target}", source=source, target=target, type=edge_type, label=label)


class RelationshipRule(ABC):
    """Infers one relationship type from a resource collection."""

    rule_id: str = ""
    edge_type: EdgeType

    @abstractmethod
    def extract(self, resources: Sequence[Resource], index: ResourceIndex) -> list[TopologyEdge]:
        """Return every edge of this rule's type found in ``resources``."""


class OwnershipRule(RelationshipRule):
    """owner -> dependent, from metadata.ownerReferences."""

    rule_id = "ownership"
    edge_type = EdgeType.OWNS

    def extract(self, resources: Sequence[Resource], index: ResourceIndex) -> list[TopologyEdge]:
        edges = []
        for resource, node_id in zip(resources, index.ids, strict=True):
            for owner in resource.metadata.owner_references:
                if owner.uid and owner.uid in index:
                    edges.append(_edge(owner.uid, node_id, self.edge_type))
                else:
                    _logger.debug("unresolved_reference", rule=self.rule_id, node=node_id, owner_uid=owner.uid)
        return edges


class ExposureRule(RelationshipRule):
    """Service -> Pod for every Pod in the Service's namespace its selector matches.

    An empty selector selects nothing.
    """

    rule_id = "exposure"
    edge_type = EdgeType.EXPOSES

    def extract(self, resources: Sequence[Resource], index: ResourceIndex) -> list[TopologyEdge]:
        pods = [
            (pod, pod_id) for pod, pod_id in zip(resources, index.ids, strict=True) if isinstance(pod, Pod)
        ]
        edges = []
        for service, service_id in zip(resources, index.ids, strict=True):
            if not isinstance(service, Service) or not service.selector:
                continue
            namespace = service.metadata.effective_namespace
            for pod, pod_id in pods:
                if pod.metadata.effective_namespace != namespace:
                    continue
                if labels_match(pod.metadata.labels, service.selector):
                    edges.append(_edge(service_id, pod_id, self.edge_type))
        return edges


class RoutingRule(RelationshipRule):
    """Ingress -> Service for each HTTP path backend, labeled with the path."""

    rule_id = "routing"
    edge_type = EdgeType.ROUTES

    def extract(self, resources: Sequence[Resource], index: ResourceIndex) -> list[TopologyEdge]:
        edges = []
        for ingress, ingress_id in zip(resources, index.ids, strict=True):
            if not isinstance(ingress, Ingress):
                continue
            namespace = ingress.metadata.effective_namespace
            for backend in ingress.backends:
                service_id = index.find(Service, namespace, backend.service_name)
                if service_id is None:
                    _logger.debug(
                        "unresolved_reference", rule=self.rule_id, node=ingress_id, service=backend.service_name
                    )
                    continue
                edges.append(_edge(ingress_id, service_id, self.edge_type, label=backend.path))
        return edges


class MountRule(RelationshipRule):
    """Pod -> ConfigMap/Secret/PersistentVolumeClaim, labeled with the volume name."""

    rule_id = "mount"
    edge_type = EdgeType.MOUNTS

    def extract(self, resources: Sequence[Resource], index: ResourceIndex) -> list[TopologyEdge]:
        edges = []
        for pod, pod_id in zip(resources, index.ids, strict=True):
            if not isinstance(pod, Pod):
                continue
            namespace = pod.metadata.effective_namespace
            for volume in pod.volumes:
                target_id = index.find(_VOLUME_TARGET_TYPES[volume.source], namespace, volume.claim)
                if target_id is None:
                    _logger.debug("unresolved_reference", rule=self.rule_id, node=pod_id, volume=volume.name)
                    continue
                edges.append(_edge(pod_id, target_id, self.edge_type, label=volume.name))
        return edges


class NetworkPolicyRule(RelationshipRule):
    """NetworkPolicy <-> selected Pods, one edge per declared policy type.

    Ingress policies point policy -> pod, Egress policies pod -> policy.
    A direction with no rules is a deny-all for that direction.
    """

    rule_id = "network_policy"
    edge_type = EdgeType.ALLOWS

    def extract(self, resources: Sequence[Resource], index: ResourceIndex) -> list[TopologyEdge]:
        pods = [
            (pod, pod_id) for pod, pod_id in zip(resources, index.ids, strict=True) if isinstance(pod, Pod)
        ]
        edges = []
        for policy, policy_id in zip(resources, index.ids, strict=True):
            if not isinstance(policy, NetworkPolicy) or policy.pod_selector is None:
                continue
            selector = policy.pod_selector
            namespace = policy.metadata.effective_namespace
            for pod, pod_id in pods:
                if pod.metadata.effective_namespace != namespace or not labels_match(pod.metadata.labels, selector):
                    continue
                if "Ingress" in policy.policy_types:
                    edge_type = EdgeType.ALLOWS if policy.ingress else EdgeType.DENIES
                    edges.append(_edge(policy_id, pod_id, edge_type, label="Ingress"))
                if "Egress" in policy.policy_types:
                    edge_type = EdgeType.ALLOWS if policy.egress else EdgeType.DENIES
                    edges.append(_edge(pod_id, policy_id, edge_type, label="Egress"))
        return edges


DEFAULT_RULES: tuple[RelationshipRule, ...] = (
    OwnershipRule(),
    ExposureRule(),
    RoutingRule(),
    MountRule(),
)


def merge_edges(edges: Sequence[TopologyEdge]) -> list[TopologyEdge]:
    """De-duplicate edges on (source, target, type, label) and make ids unique.

    First occurrence wins. The first edge between a source/target pair
    keeps the id ``"{source}-{target}"``; later distinct edges between the
    same pair get ``-2``, ``-3``... appended, in order.
    """
    seen: set[tuple[object, ...]] = set()
    used_ids: set[str] = set()
    merged = []
    for edge in edges:
        if edge.key in seen:
            continue
        seen.add(edge.key)
        edge_id, suffix = edge.id, 1
        while edge_id in used_ids:
            suffix += 1
            edge_id = f"{edge.id}-{suffix}"
        used_ids.add(edge_id)
        merged.append(edge if edge_id == edge.id else replace(edge, id=edge_id))
    return merged


def extract_relationships(
    resources: Sequence[Resource],
    index: ResourceIndex,
    rules: Sequence[RelationshipRule] = DEFAULT_RULES,
) -> list[TopologyEdge]:
    """Run every rule over the snapshot and return the merged edge list."""
    edges: list[TopologyEdge] = []
    for rule in rules:
        edges.extend(rule.extract(resources, index))
    return merge_edges(edges)
