"""Tests for the network-policy view."""

from __future__ import annotations

from datetime import UTC, datetime

from kubetopo.graph.network import NetworkTopologyBuilder
from kubetopo.models.topology import EdgeType, NetworkNodeType, NodeType
from tests.factories import make_deployment, make_network_policy, make_pod, make_service

_TS = datetime(2026, 2, 18, 12, 0, 0, tzinfo=UTC)


def _pairs(topology) -> set[tuple[str, str]]:
    return {(c.source, c.target) for c in topology.connections}


class TestBuildNetworkTopology:
    def test_no_policies_allows_every_pod_pair(self) -> None:
        pods = [make_pod(name="a", uid="a"), make_pod(name="b", uid="b"), make_pod(name="c", uid="c")]
        topology = NetworkTopologyBuilder().build_network_topology(pods, [make_service(uid="s")], [])

        assert _pairs(topology) == {
            ("a", "b"), ("a", "c"), ("b", "a"), ("b", "c"), ("c", "a"), ("c", "b"),
        }  # fmt: skip
        assert all(c.allowed and c.protocol == "TCP" for c in topology.connections)

    def test_nodes_carry_type_and_labels(self) -> None:
        topology = NetworkTopologyBuilder().build_network_topology(
            [make_pod(uid="p", namespace="prod", labels={"app": "web"})],
            [make_service(uid="s", namespace=None)],
            [],
        )
        assert [(n.id, n.type, n.namespace) for n in topology.nodes] == [
            ("p", NetworkNodeType.POD, "prod"),
            ("s", NetworkNodeType.SERVICE, "default"),
        ]
        assert topology.nodes[0].labels == {"app": "web"}

    def test_policy_restricts_ingress_to_selected_pod(self) -> None:
        policy = make_network_policy(
            match_labels={"app": "api"},
            ingress=[
                {
                    "from": [{"podSelector": {"matchLabels": {"app": "web"}}}],
                    "ports": [{"port": 8080, "protocol": "TCP"}],
                }
            ],
        )
        pods = [
            make_pod(name="web", uid="web", labels={"app": "web"}),
            make_pod(name="api", uid="api", labels={"app": "api"}),
            make_pod(name="batch", uid="batch", labels={"app": "batch"}),
        ]
        topology = NetworkTopologyBuilder().build_network_topology(pods, [], [policy])

        pairs = _pairs(topology)
        assert ("web", "api") in pairs
        assert ("batch", "api") not in pairs
        # unselected pods keep default allow
        assert ("api", "batch") in pairs
        web_to_api = next(c for c in topology.connections if (c.source, c.target) == ("web", "api"))
        assert web_to_api.ports == [8080]

    def test_selected_pod_without_ingress_rules_is_isolated(self) -> None:
        policy = make_network_policy(match_labels={"app": "db"})
        pods = [
            make_pod(name="web", uid="web", labels={"app": "web"}),
            make_pod(name="db", uid="db", labels={"app": "db"}),
        ]
        topology = NetworkTopologyBuilder().build_network_topology(pods, [], [policy])
        assert _pairs(topology) == {("db", "web")}

    def test_policy_only_selects_pods_in_its_namespace(self) -> None:
        policy = make_network_policy(namespace="prod", match_labels={"app": "db"})
        pods = [
            make_pod(name="web", namespace="dev", uid="web", labels={"app": "web"}),
            make_pod(name="db", namespace="dev", uid="db", labels={"app": "db"}),
            make_pod(name="db", namespace="prod", uid="prod-db", labels={"app": "db"}),
        ]
        pairs = _pairs(NetworkTopologyBuilder().build_network_topology(pods, [], [policy]))
        assert ("web", "db") in pairs
        assert ("web", "prod-db") not in pairs
        assert ("db", "prod-db") not in pairs

    def test_rule_without_peers_admits_everyone(self) -> None:
        policy = make_network_policy(match_labels={"app": "db"}, ingress=[{"ports": [{"port": 5432}]}])
        pods = [
            make_pod(name="web", uid="web", labels={"app": "web"}),
            make_pod(name="db", uid="db", labels={"app": "db"}),
        ]
        topology = NetworkTopologyBuilder().build_network_topology(pods, [], [policy])
        assert ("web", "db") in _pairs(topology)

    def test_policies_are_returned(self) -> None:
        policy = make_network_policy(uid="np1")
        topology = NetworkTopologyBuilder().build_network_topology([], [], [policy, make_pod()])
        assert [p.metadata.uid for p in topology.policies] == ["np1"]


class TestBuildNetworkGraph:
    def test_nodes_are_pods_services_and_policies(self) -> None:
        resources = [make_deployment(uid="d1"), make_pod(uid="p1"), make_service(uid="s1")]
        graph = NetworkTopologyBuilder().build_network_graph(
            resources, [make_network_policy(uid="np1")], "prod", now=_TS
        )

        assert [(n.id, n.type) for n in graph.nodes] == [
            ("p1", NodeType.POD),
            ("s1", NodeType.SERVICE),
            ("np1", NodeType.NETWORK_POLICY),
        ]
        assert graph.metadata.resource_count == 3
        assert graph.metadata.generated_at == _TS

    def test_policy_edges(self) -> None:
        resources = [
            make_pod(name="a", uid="pa", labels={"app": "x"}),
            make_pod(name="b", uid="pb", labels={"app": "y"}),
        ]
        policies = [make_network_policy(uid="np1", match_labels={"app": "x"}, ingress=[{"from": []}])]
        graph = NetworkTopologyBuilder().build_network_graph(resources, policies, "prod", now=_TS)
        assert [(e.source, e.target, e.type) for e in graph.edges] == [("np1", "pa", EdgeType.ALLOWS)]

    def test_every_edge_endpoint_is_a_node(self) -> None:
        resources = [make_pod(name=f"p{i}", labels={"app": "x"}) for i in range(4)]
        policies = [
            make_network_policy(name="ing", match_labels={"app": "x"}),
            make_network_policy(name="eg", policy_types=["Egress"], egress=[{"to": []}]),
        ]
        graph = NetworkTopologyBuilder().build_network_graph(resources, policies, "prod", now=_TS)
        ids = {n.id for n in graph.nodes}
        assert graph.edges
        assert all(e.source in ids and e.target in ids for e in graph.edges)

    def test_no_policies_no_edges(self) -> None:
        builder = NetworkTopologyBuilder()
        graph = builder.build_network_graph([make_pod(), make_service()], [], "prod", namespace="default")
        assert graph.edges == []
        assert graph.metadata.namespace == "default"
