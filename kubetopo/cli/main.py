"""KubeTopo command-line interface.

    kubetopo graph resources.json --cluster-name prod --layout hierarchical
    kubectl get pods,svc,deploy,rs,ing,cm,secret,pvc -o json | kubetopo graph - --cluster-name prod
    kubetopo serve --port 8080
"""

from __future__ import annotations

import json
from typing import IO, Any

import click

from kubetopo.api.schemas import GraphResponse
from kubetopo.config import load_config
from kubetopo.graph.builder import TopologyGraphBuilder
from kubetopo.graph.filters import apply_filters
from kubetopo.graph.network import NetworkTopologyBuilder
from kubetopo.layout.engine import apply_layout
from kubetopo.layout.options import RANK_DIRECTIONS, LayoutOptions
from kubetopo.models.config import KubeTopoConfig
from kubetopo.models.resources import NetworkPolicy, parse_resources
from kubetopo.models.topology import LayoutType, NodeType, ResourceStatus, TopologyFilters
from kubetopo.observability.logging import setup_logging

_LOG_LEVELS = ("debug", "info", "warning", "error")


@click.group()
@click.option("--log-level", type=click.Choice(_LOG_LEVELS), default=None, help="Overrides KUBETOPO_LOG_LEVEL.")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Build and lay out Kubernetes resource topology graphs."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.ClickException(f"invalid configuration: {exc}") from exc
    setup_logging(log_level or config.log.level)
    ctx.obj = config


@cli.command("graph")
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--cluster-name", default=None, help="Cluster name recorded in the graph (default KUBETOPO_CLUSTER_NAME)."
)
@click.option("--namespace", default=None, help="Namespace the snapshot was fetched from.")
@click.option("--layout", type=click.Choice([t.value for t in LayoutType]), default=None, help="Position the nodes.")
@click.option("--positioned", is_flag=True, help="Lay out with KUBETOPO_DEFAULT_LAYOUT when --layout is not given.")
@click.option("--rankdir", type=click.Choice(RANK_DIRECTIONS), default=None, help="Hierarchical rank direction.")
@click.option("--iterations", type=click.IntRange(min=0), default=None, help="Force-directed iterations.")
@click.option("--seed", type=click.IntRange(min=0), default=None, help="Seed for force-directed placement.")
@click.option("--network", is_flag=True, help="Build the network-policy view instead of the resource view.")
@click.option("--type", "node_types", type=click.Choice([t.value for t in NodeType]), multiple=True)
@click.option("--status", "statuses", type=click.Choice([s.value for s in ResourceStatus]), multiple=True)
@click.option("--only-namespace", "namespaces", multiple=True, help="Keep only nodes in these namespaces.")
@click.option("--search", default="", help="Keep only nodes whose name, namespace or kind contains this text.")
@click.option("--indent", type=click.IntRange(min=0), default=2)
@click.pass_obj
def graph_command(
    config: KubeTopoConfig,
    source: IO[str],
    cluster_name: str | None,
    namespace: str | None,
    layout: str | None,
    positioned: bool,
    rankdir: str | None,
    iterations: int | None,
    seed: int | None,
    network: bool,
    node_types: tuple[str, ...],
    statuses: tuple[str, ...],
    namespaces: tuple[str, ...],
    search: str,
    indent: int,
) -> None:
    """Read a JSON resource list from SOURCE (``-`` for stdin) and print the graph as JSON."""
    try:
        document = json.load(source)
        resources = parse_resources(document)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"invalid JSON input: {exc}") from exc
    except TypeError as exc:
        raise click.ClickException(str(exc)) from exc

    if layout is None and positioned:
        layout = config.layout.default_layout.value

    cluster = cluster_name or config.cluster_name
    if not cluster:
        raise click.UsageError("--cluster-name is required when KUBETOPO_CLUSTER_NAME is not set")

    if network:
        policies = [r for r in resources if isinstance(r, NetworkPolicy)]
        topology = NetworkTopologyBuilder().build_network_graph(resources, policies, cluster, namespace)
    else:
        topology = TopologyGraphBuilder().build_graph(resources, cluster, namespace)

    if node_types or statuses or namespaces or search:
        topology = apply_filters(
            topology,
            TopologyFilters(
                node_types=[NodeType(t) for t in node_types],
                namespaces=list(namespaces),
                statuses=[ResourceStatus(s) for s in statuses],
                search=search,
            ),
        )

    if layout is None:
        response = GraphResponse.from_graph(topology)
    else:
        overrides: dict[str, Any] = {
            key: value
            for key, value in (("rankdir", rankdir), ("iterations", iterations), ("seed", seed))
            if value is not None
        }
        options = LayoutOptions.from_config(config.layout).with_overrides(**overrides)
        nodes = apply_layout(topology.nodes, topology.edges, layout, options)
        response = GraphResponse.from_graph(topology, nodes=nodes, layout=LayoutType(layout))

    click.echo(response.model_dump_json(indent=indent or None))


@cli.command("serve")
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", type=click.IntRange(1, 65535), default=None, help="Overrides KUBETOPO_API_PORT.")
@click.pass_obj
def serve(config: KubeTopoConfig, host: str, port: int | None) -> None:
    """Serve the REST API with uvicorn."""
    import uvicorn

    from kubetopo.api.app import create_app

    uvicorn.run(
        create_app(config=config),
        host=host,
        port=port or config.api.port,
        log_config=None,  # structlog handles all logging
        access_log=False,
    )
