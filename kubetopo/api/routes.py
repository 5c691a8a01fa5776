"""REST endpoints for KubeTopo.

All handlers read their collaborators from ``request.app.state`` (set up
by ``create_app``). Layout runs on a worker thread under a timeout so a
large force-directed simulation never blocks the event loop; on timeout
the simulation is told to stop so the worker thread is released.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import structlog
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from kubetopo import __version__
from kubetopo.api.schemas import (
    ErrorResponse,
    GraphResponse,
    LayoutOptionsModel,
    NetworkTopologyRequest,
    TopologyRequest,
)
from kubetopo.graph.filters import apply_filters
from kubetopo.layout.engine import apply_layout
from kubetopo.layout.options import LayoutOptions
from kubetopo.models.topology import LayoutType, TopologyGraph

_log = structlog.get_logger(component="api.routes")

router = APIRouter()


def _error(status_code: int, error: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=error, detail=detail).model_dump())


def _cluster_name(request: Request, requested: str | None) -> str:
    return requested or request.app.state.config.cluster_name


async def _respond(
    request: Request,
    graph: TopologyGraph,
    layout: LayoutType | None,
    options: LayoutOptionsModel | None,
    seed: int | None,
) -> GraphResponse | JSONResponse:
    if layout is None:
        return GraphResponse.from_graph(graph)

    layout_config = request.app.state.config.layout
    if layout is LayoutType.FORCE_DIRECTED and len(graph.nodes) > layout_config.force_max_nodes:
        return _error(
            413,
            "GRAPH_TOO_LARGE",
            f"Force-directed layout is limited to {layout_config.force_max_nodes} nodes; got {len(graph.nodes)}.",
        )

    overrides: dict[str, Any] = options.overrides() if options else {}
    if seed is not None:
        overrides["seed"] = seed
    layout_options = LayoutOptions.from_config(layout_config).with_overrides(**overrides)

    cancel = threading.Event()
    try:
        nodes = await asyncio.wait_for(
            asyncio.to_thread(apply_layout, graph.nodes, graph.edges, layout, layout_options, cancel=cancel),
            timeout=layout_config.timeout_seconds,
        )
    except TimeoutError:
        # the worker thread cannot be killed; stop the simulation at its next iteration
        cancel.set()
        _log.warning("layout_timeout", strategy=layout.value, nodes=len(graph.nodes))
        return _error(504, "LAYOUT_TIMEOUT", f"Layout did not finish within {layout_config.timeout_seconds}s.")

    return GraphResponse.from_graph(graph, nodes=nodes, layout=layout)


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.post("/topology", response_model=GraphResponse)
async def build_topology(body: TopologyRequest, request: Request) -> GraphResponse | JSONResponse:
    """Build (and optionally filter and lay out) the topology of a resource snapshot."""
    cluster_name = _cluster_name(request, body.cluster_name)
    if not cluster_name:
        return _error(400, "MISSING_CLUSTER_NAME", "cluster_name is required when no default is configured.")

    graph = request.app.state.builder.build_graph(body.resources, cluster_name, body.namespace)
    if body.filters is not None:
        graph = apply_filters(graph, body.filters.to_filters())
    return await _respond(request, graph, body.layout, body.options, body.seed)


@router.post("/topology/network", response_model=GraphResponse)
async def build_network_topology(body: NetworkTopologyRequest, request: Request) -> GraphResponse | JSONResponse:
    """Build the network-policy view of a resource snapshot."""
    cluster_name = _cluster_name(request, body.cluster_name)
    if not cluster_name:
        return _error(400, "MISSING_CLUSTER_NAME", "cluster_name is required when no default is configured.")

    graph = request.app.state.network_builder.build_network_graph(
        body.resources,
        body.policies,
        cluster_name,
        body.namespace,
    )
    return await _respond(request, graph, body.layout, body.options, body.seed)
