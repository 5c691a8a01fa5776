"""Request and response models for the KubeTopo REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from kubetopo.models.topology import (
    EdgeType,
    LayoutType,
    NodeType,
    ResourceStatus,
    TopologyFilters,
    TopologyGraph,
    TopologyNode,
)


class ErrorResponse(BaseModel):
    """Error envelope returned for every 4xx/5xx response."""

    error: str
    detail: str


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class LayoutOptionsModel(BaseModel):
    """Overrides for the server's default layout options. Omitted fields keep the default."""

    model_config = ConfigDict(extra="forbid")

    node_width: float | None = Field(default=None, gt=0)
    node_height: float | None = Field(default=None, gt=0)
    nodesep: float | None = Field(default=None, ge=0)
    ranksep: float | None = Field(default=None, ge=0)
    rankdir: Literal["TB", "BT", "LR", "RL"] | None = None
    iterations: int | None = Field(default=None, ge=0, le=5000)
    link_distance: float | None = Field(default=None, ge=0)
    charge: float | None = None
    grid_spacing: float | None = Field(default=None, gt=0)

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class FiltersModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    node_types: list[NodeType] = Field(default_factory=list)
    namespaces: list[str] = Field(default_factory=list)
    statuses: list[ResourceStatus] = Field(default_factory=list)
    search: str = Field(default="", max_length=256)

    def to_filters(self) -> TopologyFilters:
        return TopologyFilters(
            node_types=list(self.node_types),
            namespaces=list(self.namespaces),
            statuses=list(self.statuses),
            search=self.search,
        )


class _LayoutRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cluster_name: str | None = Field(default=None, max_length=253)
    namespace: str | None = Field(default=None, max_length=253)
    layout: LayoutType | None = None
    options: LayoutOptionsModel | None = None
    seed: int | None = Field(default=None, ge=0)


class TopologyRequest(_LayoutRequest):
    """POST /topology body: a resource snapshot plus optional layout and filters."""

    resources: list[dict[str, Any]]
    filters: FiltersModel | None = None


class NetworkTopologyRequest(_LayoutRequest):
    """POST /topology/network body."""

    resources: list[dict[str, Any]]
    policies: list[dict[str, Any]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PositionModel(BaseModel):
    x: float
    y: float


class NodeMetadataModel(BaseModel):
    created: datetime
    labels: dict[str, str]
    annotations: dict[str, str]


class NodeDataModel(BaseModel):
    label: str
    namespace: str
    status: ResourceStatus
    kind: str
    metadata: NodeMetadataModel
    resource: dict[str, Any]


class NodeModel(BaseModel):
    id: str
    type: NodeType
    data: NodeDataModel
    position: PositionModel

    @classmethod
    def from_node(cls, node: TopologyNode) -> NodeModel:
        data = node.data
        return cls(
            id=node.id,
            type=node.type,
            data=NodeDataModel(
                label=data.label,
                namespace=data.namespace,
                status=data.status,
                kind=data.resource.kind,
                metadata=NodeMetadataModel(
                    created=data.metadata.created,
                    labels=data.metadata.labels,
                    annotations=data.metadata.annotations,
                ),
                resource=dict(data.resource.raw),
            ),
            position=PositionModel(x=node.position.x, y=node.position.y),
        )


class EdgeModel(BaseModel):
    id: str
    source: str
    target: str
    type: EdgeType
    label: str | None = None
    animated: bool = False


class GraphMetadataModel(BaseModel):
    cluster_name: str
    namespace: str | None = None
    generated_at: datetime
    resource_count: int


class GraphResponse(BaseModel):
    """A topology graph, positioned when ``layout`` is set."""

    nodes: list[NodeModel]
    edges: list[EdgeModel]
    metadata: GraphMetadataModel
    layout: LayoutType | None = None

    @classmethod
    def from_graph(
        cls,
        graph: TopologyGraph,
        nodes: list[TopologyNode] | None = None,
        layout: LayoutType | None = None,
    ) -> GraphResponse:
        """Serialize ``graph``, substituting positioned ``nodes`` when given."""
        meta = graph.metadata
        return cls(
            nodes=[NodeModel.from_node(n) for n in (graph.nodes if nodes is None else nodes)],
            edges=[
                EdgeModel(
                    id=e.id,
                    source=e.source,
                    target=e.target,
                    type=e.type,
                    label=e.label,
                    animated=e.animated,
                )
                for e in graph.edges
            ],
            metadata=GraphMetadataModel(
                cluster_name=meta.cluster_name,
                namespace=meta.namespace,
                generated_at=meta.generated_at,
                resource_count=meta.resource_count,
            ),
            layout=layout,
        )
