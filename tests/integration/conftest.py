"""Shared fixtures for KubeTopo integration tests.

Provides a realistic multi-namespace snapshot (the shape ``kubectl get
... -o json`` produces) so integration tests can exercise the full
parse, build, filter and layout pipeline without a cluster.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

import pytest

from kubetopo.graph.builder import TopologyGraphBuilder
from tests.factories import (
    make_configmap,
    make_deployment,
    make_ingress,
    make_network_policy,
    make_pod,
    make_pvc,
    make_replicaset,
    make_secret,
    make_service,
    volume,
)

FIXED_NOW = datetime(2026, 3, 1, 9, 0, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Snapshot factory helpers
# ---------------------------------------------------------------------------


def make_application(
    app: str,
    namespace: str,
    replicas: int = 2,
    available: int | None = None,
    with_config: bool = True,
) -> list[dict[str, Any]]:
    """Deployment, ReplicaSet, pods, Service and (optionally) ConfigMap for one app."""
    deployment_uid = f"{namespace}-{app}-deploy"
    replicaset_uid = f"{namespace}-{app}-rs"
    config_name = f"{app}-config"

    resources = [
        make_deployment(
            name=app,
            namespace=namespace,
            uid=deployment_uid,
            replicas=replicas,
            available=replicas if available is None else available,
        ),
        make_replicaset(name=f"{app}-5d9f7c", namespace=namespace, uid=replicaset_uid, owners=[deployment_uid]),
    ]
    for i in range(replicas):
        resources.append(
            make_pod(
                name=f"{app}-5d9f7c-{i}",
                namespace=namespace,
                uid=f"{namespace}-{app}-pod-{i}",
                labels={"app": app},
                owners=[replicaset_uid],
                volumes=[volume("config", "configMap", config_name)] if with_config else None,
            )
        )
    resources.append(make_service(name=app, namespace=namespace, uid=f"{namespace}-{app}-svc", selector={"app": app}))
    if with_config:
        resources.append(make_configmap(name=config_name, namespace=namespace, uid=f"{namespace}-{app}-cm"))
    return resources


def make_large_snapshot(apps: int, replicas: int = 3) -> list[dict[str, Any]]:
    """Many applications spread over a handful of namespaces."""
    resources: list[dict[str, Any]] = []
    for i in range(apps):
        resources.extend(make_application(f"app-{i}", f"team-{i % 5}", replicas=replicas))
    return resources


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def shop_snapshot() -> dict[str, Any]:
    """A small online shop: frontend behind an ingress, an api, a database and a batch job."""
    items = [
        *make_application("frontend", "shop", replicas=2),
        *make_application("api", "shop", replicas=3, available=1),
        make_ingress(name="shop", namespace="shop", uid="shop-ingress", paths=[("/", "frontend"), ("/api", "api")]),
        make_pod(
            name="postgres-0",
            namespace="shop",
            uid="shop-postgres-0",
            labels={"app": "postgres"},
            volumes=[volume("data", "persistentVolumeClaim", "pg-data"), volume("creds", "secret", "pg-creds")],
        ),
        make_pvc(name="pg-data", namespace="shop", uid="shop-pg-data"),
        make_secret(name="pg-creds", namespace="shop", uid="shop-pg-creds"),
        make_pod(name="report-28491", namespace="batch", uid="batch-report", phase="Failed"),
        make_network_policy(
            name="postgres-from-api",
            namespace="shop",
            uid="shop-np-postgres",
            match_labels={"app": "postgres"},
            ingress=[{"from": [{"podSelector": {"matchLabels": {"app": "api"}}}], "ports": [{"port": 5432}]}],
        ),
    ]
    return {"apiVersion": "v1", "kind": "List", "items": items}


@pytest.fixture
def builder() -> TopologyGraphBuilder:
    return TopologyGraphBuilder(clock=lambda: FIXED_NOW)
