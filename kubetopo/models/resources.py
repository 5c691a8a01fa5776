"""Typed view over loosely-typed Kubernetes resource records.

Records arrive as plain mappings (decoded JSON from ``kubectl get -o json``
or an API client). ``parse_resource`` turns each one into a member of a
small tagged union so relationship rules can dispatch on type instead of
probing a ``kind`` string. Parsing never raises on absent or wrongly-typed
optional fields: they degrade to empty/zero/None.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

DEFAULT_NAMESPACE = "default"


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _as_dict(value: object) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_list(value: object) -> list[Any]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return list(value)
    return []


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None


def _as_int(value: object) -> int:
    # bool is an int subclass; "replicas: true" is garbage, not 1
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


def _str_map(value: object) -> dict[str, str]:
    return {str(k): str(v) for k, v in _as_dict(value).items()}


def _parse_timestamp(value: object) -> datetime | None:
    """Parse an RFC 3339 timestamp such as ``2026-02-18T12:00:00Z``."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# ---------------------------------------------------------------------------
# Shared shape
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OwnerReference:
    uid: str | None = None
    kind: str | None = None
    name: str | None = None
    controller: bool = False


@dataclass(frozen=True)
class ObjectMeta:
    """Subset of Kubernetes ObjectMeta used by the topology core."""

    uid: str | None = None
    name: str | None = None
    namespace: str | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    creation_timestamp: datetime | None = None
    owner_references: list[OwnerReference] = field(default_factory=list)

    @property
    def effective_namespace(self) -> str:
        return self.namespace or DEFAULT_NAMESPACE


@dataclass(frozen=True)
class Resource:
    """Base shape shared by every resource kind."""

    kind: str
    metadata: ObjectMeta
    status: dict[str, Any] | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)


# ---------------------------------------------------------------------------
# Kind-specific payloads
# ---------------------------------------------------------------------------


class VolumeSource:
    CONFIG_MAP = "configMap"
    SECRET = "secret"
    PERSISTENT_VOLUME_CLAIM = "persistentVolumeClaim"


@dataclass(frozen=True)
class PodVolume:
    """A Pod volume backed by a named in-namespace object.

    ``source`` is one of the VolumeSource values; ``claim`` is the name of
    the referenced ConfigMap, Secret or PersistentVolumeClaim.
    """

    name: str | None
    source: str
    claim: str | None


@dataclass(frozen=True)
class Pod(Resource):
    phase: str | None = None
    volumes: list[PodVolume] = field(default_factory=list)


@dataclass(frozen=True)
class Service(Resource):
    selector: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Deployment(Resource):
    replicas: int = 0
    available_replicas: int = 0


@dataclass(frozen=True)
class IngressBackend:
    service_name: str
    path: str | None = None


@dataclass(frozen=True)
class Ingress(Resource):
    backends: list[IngressBackend] = field(default_factory=list)


@dataclass(frozen=True)
class ConfigMap(Resource):
    pass


@dataclass(frozen=True)
class Secret(Resource):
    pass


@dataclass(frozen=True)
class PersistentVolumeClaim(Resource):
    pass


@dataclass(frozen=True)
class NetworkPolicy(Resource):
    pod_selector: dict[str, str] | None = None  # None when spec.podSelector is absent
    policy_types: list[str] = field(default_factory=list)
    ingress: list[dict[str, Any]] = field(default_factory=list)
    egress: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class GenericResource(Resource):
    """Any kind the topology core has no dedicated rules for."""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _parse_metadata(raw: object) -> ObjectMeta:
    meta = _as_dict(raw)
    owners = [
        OwnerReference(
            uid=_as_str(ref.get("uid")),
            kind=_as_str(ref.get("kind")),
            name=_as_str(ref.get("name")),
            controller=ref.get("controller") is True,
        )
        for ref in map(_as_dict, _as_list(meta.get("ownerReferences")))
    ]
    return ObjectMeta(
        uid=_as_str(meta.get("uid")) or None,
        name=_as_str(meta.get("name")),
        namespace=_as_str(meta.get("namespace")) or None,
        labels=_str_map(meta.get("labels")),
        annotations=_str_map(meta.get("annotations")),
        creation_timestamp=_parse_timestamp(meta.get("creationTimestamp")),
        owner_references=owners,
    )


def _parse_volume(raw: object) -> PodVolume | None:
    volume = _as_dict(raw)
    name = _as_str(volume.get("name"))
    if isinstance(volume.get("configMap"), Mapping):
        return PodVolume(name, VolumeSource.CONFIG_MAP, _as_str(volume["configMap"].get("name")))
    if isinstance(volume.get("secret"), Mapping):
        return PodVolume(name, VolumeSource.SECRET, _as_str(volume["secret"].get("secretName")))
    if isinstance(volume.get("persistentVolumeClaim"), Mapping):
        claim = _as_str(volume["persistentVolumeClaim"].get("claimName"))
        return PodVolume(name, VolumeSource.PERSISTENT_VOLUME_CLAIM, claim)
    return None


def _parse_ingress_backends(spec: dict[str, Any]) -> list[IngressBackend]:
    backends: list[IngressBackend] = []
    for rule in map(_as_dict, _as_list(spec.get("rules"))):
        http = _as_dict(rule.get("http"))
        for path in map(_as_dict, _as_list(http.get("paths"))):
            service = _as_dict(_as_dict(path.get("backend")).get("service"))
            service_name = _as_str(service.get("name"))
            if service_name:
                backends.append(IngressBackend(service_name=service_name, path=_as_str(path.get("path"))))
    return backends


def parse_resource(raw: object) -> Resource:
    """Build the typed representation of one resource record."""
    record = _as_dict(raw)
    kind = _as_str(record.get("kind")) or ""
    metadata = _parse_metadata(record.get("metadata"))
    status = _as_dict(record["status"]) if record.get("status") is not None else None
    spec = _as_dict(record.get("spec"))
    base: dict[str, Any] = {"kind": kind, "metadata": metadata, "status": status, "raw": record}

    if kind == "Pod":
        volumes = [v for v in map(_parse_volume, _as_list(spec.get("volumes"))) if v is not None]
        return Pod(**base, phase=_as_str(_as_dict(status).get("phase")), volumes=volumes)
    if kind == "Service":
        return Service(**base, selector=_str_map(spec.get("selector")))
    if kind == "Deployment":
        return Deployment(
            **base,
            replicas=_as_int(spec.get("replicas")),
            available_replicas=_as_int(_as_dict(status).get("availableReplicas")),
        )
    if kind == "Ingress":
        return Ingress(**base, backends=_parse_ingress_backends(spec))
    if kind == "ConfigMap":
        return ConfigMap(**base)
    if kind == "Secret":
        return Secret(**base)
    if kind == "PersistentVolumeClaim":
        return PersistentVolumeClaim(**base)
    if kind == "NetworkPolicy":
        pod_selector = spec.get("podSelector")
        return NetworkPolicy(
            **base,
            pod_selector=_str_map(_as_dict(pod_selector).get("matchLabels")) if pod_selector is not None else None,
            policy_types=[t for t in _as_list(spec.get("policyTypes")) if isinstance(t, str)],
            ingress=[_as_dict(r) for r in _as_list(spec.get("ingress"))],
            egress=[_as_dict(r) for r in _as_list(spec.get("egress"))],
        )
    return GenericResource(**base)


def parse_resources(items: object) -> list[Resource]:
    """Parse a resource collection, preserving input order.

    Accepts a sequence of records, a kubectl ``List`` document with an
    ``items`` key, or a single record (``kubectl get deploy web -o json``),
    which is read as a one-element collection. Anything else is a caller
    error.
    """
    if isinstance(items, Mapping):
        items = items["items"] if "items" in items else [items]
    if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
        raise TypeError(f"expected a sequence of resource records, got {type(items).__name__}")
    return [item if isinstance(item, Resource) else parse_resource(item) for item in items]
