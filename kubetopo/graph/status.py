"""Coarse health classification of a single resource."""

from __future__ import annotations

from kubetopo.models.resources import Deployment, Pod, Resource, Service
from kubetopo.models.topology import ResourceStatus

_POD_PHASE_STATUS: dict[str, ResourceStatus] = {
    "Running": ResourceStatus.HEALTHY,
    "Succeeded": ResourceStatus.HEALTHY,
    "Pending": ResourceStatus.WARNING,
    "Failed": ResourceStatus.ERROR,
    "Unknown": ResourceStatus.ERROR,
}


def classify_status(resource: Resource) -> ResourceStatus:
    """Map a resource's kind and status block to a ResourceStatus.

    Never raises. A resource without a status block is UNKNOWN regardless
    of kind; kinds without a health model are UNKNOWN as well.
    """
    if resource.status is None:
        return ResourceStatus.UNKNOWN

    if isinstance(resource, Pod):
        return _POD_PHASE_STATUS.get(resource.phase or "", ResourceStatus.UNKNOWN)

    if isinstance(resource, Deployment):
        if resource.available_replicas >= resource.replicas:
            return ResourceStatus.HEALTHY
        if resource.available_replicas > 0:
            return ResourceStatus.WARNING
        return ResourceStatus.ERROR

    if isinstance(resource, Service):
        # A Service has no runtime state of its own; existing is healthy.
        return ResourceStatus.HEALTHY

    return ResourceStatus.UNKNOWN
