"""Tests for resource health classification."""

from __future__ import annotations

import pytest

from kubetopo.graph.status import classify_status
from kubetopo.models.resources import parse_resource
from kubetopo.models.topology import ResourceStatus
from tests.factories import make_configmap, make_deployment, make_pod, make_pvc, make_service


class TestPodStatus:
    @pytest.mark.parametrize(
        ("phase", "expected"),
        [
            ("Running", ResourceStatus.HEALTHY),
            ("Succeeded", ResourceStatus.HEALTHY),
            ("Pending", ResourceStatus.WARNING),
            ("Failed", ResourceStatus.ERROR),
            ("Unknown", ResourceStatus.ERROR),
            ("Terminating", ResourceStatus.UNKNOWN),
        ],
    )
    def test_phase_mapping(self, phase: str, expected: ResourceStatus) -> None:
        assert classify_status(parse_resource(make_pod(phase=phase))) is expected

    def test_no_status_is_unknown(self) -> None:
        assert classify_status(parse_resource(make_pod(phase=None))) is ResourceStatus.UNKNOWN

    def test_status_without_phase_is_unknown(self) -> None:
        pod = make_pod(phase=None)
        pod["status"] = {"conditions": []}
        assert classify_status(parse_resource(pod)) is ResourceStatus.UNKNOWN


class TestDeploymentStatus:
    def test_all_available_is_healthy(self) -> None:
        assert classify_status(parse_resource(make_deployment(replicas=3, available=3))) is ResourceStatus.HEALTHY

    def test_more_available_than_declared_is_healthy(self) -> None:
        assert classify_status(parse_resource(make_deployment(replicas=2, available=3))) is ResourceStatus.HEALTHY

    def test_partially_available_is_warning(self) -> None:
        assert classify_status(parse_resource(make_deployment(replicas=3, available=1))) is ResourceStatus.WARNING

    def test_none_available_is_error(self) -> None:
        assert classify_status(parse_resource(make_deployment(replicas=3, available=0))) is ResourceStatus.ERROR

    def test_missing_counts_default_to_zero(self) -> None:
        # declared 0, available 0 -> available >= declared
        resource = parse_resource(make_deployment(replicas=None, available=None))
        assert classify_status(resource) is ResourceStatus.HEALTHY

    def test_missing_available_with_replicas_is_error(self) -> None:
        resource = parse_resource(make_deployment(replicas=2, available=None))
        assert classify_status(resource) is ResourceStatus.ERROR

    def test_non_numeric_counts_degrade_to_zero(self) -> None:
        raw = make_deployment()
        raw["spec"]["replicas"] = "three"
        raw["status"]["availableReplicas"] = None
        assert classify_status(parse_resource(raw)) is ResourceStatus.HEALTHY


class TestOtherKinds:
    def test_service_is_healthy(self) -> None:
        assert classify_status(parse_resource(make_service())) is ResourceStatus.HEALTHY

    def test_service_without_status_is_unknown(self) -> None:
        raw = make_service()
        del raw["status"]
        assert classify_status(parse_resource(raw)) is ResourceStatus.UNKNOWN

    def test_pvc_is_unknown(self) -> None:
        assert classify_status(parse_resource(make_pvc())) is ResourceStatus.UNKNOWN

    def test_configmap_without_status_is_unknown(self) -> None:
        assert classify_status(parse_resource(make_configmap())) is ResourceStatus.UNKNOWN

    def test_empty_record_is_unknown(self) -> None:
        assert classify_status(parse_resource({})) is ResourceStatus.UNKNOWN
