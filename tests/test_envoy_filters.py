import pytest

from gatewaykit.envoy_filters import EnvoyFilter, EnvoyFilterSpec, always_update_envoy_filter
from gatewaykit.resources import KubeObject, ObjectMeta


def _desired():
    return EnvoyFilter(
        metadata=ObjectMeta(namespace="gw-ns", name="desired"),
        spec=EnvoyFilterSpec(
            workload_selector={"istio": "ingressgateway"},
            config_patches=[{"applyTo": "CLUSTER", "patch": {"operation": "ADD"}}],
            priority=3,
        ),
    )


def test_always_update_copies_spec():
    existing = EnvoyFilter(
        metadata=ObjectMeta(namespace="gw-ns", name="existing"),
        spec=EnvoyFilterSpec(workload_selector={"old": "label"}, priority=1),
    )
    desired = _desired()
    assert always_update_envoy_filter(existing, desired) is True
    assert existing.spec == desired.spec
    assert existing.metadata.name == "existing"


def test_always_update_when_equal_still_reports_change():
    existing = _desired()
    assert always_update_envoy_filter(existing, _desired()) is True
    assert existing.spec == _desired().spec


def test_existing_of_wrong_type():
    with pytest.raises(TypeError, match="KubeObject is not an EnvoyFilter"):
        always_update_envoy_filter(KubeObject(), _desired())


def test_desired_of_wrong_type():
    existing = _desired()
    with pytest.raises(TypeError, match="KubeObject is not an EnvoyFilter"):
        always_update_envoy_filter(existing, KubeObject())
    assert existing.spec == _desired().spec