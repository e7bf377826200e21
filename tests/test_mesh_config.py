import pytest

from gatewaykit.mesh_config import (
    EXT_AUTHORIZER_NAME,
    ConfigWrapper,
    EnvoyExtAuthzGrpc,
    ExtensionProvider,
    KuadrantAuthorizer,
    MeshConfig,
    has_kuadrant_authorizer,
    register_kuadrant_authorizer,
    unregister_kuadrant_authorizer,
)


def stubbed_mesh_config():
    return MeshConfig(
        extension_providers=[
            ExtensionProvider(
                name="custom-authorizer",
                envoy_ext_authz_grpc=EnvoyExtAuthzGrpc(
                    service="custom-authorizer.default.svc.cluster.local", port=50051
                ),
            )
        ]
    )


class StubbedConfigWrapper(ConfigWrapper):
    def __init__(self, config):
        self.mesh_config = config
        self.writes = 0

    def get_config_object(self):
        return None

    def get_mesh_config(self):
        return self.mesh_config

    def set_mesh_config(self, config):
        self.mesh_config = config
        self.writes += 1


def test_authorizer_extension_provider():
    provider = KuadrantAuthorizer("default").extension_provider
    assert provider.name == EXT_AUTHORIZER_NAME
    assert provider.envoy_ext_authz_grpc.service == "authorino-authorino-authorization.default.svc.cluster.local"
    assert provider.envoy_ext_authz_grpc.port == 50051


def test_has_kuadrant_authorizer():
    authorizer = KuadrantAuthorizer("default")
    wrapper = StubbedConfigWrapper(stubbed_mesh_config())
    assert has_kuadrant_authorizer(wrapper, authorizer) is False
    wrapper.mesh_config.extension_providers.append(authorizer.extension_provider)
    assert has_kuadrant_authorizer(wrapper, authorizer) is True


def test_register_kuadrant_authorizer():
    authorizer = KuadrantAuthorizer("default")
    wrapper = StubbedConfigWrapper(stubbed_mesh_config())
    register_kuadrant_authorizer(wrapper, authorizer)
    assert wrapper.get_mesh_config().extension_providers[1].name == "kuadrant-authorization"


def test_register_twice_keeps_single_entry():
    authorizer = KuadrantAuthorizer("default")
    wrapper = StubbedConfigWrapper(stubbed_mesh_config())
    register_kuadrant_authorizer(wrapper, authorizer)
    register_kuadrant_authorizer(wrapper, authorizer)
    assert len(wrapper.mesh_config.extension_providers) == 2
    assert wrapper.writes == 1


def test_unregister_kuadrant_authorizer():
    authorizer = KuadrantAuthorizer("default")
    wrapper = StubbedConfigWrapper(stubbed_mesh_config())
    register_kuadrant_authorizer(wrapper, authorizer)
    assert len(wrapper.mesh_config.extension_providers) == 2
    unregister_kuadrant_authorizer(wrapper, authorizer)
    assert len(wrapper.mesh_config.extension_providers) == 1
    assert wrapper.get_mesh_config().extension_providers[0].name == "custom-authorizer"


def test_unregister_absent_does_not_write():
    wrapper = StubbedConfigWrapper(stubbed_mesh_config())
    unregister_kuadrant_authorizer(wrapper, KuadrantAuthorizer("default"))
    assert wrapper.writes == 0
    assert len(wrapper.mesh_config.extension_providers) == 1


def test_mesh_config_round_trip():
    data = {
        "accessLogFile": "/dev/stdout",
        "extensionProviders": [
            {
                "name": "custom-authorizer",
                "envoyExtAuthzGrpc": {"service": "custom-authorizer.default.svc.cluster.local", "port": 50051},
            },
            {"name": "otel", "opentelemetry": {"service": "collector", "port": 4317}},
        ],
    }
    config = MeshConfig.from_dict(data)
    assert config.extension_providers[0].envoy_ext_authz_grpc.port == 50051
    assert config.extension_providers[1].envoy_ext_authz_grpc is None
    assert config.to_dict() == data


def test_mesh_config_port_given_as_string():
    config = MeshConfig.from_dict(
        {"extensionProviders": [{"name": "a", "envoyExtAuthzGrpc": {"service": "s", "port": "50051"}}]}
    )
    assert config.extension_providers[0].envoy_ext_authz_grpc.port == 50051


def test_mesh_config_from_empty():
    assert MeshConfig.from_dict(None) == MeshConfig()
    assert MeshConfig().to_dict() == {}


def test_mesh_config_rejects_non_mapping():
    with pytest.raises(ValueError):
        MeshConfig.from_dict(["not", "a", "mapping"])