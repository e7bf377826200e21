"""Mesh configuration model and registration of the external authorizer."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "EXT_AUTHORIZER_NAME",
    "EnvoyExtAuthzGrpc",
    "ExtensionProvider",
    "MeshConfig",
    "ConfigWrapper",
    "KuadrantAuthorizer",
    "has_kuadrant_authorizer",
    "register_kuadrant_authorizer",
    "unregister_kuadrant_authorizer",
]

EXT_AUTHORIZER_NAME = "kuadrant-authorization"
_AUTHORIZER_PORT = 50051


@dataclass
class EnvoyExtAuthzGrpc:
    """gRPC external authorization provider settings."""

    service: str = ""
    port: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = copy.deepcopy(self.extra)
        if self.service:
            data["service"] = self.service
        if self.port:
            data["port"] = self.port
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvoyExtAuthzGrpc:
        rest = {k: copy.deepcopy(v) for k, v in data.items() if k not in ("service", "port")}
        return cls(service=str(data.get("service", "")), port=int(data.get("port", 0)), extra=rest)


@dataclass
class ExtensionProvider:
    """A named extension provider; other provider kinds are kept verbatim in ``extra``."""

    name: str = ""
    envoy_ext_authz_grpc: EnvoyExtAuthzGrpc | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = copy.deepcopy(self.extra)
        if self.name:
            data["name"] = self.name
        if self.envoy_ext_authz_grpc is not None:
            data["envoyExtAuthzGrpc"] = self.envoy_ext_authz_grpc.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtensionProvider:
        grpc = data.get("envoyExtAuthzGrpc")
        rest = {k: copy.deepcopy(v) for k, v in data.items() if k not in ("name", "envoyExtAuthzGrpc")}
        return cls(
            name=str(data.get("name", "")),
            envoy_ext_authz_grpc=EnvoyExtAuthzGrpc.from_dict(grpc) if grpc is not None else None,
            extra=rest,
        )


@dataclass
class MeshConfig:
    """Mesh configuration; fields other than extension providers are kept in ``extra``."""

    extension_providers: list[ExtensionProvider] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = copy.deepcopy(self.extra)
        if self.extension_providers:
            data["extensionProviders"] = [p.to_dict() for p in self.extension_providers]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> MeshConfig:
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("mesh config must be a mapping")
        providers = data.get("extensionProviders") or []
        rest = {k: copy.deepcopy(v) for k, v in data.items() if k != "extensionProviders"}
        return cls(extension_providers=[ExtensionProvider.from_dict(p) for p in providers], extra=rest)


class ConfigWrapper(ABC):
    """An object holding a mesh configuration that can be read and written."""

    @abstractmethod
    def get_config_object(self) -> Any:
        """Return the wrapped configuration object."""

    @abstractmethod
    def get_mesh_config(self) -> MeshConfig:
        """Return the mesh configuration held by the wrapped object."""

    @abstractmethod
    def set_mesh_config(self, config: MeshConfig) -> None:
        """Store ``config`` in the wrapped object."""


class KuadrantAuthorizer:
    """The authorizer extension provider pointing at the authorization service."""

    def __init__(self, namespace: str) -> None:
        self.extension_provider = ExtensionProvider(
            name=EXT_AUTHORIZER_NAME,
            envoy_ext_authz_grpc=EnvoyExtAuthzGrpc(
                service=f"authorino-authorino-authorization.{namespace}.svc.cluster.local",
                port=_AUTHORIZER_PORT,
            ),
        )


def _has_provider(provider: ExtensionProvider, providers: list[ExtensionProvider]) -> bool:
    return any(p.name == provider.name for p in providers)


def has_kuadrant_authorizer(config_wrapper: ConfigWrapper, authorizer: KuadrantAuthorizer) -> bool:
    config = config_wrapper.get_mesh_config()
    return _has_provider(authorizer.extension_provider, config.extension_providers)


def register_kuadrant_authorizer(config_wrapper: ConfigWrapper, authorizer: KuadrantAuthorizer) -> None:
    """Add the authorizer's provider to the mesh config unless one with its name exists."""
    config = config_wrapper.get_mesh_config()
    if not _has_provider(authorizer.extension_provider, config.extension_providers):
        config.extension_providers.append(authorizer.extension_provider)
        config_wrapper.set_mesh_config(config)


def unregister_kuadrant_authorizer(config_wrapper: ConfigWrapper, authorizer: KuadrantAuthorizer) -> None:
    """Remove the first provider named like the authorizer's, if any."""
    config = config_wrapper.get_mesh_config()
    name = authorizer.extension_provider.name
    index = next((i for i, p in enumerate(config.extension_providers) if p.name == name), None)
    if index is not None:
        del config.extension_providers[index]
        config_wrapper.set_mesh_config(config)