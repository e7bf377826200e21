"""Mesh configuration held by an IstioOperator resource or by a ConfigMap."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from gatewaykit.mesh_config import ConfigWrapper, MeshConfig
from gatewaykit.resources import KubeObject

__all__ = ["IstioOperator", "ConfigMap", "OperatorWrapper", "ConfigMapWrapper"]

_MESH_CONFIG_FIELD = "meshConfig"
_MESH_DATA_KEY = "mesh"


@dataclass
class IstioOperator(KubeObject):
    """An IstioOperator resource; the mesh configuration lives at ``spec["meshConfig"]``."""

    spec: dict[str, Any] | None = None


@dataclass
class ConfigMap(KubeObject):
    """A ConfigMap; the mesh configuration is YAML text under the ``mesh`` key."""

    data: dict[str, str] = field(default_factory=dict)


class OperatorWrapper(ConfigWrapper):
    """Reads and writes the mesh configuration of an IstioOperator."""

    def __init__(self, config: IstioOperator) -> None:
        self.config = config

    def get_config_object(self) -> IstioOperator:
        return self.config

    def get_mesh_config(self) -> MeshConfig:
        if self.config.spec is None:
            self.config.spec = {}
        return MeshConfig.from_dict(self.config.spec.get(_MESH_CONFIG_FIELD))

    def set_mesh_config(self, config: MeshConfig) -> None:
        if self.config.spec is None:
            self.config.spec = {}
        self.config.spec[_MESH_CONFIG_FIELD] = config.to_dict()


class ConfigMapWrapper(ConfigWrapper):
    """Reads and writes the mesh configuration stored as YAML in a ConfigMap."""

    def __init__(self, config: ConfigMap) -> None:
        self.config = config

    def get_config_object(self) -> ConfigMap:
        return self.config

    def get_mesh_config(self) -> MeshConfig:
        try:
            text = self.config.data[_MESH_DATA_KEY]
        except KeyError:
            raise LookupError("mesh config not found in ConfigMap") from None
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as err:
            raise ValueError(f"invalid mesh config: {err}") from err
        return MeshConfig.from_dict(data)

    def set_mesh_config(self, config: MeshConfig) -> None:
        self.config.data[_MESH_DATA_KEY] = yaml.safe_dump(
            config.to_dict(), default_flow_style=False, sort_keys=True
        )