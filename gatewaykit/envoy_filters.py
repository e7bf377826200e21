"""Envoy filter resources and their update policy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gatewaykit.resources import KubeObject

__all__ = ["EnvoyFilterSpec", "EnvoyFilter", "always_update_envoy_filter"]


@dataclass
class EnvoyFilterSpec:
    """Workload selector, configuration patches and priority of an envoy filter."""

    workload_selector: dict[str, str] | None = None
    config_patches: list[dict[str, Any]] = field(default_factory=list)
    priority: int = 0


@dataclass
class EnvoyFilter(KubeObject):
    spec: EnvoyFilterSpec = field(default_factory=EnvoyFilterSpec)


def always_update_envoy_filter(existing: KubeObject, desired: KubeObject) -> bool:
    """Replace the existing filter's spec with the desired one; always reports a change."""
    if not isinstance(existing, EnvoyFilter):
        raise TypeError(f"{type(existing).__name__} is not an EnvoyFilter")
    if not isinstance(desired, EnvoyFilter):
        raise TypeError(f"{type(desired).__name__} is not an EnvoyFilter")
    existing.spec = EnvoyFilterSpec(
        workload_selector=desired.spec.workload_selector,
        config_patches=desired.spec.config_patches,
        priority=desired.spec.priority,
    )
    return True