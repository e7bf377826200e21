"""Workload selectors for mesh resources attached to a gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from gatewaykit.gatewayapi import Gateway
from gatewaykit.gateway_refs import get_gateway_workload_selector
from gatewaykit.log import get_logger
from gatewaykit.resources import ObjectStore

__all__ = ["WorkloadSelector", "istio_workload_selector_from_gateway"]


@dataclass
class WorkloadSelector:
    """Labels selecting the workloads a mesh resource applies to."""

    match_labels: dict[str, str] = field(default_factory=dict)


def istio_workload_selector_from_gateway(
    store: ObjectStore, gateway: Gateway, logger: logging.Logger | None = None
) -> WorkloadSelector:
    """Select the gateway's service pods, falling back to the gateway's own labels."""
    log = logger if logger is not None else get_logger()
    try:
        labels = get_gateway_workload_selector(store, gateway)
    except (LookupError, ValueError):
        log.debug("failed to build Istio WorkloadSelector from Gateway service - falling back to Gateway labels")
        labels = gateway.metadata.labels
    return WorkloadSelector(match_labels=dict(labels) if labels is not None else {})