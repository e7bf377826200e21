"""Policy back-references stored on gateways, and gateway/route hostname lookups."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from gatewaykit.gatewayapi import (
    GATEWAY_API_GROUP,
    HOSTNAME_ADDRESS_TYPE,
    Gateway,
    HTTPRoute,
    route_hostnames,
)
from gatewaykit.k8s_utils import find_object_key, get_service_workload_selector, read_annotations
from gatewaykit.resources import KubeObject, ObjectKey, ObjectStore

__all__ = [
    "RATE_LIMIT_POLICIES_BACK_REF_ANNOTATION",
    "GatewayWrapper",
    "gateways_missing_policy_ref",
    "gateways_with_valid_policy_ref",
    "gateways_with_invalid_policy_ref",
    "sorted_by_creation",
    "target_hostnames",
    "hostnames_from_http_route",
    "get_gateway_workload_selector",
]

RATE_LIMIT_POLICIES_BACK_REF_ANNOTATION = "kuadrant.io/ratelimitpolicies"


def _text_field(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError("policy reference fields must be strings")
    return value


def _decode_refs(raw: str) -> list[ObjectKey]:
    """Parse a JSON list of {"Namespace": ..., "Name": ...} objects."""
    data = json.loads(raw)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("policy references must be a JSON array")
    refs = []
    for item in data:
        if item is None:
            refs.append(ObjectKey())
            continue
        if not isinstance(item, dict):
            raise ValueError("policy reference must be a JSON object")
        fields = {key.lower(): value for key, value in item.items()}
        refs.append(ObjectKey(_text_field(fields.get("namespace")), _text_field(fields.get("name"))))
    return refs


def _encode_refs(refs: list[ObjectKey]) -> str:
    return json.dumps(
        [{"Namespace": ref.namespace, "Name": ref.name} for ref in refs],
        separators=(",", ":"),
        ensure_ascii=False,
    )


@dataclass
class GatewayWrapper:
    """A gateway together with the annotation that lists the policies referring to it."""

    gateway: Gateway | None = None
    annotation: str = ""

    def key(self) -> ObjectKey:
        if self.gateway is None:
            return ObjectKey()
        return self.gateway.key()

    def _stored_refs(self) -> tuple[dict[str, str], list[ObjectKey] | None]:
        annotations = read_annotations(self.gateway)
        raw = annotations.get(self.annotation)
        if raw is None:
            return annotations, None
        return annotations, _decode_refs(raw)

    def _store(self, annotations: dict[str, str], refs: list[ObjectKey]) -> None:
        annotations[self.annotation] = _encode_refs(refs)
        self.gateway.metadata.annotations = annotations

    def policy_refs(self) -> list[ObjectKey]:
        """Policies listed in the annotation; empty when absent or malformed."""
        if self.gateway is None:
            return []
        try:
            _, refs = self._stored_refs()
        except ValueError:
            return []
        return refs if refs is not None else []

    def contains_policy(self, policy_key: ObjectKey) -> bool:
        return policy_key in self.policy_refs()

    def add_policy(self, policy_key: ObjectKey) -> bool:
        """Append the policy to the annotation; True if it was added."""
        if self.gateway is None:
            return False
        try:
            annotations, refs = self._stored_refs()
        except ValueError:
            return False
        if refs is None:
            refs = []
        elif policy_key in refs:
            return False
        refs.append(policy_key)
        self._store(annotations, refs)
        return True

    def delete_policy(self, policy_key: ObjectKey) -> bool:
        """Remove the first occurrence of the policy; True if it was removed."""
        if self.gateway is None:
            return False
        try:
            annotations, refs = self._stored_refs()
        except ValueError:
            return False
        if refs is None:
            return False
        index = find_object_key(refs, policy_key)
        if index == len(refs):
            return False
        del refs[index]
        self._store(annotations, refs)
        return True

    def hostnames(self) -> list[str]:
        """Hostnames of the gateway's listeners that declare one."""
        if self.gateway is None:
            return []
        return [listener.hostname for listener in self.gateway.listeners if listener.hostname is not None]


def _select_gateways(
    gateways: Iterable[Gateway],
    policy_key: ObjectKey,
    policy_gw_keys: Iterable[ObjectKey],
    annotation: str,
    *,
    targeted: bool,
    referenced: bool,
) -> list[GatewayWrapper]:
    wanted_keys = set(policy_gw_keys)
    selected = []
    for gateway in gateways:
        wrapper = GatewayWrapper(gateway, annotation)
        if (gateway.key() in wanted_keys) == targeted and wrapper.contains_policy(policy_key) == referenced:
            selected.append(wrapper)
    return selected


def gateways_missing_policy_ref(gateways, policy_key, policy_gw_keys, annotation) -> list[GatewayWrapper]:
    """Gateways targeted by the policy that do not list it yet."""
    return _select_gateways(gateways, policy_key, policy_gw_keys, annotation, targeted=True, referenced=False)


def gateways_with_valid_policy_ref(gateways, policy_key, policy_gw_keys, annotation) -> list[GatewayWrapper]:
    """Gateways targeted by the policy that already list it."""
    return _select_gateways(gateways, policy_key, policy_gw_keys, annotation, targeted=True, referenced=True)


def gateways_with_invalid_policy_ref(gateways, policy_key, policy_gw_keys, annotation) -> list[GatewayWrapper]:
    """Gateways no longer targeted by the policy that still list it."""
    return _select_gateways(gateways, policy_key, policy_gw_keys, annotation, targeted=False, referenced=True)


def _creation_key(wrapper: GatewayWrapper) -> tuple[bool, datetime]:
    stamp = wrapper.gateway.metadata.creation_timestamp if wrapper.gateway is not None else None
    return (stamp is not None, stamp if stamp is not None else datetime.min)


def sorted_by_creation(wrappers: Iterable[GatewayWrapper]) -> list[GatewayWrapper]:
    """Wrappers ordered oldest first; gateways without a timestamp come first."""
    return sorted(wrappers, key=_creation_key)


def target_hostnames(target: KubeObject) -> list[str]:
    """Hostnames of a route or gateway, or ``["*"]`` when there are none."""
    hosts: list[str] = []
    if isinstance(target, HTTPRoute):
        hosts = list(target.hostnames)
    elif isinstance(target, Gateway):
        hosts = GatewayWrapper(target).hostnames()
    return hosts or ["*"]


def hostnames_from_http_route(route: HTTPRoute, store: ObjectStore) -> list[str]:
    """The route's hostnames, or else those of its parent gateways."""
    if route.hostnames:
        return route_hostnames(route)
    hosts: list[str] = []
    for ref in route.parent_refs:
        if (ref.kind is not None and ref.kind != "Gateway") or (
            ref.group is not None and ref.group != GATEWAY_API_GROUP
        ):
            continue
        namespace = ref.namespace if ref.namespace is not None else route.metadata.namespace
        gateway = store.get(Gateway, ObjectKey(namespace, ref.name))
        hosts.extend(GatewayWrapper(gateway).hostnames())
    return hosts


def get_gateway_workload_selector(store: ObjectStore, gateway: Gateway) -> dict[str, str]:
    """Selector of the service named by the gateway's hostname address."""
    address = next((a for a in gateway.addresses if a.type == HOSTNAME_ADDRESS_TYPE), None)
    if address is None:
        raise LookupError("cannot find service Hostname in the Gateway status")
    parts = address.value.split(".")
    if len(parts) < 2:
        raise ValueError(f"gateway address {address.value!r} does not name a service and namespace")
    return get_service_workload_selector(store, ObjectKey(namespace=parts[1], name=parts[0]))