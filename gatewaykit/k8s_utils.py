"""Helpers for object metadata, services and conditions."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone

from gatewaykit.resources import (
    Condition,
    DeploymentCondition,
    KubeObject,
    ObjectKey,
    ObjectStore,
    Service,
    parse_group_version,
)

DELETE_TAG_ANNOTATION = "kuadrant.io/delete"

_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_JSON_ESCAPES = str.maketrans(
    {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "\u2028": "\\u2028", "\u2029": "\\u2029"}
)


def object_info(obj: KubeObject) -> str:
    """Return ``kind/name`` for the object."""
    return f"{obj.kind}/{obj.metadata.name}"


def read_annotations(obj: KubeObject) -> dict[str, str]:
    """Return the object's annotations, or a fresh empty dict if it has none."""
    annotations = obj.metadata.annotations
    return annotations if annotations is not None else {}


def tag_object_to_delete(obj: KubeObject) -> None:
    """Mark the object for deletion through an annotation."""
    if obj.metadata.annotations is None:
        obj.metadata.annotations = {}
    obj.metadata.annotations[DELETE_TAG_ANNOTATION] = "true"


def is_object_tagged_to_delete(obj: KubeObject) -> bool:
    annotations = obj.metadata.annotations or {}
    return annotations.get(DELETE_TAG_ANNOTATION) == "true"


def _format_time(moment: datetime | None) -> str | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _condition_dict(condition: Condition) -> dict:
    entry: dict = {"type": condition.type, "status": condition.status}
    if condition.observed_generation:
        entry["observedGeneration"] = condition.observed_generation
    entry["lastTransitionTime"] = _format_time(condition.last_transition_time)
    entry["reason"] = condition.reason
    entry["message"] = condition.message
    return entry


def status_conditions_marshal_json(conditions: list[Condition]) -> bytes:
    """Serialize conditions as a compact JSON array sorted by condition type."""
    ordered = sorted(conditions, key=lambda c: c.type)
    text = json.dumps([_condition_dict(c) for c in ordered], ensure_ascii=False, separators=(",", ":"))
    return text.translate(_JSON_ESCAPES).encode("utf-8")


def is_owned_by(owned: KubeObject, owner: KubeObject) -> bool:
    """True if an owner reference matches the owner's group, kind and name."""
    try:
        owner_group, _ = parse_group_version(owner.api_version)
    except ValueError:
        owner_group = ""
    for reference in owned.metadata.owner_references:
        try:
            group, _ = parse_group_version(reference.api_version)
        except ValueError:
            return False
        if group == owner_group and reference.kind == owner.kind and reference.name == owner.metadata.name:
            return True
    return False


def _parse_int32(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if _INT32_MIN <= value <= _INT32_MAX else None


def _target_port_value(target: int | str) -> int:
    if isinstance(target, int):
        return target
    return int(target) if _INT_RE.fullmatch(target) else 0


def get_service_port_number(store: ObjectStore, service_key: ObjectKey, service_port: str) -> int:
    """Resolve a port given as a number or as the name of one of the service's ports."""
    number = _parse_int32(service_port)
    if number is not None:
        return number
    service = get_service(store, service_key)
    for port in service.ports:
        if port.name == service_port:
            return _target_port_value(port.target_port)
    raise LookupError(f"service port {service_port} was not found in {service_key}")


def get_service_workload_selector(store: ObjectStore, service_key: ObjectKey) -> dict[str, str]:
    return get_service(store, service_key).selector


def get_service(store: ObjectStore, service_key: ObjectKey) -> Service:
    return store.get(Service, service_key)


def object_key_list_difference(a: list[ObjectKey], b: list[ObjectKey]) -> list[ObjectKey]:
    """Keys of ``a`` not present in ``b``, in ``a``'s order."""
    excluded = set(b)
    return [key for key in a if key not in excluded]


def find_object_key(keys: list[ObjectKey], key: ObjectKey) -> int:
    """Index of the first occurrence of ``key``, or ``len(keys)`` if absent."""
    return next((index for index, candidate in enumerate(keys) if candidate == key), len(keys))


def find_deployment_status_condition(
    conditions: list[DeploymentCondition], condition_type: str
) -> DeploymentCondition | None:
    return next((c for c in conditions if c.type == condition_type), None)