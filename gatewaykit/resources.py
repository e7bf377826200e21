"""Minimal Kubernetes object model and an in-memory object store."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime

__all__ = [
    "ObjectKey",
    "GroupVersionKind",
    "OwnerReference",
    "ObjectMeta",
    "KubeObject",
    "Condition",
    "ServicePort",
    "Service",
    "DeploymentCondition",
    "NotFoundError",
    "ObjectStore",
    "parse_group_version",
]


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Namespace and name identifying an object."""

    namespace: str = ""
    name: str = ""

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class GroupVersionKind:
    group: str = ""
    version: str = ""
    kind: str = ""


@dataclass
class OwnerReference:
    api_version: str = ""
    kind: str = ""
    name: str = ""


@dataclass
class ObjectMeta:
    name: str = ""
    namespace: str = ""
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    owner_references: list[OwnerReference] = field(default_factory=list)
    creation_timestamp: datetime | None = None


@dataclass
class KubeObject:
    """A generic object with type information and metadata."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    api_version: str = ""
    kind: str = ""

    def key(self) -> ObjectKey:
        return ObjectKey(self.metadata.namespace, self.metadata.name)


@dataclass
class Condition:
    """A status condition."""

    type: str = ""
    status: str = ""
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None
    observed_generation: int = 0


@dataclass
class ServicePort:
    name: str = ""
    port: int = 0
    target_port: int | str = 0


@dataclass
class Service(KubeObject):
    selector: dict[str, str] = field(default_factory=dict)
    ports: list[ServicePort] = field(default_factory=list)


@dataclass
class DeploymentCondition:
    type: str = ""
    status: str = ""
    reason: str = ""
    message: str = ""


class NotFoundError(LookupError):
    """Raised when a requested object does not exist."""

    def __init__(self, resource: str, name: str) -> None:
        super().__init__(f'{resource} "{name}" not found')
        self.resource = resource
        self.name = name


def _resource_name(kind: type) -> str:
    return kind.__name__.lower() + "s"


class ObjectStore:
    """In-memory store of objects keyed by their class and object key."""

    def __init__(self, objects=()) -> None:
        self._objects: dict[tuple[type, ObjectKey], KubeObject] = {}
        for obj in objects:
            self.create(obj)

    def get(self, kind: type, key: ObjectKey) -> KubeObject:
        """Return a copy of the stored object of class ``kind`` at ``key``."""
        try:
            obj = self._objects[(kind, key)]
        except KeyError:
            raise NotFoundError(_resource_name(kind), key.name) from None
        return copy.deepcopy(obj)

    def create(self, obj: KubeObject) -> None:
        """Store a copy of ``obj``; it must not exist yet."""
        entry = (type(obj), obj.key())
        if entry in self._objects:
            raise ValueError(f'{_resource_name(type(obj))} "{obj.metadata.name}" already exists')
        self._objects[entry] = copy.deepcopy(obj)


def parse_group_version(api_version: str) -> tuple[str, str]:
    """Split an apiVersion string into (group, version)."""
    if api_version in ("", "/"):
        return "", ""
    slashes = api_version.count("/")
    if slashes == 0:
        return "", api_version
    if slashes == 1:
        group, version = api_version.split("/")
        return group, version
    raise ValueError(f"unexpected GroupVersion string: {api_version}")