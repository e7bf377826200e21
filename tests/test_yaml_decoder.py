import io
from dataclasses import dataclass, field

import pytest

from gatewaykit.log import Level, Mode, new_logger
from gatewaykit.resources import GroupVersionKind, KubeObject, ObjectMeta, Service
from gatewaykit.yaml_decoder import DecodeError, Scheme, decode_file


@dataclass
class Container:
    name: str = ""
    image: str = ""
    container_ports: list[int] = field(default_factory=list)


@dataclass
class Deployment(KubeObject):
    replicas: int = 0
    containers: list[Container] = field(default_factory=list)


@dataclass
class Pod(KubeObject):
    pass


def _meta(data):
    meta = data.get("metadata") or {}
    return ObjectMeta(name=meta.get("name", ""), namespace=meta.get("namespace", ""))


def deployment_factory(data):
    spec = data.get("spec") or {}
    pod_spec = ((spec.get("template") or {}).get("spec")) or {}
    containers = [
        Container(
            name=c.get("name", ""),
            image=c.get("image", ""),
            container_ports=[p["containerPort"] for p in c.get("ports", [])],
        )
        for c in pod_spec.get("containers", [])
    ]
    return Deployment(
        metadata=_meta(data),
        api_version=data["apiVersion"],
        kind=data["kind"],
        replicas=spec.get("replicas", 0),
        containers=containers,
    )


def pod_factory(data):
    return Pod(metadata=_meta(data), api_version=data["apiVersion"], kind=data["kind"])


def service_factory(data):
    spec = data.get("spec") or {}
    return Service(
        metadata=_meta(data),
        api_version=data["apiVersion"],
        kind=data["kind"],
        selector=spec.get("selector") or {},
    )


FACTORIES = {"Deployment": deployment_factory, "Pod": pod_factory, "Service": service_factory}


def make_scheme(*kinds, group="apps", version="v1"):
    scheme = Scheme()
    for kind in kinds:
        scheme.register(GroupVersionKind(group, version, kind), FACTORIES[kind])
    return scheme


def make_logger():
    buffer = io.StringIO()
    return buffer, new_logger(write_to=buffer, level=Level.DEBUG, mode=Mode.DEV)


def checking_callback(collected):
    def callback(obj):
        if not isinstance(obj, (Pod, Deployment, Service)):
            raise TypeError(f"unexpected object type: {type(obj).__name__}")
        collected.append(obj)

    return callback


DEPLOYMENT_DOC = """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: example-deployment
spec:
  replicas: 3
  template:
    spec:
      containers:
      - name: nginx
        image: nginx:latest
        ports:
        - containerPort: 80
"""

MULTI_DOC = """
---
apiVersion: apps/v1
kind: Pod
metadata:
  name: example-pod
spec:
  containers:
  - name: nginx
    image: nginx:latest
    ports:
    - containerPort: 80
---
apiVersion: apps/v1
kind: Service
metadata:
  name: example-service
spec:
  selector:
    app: nginx
  ports:
  - protocol: TCP
    port: 80
    targetPort: 80
"""

INVALID_DOC = """
apiVersion: v1
kind: InvalidObject
metadata:
  name: example-invalid
spec:
  invalidField: invalidValue
"""

MISSING_KIND_DOC = """
apiVersion: v1
metadata:
  name: example-object
"""


def test_decode_known_valid_object():
    buffer, logger = make_logger()
    collected = []
    decode_file(DEPLOYMENT_DOC.encode(), make_scheme("Deployment"), checking_callback(collected), logger)
    assert [type(o) for o in collected] == [Deployment]
    assert buffer.getvalue() == ""


def test_decode_multidoc():
    buffer, logger = make_logger()
    collected = []
    decode_file(MULTI_DOC.encode(), make_scheme("Pod", "Service"), checking_callback(collected), logger)
    assert [o.metadata.name for o in collected] == ["example-pod", "example-service"]
    assert isinstance(collected[1], Service)
    assert collected[1].selector == {"app": "nginx"}
    assert buffer.getvalue() == ""


def test_decode_invalid_object_raises_and_logs():
    buffer, logger = make_logger()
    with pytest.raises(DecodeError, match="failed to decode document"):
        decode_file(INVALID_DOC.encode(), make_scheme("Pod", "Service"), checking_callback([]), logger)
    assert "Document decode error" in buffer.getvalue()


def test_decode_missing_kind_raises_and_logs():
    buffer, logger = make_logger()
    with pytest.raises(DecodeError):
        decode_file(MISSING_KIND_DOC.encode(), Scheme(), checking_callback([]), logger)
    assert buffer.getvalue() != ""
    assert "Kind" in buffer.getvalue()


def test_decode_separators_only_raises_and_logs():
    buffer, logger = make_logger()
    with pytest.raises(DecodeError):
        decode_file(b"---\n---\n", make_scheme("Pod"), checking_callback([]), logger)
    assert "Document decode error" in buffer.getvalue()


def test_decode_empty_file():
    buffer, logger = make_logger()
    collected = []
    decode_file(b"", make_scheme("Pod"), checking_callback(collected), logger)
    assert collected == []
    assert buffer.getvalue() == ""


def test_decode_single_separator_file_is_skipped():
    buffer, logger = make_logger()
    collected = []
    decode_file("---", make_scheme("Pod"), checking_callback(collected), logger)
    assert collected == []
    assert buffer.getvalue() == ""


def test_callback_error_propagates_without_logging():
    buffer, logger = make_logger()

    def refuse(obj):
        raise RuntimeError(f"refused {obj.kind}")

    with pytest.raises(RuntimeError, match="refused Deployment"):
        decode_file(DEPLOYMENT_DOC, make_scheme("Deployment"), refuse, logger)
    assert buffer.getvalue() == ""


def test_decode_detailed_validation():
    fileData = """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: example-deployment
spec:
  replicas: 3
  template:
    metadata:
      labels:
        app: nginx
    spec:
      containers:
      - name: nginx
        image: nginx:latest
        ports:
        - containerPort: 80
"""
    buffer, logger = make_logger()
    collected = []
    decode_file(fileData.encode(), make_scheme("Deployment"), collected.append, logger)

    assert len(collected) == 1
    deployment = collected[0]
    assert isinstance(deployment, Deployment)
    assert deployment.metadata.name == "example-deployment"
    assert deployment.replicas == 3
    assert len(deployment.containers) == 1
    assert deployment.containers[0].name == "nginx"
    assert deployment.containers[0].image == "nginx:latest"
    assert deployment.containers[0].container_ports[0] == 80
    assert buffer.getvalue() == ""


def test_scheme_decode_missing_api_version():
    with pytest.raises(DecodeError, match="apiVersion"):
        make_scheme("Pod").decode("kind: Pod\n")


def test_scheme_decode_non_mapping():
    with pytest.raises(DecodeError, match="not a mapping"):
        make_scheme("Pod").decode("- a\n- b\n")


def test_scheme_decode_core_group():
    scheme = make_scheme("Pod", group="", version="v1")
    pod = scheme.decode("apiVersion: v1\nkind: Pod\nmetadata:\n  name: p\n")
    assert isinstance(pod, Pod)
    assert pod.metadata.name == "p"


def test_scheme_decode_unregistered_version():
    scheme = make_scheme("Pod", group="apps", version="v1")
    with pytest.raises(DecodeError, match='no kind "Pod" is registered'):
        scheme.decode("apiVersion: v1\nkind: Pod\n")