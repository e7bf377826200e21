# gatewaykit

Plain-Python helpers for Gateway API routes, gateways that carry policy
back-references, Istio mesh configuration and multi-document YAML manifests.
Everything works on in-memory dataclasses; lookups of other resources (services,
gateways) go through a small in-memory `ObjectStore`.

## Install

```
pip install gatewaykit
```

The tests need the `test` extra: `pip install "gatewaykit[test]"`, then `pytest`.

## Modules

- `gatewaykit.hostname` — `Name`, a `str` subclass for possibly wildcarded
  hostnames, with `subset_of(other)` and `is_wildcarded()`.
- `gatewaykit.resources` — `ObjectKey`, `ObjectMeta`, `KubeObject`, `Condition`,
  `Service`, `ServicePort`, `DeploymentCondition`, `OwnerReference`,
  `GroupVersionKind`, `parse_group_version`, and `ObjectStore` (`get(kind, key)`,
  `create(obj)`; a missing object raises `NotFoundError`).
- `gatewaykit.k8s_utils` — `object_info`, `read_annotations`,
  `tag_object_to_delete`, `is_object_tagged_to_delete`,
  `status_conditions_marshal_json`, `is_owned_by`, `get_service`,
  `get_service_port_number`, `get_service_workload_selector`,
  `object_key_list_difference`, `find_object_key`,
  `find_deployment_status_condition`.
- `gatewaykit.gatewayapi` — `HTTPRoute`, `Gateway`, `HTTPRouteMatch` and the other
  match types; `rules_from_http_route`, `route_hostnames`,
  `is_http_route_accepted`, `is_target_ref_http_route`, `is_target_ref_gateway`,
  the `http_*_to_string` renderers and `HTTPRouteRuleSelector.selects(rule)`.
- `gatewaykit.gateway_refs` — `GatewayWrapper(gateway, annotation)` reads and edits
  the JSON list of policy keys kept in a gateway annotation (`policy_refs`,
  `contains_policy`, `add_policy`, `delete_policy`, `hostnames`, `key`);
  `gateways_missing_policy_ref`, `gateways_with_valid_policy_ref`,
  `gateways_with_invalid_policy_ref`, `sorted_by_creation`, `target_hostnames`,
  `hostnames_from_http_route`, `get_gateway_workload_selector`.
- `gatewaykit.istio_utils` — `istio_workload_selector_from_gateway` builds a
  `WorkloadSelector` from the gateway's service, falling back to the gateway's labels.
- `gatewaykit.mesh_config` — `MeshConfig`, `ExtensionProvider`, `EnvoyExtAuthzGrpc`,
  the abstract `ConfigWrapper`, `KuadrantAuthorizer` and
  `has_kuadrant_authorizer` / `register_kuadrant_authorizer` /
  `unregister_kuadrant_authorizer`.
- `gatewaykit.istio_mesh_config` — `OperatorWrapper` (mesh config at
  `IstioOperator.spec["meshConfig"]`) and `ConfigMapWrapper` (YAML under the
  `mesh` key of a `ConfigMap`).
- `gatewaykit.envoy_filters` — `EnvoyFilter`, `EnvoyFilterSpec` and
  `always_update_envoy_filter(existing, desired)`.
- `gatewaykit.yaml_decoder` — `Scheme` (`register(gvk, factory)`, `decode(document)`)
  and `decode_file(file_data, scheme, callback, logger=None)`; failures raise
  `DecodeError`.
- `gatewaykit.log` — `Level`, `Mode`, `to_level`, `to_mode`,
  `new_logger(write_to=None, level=Level.INFO, mode=Mode.PROD)`, `set_logger`,
  `get_logger`.

## Examples

```python
from gatewaykit.hostname import Name
from gatewaykit.gatewayapi import HTTPRoute, rules_from_http_route

assert Name("foo.com").subset_of("*.com")

route = HTTPRoute(hostnames=["*.com"])
print(rules_from_http_route(route))   # [CompiledRule(paths=[], methods=[], hosts=['*.com'])]
```

```python
from gatewaykit.istio_mesh_config import ConfigMap, ConfigMapWrapper
from gatewaykit.mesh_config import (
    KuadrantAuthorizer, has_kuadrant_authorizer, register_kuadrant_authorizer,
)

wrapper = ConfigMapWrapper(ConfigMap(data={"mesh": ""}))
authorizer = KuadrantAuthorizer("kuadrant-system")
register_kuadrant_authorizer(wrapper, authorizer)
assert has_kuadrant_authorizer(wrapper, authorizer)
```

```python
from gatewaykit.resources import GroupVersionKind
from gatewaykit.yaml_decoder import Scheme, decode_file

scheme = Scheme()
scheme.register(GroupVersionKind("apps", "v1", "Deployment"), lambda doc: doc["metadata"]["name"])
names = []
decode_file(b"apiVersion: apps/v1\nkind: Deployment\nmetadata:\n  name: web\n", scheme, names.append)
assert names == ["web"]
```

## What it does not do

The package has no command, no controller loop and no connection to a cluster:
it never reads from or writes to a Kubernetes API server. Objects are looked up
only in an `ObjectStore` you fill yourself. It does not build EnvoyFilter
configuration patches; `always_update_envoy_filter` only copies a desired spec
onto an existing filter.