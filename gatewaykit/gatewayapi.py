"""Gateway API route and gateway model, rule compilation and formatting."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from gatewaykit.resources import Condition, KubeObject

__all__ = [
    "GATEWAY_API_GROUP",
    "GATEWAY_PROGRAMMED_CONDITION_TYPE",
    "HOSTNAME_ADDRESS_TYPE",
    "PathMatchType",
    "HeaderMatchType",
    "QueryParamMatchType",
    "PolicyTargetReference",
    "HTTPPathMatch",
    "HTTPHeaderMatch",
    "HTTPQueryParamMatch",
    "HTTPRouteMatch",
    "HTTPRouteRule",
    "ParentReference",
    "RouteParentStatus",
    "HTTPRoute",
    "Listener",
    "GatewayAddress",
    "Gateway",
    "CompiledRule",
    "HTTPRouteRuleSelector",
    "is_target_ref_http_route",
    "is_target_ref_gateway",
    "route_http_method_to_rule_method",
    "route_hostnames",
    "rules_from_http_route",
    "http_route_rule_to_string",
    "http_route_match_to_string",
    "http_path_match_to_string",
    "http_header_match_to_string",
    "http_query_param_match_to_string",
    "http_method_to_string",
    "is_http_route_accepted",
]

GATEWAY_API_GROUP = "gateway.networking.k8s.io"
GATEWAY_PROGRAMMED_CONDITION_TYPE = "Programmed"
HOSTNAME_ADDRESS_TYPE = "Hostname"


class PathMatchType(str, Enum):
    EXACT = "Exact"
    PATH_PREFIX = "PathPrefix"
    REGULAR_EXPRESSION = "RegularExpression"


class HeaderMatchType(str, Enum):
    EXACT = "Exact"
    REGULAR_EXPRESSION = "RegularExpression"


class QueryParamMatchType(str, Enum):
    EXACT = "Exact"
    REGULAR_EXPRESSION = "RegularExpression"


@dataclass
class PolicyTargetReference:
    """Reference from a policy to the network object it targets."""

    group: str = ""
    kind: str = ""
    name: str = ""
    namespace: str | None = None


@dataclass
class HTTPPathMatch:
    type: PathMatchType | None = None
    value: str | None = None


@dataclass
class HTTPHeaderMatch:
    name: str = ""
    value: str = ""
    type: HeaderMatchType | None = None


@dataclass
class HTTPQueryParamMatch:
    name: str = ""
    value: str = ""
    type: QueryParamMatchType | None = None


@dataclass
class HTTPRouteMatch:
    path: HTTPPathMatch | None = None
    method: str | None = None
    headers: list[HTTPHeaderMatch] = field(default_factory=list)
    query_params: list[HTTPQueryParamMatch] = field(default_factory=list)


@dataclass
class HTTPRouteRule:
    matches: list[HTTPRouteMatch] = field(default_factory=list)


@dataclass
class ParentReference:
    name: str = ""
    namespace: str | None = None
    kind: str | None = None
    group: str | None = None
    section_name: str | None = None
    port: int | None = None


@dataclass
class RouteParentStatus:
    parent_ref: ParentReference = field(default_factory=ParentReference)
    conditions: list[Condition] = field(default_factory=list)


@dataclass
class HTTPRoute(KubeObject):
    """An HTTPRoute: its spec fields and the per-parent status."""

    hostnames: list[str] = field(default_factory=list)
    parent_refs: list[ParentReference] = field(default_factory=list)
    rules: list[HTTPRouteRule] = field(default_factory=list)
    parents: list[RouteParentStatus] = field(default_factory=list)


@dataclass
class Listener:
    name: str = ""
    hostname: str | None = None
    port: int = 0
    protocol: str = ""


@dataclass
class GatewayAddress:
    type: str | None = None
    value: str = ""


@dataclass
class Gateway(KubeObject):
    """A Gateway: its listeners and the addresses reported in its status."""

    listeners: list[Listener] = field(default_factory=list)
    addresses: list[GatewayAddress] = field(default_factory=list)


@dataclass
class CompiledRule:
    """A flattened rule: hosts plus optional paths and methods."""

    paths: list[str] = field(default_factory=list)
    methods: list[str] = field(default_factory=list)
    hosts: list[str] = field(default_factory=list)


def is_target_ref_http_route(target_ref: PolicyTargetReference) -> bool:
    return target_ref.group == GATEWAY_API_GROUP and target_ref.kind == "HTTPRoute"


def is_target_ref_gateway(target_ref: PolicyTargetReference) -> bool:
    return target_ref.group == GATEWAY_API_GROUP and target_ref.kind == "Gateway"


def route_http_method_to_rule_method(method: str | None) -> list[str]:
    return [] if method is None else [method]


def route_hostnames(route: HTTPRoute | None) -> list[str]:
    """The route's hostnames, or ``["*"]`` when it declares none."""
    if route is None:
        return []
    if not route.hostnames:
        return ["*"]
    return list(route.hostnames)


def _route_path_match_to_rule_path(path_match: HTTPPathMatch | None) -> list[str]:
    if path_match is None:
        return []
    if path_match.type not in (None, PathMatchType.PATH_PREFIX, PathMatchType.EXACT):
        return []
    suffix = "" if path_match.type == PathMatchType.EXACT else "*"
    value = path_match.value if path_match.value is not None else "/"
    return [value + suffix]


def rules_from_http_route(route: HTTPRoute | None) -> list[CompiledRule]:
    """Compile one rule per route match that has a method or a supported path."""
    if route is None:
        return []
    rules = []
    for route_rule in route.rules:
        for match in route_rule.matches:
            rule = CompiledRule(
                hosts=route_hostnames(route),
                methods=route_http_method_to_rule_method(match.method),
                paths=_route_path_match_to_rule_path(match.path),
            )
            if rule.methods or rule.paths:
                rules.append(rule)
    if not rules:
        rules = [CompiledRule(hosts=route_hostnames(route))]
    return rules


@dataclass
class HTTPRouteRuleSelector:
    """Selects route rules having a match that covers every field of ``match``."""

    match: HTTPRouteMatch | None = None

    def selects(self, rule: HTTPRouteRule) -> bool:
        if self.match is None:
            return True
        return any(self._covers(candidate) for candidate in rule.matches)

    def _covers(self, candidate: HTTPRouteMatch) -> bool:
        wanted = self.match
        if wanted.path is not None and wanted.path != candidate.path:
            return False
        if wanted.method is not None and wanted.method != candidate.method:
            return False
        if not all(header in candidate.headers for header in wanted.headers):
            return False
        return all(param in candidate.query_params for param in wanted.query_params)


def http_route_rule_to_string(rule: HTTPRouteRule) -> str:
    matches = ",".join(http_route_match_to_string(m) for m in rule.matches)
    return f"{{matches:[{matches}]}}"


def http_route_match_to_string(match: HTTPRouteMatch) -> str:
    patterns = []
    if match.method is not None:
        patterns.append(f"method:{http_method_to_string(match.method)}")
    if match.path is not None:
        patterns.append(f"path:{http_path_match_to_string(match.path)}")
    if match.query_params:
        params = ",".join(http_query_param_match_to_string(q) for q in match.query_params)
        patterns.append(f"queryParams:[{params}]")
    if match.headers:
        headers = ",".join(http_header_match_to_string(h) for h in match.headers)
        patterns.append(f"headers:[{headers}]")
    return "{" + ",".join(patterns) + "}"


def http_path_match_to_string(path: HTTPPathMatch | None) -> str:
    if path is None:
        return "*"
    if path.value is None:
        raise ValueError("path match has no value")
    if path.type == PathMatchType.EXACT:
        return path.value
    if path.type == PathMatchType.REGULAR_EXPRESSION:
        return f"~/{path.value}/"
    return f"{path.value}*"


def http_header_match_to_string(header: HTTPHeaderMatch) -> str:
    if header.type == HeaderMatchType.REGULAR_EXPRESSION:
        return f"{{{header.name}:~/{header.value}/}}"
    return f"{{{header.name}:{header.value}}}"


def http_query_param_match_to_string(param: HTTPQueryParamMatch) -> str:
    if param.type == QueryParamMatchType.REGULAR_EXPRESSION:
        return f"{{{param.name}:~/{param.value}/}}"
    return f"{{{param.name}:{param.value}}}"


def http_method_to_string(method: str | None) -> str:
    return "*" if method is None else str(method)


def is_http_route_accepted(route: HTTPRoute | None) -> bool:
    """True when every parent reference has a status not reporting Accepted=False."""
    if route is None or not route.parent_refs:
        return False
    for ref in route.parent_refs:
        status = next((p for p in route.parents if p.parent_ref == ref), None)
        if status is None:
            return False
        accepted = next((c for c in status.conditions if c.type == "Accepted"), None)
        if accepted is not None and accepted.status == "False":
            return False
    return True