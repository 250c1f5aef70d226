"""Ingress processor — typed spec, backend rewriting, values extraction, template assembly."""

from dataclasses import dataclass, field

from manifest2chart.core.constants import END_MARKER
from manifest2chart.core.meta import process_obj_meta, string_map
from manifest2chart.core.yamlformat import TemplateLayout, marshal
from manifest2chart.pacts.helpers import AppMetadata, full_name
from manifest2chart.pacts.types import (
    ChartTemplate, ConversionError, GroupVersionKind, Processor, RenderError, RewriteError,
)
from manifest2chart.pacts.values import Values

INGRESS_GVK = GroupVersionKind("networking.k8s.io", "v1", "Ingress")

# Parsed once at import; shared read-only by every IngressProcessor
INGRESS_LAYOUT = TemplateLayout("{open}\n{meta}\n{spec}\n{close}")


# ---------------------------------------------------------------------------
# Typed spec (networking.k8s.io/v1)
# ---------------------------------------------------------------------------

def _get(data: dict, key: str, kind: type, path: str):
    """Return data[key] if present, checking its JSON type."""
    val = data.get(key)
    if val is None:
        return None
    if not isinstance(val, kind) or (kind is int and isinstance(val, bool)):
        raise ConversionError(
            f"{path}.{key}: expected {kind.__name__}, got {type(val).__name__}")
    return val


def _as_map(data, path: str) -> dict:
    """Treat None as an empty map; reject anything else that is not a map."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConversionError(f"{path}: expected map, got {type(data).__name__}")
    return data


def _compact(d: dict) -> dict:
    """Drop unset fields, the way the API server omits empty ones."""
    return {k: v for k, v in d.items() if v is not None and v != []}


@dataclass
class ServiceBackendPort:
    name: str | None = None
    number: int | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "ServiceBackendPort":
        data = _as_map(data, path)
        return cls(name=_get(data, "name", str, path), number=_get(data, "number", int, path))

    def to_dict(self) -> dict:
        return _compact({"name": self.name, "number": self.number})


@dataclass
class IngressServiceBackend:
    name: str = ""
    port: ServiceBackendPort | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "IngressServiceBackend":
        data = _as_map(data, path)
        port = data.get("port")
        return cls(
            name=_get(data, "name", str, path) or "",
            port=ServiceBackendPort.from_dict(port, f"{path}.port") if port is not None else None,
        )

    def to_dict(self) -> dict:
        return _compact({"name": self.name, "port": self.port.to_dict() if self.port else None})


@dataclass
class TypedLocalObjectReference:
    kind: str = ""
    name: str = ""
    api_group: str | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "TypedLocalObjectReference":
        data = _as_map(data, path)
        return cls(
            kind=_get(data, "kind", str, path) or "",
            name=_get(data, "name", str, path) or "",
            api_group=_get(data, "apiGroup", str, path),
        )

    def to_dict(self) -> dict:
        return _compact({"apiGroup": self.api_group, "kind": self.kind, "name": self.name})


@dataclass
class IngressBackend:
    service: IngressServiceBackend | None = None
    resource: TypedLocalObjectReference | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "IngressBackend":
        data = _as_map(data, path)
        service = data.get("service")
        resource = data.get("resource")
        return cls(
            service=(IngressServiceBackend.from_dict(service, f"{path}.service")
                     if service is not None else None),
            resource=(TypedLocalObjectReference.from_dict(resource, f"{path}.resource")
                      if resource is not None else None),
        )

    def to_dict(self) -> dict:
        return _compact({
            "service": self.service.to_dict() if self.service else None,
            "resource": self.resource.to_dict() if self.resource else None,
        })


@dataclass
class HTTPIngressPath:
    backend: IngressBackend = field(default_factory=IngressBackend)
    path: str | None = None
    path_type: str | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "HTTPIngressPath":
        data = _as_map(data, path)
        return cls(
            backend=IngressBackend.from_dict(data.get("backend"), f"{path}.backend"),
            path=_get(data, "path", str, path),
            path_type=_get(data, "pathType", str, path),
        )

    def to_dict(self) -> dict:
        return _compact({"path": self.path, "pathType": self.path_type,
                         "backend": self.backend.to_dict()})


@dataclass
class HTTPIngressRuleValue:
    paths: list[HTTPIngressPath] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data, path: str) -> "HTTPIngressRuleValue":
        data = _as_map(data, path)
        paths = _get(data, "paths", list, path) or []
        return cls(paths=[HTTPIngressPath.from_dict(p, f"{path}.paths[{i}]")
                          for i, p in enumerate(paths)])

    def to_dict(self) -> dict:
        return {"paths": [p.to_dict() for p in self.paths]}


@dataclass
class IngressRule:
    host: str | None = None
    http: HTTPIngressRuleValue | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "IngressRule":
        data = _as_map(data, path)
        http = data.get("http")
        return cls(
            host=_get(data, "host", str, path),
            http=HTTPIngressRuleValue.from_dict(http, f"{path}.http") if http is not None else None,
        )

    def to_dict(self) -> dict:
        return _compact({"host": self.host, "http": self.http.to_dict() if self.http else None})


@dataclass
class IngressTLS:
    hosts: list[str] = field(default_factory=list)
    secret_name: str | None = None

    @classmethod
    def from_dict(cls, data, path: str) -> "IngressTLS":
        data = _as_map(data, path)
        hosts = _get(data, "hosts", list, path) or []
        if any(not isinstance(h, str) for h in hosts):
            raise ConversionError(f"{path}.hosts: expected a list of strings")
        return cls(hosts=list(hosts), secret_name=_get(data, "secretName", str, path))

    def to_dict(self) -> dict:
        return _compact({"hosts": self.hosts, "secretName": self.secret_name})


@dataclass
class IngressSpec:
    """Typed projection of an Ingress spec. Unknown fields are not carried over."""
    ingress_class_name: str | None = None
    default_backend: IngressBackend | None = None
    tls: list[IngressTLS] = field(default_factory=list)
    rules: list[IngressRule] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data, path: str = "spec") -> "IngressSpec":
        data = _as_map(data, path)
        backend = data.get("defaultBackend")
        tls = _get(data, "tls", list, path) or []
        rules = _get(data, "rules", list, path) or []
        return cls(
            ingress_class_name=_get(data, "ingressClassName", str, path),
            default_backend=(IngressBackend.from_dict(backend, f"{path}.defaultBackend")
                             if backend is not None else None),
            tls=[IngressTLS.from_dict(t, f"{path}.tls[{i}]") for i, t in enumerate(tls)],
            rules=[IngressRule.from_dict(r, f"{path}.rules[{i}]") for i, r in enumerate(rules)],
        )

    def to_dict(self) -> dict:
        return _compact({
            "ingressClassName": self.ingress_class_name,
            "defaultBackend": self.default_backend.to_dict() if self.default_backend else None,
            "tls": [t.to_dict() for t in self.tls],
            "rules": [r.to_dict() for r in self.rules],
        })


# ---------------------------------------------------------------------------
# Rewriting and values extraction
# ---------------------------------------------------------------------------

def process_ingress_spec(app_meta: AppMetadata, spec: IngressSpec) -> None:
    """Replace every backend service name with a templated cross-reference."""
    if spec.default_backend is not None and spec.default_backend.service is not None:
        svc = spec.default_backend.service
        svc.name = app_meta.templated_name(svc.name)
    for rule in spec.rules:
        if rule.http is None:
            continue
        for path in rule.http.paths:
            if path.backend.service is not None:
                path.backend.service.name = app_meta.templated_name(path.backend.service.name)


def process_ingress_enabled(key: str, values: Values) -> None:
    """The source had this Ingress, so it starts out enabled."""
    values.set_nested(True, key, "ingress", "enabled")


def process_ingress_class_name(key: str, spec: IngressSpec, values: Values) -> None:
    """Move the class name into values; the spec always references it from there."""
    values.set_nested(spec.ingress_class_name or "", key, "ingress", "className")
    spec.ingress_class_name = f"{{{{.Values.{key}.ingress.className}}}}"


def process_ingress_annotations(key: str, manifest: dict, values: Values) -> None:
    """Copy annotations verbatim (empty map when there are none)."""
    values.set_nested_string_map(string_map(manifest, "annotations"), key, "ingress", "annotations")


class IngressProcessor(Processor):
    """Turn a networking.k8s.io/v1 Ingress into a template gated on <key>.ingress.enabled."""
    name = "ingress"
    priority = 100

    def __init__(self, layout: TemplateLayout = INGRESS_LAYOUT):
        self.layout = layout

    def match(self, manifest: dict) -> bool:
        return GroupVersionKind.of(manifest) == INGRESS_GVK

    def process(self, app_meta: AppMetadata, manifest: dict) -> ChartTemplate | None:
        if not self.match(manifest):
            return None
        full = full_name(manifest)
        try:
            spec = IngressSpec.from_dict(manifest.get("spec"))
        except ConversionError as exc:
            raise ConversionError(f"{full}: unable to convert to Ingress: {exc}") from exc

        meta_obj = manifest.get("metadata")
        raw_name = meta_obj.get("name") if isinstance(meta_obj, dict) else None
        if not raw_name or not isinstance(raw_name, str):
            raise ConversionError(f"{full}: metadata.name is missing")
        name = app_meta.trim_name(raw_name)
        key = app_meta.config_key(raw_name)
        if not key:
            raise RewriteError(f"{full}: name yields an empty values key")

        values = Values()
        meta = process_obj_meta(app_meta, manifest, values=values)

        try:
            process_ingress_spec(app_meta, spec)
        except RewriteError as exc:
            raise RewriteError(f"{full}: backend rewrite failed: {exc}") from exc
        process_ingress_enabled(key, values)
        process_ingress_class_name(key, spec, values)
        process_ingress_annotations(key, manifest, values)

        try:
            content = self.layout.render(
                open=f"{{{{- if .Values.{key}.ingress.enabled }}}}",
                meta=meta,
                spec=marshal({"spec": spec.to_dict()}),
                close=END_MARKER,
            )
        except RenderError as exc:
            raise RenderError(f"{full}: {exc}") from exc
        return ChartTemplate(filename=f"{name}.yaml", content=content, values=values)
