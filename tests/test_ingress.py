import copy

import pytest

from conftest import load_spec
from manifest2chart.core.ingress import (
    IngressProcessor, IngressSpec, process_ingress_class_name, process_ingress_spec,
)
from manifest2chart.core.yamlformat import TemplateLayout
from manifest2chart.pacts.types import ConversionError, RenderError, RewriteError
from manifest2chart.pacts.values import Values

APP_SVC = '{{ include "app.fullname" . }}-app-svc'


def test_round_trip(app_meta, ingress):
    result = IngressProcessor().process(app_meta, ingress)

    assert result.filename == "app-ingress.yaml"
    assert result.values == {"appIngress": {"ingress": {
        "enabled": True,
        "className": "nginx",
        "annotations": {"nginx.ingress.kubernetes.io/rewrite-target": "/"},
    }}}
    spec = load_spec(result.content)
    assert spec["ingressClassName"] == "{{.Values.appIngress.ingress.className}}"
    path = spec["rules"][0]["http"]["paths"][0]
    assert path["backend"]["service"] == {"name": APP_SVC, "port": {"number": 80}}
    assert path["path"] == "/"
    assert path["pathType"] == "Prefix"
    assert spec["rules"][0]["host"] == "app.example.com"


def test_template_block_order(app_meta, ingress):
    lines = IngressProcessor().process(app_meta, ingress).content.splitlines()
    assert lines[0] == "{{- if .Values.appIngress.ingress.enabled }}"
    assert lines[1] == "apiVersion: networking.k8s.io/v1"
    assert lines[2] == "kind: Ingress"
    assert "spec:" in lines
    assert lines.index("spec:") > lines.index("metadata:")
    assert lines[-1] == "{{- end }}"


def test_status_is_not_templated(app_meta, ingress):
    content = IngressProcessor().process(app_meta, ingress).content
    assert "loadBalancer" not in content
    assert "10.0.0.1" not in content


def test_missing_class_name_still_rewritten(app_meta, ingress):
    del ingress["spec"]["ingressClassName"]
    result = IngressProcessor().process(app_meta, ingress)
    assert result.values["appIngress"]["ingress"]["className"] == ""
    spec = load_spec(result.content)
    assert spec["ingressClassName"] == "{{.Values.appIngress.ingress.className}}"


def test_class_name_helper_captures_then_overwrites():
    values = Values()
    spec = IngressSpec(ingress_class_name="traefik")
    process_ingress_class_name("web", spec, values)
    assert values == {"web": {"ingress": {"className": "traefik"}}}
    assert spec.ingress_class_name == "{{.Values.web.ingress.className}}"


def test_enabled_is_always_true(app_meta, ingress):
    ingress["metadata"]["annotations"] = {}
    ingress["spec"] = {}
    result = IngressProcessor().process(app_meta, ingress)
    assert result.values["appIngress"]["ingress"]["enabled"] is True
    assert result.values["appIngress"]["ingress"]["annotations"] == {}


def test_every_backend_is_rewritten(app_meta):
    spec = IngressSpec.from_dict({
        "defaultBackend": {"service": {"name": "fallback", "port": {"name": "http"}}},
        "rules": [
            {"host": "a", "http": {"paths": [
                {"path": "/x", "backend": {"service": {"name": "svc-x"}}},
                {"path": "/y", "backend": {"service": {"name": "svc-y"}}},
            ]}},
            {"host": "b", "http": {"paths": [
                {"path": "/z", "backend": {"service": {"name": "controller-manager-svc-z"}}},
            ]}},
        ],
    })
    process_ingress_spec(app_meta, spec)
    assert spec.default_backend.service.name == '{{ include "app.fullname" . }}-fallback'
    names = [p.backend.service.name for r in spec.rules for p in r.http.paths]
    assert names == [
        '{{ include "app.fullname" . }}-svc-x',
        '{{ include "app.fullname" . }}-svc-y',
        '{{ include "app.fullname" . }}-svc-z',
    ]


def test_empty_rules_and_paths_are_noops(app_meta):
    spec = IngressSpec.from_dict({"rules": [{"host": "a"}, {"host": "b", "http": {"paths": []}}]})
    before = spec.to_dict()
    process_ingress_spec(app_meta, spec)
    assert spec.to_dict() == before


def test_resource_backend_is_left_alone(app_meta):
    spec = IngressSpec.from_dict({"defaultBackend": {
        "resource": {"apiGroup": "k8s.example.com", "kind": "StorageBucket", "name": "static"}}})
    process_ingress_spec(app_meta, spec)
    assert spec.to_dict() == {"defaultBackend": {"resource": {
        "apiGroup": "k8s.example.com", "kind": "StorageBucket", "name": "static"}}}


def test_no_spec_at_all(app_meta, ingress):
    del ingress["spec"]
    spec = load_spec(IngressProcessor().process(app_meta, ingress).content)
    assert spec == {"ingressClassName": "{{.Values.appIngress.ingress.className}}"}


def test_tls_is_carried_over(app_meta, ingress):
    ingress["spec"]["tls"] = [{"hosts": ["app.example.com"], "secretName": "app-tls"}]
    spec = load_spec(IngressProcessor().process(app_meta, ingress).content)
    assert spec["tls"] == [{"hosts": ["app.example.com"], "secretName": "app-tls"}]


@pytest.mark.parametrize("manifest", [
    {"apiVersion": "v1", "kind": "Service", "metadata": {"name": "app-svc"}},
    {"apiVersion": "networking.k8s.io/v1beta1", "kind": "Ingress", "metadata": {"name": "old"}},
    {"apiVersion": "extensions/v1beta1", "kind": "Ingress", "metadata": {"name": "older"}},
    {"kind": "Ingress"},
    {},
])
def test_not_applicable(app_meta, manifest):
    before = copy.deepcopy(manifest)
    proc = IngressProcessor()
    assert proc.match(manifest) is False
    assert proc.process(app_meta, manifest) is None
    assert manifest == before


@pytest.mark.parametrize("spec", [
    "oops",
    {"rules": "oops"},
    {"rules": [{"http": {"paths": [{"backend": {"service": {"name": "s", "port": {"number": "80"}}}}]}}]},
    {"rules": [{"http": {"paths": [{"backend": {"service": {"name": 7}}}]}}]},
    {"ingressClassName": ["nginx"]},
    {"tls": [{"hosts": [1]}]},
    {"defaultBackend": []},
])
def test_malformed_spec_is_a_conversion_error(app_meta, ingress, spec):
    ingress["spec"] = spec
    with pytest.raises(ConversionError, match="Ingress/controller-manager-app-ingress"):
        IngressProcessor().process(app_meta, ingress)


def test_port_number_rejects_bool():
    with pytest.raises(ConversionError, match="number"):
        IngressSpec.from_dict({"defaultBackend": {"service": {"name": "s", "port": {"number": True}}}})


def test_missing_name_is_a_conversion_error(app_meta, ingress):
    del ingress["metadata"]["name"]
    with pytest.raises(ConversionError):
        IngressProcessor().process(app_meta, ingress)


def test_empty_service_name_is_a_rewrite_error(app_meta, ingress):
    ingress["spec"]["rules"][0]["http"]["paths"][0]["backend"]["service"]["name"] = ""
    with pytest.raises(RewriteError, match="backend rewrite failed"):
        IngressProcessor().process(app_meta, ingress)


def test_name_without_key_is_a_rewrite_error(app_meta, ingress):
    ingress["metadata"]["name"] = "--"
    with pytest.raises(RewriteError):
        IngressProcessor().process(app_meta, ingress)


def test_bad_layout_is_a_render_error(app_meta, ingress):
    proc = IngressProcessor(layout=TemplateLayout("{open}\n{meta}\n{spec}"))
    with pytest.raises(RenderError):
        proc.process(app_meta, ingress)


def test_processing_is_deterministic(app_meta, ingress):
    first = IngressProcessor().process(app_meta, copy.deepcopy(ingress))
    second = IngressProcessor().process(app_meta, copy.deepcopy(ingress))
    assert first == second


def test_input_manifest_is_not_mutated(app_meta, ingress):
    before = copy.deepcopy(ingress)
    IngressProcessor().process(app_meta, ingress)
    assert ingress == before
