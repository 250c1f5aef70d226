import copy

import pytest
import yaml

from manifest2chart.pacts.helpers import AppMetadata

APP_INGRESS = {
    "apiVersion": "networking.k8s.io/v1",
    "kind": "Ingress",
    "metadata": {
        "name": "controller-manager-app-ingress",
        "namespace": "prod",
        "labels": {"app": "web", "helm.sh/chart": "old-1.0"},
        "annotations": {"nginx.ingress.kubernetes.io/rewrite-target": "/"},
    },
    "spec": {
        "ingressClassName": "nginx",
        "rules": [{
            "host": "app.example.com",
            "http": {"paths": [{
                "path": "/",
                "pathType": "Prefix",
                "backend": {"service": {"name": "app-svc", "port": {"number": 80}}},
            }]},
        }],
    },
    "status": {"loadBalancer": {"ingress": [{"ip": "10.0.0.1"}]}},
}


@pytest.fixture
def app_meta():
    """Chart 'app' whose objects share the 'controller-manager' prefix."""
    return AppMetadata(chart_name="app", common_prefix="controller-manager")


@pytest.fixture
def ingress():
    """A fresh copy of the reference Ingress manifest."""
    return copy.deepcopy(APP_INGRESS)


def load_spec(content: str) -> dict:
    """Parse the spec block out of a rendered ingress template."""
    body = content.split("\nspec:\n", 1)[1].rsplit("\n{{- end }}", 1)[0]
    return yaml.safe_load("spec:\n" + body)["spec"]
