"""manifest2chart — convert rendered Kubernetes manifests to a Helm chart."""

import argparse
import os
import sys
from pathlib import Path

import yaml

from manifest2chart.core.constants import CONFIG_FILE, CONFIG_VERSION_KEY, GENERATED_HEADER
from manifest2chart.core.convert import convert
from manifest2chart.pacts.helpers import AppMetadata
from manifest2chart.pacts.types import ChartTemplate
from manifest2chart.pacts.values import Values

# Standard name/label helpers every generated template relies on
HELPERS_TPL = """\
{{{{/*
Expand the name of the chart.
*/}}}}
{{{{- define "{name}.name" -}}}}
{{{{- default .Chart.Name .Values.nameOverride | trunc 63 | trimSuffix "-" }}}}
{{{{- end }}}}

{{{{/*
Create a default fully qualified app name.
*/}}}}
{{{{- define "{name}.fullname" -}}}}
{{{{- if .Values.fullnameOverride }}}}
{{{{- .Values.fullnameOverride | trunc 63 | trimSuffix "-" }}}}
{{{{- else }}}}
{{{{- $name := default .Chart.Name .Values.nameOverride }}}}
{{{{- if contains $name .Release.Name }}}}
{{{{- .Release.Name | trunc 63 | trimSuffix "-" }}}}
{{{{- else }}}}
{{{{- printf "%s-%s" .Release.Name $name | trunc 63 | trimSuffix "-" }}}}
{{{{- end }}}}
{{{{- end }}}}
{{{{- end }}}}

{{{{/*
Create chart name and version as used by the chart label.
*/}}}}
{{{{- define "{name}.chart" -}}}}
{{{{- printf "%s-%s" .Chart.Name .Chart.Version | replace "+" "_" | trunc 63 | trimSuffix "-" }}}}
{{{{- end }}}}

{{{{/*
Common labels
*/}}}}
{{{{- define "{name}.labels" -}}}}
helm.sh/chart: {{{{ include "{name}.chart" . }}}}
{{{{ include "{name}.selectorLabels" . }}}}
{{{{- if .Chart.AppVersion }}}}
app.kubernetes.io/version: {{{{ .Chart.AppVersion | quote }}}}
{{{{- end }}}}
app.kubernetes.io/managed-by: {{{{ .Release.Service }}}}
{{{{- end }}}}

{{{{/*
Selector labels
*/}}}}
{{{{- define "{name}.selectorLabels" -}}}}
app.kubernetes.io/name: {{{{ include "{name}.name" . }}}}
app.kubernetes.io/instance: {{{{ .Release.Name }}}}
{{{{- end }}}}
"""


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_manifests(paths: list[Path]) -> list[dict]:
    """Load every YAML document from the given files, in order."""
    manifests: list[dict] = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            manifests.extend(_load_docs(f))
    return manifests


def _load_docs(stream) -> list[dict]:
    """Parse a multi-document YAML stream, skipping empty and non-map documents."""
    docs = []
    for doc in yaml.safe_load_all(stream):
        if not doc or not isinstance(doc, dict):
            continue
        # kind: List wraps other objects (kubectl get -o yaml)
        if doc.get("kind") == "List" and isinstance(doc.get("items"), list):
            docs.extend(i for i in doc["items"] if isinstance(i, dict))
        else:
            docs.append(doc)
    return docs


def _collect_inputs(from_dir: str | None, files: list[str] | None) -> list[Path]:
    """Resolve --from-dir and -f arguments to a sorted list of YAML files."""
    paths = [Path(f) for f in files or []]
    if from_dir:
        root = Path(from_dir)
        paths.extend(sorted(p for p in root.rglob("*")
                            if p.is_file() and p.suffix in (".yaml", ".yml")))
    return paths


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

def load_config(path: str) -> dict:
    """Load manifest2chart.yaml or return empty config."""
    if os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    else:
        cfg = {}
    cfg.setdefault(CONFIG_VERSION_KEY, "v1")
    cfg.setdefault("exclude", [])
    return cfg


def save_config(path: str, config: dict) -> None:
    """Write manifest2chart.yaml."""
    # Ensure version key comes first
    ordered = {CONFIG_VERSION_KEY: config.get(CONFIG_VERSION_KEY, "v1")}
    for k, v in config.items():
        if k != CONFIG_VERSION_KEY:
            ordered[k] = v
    with open(path, "w", encoding="utf-8") as f:
        f.write("# Configuration for manifest2chart\n\n")
        yaml.dump(ordered, f, default_flow_style=False, sort_keys=False)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def write_chart(templates: list[ChartTemplate], values: Values, chart_name: str,
                output_dir: str) -> None:
    """Write Chart.yaml, values.yaml, helpers and one file per template."""
    templates_dir = os.path.join(output_dir, "templates")
    os.makedirs(templates_dir, exist_ok=True)

    chart = {
        "apiVersion": "v2",
        "name": chart_name,
        "description": "A Helm chart for Kubernetes",
        "type": "application",
        "version": "0.1.0",
        "appVersion": "0.1.0",
    }
    _write_yaml(os.path.join(output_dir, "Chart.yaml"), chart, sort_keys=False)
    _write_yaml(os.path.join(output_dir, "values.yaml"), dict(values), sort_keys=True)

    helpers = os.path.join(templates_dir, "_helpers.tpl")
    with open(helpers, "w", encoding="utf-8") as f:
        f.write(HELPERS_TPL.format(name=chart_name))

    for t in templates:
        path = os.path.join(templates_dir, t.filename)
        with open(path, "w", encoding="utf-8") as f:
            f.write(t.content.rstrip("\n") + "\n")
    print(f"Wrote {len(templates)} template(s) to {templates_dir}", file=sys.stderr)


def _write_yaml(path: str, data: dict, sort_keys: bool) -> None:
    """Write a plain YAML file with the generated-file header."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(GENERATED_HEADER)
        yaml.dump(data, f, default_flow_style=False, sort_keys=sort_keys)
    print(f"Wrote {path}", file=sys.stderr)


def emit_warnings(warnings: list[str]) -> None:
    """Print all warnings to stderr."""
    for w in warnings:
        print(f"⚠ {w}", file=sys.stderr)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Convert rendered Kubernetes manifests to a Helm chart"
    )
    parser.add_argument(
        "-f", "--file", action="append", dest="files",
        help="Manifest file to read (repeatable; default: stdin)",
    )
    parser.add_argument(
        "--from-dir",
        help="Read every *.yaml/*.yml file under this directory",
    )
    parser.add_argument(
        "--output-dir", default="chart",
        help="Chart directory to write (default: chart)",
    )
    parser.add_argument(
        "--chart-name",
        help="Chart name (default: config chartName, else output directory name)",
    )
    args = parser.parse_args(argv)

    os.makedirs(args.output_dir, exist_ok=True)

    # Step 1: parse
    paths = _collect_inputs(args.from_dir, args.files)
    if paths:
        manifests = parse_manifests(paths)
    else:
        manifests = _load_docs(sys.stdin)
    kinds: dict[str, int] = {}
    for m in manifests:
        kind = m.get("kind")
        if not isinstance(kind, str):
            kind = "Unknown"
        kinds[kind] = kinds.get(kind, 0) + 1
    print(f"Parsed manifests: {kinds}", file=sys.stderr)

    # Step 2: load config
    config_path = os.path.join(args.output_dir, CONFIG_FILE)
    config = load_config(config_path)
    if args.chart_name:
        config["chartName"] = args.chart_name
    config.setdefault("chartName", os.path.basename(os.path.realpath(args.output_dir)))

    app_meta = AppMetadata(chart_name=config["chartName"])
    if config.get("commonPrefix"):
        app_meta.common_prefix = config["commonPrefix"]
    else:
        app_meta.load(manifests)

    # Step 3: convert
    templates, values, warnings = convert(manifests, app_meta, exclude=config["exclude"])

    # Step 4: emit warnings
    emit_warnings(warnings)

    # Step 5: write outputs
    if not templates:
        print("No templates generated — nothing to write.", file=sys.stderr)
        sys.exit(1)

    write_chart(templates, values, config["chartName"], args.output_dir)
    save_config(config_path, config)
    print(f"Wrote {config_path}", file=sys.stderr)


if __name__ == "__main__":
    main()
