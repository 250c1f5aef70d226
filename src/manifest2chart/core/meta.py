"""Object metadata block — apiVersion, kind and a templated metadata section."""

from manifest2chart.core.constants import HELM_OWNED_LABELS
from manifest2chart.core.yamlformat import marshal
from manifest2chart.pacts.helpers import AppMetadata, full_name, to_lower_camel
from manifest2chart.pacts.types import ConversionError
from manifest2chart.pacts.values import Values


def string_map(manifest: dict, field: str) -> dict:
    """Return metadata.<field> as a str->str map, empty when unset."""
    meta = manifest.get("metadata")
    mapping = meta.get(field) if isinstance(meta, dict) else None
    if mapping is None:
        return {}
    if not isinstance(mapping, dict):
        raise ConversionError(f"{full_name(manifest)}: metadata.{field} is not a map")
    for k, v in mapping.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise ConversionError(
                f"{full_name(manifest)}: metadata.{field} entry {k!r} is not a string pair")
    return mapping


def _user_labels(labels: dict) -> dict:
    """Drop labels the chart's labels helper renders itself."""
    return {k: v for k, v in labels.items() if k not in HELM_OWNED_LABELS}


def process_obj_meta(app_meta: AppMetadata, manifest: dict,
                     values: Values | None = None) -> str:
    """Render the apiVersion/kind/metadata block of a manifest as template text.

    When a values sink is given, annotations are moved into it under
    <configKey>.<kind>.annotations and the block references them there.
    """
    meta = manifest.get("metadata")
    if meta is not None and not isinstance(meta, dict):
        raise ConversionError(f"{full_name(manifest)}: metadata is not a map")
    meta = meta or {}
    name = meta.get("name")
    if not name or not isinstance(name, str):
        raise ConversionError(f"{full_name(manifest)}: metadata.name is missing")

    lines = [
        f"apiVersion: {manifest.get('apiVersion', '')}",
        f"kind: {manifest.get('kind', '')}",
        "metadata:",
        f"  name: {app_meta.templated_name(name)}",
        "  labels:",
    ]
    labels = _user_labels(string_map(manifest, "labels"))
    if labels:
        lines.append(marshal(labels, 4))
    lines.append(f'  {{{{- include "{app_meta.chart_name}.labels" . | nindent 4 }}}}')

    annotations = string_map(manifest, "annotations")
    if annotations:
        lines.append("  annotations:")
        if values is not None:
            key = app_meta.config_key(name)
            kind = to_lower_camel(manifest.get("kind", ""))
            values.set_nested_string_map(annotations, key, kind, "annotations")
            lines.append(f"    {{{{- toYaml .Values.{key}.{kind}.annotations | nindent 4 }}}}")
        else:
            lines.append(marshal(annotations, 4))
    return "\n".join(lines)
