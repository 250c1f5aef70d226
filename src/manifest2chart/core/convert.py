"""Main conversion orchestration — dispatch manifests to processors, collect templates and values."""

import fnmatch

from manifest2chart.core.default import DefaultProcessor
from manifest2chart.core.ingress import IngressProcessor
from manifest2chart.pacts.helpers import AppMetadata, full_name
from manifest2chart.pacts.types import ChartError, ChartTemplate, Processor
from manifest2chart.pacts.values import Values

# Processor instances used by convert(), tried in priority order
_PROCESSORS: list[Processor] = []
_PROCESSORS.extend([IngressProcessor(), DefaultProcessor()])
_PROCESSORS.sort(key=lambda p: p.priority)


def _is_excluded(name: str, exclude_list: list[str]) -> bool:
    """Check if an object name matches any exclude pattern (supports wildcards)."""
    return any(fnmatch.fnmatch(name, pattern) for pattern in exclude_list)


def _find_processor(manifest: dict, processors: list[Processor]) -> Processor | None:
    """Find the first processor that accepts a manifest."""
    for proc in processors:
        if proc.match(manifest):
            return proc
    return None


def process_manifest(app_meta: AppMetadata, manifest: dict,
                     processors: list[Processor] | None = None) -> ChartTemplate | None:
    """Run one manifest through the first matching processor."""
    proc = _find_processor(manifest, _PROCESSORS if processors is None else processors)
    if proc is None:
        return None
    return proc.process(app_meta, manifest)


def _collect(template: ChartTemplate, templates: dict[str, ChartTemplate],
             values: Values, full: str, warnings: list[str]) -> None:
    """Add one template to the run's output, keeping the first of any duplicate filename."""
    if template.filename in templates:
        warnings.append(f"{full}: template '{template.filename}' already generated — skipped")
        return
    templates[template.filename] = template
    values.merge(template.values, warnings)


def convert(manifests: list[dict], app_meta: AppMetadata,
            exclude: list[str] | None = None,
            processors: list[Processor] | None = None,
            ) -> tuple[list[ChartTemplate], Values, list[str]]:
    """Main conversion: returns (templates, merged values, warnings).

    A manifest that fails to convert is reported as a warning and skipped;
    the rest of the run continues.
    """
    warnings: list[str] = []
    templates: dict[str, ChartTemplate] = {}
    values = Values()
    exclude = exclude or []

    for m in manifests:
        full = full_name(m)
        meta = m.get("metadata")
        name = meta.get("name", "") if isinstance(meta, dict) else ""
        if isinstance(name, str) and name and _is_excluded(name, exclude):
            continue
        try:
            template = process_manifest(app_meta, m, processors)
        except ChartError as exc:
            warnings.append(str(exc))
            continue
        if template is None:
            warnings.append(f"{full}: no processor accepts this manifest — skipped")
            continue
        _collect(template, templates, values, full, warnings)

    return list(templates.values()), values, warnings
