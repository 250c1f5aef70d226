"""Fallback processor — any manifest, metadata templated, body copied as-is."""

from manifest2chart.core.constants import NON_BODY_FIELDS
from manifest2chart.core.meta import process_obj_meta
from manifest2chart.core.yamlformat import marshal
from manifest2chart.pacts.helpers import AppMetadata
from manifest2chart.pacts.types import ChartTemplate, Processor


class DefaultProcessor(Processor):
    """Catch-all for kinds no dedicated processor claims."""
    name = "default"
    priority = 10000

    def match(self, manifest: dict) -> bool:
        kind = manifest.get("kind")
        return isinstance(kind, str) and bool(kind)

    def process(self, app_meta: AppMetadata, manifest: dict) -> ChartTemplate | None:
        if not self.match(manifest):
            return None
        meta = process_obj_meta(app_meta, manifest)
        body = {k: v for k, v in manifest.items() if k not in NON_BODY_FIELDS}
        name = app_meta.trim_name(manifest["metadata"]["name"])
        kind = manifest["kind"].lower()
        content = meta + ("\n" + marshal(body) if body else "")
        return ChartTemplate(filename=f"{name}-{kind}.yaml", content=content)
