"""manifest2chart — convert Kubernetes manifests to a Helm chart.

Re-exports the public API for processors.
Processors can import directly from here or from manifest2chart.pacts.
"""

from manifest2chart.pacts.types import (
    ChartError, ConversionError, RewriteError, RenderError,
    ChartTemplate, GroupVersionKind, Processor,
)
from manifest2chart.pacts.values import Values
from manifest2chart.pacts.helpers import AppMetadata, to_lower_camel, full_name
from manifest2chart.core.meta import process_obj_meta
from manifest2chart.core.ingress import IngressProcessor
from manifest2chart.core.default import DefaultProcessor
from manifest2chart.core.convert import convert, process_manifest

__all__ = [
    # Types & base classes
    "ChartTemplate",
    "GroupVersionKind",
    "Processor",
    "Values",
    "AppMetadata",
    # Errors
    "ChartError",
    "ConversionError",
    "RewriteError",
    "RenderError",
    # Built-in processors
    "IngressProcessor",
    "DefaultProcessor",
    # Public helpers
    "to_lower_camel",
    "full_name",
    "process_obj_meta",
    "convert",
    "process_manifest",
]
