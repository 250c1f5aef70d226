"""Public data types for processors — the contracts extensions build on."""

from dataclasses import dataclass, field
from typing import NamedTuple

from manifest2chart.pacts.values import Values


class ChartError(Exception):
    """Base class for failures while turning one manifest into a template."""


class ConversionError(ChartError):
    """Manifest matched a processor by kind but does not have the expected shape."""


class RewriteError(ChartError):
    """A naming or cross-reference rewrite could not be produced."""


class RenderError(ChartError):
    """Template assembly failed (malformed layout, not user input)."""


class GroupVersionKind(NamedTuple):
    """Kind/version tag of a manifest, split the way apiVersion encodes it."""
    group: str
    version: str
    kind: str

    @classmethod
    def of(cls, manifest: dict) -> "GroupVersionKind":
        """Read the tag from a raw manifest (core group is '')."""
        api_version = manifest.get("apiVersion")
        kind = manifest.get("kind")
        if not isinstance(api_version, str):
            api_version = ""
        group, _, version = api_version.rpartition("/")
        return cls(group, version, kind if isinstance(kind, str) else "")


@dataclass(frozen=True)
class ChartTemplate:
    """Output of a single processor: one file under templates/ plus its values."""
    filename: str
    content: str
    values: Values = field(default_factory=Values)


class Processor:
    """Base class for manifest processors.

    Subclass to support a resource kind. The dispatcher walks processors by
    priority (lower first) and hands each manifest to the first whose
    match() accepts it.
    """
    name: str = ""
    priority: int = 1000

    def match(self, manifest: dict) -> bool:
        """Return True if this processor handles this manifest."""
        return False

    def process(self, app_meta, manifest: dict) -> ChartTemplate | None:
        """Convert one manifest to a chart template, or None when not applicable.

        Raises a ChartError subclass when the manifest is applicable but
        cannot be converted.
        """
        return None
