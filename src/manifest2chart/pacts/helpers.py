"""Public helper functions available to processors — naming and cross-references."""

import os
import re
from dataclasses import dataclass

from manifest2chart.core.constants import CONTROLLER_MANAGER_PREFIX
from manifest2chart.pacts.types import RewriteError

# Word boundaries inside an identifier: "HTTPServer" -> HTTP|Server, "appSvc" -> app|Svc
_ACRONYM_RE = re.compile(r'([A-Z]+)([A-Z][a-z])')
_CAMEL_RE = re.compile(r'([a-z0-9])([A-Z])')
_WORD_SPLIT_RE = re.compile(r'[^A-Za-z0-9]+')


def to_lower_camel(s: str) -> str:
    """Convert a kebab/snake/dotted/space separated name to lowerCamelCase."""
    s = _CAMEL_RE.sub(r'\1 \2', _ACRONYM_RE.sub(r'\1 \2', s))
    words = [w for w in _WORD_SPLIT_RE.split(s) if w]
    if not words:
        return ""
    return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])


def detect_common_prefix(names: list[str]) -> str:
    """Longest common prefix of all names, cut back to a '-' boundary."""
    names = [n for n in names if n]
    if len(names) < 2:
        return ""
    common = os.path.commonprefix(names)
    idx = common.rfind("-")
    return common[:idx] if idx > 0 else ""


@dataclass
class AppMetadata:
    """Chart-wide naming context shared by every processor in a run."""
    chart_name: str
    common_prefix: str = ""

    def load(self, manifests: list[dict]) -> None:
        """Detect the common name prefix from every manifest's name."""
        names = []
        for m in manifests:
            meta = m.get("metadata")
            name = meta.get("name") if isinstance(meta, dict) else None
            if isinstance(name, str) and name:
                names.append(name)
        self.common_prefix = detect_common_prefix(names)

    def trim_name(self, name: str) -> str:
        """Strip the application prefix from an object name."""
        trimmed = name
        if self.common_prefix and name.startswith(self.common_prefix):
            trimmed = name[len(self.common_prefix):]
        trimmed = trimmed.lstrip("-./_ ")
        return trimmed or name

    def config_key(self, name: str) -> str:
        """Derive the values-tree root for an object (e.g. 'appIngress')."""
        short = self.trim_name(name)
        if short.startswith(CONTROLLER_MANAGER_PREFIX):
            short = short[len(CONTROLLER_MANAGER_PREFIX):]
        return to_lower_camel(short)

    def templated_name(self, name: str) -> str:
        """Template expression resolving to an object's release-scoped name."""
        if not name:
            raise RewriteError("cannot template an empty object name")
        return f'{{{{ include "{self.chart_name}.fullname" . }}}}-{self.trim_name(name)}'


def full_name(manifest: dict) -> str:
    """Return 'Kind/name' string for use in warning and error messages."""
    meta = manifest.get("metadata")
    if not isinstance(meta, dict):
        meta = {}
    return f"{manifest.get('kind', '?')}/{meta.get('name', '?')}"
