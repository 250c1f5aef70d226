"""YAML serialization and fixed template layouts for generated chart files."""

import string
from dataclasses import dataclass, field

import yaml

from manifest2chart.pacts.types import RenderError


def indent(text: str, spaces: int) -> str:
    """Indent every non-empty line of text by the given number of spaces."""
    if spaces <= 0:
        return text
    pad = " " * spaces
    return "\n".join(pad + line if line else line for line in text.split("\n"))


def marshal(obj, indent_by: int = 0) -> str:
    """Serialize obj as block YAML with sorted keys, trailing whitespace trimmed."""
    text = yaml.dump(obj, default_flow_style=False, sort_keys=True,
                     allow_unicode=True, width=float("inf"))
    return indent(text.rstrip("\n "), indent_by)


@dataclass(frozen=True)
class TemplateLayout:
    """An immutable block layout, parsed once when the layout is created.

    The source uses str.format placeholders, one per block. Rendered block
    contents are inserted verbatim and never re-parsed, so template
    expressions inside them survive untouched.
    """
    source: str
    fields: tuple[str, ...] = field(init=False)

    def __post_init__(self):
        try:
            names = tuple(name for _, name, _, _ in string.Formatter().parse(self.source)
                          if name is not None)
        except ValueError as exc:
            raise RenderError(f"malformed template layout: {exc}") from exc
        if any(not name.isidentifier() for name in names):
            raise RenderError(f"template layout needs named blocks, got {names}")
        object.__setattr__(self, "fields", names)

    def render(self, **blocks: str) -> str:
        """Fill every block; missing or unexpected blocks are a RenderError."""
        missing = [n for n in self.fields if n not in blocks]
        extra = [n for n in blocks if n not in self.fields]
        if missing or extra:
            raise RenderError(f"template layout blocks mismatch: missing={missing} extra={extra}")
        return self.source.format(**blocks)
