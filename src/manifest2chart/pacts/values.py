"""Values tree — nested chart configuration built by processors and merged by the dispatcher."""


class Values(dict):
    """Nested mapping of configuration keys to substitutable values.

    Each processor builds its own tree under its resource's config key; the
    dispatcher folds them together with merge().
    """

    def set_nested(self, value, *path: str) -> None:
        """Set value at path, creating intermediate maps.

        Raises ValueError when a path segment is empty or an intermediate
        segment already holds a non-map value.
        """
        if not path or any(not seg for seg in path):
            raise ValueError(f"invalid values path: {'.'.join(path)!r}")
        node = self
        for i, seg in enumerate(path[:-1]):
            child = node.setdefault(seg, {})
            if not isinstance(child, dict):
                raise ValueError(
                    f"{'.'.join(path[:i + 1])} is {type(child).__name__}, not a map")
            node = child
        node[path[-1]] = value

    def set_nested_string_map(self, mapping: dict | None, *path: str) -> None:
        """Set a copy of a string map at path (annotations, labels)."""
        self.set_nested(dict(mapping or {}), *path)

    def merge(self, other: dict, warnings: list[str] | None = None) -> None:
        """Deep-union other into self. Existing leaves win over conflicting ones."""
        _merge_into(self, other, [], warnings)


def _merge_into(base: dict, other: dict, path: list[str],
                warnings: list[str] | None) -> None:
    """Recursively merge other into base, reporting conflicting leaves."""
    for key, val in other.items():
        if key not in base:
            base[key] = _copy_tree(val)
        elif isinstance(val, dict) and isinstance(base[key], dict):
            _merge_into(base[key], val, path + [key], warnings)
        elif base[key] != val and warnings is not None:
            warnings.append(
                f"values conflict at '{'.'.join(path + [key])}': "
                f"kept {base[key]!r}, dropped {val!r}"
            )


def _copy_tree(val):
    """Copy nested dicts so merged trees never share nodes with their source."""
    if isinstance(val, dict):
        return {k: _copy_tree(v) for k, v in val.items()}
    if isinstance(val, list):
        return [_copy_tree(v) for v in val]
    return val
