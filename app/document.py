"""
Path-addressed access to a resume document.

A document is a JSON-shaped tree of dicts, lists and strings. A field path is
a tuple of keys and list indices, e.g. ``("workExperience", 0, "responsibilities", 2)``.

`set_at_path` never mutates its input: it copies only the containers on the
way down to the addressed node and reuses every other subtree as-is.
"""

from __future__ import annotations
from typing import Any, Iterator, Sequence, Tuple, Union

Key = Union[str, int]
Path = Tuple[Key, ...]


class InvalidPathError(KeyError):
    """Raised when a path does not address an existing node."""


def _step(node: Any, key: Key, path: Sequence[Key]) -> Any:
    if isinstance(node, dict):
        if key not in node:
            raise InvalidPathError(f"no key {key!r} in path {format_path(path)}")
        return node[key]
    if isinstance(node, list):
        if not isinstance(key, int) or isinstance(key, bool) or not 0 <= key < len(node):
            raise InvalidPathError(f"index {key!r} out of range in path {format_path(path)}")
        return node[key]
    raise InvalidPathError(f"cannot descend into {type(node).__name__} at {key!r} in path {format_path(path)}")


def get_at_path(document: Any, path: Sequence[Key]) -> Any:
    node = document
    for key in path:
        node = _step(node, key, path)
    return node


def set_at_path(document: Any, path: Sequence[Key], value: Any) -> Any:
    """Return a copy of `document` with the node at `path` replaced by `value`.

    Untouched subtrees keep their identity. An empty path replaces the whole
    document. Lists never grow: the index must already exist.
    """
    path = tuple(path)
    if not path:
        return value

    key, rest = path[0], path[1:]
    child = _step(document, key, path)
    new_child = set_at_path(child, rest, value) if rest else value

    if isinstance(document, dict):
        updated = dict(document)
    else:
        updated = list(document)
    updated[key] = new_child
    return updated


def iter_field_paths(document: Any, prefix: Path = ()) -> Iterator[Tuple[Path, str]]:
    """Yield ``(path, value)`` for every string leaf, in document order."""
    if isinstance(document, dict):
        for key, child in document.items():
            yield from iter_field_paths(child, prefix + (key,))
    elif isinstance(document, list):
        for index, child in enumerate(document):
            yield from iter_field_paths(child, prefix + (index,))
    elif isinstance(document, str):
        yield prefix, document


def format_path(path: Sequence[Key]) -> str:
    """Dotted form used for widget keys and ``data-path`` attributes."""
    return ".".join(str(k) for k in path)
