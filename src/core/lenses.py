# src/core/lenses.py — v1
"""Accessor pairs bound to one slot of an in-memory manifest document.

A lens never performs I/O: the caller loads the document, focuses a lens on
it, reads or replaces the slot, then persists the document itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


@dataclass(frozen=True)
class Lens(Generic[T]):
    """Getter/setter pair focused on a single slot."""

    get: Callable[[], T | None]
    set: Callable[[T | None], None]


LensFactory = Callable[[Any], Lens[Any]]


def path_lens(*path: str) -> LensFactory:
    """Build a lens factory for a fixed path into a document.

    Segments address model attributes or dict keys. Setting ``None`` on a
    dict key removes the key; on an attribute it stores ``None``.

    Example:
        >>> lens = path_lens("impls", "1.0.0")(data)
        >>> lens.get()
    """
    if not path:
        raise ValueError("path_lens requires at least one segment")

    def focus(document: Any) -> Lens[Any]:
        def get() -> Any:
            node = document
            for segment in path:
                node = _child(node, segment)
                if node is None:
                    return None
            return node

        def set(value: Any) -> None:  # noqa: A001
            parent = document
            for segment in path[:-1]:
                child = _child(parent, segment)
                if child is None:
                    if value is None:
                        return
                    child = {}
                    _assign(parent, segment, child)
                parent = child
            _assign(parent, path[-1], value)

        return Lens(get=get, set=set)

    return focus


def _child(node: Any, segment: str) -> Any:
    if isinstance(node, dict):
        return node.get(segment)
    if isinstance(node, BaseModel):
        return getattr(node, segment, None)
    raise TypeError(f"Cannot address {segment!r} in {type(node).__name__}")


def _assign(node: Any, segment: str, value: Any) -> None:
    if isinstance(node, dict):
        if value is None:
            node.pop(segment, None)
        else:
            node[segment] = value
        return
    if isinstance(node, BaseModel):
        setattr(node, segment, value)
        return
    raise TypeError(f"Cannot address {segment!r} in {type(node).__name__}")
