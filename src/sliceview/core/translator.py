"""Index translation for views built on top of other views.

A view's :class:`~sliceview.core.composer.Geometry` says, for every source
axis, either which fixed position an ``Index`` selector collapsed it to or
which result axis reads it (and how). Translating an index tuple therefore
needs only the geometry of one level; chaining levels resolves an index
against the root array for any nesting depth.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from .composer import Geometry


def translate_index(geometry: Geometry, index: Sequence[int]) -> Tuple[int, ...]:
    """Map an index into a view onto an index into its immediate source.

    Collapsed source axes receive their fixed position. Entries for inserted
    (NewAxis) axes are ignored: only 0 is in range there and it maps to no
    source axis.
    """
    source: List[int] = [0] * geometry.source_ndim
    for axis, position in geometry.fixed:
        source[axis] = position
    for axis_map, k in zip(geometry.axes, index):
        if axis_map.source is not None:
            source[axis_map.source] = axis_map.position(int(k))
    return tuple(source)


def view_chain(expression: Any) -> List[Any]:
    """``expression`` followed by each source it was built on, root last."""
    chain = [expression]
    while getattr(chain[-1], "geometry", None) is not None:
        chain.append(chain[-1].source)
    return chain


def resolve_index(expression: Any, index: Sequence[int]) -> Tuple[Any, Tuple[int, ...]]:
    """Translate ``index`` down to the root array of ``expression``.

    Returns ``(root, root_index)``. ``expression`` may be the root itself, in
    which case ``index`` is returned unchanged.
    """
    current = expression
    resolved = tuple(int(k) for k in index)
    while getattr(current, "geometry", None) is not None:
        resolved = translate_index(current.geometry, resolved)
        current = current.source
    return current, resolved
