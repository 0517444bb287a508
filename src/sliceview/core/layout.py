from __future__ import annotations

import functools
import itertools
import operator
from enum import Enum
from typing import Sequence, Tuple, Union


class Layout(str, Enum):
    ROW_MAJOR = "row_major"
    COLUMN_MAJOR = "column_major"
    DYNAMIC = "dynamic"


_LAYOUT_ALIASES = {
    "row_major": Layout.ROW_MAJOR,
    "c": Layout.ROW_MAJOR,
    "column_major": Layout.COLUMN_MAJOR,
    "col_major": Layout.COLUMN_MAJOR,
    "f": Layout.COLUMN_MAJOR,
    "dynamic": Layout.DYNAMIC,
}


def coerce_layout(value: Union[str, Layout]) -> Layout:
    if isinstance(value, Layout):
        return value
    key = str(value).strip().lower().replace("-", "_")
    try:
        return _LAYOUT_ALIASES[key]
    except KeyError:
        raise ValueError(f"Unsupported layout: {value!r}") from None


def coerce_order(value: Union[str, Layout]) -> Layout:
    """Like :func:`coerce_layout` but only accepts an enumeration order."""
    layout = coerce_layout(value)
    if layout is Layout.DYNAMIC:
        raise ValueError("Traversal order must be row_major or column_major")
    return layout


@functools.lru_cache(maxsize=None)
def canonicalize_strides(shape: Tuple[int, ...], strides: Tuple[int, ...]) -> Tuple[int, ...]:
    return tuple(0 if s == 1 else st for s, st in zip(shape, strides))


@functools.lru_cache(maxsize=None)
def strides_for_shape(shape: Tuple[int, ...], layout: Layout = Layout.ROW_MAJOR) -> Tuple[int, ...]:
    if not shape:
        return ()
    if layout is Layout.COLUMN_MAJOR:
        strides = tuple(itertools.accumulate(shape[:-1], operator.mul, initial=1))
    else:
        strides = tuple(itertools.accumulate(reversed(shape[1:]), operator.mul, initial=1))[::-1]
    return canonicalize_strides(shape, strides)


def is_dense(shape: Sequence[int], strides: Sequence[int], order: Layout) -> bool:
    """True when ``strides`` walk a gap-free block in ``order``.

    Length-1 axes never constrain density, whatever their stride.
    """
    axes = range(len(shape))
    if order is Layout.ROW_MAJOR:
        axes = reversed(axes)
    expected = 1
    for axis in axes:
        length = shape[axis]
        if length == 1:
            continue
        if strides[axis] != expected:
            return False
        expected *= length
    return True


def classify_layout(
    shape: Sequence[int],
    strides: Sequence[int],
    source_layout: Layout,
    *,
    forced_dynamic: bool = False,
) -> Layout:
    if forced_dynamic or source_layout is Layout.DYNAMIC:
        return Layout.DYNAMIC
    if is_dense(shape, strides, source_layout):
        return source_layout
    return Layout.DYNAMIC


def infer_layout(shape: Sequence[int], strides: Sequence[int]) -> Layout:
    """Layout of a raw buffer description, preferring row-major when both fit."""
    if is_dense(shape, strides, Layout.ROW_MAJOR):
        return Layout.ROW_MAJOR
    if is_dense(shape, strides, Layout.COLUMN_MAJOR):
        return Layout.COLUMN_MAJOR
    return Layout.DYNAMIC
