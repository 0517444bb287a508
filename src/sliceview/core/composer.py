"""Shape/stride/offset composition.

:func:`compose` folds a normalized selector list over the geometry of a source
expression. The source geometry is described by a :class:`BufferMap` (flat
buffer offset plus one stride or offset table per axis); composing over a view
therefore re-derives everything from the inner view's already-composed map,
whatever the nesting depth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .layout import Layout, canonicalize_strides, classify_layout
from .selectors import All, Index, NewAxis, Range, Selector

logger = logging.getLogger(__name__)


class ViewKind(str, Enum):
    TRIVIAL = "trivial"
    AFFINE_CONTIGUOUS = "affine_contiguous"
    AFFINE_STRIDED = "affine_strided"
    LIST_INDEXED = "list_indexed"


@dataclass(frozen=True)
class AxisMap:
    """How one result axis reads its source: ``start + k * step`` or ``positions[k]``."""

    source: Optional[int]  # None for an inserted (NewAxis) axis
    length: int
    start: int = 0
    step: int = 1
    positions: Optional[Tuple[int, ...]] = None

    def position(self, k: int) -> int:
        if self.positions is not None:
            return self.positions[k]
        return self.start + k * self.step

    @property
    def is_inserted(self) -> bool:
        return self.source is None


@dataclass(frozen=True)
class Geometry:
    """Index-space mapping of a view onto its immediate source."""

    source_ndim: int
    shape: Tuple[int, ...]
    axes: Tuple[AxisMap, ...]
    fixed: Tuple[Tuple[int, int], ...]  # (source axis, position) collapsed by Index

    @property
    def ndim(self) -> int:
        return len(self.shape)


@dataclass(frozen=True)
class BufferMap:
    """Flat-buffer addressing: ``offset + sum(contribution(axis, index[axis]))``.

    Affine axes contribute ``k * strides[axis]``; list-indexed axes contribute
    ``tables[axis][k]`` and carry a placeholder stride of 0.
    """

    offset: int
    strides: Tuple[int, ...]
    tables: Tuple[Optional[Tuple[int, ...]], ...]

    @classmethod
    def affine(cls, offset: int, strides: Sequence[int]) -> "BufferMap":
        strides = tuple(int(s) for s in strides)
        return cls(offset=int(offset), strides=strides, tables=(None,) * len(strides))

    @property
    def ndim(self) -> int:
        return len(self.strides)

    @property
    def is_affine(self) -> bool:
        return all(table is None for table in self.tables)

    def contribution(self, axis: int, k: int) -> int:
        table = self.tables[axis]
        if table is not None:
            return table[k]
        return k * self.strides[axis]

    def offset_of(self, index: Sequence[int]) -> int:
        offset = self.offset
        for axis, k in enumerate(index):
            offset += self.contribution(axis, k)
        return offset

    def offset_array(self, shape: Sequence[int]) -> np.ndarray:
        """All buffer offsets of a view of ``shape``, as an intp array of that shape."""
        ndim = len(shape)
        result = np.full(tuple(shape), self.offset, dtype=np.intp)
        for axis, length in enumerate(shape):
            table = self.tables[axis]
            if table is not None:
                contrib = np.asarray(table, dtype=np.intp)
            else:
                contrib = np.arange(length, dtype=np.intp) * self.strides[axis]
            result += contrib.reshape((1,) * axis + (length,) + (1,) * (ndim - axis - 1))
        return result


@dataclass(frozen=True)
class Composition:
    selectors: Tuple[Selector, ...]
    geometry: Geometry
    buffer_map: BufferMap
    layout: Layout
    kind: ViewKind

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.geometry.shape


def classify_kind(ndim: int, buffer_map: BufferMap, layout: Layout) -> ViewKind:
    if ndim == 0:
        return ViewKind.TRIVIAL
    if not buffer_map.is_affine:
        return ViewKind.LIST_INDEXED
    if layout is not Layout.DYNAMIC:
        return ViewKind.AFFINE_CONTIGUOUS
    return ViewKind.AFFINE_STRIDED


def compose(
    source_shape: Sequence[int],
    source_map: BufferMap,
    source_layout: Layout,
    selectors: Sequence[Selector],
) -> Composition:
    """Fold normalized ``selectors`` over a source geometry.

    ``selectors`` must consume exactly ``len(source_shape)`` axes (see
    :func:`~sliceview.core.selectors.normalize_selectors`).
    """
    offset = source_map.offset
    axes: List[AxisMap] = []
    fixed: List[Tuple[int, int]] = []
    strides: List[int] = []
    tables: List[Optional[Tuple[int, ...]]] = []
    forced_dynamic = False

    source_axis = 0
    for sel in selectors:
        if isinstance(sel, NewAxis):
            axes.append(AxisMap(source=None, length=1))
            strides.append(0)
            tables.append(None)
            continue

        length = int(source_shape[source_axis])
        stride = source_map.strides[source_axis]
        table = source_map.tables[source_axis]

        if isinstance(sel, Index):
            position = sel.resolve(length, source_axis)
            fixed.append((source_axis, position))
            offset += source_map.contribution(source_axis, position)
        elif isinstance(sel, All):
            axes.append(AxisMap(source=source_axis, length=length))
            strides.append(stride)
            tables.append(table)
        elif isinstance(sel, Range):
            start, step, count = sel.resolve(length, source_axis)
            axes.append(AxisMap(source=source_axis, length=count, start=start, step=step))
            if step != 1:
                forced_dynamic = True
            if table is None:
                offset += start * stride
                strides.append(stride * step)
                tables.append(None)
            else:
                strides.append(0)
                tables.append(tuple(table[start + k * step] for k in range(count)))
        else:
            positions = sel.resolve(length, source_axis)
            axes.append(AxisMap(source=source_axis, length=len(positions), positions=positions))
            forced_dynamic = True
            strides.append(0)
            if table is None:
                tables.append(tuple(p * stride for p in positions))
            else:
                tables.append(tuple(table[p] for p in positions))
        source_axis += 1

    shape = tuple(axis.length for axis in axes)
    buffer_map = BufferMap(
        offset=offset,
        strides=canonicalize_strides(shape, tuple(strides)),
        tables=tuple(tables),
    )
    layout = classify_layout(
        shape,
        buffer_map.strides,
        source_layout,
        forced_dynamic=forced_dynamic or not buffer_map.is_affine,
    )
    kind = classify_kind(len(shape), buffer_map, layout)
    geometry = Geometry(
        source_ndim=len(source_shape),
        shape=shape,
        axes=tuple(axes),
        fixed=tuple(fixed),
    )
    logger.debug(
        "composed view shape=%s strides=%s offset=%d layout=%s kind=%s",
        shape,
        buffer_map.strides,
        offset,
        layout.value,
        kind.value,
    )
    return Composition(
        selectors=tuple(selectors),
        geometry=geometry,
        buffer_map=buffer_map,
        layout=layout,
        kind=kind,
    )
