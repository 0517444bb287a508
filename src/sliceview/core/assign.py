"""Assignment into views and arrays.

Assignment validates broadcast compatibility before touching the target, so
a failed assignment never leaves a partial write behind. By default the
source is materialised first, which makes assigning an expression into an
overlapping region of the same buffer safe. ``alias_safe=False`` (or
:func:`noalias`) skips that copy; the caller then asserts that source and
target do not overlap, and overlapping operands give unspecified results.

Targets and sources are duck-typed: anything exposing ``shape``,
``storage``, ``buffer_map``, ``kind`` and ``dtype`` (a
:class:`~sliceview.core.array.DenseArray` or a
:class:`~sliceview.core.view.View`) can take part.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from .composer import ViewKind
from .exceptions import BroadcastError
from .layout import Layout, coerce_order
from .traversal import Stepper

logger = logging.getLogger(__name__)

_BATCHABLE_KINDS = {ViewKind.AFFINE_CONTIGUOUS, ViewKind.TRIVIAL}
_NUMERIC_DTYPE_KINDS = set("biufc")


@dataclass
class ExecutionConfig:
    """
    Switches for assignment and fast-path selection.

    * ``order`` is the enumeration order used when streaming a source into a
      target element by element (``"row_major"`` or ``"column_major"``).
    * ``alias_safe`` is the default aliasing policy; per-call
      ``alias_safe=`` arguments override it.
    * ``batch_width`` is the byte width of the batched execution unit; a
      dtype is batch compatible when its itemsize divides it.
    * ``contiguous_fast_path`` allows contiguous targets to be written
      through a reshaped window of the flat buffer.
    """

    order: str = "row_major"
    alias_safe: bool = True
    batch_width: int = 32
    contiguous_fast_path: bool = True

    def normalized(self) -> "ExecutionConfig":
        order = coerce_order(self.order).value
        batch_width = int(self.batch_width)
        if batch_width <= 0:
            raise ValueError("batch_width must be positive")
        return replace(
            self,
            order=order,
            alias_safe=bool(self.alias_safe),
            batch_width=batch_width,
            contiguous_fast_path=bool(self.contiguous_fast_path),
        )


def _shape_of(obj: Any) -> Tuple[int, ...]:
    shape = getattr(obj, "shape", None)
    if shape is None:
        shape = np.shape(obj)
    return tuple(int(n) for n in shape)


def broadcastable(a: Sequence[int], b: Sequence[int]) -> bool:
    """True when shapes ``a`` and ``b`` broadcast against each other."""
    try:
        np.broadcast_shapes(tuple(a), tuple(b))
    except ValueError:
        return False
    return True


def assert_compatible_shape(source_shape: Sequence[int], target_shape: Sequence[int]) -> None:
    """Raise :class:`BroadcastError` unless ``source_shape`` stretches onto ``target_shape``."""
    source_shape = tuple(source_shape)
    target_shape = tuple(target_shape)
    try:
        result = np.broadcast_shapes(source_shape, target_shape)
    except ValueError:
        result = None
    if result != target_shape:
        raise BroadcastError(
            "Source shape does not broadcast to target",
            source_shape=source_shape,
            target_shape=target_shape,
        )


def is_batch_eligible(
    target: Any,
    source_dtype: Any = None,
    config: Optional[ExecutionConfig] = None,
) -> bool:
    """Whether ``target`` qualifies for contiguous batched execution.

    Only the composed kind of ``target`` and the element types are
    consulted; no element is read.
    """
    cfg = (config or ExecutionConfig()).normalized()
    if target.kind not in _BATCHABLE_KINDS:
        return False
    dtype = np.dtype(target.dtype)
    if dtype.kind not in _NUMERIC_DTYPE_KINDS:
        return False
    if source_dtype is not None and np.dtype(source_dtype) != dtype:
        return False
    return cfg.batch_width % dtype.itemsize == 0


def _contiguous_window(target: Any) -> np.ndarray:
    size = int(np.prod(target.shape, dtype=np.int64))
    offset = target.buffer_map.offset
    window = target.storage[offset : offset + size]
    order = "F" if getattr(target, "layout", Layout.ROW_MAJOR) is Layout.COLUMN_MAJOR else "C"
    return window.reshape(target.shape, order=order)


def _write(target: Any, values: Any, cfg: ExecutionConfig) -> str:
    values = np.broadcast_to(values, target.shape)
    if cfg.contiguous_fast_path and target.kind in _BATCHABLE_KINDS:
        _contiguous_window(target)[...] = values
        return "contiguous"
    target.storage[target.buffer_map.offset_array(target.shape)] = values
    return "gather"


def _stream(target: Any, source: Any, cfg: ExecutionConfig) -> str:
    order = coerce_order(cfg.order)
    src = Stepper(source.shape, source.buffer_map, order)
    dst = Stepper(target.shape, target.buffer_map, order)
    src_storage = source.storage
    dst_storage = target.storage
    while not dst.done:
        dst_storage[dst.offset] = src_storage[src.offset]
        dst.step()
        src.step()
    return "stream"


def assign(
    target: Any,
    source: Any,
    *,
    alias_safe: Optional[bool] = None,
    config: Optional[ExecutionConfig] = None,
) -> Any:
    """Write ``source`` (broadcast to ``target.shape``) into ``target``."""
    cfg = (config or ExecutionConfig()).normalized()
    safe = cfg.alias_safe if alias_safe is None else bool(alias_safe)
    source_shape = _shape_of(source)
    assert_compatible_shape(source_shape, target.shape)
    if int(np.prod(target.shape, dtype=np.int64)) == 0:
        return target

    if safe:
        strategy = _write(target, np.array(source, copy=True), cfg)
    elif hasattr(source, "buffer_map") and source_shape == tuple(target.shape):
        strategy = _stream(target, source, cfg)
    else:
        strategy = _write(target, np.asarray(source), cfg)
    logger.debug(
        "assigned %s into %s target of shape %s (strategy=%s, alias_safe=%s)",
        source_shape,
        target.kind.value,
        tuple(target.shape),
        strategy,
        safe,
    )
    return target


class NoAlias:
    """Assignment proxy asserting that the source does not overlap ``target``."""

    def __init__(self, target: Any, config: Optional[ExecutionConfig] = None):
        self.target = target
        self.config = config

    def assign(self, source: Any) -> Any:
        return assign(self.target, source, alias_safe=False, config=self.config)

    def fill(self, value: Any) -> Any:
        return self.assign(value)

    def __setitem__(self, key: Any, value: Any) -> None:
        if key is not Ellipsis:
            raise TypeError("noalias targets only support whole assignment: target[...] = source")
        self.assign(value)


def noalias(target: Any, config: Optional[ExecutionConfig] = None) -> NoAlias:
    return NoAlias(target, config)
