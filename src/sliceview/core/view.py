"""Zero-copy views over dense arrays and over other views.

A :class:`View` never copies its source. It keeps a reference to the
expression it was built on and a :class:`~sliceview.core.composer.Composition`
describing how its indices map onto that expression and onto the flat buffer
underneath. Writes through a view are writes to the source buffer.

Entry points:

* :func:`view` builds a view from an expression and a selector list.
* ``View.at`` / ``View[i, j]`` are bounds-checked and resolve through every
  nesting level; ``View.unchecked`` jumps straight to the composed offset and
  performs no validation at all.
* ``View.elements(order, reverse)`` enumerates elements lazily.
* ``View[...] = source`` / ``View.assign`` write a broadcastable source.
"""

from __future__ import annotations

import math
import numbers
import operator
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .array import DenseArray
from .assign import ExecutionConfig, assign
from .composer import BufferMap, Composition, Geometry, ViewKind, compose
from .exceptions import NotScalarError, OutOfBoundsError
from .layout import Layout
from .parser import parse_selectors
from .selectors import Selector, normalize_selectors
from .translator import resolve_index, translate_index, view_chain
from .traversal import Traversal


def as_expression(obj: Any) -> Any:
    """Return ``obj`` if it is already viewable, else adapt it with numpy."""
    if isinstance(obj, (View, DenseArray)):
        return obj
    return DenseArray.from_numpy(np.asarray(obj))


def is_element_key(key: Any) -> bool:
    items = key if isinstance(key, tuple) else (key,)
    return all(
        isinstance(item, (numbers.Integral, np.integer)) and not isinstance(item, (bool, np.bool_))
        for item in items
    )


def _expand_text(selectors: Iterable[Any]) -> List[Any]:
    expanded: List[Any] = []
    for sel in selectors:
        if isinstance(sel, str):
            expanded.extend(parse_selectors(sel))
        else:
            expanded.append(sel)
    return expanded


class View:
    def __init__(self, source: Any, selectors: Iterable[Any] = ()):
        self._source = source
        normalized = normalize_selectors(_expand_text(selectors), len(source.shape))
        self._composition: Composition = compose(
            source.shape,
            source.buffer_map,
            source.layout,
            normalized,
        )

    # Geometry ----------------------------------------------------------------
    @property
    def source(self) -> Any:
        return self._source

    @property
    def root(self) -> DenseArray:
        return view_chain(self)[-1]

    @property
    def depth(self) -> int:
        """Number of views between this one and its root array, itself included."""
        return len(view_chain(self)) - 1

    @property
    def selectors(self) -> Tuple[Selector, ...]:
        return self._composition.selectors

    @property
    def composition(self) -> Composition:
        return self._composition

    @property
    def geometry(self) -> Geometry:
        return self._composition.geometry

    @property
    def buffer_map(self) -> BufferMap:
        return self._composition.buffer_map

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._composition.shape

    @property
    def ndim(self) -> int:
        return len(self.shape)

    dimension = ndim

    @property
    def size(self) -> int:
        return math.prod(self.shape)

    @property
    def strides(self) -> Optional[Tuple[int, ...]]:
        """Element strides, or ``None`` when an axis is list-indexed."""
        if not self.is_affine:
            return None
        return self.buffer_map.strides

    @property
    def data_offset(self) -> int:
        return self.buffer_map.offset

    @property
    def layout(self) -> Layout:
        return self._composition.layout

    @property
    def kind(self) -> ViewKind:
        return self._composition.kind

    @property
    def is_trivial(self) -> bool:
        return self.kind is ViewKind.TRIVIAL

    @property
    def is_affine(self) -> bool:
        return self.kind is not ViewKind.LIST_INDEXED

    @property
    def storage(self) -> np.ndarray:
        return self._source.storage

    @property
    def dtype(self) -> np.dtype:
        return self.storage.dtype

    def __len__(self) -> int:
        if not self.shape:
            raise TypeError("len() of a 0-d view")
        return self.shape[0]

    # Element access ----------------------------------------------------------
    def _check_index(self, index: Sequence[Any]) -> Tuple[int, ...]:
        shape = self.shape
        if len(index) > len(shape):
            raise OutOfBoundsError(
                f"Too many indices for view: {len(index)} given, view has {len(shape)} dimensions"
            )
        resolved: List[int] = []
        for axis, length in enumerate(shape):
            value = operator.index(index[axis]) if axis < len(index) else 0
            position = value + length if value < 0 else value
            if not 0 <= position < length:
                raise OutOfBoundsError("Index out of range", axis=axis, index=value, length=length)
            resolved.append(position)
        return tuple(resolved)

    def translate_index(self, index: Sequence[int]) -> Tuple[int, ...]:
        """Index into :attr:`source` addressed by ``index`` into this view."""
        return translate_index(self.geometry, self._check_index(index))

    def base_index(self, index: Sequence[int]) -> Tuple[int, ...]:
        """Index into :attr:`root` addressed by ``index`` into this view."""
        _, root_index = resolve_index(self, self._check_index(index))
        return root_index

    def element(self, index: Sequence[Any]) -> Any:
        root, root_index = resolve_index(self, self._check_index(tuple(index)))
        return root.element(root_index)

    def set_element(self, index: Sequence[Any], value: Any) -> None:
        root, root_index = resolve_index(self, self._check_index(tuple(index)))
        root.set_element(root_index, value)

    def at(self, *index: Any) -> Any:
        return self.element(index)

    def unchecked(self, *index: int) -> Any:
        """Element at ``index`` without any validation.

        ``index`` must hold exactly :attr:`ndim` in-range, non-negative
        positions; anything else reads an arbitrary buffer location or fails
        in an unspecified way.
        """
        return self.storage[self.buffer_map.offset_of(index)]

    def set_unchecked(self, index: Sequence[int], value: Any) -> None:
        self.storage[self.buffer_map.offset_of(index)] = value

    def __getitem__(self, key: Any) -> Any:
        items = key if isinstance(key, tuple) else (key,)
        if is_element_key(items):
            return self.element(items)
        return view(self, *items)

    def __setitem__(self, key: Any, value: Any) -> None:
        items = key if isinstance(key, tuple) else (key,)
        if key is Ellipsis:
            self.assign(value)
        elif is_element_key(items):
            self.set_element(items, value)
        else:
            view(self, *items).assign(value)

    # Traversal ---------------------------------------------------------------
    def elements(
        self,
        order: Union[str, Layout] = Layout.ROW_MAJOR,
        reverse: bool = False,
    ) -> Traversal:
        return Traversal(self, order, reverse)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.elements())

    def __reversed__(self) -> Iterator[Any]:
        return iter(self.elements(reverse=True))

    def offsets(self) -> np.ndarray:
        """Flat buffer offset of every element, shaped like the view."""
        return self.buffer_map.offset_array(self.shape)

    # Materialisation ---------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """Row-major copy of the viewed elements."""
        return np.asarray(self.storage[self.offsets()])

    def __array__(self, dtype: Any = None, copy: Optional[bool] = None) -> np.ndarray:
        arr = self.to_numpy()
        if dtype is not None:
            arr = arr.astype(dtype, copy=False)
        return arr

    def materialize(self, layout: Union[str, Layout] = Layout.ROW_MAJOR) -> DenseArray:
        return DenseArray(self.to_numpy(), layout=layout)

    # Assignment --------------------------------------------------------------
    def assign(
        self,
        source: Any,
        *,
        alias_safe: Optional[bool] = None,
        config: Optional[ExecutionConfig] = None,
    ) -> "View":
        assign(self, source, alias_safe=alias_safe, config=config)
        return self

    def fill(self, value: Any) -> "View":
        assign(self, value)
        return self

    # Scalar conversion -------------------------------------------------------
    def _require_trivial(self) -> None:
        if not self.is_trivial:
            raise NotScalarError(f"Only 0-d views convert to scalars; this view has shape {self.shape}")

    def item(self) -> Any:
        self._require_trivial()
        return self.storage[self.data_offset].item()

    @property
    def value(self) -> Any:
        self._require_trivial()
        return self.storage[self.data_offset]

    @value.setter
    def value(self, new_value: Any) -> None:
        self._require_trivial()
        self.storage[self.data_offset] = new_value

    def __float__(self) -> float:
        return float(self.value)

    def __int__(self) -> int:
        return int(self.value)

    def __complex__(self) -> complex:
        return complex(self.value)

    def __index__(self) -> int:
        return operator.index(self.value)

    def __bool__(self) -> bool:
        return bool(self.value)

    def __repr__(self) -> str:
        return (
            f"View(shape={self.shape}, layout={self.layout.value}, "
            f"kind={self.kind.value}, offset={self.data_offset})"
        )


def view(expression: Any, *selectors: Any) -> View:
    """Build a view of ``expression``.

    ``selectors`` are :class:`~sliceview.core.selectors.Selector` instances or
    numpy-style shorthands (ints, slices, ``None``, ``...``, int lists) or
    selector strings such as ``"1, 1:4, newaxis"``. Missing trailing
    selectors select whole axes. The returned view keeps ``expression`` alive.
    """
    return View(as_expression(expression), selectors)
