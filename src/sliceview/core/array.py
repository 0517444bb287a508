"""Dense array container adapter.

:class:`DenseArray` owns (or borrows) a flat 1-D numpy buffer and describes
it with a shape, element strides, an offset and a layout tag. It is the root
every :class:`~sliceview.core.view.View` chain resolves against.
"""

from __future__ import annotations

import math
import operator
from typing import Any, Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from .assign import assign
from .composer import BufferMap, ViewKind, classify_kind
from .exceptions import OutOfBoundsError
from .layout import Layout, canonicalize_strides, coerce_layout, infer_layout, is_dense, strides_for_shape
from .traversal import Traversal


class DenseArray:
    def __init__(
        self,
        data: Any,
        *,
        dtype: Any = None,
        layout: Union[str, Layout] = Layout.ROW_MAJOR,
    ):
        layout = coerce_layout(layout)
        if layout is Layout.DYNAMIC:
            raise ValueError("A new DenseArray must be row_major or column_major")
        arr = np.asarray(data, dtype=dtype)
        order = "C" if layout is Layout.ROW_MAJOR else "F"
        storage = np.array(arr.ravel(order=order), copy=True)
        self._init(storage, arr.shape, strides_for_shape(tuple(arr.shape), layout), 0, layout)

    def _init(
        self,
        storage: np.ndarray,
        shape: Sequence[int],
        strides: Sequence[int],
        offset: int,
        layout: Layout,
    ) -> None:
        self._storage = storage
        self._shape = tuple(int(n) for n in shape)
        self._strides = canonicalize_strides(self._shape, tuple(int(s) for s in strides))
        self._offset = int(offset)
        self._layout = layout
        self._buffer_map = BufferMap.affine(self._offset, self._strides)

    @classmethod
    def from_buffer(
        cls,
        storage: np.ndarray,
        shape: Sequence[int],
        strides: Optional[Sequence[int]] = None,
        offset: int = 0,
        layout: Union[str, Layout, None] = None,
    ) -> "DenseArray":
        """Describe an existing flat buffer without copying it."""
        storage = np.asarray(storage)
        if storage.ndim != 1:
            raise ValueError("DenseArray storage must be one-dimensional")
        shape = tuple(int(n) for n in shape)
        if strides is None:
            strides = strides_for_shape(shape, coerce_layout(layout or Layout.ROW_MAJOR))
        strides = tuple(int(s) for s in strides)
        if len(strides) != len(shape):
            raise ValueError(f"strides {strides} do not match shape {shape}")
        if layout is None:
            layout = infer_layout(shape, strides)
        else:
            layout = coerce_layout(layout)
            if layout is not Layout.DYNAMIC and not is_dense(shape, strides, layout):
                raise ValueError(f"strides {strides} are not {layout.value} for shape {shape}")
        obj = cls.__new__(cls)
        obj._init(storage, shape, strides, offset, layout)
        return obj

    @classmethod
    def from_numpy(cls, arr: Any) -> "DenseArray":
        """Adapt a numpy array, sharing its memory when the strides allow it.

        Arrays with negative or misaligned strides (and empty arrays) are
        copied into a fresh row-major buffer.
        """
        arr = np.asarray(arr)
        itemsize = arr.itemsize
        shareable = arr.size > 0 and all(s >= 0 and s % itemsize == 0 for s in arr.strides)
        if not shareable:
            return cls(arr)
        strides = tuple(s // itemsize for s in arr.strides)
        extent = 1 + sum((n - 1) * s for n, s in zip(arr.shape, strides))
        storage = np.lib.stride_tricks.as_strided(arr, shape=(extent,), strides=(itemsize,))
        return cls.from_buffer(storage, arr.shape, strides, 0, infer_layout(arr.shape, strides))

    # Geometry ----------------------------------------------------------------
    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    @property
    def strides(self) -> Tuple[int, ...]:
        return self._strides

    @property
    def data_offset(self) -> int:
        return self._offset

    @property
    def layout(self) -> Layout:
        return self._layout

    @property
    def storage(self) -> np.ndarray:
        return self._storage

    @property
    def buffer_map(self) -> BufferMap:
        return self._buffer_map

    @property
    def kind(self) -> ViewKind:
        return classify_kind(self.ndim, self._buffer_map, self._layout)

    @property
    def dtype(self) -> np.dtype:
        return self._storage.dtype

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def size(self) -> int:
        return math.prod(self._shape)

    def __len__(self) -> int:
        if not self._shape:
            raise TypeError("len() of a 0-d array")
        return self._shape[0]

    # Element access ----------------------------------------------------------
    def _flat_offset(self, index: Sequence[int]) -> int:
        if len(index) != self.ndim:
            raise OutOfBoundsError(
                f"Expected {self.ndim} indices, got {len(index)}",
                length=self.ndim,
            )
        offset = self._offset
        for axis, (value, length, stride) in enumerate(zip(index, self._shape, self._strides)):
            value = operator.index(value)
            position = value + length if value < 0 else value
            if not 0 <= position < length:
                raise OutOfBoundsError("Index out of range", axis=axis, index=value, length=length)
            offset += position * stride
        return offset

    def element(self, index: Sequence[int]) -> Any:
        return self._storage[self._flat_offset(tuple(index))]

    def set_element(self, index: Sequence[int], value: Any) -> None:
        self._storage[self._flat_offset(tuple(index))] = value

    def at(self, *index: int) -> Any:
        return self.element(index)

    def __getitem__(self, key: Any) -> Any:
        from .view import is_element_key, view

        items = key if isinstance(key, tuple) else (key,)
        if is_element_key(items):
            return self.element(items)
        return view(self, *items)

    def __setitem__(self, key: Any, value: Any) -> None:
        from .view import is_element_key, view

        items = key if isinstance(key, tuple) else (key,)
        if key is Ellipsis:
            assign(self, value)
        elif is_element_key(items):
            self.set_element(items, value)
        else:
            view(self, *items).assign(value)

    def fill(self, value: Any) -> None:
        assign(self, value)

    # Traversal / interop -----------------------------------------------------
    def elements(self, order: Union[str, Layout] = Layout.ROW_MAJOR, reverse: bool = False) -> Traversal:
        return Traversal(self, order, reverse)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.elements())

    def to_numpy(self) -> np.ndarray:
        """numpy view of the same memory (a gathered copy for negative strides)."""
        if any(s < 0 for s in self._strides):
            return np.asarray(self._storage[self._buffer_map.offset_array(self._shape)])
        itemsize = self._storage.itemsize
        return np.lib.stride_tricks.as_strided(
            self._storage[self._offset :],
            shape=self._shape,
            strides=tuple(s * itemsize for s in self._strides),
        )

    def __array__(self, dtype: Any = None, copy: Optional[bool] = None) -> np.ndarray:
        arr = self.to_numpy()
        if dtype is not None:
            arr = arr.astype(dtype, copy=False)
        if copy:
            arr = np.array(arr, copy=True)
        return arr

    def __repr__(self) -> str:
        return (
            f"DenseArray(shape={self._shape}, dtype={self.dtype}, "
            f"layout={self._layout.value}, strides={self._strides})"
        )
