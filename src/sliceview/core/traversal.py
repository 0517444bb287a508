from __future__ import annotations

import math
from typing import Any, Iterator, List, Sequence, Tuple, Union

import numpy as np

from .composer import BufferMap
from .exceptions import OutOfBoundsError
from .layout import Layout, coerce_order


class Stepper:
    """Cursor over a multi-index and its flat buffer offset.

    Each :meth:`step` advances the index in the requested enumeration order
    (the last axis moves fastest for row-major, the first for column-major)
    and updates the offset incrementally.
    """

    def __init__(
        self,
        shape: Sequence[int],
        buffer_map: BufferMap,
        order: Layout = Layout.ROW_MAJOR,
        reverse: bool = False,
    ):
        self.shape = tuple(int(n) for n in shape)
        self.order = order
        self.reverse = reverse
        self._map = buffer_map
        axes = range(len(self.shape))
        self._axes = tuple(reversed(axes)) if order is Layout.ROW_MAJOR else tuple(axes)
        self.done = any(n == 0 for n in self.shape)
        if reverse:
            self.index: List[int] = [max(n - 1, 0) for n in self.shape]
        else:
            self.index = [0] * len(self.shape)
        self.offset = buffer_map.offset_of(self.index) if not self.done else buffer_map.offset

    def step(self) -> None:
        contribution = self._map.contribution
        index = self.index
        for axis in self._axes:
            current = index[axis]
            if self.reverse:
                target = current - 1 if current > 0 else self.shape[axis] - 1
            else:
                target = current + 1 if current + 1 < self.shape[axis] else 0
            self.offset += contribution(axis, target) - contribution(axis, current)
            index[axis] = target
            wrapped = target > current if self.reverse else target < current
            if not wrapped and target != current:
                return
        self.done = True


class Traversal:
    """Lazy, restartable enumeration of an expression's elements.

    Every ``iter()`` starts a fresh :class:`Stepper`, so the same traversal can
    be consumed any number of times.
    """

    def __init__(
        self,
        expression: Any,
        order: Union[str, Layout] = Layout.ROW_MAJOR,
        reverse: bool = False,
    ):
        self._expression = expression
        self.order = coerce_order(order)
        self.reverse = bool(reverse)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._expression.shape)

    def _stepper(self) -> Stepper:
        return Stepper(self.shape, self._expression.buffer_map, self.order, self.reverse)

    def offsets(self) -> Iterator[int]:
        stepper = self._stepper()
        while not stepper.done:
            yield stepper.offset
            stepper.step()

    def indices(self) -> Iterator[Tuple[int, ...]]:
        stepper = self._stepper()
        while not stepper.done:
            yield tuple(stepper.index)
            stepper.step()

    def __iter__(self) -> Iterator[Any]:
        storage = self._expression.storage
        for offset in self.offsets():
            yield storage[offset]

    def __reversed__(self) -> "Traversal":
        return Traversal(self._expression, self.order, not self.reverse)

    def __len__(self) -> int:
        return math.prod(self.shape)

    def __getitem__(self, n: int) -> Any:
        size = len(self)
        position = n + size if n < 0 else n
        if not 0 <= position < size:
            raise OutOfBoundsError("Traversal position out of range", index=n, length=size)
        if self.reverse:
            position = size - 1 - position
        order = "C" if self.order is Layout.ROW_MAJOR else "F"
        index = np.unravel_index(position, self.shape, order=order)
        offset = self._expression.buffer_map.offset_of([int(k) for k in index])
        return self._expression.storage[offset]

    def __repr__(self) -> str:
        direction = "reverse" if self.reverse else "forward"
        return f"Traversal(shape={self.shape}, order={self.order.value}, {direction})"
