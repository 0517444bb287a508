"""Per-axis selectors and the positional queries shared by composition and translation.

A selector describes how one axis of a view is derived from its source:

* :class:`Index` collapses a source axis to one position.
* :class:`Range` keeps a strided run of positions.
* :class:`All` keeps a source axis unchanged.
* :class:`NewAxis` inserts a length-1 axis that consumes no source axis.
* :class:`Keep` / :class:`Drop` keep an explicit list of positions (or its
  complement); they are not expressible as a single stride.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import InvalidSelectorError, OutOfBoundsError


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, (bool, np.bool_)):
        raise InvalidSelectorError(f"{what} must be an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidSelectorError(f"{what} must be an integer, got {value!r}") from None


def _resolve_position(value: int, length: int, axis: Optional[int]) -> int:
    position = value + length if value < 0 else value
    if not 0 <= position < length:
        raise OutOfBoundsError("Selector position out of range", axis=axis, index=value, length=length)
    return position


@dataclass(frozen=True)
class Selector:
    consumes_axis: ClassVar[bool] = True
    contributes_axis: ClassVar[bool] = True
    is_affine: ClassVar[bool] = True


@dataclass(frozen=True)
class Index(Selector):
    value: int

    contributes_axis: ClassVar[bool] = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _as_int(self.value, "Index value"))

    def resolve(self, length: int, axis: Optional[int] = None) -> int:
        return _resolve_position(self.value, length, axis)


@dataclass(frozen=True)
class Range(Selector):
    """Positions ``start, start + step, ...`` up to (excluding) ``stop``.

    ``None`` bounds are open: they run to the natural end given the sign of
    ``step``. Explicit bounds may be negative (counted from the end) and must
    lie within ``[-length, length]``.
    """

    start: Optional[int] = None
    stop: Optional[int] = None
    step: Optional[int] = 1

    def __post_init__(self) -> None:
        if self.start is not None:
            object.__setattr__(self, "start", _as_int(self.start, "Range start"))
        if self.stop is not None:
            object.__setattr__(self, "stop", _as_int(self.stop, "Range stop"))
        step = 1 if self.step is None else _as_int(self.step, "Range step")
        object.__setattr__(self, "step", step)

    def resolve(self, length: int, axis: Optional[int] = None) -> Tuple[int, int, int]:
        """Return ``(start, step, count)`` for a source axis of ``length``."""
        if self.step == 0:
            raise InvalidSelectorError("Range step must be non-zero")
        for bound in (self.start, self.stop):
            if bound is not None and not -length <= bound <= length:
                raise OutOfBoundsError("Range bound out of range", axis=axis, index=bound, length=length)
        start, stop, step = slice(self.start, self.stop, self.step).indices(length)
        return start, step, len(range(start, stop, step))


@dataclass(frozen=True)
class All(Selector):
    pass


@dataclass(frozen=True)
class NewAxis(Selector):
    consumes_axis: ClassVar[bool] = False


def _collect_indices(indices: Tuple[Any, ...], what: str) -> Tuple[int, ...]:
    if len(indices) == 1 and isinstance(indices[0], (list, tuple, range, np.ndarray)):
        indices = tuple(np.asarray(indices[0]).reshape(-1).tolist())
    return tuple(_as_int(value, f"{what} index") for value in indices)


@dataclass(frozen=True, init=False)
class Keep(Selector):
    indices: Tuple[int, ...]

    is_affine: ClassVar[bool] = False

    def __init__(self, *indices: Any):
        object.__setattr__(self, "indices", _collect_indices(indices, "Keep"))

    def resolve(self, length: int, axis: Optional[int] = None) -> Tuple[int, ...]:
        return tuple(_resolve_position(value, length, axis) for value in self.indices)


@dataclass(frozen=True, init=False)
class Drop(Selector):
    indices: Tuple[int, ...]

    is_affine: ClassVar[bool] = False

    def __init__(self, *indices: Any):
        object.__setattr__(self, "indices", _collect_indices(indices, "Drop"))

    def resolve(self, length: int, axis: Optional[int] = None) -> Tuple[int, ...]:
        dropped = {_resolve_position(value, length, axis) for value in self.indices}
        return tuple(position for position in range(length) if position not in dropped)


ALL = All()
NEWAXIS = NewAxis()


def coerce_selector(obj: Any) -> Any:
    """Map numpy-style index objects onto selectors.

    ``Ellipsis`` is passed through untouched; :func:`normalize_selectors`
    expands it.
    """
    if isinstance(obj, Selector) or obj is Ellipsis:
        return obj
    if obj is None:
        return NEWAXIS
    if isinstance(obj, slice):
        if obj.start is None and obj.stop is None and obj.step is None:
            return ALL
        return Range(obj.start, obj.stop, obj.step)
    if isinstance(obj, (list, tuple, range, np.ndarray)):
        return Keep(obj)
    return Index(_as_int(obj, "Selector"))


def normalize_selectors(selectors: Iterable[Any], ndim: int) -> Tuple[Selector, ...]:
    """Coerce ``selectors`` and pad them so they consume exactly ``ndim`` axes."""
    items: List[Any] = [coerce_selector(obj) for obj in selectors]
    ellipses = [pos for pos, item in enumerate(items) if item is Ellipsis]
    if len(ellipses) > 1:
        raise InvalidSelectorError("A selector list may contain at most one ellipsis")
    consumed = sum(1 for item in items if item is not Ellipsis and item.consumes_axis)
    if consumed > ndim:
        raise InvalidSelectorError(
            f"Too many selectors: {consumed} consume an axis but the source has {ndim} dimensions"
        )
    fill = [ALL] * (ndim - consumed)
    if ellipses:
        pos = ellipses[0]
        items[pos : pos + 1] = fill
    else:
        items.extend(fill)
    return tuple(items)


def integral_count(selectors: Sequence[Selector]) -> int:
    return sum(1 for sel in selectors if isinstance(sel, Index))


def integral_count_before(selectors: Sequence[Selector], position: int) -> int:
    return integral_count(selectors[:position])


def newaxis_count(selectors: Sequence[Selector]) -> int:
    return sum(1 for sel in selectors if isinstance(sel, NewAxis))


def newaxis_count_before(selectors: Sequence[Selector], position: int) -> int:
    return newaxis_count(selectors[:position])


def integral_skip(selectors: Sequence[Selector], result_axis: int) -> int:
    """Position in ``selectors`` of the selector producing ``result_axis``.

    Positions past the end refer to the implicit trailing ``All`` selectors.
    """
    remaining = result_axis
    for position, sel in enumerate(selectors):
        if sel.contributes_axis:
            if remaining == 0:
                return position
            remaining -= 1
    return len(selectors) + remaining


def base_axis_for(selectors: Sequence[Selector], result_axis: int) -> Optional[int]:
    """Source axis read by ``result_axis``, or ``None`` for an inserted axis."""
    position = integral_skip(selectors, result_axis)
    if position < len(selectors) and isinstance(selectors[position], NewAxis):
        return None
    return position - newaxis_count_before(selectors, position)


def result_ndim(selectors: Sequence[Selector], ndim: int) -> int:
    consumed = sum(1 for sel in selectors if sel.consumes_axis)
    contributed = sum(1 for sel in selectors if sel.contributes_axis)
    return contributed + max(ndim - consumed, 0)
