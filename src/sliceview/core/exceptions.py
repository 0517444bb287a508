from __future__ import annotations

from typing import Optional, Sequence


class SliceViewError(Exception):
    """Base class for sliceview-specific exceptions."""


class OutOfBoundsError(SliceViewError, IndexError):
    def __init__(
        self,
        message: str,
        *,
        axis: Optional[int] = None,
        index: Optional[int] = None,
        length: Optional[int] = None,
    ):
        detail = _format_axis(axis, index, length)
        super().__init__(f"{message}{detail}")
        self.axis = axis
        self.index = index
        self.length = length


class InvalidSelectorError(SliceViewError, ValueError):
    pass


class SelectorSyntaxError(InvalidSelectorError):
    def __init__(
        self,
        message: str,
        *,
        column: Optional[int] = None,
        text: Optional[str] = None,
    ):
        detail = _format_location(column, text)
        super().__init__(f"{message}{detail}")
        self.column = column
        self.text = text


class BroadcastError(SliceViewError, ValueError):
    def __init__(
        self,
        message: str,
        *,
        source_shape: Optional[Sequence[int]] = None,
        target_shape: Optional[Sequence[int]] = None,
    ):
        if source_shape is not None and target_shape is not None:
            message = f"{message}: {tuple(source_shape)} -> {tuple(target_shape)}"
        super().__init__(message)
        self.source_shape = None if source_shape is None else tuple(source_shape)
        self.target_shape = None if target_shape is None else tuple(target_shape)


class NotScalarError(SliceViewError, TypeError):
    pass


def _format_axis(
    axis: Optional[int],
    index: Optional[int],
    length: Optional[int],
) -> str:
    parts = []
    if axis is not None:
        parts.append(f"axis {axis}")
    if index is not None:
        parts.append(f"index {index}")
    if length is not None:
        parts.append(f"length {length}")
    if not parts:
        return ""
    return f" ({', '.join(parts)})"


def _format_location(column: Optional[int], text: Optional[str]) -> str:
    if column is None:
        return ""
    location_str = f" (col {column})"
    if text is None or column < 1:
        return location_str
    caret = " " * (column - 1) + "^"
    return f"{location_str}\n  {text}\n  {caret}"
