from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _load_version

from .core.array import DenseArray
from .core.assign import (
    ExecutionConfig,
    NoAlias,
    assert_compatible_shape,
    assign,
    broadcastable,
    is_batch_eligible,
    noalias,
)
from .core.composer import AxisMap, BufferMap, Composition, Geometry, ViewKind, compose
from .core.exceptions import (
    BroadcastError,
    InvalidSelectorError,
    NotScalarError,
    OutOfBoundsError,
    SelectorSyntaxError,
    SliceViewError,
)
from .core.layout import Layout
from .core.parser import parse_selectors
from .core.selectors import (
    ALL,
    NEWAXIS,
    All,
    Drop,
    Index,
    Keep,
    NewAxis,
    Range,
    Selector,
    base_axis_for,
    integral_count,
    integral_count_before,
    integral_skip,
    newaxis_count,
    newaxis_count_before,
    normalize_selectors,
)
from .core.translator import resolve_index, translate_index
from .core.traversal import Stepper, Traversal
from .core.view import View, as_expression, view

try:
    __version__ = _load_version("sliceview")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "view",
    "View",
    "DenseArray",
    "as_expression",
    "Selector",
    "Index",
    "Range",
    "All",
    "NewAxis",
    "Keep",
    "Drop",
    "ALL",
    "NEWAXIS",
    "parse_selectors",
    "normalize_selectors",
    "integral_count",
    "integral_count_before",
    "integral_skip",
    "newaxis_count",
    "newaxis_count_before",
    "base_axis_for",
    "Layout",
    "ViewKind",
    "AxisMap",
    "BufferMap",
    "Geometry",
    "Composition",
    "compose",
    "translate_index",
    "resolve_index",
    "Stepper",
    "Traversal",
    "ExecutionConfig",
    "assign",
    "noalias",
    "NoAlias",
    "broadcastable",
    "assert_compatible_shape",
    "is_batch_eligible",
    "SliceViewError",
    "OutOfBoundsError",
    "InvalidSelectorError",
    "SelectorSyntaxError",
    "BroadcastError",
    "NotScalarError",
    "__version__",
]
