"""Core view machinery for sliceview."""

__all__ = [
    "array",
    "assign",
    "composer",
    "exceptions",
    "layout",
    "parser",
    "selectors",
    "translator",
    "traversal",
    "view",
]
