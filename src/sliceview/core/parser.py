from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError, UnexpectedInput

from .exceptions import SelectorSyntaxError
from .selectors import ALL, NEWAXIS, Drop, Index, Keep, Range

GRAMMAR_PATH = Path(__file__).with_name("selector_grammar.lark")


@lru_cache(maxsize=1)
def _build_lark() -> Lark:
    grammar = GRAMMAR_PATH.read_text()
    return Lark(
        grammar,
        parser="earley",
        start="start",
        ambiguity="resolve",
        propagate_positions=True,
        maybe_placeholders=False,
    )


class SelectorTransformer(Transformer):
    def start(self, items: List[Any]) -> List[Any]:
        return list(items)

    def index(self, items):
        return Index(int(items[0]))

    def newaxis(self, _items):
        return NEWAXIS

    def ellipsis(self, _items):
        return Ellipsis

    def all_axis(self, _items):
        return ALL

    def int_list(self, items):
        return [int(token) for token in items]

    def keep(self, items):
        return Keep(*(items[0] if items else ()))

    def drop(self, items):
        return Drop(*(items[0] if items else ()))

    def slice(self, items):
        fields: List[Optional[int]] = [None, None, None]
        position = 0
        for token in items:
            if isinstance(token, Token) and token.type == "COLON":
                position += 1
            else:
                fields[position] = int(token)
        start, stop, step = fields
        if start is None and stop is None and step is None:
            return ALL
        return Range(start, stop, step)


def parse_selectors(text: str) -> List[Any]:
    """Parse a comma-separated selector list.

    The result may contain ``Ellipsis``; it is expanded when the list is
    normalized against a source.
    """
    parser = _build_lark()
    try:
        tree = parser.parse(text)
    except UnexpectedInput as exc:
        raise SelectorSyntaxError(
            "Syntax error while parsing selectors",
            column=exc.column if isinstance(exc.column, int) and exc.column > 0 else None,
            text=text,
        ) from exc
    except LarkError as exc:  # pragma: no cover
        raise SelectorSyntaxError(str(exc)) from exc
    return SelectorTransformer().transform(tree)
