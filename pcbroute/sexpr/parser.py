"""Tokenizer and tree builder for the KiCad S-expression format.

Parsing happens in two passes:

1. ``tokenize`` scans characters left to right and produces a flat stream
   of value tokens and ``OPEN``/``CLOSE`` delimiter markers. Double quotes
   toggle string-literal mode, in which whitespace and parentheses are
   ordinary content.
2. ``merge_into_exp`` folds the flat stream into a nested ``Tree``,
   matching delimiters by depth counting.

The merge pass never raises: unbalanced input simply ends at the end of
the stream. ``parse`` checks balance up front and rejects malformed text
unless called with ``strict=False``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from .tree import Tree
from .value import Value, turn_to_value

logger = logging.getLogger(__name__)


class Delimiter(Enum):
    """Structural markers in the token stream."""
    OPEN = "("
    CLOSE = ")"


@dataclass(frozen=True)
class Token:
    """A value token. ``quoted`` is set for string literals."""
    text: str
    quoted: bool = False

    @property
    def value(self) -> Value:
        return turn_to_value(self.text, quoted=self.quoted)


StreamItem = Union[Token, Delimiter]


class _Scanner:
    """Character scanner that accumulates tokens and delimiters."""

    def __init__(self):
        self.stream: List[StreamItem] = []
        self.buffer: List[str] = []
        self.quoted = False
        self.in_string = False
        self.escaped = False

    def flush(self):
        if self.buffer or self.quoted:
            self.stream.append(Token("".join(self.buffer), self.quoted))
        self.buffer = []
        self.quoted = False

    def feed(self, char: str):
        if self.in_string:
            if self.escaped:
                self.buffer.append(char)
                self.escaped = False
            elif char == "\\":
                self.escaped = True
            elif char == '"':
                self.in_string = False
            else:
                self.buffer.append(char)
            return

        if char == '"':
            self.in_string = True
            self.quoted = True
        elif char == "(":
            self.flush()
            self.stream.append(Delimiter.OPEN)
        elif char == ")":
            self.flush()
            self.stream.append(Delimiter.CLOSE)
        elif char.isspace():
            self.flush()
        else:
            self.buffer.append(char)


def tokenize(text: str) -> List[StreamItem]:
    """Split text into value tokens and delimiter markers.

    An unterminated string literal is flushed as a token at end of input;
    use ``is_balanced`` or ``parse`` to detect it.
    """
    scanner = _Scanner()
    for char in text:
        scanner.feed(char)
    scanner.flush()
    return scanner.stream


def _unterminated_string(text: str) -> bool:
    scanner = _Scanner()
    for char in text:
        scanner.feed(char)
    return scanner.in_string


def closing_index(stream: Sequence[StreamItem], opening: int) -> int:
    """Index of the delimiter closing the one at ``opening``.

    Returns ``len(stream)`` if the depth counter runs off the end.
    """
    level = 0
    index = opening
    while index < len(stream):
        item = stream[index]
        if item is Delimiter.OPEN:
            level += 1
        elif item is Delimiter.CLOSE:
            level -= 1

        if level == 0:
            return index
        index += 1
    return index


def merge_into_exp(stream: Sequence[StreamItem]) -> Tree:
    """Fold a flat token stream into a nested tree.

    Empty bare tokens are dropped rather than stored as empty leaves; a
    quoted ``""`` is kept as the empty string. A ``CLOSE`` with no
    matching ``OPEN`` is ignored.
    """
    result = Tree()
    i = 0
    while i < len(stream):
        item = stream[i]
        if isinstance(item, Token):
            value = item.value
            if value is not None:
                result.append_value(value)
            i += 1
        elif item is Delimiter.OPEN:
            closing = closing_index(stream, i)
            result.append_tree(merge_into_exp(stream[i + 1:closing]))
            i = closing + 1
        else:
            i += 1
    return result


def is_balanced(stream: Sequence[StreamItem]) -> bool:
    """True if every delimiter in the stream has a partner."""
    depth = 0
    for item in stream:
        if item is Delimiter.OPEN:
            depth += 1
        elif item is Delimiter.CLOSE:
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def parse(text: str, strict: bool = True) -> Optional[Tree]:
    """Parse S-expression text into a tree.

    Args:
        text: Source text
        strict: If True, return None for unbalanced parentheses or an
            unterminated string literal. If False, return a best-effort
            tree in which unmatched structure ends at end of input.

    Returns:
        Parsed tree, or None if the input is malformed and ``strict`` is set
    """
    stream = tokenize(text)

    if strict:
        if _unterminated_string(text):
            logger.warning("Unterminated string literal in S-expression input")
            return None
        if not is_balanced(stream):
            logger.warning("Unbalanced parentheses in S-expression input")
            return None

    return merge_into_exp(stream)
