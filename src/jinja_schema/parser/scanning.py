"""Bracket- and quote-aware helpers for slicing statement text.

Statement parsing only needs to find a handful of top-level markers (the
``in`` of a for loop, the ``=`` of an assignment, commas between targets).
These helpers skip anything inside string literals or brackets.
"""

from __future__ import annotations

from collections.abc import Iterator

_OPENING = "([{"
_CLOSING = ")]}"


def iter_top_level(text: str, start: int = 0) -> Iterator[int]:
    """Yield indexes of characters outside brackets and string literals.

    Opening brackets at depth zero are yielded; their contents and closing
    bracket are not. Unbalanced closers are ignored.
    """
    depth = 0
    quote: str | None = None
    i = start
    length = len(text)
    while i < length:
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            if depth == 0:
                yield i
            quote = char
        elif char in _OPENING:
            if depth == 0:
                yield i
            depth += 1
        elif char in _CLOSING:
            if depth > 0:
                depth -= 1
        elif depth == 0:
            yield i
        i += 1


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on a one-character separator outside brackets and strings.

    Parts are stripped; empty parts are dropped.
    """
    parts: list[str] = []
    last = 0
    for i in iter_top_level(text):
        if text[i] == sep:
            parts.append(text[last:i])
            last = i + 1
    parts.append(text[last:])
    return [part.strip() for part in parts if part.strip()]


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def find_keyword(text: str, word: str, start: int = 0) -> int:
    """Index of the first top-level whole-word ``word``, or -1."""
    size = len(word)
    for i in iter_top_level(text, start):
        if not text.startswith(word, i):
            continue
        before = text[i - 1] if i > 0 else " "
        after = text[i + size] if i + size < len(text) else " "
        if not _is_word_char(before) and not _is_word_char(after) and before != ".":
            return i
    return -1


def find_assignment(text: str) -> int:
    """Index of the first top-level ``=`` that is not part of a comparison, or -1."""
    for i in iter_top_level(text):
        if text[i] != "=":
            continue
        before = text[i - 1] if i > 0 else ""
        after = text[i + 1] if i + 1 < len(text) else ""
        if before and before in "=!<>":
            continue
        if after == "=":
            continue
        return i
    return -1


def match_bracket(text: str, index: int) -> int:
    """Index of the bracket closing the one at ``index``, or -1 when unbalanced."""
    opener = text[index]
    closer = _CLOSING[_OPENING.index(opener)]
    depth = 0
    quote: str | None = None
    i = index
    while i < len(text):
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char in _OPENING:
            depth += 1
        elif char in _CLOSING:
            depth -= 1
            if depth == 0:
                return i if char == closer else -1
        i += 1
    return -1


def strip_parens(text: str) -> str:
    """Remove one pair of parentheses wrapping the whole text."""
    text = text.strip()
    if text.startswith("(") and match_bracket(text, 0) == len(text) - 1:
        return text[1:-1].strip()
    return text
