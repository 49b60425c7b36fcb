"""
Stepping machinery shared by the grapheme, word, and sentence engines

Each engine supplies a transition function ``(state, text, pos, final)
-> (new_state, boundary)`` which classifies ``text[pos]`` and decides
if there is a boundary before it.  :func:`scan` drives it forward from
a segment start, and :func:`step` wraps that with input coercion and
the incremental contract.
"""

from __future__ import annotations

import codecs
import logging

from typing import Callable, NamedTuple, Union

log = logging.getLogger(__name__)

START = -1
"State to begin a fresh scan with.  It means start of text"

ANY = 0
"""Wildcard in rule tables.  As a state it also means no particular
rule context is active, and as a class it matches everything"""

Text = Union[str, bytes]

Transition = Callable[[int, str, int, bool], "tuple[int, bool]"]

RuleTable = dict[tuple[int, int], tuple[int, bool, int]]


class Step(NamedTuple):
    "Result of one segmentation step"

    segment: Text
    "The segment found, the same type as the input"
    remainder: Text
    "Input following the segment"
    width: int | None
    "Display width for grapheme clusters, else None"
    state: int
    "Pass this to the next step along with the remainder"


class NeedMore(Exception):
    "Raised by lookahead when it runs past the end of input that is not final"


def resolve(table: RuleTable, state: int, cls: int, default: tuple[int, bool, int]) -> tuple[int, bool, int]:
    """Returns ``(new_state, boundary, rule)`` for the state and class

    An exact entry is used if present.  Otherwise the entries for the
    state with any class, and any state with the class, are
    consulted.  When both exist the new state comes from the class
    entry, and the boundary from whichever has the lower rule
    number."""
    try:
        return table[state, cls]
    except KeyError:
        pass
    by_state = table.get((state, ANY))
    by_class = table.get((ANY, cls))
    if by_state is not None and by_class is not None:
        if by_state[2] < by_class[2]:
            return by_class[0], by_state[1], by_state[2]
        return by_class
    if by_state is not None:
        return by_state
    if by_class is not None:
        return by_class
    return default


def check_state(state: int, valid: range | frozenset[int]) -> None:
    if not isinstance(state, int) or isinstance(state, bool):
        raise TypeError(f"state should be int not { type(state).__name__ }")
    if state != START and state not in valid:
        raise ValueError(f"{ state } is not a valid state")


def check_offset(text: str, offset: int) -> None:
    "Type and range checks used by the offset based functions"
    if not isinstance(text, str):
        raise TypeError(f"text should be str not { type(text).__name__ }")
    if not isinstance(offset, int) or isinstance(offset, bool):
        raise TypeError(f"offset should be int not { type(offset).__name__ }")
    if not 0 <= offset <= len(text):
        raise ValueError(f"offset { offset } is out of range 0 - { len(text) }")


def as_str(text: Text) -> str:
    "Returns text as str, decoding bytes as UTF-8 with malformed bytes becoming lone surrogates"
    if isinstance(text, str):
        return text
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("utf-8", "surrogateescape")
    raise TypeError(f"text should be str or bytes not { type(text).__name__ }")


def scan(text: str, pos: int, state: int, final: bool, transition: Transition) -> tuple[int, int] | None:
    """Finds the end of the segment starting at ``pos``

    :returns: ``(end, state)`` where state is the one after the last
       codepoint of the segment, or None if the end can't be decided
       without more input
    """
    length = len(text)
    try:
        current, _ = transition(state, text, pos, final)
        pos += 1
        while pos < length:
            new_state, boundary = transition(current, text, pos, final)
            if boundary:
                return pos, current
            current = new_state
            pos += 1
        if not final:
            raise NeedMore()
    except NeedMore:
        return None
    return pos, current


def step(
    text: Text,
    state: int,
    final: bool,
    transition: Transition,
    measure: Callable[[str], int] | None = None,
) -> Step:
    "Implements the ``*_step`` functions"
    if isinstance(text, str):
        data = None
        decoded = text
    elif isinstance(text, (bytes, bytearray)):
        data = text = bytes(text)
        # an incomplete trailing sequence is held back until final
        decoded = codecs.getincrementaldecoder("utf-8")("surrogateescape").decode(data, final)
    else:
        raise TypeError(f"text should be str or bytes not { type(text).__name__ }")

    empty_width = 0 if measure is not None else None

    if not text:
        return Step(text, text, empty_width, state)

    found = scan(decoded, 0, state, final, transition) if decoded else None
    if found is None:
        log.debug("undecided boundary in %d codepoints of non-final input", len(decoded))
        return Step(text[:0], text, empty_width, state)

    end, new_state = found
    segment = decoded[:end]
    width = measure(segment) if measure is not None else None
    if data is None:
        return Step(segment, text[end:], width, new_state)
    size = len(segment.encode("utf-8", "surrogateescape"))
    return Step(data[:size], data[size:], width, new_state)


def count(text: Text, transition: Transition) -> int:
    "Number of segments"
    text = as_str(text)
    offset, state, n = 0, START, 0
    while offset < len(text):
        offset, state = scan(text, offset, state, True, transition)  # type: ignore[misc]
        n += 1
    return n
