"""
:mod:`textseg` - Unicode text segmentation and display width

This package splits text into the units people perceive, and measures
how wide text is when displayed in a monospace terminal.  It addresses
the following:

* Multiple consecutive codepoints can combine into a single user
  perceived character (grapheme cluster), such as combining accents,
  vowels and marks in some writing systems, emoji with skin tones,
  emoji joined by zero width joiners, and pairs of regional
  indicators making flags.  Indexing into a :class:`str` can break
  them apart.

* The standard library provides no help in splitting text into
  grapheme clusters, words, and sentences.

* The standard library :mod:`unicodedata` has no information about
  emoji or segmentation properties, and its version follows the
  interpreter.  All properties are supplied by generated tables.

See :data:`unicode_version` for the implemented version.

Segmentation

    `Unicode Technical Report #29
    <https://www.unicode.org/reports/tr29/>`__ rules for finding
    grapheme clusters, words, and sentences are implemented as state
    machines.  Each has a step function taking text and a state, and
    returning a :class:`Step` with the segment, the remaining text,
    and the state to pass to the next call:

    * :func:`grapheme_step`
    * :func:`word_step`
    * :func:`sentence_step`

    Text can be :class:`str` or UTF-8 :class:`bytes`.  Streaming input
    is supported by passing ``final=False`` until the last chunk, in
    which case a segment is only returned once its end is certain.

    Word and sentence rules are tailored by default, keeping
    hyphenated words and email addresses together, and not ending
    sentences after abbreviation like tokens such as ``Mr.``.  Pass
    ``tailored=False`` for the plain rules.

    Building on those are offset based functions such as
    :func:`grapheme_next_break`, and iterators with and without
    offsets.

Width

    :func:`text_width` (also available as :func:`width`) measures
    text in terminal columns, with :func:`cluster_width` and
    :func:`codepoint_width` for the individual parts.  East Asian
    Ambiguous codepoints are 1 column unless ``ambiguous_width=2`` is
    passed.

Helpers

    * :func:`grapheme_count`, :func:`word_count`, :func:`sentence_count`
    * :func:`grapheme_substr`, :func:`grapheme_startswith`,
      :func:`grapheme_endswith`, :func:`grapheme_find` which are aware
      of grapheme cluster boundaries
    * :func:`reverse` reverses text a grapheme cluster at a time
    * :func:`text_width_substr` to get a prefix fitting a width
    * :func:`category`, :func:`east_asian_width`,
      :func:`is_extended_pictographic`, :func:`is_regional_indicator`

Command line

    Use ``python3 -m textseg --help`` to run the Unicode break tests,
    show segmentation of text, look up codepoints, and benchmark.
"""

from __future__ import annotations

from typing import Callable, Iterator

__version__ = "1.0.0"

from . import _engine
from ._engine import START, Step, Text, as_str, check_offset, scan
from ._tables import unicode_version
from ._ucd import category, category_name, east_asian_width, is_extended_pictographic_codepoint
from ._ucd import is_regional_indicator_codepoint
from .grapheme import grapheme_step
from .grapheme import transition as _grapheme_transition
from .sentence import sentence_step
from .sentence import _transitions as _sentence_transitions
from .width import check_ambiguous_width, cluster_width, codepoint_width
from .word import WordKind, word_kind, word_step
from .word import _transitions as _word_transitions

__all__ = (
    "START",
    "Step",
    "WordKind",
    "category",
    "category_name",
    "cluster_width",
    "codepoint_width",
    "east_asian_width",
    "grapheme_count",
    "grapheme_endswith",
    "grapheme_find",
    "grapheme_iter",
    "grapheme_iter_with_offsets",
    "grapheme_length",
    "grapheme_next",
    "grapheme_next_break",
    "grapheme_startswith",
    "grapheme_step",
    "grapheme_substr",
    "is_extended_pictographic",
    "is_regional_indicator",
    "reverse",
    "sentence_count",
    "sentence_iter",
    "sentence_iter_with_offsets",
    "sentence_next",
    "sentence_next_break",
    "sentence_step",
    "text_width",
    "text_width_substr",
    "unicode_version",
    "width",
    "word_count",
    "word_iter",
    "word_iter_with_offsets",
    "word_kind",
    "word_next",
    "word_next_break",
    "word_step",
)


def _next_break(text: str, offset: int, transition: _engine.Transition) -> int:
    check_offset(text, offset)
    if offset == len(text):
        return offset
    return scan(text, offset, START, True, transition)[0]  # type: ignore[index]


def _iter_with_offsets(text: str, offset: int, transition: _engine.Transition) -> Iterator[tuple[int, int, str]]:
    check_offset(text, offset)
    lt = len(text)
    state = START
    while offset < lt:
        end, state = scan(text, offset, state, True, transition)  # type: ignore[misc]
        yield offset, end, text[offset:end]
        offset = end


def grapheme_next_break(text: str, offset: int = 0) -> int:
    """Returns end of Grapheme cluster / User Perceived Character

    :param text: The text to examine
    :param offset: The first codepoint to examine, which should be at
        a grapheme cluster boundary

    :returns:  Index of first codepoint not part of the grapheme cluster
        starting at offset. You should extract ``text[offset:span]``
    """
    return _next_break(text, offset, _grapheme_transition)


def grapheme_next(text: str, offset: int = 0) -> tuple[int, int]:
    "Returns span of next grapheme cluster"
    end = grapheme_next_break(text, offset)
    return offset, end


def grapheme_iter(text: str, offset: int = 0) -> Iterator[str]:
    "Iterator providing text of each grapheme cluster"
    for _, _, cluster in _iter_with_offsets(text, offset, _grapheme_transition):
        yield cluster


def grapheme_iter_with_offsets(text: str, offset: int = 0) -> Iterator[tuple[int, int, str]]:
    "Iterator providing start, end, text of each grapheme cluster"
    return _iter_with_offsets(text, offset, _grapheme_transition)


def word_next_break(text: str, offset: int = 0, *, tailored: bool = True) -> int:
    """Returns end of next word or non-word

    Note that the segment may be a word, or a non-word (spaces,
    punctuation etc).  Use :func:`word_next` to get words.

    :param text: The text to examine
    :param offset: The first codepoint to examine

    :returns:  Next break point
    """
    return _next_break(text, offset, _word_transitions[bool(tailored)])


def word_next(text: str, offset: int = 0, *, tailored: bool = True) -> tuple[int, int]:
    """Returns span of next word

    Segments of spaces and punctuation are skipped.  If no word is
    found then both values are the length of the text."""
    for start, end, segment in word_iter_with_offsets(text, offset, tailored=tailored):
        if word_kind(segment) == WordKind.LETTER:
            return start, end
    return len(text), len(text)


def word_iter(text: str, offset: int = 0, *, tailored: bool = True) -> Iterator[str]:
    "Iterator providing text of each segment including spaces and punctuation"
    for _, _, segment in _iter_with_offsets(text, offset, _word_transitions[bool(tailored)]):
        yield segment


def word_iter_with_offsets(text: str, offset: int = 0, *, tailored: bool = True) -> Iterator[tuple[int, int, str]]:
    "Iterator providing start, end, text of each segment including spaces and punctuation"
    return _iter_with_offsets(text, offset, _word_transitions[bool(tailored)])


def sentence_next_break(text: str, offset: int = 0, *, tailored: bool = True) -> int:
    """Returns end of sentence location.

    :param text: The text to examine
    :param offset: The first codepoint to examine

    :returns:  Next break point
    """
    return _next_break(text, offset, _sentence_transitions[bool(tailored)])


def sentence_next(text: str, offset: int = 0, *, tailored: bool = True) -> tuple[int, int]:
    "Returns span of next sentence"
    end = sentence_next_break(text, offset, tailored=tailored)
    return offset, end


def sentence_iter(text: str, offset: int = 0, *, tailored: bool = True) -> Iterator[str]:
    "Iterator providing text of each sentence"
    for _, _, sentence in _iter_with_offsets(text, offset, _sentence_transitions[bool(tailored)]):
        yield sentence


def sentence_iter_with_offsets(
    text: str, offset: int = 0, *, tailored: bool = True
) -> Iterator[tuple[int, int, str]]:
    "Iterator providing start, end, text of each sentence"
    return _iter_with_offsets(text, offset, _sentence_transitions[bool(tailored)])


def grapheme_count(text: Text) -> int:
    "Number of grapheme clusters in :class:`str` or UTF-8 :class:`bytes`"
    return _engine.count(text, _grapheme_transition)


def word_count(text: Text, *, tailored: bool = True) -> int:
    "Number of words, not counting the spaces and punctuation between them"
    return sum(1 for segment in word_iter(as_str(text), tailored=tailored) if word_kind(segment) == WordKind.LETTER)


def sentence_count(text: Text, *, tailored: bool = True) -> int:
    "Number of sentences"
    return _engine.count(text, _sentence_transitions[bool(tailored)])


def grapheme_length(text: str, offset: int = 0) -> int:
    "Returns number of grapheme clusters in the text.  Unicode aware version of len"
    check_offset(text, offset)
    return _engine.count(text[offset:], _grapheme_transition)


def grapheme_substr(text: str, start: int | None = None, stop: int | None = None) -> str:
    """Like ``text[start:end]`` but in grapheme cluster units

    ``start`` and ``end`` can be negative to index from the end, or
    outside the bounds of the text but are never an invalid
    combination (you get empty string returned).

    To get one grapheme cluster, make stop one more than start.
    For example to get the 3rd last grapheme cluster::

        grapheme_substr(text, -3, -3 + 1)
    """
    return "".join(list(grapheme_iter(text))[start:stop])


def _boundaries(text: str) -> set[int]:
    return {0} | {end for _, end, _ in grapheme_iter_with_offsets(text)}


def grapheme_endswith(text: str, substring: str) -> bool:
    "Returns True if `text` ends with `substring` being aware of grapheme cluster boundaries"
    # match str.endswith
    if len(substring) == 0:
        return True

    if text.endswith(substring):
        # it must end with the same codepoints, but also has to start at
        # a grapheme cluster boundary
        expected = len(text) - len(substring)
        boundary = 0
        for _, boundary, _ in grapheme_iter_with_offsets(text):
            if boundary >= expected:
                break
        return boundary == expected or expected == 0

    return False


def grapheme_startswith(text: str, substring: str) -> bool:
    "Returns True if `text` starts with `substring` being aware of grapheme cluster boundaries"
    # match str.startswith
    if len(substring) == 0:
        return True

    if text.startswith(substring):
        # it must start with the same codepoints, but also has to end at
        # a grapheme cluster boundary
        expected = len(substring)
        for _, boundary, _ in grapheme_iter_with_offsets(text):
            if boundary >= expected:
                return boundary == expected

    return False


def grapheme_find(text: str, substring: str, start: int = 0, end: int | None = None) -> int:
    """Returns the offset in text where substring can be found, being aware of grapheme clusters.
    The start and end of the substring have to be at a grapheme cluster boundary.

    :param start: Where in text to start the search (default beginning)
    :param end: Where to stop the search exclusive (default remaining text)
    :returns: offset into text, or -1 if not found or substring is zero length
    """
    check_offset(text, start)
    if end is None:
        end = len(text)
    check_offset(text, end)
    if not isinstance(substring, str):
        raise TypeError(f"substring should be str not { type(substring).__name__ }")
    if not substring:
        return -1

    boundaries = _boundaries(text)
    pos = text.find(substring, start, end)
    while pos != -1:
        if pos in boundaries and pos + len(substring) in boundaries:
            return pos
        pos = text.find(substring, pos + 1, end)
    return -1


def reverse(text: Text) -> Text:
    "Reverses text a grapheme cluster at a time, so combining marks and emoji sequences stay intact"
    clusters = list(grapheme_iter(as_str(text)))
    clusters.reverse()
    result = "".join(clusters)
    if isinstance(text, str):
        return result
    return result.encode("utf-8", "surrogateescape")


def is_extended_pictographic(text: str) -> bool:
    "Returns True if any of the text has the extended pictographic property (Emoji and similar)"
    return any(is_extended_pictographic_codepoint(ord(c)) for c in text)


def is_regional_indicator(text: str) -> bool:
    "Returns True if any of the text is one of the 26 `regional indicators <https://en.wikipedia.org/wiki/Regional_indicator_symbol>`__ used in pairs to represent country flags"
    return any(is_regional_indicator_codepoint(ord(c)) for c in text)


def text_width(text: Text, *, ambiguous_width: int = 1) -> int:
    """Returns how many columns the text would be if displayed in a terminal

    It is the sum of the width of each grapheme cluster.  Control
    characters including tabs and newlines are zero width, so you
    should split lines and expand tabs first if they matter.

    Terminals aren't entirely consistent with each other, and Unicode
    has many kinds of codepoints, and combinations.  Consequently this
    is right the vast majority of the time, but not always.

    :param ambiguous_width: 1 or 2 for the width of East Asian
        Ambiguous codepoints
    """
    check_ambiguous_width(ambiguous_width)
    return sum(cluster_width(cluster, ambiguous_width=ambiguous_width) for cluster in grapheme_iter(as_str(text)))


width: Callable[..., int] = text_width


def text_width_substr(text: str, width: int, *, ambiguous_width: int = 1) -> tuple[int, str]:
    """Extracts substring width or less wide being aware of grapheme cluster boundaries.
    For example you could use this to get a substring that is 80 (or
    less) wide.

    :returns: A tuple of how wide the substring is, and the substring"""
    if not isinstance(width, int) or width < 1:
        raise ValueError("width must be an int at least 1")
    check_ambiguous_width(ambiguous_width)
    width_so_far = 0
    accepted = 0
    for _, end, grapheme in grapheme_iter_with_offsets(text):
        seg_width = cluster_width(grapheme, ambiguous_width=ambiguous_width)
        if width_so_far + seg_width <= width:
            width_so_far += seg_width
            accepted = end
        else:
            break
        if width_so_far == width:
            break
    return width_so_far, text[:accepted]
