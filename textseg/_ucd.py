"""
Codepoint property lookups

All properties come from the generated tables in
:mod:`textseg._tables`, so results match :data:`textseg.unicode_version`
no matter which Unicode version the interpreter's :mod:`unicodedata`
has.

Every codepoint maps to exactly one class for each of grapheme, word,
and sentence segmentation.  The class values are single bits so that
they can be combined into masks.
"""

from __future__ import annotations

import bisect
import functools

from typing import Callable, Iterable

from . import _tables


class RangeTable:
    "Sorted inclusive codepoint ranges supporting ``in``"

    __slots__ = ("starts", "ends")

    def __init__(self, ranges: Iterable[tuple[int, int]]):
        ranges = tuple(ranges)
        self.starts = tuple(r[0] for r in ranges)
        self.ends = tuple(r[1] for r in ranges)

    def __contains__(self, codepoint: int) -> bool:
        i = bisect.bisect_right(self.starts, codepoint) - 1
        return i >= 0 and codepoint <= self.ends[i]

    def __len__(self) -> int:
        return sum(end - start + 1 for start, end in zip(self.starts, self.ends))


class RangeMap:
    "Sorted inclusive codepoint ranges with a value each, and a default for codepoints in none of them"

    __slots__ = ("starts", "ends", "values", "default")

    def __init__(self, ranges: Iterable[tuple[int, int, str]], default: str):
        ranges = tuple(ranges)
        self.starts = tuple(r[0] for r in ranges)
        self.ends = tuple(r[1] for r in ranges)
        self.values = tuple(r[2] for r in ranges)
        self.default = default

    def __getitem__(self, codepoint: int) -> str:
        i = bisect.bisect_right(self.starts, codepoint) - 1
        if i >= 0 and codepoint <= self.ends[i]:
            return self.values[i]
        return self.default


class GC:
    "Grapheme cluster break classes"

    Other = 2**0
    CR = 2**1
    LF = 2**2
    Control = 2**3
    Extend = 2**4
    ZWJ = 2**5
    Regional_Indicator = 2**6
    Prepend = 2**7
    SpacingMark = 2**8
    L = 2**9
    V = 2**10
    T = 2**11
    LV = 2**12
    LVT = 2**13
    Extended_Pictographic = 2**14
    InCB_Linker = 2**15
    InCB_Consonant = 2**16
    InCB_Extend = 2**17


class WC:
    "Word break classes"

    Other = 2**0
    CR = 2**1
    LF = 2**2
    Newline = 2**3
    Extend = 2**4
    ZWJ = 2**5
    Regional_Indicator = 2**6
    Format = 2**7
    Katakana = 2**8
    Hebrew_Letter = 2**9
    ALetter = 2**10
    Single_Quote = 2**11
    Double_Quote = 2**12
    MidNumLet = 2**13
    MidLetter = 2**14
    MidNum = 2**15
    Numeric = 2**16
    ExtendNumLet = 2**17
    WSegSpace = 2**18
    Extended_Pictographic = 2**19


class SC:
    "Sentence break classes"

    Other = 2**0
    CR = 2**1
    LF = 2**2
    Extend = 2**3
    Sep = 2**4
    Format = 2**5
    Sp = 2**6
    Lower = 2**7
    Upper = 2**8
    OLetter = 2**9
    Numeric = 2**10
    ATerm = 2**11
    SContinue = 2**12
    STerm = 2**13
    Close = 2**14


_extended_pictographic = RangeTable(_tables.EXTENDED_PICTOGRAPHIC)
_grapheme_break = RangeMap(_tables.GRAPHEME_BREAK, "Other")
_word_break = RangeMap(_tables.WORD_BREAK, "Other")
_sentence_break = RangeMap(_tables.SENTENCE_BREAK, "Other")

general_category = RangeMap(_tables.GENERAL_CATEGORY, "Cn")
"General category by codepoint, without range checking"

east_asian_widths = RangeMap(_tables.EAST_ASIAN_WIDTH, "N")
"East Asian Width by codepoint, without range checking"


def is_emoji_modifier(codepoint: int) -> bool:
    "Fitzpatrick skin tone modifiers"
    return 0x1F3FB <= codepoint <= 0x1F3FF


def is_regional_indicator_codepoint(codepoint: int) -> bool:
    return 0x1F1E6 <= codepoint <= 0x1F1FF


def is_extended_pictographic_codepoint(codepoint: int) -> bool:
    return codepoint in _extended_pictographic


def _fast_lookup(classify: Callable[[int], int]) -> Callable[[int], int]:
    # the first 256 codepoints are a tuple index, the rest are cached
    fast = tuple(classify(codepoint) for codepoint in range(256))
    slow = functools.lru_cache(maxsize=8192)(classify)

    @functools.wraps(classify)
    def lookup(codepoint: int) -> int:
        if codepoint < 256:
            return fast[codepoint]
        return slow(codepoint)

    lookup.cache_info = slow.cache_info  # type: ignore[attr-defined]
    return lookup


@_fast_lookup
def grapheme_class(codepoint: int) -> int:
    "Returns the :class:`GC` value for a codepoint"
    # Hangul syllables alternate LV and LVT so are not in the table
    if 0xAC00 <= codepoint <= 0xD7A3:
        return GC.LV if (codepoint - 0xAC00) % 28 == 0 else GC.LVT
    return getattr(GC, _grapheme_break[codepoint])


@_fast_lookup
def word_class(codepoint: int) -> int:
    "Returns the :class:`WC` value for a codepoint"
    return getattr(WC, _word_break[codepoint])


@_fast_lookup
def sentence_class(codepoint: int) -> int:
    "Returns the :class:`SC` value for a codepoint"
    return getattr(SC, _sentence_break[codepoint])


def codepoint_value(codepoint: int | str) -> int:
    "Accepts an int or a single character str, returning the int after range checking"
    if isinstance(codepoint, str):
        if len(codepoint) != 1:
            raise ValueError(f"Expected a single character, not { len(codepoint) }")
        return ord(codepoint)
    if not isinstance(codepoint, int) or isinstance(codepoint, bool):
        raise TypeError(f"codepoint should be int or str not { type(codepoint).__name__ }")
    if not 0 <= codepoint <= 0x10FFFF:
        raise ValueError(f"codepoint { codepoint } is not in range 0 - 0x10FFFF")
    return codepoint


def category(codepoint: int | str) -> str:
    "General category such as ``Lu``"
    return general_category[codepoint_value(codepoint)]


def east_asian_width(codepoint: int | str) -> str:
    "East Asian Width such as ``W`` or ``Na``"
    return east_asian_widths[codepoint_value(codepoint)]


_kinds = {
    "grapheme": (GC, grapheme_class),
    "word": (WC, word_class),
    "sentence": (SC, sentence_class),
}


def category_name(kind: str, codepoint: int | str) -> tuple[str, ...]:
    """Returns the names of the classes the codepoint has

    :param kind: One of ``grapheme``, ``word``, or ``sentence``
    """
    try:
        klass, lookup = _kinds[kind]
    except KeyError:
        raise ValueError(f"Unknown kind { kind !r}") from None
    value = lookup(codepoint_value(codepoint))
    return tuple(
        name for name, bit in vars(klass).items() if not name.startswith("_") and isinstance(bit, int) and value & bit
    )
