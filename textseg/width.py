"""
Display width of codepoints and grapheme clusters in a monospace terminal

Widths follow East Asian Width with zero width for controls, format
characters, marks, and joiners.  A grapheme cluster is as wide as its
base (first visible) codepoint, adjusted for emoji presentation.
"""

from __future__ import annotations

import functools

from ._tables import WIDTH_OVERRIDES
from ._ucd import (
    GC,
    codepoint_value,
    east_asian_widths,
    general_category,
    grapheme_class,
    is_emoji_modifier,
    is_extended_pictographic_codepoint,
    is_regional_indicator_codepoint,
)

VS15 = 0xFE0E
"Variation selector requesting text presentation"
VS16 = 0xFE0F
"Variation selector requesting emoji presentation"

_zero_width_classes = (
    GC.CR | GC.LF | GC.Control | GC.Extend | GC.InCB_Extend | GC.InCB_Linker | GC.ZWJ | GC.V | GC.T
)

# halfwidth katakana voiced sound marks occupy a column after their base
_spacing_extend = {0xFF9E, 0xFF9F}


def check_ambiguous_width(ambiguous_width: int) -> None:
    if ambiguous_width not in (1, 2) or isinstance(ambiguous_width, bool):
        raise ValueError(f"ambiguous_width must be 1 or 2 not { ambiguous_width !r}")


@functools.lru_cache(maxsize=4096)
def _codepoint_width(codepoint: int, ambiguous_width: int) -> int:
    try:
        return WIDTH_OVERRIDES[codepoint]
    except KeyError:
        pass
    if codepoint < 0x20 or 0x7F <= codepoint < 0xA0:
        return 0
    if grapheme_class(codepoint) & _zero_width_classes:
        return 0
    if general_category[codepoint] in ("Mn", "Me", "Mc", "Cf"):
        return 0
    eaw = east_asian_widths[codepoint]
    if eaw in ("W", "F"):
        return 2
    if eaw == "A":
        return ambiguous_width
    return 1


def codepoint_width(codepoint: int | str, *, ambiguous_width: int = 1) -> int:
    """Returns how many columns a codepoint occupies on its own

    :param ambiguous_width: Width to use for East Asian Ambiguous
        codepoints, which is 1 in most contexts and 2 in East Asian
        legacy contexts
    """
    check_ambiguous_width(ambiguous_width)
    codepoint = codepoint_value(codepoint)
    if codepoint in _spacing_extend:
        return 1
    return _codepoint_width(codepoint, ambiguous_width)


def cluster_width(cluster: str, *, ambiguous_width: int = 1) -> int:
    """Returns how many columns a single grapheme cluster occupies

    The width comes from the base codepoint.  Emoji ZWJ sequences and
    flags are two columns, as are pictographs followed by a modifier or
    VS16.  VS15 makes a pictograph one column.  Other codepoints in the
    cluster add nothing."""
    width = 0
    base = None
    for char in cluster:
        codepoint = ord(char)
        if base is None:
            width = _codepoint_width(codepoint, ambiguous_width)
            if width:
                base = codepoint
                if is_regional_indicator_codepoint(codepoint):
                    width = 2
            continue
        if codepoint == VS16:
            if is_extended_pictographic_codepoint(base):
                width = 2
        elif codepoint == VS15:
            if is_extended_pictographic_codepoint(base):
                width = 1
        elif codepoint == 0x200D or is_emoji_modifier(codepoint):
            if is_extended_pictographic_codepoint(base):
                width = 2
        elif codepoint in _spacing_extend:
            width += 1
    return width
