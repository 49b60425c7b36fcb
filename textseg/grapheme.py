"""
Grapheme cluster boundaries

Implements the `extended grapheme cluster rules
<https://www.unicode.org/reports/tr29/#Grapheme_Cluster_Boundary_Rules>`__
as a state machine.  The state after each codepoint records which
multi codepoint rule is in progress, such as a Hangul syllable, an
emoji ZWJ sequence, a regional indicator pair, or an Indic conjunct.
"""

from __future__ import annotations

from ._engine import ANY, START, RuleTable, Step, check_state, resolve, step
from ._ucd import GC, grapheme_class
from .width import cluster_width, check_ambiguous_width


class State:
    "Grapheme engine states"

    Any = ANY
    CR = 1
    ControlLF = 2
    L = 3
    LVV = 4
    LVTT = 5
    Prepend = 6
    Extended_Pictographic = 7
    Extended_Pictographic_ZWJ = 8
    RI_Odd = 9
    RI_Even = 10
    Consonant = 11
    Consonant_Linker = 12


_valid_states = range(State.Any, State.Consonant_Linker + 1)

# Extend for the purposes of GB9 and GB11
_extends = (GC.Extend, GC.InCB_Extend, GC.InCB_Linker)

BREAK, NO_BREAK = True, False

_rules: RuleTable = {
    # GB3
    (State.CR, GC.LF): (State.ControlLF, NO_BREAK, 30),
    # GB4
    (State.CR, ANY): (State.Any, BREAK, 40),
    (State.ControlLF, ANY): (State.Any, BREAK, 40),
    # GB5
    (ANY, GC.CR): (State.CR, BREAK, 50),
    (ANY, GC.LF): (State.ControlLF, BREAK, 50),
    (ANY, GC.Control): (State.ControlLF, BREAK, 50),
    # GB6
    (ANY, GC.L): (State.L, BREAK, 9990),
    (State.L, GC.L): (State.L, NO_BREAK, 60),
    (State.L, GC.V): (State.LVV, NO_BREAK, 60),
    (State.L, GC.LV): (State.LVV, NO_BREAK, 60),
    (State.L, GC.LVT): (State.LVTT, NO_BREAK, 60),
    # GB7
    (ANY, GC.LV): (State.LVV, BREAK, 9990),
    (ANY, GC.V): (State.LVV, BREAK, 9990),
    (State.LVV, GC.V): (State.LVV, NO_BREAK, 70),
    (State.LVV, GC.T): (State.LVTT, NO_BREAK, 70),
    # GB8
    (ANY, GC.LVT): (State.LVTT, BREAK, 9990),
    (ANY, GC.T): (State.LVTT, BREAK, 9990),
    (State.LVTT, GC.T): (State.LVTT, NO_BREAK, 80),
    # GB9
    (ANY, GC.ZWJ): (State.Any, NO_BREAK, 90),
    # GB9a
    (ANY, GC.SpacingMark): (State.Any, NO_BREAK, 91),
    # GB9b
    (ANY, GC.Prepend): (State.Prepend, BREAK, 9990),
    (State.Prepend, ANY): (State.Any, NO_BREAK, 92),
    # GB9c
    (ANY, GC.InCB_Consonant): (State.Consonant, BREAK, 9990),
    (State.Consonant, GC.InCB_Extend): (State.Consonant, NO_BREAK, 93),
    (State.Consonant, GC.ZWJ): (State.Consonant, NO_BREAK, 93),
    (State.Consonant, GC.InCB_Linker): (State.Consonant_Linker, NO_BREAK, 93),
    (State.Consonant_Linker, GC.InCB_Extend): (State.Consonant_Linker, NO_BREAK, 93),
    (State.Consonant_Linker, GC.ZWJ): (State.Consonant_Linker, NO_BREAK, 93),
    (State.Consonant_Linker, GC.InCB_Linker): (State.Consonant_Linker, NO_BREAK, 93),
    (State.Consonant_Linker, GC.InCB_Consonant): (State.Consonant, NO_BREAK, 93),
    # GB11
    (ANY, GC.Extended_Pictographic): (State.Extended_Pictographic, BREAK, 9990),
    (State.Extended_Pictographic, GC.ZWJ): (State.Extended_Pictographic_ZWJ, NO_BREAK, 110),
    (State.Extended_Pictographic_ZWJ, GC.Extended_Pictographic): (State.Extended_Pictographic, NO_BREAK, 110),
    # GB12 / GB13
    (ANY, GC.Regional_Indicator): (State.RI_Odd, BREAK, 9990),
    (State.RI_Odd, GC.Regional_Indicator): (State.RI_Even, NO_BREAK, 120),
    (State.RI_Even, GC.Regional_Indicator): (State.RI_Odd, BREAK, 120),
}

for _cls in _extends:
    # GB9
    _rules[ANY, _cls] = (State.Any, NO_BREAK, 90)
    # GB11
    _rules[State.Extended_Pictographic, _cls] = (State.Extended_Pictographic, NO_BREAK, 110)

# GB999
_default = (State.Any, BREAK, 9990)


def transition(state: int, text: str, pos: int, final: bool) -> tuple[int, bool]:
    "Classifies ``text[pos]`` returning the new state and if there is a boundary before it"
    new_state, boundary, _ = resolve(
        _rules, State.Any if state == START else state, grapheme_class(ord(text[pos])), _default
    )
    return new_state, boundary


def grapheme_step(text: str | bytes, state: int = START, *, final: bool = True, ambiguous_width: int = 1) -> Step:
    """Returns the next grapheme cluster

    :param text: :class:`str`, or :class:`bytes` which is decoded as
        UTF-8.  Malformed bytes become their own single byte clusters.
    :param state: :data:`START` for the beginning of text, otherwise
        the state from the previous step
    :param final: Set to False if more text may follow.  If the end
        of the cluster can't be determined then the returned segment
        is empty, and the remainder is all of ``text``.  Append more
        text to it and call again.
    :param ambiguous_width: Width of East Asian Ambiguous codepoints

    :returns: A :class:`Step` with the cluster, the remaining text,
        the display width of the cluster, and the state
    """
    check_state(state, _valid_states)
    check_ambiguous_width(ambiguous_width)
    return step(text, state, final, transition, lambda cluster: cluster_width(cluster, ambiguous_width=ambiguous_width))
