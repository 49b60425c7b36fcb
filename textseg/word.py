"""
Word boundaries

Implements the `word boundary rules
<https://www.unicode.org/reports/tr29/#Word_Boundary_Rules>`__.  The
segments include spaces and punctuation between words.  Use
:func:`word_kind` to tell them apart.

By default the rules are tailored so hyphens and ``@`` between letters
don't break, keeping hyphenated words and email addresses together.
"""

from __future__ import annotations

import enum
import functools

from ._engine import ANY, START, NeedMore, RuleTable, Step, check_state, resolve, step
from ._ucd import WC, general_category, word_class


class State:
    "Word engine states"

    Any = ANY
    CR = 1
    LF = 2
    Newline = 3
    WSegSpace = 4
    Hebrew_Letter = 5
    ALetter = 6
    WB7 = 7
    WB7c = 8
    Numeric = 9
    WB11 = 10
    Katakana = 11
    ExtendNumLet = 12
    RI_Odd = 13
    RI_Even = 14
    # set when the preceding codepoint was a ZWJ
    ZWJ_BIT = 16


_valid_states = frozenset(
    state | bit for state in range(State.Any, State.RI_Even + 1) for bit in (0, State.ZWJ_BIT)
)

BREAK, NO_BREAK = True, False

_AHLetter = {WC.ALetter: State.ALetter, WC.Hebrew_Letter: State.Hebrew_Letter}

_rules: RuleTable = {
    # WB3b
    (ANY, WC.Newline): (State.Newline, BREAK, 32),
    (ANY, WC.CR): (State.CR, BREAK, 32),
    (ANY, WC.LF): (State.LF, BREAK, 32),
    # WB3a
    (State.Newline, ANY): (State.Any, BREAK, 31),
    (State.CR, ANY): (State.Any, BREAK, 31),
    (State.LF, ANY): (State.Any, BREAK, 31),
    # WB3
    (State.CR, WC.LF): (State.LF, NO_BREAK, 30),
    # WB3d
    (ANY, WC.WSegSpace): (State.WSegSpace, BREAK, 9990),
    (State.WSegSpace, WC.WSegSpace): (State.WSegSpace, NO_BREAK, 34),
    # WB7a
    (State.Hebrew_Letter, WC.Single_Quote): (State.Any, NO_BREAK, 71),
    # WB7c
    (State.WB7c, WC.Hebrew_Letter): (State.Hebrew_Letter, NO_BREAK, 73),
    # WB8
    (ANY, WC.Numeric): (State.Numeric, BREAK, 9990),
    (State.Numeric, WC.Numeric): (State.Numeric, NO_BREAK, 80),
    # WB11
    (State.WB11, WC.Numeric): (State.Numeric, NO_BREAK, 110),
    # WB13
    (ANY, WC.Katakana): (State.Katakana, BREAK, 9990),
    (State.Katakana, WC.Katakana): (State.Katakana, NO_BREAK, 130),
    # WB13a
    (ANY, WC.ExtendNumLet): (State.ExtendNumLet, BREAK, 131),
}

for _cls, _state in _AHLetter.items():
    # WB5
    _rules[ANY, _cls] = (_state, BREAK, 9990)
    for _left in _AHLetter.values():
        _rules[_left, _cls] = (_state, NO_BREAK, 50)
    # WB7
    _rules[State.WB7, _cls] = (_state, NO_BREAK, 70)
    # WB9
    _rules[_state, WC.Numeric] = (State.Numeric, NO_BREAK, 90)
    # WB10
    _rules[State.Numeric, _cls] = (_state, NO_BREAK, 100)

for _left in (State.ALetter, State.Hebrew_Letter, State.Numeric, State.Katakana, State.ExtendNumLet):
    # WB13a
    _rules[_left, WC.ExtendNumLet] = (State.ExtendNumLet, NO_BREAK, 131)

for _cls, _state in (*_AHLetter.items(), (WC.Numeric, State.Numeric), (WC.Katakana, State.Katakana)):
    # WB13b
    _rules[State.ExtendNumLet, _cls] = (_state, NO_BREAK, 132)

# WB999
_default = (State.Any, BREAK, 9990)

_ignored = WC.Extend | WC.Format | WC.ZWJ
_line_states = (State.Newline, State.CR, State.LF)

# letters and numbers either side of these need lookahead
_mid_classes = WC.MidLetter | WC.MidNumLet | WC.Single_Quote | WC.Double_Quote | WC.MidNum

# hyphens and commercial at
_tailored_midletter = frozenset((0x002D, 0x2010, 0x2011, 0x0040))


def _classify(codepoint: int, tailored: bool) -> int:
    if tailored and codepoint in _tailored_midletter:
        return WC.MidLetter
    return word_class(codepoint)


def _far_class(text: str, pos: int, final: bool, tailored: bool) -> int | None:
    "Class of the first codepoint at or after pos ignoring Extend, Format and ZWJ"
    for i in range(pos, len(text)):
        cls = _classify(ord(text[i]), tailored)
        if not cls & _ignored:
            return cls
    if not final:
        raise NeedMore()
    return None


def transition(state: int, text: str, pos: int, final: bool, tailored: bool = True) -> tuple[int, bool]:
    "Classifies ``text[pos]`` returning the new state and if there is a boundary before it"
    cls = _classify(ord(text[pos]), tailored)

    # WB4 with care not to apply it after line breaks (WB3a)
    if cls == WC.ZWJ:
        if state in _line_states:
            return State.Any | State.ZWJ_BIT, BREAK
        if state == START or state == State.WSegSpace:
            return State.Any | State.ZWJ_BIT, NO_BREAK
        return state | State.ZWJ_BIT, NO_BREAK
    if cls & (WC.Extend | WC.Format):
        if state in _line_states:
            return State.Any, BREAK
        if state == START or state == State.WSegSpace:
            return State.Any, NO_BREAK
        return state & ~State.ZWJ_BIT, NO_BREAK

    if state == START:
        state = State.Any
    elif state & State.ZWJ_BIT:
        # WB3c
        if cls == WC.Extended_Pictographic:
            return State.Any, NO_BREAK
        state &= ~State.ZWJ_BIT

    new_state, boundary, rule = resolve(_rules, state, cls, _default)

    if rule > 60 and cls & _mid_classes and state in (State.ALetter, State.Hebrew_Letter, State.Numeric):
        far = _far_class(text, pos + 1, final, tailored)
        # WB6
        if (
            state != State.Numeric
            and cls & (WC.MidLetter | WC.MidNumLet | WC.Single_Quote)
            and far in (WC.ALetter, WC.Hebrew_Letter)
        ):
            return State.WB7, NO_BREAK
        # WB7b
        if rule > 72 and state == State.Hebrew_Letter and cls == WC.Double_Quote and far == WC.Hebrew_Letter:
            return State.WB7c, NO_BREAK
        # WB12
        if (
            rule > 120
            and state == State.Numeric
            and cls & (WC.MidNum | WC.MidNumLet | WC.Single_Quote)
            and far == WC.Numeric
        ):
            return State.WB11, NO_BREAK

    # WB15 and WB16
    if new_state == State.Any and cls == WC.Regional_Indicator:
        if state == State.RI_Odd:
            return State.RI_Even, NO_BREAK
        return State.RI_Odd, BREAK

    return new_state, boundary


_transitions = {
    True: functools.partial(transition, tailored=True),
    False: functools.partial(transition, tailored=False),
}


def word_step(text: str | bytes, state: int = START, *, final: bool = True, tailored: bool = True) -> Step:
    """Returns the next word segment

    Segments are words, and also the spaces and punctuation between
    them.  The width member of the result is always None.

    :param text: :class:`str`, or :class:`bytes` which is decoded as UTF-8
    :param state: :data:`START` for the beginning of text, otherwise
        the state from the previous step
    :param final: Set to False if more text may follow, in which case
        an undecided segment is returned empty with the remainder
        being all of ``text``
    :param tailored: Keep hyphenated words and email addresses
        together.  Use False for the plain Unicode rules.
    """
    check_state(state, _valid_states)
    return step(text, state, final, _transitions[bool(tailored)])


class WordKind(enum.IntFlag):
    "What a word segment contains"

    NONE = 0
    "Empty segment"
    LETTER = 1
    "Letters or numbers, a word"
    WHITESPACE = 2
    "Only spaces and line breaks"
    PUNCTUATION = 4
    "Punctuation, symbols, emoji, and anything else"


_letter_classes = WC.ALetter | WC.Hebrew_Letter | WC.Numeric | WC.Katakana | WC.ExtendNumLet
_space_classes = WC.WSegSpace | WC.CR | WC.LF | WC.Newline | _ignored


def word_kind(segment: str | bytes) -> WordKind:
    "Classifies a segment returned by word segmentation"
    if isinstance(segment, (bytes, bytearray)):
        segment = bytes(segment).decode("utf-8", "surrogateescape")
    if not segment:
        return WordKind.NONE
    spaces = True
    for char in segment:
        cls = word_class(ord(char))
        if cls & _letter_classes or general_category[ord(char)][0] in "LN":
            return WordKind.LETTER
        if not (cls & _space_classes or char.isspace()):
            spaces = False
    return WordKind.WHITESPACE if spaces else WordKind.PUNCTUATION
