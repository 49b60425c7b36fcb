"""
Sentence boundaries

Implements the `sentence boundary rules
<https://www.unicode.org/reports/tr29/#Sentence_Boundary_Rules>`__.  A
sentence includes its terminating punctuation, any closing quotes
and brackets, trailing spaces, and a paragraph separator.

By default the rules are tailored so that a full stop after what looks
like an abbreviation doesn't end the sentence.  The heuristic is a
single uppercase letter (initials, ``U.S.A.``), or two or three
letters starting with uppercase and having no vowels (``Mr.``,
``Dr.``, ``Mrs.``).  There is no dictionary of abbreviations.
"""

from __future__ import annotations

import functools

from ._engine import ANY, START, NeedMore, RuleTable, Step, check_state, resolve, step
from ._ucd import SC, sentence_class


class State:
    "Sentence engine states"

    Any = ANY
    CR = 1
    ParaSep = 2
    ATerm = 3
    Upper = 4
    Lower = 5
    SB7 = 6
    SB8Close = 7
    SB8Sp = 8
    STerm = 9
    SB8aClose = 10
    SB8aSp = 11


_valid_states = range(State.Any, State.SB8aSp + 1)

BREAK, NO_BREAK = True, False

_aterm_states = (State.ATerm, State.SB7, State.SB8Close, State.SB8Sp)
_sterm_states = (State.STerm, State.SB8aClose, State.SB8aSp)

# where each paragraph separator leads
_para_seps = ((SC.Sep, State.ParaSep), (SC.LF, State.ParaSep), (SC.CR, State.CR))

_rules: RuleTable = {
    # SB3
    (ANY, SC.CR): (State.CR, NO_BREAK, 9990),
    (State.CR, SC.LF): (State.ParaSep, NO_BREAK, 30),
    # SB4
    (ANY, SC.Sep): (State.ParaSep, NO_BREAK, 9990),
    (ANY, SC.LF): (State.ParaSep, NO_BREAK, 9990),
    (State.ParaSep, ANY): (State.Any, BREAK, 40),
    (State.CR, ANY): (State.Any, BREAK, 40),
    # SB6
    (ANY, SC.ATerm): (State.ATerm, NO_BREAK, 9990),
    (State.ATerm, SC.Numeric): (State.Any, NO_BREAK, 60),
    (State.SB7, SC.Numeric): (State.Any, NO_BREAK, 60),
    # SB7
    (ANY, SC.Upper): (State.Upper, NO_BREAK, 9990),
    (ANY, SC.Lower): (State.Lower, NO_BREAK, 9990),
    (State.Upper, SC.ATerm): (State.SB7, NO_BREAK, 70),
    (State.Lower, SC.ATerm): (State.SB7, NO_BREAK, 70),
    (State.SB7, SC.Upper): (State.Upper, NO_BREAK, 70),
    # SB8a
    (ANY, SC.STerm): (State.STerm, NO_BREAK, 9990),
    # SB10
    (State.SB8Sp, SC.Sp): (State.SB8Sp, NO_BREAK, 100),
    (State.SB8aSp, SC.Sp): (State.SB8aSp, NO_BREAK, 100),
}

for _state in _aterm_states + _sterm_states:
    # SB8a
    _rules[_state, SC.SContinue] = (State.Any, NO_BREAK, 81)
    _rules[_state, SC.ATerm] = (State.ATerm, NO_BREAK, 81)
    _rules[_state, SC.STerm] = (State.STerm, NO_BREAK, 81)
    # SB11
    _rules[_state, ANY] = (State.Any, BREAK, 110)

for _state in (State.ATerm, State.SB7, State.SB8Close):
    # SB9
    _rules[_state, SC.Close] = (State.SB8Close, NO_BREAK, 90)
    _rules[_state, SC.Sp] = (State.SB8Sp, NO_BREAK, 90)

for _state in (State.STerm, State.SB8aClose):
    # SB9
    _rules[_state, SC.Close] = (State.SB8aClose, NO_BREAK, 90)
    _rules[_state, SC.Sp] = (State.SB8aSp, NO_BREAK, 90)

for _cls, _next in _para_seps:
    for _state in (State.ATerm, State.SB7, State.SB8Close, State.STerm, State.SB8aClose):
        # SB9
        _rules[_state, _cls] = (_next, NO_BREAK, 90)
    for _state in (State.SB8Sp, State.SB8aSp):
        # SB10
        _rules[_state, _cls] = (_next, NO_BREAK, 100)

# SB998
_default = (State.Any, NO_BREAK, 9990)

# what ends the SB8 lookahead
_sb8_stop = SC.OLetter | SC.Upper | SC.Lower | SC.Sep | SC.CR | SC.LF | SC.ATerm | SC.STerm

_letters = SC.Upper | SC.Lower | SC.OLetter
_ignored = SC.Extend | SC.Format

_vowels = frozenset("aeiouAEIOU")


def _after_abbreviation(text: str, pos: int) -> bool:
    "Does the full stop run before pos follow an abbreviation like token?"
    i = pos - 1
    while i >= 0 and sentence_class(ord(text[i])) & (SC.Sp | SC.Close | _ignored):
        i -= 1
    if i < 0 or not sentence_class(ord(text[i])) & SC.ATerm:
        return False
    while i >= 0 and sentence_class(ord(text[i])) & (SC.ATerm | _ignored):
        i -= 1
    token: list[str] = []
    while i >= 0 and len(token) <= 3:
        cls = sentence_class(ord(text[i]))
        if cls & _letters:
            token.insert(0, text[i])
        elif not cls & _ignored:
            break
        i -= 1
    if not 1 <= len(token) <= 3 or sentence_class(ord(token[0])) != SC.Upper:
        return False
    return len(token) == 1 or _vowels.isdisjoint(token)


def transition(state: int, text: str, pos: int, final: bool, tailored: bool = True) -> tuple[int, bool]:
    "Classifies ``text[pos]`` returning the new state and if there is a boundary before it"
    cls = sentence_class(ord(text[pos]))

    # SB5 with care not to apply it after paragraph separators (SB4)
    if cls & _ignored:
        if state in (State.ParaSep, State.CR):
            return State.Any, BREAK
        if state == START:
            return State.Any, NO_BREAK
        return state, NO_BREAK

    if state == START:
        state = State.Any

    new_state, boundary, rule = resolve(_rules, state, cls, _default)

    if rule > 80 and state in _aterm_states:
        # SB8
        for i in range(pos, len(text)):
            far = sentence_class(ord(text[i]))
            if far & _sb8_stop:
                break
        else:
            if not final:
                raise NeedMore()
            far = None
        if far == SC.Lower:
            return State.Lower, NO_BREAK

        if tailored and boundary and rule == 110 and _after_abbreviation(text, pos):
            return new_state, NO_BREAK

    return new_state, boundary


_transitions = {
    True: functools.partial(transition, tailored=True),
    False: functools.partial(transition, tailored=False),
}


def sentence_step(text: str | bytes, state: int = START, *, final: bool = True, tailored: bool = True) -> Step:
    """Returns the next sentence

    The width member of the result is always None.

    :param text: :class:`str`, or :class:`bytes` which is decoded as UTF-8
    :param state: :data:`START` for the beginning of text, otherwise
        the state from the previous step
    :param final: Set to False if more text may follow, in which case
        an undecided sentence is returned empty with the remainder
        being all of ``text``
    :param tailored: Don't end sentences after abbreviation like
        tokens.  Use False for the plain Unicode rules.
    """
    check_state(state, _valid_states)
    return step(text, state, final, _transitions[bool(tailored)])
