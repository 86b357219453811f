"""
Rests are merged and respelled following Behind Bars, by Elaine Gould (2011)
"""
import pytest

from mensura.common import F
from mensura.rhythm import (Bar, Metre, Duration, NoteValue, RhythmSlot, Lifetime,
                            OverfilledBar, NoSpellingFound, simplify, config)


H = NoteValue.HALF
Q = NoteValue.QUARTER
E = NoteValue.EIGHTH
S = NoteValue.SIXTEENTH
T = NoteValue.THIRTYSECOND
TRIPLET = F(3, 2)


def X(value: NoteValue, dots=0, tuplet=None):
    """A note"""
    return (Duration(value, dots, tuplet), True)


def R(value: NoteValue, dots=0, tuplet=None):
    """A rest"""
    return (Duration(value, dots, tuplet), False)


def makeBar(timesig: str, *edits) -> Bar:
    bar = Bar(timesig)
    for start, item in edits:
        bar.splice(F(start), [item])
    return bar


def checkInvariants(bar: Bar):
    rhythm = bar.rhythm()
    if rhythm:
        assert sum(dur.duration() for dur, _ in rhythm) == bar.metre.duration()
        assert any(struck for _, struck in rhythm)
    for dur, struck in rhythm:
        if not struck:
            assert dur.printable(), f"Unprintable rest {dur} in {bar}"


def test_new_bar_is_whole_rest():
    bar = Bar(Metre(4, 4))
    assert bar.wholeRest()
    assert bar.rhythm() == []
    children = bar.children()
    assert len(children) == 1
    assert children[0].duration == Duration.newWholeRest(F(1))
    assert children[0].start == 0
    assert children[0].lifetime.isAutomatic()


@pytest.mark.parametrize("start, expected", [
    ("0", [X(Q), R(Q), R(H)]),
    ("1/4", [R(Q), X(Q), R(H)]),
    ("1/2", [R(H), X(Q), R(Q)]),
])
def test_four_four_quarters(start, expected):
    bar = makeBar("4/4", (start, X(Q)))
    assert bar.rhythm() == expected
    assert not bar.wholeRest()


def test_replacement_clipped_at_end():
    bar = Bar(Metre(4, 4))
    bar.splice(F(3, 4), [X(Q), X(Q)])
    assert bar.rhythm() == [R(H), R(Q), X(Q)]

    bar = makeBar("4/4", ("3/4", X(H)))
    assert bar.rhythm() == [R(H), R(Q), X(Q)]


def test_splice_past_end_is_noop():
    bar = makeBar("4/4", ("1", X(Q)))
    assert bar.rhythm() == []
    assert bar.wholeRest()

    bar = makeBar("4/4", ("0", X(Q)))
    before = bar.rhythm()
    bar.splice(F(1), [X(H)])
    bar.splice(F(3, 2), [X(H)])
    assert bar.rhythm() == before


def test_negative_start():
    bar = Bar(Metre(4, 4))
    with pytest.raises(ValueError):
        bar.splice(F(-1, 4), [X(Q)])
    assert bar.wholeRest()


def test_half_note_in_the_middle():
    bar = makeBar("4/4", ("1/4", X(H)))
    assert bar.rhythm() == [R(Q), X(H), R(Q)]


def test_rest_cancels_note():
    bar = makeBar("4/4", ("1/4", X(H)), ("1/4", R(H)))
    assert bar.rhythm() == []
    assert bar.wholeRest()


def test_simplify():
    bar = makeBar("4/4", ("1/4", X(H)), ("3/8", R(E)))
    assert bar.rhythm() == [R(Q), X(E), R(E), R(H)]

    # This is not a good rhythm, but explicit rhythms are not adjusted
    bar = makeBar("4/4", ("1/4", X(H)), ("5/8", R(E)))
    assert bar.rhythm() == [R(Q), X(Q, 1), R(E), R(Q)]

    bar = makeBar("4/4",
                  ("0", X(H)),
                  ("1/8", X(E)),
                  ("2/8", X(E)),
                  ("3/8", X(E)),
                  ("1/8", R(E)),
                  ("2/8", R(E)),
                  ("3/8", R(E)))
    assert bar.rhythm() == [X(E), R(E), R(Q), R(H)]


@pytest.mark.parametrize("timesig", ["4/8", "2/4"])
def test_simple_time_exposes_middle_eighths(timesig):
    # p. 161
    assert makeBar(timesig, ("3/8", X(E))).rhythm() == [R(Q), R(E), X(E)]
    assert makeBar(timesig, ("0", X(E)), ("3/8", X(E))).rhythm() == [X(E), R(E), R(E), X(E)]
    assert makeBar(timesig, ("0", X(E))).rhythm() == [X(E), R(E), R(Q)]


@pytest.mark.parametrize("timesig", ["4/4", "2/2"])
def test_simple_time_exposes_middle_quarters(timesig):
    # p. 161
    assert makeBar(timesig, ("3/4", X(Q))).rhythm() == [R(H), R(Q), X(Q)]
    assert makeBar(timesig, ("0", X(Q)), ("3/4", X(Q))).rhythm() == [X(Q), R(Q), R(Q), X(Q)]
    assert makeBar(timesig, ("0", X(Q))).rhythm() == [X(Q), R(Q), R(H)]


def test_compound_time_exposes_middle():
    # p. 161
    assert makeBar("6/16", ("5/16", X(S))).rhythm() == [R(E, 1), R(E), X(S)]
    assert makeBar("6/16", ("0", X(E)), ("4/16", X(E))).rhythm() == [X(E), R(S), R(S), X(E)]
    assert makeBar("6/16", ("0", X(S))).rhythm() == [X(S), R(S), R(S), R(E, 1)]

    assert makeBar("6/8", ("5/8", X(E))).rhythm() == [R(Q, 1), R(Q), X(E)]
    assert makeBar("6/8", ("0", X(Q)), ("4/8", X(Q))).rhythm() == [X(Q), R(E), R(E), X(Q)]
    assert makeBar("6/8", ("0", X(E))).rhythm() == [X(E), R(E), R(E), R(Q, 1)]

    assert makeBar("6/4", ("5/4", X(Q))).rhythm() == [R(H, 1), R(H), X(Q)]
    assert makeBar("6/4", ("0", X(H)), ("4/4", X(H))).rhythm() == [X(H), R(Q), R(Q), X(H)]
    assert makeBar("6/4", ("0", X(Q))).rhythm() == [X(Q), R(Q), R(Q), R(H, 1)]

    assert makeBar("12/8", ("11/8", X(E))).rhythm() == [R(H, 1), R(Q, 1), R(Q), X(E)]


def test_triple_metre_shows_all_beats():
    # p. 161
    assert makeBar("3/4", ("2/4", X(Q))).rhythm() == [R(Q), R(Q), X(Q)]
    assert makeBar("3/8", ("2/8", X(E))).rhythm() == [R(E), R(E), X(E)]
    assert makeBar("9/8", ("6/8", X(Q, 1))).rhythm() == [R(Q, 1), R(Q, 1), X(Q, 1)]


def test_dotted_rests():
    # p. 161
    bar = makeBar("2/4", ("3/16", X(S)), ("7/16", X(S)))
    assert bar.rhythm() == [R(E, 1), X(S), R(E, 1), X(S)]

    assert makeBar("9/8", ("8/8", X(E))).rhythm() == [R(Q, 1), R(Q, 1), R(Q), X(E)]


def test_no_dotted_rests_at_end_of_simple_time_beat():
    # p. 162
    bar = makeBar("2/4", ("3/16", X(S)), ("4/16", X(S)))
    assert bar.rhythm() == [R(E, 1), X(S), X(S), R(S), R(E)]

    bar = makeBar("2/2", ("3/8", X(E)), ("4/8", X(E)))
    assert bar.rhythm() == [R(Q, 1), X(E), X(E), R(E), R(Q)]


def test_maximum_dotted_rest():
    # p. 162
    assert makeBar("4/4", ("7/8", X(E))).rhythm() == [R(H), R(Q), R(E), X(E)]
    assert makeBar("4/4", ("3/16", X(S))).rhythm() == [R(E, 1), X(S), R(Q), R(H)]
    bar = makeBar("2/2", ("3/8", X(E)), ("7/8", X(E)))
    assert bar.rhythm() == [R(Q, 1), X(E), R(Q, 1), X(E)]
    assert makeBar("2/2", ("0", X(E))).rhythm() == [X(E), R(E), R(Q), R(H)]


def test_double_dotted_rest():
    # p. 162
    assert makeBar("2/4", ("7/32", X(T))).rhythm() == [R(E, 2), X(T), R(Q)]
    bar = makeBar("2/4", ("7/32", X(T)), ("8/32", X(T)))
    assert bar.rhythm() == [R(E, 2), X(T), X(T), R(T), R(S), R(E)]


def test_expose_middle_of_beat():
    # p. 163
    bar = makeBar("2/4", ("0", X(T)), ("7/32", X(T)))
    assert bar.rhythm() == [X(T), R(T), R(S), R(S, 1), X(T), R(Q)]


def test_compound_combine_segments():
    # p. 163
    assert makeBar("12/8", ("9/8", X(Q, 1))).rhythm() == [R(H, 1), R(Q, 1), X(Q, 1)]
    assert makeBar("12/8", ("0", X(Q, 1))).rhythm() == [X(Q, 1), R(Q, 1), R(H, 1)]


def test_compound_combine_start():
    # p. 163
    bar = makeBar("6/8", ("1/4", X(E)), ("5/8", X(E)))
    assert bar.rhythm() == [R(Q), X(E), R(Q), X(E)]
    bar = makeBar("6/8", ("5/16", X(S)))
    assert bar.rhythm() == [R(E), R(E, 1), X(S), R(Q, 1)]


def test_compound_spell_out_later_beats():
    # p. 163
    bar = makeBar("6/8", ("0", X(E)), ("3/8", X(S)))
    assert bar.rhythm() == [X(E), R(E), R(E), X(S), R(S), R(E), R(E)]


def test_compound_combine_initial_rests_unless_confusing():
    # p. 163
    bar = makeBar("6/8", ("2/8", X(E)), ("11/16", X(S)))
    assert bar.rhythm() == [R(Q), X(E), R(E), R(E, 1), X(S)]
    # p. 164
    bar = makeBar("9/8", ("0", X(E)), ("5/8", X(E)), ("8/8", X(E)))
    assert bar.rhythm() == [X(E), R(E), R(E), R(Q), X(E), R(Q), X(E)]
    bar = makeBar("6/8", ("0", X(S)), ("5/16", X(S)))
    assert bar.rhythm() == [X(S), R(S), R(E), R(S), X(S), R(Q, 1)]


def test_triplets():
    bar = makeBar("4/4", ("0", X(Q, tuplet=TRIPLET)))
    assert bar.rhythm() == [X(Q, tuplet=TRIPLET), R(Q, tuplet=TRIPLET), R(Q, tuplet=TRIPLET), R(H)]

    bar = makeBar("4/4", ("2/6", X(Q, tuplet=TRIPLET)))
    assert bar.rhythm() == [R(Q, tuplet=TRIPLET), R(Q, tuplet=TRIPLET), X(Q, tuplet=TRIPLET), R(H)]


def test_triplets_fill_beat():
    bar = makeBar("4/4",
                  ("0", X(Q, tuplet=TRIPLET)),
                  ("1/6", X(Q, tuplet=TRIPLET)),
                  ("2/6", X(Q, tuplet=TRIPLET)))
    assert bar.rhythm() == [X(Q, tuplet=TRIPLET)] * 3 + [R(H)]
    checkInvariants(bar)


def test_regression_12_8_unprintable():
    bar = makeBar("12/8", ("0", X(E)), ("11/8", X(E)))
    assert bar.rhythm() == [X(E), R(E), R(E), R(Q, 1), R(Q, 1), R(Q), X(E)]


def test_struck_entries_are_kept():
    bar = makeBar("4/4", ("1/8", X(Q)), ("5/8", X(E, 1)))
    struck = [(dur, s) for dur, s in bar.rhythm() if s]
    assert struck == [X(Q), X(E, 1)]
    children = bar.children()
    starts = [child.start for child in children if child.lifetime.isExplicit()]
    assert starts == [F(1, 8), F(5, 8)]
    checkInvariants(bar)


def test_truncated_note():
    # A note overlapped by a later splice is shortened
    bar = makeBar("4/4", ("0", X(H)), ("1/4", X(Q)))
    assert bar.rhythm() == [X(Q), X(Q), R(H)]


def test_note_covering_start_of_existing_note():
    # The part of the existing note which is not covered becomes a rest
    bar = makeBar("4/4", ("1/4", X(H)), ("0", X(H)))
    assert bar.rhythm() == [X(H), R(H)]
    checkInvariants(bar)


def test_payload_is_kept():
    bar = Bar(Metre(3, 4))
    bar.splice(F(1, 4), [(Duration(NoteValue.QUARTER), True, 'a')])
    bar.splice(F(1, 2), [RhythmSlot(Duration(NoteValue.EIGHTH), True, 'b')])
    assert bar.slots() == [RhythmSlot(Duration(Q), False),
                           RhythmSlot(Duration(Q), True, 'a'),
                           RhythmSlot(Duration(E), True, 'b'),
                           RhythmSlot(Duration(E), False)]
    # Rests never carry a payload
    bar.splice(F(0), [(Duration(NoteValue.EIGHTH), False, 'c')])
    assert all(slot.payload is None for slot in bar.slots() if not slot.struck)


def test_remove():
    bar = Bar(Metre(4, 4))
    bar.splice(F(0), [(Duration(NoteValue.QUARTER), True, 1)])
    bar.splice(F(1, 2), [(Duration(NoteValue.QUARTER), True, 2)])
    assert bar.remove(2)
    assert bar.rhythm() == [X(Q), R(Q), R(H)]
    assert not bar.remove(2)
    assert bar.remove(1)
    assert bar.wholeRest()


def test_copy_is_independent():
    bar = makeBar("4/4", ("0", X(Q)))
    other = bar.copy()
    other.splice(F(1, 2), [X(H)])
    assert bar.rhythm() == [X(Q), R(Q), R(H)]
    assert other.rhythm() == [X(Q), R(Q), X(H)]


def test_children():
    bar = makeBar("4/4", ("1/4", X(Q)))
    children = bar.children()
    assert [child.start for child in children] == [0, F(1, 4), F(1, 2)]
    assert [child.slot for child in children] == [0, 1, 2]
    assert children[0].lifetime.isAutomatic()
    assert children[1].lifetime.isExplicit()
    assert children[2].end() == 1

    bar = Bar(Metre(4, 4))
    bar.splice(F(0), [(Duration(NoteValue.QUARTER), True, Lifetime.temporary(7))])
    assert bar.children()[0].lifetime == Lifetime.temporary(7)


def test_simplify_is_idempotent():
    bars = [
        makeBar("4/4", ("1/8", X(Q)), ("5/8", X(E))),
        makeBar("6/8", ("5/16", X(S))),
        makeBar("12/8", ("0", X(E)), ("11/8", X(E))),
        makeBar("2/4", ("0", X(T)), ("7/32", X(T))),
    ]
    for bar in bars:
        before = bar.rhythm()
        checkInvariants(bar)
        slots = bar.slots()
        assert simplify(bar.metre, slots) == simplify(bar.metre, simplify(bar.metre, slots))
        # Splicing the first slot with itself does not change anything
        first = slots[0]
        bar.splice(F(0), [first])
        assert bar.rhythm() == before


@pytest.mark.parametrize("timesig", ["4/4", "3/4", "6/8", "2/2", "9/8", "12/8", "5/8", "7/8"])
def test_invariants_after_edits(timesig):
    bar = Bar(timesig)
    total = bar.metre.duration()
    step = F(1, 8)
    t = F(0)
    i = 0
    while t < total:
        if i % 3 == 0:
            bar.splice(t, [X(E)])
        elif i % 3 == 1:
            bar.splice(t, [X(S)])
        checkInvariants(bar)
        t += step
        i += 1
    # Remove every other eighth
    t = F(0)
    while t < total:
        bar.splice(t, [R(E)])
        checkInvariants(bar)
        t += step * 2


def test_simplify_overfilled():
    metre = Metre(2, 4)
    rhythm = [RhythmSlot(Duration(NoteValue.HALF), True), RhythmSlot(Duration(NoteValue.QUARTER), False)]
    with pytest.raises(OverfilledBar):
        simplify(metre, rhythm)


def test_simplify_without_notes_is_whole_rest():
    metre = Metre(4, 4)
    rhythm = [RhythmSlot(Duration(NoteValue.QUARTER), False)] * 4
    assert simplify(metre, rhythm) == []


def test_failed_splice_leaves_bar_untouched(monkeypatch):
    import mensura.rhythm.bar

    def failingRespell(metre, rhythm):
        raise NoSpellingFound("no spelling")

    bar = makeBar("4/4", ("0", X(E)), ("3/8", X(S)))
    before = bar.slots()
    monkeypatch.setattr(mensura.rhythm.bar, 'respell', failingRespell)
    with pytest.raises(NoSpellingFound):
        bar.splice(F(1, 2), [X(Q)])
    assert bar.slots() == before
    with pytest.raises(NoSpellingFound):
        bar.remove(None)
    assert bar.slots() == before


def test_search_logging():
    config['logSearch'] = True
    try:
        bar = makeBar("6/8", ("5/16", X(S)))
        assert bar.rhythm() == [R(E), R(E, 1), X(S), R(Q, 1)]
    finally:
        config['logSearch'] = False


@pytest.mark.parametrize("start, item", [
    ("39/32", X(T, 1)),
    ("25/64", X(NoteValue.SIXTYFOURTH)),
    ("41/64", X(NoteValue.SIXTYFOURTH, 1)),
])
def test_short_notes_in_compound_time(start, item):
    default = config['searchMaxStates']
    config['searchMaxStates'] = 5000
    try:
        bar = makeBar("12/8", (start, item))
    finally:
        config['searchMaxStates'] = default
    checkInvariants(bar)
    notes = [child for child in bar.children() if child.lifetime.isExplicit()]
    assert len(notes) == 1
    assert notes[0].start == F(start)
    assert notes[0].duration == item[0]


def test_search_limit():
    default = config['searchMaxStates']
    config['searchMaxStates'] = 1000
    try:
        bar = makeBar("4/4", ("0", X(Q)))
        assert bar.rhythm() == [X(Q), R(Q), R(H)]
    finally:
        config['searchMaxStates'] = default
