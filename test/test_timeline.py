import pytest

from mensura.common import F
from mensura.rhythm import (BarTimeline, EntityAllocator, BarChild, Duration, NoteValue,
                            Lifetime, RhythmicBeaming)


Q = Duration(NoteValue.QUARTER)
E = Duration(NoteValue.EIGHTH)
H = Duration(NoteValue.HALF)


def test_allocator_reuses_lowest_first():
    allocator = EntityAllocator()
    assert [allocator.create() for _ in range(3)] == [0, 1, 2]
    allocator.free(1)
    allocator.free(0)
    assert not allocator.isAlive(0)
    assert allocator.isAlive(2)
    assert allocator.create() == 0
    assert allocator.create() == 1
    assert allocator.create() == 3


def test_allocator_invalid_free():
    allocator = EntityAllocator()
    with pytest.raises(ValueError):
        allocator.free(0)
    entity = allocator.create()
    allocator.free(entity)
    with pytest.raises(ValueError):
        allocator.free(entity)


def test_whole_rest_is_managed():
    timeline = BarTimeline("3/4")
    assert timeline.managed == [0]
    assert timeline.children() == [
        BarChild(Duration.newWholeRest(F(3, 4)), F(0), Lifetime.automaticRest(), 0)]


def test_splice_and_remove():
    timeline = BarTimeline((4, 4))
    note = timeline.allocator.create()
    timeline.splice(F(0), [(Q, Lifetime.explicit(note))])
    assert timeline.managed == [0, 2]
    assert timeline.children() == [
        BarChild(Q, F(0), Lifetime.explicit(note), note),
        BarChild(Q, F(1, 4), Lifetime.automaticRest(), 0),
        BarChild(H, F(1, 2), Lifetime.automaticRest(), 2),
    ]

    assert timeline.remove(note) == Lifetime.explicit(note)
    assert timeline.bar.wholeRest()
    assert timeline.managed == [0]
    assert not timeline.allocator.isAlive(2)
    assert timeline.remove(note) is None


def test_automatic_lifetimes_become_rests():
    timeline = BarTimeline("2/4")
    timeline.splice(F(0), [(Q, Lifetime.automaticRest())])
    assert timeline.bar.wholeRest()
    assert timeline.managed == [0]


def test_hidden_rests_are_managed():
    timeline = BarTimeline("4/4")
    timeline.splice(F(0), [(Q, Lifetime.hiddenRest())])
    children = timeline.children()
    assert [child.lifetime for child in children] == [
        Lifetime.hiddenRest(), Lifetime.automaticRest(), Lifetime.automaticRest()]
    assert [child.slot for child in children] == [0, 1, 2]
    assert timeline.targetManagedCount() == 3


def test_out_of_sync():
    timeline = BarTimeline("4/4")
    timeline.bar.splice(F(0), [(Q, True, Lifetime.explicit(5))])
    with pytest.raises(RuntimeError):
        timeline.children()
    created, removed = timeline.syncManaged()
    assert created == [(H, 1)]
    assert removed == []
    assert [child.slot for child in timeline.children()] == [5, 0, 1]
    assert timeline.syncManaged() == ([], [])


def test_temporary_notes():
    timeline = BarTimeline("4/4")
    timeline.splice(F(1, 4), [(Q, Lifetime.temporary(7))])
    children = timeline.children()
    assert children[1] == BarChild(Q, F(1, 4), Lifetime.temporary(7), 7)
    # Temporary notes are never beamed
    timeline.splice(F(0), [(E, Lifetime.temporary(7)), (E, Lifetime.temporary(8))])
    assert timeline.draftBeams() == {}


def test_draft_beams():
    timeline = BarTimeline("4/4")
    first = timeline.allocator.create()
    second = timeline.allocator.create()
    timeline.splice(F(0), [(E, Lifetime.explicit(first)), (E, Lifetime.explicit(second))])
    expected = [(first, RhythmicBeaming(0, 1)), (second, RhythmicBeaming(1, 0))]
    beams = timeline.draftBeams()
    assert beams == {4: expected}
    # Beam ids are kept between drafts
    assert timeline.draftBeams() == {4: expected}

    timeline.remove(second)
    assert timeline.draftBeams() == {}
    assert not timeline.allocator.isAlive(4)
