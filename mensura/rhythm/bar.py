"""
The rhythm of one voice within one bar

A :class:`Bar` always holds a rhythm which fills its metre exactly. The only
way to change it is by *splicing*: replacing a span of time with new notes or
rests. After each edit the silences of the bar are merged and respelled so
that they follow the conventions of traditional engraving, while notes placed
by the user are never changed::

    >>> from mensura.rhythm import *
    >>> bar = Bar(Metre(4, 4))
    >>> bar.splice(F(3, 4), [(Duration(NoteValue.QUARTER), True)])
    >>> bar.rhythm()
    [(Duration(half), False), (Duration(quarter), False), (Duration(quarter), True)]
"""
from __future__ import annotations
import itertools

from mensura.common import F, F0, asF
from .common import logger
from .bardefs import RhythmSlot, BarChild, RhythmicBeaming
from .duration import Duration
from .lifetime import Lifetime
from .metre import Metre, Superdivision
from .errors import OverfilledBar
from .respell import respell
from . import beaming as _beaming

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from typing import Sequence, Any
    from mensura.common import time_t
    slot_t = RhythmSlot | tuple[Duration, bool] | tuple[Duration, bool, Any]


__all__ = (
    'Bar',
    'simplify',
)


def _asSlot(item: slot_t) -> RhythmSlot:
    if isinstance(item, RhythmSlot):
        slot = item
    elif isinstance(item, tuple) and 2 <= len(item) <= 3:
        slot = RhythmSlot(*item)
    else:
        raise TypeError(f"Expected a RhythmSlot or a tuple (duration, struck[, payload]), got {item}")
    if not isinstance(slot.duration, Duration):
        raise TypeError(f"Expected a Duration, got {slot.duration}")
    if slot.duration.duration() <= 0:
        raise ValueError(f"A slot must have a positive duration, got {slot.duration}")
    if not slot.struck and slot.payload is not None:
        return RhythmSlot(slot.duration, False)
    return RhythmSlot(slot.duration, bool(slot.struck), slot.payload)


def _rest(duration: F) -> RhythmSlot:
    return RhythmSlot(Duration.exact(duration), False)


def _fill(metre: Metre, rhythm: list[RhythmSlot]) -> list[RhythmSlot]:
    """Replace a whole rest with one rest per segment"""
    if rhythm:
        return rhythm
    return [_rest(end - start) for start, end in itertools.pairwise(metre.divisionStarts())]


def _rewrite(barDuration: F,
             rhythm: list[RhythmSlot],
             start: F,
             replacement: list[RhythmSlot]
             ) -> list[RhythmSlot]:
    """
    Replace the slots starting at ``start`` with ``replacement``

    Slots before the splice are shortened to end at the splice start. Slots
    covered by the splice are dropped, and the parts of them not covered are
    turned into rests. Slots after the splice are kept. Any part of the
    replacement beyond the end of the bar is ignored
    """
    # tread: the start of the slot being read
    # twrite: the end of what has been written to out
    tread = F0
    twrite = F0
    out: list[RhythmSlot] = []
    for slot in rhythm:
        end = tread + slot.duration.duration()
        if tread <= start < end:
            head = start - tread
            if head > 0:
                out.append(RhythmSlot(Duration.exact(head), slot.struck, slot.payload))
                twrite += head
            tread = end
            assert twrite == start

            for new in replacement:
                newEnd = twrite + new.duration.duration()
                if newEnd <= barDuration:
                    out.append(new)
                    twrite = newEnd
                elif twrite < barDuration:
                    out.append(RhythmSlot(Duration.exact(barDuration - twrite), new.struck, new.payload))
                    twrite = barDuration

            if tread > twrite:
                out.append(_rest(tread - twrite))
                twrite = tread
        elif tread < twrite:
            # Only the start of this slot is covered, the rest of it becomes a rest
            if end > twrite:
                out.append(_rest(end - twrite))
                twrite = end
            tread = end
        else:
            assert tread == twrite
            out.append(slot)
            tread = twrite = end
    return out


def _tryAmend(metre: Metre,
              divisionStart: F,
              out: list[RhythmSlot],
              t: F,
              duration: F
              ) -> bool:
    """
    Try to extend the last rest in ``out`` by ``duration``

    A rest can be extended if it started within the current division, or if the
    merged rest is printable and spans whole divisions (except in triple metre)

    Args:
        metre: the metre
        divisionStart: the start of the current division
        out: the slots written so far. Its last slot is modified in place if possible
        t: the time at which the rest to merge starts
        duration: the duration of the rest to merge

    Returns:
        True if the rest was merged
    """
    if not out or out[-1].struck:
        return False
    prev = out[-1]
    priorStart = t - prev.duration.duration()
    amended = Duration.exact(prev.duration.duration() + duration)
    end = t + duration

    startSegment = metre.onDivision(priorStart)
    startsOnDivision = startSegment is not None and startSegment.role is not Superdivision.TRIPLE
    endSegment = metre.onDivision(end)
    endsOnDivision = ((endSegment is not None and endSegment.role is not Superdivision.TRIPLE)
                      or end == metre.duration())
    joinSegment = metre.onDivision(t)
    crossesQuadruple = joinSegment is not None and joinSegment.role is Superdivision.QUADRUPLE

    if priorStart >= divisionStart or (startsOnDivision and endsOnDivision
                                       and not crossesQuadruple and amended.printable()):
        out[-1] = RhythmSlot(amended, False)
        return True
    return False


def simplify(metre: Metre, rhythm: Sequence[RhythmSlot]) -> list[RhythmSlot]:
    """
    Merge rests within the same division or spanning whole divisions

    Rests which span a division boundary are first split at the boundary. This can
    produce rests which should not be merged, or which cannot be printed:
    :func:`~mensura.rhythm.respell.respell` splits those. If the rhythm has no
    notes it is simplified to a whole rest (an empty rhythm)

    Args:
        metre: the metre of the bar
        rhythm: the rhythm to simplify

    Returns:
        the simplified rhythm

    Raises OverfilledBar if the rhythm extends past the end of the metre
    """
    starts = metre.divisionStarts()
    # starts[nextidx] is the start of the next division
    nextidx = 0
    divisionStart = F0
    tread = F0
    out: list[RhythmSlot] = []

    def advance() -> F:
        nonlocal divisionStart, nextidx
        divisionStart = starts[nextidx]
        nextidx += 1
        if nextidx >= len(starts):
            logger.error(f"Rhythm extends past the end of the bar ({metre}): {list(rhythm)}")
            raise OverfilledBar(f"The rhythm extends past the end of a bar in {metre}")
        return starts[nextidx]

    for slot in rhythm:
        nextStart = starts[nextidx]
        end = tread + slot.duration.duration()
        while tread >= nextStart:
            nextStart = advance()

        if not slot.struck and tread < nextStart < end:
            duration = nextStart - tread
            if not _tryAmend(metre, divisionStart, out, tread, duration):
                out.append(_rest(duration))
            twrite = tread + duration
            tread = end
            while twrite < tread:
                nextStart = advance()
                p = min(tread, nextStart)
                duration = p - divisionStart
                if not _tryAmend(metre, divisionStart, out, twrite, duration):
                    out.append(_rest(duration))
                twrite = p
            assert tread == twrite
        else:
            if slot.struck or not _tryAmend(metre, divisionStart, out, tread,
                                            slot.duration.duration()):
                out.append(slot)
            tread = end

    if not any(slot.struck for slot in rhythm):
        return []
    return out


class Bar:
    """
    The rhythm and metre of a voice in a single bar

    A bar is created empty, holding a whole rest. Its rhythm is modified
    via :meth:`Bar.splice` and :meth:`Bar.remove`. After any modification the
    rhythm fills the metre exactly and all its rests are printable

    Args:
        metre: the metre of this bar, or a time signature as accepted
            by :meth:`Metre.parse`
    """
    __slots__ = ('_metre', '_rhythm')

    def __init__(self, metre: Metre | str | tuple[int, int]):
        if not isinstance(metre, Metre):
            metre = Metre.parse(metre)
        self._metre = metre
        self._rhythm: list[RhythmSlot] = []

    def __repr__(self):
        if not self._rhythm:
            return f"Bar({self._metre}, wholeRest)"
        return f"Bar({self._metre}, {self._rhythm})"

    def copy(self) -> Bar:
        """Create a copy of this bar"""
        out = Bar(self._metre)
        out._rhythm = self._rhythm.copy()
        return out

    @property
    def metre(self) -> Metre:
        """The metre of this bar"""
        return self._metre

    def wholeRest(self) -> bool:
        """Is this bar a whole rest?"""
        return not self._rhythm

    def duration(self) -> F:
        """The duration of this bar, in whole notes"""
        return self._metre.duration()

    def rhythm(self) -> list[tuple[Duration, bool]]:
        """
        The rhythm of this bar as a list of (duration, struck)

        An empty list indicates a whole rest
        """
        return [(slot.duration, slot.struck) for slot in self._rhythm]

    def slots(self) -> list[RhythmSlot]:
        """The rhythm of this bar, including the payload of each slot"""
        return self._rhythm.copy()

    def splice(self, start: time_t, replacement: Sequence[slot_t]) -> None:
        """
        Starting at ``start``, replace existing rests, notes and chords with ``replacement``

        * If ``start`` is at or after the end of the bar, nothing is changed
        * If the replacement goes beyond the end of the bar, the parts of it after
          the end of the bar are ignored
        * Existing slots before the splice are shortened to end at the splice start
        * Existing slots covered by the splice are removed. Any part of them
          which is not covered is replaced by a rest
        * Existing slots after the splice are kept

        The bar is then simplified and its rests respelled. If any of these
        steps fails, the bar is left unmodified

        Args:
            start: the start of the splice, in whole notes
            replacement: the slots to place, either as :class:`RhythmSlot` or as
                tuples ``(duration: Duration, struck: bool, payload=None)``.
                Durations are real durations

        Example
        ~~~~~~~

            >>> bar = Bar(Metre(6, 8))
            >>> bar.splice(F(5, 8), [(Duration(NoteValue.EIGHTH), True)])
            >>> [str(dur) for dur, struck in bar.rhythm()]
            ['quarter.', 'quarter', 'eighth']
        """
        start = asF(start)
        if start < 0:
            raise ValueError(f"The start of a splice cannot be negative, got {start}")
        barDuration = self._metre.duration()
        if start >= barDuration:
            return
        slots = [_asSlot(item) for item in replacement]
        rhythm = _fill(self._metre, self._rhythm)
        rhythm = _rewrite(barDuration, rhythm, start, slots)
        self._update(rhythm)

    def remove(self, payload: Any) -> bool:
        """
        Turn every note or chord carrying ``payload`` into a rest

        Args:
            payload: the payload to remove

        Returns:
            True if anything was removed
        """
        removed = False
        rhythm = []
        for slot in self._rhythm:
            if slot.struck and slot.payload == payload:
                rhythm.append(RhythmSlot(slot.duration, False))
                removed = True
            else:
                rhythm.append(slot)
        if removed:
            self._update(rhythm)
        return removed

    def _update(self, rhythm: list[RhythmSlot]) -> None:
        rhythm = simplify(self._metre, rhythm)
        rhythm = respell(self._metre, rhythm)
        self._rhythm = rhythm

    def children(self) -> list[BarChild]:
        """
        The rests, notes and chords of this bar, with their start times

        A whole rest bar has one child. The lifetime of a struck slot is its
        payload if it is a :class:`Lifetime`, otherwise an explicit lifetime
        is assumed. The slot of each child is its index within the rhythm
        """
        if not self._rhythm:
            return [BarChild(Duration.newWholeRest(self._metre.duration()), F0,
                             Lifetime.automaticRest(), 0)]
        out = []
        start = F0
        for i, slot in enumerate(self._rhythm):
            out.append(BarChild(slot.duration, start, _slotLifetime(slot, i), i))
            start += slot.duration.duration()
        return out

    def splitNote(self, t: time_t, duration: Duration) -> list[Duration]:
        """
        Determine how a note starting at the given time should be spelled

        The note is shortened so that it does not overlap any note already in
        this bar. It is then split following the metre, except for common
        syncopations (*Behind Bars*, p. 166 and p. 171)

        Args:
            t: the start time of the note, in whole notes
            duration: the duration of the note

        Returns:
            the durations of the tied notes which represent the given note. An
            empty list if the note cannot be placed at the given time

        Example
        ~~~~~~~

            >>> bar = Bar(Metre(4, 4))
            >>> bar.splitNote(F(3, 8), Duration(NoteValue.QUARTER))
            [Duration(eighth), Duration(eighth)]
        """
        return _beaming.splitNote(self._metre, asF(t), duration, self._rhythm)

    def beaming(self, t0: time_t, durations: Sequence[Duration]
                ) -> list[RhythmicBeaming | None]:
        """
        Determine how to beam consecutive notes starting at ``t0``

        See :func:`mensura.rhythm.beaming.beamNotes`
        """
        return _beaming.beamNotes(self._metre, asF(t0), durations)


def _slotLifetime(slot: RhythmSlot, index: int) -> Lifetime:
    if isinstance(slot.payload, Lifetime):
        return slot.payload
    if slot.struck:
        return Lifetime.explicit(index if slot.payload is None else slot.payload)
    return Lifetime.automaticRest()
