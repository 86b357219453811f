"""
Splitting of long notes and beaming

Both follow the same rules: a note (or a group of beamed notes) should not
hide the structure of the metre. A note which crosses a division is split
into tied notes, except for some common syncopations (*Behind Bars*,
p. 166 and p. 171). Beams are broken at the start of any division with two
or more subdivisions
"""
from __future__ import annotations

from mensura.common import F, F0
from .bardefs import RhythmicBeaming
from .duration import Duration
from .lifetime import Lifetime
from .metre import Subdivision, Superdivision

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from typing import Sequence
    from .bardefs import RhythmSlot, BarChild
    from .metre import Metre


__all__ = (
    'splitNote',
    'beamNotes',
    'beamCandidates',
)


def _isExplicitSlot(slot: RhythmSlot) -> bool:
    if not slot.struck:
        return False
    return not isinstance(slot.payload, Lifetime) or slot.payload.isExplicit()


def _isSyncopation(divStart: F, segmentDuration: F, subdivisions: int,
                   role: Superdivision, offset: F, duration: F) -> bool:
    if subdivisions == 1 and segmentDuration == F(1, 4) and offset == F(1, 8):
        if role is Superdivision.DUPLE:
            return duration == F(1, 4) or duration == F(3, 8)
        return role is Superdivision.TRIPLE and divStart == 0 and duration == F(1, 4)
    if subdivisions == 2 and segmentDuration == F(1, 2) and offset == F(1, 4):
        return role is Superdivision.DUPLE and (duration == F(1, 2) or duration == F(3, 4))
    return False


def splitNote(metre: Metre,
              t: F,
              duration: Duration,
              rhythm: Sequence[RhythmSlot] = ()
              ) -> list[Duration]:
    """
    Determine how a note starting at ``t`` should be spelled

    Args:
        metre: the metre of the bar
        t: the start of the note, in whole notes
        duration: the duration of the note
        rhythm: if given, the note is shortened so that it does not overlap
            any explicit note within this rhythm

    Returns:
        the durations of the tied notes representing the given note. An empty
        list if the note has no duration or if it starts within an explicit note
    """
    if duration.duration() <= 0:
        return []
    tuplet = duration.tuplet

    if rhythm:
        tend = t + duration.duration()
        slotStart = F0
        for slot in rhythm:
            slotEnd = slotStart + slot.duration.duration()
            if _isExplicitSlot(slot):
                if t <= slotStart < tend:
                    if slotStart == t:
                        return []
                    duration = Duration.exact((slotStart - t) * tuplet, tuplet)
                    break
                if slotStart < t < slotEnd:
                    return []
            slotStart = slotEnd

    dur = duration.duration()
    divStart, segment = metre.division(t)
    if _isSyncopation(divStart, segment.duration, segment.subdivisions, segment.role,
                      t - divStart, dur):
        return [duration]

    if t == divStart:
        if segment.subdivision() is Subdivision.SIMPLE:
            return [duration]
        # Fill as many whole segments as possible
        segmentsEnd = t
        while True:
            t2 = segmentsEnd + segment.duration
            if t2 > t + dur or not Duration.exact(t2 - t).printable():
                break
            segment = metre.division(t2)[1]
            segmentsEnd = t2
        if segmentsEnd > t:
            filled = segmentsEnd - t
            rest = Duration.exact((dur - filled) * tuplet, tuplet)
            return [Duration.exact(filled * tuplet, tuplet)] + splitNote(metre, segmentsEnd, rest, rhythm)

    divEnd = divStart + segment.duration
    if t + dur <= divEnd:
        return [duration]
    head = divEnd - t
    rest = Duration.exact((dur - head) * tuplet, tuplet)
    return [Duration.exact(head * tuplet, tuplet)] + splitNote(metre, divEnd, rest, rhythm)


def beamNotes(metre: Metre, t0: F, durations: Sequence[Duration]
              ) -> list[RhythmicBeaming | None]:
    """
    Determine how to beam consecutive notes

    Beams follow the splitting of a note spanning all the given durations,
    and are broken at the start of any division with two or more subdivisions

    Args:
        metre: the metre of the bar
        t0: the start of the first note, in whole notes
        durations: the durations of the consecutive notes

    Returns:
        for each note, the beams entering and leaving it, or None if the note
        is not beamed
    """
    total = sum((dur.duration() for dur in durations), F0)
    beams: list[int] = []
    splitBefore: list[bool] = []
    t = t0
    for split in splitNote(metre, t0, Duration.exact(total)):
        tend = t + split.duration()
        tcandidate = t0
        firstInBeam = True
        for i, candidate in enumerate(durations):
            if tcandidate < tend and i >= len(beams):
                segment = metre.onDivision(tcandidate)
                if segment is not None and segment.subdivisions >= 2:
                    # 4/8, 4/4 and compound time must not cross the beat
                    firstInBeam = True
                base = candidate.durationDisplayBase()
                beams.append(base.beamCount() if base is not None else 0)
                splitBefore.append(firstInBeam)
                firstInBeam = False
            tcandidate += candidate.duration()
        t = tend

    out: list[RhythmicBeaming | None] = []
    for i, beam in enumerate(beams):
        if beam == 0:
            out.append(None)
            continue
        prev = 0 if splitBefore[i] else beams[i - 1]
        splitAfter = splitBefore[i + 1] if i + 1 < len(splitBefore) else True
        nxt = 0 if splitAfter else beams[i + 1]
        if prev == 0 and nxt == 0:
            out.append(None)
        else:
            out.append(RhythmicBeaming(entering=beam if prev > 0 else 0,
                                       leaving=beam if nxt > 0 else 0))
    return out


def beamCandidates(children: Sequence[BarChild]) -> list[tuple[F, list[BarChild]]]:
    """
    Find runs of consecutive children which could be beamed together

    A child can be beamed if it is neither temporary nor an automatic rest and
    its note value carries beams

    Args:
        children: the children of a bar, as returned by :meth:`Bar.children`

    Returns:
        a list of tuples (start time, children)
    """
    out = []
    current: list[BarChild] = []
    for child in children:
        base = child.duration.durationDisplayBase()
        if (not child.lifetime.isTemporary()
                and not child.lifetime.isAutomatic()
                and base is not None and base.beamCount() > 0):
            current.append(child)
        elif current:
            out.append((current[0].start, current))
            current = []
    if current:
        out.append((current[0].start, current))
    return out
