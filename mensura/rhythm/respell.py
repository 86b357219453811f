"""
Respelling of rests

After rests are merged, a bar can hold rests which cannot be printed or which
hide the beats of the metre. This module splits every rest of a bar into a
sequence of printable rests, following the conventions described in
*Behind Bars* (Elaine Gould).

The search is a best-first search over partial solutions. Each partial solution
holds the rests and notes already placed and the ones still to be placed.
A candidate is penalized for each rest used, for being unprintable and for
covering strong subdivisions of the beat it starts in. The first complete
solution found is the best one.

The penalty of a candidate only depends on where it starts, on what is still
to be placed and on which beats of the current division are already covered
or exposed. Partial solutions which agree on all of these share the same
future, so only the best of them is kept.
"""
from __future__ import annotations
import functools
import heapq
import math

from mensura.common import F, F0, F1
from .common import logger
from .config import config
from .duration import Duration
from .bardefs import RhythmSlot
from .errors import NoSpellingFound
from .metre import Subdivision

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from typing import Sequence
    from .metre import Metre, MetreSegment


__all__ = (
    'respell',
)


_unprintablePenalty = F(10000)
_compoundMiddleBonus = F(99, 100)
_tripleWeight = F(21, 20)
_compoundDownbeatWeight = F(22, 20)

_noBeats: frozenset[int] = frozenset()


def _slotKey(slot: RhythmSlot) -> tuple[F, F, bool, bool]:
    dur = slot.duration
    return (dur.displayDuration(), dur.tuplet, dur.wholeRest, slot.struck)


class _PartialSolution:
    """
    A partial solution within the search

    Partial solutions are sorted as a max-heap: a higher score is popped first,
    ties are broken by the time already placed and then by the contents

    Attributes:
        score: the score so far (0 or negative)
        doneTime: the time already placed
        todo: the slots still to be placed
        done: the slots already placed
        covered: the beats of the current division covered by a placed slot
        exposed: the beats of the current division on which a rest placed at
            the start of the division ends
    """
    __slots__ = ('score', 'doneTime', 'todo', 'done', 'covered', 'exposed',
                 'key', 'signature')

    def __init__(self, score: F, doneTime: F,
                 todo: tuple[RhythmSlot, ...], todoKey: tuple,
                 done: tuple[RhythmSlot, ...], doneKey: tuple,
                 covered=_noBeats, exposed=_noBeats):
        self.score = score
        self.doneTime = doneTime
        self.todo = todo
        self.done = done
        self.covered = covered
        self.exposed = exposed
        self.key = (score, doneTime, todoKey, doneKey)
        self.signature = (doneTime, todoKey, covered, exposed)

    def __lt__(self, other: _PartialSolution) -> bool:
        # heapq is a min-heap
        return self.key > other.key

    def __repr__(self):
        return (f"_PartialSolution(score={self.score}, doneTime={self.doneTime}, "
                f"todo={list(self.todo)}, done={list(self.done)})")

    def advance(self, metre: Metre, divisionStart: F, slot: RhythmSlot, score: F,
                todo: tuple[RhythmSlot, ...], todoKey: tuple,
                covered: frozenset[int], exposed: frozenset[int]
                ) -> _PartialSolution:
        """
        Place ``slot`` after the slots already done

        Args:
            metre: the metre
            divisionStart: the start of the division in which ``slot`` starts
            slot: the slot to place
            score: the score of the new partial solution
            todo: the slots still to place afterwards
            todoKey: the sort key of todo
            covered: the covered beats of the division, including ``slot``
            exposed: the exposed beats of the division, including ``slot``

        Returns:
            the new partial solution
        """
        doneTime = self.doneTime + slot.duration.duration()
        if metre.division(doneTime)[0] != divisionStart:
            covered = exposed = _noBeats
        return _PartialSolution(score, doneTime, todo, todoKey,
                                self.done + (slot,), self.key[3] + (_slotKey(slot),),
                                covered, exposed)


def _quantum(metre: Metre, slots: Sequence[RhythmSlot]) -> F:
    denominator = metre.lcm()
    for slot in slots:
        denominator = math.lcm(denominator, slot.duration.duration().denominator)
    return F(1, denominator)


@functools.cache
def _powers(divParts: int, quant: F, tuplet: F, compound: bool, firstBeatExposed: bool
            ) -> tuple[F, ...]:
    """
    How important each grid point within a division is

    The power of a grid point is the number of undotted grid subdivisions starting
    there. When a subdivision groups three parts, its starts are weighted
    slightly higher

    Args:
        divParts: the number of grid points in the division
        quant: the duration of each grid point
        tuplet: the tuplet of the rest being placed
        compound: is the division compound?
        firstBeatExposed: is the first beat of the division exposed by a rest?

    Returns:
        the power for each grid point
    """
    powers = [F0] * divParts
    for p in range(1, divParts + 1):
        if divParts % p != 0:
            continue
        if Duration.exact(quant * p * tuplet, tuplet).displayDots() != 0:
            continue
        triple = divParts // p == 3
        for i in range(0, divParts, p):
            if not triple:
                powers[i] += 1
                continue
            position = (i // p) % 3
            if position == 0:
                powers[i] += _compoundDownbeatWeight if compound else _tripleWeight
            elif position == 1:
                powers[i] += _tripleWeight
            elif firstBeatExposed and tuplet == F1:
                powers[i] += F1
            else:
                powers[i] += _tripleWeight
    return tuple(powers)


@functools.cache
def _alignmentPenalty(divParts: int, quant: F, tuplet: F, compound: bool,
                      firstBeatExposed: bool, startQ: int, endQ: int) -> F:
    """The penalty for a rest covering grid points at least as strong as its start"""
    powers = _powers(divParts, quant, tuplet, compound, firstBeatExposed)
    startPower = powers[startQ]
    penalty = F0
    for k in range(startQ + 1, endQ):
        if powers[k] >= startPower:
            penalty += (1 + powers[k] - startPower) * 2
    return penalty


@functools.cache
def _displayed(dur: F, tuplet: F) -> tuple[Duration, int | None, bool]:
    displayed = Duration.exact(dur * tuplet, tuplet)
    return displayed, displayed.displayDots(), displayed.printable()


def _slotBeats(division: MetreSegment, divisionStart: F, t: F, slot: RhythmSlot
               ) -> tuple[frozenset[int], frozenset[int]]:
    """
    Find which beats of a division are covered or exposed by a slot starting at ``t``

    A beat is covered if the slot starts before it and ends after it. A beat is
    exposed if the slot is a rest starting at the division start and ending
    exactly on it

    Returns:
        a tuple (covered beats, exposed beats), where beats are numbered from 1
    """
    covered = set()
    exposed = set()
    beat = division.subdivisionDuration()
    tnext = t + slot.duration.duration()
    for k in range(1, division.subdivisions + 1):
        tbeat = beat * k + divisionStart
        if t < tbeat < tnext:
            covered.add(k)
        elif tbeat == tnext and not slot.struck and t == divisionStart:
            exposed.add(k)
    return frozenset(covered), frozenset(exposed)


def _expandNote(metre: Metre, state: _PartialSolution) -> _PartialSolution:
    head = state.todo[0]
    divStart, div = metre.division(state.doneTime)
    covered, exposed = _slotBeats(div, divStart, state.doneTime, head)
    return state.advance(metre, divStart, head, state.score, state.todo[1:], state.key[2][1:],
                         state.covered | covered, state.exposed | exposed)


def _expandRest(metre: Metre,
                state: _PartialSolution,
                quant: F,
                tupletKinds: list[F]
                ) -> list[_PartialSolution]:
    """
    Generate all partial solutions which place a rest at the head of the pending slots
    """
    head = state.todo[0]
    remaining = state.todo[1:]
    remainingKey = state.key[2][1:]
    doneTime = state.doneTime
    headDuration = head.duration.duration()
    divStart, div = metre.division(doneTime)
    subdivision = div.subdivision()
    compound = subdivision is Subdivision.COMPOUND
    secondBeat = divStart + div.subdivisionDuration() * 2
    divParts = int(div.duration // quant)
    startQ = int((doneTime - divStart) // quant)
    out = []
    for i in range(int(headDuration // quant), 0, -1):
        dur = quant * i
        endQ = int((doneTime + dur - divStart) // quant)
        for tuplet in tupletKinds:
            displayed, dots, printable = _displayed(dur, tuplet)
            # The longest dotted rest in simple time is one value smaller than the beat
            if dots and not compound and dur > div.subdivisionDuration():
                continue

            remainder = headDuration - dur
            if remainder > 0:
                rest = RhythmSlot(Duration.exact(remainder * tuplet, tuplet), False)
                todo = (rest,) + remaining
                todoKey = (_slotKey(rest),) + remainingKey
            else:
                todo = remaining
                todoKey = remainingKey
            slot = RhythmSlot(displayed, False)

            score = state.score
            if not printable:
                score -= _unprintablePenalty
            score -= 1

            covered, exposed = _slotBeats(div, divStart, doneTime, slot)
            covered = state.covered | covered
            exposed = state.exposed | exposed
            if (compound
                    and doneTime <= secondBeat <= doneTime + dur
                    and 2 in exposed
                    and 1 in covered):
                score -= _compoundMiddleBonus

            if endQ <= divParts:
                score -= _alignmentPenalty(divParts, quant, tuplet, compound, 1 in exposed,
                                           startQ, endQ)

            out.append(state.advance(metre, divStart, slot, score, todo, todoKey,
                                     covered, exposed))
    return out


def respell(metre: Metre, rhythm: Sequence[RhythmSlot]) -> list[RhythmSlot]:
    """
    Split the rests of a bar into printable rests

    Notes and chords are kept as they are. Rests are respelled so that the
    structure of the metre remains visible

    Args:
        metre: the metre of the bar
        rhythm: the rhythm of the bar. Its durations must fill the metre

    Returns:
        the respelled rhythm

    Raises NoSpellingFound if no solution was found within the configured
    number of partial solutions (see ``config['searchMaxStates']``)
    """
    if not rhythm:
        return []
    quant = _quantum(metre, rhythm)
    tupletKinds = sorted({slot.duration.tuplet for slot in rhythm})
    maxStates = config['searchMaxStates']
    todo = tuple(rhythm)
    heap = [_PartialSolution(F0, F0, todo, tuple(_slotKey(slot) for slot in todo), (), ())]
    # the best partial solution for each signature
    best = {heap[0].signature: heap[0]}
    expanded = 0
    pruned = 0

    def push(state: _PartialSolution) -> None:
        nonlocal pruned
        current = best.get(state.signature)
        if current is not None:
            pruned += 1
            if current.key >= state.key:
                return
        best[state.signature] = state
        heapq.heappush(heap, state)

    while heap:
        state = heapq.heappop(heap)
        if best[state.signature] is not state:
            # superseded by a better partial solution
            continue
        if not state.todo:
            if config['logSearch']:
                logger.debug("Respelled %s in %d steps (%d pending, %d pruned), score: %s",
                             metre, expanded, len(heap), pruned, state.score)
            return list(state.done)
        expanded += 1
        if expanded > maxStates:
            logger.error("Exceeded the max. number of partial solutions (%d) while "
                         "respelling %s, rhythm: %s", maxStates, metre, list(rhythm))
            raise NoSpellingFound(f"Could not respell the rhythm of a bar in {metre} "
                                  f"within {maxStates} steps")
        if state.todo[0].struck:
            push(_expandNote(metre, state))
        else:
            for candidate in _expandRest(metre, state, quant, tupletKinds):
                push(candidate)

    logger.error("No spelling found for %s, rhythm: %s", metre, list(rhythm))
    raise NoSpellingFound(f"Could not respell the rhythm of a bar in {metre}")
