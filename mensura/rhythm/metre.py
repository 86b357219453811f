"""
The metric skeleton of a bar

A :class:`Metre` is built from a time signature and organizes a bar into
segments, each starting on a stress. In classical music segments are organized
so that each one has 2, 3 or 4 equal subdivisions
"""
from __future__ import annotations
from dataclasses import dataclass
import enum
import functools
import math
import re

from mensura.common import F, F0, asF
from .errors import InvalidMetre

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from mensura.common import timesig_t


__all__ = (
    'Subdivision',
    'Superdivision',
    'MetreSegment',
    'Metre',
)


class Subdivision(enum.Enum):
    """
    Whether a segment holds an even or odd number of time signature denominator notes

    Simple time is implied when there is a single subdivision
    """
    SIMPLE = 1
    COMPOUND = 2


class Superdivision(enum.Enum):
    """
    The role a segment plays in the bar, given how many segments form a group
    """
    DUPLE = 1
    """An even number of such parts form a group"""

    TRIPLE = 2
    """An odd (usually three) number of such parts form a group"""

    QUADRUPLE = 3
    """The emphasis on the 6th eighth note of 12/8"""


@dataclass(frozen=True)
class MetreSegment:
    """
    A part of a bar, starting on a stress and ending before the next one
    """
    duration: F
    "The number of whole notes in this part of the bar"

    subdivisions: int
    "The number of time signature denominator notes this part is divided into"

    role: Superdivision = Superdivision.DUPLE
    "The role this segment plays in the bar"

    def subdivisionDuration(self) -> F:
        """The duration, in whole notes, of each subdivision"""
        return self.duration / self.subdivisions

    def subdivision(self) -> Subdivision:
        """The classification of how this segment is divided"""
        if self.subdivisions % 2 == 0 or self.subdivisions == 1:
            return Subdivision.SIMPLE
        return Subdivision.COMPOUND


def _duple(duration: F, subdivisions: int) -> list[MetreSegment]:
    seg = MetreSegment(duration, subdivisions, Superdivision.DUPLE)
    return [seg, seg]


def _triple(duration: F, subdivisions: int) -> list[MetreSegment]:
    seg = MetreSegment(duration, subdivisions, Superdivision.TRIPLE)
    return [seg, seg, seg]


def _quadruple(duration: F, subdivisions: int) -> list[MetreSegment]:
    seg = MetreSegment(duration, subdivisions, Superdivision.DUPLE)
    return [seg, seg, MetreSegment(duration, subdivisions, Superdivision.QUADRUPLE), seg]


_validDenominators = (1, 2, 4, 8, 16, 32)


_knownMetres = {
    (4, 4): lambda: _duple(F(1, 2), 2),
    (2, 2): lambda: _duple(F(1, 2), 1),
    (4, 8): lambda: _duple(F(1, 4), 2),
    (2, 4): lambda: _duple(F(1, 4), 1),
    (6, 16): lambda: _duple(F(3, 16), 3),
    (6, 8): lambda: _duple(F(3, 8), 3),
    (6, 4): lambda: _duple(F(3, 4), 3),
    (12, 8): lambda: _quadruple(F(3, 8), 3),
    (3, 4): lambda: _triple(F(1, 4), 1),
    (3, 8): lambda: _triple(F(1, 8), 1),
    (9, 8): lambda: _triple(F(3, 8), 3),
}


def _guessSegments(num: int, den: int) -> list[MetreSegment]:
    # There is no accepted convention for how to organize these segments,
    # each one should have a printable duration
    segments = []
    t = num
    while t > 0:
        if t == 4:
            subdivisions = 4
        elif t >= 3:
            subdivisions = 3
        elif t >= 2:
            subdivisions = 2
        else:
            subdivisions = 1
        segments.append(MetreSegment(F(subdivisions, den), subdivisions, Superdivision.DUPLE))
        t -= subdivisions
    return segments


@functools.cache
def _segmentsForTimesig(num: int, den: int) -> tuple[MetreSegment, ...]:
    if (num, den) in _knownMetres:
        return tuple(_knownMetres[(num, den)]())
    if den not in _validDenominators:
        raise InvalidMetre(f"Invalid denominator {den}, expected one of 1, 2, 4, 8, 16, 32")
    return tuple(_guessSegments(num, den))


class Metre:
    """
    The way beats are organized in a bar of music

    Args:
        numerator: the numerator of the time signature
        denominator: the denominator of the time signature (1, 2, 4, 8, 16 or 32)

    Raises InvalidMetre if the time signature is not supported

    Example
    ~~~~~~~

        >>> Metre(4, 4).duration()
        Fraction(1, 1)
        >>> Metre(5, 8).divisionStarts()
        [Fraction(0, 1), Fraction(3, 8), Fraction(5, 8)]
    """
    __slots__ = ('numerator', 'denominator', 'segments')

    def __init__(self, numerator: int, denominator: int):
        if not isinstance(numerator, int) or not isinstance(denominator, int):
            raise TypeError(f"Expected integers, got {numerator}/{denominator}")
        if numerator < 1:
            raise InvalidMetre(f"Invalid numerator {numerator}, it should be a positive integer")
        if denominator < 1:
            raise InvalidMetre(f"Invalid denominator {denominator}")

        self.numerator = numerator
        "The numerator of the time signature"

        self.denominator = denominator
        "The denominator of the time signature"

        self.segments: tuple[MetreSegment, ...] = _segmentsForTimesig(numerator, denominator)
        "The segments of this metre"

    @classmethod
    def parse(cls, timesig: str | timesig_t) -> Metre:
        """
        Parse a time signature definition

        Args:
            timesig: a time signature as a string ("6/8") or a tuple (6, 8)

        Returns:
            the corresponding Metre
        """
        if isinstance(timesig, tuple):
            if len(timesig) != 2:
                raise ValueError(f"Cannot parse time signature: {timesig}")
            num, den = timesig
            return cls(num, den)
        elif isinstance(timesig, str):
            match = re.fullmatch(r"\s*(\d+)\s*/\s*(\d+)\s*", timesig)
            if not match:
                raise ValueError(f"Invalid time signature: {timesig}")
            return cls(int(match.group(1)), int(match.group(2)))
        raise TypeError(f"Expected a str or a tuple, got {timesig}")

    @property
    def timesig(self) -> timesig_t:
        return (self.numerator, self.denominator)

    def __repr__(self):
        return f"Metre({self.numerator}/{self.denominator})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Metre) and self.timesig == other.timesig

    def __hash__(self) -> int:
        return hash(('Metre', self.numerator, self.denominator))

    def duration(self) -> F:
        """
        The duration of the bar, in whole notes

        >>> Metre(6, 8).duration()
        Fraction(3, 4)
        """
        return sum((seg.duration for seg in self.segments), F0)

    def divisionStarts(self) -> list[F]:
        """
        The times (in whole notes) at which divisions start, and the start of the next bar

        >>> Metre(3, 4).divisionStarts()
        [Fraction(0, 1), Fraction(1, 4), Fraction(1, 2), Fraction(3, 4)]
        """
        starts = []
        start = F0
        for seg in self.segments:
            starts.append(start)
            start += seg.duration
        starts.append(start)
        return starts

    def onDivision(self, t: F) -> MetreSegment | None:
        """The segment starting exactly at time ``t``, or None if t is not a division start"""
        start = F0
        for seg in self.segments:
            if t == start:
                return seg
            start += seg.duration
        return None

    def division(self, t: F) -> tuple[F, MetreSegment]:
        """
        The segment which contains time ``t``, and its start

        For a time at or past the end of the bar the last segment is returned

        Returns:
            a tuple (segment start, segment)
        """
        start = F0
        for seg in self.segments:
            end = start + seg.duration
            if t < end:
                return start, seg
            start = end
        return start, self.segments[-1]

    def nextDivision(self, t: F) -> F:
        """The start of the division following time ``t``, or the end of the bar"""
        starts = self.divisionStarts()
        for start in starts:
            if t < start:
                return start
        return starts[-1]

    def beats(self) -> list[F]:
        """
        The times (in whole notes) of the beats in this bar, and the first beat of the next bar
        """
        beats = []
        start = F0
        for seg in self.segments:
            increment = seg.subdivisionDuration()
            for _ in range(seg.subdivisions):
                beats.append(start)
                start += increment
        beats.append(start)
        return beats

    def beatDuration(self, t: F) -> F:
        """The duration (in whole notes) of a beat at time ``t``, 0 if outside the bar"""
        t = asF(t)
        start = F0
        for seg in self.segments:
            if t < start + seg.duration:
                return seg.subdivisionDuration()
            start += seg.duration
        return F0

    def lcm(self) -> int:
        """The least common multiple of the denominators of the beat durations"""
        out = 1
        for seg in self.segments:
            out = math.lcm(out, seg.subdivisionDuration().denominator)
        return out
