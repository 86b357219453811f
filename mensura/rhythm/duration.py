"""
Durations of rests, notes and chords

A :class:`Duration` holds what is shown (the *display* duration) and how it is
played (the display duration divided by its *tuplet* ratio). All durations are
measured in whole notes.
"""
from __future__ import annotations
import enum
import functools

from mensura.common import F, F0, F1, asF
from .common import MAXDOTS
from .errors import TooManyDots

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from mensura.common import num_t


__all__ = (
    'NoteValue',
    'Duration',
)


class NoteValue(enum.IntEnum):
    """
    The unmodified relative duration of a rest, note or chord

    The value of each member is the base-2 log of its duration, compared to a
    whole note. It determines the note head glyph, whether the note has a
    stem and whether the note has a flag.
    """
    MAXIMA = 3
    LONGA = 2
    DOUBLEWHOLE = 1
    WHOLE = 0
    HALF = -1
    QUARTER = -2
    EIGHTH = -3
    SIXTEENTH = -4
    THIRTYSECOND = -5
    SIXTYFOURTH = -6
    HUNDREDTWENTYEIGHTH = -7
    TWOHUNDREDFIFTYSIXTH = -8

    @classmethod
    def fromLog2(cls, log2: int) -> NoteValue | None:
        """The note value for the given log2, or None if out of range"""
        if cls.TWOHUNDREDFIFTYSIXTH <= log2 <= cls.MAXIMA:
            return cls(log2)
        return None

    def log2(self) -> int:
        """
        The base-2 log of the duration, compared to a whole note, ignoring dots and tuplets

        >>> NoteValue.DOUBLEWHOLE.log2()
        1
        >>> NoteValue.QUARTER.log2()
        -2
        """
        return int(self.value)

    def count(self) -> F:
        """
        The number of whole notes in the duration, ignoring dots and tuplets

        >>> NoteValue.QUARTER.count()
        Fraction(1, 4)
        """
        return F(2) ** self.value

    def hasStem(self) -> bool:
        return self <= NoteValue.QUARTER

    def hasFlag(self) -> bool:
        return self <= NoteValue.EIGHTH

    def beamCount(self) -> int:
        """The number of beams (or flags) needed for this value"""
        return max(0, -self.value - 2)


_valueNames = {
    NoteValue.MAXIMA: 'maxima',
    NoteValue.LONGA: 'longa',
    NoteValue.DOUBLEWHOLE: 'breve',
    NoteValue.WHOLE: 'whole',
    NoteValue.HALF: 'half',
    NoteValue.QUARTER: 'quarter',
    NoteValue.EIGHTH: 'eighth',
    NoteValue.SIXTEENTH: '16th',
    NoteValue.THIRTYSECOND: '32nd',
    NoteValue.SIXTYFOURTH: '64th',
    NoteValue.HUNDREDTWENTYEIGHTH: '128th',
    NoteValue.TWOHUNDREDFIFTYSIXTH: '256th',
}


def _floorLog2(x: F) -> int:
    # exact floor(log2(x)) for a positive fraction
    num, den = x.numerator, x.denominator
    k = num.bit_length() - den.bit_length()
    if k >= 0:
        if num < (den << k):
            k -= 1
    elif (num << -k) < den:
        k -= 1
    return k


@functools.total_ordering
class Duration:
    """
    The duration of a note, rest or chord

    The tuplet is kept as part of the duration because the duration alone is not
    enough to differentiate some tuplets from non-tuplets: a 4:3 quarter note
    duplet lasts as long as a dotted eighth note, but they are engraved differently.

    A Duration cannot be changed after creation. To build a duration from an
    arbitrary display length, use :meth:`Duration.exact`.

    Args:
        base: the note value
        dots: number of dots (max. 4)
        tuplet: the tuplet ratio (3/2 for a normal triplet). None indicates
            no tuplet

    Example
    ~~~~~~~

        >>> Duration(NoteValue.QUARTER, 1).duration()
        Fraction(3, 8)
        >>> Duration(NoteValue.QUARTER, tuplet=F(3, 2)).duration()
        Fraction(1, 6)
    """
    __slots__ = ('_display', '_tuplet', '_wholeRest')

    def __init__(self, base: NoteValue, dots: int = 0, tuplet: num_t | None = None):
        if dots > MAXDOTS:
            raise TooManyDots(f"A duration can have at most {MAXDOTS} dots, got {dots}")
        value = NoteValue(base).count()
        display = value
        for _ in range(dots):
            value /= 2
            display += value
        self._display: F = display
        self._tuplet: F = F1 if tuplet is None else asF(tuplet)
        self._wholeRest = False

    @classmethod
    def exact(cls, display: num_t, tuplet: num_t | None = None) -> Duration:
        """
        Create a duration from a displayed duration, in whole notes, and a tuplet

        The resulting duration might not be printable
        """
        out = cls.__new__(cls)
        out._display = asF(display)
        out._tuplet = F1 if tuplet is None else asF(tuplet)
        out._wholeRest = False
        return out

    @classmethod
    def newWholeRest(cls, display: num_t) -> Duration:
        """
        Create a whole rest for a bar of the given duration

        A whole rest fills a bar of any length and is always printable
        """
        out = cls.__new__(cls)
        out._display = asF(display)
        out._tuplet = F1
        out._wholeRest = True
        return out

    @property
    def tuplet(self) -> F:
        """
        A multiplier which converts the real duration into how it is displayed

        For a triplet, where 3 beats are shown while 2 are played, this is 3/2
        """
        return self._tuplet

    @property
    def wholeRest(self) -> bool:
        """Is this the duration of a whole bar rest?"""
        return self._wholeRest

    def duration(self) -> F:
        """The number of whole notes this event is played for"""
        return self._display / self._tuplet

    def displayDuration(self) -> F:
        """
        The number of whole notes it looks like this event is played for

        This is not the same as the real duration if the event is within a tuplet
        """
        return self._display

    def durationDisplayBase(self) -> NoteValue | None:
        """The kind of note this will be rendered as, or None if not representable"""
        if self._wholeRest:
            return NoteValue.WHOLE
        if self._display <= F0:
            return None
        return NoteValue.fromLog2(_floorLog2(self._display))

    def displayDots(self) -> int | None:
        """The number of dots rendered, or None if no number of dots fits"""
        if self._wholeRest:
            return 0
        base = self.durationDisplayBase()
        if base is None:
            return None
        unit = base.count()
        dots = 0
        total = unit
        while total < self._display and dots < MAXDOTS:
            dots += 1
            unit /= 2
            total += unit
        return dots if total == self._display else None

    def printable(self) -> bool:
        """
        Can this duration be shown as a single note or rest?

        A printable duration has a base between a 256th note and a maxima and
        at most 4 dots. Whole rests are always printable
        """
        return self._wholeRest or (self.durationDisplayBase() is not None
                                   and self.displayDots() is not None)

    def _key(self) -> tuple[F, F, bool]:
        return (self._display, self._tuplet, self._wholeRest)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Duration) -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(('Duration', self._display, self._tuplet, self._wholeRest))

    def __str__(self) -> str:
        if self._wholeRest:
            return 'wholerest'
        base = self.durationDisplayBase()
        dots = self.displayDots() if base is not None else None
        if base is None or dots is None:
            s = f"{self._display.numerator}/{self._display.denominator}"
        else:
            s = _valueNames[base] + '.' * dots
        if self._tuplet != F1:
            s += f"({self._tuplet.numerator}:{self._tuplet.denominator})"
        return s

    def __repr__(self) -> str:
        return f"Duration({self})"
