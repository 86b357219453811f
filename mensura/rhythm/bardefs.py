from __future__ import annotations
from dataclasses import dataclass
from typing import NamedTuple, Any

from mensura.common import F
from .duration import Duration
from .lifetime import Lifetime


__all__ = (
    'RhythmSlot',
    'BarChild',
    'RhythmicBeaming',
)


class RhythmSlot(NamedTuple):
    """
    An entry within the rhythm of a bar

    Attributes:
        duration: the duration of this rest, note or chord
        struck: True for a note or chord, False for a rest
        payload: any value attached by the owner of the bar. Only struck
            slots carry a payload
    """
    duration: Duration
    struck: bool
    payload: Any = None

    def __repr__(self):
        kind = 'X' if self.struck else 'R'
        if self.payload is None:
            return f"({self.duration} {kind})"
        return f"({self.duration} {kind} {self.payload!r})"


@dataclass(frozen=True)
class BarChild:
    """
    A rest, note or chord within a bar, as seen from the outside

    Attributes:
        duration: the duration of this child
        start: the start time within the bar, in whole notes
        lifetime: why this child exists
        slot: the identity of this child. For a plain :class:`~mensura.rhythm.bar.Bar`
            this is the index within its rhythm
    """
    duration: Duration
    start: F
    lifetime: Lifetime
    slot: Any

    def end(self) -> F:
        return self.start + self.duration.duration()


@dataclass(frozen=True)
class RhythmicBeaming:
    """
    How many beams enter and leave a note

    Attributes:
        entering: the number of beams connecting this note to the previous one
        leaving: the number of beams connecting this note to the next one
    """
    entering: int = 0
    leaving: int = 0
