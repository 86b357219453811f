"""
Proportional horizontal spacing of rests, notes and chords

The space taken by an event grows with the log2 of its duration: when the
shortest event of a bar takes one unit of space, an event twice as long takes
two units, one four times as long takes three units, etc.
"""
from __future__ import annotations
from dataclasses import dataclass
import math

from mensura.common import F, F0
from .config import config

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from typing import Sequence
    from .duration import Duration
    from .bardefs import BarChild


__all__ = (
    'RelativeRhythmicSpacing',
    'barSpacing',
)


@dataclass
class RelativeRhythmicSpacing:
    """
    The space taken by an event, relative to the shortest event in its bar

    Attributes:
        t: the start time of the event within its bar
        relative: the space taken by the event. The shortest event takes 1
    """
    t: F = F0
    relative: float = 1.0

    @classmethod
    def new(cls, shortest: F, duration: Duration, t: F = F0) -> RelativeRhythmicSpacing:
        """
        Create the spacing for an event

        Args:
            shortest: the duration of the shortest event, in whole notes
            duration: the duration of the event
            t: the start time of the event

        Returns:
            the spacing of the event

        Example
        ~~~~~~~

            >>> RelativeRhythmicSpacing.new(F(1, 16), Duration.exact(F(1, 4))).relative
            3.0
        """
        if shortest <= 0:
            raise ValueError(f"The shortest duration must be positive, got {shortest}")
        ratio = float(duration.duration()) / float(shortest)
        return cls(t=t, relative=1.0 + math.log2(ratio))


def barSpacing(children: Sequence[BarChild], shortest: F | None = None
               ) -> list[RelativeRhythmicSpacing]:
    """
    Calculate the relative spacing of the children of a bar

    Args:
        children: the children of a bar, as returned by :meth:`Bar.children`
        shortest: the duration used as shortest event, if no child is shorter.
            If not given, it is determined by ``config['spacingShortestValue']``

    Returns:
        the spacing of each child
    """
    if shortest is None:
        shortest = F(1, config['spacingShortestValue'])
    for child in children:
        shortest = min(shortest, child.duration.duration())
    return [RelativeRhythmicSpacing.new(shortest, child.duration, t=child.start)
            for child in children]
