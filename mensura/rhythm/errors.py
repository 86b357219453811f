from __future__ import annotations


__all__ = (
    'RhythmError',
    'InvalidMetre',
    'TooManyDots',
    'OverfilledBar',
    'NoSpellingFound',
)


class RhythmError(Exception):
    """Base class for every error raised while editing rhythm"""


class InvalidMetre(RhythmError, ValueError):
    """A time signature with an unsupported numerator or denominator"""


class TooManyDots(RhythmError, ValueError):
    """A duration was requested with more dots than can be engraved"""


class OverfilledBar(RhythmError):
    """The rests and notes of a bar extend past the end of its metre"""


class NoSpellingFound(RhythmError):
    """No combination of printable rests could be found for a bar"""
