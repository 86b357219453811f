"""
NB: this module cannot import anything from mensura itself
"""
from __future__ import annotations
import logging as _logging
import functools as _functools


import typing as _t
if _t.TYPE_CHECKING:
    from fractions import Fraction as F
else:
    from quicktions import Fraction as F


__all__ = (
    'getLogger',
    'F',
    'F0',
    'F1',
    'asF',
    'time_t',
    'timesig_t',
    'num_t',
)


num_t: _t.TypeAlias = _t.Union[int, F]
time_t: _t.TypeAlias = _t.Union[int, F]
timesig_t: _t.TypeAlias = tuple[int, int]


F0: F = F(0)
F1: F = F(1)


def asF(t: int | str | F) -> F:
    """
    Convert ``t`` to a fraction if needed

    Floats are rejected: every time value within mensura is exact, a float
    would introduce rounding errors which can never be undone.

    >>> asF(3)
    Fraction(3, 1)
    >>> asF("3/8")
    Fraction(3, 8)
    """
    if isinstance(t, F):
        return t
    elif isinstance(t, (int, str)):
        return F(t)
    elif hasattr(t, 'numerator') and hasattr(t, 'denominator'):
        return F(t.numerator, t.denominator)
    else:
        raise TypeError(f"Could not convert {t} to a rational")


_logFormat = '[%(name)s:%(filename)s:%(lineno)s:%(funcName)s:%(levelname)s] %(message)s'


@_functools.cache
def getLogger(name: str, fmt=_logFormat, level: int | str = 'WARNING') -> _logging.Logger:
    """
    Construct the logger of a mensura package

    The logger writes to its own stream handler and does not propagate to the
    root logger. It is created once per name

    Args:
        name: the name of the logger, usually the name of the package
        fmt: the format used
        level: the initial level of the logger. Use ``logger.setLevel('DEBUG')``
            to see the statistics of the respelling search

    Returns:
        the logger
    """
    logger = _logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = False
    handler = _logging.StreamHandler()
    handler.setFormatter(_logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
