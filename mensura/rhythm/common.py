"""
Common definitions for the rhythm package
"""
from __future__ import annotations

from mensura.common import getLogger


logger = getLogger("mensura.rhythm")

# This module can't import ANYTHING from .


__all__ = (
    'logger',
    'MAXDOTS',
)


MAXDOTS = 4
"""
The maximum number of dots a note or rest can have

Quadruple dots appear in Liszt (Piano Concerto #2), Verdi (Requiem, Rex
Tremendae), Franck (Prelude, Chorale and Fugue) and Bartok (Music for Strings,
Percussion and Celesta). In every case the dots are on a half note.
"""
