"""
rhythm
======

The rhythm package provides the rhythmic notation engine: an exact model of
durations and metres, and a bar which keeps its rhythm valid while it is
being edited.

rhythm.duration
---------------

.. seealso:: :py:mod:`mensura.rhythm.duration`

A :class:`~mensura.rhythm.duration.Duration` holds the displayed length of a
rest, note or chord, its tuplet ratio and whether it is a whole-bar rest. All
durations are exact and measured in whole notes.

rhythm.metre
------------

.. seealso:: :py:mod:`mensura.rhythm.metre`

A :class:`~mensura.rhythm.metre.Metre` organizes a bar into segments, each
starting on a stress. Each segment is simple or compound and plays a role
(duple, triple, quadruple) within the bar.

rhythm.bar
----------

.. seealso:: :py:mod:`mensura.rhythm.bar`

A :class:`~mensura.rhythm.bar.Bar` holds the rhythm of one voice within one
bar. It is modified via :meth:`~mensura.rhythm.bar.Bar.splice`, after which
rests are merged and respelled (see :py:mod:`mensura.rhythm.respell`).

Example
-------

.. code-block:: python

    from mensura.rhythm import *
    bar = Bar(Metre(4, 4))
    bar.splice(F(3, 4), [(Duration(NoteValue.HALF), True)])
    for child in bar.children():
        print(child.start, child.duration)

"""
from mensura.common import F
from .errors import *
from .duration import *
from .metre import *
from .lifetime import *
from .bardefs import *
from .bar import *
from .beaming import *
from .spacing import *
from .timeline import *
from .common import logger
from .config import config
