"""
mensura
=======

The rhythmic core of a music engraving toolkit.

mensura keeps the rhythm of a voice within a bar in a valid, engraveable state
while it is being edited: the rhythm always fills the bar, silences are merged
and spelled following the conventions of traditional engraving and notes
placed by the user are never altered.

See :py:mod:`mensura.rhythm`
"""
__version__ = '0.1.0'
