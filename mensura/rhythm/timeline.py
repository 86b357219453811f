"""
Bookkeeping between a bar and the entities which represent it

A :class:`Bar` does not know how its rests, notes and chords are stored
outside of it. A :class:`BarTimeline` wraps a bar, attaching a :class:`Lifetime`
to each slot and an entity id to each automatic rest ("managed" rests), so
that every child of the bar can be identified between edits.
"""
from __future__ import annotations
import heapq

from mensura.common import F0
from .common import logger
from .bar import Bar
from .bardefs import BarChild, RhythmSlot, RhythmicBeaming
from .beaming import beamCandidates
from .duration import Duration
from .lifetime import Lifetime

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from typing import Sequence
    from mensura.common import time_t
    from .metre import Metre


__all__ = (
    'EntityAllocator',
    'BarTimeline',
)


def _isManaged(slot: RhythmSlot) -> bool:
    # automatic and hidden rests have no entity of their own
    return not slot.struck or slot.payload.entity is None


class EntityAllocator:
    """
    Creates integer entity ids

    Ids which are freed are reused, lowest first
    """
    def __init__(self):
        self._next = 0
        self._free: list[int] = []
        self._freeset: set[int] = set()

    def create(self) -> int:
        """Create a new entity id"""
        if self._free:
            entity = heapq.heappop(self._free)
            self._freeset.discard(entity)
            return entity
        entity = self._next
        self._next += 1
        return entity

    def free(self, entity: int) -> None:
        """Release an entity id so that it can be reused"""
        if entity >= self._next or entity < 0:
            raise ValueError(f"Entity {entity} was never created")
        if entity in self._freeset:
            raise ValueError(f"Entity {entity} was already freed")
        heapq.heappush(self._free, entity)
        self._freeset.add(entity)

    def isAlive(self, entity: int) -> bool:
        return 0 <= entity < self._next and entity not in self._freeset


class BarTimeline:
    """
    A bar together with the entities which represent its children

    Args:
        metre: the metre of the bar (a Metre or a time signature)
        allocator: the allocator used to create entity ids. If not given a
            new allocator is created

    Attributes:
        bar: the wrapped bar
        allocator: the entity allocator
        managed: the entity ids of the automatic rests, in order
        beams: maps a beam id to the (entity, beaming) of each note under it
    """
    def __init__(self, metre: Metre | str | tuple[int, int], allocator: EntityAllocator | None = None):
        self.bar = Bar(metre)
        self.allocator = allocator or EntityAllocator()
        self.managed: list[int] = []
        self.beams: dict[int, list[tuple[int, RhythmicBeaming]]] = {}
        self._beamForEntity: dict[int, int] = {}
        self.syncManaged()

    def __repr__(self):
        return f"BarTimeline({self.bar}, managed={self.managed})"

    def splice(self, start: time_t, replacement: Sequence[tuple[Duration, Lifetime]]) -> None:
        """
        Replace the contents of the bar starting at ``start``

        Args:
            start: the start of the splice, in whole notes
            replacement: a list of (duration, lifetime). Any lifetime which
                is not an automatic rest is kept as is
        """
        slots = []
        for duration, lifetime in replacement:
            if lifetime.isAutomatic():
                slots.append(RhythmSlot(duration, False))
            else:
                slots.append(RhythmSlot(duration, True, lifetime))
        self.bar.splice(start, slots)
        self.syncManaged()

    def remove(self, entity: int) -> Lifetime | None:
        """
        Remove the note, chord or rest owned by ``entity``

        Returns:
            the lifetime of the removed slot, or None if the entity is not part of this bar
        """
        removed = None
        for slot in self.bar.slots():
            if isinstance(slot.payload, Lifetime) and slot.payload.entity == entity:
                removed = slot.payload
                self.bar.remove(slot.payload)
        if removed is not None:
            self.syncManaged()
        return removed

    def targetManagedCount(self) -> int:
        """The number of managed entities needed by the bar"""
        if self.bar.wholeRest():
            return 1
        return sum(1 for slot in self.bar.slots() if _isManaged(slot))

    def pushManagedEntity(self) -> tuple[Duration, int] | None:
        """
        Create a managed entity if the bar needs more than it has

        Returns:
            the duration of the rest and the entity created, or None if nothing
            was created
        """
        index = len(self.managed)
        if self.bar.wholeRest():
            if index != 0:
                return None
            entity = self.allocator.create()
            self.managed.append(entity)
            return Duration.newWholeRest(self.bar.duration()), entity

        for slot in self.bar.slots():
            if not _isManaged(slot):
                continue
            if index == 0:
                entity = self.allocator.create()
                self.managed.append(entity)
                return slot.duration, entity
            index -= 1
        return None

    def popManagedEntity(self) -> int | None:
        """
        Remove a managed entity if the bar has more than it needs

        The entity id is freed

        Returns:
            the entity removed, or None
        """
        if self.targetManagedCount() < len(self.managed):
            entity = self.managed.pop()
            self.allocator.free(entity)
            return entity
        return None

    def syncManaged(self) -> tuple[list[tuple[Duration, int]], list[int]]:
        """
        Create or remove managed entities until they match the rests of the bar

        Returns:
            a tuple (created, removed), where created is a list of
            (duration, entity) and removed is a list of entities
        """
        created = []
        while (pushed := self.pushManagedEntity()) is not None:
            created.append(pushed)
        removed = []
        while (popped := self.popManagedEntity()) is not None:
            removed.append(popped)
        if created or removed:
            logger.debug("Managed rests of %s, created: %s, removed: %s", self.bar, created, removed)
        return created, removed

    def children(self) -> list[BarChild]:
        """
        The children of the bar, identified by their entity

        The slot of each child is the entity of its lifetime or, for an
        automatic rest, its managed entity
        """
        if len(self.managed) != self.targetManagedCount():
            logger.error(f"Managed entities out of sync: {self.managed}, bar: {self.bar}")
            raise RuntimeError("The managed entities of this bar are out of sync, "
                               "call syncManaged() after modifying the bar")
        managed = iter(self.managed)
        if self.bar.wholeRest():
            return [BarChild(Duration.newWholeRest(self.bar.duration()), F0,
                             Lifetime.automaticRest(), next(managed))]
        out = []
        for child, slot in zip(self.bar.children(), self.bar.slots()):
            lifetime = slot.payload if slot.struck else Lifetime.automaticRest()
            entity = next(managed) if _isManaged(slot) else lifetime.entity
            out.append(BarChild(child.duration, child.start, lifetime, entity))
        return out

    def draftBeams(self) -> dict[int, list[tuple[int, RhythmicBeaming]]]:
        """
        Group the notes of the bar under beams

        Beam ids already used by this bar are reused, lowest first. Beam ids
        which are not needed anymore are freed

        Returns:
            a dict mapping each beam id to the (entity, beaming) of the notes under it
        """
        children = self.children()
        available = sorted({self._beamForEntity[child.slot] for child in children
                            if child.slot in self._beamForEntity})
        previous = set(self.beams)
        beams: dict[int, list[tuple[int, RhythmicBeaming]]] = {}
        beamForEntity: dict[int, int] = {}

        if not self.bar.wholeRest():
            for t0, group in beamCandidates(children):
                beamings = self.bar.beaming(t0, [child.duration for child in group])
                current: int | None = None
                for beaming, child in zip(beamings, group):
                    if beaming is None:
                        current = None
                        continue
                    if current is None:
                        current = available.pop(0) if available else self.allocator.create()
                        beams[current] = []
                    beams[current].append((child.slot, beaming))
                    beamForEntity[child.slot] = current
                    if beaming.leaving == 0:
                        current = None

        for beam in previous - set(beams):
            self.allocator.free(beam)
        self.beams = beams
        self._beamForEntity = beamForEntity
        return beams
