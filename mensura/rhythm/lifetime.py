from __future__ import annotations
from dataclasses import dataclass
import enum


__all__ = (
    'LifetimeKind',
    'Lifetime',
)


class LifetimeKind(enum.Enum):
    AUTOMATIC_REST = 1
    HIDDEN_REST = 2
    TEMPORARY = 3
    EXPLICIT = 4


@dataclass(frozen=True)
class Lifetime:
    """
    Why a slot within a bar exists

    * automatic rest: a rest used to fill the bar, it can be replaced without
      user intent
    * hidden rest: a rest which is not shown (for example in pickup bars)
    * temporary: a note shown while the user is previewing an entry
    * explicit: a note, chord or rest created by the user

    Temporary and explicit lifetimes refer to the entity which owns the slot
    """
    kind: LifetimeKind
    entity: int | None = None

    @classmethod
    def automaticRest(cls) -> Lifetime:
        return cls(LifetimeKind.AUTOMATIC_REST)

    @classmethod
    def hiddenRest(cls) -> Lifetime:
        return cls(LifetimeKind.HIDDEN_REST)

    @classmethod
    def temporary(cls, entity: int) -> Lifetime:
        return cls(LifetimeKind.TEMPORARY, entity)

    @classmethod
    def explicit(cls, entity: int) -> Lifetime:
        return cls(LifetimeKind.EXPLICIT, entity)

    def isExplicit(self) -> bool:
        return self.kind is LifetimeKind.EXPLICIT

    def isTemporary(self) -> bool:
        return self.kind is LifetimeKind.TEMPORARY

    def isAutomatic(self) -> bool:
        return self.kind is LifetimeKind.AUTOMATIC_REST

    def isHidden(self) -> bool:
        return self.kind is LifetimeKind.HIDDEN_REST

    def __repr__(self):
        if self.entity is None:
            return f"Lifetime({self.kind.name})"
        return f"Lifetime({self.kind.name}, entity={self.entity})"
