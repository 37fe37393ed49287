from dataclasses import dataclass, fields, replace
from typing import Optional

from .enums import CardState
from ..config import DEFAULT_EASE

SCHEDULING_FIELDS = (
    "state",
    "due_at",
    "interval_days",
    "ease",
    "reps",
    "lapses",
    "learning_step_index",
    "updated_at",
)


@dataclass(frozen=True)
class Card:
    """Scheduling view of a flashcard. Timestamps are ms since epoch."""

    id: str
    deck_id: str
    state: CardState = CardState.NEW
    due_at: int = 0
    interval_days: int = 0
    ease: float = DEFAULT_EASE
    reps: int = 0
    lapses: int = 0
    learning_step_index: int = 0
    created_at: int = 0
    updated_at: int = 0
    front: str = ""
    back: str = ""

    @classmethod
    def create(cls, card_id, deck_id, now: int, front="", back=""):
        # New cards are due immediately.
        return cls(
            id=card_id,
            deck_id=deck_id,
            state=CardState.NEW,
            due_at=now,
            created_at=now,
            updated_at=now,
            front=front,
            back=back,
        )


@dataclass(frozen=True)
class CardPatch:
    """
    Partial update produced by the scheduler.

    A field left as ``None`` is unchanged; callers merge only the set fields
    into the stored card.
    """

    state: Optional[CardState] = None
    due_at: Optional[int] = None
    interval_days: Optional[int] = None
    ease: Optional[float] = None
    reps: Optional[int] = None
    lapses: Optional[int] = None
    learning_step_index: Optional[int] = None
    updated_at: Optional[int] = None

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def apply_to(self, card: Card) -> Card:
        return replace(card, **self.changes())

    @classmethod
    def snapshot(cls, card: Card) -> "CardPatch":
        """Every scheduling field of ``card``, used to restore it later."""
        return cls(**{name: getattr(card, name) for name in SCHEDULING_FIELDS})
