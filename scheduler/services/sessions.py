"""
Review sessions.

A session is a plain value owned by the caller: the queue of cards, the
cursor into it and the bookkeeping needed for refill and undo. Every function
takes a session and returns a new one; storage is only touched through the
review service and the repository.
"""

from dataclasses import dataclass, field, replace
from typing import Optional
import uuid

import structlog
from ..data.repos import get_deck_preferences, get_due_cards
from ..domain.cards import Card, CardPatch
from ..domain.enums import RATING_LABELS, Rating
from ..domain.session_queue import pick_due_cards_for_queue, upsert_reinforcement_card
from ..utils.time import now_ms
from .reviews import record_review, revert_review

logger = structlog.get_logger()


@dataclass(frozen=True)
class UndoEntry:
    card: Card
    snapshot: CardPatch
    session: "ReviewSession"
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class ReviewSession:
    deck_id: str
    queue: tuple = ()
    index: int = 0
    reviewed_ids: tuple = ()
    introduced_new_count: int = 0
    reviewed_count: int = 0
    new_cards_per_session: int = 0
    again_reinsert_after_cards: int = 0
    daily_review_limit: int = 0
    history: tuple = field(default=(), repr=False)

    @property
    def remaining(self) -> int:
        return max(0, len(self.queue) - self.index)

    @property
    def finished(self) -> bool:
        return self.index >= len(self.queue)


def current_card(session: ReviewSession) -> Optional[Card]:
    if session.finished:
        return None
    return session.queue[session.index]


def progress_label(session: ReviewSession) -> str:
    if session.daily_review_limit > 0:
        done = min(session.reviewed_count, session.daily_review_limit)
        return f"{done}/{session.daily_review_limit}"
    return str(session.reviewed_count)


def _daily_cap(session):
    return session.daily_review_limit if session.daily_review_limit > 0 else None


def start_session(deck_id, now=None) -> ReviewSession:
    now = now if now is not None else now_ms()
    prefs = get_deck_preferences(deck_id)
    session = ReviewSession(
        deck_id=str(deck_id),
        new_cards_per_session=prefs.new_cards_per_session,
        again_reinsert_after_cards=prefs.again_reinsert_after_cards,
        daily_review_limit=prefs.daily_review_limit,
    )

    selected = pick_due_cards_for_queue(
        get_due_cards(deck_id, now),
        introduced_new_count=0,
        new_cards_per_session=session.new_cards_per_session,
        max_cards_to_pick=_daily_cap(session),
    )
    logger.info("session_started",
        deck_id=session.deck_id,
        queued=len(selected.picked),
        introduced_new=selected.introduced_new_count,
        daily_review_limit=session.daily_review_limit,
    )
    return replace(
        session,
        queue=tuple(selected.picked),
        introduced_new_count=selected.introduced_new_count,
    )


def rate_current(session: ReviewSession, rating, now=None, idempotency_key=None) -> ReviewSession:
    """
    Rate the card under the cursor and advance.

    An Again rating re-queues the card a few cards later. While the day's
    target is not reached, the queue is topped up from storage.
    """
    card = current_card(session)
    if card is None:
        return session

    rating = Rating(rating)
    now = now if now is not None else now_ms()
    idempotency_key = idempotency_key or uuid.uuid4().hex
    outcome = record_review(card.id, rating, idempotency_key, now)
    updated = outcome.card

    queue = list(session.queue)
    queue[session.index] = updated
    if rating == Rating.AGAIN:
        queue = upsert_reinforcement_card(
            queue,
            after_index=session.index,
            card=updated,
            after_cards=session.again_reinsert_after_cards,
        )

    reviewed_ids = session.reviewed_ids + (card.id,)
    reviewed_count = session.reviewed_count + 1
    next_index = session.index + 1
    remaining = max(0, len(queue) - next_index)
    introduced = session.introduced_new_count

    cap = _daily_cap(session)
    target = cap if cap is not None else float("inf")
    if reviewed_count + remaining < target:
        refill = pick_due_cards_for_queue(
            get_due_cards(session.deck_id, now),
            queued_ids={c.id for c in queue[next_index:]},
            reviewed_ids=set(reviewed_ids),
            introduced_new_count=introduced,
            new_cards_per_session=session.new_cards_per_session,
            max_cards_to_pick=None if cap is None else cap - reviewed_count - remaining,
        )
        introduced = refill.introduced_new_count
        queue.extend(refill.picked)

    logger.info("session_card_rated",
        deck_id=session.deck_id,
        card_id=card.id,
        rating=RATING_LABELS[rating],
        reviewed=reviewed_count,
        remaining=max(0, len(queue) - next_index),
    )

    undo = UndoEntry(
        card=card,
        snapshot=CardPatch.snapshot(card),
        session=session,
        idempotency_key=idempotency_key,
    )
    return replace(
        session,
        queue=tuple(queue),
        index=next_index,
        reviewed_ids=reviewed_ids,
        introduced_new_count=introduced,
        reviewed_count=reviewed_count,
        history=session.history + (undo,),
    )


def undo_last(session: ReviewSession, now=None) -> ReviewSession:
    """Restore the last rated card in storage and return the session before it."""
    if not session.history:
        return session
    last = session.history[-1]
    revert_review(last.card, last.snapshot, now, idempotency_key=last.idempotency_key)
    logger.info("session_undo", deck_id=session.deck_id, card_id=last.card.id)
    return last.session
