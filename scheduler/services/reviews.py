from dataclasses import dataclass
from typing import Optional

from django.db import transaction
import structlog
from ..data.repos import (
    add_reviewed_today,
    apply_scheduling,
    delete_review,
    get_card_for_update,
    get_existing_idempotent,
    persist_review,
    to_card,
)
from ..domain.cards import Card, CardPatch
from ..domain.enums import RATING_LABELS, Rating
from ..domain.logic import schedule
from ..utils.time import now_ms, to_iso

logger = structlog.get_logger()


@dataclass(frozen=True)
class ReviewOutcome:
    card: Card
    patch: Optional[CardPatch]
    idempotent: bool


def record_review(card_id, rating, idempotency_key: str, now=None) -> ReviewOutcome:
    rating = Rating(rating)
    logger.info("review_received",
        card_id=str(card_id),
        rating=RATING_LABELS[rating],
        idempotency_key=idempotency_key,
    )

    # Fast path: return the stored card if this key was already applied
    existing = get_existing_idempotent(card_id, idempotency_key)
    if existing:
        card = to_card(existing.card)
        logger.info("idempotent_reuse",
            card_id=str(card_id),
            due_at=to_iso(card.due_at),
        )
        return ReviewOutcome(card=card, patch=None, idempotent=True)

    now = now if now is not None else now_ms()
    with transaction.atomic():
        # Serialize scheduling per card
        card = to_card(get_card_for_update(card_id))
        patch = schedule(card, rating, now)
        apply_scheduling(card.id, patch)
        updated = patch.apply_to(card)

        log, was_idempotent = persist_review(
            card.id, rating, idempotency_key, now, card.state, updated
        )
        if was_idempotent:
            # A concurrent request with the same key won; discard this one.
            transaction.set_rollback(True)
        else:
            add_reviewed_today(card.deck_id, 1, now)

    if was_idempotent:
        return ReviewOutcome(card=to_card(log.card), patch=None, idempotent=True)

    logger.info("review_scheduled",
        card_id=card.id,
        deck_id=card.deck_id,
        prev_state=card.state.value,
        state=updated.state.value,
        interval_days=updated.interval_days,
        ease=updated.ease,
        due_at=to_iso(updated.due_at),
    )
    return ReviewOutcome(card=updated, patch=patch, idempotent=False)


def revert_review(card: Card, snapshot: CardPatch, now=None, idempotency_key=None):
    """
    Write a scheduling snapshot back onto a card and uncount the review.

    The review log row for ``idempotency_key`` is removed, so resending that
    key rates the card again instead of replaying the undone result.
    """
    with transaction.atomic():
        get_card_for_update(card.id)
        apply_scheduling(card.id, snapshot)
        add_reviewed_today(card.deck_id, -1, now)
        if idempotency_key is not None:
            delete_review(card.id, idempotency_key)

    logger.info("review_reverted",
        card_id=card.id,
        idempotency_key=idempotency_key,
        state=snapshot.state.value if snapshot.state else None,
        due_at=to_iso(snapshot.due_at) if snapshot.due_at is not None else None,
    )
    return snapshot.apply_to(card)
