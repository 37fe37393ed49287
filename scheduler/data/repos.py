from django.db import transaction, IntegrityError
from django.db.models import Count, Q

from .models import CardRecord, DailyReviewProgress, Deck, DeckPreferences, ReviewLog
from ..config import DUE_FETCH_LIMIT
from ..domain.cards import Card
from ..domain.enums import CardState
from ..domain.session_queue import (
    clamp_again_reinsert_after_cards,
    clamp_daily_review_limit,
    clamp_new_cards_per_session,
)
from ..utils.time import day_key, now_ms

PREFERENCE_CLAMPS = {
    "new_cards_per_session": clamp_new_cards_per_session,
    "again_reinsert_after_cards": clamp_again_reinsert_after_cards,
    "daily_review_limit": clamp_daily_review_limit,
}


def to_card(record):
    return Card(
        id=str(record.id),
        deck_id=str(record.deck_id),
        state=CardState(record.state),
        due_at=record.due_at,
        interval_days=record.interval_days,
        ease=record.ease,
        reps=record.reps,
        lapses=record.lapses,
        learning_step_index=record.learning_step_index,
        created_at=record.created_at,
        updated_at=record.updated_at,
        front=record.front,
        back=record.back,
    )


def create_deck(name, now=None):
    return Deck.objects.create(name=name.strip(), created_at=now if now is not None else now_ms())


def create_card(deck_id, front, back, now=None):
    now = now if now is not None else now_ms()
    card = Card.create(None, str(deck_id), now, front=front.strip(), back=back.strip())
    record = CardRecord.objects.create(
        deck_id=deck_id,
        front=card.front,
        back=card.back,
        state=card.state.value,
        due_at=card.due_at,
        interval_days=card.interval_days,
        ease=card.ease,
        reps=card.reps,
        lapses=card.lapses,
        learning_step_index=card.learning_step_index,
        created_at=card.created_at,
        updated_at=card.updated_at,
    )
    return to_card(record)


def get_due_cards(deck_id, now=None, limit=DUE_FETCH_LIMIT):
    """Non-deleted cards of a deck due at ``now``, earliest first."""
    now = now if now is not None else now_ms()
    qs = (CardRecord.objects
          .filter(deck_id=deck_id, deleted_at__isnull=True, due_at__lte=now)
          .order_by("due_at", "created_at")[:limit])
    return [to_card(r) for r in qs]


def get_card_for_update(card_id):
    """
    Fetch a card row and lock it. Must run inside ``transaction.atomic()``
    so the lock is held until the caller's writes commit.
    """
    return CardRecord.objects.select_for_update().get(pk=card_id, deleted_at__isnull=True)


def apply_scheduling(card_id, patch):
    """Write only the fields ``patch`` sets, as one UPDATE."""
    changes = patch.changes()
    if not changes:
        return 0
    if "state" in changes:
        changes["state"] = CardState(changes["state"]).value
    return CardRecord.objects.filter(pk=card_id).update(**changes)


def get_existing_idempotent(card_id, idem_key):
    return ReviewLog.objects.filter(card_id=card_id, idempotency_key=idem_key).first()


def persist_review(card_id, rating, idem_key, reviewed_at, prev_state, card):
    """
    Insert ReviewLog; if a concurrent duplicate slips in, return the existing one.
    """
    try:
        with transaction.atomic():
            return ReviewLog.objects.create(
                card_id=card_id, rating=int(rating), idempotency_key=idem_key,
                reviewed_at=reviewed_at, prev_state=CardState(prev_state).value,
                state=CardState(card.state).value, due_at=card.due_at,
                interval_days=card.interval_days,
            ), False
    except IntegrityError:
        # Duplicate idempotency key safeguard
        return get_existing_idempotent(card_id, idem_key), True


def get_deck_preferences(deck_id):
    """Per-deck session preferences, re-clamped on read."""
    prefs = DeckPreferences.objects.filter(deck_id=deck_id).first()
    if prefs is None:
        prefs = DeckPreferences(deck_id=deck_id)
    for name, clamp in PREFERENCE_CLAMPS.items():
        setattr(prefs, name, clamp(getattr(prefs, name)))
    return prefs


def update_deck_preferences(deck_id, **values):
    prefs, _ = DeckPreferences.objects.get_or_create(deck_id=deck_id)
    for name, value in values.items():
        if value is None:
            continue
        setattr(prefs, name, PREFERENCE_CLAMPS[name](value))
    prefs.save()
    return prefs


def get_reviewed_today(deck_id, now=None):
    now = now if now is not None else now_ms()
    row = DailyReviewProgress.objects.filter(deck_id=deck_id, day=day_key(now)).first()
    return row.reviewed if row else 0


def add_reviewed_today(deck_id, delta, now=None):
    if not delta:
        return get_reviewed_today(deck_id, now)
    now = now if now is not None else now_ms()
    with transaction.atomic():
        row, _ = (DailyReviewProgress.objects
                  .select_for_update()
                  .get_or_create(deck_id=deck_id, day=day_key(now)))
        row.reviewed = max(0, row.reviewed + int(delta))
        row.save(update_fields=["reviewed"])
    return row.reviewed


def delete_review(card_id, idem_key):
    """Drop the log row of an undone review so its key can be reused."""
    deleted, _ = ReviewLog.objects.filter(card_id=card_id, idempotency_key=idem_key).delete()
    return deleted


def get_deck_stats(deck_id, now=None):
    """Counts of a deck's non-deleted cards: total, due now and per state."""
    now = now if now is not None else now_ms()
    return CardRecord.objects.filter(deck_id=deck_id, deleted_at__isnull=True).aggregate(
        total=Count("id"),
        due=Count("id", filter=Q(due_at__lte=now)),
        new=Count("id", filter=Q(state=CardState.NEW.value)),
        learning=Count("id", filter=Q(state=CardState.LEARNING.value)),
        review=Count("id", filter=Q(state=CardState.REVIEW.value)),
    )


def soft_delete_card(card_id, now=None):
    """Mark a card deleted. Returns False if it was missing or already deleted."""
    now = now if now is not None else now_ms()
    updated = (CardRecord.objects
               .filter(pk=card_id, deleted_at__isnull=True)
               .update(deleted_at=now, updated_at=now))
    return updated > 0


def delete_deck(deck_id, now=None):
    """Soft-delete a deck together with all of its cards."""
    now = now if now is not None else now_ms()
    with transaction.atomic():
        updated = Deck.objects.filter(pk=deck_id, deleted_at__isnull=True).update(deleted_at=now)
        if not updated:
            return False
        (CardRecord.objects
         .filter(deck_id=deck_id, deleted_at__isnull=True)
         .update(deleted_at=now, updated_at=now))
    return True
