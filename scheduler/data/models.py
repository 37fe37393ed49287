import uuid

from django.db import models

from ..config import (
    DEFAULT_AGAIN_REINSERT_AFTER_CARDS,
    DEFAULT_DAILY_REVIEW_LIMIT,
    DEFAULT_EASE,
    DEFAULT_NEW_CARDS_PER_SESSION,
)
from ..domain.enums import CardState

STATE_CHOICES = [(s.value, s.value) for s in CardState]


class Deck(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    created_at = models.BigIntegerField()  # ms since epoch
    deleted_at = models.BigIntegerField(null=True, blank=True)


class CardRecord(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    deck = models.ForeignKey(Deck, on_delete=models.CASCADE, related_name="cards")
    front = models.TextField()
    back = models.TextField()

    state = models.CharField(max_length=16, choices=STATE_CHOICES, default=CardState.NEW.value)
    due_at = models.BigIntegerField()
    interval_days = models.PositiveIntegerField(default=0)
    ease = models.FloatField(default=DEFAULT_EASE)
    reps = models.PositiveIntegerField(default=0)
    lapses = models.PositiveIntegerField(default=0)
    learning_step_index = models.PositiveIntegerField(default=0)

    created_at = models.BigIntegerField()
    updated_at = models.BigIntegerField()
    deleted_at = models.BigIntegerField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["deck", "due_at"], name="card_deck_due_idx"),
        ]


class DeckPreferences(models.Model):
    deck = models.OneToOneField(Deck, on_delete=models.CASCADE, related_name="preferences")
    new_cards_per_session = models.IntegerField(default=DEFAULT_NEW_CARDS_PER_SESSION)
    again_reinsert_after_cards = models.IntegerField(default=DEFAULT_AGAIN_REINSERT_AFTER_CARDS)
    daily_review_limit = models.IntegerField(default=DEFAULT_DAILY_REVIEW_LIMIT)


class DailyReviewProgress(models.Model):
    deck = models.ForeignKey(Deck, on_delete=models.CASCADE)
    day = models.CharField(max_length=10)  # YYYY-MM-DD, UTC
    reviewed = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = (("deck", "day"),)


class ReviewLog(models.Model):
    card = models.ForeignKey(CardRecord, on_delete=models.CASCADE, related_name="reviews")
    rating = models.SmallIntegerField()
    idempotency_key = models.CharField(max_length=64)
    reviewed_at = models.BigIntegerField()
    prev_state = models.CharField(max_length=16, choices=STATE_CHOICES)
    state = models.CharField(max_length=16, choices=STATE_CHOICES)
    due_at = models.BigIntegerField()
    interval_days = models.PositiveIntegerField()

    class Meta:
        unique_together = (("card", "idempotency_key"),)
        indexes = [
            models.Index(fields=["card", "reviewed_at"], name="review_card_time_idx"),
        ]
