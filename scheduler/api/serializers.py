from rest_framework import serializers

from ..domain.enums import RATING_BY_LABEL
from ..utils.time import format_due_relative, now_ms, to_iso


class ReviewInSerializer(serializers.Serializer):
    card_id = serializers.UUIDField()
    rating = serializers.ChoiceField(choices=list(RATING_BY_LABEL))
    idempotency_key = serializers.CharField(max_length=64)


class DueQuerySerializer(serializers.Serializer):
    until = serializers.DateTimeField(required=False)  # ISO-8601, defaults to now
    limit = serializers.IntegerField(min_value=1, max_value=500, required=False)


class DeckInSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)


class CardInSerializer(serializers.Serializer):
    front = serializers.CharField()
    back = serializers.CharField()


class QueueInSerializer(serializers.Serializer):
    queued_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    reviewed_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)
    introduced_new_count = serializers.IntegerField(min_value=0, required=False, default=0)
    max_cards_to_pick = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class PreferencesSerializer(serializers.Serializer):
    # Out-of-range values are clamped by the repository, not rejected.
    new_cards_per_session = serializers.IntegerField(required=False)
    again_reinsert_after_cards = serializers.IntegerField(required=False)
    daily_review_limit = serializers.IntegerField(required=False)


def card_payload(card, now=None):
    now = now if now is not None else now_ms()
    return {
        "id": card.id,
        "deck_id": card.deck_id,
        "front": card.front,
        "back": card.back,
        "state": card.state.value,
        "due_at": card.due_at,
        "due_at_utc": to_iso(card.due_at),
        "due_label": format_due_relative(card.due_at, now),
        "interval_days": card.interval_days,
        "ease": card.ease,
        "reps": card.reps,
        "lapses": card.lapses,
        "learning_step_index": card.learning_step_index,
    }
