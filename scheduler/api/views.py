from rest_framework import views, status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response
import structlog
import uuid
from ..data.models import CardRecord, Deck
from ..data.repos import (
    create_card,
    create_deck,
    delete_deck,
    get_deck_preferences,
    get_deck_stats,
    get_due_cards,
    soft_delete_card,
    update_deck_preferences,
)
from ..domain.enums import Rating
from ..domain.session_queue import pick_due_cards_for_queue
from ..services.reviews import record_review
from ..utils.time import now_ms, to_iso, to_ms
from .serializers import (
    CardInSerializer,
    DeckInSerializer,
    DueQuerySerializer,
    PreferencesSerializer,
    QueueInSerializer,
    ReviewInSerializer,
    card_payload,
)

base_logger = structlog.get_logger()


def _bind_request_logger():
    return base_logger.bind(request_id=str(uuid.uuid4()))


def _get_deck(deck_id):
    try:
        return Deck.objects.get(pk=deck_id, deleted_at__isnull=True)
    except Deck.DoesNotExist:
        raise NotFound("Deck not found.")


def _preferences_payload(prefs):
    return {
        "new_cards_per_session": prefs.new_cards_per_session,
        "again_reinsert_after_cards": prefs.again_reinsert_after_cards,
        "daily_review_limit": prefs.daily_review_limit,
    }


class ReviewView(views.APIView):
    def post(self, request):
        logger = _bind_request_logger()

        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        card_id = s.validated_data["card_id"]
        rating = Rating.from_label(s.validated_data["rating"])
        idem = s.validated_data["idempotency_key"]

        try:
            outcome = record_review(card_id, rating, idem)
        except CardRecord.DoesNotExist:
            raise NotFound("Card not found.")
        status_code = status.HTTP_200_OK if outcome.idempotent else status.HTTP_201_CREATED

        logger.info(
            "review_api_response",
            card_id=str(card_id),
            rating=s.validated_data["rating"],
            idempotent=outcome.idempotent,
            state=outcome.card.state.value,
            interval_days=outcome.card.interval_days,
            due_at=to_iso(outcome.card.due_at),
            status=status_code,
        )

        return Response(
            {
                "card": card_payload(outcome.card),
                "changed": sorted(outcome.patch.changes()) if outcome.patch else [],
                "idempotent": outcome.idempotent,
            },
            status=status_code,
        )


class DeckCreateView(views.APIView):
    def post(self, request):
        logger = _bind_request_logger()

        s = DeckInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        deck = create_deck(s.validated_data["name"])

        logger.info("deck_created", deck_id=str(deck.id), name=deck.name)
        return Response(
            {"id": str(deck.id), "name": deck.name, "created_at": deck.created_at},
            status=status.HTTP_201_CREATED,
        )


class DeckDetailView(views.APIView):
    def delete(self, request, deck_id):
        logger = _bind_request_logger()
        if not delete_deck(deck_id):
            raise NotFound("Deck not found.")

        logger.info("deck_deleted", deck_id=str(deck_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class DeckStatsView(views.APIView):
    def get(self, request, deck_id):
        deck = _get_deck(deck_id)
        return Response({"deck_id": str(deck.id), **get_deck_stats(deck.id)})


class CardCreateView(views.APIView):
    def post(self, request, deck_id):
        logger = _bind_request_logger()
        deck = _get_deck(deck_id)

        s = CardInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        card = create_card(deck.id, s.validated_data["front"], s.validated_data["back"])

        logger.info("card_created", deck_id=str(deck.id), card_id=card.id)
        return Response(card_payload(card), status=status.HTTP_201_CREATED)


class DueCardsView(views.APIView):
    def get(self, request, deck_id):
        logger = _bind_request_logger()
        deck = _get_deck(deck_id)

        qs = DueQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        until = qs.validated_data.get("until")
        until_ms = to_ms(until) if until else now_ms()
        kwargs = {}
        if "limit" in qs.validated_data:
            kwargs["limit"] = qs.validated_data["limit"]

        results = get_due_cards(deck.id, until_ms, **kwargs)

        logger.info(
            "due_cards_api_response",
            deck_id=str(deck.id),
            until_utc=to_iso(until_ms),
            card_count=len(results),
        )

        return Response(
            {
                "deck_id": str(deck.id),
                "until_utc": to_iso(until_ms),
                "cards": [card_payload(c) for c in results],
            }
        )


class QueueView(views.APIView):
    """Pick the next session batch from the deck's due cards."""

    def post(self, request, deck_id):
        logger = _bind_request_logger()
        deck = _get_deck(deck_id)

        s = QueueInSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        prefs = get_deck_preferences(deck.id)
        result = pick_due_cards_for_queue(
            get_due_cards(deck.id, now_ms()),
            queued_ids=set(data["queued_ids"]),
            reviewed_ids=set(data["reviewed_ids"]),
            introduced_new_count=data["introduced_new_count"],
            new_cards_per_session=prefs.new_cards_per_session,
            max_cards_to_pick=data.get("max_cards_to_pick"),
        )

        logger.info(
            "queue_api_response",
            deck_id=str(deck.id),
            picked=len(result.picked),
            introduced_new_count=result.introduced_new_count,
        )
        return Response(
            {
                "picked": [card_payload(c) for c in result.picked],
                "introduced_new_count": result.introduced_new_count,
            }
        )


class DeckPreferencesView(views.APIView):
    def get(self, request, deck_id):
        deck = _get_deck(deck_id)
        return Response(_preferences_payload(get_deck_preferences(deck.id)))

    def put(self, request, deck_id):
        logger = _bind_request_logger()
        deck = _get_deck(deck_id)

        s = PreferencesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        prefs = update_deck_preferences(deck.id, **s.validated_data)

        payload = _preferences_payload(prefs)
        logger.info("preferences_updated", deck_id=str(deck.id), **payload)
        return Response(payload)


class CardDetailView(views.APIView):
    def delete(self, request, card_id):
        logger = _bind_request_logger()
        if not soft_delete_card(card_id):
            raise NotFound("Card not found.")

        logger.info("card_deleted", card_id=str(card_id))
        return Response(status=status.HTTP_204_NO_CONTENT)
