from django.urls import path
from .views import (
    CardCreateView,
    CardDetailView,
    DeckCreateView,
    DeckDetailView,
    DeckPreferencesView,
    DeckStatsView,
    DueCardsView,
    QueueView,
    ReviewView,
)

urlpatterns = [
    path("reviews", ReviewView.as_view(), name="review"),
    path("decks", DeckCreateView.as_view(), name="decks"),
    path("decks/<uuid:deck_id>", DeckDetailView.as_view(), name="deck-detail"),
    path("decks/<uuid:deck_id>/cards", CardCreateView.as_view(), name="deck-cards"),
    path("decks/<uuid:deck_id>/due-cards", DueCardsView.as_view(), name="due-cards"),
    path("decks/<uuid:deck_id>/queue", QueueView.as_view(), name="deck-queue"),
    path("decks/<uuid:deck_id>/preferences", DeckPreferencesView.as_view(), name="deck-preferences"),
    path("decks/<uuid:deck_id>/stats", DeckStatsView.as_view(), name="deck-stats"),
    path("cards/<uuid:card_id>", CardDetailView.as_view(), name="card-detail"),
]
