# Models live in scheduler.data; re-exported so Django registers them.
from .data.models import CardRecord, DailyReviewProgress, Deck, DeckPreferences, ReviewLog  # noqa: F401
