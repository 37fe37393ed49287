from .utils.time import DAY_MS, MINUTE_MS

LEARNING_STEPS_MS = (
    10 * MINUTE_MS,    # first look / relearn after a lapse
    1 * DAY_MS,        # last step before graduation
)

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 3.0

GRADUATING_INTERVAL_DAYS = 2

LAPSE_EASE_PENALTY = 0.2
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15
HARD_INTERVAL_MULTIPLIER = 1.2
EASY_INTERVAL_MULTIPLIER = 1.3

# Per-deck session preferences: (min, max, default)
DEFAULT_NEW_CARDS_PER_SESSION = 12
MIN_NEW_CARDS_PER_SESSION = 0
MAX_NEW_CARDS_PER_SESSION = 200

DEFAULT_AGAIN_REINSERT_AFTER_CARDS = 4
MIN_AGAIN_REINSERT_AFTER_CARDS = 1
MAX_AGAIN_REINSERT_AFTER_CARDS = 20

DEFAULT_DAILY_REVIEW_LIMIT = 60    # 0 = unlimited
MIN_DAILY_REVIEW_LIMIT = 0
MAX_DAILY_REVIEW_LIMIT = 500

DUE_FETCH_LIMIT = 200
