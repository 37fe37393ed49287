import math

from .cards import Card, CardPatch
from .enums import CardState, Rating
from ..config import (
    DEFAULT_EASE,
    EASY_EASE_BONUS,
    EASY_INTERVAL_MULTIPLIER,
    GRADUATING_INTERVAL_DAYS,
    HARD_EASE_PENALTY,
    HARD_INTERVAL_MULTIPLIER,
    LAPSE_EASE_PENALTY,
    LEARNING_STEPS_MS,
    MAX_EASE,
    MIN_EASE,
)
from ..utils.time import DAY_MS

LAST_STEP_INDEX = len(LEARNING_STEPS_MS) - 1


def clamp_ease(ease: float) -> float:
    return max(MIN_EASE, min(MAX_EASE, ease))


def round_half_up(n: float) -> int:
    return int(math.floor(n + 0.5))


def step_duration(index: int) -> int:
    return LEARNING_STEPS_MS[max(0, min(index, LAST_STEP_INDEX))]


def _graduate(now: int, ease: float) -> dict:
    return dict(
        state=CardState.REVIEW,
        learning_step_index=0,
        interval_days=GRADUATING_INTERVAL_DAYS,
        ease=ease,
        due_at=now + GRADUATING_INTERVAL_DAYS * DAY_MS,
    )


def _learning_step(now: int, index: int, ease: float) -> dict:
    return dict(
        state=CardState.LEARNING,
        learning_step_index=index,
        due_at=now + step_duration(index),
        ease=ease,
    )


def _schedule_new(card: Card, rating: Rating, now: int) -> dict:
    if rating == Rating.EASY:
        return _graduate(now, DEFAULT_EASE)
    # Good skips the first step; again/hard both start at it.
    index = 1 if rating == Rating.GOOD else 0
    return dict(
        _learning_step(now, min(index, LAST_STEP_INDEX), DEFAULT_EASE),
        interval_days=0,
        lapses=card.lapses,
    )


def _schedule_learning(card: Card, rating: Rating, now: int) -> dict:
    ease = clamp_ease(card.ease)
    current = card.learning_step_index

    if rating == Rating.AGAIN:
        return _learning_step(now, 0, ease)
    if rating == Rating.HARD:
        # Hard repeats the current step instead of advancing.
        return _learning_step(now, current, ease)
    if rating == Rating.EASY:
        return _graduate(now, ease)

    nxt = current + 1
    if nxt > LAST_STEP_INDEX:
        return _graduate(now, ease)
    return _learning_step(now, nxt, ease)


def _schedule_review(card: Card, rating: Rating, now: int) -> dict:
    interval = max(1, card.interval_days or 1)
    ease = clamp_ease(card.ease)

    if rating == Rating.AGAIN:
        # Lapse: interval_days is left as-is, graduation recomputes it.
        return dict(
            _learning_step(now, 0, clamp_ease(ease - LAPSE_EASE_PENALTY)),
            lapses=card.lapses + 1,
        )

    if rating == Rating.HARD:
        ease = clamp_ease(ease - HARD_EASE_PENALTY)
        next_interval = round_half_up(interval * HARD_INTERVAL_MULTIPLIER)
    elif rating == Rating.GOOD:
        next_interval = round_half_up(interval * ease)
    else:
        ease = clamp_ease(ease + EASY_EASE_BONUS)
        next_interval = round_half_up(interval * ease * EASY_INTERVAL_MULTIPLIER)

    next_interval = max(1, next_interval)
    return dict(
        state=CardState.REVIEW,
        interval_days=next_interval,
        ease=ease,
        due_at=now + next_interval * DAY_MS,
        learning_step_index=0,
        lapses=card.lapses,
    )


TRANSITIONS = {
    CardState.NEW: _schedule_new,
    CardState.LEARNING: _schedule_learning,
    CardState.REVIEW: _schedule_review,
}


def schedule(card: Card, rating: Rating, now: int) -> CardPatch:
    """
    Compute the next scheduling state of ``card`` after ``rating`` at ``now``.

    Pure and total over every (state, rating) pair. ``reps`` is incremented on
    every rating, Again included.
    """
    transition = TRANSITIONS[CardState(card.state)]
    changes = transition(card, Rating(rating), now)
    return CardPatch(reps=card.reps + 1, updated_at=now, **changes)
