"""
Session queue building.

Selects which due cards enter a study session batch and re-inserts cards
rated Again a few positions later in the caller's queue. Every function here
is pure: inputs are never mutated and new lists are returned.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from .cards import Card
from .enums import CardState
from .logic import round_half_up
from ..config import (
    DEFAULT_AGAIN_REINSERT_AFTER_CARDS,
    DEFAULT_DAILY_REVIEW_LIMIT,
    DEFAULT_NEW_CARDS_PER_SESSION,
    MAX_AGAIN_REINSERT_AFTER_CARDS,
    MAX_DAILY_REVIEW_LIMIT,
    MAX_NEW_CARDS_PER_SESSION,
    MIN_AGAIN_REINSERT_AFTER_CARDS,
    MIN_DAILY_REVIEW_LIMIT,
    MIN_NEW_CARDS_PER_SESSION,
)


def _finite(value) -> Optional[Union[int, float]]:
    if isinstance(value, bool):
        return None
    # ints of any size are exact; float() would overflow on huge ones
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    try:
        n = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return n if math.isfinite(n) else None


def clamp_int(value, lo: int, hi: int, fallback: int) -> int:
    n = _finite(value)
    if n is None:
        return fallback
    if not isinstance(n, int):
        n = round_half_up(n)
    return min(hi, max(lo, n))


def clamp_new_cards_per_session(value) -> int:
    return clamp_int(
        value,
        MIN_NEW_CARDS_PER_SESSION,
        MAX_NEW_CARDS_PER_SESSION,
        DEFAULT_NEW_CARDS_PER_SESSION,
    )


def clamp_again_reinsert_after_cards(value) -> int:
    return clamp_int(
        value,
        MIN_AGAIN_REINSERT_AFTER_CARDS,
        MAX_AGAIN_REINSERT_AFTER_CARDS,
        DEFAULT_AGAIN_REINSERT_AFTER_CARDS,
    )


def clamp_daily_review_limit(value) -> int:
    return clamp_int(
        value,
        MIN_DAILY_REVIEW_LIMIT,
        MAX_DAILY_REVIEW_LIMIT,
        DEFAULT_DAILY_REVIEW_LIMIT,
    )


@dataclass(frozen=True)
class PickResult:
    picked: list
    introduced_new_count: int


def pick_due_cards_for_queue(
    due_cards: Iterable[Card],
    *,
    queued_ids=frozenset(),
    reviewed_ids=frozenset(),
    introduced_new_count: int = 0,
    new_cards_per_session=DEFAULT_NEW_CARDS_PER_SESSION,
    max_cards_to_pick=None,
) -> PickResult:
    """
    Pick the next batch of due cards for a session.

    Learning cards come first, then review cards, then at most the remaining
    new-card allowance. Order within each group follows ``due_cards``.
    ``max_cards_to_pick`` truncates the batch without rebalancing groups, so
    only new cards that survive truncation count as introduced.
    """
    remaining = [
        card
        for card in due_cards
        if card.id not in queued_ids and card.id not in reviewed_ids
    ]
    learning = [c for c in remaining if c.state == CardState.LEARNING]
    review = [c for c in remaining if c.state == CardState.REVIEW]
    fresh = [c for c in remaining if c.state == CardState.NEW]

    limit = clamp_new_cards_per_session(new_cards_per_session)
    allowance = max(0, limit - introduced_new_count)
    picked = learning + review + fresh[:allowance]

    cap = _finite(max_cards_to_pick)
    if cap is not None:
        picked = picked[: max(0, math.floor(cap))]

    introduced = sum(1 for c in picked if c.state == CardState.NEW)
    return PickResult(
        picked=picked,
        introduced_new_count=introduced_new_count + introduced,
    )


def upsert_reinforcement_card(
    queue: list, *, after_index: int, card: Card, after_cards
) -> list:
    """
    Put ``card`` back into ``queue`` a few cards after ``after_index``.

    If the card is already queued later on, that entry is replaced in place so
    repeated Again ratings never duplicate it.
    """
    nxt = list(queue)
    for idx in range(max(after_index + 1, 0), len(nxt)):
        if nxt[idx].id == card.id:
            nxt[idx] = card
            return nxt

    gap = clamp_again_reinsert_after_cards(after_cards)
    insert_at = min(after_index + gap + 1, len(nxt))
    nxt.insert(insert_at, card)
    return nxt
