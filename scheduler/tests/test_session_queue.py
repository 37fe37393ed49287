import math
import pytest

from scheduler.domain.cards import Card
from scheduler.domain.enums import CardState
from scheduler.domain.session_queue import (
    clamp_again_reinsert_after_cards,
    clamp_daily_review_limit,
    clamp_new_cards_per_session,
    pick_due_cards_for_queue,
    upsert_reinforcement_card,
)

NOW = 1_700_000_000_000


def make_card(card_id, state):
    return Card(id=card_id, deck_id="d1", state=CardState(state), due_at=NOW)


def ids(cards):
    return [c.id for c in cards]


# pick_due_cards_for_queue

def test_pick_prioritizes_learning_and_review_and_caps_new():
    due = [
        make_card("n1", "new"),
        make_card("l1", "learning"),
        make_card("r1", "review"),
        make_card("n2", "new"),
        make_card("n3", "new"),
    ]
    out = pick_due_cards_for_queue(due, introduced_new_count=0, new_cards_per_session=2)

    assert ids(out.picked) == ["l1", "r1", "n1", "n2"]
    assert out.introduced_new_count == 2


def test_pick_respects_max_cards_to_pick():
    due = [make_card("l1", "learning"), make_card("r1", "review"), make_card("n1", "new")]
    out = pick_due_cards_for_queue(due, new_cards_per_session=10, max_cards_to_pick=2)

    assert ids(out.picked) == ["l1", "r1"]
    assert out.introduced_new_count == 0


def test_pick_skips_queued_and_reviewed_ids():
    due = [make_card("r1", "review"), make_card("r2", "review"), make_card("n1", "new")]
    out = pick_due_cards_for_queue(
        due,
        queued_ids={"r1"},
        reviewed_ids={"n1"},
        new_cards_per_session=5,
    )

    assert ids(out.picked) == ["r2"]
    assert out.introduced_new_count == 0


def test_pick_keeps_input_order_within_groups():
    due = [make_card("r2", "review"), make_card("l2", "learning"), make_card("r1", "review"), make_card("l1", "learning")]
    out = pick_due_cards_for_queue(due)

    assert ids(out.picked) == ["l2", "l1", "r2", "r1"]


def test_pick_counts_already_introduced_new_cards():
    due = [make_card(f"n{i}", "new") for i in range(5)]
    out = pick_due_cards_for_queue(due, introduced_new_count=11, new_cards_per_session=12)

    assert ids(out.picked) == ["n0"]
    assert out.introduced_new_count == 12


def test_pick_allowance_never_negative():
    due = [make_card("n1", "new"), make_card("r1", "review")]
    out = pick_due_cards_for_queue(due, introduced_new_count=50, new_cards_per_session=3)

    assert ids(out.picked) == ["r1"]
    assert out.introduced_new_count == 50


def test_pick_reclamps_invalid_new_cards_per_session():
    due = [make_card(f"n{i}", "new") for i in range(20)]

    assert len(pick_due_cards_for_queue(due, new_cards_per_session=math.nan).picked) == 12
    assert pick_due_cards_for_queue(due, new_cards_per_session=-3).picked == []


@pytest.mark.parametrize("cap, expected", [(0, []), (-4, []), (2.7, ["l1", "r1"]), (math.inf, ["l1", "r1", "n1"])])
def test_pick_max_cards_edge_values(cap, expected):
    due = [make_card("l1", "learning"), make_card("r1", "review"), make_card("n1", "new")]
    out = pick_due_cards_for_queue(due, max_cards_to_pick=cap)

    assert ids(out.picked) == expected


def test_pick_does_not_mutate_input():
    due = [make_card("n1", "new"), make_card("l1", "learning")]
    pick_due_cards_for_queue(due)

    assert ids(due) == ["n1", "l1"]


# upsert_reinforcement_card

def test_upsert_inserts_failed_card_a_few_cards_later():
    queue = [make_card("a", "new"), make_card("b", "new"), make_card("c", "new")]
    out = upsert_reinforcement_card(queue, after_index=0, card=make_card("a", "learning"), after_cards=2)

    assert ids(out) == ["a", "b", "c", "a"]
    assert out[3].state == CardState.LEARNING


def test_upsert_splices_into_the_middle():
    queue = [make_card(x, "review") for x in "abcdef"]
    out = upsert_reinforcement_card(queue, after_index=0, card=make_card("a", "learning"), after_cards=2)

    assert ids(out) == ["a", "b", "c", "a", "d", "e", "f"]
    assert ids(queue) == list("abcdef")


def test_upsert_twice_replaces_existing_entry():
    queue = [make_card(x, "review") for x in "abcdef"]
    first = upsert_reinforcement_card(queue, after_index=0, card=make_card("a", "learning"), after_cards=2)
    relearned = Card(id="a", deck_id="d1", state=CardState.LEARNING, reps=2)
    second = upsert_reinforcement_card(first, after_index=0, card=relearned, after_cards=2)

    assert ids(second) == ids(first)
    assert ids(second).count("a") == 2
    assert second[3] is relearned


def test_upsert_ignores_entries_at_or_before_after_index():
    queue = [make_card("a", "review"), make_card("b", "review"), make_card("c", "review")]
    out = upsert_reinforcement_card(queue, after_index=1, card=make_card("a", "learning"), after_cards=1)

    assert ids(out) == ["a", "b", "c", "a"]


@pytest.mark.parametrize("after_cards, insert_at", [(0, 2), (999, 10), (math.nan, 5), (2.6, 4)])
def test_upsert_clamps_gap(after_cards, insert_at):
    queue = [make_card(f"q{i}", "review") for i in range(10)]
    card = make_card("x", "learning")
    out = upsert_reinforcement_card(queue, after_index=0, card=card, after_cards=after_cards)

    assert out.index(card) == insert_at
    assert len(out) == 11


# clamp helpers

def test_clamp_helpers_bound_out_of_range_values():
    assert clamp_new_cards_per_session(-5) == 0
    assert clamp_again_reinsert_after_cards(999) == 20
    assert clamp_daily_review_limit(-1) == 0
    assert clamp_daily_review_limit(10_000) == 500


@pytest.mark.parametrize("bad", [None, "abc", math.nan, math.inf, -math.inf, True])
def test_clamp_helpers_fall_back_to_defaults(bad):
    assert clamp_new_cards_per_session(bad) == 12
    assert clamp_again_reinsert_after_cards(bad) == 4
    assert clamp_daily_review_limit(bad) == 60


def test_clamp_helpers_round_half_up():
    assert clamp_new_cards_per_session(2.5) == 3
    assert clamp_new_cards_per_session(2.4) == 2
    assert clamp_daily_review_limit("40") == 40


def test_clamp_helpers_handle_huge_integers():
    huge = 10 ** 400

    assert clamp_new_cards_per_session(huge) == 200
    assert clamp_again_reinsert_after_cards(huge) == 20
    assert clamp_daily_review_limit(huge) == 500
    assert clamp_daily_review_limit(-huge) == 0
    assert clamp_daily_review_limit("9" * 400) == 500


def test_pick_huge_max_cards_does_not_truncate():
    due = [make_card("l1", "learning"), make_card("r1", "review"), make_card("n1", "new")]
    out = pick_due_cards_for_queue(due, new_cards_per_session=10 ** 400, max_cards_to_pick=10 ** 400)

    assert ids(out.picked) == ["l1", "r1", "n1"]
    assert out.introduced_new_count == 1
