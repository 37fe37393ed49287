import pytest
import requests
import uuid
import logging

BASE_URL = "http://127.0.0.1:8000"
logger = logging.getLogger(__name__)


def create_deck_with_card(front="hallo", back="hello"):
    deck = requests.post(f"{BASE_URL}/decks", json={"name": f"live-{uuid.uuid4().hex[:8]}"}).json()
    card = requests.post(f"{BASE_URL}/decks/{deck['id']}/cards", json={"front": front, "back": back}).json()
    return deck["id"], card


def post_review(card_id, rating, idem):
    """Helper for POST /reviews"""
    payload = {
        "card_id": str(card_id),
        "rating": rating,
        "idempotency_key": idem,
    }
    r = requests.post(f"{BASE_URL}/reviews", json=payload)
    data = r.json()
    logger.info(
        "POST /reviews rating=%s → status=%s state=%s idempotent=%s",
        rating,
        r.status_code,
        data.get("card", {}).get("state"),
        data.get("idempotent"),
    )
    return r


@pytest.mark.integration
def test_learning_to_review_live():
    """again → good → good walks a new card through learning into review"""
    _, card = create_deck_with_card()
    states = []
    for i, rating in enumerate(["again", "good", "good"]):
        resp = post_review(card["id"], rating, f"idem-live-walk-{uuid.uuid4().hex}-{i}")
        states.append(resp.json()["card"]["state"])

    assert states == ["learning", "learning", "review"]
    logger.info("✓ Passed: card graduated %s", states)


@pytest.mark.integration
def test_idempotency_live():
    """Identical requests should reuse result with 200 + idempotent=True"""
    _, card = create_deck_with_card()
    key = f"idem-live-{uuid.uuid4().hex}"

    first = post_review(card["id"], "easy", key)
    assert first.status_code == 201
    assert first.json()["idempotent"] is False

    second = post_review(card["id"], "easy", key)
    assert second.status_code == 200
    assert second.json()["idempotent"] is True
    assert first.json()["card"]["due_at"] == second.json()["card"]["due_at"]


@pytest.mark.integration
def test_queue_live():
    deck_id, card = create_deck_with_card()

    r = requests.post(f"{BASE_URL}/decks/{deck_id}/queue", json={})
    data = r.json()

    assert r.status_code == 200
    assert [c["id"] for c in data["picked"]] == [card["id"]]
    assert data["introduced_new_count"] == 1
