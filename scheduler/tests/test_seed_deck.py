import json
import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from scheduler.data.models import CardRecord, Deck
from scheduler.data.repos import get_deck_preferences


@pytest.mark.django_db
def test_seed_deck_creates_new_cards():
    call_command("seed_deck", name="Dutch", new_per_session=3)

    deck = Deck.objects.get(name="Dutch")
    cards = CardRecord.objects.filter(deck=deck)
    assert cards.count() == 5
    assert set(cards.values_list("state", flat=True)) == {"new"}
    assert get_deck_preferences(deck.id).new_cards_per_session == 3
    assert get_deck_preferences(deck.id).daily_review_limit == 60


@pytest.mark.django_db
def test_seed_deck_from_file_skips_blank_rows(tmp_path):
    path = tmp_path / "cards.json"
    path.write_text(json.dumps([
        {"front": "kat", "back": "cat"},
        {"front": "", "back": "nothing"},
        {"front": "hond", "back": "dog"},
    ]))

    call_command("seed_deck", name="Animals", file=str(path))

    assert CardRecord.objects.filter(deck__name="Animals").count() == 2


@pytest.mark.django_db
def test_seed_deck_rejects_bad_file(tmp_path):
    path = tmp_path / "cards.json"
    path.write_text("{}")

    with pytest.raises(CommandError):
        call_command("seed_deck", file=str(path))


@pytest.mark.django_db
def test_seed_deck_rejects_non_object_rows(tmp_path):
    path = tmp_path / "cards.json"
    path.write_text(json.dumps([{"front": "kat", "back": "cat"}, "a"]))

    with pytest.raises(CommandError):
        call_command("seed_deck", name="Broken", file=str(path))

    assert not Deck.objects.filter(name="Broken").exists()
