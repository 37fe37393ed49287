import json
import os
from django.core.management.base import BaseCommand, CommandError
from scheduler.data.repos import create_card, create_deck, update_deck_preferences

DEFAULT_CARDS = [
    {"front": "hallo", "back": "hello"},
    {"front": "dank je", "back": "thank you"},
    {"front": "alsjeblieft", "back": "please"},
    {"front": "goedemorgen", "back": "good morning"},
    {"front": "tot ziens", "back": "goodbye"},
]


class Command(BaseCommand):
    help = "Create a deck and fill it with new cards"

    def add_arguments(self, parser):
        parser.add_argument("--name", default="Sample deck", help="Deck name")
        parser.add_argument(
            "--file", default=None, help="JSON file with a list of {front, back} objects"
        )
        parser.add_argument("--new-per-session", type=int, default=None)
        parser.add_argument("--daily-limit", type=int, default=None)

    def handle(self, *args, **options):
        file_name = options.get("file")
        if file_name:
            path = file_name if os.path.isabs(file_name) else os.path.join(os.getcwd(), file_name)
            try:
                with open(path) as json_file:
                    cards = json.load(json_file)
            except (OSError, ValueError) as e:
                raise CommandError(f"Error loading cards from {file_name}: {e}")
            if not isinstance(cards, list):
                raise CommandError("Card file must contain a JSON list.")
            if not all(isinstance(item, dict) for item in cards):
                raise CommandError("Every card in the file must be a {front, back} object.")
        else:
            cards = DEFAULT_CARDS

        deck = create_deck(options["name"])
        update_deck_preferences(
            deck.id,
            new_cards_per_session=options.get("new_per_session"),
            daily_review_limit=options.get("daily_limit"),
        )

        created = 0
        for item in cards:
            front, back = str(item.get("front", "")).strip(), str(item.get("back", "")).strip()
            if not front or not back:
                continue
            create_card(deck.id, front, back)
            created += 1

        self.stdout.write(
            self.style.SUCCESS(f"Deck {deck.id} '{deck.name}' created with {created} cards")
        )
