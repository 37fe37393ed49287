import uuid

import django.db.models.deletion
from django.db import migrations, models


STATE_CHOICES = [("new", "new"), ("learning", "learning"), ("review", "review")]


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Deck",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=200)),
                ("created_at", models.BigIntegerField()),
                ("deleted_at", models.BigIntegerField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name="CardRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("front", models.TextField()),
                ("back", models.TextField()),
                ("state", models.CharField(choices=STATE_CHOICES, default="new", max_length=16)),
                ("due_at", models.BigIntegerField()),
                ("interval_days", models.PositiveIntegerField(default=0)),
                ("ease", models.FloatField(default=2.5)),
                ("reps", models.PositiveIntegerField(default=0)),
                ("lapses", models.PositiveIntegerField(default=0)),
                ("learning_step_index", models.PositiveIntegerField(default=0)),
                ("created_at", models.BigIntegerField()),
                ("updated_at", models.BigIntegerField()),
                ("deleted_at", models.BigIntegerField(blank=True, null=True)),
                ("deck", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cards", to="scheduler.deck")),
            ],
            options={
                "indexes": [models.Index(fields=["deck", "due_at"], name="card_deck_due_idx")],
            },
        ),
        migrations.CreateModel(
            name="DeckPreferences",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("new_cards_per_session", models.IntegerField(default=12)),
                ("again_reinsert_after_cards", models.IntegerField(default=4)),
                ("daily_review_limit", models.IntegerField(default=60)),
                ("deck", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="preferences", to="scheduler.deck")),
            ],
        ),
        migrations.CreateModel(
            name="DailyReviewProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("day", models.CharField(max_length=10)),
                ("reviewed", models.PositiveIntegerField(default=0)),
                ("deck", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="scheduler.deck")),
            ],
            options={
                "unique_together": {("deck", "day")},
            },
        ),
        migrations.CreateModel(
            name="ReviewLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rating", models.SmallIntegerField()),
                ("idempotency_key", models.CharField(max_length=64)),
                ("reviewed_at", models.BigIntegerField()),
                ("prev_state", models.CharField(choices=STATE_CHOICES, max_length=16)),
                ("state", models.CharField(choices=STATE_CHOICES, max_length=16)),
                ("due_at", models.BigIntegerField()),
                ("interval_days", models.PositiveIntegerField()),
                ("card", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="scheduler.cardrecord")),
            ],
            options={
                "unique_together": {("card", "idempotency_key")},
                "indexes": [models.Index(fields=["card", "reviewed_at"], name="review_card_time_idx")],
            },
        ),
    ]
