from enum import Enum, IntEnum


class CardState(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"


class Rating(IntEnum):
    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @classmethod
    def from_label(cls, label):
        return RATING_BY_LABEL[label]


RATING_LABELS = {
    Rating.AGAIN: "again",
    Rating.HARD: "hard",
    Rating.GOOD: "good",
    Rating.EASY: "easy",
}

RATING_BY_LABEL = {label: rating for rating, label in RATING_LABELS.items()}
